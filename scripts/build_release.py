#!/usr/bin/env python3
"""
Build the release binary and name it after its target triple.

Runs PyInstaller on scripts/pyinstaller_entrypoint.py and copies the
result to ``<binary-name>.<target-triple>`` in the repository root, e.g.
``mstdn-rss2bsky-post.x86_64-unknown-linux-gnu``. The release workflow
uploads every file matching ``mstdn-rss2bsky-post.*`` when a tag is pushed.

Usage:
    python scripts/build_release.py --target x86_64-unknown-linux-gnu
"""
import argparse
import shutil
import subprocess
import sys
from pathlib import Path

BINARY_NAME = "mstdn-rss2bsky-post"
DEFAULT_TARGET = "x86_64-unknown-linux-gnu"
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def artifact_name(target: str, binary_name: str = BINARY_NAME) -> str:
    """Return the release file name for a target triple."""
    return f"{binary_name}.{target}"


def build(target: str, dist_dir: Path) -> Path:
    """Build the binary with PyInstaller and copy it to its artifact name.

    Returns:
        Path of the target-qualified binary
    """
    subprocess.run(
        [
            sys.executable, "-m", "PyInstaller",
            "--onefile",
            "--name", BINARY_NAME,
            "--paths", str(PROJECT_ROOT / "src"),
            "--add-data", f"{PROJECT_ROOT / 'src' / 'schema' / 'config_schema.json'}:schema",
            "--distpath", str(dist_dir),
            str(PROJECT_ROOT / "scripts" / "pyinstaller_entrypoint.py"),
        ],
        check=True,
    )
    artifact = PROJECT_ROOT / artifact_name(target)
    shutil.copy2(dist_dir / BINARY_NAME, artifact)
    return artifact


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--target", default=DEFAULT_TARGET, help="Target triple used in the artifact name")
    parser.add_argument("--dist-dir", default="dist", help="PyInstaller output directory")
    args = parser.parse_args()

    artifact = build(args.target, Path(args.dist_dir))
    print(f"Built {artifact}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
