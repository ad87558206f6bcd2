"""
PyInstaller entrypoint for building the standalone `mstdn-rss2bsky-post` binary.

Kept outside the packages so build-only helpers are not installed.
"""
import sys

from rss2bsky.rss2bsky import main


if __name__ == "__main__":
    sys.exit(main())
