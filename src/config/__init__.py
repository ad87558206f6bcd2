"""
Configuration Module for mstdn-rss2bsky-post.

This module loads config.yml, reads Docker secrets and merges both with
command line options and environment variables into the settings of a run.

Precedence, highest first:
    1. Command line options
    2. Environment variables (XRPC_HOST, ATPROTO_IDENTIFIER, ATPROTO_PASSWORD)
    3. config.yml (RSS2BSKY_CONFIG, --config, or ./config.yml)
    4. Built-in defaults

Usage:
    >>> from config import load_config, resolve_settings
    >>> config = load_config()
    >>> settings = resolve_settings(args, config)
    >>> settings.feed_url
    'https://mastodon.social/@user.rss'
"""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Mapping, Optional

import yaml
from jsonschema import ValidationError, validate

from rss2bsky.errors import ConfigError
from schema import CONFIG_SCHEMA


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yml"
CONFIG_ENV_VAR = "RSS2BSKY_CONFIG"

DEFAULT_XRPC_HOST = "https://bsky.social"
DEFAULT_MIN_SAVE_POSTS = 50
DEFAULT_POST_TEXT_LIMIT = 300
DEFAULT_ORIGINAL_LINK_PREFIX = "[マストドン投稿から]:"


@dataclass
class Settings:
    """Resolved options of a single run."""
    feed_url: str
    filelock_path: str
    db_path: str
    xrpc_host: str = DEFAULT_XRPC_HOST
    atproto_identifier: Optional[str] = None
    atproto_password: Optional[str] = None
    original_link_prefix: str = DEFAULT_ORIGINAL_LINK_PREFIX
    post_text_limit: int = DEFAULT_POST_TEXT_LIMIT
    min_save_posts: int = DEFAULT_MIN_SAVE_POSTS
    dry_run: bool = False
    log_file: Optional[str] = None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a config.yml file.

    Args:
        config_path: Path to the YAML file. If None, uses $RSS2BSKY_CONFIG,
                    then ./config.yml.

    Returns:
        Dictionary containing configuration settings, or the default
        configuration if no file is found or it cannot be parsed

    Raises:
        ConfigError: If the file parses but does not match the config schema
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)

    if config_path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        if candidate.exists():
            config_path = str(candidate)

    if config_path is None:
        logger.debug("config.yml not found, using default configuration")
        return get_default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"Configuration file not found: {config_path}")
        return get_default_config()
    except yaml.YAMLError as e:
        logger.error(f"Error parsing configuration file: {e}")
        return get_default_config()

    if config is None:
        logger.warning(f"Configuration file {config_path} is empty, using default configuration")
        return get_default_config()

    try:
        validate(instance=config, schema=CONFIG_SCHEMA)
    except ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise ConfigError(f"Invalid configuration in {config_path} at {location}: {e.message}") from e

    logger.info(f"Loaded configuration from {config_path}")
    return config


def get_default_config() -> Dict[str, Any]:
    """Return default configuration when config.yml is not available.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "xrpc_host": DEFAULT_XRPC_HOST,
        "min_save_posts": DEFAULT_MIN_SAVE_POSTS,
        "dry_run": False,
        "feed": {
            "original_link_prefix": DEFAULT_ORIGINAL_LINK_PREFIX,
            "post_text_limit": DEFAULT_POST_TEXT_LIMIT
        },
        "pushover": {
            "enabled": False,
            "app_token_file": "/run/secrets/pushover_app_token",
            "user_key_file": "/run/secrets/pushover_user_key"
        }
    }


def read_secret_file(filepath: str) -> Optional[str]:
    """Read a Docker secret from a file.

    Docker secrets are mounted as files in /run/secrets/ directory.

    Args:
        filepath: Path to the secret file

    Returns:
        Content of the secret file (stripped of whitespace), or None if file doesn't exist

    Example:
        >>> password = read_secret_file("/run/secrets/atproto_password")
    """
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return f.read().strip()
    except FileNotFoundError:
        logger.debug(f"Secret file not found: {filepath}")
        return None
    except OSError as e:
        logger.error(f"Error reading secret file {filepath}: {e}")
        return None


def _first(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def resolve_settings(
    args: Any,
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Merge command line, environment and config.yml into run settings.

    Args:
        args: argparse namespace; options not given on the command line are None
        config: Configuration dictionary from load_config()
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Settings for the run

    Raises:
        ConfigError: If a required option is missing from every source, or
            --min-save-posts is negative or --post-text-limit below 1
    """
    if environ is None:
        environ = os.environ

    feed_config = config.get("feed", {}) or {}
    bluesky_config = config.get("bluesky", {}) or {}

    password = _first(getattr(args, "atproto_password", None), environ.get("ATPROTO_PASSWORD"))
    if password is None and bluesky_config.get("password_file"):
        password = read_secret_file(bluesky_config["password_file"])

    settings = Settings(
        feed_url=_first(getattr(args, "feed_url", None), feed_config.get("url")),
        filelock_path=_first(getattr(args, "filelock_path", None), config.get("filelock_path")),
        db_path=_first(getattr(args, "db_path", None), config.get("db_path")),
        xrpc_host=_first(
            getattr(args, "xrpc_host", None),
            environ.get("XRPC_HOST"),
            config.get("xrpc_host"),
            DEFAULT_XRPC_HOST
        ),
        atproto_identifier=_first(
            getattr(args, "atproto_identifier", None),
            environ.get("ATPROTO_IDENTIFIER"),
            bluesky_config.get("identifier")
        ),
        atproto_password=password,
        original_link_prefix=_first(
            getattr(args, "original_link_prefix", None),
            feed_config.get("original_link_prefix"),
            DEFAULT_ORIGINAL_LINK_PREFIX
        ),
        post_text_limit=_first(
            getattr(args, "post_text_limit", None),
            feed_config.get("post_text_limit"),
            DEFAULT_POST_TEXT_LIMIT
        ),
        min_save_posts=_first(
            getattr(args, "min_save_posts", None),
            config.get("min_save_posts"),
            DEFAULT_MIN_SAVE_POSTS
        ),
        dry_run=bool(getattr(args, "dry_run", False) or config.get("dry_run", False)),
        log_file=_first(getattr(args, "log_file", None), config.get("log_file"))
    )

    missing = [
        option for option, value in (
            ("--feed-url", settings.feed_url),
            ("--filelock-path", settings.filelock_path),
            ("--db-path", settings.db_path),
        )
        if not value
    ]
    if not settings.dry_run:
        if not settings.atproto_identifier:
            missing.append("--atproto-identifier")
        if not settings.atproto_password:
            missing.append("--atproto-password")
    if missing:
        raise ConfigError(f"Missing required options: {', '.join(missing)}")

    if settings.min_save_posts < 0:
        raise ConfigError(f"--min-save-posts must not be negative: {settings.min_save_posts}")
    if settings.post_text_limit < 1:
        raise ConfigError(f"--post-text-limit must be at least 1: {settings.post_text_limit}")

    return settings
