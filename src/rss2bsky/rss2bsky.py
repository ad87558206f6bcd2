"""
mstdn-rss2bsky-post Core Module.

This module provides the console entry point and the run orchestration
that republishes a Mastodon RSS feed to Bluesky.

A run (the ``run`` subcommand):
1. Fetches the feed
2. Logs in to the AT Protocol server
3. Takes the lock file and loads the posted-links DB
4. Walks the entries oldest first; each entry not yet in the DB is
   composed into a post (description, truncation mark, prefix, original
   link), posted with its first non-sensitive image, and recorded
5. Rewrites the DB keeping the newest links

Any failure aborts the run with exit status 1; links posted before the
failure stay recorded. The tool is meant to be started periodically by
cron or a systemd timer.

Example:
    $ mstdn-rss2bsky-post --filelock-path /var/lib/rss2bsky/lock \\
          --db-path /var/lib/rss2bsky/posted.txt \\
          run --feed-url https://mastodon.social/@user.rss
    ... - rss2bsky.rss2bsky - INFO - orig_link=https://mastodon.social/@user/1: Posted to Bluesky: cid=..., uri=...
"""
import argparse
import logging
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Any, Callable, List, Optional, Set, Sequence, TYPE_CHECKING

from config import load_config, resolve_settings, Settings
from feed import fetch_entries, get_media, Rating
from notifications.pushover import PushoverNotifier
from rss2bsky import __version__
from rss2bsky.compose import compose_post
from rss2bsky.errors import (
    AuthenticationError,
    ConfigError,
    FeedEntryError,
    PostError,
    Rss2BskyError,
)
from storage import PostedLinksDB

if TYPE_CHECKING:
    from social.base_client import SocialMediaClient

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that are only worth hearing from at -dd
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "PIL")


@dataclass
class BskyPost:
    """Reference to a created Bluesky post."""
    cid: str
    uri: str


@dataclass
class ItemPost:
    """Outcome of processing one feed entry.

    ``bsky_post`` is None when the original link was already posted.
    """
    orig_link: str
    bsky_post: Optional[BskyPost] = None


def configure_logging(debug: int = 0, log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        debug: Number of -d flags; 1 enables DEBUG for this tool, 2 also for
               HTTP and imaging libraries
        log_file: Optional path of a rotating log file (10MB, 3 backups)
    """
    log_level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    noisy_level = logging.DEBUG if debug > 1 else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Options that can also come from the environment or config.yml default
    to None so config.resolve_settings() can tell them apart.
    """
    parser = argparse.ArgumentParser(
        prog="mstdn-rss2bsky-post",
        description="Republish the entries of a Mastodon RSS feed to Bluesky."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-d", "--debug",
        action="count",
        default=0,
        help="Turn debugging information on (repeat for library debug logs)"
    )
    parser.add_argument("--config", help="Path to config.yml (default: $RSS2BSKY_CONFIG or ./config.yml)")
    parser.add_argument("--xrpc-host", help="AT Protocol server [env: XRPC_HOST] (default: https://bsky.social)")
    parser.add_argument("--filelock-path", help="Lock file preventing concurrent runs")
    parser.add_argument("--db-path", help="File listing the links already posted")
    parser.add_argument(
        "--min-save-posts",
        type=int,
        help="Number of previously posted links kept in the DB (default: 50)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Fetch and compose posts without logging in, locking or posting"
    )
    parser.add_argument("--log-file", help="Also write logs to this rotating file")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    run_parser = subparsers.add_parser("run", help="Post new feed entries to Bluesky")
    run_parser.add_argument("--feed-url", help="URL of the RSS feed")
    run_parser.add_argument(
        "--original-link-prefix",
        help="Text placed before the link to the original post (default: [マストドン投稿から]:)"
    )
    run_parser.add_argument("--post-text-limit", type=int, help="Maximum post length (default: 300)")
    run_parser.add_argument("--atproto-identifier", help="Bluesky handle or DID [env: ATPROTO_IDENTIFIER]")
    run_parser.add_argument("--atproto-password", help="Bluesky app password [env: ATPROTO_PASSWORD]")

    return parser


def select_image_url(entry: Any) -> Optional[str]:
    """Return the URL of the entry's first image if it is not sensitive."""
    media = get_media(entry)
    if media is None:
        return None
    if media.rating is not Rating.NON_ADULT:
        logger.warning(f"Ignore a image might be sensitive: {media.url}")
        return None
    return media.url


def _entry_fields(entry: Any) -> tuple:
    """Return (description, link) of a feed entry.

    Raises:
        FeedEntryError: If either field is missing
    """
    description = entry.get("summary")
    if description is None:
        raise FeedEntryError("Failed to get any descriptions of the given RSS item.")
    item_link = entry.get("link")
    if not item_link:
        raise FeedEntryError("Failed to get any links of the given RSS item.")
    return description, item_link


def post_entry(
    client: "SocialMediaClient",
    entry: Any,
    done_links: Set[str],
    original_link_prefix: str,
    post_text_limit: int
) -> ItemPost:
    """Post a single feed entry unless its link was already posted.

    Args:
        client: Authenticated Bluesky client
        entry: feedparser entry
        done_links: Links already posted
        original_link_prefix: Text placed before the original link
        post_text_limit: Maximum post length

    Returns:
        ItemPost; bsky_post is None if the entry was skipped

    Raises:
        FeedEntryError: If the entry has no description or link
        PostError: If Bluesky rejected the post
    """
    description, item_link = _entry_fields(entry)

    if item_link in done_links:
        return ItemPost(orig_link=item_link)

    text = compose_post(description, item_link, original_link_prefix, post_text_limit)

    image_url = select_image_url(entry)
    media_urls = [image_url] if image_url else None

    # The image URL doubles as alt text
    result = client.post(text, media_urls=media_urls, media_descriptions=media_urls)
    if result is None:
        raise PostError(f"orig_link={item_link}: Failed to post to Bluesky")

    return ItemPost(
        orig_link=item_link,
        bsky_post=BskyPost(cid=result["cid"], uri=result["uri"])
    )


def post_entries(
    client: "SocialMediaClient",
    entries: Sequence[Any],
    db: PostedLinksDB,
    original_link_prefix: str,
    post_text_limit: int
) -> List[ItemPost]:
    """Post every new entry, oldest first, under the DB lock.

    Each posted link is appended to the DB before the next entry is
    attempted. The DB is compacted at the end, including when an entry
    fails.

    Returns:
        ItemPost for every processed entry

    Raises:
        LockError: If another run holds the lock
        Rss2BskyError: If an entry fails; later entries are not attempted
    """
    db.ensure_exists()

    results: List[ItemPost] = []
    with db.lock():
        done_links, links_for_save = db.load()
        try:
            for entry in reversed(entries):
                item_post = post_entry(client, entry, done_links, original_link_prefix, post_text_limit)
                results.append(item_post)

                if item_post.bsky_post is None:
                    logger.info(f"orig_link={item_post.orig_link}: Already posted to Bluesky.")
                    continue

                logger.info(
                    f"orig_link={item_post.orig_link}: Posted to Bluesky: "
                    f"cid={item_post.bsky_post.cid}, uri={item_post.bsky_post.uri}"
                )
                db.record(item_post.orig_link)
                done_links.add(item_post.orig_link)
                links_for_save.append(item_post.orig_link)
        finally:
            db.compact(links_for_save)

    return results


def preview_entries(
    entries: Sequence[Any],
    db: PostedLinksDB,
    original_link_prefix: str,
    post_text_limit: int
) -> int:
    """Log the posts a run would create, without side effects.

    Returns:
        Number of entries that would be posted
    """
    done_links: Set[str] = set()
    try:
        done_links, _ = db.load()
    except Rss2BskyError as e:
        logger.info(f"Dry run: no posted links loaded ({e})")

    count = 0
    for entry in reversed(entries):
        description, item_link = _entry_fields(entry)
        if item_link in done_links:
            logger.info(f"orig_link={item_link}: Already posted to Bluesky.")
            continue

        text = compose_post(description, item_link, original_link_prefix, post_text_limit)
        image_url = select_image_url(entry)
        logger.info(f"Dry run: orig_link={item_link}: would post {text.build_text()!r}")
        if image_url:
            logger.info(f"Dry run: orig_link={item_link}: would attach {image_url}")
        count += 1

    return count


def command_run(
    settings: Settings,
    notifier: Optional[PushoverNotifier] = None,
    client_factory: Optional[Callable[[Settings, Optional[PushoverNotifier]], "SocialMediaClient"]] = None
) -> None:
    """Execute the ``run`` subcommand.

    Args:
        settings: Resolved run settings
        notifier: Optional notifier told about failed posts
        client_factory: Builds the Bluesky client (defaults to
                        BlueskyClient.from_settings)

    Raises:
        Rss2BskyError: On any failure that aborts the run
    """
    entries = fetch_entries(settings.feed_url)
    db = PostedLinksDB(settings.db_path, settings.filelock_path, settings.min_save_posts)

    if settings.dry_run:
        logger.info(f"Dry run: authentication as {settings.atproto_identifier} skipped")
        count = preview_entries(entries, db, settings.original_link_prefix, settings.post_text_limit)
        logger.info(f"Dry run: {count} of {len(entries)} entries would be posted")
        return

    if client_factory is None:
        from social.bluesky_client import BlueskyClient
        client_factory = BlueskyClient.from_settings

    client = client_factory(settings, notifier)
    if not client.enabled or client.current_did is None:
        raise AuthenticationError(
            f"Failed to authenticate as {settings.atproto_identifier} on {settings.xrpc_host}"
        )

    results = post_entries(client, entries, db, settings.original_link_prefix, settings.post_text_limit)
    posted = sum(1 for item_post in results if item_post.bsky_post is not None)
    logger.info(f"Run complete: {posted} posted, {len(results) - posted} already posted")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the mstdn-rss2bsky-post console command.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit status: 0 on success, 1 if the run failed, 2 on configuration errors
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        settings = resolve_settings(args, config)
    except ConfigError as e:
        configure_logging(args.debug)
        logger.error(str(e))
        return 2

    configure_logging(args.debug, settings.log_file)
    if args.debug:
        logger.debug("Debug mode enabled")

    notifier = PushoverNotifier.from_config(config)

    try:
        if args.command == "run":
            command_run(settings, notifier=notifier)
    except Rss2BskyError as e:
        logger.error(f"Run failed: {e}")
        notifier.notify_run_failure(str(e), settings.feed_url)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
