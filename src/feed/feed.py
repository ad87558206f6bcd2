"""
Feed Fetching.

Downloads a feed over HTTP with ``requests`` and parses it with
``feedparser``. Entries are returned in feed order, which for Mastodon is
newest first.
"""
import logging
from typing import Any, List, Optional

import feedparser
import requests

from rss2bsky import __version__
from rss2bsky.errors import FeedError


logger = logging.getLogger(__name__)

# Timeout for fetching the feed document
FEED_FETCH_TIMEOUT = 30  # seconds

USER_AGENT = f"mstdn-rss2bsky-post/{__version__}"


def fetch_entries(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = FEED_FETCH_TIMEOUT
) -> List[Any]:
    """Fetch a feed and return its entries.

    Args:
        url: URL of the RSS feed
        session: Optional requests session to reuse connections
        timeout: Request timeout in seconds

    Returns:
        List of feedparser entries, in the order the feed lists them

    Raises:
        FeedError: If the request fails or the document is not a feed
    """
    http = session or requests
    try:
        response = http.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise FeedError(f"Failed to fetch feed {url}: {e}") from e

    parsed = feedparser.parse(response.content)
    if parsed.bozo and not parsed.entries:
        raise FeedError(f"Failed to parse feed {url}: {parsed.get('bozo_exception')}")
    if parsed.bozo:
        logger.warning(f"Feed {url} is not well-formed, continuing: {parsed.get('bozo_exception')}")

    logger.info(f"Fetched {len(parsed.entries)} entries from {url}")
    return list(parsed.entries)
