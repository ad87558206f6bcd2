"""
Feed Module for mstdn-rss2bsky-post.

This module fetches RSS feeds (as published by Mastodon at
``https://<instance>/@<user>.rss``) and reads the Media RSS extension
attached to their entries.

Usage:
    >>> from feed import fetch_entries, get_media, Rating
    >>> entries = fetch_entries("https://mastodon.social/@user.rss")
    >>> media = get_media(entries[0])
    >>> if media and media.rating is Rating.NON_ADULT:
    ...     print(media.url)
"""
from .feed import fetch_entries
from .media import Media, Rating, get_media

__all__ = ["fetch_entries", "Media", "Rating", "get_media"]
