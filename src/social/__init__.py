"""
Social Media Integration Module for mstdn-rss2bsky-post.

This module provides the base class for social media clients and the
Bluesky client that republishes feed entries.
"""

from .base_client import SocialMediaClient
from .bluesky_client import BlueskyClient

__all__ = ['SocialMediaClient', 'BlueskyClient']
