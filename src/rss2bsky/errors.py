"""Exceptions raised while running mstdn-rss2bsky-post.

Every failure that should stop a run derives from :class:`Rss2BskyError`
so the entry point can log it, notify, and exit with status 1.
"""


class Rss2BskyError(Exception):
    """Base class for all errors that abort a run."""


class ConfigError(Rss2BskyError):
    """Configuration is invalid or a required option is missing."""


class FeedError(Rss2BskyError):
    """The feed could not be fetched or parsed."""


class FeedEntryError(FeedError):
    """A feed entry lacks a field needed to build a post."""


class AuthenticationError(Rss2BskyError):
    """Login to the AT Protocol server failed."""


class PostError(Rss2BskyError):
    """Creating a post on Bluesky failed."""


class StorageError(Rss2BskyError):
    """The posted-links DB could not be read or written."""


class LockError(StorageError):
    """Another run holds the lock file."""
