"""mstdn-rss2bsky-post Package.

This package provides the command-line tool that republishes the entries
of a Mastodon RSS feed to Bluesky.

The console script ``mstdn-rss2bsky-post`` points at
:func:`rss2bsky.rss2bsky.main`. Submodules:

    rss2bsky.rss2bsky: argument parsing, logging setup and run orchestration
    rss2bsky.compose: turns an entry description into a Bluesky rich text post
    rss2bsky.errors: exception hierarchy shared by every package
"""

__version__ = "0.3.0"
