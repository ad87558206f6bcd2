"""
Posted Links DB.

Remembers which original toot URLs were already republished. The DB is a
plain text file with one link per line, oldest first, so it can be
inspected and edited by hand.

A run works like this:

    1. ensure_exists() creates the file without truncating it
    2. lock() takes the run lock (non-blocking, a second run fails fast)
    3. load() reads every known link and keeps the newest min_save_posts
    4. record() appends each newly posted link and flushes it immediately,
       so a crash never causes a double post
    5. compact() rewrites the file with the kept and the new links

The lock file contains the RFC 3339 timestamp of the run holding it.
"""
import fcntl
import logging
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Set, Tuple

from config import DEFAULT_MIN_SAVE_POSTS
from rss2bsky.errors import LockError, StorageError


logger = logging.getLogger(__name__)


class PostedLinksDB:
    """Line-oriented store of links already posted to Bluesky.

    Attributes:
        db_path: Path of the DB file
        filelock_path: Path of the lock file guarding the DB
        min_save_posts: Number of previously known links kept on compaction

    Example:
        >>> db = PostedLinksDB("posted.txt", "posted.lock")
        >>> db.ensure_exists()
        >>> with db.lock():
        ...     done_links, links_for_save = db.load()
        ...     db.record("https://mastodon.social/@user/1")
        ...     db.compact(links_for_save + ["https://mastodon.social/@user/1"])
    """

    def __init__(self, db_path: str, filelock_path: str, min_save_posts: int = DEFAULT_MIN_SAVE_POSTS):
        self.db_path = db_path
        self.filelock_path = filelock_path
        self.min_save_posts = min_save_posts

    def ensure_exists(self) -> None:
        """Create the DB file if it does not exist yet."""
        try:
            with open(self.db_path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            raise StorageError(f"Failed to open DB: {e}") from e

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold the exclusive run lock for the duration of the block.

        Raises:
            LockError: If the lock file cannot be opened or another process
                holds the lock
        """
        try:
            fh = open(self.filelock_path, "w", encoding="utf-8")
        except OSError as e:
            raise LockError(f"Failed to get lock: {e}") from e

        try:
            try:
                fcntl.flock(fh, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except OSError as e:
                raise LockError(f"Failed to get lock: {e}") from e

            try:
                fh.write(datetime.now(timezone.utc).isoformat() + "\n")
                fh.flush()
            except OSError as e:
                raise LockError(f"Failed to write lock: {e}") from e

            logger.debug(f"Acquired lock {self.filelock_path}")
            try:
                yield
            finally:
                fcntl.flock(fh, fcntl.LOCK_UN)
                logger.debug(f"Released lock {self.filelock_path}")
        finally:
            fh.close()

    def load(self) -> Tuple[Set[str], List[str]]:
        """Read the DB.

        Returns:
            Tuple of (every known link, the newest min_save_posts links in
            file order)

        Raises:
            StorageError: If the DB cannot be read
        """
        done_links: Set[str] = set()
        recent: deque = deque(maxlen=self.min_save_posts)
        try:
            with open(self.db_path, "r", encoding="utf-8") as f:
                for line in f:
                    link = line.rstrip("\r\n")
                    done_links.add(link)
                    recent.append(link)
        except OSError as e:
            raise StorageError(f"Failed to open DB: {e}") from e

        logger.debug(f"Loaded {len(done_links)} posted links from {self.db_path}")
        return done_links, list(recent)

    def record(self, link: str) -> None:
        """Append a posted link and flush it to disk."""
        try:
            with open(self.db_path, "a", encoding="utf-8") as f:
                f.write(f"{link}\n")
                f.flush()
        except OSError as e:
            raise StorageError(f"Failed to write DB: {e}") from e

    def compact(self, links_for_save: List[str]) -> None:
        """Replace the DB contents with ``links_for_save``."""
        try:
            with open(self.db_path, "w", encoding="utf-8") as f:
                for link in links_for_save:
                    f.write(f"{link}\n")
        except OSError as e:
            raise StorageError(f"Failed to write DB: {e}") from e
        logger.debug(f"Compacted {self.db_path} to {len(links_for_save)} links")
