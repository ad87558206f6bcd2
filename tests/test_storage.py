"""
Unit Tests for the Posted Links DB.

Test Coverage:
    - DB creation without truncation
    - Loading with the min_save_posts window
    - Append and compaction
    - Non-blocking lock file
"""
from datetime import datetime

import pytest

from rss2bsky.errors import LockError, StorageError
from storage import PostedLinksDB


def _write_lines(path, lines):
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


def test_ensure_exists_creates_empty_file(posted_links_db, tmp_path):
    posted_links_db.ensure_exists()

    assert (tmp_path / "posted_links.txt").read_text() == ""


def test_ensure_exists_keeps_content(posted_links_db, tmp_path):
    _write_lines(tmp_path / "posted_links.txt", ["https://m.example/@a/1"])

    posted_links_db.ensure_exists()

    assert (tmp_path / "posted_links.txt").read_text() == "https://m.example/@a/1\n"


def test_load_keeps_newest_links(tmp_path):
    db_path = tmp_path / "db.txt"
    links = [f"https://m.example/@a/{i}" for i in range(5)]
    _write_lines(db_path, links)
    db = PostedLinksDB(str(db_path), str(tmp_path / "lock"), min_save_posts=2)

    done_links, links_for_save = db.load()

    assert done_links == set(links)
    assert links_for_save == links[-2:]


def test_load_with_zero_min_save_posts(tmp_path):
    db_path = tmp_path / "db.txt"
    _write_lines(db_path, ["a", "b"])
    db = PostedLinksDB(str(db_path), str(tmp_path / "lock"), min_save_posts=0)

    done_links, links_for_save = db.load()

    assert done_links == {"a", "b"}
    assert links_for_save == []


def test_load_missing_file_raises(posted_links_db):
    with pytest.raises(StorageError, match="Failed to open DB"):
        posted_links_db.load()


def test_record_appends(posted_links_db, tmp_path):
    posted_links_db.ensure_exists()

    posted_links_db.record("https://m.example/@a/1")
    posted_links_db.record("https://m.example/@a/2")

    assert (tmp_path / "posted_links.txt").read_text() == (
        "https://m.example/@a/1\nhttps://m.example/@a/2\n"
    )


def test_compact_rewrites_file(posted_links_db, tmp_path):
    _write_lines(tmp_path / "posted_links.txt", ["old1", "old2", "old3"])

    posted_links_db.compact(["old3", "new1"])

    assert (tmp_path / "posted_links.txt").read_text() == "old3\nnew1\n"


def test_lock_writes_timestamp(posted_links_db, tmp_path):
    with posted_links_db.lock():
        content = (tmp_path / "rss2bsky.lock").read_text().strip()

    timestamp = datetime.fromisoformat(content)
    assert timestamp.tzinfo is not None


def test_second_lock_fails(posted_links_db):
    other = PostedLinksDB(
        posted_links_db.db_path,
        posted_links_db.filelock_path,
        posted_links_db.min_save_posts
    )

    with posted_links_db.lock():
        with pytest.raises(LockError, match="Failed to get lock"):
            with other.lock():
                pass


def test_lock_released_after_block(posted_links_db):
    with posted_links_db.lock():
        pass

    with posted_links_db.lock():
        pass


def test_lock_in_missing_directory_fails(tmp_path):
    db = PostedLinksDB(str(tmp_path / "db.txt"), str(tmp_path / "missing" / "lock"))

    with pytest.raises(LockError):
        with db.lock():
            pass
