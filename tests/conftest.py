"""
Pytest configuration and shared fixtures for all tests.

Provides a Mastodon-style RSS document, its parsed entries, and a
temporary posted-links DB.
"""
import feedparser
import pytest

from storage import PostedLinksDB


MASTODON_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:webfeeds="http://webfeeds.org/rss/1.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Test User</title>
    <description>Public posts from @user@mastodon.example</description>
    <link>https://mastodon.example/@user</link>
    <item>
      <guid isPermaLink="true">https://mastodon.example/@user/3</guid>
      <link>https://mastodon.example/@user/3</link>
      <pubDate>Wed, 03 Jan 2024 12:00:00 +0000</pubDate>
      <description>&lt;p&gt;Third post with a &lt;a href="https://example.com/article"&gt;link&lt;/a&gt;&lt;/p&gt;</description>
      <media:content url="https://files.mastodon.example/media/3.png" type="image/png" fileSize="2048" medium="image">
        <media:rating scheme="urn:simple">nonadult</media:rating>
      </media:content>
    </item>
    <item>
      <guid isPermaLink="true">https://mastodon.example/@user/2</guid>
      <link>https://mastodon.example/@user/2</link>
      <pubDate>Tue, 02 Jan 2024 12:00:00 +0000</pubDate>
      <description>&lt;p&gt;Second post&lt;/p&gt;</description>
    </item>
    <item>
      <guid isPermaLink="true">https://mastodon.example/@user/1</guid>
      <link>https://mastodon.example/@user/1</link>
      <pubDate>Mon, 01 Jan 2024 12:00:00 +0000</pubDate>
      <description>&lt;p&gt;First post&lt;/p&gt;</description>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def mastodon_rss():
    """Raw bytes of a three-entry Mastodon feed, newest first."""
    return MASTODON_RSS


@pytest.fixture
def mastodon_entries():
    """Parsed entries of the Mastodon feed, newest first."""
    return list(feedparser.parse(MASTODON_RSS).entries)


@pytest.fixture
def posted_links_db(tmp_path):
    """PostedLinksDB in a temporary directory, keeping 50 links."""
    return PostedLinksDB(
        db_path=str(tmp_path / "posted_links.txt"),
        filelock_path=str(tmp_path / "rss2bsky.lock"),
        min_save_posts=50
    )
