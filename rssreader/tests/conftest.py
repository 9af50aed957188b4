"""
Pytest fixtures for reader tests.
"""

import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from rssreader.cache import MemoryCache
from rssreader.config import config, state
from rssreader.database import Database
from rssreader.exceptions import FetchError
from rssreader.extractor import ArticleExtractor
from rssreader.feeds import FeedParser
from rssreader.fetcher import FEED_ACCEPT, Fetcher, RawPayload
from rssreader.rate_limit import limiter
from rssreader.server import app
from rssreader.url_validator import require_absolute_url

FEED_URL = "https://example.com/feed.xml"

RSS_THREE_ITEMS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Blog</title>
    <link>https://example.com/</link>
    <description>Posts from Example</description>
    <item>
      <title>Third post</title>
      <link>https://example.com/posts/3</link>
      <guid>https://example.com/posts/3</guid>
      <pubDate>Wed, 03 Jan 2024 10:00:00 GMT</pubDate>
      <description>Short summary of the third post</description>
      <content:encoded><![CDATA[<p>Full text of the third post</p>]]></content:encoded>
      <dc:creator>Jane Writer</dc:creator>
    </item>
    <item>
      <title>Second post</title>
      <link>https://example.com/posts/2</link>
      <guid>https://example.com/posts/2</guid>
      <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
      <description>Summary of the second post</description>
    </item>
    <item>
      <title>First post</title>
      <link>https://example.com/posts/1</link>
      <guid>https://example.com/posts/1</guid>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <description>Summary of the first post</description>
    </item>
  </channel>
</rss>
"""

ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>How Feed Readers Work | Example Blog</title>
  <meta name="author" content="Jane Writer">
  <meta property="og:site_name" content="Example Blog">
</head>
<body>
  <nav class="site-nav"><a href="/">Home</a> <a href="/about">About</a> <a href="/archive">Archive</a></nav>
  <div class="sidebar"><a href="/tag/a">Tag A</a> <a href="/tag/b">Tag B</a></div>
  <article class="post-content">
    <h1>How Feed Readers Work</h1>
    <p>Feed readers poll a list of subscribed sources, download their RSS or Atom
    documents, and turn every entry into a normalized item that can be read later,
    marked as read, or archived for reference.</p>
    <p>The hard part is not the download. It is deciding which entries are new,
    which ones were already seen, and how to keep the reading status of old entries
    intact when a publisher rewrites its feed.</p>
    <p>A good reader also extracts the full article from the linked page, removing
    navigation, advertising, share buttons and comment widgets, so that the text
    can be read without distraction, even on a small screen.</p>
    <p><img src="/images/diagram.png" alt="Diagram"> The diagram above shows
    the pipeline, from fetching, through parsing, to storage and display.</p>
  </article>
  <footer class="footer"><a href="/privacy">Privacy</a> <a href="/terms">Terms</a></footer>
</body>
</html>
"""


class StubFetcher(Fetcher):
    """
    Fetcher that serves canned responses instead of touching the network.

    routes maps a URL to (status, body), (status, body, content_type) or an
    exception to raise. Unknown URLs behave like an unreachable host.
    """

    def __init__(self, routes: dict | None = None):
        super().__init__(max_concurrency=3)
        self.routes = dict(routes or {})
        self.requested: list[str] = []

    async def fetch(self, url: str, accept: str = FEED_ACCEPT) -> RawPayload:
        url = require_absolute_url(url)
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            raise FetchError(
                "Could not reach the server. Please check the URL and try again.",
                kind="network",
                url=url,
            )
        if isinstance(route, Exception):
            raise route

        status, body = route[0], route[1]
        content_type = route[2] if len(route) > 2 else "application/rss+xml"
        if not 200 <= status < 300:
            raise FetchError(f"Server returned HTTP {status}.", kind="http", status=status, url=url)
        if not body.strip():
            raise FetchError("Server returned an empty response.", kind="http", status=status, url=url)
        return RawPayload(
            url=url,
            final_url=url,
            status=status,
            content_type=content_type,
            content=body.encode("utf-8"),
            text=body,
        )


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def stub_fetcher():
    return StubFetcher({FEED_URL: (200, RSS_THREE_ITEMS)})


@pytest.fixture
def auth_headers():
    return {"X-User-Id": "user-1"}


@pytest.fixture
def other_user_headers():
    return {"X-User-Id": "user-2"}


@pytest.fixture
def client(temp_db_path, stub_fetcher):
    """Create a test client with isolated database, caches and a stub fetcher."""
    # Store original state
    original = {
        name: getattr(state, name)
        for name in ("db", "fetcher", "feed_parser", "extractor", "article_cache", "item_list_cache")
    }
    original_auth_key = config.AUTH_API_KEY
    original_dev_user = config.DEV_USER_ID
    original_limiter_enabled = limiter.enabled

    # Set up test state with fresh instances
    state.db = Database(temp_db_path)
    state.fetcher = stub_fetcher
    state.feed_parser = FeedParser()
    state.extractor = ArticleExtractor()
    state.article_cache = MemoryCache(ttl_seconds=3600)
    state.item_list_cache = MemoryCache(ttl_seconds=300)
    config.AUTH_API_KEY = ""
    config.DEV_USER_ID = ""
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    for name, value in original.items():
        setattr(state, name, value)
    config.AUTH_API_KEY = original_auth_key
    config.DEV_USER_ID = original_dev_user
    limiter.enabled = original_limiter_enabled


@pytest.fixture
def subscribed(client, auth_headers):
    """Client with FEED_URL subscribed by user-1. Yields (client, feed)."""
    response = client.post("/feeds", json={"url": FEED_URL}, headers=auth_headers)
    assert response.status_code == 201
    yield client, response.json()
