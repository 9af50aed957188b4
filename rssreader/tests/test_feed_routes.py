"""
Tests for feed routes.
"""

from rssreader.config import state
from rssreader.exceptions import PersistenceError

from conftest import FEED_URL, RSS_THREE_ITEMS

EMPTY_RSS = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Quiet Blog</title><link>https://quiet.example.com/</link>
<description>Nothing yet</description></channel></rss>"""

FOURTH_ITEM = """    <item>
      <title>Fourth post</title>
      <link>https://example.com/posts/4</link>
      <pubDate>Thu, 04 Jan 2024 10:00:00 GMT</pubDate>
      <description>Summary of the fourth post</description>
    </item>
    <item>
      <title>Third post</title>"""


class TestListFeeds:
    """Tests for GET /feeds endpoint."""

    def test_list_feeds_empty(self, client, auth_headers):
        """Should return empty list when no feeds."""
        response = client.get("/feeds", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_list_feeds_has_required_fields(self, subscribed, auth_headers):
        """Each feed should have required fields."""
        client, _ = subscribed
        feeds = client.get("/feeds", headers=auth_headers).json()
        assert len(feeds) == 1
        feed = feeds[0]
        for field in ("id", "url", "title", "unread_count", "last_fetched_at", "fetch_error", "created_at"):
            assert field in feed

    def test_feeds_scoped_to_user(self, subscribed, other_user_headers):
        """Another user should not see the feed."""
        client, _ = subscribed
        response = client.get("/feeds", headers=other_user_headers)
        assert response.json() == []


class TestAddFeed:
    """Tests for POST /feeds endpoint."""

    def test_add_feed_stores_items_unread(self, client, auth_headers):
        """Should create the feed and persist its three items as unread."""
        response = client.post("/feeds", json={"url": FEED_URL}, headers=auth_headers)
        assert response.status_code == 201
        feed = response.json()
        assert feed["title"] == "Example Blog"
        assert feed["url"] == FEED_URL
        assert feed["unread_count"] == 3
        assert feed["last_fetched_at"] is not None

        items = client.get("/items", headers=auth_headers).json()
        assert items["total"] == 3
        assert all(item["status"] == "unread" for item in items["items"])
        assert [item["title"] for item in items["items"]] == ["Third post", "Second post", "First post"]

    def test_add_duplicate_feed_rejected(self, subscribed, auth_headers):
        """Re-adding the same URL is rejected and stores nothing new."""
        client, _ = subscribed
        response = client.post("/feeds", json={"url": FEED_URL}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "duplicate"
        assert client.get("/items", headers=auth_headers).json()["total"] == 3
        assert len(client.get("/feeds", headers=auth_headers).json()) == 1

    def test_same_feed_for_two_users(self, subscribed, other_user_headers):
        """Duplicate check is per user."""
        client, _ = subscribed
        response = client.post("/feeds", json={"url": FEED_URL}, headers=other_user_headers)
        assert response.status_code == 201

    def test_add_feed_invalid_url(self, client, auth_headers):
        """Should reject invalid feed URL."""
        response = client.post("/feeds", json={"url": "not-a-valid-url"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_url"

    def test_add_feed_empty_url(self, client, auth_headers):
        response = client.post("/feeds", json={"url": ""}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_url"

    def test_add_feed_missing_url(self, client, auth_headers):
        """Should require URL."""
        response = client.post("/feeds", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "missing_fields"

    def test_failed_item_storage_leaves_no_feed(self, client, auth_headers, monkeypatch):
        """If storing the items fails the subscription is undone and can be retried."""
        def fail(items):
            raise PersistenceError("Database operation failed")

        monkeypatch.setattr(state.db.items, "add_many", fail)
        response = client.post("/feeds", json={"url": FEED_URL}, headers=auth_headers)
        assert response.status_code == 500
        assert response.json()["code"] == "persistence"
        assert client.get("/feeds", headers=auth_headers).json() == []

        monkeypatch.undo()
        retry = client.post("/feeds", json={"url": FEED_URL}, headers=auth_headers)
        assert retry.status_code == 201
        assert retry.json()["unread_count"] == 3

    def test_add_feed_unreachable(self, client, auth_headers):
        response = client.post("/feeds", json={"url": "https://down.example.com/feed"}, headers=auth_headers)
        assert response.status_code == 502
        body = response.json()
        assert body["code"] == "unreachable"
        assert "check the URL" in body["error"]

    def test_add_feed_http_error(self, client, stub_fetcher, auth_headers):
        stub_fetcher.routes["https://example.com/missing.xml"] = (404, "Not Found")
        response = client.post("/feeds", json={"url": "https://example.com/missing.xml"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "unreachable"

    def test_add_feed_not_a_feed(self, client, stub_fetcher, auth_headers):
        stub_fetcher.routes["https://example.com/page"] = (
            200, "<html><body><p>Just a page</p></body></html>", "text/html"
        )
        response = client.post("/feeds", json={"url": "https://example.com/page"}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["code"] == "unparseable"

    def test_add_feed_without_items(self, client, stub_fetcher, auth_headers):
        stub_fetcher.routes["https://quiet.example.com/feed"] = (200, EMPTY_RSS)
        response = client.post("/feeds", json={"url": "https://quiet.example.com/feed"}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["code"] == "empty"
        assert client.get("/feeds", headers=auth_headers).json() == []

    def test_add_feed_discovers_feed_from_website(self, client, stub_fetcher, auth_headers):
        stub_fetcher.routes["https://example.com/"] = (
            200,
            '<html><head><link rel="alternate" type="application/rss+xml" href="/feed.xml">'
            "</head><body>Home</body></html>",
            "text/html",
        )
        response = client.post("/feeds", json={"url": "https://example.com/"}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["url"] == FEED_URL


class TestDeleteFeed:
    """Tests for DELETE /feeds/{feed_id} endpoint."""

    def test_delete_feed(self, subscribed, auth_headers):
        """Should delete a feed."""
        client, feed = subscribed
        response = client.delete(f"/feeds/{feed['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get("/feeds", headers=auth_headers).json() == []

    def test_delete_cascades_to_items_and_notes(self, subscribed, auth_headers):
        client, feed = subscribed
        item_id = client.get("/items", headers=auth_headers).json()["items"][0]["id"]
        client.post("/notes", json={"feed_item_id": item_id, "content": "Remember this"}, headers=auth_headers)

        client.delete(f"/feeds/{feed['id']}", headers=auth_headers)

        assert client.get("/items", headers=auth_headers).json()["total"] == 0
        assert state.db.notes.get_for_item(item_id, "user-1") == []

    def test_delete_nonexistent_feed(self, client, auth_headers):
        """Should return 404 for nonexistent feed."""
        response = client.delete("/feeds/99999", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_other_users_feed(self, subscribed, other_user_headers, auth_headers):
        """Not-owned looks the same as not-found."""
        client, feed = subscribed
        response = client.delete(f"/feeds/{feed['id']}", headers=other_user_headers)
        assert response.status_code == 404
        assert len(client.get("/feeds", headers=auth_headers).json()) == 1


class TestRefreshFeed:
    """Tests for feed refresh endpoints."""

    def test_refresh_adds_only_new_items(self, subscribed, stub_fetcher, auth_headers):
        client, feed = subscribed
        items = client.get("/items", headers=auth_headers).json()["items"]
        client.patch(f"/items/{items[0]['id']}", json={"status": "read"}, headers=auth_headers)

        stub_fetcher.routes[FEED_URL] = (200, RSS_THREE_ITEMS.replace(
            "    <item>\n      <title>Third post</title>", FOURTH_ITEM, 1
        ))
        response = client.post(f"/feeds/{feed['id']}/refresh", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["new_items"] == 1
        items = client.get("/items?status=all", headers=auth_headers).json()["items"]
        assert [i["title"] for i in items] == ["Fourth post", "Third post", "Second post", "First post"]
        assert items[1]["status"] == "read"

    def test_refresh_unchanged_feed_is_noop(self, subscribed, auth_headers):
        client, feed = subscribed
        response = client.post(f"/feeds/{feed['id']}/refresh", headers=auth_headers)
        assert response.json()["new_items"] == 0
        assert client.get("/items", headers=auth_headers).json()["total"] == 3

    def test_refresh_failure_recorded(self, subscribed, stub_fetcher, auth_headers):
        client, feed = subscribed
        stub_fetcher.routes[FEED_URL] = (503, "Unavailable")
        response = client.post(f"/feeds/{feed['id']}/refresh", headers=auth_headers)
        assert response.status_code == 400
        feeds = client.get("/feeds", headers=auth_headers).json()
        assert feeds[0]["fetch_error"]

    def test_refresh_all_skips_failing_feed(self, subscribed, stub_fetcher, auth_headers):
        client, _ = subscribed
        stub_fetcher.routes["https://other.example.com/feed"] = (200, RSS_THREE_ITEMS.replace(
            "https://example.com/posts/", "https://other.example.com/posts/"
        ))
        client.post("/feeds", json={"url": "https://other.example.com/feed"}, headers=auth_headers)
        del stub_fetcher.routes["https://other.example.com/feed"]

        response = client.post("/feeds/refresh", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["refreshed"] == 1
        assert len(body["failures"]) == 1
        assert body["failures"][0]["url"] == "https://other.example.com/feed"
