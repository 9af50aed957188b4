"""
Tests for reader-mode article extraction.
"""

import pytest
from bs4 import BeautifulSoup

from rssreader.extractor import EXCERPT_LENGTH, ArticleExtractor, link_density, resolve_urls

from conftest import ARTICLE_HTML

ARTICLE_URL = "https://example.com/posts/feed-readers"


@pytest.fixture
def extractor():
    return ArticleExtractor()


class TestExtractArticle:
    """Tests for pages with a main article."""

    def test_extracts_title_and_text(self, extractor):
        article = extractor.extract(ARTICLE_HTML, ARTICLE_URL)
        assert article is not None
        assert article.title == "How Feed Readers Work"
        assert "Feed readers poll a list of subscribed sources" in article.text_content
        assert article.length == len(article.text_content)
        assert article.length > 0

    def test_removes_navigation_and_footer(self, extractor):
        article = extractor.extract(ARTICLE_HTML, ARTICLE_URL)
        assert "Privacy" not in article.text_content
        assert "<nav" not in article.content
        assert "<footer" not in article.content

    def test_metadata(self, extractor):
        article = extractor.extract(ARTICLE_HTML, ARTICLE_URL)
        assert article.byline == "Jane Writer"
        assert article.site_name == "Example Blog"
        assert article.url == ARTICLE_URL

    def test_excerpt_from_article_text(self, extractor):
        article = extractor.extract(ARTICLE_HTML, ARTICLE_URL)
        assert "Feed readers poll" in article.excerpt
        assert len(article.excerpt) <= EXCERPT_LENGTH + 1

    def test_excerpt_prefers_meta_description(self, extractor):
        html = ARTICLE_HTML.replace(
            '<meta name="author" content="Jane Writer">',
            '<meta name="author" content="Jane Writer"><meta name="description" content="A short tour.">',
        )
        article = extractor.extract(html, ARTICLE_URL)
        assert article.excerpt == "A short tour."

    def test_only_content_attributes_kept(self, extractor):
        html = ARTICLE_HTML.replace(
            "<p>Feed readers poll",
            '<p style="color: red" class="lead" onclick="x()">Feed readers poll',
        )
        article = extractor.extract(html, ARTICLE_URL)
        assert "style=" not in article.content
        assert "onclick" not in article.content
        assert "class=" not in article.content

    def test_scripts_removed(self, extractor):
        html = ARTICLE_HTML.replace(
            "</article>",
            '<script>var tracking = "should not appear";</script></article>',
        )
        article = extractor.extract(html, ARTICLE_URL)
        assert "should not appear" not in article.text_content


class TestNoArticle:
    """Pages without identifiable article content return None."""

    def test_empty_html(self, extractor):
        assert extractor.extract("", ARTICLE_URL) is None

    def test_link_list_page(self, extractor):
        """A page made only of links is not an article, however long."""
        blocks = "\n".join(
            f'<div><a href="/category/{i}">Category link number {i} with some words</a></div>'
            for i in range(40)
        )
        html = f"<html><head><title>Categories</title></head><body>{blocks}</body></html>"
        assert extractor.extract(html, "https://example.com/") is None

    def test_navigation_page(self, extractor):
        html = """<html><head><title>Home</title></head><body>
            <ul class="menu">
              <li><a href="/news">News</a></li>
              <li><a href="/sports">Sports</a></li>
              <li><a href="/weather">Weather</a></li>
            </ul>
            <p>Welcome!</p>
        </body></html>"""
        assert extractor.extract(html, ARTICLE_URL) is None

    def test_paywall_stub(self, extractor):
        html = """<html><body><article>
            <h1>Big Story</h1>
            <p>Subscribe to continue reading this article.</p>
        </article></body></html>"""
        assert extractor.extract(html, ARTICLE_URL) is None

    def test_bot_check_page(self, extractor):
        html = """<html><head><title>Just a moment...</title></head><body><div class="main">
            <p>Checking your browser before accessing example.com. This process is automatic,
            your browser will redirect to your requested content shortly, please allow up to
            five seconds while we verify you are human and complete the security check.</p>
            <p>Please enable JavaScript and cookies to continue, otherwise the captcha cannot load.</p>
        </div></body></html>"""
        assert extractor.extract(html, ARTICLE_URL) is None

    def test_text_only_document_does_not_raise(self, extractor):
        assert extractor.extract("just some text", ARTICLE_URL) is None

    def test_min_text_length_configurable(self):
        assert ArticleExtractor(min_text_length=20000).extract(ARTICLE_HTML, ARTICLE_URL) is None
        assert ArticleExtractor(min_text_length=200).extract(ARTICLE_HTML, ARTICLE_URL) is not None


class TestResolveUrls:

    def test_relative_urls(self):
        soup = BeautifulSoup('<p><a href="/about">About</a><img src="img/a.png"></p>', "lxml")
        resolve_urls(soup, "https://example.com/posts/1")
        assert soup.a["href"] == "https://example.com/about"
        assert soup.img["src"] == "https://example.com/posts/img/a.png"

    def test_fragments_untouched(self):
        soup = BeautifulSoup('<p><a href="#notes">Notes</a></p>', "lxml")
        resolve_urls(soup, "https://example.com/posts/1")
        assert soup.a["href"] == "#notes"

    def test_javascript_links_unwrapped(self):
        soup = BeautifulSoup('<p><a href="javascript:void(0)">Click</a></p>', "lxml")
        resolve_urls(soup, "https://example.com/")
        assert soup.a is None
        assert "Click" in soup.get_text()

    def test_base_href(self, extractor):
        page = BeautifulSoup('<html><head><base href="https://cdn.example.net/assets/"></head></html>', "lxml")
        assert extractor._base_url(page, ARTICLE_URL) == "https://cdn.example.net/assets/"


class TestLinkDensity:

    def test_prose(self):
        soup = BeautifulSoup("<p>Plain prose with <a href='/x'>one link</a> inside it.</p>", "lxml")
        assert link_density(soup, {"one link"}) < 0.5

    def test_links_only(self):
        soup = BeautifulSoup("<p><a href='/a'>First link</a></p><p><a href='/b'>Second link</a></p>", "lxml")
        assert link_density(soup, set()) > 0.9

    def test_link_text_without_anchor_tags(self):
        soup = BeautifulSoup("<p>Category link number one here</p><p>Category link number two here</p>", "lxml")
        anchors = {"Category link number one here", "Category link number two here"}
        assert link_density(soup, anchors) > 0.9

    def test_merged_link_text(self):
        soup = BeautifulSoup("<p>Category link number one here Category link number two here</p>", "lxml")
        anchors = {"Category link number one here", "Category link number two here"}
        assert link_density(soup, anchors) > 0.9
