"""
Article Extractor - Reader-mode extraction of article content from HTML.

Handles:
- Main content extraction using trafilatura (HTML output)
- Metadata via trafilatura: title, byline, description, site name
- URL resolution against the page (honouring <base href>)
- Detection of non-article pages: link lists, paywall stubs and bot
  checks return None instead of an article
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import urljoin

import trafilatura
from bs4 import BeautifulSoup
from trafilatura.settings import use_config

logger = logging.getLogger(__name__)

KEEP_ATTRIBUTES = {"href", "src", "srcset", "alt", "title", "colspan", "rowspan", "datetime", "cite"}
URL_ATTRIBUTES = {"a": "href", "img": "src", "source": "src", "video": "src", "audio": "src"}

# Bot-check / interstitial pages that should never be returned as articles
BLOCK_PAGE_PHRASES = [
    "captcha",
    "not a robot",
    "unusual activity",
    "verify you are human",
    "checking your browser",
    "enable javascript and cookies",
    "access denied",
    "pardon our interruption",
    "complete the security check",
]

EXCERPT_LENGTH = 300
MAX_LINK_DENSITY = 0.5


@dataclass
class ExtractedArticle:
    """Canonical reader-mode view of a web page."""
    url: str
    title: str
    content: str  # Cleaned article HTML
    text_content: str
    excerpt: str
    byline: str | None
    length: int  # Characters of text_content
    site_name: str | None = None


def _normalize_space(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def resolve_urls(content: BeautifulSoup, base_url: str):
    """Resolve relative links and media against base_url, in place."""
    for tag_name, attribute in URL_ATTRIBUTES.items():
        for tag in content.find_all(tag_name, attrs={attribute: True}):
            value = tag[attribute].strip()
            if tag_name == "a" and value.lower().startswith("javascript:"):
                tag.unwrap()
                continue
            if value.startswith("#"):
                continue
            tag[attribute] = urljoin(base_url, value)


def link_density(content: BeautifulSoup, page_anchor_texts: set[str]) -> float:
    """
    Share of the text that is link text.

    Text counts as link text when it sits inside an <a> of the extracted
    content, or when it repeats the text of a link on the page (extraction
    may drop the <a> tags themselves, or merge several links into one
    text run).
    """
    text = _normalize_space(content.get_text(" "))
    if not text:
        return 0.0

    linked = 0
    for string in content.find_all(string=True):
        value = _normalize_space(string)
        if value and (string.find_parent("a") is not None or value in page_anchor_texts):
            linked += len(value)

    # Short anchors ("Home", "More") match ordinary prose too often
    repeated = sum(
        len(anchor) for anchor in page_anchor_texts
        if len(anchor.split()) >= 4 and anchor in text
    )
    return min(max(linked, repeated), len(text)) / len(text)


class ArticleExtractor:
    """Extracts the main article from an HTML page."""

    def __init__(self, min_text_length: int = 200):
        self.min_text_length = min_text_length
        self._config = use_config()
        # Signal-based timeouts only work on the main thread
        self._config.set("DEFAULT", "EXTRACTION_TIMEOUT", "0")

    def extract(self, html: str, source_url: str) -> ExtractedArticle | None:
        """
        Extract the primary article of a page.

        Returns None when the page has no identifiable article content
        (navigation pages, paywall stubs, bot checks).
        """
        if not html or not html.strip():
            return None

        try:
            content_html = trafilatura.extract(
                html,
                url=source_url,
                output_format="html",
                include_links=True,
                include_images=True,
                include_tables=True,
                include_comments=False,
                config=self._config,
            )
            metadata = trafilatura.extract_metadata(html, default_url=source_url)
        except Exception as e:
            logger.warning(f"Extraction failed for {source_url}: {e}")
            return None

        if not content_html:
            logger.debug(f"No article content found for {source_url}")
            return None

        page = BeautifulSoup(html, "lxml")
        content = BeautifulSoup(content_html, "lxml")
        resolve_urls(content, self._base_url(page, source_url))
        self._strip_attributes(content)

        root = content.body or content
        text_content = _normalize_space(root.get_text(" "))
        if len(text_content) < self.min_text_length:
            logger.debug(
                f"Extracted text too short for {source_url} "
                f"({len(text_content)} < {self.min_text_length})"
            )
            return None

        anchor_texts = {_normalize_space(a.get_text(" ")) for a in page.find_all("a")}
        anchor_texts.discard("")
        if link_density(root, anchor_texts) > MAX_LINK_DENSITY:
            logger.info(f"Page at {source_url} is mostly links, not an article")
            return None
        if self._looks_blocked(text_content):
            logger.info(f"Page at {source_url} looks like a bot check, not an article")
            return None

        site_name = metadata.sitename if metadata else None
        title = self._title(metadata, page, root, site_name)
        byline = metadata.author if metadata and metadata.author else None
        excerpt = (
            (metadata.description if metadata else None)
            or self._first_paragraph(root)
            or text_content
        )

        return ExtractedArticle(
            url=source_url,
            title=title,
            content="".join(str(child) for child in root.children).strip(),
            text_content=text_content,
            excerpt=self._truncate(_normalize_space(excerpt), EXCERPT_LENGTH),
            byline=byline,
            length=len(text_content),
            site_name=site_name,
        )

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _base_url(page: BeautifulSoup, source_url: str) -> str:
        base = page.find("base", href=True)
        if base:
            return urljoin(source_url, base["href"])
        return source_url

    @staticmethod
    def _strip_attributes(content: BeautifulSoup):
        for tag in content.find_all(True):
            tag.attrs = {k: v for k, v in tag.attrs.items() if k in KEEP_ATTRIBUTES}

    @staticmethod
    def _title(metadata, page: BeautifulSoup, root, site_name: str | None) -> str:
        title = metadata.title if metadata and metadata.title else None
        if not title and page.title and page.title.string:
            title = _normalize_space(page.title.string)
            title = re.sub(r"\s*[|\-–—]\s*[^|\-–—]+$", "", title) or title
        if not title:
            heading = root.find(["h1", "h2"])
            title = _normalize_space(heading.get_text(" ")) if heading else ""

        # Drop a trailing " | Site Name" when the site is known
        if site_name:
            suffix = re.compile(r"\s*[|\-–—:]\s*" + re.escape(site_name) + r"\s*$")
            title = suffix.sub("", title) or title
        return title

    @staticmethod
    def _first_paragraph(root) -> str | None:
        """First paragraph that reads like prose, else the first non-empty one."""
        paragraphs = [_normalize_space(p.get_text(" ")) for p in root.find_all("p")]
        paragraphs = [p for p in paragraphs if p]
        for paragraph in paragraphs:
            if len(paragraph) >= 80:
                return paragraph
        return paragraphs[0] if paragraphs else None

    @staticmethod
    def _truncate(text: str, limit: int) -> str:
        if len(text) <= limit:
            return text
        cut = text[:limit].rsplit(" ", 1)[0]
        return cut.rstrip(",;:") + "…"

    @staticmethod
    def _looks_blocked(text: str) -> bool:
        """Short pages dominated by bot-check phrases."""
        lowered = text.lower()
        matches = sum(1 for phrase in BLOCK_PAGE_PHRASES if phrase in lowered)
        return (matches >= 2 and len(text) < 3000) or (matches >= 1 and len(text) < 600)
