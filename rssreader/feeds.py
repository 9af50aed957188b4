"""
Feed Parser - Turn RSS/Atom payloads into a canonical ParsedFeed.

Handles:
- RSS 0.9x/1.0 (RDF)/2.0 and Atom 1.0 via feedparser
- Non-standard item fields: content:encoded, dc:creator, media:content
- Stable guids for items that do not carry one
- Feed autodiscovery from HTML pages
"""

import hashlib
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import urljoin

import feedparser
from bs4 import BeautifulSoup
from lxml import etree

from .exceptions import ParseError

logger = logging.getLogger(__name__)

DC_NAMESPACE = "http://purl.org/dc/elements/1.1/"
FEED_LINK_TYPES = ("application/rss+xml", "application/atom+xml", "application/rdf+xml")


@dataclass
class MediaContent:
    """Attributes of an item's media:content element."""
    url: str | None
    type: str | None = None
    medium: str | None = None


@dataclass
class ParsedItem:
    """Represents a single item/entry from a feed."""
    title: str
    link: str
    content: str
    guid: str
    pub_date: str | None = None  # Raw date string as found in the feed
    published: datetime | None = None  # Normalized UTC datetime, when parseable
    author: str | None = None
    categories: list[str] = field(default_factory=list)
    media: MediaContent | None = None


@dataclass
class ParsedFeed:
    """Represents a parsed feed."""
    title: str
    description: str | None
    link: str | None
    version: str
    items: list[ParsedItem]


def synthesize_guid(link: str, title: str) -> str:
    """Build a stable guid for an item that has none."""
    digest = hashlib.sha256(f"{link}\n{title}".encode("utf-8")).hexdigest()[:32]
    return f"urn:sha256:{digest}"


class FeedParser:
    """Parses RSS/Atom feeds into canonical form."""

    def parse(self, raw: str | bytes) -> ParsedFeed:
        """
        Parse a feed document.

        A document that is not a feed at all raises ParseError. A valid feed
        without entries returns a ParsedFeed with no items.
        """
        data = raw.encode("utf-8") if isinstance(raw, str) else raw
        if not data or not data.strip():
            raise ParseError("Feed document is empty")

        # Always hand feedparser a stream so it never treats input as a URL or path
        parsed = feedparser.parse(io.BytesIO(data))

        if not parsed.version and not parsed.entries:
            reason = parsed.get("bozo_exception") or "no RSS or Atom root element"
            raise ParseError(f"Failed to parse feed: {reason}")

        creators = self._dc_creators(data, expected=len(parsed.entries))
        items = [
            self._parse_entry(entry, creators[index] if creators else None)
            for index, entry in enumerate(parsed.entries)
        ]

        version = parsed.version or "rss20"
        if version == "rss":
            # Version attribute missing, assume RSS 2.0
            version = "rss20"

        return ParsedFeed(
            title=parsed.feed.get("title", ""),
            description=parsed.feed.get("description") or parsed.feed.get("subtitle"),
            link=parsed.feed.get("link"),
            version=version,
            items=items,
        )

    def _parse_entry(self, entry, dc_creator: str | None) -> ParsedItem:
        # Get URL
        link = entry.get("link", "")
        if not link:
            for candidate in entry.get("links", []):
                if candidate.get("rel") == "alternate" or candidate.get("type") == "text/html":
                    link = candidate.get("href", "")
                    break

        title = entry.get("title", "") or "Untitled"

        published = None
        for key in ("published_parsed", "updated_parsed"):
            parsed_date = entry.get(key)
            if parsed_date:
                try:
                    published = datetime(*parsed_date[:6], tzinfo=timezone.utc)
                    break
                except (TypeError, ValueError):
                    continue

        categories = [tag.get("term") for tag in entry.get("tags", []) if tag.get("term")]

        return ParsedItem(
            title=title,
            link=link,
            content=self._entry_content(entry),
            guid=entry.get("id") or synthesize_guid(link, title),
            pub_date=entry.get("published") or entry.get("updated"),
            published=published,
            author=dc_creator or entry.get("author"),
            categories=categories,
            media=self._entry_media(entry),
        )

    @staticmethod
    def _entry_content(entry) -> str:
        """content:encoded (or Atom content) wins over description/summary."""
        parts = entry.get("content") or []
        if parts:
            for part in parts:
                if part.get("type") in ("text/html", "application/xhtml+xml") and part.get("value"):
                    return part["value"]
            if parts[0].get("value"):
                return parts[0]["value"]
        return entry.get("summary") or entry.get("description") or ""

    @staticmethod
    def _entry_media(entry) -> MediaContent | None:
        media = entry.get("media_content") or []
        if not media:
            return None
        first = media[0]
        return MediaContent(
            url=first.get("url"),
            type=first.get("type"),
            medium=first.get("medium"),
        )

    @staticmethod
    def _dc_creators(data: bytes, expected: int) -> list[str | None] | None:
        """
        Read dc:creator per item straight from the XML.

        feedparser stores dc:creator and author under the same key, so the
        one that appears last in the item wins there. Returns None when the
        document cannot be aligned with feedparser's entries.
        """
        if not expected:
            return None
        parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(data, parser=parser)
        except (etree.XMLSyntaxError, ValueError):
            return None
        if root is None:
            return None

        creators: list[str | None] = []
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            if etree.QName(element).localname not in ("item", "entry"):
                continue
            creator = element.find(f"{{{DC_NAMESPACE}}}creator")
            text = creator.text.strip() if creator is not None and creator.text else ""
            creators.append(text or None)

        if len(creators) != expected:
            logger.debug(f"dc:creator alignment skipped ({len(creators)} items vs {expected} entries)")
            return None
        return creators


def discover_feed_url(html: str, base_url: str) -> str | None:
    """
    Find a feed URL advertised by an HTML page (autodiscovery).

    Returns the absolute feed URL or None if the page does not link one.
    """
    soup = BeautifulSoup(html, "lxml")

    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "alternate" not in [r.lower() for r in rel]:
            continue
        link_type = (link.get("type") or "").lower()
        if link_type in FEED_LINK_TYPES:
            return urljoin(base_url, link["href"])

    return None
