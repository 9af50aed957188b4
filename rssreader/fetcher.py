"""
Content Fetcher - Retrieve raw feed and page bytes over HTTP.

Handles:
- HTTP fetching with a fixed client identity and Accept preferences
- Bounded timeouts so a hung host cannot block a request forever
- Transport failures reported separately from HTTP status failures
- Bounded-concurrency fan-out for multi-feed operations
- SSRF protection via URL validation, repeated for every redirect hop
"""

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import aiohttp

from .exceptions import FetchError
from .url_validator import require_absolute_url, validate_url

logger = logging.getLogger(__name__)

FEED_ACCEPT = (
    "application/rss+xml, application/xml, application/atom+xml, "
    "text/xml;q=0.9, */*;q=0.8"
)
PAGE_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

MAX_REDIRECTS = 5
REDIRECT_STATUSES = {301, 302, 303, 307, 308}


@dataclass
class RawPayload:
    """Body and metadata of a successful fetch."""
    url: str
    final_url: str
    status: int
    content_type: str
    content: bytes
    text: str


class Fetcher:
    """Fetches feeds and web pages."""

    def __init__(
        self,
        timeout: float = 20.0,
        user_agent: str | None = None,
        max_concurrency: int = 3,
        block_private_networks: bool = True,
        resolve_dns: bool = True,
    ):
        self.timeout = timeout
        self.user_agent = user_agent or "RSS Reader/1.0 (+https://github.com/rss-reader)"
        self.max_concurrency = max(1, max_concurrency)
        self.block_private_networks = block_private_networks
        self.resolve_dns = resolve_dns

    async def fetch(self, url: str, accept: str = FEED_ACCEPT) -> RawPayload:
        """
        GET url and return its body.

        Raises:
            ValidationError: If url is not an absolute http(s) URL or is blocked
            FetchError: kind="http" for non-2xx or empty responses,
                kind="network" for connection failures and timeouts
        """
        url = await self._check_url(url)
        headers = {"User-Agent": self.user_agent, "Accept": accept}
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(headers=headers) as session:
                current = url
                for _ in range(MAX_REDIRECTS + 1):
                    async with session.get(current, timeout=timeout, allow_redirects=False) as resp:
                        location = resp.headers.get("Location")
                        if resp.status in REDIRECT_STATUSES and location:
                            # Every hop gets the same checks as the original URL
                            current = await self._check_url(urljoin(current, location))
                            logger.debug(f"Following redirect from {url} to {current}")
                            continue

                        if not 200 <= resp.status < 300:
                            logger.warning(f"Fetch of {url} returned HTTP {resp.status}")
                            raise FetchError(
                                f"Server returned HTTP {resp.status}. Please check the URL and try again.",
                                kind="http",
                                status=resp.status,
                                url=url,
                            )
                        content = await resp.read()
                        text = await resp.text(errors="replace")
                        payload = RawPayload(
                            url=url,
                            final_url=str(resp.url),
                            status=resp.status,
                            content_type=resp.headers.get("Content-Type", ""),
                            content=content,
                            text=text,
                        )
                        break
                else:
                    logger.warning(f"Fetch of {url} exceeded {MAX_REDIRECTS} redirects")
                    raise FetchError(
                        "Too many redirects. Please check the URL and try again.",
                        kind="http",
                        url=url,
                    )
        except asyncio.TimeoutError:
            logger.warning(f"Fetch of {url} timed out after {self.timeout}s")
            raise FetchError(
                f"Timed out after {self.timeout:g}s. Please check the URL and try again.",
                kind="network",
                url=url,
            )
        except aiohttp.ClientError as e:
            logger.warning(f"Fetch of {url} failed: {e}")
            raise FetchError(
                "Could not reach the server. Please check the URL and try again.",
                kind="network",
                url=url,
            ) from e

        if not payload.text.strip():
            raise FetchError(
                "Server returned an empty response. Please check the URL and try again.",
                kind="http",
                status=payload.status,
                url=url,
            )
        return payload

    async def fetch_page(self, url: str) -> RawPayload:
        """Fetch an HTML page (article or website)."""
        return await self.fetch(url, accept=PAGE_ACCEPT)

    async def fetch_many(
        self,
        urls: list[str],
        accept: str = FEED_ACCEPT,
    ) -> list[RawPayload | Exception]:
        """
        Fetch several URLs, at most max_concurrency at a time.

        Returns one entry per URL, in order: the payload, or the exception
        that fetch raised. One failure never aborts the others.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _fetch_safe(url: str) -> RawPayload | Exception:
            async with semaphore:
                try:
                    return await self.fetch(url, accept=accept)
                except Exception as e:
                    return e

        return await asyncio.gather(*(_fetch_safe(url) for url in urls))

    async def _check_url(self, url: str) -> str:
        if not self.block_private_networks:
            return require_absolute_url(url)
        if self.resolve_dns:
            # getaddrinfo blocks, keep it off the event loop
            return await asyncio.to_thread(validate_url, url, True)
        return validate_url(url, resolve_dns=False)
