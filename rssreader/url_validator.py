"""
URL Validator - Check that fetch targets are well-formed and public.

Every URL the service fetches comes from user input (feed URLs, article
links). Before fetching we check that it is an absolute http(s) URL and, when
BLOCK_PRIVATE_NETWORKS is on, that it does not point at:
- Internal network services (localhost, 127.0.0.1, etc.)
- Cloud metadata endpoints (169.254.169.254)
- Internal infrastructure via private IP ranges
"""

import ipaddress
import socket
from urllib.parse import urlparse

from .exceptions import ValidationError


class SSRFError(ValidationError):
    """Raised when a URL targets a blocked network location."""

    default_code = "invalid_url"


# Blocked IP ranges (private, loopback, link-local, metadata)
BLOCKED_IP_RANGES = [
    # IPv4 private ranges
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    # Loopback
    ipaddress.ip_network("127.0.0.0/8"),
    # Link-local
    ipaddress.ip_network("169.254.0.0/16"),
    # Reserved
    ipaddress.ip_network("0.0.0.0/8"),
    # Broadcast
    ipaddress.ip_network("255.255.255.255/32"),
    # IPv6 equivalents
    ipaddress.ip_network("::1/128"),  # Loopback
    ipaddress.ip_network("fc00::/7"),  # Unique local
    ipaddress.ip_network("fe80::/10"),  # Link-local
]

# Blocked hostnames
BLOCKED_HOSTNAMES = {
    "localhost",
    "localhost.localdomain",
    "ip6-localhost",
    "ip6-loopback",
    "metadata",
    "metadata.google.internal",
    "kubernetes.default",
    "kubernetes.default.svc",
}

BLOCKED_SUFFIXES = (".local", ".internal", ".localhost")

# Allowed URL schemes
ALLOWED_SCHEMES = {"http", "https"}


def is_ip_blocked(ip_str: str) -> bool:
    """Check if an IP address is in a blocked range."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(ip in network for network in BLOCKED_IP_RANGES)


def require_absolute_url(url: str | None) -> str:
    """
    Check that url is a syntactically valid absolute http(s) URL.

    Returns the stripped URL.

    Raises:
        ValidationError: code "invalid_url"
    """
    if not url or not url.strip():
        raise ValidationError("URL is required", code="invalid_url")

    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {e}", code="invalid_url")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise ValidationError(
            f"URL scheme '{parsed.scheme}' is not allowed. Use http or https.",
            code="invalid_url",
        )
    if not parsed.hostname:
        raise ValidationError("URL must include a hostname", code="invalid_url")

    return url


def validate_url(url: str, resolve_dns: bool = True) -> str:
    """
    Validate a URL against private network targets.

    Args:
        url: The URL to validate
        resolve_dns: Whether to resolve DNS and check the IP address

    Returns:
        The validated URL

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL
        SSRFError: If the URL targets a blocked host
    """
    url = require_absolute_url(url)
    parsed = urlparse(url)
    hostname = parsed.hostname.lower()

    if hostname in BLOCKED_HOSTNAMES:
        raise SSRFError(f"Access to '{hostname}' is not allowed")

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        ip = None

    if ip is not None:
        if is_ip_blocked(str(ip)):
            raise SSRFError(f"Access to IP address '{ip}' is not allowed")
    elif hostname.endswith(BLOCKED_SUFFIXES):
        raise SSRFError(f"Access to '{hostname}' is not allowed")

    if resolve_dns and ip is None:
        try:
            addrinfo = socket.getaddrinfo(hostname, parsed.port or 80, proto=socket.IPPROTO_TCP)
        except (socket.gaierror, UnicodeError):
            # Resolution failures surface as network errors at fetch time
            return url
        for _family, _, _, _, sockaddr in addrinfo:
            ip_str = sockaddr[0]
            if is_ip_blocked(ip_str):
                raise SSRFError(
                    f"Hostname '{hostname}' resolves to blocked IP address '{ip_str}'"
                )

    return url
