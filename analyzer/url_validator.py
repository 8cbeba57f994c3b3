"""
Submission URL validation - format checks and SSRF guards.
"""

import ipaddress
from urllib.parse import urlsplit

from .errors import AnalysisError, ErrorKind

MAX_URL_LENGTH = 2000
ALLOWED_SCHEMES = ("http", "https")
BLOCKED_HOSTS = ("localhost", "::1")


def _invalid(message: str) -> AnalysisError:
    return AnalysisError(ErrorKind.DETERMINISTIC, message)


def is_private_host(hostname: str) -> bool:
    """Loopback, private and link-local IP literals. Names are not resolved."""
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return ip.is_loopback or ip.is_private or ip.is_link_local


def validate_url(url: str) -> str:
    """
    Check a submitted URL and return it stripped.

    Raises AnalysisError(DETERMINISTIC) with a user-facing message.
    """
    if not url or not url.strip():
        raise _invalid("URL is required")

    url = url.strip()
    if len(url) > MAX_URL_LENGTH:
        raise _invalid(f"URL must be less than {MAX_URL_LENGTH} characters")

    try:
        parts = urlsplit(url)
        hostname = (parts.hostname or "").lower()
    except ValueError:
        raise _invalid("Please enter a valid URL (e.g., https://example.com/article)")

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise _invalid("URL must use HTTP or HTTPS protocol")
    if not hostname:
        raise _invalid("Please enter a valid URL (e.g., https://example.com/article)")

    if hostname in BLOCKED_HOSTS:
        raise _invalid("Cannot analyze localhost URLs")
    if is_private_host(hostname):
        raise _invalid("Cannot analyze private IP addresses")

    return url
