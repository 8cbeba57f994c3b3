"""
Citation matching - URL normalization and target detection in engine output.

Normalization only removes formatting noise (www., trailing slash, query,
fragment, host case). It never drops path segments, so two different
articles never compare equal.
"""

import re
from typing import Any, Iterable, Optional
from urllib.parse import urlsplit

from models import Citation

_TRAILING_PUNCT = re.compile(r"[,.)\]>]+$")
_TRAILING_NOISE = re.compile(r"[\s/]+$")

# Passes only trim or lower-case, so the loop settles within a pass or two.
_MAX_PASSES = 8


def clean_url(url: str) -> str:
    """Strip whitespace and trailing punctuation picked up from prose."""
    return _TRAILING_PUNCT.sub("", (url or "").strip()).strip()


def _fallback_normalize(url: str) -> str:
    return _TRAILING_NOISE.sub("", url.lower())


def _normalize_once(url: str) -> str:
    url = (url or "").strip()
    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return _fallback_normalize(url)

    host = (host or "").strip()
    if not parts.scheme or not host:
        return _fallback_normalize(url)

    while host.startswith("www.") and len(host) > 4:
        host = host[4:].strip()
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal
    if port is not None:
        host = f"{host}:{port}"

    path = _TRAILING_NOISE.sub("", parts.path)
    return f"{parts.scheme}://{host}{path}"


def normalize_url(url: str) -> str:
    """
    Canonical form used for comparison.

    Total over all strings: anything that does not parse as an absolute
    http-style URL gets a lower-case, slash-trimmed fallback instead.
    Normalizing a normalized URL returns it unchanged.
    """
    current = _normalize_once(url)
    for _ in range(_MAX_PASSES):
        following = _normalize_once(current)
        if following == current:
            break
        current = following
    return current


def urls_match(target_url: str, candidate_url: str) -> bool:
    return normalize_url(target_url) == normalize_url(candidate_url)


def is_target_in_citations(target_url: str, citations: Iterable[Citation]) -> tuple[bool, Optional[int]]:
    """
    Look for the target among inline citations.

    Returns (found, rank). Citations are scanned in rank order, so a target
    cited more than once reports its lowest rank.
    """
    target = normalize_url(target_url)
    for citation in sorted(citations, key=lambda c: c.rank):
        if normalize_url(citation.url) == target:
            return True, citation.rank
    return False, None


def is_target_in_sources(target_url: str, sources: Iterable[str]) -> bool:
    target = normalize_url(target_url)
    return any(normalize_url(source) == target for source in sources)


# === Engine output parsing ===

def _get(item: Any, key: str, default=None):
    """Read a field from either a dict or an SDK object."""
    if isinstance(item, dict):
        return item.get(key, default)
    return getattr(item, key, default)


def extract_sources(output: Iterable[Any]) -> list[str]:
    """URLs from web_search_call items (`action.sources`), in emission order."""
    sources = []
    for item in output or []:
        if _get(item, "type") != "web_search_call":
            continue
        action = _get(item, "action") or {}
        for source in _get(action, "sources") or []:
            url = source if isinstance(source, str) else _get(source, "url")
            if url:
                cleaned = clean_url(url)
                if cleaned:
                    sources.append(cleaned)
    return sources


def extract_citations(output: Iterable[Any]) -> list[Citation]:
    """url_citation annotations from message content, ranked 1.. in document order."""
    citations = []
    rank = 1
    for item in output or []:
        if _get(item, "type") != "message":
            continue
        for content in _get(item, "content") or []:
            for annotation in _get(content, "annotations") or []:
                if _get(annotation, "type") != "url_citation":
                    continue
                url = clean_url(_get(annotation, "url") or "")
                if not url:
                    continue
                citations.append(Citation(url=url, title=_get(annotation, "title"), rank=rank))
                rank += 1
    return citations
