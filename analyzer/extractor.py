"""
Content extraction - title and main body text from raw article HTML.
"""

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Comment

from .errors import AnalysisError, ErrorKind

MIN_CONTENT_LENGTH = 100
UNTITLED = "Untitled"

# Boilerplate removed before looking for the body
UNWANTED_TAGS = ["script", "style", "noscript", "iframe", "nav", "header", "footer", "aside"]
UNWANTED_SELECTORS = [".advertisement", ".ad", ".ads", ".social-share", ".comments", "#comments", ".sidebar"]

# Tried in order when there is no usable <article>/<main>
CONTENT_SELECTORS = [
    ".article-content",
    ".post-content",
    ".entry-content",
    ".article-body",
    ".post-body",
    ".content",
    "#content",
]


@dataclass
class ExtractedArticle:
    title: str
    content: str
    word_count: int


def clean_text(text: str) -> str:
    """Collapse whitespace runs inside lines and cap blank-line runs at one."""
    text = re.sub(r"[^\S\n]+", " ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_title(soup: BeautifulSoup) -> str:
    """<title>, then first <h1>, then og:title, then a fixed placeholder."""
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(" ", strip=True)

    h1 = soup.find("h1")
    if h1 and h1.get_text(strip=True):
        return h1.get_text(" ", strip=True)

    og = soup.find("meta", attrs={"property": "og:title"})
    if og and (og.get("content") or "").strip():
        return og["content"].strip()

    return UNTITLED


def strip_boilerplate(soup: BeautifulSoup) -> None:
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for bad in soup(UNWANTED_TAGS):
        bad.decompose()

    for selector in UNWANTED_SELECTORS:
        for bad in soup.select(selector):
            bad.decompose()


def extract_main_text(soup: BeautifulSoup, min_length: int = MIN_CONTENT_LENGTH) -> str:
    """Best-effort body text. Boilerplate must already be stripped."""
    for tag_name in ("article", "main"):
        tag = soup.find(tag_name)
        if tag:
            txt = clean_text(tag.get_text("\n"))
            if len(txt) >= min_length:
                return txt

    for selector in CONTENT_SELECTORS:
        el = soup.select_one(selector)
        if el:
            txt = clean_text(el.get_text("\n"))
            if len(txt) >= min_length:
                return txt

    paragraphs = [clean_text(p.get_text(" ")) for p in soup.find_all("p")]
    return "\n\n".join(p for p in paragraphs if p)


def extract(html: str, min_length: int = MIN_CONTENT_LENGTH) -> ExtractedArticle:
    """
    Parse article HTML into title + body text.

    Raises AnalysisError(CONTENT_TOO_SHORT) when the page has no readable
    article body. That outcome is deterministic; retrying will not help.
    """
    soup = BeautifulSoup(html or "", "lxml")

    # Title first: <title> and <h1> may sit inside <header>, which is stripped below
    title = extract_title(soup)

    strip_boilerplate(soup)
    content = extract_main_text(soup, min_length)

    if len(content) < min_length:
        raise AnalysisError(
            ErrorKind.CONTENT_TOO_SHORT,
            f"Article content too short ({len(content)} characters). Minimum {min_length} required.",
            context={"length": len(content)},
        )

    word_count = len(content.split())
    print(f"[extract] {title[:60]!r}: {len(content)} chars, {word_count} words")
    return ExtractedArticle(title=title, content=content, word_count=word_count)
