"""Content snapshot cleaning.

The metadata service returns page content either as plain text or as raw
HTML. Before extraction the snapshot is reduced to readable text and capped
in length so a single page cannot blow up the extraction request.
"""

import logging
import re

import html2text
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Elements that never carry recipe text
NOISE_TAGS = ("script", "style", "noscript", "iframe", "svg", "form")

_TAG_PATTERN = re.compile(r"<[a-zA-Z][^>]*>")
_BLANK_LINES = re.compile(r"\n{3,}")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")


def looks_like_html(text: str) -> bool:
    """Check if text contains HTML markup."""
    return bool(_TAG_PATTERN.search(text))


def html_to_text(html: str) -> str:
    """Convert an HTML snapshot to markdown-flavoured text.

    Noise elements are dropped first, then html2text renders the rest with
    links and images removed.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(list(NOISE_TAGS)):
        tag.decompose()

    converter = html2text.HTML2Text()
    converter.ignore_links = True
    converter.ignore_images = True
    converter.body_width = 0
    return converter.handle(str(soup))


def normalize_whitespace(text: str) -> str:
    """Strip trailing spaces and collapse runs of blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _TRAILING_SPACE.sub("\n", text)
    text = _BLANK_LINES.sub("\n\n", text)
    return text.strip()


def truncate(text: str, max_chars: int) -> str:
    """Cap text at max_chars, cutting at the last whitespace when possible.

    Examples:
        >>> truncate("one two three", 9)
        'one two'
        >>> truncate("short", 100)
        'short'
    """
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    boundary = cut.rfind(" ")
    newline = cut.rfind("\n")
    boundary = max(boundary, newline)
    if boundary > 0:
        cut = cut[:boundary]
    return cut.rstrip()


def clean_content(text: str | None, max_chars: int) -> str:
    """Reduce a raw content snapshot to capped plain text.

    Args:
        text: Content as returned by the metadata service (may be None)
        max_chars: Maximum number of characters to keep

    Returns:
        Cleaned text, or an empty string when nothing readable remains
    """
    if not text:
        return ""

    if looks_like_html(text):
        text = html_to_text(text)

    cleaned = normalize_whitespace(text)
    if len(cleaned) > max_chars:
        logger.debug(f"Truncating content from {len(cleaned)} to {max_chars} characters")
        cleaned = truncate(cleaned, max_chars)
    return cleaned
