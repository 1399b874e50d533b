"""Condense webpage HTML into plain text lines for the extraction prompt."""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

REMOVED_TAGS = ["script", "style", "noscript", "svg", "iframe", "canvas", "link", "meta", "header", "footer"]
CONTENT_TAGS = [
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "p",
    "li",
    "dt",
    "dd",
    "th",
    "td",
    "figcaption",
    "time",
    "span",
    "img",
    "picture",
    "source",
]
IMAGE_SRC_ATTRS = ("src", "data-src", "data-lazy-src")

_HORIZONTAL_WS_RUN = re.compile(r"[\t ]{2,}")


def _attr(el, name: str) -> str:
    value = el.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def _image_url(el) -> Optional[str]:
    for name in IMAGE_SRC_ATTRS:
        value = _attr(el, name)
        if value:
            return value
    for candidate in _attr(el, "srcset").split(","):
        tokens = candidate.split()
        if tokens:
            return tokens[0]
    return None


def _image_line(el) -> Optional[str]:
    url = _image_url(el)
    if not url:
        return None
    alt = _attr(el, "alt")
    return f"[img] {alt} | {url}" if alt else f"[img] {url}"


def extract_sanitized_body(html: str) -> str:
    """Return the body's content-bearing text, one element per line.

    Images become ``[img] <alt> | <url>`` lines. Input without a body, or
    any failure while walking the tree, returns ``html`` unchanged.
    """
    try:
        soup = BeautifulSoup(html, "lxml")
        body = soup.body
        if body is None:
            return html

        for el in body.find_all(REMOVED_TAGS):
            el.extract()

        blocks: List[str] = []
        for el in body.find_all(CONTENT_TAGS):
            if el.name.lower() == "img":
                line = _image_line(el)
                if line:
                    blocks.append(line)
                continue
            text = el.get_text().strip()
            if text:
                blocks.append(text)

        text = "\n".join(blocks).replace("\r", "")
        return _HORIZONTAL_WS_RUN.sub(" ", text)
    except Exception as exc:  # noqa: BLE001
        logger.warning("HTML sanitization failed, using raw input: %s", exc)
        return html
