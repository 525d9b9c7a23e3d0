# services/api/core/text.py
from __future__ import annotations

import re

_STYLE_BLOCK = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WS = re.compile(r"\s+")


def strip_html(html: str | None) -> str:
    """
    Plain-text view of a note's HTML, used for list previews and search.
    Drops <style> blocks and tags, turns &nbsp; into spaces, collapses whitespace.
    """
    if not html:
        return ""
    text = _STYLE_BLOCK.sub(" ", html)
    text = _TAG.sub(" ", text)
    text = text.replace("&nbsp;", " ")
    return _WS.sub(" ", text).strip()


def note_excerpt(html: str | None, limit: int = 140) -> str:
    text = strip_html(html)
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"
