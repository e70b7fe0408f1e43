# =============================================================================
# Response Formatting — Clickable Links
# =============================================================================
#
# The chat widget renders answers as HTML, so bare URLs in model output are
# rewritten into anchor elements that open in a new tab.
#
# DESIGN DECISION: Existing anchors are left untouched.
# Text is split around any <a ...>...</a> element first, and only the text
# between anchors is rewritten. Running the formatter twice therefore gives
# the same result as running it once.
# =============================================================================

from __future__ import annotations

import re

# A URL runs from the scheme up to the first whitespace character.
_URL_RE = re.compile(r"https?://[^\s]+")

# An existing anchor element, including its contents.
_ANCHOR_RE = re.compile(r"<a\b[^>]*>.*?</a\s*>", re.IGNORECASE | re.DOTALL)


def format_links_as_html(text: str) -> str:
    """
    Wrap every bare http(s) URL in ``text`` in an anchor element.

    Example:
        >>> format_links_as_html("Visit https://theicebutcher.com/ today")
        'Visit <a href="https://theicebutcher.com/" target="_blank">https://theicebutcher.com/</a> today'

    Text without URLs is returned unchanged.
    """
    if "http" not in text:
        return text

    parts: list[str] = []
    last_end = 0
    for anchor in _ANCHOR_RE.finditer(text):
        parts.append(_wrap_urls(text[last_end:anchor.start()]))
        parts.append(anchor.group(0))
        last_end = anchor.end()
    parts.append(_wrap_urls(text[last_end:]))
    return "".join(parts)


def _wrap_urls(segment: str) -> str:
    return _URL_RE.sub(
        lambda m: f'<a href="{m.group(0)}" target="_blank">{m.group(0)}</a>',
        segment,
    )
