"""Reduce HTML and JATS markup to plain display text."""

import re

_TAG_RE = re.compile(r"<[^>]*>")
_JATS_TAG_RE = re.compile(r"</?jats:[^>]+>")
_SPACE_RE = re.compile(r"\s+")

_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def collapse_whitespace(text: str) -> str:
    return _SPACE_RE.sub(" ", text).strip()


def strip_html(html: str) -> str:
    """Replace tags with spaces, decode common entities, collapse whitespace."""
    text = _TAG_RE.sub(" ", html)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return collapse_whitespace(text)


def strip_jats(markup: str) -> str:
    """Remove JATS (and any other) tags from a Crossref abstract."""
    text = _JATS_TAG_RE.sub("", markup)
    text = _TAG_RE.sub("", text)
    return collapse_whitespace(text)
