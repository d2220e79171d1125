"""Best-effort parsing of delimiter-separated registry citation strings.

Registry citations arrive as strings such as::

    2019~Jane Doe and John Smith~10.1000/xyz123~A Study of Something~
    Nature~2021~5~A. Author and B. Author~A Long Meaningful Title~

Field order varies between records, so parsing works in stages: scan the
tokens for a DOI and a year, detect which layout the string uses, apply
that layout's field rule, then run the shared clean-up passes (author/title
swap, title rejection, author e-mail removal).
"""

import logging
import re
from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from grantdip.citations.models import Citation
from grantdip.core.config import CitationSettings

logger = logging.getLogger(__name__)

_DOI_URL = "https://doi.org/"
_DOI_PREFIX_RE = re.compile(r"^10\.[0-9]+/")
_EMBEDDED_DOI_RE = re.compile(r"10\.[0-9]+/.*")
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_YEAR_RE = re.compile(r"[0-9]{4}")
_DIGITS_RE = re.compile(r"[0-9]+")
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")
_CAPITALIZED_RE = re.compile(r"^[A-Z][a-z]+")
_EMAIL_RE = re.compile(r"\s+\S+@\S+")

_AUTHOR_JOINER = " and "
_YEAR_SCAN_DEPTH = 4

_DEFAULT_SETTINGS = CitationSettings()


# ── Token Scan ───────────────────────────────────────────────────────


class TokenScan(BaseModel):
    """Trimmed tokens of one raw citation plus the positions of DOI and year."""

    model_config = ConfigDict(frozen=True)

    tokens: tuple[str, ...]
    doi: str = ""
    doi_index: Optional[int] = None
    year: str = ""
    year_index: Optional[int] = None

    def token(self, index: int) -> str:
        """Token at ``index``, or an empty string past the end."""
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return ""


def scan_tokens(raw: str, settings: CitationSettings) -> TokenScan:
    """Split ``raw`` and locate the first DOI and the first leading year."""
    tokens = tuple(part.strip() for part in raw.split(settings.delimiter))

    doi, doi_index = "", None
    for i, token in enumerate(tokens):
        if looks_like_doi(token, settings):
            doi, doi_index = normalize_doi(token, settings), i
            break

    year, year_index = "", None
    for i, token in enumerate(tokens[:_YEAR_SCAN_DEPTH]):
        if _YEAR_RE.fullmatch(token):
            year, year_index = token, i
            break

    return TokenScan(
        tokens=tokens,
        doi=doi,
        doi_index=doi_index,
        year=year,
        year_index=year_index,
    )


def looks_like_doi(token: str, settings: CitationSettings) -> bool:
    if any(host in token for host in settings.doi_hosts):
        return True
    return bool(_DOI_PREFIX_RE.match(token))


def normalize_doi(token: str, settings: CitationSettings) -> str:
    """Turn a bare DOI or schemeless resolver link into a full URL."""
    if _URL_RE.match(token):
        return token
    if any(host in token for host in settings.doi_hosts):
        # dx.doi.org/10.1/x, www.doi.org/10.1/x, ...
        embedded = _EMBEDDED_DOI_RE.search(token)
        if embedded:
            return f"{_DOI_URL}{embedded.group(0)}"
        return f"https://{token}"
    return f"{_DOI_URL}{token}"


# ── Layout Detection ─────────────────────────────────────────────────


class CitationLayout(str, Enum):
    """Known field orders of registry citation strings."""

    YEAR_FIRST = "year_first"  # Year~Authors~DOI?~Title~...
    JOURNAL_FIRST = "journal_first"  # Journal~Year~Authors~...~Title~...
    JOURNAL_VOLUME_FIRST = "journal_volume_first"  # Journal~Year~Volume~Authors~...


def detect_layout(scan: TokenScan) -> CitationLayout:
    if _YEAR_RE.fullmatch(scan.token(0)):
        return CitationLayout.YEAR_FIRST

    if scan.year_index is not None:
        after_year = scan.token(scan.year_index + 1)
        if _DIGITS_RE.fullmatch(after_year) and scan.token(scan.year_index + 2):
            return CitationLayout.JOURNAL_VOLUME_FIRST

    return CitationLayout.JOURNAL_FIRST


# ── Layout Rules ─────────────────────────────────────────────────────


def _year_first_fields(scan: TokenScan, settings: CitationSettings) -> dict[str, str]:
    title = ""
    if scan.doi_index is not None and scan.token(scan.doi_index + 1):
        title = scan.token(scan.doi_index + 1)
    elif scan.token(3):
        title = scan.token(3)
    elif not _is_identifier(scan.token(2), settings):
        title = scan.token(2)

    return {"year": scan.token(0), "authors": scan.token(1), "title": title}


def _journal_first_fields(scan: TokenScan, settings: CitationSettings) -> dict[str, str]:
    fields = {"journal": scan.token(0)}
    if scan.year_index is None or not scan.token(scan.year_index + 1):
        return fields

    fields["authors"] = scan.token(scan.year_index + 1)
    fields["title"] = _scan_for_title(scan, scan.year_index + 2, settings)
    return fields


def _journal_volume_first_fields(
    scan: TokenScan, settings: CitationSettings
) -> dict[str, str]:
    # detect_layout guarantees a year followed by volume and authors
    return {
        "journal": scan.token(0),
        "authors": scan.token(scan.year_index + 2),
        "title": _scan_for_title(scan, scan.year_index + 3, settings),
    }


LAYOUT_RULES: dict[CitationLayout, Callable[[TokenScan, CitationSettings], dict[str, str]]] = {
    CitationLayout.YEAR_FIRST: _year_first_fields,
    CitationLayout.JOURNAL_FIRST: _journal_first_fields,
    CitationLayout.JOURNAL_VOLUME_FIRST: _journal_volume_first_fields,
}


def _scan_for_title(scan: TokenScan, start: int, settings: CitationSettings) -> str:
    """First token from ``start`` on that plausibly holds a title."""
    for token in scan.tokens[start:]:
        if len(token) <= settings.title_scan_min_length:
            continue
        if looks_like_doi(token, settings) or _DIGITS_RE.fullmatch(token):
            continue
        if any(marker in token for marker in settings.title_denylist):
            continue
        return token
    return ""


def _is_identifier(token: str, settings: CitationSettings) -> bool:
    return looks_like_doi(token, settings) or "doi" in token.lower()


# ── Clean-up Passes ──────────────────────────────────────────────────


def _swap_if_transposed(
    title: str, authors: str, settings: CitationSettings
) -> tuple[str, str]:
    """Swap title and authors when the title reads like an author list."""
    title_is_names = (
        len(title) < settings.swap_max_title_length
        and _AUTHOR_JOINER in title
        and bool(_CAPITALIZED_RE.match(title))
    )
    authors_is_prose = (
        len(authors) > settings.swap_min_authors_length
        and _AUTHOR_JOINER not in authors
    )
    if title and title_is_names and authors_is_prose:
        return authors, title
    return title, authors


def _reject_title(title: str, settings: CitationSettings) -> str:
    if (
        _DIGITS_RE.fullmatch(title)
        or title in settings.sentinel_titles
        or len(title) < settings.min_title_length
        or _DATE_RE.match(title)
    ):
        return ""
    return title


def _clean_authors(authors: str) -> str:
    return _EMAIL_RE.sub("", authors).strip()


# ── Public API ───────────────────────────────────────────────────────


def extract(raw: str, settings: CitationSettings | None = None) -> Citation:
    """Parse one raw citation string into a Citation.

    Never raises; unparseable input yields a Citation with an empty title.
    """
    settings = settings or _DEFAULT_SETTINGS
    scan = scan_tokens(raw, settings)
    layout = detect_layout(scan)
    fields = LAYOUT_RULES[layout](scan, settings)

    title, authors = _swap_if_transposed(
        fields.get("title", ""), fields.get("authors", ""), settings
    )

    return Citation(
        year=fields.get("year") or scan.year,
        authors=_clean_authors(authors),
        title=_reject_title(title, settings),
        journal=fields.get("journal", ""),
        doi=scan.doi,
    )


def extract_all(
    raws: Iterable[str], settings: CitationSettings | None = None
) -> list[Citation]:
    """Parse every raw citation, keeping input order and dropping untitled ones."""
    settings = settings or _DEFAULT_SETTINGS
    parsed = [extract(raw, settings) for raw in raws]
    kept = [c for c in parsed if c.is_displayable(settings.min_display_length)]
    if len(kept) < len(parsed):
        logger.debug("Dropped %d of %d citations without a usable title",
                     len(parsed) - len(kept), len(parsed))
    return kept
