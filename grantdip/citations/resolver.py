"""Crossref lookups for DOIs found in registry citations."""

import logging
import re
from urllib.parse import quote

import requests
from pydantic import ValidationError

from grantdip.citations.models import Citation, PaperMetadata
from grantdip.core.config import ResolverSettings
from grantdip.parsers.markup import strip_jats

logger = logging.getLogger(__name__)

_DOI_URL_RE = re.compile(r"^(https?://)?((dx|www)\.)?doi\.org/", re.IGNORECASE)


# ── Public API ───────────────────────────────────────────────────────


def bare_doi(doi: str) -> str:
    """Strip any resolver prefix, e.g. ``https://doi.org/10.1/x`` -> ``10.1/x``."""
    return _DOI_URL_RE.sub("", doi.strip())


def resolve_doi(
    doi: str,
    settings: ResolverSettings | None = None,
    session=None,
) -> PaperMetadata | None:
    """Look up a DOI on Crossref. Returns None if it cannot be resolved."""
    settings = settings or ResolverSettings()
    http = session or requests
    doi_id = bare_doi(doi)
    if not doi_id:
        return None

    url = f"{settings.base_url.rstrip('/')}/{quote(doi_id, safe='')}"
    try:
        response = http.get(
            url,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.user_agent,
            },
            timeout=settings.timeout,
        )
        response.raise_for_status()
        message = response.json().get("message") or {}
    except (requests.RequestException, ValueError, AttributeError) as exc:
        logger.warning("Crossref lookup for %s failed: %s", doi_id, exc)
        return None

    try:
        return _parse_message(doi_id, message)
    except (AttributeError, TypeError, ValidationError) as exc:
        logger.warning("Unusable Crossref record for %s: %s", doi_id, exc)
        return None


def resolve_abstracts(
    citations: list[Citation],
    settings: ResolverSettings | None = None,
    session=None,
) -> dict[str, str]:
    """Map each citation DOI to its resolved abstract, where Crossref has one."""
    abstracts: dict[str, str] = {}
    for citation in citations:
        if not citation.doi or citation.doi in abstracts:
            continue
        paper = resolve_doi(citation.doi, settings, session)
        if paper and paper.abstract:
            abstracts[citation.doi] = paper.abstract
    logger.info("Resolved %d abstracts for %d citations", len(abstracts), len(citations))
    return abstracts


# ── Message → PaperMetadata ──────────────────────────────────────────


def _parse_message(doi_id: str, message: dict) -> PaperMetadata:
    """Convert a Crossref ``message`` object into PaperMetadata."""
    abstract = message.get("abstract")
    if abstract:
        abstract = strip_jats(abstract) or None

    names = []
    for author in message.get("author") or []:
        name = f"{author.get('given') or ''} {author.get('family') or ''}".strip()
        if name:
            names.append(name)

    year = None
    date_parts = (message.get("published") or {}).get("date-parts") or []
    if date_parts and date_parts[0]:
        try:
            year = int(date_parts[0][0])
        except (TypeError, ValueError):
            pass

    return PaperMetadata(
        doi=doi_id,
        title=_first(message.get("title")),
        abstract=abstract,
        authors=", ".join(names) or None,
        journal=_first(message.get("container-title")),
        year=year,
        url=message.get("URL"),
    )


def _first(values: list | None) -> str | None:
    return values[0] if values else None
