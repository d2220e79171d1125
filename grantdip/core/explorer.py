"""Assemble a sampled award, its citations and optional summaries."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from grantdip.agents.summarizer import summarize_grant, summarize_outcomes
from grantdip.citations.extractor import extract_all
from grantdip.citations.models import Citation
from grantdip.citations.resolver import resolve_abstracts
from grantdip.core.config import CitationSettings, ExplorerConfig
from grantdip.parsers.markup import strip_html
from grantdip.registry.client import AwardRegistry
from grantdip.registry.models import AwardRecord, SampleRequest
from grantdip.registry.sampler import sample_award

logger = logging.getLogger(__name__)


class GrantReport(BaseModel):
    """Everything shown for one randomly drawn award."""

    award: AwardRecord
    outcomes_report: Optional[str] = None
    publications: list[Citation] = Field(default_factory=list)
    summary: Optional[str] = None
    outcomes_summary: Optional[str] = None


# ── Report Building ──────────────────────────────────────────────────


def build_report(award: AwardRecord, settings: CitationSettings | None = None) -> GrantReport:
    """Clean the outcomes report and parse the award's citations."""
    outcomes = None
    if award.project_outcomes_report:
        outcomes = strip_html(award.project_outcomes_report) or None

    publications = extract_all(award.publication_research, settings)
    logger.info(
        "Award %s: %d of %d citations usable",
        award.id,
        len(publications),
        len(award.publication_research),
    )
    return GrantReport(award=award, outcomes_report=outcomes, publications=publications)


def add_summaries(report: GrantReport, config: ExplorerConfig, session=None) -> GrantReport:
    """Attach grant and outcome summaries. Failed model calls leave them unset."""
    summary = None
    try:
        summary = summarize_grant(report.award, config.summarizer)
    except Exception as exc:
        logger.error("Grant summary failed for %s: %s", report.award.id, exc)

    outcomes_summary = None
    if report.outcomes_report or report.publications:
        abstracts = resolve_abstracts(report.publications, config.resolver, session)
        try:
            outcomes_summary = summarize_outcomes(
                report.award,
                report.outcomes_report,
                report.publications,
                abstracts,
                config.summarizer,
            )
        except Exception as exc:
            logger.error("Outcomes summary failed for %s: %s", report.award.id, exc)

    return report.model_copy(
        update={"summary": summary, "outcomes_summary": outcomes_summary}
    )


# ── Public API ───────────────────────────────────────────────────────


def random_grant_report(
    request: SampleRequest,
    config: ExplorerConfig | None = None,
    registry: AwardRegistry | None = None,
    summarize: bool = False,
) -> GrantReport | None:
    """Draw one award matching ``request`` and build its report, or None."""
    config = config or ExplorerConfig()
    registry = registry or AwardRegistry(config.registry)

    award = sample_award(request, registry, config.registry)
    if award is None:
        logger.warning("No award found for request %s", request.model_dump())
        return None

    report = build_report(award, config.citations)
    if summarize:
        report = add_summaries(report, config)
    return report
