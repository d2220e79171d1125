"""Plain-language grant and outcome summaries using a local model via Ollama."""

import logging

import ollama

from grantdip.citations.models import Citation
from grantdip.core.config import SummarizerSettings
from grantdip.registry.models import AwardRecord

logger = logging.getLogger(__name__)

GRANT_SYSTEM_PROMPT = (
    "You are a science communicator who explains complex research to educated "
    "lay audiences. Your explanations are clear, engaging, and accurate. You "
    "avoid jargon and use analogies when helpful. Keep responses concise but "
    "informative, around 2-3 paragraphs."
)

OUTCOMES_SYSTEM_PROMPT = (
    "You are a science communicator who summarizes research outcomes for the "
    "general public. Be clear about what was actually accomplished and "
    "discovered. Be honest if outcomes seem limited. Keep responses concise, "
    "around 3-4 paragraphs."
)


# ── Prompt Builders ──────────────────────────────────────────────────


def build_grant_prompt(award: AwardRecord) -> str:
    return f"""Please explain this NSF research grant in plain language for an educated person who isn't a specialist in this field.

**Grant Title:** {award.title or "Untitled"}

**Abstract:**
{award.abstract_text or "No abstract available."}

Explain:
1. What problem or question is this research addressing?
2. What approach are the researchers taking?
3. Why does this matter - what could be the broader impact?"""


def format_publications(
    publications: list[Citation],
    abstracts: dict[str, str] | None = None,
) -> str:
    """Numbered publication list, with abstracts keyed by DOI where known."""
    if not publications:
        return "No publications listed yet."

    abstracts = abstracts or {}
    entries: list[str] = []
    for i, pub in enumerate(publications, 1):
        entry = f'{i}. "{pub.title}"'
        if pub.authors:
            entry += f"\n   Authors: {pub.authors}"
        if pub.journal:
            entry += f"\n   Journal: {pub.journal}"
        if pub.year:
            entry += f" ({pub.year})"
        if pub.doi and abstracts.get(pub.doi):
            entry += f"\n   Abstract: {abstracts[pub.doi]}"
        entries.append(entry)
    return "\n\n".join(entries)


def build_outcomes_prompt(
    award: AwardRecord,
    outcomes_text: str | None,
    publications: list[Citation],
    abstracts: dict[str, str] | None = None,
) -> str:
    pubs_text = format_publications(publications, abstracts)
    return f"""Please summarize the outcomes and impact of this NSF research grant for an educated lay audience.

**Grant Title:** {award.title or "Untitled"}

**Project Outcomes Report:**
{outcomes_text or "No outcomes report available yet."}

**Publications from this grant (with abstracts where available):**
{pubs_text}

Based on the project outcomes report and the publication abstracts above, please summarize:
1. What did this research actually accomplish? What were the key findings?
2. What new knowledge or discoveries came from it?
3. What is the significance and potential impact of this work?"""


# ── Model Calls ──────────────────────────────────────────────────────


def generate_summary(
    system_prompt: str,
    user_prompt: str,
    settings: SummarizerSettings | None = None,
) -> str:
    """One system + user exchange with the model; returns the reply text."""
    settings = settings or SummarizerSettings()
    response = ollama.chat(
        model=settings.model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        options={"temperature": settings.temperature},
        think=False,
    )
    return (response.message.content or "").strip()


def summarize_grant(award: AwardRecord, settings: SummarizerSettings | None = None) -> str:
    """Explain what the award funds, in plain language."""
    logger.info("Summarizing grant %s", award.id)
    return generate_summary(GRANT_SYSTEM_PROMPT, build_grant_prompt(award), settings)


def summarize_outcomes(
    award: AwardRecord,
    outcomes_text: str | None,
    publications: list[Citation],
    abstracts: dict[str, str] | None = None,
    settings: SummarizerSettings | None = None,
) -> str:
    """Summarize what the award produced from its report and publications."""
    logger.info(
        "Summarizing outcomes of grant %s (%d publications)", award.id, len(publications)
    )
    prompt = build_outcomes_prompt(award, outcomes_text, publications, abstracts)
    return generate_summary(OUTCOMES_SYSTEM_PROMPT, prompt, settings)
