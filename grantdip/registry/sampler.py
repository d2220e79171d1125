"""Uniform random sampling of awards from the registry.

The registry has no "random record" call, so two strategies are used:

* **By id**: draw ids uniformly from the densely assigned id range and
  look each one up until a non-stub award is found. Only used for
  unfiltered requests because the registry cannot apply filters to an id
  lookup.
* **By offset**: count the filtered population, draw a position uniformly
  within it and fetch exactly that position.

Both fail soft: registry errors are logged and turn into ``None``.
"""

import logging
import math
import secrets

from grantdip.core.config import RegistrySettings
from grantdip.registry.client import AwardRegistry, RegistryError
from grantdip.registry.models import AwardRecord, SampleRequest

logger = logging.getLogger(__name__)

_DRAW_BITS = 32


# ── Uniform Draws ────────────────────────────────────────────────────


def uniform_int(low: int, high: int) -> int:
    """Cryptographically random integer in the inclusive range [low, high].

    A 32-bit value from ``secrets`` is mapped onto [0, 1) and scaled into the
    range, so every draw is independent of earlier ones.
    """
    if high < low:
        raise ValueError(f"Empty range: [{low}, {high}]")
    fraction = secrets.randbits(_DRAW_BITS) / 2**_DRAW_BITS
    return math.floor(fraction * (high - low + 1)) + low


def random_award_id(id_min: int, id_max: int, width: int = 7) -> str:
    """Draw an award id uniformly and format it as the registry does."""
    return str(uniform_int(id_min, id_max)).zfill(width)


# ── Strategy A: Id Guessing ──────────────────────────────────────────


def sample_by_id(registry: AwardRegistry, settings: RegistrySettings) -> AwardRecord | None:
    """Try up to ``max_id_attempts`` random ids; return the first non-stub award.

    Awards whose abstract is not longer than ``min_abstract_length`` are
    skipped, which biases the draw toward fully populated records.
    """
    attempt = 0
    while attempt < settings.max_id_attempts:
        attempt += 1
        award_id = random_award_id(settings.id_min, settings.id_max, settings.id_width)

        try:
            award = registry.fetch_award(award_id)
        except RegistryError as exc:
            logger.warning(
                "Id lookup %s failed (attempt %d/%d): %s",
                award_id,
                attempt,
                settings.max_id_attempts,
                exc,
            )
            continue

        if award is not None and _passes_quality_filter(award, settings):
            logger.info("Found award %s on attempt %d", award.id or award_id, attempt)
            return award

        logger.debug("Id %s is unassigned or a stub record", award_id)

    logger.info("No usable award after %d id attempts", attempt)
    return None


def _passes_quality_filter(award: AwardRecord, settings: RegistrySettings) -> bool:
    abstract = award.abstract_text or ""
    return len(abstract) > settings.min_abstract_length


# ── Strategy B: Offset Sampling ──────────────────────────────────────


def sample_by_offset(
    registry: AwardRegistry,
    request: SampleRequest,
    settings: RegistrySettings,
) -> AwardRecord | None:
    """Fetch the award at a uniformly random position of the filtered results."""
    try:
        total = registry.count_awards(request)
    except RegistryError as exc:
        logger.warning("Award count failed: %s", exc)
        return None

    population = min(total, settings.max_offset)
    if population <= 0:
        logger.info("No awards match %s", request.filter_params() or "the registry")
        return None

    position = uniform_int(0, population - 1)
    logger.info("Sampling position %d of %d (total %d)", position, population, total)

    try:
        return registry.fetch_award_at(position, request)
    except RegistryError as exc:
        logger.warning("Offset lookup at %d failed: %s", position, exc)
        return None


# ── Public API ───────────────────────────────────────────────────────


def sample_award(
    request: SampleRequest,
    registry: AwardRegistry,
    settings: RegistrySettings | None = None,
) -> AwardRecord | None:
    """Return one uniformly sampled award matching ``request``, or None."""
    settings = settings or registry.settings

    if not request.has_filter:
        award = sample_by_id(registry, settings)
        if award is not None:
            return award
        logger.info("Falling back to offset sampling")

    return sample_by_offset(registry, request, settings)
