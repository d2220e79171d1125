"""Explorer configuration: YAML loader and Pydantic settings models."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, PositiveInt, field_validator, model_validator

# Fields requested from the registry for every award lookup.
PRINT_FIELDS = (
    "id",
    "title",
    "abstractText",
    "estimatedTotalAmt",
    "fundsObligatedAmt",
    "awardeeName",
    "awardeeCity",
    "awardeeStateCode",
    "pdPIName",
    "piEmail",
    "startDate",
    "expDate",
    "date",
    "transType",
    "program",
    "dirAbbr",
    "divAbbr",
    "orgLongName",
    "orgLongName2",
    "projectOutComesReport",
    "publicationResearch",
    "activeAwd",
)


# ── Registry ─────────────────────────────────────────────────────────


class RegistrySettings(BaseModel):
    """Where the award registry lives and how it is sampled."""

    base_url: str = "https://www.research.gov/awardapi-service/v1/awards.json"
    timeout: float = Field(default=10.0, gt=0, description="Seconds per HTTP call")
    print_fields: list[str] = Field(default_factory=lambda: list(PRINT_FIELDS))

    # Award ids issued from ~FY2007 onwards densely populate this range.
    id_min: int = Field(default=700000, ge=0)
    id_max: int = Field(default=2600000, ge=0)
    id_width: PositiveInt = 7

    max_id_attempts: PositiveInt = 20
    min_abstract_length: int = Field(
        default=100,
        ge=0,
        description="Abstracts at or below this length are treated as stub records",
    )
    max_offset: PositiveInt = Field(
        default=3000, description="Deepest position the registry will page to"
    )
    offset_base: int = Field(default=1, ge=0, description="Offset of the first match")

    @model_validator(mode="after")
    def valid_id_range(self) -> "RegistrySettings":
        if self.id_min > self.id_max:
            raise ValueError(
                f"id_min ({self.id_min}) must be <= id_max ({self.id_max})"
            )
        return self


# ── Citations ────────────────────────────────────────────────────────


class CitationSettings(BaseModel):
    """Delimiters, thresholds and noise lists for citation extraction."""

    delimiter: str = "~"
    doi_hosts: list[str] = Field(default_factory=lambda: ["doi.org"])
    title_denylist: list[str] = Field(
        default_factory=lambda: ["OSTI"],
        description="Substrings that disqualify a token from the journal-first title scan",
    )
    sentinel_titles: list[str] = Field(default_factory=lambda: ["N", "OSTI"])

    min_title_length: int = Field(default=10, ge=0)
    min_display_length: int = Field(default=10, ge=0)
    title_scan_min_length: int = Field(default=15, ge=0)
    swap_max_title_length: int = 80
    swap_min_authors_length: int = 50

    @field_validator("delimiter")
    @classmethod
    def non_empty_delimiter(cls, v: str) -> str:
        if not v:
            raise ValueError("Citation delimiter must not be empty")
        return v


# ── Resolver & Summaries ─────────────────────────────────────────────


class ResolverSettings(BaseModel):
    """Crossref works endpoint used to look up DOIs."""

    base_url: str = "https://api.crossref.org/works"
    timeout: float = Field(default=10.0, gt=0)
    user_agent: str = "GrantDip/1.0 (mailto:contact@example.com)"


class SummarizerSettings(BaseModel):
    """Local model used for plain-language summaries."""

    model: str = "qwen3:8b"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)


# ── Top-level ────────────────────────────────────────────────────────


class ExplorerConfig(BaseModel):
    """All settings for one explorer run."""

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    citations: CitationSettings = Field(default_factory=CitationSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    summarizer: SummarizerSettings = Field(default_factory=SummarizerSettings)


def load_config(path: str | Path) -> ExplorerConfig:
    """Load a YAML config from disk and return a validated model.

    An empty file yields the defaults.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)
    return ExplorerConfig.model_validate(raw or {})
