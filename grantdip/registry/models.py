"""Data models for the award registry and sampling requests."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


class AwardRecord(BaseModel):
    """A single award as returned by the registry.

    Field names follow Python conventions; the registry's camelCase keys are
    accepted through aliases. Unknown keys are ignored.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    id: Optional[str] = None
    title: Optional[str] = None
    abstract_text: Optional[str] = Field(default=None, alias="abstractText")
    estimated_total_amt: Optional[str] = Field(default=None, alias="estimatedTotalAmt")
    funds_obligated_amt: Optional[str] = Field(default=None, alias="fundsObligatedAmt")
    awardee_name: Optional[str] = Field(default=None, alias="awardeeName")
    awardee_city: Optional[str] = Field(default=None, alias="awardeeCity")
    awardee_state_code: Optional[str] = Field(default=None, alias="awardeeStateCode")
    pd_pi_name: Optional[str] = Field(default=None, alias="pdPIName")
    pi_email: Optional[str] = Field(default=None, alias="piEmail")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    exp_date: Optional[str] = Field(default=None, alias="expDate")
    date: Optional[str] = None
    trans_type: Optional[str] = Field(default=None, alias="transType")
    program: Optional[str] = None
    dir_abbr: Optional[str] = Field(default=None, alias="dirAbbr")
    div_abbr: Optional[str] = Field(default=None, alias="divAbbr")
    org_long_name: Optional[str] = Field(default=None, alias="orgLongName")
    org_long_name2: Optional[str] = Field(default=None, alias="orgLongName2")
    project_outcomes_report: Optional[str] = Field(
        default=None, alias="projectOutComesReport"
    )
    publication_research: tuple[str, ...] = Field(
        default=(), alias="publicationResearch"
    )
    active_awd: Optional[str] = Field(default=None, alias="activeAwd")

    @field_validator("publication_research", mode="before")
    @classmethod
    def null_publications(cls, v):
        return () if v is None else v


# ── Response Envelope ────────────────────────────────────────────────


class ResponseMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_count: int = Field(default=0, ge=0, alias="totalCount")
    rpp: Optional[int] = None
    offset: Optional[int] = None


class ResponseBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)
    award: list[AwardRecord] = Field(default_factory=list)


class RegistryResponse(BaseModel):
    """The registry's ``{"response": {"metadata": ..., "award": [...]}}`` envelope."""

    model_config = ConfigDict(extra="ignore")

    response: ResponseBody = Field(default_factory=ResponseBody)

    @property
    def total_count(self) -> int:
        return self.response.metadata.total_count

    def first_award(self) -> AwardRecord | None:
        awards = self.response.award
        return awards[0] if awards else None


# ── Sample Request ───────────────────────────────────────────────────


class SampleRequest(BaseModel):
    """Which subpopulation of awards to sample from."""

    model_config = ConfigDict(frozen=True)

    min_amount: Optional[PositiveInt] = None
    status: Literal["any", "active", "completed"] = "any"

    @property
    def has_filter(self) -> bool:
        return self.min_amount is not None or self.status != "any"

    def filter_params(self) -> dict[str, str]:
        """Registry query parameters that restrict results to this subpopulation."""
        params: dict[str, str] = {}
        if self.min_amount is not None:
            params["estimatedTotalAmtFrom"] = str(self.min_amount)
        if self.status == "active":
            params["activeAwards"] = "true"
        elif self.status == "completed":
            params["expiredAwards"] = "true"
        return params
