"""Shared data models for citation extraction and DOI resolution."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Citation(BaseModel):
    """A publication parsed from one raw registry citation string."""

    model_config = ConfigDict(frozen=True)

    year: str = ""
    authors: str = ""
    title: str = ""
    journal: str = ""
    doi: str = ""

    def is_displayable(self, min_length: int = 10) -> bool:
        return len(self.title) > min_length


class PaperMetadata(BaseModel):
    """Bibliographic metadata resolved for a DOI."""

    doi: str
    title: Optional[str] = None
    abstract: Optional[str] = None
    authors: Optional[str] = None
    journal: Optional[str] = None
    year: Optional[int] = None
    url: Optional[str] = None
