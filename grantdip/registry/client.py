"""HTTP client for the NSF award registry."""

import logging

import requests
from pydantic import ValidationError

from grantdip.core.config import RegistrySettings
from grantdip.registry.models import AwardRecord, RegistryResponse, SampleRequest

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """The registry could not be reached or returned an unusable response."""


class AwardRegistry:
    """Lookup-by-id and lookup-by-offset access to the award registry."""

    def __init__(self, settings: RegistrySettings | None = None, session=None):
        self.settings = settings or RegistrySettings()
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # ── Public API ───────────────────────────────────────────────

    def fetch_award(self, award_id: str) -> AwardRecord | None:
        """Return the award with this id, or None if the id is unassigned."""
        envelope = self._get(
            {"id": award_id, "printFields": self._print_fields()}
        )
        return envelope.first_award()

    def count_awards(self, request: SampleRequest) -> int:
        """Total number of awards matching the request's filters."""
        envelope = self._get({"rpp": "1", **request.filter_params()})
        return envelope.total_count

    def fetch_award_at(self, position: int, request: SampleRequest) -> AwardRecord | None:
        """Return the award at a zero-based position within the filtered results."""
        params = {
            "rpp": "1",
            "offset": str(position + self.settings.offset_base),
            **request.filter_params(),
            "printFields": self._print_fields(),
        }
        return self._get(params).first_award()

    # ── HTTP ─────────────────────────────────────────────────────

    def _print_fields(self) -> str:
        return ",".join(self.settings.print_fields)

    def _get(self, params: dict[str, str]) -> RegistryResponse:
        try:
            response = self.session.get(
                self.settings.base_url,
                params=params,
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RegistryError(f"Registry request failed: {exc}") from exc

        try:
            return RegistryResponse.model_validate(payload)
        except ValidationError as exc:
            raise RegistryError(f"Malformed registry response: {exc}") from exc
