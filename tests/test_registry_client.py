"""Tests for the award registry HTTP client and its models."""

from unittest.mock import MagicMock

import pytest
import requests

from grantdip.core.config import RegistrySettings
from grantdip.registry.client import AwardRegistry, RegistryError
from grantdip.registry.models import AwardRecord, RegistryResponse, SampleRequest
from grantdip.registry.sampler import sample_award

AWARD_JSON = {
    "id": "1846567",
    "title": "CAREER: Protein Folding in Crowded Cells",
    "abstractText": "Proteins fold inside crowded cells. " * 5,
    "estimatedTotalAmt": "550000",
    "fundsObligatedAmt": 550000,
    "awardeeName": "Example University",
    "pdPIName": "Jane Doe",
    "publicationResearch": [
        "2019~Jane Doe and John Smith~10.1000/xyz123~A Study of Something Important~"
    ],
    "projectOutComesReport": "<p>We learned things.</p>",
    "activeAwd": "false",
    "someNewField": "ignored",
}


# ── Helpers ──────────────────────────────────────────────────────────


def _response(payload=None, status_error=None, json_error=None):
    resp = MagicMock()
    if status_error:
        resp.raise_for_status.side_effect = status_error
    if json_error:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


def _envelope(awards=(), total=None):
    body = {"award": list(awards)}
    if total is not None:
        body["metadata"] = {"totalCount": total, "rpp": 1, "offset": 1}
    return {"response": body}


def _client(*responses, settings=None):
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = list(responses)
    return AwardRegistry(settings or RegistrySettings(), session=session), session


# ── Models ───────────────────────────────────────────────────────────


def test_award_record_from_registry_json():
    award = AwardRecord.model_validate(AWARD_JSON)
    assert award.id == "1846567"
    assert award.abstract_text.startswith("Proteins fold")
    assert award.funds_obligated_amt == "550000"
    assert award.pd_pi_name == "Jane Doe"
    assert len(award.publication_research) == 1


def test_award_record_is_immutable():
    award = AwardRecord.model_validate(AWARD_JSON)
    with pytest.raises(Exception):
        award.title = "Changed"


def test_award_record_null_publications():
    award = AwardRecord.model_validate({"id": "1", "publicationResearch": None})
    assert award.publication_research == ()


def test_envelope_defaults():
    envelope = RegistryResponse.model_validate({"response": {}})
    assert envelope.total_count == 0
    assert envelope.first_award() is None


def test_sample_request_filters():
    assert SampleRequest().has_filter is False
    assert SampleRequest().filter_params() == {}
    assert SampleRequest(status="active").filter_params() == {"activeAwards": "true"}
    assert SampleRequest(min_amount=250000, status="completed").filter_params() == {
        "estimatedTotalAmtFrom": "250000",
        "expiredAwards": "true",
    }


def test_sample_request_rejects_non_positive_amount():
    with pytest.raises(Exception):
        SampleRequest(min_amount=0)


# ── Lookups ──────────────────────────────────────────────────────────


def test_fetch_award_by_id():
    client, session = _client(_response(_envelope([AWARD_JSON])))
    award = client.fetch_award("1846567")

    assert award.id == "1846567"
    _, kwargs = session.get.call_args
    assert kwargs["params"]["id"] == "1846567"
    assert "publicationResearch" in kwargs["params"]["printFields"]
    assert kwargs["timeout"] == 10.0
    assert session.headers["Accept"] == "application/json"


def test_fetch_award_unassigned_id():
    client, _ = _client(_response(_envelope([])))
    assert client.fetch_award("0000001") is None


def test_count_awards_uses_filters():
    client, session = _client(_response(_envelope(total=4321)))
    total = client.count_awards(SampleRequest(min_amount=1000, status="active"))

    assert total == 4321
    params = session.get.call_args.kwargs["params"]
    assert params == {"rpp": "1", "estimatedTotalAmtFrom": "1000", "activeAwards": "true"}


def test_fetch_award_at_shifts_to_registry_offset():
    client, session = _client(_response(_envelope([AWARD_JSON], total=10)))
    award = client.fetch_award_at(0, SampleRequest(status="completed"))

    assert award.id == "1846567"
    params = session.get.call_args.kwargs["params"]
    assert params["offset"] == "1"
    assert params["rpp"] == "1"
    assert params["expiredAwards"] == "true"
    assert "printFields" in params


# ── Failures ─────────────────────────────────────────────────────────


def test_http_error_raises_registry_error():
    client, _ = _client(_response(status_error=requests.HTTPError("503")))
    with pytest.raises(RegistryError):
        client.fetch_award("1")


def test_timeout_raises_registry_error():
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = requests.Timeout("slow")
    client = AwardRegistry(session=session)
    with pytest.raises(RegistryError):
        client.count_awards(SampleRequest())


def test_invalid_json_raises_registry_error():
    client, _ = _client(_response(json_error=ValueError("not json")))
    with pytest.raises(RegistryError):
        client.fetch_award("1")


def test_malformed_envelope_raises_registry_error():
    client, _ = _client(_response({"response": {"award": "not-a-list"}}))
    with pytest.raises(RegistryError):
        client.fetch_award("1")


def test_sampler_survives_flaky_registry():
    """Failed id lookups are retried with fresh ids."""
    client, session = _client(
        _response(status_error=requests.HTTPError("500")),
        _response(_envelope([])),
        _response(_envelope([AWARD_JSON])),
    )
    award = sample_award(SampleRequest(), client)
    assert award.id == "1846567"
    assert session.get.call_count == 3


# ── Live Registry ────────────────────────────────────────────────────


@pytest.mark.network
def test_live_count_completed_awards():
    assert AwardRegistry().count_awards(SampleRequest(status="completed")) > 0


@pytest.mark.network
def test_live_random_award():
    award = sample_award(SampleRequest(), AwardRegistry())
    assert award is not None
    assert award.title
