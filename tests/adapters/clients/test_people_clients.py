from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from casenotes.adapters.prisons import PrisonApiClient, PrisonerSearchApiClient
from casenotes.adapters.users import ManageUsersClient
from casenotes.config.apis import get_prison_api_config
from casenotes.domain.model import PrisonerDetails, PrisonSwitch
from tests.helpers.http import make_client_factory, resilience_config

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def test_user_details_are_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/users/JSMITH":
            return httpx.Response(
                200,
                json={
                    "username": "JSMITH",
                    "active": True,
                    "name": "John Smith",
                    "authSource": "nomis",
                    "userId": "1001",
                    "activeCaseLoadId": "MDI",
                },
            )
        return httpx.Response(404)

    client = ManageUsersClient(
        resilience=resilience_config("users"), client_factory=make_client_factory(handler)
    )

    user = client.get_user_details("JSMITH")

    assert user is not None
    assert user.name == "John Smith"
    assert user.user_id == "1001"
    assert user.active_case_load_id == "MDI"
    assert client.get_user_details("NOBODY") is None


def test_prisoner_lookup() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/prisoner/A1234AA":
            return httpx.Response(
                200, json={"prisonerNumber": "A1234AA", "prisonId": "MDI", "firstName": "JOHN"}
            )
        return httpx.Response(404)

    client = PrisonerSearchApiClient(
        resilience=resilience_config("search"), client_factory=make_client_factory(handler)
    )

    assert client.get_prisoner("A1234AA") == PrisonerDetails(
        prisoner_number="A1234AA", prison_id="MDI"
    )
    assert client.get_prisoner("Z9999ZZ") is None


def test_prison_switches() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(
            200,
            json=[
                {"prisonId": "MDI", "prison": "Moorland"},
                {"prisonId": "LEI", "prison": "Leeds"},
            ],
        )

    client = PrisonApiClient(
        resilience=resilience_config("prison-api"), client_factory=make_client_factory(handler)
    )

    moorland = PrisonSwitch(prison_code="MDI", description="Moorland")
    assert client.get_prison_switches()[0] == moorland
    assert client.alert_case_notes_for("LEI")
    assert not client.alert_case_notes_for("BXI")
    assert set(paths) == {"/api/agency-switches/ALERTS_CASE_NOTES"}


def test_all_prisons_switch_enables_every_prison() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, json=[{"prisonId": "*ALL*", "prison": "All prisons"}])

    client = PrisonApiClient(
        resilience=resilience_config("prison-api"), client_factory=make_client_factory(handler)
    )

    assert client.alert_case_notes_for("BXI")


def test_unknown_service_has_no_switches() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(404)

    client = PrisonApiClient(
        resilience=resilience_config("prison-api"), client_factory=make_client_factory(handler)
    )

    assert client.get_prison_switches() == []
    assert not client.alert_case_notes_for("MDI")


def test_switches_are_cached_between_clients(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("PRISON_API_URL", "https://prison-api.example")
    monkeypatch.setenv("CASENOTES_DATA_DIR", str(tmp_path))
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=[{"prisonId": "MDI", "prison": "Moorland"}])

    client = PrisonApiClient(
        resilience=get_prison_api_config().resilience,
        client_factory=make_client_factory(handler),
    )

    assert client.alert_case_notes_for("MDI")
    assert not client.alert_case_notes_for("LEI")
    assert paths == ["/api/agency-switches/ALERTS_CASE_NOTES"]
    assert (tmp_path / "http_cache.db").exists()
