"""Tests for the club backend client and payload normalization."""

from __future__ import annotations

from datetime import date

import aiohttp
import pytest

from edyc_site.api import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    ClubApiClient,
    EventMutation,
    OpenWeatherClient,
    RaceResult,
    RateLimitError,
)
from edyc_site.api._serialization import camelize, decamelize

from .conftest import FakeResponse, FakeSession

BASE = "http://club.test/api"


def _client(*outcomes) -> tuple[ClubApiClient, FakeSession]:
    session = FakeSession(*outcomes)
    return ClubApiClient(session, base_url=BASE + "/"), session


def _ok(data, **extra) -> FakeResponse:
    return FakeResponse(json_data={"success": True, "data": data, **extra})


def _login_response() -> FakeResponse:
    return _ok(
        {
            "token": "jwt-123",
            "user": {"id": "u1", "username": "commodore", "name": "C. Ommodore", "role": "admin"},
        },
        message="Login successful",
    )


# =========================================================================== #
#  1. Serialization
# =========================================================================== #


class TestSerialization:
    def test_decamelize_nested(self):
        assert decamelize({"startDate": "x", "races": [{"yachtClassId": 1}]}) == {
            "start_date": "x",
            "races": [{"yacht_class_id": 1}],
        }

    def test_mixed_spellings_keep_first_non_empty(self):
        assert decamelize({"start_date": None, "startDate": "2024-04-03"}) == {
            "start_date": "2024-04-03"
        }
        assert decamelize({"event_type": "racing", "eventType": "social"}) == {
            "event_type": "racing"
        }

    def test_camelize(self):
        assert camelize({"event_type": "racing", "start_date": "2024-04-03"}) == {
            "eventType": "racing",
            "startDate": "2024-04-03",
        }


# =========================================================================== #
#  2. Events
# =========================================================================== #


class TestEvents:
    @pytest.mark.asyncio
    async def test_get_events_normalizes_both_key_styles(self):
        client, session = _client(
            _ok(
                [
                    {"id": "1", "title": "Regatta", "event_type": "regatta", "start_date": "2024-07-06"},
                    {"id": "2", "title": "Laying-up Supper", "eventType": "social", "startDate": "2024-10-19"},
                ],
                pagination={"page": 1, "limit": 50, "total": 2, "totalPages": 1},
            )
        )

        events = await client.async_get_events(start_date=date(2024, 4, 1), limit=50)

        assert [e.event_type for e in events] == ["regatta", "social"]
        assert [e.start_date for e in events] == ["2024-07-06", "2024-10-19"]
        assert client.last_pagination.total_pages == 1
        call = session.calls[0]
        assert (call.method, call.url) == ("GET", f"{BASE}/events")
        assert call.kwargs["params"] == {"startDate": "2024-04-01", "limit": "50"}
        assert "Authorization" not in call.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_get_event_unwraps_nested_record(self):
        client, _ = _client(_ok({"event": {"id": 7, "title": "Open Day"}}))
        event = await client.async_get_event("7")
        assert event.id == "7"
        assert event.title == "Open Day"

    @pytest.mark.asyncio
    async def test_create_event_requires_login(self):
        client, session = _client()
        with pytest.raises(AuthenticationError):
            await client.async_create_event(
                EventMutation(title="X", event_type="social", start_date="2024-05-01")
            )
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_create_event_sends_camel_case_with_token(self):
        client, session = _client(
            _login_response(),
            _ok({"id": "9", "title": "Cruise in company", "event_type": "cruising"}),
        )
        await client.async_login("commodore", "secret")

        created = await client.async_create_event(
            EventMutation(
                title="Cruise in company",
                event_type="cruising",
                start_date="2024-06-01",
                end_date="2024-06-29",
            )
        )

        assert created.id == "9"
        call = session.calls[1]
        assert call.kwargs["json"] == {
            "title": "Cruise in company",
            "eventType": "cruising",
            "startDate": "2024-06-01",
            "endDate": "2024-06-29",
        }
        assert call.kwargs["headers"]["Authorization"] == "Bearer jwt-123"

    @pytest.mark.asyncio
    async def test_delete_event_no_content(self):
        client, session = _client(FakeResponse(status=204))
        client.restore_token("saved-token")
        await client.async_delete_event("9")
        assert session.calls[0].method == "DELETE"


# =========================================================================== #
#  3. Auth
# =========================================================================== #


class TestAuth:
    @pytest.mark.asyncio
    async def test_login_stores_token(self):
        client, session = _client(_login_response())
        user = await client.async_login("commodore", "secret")

        assert user.username == "commodore"
        assert user.role == "admin"
        assert client.authenticated
        assert client.token == "jwt-123"
        assert session.calls[0].url == f"{BASE}/auth/login"

    @pytest.mark.asyncio
    async def test_bad_credentials(self):
        client, _ = _client(FakeResponse(status=401, json_data={"success": False}))
        with pytest.raises(AuthenticationError):
            await client.async_login("commodore", "wrong")
        assert not client.authenticated

    @pytest.mark.asyncio
    async def test_401_drops_token(self):
        client, _ = _client(FakeResponse(status=401))
        client.restore_token("expired")
        with pytest.raises(AuthenticationError):
            await client.async_get_profile()
        assert not client.authenticated

    @pytest.mark.asyncio
    async def test_logout_clears_token_even_on_error(self):
        client, _ = _client(aiohttp.ClientConnectionError("down"))
        client.restore_token("jwt")
        with pytest.raises(ApiConnectionError):
            await client.async_logout()
        assert client.token is None


# =========================================================================== #
#  4. Error mapping
# =========================================================================== #


class TestErrors:
    @pytest.mark.asyncio
    async def test_connection_error(self):
        client, _ = _client(aiohttp.ClientConnectionError("refused"))
        with pytest.raises(ApiConnectionError):
            await client.async_get_stories()

    @pytest.mark.asyncio
    async def test_timeout(self):
        client, _ = _client(TimeoutError())
        with pytest.raises(ApiConnectionError):
            await client.async_get_events()

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        client, _ = _client(FakeResponse(status=429, headers={"Retry-After": "3"}))
        with pytest.raises(RateLimitError) as exc_info:
            await client.async_get_events()
        assert exc_info.value.retry_after == 3.0

    @pytest.mark.asyncio
    async def test_server_error(self):
        client, _ = _client(FakeResponse(status=500, text="boom"))
        with pytest.raises(ApiResponseError) as exc_info:
            await client.async_get_story("summer-regatta")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_success_false_envelope(self):
        client, _ = _client(
            FakeResponse(json_data={"success": False, "error": "Story not found"})
        )
        with pytest.raises(ApiResponseError, match="Story not found") as exc_info:
            await client.async_get_story("missing")
        assert exc_info.value.status_code is None


# =========================================================================== #
#  5. Stories and races
# =========================================================================== #


class TestStoriesAndRaces:
    @pytest.mark.asyncio
    async def test_stories_filters(self):
        client, session = _client(
            _ok([{"id": "s1", "title": "Prize giving", "storyType": "news", "published": True}])
        )
        stories = await client.async_get_stories(published=True, story_type="news")

        assert stories[0].published is True
        assert session.calls[0].kwargs["params"] == {"published": "true", "type": "news"}

    @pytest.mark.asyncio
    async def test_event_races_with_class(self):
        client, session = _client(
            _ok(
                [
                    {
                        "id": "r1",
                        "event_id": "5",
                        "yacht_class_id": "c1",
                        "race_date": "2024-04-03",
                        "race_number": 1,
                        "yacht_classes": {"id": "c1", "name": "Flying Fifteen"},
                    }
                ]
            )
        )
        races = await client.async_get_event_races("5")

        assert races[0].yacht_class.name == "Flying Fifteen"
        assert session.calls[0].url == f"{BASE}/races/events/5"

    @pytest.mark.asyncio
    async def test_submit_results(self):
        client, session = _client(
            _ok({"results": [{"race_id": "r1", "sail_number": "3811", "position": 1}]})
        )
        client.restore_token("jwt")

        saved = await client.async_submit_race_results(
            "r1", [RaceResult(race_id="r1", sail_number="3811", position=1)]
        )

        assert saved[0].position == 1
        body = session.calls[0].kwargs["json"]
        assert body["results"][0]["sailNumber"] == "3811"
        assert body["results"][0]["dnf"] is False


# =========================================================================== #
#  6. OpenWeatherClient
# =========================================================================== #


class TestOpenWeatherClient:
    @pytest.mark.asyncio
    async def test_query_carries_key_and_units(self):
        session = FakeSession(FakeResponse(json_data={"name": "Killyleagh"}))
        client = OpenWeatherClient("k3y", session)

        payload = await client.async_get_by_location("Killyleagh,GB")

        assert payload == {"name": "Killyleagh"}
        call = session.calls[0]
        assert call.url == "https://api.openweathermap.org/data/2.5/weather"
        assert call.kwargs["params"] == {"q": "Killyleagh,GB", "appid": "k3y", "units": "metric"}

    @pytest.mark.asyncio
    async def test_rejected_key(self):
        client = OpenWeatherClient("bad", FakeSession(FakeResponse(status=401)))
        with pytest.raises(AuthenticationError):
            await client.async_get_by_coordinates(54.4692, -5.6342)

    @pytest.mark.asyncio
    async def test_does_not_close_borrowed_session(self):
        session = FakeSession()
        async with OpenWeatherClient("k", session):
            pass
        assert session.closed is False

    @pytest.mark.asyncio
    async def test_quota_exhausted(self):
        session = FakeSession(FakeResponse(status=429, headers={"Retry-After": "60"}))
        client = OpenWeatherClient("k3y", session)
        with pytest.raises(RateLimitError) as exc_info:
            await client.async_get_by_location("Killyleagh,GB")
        assert exc_info.value.retry_after == 60.0
        assert exc_info.value.status_code == 429
