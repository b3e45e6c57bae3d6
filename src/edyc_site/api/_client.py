"""Club backend REST client."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

import aiohttp

from ._auth import ClubAuth
from ._serialization import camelize, decamelize
from .const import (
    AUTH_PROFILE_ENDPOINT,
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_API_URL,
    EVENT_DETAIL_ENDPOINT,
    EVENT_RACES_ENDPOINT,
    EVENTS_ENDPOINT,
    RACE_RESULTS_ENDPOINT,
    STORIES_ENDPOINT,
    STORY_DETAIL_ENDPOINT,
)
from .exceptions import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    RateLimitError,
)
from .models import (
    EventMutation,
    EventRecord,
    Pagination,
    Race,
    RaceMutation,
    RaceResult,
    Story,
    StoryMutation,
    User,
)


class ClubApiClient:
    """Async client for the yacht club backend.

    Usage::

        async with aiohttp.ClientSession() as session:
            client = ClubApiClient(session, base_url="https://edyc.example/api")
            events = await client.async_get_events(limit=50)

    Reading events, stories and race results is public; creating, editing
    and deleting them needs ``async_login()`` first.

    If no session is provided, the client creates and manages its own.
    The caller is responsible for calling ``async_close()`` when done
    (or use the client as an async context manager).
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_API_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_session = session is None
        self._session = session or aiohttp.ClientSession()
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._auth = ClubAuth(self._session, self._base_url, self._timeout)
        self.last_pagination: Pagination | None = None

    async def __aenter__(self) -> ClubApiClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.async_close()

    @property
    def authenticated(self) -> bool:
        """Whether the client holds a bearer token."""
        return self._auth.is_authenticated

    @property
    def token(self) -> str | None:
        """The current bearer token, for the caller to persist."""
        return self._auth.token

    def restore_token(self, token: str | None) -> None:
        """Reuse a token saved from an earlier session."""
        self._auth.restore_token(token)

    # ------------------------------------------------------------------ #
    #  Authentication
    # ------------------------------------------------------------------ #

    async def async_login(self, username: str, password: str) -> User:
        """Log in to the admin console.

        Raises:
            AuthenticationError: On invalid credentials.
            ApiConnectionError: If the server is unreachable.
        """
        return await self._auth.login(username, password)

    async def async_logout(self) -> None:
        """Log out and forget the bearer token."""
        await self._auth.logout()

    async def async_get_profile(self) -> User:
        """Fetch the logged-in admin's profile.

        Raises:
            AuthenticationError: If the token has expired.
        """
        data = await self._request("GET", AUTH_PROFILE_ENDPOINT, auth_required=True)
        user_data = data.get("user", data) if isinstance(data, dict) else data
        return User.from_api_response(user_data)

    async def async_close(self) -> None:
        """Close the HTTP session if the client owns it."""
        if self._owns_session:
            await self._session.close()

    # ------------------------------------------------------------------ #
    #  Events
    # ------------------------------------------------------------------ #

    async def async_get_events(
        self,
        *,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        event_type: str | None = None,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[EventRecord]:
        """Fetch events, optionally filtered by date range and type.

        The pagination block of the response is kept in ``last_pagination``.
        """
        params = _query_params(
            startDate=start_date,
            endDate=end_date,
            type=event_type,
            search=search,
            page=page,
            limit=limit,
        )
        data = await self._request("GET", EVENTS_ENDPOINT, params=params)
        return [EventRecord.from_api_response(e) for e in _as_list(data, "events")]

    async def async_get_event(self, event_id: str) -> EventRecord:
        """Fetch a single event."""
        url = EVENT_DETAIL_ENDPOINT.format(event_id=event_id)
        data = await self._request("GET", url)
        return EventRecord.from_api_response(_unwrap(data, "event"))

    async def async_create_event(self, event: EventMutation) -> EventRecord:
        """Create a new event."""
        data = await self._request(
            "POST", EVENTS_ENDPOINT, json_body=event.to_api_dict(), auth_required=True
        )
        return EventRecord.from_api_response(_unwrap(data, "event"))

    async def async_update_event(
        self,
        event_id: str,
        event: EventMutation,
    ) -> EventRecord:
        """Update an existing event."""
        url = EVENT_DETAIL_ENDPOINT.format(event_id=event_id)
        data = await self._request(
            "PUT", url, json_body=event.to_api_dict(), auth_required=True
        )
        return EventRecord.from_api_response(_unwrap(data, "event"))

    async def async_delete_event(self, event_id: str) -> None:
        """Delete an event."""
        url = EVENT_DETAIL_ENDPOINT.format(event_id=event_id)
        await self._request("DELETE", url, auth_required=True)

    # ------------------------------------------------------------------ #
    #  Stories
    # ------------------------------------------------------------------ #

    async def async_get_stories(
        self,
        *,
        published: bool | None = None,
        story_type: str | None = None,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Story]:
        """Fetch news stories."""
        params = _query_params(
            published=published,
            type=story_type,
            search=search,
            page=page,
            limit=limit,
        )
        data = await self._request("GET", STORIES_ENDPOINT, params=params)
        return [Story.from_api_response(s) for s in _as_list(data, "stories")]

    async def async_get_story(self, story_id: str) -> Story:
        """Fetch a single story by id or slug."""
        url = STORY_DETAIL_ENDPOINT.format(story_id=story_id)
        data = await self._request("GET", url)
        return Story.from_api_response(_unwrap(data, "story"))

    async def async_create_story(self, story: StoryMutation) -> Story:
        """Create a new story."""
        data = await self._request(
            "POST", STORIES_ENDPOINT, json_body=story.to_api_dict(), auth_required=True
        )
        return Story.from_api_response(_unwrap(data, "story"))

    async def async_update_story(self, story_id: str, story: StoryMutation) -> Story:
        """Update an existing story."""
        url = STORY_DETAIL_ENDPOINT.format(story_id=story_id)
        data = await self._request(
            "PUT", url, json_body=story.to_api_dict(), auth_required=True
        )
        return Story.from_api_response(_unwrap(data, "story"))

    async def async_delete_story(self, story_id: str) -> None:
        """Delete a story."""
        url = STORY_DETAIL_ENDPOINT.format(story_id=story_id)
        await self._request("DELETE", url, auth_required=True)

    # ------------------------------------------------------------------ #
    #  Races
    # ------------------------------------------------------------------ #

    async def async_get_event_races(self, event_id: str) -> list[Race]:
        """Fetch the races sailed under an event."""
        url = EVENT_RACES_ENDPOINT.format(event_id=event_id)
        data = await self._request("GET", url)
        return [Race.from_api_response(r) for r in _as_list(data, "races")]

    async def async_create_race(self, event_id: str, race: RaceMutation) -> Race:
        """Add a race to an event."""
        url = EVENT_RACES_ENDPOINT.format(event_id=event_id)
        data = await self._request(
            "POST", url, json_body=race.to_api_dict(), auth_required=True
        )
        return Race.from_api_response(_unwrap(data, "race"))

    async def async_get_race_results(self, race_id: str) -> list[RaceResult]:
        """Fetch the results of a race, in finishing order."""
        url = RACE_RESULTS_ENDPOINT.format(race_id=race_id)
        data = await self._request("GET", url)
        return [RaceResult.from_api_response(r) for r in _as_list(data, "results")]

    async def async_submit_race_results(
        self,
        race_id: str,
        results: Iterable[RaceResult],
    ) -> list[RaceResult]:
        """Replace the results of a race."""
        url = RACE_RESULTS_ENDPOINT.format(race_id=race_id)
        body = {"results": [r.to_api_dict() for r in results]}
        data = await self._request("POST", url, json_body=body, auth_required=True)
        return [RaceResult.from_api_response(r) for r in _as_list(data, "results")]

    # ------------------------------------------------------------------ #
    #  Internal HTTP layer
    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        auth_required: bool = False,
    ) -> Any:
        """Execute an API request and unwrap the ``{success, data}`` envelope.

        All outgoing JSON bodies are camelized; all incoming JSON responses
        are decamelized.

        Raises:
            AuthenticationError: On 401/403 responses.
            RateLimitError: On 429 responses.
            ApiResponseError: On other non-2xx responses or ``success: false``.
            ApiConnectionError: On network errors and timeouts.
        """
        headers = self._auth.get_headers(required=auth_required)

        kwargs: dict[str, Any] = {"headers": headers, "timeout": self._timeout}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = camelize(json_body)

        try:
            async with self._session.request(
                method, f"{self._base_url}{path}", **kwargs
            ) as resp:
                if resp.status in (401, 403):
                    self._auth.mark_unauthenticated()
                    raise AuthenticationError(f"Authentication failed: HTTP {resp.status}")

                if resp.status == 429:
                    retry_after = resp.headers.get("Retry-After")
                    raise RateLimitError(
                        retry_after=float(retry_after) if retry_after else None,
                    )

                if resp.status == 204:
                    return None

                if resp.status >= 400:
                    body = await resp.text()
                    raise ApiResponseError(
                        f"API error: HTTP {resp.status} - {body}",
                        status_code=resp.status,
                    )

                payload = decamelize(await resp.json())

        except aiohttp.ClientError as err:
            raise ApiConnectionError(f"Connection error: {err}") from err
        except TimeoutError as err:
            raise ApiConnectionError(f"Request timed out: {method} {path}") from err

        if not isinstance(payload, dict) or "success" not in payload:
            return payload
        if not payload["success"]:
            raise ApiResponseError(
                payload.get("error") or payload.get("message") or "Request failed"
            )
        if isinstance(payload.get("pagination"), dict):
            self.last_pagination = Pagination.from_api_response(payload["pagination"])
        return payload.get("data")


def _query_params(**values: Any) -> dict[str, str]:
    """Drop unset filters and stringify the rest the way the backend expects."""
    params: dict[str, str] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        elif isinstance(value, date):
            params[key] = value.isoformat()
        else:
            params[key] = str(value)
    return params


def _as_list(data: Any, key: str) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get(key, [])
    return []


def _unwrap(data: Any, key: str) -> dict[str, Any]:
    # Unwrap if the record is nested under its own name
    if isinstance(data, dict) and isinstance(data.get(key), dict):
        return data[key]
    return data
