"""Data models for club backend responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class User:
    """Admin console user."""

    id: str
    username: str
    name: str = ""
    role: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> User:
        """Construct from a decamelized API response dict."""
        return cls(
            id=str(data["id"]),
            username=data.get("username", ""),
            name=data.get("name") or "",
            role=data.get("role") or "",
        )


@dataclass(frozen=True)
class Pagination:
    """Pagination block attached to list responses."""

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Pagination:
        """Construct from a decamelized API response dict."""
        return cls(
            page=int(data.get("page", 1)),
            limit=int(data.get("limit", 0)),
            total=int(data.get("total", 0)),
            total_pages=int(data.get("total_pages", 0)),
        )


@dataclass(frozen=True)
class EventRecord:
    """Club event as stored by the backend.

    Dates and times are kept exactly as the backend sent them; turning them
    into calendar occurrences (and recovering from bad values) is the job of
    :mod:`edyc_site.occurrences`.
    """

    id: str
    title: str | None = None
    description: str | None = None
    event_type: Any = None
    start_date: str | None = None
    end_date: str | None = None
    start_time: str | None = None
    location: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> EventRecord:
        """Construct from a decamelized API response dict."""
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title"),
            description=data.get("description"),
            event_type=data.get("event_type"),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            start_time=data.get("start_time"),
            location=data.get("location"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(frozen=True)
class EventMutation:
    """Data for creating or updating an event.

    Use ``dataclasses.replace()`` to derive modified copies.
    """

    title: str
    event_type: str
    start_date: str  # YYYY-MM-DD
    end_date: str | None = None
    start_time: str | None = None
    description: str | None = None
    location: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a dict for the API request body (snake_case).

        Optional fields that are unset are left out so a PUT only touches
        what the admin actually changed.
        """
        body: dict[str, Any] = {
            "title": self.title,
            "event_type": self.event_type,
            "start_date": self.start_date,
        }
        for key in ("end_date", "start_time", "description", "location"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


@dataclass(frozen=True)
class Story:
    """News story or club announcement."""

    id: str
    title: str
    slug: str = ""
    content: str = ""
    excerpt: str | None = None
    story_type: str = "news"
    featured_image_url: str | None = None
    gallery_images: tuple[str, ...] = field(default_factory=tuple)
    author_name: str | None = None
    published: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)
    event_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Story:
        """Construct from a decamelized API response dict."""
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            slug=data.get("slug") or "",
            content=data.get("content") or "",
            excerpt=data.get("excerpt"),
            story_type=data.get("story_type") or "news",
            featured_image_url=data.get("featured_image_url"),
            gallery_images=tuple(data.get("gallery_images") or ()),
            author_name=data.get("author_name"),
            published=bool(data.get("published", False)),
            tags=tuple(data.get("tags") or ()),
            event_id=data.get("event_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(frozen=True)
class StoryMutation:
    """Data for creating or updating a story."""

    title: str
    content: str
    story_type: str = "news"
    excerpt: str | None = None
    featured_image_url: str | None = None
    gallery_images: tuple[str, ...] = field(default_factory=tuple)
    author_name: str | None = None
    published: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)
    event_id: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a dict for the API request body (snake_case)."""
        body: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "story_type": self.story_type,
            "published": self.published,
            "gallery_images": list(self.gallery_images),
            "tags": list(self.tags),
        }
        for key in ("excerpt", "featured_image_url", "author_name", "event_id"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


@dataclass(frozen=True)
class YachtClass:
    """Racing class (handicap fleet, one-design class, ...)."""

    id: str
    name: str
    description: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> YachtClass:
        """Construct from a decamelized API response dict."""
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Race:
    """A single race sailed as part of an event."""

    id: str
    event_id: str
    yacht_class_id: str
    race_date: str
    race_number: int | None = None
    start_time: str | None = None
    wind_direction: str | None = None
    wind_speed: float | None = None
    notes: str | None = None
    yacht_class: YachtClass | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Race:
        """Construct from a decamelized API response dict.

        Prisma includes the class relation as ``yacht_classes``; the
        hand-written endpoints call it ``yacht_class``.
        """
        raw_class = data.get("yacht_class") or data.get("yacht_classes")
        return cls(
            id=str(data["id"]),
            event_id=str(data.get("event_id", "")),
            yacht_class_id=str(data.get("yacht_class_id", "")),
            race_date=data.get("race_date") or "",
            race_number=data.get("race_number"),
            start_time=data.get("start_time"),
            wind_direction=data.get("wind_direction"),
            wind_speed=data.get("wind_speed"),
            notes=data.get("notes"),
            yacht_class=YachtClass.from_api_response(raw_class) if raw_class else None,
        )


@dataclass(frozen=True)
class RaceMutation:
    """Data for creating a race under an event."""

    yacht_class_id: str
    race_date: str
    race_number: int | None = None
    start_time: str | None = None
    wind_direction: str | None = None
    wind_speed: float | None = None
    notes: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a dict for the API request body (snake_case)."""
        body: dict[str, Any] = {
            "yacht_class_id": self.yacht_class_id,
            "race_date": self.race_date,
        }
        for key in (
            "race_number",
            "start_time",
            "wind_direction",
            "wind_speed",
            "notes",
        ):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


@dataclass(frozen=True)
class RaceResult:
    """One boat's finish in a race."""

    race_id: str
    sail_number: str
    id: str | None = None
    yacht_name: str | None = None
    helm_name: str | None = None
    crew_names: str | None = None
    finish_time: str | None = None
    elapsed_time: str | None = None
    corrected_time: str | None = None
    position: int | None = None
    points: float | None = None
    disqualified: bool = False
    dns: bool = False
    dnf: bool = False
    retired: bool = False
    notes: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> RaceResult:
        """Construct from a decamelized API response dict."""
        raw_id = data.get("id")
        return cls(
            race_id=str(data.get("race_id", "")),
            sail_number=str(data.get("sail_number", "")),
            id=str(raw_id) if raw_id is not None else None,
            yacht_name=data.get("yacht_name"),
            helm_name=data.get("helm_name"),
            crew_names=data.get("crew_names"),
            finish_time=data.get("finish_time"),
            elapsed_time=data.get("elapsed_time"),
            corrected_time=data.get("corrected_time"),
            position=data.get("position"),
            points=data.get("points"),
            disqualified=bool(data.get("disqualified", False)),
            dns=bool(data.get("dns", False)),
            dnf=bool(data.get("dnf", False)),
            retired=bool(data.get("retired", False)),
            notes=data.get("notes"),
        )

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a dict for the results submission body (snake_case)."""
        body: dict[str, Any] = {
            "race_id": self.race_id,
            "sail_number": self.sail_number,
            "disqualified": self.disqualified,
            "dns": self.dns,
            "dnf": self.dnf,
            "retired": self.retired,
        }
        for key in (
            "yacht_name",
            "helm_name",
            "crew_names",
            "finish_time",
            "elapsed_time",
            "corrected_time",
            "position",
            "points",
            "notes",
        ):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body
