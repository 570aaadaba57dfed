"""Data models for feed entries and viewport windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


# Status markers for entries still awaiting instructor action
UNRESOLVED_STATUSES = frozenset({"submitted", "pending", "ungraded", "awaiting_review"})

_ID_KEYS = ("id", "submissionId", "videoId")
_AUTHOR_KEYS = ("author_id", "authorId", "studentId", "userId")
_SUBMITTED_KEYS = ("submitted_at", "submittedAt", "createdAt")
_MEDIA_KEYS = ("media_ref", "mediaRef", "videoUrl", "url")
_PINNED_KEYS = ("pinned", "isPinned", "isHighlighted")


class InvalidEntryError(ValueError):
    """Raised when a feed entry is missing required fields or breaks list invariants."""


class InvalidViewportError(ValueError):
    """Raised when viewport geometry cannot produce a finite, non-empty window."""


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed), date or datetime into an aware datetime.

    Naive values are interpreted as UTC; bare dates as midnight UTC.

    Raises:
        ValueError: If *value* is neither a datetime nor a parseable ISO string.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _first_present(raw: Mapping[str, Any], keys: Iterable[str]) -> Tuple[Optional[str], Any]:
    for key in keys:
        if key in raw and raw[key] not in (None, ""):
            return key, raw[key]
    return None, None


@dataclass(frozen=True)
class FeedEntry:
    """One displayable item in a feed (usually a video submission)."""

    id: str
    submitted_at: datetime
    author_id: Optional[str] = None
    status: str = "submitted"
    media_ref: Optional[str] = None
    pinned: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    # Field name -> raw key it was parsed from
    source_keys: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.submitted_at, datetime) and self.submitted_at.tzinfo is None:
            object.__setattr__(self, "submitted_at", self.submitted_at.replace(tzinfo=timezone.utc))

    @property
    def is_unresolved(self) -> bool:
        return (self.status or "").strip().lower() in UNRESOLVED_STATUSES

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, index: Optional[int] = None) -> "FeedEntry":
        """Build an entry from a raw record, accepting camelCase API field names.

        Raises:
            InvalidEntryError: If the id or submission timestamp is missing or invalid.
        """
        where = f"entry #{index}" if index is not None else "entry"
        if not isinstance(raw, Mapping):
            raise InvalidEntryError(f"{where} must be a mapping, got {type(raw).__name__}")

        id_key, entry_id = _first_present(raw, _ID_KEYS)
        if id_key is None:
            raise InvalidEntryError(f"{where} is missing an id (expected one of {', '.join(_ID_KEYS)})")

        ts_key, ts_value = _first_present(raw, _SUBMITTED_KEYS)
        if ts_key is None:
            raise InvalidEntryError(f"{where} (id={entry_id}) is missing submitted_at")
        try:
            submitted_at = parse_timestamp(ts_value)
        except ValueError as exc:
            raise InvalidEntryError(f"{where} (id={entry_id}) has an invalid submitted_at: {exc}") from exc

        author_key, author = _first_present(raw, _AUTHOR_KEYS)
        media_key, media_ref = _first_present(raw, _MEDIA_KEYS)
        pinned = any(bool(raw.get(key)) for key in _PINNED_KEYS)

        source_keys = {"id": id_key, "submitted_at": ts_key}
        if author_key is not None:
            source_keys["author_id"] = author_key
        if media_key is not None:
            source_keys["media_ref"] = media_key
        # Pin flags are left in extra
        consumed = {*source_keys.values(), "status"}
        extra = {k: v for k, v in raw.items() if k not in consumed}

        return cls(
            id=str(entry_id),
            submitted_at=submitted_at,
            author_id=str(author) if author is not None else None,
            status=str(raw.get("status") or "submitted"),
            media_ref=str(media_ref) if media_ref is not None else None,
            pinned=pinned,
            extra=extra,
            source_keys=source_keys,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to a JSON-friendly record.

        Fields are written under the keys they were read from (``id``,
        ``authorId``, ``submittedAt`` and ``mediaRef`` for entries built in
        code) and unrecognised fields are passed through, so the output can be
        fed back to the same consumer.
        """
        keys = self.source_keys
        data: Dict[str, Any] = dict(self.extra)
        data[keys.get("id", "id")] = self.id
        data[keys.get("submitted_at", "submittedAt")] = self.submitted_at.isoformat()
        data["status"] = self.status
        if self.author_id is not None or "author_id" in keys:
            data[keys.get("author_id", "authorId")] = self.author_id
        if self.media_ref is not None or "media_ref" in keys:
            data[keys.get("media_ref", "mediaRef")] = self.media_ref
        if self.pinned and not any(data.get(key) for key in _PINNED_KEYS):
            data["pinned"] = True
        return data


@dataclass(frozen=True)
class ScoredEntry:
    entry: FeedEntry
    score: float


class WindowState(str, Enum):
    EMPTY = "empty"
    WINDOWED = "windowed"


class LoadingPriority(str, Enum):
    """How eagerly a mounted item should start loading its media."""

    IMMEDIATE = "immediate"
    PRIORITY = "priority"
    NORMAL = "normal"
    LAZY = "lazy"


# Delay before a mounted item starts loading media, per priority
LOAD_DELAYS_MS = {
    LoadingPriority.IMMEDIATE: 0,
    LoadingPriority.PRIORITY: 0,
    LoadingPriority.NORMAL: 500,
    LoadingPriority.LAZY: 1000,
}


@dataclass(frozen=True)
class ViewportWindow:
    """Contiguous index range to mount plus the geometry needed to position it.

    ``end_index`` is inclusive. The empty window uses ``end_index == -1``.
    """

    start_index: int
    end_index: int
    offset_top_px: float
    total_height_px: float

    @classmethod
    def empty(cls) -> "ViewportWindow":
        return cls(start_index=0, end_index=-1, offset_top_px=0, total_height_px=0)

    @property
    def is_empty(self) -> bool:
        return self.end_index < self.start_index

    @property
    def rendered_count(self) -> int:
        return 0 if self.is_empty else self.end_index - self.start_index + 1

    def indices(self) -> range:
        return range(self.start_index, self.end_index + 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startIndex": self.start_index,
            "endIndex": self.end_index,
            "offsetTopPixels": self.offset_top_px,
            "totalHeightPixels": self.total_height_px,
        }


def validate_entries(entries: Iterable[FeedEntry]) -> List[FeedEntry]:
    """Check list-level preconditions and return the entries as a list.

    Raises:
        InvalidEntryError: On a missing id/timestamp or a duplicated id.
    """
    items = list(entries)
    seen: Dict[str, int] = {}
    for index, entry in enumerate(items):
        if not isinstance(entry, FeedEntry):
            raise InvalidEntryError(f"entry #{index} is not a FeedEntry ({type(entry).__name__})")
        if not entry.id:
            raise InvalidEntryError(f"entry #{index} has an empty id")
        if not isinstance(entry.submitted_at, datetime):
            raise InvalidEntryError(f"entry #{index} (id={entry.id}) is missing submitted_at")
        if entry.id in seen:
            raise InvalidEntryError(
                f"duplicate id '{entry.id}' at entries #{seen[entry.id]} and #{index}"
            )
        seen[entry.id] = index
    return items


__all__ = [
    "UNRESOLVED_STATUSES",
    "LOAD_DELAYS_MS",
    "InvalidEntryError",
    "InvalidViewportError",
    "FeedEntry",
    "ScoredEntry",
    "ViewportWindow",
    "WindowState",
    "LoadingPriority",
    "parse_timestamp",
    "validate_entries",
]
