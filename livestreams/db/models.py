from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

# Months and years use fixed 30 and 365 day lengths.
DURATION_UNITS = [
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
]


class StreamStatus(str, Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    FINISHED = "finished"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def format_duration(seconds: float) -> str:
    """Format a span as its two most significant units, rounding the second one half up.

    5445 seconds gives "1 hour 31 minutes".
    """
    seconds = _round_half_up(abs(seconds))
    if seconds == 0:
        return _plural(0, "second")

    index = next(i for i, (_, size) in enumerate(DURATION_UNITS) if size <= seconds)
    major_name, major_size = DURATION_UNITS[index]
    if index == len(DURATION_UNITS) - 1:
        return _plural(seconds, major_name)

    minor_name, minor_size = DURATION_UNITS[index + 1]
    major, remainder = divmod(seconds, major_size)
    minor = _round_half_up(remainder / minor_size)
    if minor * minor_size >= major_size:
        major, minor = major + 1, 0

    # Rounding can carry into the next larger unit (6 days 23h 50m -> 1 week).
    if index > 0 and major * major_size >= DURATION_UNITS[index - 1][1]:
        return format_duration(major * major_size)

    parts = [_plural(major, major_name)]
    if minor:
        parts.append(_plural(minor, minor_name))
    return " ".join(parts)


@dataclass
class Channel:
    id: Optional[int]
    platform_id: str
    name: str
    custom_url: str = ""
    description: str = ""
    thumbnail_url: Optional[str] = None
    country: str = ""
    on_platform_since: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass
class FeedItem:
    id: int
    title: str
    summary: str
    updated: Optional[datetime]
    link: str
    author: str


@dataclass
class CalendarEvent:
    uid: str
    name: str
    description: str
    starts_at: datetime
    ends_at: datetime
    created_at: Optional[datetime] = None


@dataclass
class Stream:
    id: Optional[int]
    youtube_id: str
    title: str
    status: StreamStatus
    channel_id: Optional[int] = None
    description: str = ""
    thumbnail_url: Optional[str] = None
    language_code: str = "en"
    scheduled_start_time: Optional[datetime] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    submitted_by_email: Optional[str] = None
    hidden_at: Optional[datetime] = None
    shared_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Filled from the channels table on reads, never written.
    channel_name: Optional[str] = None

    def is_live(self) -> bool:
        return self.status == StreamStatus.LIVE

    def is_approved(self) -> bool:
        return self.approved_at is not None

    def is_hidden(self) -> bool:
        return self.hidden_at is not None

    def has_been_shared(self) -> bool:
        return self.shared_at is not None

    def duration(self) -> Optional[str]:
        """Human readable running time, available once the stream has ended."""
        if self.actual_end_time is None:
            return None

        start_time = self.actual_start_time or self.scheduled_start_time
        if start_time is None:
            return None

        return format_duration((self.actual_end_time - start_time).total_seconds())

    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.youtube_id}"

    def to_feed_item(self) -> FeedItem:
        return FeedItem(
            id=self.id,
            title=self.title,
            summary=self.description,
            updated=self.updated_at,
            link=self.url(),
            author=self.channel_name or "",
        )

    def to_calendar_event(self) -> Optional[CalendarEvent]:
        """Calendar entry for the stream, or None when no start time is known."""
        if self.scheduled_start_time is None:
            return None

        lines = [self.title, self.channel_name or "", self.url()]
        if self.description:
            lines.append("-" * 15 + "\n" + self.description)

        return CalendarEvent(
            uid=self.youtube_id,
            name=self.title,
            description="\n".join(lines),
            starts_at=self.scheduled_start_time,
            ends_at=self.scheduled_start_time + timedelta(hours=1),
            created_at=self.created_at,
        )
