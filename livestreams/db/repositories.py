from datetime import datetime, timezone
from typing import Optional

from livestreams.db.database import get_db
from livestreams.db.models import Channel, Stream, StreamStatus

STREAM_SELECT = """
    SELECT streams.*, channels.name AS channel_name
    FROM streams
    LEFT JOIN channels ON channels.id = streams.channel_id
"""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_db_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Store timestamps as UTC ISO strings so they sort correctly in SQL."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_to_channel(row) -> Channel:
    return Channel(
        id=row["id"],
        platform_id=row["platform_id"],
        name=row["name"],
        custom_url=row["custom_url"],
        description=row["description"],
        thumbnail_url=row["thumbnail_url"],
        country=row["country"],
        on_platform_since=from_db_timestamp(row["on_platform_since"]),
        created_at=from_db_timestamp(row["created_at"]),
    )


def _row_to_stream(row) -> Stream:
    return Stream(
        id=row["id"],
        youtube_id=row["youtube_id"],
        channel_id=row["channel_id"],
        title=row["title"],
        description=row["description"],
        thumbnail_url=row["thumbnail_url"],
        language_code=row["language_code"],
        status=StreamStatus(row["status"]),
        scheduled_start_time=from_db_timestamp(row["scheduled_start_time"]),
        actual_start_time=from_db_timestamp(row["actual_start_time"]),
        actual_end_time=from_db_timestamp(row["actual_end_time"]),
        approved_at=from_db_timestamp(row["approved_at"]),
        submitted_by_email=row["submitted_by_email"],
        hidden_at=from_db_timestamp(row["hidden_at"]),
        shared_at=from_db_timestamp(row["shared_at"]),
        created_at=from_db_timestamp(row["created_at"]),
        updated_at=from_db_timestamp(row["updated_at"]),
        channel_name=row["channel_name"],
    )


class ChannelRepository:
    @staticmethod
    def upsert(channel: Channel) -> Channel:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO channels (
                    platform_id, name, custom_url, description,
                    thumbnail_url, country, on_platform_since, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(platform_id) DO UPDATE SET
                    name = excluded.name,
                    custom_url = excluded.custom_url,
                    description = excluded.description,
                    thumbnail_url = excluded.thumbnail_url,
                    country = excluded.country,
                    on_platform_since = excluded.on_platform_since
                """,
                (
                    channel.platform_id,
                    channel.name,
                    channel.custom_url,
                    channel.description,
                    channel.thumbnail_url,
                    channel.country,
                    to_db_timestamp(channel.on_platform_since),
                    to_db_timestamp(utcnow()),
                ),
            )
            cursor.execute(
                "SELECT * FROM channels WHERE platform_id = ?", (channel.platform_id,)
            )
            return _row_to_channel(cursor.fetchone())

    @staticmethod
    def get_by_platform_id(platform_id: str) -> Optional[Channel]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM channels WHERE platform_id = ?", (platform_id,)
            )
            row = cursor.fetchone()
            if row:
                return _row_to_channel(row)
            return None

    @staticmethod
    def get_all() -> list[Channel]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM channels ORDER BY created_at, id")
            return [_row_to_channel(row) for row in cursor.fetchall()]

    @staticmethod
    def delete(platform_id: str) -> bool:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM channels WHERE platform_id = ?", (platform_id,))
            return cursor.rowcount > 0


class StreamRepository:
    @staticmethod
    def upsert(stream: Stream, preserve_approval: bool = False) -> Stream:
        """Insert or fully replace the stream row keyed by youtube_id.

        Without preserve_approval the approval and submitter columns are
        overwritten with the given values, so a stream that is re-imported
        unapproved loses its earlier approval. Actual start/end times are only
        overwritten when a new value is present.
        """
        if preserve_approval:
            approval_sql = """
                    approved_at = COALESCE(streams.approved_at, excluded.approved_at),
                    submitted_by_email = COALESCE(streams.submitted_by_email, excluded.submitted_by_email),
            """
        else:
            approval_sql = """
                    approved_at = excluded.approved_at,
                    submitted_by_email = excluded.submitted_by_email,
            """

        now = to_db_timestamp(utcnow())
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO streams (
                    youtube_id, channel_id, title, description, thumbnail_url,
                    language_code, status, scheduled_start_time,
                    actual_start_time, actual_end_time,
                    approved_at, submitted_by_email, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(youtube_id) DO UPDATE SET
                    channel_id = excluded.channel_id,
                    title = excluded.title,
                    description = excluded.description,
                    thumbnail_url = excluded.thumbnail_url,
                    language_code = excluded.language_code,
                    status = excluded.status,
                    scheduled_start_time = excluded.scheduled_start_time,
                    actual_start_time = COALESCE(excluded.actual_start_time, streams.actual_start_time),
                    actual_end_time = COALESCE(excluded.actual_end_time, streams.actual_end_time),
                    {approval_sql.strip()}
                    updated_at = excluded.updated_at
                """,
                (
                    stream.youtube_id,
                    stream.channel_id,
                    stream.title,
                    stream.description,
                    stream.thumbnail_url,
                    stream.language_code,
                    StreamStatus(stream.status).value,
                    to_db_timestamp(stream.scheduled_start_time),
                    to_db_timestamp(stream.actual_start_time),
                    to_db_timestamp(stream.actual_end_time),
                    to_db_timestamp(stream.approved_at),
                    stream.submitted_by_email,
                    now,
                    now,
                ),
            )
            cursor.execute(
                f"{STREAM_SELECT} WHERE streams.youtube_id = ?", (stream.youtube_id,)
            )
            return _row_to_stream(cursor.fetchone())

    @staticmethod
    def get_by_youtube_id(youtube_id: str) -> Optional[Stream]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(f"{STREAM_SELECT} WHERE streams.youtube_id = ?", (youtube_id,))
            row = cursor.fetchone()
            if row:
                return _row_to_stream(row)
            return None

    @staticmethod
    def count() -> int:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS total FROM streams")
            return cursor.fetchone()["total"]

    @staticmethod
    def approve(youtube_id: str) -> Optional[Stream]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE streams
                SET approved_at = COALESCE(approved_at, ?), updated_at = ?
                WHERE youtube_id = ?
                """,
                (to_db_timestamp(utcnow()), to_db_timestamp(utcnow()), youtube_id),
            )
        return StreamRepository.get_by_youtube_id(youtube_id)

    @staticmethod
    def reject(youtube_id: str) -> bool:
        """Delete a pending submission. Approved streams are left alone."""
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM streams WHERE youtube_id = ? AND approved_at IS NULL",
                (youtube_id,),
            )
            return cursor.rowcount > 0

    @staticmethod
    def hide(youtube_id: str) -> Optional[Stream]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE streams
                SET hidden_at = COALESCE(hidden_at, ?), updated_at = ?
                WHERE youtube_id = ?
                """,
                (to_db_timestamp(utcnow()), to_db_timestamp(utcnow()), youtube_id),
            )
        return StreamRepository.get_by_youtube_id(youtube_id)

    @staticmethod
    def mark_shared(stream: Stream) -> Stream:
        shared_at = utcnow()
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE streams SET shared_at = ?, updated_at = ? WHERE youtube_id = ?",
                (to_db_timestamp(shared_at), to_db_timestamp(shared_at), stream.youtube_id),
            )
        stream.shared_at = from_db_timestamp(to_db_timestamp(shared_at))
        return stream

    @staticmethod
    def get_pending() -> list[Stream]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                {STREAM_SELECT}
                WHERE streams.approved_at IS NULL
                ORDER BY streams.created_at
                """
            )
            return [_row_to_stream(row) for row in cursor.fetchall()]

    @staticmethod
    def get_upcoming() -> list[Stream]:
        """Approved, visible streams that are live or still to come, soonest first."""
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                {STREAM_SELECT}
                WHERE streams.approved_at IS NOT NULL
                  AND streams.hidden_at IS NULL
                  AND streams.status IN (?, ?)
                ORDER BY streams.scheduled_start_time
                """,
                (StreamStatus.LIVE.value, StreamStatus.UPCOMING.value),
            )
            return [_row_to_stream(row) for row in cursor.fetchall()]

    @staticmethod
    def get_finished(now: Optional[datetime] = None) -> list[Stream]:
        """Approved, visible finished streams since the start of last year, newest first."""
        now = now or utcnow()
        since = datetime(now.year - 1, 1, 1, tzinfo=timezone.utc)
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                {STREAM_SELECT}
                WHERE streams.approved_at IS NOT NULL
                  AND streams.hidden_at IS NULL
                  AND streams.status = ?
                  AND streams.scheduled_start_time >= ?
                ORDER BY streams.scheduled_start_time DESC
                """,
                (StreamStatus.FINISHED.value, to_db_timestamp(since)),
            )
            return [_row_to_stream(row) for row in cursor.fetchall()]

    @staticmethod
    def get_refreshable() -> list[Stream]:
        """Streams whose status can still change on the provider side."""
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                {STREAM_SELECT}
                WHERE streams.status IN (?, ?)
                ORDER BY streams.scheduled_start_time
                """,
                (StreamStatus.LIVE.value, StreamStatus.UPCOMING.value),
            )
            return [_row_to_stream(row) for row in cursor.fetchall()]
