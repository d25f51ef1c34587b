import logging
from typing import Optional

from livestreams.config import YouTubeSettings
from livestreams.db.models import Channel, Stream
from livestreams.db.repositories import ChannelRepository, StreamRepository, utcnow
from livestreams.services.youtube import StreamMetadata, YouTubeClient

logger = logging.getLogger(__name__)

# videos.list accepts at most 50 ids per call.
MAX_IDS_PER_REQUEST = 50


def get_client() -> YouTubeClient:
    return YouTubeClient(YouTubeSettings.from_config())


def _resolve_channel_id(platform_id: str) -> Optional[int]:
    channel = ChannelRepository.get_by_platform_id(platform_id)
    if channel is None:
        logger.debug(f"No registered channel for {platform_id}, importing without one")
        return None
    return channel.id


def stream_from_metadata(
    video: StreamMetadata,
    language_code: str = "en",
    approved: bool = False,
    submitted_by_email: Optional[str] = None,
) -> Stream:
    """Map fetched metadata onto an unsaved stream row."""
    return Stream(
        id=None,
        youtube_id=video.video_id,
        channel_id=_resolve_channel_id(video.channel_id),
        title=video.title,
        description=video.description,
        thumbnail_url=video.thumbnail_url,
        scheduled_start_time=video.planned_start,
        actual_start_time=video.actual_start_time,
        actual_end_time=video.actual_end_time,
        language_code=language_code,
        status=video.status,
        approved_at=utcnow() if approved else None,
        submitted_by_email=submitted_by_email,
    )


def import_video(
    youtube_id: str,
    language_code: str = "en",
    approved: bool = False,
    submitted_by_email: Optional[str] = None,
    *,
    preserve_approval: bool = False,
    client: Optional[YouTubeClient] = None,
) -> Stream:
    """Fetch a video from YouTube and upsert it as a stream.

    Client errors propagate untouched and nothing is written in that case.
    Unless preserve_approval is set, re-importing a stream without
    approved=True clears its approval.
    """
    client = client or get_client()
    video = client.fetch_video(youtube_id)

    stream = StreamRepository.upsert(
        stream_from_metadata(video, language_code, approved, submitted_by_email),
        preserve_approval=preserve_approval,
    )
    logger.info(
        f"Imported stream {stream.youtube_id} ({stream.status.value}, "
        f"approved={stream.is_approved()})"
    )
    return stream


def register_channel(platform_id: str, client: Optional[YouTubeClient] = None) -> Channel:
    """Fetch a channel from YouTube and store or refresh it."""
    client = client or get_client()
    metadata = client.fetch_channel(platform_id)

    channel = ChannelRepository.upsert(
        Channel(
            id=None,
            platform_id=metadata.platform_id,
            name=metadata.name,
            custom_url=metadata.custom_url,
            description=metadata.description,
            thumbnail_url=metadata.thumbnail_url,
            country=metadata.country,
            on_platform_since=metadata.on_platform_since,
        )
    )
    logger.info(f"Registered channel {channel.name} ({channel.platform_id})")
    return channel


def import_upcoming_streams(
    channel: Channel, client: Optional[YouTubeClient] = None
) -> list[Stream]:
    """Import every upcoming stream of a registered channel as approved.

    Existing rows keep their moderation state and language.
    """
    client = client or get_client()
    imported = []

    for video in client.fetch_upcoming_streams(channel.platform_id):
        existing = StreamRepository.get_by_youtube_id(video.video_id)
        language_code = existing.language_code if existing else "en"
        stream = StreamRepository.upsert(
            stream_from_metadata(video, language_code, approved=existing is None),
            preserve_approval=True,
        )
        imported.append(stream)

    logger.info(f"Imported {len(imported)} upcoming streams for {channel.name}")
    return imported


def refresh_streams(client: Optional[YouTubeClient] = None) -> list[Stream]:
    """Re-fetch live and upcoming streams in one batch to update their status."""
    client = client or get_client()
    streams = {stream.youtube_id: stream for stream in StreamRepository.get_refreshable()}
    if not streams:
        return []

    youtube_ids = list(streams)
    videos = []
    for start in range(0, len(youtube_ids), MAX_IDS_PER_REQUEST):
        videos.extend(client.fetch_videos(youtube_ids[start:start + MAX_IDS_PER_REQUEST]))

    refreshed = []
    for video in videos:
        existing = streams.get(video.video_id)
        if existing is None:
            continue
        stream = StreamRepository.upsert(
            stream_from_metadata(
                video,
                existing.language_code,
                submitted_by_email=existing.submitted_by_email,
            ),
            preserve_approval=True,
        )
        if stream.status != existing.status:
            logger.info(
                f"Stream {stream.youtube_id} moved from {existing.status.value} "
                f"to {stream.status.value}"
            )
        refreshed.append(stream)

    missing = set(streams) - {stream.youtube_id for stream in refreshed}
    for youtube_id in missing:
        logger.warning(f"Stream {youtube_id} is no longer available on YouTube")

    return refreshed
