import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Union

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from livestreams.config import YouTubeSettings
from livestreams.db.models import StreamStatus
from livestreams.services.errors import (
    ProviderError,
    UnknownChannelError,
    UnknownVideoError,
)

logger = logging.getLogger(__name__)

UPCOMING_SEARCH_LIMIT = 25


@dataclass
class ChannelMetadata:
    platform_id: str
    name: str
    custom_url: str = ""
    description: str = ""
    on_platform_since: Optional[datetime] = None
    thumbnail_url: Optional[str] = None
    country: str = ""


@dataclass
class StreamMetadata:
    video_id: str
    title: str
    channel_id: str
    channel_title: str
    status: StreamStatus
    description: str = ""
    thumbnail_url: Optional[str] = None
    published_at: Optional[datetime] = None
    planned_start: Optional[datetime] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp from the API. Empty values map to None."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def extract_video_id(url_or_id: str) -> Optional[str]:
    """Extract video ID from various YouTube URL formats, or accept a bare ID."""
    url_or_id = url_or_id.strip()
    patterns = [
        r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/(?:embed|v|live|shorts)/)([A-Za-z0-9_-]{11})",
    ]
    for pattern in patterns:
        match = re.search(pattern, url_or_id)
        if match:
            return match.group(1)
    if re.fullmatch(r"[A-Za-z0-9_-]{11}", url_or_id):
        return url_or_id
    return None


def _last_thumbnail_url(snippet: dict[str, Any]) -> Optional[str]:
    # The API lists thumbnails from lowest to highest resolution.
    thumbnails = snippet.get("thumbnails") or {}
    if not thumbnails:
        return None
    return list(thumbnails.values())[-1].get("url")


def derive_status(snippet: dict[str, Any]) -> StreamStatus:
    broadcast_content = snippet.get("liveBroadcastContent", "none")
    if broadcast_content == "none":
        return StreamStatus.FINISHED
    return StreamStatus(broadcast_content)


def derive_planned_start(item: dict[str, Any]) -> Optional[datetime]:
    details = item.get("liveStreamingDetails") or {}
    snippet = item.get("snippet") or {}
    return parse_timestamp(details.get("scheduledStartTime")) or parse_timestamp(
        snippet.get("publishedAt")
    )


def channel_from_item(item: dict[str, Any]) -> ChannelMetadata:
    snippet = item.get("snippet") or {}
    return ChannelMetadata(
        platform_id=item["id"],
        name=snippet.get("title", ""),
        custom_url=snippet.get("customUrl", ""),
        description=snippet.get("description", ""),
        on_platform_since=parse_timestamp(snippet.get("publishedAt")),
        thumbnail_url=_last_thumbnail_url(snippet),
        country=snippet.get("country", ""),
    )


def stream_from_item(item: dict[str, Any]) -> StreamMetadata:
    snippet = item.get("snippet") or {}
    details = item.get("liveStreamingDetails") or {}
    return StreamMetadata(
        video_id=item["id"],
        title=snippet.get("title", ""),
        channel_id=snippet.get("channelId", ""),
        channel_title=snippet.get("channelTitle", ""),
        description=snippet.get("description", ""),
        thumbnail_url=_last_thumbnail_url(snippet),
        published_at=parse_timestamp(snippet.get("publishedAt")),
        planned_start=derive_planned_start(item),
        actual_start_time=parse_timestamp(details.get("actualStartTime")),
        actual_end_time=parse_timestamp(details.get("actualEndTime")),
        status=derive_status(snippet),
    )


class YouTubeClient:
    """Thin wrapper over the YouTube Data API v3 returning normalized metadata."""

    def __init__(self, settings: YouTubeSettings, service=None):
        self.settings = settings
        self._service = service

    @property
    def service(self):
        if self._service is None:
            self._service = build(
                "youtube",
                "v3",
                developerKey=self.settings.api_key,
                client_options={"api_endpoint": self.settings.base_url},
                cache_discovery=False,
            )
        return self._service

    def _execute(self, request) -> dict[str, Any]:
        try:
            return request.execute()
        except HttpError as e:
            body = e.content.decode("utf-8", errors="replace") if e.content else ""
            logger.error(f"YouTube API error: HTTP {e.resp.status}")
            raise ProviderError(e.resp.status, body) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"YouTube API transport error: {e}")
            raise ProviderError(None, str(e)) from e

    def fetch_channel(self, channel_id: str) -> ChannelMetadata:
        response = self._execute(
            self.service.channels().list(part="snippet", id=channel_id)
        )
        items = response.get("items") or []
        if not items:
            raise UnknownChannelError(channel_id)
        return channel_from_item(items[0])

    def fetch_upcoming_streams(self, channel_id: str) -> list[StreamMetadata]:
        response = self._execute(
            self.service.search().list(
                part="id",
                channelId=channel_id,
                eventType="upcoming",
                type="video",
                maxResults=UPCOMING_SEARCH_LIMIT,
            )
        )
        video_ids = [
            item["id"]["videoId"]
            for item in response.get("items") or []
            if item.get("id", {}).get("videoId")
        ]
        if not video_ids:
            logger.debug(f"No upcoming streams for channel {channel_id}")
            return []
        return self.fetch_videos(video_ids)

    def fetch_video(self, video_id: str) -> StreamMetadata:
        videos = self.fetch_videos(video_id)
        if not videos:
            raise UnknownVideoError(video_id)
        return videos[0]

    def fetch_videos(self, video_ids: Union[str, Iterable[str]]) -> list[StreamMetadata]:
        """Fetch metadata for one or more videos in a single call, in API order."""
        ids = video_ids if isinstance(video_ids, str) else ",".join(video_ids)
        if not ids:
            return []
        response = self._execute(
            self.service.videos().list(
                part="snippet,statistics,liveStreamingDetails",
                id=ids,
            )
        )
        return [stream_from_item(item) for item in response.get("items") or []]
