from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from livestreams.config import Config, YouTubeSettings
from livestreams.db.database import init_db
from livestreams.services.youtube import YouTubeClient


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "DATABASE_PATH", tmp_path / "livestreams.db")
    init_db()
    return tmp_path / "livestreams.db"


@pytest.fixture
def youtube_service():
    return MagicMock()


@pytest.fixture
def client(youtube_service):
    return YouTubeClient(YouTubeSettings(api_key="test-key"), service=youtube_service)


@pytest.fixture
def video_item():
    def make(
        video_id: str = "abc123",
        *,
        broadcast: str = "upcoming",
        channel_id: str = "UCchannel",
        scheduled: str | None = "2021-10-20T18:00:00Z",
        published: str = "2021-10-01T09:00:00Z",
        actual_start: str | None = None,
        actual_end: str | None = None,
        title: str = "Building a package live",
    ) -> dict:
        details = {}
        if scheduled is not None:
            details["scheduledStartTime"] = scheduled
        if actual_start is not None:
            details["actualStartTime"] = actual_start
        if actual_end is not None:
            details["actualEndTime"] = actual_end

        item = {
            "id": video_id,
            "snippet": {
                "publishedAt": published,
                "channelId": channel_id,
                "title": title,
                "description": "We write some code.",
                "thumbnails": {
                    "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                    "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
                    "maxres": {"url": f"https://i.ytimg.com/vi/{video_id}/maxresdefault.jpg"},
                },
                "channelTitle": "Some Channel",
                "liveBroadcastContent": broadcast,
            },
            "statistics": {"viewCount": "10"},
        }
        if details:
            item["liveStreamingDetails"] = details
        return item

    return make


@pytest.fixture
def videos_response(youtube_service):
    """Set the items returned by videos().list().execute()."""

    def set_items(*items: dict) -> None:
        youtube_service.videos.return_value.list.return_value.execute.return_value = {
            "items": list(items)
        }

    return set_items
