from __future__ import annotations

from datetime import datetime, timezone

import httplib2
import pytest
from googleapiclient.errors import HttpError

from livestreams.db.models import StreamStatus
from livestreams.services.errors import (
    ProviderError,
    UnknownChannelError,
    UnknownVideoError,
)
from livestreams.services.youtube import extract_video_id, parse_timestamp


def test_fetch_video_normalizes_metadata(client, video_item, videos_response):
    videos_response(video_item(actual_start="2021-10-20T18:02:00Z"))

    video = client.fetch_video("abc123")

    assert video.video_id == "abc123"
    assert video.title == "Building a package live"
    assert video.channel_id == "UCchannel"
    assert video.channel_title == "Some Channel"
    assert video.description == "We write some code."
    assert video.thumbnail_url == "https://i.ytimg.com/vi/abc123/maxresdefault.jpg"
    assert video.published_at == datetime(2021, 10, 1, 9, 0, tzinfo=timezone.utc)
    assert video.planned_start == datetime(2021, 10, 20, 18, 0, tzinfo=timezone.utc)
    assert video.actual_start_time == datetime(2021, 10, 20, 18, 2, tzinfo=timezone.utc)
    assert video.actual_end_time is None
    assert video.status == StreamStatus.UPCOMING


@pytest.mark.parametrize(
    ("broadcast", "expected"),
    [
        ("none", StreamStatus.FINISHED),
        ("live", StreamStatus.LIVE),
        ("upcoming", StreamStatus.UPCOMING),
    ],
)
def test_status_mapping(client, video_item, videos_response, broadcast, expected):
    videos_response(video_item(broadcast=broadcast))

    assert client.fetch_video("abc123").status == expected


def test_planned_start_falls_back_to_publish_time(client, video_item, videos_response):
    videos_response(video_item(scheduled=None, broadcast="none"))

    video = client.fetch_video("abc123")

    assert video.planned_start == video.published_at
    assert video.planned_start == datetime(2021, 10, 1, 9, 0, tzinfo=timezone.utc)


def test_missing_thumbnails_yield_none(client, video_item, videos_response):
    item = video_item()
    del item["snippet"]["thumbnails"]
    videos_response(item)

    assert client.fetch_video("abc123").thumbnail_url is None


def test_fetch_video_unknown_raises(client, videos_response):
    videos_response()

    with pytest.raises(UnknownVideoError) as excinfo:
        client.fetch_video("missing0000")

    assert excinfo.value.video_id == "missing0000"


def test_fetch_videos_joins_ids_and_keeps_provider_order(client, youtube_service, video_item, videos_response):
    videos_response(video_item("bbbbbbbbbbb"), video_item("aaaaaaaaaaa"))

    videos = client.fetch_videos(["aaaaaaaaaaa", "bbbbbbbbbbb"])

    assert [v.video_id for v in videos] == ["bbbbbbbbbbb", "aaaaaaaaaaa"]
    youtube_service.videos.return_value.list.assert_called_once_with(
        part="snippet,statistics,liveStreamingDetails",
        id="aaaaaaaaaaa,bbbbbbbbbbb",
    )


def test_fetch_videos_accepts_single_id(client, youtube_service, video_item, videos_response):
    videos_response(video_item())

    client.fetch_videos("abc123")

    _, kwargs = youtube_service.videos.return_value.list.call_args
    assert kwargs["id"] == "abc123"


def test_http_error_becomes_provider_error(client, youtube_service):
    error = HttpError(httplib2.Response({"status": 403}), b'{"error": {"message": "quotaExceeded"}}')
    youtube_service.videos.return_value.list.return_value.execute.side_effect = error

    with pytest.raises(ProviderError) as excinfo:
        client.fetch_video("abc123")

    assert excinfo.value.status_code == 403
    assert "quotaExceeded" in excinfo.value.body


def test_transport_error_becomes_provider_error(client, youtube_service):
    youtube_service.videos.return_value.list.return_value.execute.side_effect = ConnectionResetError("reset")

    with pytest.raises(ProviderError) as excinfo:
        client.fetch_videos("abc123")

    assert excinfo.value.status_code is None


def test_fetch_channel_maps_snippet(client, youtube_service):
    youtube_service.channels.return_value.list.return_value.execute.return_value = {
        "items": [
            {
                "id": "UCchannel",
                "snippet": {
                    "title": "Some Channel",
                    "description": "Live coding",
                    "customUrl": "somechannel",
                    "publishedAt": "2015-03-01T10:00:00Z",
                    "thumbnails": {
                        "default": {"url": "https://yt3.ggpht.com/small"},
                        "high": {"url": "https://yt3.ggpht.com/large"},
                    },
                    "country": "DE",
                },
            }
        ]
    }

    channel = client.fetch_channel("UCchannel")

    assert channel.platform_id == "UCchannel"
    assert channel.name == "Some Channel"
    assert channel.custom_url == "somechannel"
    assert channel.thumbnail_url == "https://yt3.ggpht.com/large"
    assert channel.country == "DE"
    assert channel.on_platform_since == datetime(2015, 3, 1, 10, 0, tzinfo=timezone.utc)
    youtube_service.channels.return_value.list.assert_called_once_with(part="snippet", id="UCchannel")


def test_fetch_channel_defaults_optional_fields(client, youtube_service):
    youtube_service.channels.return_value.list.return_value.execute.return_value = {
        "items": [{"id": "UCchannel", "snippet": {"title": "Some Channel"}}]
    }

    channel = client.fetch_channel("UCchannel")

    assert channel.custom_url == ""
    assert channel.country == ""
    assert channel.thumbnail_url is None
    assert channel.on_platform_since is None


def test_fetch_channel_unknown_raises(client, youtube_service):
    youtube_service.channels.return_value.list.return_value.execute.return_value = {"items": []}

    with pytest.raises(UnknownChannelError):
        client.fetch_channel("UCnope")


def test_fetch_upcoming_streams_batches_found_ids(client, youtube_service, video_item, videos_response):
    youtube_service.search.return_value.list.return_value.execute.return_value = {
        "items": [{"id": {"videoId": "aaaaaaaaaaa"}}, {"id": {"videoId": "bbbbbbbbbbb"}}]
    }
    videos_response(video_item("aaaaaaaaaaa"), video_item("bbbbbbbbbbb"))

    streams = client.fetch_upcoming_streams("UCchannel")

    assert [s.video_id for s in streams] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
    youtube_service.search.return_value.list.assert_called_once_with(
        part="id",
        channelId="UCchannel",
        eventType="upcoming",
        type="video",
        maxResults=25,
    )


def test_fetch_upcoming_streams_empty(client, youtube_service):
    youtube_service.search.return_value.list.return_value.execute.return_value = {"items": []}

    assert client.fetch_upcoming_streams("UCchannel") == []
    youtube_service.videos.assert_not_called()


def test_parse_timestamp():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    parsed = parse_timestamp("2021-10-20T18:00:00Z")
    assert parsed.tzinfo is not None
    assert parsed == datetime(2021, 10, 20, 18, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/live/dQw4w9WgXcQ?si=x",
        "dQw4w9WgXcQ",
    ],
)
def test_extract_video_id(value):
    assert extract_video_id(value) == "dQw4w9WgXcQ"


def test_extract_video_id_rejects_garbage():
    assert extract_video_id("https://example.com/nothing") is None
