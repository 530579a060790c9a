"""Tests for the playlist watcher; HTTP is mocked."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from utils.youtube import (
    PLAYLIST_ITEMS_URL, VideoOverview, VideoResult, YouTubeError, format_video_announcement,
    get_new_videos, next_timestamp, parse_timestamp
)

SINCE = datetime(2023, 2, 21, tzinfo=timezone.utc)


def item(video_id, published, title=None):
    return {
        "snippet": {
            "title": title or f"Video {video_id}",
            "description": "",
            "publishedAt": published,
            "resourceId": {"videoId": video_id},
        }
    }


def session_returning(items):
    session = MagicMock()
    session.get.return_value.json.return_value = {"items": items}
    return session


def video(video_id, published):
    return VideoOverview(title=f"Video {video_id}", description="", id=video_id, timestamp=published)


class TestGetNewVideos:
    def test_request_parameters(self) -> None:
        session = session_returning([])
        get_new_videos("key", "PL123", SINCE, session=session)

        args, kwargs = session.get.call_args
        assert args == (PLAYLIST_ITEMS_URL,)
        assert kwargs["params"] == {
            "part": "snippet", "playlistId": "PL123", "maxResults": 50, "key": "key",
        }

    def test_keeps_only_newer_videos(self) -> None:
        session = session_returning([
            item("old", "2023-02-20T10:00:00Z"),
            item("same", "2023-02-21T00:00:00Z"),
            item("new", "2023-03-01T12:00:00Z"),
            item("broken", "not a date"),
        ])
        result = get_new_videos("key", "PL123", SINCE, session=session)
        assert [v.id for v in result.videos] == ["new"]
        assert not result.overflow

    def test_overflow_keeps_last_five(self) -> None:
        session = session_returning([
            item(str(i), f"2023-03-0{i}T00:00:00Z") for i in range(1, 8)
        ])
        result = get_new_videos("key", "PL123", SINCE, session=session)
        assert result.overflow
        assert [v.id for v in result.videos] == ["3", "4", "5", "6", "7"]

    def test_http_failure(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(YouTubeError):
            get_new_videos("key", "PL123", SINCE, session=session)

    def test_bad_json(self) -> None:
        session = MagicMock()
        session.get.return_value.json.side_effect = ValueError("not json")
        with pytest.raises(YouTubeError):
            get_new_videos("key", "PL123", SINCE, session=session)


class TestAnnouncement:
    def test_no_videos(self) -> None:
        message = format_video_announcement(VideoResult(), SINCE, "Bael's playlist")
        assert message == "No videos added to Bael's playlist since 2023/02/21 00:00:00"

    def test_single_video(self) -> None:
        result = VideoResult(videos=[video("abc", "2023-03-01T00:00:00Z")])
        message = format_video_announcement(result, SINCE, "Bael's playlist")
        assert message == (
            "1 video has been added to Bael's playlist since 2023/02/21 00:00:00 UTC.\n\n"
            "1. Video abc - https://www.youtube.com/watch?v=abc"
        )

    def test_videos_sorted_oldest_first(self) -> None:
        result = VideoResult(videos=[
            video("b", "2023-03-02T00:00:00Z"),
            video("a", "2023-03-01T00:00:00Z"),
        ])
        message = format_video_announcement(result, SINCE, "P")
        assert message.startswith("2 videos have been added to P")
        assert message.index("Video a") < message.index("Video b")

    def test_overflow(self) -> None:
        result = VideoResult(videos=[video("a", "2023-03-01T00:00:00Z")], overflow=True)
        message = format_video_announcement(result, SINCE, "P")
        assert message.startswith("More than five videos have been added to P")
        assert "Displaying the last five." in message


class TestNextTimestamp:
    def test_latest_video(self) -> None:
        result = VideoResult(videos=[
            video("b", "2023-03-02T00:00:00Z"),
            video("a", "2023-03-01T00:00:00Z"),
        ])
        assert next_timestamp(result) == "2023-03-02T00:00:00Z"

    def test_now_when_empty(self) -> None:
        now = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
        stamp = next_timestamp(VideoResult(), now=now)
        assert parse_timestamp(stamp) == now
