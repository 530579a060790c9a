"""
YouTube 播放清單查詢

取得指定時間之後新加入播放清單的影片，並格式化成通知訊息。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import requests


PLAYLIST_ITEMS_URL = "https://www.googleapis.com/youtube/v3/playlistItems"
VIDEO_URL = "https://www.youtube.com/watch?v={}"
MAX_ANNOUNCED = 5


class YouTubeError(Exception):
    """查詢播放清單失敗"""


@dataclass
class VideoOverview:
    """影片摘要"""
    title: str
    description: str
    id: str
    timestamp: str

    @property
    def published_at(self) -> datetime:
        return parse_timestamp(self.timestamp)


@dataclass
class VideoResult:
    """查詢結果，overflow 代表超過五部影片只保留最後五部"""
    videos: List[VideoOverview] = field(default_factory=list)
    overflow: bool = False


def parse_timestamp(value: str) -> datetime:
    """解析 RFC 3339 時間，例如 2023-02-21T00:00:00Z"""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def get_new_videos(api_key: str, playlist_id: str, since: datetime,
                   session: Optional[requests.Session] = None) -> VideoResult:
    """查詢 since 之後加入播放清單的影片"""
    http = session or requests
    try:
        response = http.get(
            PLAYLIST_ITEMS_URL,
            params={
                "part": "snippet",
                "playlistId": playlist_id,
                "maxResults": 50,
                "key": api_key,
            },
            headers={"Accept": "application/json"},
            timeout=10,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise YouTubeError(f"There was a problem fetching new youtube videos: {e}") from e

    videos = []
    for item in data.get("items", []):
        snippet = item.get("snippet", {})
        published = snippet.get("publishedAt", "")
        try:
            published_at = parse_timestamp(published)
        except ValueError:
            continue
        if published_at > since:
            videos.append(VideoOverview(
                title=snippet.get("title", ""),
                description=snippet.get("description", ""),
                id=snippet.get("resourceId", {}).get("videoId", ""),
                timestamp=published
            ))

    if len(videos) > MAX_ANNOUNCED:
        return VideoResult(videos=videos[-MAX_ANNOUNCED:], overflow=True)
    return VideoResult(videos=videos, overflow=False)


def next_timestamp(result: VideoResult, now: Optional[datetime] = None) -> str:
    """下一次查詢的起點：最新影片的時間，沒有新影片則為現在"""
    if not result.videos:
        now = now or datetime.now(timezone.utc)
        return now.isoformat()
    latest = max(result.videos, key=lambda video: video.published_at)
    return latest.timestamp


def format_video_announcement(result: VideoResult, since: datetime, playlist_name: str) -> str:
    """格式化新影片通知"""
    since_str = since.strftime("%Y/%m/%d %H:%M:%S")

    if not result.videos:
        return f"No videos added to {playlist_name} since {since_str}"

    videos = sorted(result.videos, key=lambda video: video.published_at)
    video_lines = "\n".join(
        f"{i + 1}. {video.title} - {VIDEO_URL.format(video.id)}"
        for i, video in enumerate(videos)
    )

    if result.overflow:
        return (
            f"More than five videos have been added to {playlist_name} since {since_str} UTC.\n"
            f"Displaying the last five.\n\n{video_lines}"
        )

    count = len(videos)
    return (
        f"{count} video{'' if count == 1 else 's'} {'has' if count == 1 else 'have'} "
        f"been added to {playlist_name} since {since_str} UTC.\n\n{video_lines}"
    )
