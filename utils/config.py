import json
import os
from typing import List, Optional
from dataclasses import dataclass, asdict, field


DEFAULT_TIMESTAMP = "2023-02-21T00:00:00Z"
DEFAULT_PLAYLIST_ID = "PLrBG-2LsZMEWWoyEJKsQ3kbom9MFJ1n7e"


@dataclass
class GlobalConfig:
    """全局配置"""
    developers: List[int] = field(default_factory=list)
    allowed_channels: List[int] = field(default_factory=list)  # 空列表代表所有頻道

    # 播放清單通知
    playlist_id: str = DEFAULT_PLAYLIST_ID
    playlist_name: str = "Bael's playlist"
    announce_channel: Optional[int] = None
    playlist_timestamp: str = DEFAULT_TIMESTAMP

    def __post_init__(self):
        if self.developers is None:
            self.developers = []
        if self.allowed_channels is None:
            self.allowed_channels = []


class ConfigManager:
    """配置管理器"""
    def __init__(self, config_path: str = "config.json"):
        self.config_path = config_path
        self.global_config = GlobalConfig()
        self.env_channels: List[int] = []
        self.load_config()
        self.load_env_channels()

    def load_config(self):
        """加載配置"""
        if os.path.exists(self.config_path):
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # 加載全局配置
            global_data = data.get('global', {})
            self.global_config = GlobalConfig(
                developers=global_data.get('developers', []),
                allowed_channels=global_data.get('allowed_channels', []),
                playlist_id=global_data.get('playlist_id', DEFAULT_PLAYLIST_ID),
                playlist_name=global_data.get('playlist_name', "Bael's playlist"),
                announce_channel=global_data.get('announce_channel'),
                playlist_timestamp=global_data.get('playlist_timestamp', DEFAULT_TIMESTAMP)
            )
        else:
            # 如果配置文件不存在，創建默認配置
            self.save_config()

    def load_env_channels(self):
        """讀取環境變量 ALLOWED_CHANNEL_IDS 中的頻道（逗號分隔），不寫回配置文件"""
        raw = os.getenv("ALLOWED_CHANNEL_IDS", "")
        self.env_channels = [int(part) for part in raw.split(",") if part.strip().isdigit()]

    def save_config(self):
        """保存配置"""
        data = {
            'global': asdict(self.global_config)
        }

        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def is_developer(self, user_id: int) -> bool:
        """檢查是否為開發者"""
        return user_id in self.global_config.developers

    def is_allowed_channel(self, channel_id: int) -> bool:
        """檢查機器人是否應在此頻道回應"""
        channels = self.global_config.allowed_channels + self.env_channels
        return not channels or channel_id in channels

    def set_playlist_timestamp(self, timestamp: str):
        """保存最後通知的影片時間"""
        self.global_config.playlist_timestamp = timestamp
        self.save_config()

    def set_announce_channel(self, channel_id: Optional[int]):
        """設置播放清單通知頻道"""
        self.global_config.announce_channel = channel_id
        self.save_config()
