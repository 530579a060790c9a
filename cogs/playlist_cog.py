import asyncio
from typing import Optional

import discord
from discord.ext import commands, tasks

from utils.config import DEFAULT_TIMESTAMP
from utils.logger import get_logger
from utils.youtube import (
    YouTubeError, format_video_announcement, get_new_videos, next_timestamp, parse_timestamp
)


class PlaylistCog(commands.Cog, name="Playlist"):
    """播放清單新影片通知"""
    def __init__(self, bot, config_manager, youtube_api_key: Optional[str]):
        self.bot = bot
        self.config_manager = config_manager
        self.youtube_api_key = youtube_api_key

    async def cog_load(self):
        # 重新啟動後繼續定時通知
        if self.youtube_api_key and self.config_manager.global_config.announce_channel:
            self.announce_loop.start()

    async def cog_unload(self):
        self.announce_loop.cancel()

    async def announce(self, channel) -> bool:
        """查詢新影片並發送通知，返回是否成功"""
        config = self.config_manager.global_config
        try:
            since = parse_timestamp(config.playlist_timestamp)
        except ValueError:
            get_logger().error(
                f"無法解析播放清單時間 {config.playlist_timestamp!r}，改用 {DEFAULT_TIMESTAMP}"
            )
            since = parse_timestamp(DEFAULT_TIMESTAMP)

        try:
            result = await asyncio.to_thread(
                get_new_videos, self.youtube_api_key, config.playlist_id, since
            )
        except YouTubeError as e:
            get_logger().error(f"查詢播放清單時出錯: {e}")
            return False

        await channel.send(format_video_announcement(result, since, config.playlist_name))
        self.config_manager.set_playlist_timestamp(next_timestamp(result))
        get_logger().info(f"已通知 {len(result.videos)} 部新影片")
        return True

    @tasks.loop(hours=24)
    async def announce_loop(self):
        channel_id = self.config_manager.global_config.announce_channel
        channel = self.bot.get_channel(channel_id) if channel_id else None
        if channel is None:
            get_logger().warning(f"找不到播放清單通知頻道 {channel_id}")
            return
        try:
            await self.announce(channel)
        except discord.HTTPException as e:
            get_logger().error(f"發送播放清單通知時出錯: {e}")

    @announce_loop.before_loop
    async def before_announce_loop(self):
        await self.bot.wait_until_ready()

    @commands.command(name="wakebot")
    async def wakebot_command(self, ctx, action: str):
        """播放清單管理指令（需開發者）"""
        if not self.config_manager.is_developer(ctx.author.id):
            return

        action = action.lower()

        if action == "init":
            if not self.youtube_api_key:
                await ctx.send("YOUTUBE_API_KEY is not configured.")
                return
            self.config_manager.set_announce_channel(ctx.channel.id)
            # 重新開始循環，第一次執行會立即通知
            if self.announce_loop.is_running():
                self.announce_loop.restart()
            else:
                self.announce_loop.start()

        elif action == "reset":
            self.config_manager.set_playlist_timestamp(DEFAULT_TIMESTAMP)
            await ctx.send("Bot reset")

        else:
            await ctx.send("Supported actions: init, reset")


async def setup(bot):
    """設置Cog"""
    await bot.add_cog(PlaylistCog(bot, bot.config_manager, bot.youtube_api_key))
