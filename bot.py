import discord
from discord.ext import commands
import os
from pathlib import Path
from typing import Optional

from utils.config import ConfigManager
from utils.logger import get_logger
from models.database import ActionsDB


EXTENSIONS = [
    "cogs.dice_cog",
    "cogs.actions_cog",
    "cogs.playlist_cog",
    "cogs.help_cog",
]


class WakeBot:
    """WakeBot機器人類"""
    def __init__(self):
        # 遍歷查找環境變量和數據庫文件
        root_dir = self.find_project_root()

        # 查找環境變量文件
        env_file = self.find_env_file(root_dir)
        if env_file:
            from dotenv import load_dotenv
            load_dotenv(dotenv_path=env_file)

        # 從環境變量獲取token
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            raise ValueError("未找到 DISCORD_TOKEN 環境變量")

        self.token = token
        self.youtube_api_key = os.getenv("YOUTUBE_API_KEY")
        if not self.youtube_api_key:
            get_logger().warning("未找到 YOUTUBE_API_KEY 環境變量，播放清單通知已停用")

        self.config_manager = ConfigManager(config_path=str(root_dir / "config.json"))
        self.actions_db = ActionsDB(db_path=str(root_dir / "actions.db"))

        # 設置機器人
        intents = discord.Intents.default()
        intents.message_content = True  # 需要讀取消息內容
        intents.guilds = True

        self.bot = commands.Bot(
            command_prefix="!",
            intents=intents,
            description="擲骰與播放清單通知機器人",
            help_command=None
        )
        # 讓各Cog的 setup() 取得共用資源
        self.bot.config_manager = self.config_manager
        self.bot.actions_db = self.actions_db
        self.bot.youtube_api_key = self.youtube_api_key

        self.setup_events()

    def find_project_root(self) -> Path:
        """查找項目根目錄"""
        current_path = Path(__file__).resolve()

        # 搜索包含 .git 目錄的父目錄
        for parent in current_path.parents:
            if (parent / '.git').exists():
                return parent

        return current_path.parent

    def find_env_file(self, root_dir: Path) -> Optional[Path]:
        """查找環境變量文件"""
        env_file = root_dir / ".env"
        if env_file.is_file():
            get_logger().info(f"找到環境變量文件: {env_file}")
            return env_file

        get_logger().info(f"在 {root_dir} 中未找到 .env 文件，使用系統環境變量")
        return None

    def setup_events(self):
        """設置事件處理器"""
        @self.bot.event
        async def on_ready():
            get_logger().info(f'{self.bot.user} 已經上線! 已連接到 {len(self.bot.guilds)} 個服務器')

            # 同步應用命令
            try:
                await self.bot.tree.sync()
                get_logger().info("應用命令已同步")
            except discord.HTTPException as e:
                get_logger().error(f"同步應用命令時出錯: {e}")

        @self.bot.event
        async def on_command_error(ctx, error):
            """像 "!2d6" 這類訊息不是指令，由 DiceCog 處理"""
            if isinstance(error, (commands.CommandNotFound, commands.CheckFailure)):
                return
            if isinstance(error, commands.UserInputError):
                await ctx.reply(f"Err: {error}")
                return
            get_logger().error(f"執行指令 {ctx.command} 時出錯: {error}")

    async def add_cogs(self):
        """添加Cog模塊"""
        for extension in EXTENSIONS:
            await self.bot.load_extension(extension)

    async def start(self):
        """啟動機器人"""
        await self.add_cogs()
        await self.bot.start(self.token)

    async def close(self):
        """關閉機器人"""
        await self.bot.close()
