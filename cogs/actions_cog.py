import re
import sqlite3
from typing import Optional

import discord
from discord.ext import commands

from cogs.dice_cog import build_roll_response
from utils.dice import is_roll_string
from utils.logger import get_logger


ACTION_NAME_REGEX = re.compile(r"^[a-zA-Z0-9_-]+$")
USAGE = (
    "Invalid request sent for action.\n"
    "To add, format like: !action <name> <roll>\n"
    "To use, format like: !action <name>\n"
    "To delete, format like: !action delete <name>"
)


class ActionsCog(commands.Cog, name="Actions"):
    """已儲存擲骰指令（動作）相關指令"""
    def __init__(self, bot, config_manager, actions_db):
        self.bot = bot
        self.config_manager = config_manager
        self.actions_db = actions_db

    async def cog_check(self, ctx) -> bool:
        return self.config_manager.is_allowed_channel(ctx.channel.id)

    @commands.hybrid_command(name="action", description="使用、新增或刪除已儲存的擲骰指令")
    async def action_command(self, ctx, name: Optional[str] = None, *, roll: Optional[str] = None):
        """動作指令"""
        if not name:
            await ctx.reply(USAGE)
            return

        if name == "delete" and roll:
            await self.delete_action(ctx, roll.strip())
            return

        if not ACTION_NAME_REGEX.match(name):
            await ctx.reply("Invalid action name")
            return

        if roll:
            await self.save_action(ctx, name, roll.strip())
        else:
            await self.use_action(ctx, name)

    @commands.hybrid_command(name="actions", description="列出所有已儲存的擲骰指令")
    async def actions_command(self, ctx):
        """列出動作"""
        actions = self.actions_db.list_actions()
        if not actions:
            await ctx.reply("No actions saved yet.")
            return

        embed = discord.Embed(
            title="Saved actions",
            description="\n".join(f"`{action.name}`: {action.roll}" for action in actions),
            color=0x7289da
        )
        await ctx.reply(embed=embed)

    @commands.command(name="heh")
    async def heh_command(self, ctx):
        """累計 heh 次數"""
        try:
            count = self.actions_db.increment_counter("heh")
        except sqlite3.Error as e:
            get_logger().error(f"更新 heh 計數時出錯: {e}")
            await ctx.reply("Heh, failed to get 'heh' count.")
            return
        await ctx.reply(f"Heh, we've counted {count} 'heh's.")

    async def use_action(self, ctx, name: str):
        """擲出已儲存的動作"""
        roll = self.actions_db.get_action_roll(name)
        if roll is None:
            await ctx.reply(f"No action named '{name}' found.")
            return
        await ctx.reply(build_roll_response(roll))

    async def save_action(self, ctx, name: str, roll: str):
        """新增或更新動作"""
        if not is_roll_string(roll):
            await ctx.reply("Invalid roll string")
            return

        existed = self.actions_db.add_or_update_action(name, roll)
        get_logger().info(f"{ctx.author} {'更新' if existed else '新增'}了動作 {name}: {roll}")
        await ctx.reply(f"Action '{name}' {'updated' if existed else 'created'}.")

    async def delete_action(self, ctx, name: str):
        """刪除動作"""
        if " " in name:
            await ctx.reply("Invalid delete request.\nFormat should be '!action delete <name>'")
            return

        if not self.actions_db.delete_action(name):
            await ctx.reply(f"Action '{name}' does not exist.")
            return

        get_logger().info(f"{ctx.author} 刪除了動作 {name}")
        await ctx.reply("Action deleted.")


async def setup(bot):
    """設置Cog"""
    await bot.add_cog(ActionsCog(bot, bot.config_manager, bot.actions_db))
