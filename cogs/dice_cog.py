import discord
from discord.ext import commands

from utils.dice import (
    escape_asterisks, format_rolls_result, interpret_rolls, is_dice_command,
    is_math_command, is_roll_string, split_flags
)
from utils.errors import DiceError, ValidationError
from utils.expression import evaluate, format_number
from utils.logger import get_logger


GENERIC_FAILURE = "Err: Could not interpret that roll."


def build_roll_response(expression: str) -> str:
    """擲骰並返回要回覆的訊息，錯誤會轉成給用戶看的文字"""
    try:
        result = interpret_rolls(expression)
        return format_rolls_result(result)
    except ValidationError as e:
        return f"Err: {e}"
    except DiceError as e:
        get_logger().warning(f"無法解析擲骰指令 {expression!r}: {e}")
        return GENERIC_FAILURE
    except RecursionError:
        # 括號層數過深
        get_logger().exception(f"擲骰指令巢狀過深: {expression[:50]!r}")
        return GENERIC_FAILURE


def build_math_response(expression: str):
    """計算純算式，無法計算時返回 None"""
    try:
        value = evaluate(expression)
    except DiceError:
        return None
    except RecursionError:
        get_logger().exception(f"算式巢狀過深: {expression[:50]!r}")
        return None
    return f"{escape_asterisks(expression)} = **{format_number(value)}**"


class DiceCog(commands.Cog, name="Dice"):
    """骰子相關指令"""
    def __init__(self, bot, config_manager):
        self.bot = bot
        self.config_manager = config_manager

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        """處理 "!2d20kh1+5" 形式的擲骰與 "!2+3" 形式的算式"""
        if message.author.bot:
            return
        if not self.config_manager.is_allowed_channel(message.channel.id):
            return

        content = message.content.strip()
        command, flags = split_flags(content)

        if is_dice_command(command):
            response = build_roll_response(command[1:])
        elif is_math_command(command):
            response = build_math_response(command[1:])
        else:
            return

        if not response:
            return
        if "private" in flags:
            get_logger().info(f"私訊結果給 {message.author}")
            await message.author.send(f"{message.jump_url}\n{response}")
        else:
            await message.reply(response)

    @commands.hybrid_command(name="roll", description="擲骰子，例如 2d20kh1+5")
    async def roll_command(self, ctx, *, expression: str):
        """擲骰指令（斜線指令用）"""
        if not is_roll_string(expression):
            await ctx.send("Invalid roll string")
            return
        await ctx.send(build_roll_response(expression))


async def setup(bot):
    """設置Cog"""
    await bot.add_cog(DiceCog(bot, bot.config_manager))
