import discord
from discord.ext import commands

from utils.dice import MAX_QUANTITY


HELP_TEXT = (
    "**!<roll>**\n"
    "Roll dice with arithmetic, e.g. `!1d20+5`, `!2d20kh1`, `!4d6kl3`, `!(1d6+2)*2`. "
    f"`k`/`kh` keeps the highest dice, `kl` the lowest. At most {MAX_QUANTITY} dice per term.\n"
    "Add `--private` to receive the result by direct message.\n\n"

    "**!<math>**\n"
    "Evaluate plain arithmetic, e.g. `!2+3*4`.\n\n"

    "**Actions**\n"
    "`!action <name> <roll>`: save or update a roll.\n"
    "`!action <name>`: roll a saved action.\n"
    "`!action delete <name>`: delete a saved action.\n"
    "`!actions`: list saved actions.\n"
    "`!heh`: count another 'heh'."
)


class HelpCog(commands.Cog, name="Help"):
    """幫助相關指令"""
    def __init__(self, bot, config_manager):
        self.bot = bot
        self.config_manager = config_manager

    @commands.hybrid_command(name="help", description="顯示指令說明")
    async def help_command(self, ctx):
        """顯示幫助信息"""
        embed = discord.Embed(
            title="WakeBot commands",
            description=HELP_TEXT,
            color=0x1abc9c
        )
        await ctx.send(embed=embed)


async def setup(bot):
    """設置Cog"""
    await bot.add_cog(HelpCog(bot, bot.config_manager))
