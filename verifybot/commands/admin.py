"""Admin Commands - Bot presence and host diagnostics

Admin commands:
- !activity <text> - Change the bot's activity status (Admin only)
- !hostinfo - Show host and system information (Admin only)
"""
from typing import Optional

import discord
from discord.ext import commands

from . import reply_transient


def register_admin_commands(bot: commands.Bot):
    """Register admin commands with the bot.

    Args:
        bot: The Discord bot instance
    """
    from ..config import logger, BOT_PREFIX, LONG_REPLY_SECONDS, SHORT_REPLY_SECONDS
    from ..host_info import build_host_info_embed

    @bot.command(name="activity", help="Change the bot's activity status (Admin only)", usage="<text>")
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    async def activity_command(ctx: commands.Context, *, text: Optional[str] = None):
        if not text:
            await reply_transient(
                ctx,
                f"❌ Please enter the activity text. Example: `{BOT_PREFIX}activity Watching the server`",
                delay=SHORT_REPLY_SECONDS,
            )
            return

        try:
            await bot.change_presence(activity=discord.Game(name=text))
        except Exception as e:
            logger.error(f"Error in activity command: {e}")
            await reply_transient(ctx, "❌ Failed to change activity.", delay=SHORT_REPLY_SECONDS)
            return

        logger.info(f"🎮 Activity changed by {ctx.author}: {text}")
        await reply_transient(ctx, f"✅ Activity changed to: \"{text}\"", delay=SHORT_REPLY_SECONDS)

    @bot.command(name="hostinfo", help="Show host and system information (Admin only)")
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    async def hostinfo_command(ctx: commands.Context):
        try:
            embed = build_host_info_embed(bot, ctx.author)
        except Exception as e:
            logger.error(f"Error in hostinfo command: {e}")
            await reply_transient(ctx, "❌ Failed to fetch host information.", delay=SHORT_REPLY_SECONDS)
            return

        await reply_transient(ctx, embed=embed, delay=LONG_REPLY_SECONDS)
