"""Command modules for VerifyBot

Contains all prefix command implementations organized by category.

Categories:
- verify.py: Code-for-role verification
- admin.py: Presence and host diagnostics (Admin only)
- security.py: Verification statistics, reports and log cleanup (Admin only)
"""

from typing import TYPE_CHECKING

import discord

if TYPE_CHECKING:
    from discord.ext import commands

    from ..services import BotServices


async def reply_transient(ctx: "commands.Context", content: str = None, *, embed: discord.Embed = None, delay: float = 5):
    """Reply, then delete both the reply and the invoking message after `delay` seconds."""
    await ctx.reply(content, embed=embed, delete_after=delay, mention_author=False)
    await ctx.message.delete(delay=delay)


def register_commands(bot: "commands.Bot", services: "BotServices"):
    """Register all commands with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services (log store, rate limiter, verification handler)
    """
    from .verify import register_verify_command
    from .admin import register_admin_commands
    from .security import register_security_commands

    register_verify_command(bot, services)
    register_admin_commands(bot)
    register_security_commands(bot, services)
