"""Security Commands - Verification monitoring

Admin commands:
- !security stats - Verification statistics for 7 and 30 days
- !security report - Summary with recommendations
- !security clean - Remove log entries older than the retention period
"""
from typing import TYPE_CHECKING

from discord.ext import commands

from utils.discord_formatter import (
    format_clean_embed,
    format_report_embed,
    format_security_help_embed,
    format_stats_embed,
)

if TYPE_CHECKING:
    from ..services import BotServices


def register_security_commands(bot: commands.Bot, services: "BotServices"):
    """Register security commands with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """
    from ..config import logger, BOT_PREFIX, LOG_RETENTION_DAYS

    monitor = services.monitor

    @bot.command(
        name="security",
        help="Show verification security statistics (Admin only)",
        usage="[stats|report|clean]",
    )
    @commands.guild_only()
    @commands.has_permissions(administrator=True)
    async def security_command(ctx: commands.Context, subcommand: str = "stats"):
        subcommand = subcommand.lower()
        logger.info(f"🛡️ !security {subcommand} called by {ctx.author} in {ctx.guild.name}")

        try:
            if subcommand == "stats":
                stats_7 = monitor.get_verification_stats(7)
                stats_30 = monitor.get_verification_stats(30)
                await ctx.reply(embed=format_stats_embed(stats_7, stats_30), mention_author=False)

            elif subcommand == "report":
                report = monitor.generate_security_report()
                await ctx.reply(embed=format_report_embed(report), mention_author=False)

            elif subcommand == "clean":
                progress = await ctx.reply("🧹 Cleaning old logs...", mention_author=False)
                removed = monitor.clean_old_logs(LOG_RETENTION_DAYS)
                await progress.edit(content=None, embed=format_clean_embed(removed, LOG_RETENTION_DAYS))

            else:
                await ctx.reply(embed=format_security_help_embed(BOT_PREFIX), mention_author=False)

        except Exception as e:
            logger.error(f"Error in security command: {e}")
            await ctx.reply("❌ An error occurred while running the security command.", mention_author=False)
