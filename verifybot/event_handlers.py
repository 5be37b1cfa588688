"""Event handlers for VerifyBot

This module contains all Discord event handlers:
- on_ready: Bot startup, presence
- on_message: Prefix command dispatch (guild messages only)
- on_command, on_command_completion, on_command_error: Command logging and errors
- on_disconnect, on_resumed: Connection lifecycle

Also runs the periodic memory usage report.
"""
import random
from typing import TYPE_CHECKING

import discord
import psutil
from discord.ext import commands, tasks

if TYPE_CHECKING:
    from .services import BotServices

ACTIVITY_TYPES = {
    "playing": discord.ActivityType.playing,
    "watching": discord.ActivityType.watching,
    "listening": discord.ActivityType.listening,
    "competing": discord.ActivityType.competing,
}


def pick_activity(activities: list) -> discord.Activity:
    """Pick a random presence from the configured list."""
    choice = random.choice(activities)
    activity_type = ACTIVITY_TYPES.get(str(choice.get("type", "watching")).lower(), discord.ActivityType.watching)
    return discord.Activity(type=activity_type, name=choice["name"])


def register_events(bot: commands.Bot, services: "BotServices"):
    """Register all event handlers with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """
    from .commands import reply_transient
    from .config import (
        logger,
        GUILD_ID,
        MEMORY_REPORT_SECONDS,
        PRESENCE_ACTIVITIES,
        SHORT_REPLY_SECONDS,
    )

    @tasks.loop(seconds=MEMORY_REPORT_SECONDS)
    async def memory_report():
        rss_mb = psutil.Process().memory_info().rss / 1024 / 1024
        logger.info(f"🧠 Memory usage: {rss_mb:.2f} MB RSS | {len(bot.commands)} commands loaded")

    @bot.event
    async def on_ready():
        """Bot startup handler."""
        logger.info(f"✅ Logged in as {bot.user}! Serving {len(bot.guilds)} guilds, {len(bot.users)} users")
        logger.info(f"📋 Commands: {', '.join(sorted(c.name for c in bot.commands))}")

        if GUILD_ID and bot.get_guild(GUILD_ID) is None:
            logger.warning(f"⚠️ Bot is not a member of the configured guild {GUILD_ID}")

        if PRESENCE_ACTIVITIES:
            activity = pick_activity(PRESENCE_ACTIVITIES)
            await bot.change_presence(status=discord.Status.online, activity=activity)
            logger.info(f"🎮 Activity set: {activity.type.name} {activity.name}")

        if not memory_report.is_running():
            memory_report.start()

    @bot.event
    async def on_message(message: discord.Message):
        """Only guild messages from humans reach the commands."""
        if message.author.bot or not message.guild:
            return
        await bot.process_commands(message)

    @bot.event
    async def on_command(ctx: commands.Context):
        logger.info(f"⚡ Command {ctx.command.name} used by {ctx.author} in {ctx.guild.name}")

    @bot.event
    async def on_command_completion(ctx: commands.Context):
        logger.info(f"✅ Command {ctx.command.name} by {ctx.author} in {ctx.guild.name}: SUCCESS")

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        """Reply to permission problems, log everything unexpected."""
        if isinstance(error, (commands.CommandNotFound, commands.NoPrivateMessage)):
            return

        if isinstance(error, commands.MissingPermissions):
            logger.warning(f"🚫 {ctx.author} tried {ctx.command.name} without permission")
            await reply_transient(
                ctx,
                "❌ You do not have permission to use this command.",
                delay=SHORT_REPLY_SECONDS,
            )
            return

        if isinstance(error, commands.UserInputError):
            await reply_transient(
                ctx,
                f"❌ Invalid usage. Usage: `{ctx.prefix}{ctx.command.name} {ctx.command.usage or ''}`",
                delay=SHORT_REPLY_SECONDS,
            )
            return

        command_name = ctx.command.name if ctx.command else "unknown"
        logger.error(f"❌ Command {command_name} by {ctx.author} FAILED", exc_info=error)
        try:
            await reply_transient(
                ctx,
                "❌ An error occurred while running the command.",
                delay=SHORT_REPLY_SECONDS,
            )
        except discord.HTTPException as e:
            logger.error(f"Could not send error reply: {e}")

    @bot.event
    async def on_disconnect():
        """Handle disconnection from Discord."""
        logger.warning("⚠️ Bot disconnected from Discord! Will attempt to reconnect...")

    @bot.event
    async def on_resumed():
        """Handle reconnection to Discord."""
        logger.info("🔄 Bot reconnected to Discord successfully!")
