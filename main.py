#!/usr/bin/env python3
"""VerifyBot - Main Entry Point

A Discord bot that grants roles in exchange for verification codes, with
rate limiting, verification logs and abuse reports for administrators.
"""
import asyncio
import signal
import sys

import discord
from discord.ext import commands

from verifybot.config import (
    BOT_PREFIX,
    BOT_TOKEN,
    GUILD_ID,
    LOG_DIR,
    intents,
    logger,
    setup_file_logging,
)
from verifybot.commands import register_commands
from verifybot.event_handlers import register_events
from verifybot.services import build_services


def create_bot() -> commands.Bot:
    """Build the bot with its services, events and commands wired up."""
    bot = commands.Bot(
        command_prefix=BOT_PREFIX,
        intents=intents,
        case_insensitive=True,
        help_command=None,
    )
    services = build_services(bot)

    register_events(bot, services)
    register_commands(bot, services)
    return bot


async def run_bot(bot: commands.Bot):
    """Run until the connection ends or SIGINT/SIGTERM arrives."""
    loop = asyncio.get_running_loop()
    shutdown_tasks = set()

    def request_shutdown(signame: str):
        logger.info(f"🛑 Received {signame}, shutting down...")
        task = loop.create_task(bot.close())
        shutdown_tasks.add(task)
        task.add_done_callback(shutdown_tasks.discard)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig.name)
        except NotImplementedError:
            # Windows: fall back to KeyboardInterrupt
            pass

    async with bot:
        await bot.start(BOT_TOKEN, reconnect=True)


def main():
    """Main entry point for the bot."""
    if not BOT_TOKEN:
        logger.error("❌ BOT_TOKEN not found in environment variables!")
        sys.exit(1)

    if not GUILD_ID:
        logger.error("❌ GUILD_ID not found in environment variables!")
        sys.exit(1)

    setup_file_logging(LOG_DIR)
    logger.info("🚀 Starting VerifyBot...")

    bot = create_bot()

    try:
        asyncio.run(run_bot(bot))
    except discord.LoginFailure:
        logger.error("❌ INVALID TOKEN - Bot token may be revoked!")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("🛑 Interrupted, shutting down...")

    logger.info("👋 Bot stopped")
    sys.exit(0)


if __name__ == "__main__":
    main()
