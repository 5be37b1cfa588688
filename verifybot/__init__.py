"""VerifyBot - Code-for-role Discord verification bot

This package contains the core bot functionality split into logical modules.

Structure:
- config.py: Configuration and initialization
- errors.py: Verification error hierarchy
- log_store.py: Append-only verification logs
- security.py: Abuse detection, reports and security alerts
- verification.py: The !verify flow
- host_info.py: Host/system diagnostics
- services.py: Service container
- event_handlers.py: Discord event handlers
- commands/: Prefix command implementations

Usage:
    from verifybot.config import logger, BOT_TOKEN
    from verifybot.services import build_services
    from verifybot.event_handlers import register_events
    from verifybot.commands import register_commands

    bot = commands.Bot(command_prefix="!", intents=intents)
    services = build_services(bot)
    register_events(bot, services)
    register_commands(bot, services)
    bot.run(BOT_TOKEN)
"""

__version__ = "1.0.0"
