"""Service container shared by event handlers and commands

Everything that holds state (log files, rate limit table, code mapping) is
built once here and handed to the register_* functions explicitly.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING

from utils.security import RateLimiter

from .log_store import LogStore
from .security import SecurityMonitor
from .verification import VerificationHandler

if TYPE_CHECKING:
    from discord.ext import commands


@dataclass
class BotServices:
    log_store: LogStore
    rate_limiter: RateLimiter
    monitor: SecurityMonitor
    verification: VerificationHandler


def build_services(bot: "commands.Bot") -> BotServices:
    """Create the services from the loaded configuration."""
    from .config import (
        logger,
        BOT_PREFIX,
        CODES_FILE,
        LOG_DIR,
        MAX_LOG_RECORDS,
        RATE_LIMIT_FILE,
        SECURITY_ALERT_CHANNEL_ID,
        VERIFY_CHANNEL_ID,
        VERIFY_MAX_ATTEMPTS,
        VERIFY_WINDOW_SECONDS,
        load_verification_codes,
    )

    codes = load_verification_codes(CODES_FILE)
    logger.info(f"🔑 Loaded {len(codes)} verification codes from {CODES_FILE}")
    if VERIFY_CHANNEL_ID is None:
        logger.warning("⚠️ VERIFY_CHANNEL_ID not set - !verify will be rejected everywhere")

    log_store = LogStore(LOG_DIR, max_records=MAX_LOG_RECORDS)
    rate_limiter = RateLimiter(
        RATE_LIMIT_FILE,
        max_attempts=VERIFY_MAX_ATTEMPTS,
        window_seconds=VERIFY_WINDOW_SECONDS,
    )

    return BotServices(
        log_store=log_store,
        rate_limiter=rate_limiter,
        monitor=SecurityMonitor(log_store),
        verification=VerificationHandler(
            bot,
            codes,
            rate_limiter,
            log_store,
            verify_channel_id=VERIFY_CHANNEL_ID,
            alert_channel_id=SECURITY_ALERT_CHANNEL_ID,
            prefix=BOT_PREFIX,
        ),
    )
