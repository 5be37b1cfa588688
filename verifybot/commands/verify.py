"""Verify Command - exchange a verification code for a role

- !verify <code> - Only in the verification channel, rate limited per user
"""
from typing import TYPE_CHECKING, Optional

from discord.ext import commands

from . import reply_transient
from ..config import logger, SHORT_REPLY_SECONDS
from ..errors import OperationalError, VerificationError

if TYPE_CHECKING:
    from ..services import BotServices


def register_verify_command(bot: commands.Bot, services: "BotServices"):
    """Register the verify command with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """

    @bot.command(name="verify", help="Verify with a code to receive a role", usage="<code>")
    @commands.guild_only()
    async def verify_command(ctx: commands.Context, *, code: Optional[str] = None):
        # Raw rest of the message, first word only: quotes are part of the code
        words = code.split() if code else []
        code = words[0] if words else None
        try:
            role = await services.verification.verify(ctx.message, code)
        except OperationalError as e:
            logger.error(f"Verification error for {ctx.author}: {e.details}")
            await reply_transient(ctx, e.message, delay=SHORT_REPLY_SECONDS)
            return
        except VerificationError as e:
            await reply_transient(ctx, e.message, delay=SHORT_REPLY_SECONDS)
            return

        await reply_transient(
            ctx,
            f"✅ Verification successful! Role `{role.name}` has been granted.",
            delay=SHORT_REPLY_SECONDS,
        )
