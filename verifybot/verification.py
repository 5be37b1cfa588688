"""Verification Handler - code for role exchange

A member posts `!verify <code>` in the verification channel. The code is
looked up in the static code -> role mapping and, if every check passes,
the role is granted.

Only invalid codes and grant outcomes are written to the verification logs;
the other rejections are configuration or user state problems, not attacks.
"""
from typing import Dict, Optional

import discord

from utils.security import RateLimiter

from .config import logger
from .errors import (
    InsufficientPermissionError,
    OperationalError,
    RateLimitedError,
    UserInputError,
)
from .log_store import (
    ERROR,
    FAILURE,
    SUCCESS,
    FAILED_VERIFICATION,
    SUCCESSFUL_VERIFICATION,
    VERIFICATION_ERROR,
    LogStore,
    build_attempt_record,
)
from .security import send_security_alert


class VerificationHandler:

    """Runs a verification request through every gate and grants the role."""

    def __init__(
        self,
        bot: discord.Client,
        codes: Dict[str, str],
        rate_limiter: RateLimiter,
        log_store: LogStore,
        verify_channel_id: Optional[int],
        alert_channel_id: Optional[int] = None,
        prefix: str = "!",
    ):
        self.bot = bot
        self.codes = codes
        self.rate_limiter = rate_limiter
        self.log_store = log_store
        self.verify_channel_id = verify_channel_id
        self.alert_channel_id = alert_channel_id
        self.prefix = prefix

    def resolve_role(self, guild: discord.Guild, role_id: str) -> Optional[discord.Role]:
        if not str(role_id).isdigit():
            return None
        return guild.get_role(int(role_id))

    @staticmethod
    def bot_can_grant(guild: discord.Guild, role: discord.Role) -> bool:
        """Bot needs Manage Roles and a top role above the target role."""
        return guild.me.guild_permissions.manage_roles and role.is_assignable()

    async def verify(self, message: discord.Message, code: Optional[str]) -> discord.Role:
        """Verify a member with a code.

        Args:
            message: The message that invoked the command
            code: The code typed by the member (None if missing)

        Returns:
            The role that was granted

        Raises:
            UserInputError: wrong channel, missing or invalid code
            RateLimitedError: too many attempts in the current window
            InsufficientPermissionError: role missing, already held, or not grantable
            OperationalError: Discord refused the role grant

        """
        member = message.author
        guild = message.guild

        # 1. Channel gate
        if self.verify_channel_id is None or message.channel.id != self.verify_channel_id:
            raise UserInputError(
                f"❌ `{self.prefix}verify` can only be used in the designated verification channel.",
            )

        # 2. Input gate
        if not code:
            raise UserInputError(
                f"❌ Please enter a verification code. Example: `{self.prefix}verify Admin123`",
            )

        # 3. Rate gate
        limit = self.rate_limiter.check_and_record(member.id)
        if not limit.allowed:
            logger.warning(f"⏳ Verification rate limit hit by {member} ({member.id})")
            raise RateLimitedError(limit.seconds_remaining)

        # 4. Code lookup
        role_id = self.codes.get(code)
        if role_id is None:
            logger.warning(f"🚫 Invalid verification code from {member} ({member.id})")
            self.log_store.append(FAILURE, build_attempt_record(FAILED_VERIFICATION, member, code, guild))
            await send_security_alert(self.bot, self.alert_channel_id, FAILED_VERIFICATION, member, code, guild)
            raise UserInputError("❌ Invalid code.")

        # 5. Role must still exist
        role = self.resolve_role(guild, role_id)
        if role is None:
            logger.error(f"❌ Role {role_id} for a verification code is missing from {guild.name}")
            raise InsufficientPermissionError(
                "❌ Role not found. Check the role ID configured for this code.",
            )

        # 6. Already verified
        if member.get_role(role.id) is not None:
            raise InsufficientPermissionError(f"❌ You already have the role \"{role.name}\".")

        # 7. Bot must be able to grant it
        if not self.bot_can_grant(guild, role):
            logger.error(f"❌ Cannot grant role {role.name}: bot role is not above it or lacks Manage Roles")
            raise InsufficientPermissionError(
                f"❌ The bot cannot grant the role \"{role.name}\". "
                "Make sure the bot's role is above this role.",
            )

        # 8. Grant
        try:
            await member.add_roles(role, reason=f"Verified with code ({member.id})")
        except discord.HTTPException as e:
            logger.error(f"❌ Failed to grant {role.name} to {member} ({member.id}): {e}")
            self.log_store.append(ERROR, build_attempt_record(VERIFICATION_ERROR, member, code, guild, error=str(e)))
            raise OperationalError(
                "❌ Failed to grant the role. Make sure the bot has sufficient permissions.",
                details=str(e),
            ) from e

        logger.info(f"✅ Verified {member} ({member.id}) -> {role.name}")
        self.log_store.append(SUCCESS, build_attempt_record(SUCCESSFUL_VERIFICATION, member, code, guild, role=role))
        await send_security_alert(self.bot, self.alert_channel_id, SUCCESSFUL_VERIFICATION, member, code, guild, role)
        return role
