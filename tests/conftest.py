import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from utils.security import RateLimiter
from verifybot.log_store import LogStore

VERIFY_CHANNEL_ID = 1001
ALERT_CHANNEL_ID = 2002
GUILD_ID = 3003


def make_user(user_id=42, name="alice"):
    user = MagicMock()
    user.id = user_id
    user.name = name
    user.discriminator = "0"
    user.display_name = name.title()
    user.bot = False
    user.get_role = MagicMock(return_value=None)
    user.add_roles = AsyncMock()
    user.__str__.return_value = name
    return user


def make_role(role_id=111, name="Verified", assignable=True):
    role = MagicMock()
    role.id = role_id
    role.name = name
    role.is_assignable = MagicMock(return_value=assignable)
    return role


def make_guild(roles=(), manage_roles=True):
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Guild"
    by_id = {role.id: role for role in roles}
    guild.get_role = MagicMock(side_effect=lambda role_id: by_id.get(role_id))
    guild.me.guild_permissions.manage_roles = manage_roles
    return guild


def make_message(author, guild, channel_id=VERIFY_CHANNEL_ID, content="!verify"):
    message = MagicMock()
    message.author = author
    message.guild = guild
    message.channel.id = channel_id
    message.content = content
    message.delete = AsyncMock()
    return message


def make_ctx(message):
    ctx = MagicMock()
    ctx.message = message
    ctx.author = message.author
    ctx.guild = message.guild
    ctx.prefix = "!"
    ctx.reply = AsyncMock()
    return ctx


def iso(dt: datetime.datetime) -> str:
    return dt.isoformat()


@pytest.fixture
def now():
    return datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def log_store(tmp_path):
    return LogStore(tmp_path / "logs")


@pytest.fixture
def rate_limiter(tmp_path):
    return RateLimiter(tmp_path / "logs" / "rate_limits.json", max_attempts=5, window_seconds=300)


@pytest.fixture
def fake_bot():
    bot = MagicMock()
    channel = MagicMock()
    channel.send = AsyncMock()
    bot.get_channel = MagicMock(return_value=channel)
    bot.fetch_channel = AsyncMock(return_value=channel)
    bot.alert_channel = channel
    return bot
