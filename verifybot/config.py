"""Configuration and initialization for VerifyBot

Loads settings from:
1. Environment variables (.env)
2. config.toml file
3. Default values

This module should be imported first by all other modules.
"""
import datetime
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

import discord
import toml
from dotenv import load_dotenv

# ============================================================================
# ENVIRONMENT & CONFIG LOADING
# ============================================================================

# Load environment variables
load_dotenv()
BOT_TOKEN = os.getenv("BOT_TOKEN")

# Load config from toml file
config = toml.load("config.toml") if Path("config.toml").exists() else {}

# ============================================================================
# LOGGING SETUP
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("VerifyBot")


def setup_file_logging(log_dir: Path) -> Optional[logging.Handler]:
    """Also write log lines to a per-day file under log_dir (bot-YYYY-MM-DD.log)."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"bot-{datetime.date.today().isoformat()}.log"
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        logger.error(f"❌ Could not open log file in {log_dir}: {e}")
        return None

    handler.setFormatter(logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s"))
    logger.addHandler(handler)
    return handler

# ============================================================================
# CONFIGURATION PARSING HELPERS
# ============================================================================

def parse_id(env_var_name: str, config_key: str) -> Optional[int]:
    """Parse a single Discord ID from env var or config file."""
    env_value = os.getenv(env_var_name)
    if env_value is not None:
        env_value = env_value.strip()
        return int(env_value) if env_value.isdigit() else None
    # Fall back to config.toml
    value = config.get(config_key)
    if value is None or not str(value).isdigit():
        return None
    return int(value)


def get_setting(env_var_name: str, config_key: str, default):
    """Read a scalar setting: env var first, then config.toml, then default."""
    env_value = os.getenv(env_var_name)
    if env_value:
        return type(default)(env_value)
    return config.get(config_key, default)


def load_verification_codes(path: Path) -> Dict[str, str]:
    """Load the static code -> role ID mapping.

    Args:
        path: JSON file containing an object of {"code": "role_id"}

    Returns:
        Mapping of verification code to role ID string. Empty if the file
        is missing or malformed.

    """
    if not path.exists():
        logger.error(f"❌ Verification codes file not found: {path}")
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"❌ Error loading verification codes from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"❌ Verification codes file {path} must contain a JSON object")
        return {}

    return {str(code): str(role_id) for code, role_id in data.items()}

# ============================================================================
# DISCORD CONFIGURATION
# ============================================================================

BOT_PREFIX = get_setting("BOT_PREFIX", "BOT_PREFIX", "!")
GUILD_ID = parse_id("GUILD_ID", "GUILD_ID")
VERIFY_CHANNEL_ID = parse_id("VERIFY_CHANNEL_ID", "VERIFY_CHANNEL_ID")
SECURITY_ALERT_CHANNEL_ID = parse_id("SECURITY_ALERT_CHANNEL_ID", "SECURITY_ALERT_CHANNEL_ID")

# Presence shown on startup (one is picked at random)
PRESENCE_ACTIVITIES = config.get("PRESENCE_ACTIVITIES", [
    {"name": "the verification channel", "type": "watching"},
    {"name": f"{BOT_PREFIX}verify <code>", "type": "listening"},
])

# ============================================================================
# STORAGE CONFIGURATION
# ============================================================================

LOG_DIR = Path(get_setting("LOG_DIR", "LOG_DIR", "logs"))
CODES_FILE = Path(get_setting("CODES_FILE", "CODES_FILE", "variables/codes.json"))
RATE_LIMIT_FILE = LOG_DIR / "rate_limits.json"
MAX_LOG_RECORDS = int(config.get("MAX_LOG_RECORDS", 1000))

# ============================================================================
# SECURITY CONFIGURATION
# ============================================================================

VERIFY_MAX_ATTEMPTS = int(config.get("VERIFY_MAX_ATTEMPTS", 5))
VERIFY_WINDOW_SECONDS = int(config.get("VERIFY_WINDOW_SECONDS", 300))  # 5 minutes
LOG_RETENTION_DAYS = int(config.get("LOG_RETENTION_DAYS", 30))

# Replies (and the triggering message) are removed after these delays
SHORT_REPLY_SECONDS = 5
LONG_REPLY_SECONDS = 120

# Memory usage report interval
MEMORY_REPORT_SECONDS = 300

# ============================================================================
# DISCORD BOT INTENTS
# ============================================================================

intents = discord.Intents.default()
intents.message_content = True
intents.members = True
intents.guilds = True
