"""Verification Log Store - append-only JSON logs

One JSON array file per category under the log directory:
- verification_success.json
- verification_failed.json
- verification_errors.json

Every write rewrites the whole file. Files are capped at MAX_LOG_RECORDS
entries, oldest dropped first.
"""
import datetime
import json
from pathlib import Path
from typing import Optional

import discord

from .config import logger

# ============================================================================
# CATEGORIES & RECORD TYPES
# ============================================================================

SUCCESS = "verification_success"
FAILURE = "verification_failed"
ERROR = "verification_errors"
CATEGORIES = (SUCCESS, FAILURE, ERROR)

SUCCESSFUL_VERIFICATION = "SUCCESSFUL_VERIFICATION"
FAILED_VERIFICATION = "FAILED_VERIFICATION"
VERIFICATION_ERROR = "VERIFICATION_ERROR"

# ============================================================================
# RECORD HELPERS
# ============================================================================

def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def parse_timestamp(value) -> Optional[datetime.datetime]:
    """Parse an ISO-8601 record timestamp. Naive values are taken as UTC."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def user_snapshot(user: discord.abc.User) -> dict:
    return {
        "id": str(user.id),
        "username": user.name,
        "discriminator": user.discriminator,
        "display_name": user.display_name,
    }


def build_attempt_record(
    record_type: str,
    user: discord.abc.User,
    code: str,
    guild: discord.Guild,
    role: Optional[discord.Role] = None,
    error: Optional[str] = None,
    timestamp: Optional[datetime.datetime] = None,
) -> dict:
    """Build a verification attempt record in the on-disk format."""
    record = {
        "timestamp": (timestamp or utcnow()).isoformat(),
        "type": record_type,
        "user": user_snapshot(user),
        "code": code,
    }
    if role is not None:
        record["role"] = {"id": str(role.id), "name": role.name}
    if error is not None:
        record["error"] = error
    record["guild"] = {"id": str(guild.id), "name": guild.name}
    return record

# ============================================================================
# LOG STORE
# ============================================================================

class LogStore:

    """Reads and writes the per-category verification logs."""

    def __init__(self, log_dir: Path, max_records: int = 1000):
        self.log_dir = Path(log_dir)
        self.max_records = max_records

    def path_for(self, category: str) -> Path:
        return self.log_dir / f"{category}.json"

    def _load(self, category: str) -> Optional[list]:
        """Load a category file. None when it is missing or cannot be parsed."""
        log_file = self.path_for(category)
        if not log_file.exists():
            return None

        try:
            with open(log_file, encoding="utf-8") as f:
                logs = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {log_file.name}: {e}")
            return None

        if not isinstance(logs, list):
            logger.warning(f"{log_file.name} does not hold a JSON array")
            return None
        return logs

    def read_all(self, category: str) -> list:
        """Return every record in a category, or [] if the file is missing or corrupt."""
        logs = self._load(category)
        return [] if logs is None else logs

    def _write(self, category: str, logs: list):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path_for(category), "w", encoding="utf-8") as f:
            json.dump(logs, f, indent=2)

    def append(self, category: str, record: dict):
        """Append a record, keeping only the newest max_records entries.

        Write failures are logged and swallowed so a broken log never blocks
        the caller.
        """
        logs = self.read_all(category)
        logs.append(record)

        if len(logs) > self.max_records:
            logs = logs[-self.max_records:]

        try:
            self._write(category, logs)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"❌ Error writing {category} log: {e}")

    def prune(self, category: str, retention_days: int, now: Optional[datetime.datetime] = None) -> int:
        """Drop records older than retention_days.

        Returns:
            Number of records removed (0 if the file is missing or corrupt,
            in which case it is left untouched)

        """
        logs = self._load(category)
        if logs is None:
            return 0

        cutoff = (now or utcnow()) - datetime.timedelta(days=retention_days)
        kept = []
        for log in logs:
            timestamp = parse_timestamp(log.get("timestamp")) if isinstance(log, dict) else None
            if timestamp is not None and timestamp >= cutoff:
                kept.append(log)

        try:
            self._write(category, kept)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"❌ Error pruning {category} log: {e}")
            return 0

        removed = len(logs) - len(kept)
        logger.info(f"🧹 Cleaned {removed} old entries from {category}.json")
        return removed
