"""Security utilities - verification rate limiting and text sanitization"""
import json
import logging
import math
import re
import time
from pathlib import Path
from typing import NamedTuple, Optional

logger = logging.getLogger("VerifyBot.rate_limit")


def sanitize_text(text: str, max_length: int = 10000) -> str:
    """Sanitize text content to only allow specific characters.

    Args:
        text: Text to sanitize
        max_length: Maximum length to truncate to

    Returns:
        Sanitized text string

    """
    if not text:
        return ""

    # Backticks and markdown would break out of the code span in embeds
    text = re.sub(r'[^A-Za-z0-9\(\)_\-<>:,\{\}\'"\ \\\[\]\.\|@#!?]', "", text)

    if len(text) > max_length:
        text = text[:max_length]

    return text


class RateLimitResult(NamedTuple):
    allowed: bool
    seconds_remaining: Optional[int] = None


class RateLimiter:

    """Persisted per-user rate limiter for verification attempts.

    Keeps one entry per user in a JSON file:
        {"<user_id>": {"attempts": 3, "first_attempt": <epoch ms>}}

    The window starts at a user's first attempt and resets once it is older
    than window_seconds. Any failure to read or write the file lets the
    attempt through.
    """

    def __init__(self, state_file: Path, max_attempts: int = 5, window_seconds: int = 300):
        """Initialize rate limiter.

        Args:
            state_file: JSON file holding the attempt table
            max_attempts: Attempts allowed per window
            window_seconds: Window length in seconds

        """
        self.state_file = Path(state_file)
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    @property
    def window_ms(self) -> int:
        return self.window_seconds * 1000

    def _load(self) -> dict:
        if not self.state_file.exists():
            return {}
        try:
            with open(self.state_file, encoding="utf-8") as f:
                table = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read rate limit table, starting fresh: {e}")
            return {}
        return table if isinstance(table, dict) else {}

    def _save(self, table: dict):
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.state_file, "w", encoding="utf-8") as f:
            json.dump(table, f, indent=2)

    def check_and_record(self, user_id, now: Optional[float] = None) -> RateLimitResult:
        """Check whether user_id may attempt verification and count the attempt.

        Args:
            user_id: Discord user ID
            now: Current time in epoch seconds (defaults to time.time())

        Returns:
            RateLimitResult; seconds_remaining is set only when denied

        """
        now_ms = int((time.time() if now is None else now) * 1000)
        key = str(user_id)

        try:
            table = self._load()
            entry = table.get(key)

            if not isinstance(entry, dict) or now_ms - entry.get("first_attempt", 0) > self.window_ms:
                table[key] = {"attempts": 1, "first_attempt": now_ms}
                self._save(table)
                return RateLimitResult(True)

            if entry.get("attempts", 0) >= self.max_attempts:
                elapsed = now_ms - entry["first_attempt"]
                remaining = math.ceil((self.window_ms - elapsed) / 1000)
                return RateLimitResult(False, max(remaining, 1))

            entry["attempts"] = entry.get("attempts", 0) + 1
            self._save(table)
            return RateLimitResult(True)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"❌ Error checking rate limit for {user_id}, allowing attempt: {e}")
            return RateLimitResult(True)
