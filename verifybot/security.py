"""Security System - Verification Abuse Detection

Reads the verification logs and looks for three kinds of abuse:
1. Repeated failures: the same user failing 3+ times in the window
2. Suspicious codes: codes that look like credential guessing ("admin", "123456", ...)
3. Rapid attempts: back-to-back failures from one user less than a minute apart

Also sends verification alerts to the security alert channel.
"""
import datetime
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import discord

from utils.security import sanitize_text

from .config import logger
from .log_store import (
    CATEGORIES,
    FAILURE,
    SUCCESS,
    SUCCESSFUL_VERIFICATION,
    LogStore,
    parse_timestamp,
    utcnow,
)

# Codes matching any of these look like someone guessing staff credentials
SUSPICIOUS_PATTERNS = [
    re.compile(r"admin", re.IGNORECASE),
    re.compile(r"owner", re.IGNORECASE),
    re.compile(r"moderator", re.IGNORECASE),
    re.compile(r"root", re.IGNORECASE),
    re.compile(r"sudo", re.IGNORECASE),
    re.compile(r"123456"),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
]

REPEATED_FAILURE_THRESHOLD = 3
RAPID_ATTEMPT_MS = 60 * 1000

# ============================================================================
# RESULT TYPES
# ============================================================================

@dataclass
class SuspiciousActivity:
    repeated_failures: Dict[str, dict] = field(default_factory=dict)
    suspicious_codes: List[dict] = field(default_factory=list)
    rapid_attempts: List[dict] = field(default_factory=list)


@dataclass
class VerificationStats:
    period: str
    successful: int
    failed: int
    total: int
    success_rate: str
    suspicious_activity: SuspiciousActivity


@dataclass
class SecurityReport:
    timestamp: str
    last_7_days: VerificationStats
    last_30_days: VerificationStats
    recommendations: List[str]

# ============================================================================
# DETECTION
# ============================================================================

def is_suspicious_code(code) -> bool:
    """Check whether a submitted code matches any suspicious pattern."""
    if not isinstance(code, str):
        return False
    return any(pattern.search(code) for pattern in SUSPICIOUS_PATTERNS)


def _user_id(log: dict) -> str:
    return str((log.get("user") or {}).get("id"))


def detect_suspicious_activity(failed_logs: List[dict]) -> SuspiciousActivity:
    """Analyse failed verification records.

    Args:
        failed_logs: Failure records already filtered to the time window

    Returns:
        SuspiciousActivity with repeated failures (3+ per user), every
        suspicious code occurrence, and adjacent same-user failure pairs
        under 60 seconds apart

    """
    activity = SuspiciousActivity()

    for log in failed_logs:
        user_id = _user_id(log)
        entry = activity.repeated_failures.setdefault(
            user_id, {"count": 0, "codes": [], "user": log.get("user") or {}},
        )
        entry["count"] += 1
        entry["codes"].append(log.get("code"))

        if is_suspicious_code(log.get("code")):
            activity.suspicious_codes.append({
                "user": log.get("user") or {},
                "code": log.get("code"),
                "timestamp": log.get("timestamp"),
            })

    activity.repeated_failures = {
        user_id: entry for user_id, entry in activity.repeated_failures.items()
        if entry["count"] >= REPEATED_FAILURE_THRESHOLD
    }

    # Only adjacent pairs are compared: three quick failures give two pairs
    timed = [(parse_timestamp(log.get("timestamp")), log) for log in failed_logs]
    timed = sorted((item for item in timed if item[0] is not None), key=lambda item: item[0])
    for (current_time, current), (next_time, following) in zip(timed, timed[1:]):
        if _user_id(current) != _user_id(following):
            continue
        time_diff_ms = int((next_time - current_time).total_seconds() * 1000)
        if time_diff_ms < RAPID_ATTEMPT_MS:
            activity.rapid_attempts.append({
                "user": current.get("user") or {},
                "attempts": [current, following],
                "time_diff_ms": time_diff_ms,
            })

    return activity

# ============================================================================
# STATISTICS & REPORTS
# ============================================================================

class SecurityMonitor:

    """Computes verification statistics and reports from the log store."""

    def __init__(self, log_store: LogStore):
        self.log_store = log_store

    def _recent(self, category: str, cutoff: datetime.datetime) -> List[dict]:
        recent = []
        for log in self.log_store.read_all(category):
            if not isinstance(log, dict):
                continue
            timestamp = parse_timestamp(log.get("timestamp"))
            if timestamp is not None and timestamp >= cutoff:
                recent.append(log)
        return recent

    def get_verification_stats(self, days: int = 7, now: Optional[datetime.datetime] = None) -> VerificationStats:
        """Summarise successes and failures over the last `days` days."""
        cutoff = (now or utcnow()) - datetime.timedelta(days=days)
        recent_success = self._recent(SUCCESS, cutoff)
        recent_failed = self._recent(FAILURE, cutoff)

        total = len(recent_success) + len(recent_failed)
        success_rate = f"{len(recent_success) / total * 100:.2f}%" if total else "0%"

        return VerificationStats(
            period=f"{days} days",
            successful=len(recent_success),
            failed=len(recent_failed),
            total=total,
            success_rate=success_rate,
            suspicious_activity=detect_suspicious_activity(recent_failed),
        )

    def generate_security_report(self, now: Optional[datetime.datetime] = None) -> SecurityReport:
        """Build the 7/30 day summary with recommendations.

        An empty recommendations list means no issues were detected.
        """
        now = now or utcnow()
        stats = self.get_verification_stats(7, now=now)
        long_term = self.get_verification_stats(30, now=now)

        recommendations = []
        if stats.failed > stats.successful:
            recommendations.append("High failure rate detected - consider reviewing verification codes")
        if stats.suspicious_activity.suspicious_codes:
            recommendations.append("Suspicious code attempts detected - monitor for potential brute force attacks")
        if stats.suspicious_activity.repeated_failures:
            recommendations.append("Users with multiple failed attempts detected - consider implementing stricter rate limiting")

        return SecurityReport(
            timestamp=now.isoformat(),
            last_7_days=stats,
            last_30_days=long_term,
            recommendations=recommendations,
        )

    def clean_old_logs(self, retention_days: int = 30, now: Optional[datetime.datetime] = None) -> Dict[str, int]:
        """Prune every log category. Returns removed counts per category."""
        return {
            category: self.log_store.prune(category, retention_days, now=now)
            for category in CATEGORIES
        }

# ============================================================================
# SECURITY ALERTS
# ============================================================================

def build_security_alert_embed(
    alert_type: str,
    user: discord.abc.User,
    code: str,
    guild: discord.Guild,
    role: Optional[discord.Role] = None,
) -> discord.Embed:
    """Create the alert embed for a successful or failed verification."""
    embed = discord.Embed(
        title="🔐 Security Alert - Verification Activity",
        timestamp=utcnow(),
    )
    safe_code = sanitize_text(code, max_length=100) or "(empty)"

    if alert_type == SUCCESSFUL_VERIFICATION:
        embed.color = discord.Color.green()
        embed.description = "✅ **Successful Verification**"
        embed.add_field(name="👤 User", value=f"{user.name} ({user.id})", inline=True)
        embed.add_field(name="🔑 Code Used", value=f"`{safe_code}`", inline=True)
        embed.add_field(name="🏷️ Role Granted", value=role.name if role else "Unknown", inline=True)
    else:
        embed.color = discord.Color.red()
        embed.description = "❌ **Failed Verification Attempt**"
        embed.add_field(name="👤 User", value=f"{user.name} ({user.id})", inline=True)
        embed.add_field(name="🔑 Invalid Code", value=f"`{safe_code}`", inline=True)
        if is_suspicious_code(code):
            embed.add_field(name="⚠️ Pattern", value="Code matches a suspicious pattern", inline=True)

    embed.add_field(name="🏠 Server", value=guild.name, inline=False)
    embed.set_thumbnail(url=user.display_avatar.url)
    return embed


async def send_security_alert(
    bot: discord.Client,
    channel_id: Optional[int],
    alert_type: str,
    user: discord.abc.User,
    code: str,
    guild: discord.Guild,
    role: Optional[discord.Role] = None,
):
    """Post a verification alert to the security alert channel.

    Does nothing when no alert channel is configured. Failures are logged,
    never raised.
    """
    if not channel_id:
        return

    embed = build_security_alert_embed(alert_type, user, code, guild, role)
    try:
        channel = bot.get_channel(channel_id) or await bot.fetch_channel(channel_id)
        await channel.send(embed=embed)
    except discord.HTTPException as e:
        logger.error(f"Failed to send security alert to channel {channel_id}: {e}")
    except Exception as e:
        logger.error(f"Unexpected error sending security alert: {e}")
