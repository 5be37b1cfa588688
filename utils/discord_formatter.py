"""Convert verification statistics and reports to Discord embeds"""
import datetime

import discord


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def format_stats_embed(stats_7, stats_30, max_users: int = 5) -> discord.Embed:
    """Convert 7 and 30 day VerificationStats into the !security stats embed.

    Args:
        stats_7: Stats for the last 7 days
        stats_30: Stats for the last 30 days
        max_users: How many repeat offenders to list

    Returns:
        Discord Embed object
    """
    embed = discord.Embed(
        title="📊 Verification Security Statistics",
        color=discord.Color.blue(),
        timestamp=_now(),
    )

    for label, stats in (("📅 Last 7 Days", stats_7), ("📅 Last 30 Days", stats_30)):
        embed.add_field(
            name=label,
            value=(
                f"✅ Successful: {stats.successful}\n"
                f"❌ Failed: {stats.failed}\n"
                f"📈 Success Rate: {stats.success_rate}"
            ),
            inline=True,
        )

    activity = stats_7.suspicious_activity
    embed.add_field(
        name="🔍 Suspicious Activity (7 days)",
        value=(
            f"🔄 Users with repeated failures: {len(activity.repeated_failures)}\n"
            f"⚠️ Suspicious codes: {len(activity.suspicious_codes)}\n"
            f"⚡ Rapid attempts: {len(activity.rapid_attempts)}"
        ),
        inline=False,
    )

    offenders = list(activity.repeated_failures.values())[:max_users]
    if offenders:
        embed.add_field(
            name="⚠️ Suspicious Users",
            value="\n".join(
                f"• {entry['user'].get('username', 'Unknown')} ({entry['count']} failures)"
                for entry in offenders
            ),
            inline=False,
        )

    return embed


def format_report_embed(report) -> discord.Embed:
    """Convert a SecurityReport into the !security report embed."""
    embed = discord.Embed(
        title="📋 Security Report",
        color=discord.Color.orange(),
        timestamp=_now(),
    )

    for label, stats in (("📊 7 Day Summary", report.last_7_days), ("📊 30 Day Summary", report.last_30_days)):
        embed.add_field(
            name=label,
            value=f"Total: {stats.total}\nSuccessful: {stats.successful}\nFailed: {stats.failed}",
            inline=True,
        )

    if report.recommendations:
        embed.add_field(
            name="💡 Security Recommendations",
            value="\n".join(f"• {rec}" for rec in report.recommendations),
            inline=False,
        )
    else:
        embed.add_field(
            name="✅ Security Status",
            value="No security issues detected.",
            inline=False,
        )

    return embed


def format_clean_embed(removed: dict, retention_days: int) -> discord.Embed:
    """Summarise a log retention sweep."""
    embed = discord.Embed(
        title="🧹 Log Cleanup Complete",
        description=f"Logs older than {retention_days} days have been removed.",
        color=discord.Color.green(),
        timestamp=_now(),
    )
    if removed:
        embed.add_field(
            name="Removed",
            value="\n".join(f"`{category}`: {count}" for category, count in removed.items()),
            inline=False,
        )
    return embed


def format_security_help_embed(prefix: str) -> discord.Embed:
    embed = discord.Embed(
        title="📚 Security Command Help",
        description="Monitoring commands for the verification system",
        color=discord.Color.blue(),
    )
    embed.add_field(name=f"{prefix}security stats", value="Show verification statistics", inline=False)
    embed.add_field(name=f"{prefix}security report", value="Show the full security report", inline=False)
    embed.add_field(name=f"{prefix}security clean", value="Remove old logs (30+ days)", inline=False)
    return embed
