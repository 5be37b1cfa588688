"""Tests for abuse detection, statistics, reports and security alerts."""

import datetime

import discord
import pytest

from verifybot.log_store import ERROR, FAILURE, SUCCESS, FAILED_VERIFICATION, SUCCESSFUL_VERIFICATION
from verifybot.security import (
    SecurityMonitor,
    build_security_alert_embed,
    detect_suspicious_activity,
    is_suspicious_code,
    send_security_alert,
)

from .conftest import ALERT_CHANNEL_ID, make_guild, make_role, make_user

BASE = datetime.datetime(2026, 10, 19, 11, 0, tzinfo=datetime.timezone.utc)


def failure(user_id, code="nope", seconds=0, base=BASE):
    return {
        "timestamp": (base + datetime.timedelta(seconds=seconds)).isoformat(),
        "type": FAILED_VERIFICATION,
        "user": {"id": str(user_id), "username": f"user{user_id}"},
        "code": code,
    }


def success(user_id, seconds=0, base=BASE):
    return {
        "timestamp": (base + datetime.timedelta(seconds=seconds)).isoformat(),
        "type": SUCCESSFUL_VERIFICATION,
        "user": {"id": str(user_id), "username": f"user{user_id}"},
        "code": "Admin123",
        "role": {"id": "111", "name": "R1"},
    }


class TestSuspiciousCodes:
    @pytest.mark.parametrize("code", [
        "admin", "ADMIN", "SuperAdmin", "owner", "Moderator", "root", "sudo",
        "password1", "mysecret", "123456", "x1234567",
    ])
    def test_risky_codes_match(self, code):
        assert is_suspicious_code(code)

    @pytest.mark.parametrize("code", ["hello", "12345", "verify-me", ""])
    def test_ordinary_codes_do_not_match(self, code):
        assert not is_suspicious_code(code)

    def test_non_string_code(self):
        assert not is_suspicious_code(None)

    def test_record_with_null_user_is_tolerated(self):
        record = failure(1, "admin")
        record["user"] = None
        activity = detect_suspicious_activity([record, failure(1, "nope", 10)])
        assert activity.suspicious_codes[0]["user"] == {}
        assert activity.rapid_attempts == []

    def test_every_occurrence_is_reported(self):
        logs = [failure(1, "admin", 0), failure(1, "admin", 600), failure(2, "root", 1200)]
        activity = detect_suspicious_activity(logs)
        assert [s["code"] for s in activity.suspicious_codes] == ["admin", "admin", "root"]
        assert activity.suspicious_codes[0]["user"]["id"] == "1"
        assert activity.suspicious_codes[0]["timestamp"] == logs[0]["timestamp"]


class TestRepeatedFailures:
    def test_three_failures_are_reported(self):
        logs = [failure(1, f"c{i}", i * 600) for i in range(3)]
        activity = detect_suspicious_activity(logs)
        assert activity.repeated_failures["1"]["count"] == 3
        assert activity.repeated_failures["1"]["codes"] == ["c0", "c1", "c2"]
        assert activity.repeated_failures["1"]["user"]["username"] == "user1"

    def test_two_failures_are_not_reported(self):
        logs = [failure(1, "a", 0), failure(1, "b", 600), failure(2, "c", 1200)]
        assert detect_suspicious_activity(logs).repeated_failures == {}

    def test_empty_input(self):
        activity = detect_suspicious_activity([])
        assert activity.repeated_failures == {}
        assert activity.suspicious_codes == []
        assert activity.rapid_attempts == []


class TestRapidAttempts:
    def test_59_seconds_apart_is_a_pair(self):
        activity = detect_suspicious_activity([failure(1, seconds=0), failure(1, seconds=59)])
        assert len(activity.rapid_attempts) == 1
        assert activity.rapid_attempts[0]["time_diff_ms"] == 59000
        assert activity.rapid_attempts[0]["user"]["id"] == "1"

    def test_61_seconds_apart_is_not(self):
        activity = detect_suspicious_activity([failure(1, seconds=0), failure(1, seconds=61)])
        assert activity.rapid_attempts == []

    def test_three_quick_attempts_give_two_pairs(self):
        logs = [failure(1, seconds=0), failure(1, seconds=30), failure(1, seconds=60)]
        assert len(detect_suspicious_activity(logs).rapid_attempts) == 2

    def test_input_order_does_not_matter(self):
        logs = [failure(1, "second", 30), failure(1, "first", 0)]
        pair = detect_suspicious_activity(logs).rapid_attempts[0]["attempts"]
        assert [a["code"] for a in pair] == ["first", "second"]

    def test_other_user_in_between_breaks_the_pair(self):
        logs = [failure(1, seconds=0), failure(2, seconds=10), failure(1, seconds=20)]
        assert detect_suspicious_activity(logs).rapid_attempts == []


class TestVerificationStats:
    def test_no_attempts_is_zero_percent(self, log_store, now):
        stats = SecurityMonitor(log_store).get_verification_stats(7, now=now)
        assert stats.total == 0
        assert stats.success_rate == "0%"
        assert stats.period == "7 days"

    def test_success_rate_and_window_filter(self, log_store, now):
        log_store.append(SUCCESS, success(1))
        log_store.append(SUCCESS, success(2, base=now - datetime.timedelta(days=20)))
        log_store.append(FAILURE, failure(3))
        log_store.append(FAILURE, failure(3, seconds=600))
        log_store.append(FAILURE, failure(3, seconds=1200))

        monitor = SecurityMonitor(log_store)
        week = monitor.get_verification_stats(7, now=now)
        month = monitor.get_verification_stats(30, now=now)

        assert (week.successful, week.failed, week.total) == (1, 3, 4)
        assert week.success_rate == "25.00%"
        assert "3" in week.suspicious_activity.repeated_failures
        assert (month.successful, month.failed) == (2, 3)
        assert month.success_rate == "40.00%"

    def test_all_successes_is_one_hundred_percent(self, log_store, now):
        log_store.append(SUCCESS, success(1))
        assert SecurityMonitor(log_store).get_verification_stats(7, now=now).success_rate == "100.00%"


class TestSecurityReport:
    def test_no_issues(self, log_store, now):
        log_store.append(SUCCESS, success(1))
        report = SecurityMonitor(log_store).generate_security_report(now=now)
        assert report.recommendations == []
        assert report.last_7_days.successful == 1
        assert report.last_30_days.successful == 1

    def test_high_failure_rate_only(self, log_store, now):
        log_store.append(FAILURE, failure(1, "typo"))
        report = SecurityMonitor(log_store).generate_security_report(now=now)
        assert report.recommendations == [
            "High failure rate detected - consider reviewing verification codes",
        ]

    def test_all_rules_fire(self, log_store, now):
        for i in range(3):
            log_store.append(FAILURE, failure(1, "admin", i * 600))
        report = SecurityMonitor(log_store).generate_security_report(now=now)
        assert len(report.recommendations) == 3
        assert any("brute force" in r for r in report.recommendations)
        assert any("stricter rate limiting" in r for r in report.recommendations)

    def test_old_activity_is_ignored_for_recommendations(self, log_store, now):
        old = now - datetime.timedelta(days=10)
        for i in range(3):
            log_store.append(FAILURE, failure(1, "admin", i, base=old))
        report = SecurityMonitor(log_store).generate_security_report(now=now)
        assert report.recommendations == []
        assert report.last_30_days.failed == 3


class TestCleanOldLogs:
    def test_cleans_every_category(self, log_store, now):
        for category in (SUCCESS, FAILURE, ERROR):
            log_store.append(category, {"timestamp": (now - datetime.timedelta(days=40)).isoformat()})
            log_store.append(category, {"timestamp": (now - datetime.timedelta(days=5)).isoformat()})

        removed = SecurityMonitor(log_store).clean_old_logs(30, now=now)

        assert removed == {SUCCESS: 1, FAILURE: 1, ERROR: 1}
        for category in (SUCCESS, FAILURE, ERROR):
            assert len(log_store.read_all(category)) == 1


class TestSecurityAlerts:
    def test_failed_alert_embed(self):
        embed = build_security_alert_embed(FAILED_VERIFICATION, make_user(), "admin", make_guild())
        assert embed.color == discord.Color.red()
        assert "Failed" in embed.description
        assert [f.name for f in embed.fields][-1] == "🏠 Server"
        assert any(f.name == "⚠️ Pattern" for f in embed.fields)

    def test_success_alert_embed(self):
        embed = build_security_alert_embed(
            SUCCESSFUL_VERIFICATION, make_user(), "Member2024", make_guild(), make_role(name="R1"),
        )
        assert embed.color == discord.Color.green()
        assert any(f.value == "R1" for f in embed.fields)

    def test_code_is_sanitized_in_embed(self):
        embed = build_security_alert_embed(FAILED_VERIFICATION, make_user(), "`@everyone`", make_guild())
        code_field = next(f for f in embed.fields if f.name == "🔑 Invalid Code")
        assert code_field.value == "`@everyone`"

    async def test_no_channel_configured_is_noop(self, fake_bot):
        await send_security_alert(fake_bot, None, FAILED_VERIFICATION, make_user(), "x", make_guild())
        fake_bot.get_channel.assert_not_called()

    async def test_alert_is_sent(self, fake_bot):
        await send_security_alert(fake_bot, ALERT_CHANNEL_ID, FAILED_VERIFICATION, make_user(), "x", make_guild())
        fake_bot.get_channel.assert_called_once_with(ALERT_CHANNEL_ID)
        fake_bot.alert_channel.send.assert_awaited_once()

    async def test_send_failure_is_swallowed(self, fake_bot):
        fake_bot.alert_channel.send.side_effect = RuntimeError("boom")
        await send_security_alert(fake_bot, ALERT_CHANNEL_ID, FAILED_VERIFICATION, make_user(), "x", make_guild())
