"""Tests for host diagnostics helpers."""

from unittest.mock import MagicMock

import discord
import pytest

from verifybot import host_info
from verifybot.host_info import (
    build_host_info_embed,
    detect_location,
    detect_provider,
    format_uptime,
    get_system_info,
    memory_usage_bar,
)


class TestFormatUptime:
    @pytest.mark.parametrize("seconds, expected", [
        (0, "0s"),
        (59.9, "59s"),
        (3600, "1h 0s"),
        (90061, "1d 1h 1m 1s"),
        (86400 + 5, "1d 5s"),
    ])
    def test_format(self, seconds, expected):
        assert format_uptime(seconds) == expected


class TestMemoryBar:
    def test_partial(self):
        assert memory_usage_bar(3, 10) == "███░░░░░░░ 30.0%"

    def test_full(self):
        assert memory_usage_bar(10, 10) == "██████████ 100.0%"

    def test_zero_total(self):
        assert memory_usage_bar(0, 0) == "░░░░░░░░░░ 0.0%"


class TestDetection:
    @pytest.mark.parametrize("hostname, system, expected", [
        ("ip-10-0-0-1.ec2.internal", "Linux", "Amazon AWS"),
        ("my-droplet", "Linux", "DigitalOcean"),
        ("Hetzner-Box", "Linux", "Hetzner"),
        ("game-server-1", "Linux", "VPS Provider"),
        ("desktop", "Windows", "Windows PC/Server"),
        ("laptop", "Darwin", "macOS"),
        ("raspberrypi", "Linux", "Linux Server/PC"),
    ])
    def test_provider(self, hostname, system, expected):
        assert detect_provider(hostname, system) == expected

    @pytest.mark.parametrize("timezone, expected", [
        ("Asia/Jakarta", "Jakarta, Indonesia"),
        ("Europe/Berlin", "Europe"),
        ("America/New_York", "New York, USA"),
        ("America/Chicago", "Americas"),
        ("UTC", "UTC"),
        ("", "Unknown"),
    ])
    def test_location(self, timezone, expected):
        assert detect_location(timezone) == expected

    def test_docker_env_var(self, monkeypatch):
        monkeypatch.setenv("DOCKER_CONTAINER", "1")
        assert host_info.detect_server_type("Linux") == "Docker Container"


class TestSystemInfo:
    def test_reports_memory_and_cpu(self):
        info = get_system_info()
        assert info["total_memory"] > 0
        assert info["cpu_cores"] >= 1
        assert info["python_version"]
        assert len(info["load_average"]) == 3

    def test_embed_masks_internal_ip(self):
        bot = MagicMock()
        bot.latency = float("nan")
        bot.guilds = []
        bot.users = []
        bot.shard_count = None
        requester = MagicMock()
        requester.__str__.return_value = "admin"

        embed = build_host_info_embed(bot, requester)

        assert isinstance(embed, discord.Embed)
        network = next(f for f in embed.fields if f.name == "🌐 Network & Identity")
        assert "###.###.###.#" in network.value
        assert "**Ping:** 0ms" in embed.fields[0].value
        assert "Requested by admin" in embed.footer.text
