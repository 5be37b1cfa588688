"""Host Information - system and hosting diagnostics for !hostinfo"""
import datetime
import getpass
import math
import os
import platform
import socket
import time
from pathlib import Path

import discord
import psutil

# Recorded at import so uptime reflects the bot process
PROCESS_START = time.time()

# Hostname fragment -> provider name (first match wins)
HOSTNAME_PROVIDERS = [
    (("digitalocean", "droplet"), "DigitalOcean"),
    (("aws", "ec2", "amazon"), "Amazon AWS"),
    (("gcp", "google"), "Google Cloud Platform"),
    (("azure", "microsoft"), "Microsoft Azure"),
    (("vultr",), "Vultr"),
    (("linode",), "Linode"),
    (("ovh",), "OVH"),
    (("contabo",), "Contabo"),
    (("hetzner",), "Hetzner"),
    (("vps", "server"), "VPS Provider"),
]

# Timezone fragment -> location label (first match wins)
TIMEZONE_LOCATIONS = [
    ("Jakarta", "Jakarta, Indonesia"),
    ("Singapore", "Singapore"),
    ("Tokyo", "Tokyo, Japan"),
    ("New_York", "New York, USA"),
    ("London", "London, UK"),
    ("Europe/", "Europe"),
    ("America/", "Americas"),
    ("Asia/", "Asia"),
]


def format_uptime(seconds: float) -> str:
    """Format seconds as e.g. '2d 3h 4m 5s' (zero units are skipped, seconds always shown)."""
    seconds = int(seconds)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, secs = divmod(seconds, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)


def memory_usage_bar(used: float, total: float, length: int = 10) -> str:
    """Render a text progress bar like '███░░░░░░░ 30.0%'."""
    percentage = (used / total) * 100 if total else 0.0
    filled = round(percentage / 100 * length)
    return f"{'█' * filled}{'░' * (length - filled)} {percentage:.1f}%"


def detect_provider(hostname: str, system: str) -> str:
    """Guess the hosting provider from the hostname and OS."""
    hostname = hostname.lower()
    for fragments, provider in HOSTNAME_PROVIDERS:
        if any(fragment in hostname for fragment in fragments):
            return provider

    if system == "Windows":
        return "Windows PC/Server"
    if system == "Darwin":
        return "macOS"
    return "Linux Server/PC"


def detect_server_type(system: str) -> str:
    """Detect container/WSL/native environments."""
    if os.getenv("DOCKER_CONTAINER") or Path("/.dockerenv").exists():
        return "Docker Container"

    if system == "Linux":
        try:
            version = Path("/proc/version").read_text()
        except OSError:
            return "Linux System"
        if "Microsoft" in version or "WSL" in version:
            return "Windows Subsystem for Linux (WSL)"
        return "Native Linux"

    if system == "Windows":
        return "Windows System"
    if system == "Darwin":
        return "macOS System"
    return "Unknown"


def detect_location(timezone: str) -> str:
    """Map a timezone name to a rough location label."""
    if not timezone:
        return "Unknown"
    for fragment, location in TIMEZONE_LOCATIONS:
        if fragment in timezone:
            return location
    return timezone


def local_timezone_name() -> str:
    tz = os.getenv("TZ")
    if tz:
        return tz
    try:
        # /etc/localtime -> /usr/share/zoneinfo/Area/City
        link = os.path.realpath("/etc/localtime")
        if "zoneinfo/" in link:
            return link.split("zoneinfo/", 1)[1]
    except OSError:
        pass
    return time.tzname[0]


def get_system_info() -> dict:
    """Collect CPU, memory and uptime figures for the host and this process."""
    memory = psutil.virtual_memory()
    process_memory = psutil.Process().memory_info()

    try:
        load_average = psutil.getloadavg()
    except (AttributeError, OSError):
        load_average = (0.0, 0.0, 0.0)

    return {
        "bot_uptime": format_uptime(time.time() - PROCESS_START),
        "python_version": platform.python_version(),
        "discord_py_version": discord.__version__,
        "platform": platform.system(),
        "architecture": platform.machine(),
        "system_uptime": format_uptime(time.time() - psutil.boot_time()),
        "cpu_model": platform.processor() or platform.machine() or "Unknown",
        "cpu_cores": psutil.cpu_count() or 0,
        "load_average": load_average,
        "total_memory": round(memory.total / 1024 / 1024),
        "used_memory": round((memory.total - memory.available) / 1024 / 1024),
        "process_memory": round(process_memory.rss / 1024 / 1024),
    }


def get_hosting_info() -> dict:
    """Collect hostname, provider and process identity."""
    system = platform.system()
    hostname = socket.gethostname()
    timezone = local_timezone_name()

    try:
        username = getpass.getuser()
    except (KeyError, OSError):
        username = "Unknown"

    return {
        "provider": detect_provider(hostname, system),
        "server_type": detect_server_type(system),
        "location": detect_location(timezone),
        "timezone": timezone,
        "hostname": hostname,
        "username": username,
        "process_id": os.getpid(),
        "working_directory": "/".join(Path.cwd().parts[-2:]),
        "start_time": datetime.datetime.fromtimestamp(PROCESS_START).strftime("%Y-%m-%d %H:%M:%S"),
    }


def build_host_info_embed(bot: discord.Client, requester: discord.abc.User) -> discord.Embed:
    """Create the !hostinfo embed."""
    sys_info = get_system_info()
    host_info = get_hosting_info()
    latency_ms = 0 if math.isnan(bot.latency) else round(bot.latency * 1000)

    cpu_model = sys_info["cpu_model"]
    if len(cpu_model) > 35:
        cpu_model = cpu_model[:35] + "..."

    used, total = sys_info["used_memory"], sys_info["total_memory"]

    embed = discord.Embed(
        title="🖥️ Host Information",
        description="Details about the system running this bot",
        color=discord.Color.green(),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(
        name="🤖 Bot Information",
        value=(
            f"**Uptime:** {sys_info['bot_uptime']}\n"
            f"**Ping:** {latency_ms}ms\n"
            f"**Python:** {sys_info['python_version']}\n"
            f"**discord.py:** {sys_info['discord_py_version']}\n"
            f"**Guilds:** {len(bot.guilds)}\n"
            f"**Users:** {len(bot.users)}"
        ),
        inline=True,
    )
    embed.add_field(
        name="🏢 Host Detection",
        value=(
            f"**Provider:** {host_info['provider']}\n"
            f"**Server Type:** {host_info['server_type']}\n"
            f"**Location:** {host_info['location']}\n"
            f"**Timezone:** {host_info['timezone']}"
        ),
        inline=True,
    )
    embed.add_field(
        name="🌐 Network & Identity",
        value=(
            f"**Hostname:** {host_info['hostname']}\n"
            f"**Username:** {host_info['username']}\n"
            f"**Internal IP:** ###.###.###.#\n"
            f"**Process ID:** {host_info['process_id']}"
        ),
        inline=False,
    )
    embed.add_field(
        name="💻 System Information",
        value=(
            f"**OS:** {sys_info['platform']} {sys_info['architecture']}\n"
            f"**System Uptime:** {sys_info['system_uptime']}\n"
            f"**Bot Started:** {host_info['start_time']}\n"
            f"**Working Dir:** {host_info['working_directory']}"
        ),
        inline=True,
    )
    embed.add_field(
        name="🔧 CPU Information",
        value=(
            f"**Model:** {cpu_model}\n"
            f"**Cores:** {sys_info['cpu_cores']}\n"
            f"**Load Average:** {', '.join(f'{load:.2f}' for load in sys_info['load_average'])}"
        ),
        inline=True,
    )
    embed.add_field(
        name="🧠 Memory Usage",
        value=(
            f"**System Total:** {total} MB\n"
            f"**System Used:** {used} MB\n"
            f"**Bot Memory:** {sys_info['process_memory']} MB\n"
            f"**Usage:** {memory_usage_bar(used, total)}"
        ),
        inline=True,
    )

    if bot.shard_count and bot.shard_count > 1:
        embed.add_field(
            name="🔀 Shard Information",
            value=f"**Shard ID:** {bot.shard_id}\n**Total Shards:** {bot.shard_count}",
            inline=True,
        )

    embed.set_footer(
        text=f"Requested by {requester} • Auto-detected",
        icon_url=requester.display_avatar.url,
    )
    return embed
