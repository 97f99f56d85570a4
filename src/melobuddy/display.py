"""Rich terminal display for melobuddy."""

from __future__ import annotations

from datetime import datetime, timezone

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from melobuddy.achievements import achievement_name

console = Console()

# Level bands share a border colour, five levels per band
_LEVEL_COLORS: list[str] = ["dark_orange3", "grey70", "gold1", "deep_sky_blue1"]


def level_color(level: int) -> str:
    """Return the Rich colour used for a level's panels."""
    index = (max(level, 1) - 1) // 5
    return _LEVEL_COLORS[min(index, len(_LEVEL_COLORS) - 1)]


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        value = n / 1_000
        if value >= 1000:
            return f"{value:.0f}K"
        return f"{value:.1f}K"
    return f"{n:,}"


def format_duration(seconds: int) -> str:
    """Format practice time: 59 -> '59s', 125 -> '2m 5s', 3720 -> '1h 2m'."""
    seconds = max(seconds, 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _xp_bar(percent: float, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    ratio = min(max(percent / 100, 0.0), 1.0)
    filled = int(ratio * width)
    empty = width - filled
    return "[" + "█" * filled + "░" * empty + "]"


def print_status(data: dict) -> None:
    """Print the status panel: level, XP bar, streak and today's practice."""
    level = data.get("level", 1)
    color = level_color(level)
    percent = data.get("level_progress", 0.0)

    lines: list[str] = []
    lines.append("")
    lines.append(f"  {data.get('avatar_emoji', '')} [bold]{data.get('nickname', '')}[/]")
    lines.append(f"  [bold {color}]Level {level}[/]")
    bar = _xp_bar(percent)
    lines.append(f"  {bar} {percent:.0f}%  ({format_number(data.get('xp_to_next_level', 0))} XP to go)")
    lines.append(f"  Total: [bold]{format_number(data.get('xp', 0))}[/] XP")
    lines.append("")
    lines.append(
        f"  \U0001f525 Streak: {data.get('streak_days', 0)} days  |  "
        f"Best: {data.get('best_streak', 0)} days"
    )
    lines.append(
        f"  \U0001f3bb Today: {data.get('today_practice_count', 0)} practices, "
        f"{format_number(data.get('today_xp', 0))} XP"
    )
    lines.append("")

    closest_achievements = data.get("closest_achievements", [])
    if closest_achievements:
        lines.append("  [bold]Next Achievements:[/]")
        for ach in closest_achievements:
            bar = _xp_bar(ach["progress"] * 100, width=10)
            lines.append(f"  {ach['name']}  {bar} {ach['current']}/{ach['target']}")
        lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]MELOBUDDY[/]",
        box=box.ROUNDED,
        border_style=color,
        width=50,
    )
    console.print(panel)


def print_practice_result(result: dict) -> None:
    """Print the outcome of a completed practice."""
    lines: list[str] = []
    lines.append("")
    lines.append(f"  Song:          {result.get('song_id', '')}")
    lines.append(f"  XP earned:     [bold]+{result.get('xp_earned', 0)}[/]")
    if result.get("is_new_song"):
        lines.append("  ✨ New song bonus!")
    if result.get("streak_bonus"):
        lines.append(f"  \U0001f525 Streak bonus: +{result['streak_bonus']}")
    stars = result.get("stars")
    if stars is not None:
        lines.append(f"  Stars:         {'⭐' * stars}{'☆' * (3 - stars)}")
    if result.get("leveled_up"):
        lines.append(f"  [bold yellow]LEVEL UP! Now level {result.get('level', 1)}[/]")

    new_achievements = result.get("new_achievements", [])
    if new_achievements:
        lines.append("")
        lines.append("  [bold]New Achievements:[/]")
        for achievement_id in new_achievements:
            lines.append(f"  \U0001f3c6 {achievement_name(achievement_id)}")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]Practice Complete[/]",
        box=box.ROUNDED,
        border_style="green",
        width=50,
    )
    console.print(panel)


def print_streak_check(check: dict) -> None:
    """Print the result of a passive streak check."""
    if check.get("streak_broken"):
        message = "  [bold red]Streak broken.[/] Practice today to start a new one."
        border = "red"
    elif check.get("is_first_practice_today"):
        message = f"  Streak: {check.get('new_streak', 0)} days. Practice today to keep it going!"
        border = "yellow"
    else:
        message = f"  Streak: {check.get('new_streak', 0)} days. Already practiced today."
        border = "green"
    panel = Panel(
        "\n" + message + "\n",
        title="[bold]Streak[/]",
        box=box.ROUNDED,
        border_style=border,
        width=50,
    )
    console.print(panel)


def print_profile(data: dict) -> None:
    """Print profile stats as a table."""
    table = Table(
        title=f"{data.get('avatar_emoji', '')} {data.get('nickname', '')}",
        box=box.ROUNDED,
        border_style=level_color(data.get("level", 1)),
        show_header=True,
        header_style="bold",
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Level", str(data.get("level", 1)))
    table.add_row("Total XP", format_number(data.get("xp", 0)))
    table.add_row("Current Streak", f"{data.get('streak_days', 0)} days")
    table.add_row("Best Streak", f"{data.get('best_streak', 0)} days")
    table.add_row("Songs Completed", str(data.get("completed_songs", 0)))
    table.add_row("Three-Star Songs", str(data.get("three_star_songs", 0)))
    table.add_row("Practice Time", format_duration(data.get("total_practice_time", 0)))

    recent = data.get("recent_practice", [])
    if recent:
        table.add_section()
        table.add_row("[bold]Recent Practice[/]", "")
        for record in recent[:5]:
            when = datetime.fromtimestamp(record["timestamp"] / 1000, tz=timezone.utc)
            table.add_row(
                f"  {record['songId']}",
                f"{record['score']:g} pts, +{record['xpEarned']} XP ({when:%Y-%m-%d})",
            )

    console.print(table)


def print_achievements(achievements: list[dict]) -> None:
    """Print all achievements with progress bars.

    Each dict has: id, name, description, rarity, progress (0.0-1.0),
    unlocked (bool), current (int), target (int).
    """
    rarity_colors = {
        "common": "white",
        "rare": "blue",
        "epic": "magenta",
        "legendary": "yellow",
    }

    unlocked = [a for a in achievements if a.get("unlocked")]
    locked = [a for a in achievements if not a.get("unlocked")]
    locked.sort(key=lambda a: a.get("progress", 0), reverse=True)

    table = Table(
        title="Achievements",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("", width=2)
    table.add_column("Achievement", min_width=20)
    table.add_column("Rarity", width=10)
    table.add_column("Progress", min_width=18)

    for ach in unlocked + locked:
        icon = "✅" if ach.get("unlocked") else "⏳"
        rarity = ach.get("rarity", "common")
        color = rarity_colors.get(rarity, "white")

        name_text = f"[bold]{ach['name']}[/]\n{ach.get('description', '')}"
        rarity_text = f"[{color}]{rarity.upper()}[/{color}]"

        progress = ach.get("progress", 0.0)
        bar = _xp_bar(progress * 100, width=10)
        progress_text = f"{bar} {ach.get('current', 0)}/{ach.get('target', 0)}"

        table.add_row(icon, name_text, rarity_text, progress_text)

    console.print(table)


def print_message(message: str, title: str = "MELOBUDDY", style: str = "grey50") -> None:
    """Print a one-line message in a panel."""
    panel = Panel(
        f"\n  {message}\n",
        title=f"[bold]{title}[/]",
        box=box.ROUNDED,
        border_style=style,
        width=50,
    )
    console.print(panel)
