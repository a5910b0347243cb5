"""Text formatting helpers."""

from typing import List

from data.catalog import get_rank
from game.models import Achievement, DailyChallenge, GameStats


def format_time(seconds: float) -> str:
    """Format time in seconds to readable string."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        mins = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{mins}m {secs}s"
    else:
        hours = int(seconds // 3600)
        mins = int((seconds % 3600) // 60)
        return f"{hours}h {mins}m"


def format_aura(aura: int) -> str:
    """Format aura with an explicit sign and commas."""
    return f"{aura:+,}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format percentage."""
    return f"{value:.{decimals}f}%"


def win_rate(stats: GameStats) -> float:
    if stats.total_games_played <= 0:
        return 0.0
    return stats.games_won / stats.total_games_played * 100


def risk_success_rate(stats: GameStats) -> float:
    if stats.risks_taken <= 0:
        return 0.0
    return stats.risks_won / stats.risks_taken * 100


def format_progress_bar(progress: int, target: int, width: int = 10) -> str:
    """Text progress bar, e.g. ▰▰▰▱▱▱▱▱▱▱."""
    if target <= 0:
        filled = width
    else:
        filled = min(width, int(progress / target * width))
    return "▰" * filled + "▱" * (width - filled)


def format_share_text(
    stats: GameStats,
    achievements: List[Achievement],
    challenges: List[DailyChallenge]
) -> str:
    """Build the summary a player can paste elsewhere."""
    unlocked = sum(1 for a in achievements if a.unlocked)
    completed = sum(1 for c in challenges if c.completed)

    return (
        "±AURA STATS\n"
        "━━━━━━━━━━━━━━\n"
        f"🎮 Games: {stats.total_games_played}\n"
        f"🏆 Win Rate: {format_percentage(win_rate(stats))}\n"
        f"🔥 Best Streak: {stats.highest_streak}\n"
        f"📅 Daily Streak: {stats.consecutive_days} days\n"
        f"⚠️ Risk Success: {format_percentage(risk_success_rate(stats))}\n"
        f"🏅 Achievements: {unlocked}/{len(achievements)}\n"
        f"✅ Daily Challenges: {completed}/{len(challenges)}\n"
        "\n"
        f"Current Rank: {get_rank(stats.total_aura_gained)}"
    )
