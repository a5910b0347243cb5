"""Cumulative stats, achievement unlocks and daily challenge progress."""

from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional, Tuple

import config
from data.catalog import get_achievement_definition
from game.models import Achievement, DailyChallenge, GameStats, OptionType


def apply_decision(stats: GameStats, option_type: OptionType, is_risk_win: bool = False) -> GameStats:
    """Count one resolved choice."""
    return replace(
        stats,
        total_decisions=stats.total_decisions + 1,
        safe_choices=stats.safe_choices + (1 if option_type == OptionType.SAFE else 0),
        risks_taken=stats.risks_taken + (1 if option_type == OptionType.RISK else 0),
        wild_choices=stats.wild_choices + (1 if option_type == OptionType.WILD else 0),
        risks_won=stats.risks_won + (1 if is_risk_win else 0),
    )


def apply_aura_change(stats: GameStats, delta: int) -> GameStats:
    """Add a final delta to the gained/lost totals."""
    if delta > 0:
        return replace(stats, total_aura_gained=stats.total_aura_gained + delta)
    if delta < 0:
        return replace(stats, total_aura_lost=stats.total_aura_lost + abs(delta))
    return stats


def record_streak(stats: GameStats, streak: int) -> GameStats:
    if streak > stats.highest_streak:
        return replace(stats, highest_streak=streak)
    return stats


def record_timeout(stats: GameStats) -> GameStats:
    return replace(stats, timeouts=stats.timeouts + 1)


def record_game_start(stats: GameStats) -> GameStats:
    return replace(stats, total_games_played=stats.total_games_played + 1)


def record_game_end(stats: GameStats, final_aura: int, streak: int, play_seconds: int) -> GameStats:
    """Close out a run: play time, best streak and the win/loss counter."""
    won = final_aura >= config.WIN_THRESHOLD
    return replace(
        stats,
        total_play_time=stats.total_play_time + max(0, play_seconds),
        highest_streak=max(stats.highest_streak, streak),
        games_won=stats.games_won + (1 if won else 0),
        games_lost=stats.games_lost + (0 if won else 1),
    )


def check_achievements(
    stats: GameStats,
    achievements: List[Achievement],
    now: Optional[datetime] = None
) -> Tuple[List[Achievement], List[Achievement]]:
    """
    Unlock every locked achievement whose catalog rules now hold.

    Unlocked achievements are never re-locked. Achievements without a
    catalog definition are left untouched.

    Returns:
        (updated achievements, newly unlocked in catalog order)
    """
    stamp = (now or datetime.now()).isoformat()
    updated = []
    newly_unlocked = []

    for achievement in achievements:
        if not achievement.unlocked:
            definition = get_achievement_definition(achievement.id)
            if definition and definition.is_met(stats):
                achievement = replace(achievement, unlocked=True, unlocked_date=stamp)
                newly_unlocked.append(achievement)
        updated.append(achievement)

    return updated, newly_unlocked


def advance_challenge(
    challenges: List[DailyChallenge],
    challenge_id: str,
    amount: int,
    high_water_mark: bool = False
) -> Tuple[List[DailyChallenge], List[DailyChallenge]]:
    """
    Move challenges whose id starts with challenge_id towards their target.

    In high-water-mark mode progress becomes max(progress, amount), otherwise
    amount is added. Progress is clamped to the target.

    Returns:
        (updated challenges, challenges completed by this call)
    """
    updated = []
    newly_completed = []

    for challenge in challenges:
        if challenge.id.startswith(challenge_id) and not challenge.completed:
            if high_water_mark:
                progress = max(challenge.progress, amount)
            else:
                progress = challenge.progress + amount
            completed = progress >= challenge.target
            challenge = replace(
                challenge,
                progress=min(progress, challenge.target),
                completed=completed,
            )
            if completed:
                newly_completed.append(challenge)
        updated.append(challenge)

    return updated, newly_completed


def update_consecutive_days(last_played_date: str, current_days: int, today: date) -> int:
    """
    Compute the consecutive-day streak when the player shows up today.

    Same day keeps the count, the day after increments it, anything else
    (including never played) starts over at 1.
    """
    try:
        last = date.fromisoformat(last_played_date)
    except (TypeError, ValueError):
        return 1

    gap = (today - last).days
    if gap == 0:
        return current_days
    if gap == 1:
        return current_days + 1
    return 1
