"""Discord embed builders for bot responses."""

import discord
from typing import List

import config
from data.catalog import get_rank
from game.models import Achievement, DailyChallenge, GameStats, PowerUp, Scenario
from utils.formatters import (
    format_aura,
    format_percentage,
    format_progress_bar,
    format_time,
    risk_success_rate,
    win_rate,
)

OPTION_LABELS = {
    'safe': '🛡️ SAFE',
    'risk': '🎲 RISK',
    'wild': '✨ WILD',
}


def create_session_started_embed(player_name: str, powerups: List[PowerUp]) -> discord.Embed:
    """Create embed for a new run."""
    embed = discord.Embed(
        title="±AURA: Run Started",
        description=f"**{player_name}**, your social credit is on the line.",
        color=discord.Color.green()
    )
    embed.add_field(
        name="Rules",
        value=(
            f"• Pick an option before the timer runs out ({format_aura(config.TIMEOUT_PENALTY)} if you don't)\n"
            f"• {config.STREAK_MULTIPLIER_START}+ positive choices in a row multiply your gains\n"
            f"• Drop to {config.LOSS_THRESHOLD:,} and you're canceled\n"
            f"• Cash out at {config.WIN_THRESHOLD:,}+ to win"
        ),
        inline=False
    )
    if powerups:
        embed.add_field(
            name="Power-ups",
            value="\n".join(f"{p.icon} **{p.name}** x{p.count}: {p.description}" for p in powerups),
            inline=False
        )
    embed.set_footer(text="/aura_pause • /aura_powerup • /aura_cashout • /aura_menu")
    return embed


def create_scenario_embed(
    scenario: Scenario,
    number: int,
    aura: int,
    streak: int,
    time_seconds: float
) -> discord.Embed:
    """Create embed for a scenario prompt."""
    embed = discord.Embed(
        title=f"Scenario #{number}",
        description=f"**{scenario.text}**",
        color=discord.Color.orange()
    )
    for index, option in enumerate(scenario.options, 1):
        embed.add_field(
            name=f"{index}. {OPTION_LABELS.get(option.type.value, option.type.value)}",
            value=option.text,
            inline=False
        )
    embed.add_field(name="Aura", value=format_aura(aura), inline=True)
    embed.add_field(name="Streak", value=f"🔥 {streak}", inline=True)
    embed.add_field(name="Rank", value=get_rank(aura), inline=True)
    embed.set_footer(text=f"⏱️ {time_seconds:.0f} seconds to decide")
    return embed


def create_game_over_embed(
    reason: str,
    won: bool,
    aura: int,
    max_aura: int,
    best_run: int,
    scenarios_played: int
) -> discord.Embed:
    """Create embed for the end of a run."""
    embed = discord.Embed(
        title="🏆 YOU ATE" if won else "💀 GAME OVER",
        description=f"REASON: {reason or 'You fell off.'}",
        color=discord.Color.gold() if won else discord.Color.red()
    )
    embed.add_field(name="Final Aura", value=format_aura(aura), inline=True)
    embed.add_field(name="Peak Aura", value=format_aura(max_aura), inline=True)
    embed.add_field(name="Best Run", value=format_aura(best_run), inline=True)
    embed.add_field(name="Scenarios", value=str(scenarios_played), inline=True)
    embed.add_field(name="Rank", value=get_rank(max_aura), inline=True)
    embed.set_footer(text="/aura_start to run it back • /aura_menu to leave")
    return embed


def create_stats_embed(player_name: str, stats: GameStats, achievements: List[Achievement]) -> discord.Embed:
    """Create embed for cumulative player statistics."""
    unlocked = sum(1 for a in achievements if a.unlocked)

    embed = discord.Embed(
        title=f"📊 {player_name}'s Aura Stats",
        color=discord.Color.blue()
    )
    embed.add_field(
        name="Overview",
        value=(
            f"**Games:** {stats.total_games_played} "
            f"({stats.games_won}W / {stats.games_lost}L)\n"
            f"**Win Rate:** {format_percentage(win_rate(stats))}\n"
            f"**Best Streak:** {stats.highest_streak}\n"
            f"**Daily Streak:** {stats.consecutive_days} days\n"
            f"**Play Time:** {format_time(stats.total_play_time)}"
        ),
        inline=False
    )
    embed.add_field(
        name="Decision Analysis",
        value=(
            f"**Safe:** {stats.safe_choices}\n"
            f"**Risk:** {stats.risks_taken} ({format_percentage(risk_success_rate(stats))} won)\n"
            f"**Wild:** {stats.wild_choices}\n"
            f"**Timeouts:** {stats.timeouts}"
        ),
        inline=True
    )
    embed.add_field(
        name="Aura Breakdown",
        value=(
            f"**Gained:** {stats.total_aura_gained:,}\n"
            f"**Lost:** {stats.total_aura_lost:,}\n"
            f"**Rank:** {get_rank(stats.total_aura_gained)}"
        ),
        inline=True
    )
    embed.set_footer(text=f"Achievements: {unlocked}/{len(achievements)} • Last played: {stats.last_played_date or 'Never'}")
    return embed


def create_achievements_embed(achievements: List[Achievement]) -> discord.Embed:
    """Create embed listing every achievement."""
    unlocked = sum(1 for a in achievements if a.unlocked)
    embed = discord.Embed(
        title=f"🏅 Achievements ({unlocked}/{len(achievements)})",
        color=discord.Color.gold()
    )
    lines = []
    for achievement in achievements:
        marker = achievement.icon if achievement.unlocked else "🔒"
        lines.append(f"{marker} **{achievement.title}**: {achievement.description}")
    embed.description = "\n".join(lines)[:4096]  # Discord limit
    return embed


def create_achievement_unlocked_embed(achievement: Achievement) -> discord.Embed:
    """Create embed for the achievement popup."""
    embed = discord.Embed(
        title="🏅 ACHIEVEMENT UNLOCKED",
        description=f"{achievement.icon} **{achievement.title}**\n{achievement.description}",
        color=discord.Color.gold()
    )
    return embed


def create_daily_challenges_embed(challenges: List[DailyChallenge]) -> discord.Embed:
    """Create embed for today's challenges."""
    completed = sum(1 for c in challenges if c.completed)
    all_done = challenges and completed == len(challenges)

    embed = discord.Embed(
        title=f"📅 Daily Challenges ({completed}/{len(challenges)})",
        color=discord.Color.green() if all_done else discord.Color.blue()
    )
    for challenge in challenges:
        status = "✅" if challenge.completed else "⬜"
        embed.add_field(
            name=f"{status} {challenge.description}",
            value=(
                f"{format_progress_bar(challenge.progress, challenge.target)} "
                f"{challenge.progress:,}/{challenge.target:,} • +{challenge.reward:,} Aura"
            ),
            inline=False
        )
    if all_done:
        embed.set_footer(text="All done for today. New challenges tomorrow!")
    return embed
