"""Scoring calculations for aura decisions."""

import math
import random
from typing import Optional

import config
from game.models import Option, OptionType, PowerUpEffect, Resolution

SOURCE_DECISION = 'decision'
SOURCE_TIMEOUT = 'timeout'
SOURCE_CHALLENGE_REWARD = 'challenge_reward'


def streak_multiplier(streak: int) -> float:
    """Return the multiplier applied to positive outcomes at a given streak."""
    if streak < config.STREAK_MULTIPLIER_START:
        return 1.0
    return 1 + min(streak, config.STREAK_MULTIPLIER_CAP) * config.STREAK_MULTIPLIER_STEP


def next_streak(streak: int, delta: int) -> int:
    """Advance the streak based on the final delta."""
    if delta > 0:
        return streak + 1
    if delta < 0:
        return 0
    return streak


def apply_modifiers(
    amount: int,
    active_modifier: Optional[PowerUpEffect],
    streak: int,
    source: str = SOURCE_DECISION,
    is_risk_win: bool = False
) -> Resolution:
    """
    Turn a raw amount into the final aura delta.

    At most one power-up is consumed: double_gain on a positive amount, or
    negate_loss on a negative one. The streak multiplier is applied on top
    for positive amounts, except for timeouts.

    Args:
        amount: Raw aura change before any modifier
        active_modifier: Power-up effect currently armed, if any
        streak: Streak before this resolution
        source: What produced the amount (decision, timeout, challenge_reward)
        is_risk_win: Passed through to the result

    Returns:
        Resolution with the final delta and updated streak
    """
    delta = amount
    consumed = None

    if active_modifier == PowerUpEffect.DOUBLE_GAIN and amount > 0:
        delta = amount * 2
        consumed = PowerUpEffect.DOUBLE_GAIN
    elif active_modifier == PowerUpEffect.NEGATE_LOSS and amount < 0:
        delta = 0
        consumed = PowerUpEffect.NEGATE_LOSS

    multiplier = 1.0
    if amount > 0 and source != SOURCE_TIMEOUT:
        multiplier = streak_multiplier(streak)
        if multiplier != 1.0:
            # strip float noise before flooring
            delta = math.floor(round(delta * multiplier, 6))

    return Resolution(
        delta=delta,
        raw_amount=amount,
        new_streak=next_streak(streak, delta),
        is_risk_win=is_risk_win,
        consumed_modifier=consumed,
        multiplier=multiplier
    )


def raw_change(option: Option, rng=random) -> tuple[int, bool]:
    """
    Roll the raw outcome of an option.

    Missing numeric fields count as 0, so a risk option without a success
    rate always loses.

    Returns:
        (amount, is_risk_win)
    """
    if option.type == OptionType.RISK:
        roll = rng.random()
        if roll < (option.success_rate or 0):
            return option.win_amount or 0, True
        return option.loss_amount or 0, False

    return option.base_change or 0, False


def resolve(
    option: Option,
    active_modifier: Optional[PowerUpEffect],
    streak: int,
    rng=random
) -> Resolution:
    """Resolve a player's choice into a final delta and new streak."""
    amount, is_risk_win = raw_change(option, rng)
    return apply_modifiers(amount, active_modifier, streak, SOURCE_DECISION, is_risk_win)


def resolve_timeout(active_modifier: Optional[PowerUpEffect], streak: int) -> Resolution:
    """Resolve a countdown expiry: a fixed penalty outside the streak multiplier."""
    return apply_modifiers(config.TIMEOUT_PENALTY, active_modifier, streak, SOURCE_TIMEOUT)


def is_loss(aura: int) -> bool:
    """Check whether aura has crossed the loss threshold."""
    return aura <= config.LOSS_THRESHOLD


def is_win(aura: int) -> bool:
    """Check whether a run ending at this aura counts as a win."""
    return aura >= config.WIN_THRESHOLD
