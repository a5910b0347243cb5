"""Static definitions: achievements, daily challenge templates, power-ups and ranks."""

import operator
from dataclasses import dataclass
from typing import List, Dict, Optional, Tuple

from game.models import DailyChallenge, PowerUp, PowerUpEffect

# Comparison operators usable in achievement rules
OPERATORS = {
    '>=': operator.ge,
    '>': operator.gt,
    '==': operator.eq,
    '<=': operator.le,
}


@dataclass(frozen=True)
class AchievementRule:
    """Compare one GameStats field against a threshold."""
    stat: str
    op: str
    threshold: int

    def matches(self, stats) -> bool:
        value = getattr(stats, self.stat, None)
        if value is None:
            return False
        return OPERATORS[self.op](value, self.threshold)


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    title: str
    description: str
    icon: str
    rules: Tuple[AchievementRule, ...]

    def is_met(self, stats) -> bool:
        """All rules must hold."""
        return all(rule.matches(stats) for rule in self.rules)


def _rule(stat: str, op: str, threshold: int) -> AchievementRule:
    return AchievementRule(stat, op, threshold)


# Order matters: newly unlocked achievements are reported in this order
ACHIEVEMENT_DEFINITIONS: List[AchievementDefinition] = [
    AchievementDefinition('first_blood', 'FIRST BLOOD', 'Complete your first scenario', '🎯',
                          (_rule('total_decisions', '>=', 1),)),
    AchievementDefinition('main_character', 'MAIN CHARACTER UNLOCKED', 'Reach Main Character rank', '⭐',
                          (_rule('total_aura_gained', '>=', 5000),)),
    AchievementDefinition('risk_taker', 'RISK TAKER', 'Choose RISK 10 times', '⚠️',
                          (_rule('risks_taken', '>=', 10),)),
    AchievementDefinition('gambling_addiction', 'GAMBLING ADDICTION', 'Choose RISK 50 times', '🎰',
                          (_rule('risks_taken', '>=', 50),)),
    AchievementDefinition('lucky_charm', 'LUCKY CHARM', 'Win 5 RISK choices', '🍀',
                          (_rule('risks_won', '>=', 5),)),
    AchievementDefinition('chaos_agent', 'CHAOS AGENT', 'Choose WILD 20 times', '✨',
                          (_rule('wild_choices', '>=', 20),)),
    AchievementDefinition('speedrunner', 'SPEEDRUNNER', 'Complete 10 scenarios without timeout', '⚡',
                          (_rule('total_decisions', '>=', 10), _rule('timeouts', '==', 0))),
    AchievementDefinition('streak_god', 'STREAK GOD', 'Reach a 10 streak', '🔥',
                          (_rule('highest_streak', '>=', 10),)),
    AchievementDefinition('grinder', 'GRINDER', 'Play 10 games', '💪',
                          (_rule('total_games_played', '>=', 10),)),
    AchievementDefinition('no_life', 'NO LIFE', 'Play 50 games', '🎮',
                          (_rule('total_games_played', '>=', 50),)),
    AchievementDefinition('dedication', 'DEDICATION', 'Play 3 days in a row', '📅',
                          (_rule('consecutive_days', '>=', 3),)),
    AchievementDefinition('addiction', 'ADDICTION', 'Play 7 days in a row', '🔗',
                          (_rule('consecutive_days', '>=', 7),)),
    AchievementDefinition('sigma_grindset', 'SIGMA GRINDSET', 'Reach SIGMA rank', '🗿',
                          (_rule('total_aura_gained', '>=', 20000),)),
    AchievementDefinition('gigachad', 'GIGACHAD', 'Reach GIGACHAD rank', '💎',
                          (_rule('total_aura_gained', '>=', 50000),)),
    AchievementDefinition('eldritch', 'ELDRITCH ASCENSION', 'Reach ELDRITCH GOD rank', '👁️',
                          (_rule('total_aura_gained', '>=', 100000),)),
    AchievementDefinition('safe_player', 'PLAY IT SAFE', 'Choose SAFE 30 times', '🛡️',
                          (_rule('safe_choices', '>=', 30),)),
    AchievementDefinition('survivor', 'SURVIVOR', 'Make 10 decisions without ever losing aura', '🏆',
                          (_rule('total_aura_lost', '==', 0), _rule('total_decisions', '>=', 10))),
]

_ACHIEVEMENTS_BY_ID: Dict[str, AchievementDefinition] = {a.id: a for a in ACHIEVEMENT_DEFINITIONS}


def get_achievement_definition(achievement_id: str) -> Optional[AchievementDefinition]:
    """Look up an achievement definition by its ID."""
    return _ACHIEVEMENTS_BY_ID.get(achievement_id)


# Daily challenge templates (id prefix, description, target, reward)
CHALLENGE_TEMPLATES = [
    {
        'id': 'daily_scenarios',
        'description': 'Complete 10 scenarios',
        'target': 10,
        'reward': 500,
    },
    {
        'id': 'daily_streak',
        'description': 'Reach a 5 streak',
        'target': 5,
        'reward': 1000,
    },
    {
        'id': 'daily_aura',
        'description': 'Gain 2000 total Aura',
        'target': 2000,
        'reward': 800,
    },
    {
        'id': 'daily_risks',
        'description': 'Win 3 RISK choices',
        'target': 3,
        'reward': 1500,
    },
]


def generate_daily_challenges(day: str, count: int = 3) -> List[DailyChallenge]:
    """
    Build a fresh set of challenges for a calendar day.

    Every day offers the first `count` templates in catalog order, dated with
    `day` and starting at zero progress.
    """
    return [
        DailyChallenge(
            id=f"{template['id']}_{day}",
            description=template['description'],
            target=template['target'],
            reward=template['reward'],
            date=day,
        )
        for template in CHALLENGE_TEMPLATES[:count]
    ]


# Power-ups every player starts with
DEFAULT_POWERUPS = [
    {
        'id': 'shield',
        'name': 'SHIELD',
        'description': 'Protect from next negative outcome',
        'icon': '🛡️',
        'count': 1,
        'effect': PowerUpEffect.NEGATE_LOSS,
    },
    {
        'id': 'multiplier',
        'name': '2X MULTIPLIER',
        'description': 'Double next Aura gain',
        'icon': '✨',
        'count': 1,
        'effect': PowerUpEffect.DOUBLE_GAIN,
    },
    {
        'id': 'reroll',
        'name': 'REROLL',
        'description': 'Get a new scenario',
        'icon': '🔄',
        'count': 1,
        'effect': PowerUpEffect.REROLL_SCENARIO,
    },
]


def default_powerups() -> List[PowerUp]:
    """Return a fresh starting power-up inventory."""
    return [PowerUp(**p) for p in DEFAULT_POWERUPS]


# Ranks, checked top to bottom: (exclusive upper bound, label); last entry catches the rest
RANKS = [
    (-19999, 'CANCELED'),
    (-5000, 'CRINGE LORD'),
    (0, 'L MAN'),
    (1000, 'NPC'),
    (5000, 'SIDE CHARACTER'),
    (20000, 'MAIN CHARACTER'),
    (50000, 'SIGMA'),
    (100000, 'GIGACHAD'),
]
TOP_RANK = 'ELDRITCH GOD'


def get_rank(aura: int) -> str:
    """Return the display rank for an aura value."""
    for upper, label in RANKS:
        if aura < upper:
            return label
    return TOP_RANK
