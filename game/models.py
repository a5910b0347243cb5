"""Core data structures for the aura game."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Tuple, Any


class OptionType(str, Enum):
    SAFE = 'safe'
    RISK = 'risk'
    WILD = 'wild'


class PowerUpEffect(str, Enum):
    NEGATE_LOSS = 'negate_loss'
    DOUBLE_GAIN = 'double_gain'
    REROLL_SCENARIO = 'reroll_scenario'


class SessionStatus(str, Enum):
    MENU = 'MENU'
    PLAYING = 'PLAYING'
    GAMEOVER = 'GAMEOVER'
    STATS = 'STATS'


@dataclass(frozen=True)
class Option:
    """A single labeled choice inside a scenario."""
    id: str
    text: str
    type: OptionType

    # Safe / wild
    base_change: Optional[int] = None

    # Risk
    success_rate: Optional[float] = None  # 0.0 to 1.0
    win_amount: Optional[int] = None
    loss_amount: Optional[int] = None


@dataclass(frozen=True)
class Scenario:
    id: str
    text: str
    options: Tuple[Option, ...]

    def get_option(self, option_id: str) -> Optional[Option]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


@dataclass
class GameStats:
    """Cumulative, persisted counters across every run."""
    total_aura_gained: int = 0
    total_aura_lost: int = 0
    total_decisions: int = 0
    risks_taken: int = 0
    risks_won: int = 0
    wild_choices: int = 0
    safe_choices: int = 0
    timeouts: int = 0
    highest_streak: int = 0
    total_games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    total_play_time: int = 0  # seconds
    consecutive_days: int = 0
    last_played_date: str = ''  # YYYY-MM-DD


@dataclass
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    unlocked: bool = False
    unlocked_date: Optional[str] = None  # ISO timestamp


@dataclass
class DailyChallenge:
    id: str  # <template id>_<YYYY-MM-DD>
    description: str
    target: int
    reward: int
    date: str
    progress: int = 0
    completed: bool = False


@dataclass
class PowerUp:
    id: str
    name: str
    description: str
    icon: str
    count: int
    effect: PowerUpEffect


@dataclass(frozen=True)
class Resolution:
    """Outcome of running one raw amount through the scoring rules."""
    delta: int
    new_streak: int
    raw_amount: int = 0
    is_risk_win: bool = False
    consumed_modifier: Optional[PowerUpEffect] = None
    multiplier: float = 1.0


@dataclass
class GameEvent:
    """Something the outer surface may want to show the player."""
    kind: str
    message: str = ''
    payload: Dict[str, Any] = field(default_factory=dict)

