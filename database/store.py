"""Typed persistence for a player's stats, achievements, challenges and power-ups."""

import json
import logging
from dataclasses import asdict, fields, replace
from datetime import date
from typing import Any, Callable, List, Optional

import config
from data.catalog import ACHIEVEMENT_DEFINITIONS, default_powerups, generate_daily_challenges
from database.manager import DatabaseManager, db_manager
from game.models import Achievement, DailyChallenge, GameStats, PowerUp
from game.progress import update_consecutive_days

logger = logging.getLogger(__name__)

STATS_KEY = 'aura_game_stats'
ACHIEVEMENTS_KEY = 'aura_achievements'
DAILY_CHALLENGES_KEY = 'aura_daily_challenges'
POWERUPS_KEY = 'aura_powerups'


class MalformedRecord(ValueError):
    """A stored record that does not have the expected shape."""


def default_achievements() -> List[Achievement]:
    """All catalog achievements, locked."""
    return [
        Achievement(id=d.id, title=d.title, description=d.description, icon=d.icon)
        for d in ACHIEVEMENT_DEFINITIONS
    ]


def _parse_stats(data: Any) -> GameStats:
    if not isinstance(data, dict):
        raise MalformedRecord("stats record is not an object")
    defaults = GameStats()
    values = {}
    for f in fields(GameStats):
        if f.name not in data:
            continue
        value = data[f.name]
        expected = type(getattr(defaults, f.name))
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MalformedRecord(f"stats field {f.name} has the wrong type")
        values[f.name] = value
    return GameStats(**values)


def _parse_achievements(data: Any) -> List[Achievement]:
    """Merge stored unlock state onto the catalog by id."""
    if not isinstance(data, list):
        raise MalformedRecord("achievements record is not a list")
    stored = {}
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get('id'), str):
            raise MalformedRecord("achievement entry without an id")
        stored[item['id']] = item

    merged = []
    for achievement in default_achievements():
        item = stored.get(achievement.id)
        if item and item.get('unlocked') is True:
            unlocked_date = item.get('unlocked_date')
            achievement = replace(
                achievement,
                unlocked=True,
                unlocked_date=unlocked_date if isinstance(unlocked_date, str) else None,
            )
        merged.append(achievement)
    return merged


def _parse_challenges(data: Any) -> List[DailyChallenge]:
    if not isinstance(data, list):
        raise MalformedRecord("daily challenges record is not a list")
    try:
        return [DailyChallenge(**item) for item in data]
    except TypeError as e:
        raise MalformedRecord(f"bad daily challenge entry: {e}") from e


def _parse_powerups(data: Any) -> List[PowerUp]:
    """Merge stored counts onto the catalog power-ups by id."""
    if not isinstance(data, list):
        raise MalformedRecord("power-ups record is not a list")
    counts = {}
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get('count'), int):
            raise MalformedRecord("power-up entry without a count")
        counts[item.get('id')] = max(0, item['count'])

    return [
        replace(p, count=counts[p.id]) if p.id in counts else p
        for p in default_powerups()
    ]


class GameStore:
    """
    Working copies of one player's persisted records.

    Every save writes the whole record. Read and write failures are logged
    and never raised; the in-memory copy stays authoritative.
    """

    def __init__(
        self,
        player_id: str,
        backend: Optional[DatabaseManager] = None,
        today: Callable[[], date] = date.today
    ):
        self.player_id = str(player_id)
        self.backend = backend or db_manager
        self._today = today

        self.stats = GameStats()
        self.achievements = default_achievements()
        self.challenges: List[DailyChallenge] = []
        self.powerups = default_powerups()

    def today(self) -> str:
        """Local calendar date as YYYY-MM-DD."""
        return self._today().isoformat()

    # Raw record access
    async def _read(self, key: str) -> Optional[Any]:
        try:
            raw = await self.backend.get(self.player_id, key)
        except Exception:
            logger.exception("Failed to load %s for player %s", key, self.player_id)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable %s for player %s", key, self.player_id)
            return None

    async def _write(self, key: str, data: Any) -> bool:
        try:
            await self.backend.set(self.player_id, key, json.dumps(data))
        except Exception:
            logger.exception("Failed to save %s for player %s", key, self.player_id)
            return False
        return True

    async def _load_record(self, key: str, parse, default):
        data = await self._read(key)
        if data is None:
            return default()
        try:
            return parse(data)
        except MalformedRecord as e:
            logger.warning("Discarding malformed %s for player %s: %s", key, self.player_id, e)
            return default()

    # Loading
    async def load(self) -> 'GameStore':
        """Read all four records, falling back to defaults, and stamp today's visit."""
        self.stats = await self._load_record(STATS_KEY, _parse_stats, GameStats)
        self.achievements = await self._load_record(ACHIEVEMENTS_KEY, _parse_achievements, default_achievements)
        self.powerups = await self._load_record(POWERUPS_KEY, _parse_powerups, default_powerups)
        self.challenges = await self._load_record(DAILY_CHALLENGES_KEY, _parse_challenges, list)

        await self.ensure_current_challenges()
        await self.mark_played()
        return self

    async def ensure_current_challenges(self) -> bool:
        """
        Replace challenges that are not dated today with a fresh set.

        Stale progress is discarded, never merged. Returns True when a new set
        was generated.
        """
        today = self.today()
        if self.challenges and all(c.date == today for c in self.challenges):
            return False

        self.challenges = generate_daily_challenges(today, config.DAILY_CHALLENGE_COUNT)
        await self.save_challenges()
        return True

    async def mark_played(self):
        """Apply the consecutive-day rule for today and record the visit."""
        today = self.today()
        days = update_consecutive_days(
            self.stats.last_played_date,
            self.stats.consecutive_days,
            self._today()
        )
        if days != self.stats.consecutive_days or self.stats.last_played_date != today:
            self.stats = replace(self.stats, consecutive_days=days, last_played_date=today)
            await self.save_stats()

    async def reset(self):
        """Re-initialize every record to its defaults."""
        self.stats = GameStats()
        self.achievements = default_achievements()
        self.powerups = default_powerups()
        self.challenges = []
        await self.save_achievements()
        await self.save_powerups()
        await self.ensure_current_challenges()
        await self.mark_played()

    # Saving
    async def save_stats(self) -> bool:
        return await self._write(STATS_KEY, asdict(self.stats))

    async def save_achievements(self) -> bool:
        return await self._write(ACHIEVEMENTS_KEY, [
            {'id': a.id, 'unlocked': a.unlocked, 'unlocked_date': a.unlocked_date}
            for a in self.achievements
        ])

    async def save_challenges(self) -> bool:
        return await self._write(DAILY_CHALLENGES_KEY, [asdict(c) for c in self.challenges])

    async def save_powerups(self) -> bool:
        return await self._write(POWERUPS_KEY, [
            {
                'id': p.id,
                'name': p.name,
                'description': p.description,
                'icon': p.icon,
                'count': p.count,
                'effect': p.effect.value,
            }
            for p in self.powerups
        ])

    def get_powerup(self, powerup_id: str) -> Optional[PowerUp]:
        for powerup in self.powerups:
            if powerup.id == powerup_id:
                return powerup
        return None
