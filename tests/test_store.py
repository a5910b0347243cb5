"""Tests for the persisted player records."""

import json
from datetime import date, timedelta
from dataclasses import replace

from conftest import TODAY, FailingBackend
from database.store import (
    ACHIEVEMENTS_KEY,
    DAILY_CHALLENGES_KEY,
    POWERUPS_KEY,
    STATS_KEY,
    GameStore,
)
from data.catalog import ACHIEVEMENT_DEFINITIONS, generate_daily_challenges
from dataclasses import asdict

YESTERDAY = TODAY - timedelta(days=1)


async def load(backend, day: date = TODAY) -> GameStore:
    return await GameStore('player-1', backend, today=lambda: day).load()


async def test_fresh_player_gets_defaults(store):
    assert store.stats.total_decisions == 0
    assert store.stats.consecutive_days == 1
    assert store.stats.last_played_date == '2026-10-19'
    assert len(store.achievements) == len(ACHIEVEMENT_DEFINITIONS)
    assert not any(a.unlocked for a in store.achievements)
    assert [(p.id, p.count) for p in store.powerups] == [('shield', 1), ('multiplier', 1), ('reroll', 1)]
    assert len(store.challenges) == 3
    assert all(c.date == '2026-10-19' for c in store.challenges)


async def test_records_survive_a_reload(backend, store):
    store.stats = replace(store.stats, total_decisions=7, highest_streak=4)
    store.achievements[0].unlocked = True
    store.achievements[0].unlocked_date = '2026-10-19T10:00:00'
    store.get_powerup('shield').count = 0
    store.challenges[0].progress = 4
    assert await store.save_stats()
    await store.save_achievements()
    await store.save_powerups()
    await store.save_challenges()

    reloaded = await load(backend)
    assert reloaded.stats.total_decisions == 7
    assert reloaded.stats.highest_streak == 4
    assert reloaded.achievements[0].unlocked
    assert reloaded.achievements[0].unlocked_date == '2026-10-19T10:00:00'
    assert reloaded.get_powerup('shield').count == 0
    assert reloaded.challenges[0].progress == 4


async def test_stale_challenges_are_replaced(backend):
    stale = [replace(c, progress=5) for c in generate_daily_challenges(YESTERDAY.isoformat())]
    await backend.set('player-1', DAILY_CHALLENGES_KEY, json.dumps([asdict(c) for c in stale]))

    store = await load(backend)
    assert all(c.date == TODAY.isoformat() for c in store.challenges)
    assert all(c.progress == 0 and not c.completed for c in store.challenges)


async def test_rollover_while_loaded(backend, store):
    store._today = lambda: TODAY + timedelta(days=1)
    assert await store.ensure_current_challenges()
    assert all(c.date == '2026-10-20' for c in store.challenges)
    assert not await store.ensure_current_challenges()


async def test_unreadable_json_falls_back_to_defaults(backend):
    await backend.set('player-1', STATS_KEY, '{not json')
    await backend.set('player-1', POWERUPS_KEY, '"just a string"')

    store = await load(backend)
    assert store.stats.total_decisions == 0
    assert store.get_powerup('reroll').count == 1


async def test_wrongly_typed_stats_fall_back_to_defaults(backend):
    await backend.set('player-1', STATS_KEY, json.dumps({'total_decisions': 'five', 'timeouts': 3}))
    store = await load(backend)
    assert store.stats.timeouts == 0


async def test_partial_stats_keep_known_fields(backend):
    await backend.set('player-1', STATS_KEY, json.dumps({'risks_taken': 12, 'some_future_field': 1}))
    store = await load(backend)
    assert store.stats.risks_taken == 12
    assert store.stats.games_won == 0


async def test_achievements_merge_onto_catalog(backend):
    await backend.set('player-1', ACHIEVEMENTS_KEY, json.dumps([
        {'id': 'first_blood', 'unlocked': True, 'unlocked_date': '2026-01-01T00:00:00'},
        {'id': 'retired_achievement', 'unlocked': True, 'unlocked_date': None},
    ]))
    store = await load(backend)

    assert [a.id for a in store.achievements] == [d.id for d in ACHIEVEMENT_DEFINITIONS]
    first = store.achievements[0]
    assert first.unlocked
    assert first.title == 'FIRST BLOOD'


async def test_powerup_counts_merge_onto_catalog(backend):
    await backend.set('player-1', POWERUPS_KEY, json.dumps([{'id': 'shield', 'count': 3}]))
    store = await load(backend)
    assert store.get_powerup('shield').count == 3
    assert store.get_powerup('multiplier').count == 1
    assert store.get_powerup('missing') is None


async def test_consecutive_days_across_loads(backend):
    await load(backend, YESTERDAY)
    store = await load(backend)
    assert store.stats.consecutive_days == 2

    store = await load(backend, TODAY + timedelta(days=3))
    assert store.stats.consecutive_days == 1


async def test_backend_failures_are_swallowed():
    store = await GameStore('player-1', FailingBackend(), today=lambda: TODAY).load()
    assert store.stats.consecutive_days == 1
    assert len(store.challenges) == 3
    assert not await store.save_stats()


async def test_reset_wipes_everything(backend, store):
    store.stats = replace(store.stats, total_decisions=50)
    store.get_powerup('shield').count = 0
    await store.save_stats()
    await store.save_powerups()

    await store.reset()
    reloaded = await load(backend)
    assert reloaded.stats.total_decisions == 0
    assert reloaded.get_powerup('shield').count == 1
