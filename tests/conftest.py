"""Shared fixtures for the aura tests."""

from datetime import date

import pytest

import config
from database.manager import DatabaseManager
from database.migrations import initialize_database
from database.store import GameStore
from game.models import Option, OptionType, Scenario
from game.session import AuraSession

TODAY = date(2026, 10, 19)


class FixedRandom:
    """Deterministic stand-in for the random module."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self) -> float:
        return self.value

    def choice(self, seq):
        return seq[0]


class FailingBackend:
    """Backend whose every read and write blows up."""

    async def get(self, owner_id, key):
        raise OSError("disk on fire")

    async def set(self, owner_id, key, value):
        raise OSError("disk on fire")


TEST_SCENARIO = Scenario(
    id='test',
    text='A very awkward moment.',
    options=(
        Option('safe_300', 'Play it cool', OptionType.SAFE, base_change=300),
        Option('safe_100', 'Nod', OptionType.SAFE, base_change=100),
        Option('big', 'Legendary move', OptionType.SAFE, base_change=6000),
        Option('loss', 'Mumble', OptionType.SAFE, base_change=-500),
        Option('zero', 'Stare', OptionType.WILD, base_change=0),
        Option('doom', 'Reply-all to the CEO', OptionType.WILD, base_change=-25000),
        Option('risk_sure', 'Sure thing', OptionType.RISK, success_rate=1.0, win_amount=1000, loss_amount=-1000),
        Option('risk_never', 'Long shot', OptionType.RISK, success_rate=0.0, win_amount=1000, loss_amount=-1000),
        Option('broken', 'Missing payout', OptionType.RISK),
    ),
)


@pytest.fixture
async def backend(tmp_path):
    path = str(tmp_path / "aura.db")
    await initialize_database(path)
    return DatabaseManager(path)


@pytest.fixture
async def store(backend):
    return await GameStore('player-1', backend, today=lambda: TODAY).load()


@pytest.fixture(autouse=True)
def slow_deferrals(monkeypatch):
    """Keep deferred effects from firing on their own; tests run them explicitly."""
    monkeypatch.setattr(config, 'CHOICE_ADVANCE_DELAY', 60)
    monkeypatch.setattr(config, 'TIMEOUT_ADVANCE_DELAY', 60)
    monkeypatch.setattr(config, 'LOSS_CHECK_DELAY', 60)
    monkeypatch.setattr(config, 'REWARD_GRANT_DELAY', 60)


@pytest.fixture
async def session(store):
    session = AuraSession('player-1', store, rng=FixedRandom(), scenarios=[TEST_SCENARIO])
    session.countdown.interval = 3600
    yield session
    await session.close()


@pytest.fixture
def events(session):
    captured = []

    async def listener(event):
        captured.append(event)

    session.add_listener(listener)
    return captured


async def run_pending(session, tag):
    """Run the session's pending deferred effects with the given tag."""
    for task in session.scheduler.pending(tag):
        await task.run()
