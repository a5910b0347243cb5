"""Tests for the game cog's interaction handling."""

import pytest

from cogs.game_commands import GameCommands, ScenarioView
from game.session_manager import session_manager


class FakeUser:
    def __init__(self, user_id='player-1'):
        self.id = user_id
        self.display_name = 'Player One'


class FakeResponse:
    def __init__(self, log):
        self.log = log
        self._done = False

    def is_done(self):
        return self._done

    async def defer(self, **kwargs):
        self._done = True
        self.log.append('defer')

    async def send_message(self, content=None, **kwargs):
        self._done = True
        self.log.append(('send_message', content))


class FakeFollowup:
    def __init__(self, log):
        self.log = log

    async def send(self, content=None, **kwargs):
        self.log.append(('followup', content))


class FakeInteraction:
    def __init__(self, log, user_id='player-1'):
        self.user = FakeUser(user_id)
        self.response = FakeResponse(log)
        self.followup = FakeFollowup(log)
        self.log = log

    async def edit_original_response(self, **kwargs):
        self.log.append('edit_original')


class FakeMessage:
    def __init__(self, log):
        self.log = log

    async def edit(self, **kwargs):
        self.log.append('message_edit')


class FakeChannel:
    def __init__(self):
        self.sent = []

    async def send(self, content=None, **kwargs):
        self.sent.append(content or kwargs.get('embed'))
        return FakeMessage(self.sent)


@pytest.fixture
def log():
    return []


@pytest.fixture
def registered(session, monkeypatch):
    monkeypatch.setitem(session_manager._sessions, 'player-1', session)
    return session


@pytest.fixture
def record_events(registered, log):
    async def listener(event):
        log.append(('event', event.kind))

    registered.add_listener(listener)
    return listener


async def test_option_click_is_acknowledged_before_the_choice_resolves(registered, record_events, log):
    await registered.start()
    log.clear()
    button = ScenarioView('player-1', registered).children[0]

    await button.callback(FakeInteraction(log))

    assert log[0] == 'defer'
    assert ('event', 'feedback') in log
    assert log[-1] == 'edit_original'
    assert registered.state.aura == 300
    assert all(item.disabled for item in button.view.children)


async def test_rejected_click_answers_with_a_followup(registered, log):
    await registered.start()
    await registered.choose('safe_100')
    button = ScenarioView('player-1', registered).children[0]

    await button.callback(FakeInteraction(log))

    assert log == ['defer', ('followup', "⏳ Can't pick right now.")]
    assert registered.state.aura == 100


async def test_other_players_cannot_click(registered, log):
    await registered.start()
    button = ScenarioView('player-1', registered).children[0]

    await button.callback(FakeInteraction(log, user_id='someone-else'))

    assert log[0][0] == 'send_message'
    assert registered.state.aura == 0


async def test_reroll_is_acknowledged_before_the_new_scenario_posts(registered, record_events, log):
    await registered.start()
    log.clear()
    cog = GameCommands(bot=None)

    await cog.powerup.callback(cog, FakeInteraction(log), 'reroll')

    assert log[0] == 'defer'
    assert log.index(('event', 'scenario')) < len(log) - 1
    assert log[-1][0] == 'followup'
    assert registered.state.scenarios_played == 2


async def test_menu_unbinds_the_channel(registered, log):
    cog = GameCommands(bot=None)
    channel = FakeChannel()
    cog._bind_channel('player-1', registered, channel)
    await registered.start()
    assert len(channel.sent) == 1

    await cog.menu.callback(cog, FakeInteraction(log))

    assert 'player-1' not in cog.listeners
    assert 'player-1' not in cog.channels
    assert registered._listeners == []
    assert log[0] == 'defer'

    sent = len(channel.sent)
    await registered.start()
    assert len(channel.sent) == sent
