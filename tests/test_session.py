"""Tests for the run state machine."""

import config
from conftest import TEST_SCENARIO, TODAY, FailingBackend, FixedRandom, run_pending
from database.store import GameStore
from game.models import PowerUpEffect, SessionStatus
from game.session import TAG_ADVANCE, TAG_LOSS_CHECK, TAG_REWARD, AuraSession


async def choose_and_advance(session, option_id):
    resolution = await session.choose(option_id)
    await run_pending(session, TAG_ADVANCE)
    return resolution


async def run_out_the_clock(session):
    for _ in range(config.INITIAL_TIME):
        await session.tick()


async def test_start_from_menu(session, events):
    assert session.status == SessionStatus.MENU
    assert await session.start()

    assert session.status == SessionStatus.PLAYING
    assert session.state.current_scenario is TEST_SCENARIO
    assert session.state.scenarios_played == 1
    assert session.state.time_left == config.INITIAL_TIME
    assert session.store.stats.total_games_played == 1
    assert [e.kind for e in events] == ['scenario']


async def test_cannot_start_twice(session):
    await session.start()
    assert not await session.start()


async def test_streak_multiplier_walkthrough(session):
    await session.start()

    await choose_and_advance(session, 'safe_300')
    assert (session.state.aura, session.state.streak) == (300, 1)

    for _ in range(4):
        await choose_and_advance(session, 'safe_100')
    assert (session.state.aura, session.state.streak) == (700, 5)

    resolution = await choose_and_advance(session, 'safe_100')
    assert resolution.delta == 125
    assert (session.state.aura, session.state.streak) == (825, 6)
    assert session.state.max_aura == 825
    assert session.store.stats.highest_streak == 6
    assert session.store.stats.total_aura_gained == 825


async def test_feedback_messages(session, events):
    await session.start()
    await choose_and_advance(session, 'safe_300')
    await choose_and_advance(session, 'risk_never')
    await choose_and_advance(session, 'risk_sure')

    feedback = [e.message for e in events if e.kind == 'feedback']
    assert feedback == ['+300', 'COOKED (-1000)', 'W (+1000)']
    assert [e.kind for e in events].count('shake') == 1


async def test_choice_blocked_until_advance(session):
    await session.start()
    assert await session.choose('safe_100') is not None
    assert not session.accepting_input
    assert await session.choose('safe_100') is None
    assert session.state.aura == 100

    await run_pending(session, TAG_ADVANCE)
    assert session.accepting_input
    assert session.state.scenarios_played == 2


async def test_unknown_option_is_rejected(session):
    await session.start()
    assert await session.choose('nope') is None
    assert session.accepting_input


async def test_broken_option_scores_zero(session):
    await session.start()
    resolution = await session.choose('broken')
    assert resolution.delta == 0
    assert session.state.aura == 0


async def test_timeout_penalty_ignores_streak(session, events):
    await session.start()
    session.state.streak = 10

    await run_out_the_clock(session)

    assert session.state.aura == config.TIMEOUT_PENALTY
    assert session.state.streak == 0
    assert session.state.time_left == 0
    assert session.store.stats.timeouts == 1
    assert session.store.stats.total_aura_lost == 1000
    assert 'timeout' in [e.kind for e in events]
    assert session.scheduler.pending(TAG_ADVANCE)

    # no further ticks count once expired
    await session.tick()
    assert session.store.stats.timeouts == 1


async def test_shield_blocks_timeout(session, events):
    await session.start()
    assert await session.use_powerup('shield')
    assert session.state.active_powerup == PowerUpEffect.NEGATE_LOSS

    await run_out_the_clock(session)

    assert session.state.aura == 0
    assert session.state.active_powerup is None
    assert session.store.get_powerup('shield').count == 0
    assert 'SHIELD BLOCKED -1000!' in [e.message for e in events]


async def test_double_gain_waits_for_a_gain(session):
    await session.start()
    await session.use_powerup('multiplier')

    await choose_and_advance(session, 'loss')
    assert session.state.aura == -500
    assert session.state.active_powerup == PowerUpEffect.DOUBLE_GAIN

    resolution = await choose_and_advance(session, 'safe_100')
    assert resolution.delta == 200
    assert session.state.active_powerup is None


async def test_only_one_modifier_armed(session):
    await session.start()
    assert await session.use_powerup('multiplier')
    assert not await session.use_powerup('shield')
    assert session.store.get_powerup('shield').count == 1


async def test_reroll_draws_a_new_scenario(session):
    await session.start()
    assert await session.use_powerup('reroll')

    assert session.state.scenarios_played == 2
    assert session.state.active_powerup is None
    assert session.store.get_powerup('reroll').count == 0
    assert not await session.use_powerup('reroll')


async def test_pause_freezes_the_clock(session):
    await session.start()
    await session.tick()
    assert await session.pause()
    assert not await session.pause()

    await session.tick()
    assert session.state.time_left == config.INITIAL_TIME - 1
    assert await session.choose('safe_100') is None
    assert not await session.use_powerup('shield')

    assert await session.resume()
    assert not await session.resume()
    assert session.state.time_left == config.INITIAL_TIME - 1
    assert session.countdown.running


async def test_advance_during_pause_waits_for_resume(session):
    await session.start()
    await session.choose('safe_100')
    await session.pause()

    await run_pending(session, TAG_ADVANCE)
    assert session.state.scenarios_played == 1
    assert not session.accepting_input

    await session.resume()
    assert session.state.scenarios_played == 2
    assert session.accepting_input


async def test_loss_ends_the_run(session, events):
    await session.start()
    await session.choose('doom')
    assert session.scheduler.pending(TAG_LOSS_CHECK)

    await session.scheduler.flush()

    assert session.status == SessionStatus.GAMEOVER
    assert session.state.history == [config.LOSS_REASON]
    assert session.store.stats.games_lost == 1
    game_over = [e for e in events if e.kind == 'game_over'][0]
    assert game_over.message == config.LOSS_REASON
    assert not game_over.payload['won']
    assert game_over.payload['rank'] == 'NPC'


async def test_pause_keeps_pending_effects(session):
    await session.start()
    await session.choose('doom')
    await session.pause()

    assert session.scheduler.pending(TAG_ADVANCE)
    assert session.scheduler.pending(TAG_LOSS_CHECK)

    await run_pending(session, TAG_LOSS_CHECK)
    assert session.status == SessionStatus.GAMEOVER
    assert session.scheduler.pending(TAG_ADVANCE) == []


async def test_loss_check_rechecks_current_aura(session):
    await session.start()
    await session.choose('doom')
    session.state.aura = -100

    await run_pending(session, TAG_LOSS_CHECK)
    assert session.status == SessionStatus.PLAYING


async def test_cash_out_win(session, events):
    await session.start()
    await session.choose('big')
    assert not await session.end_run()

    await run_pending(session, TAG_ADVANCE)
    assert await session.end_run()

    assert session.status == SessionStatus.GAMEOVER
    assert session.state.best_run == 6000
    assert session.store.stats.games_won == 1
    assert session.state.history == [config.CASH_OUT_REASON]
    game_over = [e for e in events if e.kind == 'game_over'][0]
    assert game_over.payload['won']
    assert game_over.payload['rank'] == 'MAIN CHARACTER'


async def test_restart_after_game_over_keeps_best_run(session):
    await session.start()
    await choose_and_advance(session, 'big')
    await session.end_run()

    assert await session.start()
    assert session.state.aura == 0
    assert session.state.streak == 0
    assert session.state.best_run == 6000
    assert session.state.total_games_played == 2


async def test_return_to_menu_discards_the_run(session, events):
    await session.start()
    await session.choose('safe_100')
    assert await session.return_to_menu()

    assert session.status == SessionStatus.MENU
    assert session.scheduler.pending(TAG_ADVANCE) == []
    assert not session.countdown.running
    assert events[-1].kind == 'menu'

    assert await session.start()
    assert session.state.aura == 0
    assert session.state.total_games_played == 2


async def test_stats_screen_only_from_menu(session):
    assert await session.show_stats()
    assert session.status == SessionStatus.STATS
    assert not await session.start()
    assert await session.hide_stats()

    await session.start()
    assert not await session.show_stats()


async def test_challenge_reward_granted_once(session, events):
    await session.start()
    await choose_and_advance(session, 'big')
    assert session.state.aura == 6000
    assert len(session.scheduler.pending(TAG_REWARD)) == 1
    completed = [e for e in events if e.kind == 'challenge_completed']
    assert [e.payload['challenge'].id for e in completed] == ['daily_aura_2026-10-19']

    await run_pending(session, TAG_REWARD)
    await run_pending(session, TAG_REWARD)

    assert session.state.aura == 6800
    assert session.store.stats.total_aura_gained == 6800
    rewards = [e for e in events if e.kind == 'challenge_reward']
    assert [e.message for e in rewards] == ['Daily Challenge! +800 Aura']


async def test_reward_after_leaving_the_run_goes_to_stats(session):
    await session.start()
    await choose_and_advance(session, 'big')
    await session.return_to_menu()

    await run_pending(session, TAG_REWARD)

    assert session.state.aura == 0
    assert session.store.stats.total_aura_gained == 6800


async def test_first_decision_unlocks_first_blood(session, events):
    await session.start()
    await session.choose('zero')

    unlocked = [e for e in events if e.kind == 'achievement']
    assert [e.payload['achievement'].id for e in unlocked] == ['first_blood']
    assert session.store.achievements[0].unlocked


async def test_one_popup_when_several_unlock(session, events):
    await session.start()
    await session.choose('big')

    popups = [e for e in events if e.kind == 'achievement']
    assert len(popups) == 1
    unlocked = {a.id for a in session.store.achievements if a.unlocked}
    assert {'first_blood', 'main_character'} <= unlocked


async def test_daily_challenge_progress_persists(backend, session):
    await session.start()
    await choose_and_advance(session, 'safe_100')

    reloaded = await GameStore('player-1', backend, today=lambda: TODAY).load()
    scenarios = next(c for c in reloaded.challenges if c.id.startswith('daily_scenarios'))
    assert scenarios.progress == 2


async def test_listener_errors_do_not_break_the_run(session):
    async def broken(event):
        raise RuntimeError("render failed")

    session.add_listener(broken)
    assert await session.start()
    assert await session.choose('safe_100') is not None


async def test_plays_without_storage():
    store = await GameStore('ghost', FailingBackend(), today=lambda: TODAY).load()
    session = AuraSession('ghost', store, rng=FixedRandom(), scenarios=[TEST_SCENARIO])
    session.countdown.interval = 3600
    try:
        await session.start()
        await session.choose('safe_300')
        assert session.state.aura == 300
        assert session.store.stats.total_decisions == 1
    finally:
        await session.close()
