"""Game session state and the state machine that drives a run."""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Awaitable, Callable, List, Optional

import config
from data.catalog import get_rank
from data.scenarios import get_random_scenario
from database.store import GameStore
from game import progress
from game.models import (
    GameEvent,
    OptionType,
    PowerUpEffect,
    Resolution,
    Scenario,
    SessionStatus,
)
from game.scoring import (
    SOURCE_CHALLENGE_REWARD,
    apply_modifiers,
    is_loss,
    is_win,
    resolve,
    resolve_timeout,
)
from game.timer import Countdown, Scheduler

logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent], Awaitable[None]]

# Scheduler tags
TAG_ADVANCE = 'advance'
TAG_LOSS_CHECK = 'loss_check'
TAG_REWARD = 'reward'

POWERUP_CONSUMED_MESSAGES = {
    PowerUpEffect.DOUBLE_GAIN: "2X MULTIPLIER! +{delta}",
    PowerUpEffect.NEGATE_LOSS: "SHIELD BLOCKED {raw}!",
}


@dataclass
class SessionState:
    """Represents the state of one run."""
    status: SessionStatus = SessionStatus.MENU
    aura: int = 0
    max_aura: int = 0
    streak: int = 0
    scenarios_played: int = 0
    history: List[str] = field(default_factory=list)  # end-of-run reasons

    # Carried across restarts while the process lives
    total_games_played: int = 0
    best_run: int = 0

    # Current scenario
    paused: bool = False
    busy: bool = False  # feedback showing / advance pending, input blocked
    active_powerup: Optional[PowerUpEffect] = None
    current_scenario: Optional[Scenario] = None
    time_left: int = 0

    started_at: Optional[float] = None  # monotonic seconds


class AuraSession:
    """
    Owns one player's run and sequences every transition.

    Each public transition runs to completion under a lock before the next
    one starts; events raised along the way are delivered to listeners
    after the lock is released. Invalid transitions are rejected by
    returning None/False.
    """

    def __init__(
        self,
        player_id: str,
        store: GameStore,
        scheduler: Optional[Scheduler] = None,
        rng=None,
        scenarios: Optional[List[Scenario]] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.player_id = str(player_id)
        self.store = store
        self.scheduler = scheduler or Scheduler()
        self.rng = rng or random
        self.scenarios = scenarios
        self.clock = clock

        self.state = SessionState()
        self.countdown = Countdown(on_tick=self.tick)

        self._lock = asyncio.Lock()
        self._listeners: List[Listener] = []
        self._outbox: List[GameEvent] = []
        self._advance_held = False
        self._rewarded: set = set()

    # Listeners
    def add_listener(self, listener: Listener):
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: str, message: str = '', **payload):
        self._outbox.append(GameEvent(kind=kind, message=message, payload=payload))

    async def _dispatch(self, event: GameEvent):
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception("Listener failed on %s event for player %s", event.kind, self.player_id)

    async def _locked(self, handler, *args):
        async with self._lock:
            result = await handler(*args)
            events, self._outbox = self._outbox, []
        for event in events:
            await self._dispatch(event)
        return result

    # Read-only helpers
    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def accepting_input(self) -> bool:
        """Whether a choice or power-up would be accepted right now."""
        return (
            self.state.status == SessionStatus.PLAYING
            and not self.state.paused
            and not self.state.busy
        )

    @property
    def rank(self) -> str:
        return get_rank(self.state.max_aura)

    # Public transitions
    async def start(self) -> bool:
        """Start a fresh run from the menu or the game over screen."""
        return await self._locked(self._start)

    async def choose(self, option_id: str) -> Optional[Resolution]:
        """Resolve the player's choice on the current scenario."""
        return await self._locked(self._choose, option_id)

    async def tick(self):
        """Advance the countdown by one step."""
        await self._locked(self._tick)

    async def pause(self) -> bool:
        return await self._locked(self._pause)

    async def resume(self) -> bool:
        return await self._locked(self._resume)

    async def use_powerup(self, powerup_id: str) -> bool:
        return await self._locked(self._use_powerup, powerup_id)

    async def end_run(self, reason: str = config.CASH_OUT_REASON) -> bool:
        """End the run now; it counts as a win if aura reached the win threshold."""
        return await self._locked(self._end_run_by_player, reason)

    async def return_to_menu(self) -> bool:
        return await self._locked(self._return_to_menu)

    async def show_stats(self) -> bool:
        return await self._locked(self._set_screen, SessionStatus.MENU, SessionStatus.STATS)

    async def hide_stats(self) -> bool:
        return await self._locked(self._set_screen, SessionStatus.STATS, SessionStatus.MENU)

    async def close(self):
        """Tear down: stop the countdown and drop every pending effect."""
        async with self._lock:
            self.countdown.stop()
            self.scheduler.cancel_all()
            self._advance_held = False

    # Transition bodies (lock held)
    async def _start(self) -> bool:
        if self.state.status not in (SessionStatus.MENU, SessionStatus.GAMEOVER):
            logger.debug("Player %s cannot start from %s", self.player_id, self.state.status)
            return False

        self._stop_run_effects()
        previous = self.state
        self.state = SessionState(
            status=SessionStatus.PLAYING,
            total_games_played=previous.total_games_played + 1,
            best_run=previous.best_run,
            started_at=self.clock(),
        )

        await self.store.mark_played()
        self.store.stats = progress.record_game_start(self.store.stats)
        await self.store.save_stats()

        logger.info("Player %s started run #%d", self.player_id, self.state.total_games_played)
        await self._next_scenario()
        return True

    async def _next_scenario(self):
        if self.state.active_powerup == PowerUpEffect.REROLL_SCENARIO:
            self.state.active_powerup = None

        scenario = get_random_scenario(self.scenarios, self.rng)
        self.state.current_scenario = scenario
        self.countdown.reset()
        self.state.time_left = self.countdown.remaining
        self.state.scenarios_played += 1
        self.state.busy = False

        await self._advance_challenge('daily_scenarios', 1)

        self._emit('scenario', scenario.text, scenario=scenario, number=self.state.scenarios_played)
        if not self.state.paused:
            self.countdown.start()

    async def _choose(self, option_id: str) -> Optional[Resolution]:
        if not self.accepting_input or self.state.current_scenario is None:
            logger.debug("Player %s choice %s rejected", self.player_id, option_id)
            return None
        option = self.state.current_scenario.get_option(option_id)
        if option is None:
            logger.debug("Player %s picked unknown option %s", self.player_id, option_id)
            return None

        self.countdown.stop()
        self.state.busy = True

        resolution = resolve(option, self.state.active_powerup, self.state.streak, self.rng)
        self.store.stats = progress.apply_decision(self.store.stats, option.type, resolution.is_risk_win)

        amount = resolution.raw_amount
        if option.type == OptionType.RISK:
            if resolution.is_risk_win:
                message, tone = f"W (+{amount})", 'good'
            else:
                message, tone = f"COOKED ({amount})", 'bad'
        else:
            message = f"+{amount}" if amount > 0 else f"{amount}"
            tone = 'good' if amount >= 0 else 'bad'
        self._emit('feedback', message, tone=tone, option=option, resolution=resolution)

        if resolution.is_risk_win:
            await self._advance_challenge('daily_risks', 1)
        await self._apply_resolution(resolution)

        if amount < 0:
            self._emit('shake')
        self._schedule_advance(config.CHOICE_ADVANCE_DELAY)
        return resolution

    async def _tick(self):
        if self.state.status != SessionStatus.PLAYING or self.state.paused or self.state.busy:
            return
        expired = self.countdown.step()
        self.state.time_left = self.countdown.remaining
        if expired:
            await self._handle_timeout()

    async def _handle_timeout(self):
        self.countdown.stop()
        self.state.busy = True
        self.store.stats = progress.record_timeout(self.store.stats)

        resolution = resolve_timeout(self.state.active_powerup, self.state.streak)
        self._emit('timeout', f"{config.TIMEOUT_PENALTY} Aura (SLOW)", resolution=resolution)
        self._emit('feedback', f"{config.TIMEOUT_PENALTY} Aura (SLOW)", tone='bad', resolution=resolution)
        await self._apply_resolution(resolution)
        self._emit('shake')

        self._schedule_advance(config.TIMEOUT_ADVANCE_DELAY)

    async def _apply_resolution(self, resolution: Resolution):
        """Apply a final delta to the run and the cumulative stats, then persist."""
        if resolution.consumed_modifier is not None:
            self.state.active_powerup = None
            template = POWERUP_CONSUMED_MESSAGES[resolution.consumed_modifier]
            self._emit(
                'powerup_consumed',
                template.format(delta=resolution.delta, raw=resolution.raw_amount),
                effect=resolution.consumed_modifier,
            )

        delta = resolution.delta
        self.state.aura += delta
        self.state.streak = resolution.new_streak
        self.state.max_aura = max(self.state.max_aura, self.state.aura)

        stats = progress.apply_aura_change(self.store.stats, delta)
        self.store.stats = progress.record_streak(stats, self.state.streak)

        if delta > 0:
            await self._advance_challenge('daily_aura', delta)
        if self.state.streak >= config.STREAK_MULTIPLIER_START:
            await self._advance_challenge('daily_streak', self.state.streak, True)

        await self.store.save_stats()
        await self._check_achievements()

        if is_loss(self.state.aura) and not self.scheduler.pending(TAG_LOSS_CHECK):
            self.scheduler.schedule(
                config.LOSS_CHECK_DELAY,
                partial(self._locked, self._loss_check),
                tag=TAG_LOSS_CHECK,
            )

    async def _check_achievements(self):
        updated, newly_unlocked = progress.check_achievements(
            self.store.stats, self.store.achievements, datetime.now()
        )
        if not newly_unlocked:
            return

        self.store.achievements = updated
        await self.store.save_achievements()
        for achievement in newly_unlocked:
            logger.info("Player %s unlocked %s", self.player_id, achievement.id)
        # One popup per check; the rest stay unlocked without an announcement
        first = newly_unlocked[0]
        self._emit('achievement', first.title, achievement=first)

    async def _advance_challenge(self, challenge_id: str, amount: int, high_water_mark: bool = False):
        await self.store.ensure_current_challenges()
        before = self.store.challenges
        updated, completed = progress.advance_challenge(before, challenge_id, amount, high_water_mark)
        if updated == before:
            return

        self.store.challenges = updated
        await self.store.save_challenges()

        for challenge in completed:
            if challenge.id in self._rewarded:
                continue
            self._rewarded.add(challenge.id)
            logger.info("Player %s completed %s", self.player_id, challenge.id)
            self._emit('challenge_completed', challenge.description, challenge=challenge)
            self.scheduler.schedule(
                config.REWARD_GRANT_DELAY,
                partial(self._locked, self._grant_reward, challenge.id, challenge.reward),
                tag=TAG_REWARD,
            )

    async def _grant_reward(self, challenge_id: str, reward: int):
        # Reads the current run and stats, not the ones from when it was scheduled
        if self.state.status == SessionStatus.PLAYING:
            resolution = apply_modifiers(
                reward, self.state.active_powerup, self.state.streak, SOURCE_CHALLENGE_REWARD
            )
            await self._apply_resolution(resolution)
        else:
            self.store.stats = progress.apply_aura_change(self.store.stats, reward)
            await self.store.save_stats()
            await self._check_achievements()

        logger.info("Player %s granted %d aura for %s", self.player_id, reward, challenge_id)
        self._emit('challenge_reward', f"Daily Challenge! +{reward} Aura", challenge_id=challenge_id, reward=reward)

    def _schedule_advance(self, delay: float):
        self.scheduler.schedule(delay, partial(self._locked, self._deferred_advance), tag=TAG_ADVANCE)

    async def _deferred_advance(self):
        if self.state.status != SessionStatus.PLAYING:
            return
        if self.state.paused:
            self._advance_held = True
            return
        await self._next_scenario()

    async def _loss_check(self):
        if self.state.status == SessionStatus.PLAYING and is_loss(self.state.aura):
            await self._end_run(config.LOSS_REASON)

    async def _pause(self) -> bool:
        if self.state.status != SessionStatus.PLAYING or self.state.paused:
            return False
        self.countdown.stop()
        self.state.paused = True
        self._emit('paused', time_left=self.state.time_left)
        return True

    async def _resume(self) -> bool:
        if self.state.status != SessionStatus.PLAYING or not self.state.paused:
            return False
        self.state.paused = False
        self._emit('resumed', time_left=self.state.time_left)
        if self._advance_held:
            self._advance_held = False
            await self._next_scenario()
        elif not self.state.busy:
            self.countdown.start()
        return True

    async def _use_powerup(self, powerup_id: str) -> bool:
        if not self.accepting_input:
            return False
        powerup = self.store.get_powerup(powerup_id)
        if powerup is None or powerup.count <= 0:
            return False
        if self.state.active_powerup is not None:
            logger.debug("Player %s already has %s armed", self.player_id, self.state.active_powerup)
            return False

        powerup.count -= 1
        await self.store.save_powerups()

        self.state.active_powerup = powerup.effect
        self._emit('powerup_activated', f"{powerup.name} ACTIVATED!", powerup=powerup)
        if powerup.effect == PowerUpEffect.REROLL_SCENARIO:
            await self._next_scenario()
        return True

    async def _end_run_by_player(self, reason: str) -> bool:
        if self.state.busy:
            return False
        return await self._end_run(reason)

    async def _end_run(self, reason: str) -> bool:
        if self.state.status != SessionStatus.PLAYING:
            return False
        self._stop_run_effects()

        started_at = self.state.started_at if self.state.started_at is not None else self.clock()
        play_seconds = int(self.clock() - started_at)
        aura = self.state.aura
        won = is_win(aura)

        self.store.stats = progress.record_game_end(self.store.stats, aura, self.state.streak, play_seconds)
        await self.store.save_stats()
        await self._check_achievements()

        self.state.history.append(reason)
        self.state.best_run = max(self.state.best_run, aura)
        self.state.status = SessionStatus.GAMEOVER
        self.state.paused = False
        self.state.busy = False

        logger.info("Player %s run ended (%s) at %d aura", self.player_id, reason, aura)
        self._emit(
            'game_over',
            reason,
            won=won,
            aura=aura,
            max_aura=self.state.max_aura,
            rank=get_rank(self.state.max_aura),
            best_run=self.state.best_run,
        )
        return True

    async def _return_to_menu(self) -> bool:
        self._stop_run_effects()
        previous = self.state
        self.state = SessionState(
            total_games_played=previous.total_games_played,
            best_run=previous.best_run,
        )
        self._emit('menu')
        return True

    async def _set_screen(self, current: SessionStatus, target: SessionStatus) -> bool:
        if self.state.status != current:
            return False
        self.state.status = target
        return True

    def _stop_run_effects(self):
        """Stop the countdown and drop pending advances and loss checks; rewards still land."""
        self.countdown.stop()
        self.scheduler.cancel_all(TAG_ADVANCE)
        self.scheduler.cancel_all(TAG_LOSS_CHECK)
        self._advance_held = False
