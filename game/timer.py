"""Countdown timer and deferred effect scheduling."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import config

logger = logging.getLogger(__name__)

Effect = Callable[[], Awaitable[None]]


class Countdown:
    """
    Periodic countdown driven by an asyncio task.

    Every interval seconds the remaining value drops by decay and on_tick is
    awaited. When it reaches zero it is clamped and on_expire is awaited once.
    Stopping keeps the remaining value so the countdown can resume.
    """

    def __init__(
        self,
        on_tick: Optional[Effect] = None,
        on_expire: Optional[Effect] = None,
        initial: int = config.INITIAL_TIME,
        decay: int = config.TIMER_DECAY,
        interval: float = config.TIMER_TICK_SECONDS
    ):
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.initial = initial
        self.decay = decay
        self.interval = interval
        self.remaining = initial
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def reset(self):
        """Restore the initial value without starting."""
        self.remaining = self.initial

    def start(self):
        """Start (or restart) ticking from the current remaining value."""
        self.stop()
        self._task = asyncio.create_task(self._run())

    def stop(self):
        """Cancel ticking. Safe to call when not running."""
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def step(self) -> bool:
        """Apply one decay step. Returns True when the countdown has expired."""
        self.remaining = max(0, self.remaining - self.decay)
        return self.remaining <= 0

    async def _run(self):
        me = asyncio.current_task()
        while self._task is me:
            await asyncio.sleep(self.interval)
            if self.on_tick:
                # on_tick owns stepping and expiry, and may stop us
                await self.on_tick()
            elif self.step():
                self._task = None
                if self.on_expire:
                    await self.on_expire()


class ScheduledTask:
    """Handle for one deferred effect."""

    def __init__(self, scheduler: 'Scheduler', effect: Effect, delay: float, tag: Optional[str]):
        self.scheduler = scheduler
        self.effect = effect
        self.delay = delay
        self.tag = tag
        self.cancelled = False
        self.done = False
        self._handle: Optional[asyncio.TimerHandle] = None

    def cancel(self):
        if self.done or self.cancelled:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
        self.scheduler._forget(self)

    async def run(self):
        """Run the effect now if it has not already run or been cancelled."""
        if self.done or self.cancelled:
            return
        self.done = True
        if self._handle is not None:
            self._handle.cancel()
        self.scheduler._forget(self)
        try:
            await self.effect()
        except Exception:
            logger.exception("Deferred effect %s failed", self.tag or self.effect)


class Scheduler:
    """schedule(delay, effect) with handles, tags and cancellation."""

    def __init__(self):
        self._pending: List[ScheduledTask] = []
        self._running: set = set()

    def schedule(self, delay: float, effect: Effect, tag: Optional[str] = None) -> ScheduledTask:
        task = ScheduledTask(self, effect, delay, tag)
        self._pending.append(task)
        loop = asyncio.get_running_loop()
        task._handle = loop.call_later(max(0.0, delay), self._fire, task)
        return task

    def _fire(self, task: ScheduledTask):
        running = asyncio.create_task(task.run())
        self._running.add(running)
        running.add_done_callback(self._running.discard)

    def _forget(self, task: ScheduledTask):
        if task in self._pending:
            self._pending.remove(task)

    def pending(self, tag: Optional[str] = None) -> List[ScheduledTask]:
        return [t for t in self._pending if tag is None or t.tag == tag]

    def cancel_all(self, tag: Optional[str] = None):
        for task in self.pending(tag):
            task.cancel()

    async def flush(self):
        """Run every pending effect immediately, in the order it was scheduled."""
        while self._pending:
            await self._pending[0].run()
