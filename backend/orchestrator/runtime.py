"""
Runtime driver for the orchestration core.

Responsibilities:
- Own the RuntimeContext for one application run
- Drive ticks: apply deferred mode changes, then wake per-tick waiters
- Forward load / unload requests to the pipelines
- Push the built-in quit / pause modes
- Tear everything down exactly once

Non-responsibilities:
- Phase sequencing (transfer.pipeline)
- Authority resolution (modes.stack)
- Performing transfers (host)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Iterable

from constants import STEP_MAX_YIELDS, ms_to_seconds
from modes.builtin import PauseMode, QuitMode
from observability import logger
from observability.logger import log_event
from transfer.enums.transfer_mode import LoadMode, UnloadMode

if TYPE_CHECKING:
    from modes.mode import Mode
    from modes.stack import ModeStack
    from modes.time_scale import TimeScale
    from orchestrator.runtime_context import RuntimeContext
    from transfer.events import EventBus
    from transfer.readiness import ReadinessRegistry
    from transfer.requests import LoadedBundles


class Runtime:
    """
    Single logical thread of control for the core.

    Tick order (one call to tick()):
    1. ModeStack.update(): pending pushes, pending pops, one refresh,
       then on_update() on the authoritative mode
    2. TickClock.advance(): wake every task polling a per-tick condition

    Guarantees:
    - The stack is mutated at most once per tick through its pending queue
    - shutdown() is idempotent
    """

    def __init__(self, *, context: RuntimeContext) -> None:
        self._ctx = context
        self._started = False
        self._shutdown = False
        self._stop_event = asyncio.Event()
        self._quit_mode: QuitMode | None = None
        self._pause_mode: PauseMode | None = None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def context(self) -> RuntimeContext:
        return self._ctx

    @property
    def stack(self) -> ModeStack:
        return self._ctx.stack

    @property
    def time_scale(self) -> TimeScale:
        return self._ctx.time_scale

    @property
    def readiness(self) -> ReadinessRegistry:
        return self._ctx.readiness

    @property
    def events(self) -> EventBus:
        return self._ctx.events

    @property
    def loaded(self) -> LoadedBundles:
        return self._ctx.loaded

    @property
    def current_mode(self) -> Mode:
        return self._ctx.stack.current

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Apply logging config and request the first bundle, if configured.

        Must be awaited from inside the event loop that will drive ticks.
        """
        if self._started:
            return
        self._started = True

        config = self._ctx.config
        logger.configure(min_level=config.log_level, enabled=config.enable_json_logs)

        log_event({
            "event_type": "RUNTIME_STARTED",
            "env": config.env,
            "tick_interval_ms": config.tick_interval_ms,
            "first_bundle": config.first_bundle,
            "core_bundles": list(config.core_bundles),
        })

        if config.first_bundle:
            self.load(config.first_bundle, LoadMode.ADDITIVE)

    async def run(self) -> None:
        """Tick every tick_interval_ms until shutdown()."""
        await self.start()
        interval = ms_to_seconds(self._ctx.config.tick_interval_ms)

        while not self._stop_event.is_set():
            self.tick()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    async def shutdown(self) -> None:
        """
        Stop both pipelines, wait for their tasks to unwind and end run().

        Safe to call more than once.
        """
        if self._shutdown:
            return
        self._shutdown = True

        tasks = [p.task for p in self._ctx.pipelines() if p.task is not None]
        for pipeline in self._ctx.pipelines():
            pipeline.stop()

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._stop_event.set()
        log_event({
            "event_type": "RUNTIME_STOPPED",
            "ticks": self._ctx.clock.tick,
            "loaded": list(self._ctx.loaded),
        })

    # ------------------------------------------------------------------
    # Tick driving
    # ------------------------------------------------------------------

    def tick(self) -> int:
        """Run one tick. Returns the tick number."""
        self._ctx.stack.update()
        return self._ctx.clock.advance()

    async def step(self, *, max_yields: int = STEP_MAX_YIELDS) -> int:
        """
        Run one tick, then yield to the event loop until every pipeline
        task is parked on the next tick (or done).

        Deterministic with zero delays and an immediate host; with real
        delays it returns after max_yields.
        """
        tick = self.tick()
        for _ in range(max_yields):
            await asyncio.sleep(0)
            if all(p.is_settled for p in self._ctx.pipelines()):
                break
        return tick

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def load(self, bundle: str, mode: LoadMode = LoadMode.ADDITIVE) -> None:
        self._ctx.load.request(bundle, mode)

    def load_many(self, bundles: Iterable[str], mode: LoadMode = LoadMode.ADDITIVE) -> None:
        for bundle in bundles:
            self._ctx.load.request(bundle, mode)

    def unload(self, bundle: str, mode: UnloadMode = UnloadMode.DEFAULT) -> None:
        self._ctx.unload.request(bundle, mode)

    # ------------------------------------------------------------------
    # Built-in modes
    # ------------------------------------------------------------------

    def quit(self) -> QuitMode:
        """Push the quit mode (once). Returns the live quit mode."""
        if self._quit_mode is None or not self._quit_mode.is_active:
            self._quit_mode = QuitMode()
            self._ctx.stack.push(self._quit_mode)
        return self._quit_mode

    def pause(self) -> PauseMode:
        """Push the pause mode (once). Returns the live pause mode."""
        if self._pause_mode is None or not self._pause_mode.is_active:
            self._pause_mode = PauseMode()
            self._ctx.stack.push(self._pause_mode)
        return self._pause_mode

    def resume(self) -> bool:
        """Remove the pause mode. Returns False if not paused."""
        if self._pause_mode is None:
            return False
        removed = self._pause_mode.remove()
        self._pause_mode = None
        return removed
