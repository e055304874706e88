"""
Load / Unload transfer pipelines.

Each pipeline is one cooperative asyncio task walking the ordered phase
sequence (transfer.enums.phase). The task is started by the pipeline's
owning mode (transfer.binding) and stopped when that mode terminates.

Suspension points, all enumerable:
- clock.next_tick(): per-tick polled conditions (sibling exclusion,
  start gate, readiness, authority + complete gate, nested unload)
- asyncio.sleep(): start settle delay, inter-transfer throttle
- host operations: one bundle transfer, memory reclaim

Cancellation:
- stop() is synchronous: cleanup runs before it returns, and the task is
  cancelled so it executes no further pipeline logic.

Failure semantics:
- A failing bundle transfer is logged (TRANSFER_FAILED) and skipped.
- Exceptions from behavior hooks propagate and end the task; they are
  logged (PIPELINE_TASK_FAILED) and the pipeline stays in its phase
  until its owning mode is removed.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, ClassVar, Iterable

from constants import INTER_TRANSFER_MS, START_SETTLE_MS, ms_to_seconds
from observability.logger import log_event
from observability.metrics import start_timer, stop_timer, timed
from transfer import events
from transfer.behavior import PipelineBehavior
from transfer.binding import LoadingMode, UnloadingMode
from transfer.enums.direction import Direction
from transfer.enums.phase import EXCLUSIVE_PHASES, Phase
from transfer.enums.transfer_mode import LoadMode, UnloadMode
from transfer.phase_machine import PhaseMachine
from transfer.requests import LoadedBundles, RequestQueue, TransferMode, TransferRequest

if TYPE_CHECKING:
    from modes.mode import Mode
    from modes.stack import ModeStack
    from orchestrator.clock import TickClock
    from orchestrator.runtime_context import BundleHostProtocol
    from transfer.events import EventBus
    from transfer.readiness import ReadinessRegistry


class TransferPipeline:
    """
    Shared phase driver. Subclasses fill in the direction-specific steps.

    Guarantees:
    - Phases only move forward within one run; only stop() resets them
    - Requests are transferred in submission order, including requests
      submitted while the run is already transferring
    - At most one live task per pipeline
    """

    direction: ClassVar[Direction]

    def __init__(
        self,
        *,
        stack: ModeStack,
        clock: TickClock,
        readiness: ReadinessRegistry,
        loaded: LoadedBundles,
        events_bus: EventBus,
        host: BundleHostProtocol,
        behavior: PipelineBehavior | None = None,
        start_settle_ms: int = START_SETTLE_MS,
        inter_transfer_ms: int = INTER_TRANSFER_MS,
    ) -> None:
        self._stack = stack
        self._clock = clock
        self._readiness = readiness
        self._loaded = loaded
        self._events = events_bus
        self._host = host
        self._behavior: PipelineBehavior = behavior if behavior is not None else PipelineBehavior()
        self._start_settle_ms = start_settle_ms
        self._inter_transfer_ms = inter_transfer_ms

        self._machine = PhaseMachine()
        self._requests = RequestQueue()
        self._consumed: int = 0

        self._sibling: TransferPipeline | None = None
        self._owner: Mode | None = None
        self._mode: Mode | None = None
        self._task: asyncio.Task[None] | None = None
        self._timer_id: str | None = None

        self._holding: bool = False
        self._polling: bool = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._machine.phase

    @property
    def behavior(self) -> PipelineBehavior:
        return self._behavior

    @property
    def owner(self) -> Mode | None:
        """The mode whose lifecycle drives the current run."""
        return self._owner

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    @property
    def requests(self) -> tuple[TransferRequest, ...]:
        return self._requests.snapshot()

    @property
    def holding(self) -> bool:
        """True while this pipeline is parked on a nested sibling run."""
        return self._holding

    @property
    def is_idle(self) -> bool:
        """INACTIVE with nothing left to transfer."""
        return self.phase is Phase.INACTIVE and len(self._requests) == 0

    @property
    def is_transferring(self) -> bool:
        """True while this pipeline excludes its sibling from starting."""
        return self.phase in EXCLUSIVE_PHASES and not self._holding

    @property
    def is_settled(self) -> bool:
        """True unless the task can make progress without a new tick."""
        if self._task is None or self._task.done():
            return True
        return self._polling

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def attach_sibling(self, sibling: TransferPipeline) -> None:
        if sibling.direction is self.direction:
            raise ValueError("sibling pipeline must run the opposite direction")
        self._sibling = sibling

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def submit(self, request: TransferRequest) -> None:
        """
        Queue one request and make sure an owning mode exists.

        The first request creates and pushes the owning mode, which starts
        the run. Later requests join the existing run.

        Raises RuntimeError outside a running event loop; nothing is queued
        then.
        """
        asyncio.get_running_loop()
        self._requests.append(request)
        log_event({
            "event_type": "TRANSFER_REQUESTED",
            "level": "debug",
            "direction": self.direction.value,
            "bundle": request.bundle,
            "mode": request.mode.value,
            "queued": len(self._requests),
        })
        self._ensure_mode(deferred=False)

    async def until_inactive(self) -> None:
        """Wait, tick by tick, until this pipeline has nothing left to do."""
        while not self.is_idle:
            await self._clock.next_tick()

    # ------------------------------------------------------------------
    # Lifecycle (driven by the owning mode)
    # ------------------------------------------------------------------

    def start(self, owner: Mode) -> None:
        """
        Begin a run owned by `owner`.

        A run already in progress is cancelled and superseded; its queued
        requests carry over to the new run.
        """
        loop = asyncio.get_running_loop()

        if self.phase is not Phase.INACTIVE:
            log_event({
                "event_type": "PIPELINE_RESTARTED",
                "level": "warning",
                "direction": self.direction.value,
                "phase": self.phase.name,
                "queued": len(self._requests),
            })
            self._stop(keep_requests=True)

        self._owner = owner
        self._mode = owner
        self._consumed = 0
        self._timer_id = start_timer(f"{self.direction.value}_pipeline_run")
        self._advance()

        self._task = loop.create_task(
            self._run(),
            name=f"{self.direction.value}_pipeline",
        )
        self._task.add_done_callback(self._on_task_done)

    def stop(self) -> None:
        """
        Return to INACTIVE.

        Before COMPLETE this is a cancellation: the task is torn down, the
        behavior's cancel hook fires and queued requests are dropped. An
        owning mode still on the stack is removed.
        No-op when already INACTIVE.
        """
        mode = self._mode
        if not self._stop(keep_requests=False):
            return

        if mode is not None and mode.is_active:
            mode.remove()

    # ------------------------------------------------------------------
    # Driving loop
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        # Request -> Prepare
        self._behavior.setup(self._requests.snapshot())
        self._advance()

        await self._wait_until(self._may_start)

        # Start
        self._behavior.on_start()
        self._events.emit(events.started(self.direction))
        self._advance()
        await asyncio.sleep(ms_to_seconds(self._start_settle_ms))
        self._on_started()

        # Running
        self._advance()
        while self._consumed < len(self._requests):
            await self._transfer(self._requests[self._consumed], self._consumed)
            self._consumed += 1

        # FreeingMemory
        self._advance()
        with timed(f"{self.direction.value}_free_memory", direction=self.direction.value):
            await self._host.free_memory()

        # AwaitingReadiness
        self._advance()
        await self._wait_until(lambda: not self._readiness.any_busy())

        # Ready
        self._advance()
        self._behavior.on_ready()
        await self._wait_until(self._may_complete)

        # Complete
        self._advance()
        owner = self._owner
        if owner is not None and owner.is_active:
            owner.remove()
        if self.phase is Phase.COMPLETE:
            self.stop()

    async def _transfer(self, request: TransferRequest, index: int) -> None:
        if not self._accepts(request):
            return

        self._behavior.on_pre_transfer(request.bundle, request.mode)
        self._events.emit(events.pre_transfer(self.direction, request.bundle, request.mode))

        await self._before_transfer(request)

        try:
            operation = asyncio.ensure_future(self._begin(request.bundle, request.mode))
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._transfer_failed(request, exc)
            return

        self._behavior.on_transfer(operation, index, len(self._requests))

        try:
            await operation
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._transfer_failed(request, exc)
            return

        await asyncio.sleep(ms_to_seconds(self._inter_transfer_ms))

        self._record(request.bundle)
        log_event({
            "event_type": "BUNDLE_TRANSFERRED",
            "direction": self.direction.value,
            "bundle": request.bundle,
            "mode": request.mode.value,
            "index": index,
        })
        self._events.emit(events.post_transfer(self.direction, request.bundle, request.mode))

    def _transfer_failed(self, request: TransferRequest, exc: Exception) -> None:
        log_event({
            "event_type": "TRANSFER_FAILED",
            "level": "error",
            "direction": self.direction.value,
            "bundle": request.bundle,
            "mode": request.mode.value,
            "exception": type(exc).__name__,
            "message": str(exc),
        })

    async def _wait_until(self, condition: Callable[[], bool]) -> None:
        while not condition():
            self._polling = True
            try:
                await self._clock.next_tick()
            finally:
                self._polling = False

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _sibling_busy(self) -> bool:
        return self._sibling is not None and self._sibling.is_transferring

    def _may_start(self) -> bool:
        return not self._sibling_busy() and self._behavior.may_start()

    def _has_authority(self) -> bool:
        return self._owner is not None and self._owner.is_current

    def _may_complete(self) -> bool:
        return self._has_authority() and self._behavior.may_complete()

    # ------------------------------------------------------------------
    # Direction-specific steps
    # ------------------------------------------------------------------

    def _create_mode(self) -> Mode:
        raise NotImplementedError

    def _begin(self, bundle: str, mode: TransferMode) -> Awaitable[None]:
        raise NotImplementedError

    def _accepts(self, request: TransferRequest) -> bool:
        return True

    def _record(self, bundle: str) -> None:
        raise NotImplementedError

    def _on_started(self) -> None:
        """Runs once the settle delay has elapsed."""

    async def _before_transfer(self, request: TransferRequest) -> None:
        """Runs after the pre-transfer hooks, before the operation begins."""

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ensure_mode(self, *, deferred: bool) -> None:
        if self._mode is not None and self._mode.is_active:
            return

        self._mode = self._create_mode()
        if deferred:
            self._stack.push_deferred(self._mode)
        else:
            self._stack.push(self._mode)

    def _advance(self) -> None:
        previous = self.phase
        self._machine.send("advance")
        self._phase_changed(previous)

    def _phase_changed(self, previous: Phase) -> None:
        phase = self.phase
        log_event({
            "event_type": "PIPELINE_PHASE",
            "direction": self.direction.value,
            "phase": phase.name,
            "previous": previous.name,
        })
        self._behavior.on_phase(phase)
        self._events.emit(events.phase_changed(self.direction, phase, previous))

    def _stop(self, *, keep_requests: bool) -> bool:
        previous = self.phase
        if previous is Phase.INACTIVE:
            return False

        completed = previous is Phase.COMPLETE

        task, self._task = self._task, None
        if task is not None and not task.done() and not completed:
            task.cancel()

        if completed or keep_requests:
            self._requests.drop_first(self._consumed)

        if not completed:
            log_event({
                "event_type": "PIPELINE_CANCELLED",
                "level": "warning",
                "direction": self.direction.value,
                "phase": previous.name,
                "dropped": 0 if keep_requests else len(self._requests),
            })
            if not keep_requests:
                self._requests.clear()
            self._behavior.on_cancel()

        self._consumed = 0
        self._holding = False
        self._polling = False
        self._owner = None

        self._machine.send("halt")
        self._phase_changed(previous)
        self._events.emit(events.stopped(self.direction, completed=completed))
        self._behavior.on_stop()

        if self._timer_id is not None:
            stop_timer(
                self._timer_id,
                direction=self.direction.value,
                phase=previous.name,
                details={"completed": completed},
            )
            self._timer_id = None

        # Requests submitted after the transfer loop ended start a new run
        if completed and len(self._requests) > 0:
            self._ensure_mode(deferred=True)
        return True

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_event({
                "event_type": "PIPELINE_TASK_FAILED",
                "level": "error",
                "direction": self.direction.value,
                "phase": self.phase.name,
                "exception": type(exc).__name__,
                "message": str(exc),
            })


class UnloadPipeline(TransferPipeline):
    """
    Unloads bundles.

    While the load pipeline is parked on a nested unload it neither
    excludes this pipeline nor contests its mode authority.
    """

    direction = Direction.UNLOAD

    def request(self, bundle: str, mode: UnloadMode = UnloadMode.DEFAULT) -> None:
        self.submit(TransferRequest(bundle=bundle, mode=mode))

    def request_many(self, bundles: Iterable[str], mode: UnloadMode = UnloadMode.DEFAULT) -> None:
        for bundle in bundles:
            self.request(bundle, mode)

    def _create_mode(self) -> Mode:
        return UnloadingMode(self)

    def _begin(self, bundle: str, mode: TransferMode) -> Awaitable[None]:
        return self._host.unload(bundle, mode)

    def _accepts(self, request: TransferRequest) -> bool:
        if request.bundle in self._loaded:
            return True
        log_event({
            "event_type": "BUNDLE_NOT_LOADED",
            "level": "warning",
            "bundle": request.bundle,
        })
        return False

    def _record(self, bundle: str) -> None:
        self._loaded.discard(bundle)

    def _has_authority(self) -> bool:
        if self._sibling is not None and self._sibling.holding:
            return True
        return super()._has_authority()


class LoadPipeline(TransferPipeline):
    """
    Loads bundles.

    An EXCLUSIVE request first unloads every loaded non-core bundle
    through the unload pipeline and waits for that run to finish.
    """

    direction = Direction.LOAD

    def __init__(self, *, core_bundles: Iterable[str] = (), **kwargs) -> None:
        super().__init__(**kwargs)
        self._core_bundles: frozenset[str] = frozenset(core_bundles)

    @property
    def core_bundles(self) -> frozenset[str]:
        return self._core_bundles

    def request(self, bundle: str, mode: LoadMode = LoadMode.ADDITIVE) -> None:
        self.submit(TransferRequest(bundle=bundle, mode=mode))

    def _create_mode(self) -> Mode:
        return LoadingMode(self)

    def _begin(self, bundle: str, mode: TransferMode) -> Awaitable[None]:
        return self._host.load(bundle, mode)

    def _accepts(self, request: TransferRequest) -> bool:
        if request.bundle not in self._loaded:
            return True
        if request.mode is LoadMode.EXCLUSIVE and request.bundle not in self._core_bundles:
            return True
        log_event({
            "event_type": "BUNDLE_ALREADY_LOADED",
            "level": "warning",
            "bundle": request.bundle,
        })
        return False

    def _record(self, bundle: str) -> None:
        self._loaded.add(bundle)

    def _on_started(self) -> None:
        removed = self._stack.pop_non_persistent()
        if removed:
            log_event({
                "event_type": "MODES_RESET",
                "direction": self.direction.value,
                "removed": removed,
            })

    async def _before_transfer(self, request: TransferRequest) -> None:
        if request.mode is not LoadMode.EXCLUSIVE or self._sibling is None:
            return

        targets = [bundle for bundle in self._loaded if bundle not in self._core_bundles]
        if not targets:
            return

        unload = self._sibling
        for bundle in targets:
            unload.submit(TransferRequest(bundle=bundle, mode=UnloadMode.RELEASE_ALL))

        log_event({
            "event_type": "NESTED_UNLOAD",
            "direction": self.direction.value,
            "bundle": request.bundle,
            "unloading": targets,
        })

        self._holding = True
        await self._wait_until(lambda: unload.is_idle)
        self._holding = False
