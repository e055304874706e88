"""
Runtime context.

Explicit service objects shared by the runtime driver and the pipelines,
constructed once by bootstrap and torn down at shutdown.

This module contains:
- Narrow Protocols for host capabilities (not implementations)
- The RuntimeContext container
- Zero orchestration logic
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from config import AppConfig
    from modes.stack import ModeStack
    from modes.time_scale import TimeScale
    from orchestrator.clock import TickClock
    from transfer.enums.transfer_mode import LoadMode, UnloadMode
    from transfer.events import EventBus
    from transfer.pipeline import LoadPipeline, UnloadPipeline
    from transfer.readiness import ReadinessRegistry
    from transfer.requests import LoadedBundles


# ---------------------------------------------------------------------
# Host Protocols
# ---------------------------------------------------------------------

@runtime_checkable
class BundleHostProtocol(Protocol):
    """
    Application side of a bundle transfer.

    Contract:
    - load() / unload() return an awaitable that completes once the bundle
      has moved; raising marks that one transfer as failed
    - free_memory() reclaims whatever the host can release after a run
    - The host never calls back into the pipelines
    """

    def load(self, bundle: str, mode: LoadMode) -> Awaitable[None]: ...

    def unload(self, bundle: str, mode: UnloadMode) -> Awaitable[None]: ...

    async def free_memory(self) -> None: ...


# ---------------------------------------------------------------------
# Runtime Context
# ---------------------------------------------------------------------

@dataclass
class RuntimeContext:
    """
    Live services for one application run.

    Runtime is allowed to:
    - Tick the stack and the clock
    - Forward requests to the pipelines

    Runtime is NOT allowed to:
    - Mutate phases directly
    - Push pipeline modes itself
    """

    config: AppConfig
    host: BundleHostProtocol
    stack: ModeStack
    time_scale: TimeScale
    clock: TickClock
    readiness: ReadinessRegistry
    loaded: LoadedBundles
    events: EventBus
    load: LoadPipeline
    unload: UnloadPipeline

    def pipelines(self) -> tuple[LoadPipeline, UnloadPipeline]:
        return (self.load, self.unload)
