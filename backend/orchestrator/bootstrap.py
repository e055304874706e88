"""
Runtime wiring.

Builds every service once, links the two pipelines, and hands back a
Runtime. No module-level singletons: everything reachable from the
returned Runtime was created here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modes.stack import ModeStack
from modes.time_scale import TimeScale
from orchestrator.clock import TickClock
from orchestrator.runtime import Runtime
from orchestrator.runtime_context import RuntimeContext
from transfer.behavior import DefaultPipelineBehavior, PipelineBehavior
from transfer.enums.direction import Direction
from transfer.events import EventBus
from transfer.pipeline import LoadPipeline, UnloadPipeline
from transfer.readiness import ReadinessRegistry
from transfer.requests import LoadedBundles

if TYPE_CHECKING:
    from config import AppConfig
    from modes.mode import Mode
    from orchestrator.runtime_context import BundleHostProtocol


def build_context(
    config: AppConfig,
    host: BundleHostProtocol,
    *,
    load_behavior: PipelineBehavior | None = None,
    unload_behavior: PipelineBehavior | None = None,
    default_mode: Mode | None = None,
    loaded: tuple[str, ...] = (),
) -> RuntimeContext:
    """
    Create and link the services for one run.

    Args:
        config: Application configuration
        host: Performs the actual bundle transfers
        load_behavior / unload_behavior: Override the default behaviors
        default_mode: Override the stack's fallback mode
        loaded: Bundles already loaded before the runtime starts
    """
    time_scale = TimeScale()
    stack = ModeStack(default_mode=default_mode, time_scale=time_scale)
    clock = TickClock()
    readiness = ReadinessRegistry()
    loaded_bundles = LoadedBundles(loaded)
    bus = EventBus()

    if load_behavior is None:
        load_behavior = DefaultPipelineBehavior(
            time_scale,
            Direction.LOAD,
            pause_time=config.pause_time_on_transfer,
        )
    if unload_behavior is None:
        unload_behavior = DefaultPipelineBehavior(
            time_scale,
            Direction.UNLOAD,
            pause_time=config.pause_time_on_transfer,
        )

    shared = {
        "stack": stack,
        "clock": clock,
        "readiness": readiness,
        "loaded": loaded_bundles,
        "events_bus": bus,
        "host": host,
        "start_settle_ms": config.start_settle_ms,
        "inter_transfer_ms": config.inter_transfer_ms,
    }
    load = LoadPipeline(behavior=load_behavior, core_bundles=config.core_bundles, **shared)
    unload = UnloadPipeline(behavior=unload_behavior, **shared)
    load.attach_sibling(unload)
    unload.attach_sibling(load)

    return RuntimeContext(
        config=config,
        host=host,
        stack=stack,
        time_scale=time_scale,
        clock=clock,
        readiness=readiness,
        loaded=loaded_bundles,
        events=bus,
        load=load,
        unload=unload,
    )


def build_runtime(
    config: AppConfig,
    host: BundleHostProtocol,
    **kwargs,
) -> Runtime:
    """Build the context and wrap it in a Runtime. kwargs go to build_context()."""
    return Runtime(context=build_context(config, host, **kwargs))
