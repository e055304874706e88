"""
Modes that represent the transfer pipelines on the mode stack.

The mode's lifecycle drives its pipeline:
- on_init (pushed on the stack)   -> pipeline.start(mode)
- on_terminate (removed)          -> pipeline.stop()

Pipelines create these modes themselves when their first request
arrives (TransferPipeline.submit).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from constants import LOADING_MODE_PRIORITY, UNLOADING_MODE_PRIORITY
from modes.mode import Mode
from modes.override import OverrideRecord

if TYPE_CHECKING:
    from transfer.pipeline import LoadPipeline, TransferPipeline, UnloadPipeline


class PipelineMode(Mode):
    """Persistent mode bound to one pipeline."""

    persistent = True

    def __init__(self, pipeline: TransferPipeline) -> None:
        super().__init__()
        self._pipeline = pipeline

    @property
    def pipeline(self) -> TransferPipeline:
        return self._pipeline

    def on_init(self) -> None:
        self._pipeline.start(self)

    def on_terminate(self) -> None:
        # A restarted pipeline belongs to its newer owner
        if self._pipeline.owner is self:
            self._pipeline.stop()


class LoadingMode(PipelineMode):
    priority = LOADING_MODE_PRIORITY

    def __init__(self, pipeline: LoadPipeline) -> None:
        super().__init__(pipeline)

    def contribute(self, record: OverrideRecord) -> None:
        record.is_loading = True


class UnloadingMode(PipelineMode):
    priority = UNLOADING_MODE_PRIORITY

    def __init__(self, pipeline: UnloadPipeline) -> None:
        super().__init__(pipeline)

    def contribute(self, record: OverrideRecord) -> None:
        record.is_unloading = True
