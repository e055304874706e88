"""
Transfer direction enumeration.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    """Which way bundles move through a pipeline."""

    LOAD = "load"
    UNLOAD = "unload"

    @property
    def opposite(self) -> Direction:
        return Direction.UNLOAD if self is Direction.LOAD else Direction.LOAD
