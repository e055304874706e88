"""
Folded override record shared by every stacked mode.

Rules:
- Reset to defaults once per refresh, then mutated by each stacked mode
  from lowest to highest priority (last writer wins).
- Subclass to add application-specific flags; reset() covers every field.
"""

from __future__ import annotations

from dataclasses import MISSING, asdict, dataclass, fields
from typing import Any, Callable


@dataclass
class OverrideRecord:
    """Mutable shared configuration implied by the current mode stack."""

    has_control: bool = True
    can_pause: bool = True
    is_paused: bool = False
    is_loading: bool = False
    is_unloading: bool = False
    is_quitting: bool = False

    def reset(self) -> OverrideRecord:
        """Restore every field to its declared default and return self."""
        for f in fields(self):
            if f.default is not MISSING:
                setattr(self, f.name, f.default)
            elif f.default_factory is not MISSING:
                setattr(self, f.name, f.default_factory())
        return self

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict copy for logging and comparisons."""
        return asdict(self)


OverrideListener = Callable[[OverrideRecord], None]
