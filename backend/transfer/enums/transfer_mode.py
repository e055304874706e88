"""
Per-request transfer modes.

Rules:
- LoadMode applies to load requests, UnloadMode to unload requests.
- No behavior; pipelines decide what each mode implies.
"""

from __future__ import annotations

from enum import Enum


class LoadMode(str, Enum):
    """
    ADDITIVE:
        Load next to whatever is already loaded.

    EXCLUSIVE:
        Replace everything: unload every loaded non-core bundle first,
        then load.
    """

    ADDITIVE = "additive"
    EXCLUSIVE = "exclusive"


class UnloadMode(str, Enum):
    """
    DEFAULT:
        Unload the bundle's own content.

    RELEASE_ALL:
        Also release objects embedded in the bundle. Used by the nested
        unload of an exclusive load.
    """

    DEFAULT = "default"
    RELEASE_ALL = "release_all"
