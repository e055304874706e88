"""
Transfer requests and the shared loaded-bundle set.

Rules:
- Requests are immutable value objects.
- A pipeline consumes its requests in FIFO order and clears them once
  its run is over.
- LoadedBundles is shared by both pipelines; it preserves load order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from transfer.enums.transfer_mode import LoadMode, UnloadMode

TransferMode = Union[LoadMode, UnloadMode]


@dataclass(frozen=True)
class TransferRequest:
    """One bundle to move, and how."""
    bundle: str
    mode: TransferMode


class RequestQueue:
    """
    Live FIFO list of requests for one pipeline.

    Requests appended while a run is iterating are picked up by that
    same run.
    """

    def __init__(self) -> None:
        self._requests: list[TransferRequest] = []

    def append(self, request: TransferRequest) -> None:
        self._requests.append(request)

    def __getitem__(self, index: int) -> TransferRequest:
        return self._requests[index]

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self) -> Iterator[TransferRequest]:
        return iter(list(self._requests))

    def snapshot(self) -> tuple[TransferRequest, ...]:
        return tuple(self._requests)

    def drop_first(self, count: int) -> None:
        """Forget the `count` oldest requests."""
        del self._requests[:count]

    def clear(self) -> None:
        self._requests.clear()


class LoadedBundles:
    """Ordered set of the bundles currently loaded."""

    def __init__(self, initial: tuple[str, ...] = ()) -> None:
        self._bundles: dict[str, None] = dict.fromkeys(initial)

    def add(self, bundle: str) -> None:
        self._bundles[bundle] = None

    def discard(self, bundle: str) -> None:
        self._bundles.pop(bundle, None)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._bundles)

    def __contains__(self, bundle: object) -> bool:
        return bundle in self._bundles

    def __len__(self) -> int:
        return len(self._bundles)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._bundles))
