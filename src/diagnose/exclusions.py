"""Calls that must never be treated as the binding site of a variable."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from locate.call_site import CallRef

if TYPE_CHECKING:
    from collections.abc import Iterator

    from locate.call_site import CallSite


class ExclusionSet:
    """Thread-safe set of call positions registered by tracking helpers.

    Entries are never removed, so a long-lived resolver keeps one entry per
    distinct tracking call it has seen. That stays bounded by the number of
    such calls in the source, since positions repeat on every run of a test.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._refs: set[CallRef] = set()

    def add(self, call: CallSite | CallRef) -> None:
        ref = call if isinstance(call, CallRef) else call.ref
        with self._lock:
            self._refs.add(ref)

    def snapshot(self) -> frozenset[CallRef]:
        with self._lock:
            return frozenset(self._refs)

    def __contains__(self, ref: object) -> bool:
        with self._lock:
            return ref in self._refs

    def __iter__(self) -> Iterator[CallRef]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._refs)


__all__ = ["ExclusionSet"]
