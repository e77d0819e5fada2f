"""Remote state store contract and an in-memory implementation of it.

A store is attached by handing it to ``SaveManager(mirror=...)``; the console
wires an :class:`InMemoryRemoteStore` in when started with ``--mirror``.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping, Optional, Protocol


class RemoteStoreError(Exception):
    """Raised when the remote store cannot be read or updated."""


class RemoteStateStore(Protocol):
    def fetch_state(self) -> Dict[str, Any]:
        ...

    def merge_state(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        ...


class InMemoryRemoteStore:
    """Keeps the mirrored state in a dict. Merges are shallow, like a PATCH."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._state: Dict[str, Any] = copy.deepcopy(dict(initial or {}))
        self.merge_count = 0

    def fetch_state(self) -> Dict[str, Any]:
        return copy.deepcopy(self._state)

    def merge_state(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(fields, Mapping):
            raise RemoteStoreError("State update must be an object.")
        self._state.update(copy.deepcopy(dict(fields)))
        self.merge_count += 1
        return self.fetch_state()
