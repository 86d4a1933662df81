"""
Optimistic updates: snapshot, apply, then commit or revert.

The local state changes before the server confirms it. If the remote call
fails the snapshot is restored and the failure is logged, never raised.
"""

import copy
import logging
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T")


class OptimisticUpdate(Generic[S]):
    """One optimistic change to `fields` of `state`."""

    def __init__(self, state: S, fields: Iterable[str], label: str = "update"):
        self.state = state
        self.fields = tuple(fields)
        self.label = label
        self._snapshot: Optional[Dict[str, Any]] = None
        self.result: Any = None
        self.error: Optional[BaseException] = None

    def snapshot(self) -> Dict[str, Any]:
        self._snapshot = {name: copy.deepcopy(getattr(self.state, name)) for name in self.fields}
        return self._snapshot

    def apply(self, mutate: Callable[[S], None]) -> "OptimisticUpdate[S]":
        """Snapshot (unless already taken) and mutate the local state."""
        if self._snapshot is None:
            self.snapshot()
        mutate(self.state)
        return self

    def revert(self) -> None:
        if self._snapshot is None:
            return
        for name, value in self._snapshot.items():
            setattr(self.state, name, value)

    async def commit_or_revert(self, remote: Callable[[], Awaitable[T]]) -> bool:
        """
        Await the remote call. True on success (result kept in `self.result`);
        on failure restore the snapshot and return False.
        """
        try:
            self.result = await remote()
        except Exception as e:
            self.error = e
            self.revert()
            logger.warning(f"Optimistic {self.label} failed, reverted local state: {e}")
            return False
        return True
