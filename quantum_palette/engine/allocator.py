"""Logical qubit ids and their physical register positions.

Physical positions compact when a qubit is measured out, while logical ids
handed to callers stay stable. ``QubitAllocator`` owns the bounded pool of
logical ids; ``QubitIndexMap`` tracks where each id currently sits.
"""

from __future__ import annotations

import bisect
import logging
from .errors import AllocatorExhausted

logger = logging.getLogger(__name__)


class QubitAllocator:
    """Bounded pool of logical qubit ids.

    Released ids are handed out again before fresh ones, smallest first.
    """

    EXHAUSTED_MESSAGE = "Maximum number of qubits reached."

    def __init__(self, capacity: int = 4):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._next_fresh = 0
        self._released: list[int] = []
        self.last_error: str | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def used(self) -> int:
        return self._next_fresh - len(self._released)

    @property
    def available(self) -> int:
        return self._capacity - self.used

    def request(self) -> int | None:
        """Returns a logical id, or None (and sets ``last_error``) when full."""
        self.last_error = None
        if self._released:
            return self._released.pop(0)
        if self._next_fresh >= self._capacity:
            self.last_error = self.EXHAUSTED_MESSAGE
            logger.warning("Qubit pool exhausted (capacity %d)", self._capacity)
            return None
        qubit_id = self._next_fresh
        self._next_fresh += 1
        return qubit_id

    def request_or_raise(self) -> int:
        qubit_id = self.request()
        if qubit_id is None:
            raise AllocatorExhausted(self.EXHAUSTED_MESSAGE)
        return qubit_id

    def release(self, qubit_id: int):
        if not 0 <= qubit_id < self._next_fresh:
            raise ValueError(f"Logical id {qubit_id} was never allocated")
        if qubit_id in self._released:
            return
        bisect.insort(self._released, qubit_id)

    def clear_error(self):
        self.last_error = None


class QubitIndexMap:
    """Logical id -> physical register position."""

    def __init__(self):
        self._physical: dict[int, int] = {}

    def bind(self, logical_id: int, physical_index: int):
        if physical_index in self._physical.values():
            holder = self.logical(physical_index)
            if holder != logical_id:
                raise ValueError(
                    f"Physical index {physical_index} already bound to {holder}")
        self._physical[logical_id] = physical_index

    def physical(self, logical_id: int) -> int:
        if logical_id not in self._physical:
            raise KeyError(f"Logical id {logical_id} is not mapped")
        return self._physical[logical_id]

    def logical(self, physical_index: int) -> int | None:
        for logical_id, index in self._physical.items():
            if index == physical_index:
                return logical_id
        return None

    def on_removed(self, physical_index: int) -> int | None:
        """Forgets the qubit at ``physical_index`` and shifts higher ones down.

        Returns the logical id that was mapped there, if any.
        """
        removed = self.logical(physical_index)
        if removed is not None:
            del self._physical[removed]
        for logical_id, index in self._physical.items():
            if index > physical_index:
                self._physical[logical_id] = index - 1
        return removed

    def items(self) -> list[tuple[int, int]]:
        return sorted(self._physical.items())

    def __contains__(self, logical_id: int) -> bool:
        return logical_id in self._physical

    def __len__(self) -> int:
        return len(self._physical)
