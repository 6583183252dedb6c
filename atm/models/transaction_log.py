"""Bounded per-account transaction history."""

from collections import deque
from typing import Iterable, Iterator

from .transaction import Transaction


class TransactionLog:
    """
    Fixed-capacity FIFO of transactions, oldest first.

    Appending to a full log drops exactly the oldest entry.
    """

    def __init__(self, capacity: int = 10, entries: Iterable[Transaction] = ()):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._entries: deque[Transaction] = deque(entries, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def append(self, txn: Transaction) -> None:
        self._entries.append(txn)

    def to_list(self) -> list[Transaction]:
        """Return a copy of the entries, oldest first."""
        return list(self._entries)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransactionLog):
            return NotImplemented
        return self.capacity == other.capacity and list(self) == list(other)

    def __repr__(self) -> str:
        return f"TransactionLog(capacity={self.capacity}, entries={self.to_list()!r})"
