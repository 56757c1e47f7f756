"""Abstract repository for atomic stock mutations.

Implementations must apply a whole batch as one unit against the
backing store: a conditional decrement per line inside a single
transaction (or under a lock for in-memory stores). A read followed by a
separate write is not an acceptable implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from freshcart.domain.model.stock import StockLine


class StockRepository(ABC):

    @abstractmethod
    def decrement(self, lines: list[StockLine]) -> tuple[list[StockLine], list[StockLine]]:
        """Decrement every line, all or nothing.

        Returns ``(applied, skipped)`` where ``skipped`` holds optional
        lines that could not be covered. Raises InsufficientStockError,
        with nothing applied, when a required line cannot be covered.
        """

    @abstractmethod
    def increment(self, lines: list[StockLine]) -> None:
        """Return stock for every line (compensating release)."""
