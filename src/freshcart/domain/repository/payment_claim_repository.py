"""Abstract repository for payment idempotency claims.

A claim is a natural dedup key (e.g. ``capture:<charge id>``). Claiming
must be an atomic insert-if-absent so that a webhook and a client
confirmation racing on the same charge cannot both win.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class PaymentClaimRepository(ABC):

    @abstractmethod
    def claim(self, key: str, order_id: int) -> bool:
        """Record ``key``; return False if it was already recorded."""

    @abstractmethod
    def release(self, key: str) -> None:
        """Forget ``key`` so the operation it guarded can be retried."""
