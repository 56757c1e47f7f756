"""Payment gateway port (abstract interface).

Defines the contract the payment provider adapters must implement so the
reconciliation logic never depends on a concrete provider SDK. Every
call takes a ``timeout`` in seconds; adapters raise PaymentGatewayTimeout
when it elapses rather than blocking.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ChargeStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Charge:
    """Result of creating a charge."""

    charge_id: str
    client_secret: str
    status: ChargeStatus = ChargeStatus.PENDING


class PaymentGatewayError(Exception):
    """The provider rejected a request or could not be reached."""


class PaymentGatewayTimeout(PaymentGatewayError):
    """The provider did not answer within the configured timeout."""


class PaymentGateway(ABC):

    @abstractmethod
    def create_charge(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict[str, str],
        timeout: float,
    ) -> Charge:
        """Create a charge the client completes with ``client_secret``."""

    @abstractmethod
    def get_charge(self, charge_id: str, timeout: float) -> ChargeStatus:
        """Return the provider's current status for a charge."""

    @abstractmethod
    def refund(self, charge_id: str, amount_minor: int | None, timeout: float) -> str:
        """Refund a charge (fully when ``amount_minor`` is None); return the refund id."""
