"""Configurable fake payment gateway for development and testing.

Simulates the provider without any external calls. Charges are kept in
memory; a charge the fake has never seen (for example one created by an
earlier CLI process) reports ``default_status``. Behaviour can be
reconfigured at runtime to decline, hang (time out) or reject refunds.
"""

from __future__ import annotations

import threading
from uuid import uuid4

from freshcart.domain.gateway.payment_gateway import (
    Charge,
    ChargeStatus,
    PaymentGateway,
    PaymentGatewayError,
    PaymentGatewayTimeout,
)


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, default_status: ChargeStatus = ChargeStatus.SUCCEEDED) -> None:
        self.default_status = default_status
        self.fail_create = False
        self.fail_refund = False
        self.time_out: set[str] = set()
        self.charges: dict[str, ChargeStatus] = {}
        self.refunds: list[dict] = []
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def configure(
        self,
        default_status: ChargeStatus | None = None,
        fail_create: bool = False,
        fail_refund: bool = False,
        time_out: set[str] | None = None,
    ) -> None:
        """Configure gateway behaviour; ``time_out`` names methods that hang."""
        if default_status is not None:
            self.default_status = default_status
        self.fail_create = fail_create
        self.fail_refund = fail_refund
        self.time_out = set(time_out or ())

    def set_status(self, charge_id: str, status: ChargeStatus) -> None:
        with self._lock:
            self.charges[charge_id] = status

    # --- PaymentGateway interface ---------------------------------------------

    def create_charge(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict[str, str],
        timeout: float,
    ) -> Charge:
        self._record("create_charge", amount_minor=amount_minor, currency=currency, metadata=metadata)
        if self.fail_create:
            raise PaymentGatewayError("Card declined")

        charge_id = f"fake_ch_{uuid4().hex[:12]}"
        with self._lock:
            self.charges[charge_id] = self.default_status
        return Charge(charge_id=charge_id, client_secret=f"{charge_id}_secret_{uuid4().hex[:8]}")

    def get_charge(self, charge_id: str, timeout: float) -> ChargeStatus:
        self._record("get_charge", charge_id=charge_id)
        with self._lock:
            return self.charges.get(charge_id, self.default_status)

    def refund(self, charge_id: str, amount_minor: int | None, timeout: float) -> str:
        self._record("refund", charge_id=charge_id, amount_minor=amount_minor)
        if self.fail_refund:
            raise PaymentGatewayError(f"Refund rejected for {charge_id}")

        refund_id = f"fake_re_{uuid4().hex[:12]}"
        with self._lock:
            self.refunds.append(
                {"refund_id": refund_id, "charge_id": charge_id, "amount_minor": amount_minor}
            )
        return refund_id

    # --- Internal helpers -----------------------------------------------------

    def _record(self, method: str, **kwargs) -> None:
        with self._lock:
            self.calls.append({"method": method, **kwargs})
        if method in self.time_out:
            raise PaymentGatewayTimeout(f"{method} timed out")
