"""Unit tests for the configurable fake payment gateway."""

import pytest

from freshcart.domain.gateway.payment_gateway import (
    ChargeStatus,
    PaymentGatewayError,
    PaymentGatewayTimeout,
)
from freshcart.infrastructure.payment.fake_gateway import FakeGateway


class TestFakeGateway:

    def test_charge_reports_default_status(self):
        gateway = FakeGateway()
        charge = gateway.create_charge(2400, "usd", {"order_id": "1"}, timeout=1.0)

        assert charge.client_secret.startswith(charge.charge_id)
        assert gateway.get_charge(charge.charge_id, timeout=1.0) is ChargeStatus.SUCCEEDED

    def test_unseen_charge_uses_default(self):
        gateway = FakeGateway(default_status=ChargeStatus.FAILED)
        assert gateway.get_charge("fake_ch_old", timeout=1.0) is ChargeStatus.FAILED

    def test_set_status(self):
        gateway = FakeGateway()
        gateway.set_status("fake_ch_1", ChargeStatus.PENDING)
        assert gateway.get_charge("fake_ch_1", timeout=1.0) is ChargeStatus.PENDING

    def test_declined_create(self):
        gateway = FakeGateway()
        gateway.configure(fail_create=True)
        with pytest.raises(PaymentGatewayError, match="declined"):
            gateway.create_charge(100, "usd", {}, timeout=1.0)

    def test_timeout_is_a_gateway_error(self):
        gateway = FakeGateway()
        gateway.configure(time_out={"get_charge"})
        with pytest.raises(PaymentGatewayTimeout):
            gateway.get_charge("fake_ch_1", timeout=1.0)
        assert gateway.calls[-1]["method"] == "get_charge"

    def test_refund_recorded(self):
        gateway = FakeGateway()
        refund_id = gateway.refund("fake_ch_1", 500, timeout=1.0)
        assert gateway.refunds == [
            {"refund_id": refund_id, "charge_id": "fake_ch_1", "amount_minor": 500}
        ]

    def test_configure_resets_failures(self):
        gateway = FakeGateway()
        gateway.configure(fail_refund=True)
        gateway.configure()
        assert gateway.refund("fake_ch_1", None, timeout=1.0).startswith("fake_re_")
