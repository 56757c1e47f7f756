"""SQL implementation of PaymentClaimRepository.

The primary key on ``key`` makes the insert the atomic claim: a second
insert of the same key fails with IntegrityError and loses.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from freshcart.domain.repository.payment_claim_repository import PaymentClaimRepository
from freshcart.infrastructure.persistence.database import Database
from freshcart.infrastructure.persistence.tables import PaymentClaimRow


class SqlPaymentClaimRepository(PaymentClaimRepository):

    def __init__(self, db: Database) -> None:
        self._db = db

    def claim(self, key: str, order_id: int) -> bool:
        try:
            with self._db.transaction() as session:
                session.add(
                    PaymentClaimRow(
                        key=key, order_id=order_id, claimed_at=datetime.now(timezone.utc)
                    )
                )
        except IntegrityError:
            return False
        return True

    def release(self, key: str) -> None:
        with self._db.transaction() as session:
            session.execute(delete(PaymentClaimRow).where(PaymentClaimRow.key == key))
