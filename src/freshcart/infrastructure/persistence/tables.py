"""
SQLAlchemy table definitions.

Money is stored in minor units and weights in grams so every
conditional update compares exact integers.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class IngredientRow(Base):
    __tablename__ = "ingredients"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    price_minor = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_ingredient_stock"),)


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    price_minor = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    weight_g = Column(Integer, nullable=False)
    category = Column(String(50), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_product_stock"),)


class PlateRow(Base):
    __tablename__ = "plates"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    price_minor = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    admin_disabled = Column(Boolean, nullable=False, default=False)
    computed_available = Column(Boolean, nullable=False, default=True)

    edges = relationship(
        "PlateIngredientRow",
        cascade="all, delete-orphan",
        order_by="PlateIngredientRow.ingredient_id",
        lazy="selectin",
    )


class PlateIngredientRow(Base):
    __tablename__ = "plate_ingredients"

    plate_id = Column(
        String(64), ForeignKey("plates.id", ondelete="CASCADE"), primary_key=True
    )
    ingredient_id = Column(
        String(64), ForeignKey("ingredients.id"), primary_key=True, index=True
    )
    quantity = Column(Integer, nullable=False)
    required = Column(Boolean, nullable=False, default=True)

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_edge_quantity"),)


class SubscriptionRow(Base):
    __tablename__ = "subscriptions"

    subscriber_id = Column(String(64), primary_key=True)
    plan = Column(String(20), nullable=False)
    limit_g = Column(Integer, nullable=False)
    used_g = Column(Integer, nullable=False, default=0)
    renewal_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("used_g >= 0", name="ck_subscription_used_floor"),
        CheckConstraint("used_g <= limit_g", name="ck_subscription_used_limit"),
    )


class CartRow(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, unique=True)
    currency = Column(String(3), nullable=False, default="USD")

    lines = relationship(
        "CartLineRow",
        cascade="all, delete-orphan",
        order_by="CartLineRow.line_id",
        lazy="selectin",
    )


class CartLineRow(Base):
    __tablename__ = "cart_lines"

    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), primary_key=True)
    line_id = Column(Integer, primary_key=True)
    item = Column(Text, nullable=False)  # JSON, see item_to_raw
    quantity = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    unit_price_minor = Column(Integer, nullable=False)
    unit_weight_g = Column(Integer, nullable=False, default=0)


class OrderRow(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False)
    charge_id = Column(String(100), unique=True)
    refund_id = Column(String(100))
    total_minor = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    failure_reason = Column(Text)
    snapshot = Column(Text, nullable=False)  # JSON: lines, stock lines, history
    created_at = Column(DateTime(timezone=True), nullable=False)


class PaymentClaimRow(Base):
    __tablename__ = "payment_claims"

    key = Column(String(150), primary_key=True)
    order_id = Column(Integer, nullable=False)
    claimed_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("key", name="uq_payment_claim_key"),)
