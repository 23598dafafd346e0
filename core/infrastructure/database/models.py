"""
SQLAlchemy ORM Models.

Maps domain entities to database tables.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, DateTime, Integer, Numeric,
    Text, Index, ForeignKey, UniqueConstraint, JSON
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# STORE MODEL
# =============================================================================

class StoreModel(Base):
    """
    Store database model.

    Holds the credentials used to read products and create orders.
    """

    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    domain = Column(String(255), unique=True, nullable=False, index=True)
    store_name = Column(String(255), nullable=True)

    # Credentials
    access_token = Column(String(255), nullable=True)     # Storefront API
    admin_api_token = Column(String(255), nullable=True)  # Admin API

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return f"<StoreModel(domain={self.domain}, admin={'yes' if self.admin_api_token else 'no'})>"


# =============================================================================
# TRANSACTION MODEL
# =============================================================================

class TransactionModel(Base):
    """
    Transaction database model.

    One buyer payment; owns its cart items.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    status = Column(String(50), nullable=False, default="pending", index=True)
    total_amount = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="CLP")

    # Buyer
    buyer_email = Column(String(255), nullable=False)
    buyer_name = Column(String(255), nullable=False, default="")
    buyer_phone = Column(String(50), nullable=True)

    # Shipping
    shipping_address = Column(JSON, nullable=True)
    shipping_costs = Column(JSON, nullable=True)

    # Payment
    mp_payment_id = Column(String(255), nullable=True, index=True)
    payment_method = Column(String(100), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    cart_items = relationship(
        "CartItemModel",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="CartItemModel.position",
    )

    __table_args__ = (
        Index('ix_transactions_status_created', 'status', 'created_at'),
    )

    def __repr__(self):
        return f"<TransactionModel(id={self.id}, status={self.status}, total={self.total_amount})>"


# =============================================================================
# CART ITEM MODEL
# =============================================================================

class CartItemModel(Base):
    """Cart line of a transaction, tagged with its store."""

    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    store_id = Column(String(255), nullable=False, index=True)
    product_ref = Column(String(255), nullable=False)
    variant_ref = Column(String(255), nullable=True)
    title = Column(String(500), nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(15, 2), nullable=False)

    transaction = relationship("TransactionModel", back_populates="cart_items")

    def __repr__(self):
        return f"<CartItemModel(store={self.store_id}, product={self.product_ref}, qty={self.quantity})>"


# =============================================================================
# STORE ORDER MODEL (Ledger)
# =============================================================================

class StoreOrderModel(Base):
    """
    Per-store order ledger.

    One row per (transaction, store); references both by identifier only.
    """

    __tablename__ = "store_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)

    transaction_id = Column(Integer, nullable=False, index=True)
    store_domain = Column(String(255), nullable=False, index=True)

    status = Column(String(50), nullable=False, default="pending", index=True)
    shopify_order_id = Column(String(255), nullable=True)
    shopify_order_number = Column(String(100), nullable=True)
    error_message = Column(Text, nullable=True)
    attempt_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=0)  # optimistic lock for claims

    order_amount = Column(Numeric(15, 2), nullable=False, default=0)
    order_items = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
    synced_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('transaction_id', 'store_domain', name='uq_store_orders_transaction_store'),
        Index('ix_store_orders_status_updated', 'status', 'updated_at'),
    )

    def __repr__(self):
        return (
            f"<StoreOrderModel(transaction={self.transaction_id}, store={self.store_domain}, "
            f"status={self.status})>"
        )
