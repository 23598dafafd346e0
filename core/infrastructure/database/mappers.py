"""Static mappers for domain entities ↔ database models."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from core.domain.entities import CartItem, Store, StoreOrder, Transaction
from core.domain.enums import StoreOrderStatus, TransactionStatus
from core.domain.value_objects import BuyerContact, Money, ShippingAddress, ShippingLine

from .models import CartItemModel, StoreModel, StoreOrderModel, TransactionModel


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; every stored timestamp is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class StoreMapper:
    """Static mapper for Store ↔ StoreModel transformation."""

    @staticmethod
    def to_domain(model: StoreModel) -> Store:
        return Store(
            domain=model.domain,
            display_name=model.store_name or "",
            storefront_token=model.access_token,
            admin_token=model.admin_api_token,
            created_at=as_utc(model.created_at),
        )

    @staticmethod
    def update_persistence(entity: Store, model: StoreModel) -> None:
        model.domain = entity.domain
        model.store_name = entity.display_name
        model.access_token = entity.storefront_token
        model.admin_api_token = entity.admin_token


class CartItemMapper:
    """Static mapper for CartItem ↔ CartItemModel transformation."""

    @staticmethod
    def to_domain(model: CartItemModel, currency: str) -> CartItem:
        return CartItem(
            store_id=model.store_id,
            product_ref=model.product_ref,
            variant_ref=model.variant_ref,
            quantity=model.quantity,
            unit_price=Money(amount=Decimal(str(model.unit_price)), currency=currency),
            title=model.title or "",
        )

    @staticmethod
    def to_persistence(entity: CartItem, position: int) -> CartItemModel:
        return CartItemModel(
            position=position,
            store_id=entity.store_id,
            product_ref=entity.product_ref,
            variant_ref=entity.variant_ref,
            title=entity.title,
            quantity=entity.quantity,
            unit_price=entity.unit_price.amount,
        )


class TransactionMapper:
    """Static mapper for Transaction ↔ TransactionModel with nested cart items."""

    @staticmethod
    def to_domain(model: TransactionModel) -> Transaction:
        """Convert ORM model to domain aggregate (with nested cart items).

        Args:
            model: TransactionModel instance with cart_items loaded

        Returns:
            Transaction domain aggregate
        """
        shipping_costs = {
            domain: ShippingLine.from_dict(line)
            for domain, line in (model.shipping_costs or {}).items()
            if line
        }
        return Transaction(
            id=model.id,
            status=TransactionStatus(model.status),
            total_amount=Decimal(str(model.total_amount)),
            currency=model.currency,
            buyer=BuyerContact(
                email=model.buyer_email,
                name=model.buyer_name or "",
                phone=model.buyer_phone,
            ),
            cart_items=[
                CartItemMapper.to_domain(item, model.currency) for item in model.cart_items
            ],
            payment_reference=model.mp_payment_id,
            payment_method=model.payment_method,
            shipping_address=ShippingAddress.from_dict(model.shipping_address),
            shipping_costs=shipping_costs,
            created_at=as_utc(model.created_at),
            paid_at=as_utc(model.paid_at),
            updated_at=as_utc(model.updated_at),
        )

    @staticmethod
    def to_persistence(entity: Transaction) -> TransactionModel:
        model = TransactionModel(
            status=entity.status.value,
            total_amount=entity.total_amount,
            currency=entity.currency,
            buyer_email=entity.buyer.email,
            buyer_name=entity.buyer.name,
            buyer_phone=entity.buyer.phone,
            shipping_address=entity.shipping_address.to_dict() if entity.shipping_address else None,
            shipping_costs={d: line.to_dict() for d, line in entity.shipping_costs.items()},
            mp_payment_id=entity.payment_reference,
            payment_method=entity.payment_method,
            paid_at=entity.paid_at,
            cart_items=[
                CartItemMapper.to_persistence(item, position)
                for position, item in enumerate(entity.cart_items)
            ],
        )
        if entity.id:
            model.id = entity.id
        if entity.created_at:
            model.created_at = entity.created_at
        return model

    @staticmethod
    def update_persistence(entity: Transaction, model: TransactionModel) -> None:
        """Copy mutable fields only; cart items are immutable after payment."""
        model.status = entity.status.value
        model.mp_payment_id = entity.payment_reference
        model.payment_method = entity.payment_method
        model.paid_at = entity.paid_at


class StoreOrderMapper:
    """Static mapper for StoreOrder ↔ StoreOrderModel transformation."""

    @staticmethod
    def to_domain(model: StoreOrderModel) -> StoreOrder:
        return StoreOrder(
            transaction_id=model.transaction_id,
            store_domain=model.store_domain,
            status=StoreOrderStatus(model.status),
            remote_order_id=model.shopify_order_id,
            remote_order_number=model.shopify_order_number,
            error_message=model.error_message,
            attempt_count=model.attempt_count or 0,
            order_amount=Decimal(str(model.order_amount or 0)),
            order_items=list(model.order_items or []),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            synced_at=as_utc(model.synced_at),
            version=model.version or 0,
        )

    @staticmethod
    def to_values(entity: StoreOrder) -> Dict[str, Any]:
        """Mutable columns of a ledger entry; `version` is managed by the repository."""
        values: Dict[str, Any] = {
            "status": entity.status.value,
            "shopify_order_id": entity.remote_order_id,
            "shopify_order_number": entity.remote_order_number,
            "error_message": entity.error_message,
            "attempt_count": entity.attempt_count,
            "order_amount": entity.order_amount,
            "order_items": entity.order_items,
            "synced_at": entity.synced_at,
        }
        if entity.updated_at:
            values["updated_at"] = entity.updated_at
        return values

    @staticmethod
    def to_persistence(entity: StoreOrder) -> StoreOrderModel:
        return StoreOrderModel(
            transaction_id=entity.transaction_id,
            store_domain=entity.store_domain,
            version=entity.version,
            **StoreOrderMapper.to_values(entity),
        )

    @staticmethod
    def update_persistence(entity: StoreOrder, model: StoreOrderModel) -> None:
        for column, value in StoreOrderMapper.to_values(entity).items():
            setattr(model, column, value)
