"""Domain value objects."""

from .value_objects import BuyerContact, ExecutionID, Money, ShippingAddress, ShippingLine

__all__ = [
    "BuyerContact",
    "ExecutionID",
    "Money",
    "ShippingAddress",
    "ShippingLine",
]
