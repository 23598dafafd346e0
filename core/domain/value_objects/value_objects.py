"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary value with currency.

    CRITICAL: Always use Decimal, never float!
    """
    amount: Decimal
    currency: str = "CLP"

    def __post_init__(self):
        # Convert to Decimal if needed
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        # Validate currency code (3 letters)
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __add__(self, other: 'Money') -> 'Money':
        """Add two Money objects (must have same currency)."""
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add different currencies: {self.currency} vs {other.currency}"
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __mul__(self, quantity: int) -> 'Money':
        return Money(amount=self.amount * quantity, currency=self.currency)

    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == 0


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier of one orchestration run, used for log tracing."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)


@dataclass(frozen=True)
class BuyerContact:
    """Who receives the orders: email, full name and phone."""

    email: str
    name: str = ""
    phone: Optional[str] = None

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""

    @property
    def last_name(self) -> str:
        # Stores require a last name; single-word names are repeated.
        parts = self.name.split()
        return " ".join(parts[1:]) or self.first_name

    def to_dict(self) -> Dict[str, Any]:
        return {"email": self.email, "name": self.name, "phone": self.phone}


@dataclass(frozen=True)
class ShippingAddress:
    """Delivery address shared by every store order of a transaction."""

    street: str
    city: str
    region: str = ""
    zip_code: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ShippingAddress"]:
        if not data:
            return None
        return cls(
            street=data.get("street", ""),
            city=data.get("city", ""),
            region=data.get("region", ""),
            zip_code=data.get("zip_code", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "street": self.street,
            "city": self.city,
            "region": self.region,
            "zip_code": self.zip_code,
        }


@dataclass(frozen=True)
class ShippingLine:
    """Shipping method the buyer selected for one store."""

    title: str
    price: Decimal
    code: str = ""

    def __post_init__(self):
        if not isinstance(self.price, Decimal):
            object.__setattr__(self, 'price', Decimal(str(self.price)))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ShippingLine"]:
        if not data:
            return None
        return cls(title=data.get("title", ""), price=data.get("price", 0), code=data.get("code", ""))

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "price": str(self.price), "code": self.code}
