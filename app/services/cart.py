"""In-memory shopping cart and its pricing rules.

A :class:`Cart` holds the lines a customer has picked during one ordering
session at one restaurant. Nothing here touches the database: the HTTP layer
resolves menu items and modifiers, hands them to the cart, and the checkout
service reads the totals back when the order is placed.

Pricing rules:

* ``line_total = (unit_price + size.price + sum(extra.price)) * quantity``
* ``total_price`` is the sum of line totals
* ``total_items`` is the sum of quantities
"""
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value if value is not None else 0))


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Modifier:
    """A size or extra option: a name plus a price delta."""

    name: str
    price: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: dict) -> "Modifier":
        return cls(name=data["name"], price=to_money(data.get("price", 0)))

    def to_dict(self) -> dict:
        return {"name": self.name, "price": float(self.price)}


@dataclass
class CartLine:
    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1
    size: Optional[Modifier] = None
    extras: List[Modifier] = field(default_factory=list)
    image_url: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def unit_total(self) -> Decimal:
        total = self.unit_price
        if self.size is not None:
            total += self.size.price
        for extra in self.extras:
            total += extra.price
        return total

    @property
    def line_total(self) -> Decimal:
        return self.unit_total * self.quantity

    def options(self) -> dict:
        return {
            "size": self.size.to_dict() if self.size else None,
            "extras": [e.to_dict() for e in self.extras],
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "image_url": self.image_url,
            "unit_price": float(self.unit_price),
            "quantity": self.quantity,
            "selected_options": self.options(),
            "line_total": float(quantize(self.line_total)),
        }


class Cart:
    """Ordered collection of cart lines for one restaurant."""

    def __init__(self, restaurant_id: Optional[int] = None):
        self.restaurant_id = restaurant_id
        self._lines: List[CartLine] = []

    def __iter__(self):
        return iter(list(self._lines))

    def __len__(self):
        return len(self._lines)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def snapshot(self) -> List[CartLine]:
        """Copies of the current lines; later edits to the cart do not reach them."""
        return [replace(line, extras=list(line.extras)) for line in self._lines]

    def get(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.id == line_id), None)

    def add_line(
        self,
        menu_item_id: int,
        name: str,
        unit_price,
        quantity: int = 1,
        size: Optional[Modifier] = None,
        extras: Iterable[Modifier] = (),
        image_url: Optional[str] = None,
    ) -> Optional[CartLine]:
        """Append a new line; identical selections are never merged.

        A non-positive quantity adds nothing and returns ``None``.
        """
        quantity = int(quantity if quantity is not None else 1)
        if quantity <= 0:
            return None
        line = CartLine(
            menu_item_id=menu_item_id,
            name=name,
            unit_price=to_money(unit_price),
            quantity=quantity,
            size=size,
            extras=list(extras),
            image_url=image_url,
        )
        self._lines.append(line)
        return line

    def remove_line(self, line_id: str) -> None:
        self._lines = [line for line in self._lines if line.id != line_id]

    def remove_lines(self, line_ids: Iterable[str]) -> None:
        ids = set(line_ids)
        self._lines = [line for line in self._lines if line.id not in ids]

    def set_quantity(self, line_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_line(line_id)
            return
        line = self.get(line_id)
        if line is not None:
            line.quantity = int(quantity)

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    def clear(self) -> None:
        self._lines = []

    def to_dict(self) -> dict:
        return {
            "restaurant_id": self.restaurant_id,
            "lines": [line.to_dict() for line in self._lines],
            "total_items": self.total_items,
            "total_price": float(quantize(self.total_price)),
        }


class CartStore:
    """Process-local carts keyed by an opaque cart session token.

    Carts live only in memory and vanish on restart; idle carts are
    dropped after ``idle_minutes`` without access.
    """

    def __init__(self, idle_minutes: int = 120):
        self.idle = timedelta(minutes=idle_minutes)
        self._carts: Dict[str, Cart] = {}
        self._seen: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def _purge(self, now: datetime) -> None:
        expired = [token for token, seen in self._seen.items() if now - seen > self.idle]
        for token in expired:
            self._carts.pop(token, None)
            self._seen.pop(token, None)

    def open(self, token: Optional[str], restaurant_id: int):
        """Return ``(token, cart)``; starts a fresh cart when the token is
        unknown, expired or bound to another restaurant."""
        now = datetime.utcnow()
        with self._lock:
            self._purge(now)
            cart = self._carts.get(token) if token else None
            if cart is None or cart.restaurant_id != restaurant_id:
                token = uuid.uuid4().hex
                cart = Cart(restaurant_id)
                self._carts[token] = cart
            self._seen[token] = now
            return token, cart

    def peek(self, token: Optional[str]) -> Optional[Cart]:
        with self._lock:
            return self._carts.get(token) if token else None

    def discard(self, token: str) -> None:
        with self._lock:
            self._carts.pop(token, None)
            self._seen.pop(token, None)

    def __len__(self):
        with self._lock:
            return len(self._carts)
