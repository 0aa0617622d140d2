"""Session and order records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ModifierAction(str, Enum):
    NO = "no"
    EXTRA = "extra"
    LESS = "less"


@dataclass
class Modifier:
    """One ingredient change on a cart line, e.g. no wasabi."""

    action: str
    ingredient: str

    def __str__(self):
        return f"{self.action} {self.ingredient}"


@dataclass
class CartLine:
    """A menu item's aggregated quantity and modifier history."""

    item: str
    quantity: float
    modifiers: List[Modifier] = field(default_factory=list)


@dataclass
class GuestDetails:
    name: Optional[str] = None
    table: Optional[str] = None
    pickup_time: Optional[str] = None


@dataclass
class ExtractedParams:
    """Normalized parameters for one webhook event."""

    quantity: Optional[float] = 1
    food: str = ""
    action: Optional[str] = None
    ingredient: Optional[str] = None


@dataclass
class Order:
    """A confirmed order handed to the kitchen. Never stored per session."""

    order_number: int
    items: List[CartLine]
    total: float
    guest: GuestDetails = field(default_factory=GuestDetails)


class TicketStatus(str, Enum):
    PREPARING = "preparing"
    READY = "ready"


@dataclass
class KitchenTicket:
    order: Order
    status: TicketStatus = TicketStatus.PREPARING

    def to_dict(self):
        return {
            "order_number": self.order.order_number,
            "status": self.status.value,
            "total": self.order.total,
            "items": [
                {
                    "item": line.item,
                    "quantity": line.quantity,
                    "modifiers": [str(mod) for mod in line.modifiers],
                }
                for line in self.order.items
            ],
        }
