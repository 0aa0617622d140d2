import logging

from menu import PRICES, format_money, round_money
from models import CartLine, Modifier

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Your cart is empty."


class CartEngine:
    """Cart operations for one SessionStore, each scoped to a session id."""

    def __init__(self, store, prices=None):
        self.store = store
        self.prices = prices or PRICES

    def _find(self, lines, item):
        for index, line in enumerate(lines):
            if line.item == item:
                return index
        return -1

    def add(self, session_id, item, quantity):
        """Add quantity of a catalog item, merging into its existing line."""
        lines = self.store.cart(session_id)
        index = self._find(lines, item)
        if index == -1:
            lines.append(CartLine(item=item, quantity=quantity))
        else:
            lines[index].quantity += quantity
        self.store.save_cart(session_id, lines)
        logger.debug(f"Session {session_id}: added {quantity} x {item}")

    def remove(self, session_id, item, quantity=None):
        """Remove quantity of item, or the whole line when quantity is None.

        Returns how many were removed; 0 means the item was not in the cart.
        """
        lines = self.store.cart(session_id)
        index = self._find(lines, item)
        if index == -1:
            return 0

        line = lines[index]
        if quantity is None or quantity >= line.quantity:
            del lines[index]
            self.store.save_cart(session_id, lines)
            return line.quantity

        line.quantity -= quantity
        self.store.save_cart(session_id, lines)
        return quantity

    def apply_modifier(self, session_id, item, action, ingredient):
        """Append a modifier to item's line, or to the last added line.

        Returns a dict with ok=True and the targeted item, or ok=False with
        reason "empty" or "not_found".
        """
        lines = self.store.cart(session_id)
        if not lines:
            return {"ok": False, "reason": "empty"}

        if item:
            index = self._find(lines, item)
            if index == -1:
                return {"ok": False, "reason": "not_found"}
            line = lines[index]
        else:
            line = lines[-1]

        line.modifiers.append(Modifier(action=action, ingredient=ingredient))
        self.store.save_cart(session_id, lines)
        return {"ok": True, "item": line.item}

    def line_price(self, item, quantity):
        return round_money(self.prices[item] * quantity)

    def total(self, session_id):
        # Each line is rounded before summing
        return round_money(sum(
            self.line_price(line.item, line.quantity)
            for line in self.store.cart(session_id)
        ))

    def format_line(self, line):
        text = f"{line.quantity} x {line.item}"
        if line.modifiers:
            text += f" ({', '.join(str(mod) for mod in line.modifiers)})"
        return f"{text} — {format_money(self.line_price(line.item, line.quantity))}"

    def summary(self, session_id):
        lines = self.store.cart(session_id)
        if not lines:
            return EMPTY_CART_MESSAGE
        return ", ".join(self.format_line(line) for line in lines)

    def is_empty(self, session_id):
        return self.summary(session_id) == EMPTY_CART_MESSAGE

    def contains(self, session_id, item):
        return self._find(self.store.cart(session_id), item) != -1
