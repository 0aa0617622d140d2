import copy
import logging
import random
import re
import threading
from dataclasses import replace
from enum import Enum

import config
from cart import CartEngine
from extractor import (
    extract_params, parse_food, parse_name, parse_pickup_time, parse_quantity, parse_table
)
from menu import (
    KNOWN_ITEMS, describe_food, format_money, is_menu_item, menu_listing, price_of
)
from models import Order

logger = logging.getLogger(__name__)

DEBUG = config.DEBUG

ERROR_MESSAGE = "Sorry, something went wrong on our side. Please try that again."
FALLBACK_MESSAGE = "Sorry, I didn't get that. You can order a dish or ask what's in your cart."

# Overrides the declared intent: upstream often files removals under Order.Food
REMOVE_PATTERN = re.compile(
    r"\b(?:remove|delete|take off|take out|take away|cancel|no more|minus|drop)\b"
)


class Intent(Enum):
    DESCRIBE_FOOD = "Describe.Food"
    ADD_FOOD = "Order.Food"
    REMOVE_FOOD = "Order.Remove"
    MODIFY_ORDER = "Order.Modify"
    SHOW_SUMMARY = "Order.Summary"
    CLEAR_ORDER = "Order.Clear"
    SET_NAME = "Guest.Name"
    SET_TABLE = "Guest.Table"
    SET_PICKUP_TIME = "Guest.PickupTime"
    CONFIRM_ORDER = "Order.Confirm"
    UNRECOGNIZED = None

    @classmethod
    def from_name(cls, name):
        try:
            return cls(name)
        except ValueError:
            return cls.UNRECOGNIZED


def resolve_intent(intent_name, text):
    intent = Intent.from_name(intent_name)
    if intent is Intent.REMOVE_FOOD or REMOVE_PATTERN.search(text.lower()):
        return Intent.REMOVE_FOOD
    return intent


# Function to derive the session id from the Dialogflow session path
def get_session_id(session_path):
    parts = str(session_path or "").split("/sessions/")
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return config.DEFAULT_SESSION_ID


def parse_event(event):
    """Pull (session_id, intent_name, text, params) out of a webhook request."""
    if not isinstance(event, dict):
        event = {}
    query_result = event.get("queryResult") or {}
    intent = query_result.get("intent") or {}
    params = query_result.get("parameters")
    if not isinstance(params, dict):
        params = {}
    return (
        get_session_id(event.get("session")),
        intent.get("displayName"),
        str(query_result.get("queryText") or ""),
        params,
    )


def build_response(text):
    return {"fulfillmentMessages": [{"text": {"text": [text]}}]}


def default_order_number():
    return random.randint(config.ORDER_NUMBER_MIN, config.ORDER_NUMBER_MAX)


class Dispatcher:
    """Routes webhook events to cart and session operations.

    handle_event() always returns a response envelope; it never raises.
    """

    def __init__(self, store, kitchen, prices=None, order_number_factory=default_order_number):
        self.store = store
        self.kitchen = kitchen
        self.cart = CartEngine(store, prices=prices)
        self.order_number_factory = order_number_factory
        self._lock = threading.Lock()

        # Mapping of intents to handler functions
        self.intent_handlers = {
            Intent.DESCRIBE_FOOD: self.describe_food,
            Intent.ADD_FOOD: self.add_food,
            Intent.REMOVE_FOOD: self.remove_food,
            Intent.MODIFY_ORDER: self.modify_order,
            Intent.SHOW_SUMMARY: self.show_summary,
            Intent.CLEAR_ORDER: self.clear_order,
            Intent.SET_NAME: self.set_name,
            Intent.SET_TABLE: self.set_table,
            Intent.SET_PICKUP_TIME: self.set_pickup_time,
            Intent.CONFIRM_ORDER: self.confirm_order,
            Intent.UNRECOGNIZED: self.fallback,
        }

    def handle_event(self, event):
        # Events are applied one at a time, in arrival order
        with self._lock:
            try:
                text = self.dispatch(event)
            except Exception:
                logger.exception("Unexpected error while handling webhook event.")
                text = ERROR_MESSAGE
        return build_response(text)

    def dispatch(self, event):
        session_id, intent_name, text, params = parse_event(event)
        intent = resolve_intent(intent_name, text)
        logger.info(f"Session {session_id}: intent '{intent_name}' handled as {intent.name}")
        if DEBUG:
            logger.debug(f"Session {session_id}: text={text!r} params={params}")
        handler = self.intent_handlers.get(intent, self.fallback)
        return handler(session_id, params, text)

    ## Helpers ##

    def cart_status(self, session_id):
        if self.cart.is_empty(session_id):
            return self.cart.summary(session_id)
        total = format_money(self.cart.total(session_id))
        return f"Your cart: {self.cart.summary(session_id)}. Total: {total}."

    ## Intent handlers ##

    def describe_food(self, session_id, params, text):
        food = parse_food(params, text)
        if not food:
            return f"Which dish would you like to know about? We have {', '.join(KNOWN_ITEMS)}."
        description = describe_food(food)
        if not description:
            return f"Sorry, {food} isn't on our menu. We have {', '.join(KNOWN_ITEMS)}."
        return f"{description} It's {format_money(price_of(food))}."

    def add_food(self, session_id, params, text):
        extracted = extract_params(params, text)
        if DEBUG:
            logger.debug(f"Session {session_id}: extracted {extracted}")

        if not extracted.food:
            if extracted.action and extracted.ingredient:
                # "no wasabi" filed as an order: treat it as a modifier
                return self.modify_order(session_id, params, text)
            return f"What would you like to order? Our menu: {menu_listing()}."
        if not is_menu_item(extracted.food):
            return f"Sorry, we don't have {extracted.food}. Our menu: {menu_listing()}."
        if extracted.quantity <= 0:
            return f"How many {extracted.food} would you like?"
        if (extracted.action and extracted.ingredient
                and parse_quantity(params, default=None) is None
                and self.cart.contains(session_id, extracted.food)):
            # "no wasabi on my sushi roll" changes the line already ordered
            return self.modify_order(session_id, params, text)

        self.cart.add(session_id, extracted.food, extracted.quantity)
        added = f"{extracted.quantity} x {extracted.food}"
        if extracted.action and extracted.ingredient:
            self.cart.apply_modifier(session_id, extracted.food, extracted.action, extracted.ingredient)
            added += f" ({extracted.action} {extracted.ingredient})"
        return f"Added {added}. {self.cart_status(session_id)}"

    def remove_food(self, session_id, params, text):
        extracted = extract_params(params, text, quantity_default=None)
        if DEBUG:
            logger.debug(f"Session {session_id}: extracted {extracted}")

        if not extracted.food:
            return f"Which item would you like to remove? {self.cart_status(session_id)}"
        if extracted.quantity is not None and extracted.quantity <= 0:
            return f"How many {extracted.food} should I remove?"

        removed = self.cart.remove(session_id, extracted.food, extracted.quantity)
        if not removed:
            return f"I couldn't find {extracted.food} in your cart. {self.cart_status(session_id)}"
        return f"Removed {removed} x {extracted.food}. {self.cart_status(session_id)}"

    def modify_order(self, session_id, params, text):
        extracted = extract_params(params, text)
        if DEBUG:
            logger.debug(f"Session {session_id}: extracted {extracted}")

        if not extracted.ingredient:
            return "Which ingredient would you like to change? For example, no wasabi or extra ginger."
        if not extracted.action:
            return f"Would you like no, extra or less {extracted.ingredient}?"

        result = self.cart.apply_modifier(
            session_id, extracted.food or None, extracted.action, extracted.ingredient
        )
        if not result["ok"]:
            if result["reason"] == "empty":
                return "Your cart is empty, so there's nothing to change yet. What would you like to order?"
            return f"I couldn't find {extracted.food} in your cart. {self.cart_status(session_id)}"
        return (
            f"Got it: {extracted.action} {extracted.ingredient} on the {result['item']}. "
            f"{self.cart_status(session_id)}"
        )

    def show_summary(self, session_id, params, text):
        return self.cart_status(session_id)

    def clear_order(self, session_id, params, text):
        self.store.clear(session_id)
        return "Your order has been cleared. What would you like to order?"

    def _next_step(self, session_id):
        if self.cart.is_empty(session_id):
            return "What would you like to order?"
        return "Say confirm when you're ready to place your order."

    def set_name(self, session_id, params, text):
        name = parse_name(params, text)
        if not name:
            return "What name should I put the order under?"
        self.store.details(session_id).name = name
        return f"Thanks, {name}! {self._next_step(session_id)}"

    def set_table(self, session_id, params, text):
        table = parse_table(params, text)
        if not table:
            return "What's your table number?"
        self.store.details(session_id).table = table
        return f"Great, table {table}. {self._next_step(session_id)}"

    def set_pickup_time(self, session_id, params, text):
        pickup_time = parse_pickup_time(params, text)
        if not pickup_time:
            return "What time would you like to pick up your order?"
        details = self.store.details(session_id)
        details.pickup_time = pickup_time
        if not details.name:
            return f"Pickup at {pickup_time}. What name should I put the order under?"
        return f"Pickup at {pickup_time}. {self._next_step(session_id)}"

    def confirm_order(self, session_id, params, text):
        if self.cart.is_empty(session_id):
            return "Your cart is empty. Add something before confirming your order."

        details = self.store.peek_details(session_id)
        if details is None or not (details.table or details.name):
            return (
                "Is this for dine-in or pickup? Tell me your table number, "
                "or a name for the pickup order."
            )

        total = self.cart.total(session_id)
        order = Order(
            order_number=self.order_number_factory(),
            items=copy.deepcopy(self.store.cart(session_id)),
            total=total,
            guest=replace(details),
        )
        self.kitchen.send_to_kitchen(order)
        self.store.clear(session_id)
        logger.info(f"Session {session_id}: confirmed order {order.order_number} ({format_money(total)})")

        if details.table:
            return (
                f"Order #{order.order_number} confirmed for table {details.table}. "
                f"Total: {format_money(total)}. The kitchen is preparing it now."
            )
        pickup = f" for pickup at {details.pickup_time}" if details.pickup_time else " for pickup"
        return (
            f"Thanks, {details.name}! Order #{order.order_number} confirmed{pickup}. "
            f"Total: {format_money(total)}."
        )

    def fallback(self, session_id, params, text):
        return FALLBACK_MESSAGE
