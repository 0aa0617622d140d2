import logging

from models import GuestDetails

logger = logging.getLogger(__name__)


class SessionStore:
    """Per-conversation carts and guest details, kept for the process lifetime.

    An empty cart is never stored: a session without a cart entry is a session
    with an empty cart. Entries are only dropped by clear().
    """

    def __init__(self):
        self._carts = {}
        self._details = {}

    def cart(self, session_id):
        """Return the session's cart lines, or a new unsaved list."""
        return self._carts.get(session_id, [])

    def save_cart(self, session_id, lines):
        if lines:
            self._carts[session_id] = lines
        else:
            self._carts.pop(session_id, None)

    def has_cart(self, session_id):
        return session_id in self._carts

    def details(self, session_id):
        """Return the session's guest details, creating them on first access."""
        if session_id not in self._details:
            self._details[session_id] = GuestDetails()
        return self._details[session_id]

    def peek_details(self, session_id):
        return self._details.get(session_id)

    def clear(self, session_id):
        had_cart = self._carts.pop(session_id, None) is not None
        had_details = self._details.pop(session_id, None) is not None
        logger.info(f"Cleared session {session_id} (cart: {had_cart}, details: {had_details})")

    def session_ids(self):
        return set(self._carts) | set(self._details)
