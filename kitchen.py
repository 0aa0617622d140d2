import itertools
import logging
import threading

import config
from models import KitchenTicket, TicketStatus

logger = logging.getLogger(__name__)


class Kitchen:
    """In-process stand-in for the kitchen.

    Tickets start as preparing and flip to ready after a fixed delay. Nothing
    survives a restart.
    """

    def __init__(self, ready_delay=config.KITCHEN_READY_DELAY_SECONDS, scheduler=threading.Timer):
        self.ready_delay = ready_delay
        self.scheduler = scheduler
        self._tickets = []
        # Pending timers by ticket key; order numbers are not unique
        self._timers = {}
        self._ticket_keys = itertools.count(1)
        self._lock = threading.Lock()

    def send_to_kitchen(self, order):
        """Queue order as preparing and schedule its ready transition.

        Returns the timer handle, which can be cancelled through cancel().
        """
        logger.info(f"Sending to kitchen: order {order.order_number}, total {order.total}")
        with self._lock:
            self._tickets.append(KitchenTicket(order=order))
            key = next(self._ticket_keys)
            timer = self.scheduler(self.ready_delay, self.mark_ready, args=(order.order_number, key))
            timer.daemon = True
            self._timers[key] = (order.order_number, timer)
        timer.start()
        return timer

    def mark_ready(self, order_number, key=None):
        with self._lock:
            self._timers.pop(key, None)
            for ticket in self._tickets:
                if ticket.order.order_number == order_number:
                    ticket.status = TicketStatus.READY
        logger.info(f"Order ready: {order_number}")

    def cancel(self, order_number):
        """Stop every pending ready transition for order_number.

        The tickets stay preparing. Returns False when nothing was pending.
        """
        with self._lock:
            keys = [key for key, (number, _) in self._timers.items() if number == order_number]
            timers = [self._timers.pop(key)[1] for key in keys]
        if not timers:
            return False
        for timer in timers:
            timer.cancel()
        logger.info(f"Cancelled ready transition for order {order_number}")
        return True

    def tickets(self):
        with self._lock:
            return list(self._tickets)

    def status_of(self, order_number):
        with self._lock:
            for ticket in self._tickets:
                if ticket.order.order_number == order_number:
                    return ticket.status
        return None
