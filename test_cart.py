import unittest

from cart import CartEngine, EMPTY_CART_MESSAGE
from menu import round_money
from models import Modifier
from sessions import SessionStore

SESSION = "abc123"


class TestSessionStore(unittest.TestCase):
    def setUp(self):
        self.store = SessionStore()

    def test_empty_cart_is_not_stored(self):
        self.assertEqual(self.store.cart(SESSION), [])
        self.assertFalse(self.store.has_cart(SESSION))
        self.store.save_cart(SESSION, [])
        self.assertFalse(self.store.has_cart(SESSION))

    def test_details_created_on_access(self):
        self.assertIsNone(self.store.peek_details(SESSION))
        details = self.store.details(SESSION)
        details.name = "Sam"
        self.assertEqual(self.store.peek_details(SESSION).name, "Sam")

    def test_clear_drops_cart_and_details(self):
        CartEngine(self.store).add(SESSION, "mochi", 1)
        self.store.details(SESSION).table = "4"
        self.store.clear(SESSION)
        self.assertFalse(self.store.has_cart(SESSION))
        self.assertIsNone(self.store.peek_details(SESSION))
        self.assertEqual(self.store.session_ids(), set())

    def test_sessions_are_isolated(self):
        CartEngine(self.store).add(SESSION, "mochi", 1)
        self.assertFalse(self.store.has_cart("other"))


class TestCartEngine(unittest.TestCase):
    def setUp(self):
        self.store = SessionStore()
        self.cart = CartEngine(self.store)

    def test_repeated_adds_merge_into_one_line(self):
        self.cart.add(SESSION, "nigiri", 2)
        self.cart.add(SESSION, "nigiri", 3)
        lines = self.store.cart(SESSION)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].quantity, 5)

    def test_remove_whole_line_reports_accumulated_quantity(self):
        self.cart.add(SESSION, "nigiri", 2)
        self.cart.add(SESSION, "nigiri", 3)
        self.cart.add(SESSION, "mochi", 1)
        self.assertEqual(self.cart.remove(SESSION, "nigiri"), 5)
        self.assertEqual([line.item for line in self.store.cart(SESSION)], ["mochi"])

    def test_remove_at_least_current_quantity_deletes_line(self):
        self.cart.add(SESSION, "nigiri", 2)
        self.assertEqual(self.cart.remove(SESSION, "nigiri", 10), 2)
        self.assertFalse(self.store.has_cart(SESSION))

    def test_partial_remove_decrements(self):
        self.cart.add(SESSION, "nigiri", 5)
        self.assertEqual(self.cart.remove(SESSION, "nigiri", 2), 2)
        self.assertEqual(self.store.cart(SESSION)[0].quantity, 3)

    def test_remove_missing_item(self):
        self.assertEqual(self.cart.remove(SESSION, "nigiri"), 0)
        self.cart.add(SESSION, "mochi", 1)
        self.assertEqual(self.cart.remove(SESSION, "nigiri", 1), 0)

    def test_modifier_on_empty_cart(self):
        result = self.cart.apply_modifier(SESSION, None, "no", "wasabi")
        self.assertEqual(result, {"ok": False, "reason": "empty"})

    def test_modifier_on_item_not_in_cart(self):
        self.cart.add(SESSION, "mochi", 1)
        result = self.cart.apply_modifier(SESSION, "sashimi", "no", "wasabi")
        self.assertEqual(result, {"ok": False, "reason": "not_found"})
        self.assertEqual(self.store.cart(SESSION)[0].modifiers, [])

    def test_modifier_defaults_to_last_added_line(self):
        self.cart.add(SESSION, "sushi roll", 1)
        self.cart.add(SESSION, "sashimi", 1)
        # Incrementing an earlier line does not move it to the end
        self.cart.add(SESSION, "sushi roll", 1)
        result = self.cart.apply_modifier(SESSION, None, "no", "wasabi")
        self.assertEqual(result, {"ok": True, "item": "sashimi"})
        self.assertEqual(self.store.cart(SESSION)[1].modifiers, [Modifier("no", "wasabi")])

    def test_identical_modifiers_accumulate(self):
        self.cart.add(SESSION, "sushi roll", 1)
        self.cart.apply_modifier(SESSION, "sushi roll", "extra", "ginger")
        self.cart.apply_modifier(SESSION, "sushi roll", "extra", "ginger")
        self.assertEqual(
            self.cart.summary(SESSION),
            "1 x sushi roll (extra ginger, extra ginger) — €4.50",
        )

    def test_summary_and_total(self):
        self.cart.add(SESSION, "sushi roll", 2)
        self.cart.add(SESSION, "sashimi", 1)
        self.assertEqual(self.cart.summary(SESSION), "2 x sushi roll — €9.00, 1 x sashimi — €6.00")
        self.assertEqual(self.cart.total(SESSION), 15.00)

    def test_empty_summary_sentinel(self):
        self.assertEqual(self.cart.summary(SESSION), "Your cart is empty.")
        self.assertEqual(EMPTY_CART_MESSAGE, "Your cart is empty.")
        self.assertTrue(self.cart.is_empty(SESSION))
        self.assertEqual(self.cart.total(SESSION), 0)

    def test_lines_are_rounded_before_summing(self):
        prices = {"a": 0.005, "b": 0.005, "c": 0.005}
        cart = CartEngine(self.store, prices=prices)
        for item in prices:
            cart.add(SESSION, item, 1)

        naive = round_money(sum(price for price in prices.values()))
        self.assertEqual(cart.total(SESSION), 0.03)
        self.assertNotEqual(cart.total(SESSION), naive)

    def test_round_money_is_half_up(self):
        self.assertEqual(round_money(0.125), 0.13)
        self.assertEqual(round_money(2.675), 2.67)  # 2.675 is stored just below
        self.assertEqual(round_money(4.5 * 3), 13.5)


if __name__ == '__main__':
    unittest.main()
