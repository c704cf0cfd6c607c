#!/usr/bin/env python3
"""
Order pricing and identifier allocation.

TEST COVERAGE:
    - subtotal / shipping / total arithmetic
    - free shipping threshold boundary
    - #NNNN id formatting and sequential allocation
"""

import re
import unittest

from floresboxes.schemas.order_models import LineItem, OrderCreate
from floresboxes.services.orders import compute_totals, format_order_id

from support import ServicesFixture, checkout_payload


def items(*pairs):
    return [LineItem(name=f"item {i}", price=p, qty=q) for i, (p, q) in enumerate(pairs)]


class TestComputeTotals(unittest.TestCase):
    def test_total_is_subtotal_plus_shipping(self):
        carts = [
            items(),
            items((890, 1)),
            items((790, 2), (150, 3)),
            items((1590, 1), (410, 1)),
            items((2490, 1)),
            items((0, 5)),
        ]
        for cart in carts:
            subtotal, shipping, total = compute_totals(cart)
            self.assertEqual(total, subtotal + shipping)
            self.assertEqual(shipping == 0, subtotal >= 2000, msg=f"subtotal={subtotal}")

    def test_below_threshold_pays_flat_fee(self):
        self.assertEqual(compute_totals(items((890, 2))), (1780, 150, 1930))

    def test_threshold_is_inclusive(self):
        self.assertEqual(compute_totals(items((1000, 2))), (2000, 0, 2000))
        self.assertEqual(compute_totals(items((1999.5, 1))), (1999.5, 150, 2149.5))

    def test_configured_threshold_and_fee(self):
        self.assertEqual(compute_totals(items((500, 1)), free_shipping_threshold=400, shipping_fee=99), (500, 0, 500))
        self.assertEqual(compute_totals(items((300, 1)), free_shipping_threshold=400, shipping_fee=99), (300, 99, 399))


class TestOrderIdentifiers(unittest.TestCase):
    def test_format_is_zero_padded(self):
        self.assertEqual(format_order_id(0), "#0001")
        self.assertEqual(format_order_id(41), "#0042")
        self.assertEqual(format_order_id(9999), "#10000")

    def test_sequential_checkouts_get_increasing_ids(self):
        fx = ServicesFixture()
        try:
            ids = [
                fx.services.checkout.create_order(OrderCreate.model_validate(checkout_payload()))["orderId"]
                for _ in range(3)
            ]
        finally:
            fx.close()

        self.assertEqual(ids, ["#0001", "#0002", "#0003"])
        for order_id in ids:
            self.assertRegex(order_id, re.compile(r"^#\d{4,}$"))

    def test_totals_are_stored_once_at_creation(self):
        fx = ServicesFixture()
        try:
            payload = checkout_payload(items=[
                {"name": "Box Romántica", "price": 1590, "qty": 1},
                {"name": "Girasoles Alegres", "price": 790, "qty": 1},
            ])
            result = fx.services.checkout.create_order(OrderCreate.model_validate(payload))
            order = fx.services.orders.get(result["orderId"])
        finally:
            fx.close()

        self.assertEqual((order.subtotal, order.shipping, order.total), (2380, 0, 2380))


if __name__ == '__main__':
    unittest.main()
