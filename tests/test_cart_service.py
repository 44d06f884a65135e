from decimal import Decimal
from itertools import combinations

from campuslink.domain.errors import InvalidQuantity, NotFound, OutOfStock, PermissionDenied
from campuslink.services.cart_service import CartService, cart_total, group_lines
from tests.base import DbTestCase


class TestCartService(DbTestCase):
    def setUp(self):
        super().setUp()
        self.customer = self.make_user(1, "Awa")
        self.other = self.make_user(2, "Moussa")
        self.merchant_a = self.make_merchant(self.make_user(10, "A"), "Boutique A")
        self.merchant_b = self.make_merchant(self.make_user(11, "B"), "Boutique B", "781112233")
        self.svc = CartService(self.db)

    def _scenario_cart(self):
        cahier = self.make_product(self.merchant_a, "Cahier", 1500)
        stylo = self.make_product(self.merchant_a, "Stylo", 2000)
        usb = self.make_product(self.merchant_b, "Clé USB", 3000)
        self.add_line(self.customer, cahier, 2)
        self.add_line(self.customer, usb, 1)
        self.add_line(self.customer, stylo, 1)
        return cahier, stylo, usb

    def test_group_scenario_two_merchants(self):
        self._scenario_cart()
        groups = self.svc.group(self.customer.id)

        self.assertEqual(set(groups), {self.merchant_a.id, self.merchant_b.id})
        self.assertEqual(groups[self.merchant_a.id].subtotal, Decimal("5000"))
        self.assertEqual(groups[self.merchant_b.id].subtotal, Decimal("3000"))
        self.assertEqual(len(groups[self.merchant_a.id].lines), 2)
        self.assertEqual(groups[self.merchant_a.id].business_name, "Boutique A")

    def test_grouping_is_lossless_for_every_sub_cart(self):
        self._scenario_cart()
        lines = self.svc.repo.get_items(self.customer.id)

        for size in range(len(lines) + 1):
            for subset in combinations(lines, size):
                groups = group_lines(subset)
                grouped_ids = [line.id for g in groups.values() for line in g.lines]
                self.assertEqual(sorted(grouped_ids), sorted(line.id for line in subset))
                self.assertEqual(sum((g.subtotal for g in groups.values()), Decimal("0")), cart_total(subset))

    def test_group_preserves_line_order(self):
        self._scenario_cart()
        group = self.svc.group(self.customer.id)[self.merchant_a.id]
        self.assertEqual([line.product.name for line in group.lines], ["Cahier", "Stylo"])

    def test_get_group_for_absent_merchant(self):
        with self.assertRaises(NotFound):
            self.svc.get_group(self.customer.id, self.merchant_a.id)

    def test_add_merges_existing_line(self):
        cahier = self.make_product(self.merchant_a, "Cahier", 1500)
        self.svc.add_product(self.customer.id, cahier.id, 1)
        cart = self.svc.add_product(self.customer.id, cahier.id, 2)

        self.assertEqual(len(cart["items"]), 1)
        self.assertEqual(cart["items"][0]["quantity"], 3)
        self.assertEqual(cart["total"], Decimal("4500"))

    def test_add_unknown_product(self):
        with self.assertRaises(NotFound):
            self.svc.add_product(self.customer.id, 999, 1)

    def test_update_quantity_rejects_below_one(self):
        line = self.add_line(self.customer, self.make_product(self.merchant_a, "Cahier", 1500), 1)
        for qty in (0, -3):
            with self.assertRaises(InvalidQuantity):
                self.svc.update_quantity(self.customer.id, line.id, qty)

    def test_update_quantity_clamps_to_stock(self):
        usb = self.make_product(self.merchant_b, "Clé USB", 3000, stock=5)
        line = self.add_line(self.customer, usb, 1)

        cart = self.svc.update_quantity(self.customer.id, line.id, 12)
        self.assertEqual(cart["items"][0]["quantity"], 5)

        cart = self.svc.update_quantity(self.customer.id, line.id, 3)
        self.assertEqual(cart["items"][0]["quantity"], 3)

    def test_out_of_stock_product_cannot_be_added_or_updated(self):
        sold_out = self.make_product(self.merchant_a, "Rupture", 1000, stock=0)
        with self.assertRaises(OutOfStock):
            self.svc.add_product(self.customer.id, sold_out.id, 3)
        self.assertEqual(self.svc.get_cart(self.customer.id)["items"], [])

        usb = self.make_product(self.merchant_b, "Clé USB", 3000, stock=2)
        line = self.add_line(self.customer, usb, 1)
        usb.stock_quantity = 0
        self.db.commit()
        with self.assertRaises(OutOfStock):
            self.svc.update_quantity(self.customer.id, line.id, 2)

    def test_lines_are_not_shared_between_users(self):
        line = self.add_line(self.customer, self.make_product(self.merchant_a, "Cahier", 1500), 1)

        with self.assertRaises(PermissionDenied):
            self.svc.update_quantity(self.other.id, line.id, 2)
        with self.assertRaises(PermissionDenied):
            self.svc.remove(self.other.id, line.id)
        self.assertEqual(self.svc.get_cart(self.other.id)["items"], [])

    def test_remove_line(self):
        cahier, stylo, usb = self._scenario_cart()
        lines = self.svc.repo.get_items(self.customer.id)

        cart = self.svc.remove(self.customer.id, lines[0].id)
        self.assertEqual(len(cart["items"]), 2)
        self.assertEqual(cart["total"], Decimal("5000"))
