import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from storybook_backend.integrations.service_error import IntegrationError
from storybook_backend.services import configure_services, customer_service
from storybook_backend.tests.helpers import make_config

CUSTOMERS = [
    {
        "id": 5,
        "email": "ann@x.com",
        "first_name": "",
        "last_name": "",
        "username": "ann",
        "date_created": "2024-01-05T00:00:00",
        "total_spent": "150.00",
        "orders_count": 2,
        "billing": {},
        "avatar_url": "",
    },
    {"id": 6, "email": "", "first_name": "Ghost"},
]

ORDERS = [
    {
        "id": 900,
        "customer_id": 0,
        "total": "20.00",
        "date_created": "2024-02-01T00:00:00",
        "billing": {"email": "guest@x.com", "first_name": "Gus"},
    },
    {
        "id": 901,
        "customer_id": 5,
        "total": "75.00",
        "date_created": "2024-02-02T00:00:00",
        "billing": {"email": "ANN@x.com", "first_name": "Ann", "last_name": "Lee"},
    },
]


class ListCustomersTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        configure_services(make_config(Path(self._tmp.name)))

    def tearDown(self):
        self._tmp.cleanup()

    @patch("storybook_backend.integrations.woo_commerce.fetch_orders", return_value=ORDERS)
    @patch("storybook_backend.integrations.woo_commerce.fetch_customers", return_value=CUSTOMERS)
    def test_merges_registered_and_guest_customers(self, fetch_customers, fetch_orders):
        result = customer_service.list_customers(search="x.com", sort="spend_desc")

        fetch_customers.assert_called_once_with("x.com", 100)
        fetch_orders.assert_called_once_with("x.com", 100)
        self.assertEqual(result["total"], 2)
        self.assertEqual(result["totalPages"], 1)
        ann, guest = result["customers"]
        self.assertEqual(ann["email"], "ann@x.com")
        self.assertEqual(ann["first_name"], "Ann")
        self.assertFalse(ann["is_guest"])
        self.assertEqual(guest["id"], "guest-900")
        self.assertTrue(guest["is_guest"])

    @patch("storybook_backend.integrations.woo_commerce.fetch_orders", return_value=ORDERS)
    @patch("storybook_backend.integrations.woo_commerce.fetch_customers", return_value=CUSTOMERS)
    def test_guest_type_skips_customer_fetch(self, fetch_customers, fetch_orders):
        result = customer_service.list_customers(customer_type="guest")

        fetch_customers.assert_not_called()
        fetch_orders.assert_called_once()
        self.assertEqual([c["email"] for c in result["customers"]], ["guest@x.com"])

    @patch("storybook_backend.integrations.woo_commerce.fetch_orders", return_value=ORDERS)
    @patch("storybook_backend.integrations.woo_commerce.fetch_customers", return_value=CUSTOMERS)
    def test_registered_type_skips_order_fetch(self, fetch_customers, fetch_orders):
        result = customer_service.list_customers(customer_type="registered")

        fetch_orders.assert_not_called()
        self.assertEqual([c["email"] for c in result["customers"]], ["ann@x.com"])

    @patch("storybook_backend.integrations.woo_commerce.fetch_orders", return_value=ORDERS)
    @patch("storybook_backend.integrations.woo_commerce.fetch_customers", return_value=CUSTOMERS)
    def test_min_orders_filters_guests(self, _fetch_customers, _fetch_orders):
        result = customer_service.list_customers(min_orders=2)
        self.assertEqual([c["email"] for c in result["customers"]], ["ann@x.com"])

    @patch("storybook_backend.integrations.woo_commerce.fetch_orders", return_value=ORDERS)
    @patch(
        "storybook_backend.integrations.woo_commerce.fetch_customers",
        side_effect=IntegrationError("WooCommerce GET customers failed", response={"code": "401"}, status=401),
    )
    def test_upstream_failure_propagates(self, _fetch_customers, _fetch_orders):
        with self.assertRaises(IntegrationError) as ctx:
            customer_service.list_customers()

        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.message, "WooCommerce GET customers failed")


if __name__ == "__main__":
    unittest.main()
