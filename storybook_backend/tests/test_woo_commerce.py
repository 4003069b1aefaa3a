import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import requests

from storybook_backend.integrations import woo_commerce
from storybook_backend.integrations.service_error import IntegrationError
from storybook_backend.services import configure_services
from storybook_backend.tests.helpers import make_config, woo_response


class WooCommerceClientTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.config = make_config(Path(self._tmp.name))
        configure_services(self.config)

    def tearDown(self):
        self._tmp.cleanup()

    @patch("storybook_backend.utils.http_client.request")
    def test_fetch_collection_reads_pagination_headers(self, request):
        request.return_value = woo_response(
            [{"id": 1}, "junk", {"id": 2}],
            headers={"X-WP-Total": "42", "X-WP-TotalPages": "3"},
        )

        page = woo_commerce.fetch_collection("orders", {"page": 2, "per_page": 20, "bogus": "x", "search": " "})

        self.assertEqual(page.data, [{"id": 1}, {"id": 2}])
        self.assertEqual((page.total, page.total_pages), (42, 3))
        args, kwargs = request.call_args
        self.assertEqual(args, ("GET", "https://shop.example/wp-json/wc/v3/orders"))
        self.assertEqual(kwargs["params"], {"page": "2", "per_page": "20"})
        self.assertEqual(kwargs["timeout"], 5)

    @patch("storybook_backend.utils.http_client.request")
    def test_fetch_customers_requests_all_roles(self, request):
        request.return_value = woo_response([])

        woo_commerce.fetch_customers("ann")

        self.assertEqual(
            request.call_args.kwargs["params"],
            {"role": "all", "per_page": "100", "search": "ann"},
        )

    @patch("storybook_backend.utils.http_client.request")
    def test_upstream_error_keeps_status_and_body(self, request):
        response = woo_response({"code": "woocommerce_rest_cannot_view"}, status_code=401)
        response.raise_for_status.side_effect = requests.HTTPError("401", response=response)
        request.return_value = response

        with self.assertRaises(IntegrationError) as ctx:
            woo_commerce.fetch_customers()

        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.response, {"code": "woocommerce_rest_cannot_view"})

    @patch("storybook_backend.utils.http_client.request")
    def test_non_list_body_is_rejected(self, request):
        request.return_value = woo_response({"unexpected": True})

        with self.assertRaises(IntegrationError):
            woo_commerce.fetch_collection("orders")

    @patch("storybook_backend.utils.http_client.request")
    def test_fetch_order_returns_none_on_404(self, request):
        response = woo_response({"code": "woocommerce_rest_shop_order_invalid_id"}, status_code=404)
        response.raise_for_status.side_effect = requests.HTTPError("404", response=response)
        request.return_value = response

        self.assertIsNone(woo_commerce.fetch_order("77"))

    @patch("storybook_backend.utils.http_client.request")
    def test_update_order_sends_json_payload(self, request):
        request.return_value = woo_response({"id": 77, "status": "completed"})

        result = woo_commerce.update_order("77", {"status": "completed"})

        self.assertEqual(result["status"], "completed")
        args, kwargs = request.call_args
        self.assertEqual(args[0], "PUT")
        self.assertTrue(args[1].endswith("/orders/77"))
        self.assertEqual(kwargs["json"], {"status": "completed"})

    def test_unconfigured_store_raises_server_error(self):
        configure_services(make_config(Path(self._tmp.name), woo_commerce={}))

        self.assertFalse(woo_commerce.is_configured())
        with self.assertRaises(IntegrationError) as ctx:
            woo_commerce.fetch_orders()
        self.assertEqual(ctx.exception.status, 500)


if __name__ == "__main__":
    unittest.main()
