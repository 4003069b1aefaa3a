from unittest.mock import patch

from storybook_backend.integrations.service_error import IntegrationError, ServiceError
from storybook_backend.integrations.woo_commerce import WooPage
from storybook_backend.repositories import voice_data_repository
from storybook_backend.services import woo_order_service
from storybook_backend.tests.helpers import StoreTestCase


class WooOrderListingTests(StoreTestCase):
    @patch("storybook_backend.integrations.woo_commerce.fetch_collection")
    def test_annotates_orders_with_production_status(self, fetch_collection):
        self.store.set("users", "vendor-1", {"role": "vendor", "name": "Press Co"})
        self.store.add("orders", {"wcId": 55, "stage": "Printing", "vendorId": "vendor-1", "s3Key": "orders/55.pdf"})
        self.store.add("orders", {"wcId": 57, "stage": "", "vendorId": "ghost"})
        fetch_collection.return_value = WooPage(
            data=[{"id": 55, "status": "processing"}, {"id": 56, "status": "pending"}, {"id": 57, "status": "on-hold"}],
            total=3,
            total_pages=1,
        )

        result = woo_order_service.list_woo_orders(page=1, per_page=20, status="any")

        params = fetch_collection.call_args.args[1]
        self.assertNotIn("status", params)
        self.assertEqual((params["orderby"], params["order"]), ("date", "desc"))
        first, second, third = result["orders"]
        self.assertEqual(first["status"], "Printing")
        self.assertEqual(first["vendor_name"], "Press Co")
        self.assertEqual(first["s3Key"], "orders/55.pdf")
        self.assertEqual(second, {"id": 56, "status": "pending"})
        self.assertEqual(third["status"], "Assigned to Vendor")
        self.assertEqual(third["vendor_name"], "Unknown")
        self.assertEqual((result["total"], result["totalPages"]), (3, 1))

    @patch("storybook_backend.repositories.order_repository.find_by_wc_ids", side_effect=RuntimeError("store down"))
    @patch("storybook_backend.integrations.woo_commerce.fetch_collection")
    def test_annotation_failure_still_returns_orders(self, fetch_collection, _find):
        fetch_collection.return_value = WooPage(data=[{"id": 1, "status": "pending"}], total=1, total_pages=1)

        with self.assertLogs("storybook_backend.services.woo_order_service", level="ERROR"):
            result = woo_order_service.list_woo_orders(status="pending")

        self.assertEqual(result["orders"], [{"id": 1, "status": "pending"}])
        self.assertEqual(fetch_collection.call_args.args[1]["status"], "pending")


class WooOrderUpdateTests(StoreTestCase):
    META = [{"key": "voice_recording", "value": "voice/1.mp3"}]

    def test_rejects_empty_or_invalid_body(self):
        with self.assertRaises(ServiceError) as ctx:
            woo_order_service.update_woo_order("1", None)
        self.assertEqual(ctx.exception.message, "Invalid JSON")

        with self.assertRaises(ServiceError) as ctx:
            woo_order_service.update_woo_order("1", {"meta_data": []})
        self.assertEqual(ctx.exception.message, "Nothing to update")

    @patch("storybook_backend.integrations.woo_commerce.update_order", return_value={"id": 1, "status": "completed"})
    def test_successful_update_mirrors_meta_locally(self, update_order):
        result = woo_order_service.update_woo_order("1", {"meta_data": self.META})

        self.assertEqual(result["message"], "Updated in WooCommerce")
        self.assertEqual(result["order"]["id"], 1)
        update_order.assert_called_once_with("1", {"meta_data": self.META})
        self.assertEqual(voice_data_repository.get("1"), self.META)

    @patch("storybook_backend.integrations.woo_commerce.update_order", side_effect=IntegrationError("down", status=503))
    def test_woo_failure_falls_back_to_local_meta(self, _update_order):
        result = woo_order_service.update_woo_order("1", {"meta_data": self.META})

        self.assertEqual(result, {"success": True, "message": "Saved to Local Storage Fallback", "fallback": True})
        self.assertEqual(voice_data_repository.get("1"), self.META)

    @patch("storybook_backend.integrations.woo_commerce.update_order", side_effect=IntegrationError("down", status=503))
    def test_status_only_failure_is_server_error(self, _update_order):
        with self.assertRaises(IntegrationError) as ctx:
            woo_order_service.update_woo_order("1", {"status": "completed"})
        self.assertEqual(ctx.exception.status, 500)

    def test_meta_merge_replaces_matching_keys(self):
        voice_data_repository.merge("9", [{"key": "voice", "value": "a"}, {"key": "name", "value": "Ann"}])

        merged = voice_data_repository.merge("9", [{"key": "voice", "value": "b"}, {"key": "dedication", "value": "Hi"}])

        self.assertEqual(
            merged,
            [{"key": "voice", "value": "b"}, {"key": "name", "value": "Ann"}, {"key": "dedication", "value": "Hi"}],
        )
