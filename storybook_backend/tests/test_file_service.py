import io
import zipfile
from unittest.mock import MagicMock, patch

import requests

from storybook_backend.integrations.service_error import ServiceError
from storybook_backend.services import configure_services, file_service
from storybook_backend.tests.helpers import StoreTestCase, make_config


class UploadUrlTests(StoreTestCase):
    def test_local_upload_url_without_object_storage(self):
        result = file_service.create_upload_url("my story.pdf", "application/pdf", origin="http://localhost/")

        self.assertTrue(result["isLocal"])
        self.assertTrue(result["key"].startswith("local/"))
        self.assertTrue(result["key"].endswith("-my-story.pdf"))
        self.assertTrue(result["url"].startswith("http://localhost/api/local-upload?filename="))

    @patch("storybook_backend.integrations.object_storage.presign_upload", return_value="https://s3.example/signed")
    def test_presigned_upload_when_configured(self, presign_upload):
        s3 = {"bucket": "books", "region": "ap-south-1", "access_key_id": "AK", "secret_access_key": "SK"}
        configure_services(make_config(self.data_dir, s3=s3))

        result = file_service.create_upload_url("cover.png", "image/png", origin="http://localhost")

        self.assertEqual(result["url"], "https://s3.example/signed")
        self.assertTrue(result["key"].startswith("orders/"))
        self.assertNotIn("isLocal", result)
        presign_upload.assert_called_once_with(result["key"], "image/png")

    def test_save_local_upload(self):
        result = file_service.save_local_upload("123-a.pdf", b"%PDF")

        self.assertEqual(result, {"success": True, "path": "/uploads/123-a.pdf"})
        self.assertEqual((self.data_dir / "uploads" / "123-a.pdf").read_bytes(), b"%PDF")

    def test_save_local_upload_rejects_paths(self):
        for bad in ("", None, "../escape.pdf", "nested/file.pdf"):
            with self.assertRaises(ServiceError):
                file_service.save_local_upload(bad, b"x")

    def test_view_url_requires_key(self):
        with self.assertRaises(ServiceError) as ctx:
            file_service.create_view_url("")
        self.assertEqual(ctx.exception.message, "Missing key")


class ZipTests(StoreTestCase):
    @patch("storybook_backend.utils.http_client.get")
    def test_failed_downloads_become_error_entries(self, get):
        ok = MagicMock()
        ok.content = b"png-bytes"

        def fake_get(url):
            if "broken" in url:
                raise requests.ConnectionError("refused")
            return ok

        get.side_effect = fake_get

        data, filename = file_service.build_zip(
            [
                {"url": "https://cdn.example/a.png?sig=1", "name": "page-1.png"},
                {"url": "https://cdn.example/broken.png"},
                {"name": "no-url"},
            ],
            "Moon Book!",
        )

        self.assertEqual(filename, "Moon_Book_.zip")
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            self.assertEqual(archive.namelist(), ["page-1.png", "broken.png-error.txt"])
            self.assertEqual(archive.read("page-1.png"), b"png-bytes")

    @patch("storybook_backend.utils.http_client.get")
    def test_entry_names_are_flattened(self, get):
        get.return_value = MagicMock(content=b"x")

        data, _ = file_service.build_zip(
            [
                {"url": "https://cdn.example/a.png", "name": "../../etc/cron.d/evil"},
                {"url": "https://cdn.example/b.png", "name": ".."},
            ],
            "book",
        )

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            self.assertEqual(archive.namelist(), ["evil", "file"])

    def test_zip_requires_urls(self):
        with self.assertRaises(ServiceError):
            file_service.build_zip([], None)

    def test_parse_zip_request(self):
        self.assertEqual(file_service.parse_zip_request({"urls": []}, None), {"urls": []})
        self.assertEqual(file_service.parse_zip_request(None, '{"filename": "x"}'), {"filename": "x"})
        self.assertIsNone(file_service.parse_zip_request(None, "{not json"))
        self.assertIsNone(file_service.parse_zip_request(None, None))
