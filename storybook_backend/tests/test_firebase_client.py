import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from storybook_backend.database import firebase_client


def _config(**firebase):
    return SimpleNamespace(firebase=firebase, is_production=False)


class FirebaseClientTests(unittest.TestCase):
    def setUp(self):
        patcher = patch.object(firebase_client, "_APP", None)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_reuses_existing_default_app(self):
        existing = MagicMock()
        with patch.object(firebase_client.firebase_admin, "get_app", return_value=existing), patch.object(
            firebase_client.firebase_admin, "initialize_app"
        ) as initialize_app:
            self.assertTrue(firebase_client.init_database(_config()))
        initialize_app.assert_not_called()
        self.assertIs(firebase_client.get_app(), existing)

    def test_without_credentials_falls_back(self):
        with patch.object(firebase_client.firebase_admin, "get_app", side_effect=ValueError("no app")):
            self.assertFalse(firebase_client.init_database(_config()))
        self.assertFalse(firebase_client.is_initialized())

    def test_malformed_private_key_is_rejected_outside_production(self):
        config = _config(project_id="p", client_email="svc@p.iam", private_key="not-a-key")
        with patch.object(firebase_client.firebase_admin, "get_app", side_effect=ValueError("no app")):
            self.assertFalse(firebase_client.init_database(config))


if __name__ == "__main__":
    unittest.main()
