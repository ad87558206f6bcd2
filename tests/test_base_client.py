"""
Tests for Base Social Media Client Module.

Test Coverage:
    - Enabled state from configuration and credentials
    - Failed API initialization disables the client
    - Image download success and failure
"""
import unittest
from unittest.mock import patch, MagicMock

import requests

from social.base_client import SocialMediaClient


class ConcreteClient(SocialMediaClient):
    """Concrete implementation of SocialMediaClient for testing."""

    def _initialize_api(self):
        self.api = MagicMock()

    def post(self, content, media_urls=None, media_descriptions=None, **kwargs):
        return {"uri": "at://post/1", "cid": "cid1"}

    def verify_credentials(self):
        return {"handle": "test_user"}


class FailingClient(ConcreteClient):
    """Client whose login always fails."""

    def _initialize_api(self):
        raise RuntimeError("login refused")


class TestBaseClient(unittest.TestCase):
    """Test suite for SocialMediaClient base class."""

    def test_enabled_with_credentials(self):
        client = ConcreteClient(instance_url="https://example.com", access_token="token")

        self.assertTrue(client.enabled)
        self.assertIsNotNone(client.api)
        self.assertEqual(client.account_name, "unnamed")

    def test_disabled_via_config(self):
        client = ConcreteClient("https://example.com", "token", config_enabled=False)

        self.assertFalse(client.enabled)
        self.assertIsNone(client.api)

    def test_disabled_without_token(self):
        client = ConcreteClient("https://example.com")

        self.assertFalse(client.enabled)
        self.assertIsNone(client.api)

    def test_failed_initialization_disables_client(self):
        client = FailingClient("https://example.com", "token", account_name="main")

        self.assertFalse(client.enabled)
        self.assertIsNone(client.api)
        self.assertEqual(client.account_name, "main")

    @patch("social.base_client.requests.get")
    def test_download_image(self, mock_get):
        mock_response = MagicMock()
        mock_response.content = b"image_bytes"
        mock_get.return_value = mock_response
        client = ConcreteClient("https://example.com", "token")

        self.assertEqual(client._download_image("https://example.com/a.png"), b"image_bytes")
        mock_get.assert_called_once_with("https://example.com/a.png", timeout=30)

    @patch("social.base_client.requests.get")
    def test_download_image_http_error(self, mock_get):
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
        mock_get.return_value = mock_response
        client = ConcreteClient("https://example.com", "token")

        self.assertIsNone(client._download_image("https://example.com/missing.png"))

    @patch("social.base_client.requests.get")
    def test_download_image_timeout(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout("timed out")
        client = ConcreteClient("https://example.com", "token")

        self.assertIsNone(client._download_image("https://example.com/slow.png"))


if __name__ == "__main__":
    unittest.main()
