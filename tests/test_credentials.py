import tempfile
import unittest
from pathlib import Path

from vm_dns_sync.credentials import (
    ApiTokenCredential,
    CloudflareCredential,
    GlobalKeyCredential,
    load_credentials,
    parse_credentials,
)
from vm_dns_sync.errors import ConfigError


class TestParseCredentials(unittest.TestCase):

    def test_api_token(self):
        credential = parse_credentials("dns_cloudflare_api_token = abc123\n")

        self.assertIsInstance(credential, ApiTokenCredential)
        self.assertEqual(credential.auth_headers(), {"Authorization": "Bearer abc123"})

    def test_email_and_global_key(self):
        text = "dns_cloudflare_email = ops@example.com\ndns_cloudflare_api_key = k3y\n"

        credential = parse_credentials(text)

        self.assertIsInstance(credential, GlobalKeyCredential)
        self.assertEqual(
            credential.auth_headers(),
            {"X-Auth-Email": "ops@example.com", "X-Auth-Key": "k3y"},
        )

    def test_blank_lines_and_surrounding_whitespace_are_ignored(self):
        credential = parse_credentials("\n  dns_cloudflare_api_token =  abc123  \n\n")

        self.assertEqual(credential.auth_headers()["Authorization"], "Bearer abc123")

    def test_token_is_not_exposed_in_repr(self):
        credential = parse_credentials("dns_cloudflare_api_token = abc123")

        self.assertNotIn("abc123", repr(credential))

    def test_credential_is_immutable(self):
        credential = parse_credentials("dns_cloudflare_email = a@b.c\ndns_cloudflare_api_key = k")

        with self.assertRaises(Exception):
            credential.email = "other@b.c"

    def test_base_credential_cannot_be_built(self):
        with self.assertRaises(TypeError):
            CloudflareCredential()

    def test_malformed_line(self):
        with self.assertRaises(ConfigError):
            parse_credentials("dns_cloudflare_api_token=abc123")

    def test_unknown_key(self):
        with self.assertRaises(ConfigError):
            parse_credentials("dns_cloudflare_api_token = abc\nzone = example.com")

    def test_empty_value(self):
        with self.assertRaises(ConfigError):
            parse_credentials("dns_cloudflare_api_token = ")

    def test_duplicate_key(self):
        with self.assertRaises(ConfigError):
            parse_credentials("dns_cloudflare_api_token = a\ndns_cloudflare_api_token = b")

    def test_missing_key(self):
        with self.assertRaises(ConfigError):
            parse_credentials("")

    def test_email_without_key(self):
        with self.assertRaises(ConfigError):
            parse_credentials("dns_cloudflare_email = ops@example.com")

    def test_both_variants(self):
        text = (
            "dns_cloudflare_api_token = abc\n"
            "dns_cloudflare_email = ops@example.com\n"
            "dns_cloudflare_api_key = k3y\n"
        )
        with self.assertRaises(ConfigError):
            parse_credentials(text)


class TestLoadCredentials(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "cloudflare.ini"
        self.path.write_text("dns_cloudflare_api_token = from-file\n")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_load_from_path(self):
        credential = load_credentials(self.path)

        self.assertEqual(credential.auth_headers()["Authorization"], "Bearer from-file")

    def test_unreadable_file(self):
        with self.assertRaises(ConfigError):
            load_credentials(Path(self.tmpdir.name) / "missing.ini")


if __name__ == '__main__':
    unittest.main()
