# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import unittest
from unittest.mock import patch
import os

from resume_pipeline import config


class TestGetCaBundle(unittest.TestCase):
    """Test CA bundle resolution priority."""

    def setUp(self):
        # Reset any module-level override between tests
        config._ca_bundle_override = None

    def tearDown(self):
        config._ca_bundle_override = None

    def test_default_returns_true(self):
        """With no env vars and no override, system defaults are used."""
        with patch.dict(os.environ, {}, clear=True):
            self.assertIs(config.get_ca_bundle(), True)

    def test_ssl_cert_file(self):
        with patch.dict(os.environ, {"SSL_CERT_FILE": "/path/ssl.pem"}, clear=True):
            self.assertEqual(config.get_ca_bundle(), "/path/ssl.pem")

    def test_curl_ca_bundle_beats_ssl_cert_file(self):
        with patch.dict(os.environ, {
            "SSL_CERT_FILE": "/path/ssl.pem",
            "CURL_CA_BUNDLE": "/path/curl.pem",
        }, clear=True):
            self.assertEqual(config.get_ca_bundle(), "/path/curl.pem")

    def test_requests_ca_bundle_beats_all_env(self):
        with patch.dict(os.environ, {
            "SSL_CERT_FILE": "/path/ssl.pem",
            "CURL_CA_BUNDLE": "/path/curl.pem",
            "REQUESTS_CA_BUNDLE": "/path/requests.pem",
        }, clear=True):
            self.assertEqual(config.get_ca_bundle(), "/path/requests.pem")

    def test_cli_override_beats_everything(self):
        with patch.dict(os.environ, {"REQUESTS_CA_BUNDLE": "/path/requests.pem"}, clear=True):
            config.set_ca_bundle_override("/path/cli.pem")
            self.assertEqual(config.get_ca_bundle(), "/path/cli.pem")

    def test_explicit_env_mapping(self):
        self.assertEqual(config.get_ca_bundle({"CURL_CA_BUNDLE": "/x.pem"}), "/x.pem")


class TestConfigureSslEnv(unittest.TestCase):
    def setUp(self):
        config._ca_bundle_override = None

    def tearDown(self):
        config._ca_bundle_override = None

    def test_exports_custom_bundle(self):
        with patch.dict(os.environ, {"REQUESTS_CA_BUNDLE": "/path/requests.pem"}, clear=True):
            config.configure_ssl_env()
            self.assertEqual(os.environ["SSL_CERT_FILE"], "/path/requests.pem")

    def test_system_trust_leaves_env_alone(self):
        with patch.dict(os.environ, {}, clear=True):
            config.configure_ssl_env()
            self.assertNotIn("SSL_CERT_FILE", os.environ)


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        settings = config.Settings.from_env({})
        self.assertEqual(settings.database_url, config.DEFAULT_DATABASE_URL)
        self.assertEqual(settings.gemini_model, "gemini-2.5-flash")
        self.assertEqual(settings.groq_model, "llama-3.3-70b-versatile")
        self.assertEqual(settings.reader_url, "https://r.jina.ai/")
        self.assertEqual(settings.http_timeout, 30.0)
        self.assertEqual(settings.max_upload_bytes, 10 * 1024 * 1024)
        self.assertIsNone(settings.analysis_timeout)
        self.assertFalse(settings.debug)

    def test_from_env(self):
        settings = config.Settings.from_env({
            "RESUME_PIPELINE_DATABASE_URL": "sqlite://",
            "GEMINI_API_KEY": "g-key",
            "GROQ_API_KEY": "q-key",
            "JINA_API_KEY": "j-key",
            "RESUME_PIPELINE_HTTP_TIMEOUT": "5",
            "RESUME_PIPELINE_MAX_UPLOAD_MB": "2",
            "RESUME_PIPELINE_ANALYSIS_TIMEOUT": "45",
            "RESUME_PIPELINE_DEBUG": "TRUE",
        })
        self.assertEqual(settings.database_url, "sqlite://")
        self.assertEqual(settings.gemini_api_key, "g-key")
        self.assertEqual(settings.groq_api_key, "q-key")
        self.assertEqual(settings.reader_api_key, "j-key")
        self.assertEqual(settings.http_timeout, 5.0)
        self.assertEqual(settings.max_upload_bytes, 2 * 1024 * 1024)
        self.assertEqual(settings.analysis_timeout, 45.0)
        self.assertTrue(settings.debug)

    def test_blank_analysis_timeout_means_no_deadline(self):
        settings = config.Settings.from_env({"RESUME_PIPELINE_ANALYSIS_TIMEOUT": "  "})
        self.assertIsNone(settings.analysis_timeout)


if __name__ == '__main__':
    unittest.main()
