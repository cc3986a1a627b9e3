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

"""
Runtime configuration, read from environment variables.

CA bundle resolution for outbound HTTPS (in priority order):
  1. Explicit override via --ca-bundle CLI arg
  2. REQUESTS_CA_BUNDLE environment variable
  3. CURL_CA_BUNDLE environment variable
  4. SSL_CERT_FILE environment variable
  5. System defaults (True, delegates to certifi / OS trust store)
"""

import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Module-level override set by the CLI --ca-bundle flag
_ca_bundle_override: Optional[str] = None

DEFAULT_DATABASE_URL = "sqlite:///user_content/resume_pipeline.db"


def set_ca_bundle_override(path: str) -> None:
    global _ca_bundle_override
    _ca_bundle_override = path
    logger.info(f"CA bundle override set to: {path}")


def get_ca_bundle(env: Optional[Mapping[str, str]] = None) -> str | bool:
    """
    Resolve the CA bundle to use for outbound HTTPS requests.

    Returns:
        str: Path to a CA bundle file, or
        bool: True to use the default system/certifi trust store.
    """
    if _ca_bundle_override:
        return _ca_bundle_override

    env = os.environ if env is None else env
    for var in ("REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE", "SSL_CERT_FILE"):
        value = env.get(var)
        if value:
            logger.debug(f"Using CA bundle from {var}: {value}")
            return value
    return True


def configure_ssl_env() -> None:
    """
    Export a custom CA bundle as SSL_CERT_FILE so the httpx-based
    provider SDKs (google-genai, openai) pick it up.
    """
    bundle = get_ca_bundle()
    if isinstance(bundle, str) and os.environ.get("SSL_CERT_FILE") != bundle:
        os.environ["SSL_CERT_FILE"] = bundle
        logger.debug(f"Set SSL_CERT_FILE={bundle} for SDK clients")


def _float_or_none(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL

    # Primary provider (Google AI Studio)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Secondary provider, only used when the primary is rate limited
    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # Content-extraction reader for job URLs
    reader_url: str = "https://r.jina.ai/"
    reader_api_key: str = ""

    http_timeout: float = 30.0
    max_upload_bytes: int = 10 * 1024 * 1024
    analysis_timeout: Optional[float] = None
    debug: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            database_url=env.get("RESUME_PIPELINE_DATABASE_URL") or defaults.database_url,
            gemini_api_key=env.get("GEMINI_API_KEY", ""),
            gemini_model=env.get("GEMINI_MODEL") or defaults.gemini_model,
            groq_api_key=env.get("GROQ_API_KEY", ""),
            groq_model=env.get("GROQ_MODEL") or defaults.groq_model,
            groq_base_url=env.get("GROQ_BASE_URL") or defaults.groq_base_url,
            reader_url=env.get("JINA_READER_URL") or defaults.reader_url,
            reader_api_key=env.get("JINA_API_KEY", ""),
            http_timeout=float(env.get("RESUME_PIPELINE_HTTP_TIMEOUT") or defaults.http_timeout),
            max_upload_bytes=int(float(env.get("RESUME_PIPELINE_MAX_UPLOAD_MB") or 10) * 1024 * 1024),
            analysis_timeout=_float_or_none(env.get("RESUME_PIPELINE_ANALYSIS_TIMEOUT")),
            debug=env.get("RESUME_PIPELINE_DEBUG", "false").lower() == "true",
        )

    @property
    def ca_bundle(self) -> str | bool:
        return get_ca_bundle()


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
