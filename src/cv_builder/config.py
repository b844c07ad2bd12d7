
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
Runtime settings for the CV builder service.

Everything is read from the environment. The CA bundle helpers resolve a
custom trust store for proxy environments, in priority order:
  1. Explicit override via --ca-bundle CLI arg
  2. REQUESTS_CA_BUNDLE environment variable
  3. CURL_CA_BUNDLE environment variable
  4. SSL_CERT_FILE environment variable
  5. System defaults (True, delegates to certifi / OS trust store)
"""

import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-lite"
DEFAULT_OPENROUTER_MODEL = "openai/gpt-3.5-turbo"
DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_SITE_URL = "https://cv.rayenft.dev/"
DEFAULT_SITE_NAME = "OptimumCV"

# Module-level override set by the CLI --ca-bundle flag
_ca_bundle_override: str | None = None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    return max(1, int(_env_float(name, default)))


@dataclass
class Settings:
    """Process-wide configuration, built once at application start."""
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    openrouter_base_url: str = DEFAULT_OPENROUTER_BASE_URL
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    site_url: str = DEFAULT_SITE_URL
    site_name: str = DEFAULT_SITE_NAME
    request_timeout: float = 60.0
    max_workers: int = 4
    log_dir: str = "user_content/logs"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_api_key=os.environ.get("GOOGLE_GENAI_API_KEY") or os.environ.get("GEMINI_API_KEY", ""),
            gemini_model=os.environ.get("GEMINI_TEXT_MODEL", DEFAULT_GEMINI_MODEL),
            openrouter_base_url=os.environ.get("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL),
            openrouter_model=os.environ.get("OPENROUTER_DEFAULT_MODEL", DEFAULT_OPENROUTER_MODEL),
            site_url=os.environ.get("OPENROUTER_SITE_URL", DEFAULT_SITE_URL),
            site_name=os.environ.get("OPENROUTER_SITE_NAME", DEFAULT_SITE_NAME),
            request_timeout=_env_float("AI_REQUEST_TIMEOUT", 60.0),
            max_workers=_env_int("AI_MAX_WORKERS", 4),
            log_dir=os.environ.get("CV_BUILDER_LOG_DIR", "user_content/logs"),
        )


def set_ca_bundle_override(path: str | None) -> None:
    """Set an explicit CA bundle path from a CLI argument."""
    global _ca_bundle_override
    _ca_bundle_override = path
    logger.info(f"CA bundle override set to: {path}")


def get_ca_bundle() -> str | bool:
    """
    Resolve the CA bundle to use for outbound HTTPS requests.

    Returns:
        str: Path to a CA bundle file, or
        bool: True to use the default system/certifi trust store.
    """
    if _ca_bundle_override:
        return _ca_bundle_override

    for var in ("REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE", "SSL_CERT_FILE"):
        value = os.environ.get(var)
        if value:
            logger.debug(f"Using CA bundle from {var}: {value}")
            return value

    return True


def configure_ssl_env() -> None:
    """
    Export the resolved bundle as SSL_CERT_FILE so the httpx-based SDKs
    (Google GenAI, OpenAI) pick it up.
    """
    bundle = get_ca_bundle()
    if isinstance(bundle, str) and os.environ.get("SSL_CERT_FILE") != bundle:
        os.environ["SSL_CERT_FILE"] = bundle
        logger.debug(f"Set SSL_CERT_FILE={bundle} for SDK clients")
