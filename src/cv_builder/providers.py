
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
Uniform text-completion call over the two supported backends:
the managed Gemini account (google-genai) and a user-supplied OpenRouter
key (OpenAI-compatible API, streamed).
"""

import logging
from typing import Callable, Optional

import httpx
from google import genai
from google.genai import types
from openai import APITimeoutError, OpenAI

from cv_builder.config import Settings, configure_ssl_env
from cv_builder.errors import NotConfiguredError, ProviderError, ProviderTimeoutError
from cv_builder.models import AIConfig

logger = logging.getLogger(__name__)


def create_gemini_client(api_key: str, timeout: float) -> "genai.Client":
    configure_ssl_env()
    # HttpOptions.timeout is in milliseconds
    return genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=int(timeout * 1000)),
    )


def create_openrouter_client(config: AIConfig, settings: Settings) -> OpenAI:
    """Build an OpenAI SDK client pointed at OpenRouter for one user config."""
    if not config.api_key:
        raise NotConfiguredError("OpenRouter API key is required")
    configure_ssl_env()
    return OpenAI(
        api_key=config.api_key,
        base_url=settings.openrouter_base_url,
        timeout=settings.request_timeout,
        default_headers={
            "HTTP-Referer": config.site_url or settings.site_url,
            "X-Title": config.site_name or settings.site_name,
        },
    )


def response_text(response) -> str:
    """
    Text of a Gemini response: the ``.text`` shortcut if non-empty, else
    every textual part of the first candidate, else "".
    """
    direct = getattr(response, "text", None)
    if isinstance(direct, str) and direct.strip():
        return direct.strip()

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    texts = []
    for part in parts:
        value = getattr(part, "text", None)
        if isinstance(value, str) and value.strip():
            texts.append(value.strip())
    return " ".join(texts).strip()


class ProviderAdapter:
    """
    Dispatches a prompt to the backend selected by the request's AIConfig.

    The managed Gemini client is built once at application start and
    injected; OpenRouter clients are built per request from the user's key.
    """
    def __init__(
        self,
        settings: Settings,
        gemini_client=None,
        gemini_factory: Callable[[str, float], object] = create_gemini_client,
        openrouter_factory: Callable[[AIConfig, Settings], object] = create_openrouter_client,
    ):
        self.settings = settings
        self._gemini_factory = gemini_factory
        self._openrouter_factory = openrouter_factory
        if gemini_client is None and settings.gemini_api_key:
            gemini_client = gemini_factory(settings.gemini_api_key, settings.request_timeout)
        self._gemini = gemini_client

    def is_configured(self) -> bool:
        """True iff the managed server credential exists."""
        return bool(self.settings.gemini_api_key)

    def is_available(self, config: Optional[AIConfig] = None) -> bool:
        """Whether this request has any usable credential."""
        return self.is_configured() or bool(config and config.api_key)

    def describe(self, config: Optional[AIConfig] = None) -> str:
        if config and config.is_alternate:
            return config.model or "OpenRouter"
        return "Gemini"

    def generate_text(self, prompt: str, config: Optional[AIConfig] = None) -> str:
        """
        Run one completion. Returns "" for an empty answer; raises
        ProviderError on transport/auth failure and ProviderTimeoutError
        when the SDK's request timeout expires.
        """
        if config and config.is_alternate:
            return self._generate_openrouter(prompt, config)
        return self._generate_gemini(prompt, config)

    def _timeout_error(self, config: Optional[AIConfig]) -> ProviderTimeoutError:
        logger.warning(f"AI call exceeded {self.settings.request_timeout}s deadline ({self.describe(config)})")
        return ProviderTimeoutError(
            f"AI provider did not answer within {self.settings.request_timeout:g} seconds"
        )

    def _generate_gemini(self, prompt: str, config: Optional[AIConfig]) -> str:
        if config and config.api_key:
            client = self._gemini_factory(config.api_key, self.settings.request_timeout)
        elif self._gemini is not None:
            client = self._gemini
        else:
            raise NotConfiguredError("GOOGLE_GENAI_API_KEY is not configured")

        model = self.settings.gemini_model
        logger.debug(f"Gemini request ({model}, {len(prompt)} chars)")
        try:
            response = client.models.generate_content(model=model, contents=prompt)
        except httpx.TimeoutException as e:
            raise self._timeout_error(config) from e
        except Exception as e:
            logger.error(f"Gemini call failed: {e}")
            raise ProviderError(f"Gemini request failed: {e}") from e
        return response_text(response)

    def _generate_openrouter(self, prompt: str, config: AIConfig) -> str:
        client = self._openrouter_factory(config, self.settings)
        model = config.model or self.settings.openrouter_model
        logger.debug(f"OpenRouter request ({model}, {len(prompt)} chars)")
        try:
            stream = client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                stream=True,
            )
            fragments = []
            for chunk in stream:
                choices = getattr(chunk, "choices", None) or []
                if not choices:
                    continue
                content = getattr(choices[0].delta, "content", None)
                if content:
                    fragments.append(content)
        except (APITimeoutError, httpx.TimeoutException) as e:
            raise self._timeout_error(config) from e
        except Exception as e:
            logger.error(f"OpenRouter call failed: {e}")
            raise ProviderError(f"OpenRouter request failed: {e}") from e
        return "".join(fragments).strip()
