
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
Client side of the AI gateway: the locally stored AI configuration and
the request helper the workspace uses.

``AIClient.request_ai`` never raises. A non-success answer or a network
failure comes back as ``AIResult(fallback=True, error=...)``, which tells
the caller to run its own local fallback.
"""

import json
import logging
import os
from typing import Any, Callable, Optional

import requests

from cv_builder.config import get_ca_bundle
from cv_builder.models import AIConfig, AIResult

logger = logging.getLogger(__name__)

CONFIG_KEY = "ai_config"
SEEN_KEY = "has_seen_ai_config"


class ConfigStore:
    """Small JSON file holding the user's AIConfig and the prompted flag."""
    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable AI config store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def load(self) -> Optional[AIConfig]:
        return AIConfig.from_dict(self._read().get(CONFIG_KEY))

    def save(self, config: Optional[AIConfig]) -> None:
        data = self._read()
        if config is None:
            data.pop(CONFIG_KEY, None)
        else:
            data[CONFIG_KEY] = config.to_dict()
        self._write(data)

    def has_seen_prompt(self) -> bool:
        return bool(self._read().get(SEEN_KEY))

    def mark_seen(self) -> None:
        data = self._read()
        data[SEEN_KEY] = True
        self._write(data)

    def ensure_config(self, prompt: Callable[[], Optional[AIConfig]]) -> Optional[AIConfig]:
        """
        Return the saved config. Without one, ask the user via ``prompt``
        at most once across sessions; whatever it returns is saved.
        """
        saved = self.load()
        if saved is not None:
            return saved
        if self.has_seen_prompt():
            return None

        config = prompt()
        self.mark_seen()
        if config is not None:
            self.save(config)
        return config


class AIClient:
    def __init__(
        self,
        base_url: str,
        config_store: Optional[ConfigStore] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 90,
    ):
        self.endpoint = base_url.rstrip("/") + "/api/ai"
        self.config_store = config_store
        self.session = session or requests.Session()
        self.timeout = timeout

    def _body(self, action: str, payload: Any) -> dict:
        body = {"action": action, "payload": payload}
        config = self.config_store.load() if self.config_store else None
        if config is not None:
            body["config"] = config.to_dict()
        return body

    def request_ai(self, action: str, payload: Any) -> AIResult:
        try:
            response = self.session.post(
                self.endpoint,
                json=self._body(action, payload),
                timeout=self.timeout,
                verify=get_ca_bundle(),
            )
        except requests.RequestException as e:
            logger.warning(f"AI request '{action}' failed: {e}")
            return AIResult(fallback=True, error=f"AI request failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error sending AI request '{action}'")
            return AIResult(fallback=True, error=f"AI request failed: {e}")

        if not response.ok:
            message = f"AI request failed ({response.status_code})"
            try:
                body = response.json()
                if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
                    message = body["error"]
            except ValueError:
                logger.debug(f"AI error response for '{action}' has no JSON body")
            logger.info(f"AI request '{action}' answered {response.status_code}: {message}")
            return AIResult(fallback=True, error=message, status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"AI request '{action}' returned invalid JSON: {e}")
            return AIResult(fallback=True, error="AI response was not valid JSON", status=response.status_code)
        return AIResult(data=data, status=response.status_code)
