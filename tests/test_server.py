
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

import asyncio
import base64
import io
import time
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
from docx import Document
from fastapi.testclient import TestClient

from cv_builder.config import Settings
from cv_builder.providers import ProviderAdapter
from cv_builder.schema import default_cv
from cv_builder.server import DOCX_MEDIA_TYPE, create_app


class ServerTestCase(unittest.TestCase):
    api_key = "managed-key"

    def setUp(self):
        self.gemini = MagicMock()
        self.gemini.models.generate_content.return_value = SimpleNamespace(text="Polished summary.")
        adapter = ProviderAdapter(
            Settings(gemini_api_key=self.api_key),
            gemini_client=self.gemini if self.api_key else None,
            gemini_factory=MagicMock(return_value=self.gemini),
        )
        self.client = TestClient(create_app(adapter.settings, adapter))


class TestAiEndpoint(ServerTestCase):
    def test_success_is_not_cached(self):
        response = self.client.post("/api/ai", json={"action": "enhance-summary", "payload": {"summary": "Designer."}})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"summary": "Polished summary.", "fallback": False})
        self.assertEqual(response.headers["cache-control"], "no-store")

    def test_error_is_not_cached(self):
        response = self.client.post("/api/ai", json={"action": "bogus", "payload": {}})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Unsupported AI action."})
        self.assertEqual(response.headers["cache-control"], "no-store")

    def test_body_must_be_object(self):
        response = self.client.post("/api/ai", json=["enhance-summary"])
        self.assertEqual(response.status_code, 400)

    def test_body_must_be_json(self):
        response = self.client.post("/api/ai", content=b"not json", headers={"Content-Type": "application/json"})
        self.assertEqual(response.status_code, 400)

    def test_health(self):
        response = self.client.get("/healthz")
        self.assertEqual(response.json(), {"ok": True, "aiConfigured": True})


class TestConcurrentRequests(unittest.IsolatedAsyncioTestCase):
    async def test_slow_provider_does_not_block_other_requests(self):
        def slow(**kwargs):
            time.sleep(0.5)
            return SimpleNamespace(text="Polished summary.")

        gemini = MagicMock()
        gemini.models.generate_content.side_effect = slow
        adapter = ProviderAdapter(Settings(gemini_api_key="managed-key"), gemini_client=gemini)
        app = create_app(adapter.settings, adapter)

        body = {"action": "enhance-summary", "payload": {"summary": "Designer."}}
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            started = time.monotonic()
            first, second, health = await asyncio.gather(
                client.post("/api/ai", json=body),
                client.post("/api/ai", json=body),
                client.get("/healthz"),
            )
            elapsed = time.monotonic() - started

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(health.status_code, 200)
        self.assertLess(elapsed, 0.9)


class TestUnconfiguredServer(ServerTestCase):
    api_key = ""

    def test_not_configured(self):
        response = self.client.post("/api/ai", json={"action": "enhance-summary", "payload": {"summary": ""}})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"error": "AI service is not configured."})

    def test_forwarded_config(self):
        response = self.client.post("/api/ai", json={
            "action": "enhance-summary",
            "payload": {"summary": "Designer."},
            "config": {"provider": "gemini", "apiKey": "user-key"},
        })
        self.assertEqual(response.status_code, 200)

    def test_health(self):
        self.assertFalse(self.client.get("/healthz").json()["aiConfigured"])


class TestExportEndpoint(ServerTestCase):
    def test_export_docx(self):
        response = self.client.post("/api/export", json={"cv": default_cv().to_dict()})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], DOCX_MEDIA_TYPE)
        self.assertIn("attachment", response.headers["content-disposition"])
        text = "\n".join(p.text for p in Document(io.BytesIO(response.content)).paragraphs)
        self.assertIn("Jordan Smith", text)

    def test_export_letter(self):
        response = self.client.post("/api/export", json={
            "cv": default_cv().to_dict(),
            "letter": "Dear Hiring Manager,\n\nI am applying.",
        })
        self.assertEqual(response.status_code, 200)
        self.assertIn("motivation-letter.docx", response.headers["content-disposition"])
        text = [p.text for p in Document(io.BytesIO(response.content)).paragraphs]
        self.assertIn("Dear Hiring Manager,", text)
        self.assertIn("I am applying.", text)

    def test_letter_must_be_string(self):
        response = self.client.post("/api/export", json={"cv": default_cv().to_dict(), "letter": ["x"]})
        self.assertEqual(response.status_code, 400)

    def test_invalid_cv(self):
        response = self.client.post("/api/export", json={"cv": {"personal": {"fullName": "X"}}})
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["error"].startswith("Invalid CV data: personal.email"))

    def test_bad_photo(self):
        response = self.client.post("/api/export", json={
            "cv": default_cv().to_dict(),
            "photo": base64.b64encode(b"not an image").decode() + "!!",
        })
        self.assertEqual(response.status_code, 400)


if __name__ == '__main__':
    unittest.main()
