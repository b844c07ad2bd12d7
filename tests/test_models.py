
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

from cv_builder.errors import RECOVERABLE_ERRORS, ProviderTimeoutError, SchemaError
from cv_builder.models import AIConfig, InternshipContext


class TestAIConfig(unittest.TestCase):
    def test_absent_config(self):
        self.assertIsNone(AIConfig.from_dict(None))
        self.assertIsNone(AIConfig.from_dict({}))
        self.assertIsNone(AIConfig.from_dict("openrouter"))

    def test_wire_record(self):
        config = AIConfig.from_dict({"provider": " OpenRouter ", "apiKey": "k", "model": "m", "siteUrl": 5})
        self.assertEqual(config, AIConfig(provider="openrouter", api_key="k", model="m"))
        self.assertTrue(config.is_alternate)
        self.assertEqual(config.to_dict(), {"provider": "openrouter", "apiKey": "k", "model": "m"})

    def test_unknown_provider_is_default(self):
        config = AIConfig.from_dict({"provider": "mystery", "apiKey": "k"})
        self.assertEqual(config.provider, "default")
        self.assertFalse(config.is_alternate)


class TestInternshipContext(unittest.TestCase):
    def test_requires_text(self):
        self.assertIsNone(InternshipContext.from_dict({"companyEmail": "a@b.c"}))
        self.assertIsNone(InternshipContext.from_dict(None))

    def test_round_trip(self):
        context = InternshipContext("Acme internship", company_email="jobs@acme.test")
        self.assertEqual(InternshipContext.from_dict(context.to_dict()), context)


class TestErrors(unittest.TestCase):
    def test_timeout_is_recoverable_provider_error(self):
        self.assertIsInstance(ProviderTimeoutError("slow"), RECOVERABLE_ERRORS)
        self.assertEqual(ProviderTimeoutError("slow").kind, "TIMEOUT")
        self.assertEqual(ProviderTimeoutError("slow").status, 422)

    def test_schema_error_message(self):
        error = SchemaError("personal.email", "Add a valid email")
        self.assertEqual(error.message, "personal.email: Add a valid email")
        self.assertEqual(error.kind, "SCHEMA")


if __name__ == '__main__':
    unittest.main()
