
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

import json
import threading
import unittest
from unittest.mock import MagicMock, patch

from cv_builder import fallbacks
from cv_builder.assistant import CVAssistant
from cv_builder.errors import (
    ExtractionError,
    NotConfiguredError,
    ProcessingError,
    ProviderError,
    ProviderTimeoutError,
    ValidationError,
)
from cv_builder.models import InternshipContext
from cv_builder.schema import default_cv


class AssistantTestCase(unittest.TestCase):
    def setUp(self):
        self.assistant = CVAssistant(MagicMock(), max_workers=4)
        self.cv = default_cv()


class TestEnhanceSummary(AssistantTestCase):
    def test_ai_answer(self):
        with patch.object(self.assistant, '_call_llm', return_value="  Sharper summary.  ") as call:
            result = self.assistant.enhance_summary("Designer.", "Product Designer")
        self.assertEqual(result.value, "Sharper summary.")
        self.assertFalse(result.fallback)
        self.assertIn("Context: Product Designer", call.call_args[0][0])

    def test_provider_failure_falls_back(self):
        for error in (ProviderError("down"), ProviderTimeoutError("slow"), ExtractionError("bad")):
            with patch.object(self.assistant, '_call_llm', side_effect=error):
                result = self.assistant.enhance_summary("Designer.")
            self.assertTrue(result.fallback)
            self.assertEqual(result.value, fallbacks.fallback_summary("Designer."))

    def test_empty_answer_falls_back(self):
        with patch.object(self.assistant, '_call_llm', return_value="   "):
            result = self.assistant.enhance_summary("Designer.")
        self.assertTrue(result.fallback)
        self.assertTrue(result.value.startswith("Designer."))

    def test_empty_summary_rejected(self):
        with patch.object(self.assistant, '_call_llm') as call:
            with self.assertRaises(ValidationError):
                self.assistant.enhance_summary("  ")
        call.assert_not_called()

    def test_not_configured_propagates(self):
        with patch.object(self.assistant, '_call_llm', side_effect=NotConfiguredError("no key")):
            with self.assertRaises(NotConfiguredError):
                self.assistant.enhance_summary("Designer.")


class TestEnhanceExperience(AssistantTestCase):
    def test_only_highlights_change(self):
        entry = self.cv.experience[0]
        answer = "Here you go:\n- Scaled the design system to 6 products\n- Mentored five designers weekly"
        with patch.object(self.assistant, '_call_llm', return_value=answer):
            result = self.assistant.enhance_experience(entry, "Design systems lead")
        self.assertFalse(result.fallback)
        self.assertEqual(result.value.id, entry.id)
        self.assertEqual(result.value.company, entry.company)
        self.assertEqual(result.value.highlights[-2:], [
            "Scaled the design system to 6 products",
            "Mentored five designers weekly",
        ])

    def test_caps_highlights(self):
        answer = "\n".join(f"- Achievement number {i}" for i in range(8))
        with patch.object(self.assistant, '_call_llm', return_value=answer):
            result = self.assistant.enhance_experience(self.cv.experience[0])
        self.assertEqual(len(result.value.highlights), 5)

    def test_failure_falls_back(self):
        entry = self.cv.experience[1]
        with patch.object(self.assistant, '_call_llm', side_effect=ProviderError("down")):
            result = self.assistant.enhance_experience(entry, "Analytics research")
        self.assertTrue(result.fallback)
        self.assertEqual(result.value, fallbacks.fallback_experience(entry, ["analytics", "research"]))
        self.assertNotEqual(result.value.highlights, entry.highlights)


class TestAdaptCv(AssistantTestCase):
    def fake_llm(self, prompt, config=None):
        if "comma-separated list" in prompt:
            return "python, sql"
        if "Rewrite this professional summary" in prompt:
            return "Adapted summary."
        if "Company: Atlas HR" in prompt:
            raise ProviderError("entry failed")
        return "- Built Python pipelines for design data\n- Automated SQL reporting"

    def test_entries_fall_back_independently(self):
        with patch.object(self.assistant, '_call_llm', side_effect=self.fake_llm):
            result = self.assistant.adapt_cv(self.cv, "Python and SQL role")

        adapted = result.value
        self.assertTrue(result.fallback)
        self.assertEqual(adapted.personal.summary, "Adapted summary.")
        self.assertEqual([e.id for e in adapted.experience], ["cv_flowly", "cv_atlas"])
        self.assertEqual(adapted.experience[0].highlights, [
            "Built Python pipelines for design data",
            "Automated SQL reporting",
        ])
        self.assertTrue(all("demonstrating" in h for h in adapted.experience[1].highlights))
        self.assertEqual(adapted.skills[:2], ["Python", "Sql"])

    def test_everything_fails(self):
        with patch.object(self.assistant, '_call_llm', side_effect=ProviderError("down")):
            result = self.assistant.adapt_cv(self.cv, "Research leadership")
        self.assertTrue(result.fallback)
        self.assertEqual(result.value.personal.summary, self.cv.personal.summary)
        self.assertNotEqual(result.value.experience, self.cv.experience)
        self.assertIn("Research", result.value.skills)

    def test_empty_job_description(self):
        with patch.object(self.assistant, '_call_llm') as call:
            with self.assertRaises(ValidationError):
                self.assistant.adapt_cv(self.cv, "   ")
        call.assert_not_called()

    def test_entries_enhanced_concurrently(self):
        barrier = threading.Barrier(2, timeout=5)

        def llm(prompt, config=None):
            if "comma-separated list" in prompt:
                return "python"
            if "Current Experience Entry" in prompt:
                # both entries must be in flight at the same time to pass the barrier
                barrier.wait()
                return "- Shipped concurrent work"
            return "Summary."

        with patch.object(self.assistant, '_call_llm', side_effect=llm):
            result = self.assistant.adapt_cv(self.cv, "Python role")
        self.assertFalse(result.fallback)


class TestImportCv(AssistantTestCase):
    def test_structured_json_imported_directly(self):
        with patch.object(self.assistant, '_call_llm') as call:
            result = self.assistant.import_cv(json.dumps(self.cv.to_dict()))
        call.assert_not_called()
        self.assertEqual(result.value, self.cv)
        self.assertEqual(result.message, "Structured CV data imported directly.")

    def test_ai_import_repairs_and_assigns_ids(self):
        answer = json.dumps({
            "personal": {"fullName": "Ada Lovelace", "email": None, "title": None},
            "experience": [{"role": "Analyst", "company": "Engines Ltd", "highlights": None}],
            "skills": None,
        })
        with patch.object(self.assistant, '_call_llm', return_value=f"```json\n{answer}\n```"):
            result = self.assistant.import_cv("Ada Lovelace, analyst at Engines Ltd")
        cv = result.value
        self.assertEqual(cv.personal.full_name, "Ada Lovelace")
        self.assertEqual(cv.personal.email, "candidate@example.com")
        self.assertEqual(cv.experience[0].id, "ai_experience_0")
        self.assertEqual(cv.skills, [])

    def test_ai_failure_is_not_papered_over(self):
        for effect in (ProviderError("down"), None):
            kwargs = {"side_effect": effect} if effect else {"return_value": "I cannot do that."}
            with patch.object(self.assistant, '_call_llm', **kwargs):
                with self.assertRaises(ProcessingError):
                    self.assistant.import_cv("Some free text resume")


class TestOptimizeAts(AssistantTestCase):
    def test_ai_result_keeps_ids_and_identity(self):
        answer = self.cv.to_dict()
        answer["personal"]["fullName"] = ""
        for entry in answer["experience"]:
            entry.pop("id")
        answer["skills"] = ["ATS Friendly"]
        with patch.object(self.assistant, '_call_llm', return_value=json.dumps(answer)):
            result = self.assistant.optimize_ats(self.cv)
        self.assertFalse(result.fallback)
        self.assertEqual(result.value.personal.full_name, "Jordan Smith")
        self.assertEqual([e.id for e in result.value.experience], ["cv_flowly", "cv_atlas"])
        self.assertEqual(result.value.skills, ["ATS Friendly"])

    def test_unparsable_answer_falls_back(self):
        with patch.object(self.assistant, '_call_llm', return_value="Sorry, no JSON today"):
            result = self.assistant.optimize_ats(self.cv)
        self.assertTrue(result.fallback)
        self.assertEqual(result.value, fallbacks.fallback_optimize_ats(self.cv))


class TestMotivationLetter(AssistantTestCase):
    def test_ai_letter(self):
        letter = "Dear team,\n" + "I would love to join. " * 10
        with patch.object(self.assistant, '_call_llm', return_value=letter):
            result = self.assistant.generate_motivation_letter(self.cv, "UX Lead")
        self.assertFalse(result.fallback)
        self.assertEqual(result.value, letter.strip())

    def test_short_letter_falls_back(self):
        with patch.object(self.assistant, '_call_llm', return_value="Too short."):
            result = self.assistant.generate_motivation_letter(self.cv, "UX Lead", "fr")
        self.assertTrue(result.fallback)
        self.assertEqual(result.value, fallbacks.fallback_letter(self.cv, "UX Lead", "fr"))

    def test_language_checked(self):
        with self.assertRaises(ValidationError):
            self.assistant.generate_motivation_letter(self.cv, "UX Lead", "de")


class TestInternship(AssistantTestCase):
    def test_subjects_and_context(self):
        answer = json.dumps({
            "subjects": [{"subject": "Design system audit", "explanation": "Matches the CV."}],
            "companyEmail": "jobs@acme.test",
            "companyName": "null",
        })
        with patch.object(self.assistant, '_call_llm', return_value=answer):
            result = self.assistant.suggest_internship_subjects("Acme internship", self.cv)
        analysis = result.value
        self.assertEqual(analysis.subjects[0].subject, "Design system audit")
        self.assertEqual(analysis.context.internship_text, "Acme internship")
        self.assertEqual(analysis.context.company_email, "jobs@acme.test")
        self.assertIsNone(analysis.context.company_name)

    def test_subjects_have_no_fallback(self):
        for answer in ("not json", '{"subjects": []}', '{"subjects": [{"subject": "x"}]}'):
            with patch.object(self.assistant, '_call_llm', return_value=answer):
                with self.assertRaises(ProcessingError):
                    self.assistant.suggest_internship_subjects("Acme internship", self.cv)

    def test_emails(self):
        context = InternshipContext("Acme internship", company_email="jobs@acme.test")
        answer = '{"applicantEmail": "Subject: Hi", "companyEmail": "Subject: Reply"}'
        with patch.object(self.assistant, '_call_llm', return_value=answer) as call:
            result = self.assistant.generate_internship_emails(context, self.cv, "Design audit")
        self.assertIn("SELECTED INTERNSHIP SUBJECT: Design audit", call.call_args[0][0])
        self.assertEqual(result.value.to_dict(), {
            "applicantEmail": "Subject: Hi",
            "companyEmail": "Subject: Reply",
            "recipient": "jobs@acme.test",
        })

    def test_emails_failure(self):
        context = InternshipContext("Acme internship")
        with patch.object(self.assistant, '_call_llm', side_effect=ProviderError("down")):
            with self.assertRaises(ProcessingError):
                self.assistant.generate_internship_emails(context, self.cv, "Design audit")


if __name__ == '__main__':
    unittest.main()
