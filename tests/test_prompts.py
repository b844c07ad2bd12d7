
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
import unittest

from cv_builder import prompts
from cv_builder.schema import default_cv


class TestPrompts(unittest.TestCase):
    def setUp(self):
        self.cv = default_cv()

    def test_prompts_are_deterministic(self):
        self.assertEqual(prompts.ats_optimization_prompt(self.cv), prompts.ats_optimization_prompt(self.cv))
        self.assertEqual(
            prompts.motivation_letter_prompt(self.cv, "Designer", "fr"),
            prompts.motivation_letter_prompt(self.cv, "Designer", "fr"),
        )

    def test_summary_prompt_context_optional(self):
        with_context = prompts.summary_enhancement_prompt("I design things.", "Product Designer")
        without = prompts.summary_enhancement_prompt("I design things.")
        self.assertIn("You are a career coach", with_context)
        self.assertIn("Context: Product Designer", with_context)
        self.assertNotIn("Context:", without)
        self.assertIn('"""I design things."""', without)

    def test_experience_prompt_lists_keywords(self):
        entry = self.cv.experience[0]
        prompt = prompts.experience_enhancement_prompt(entry, "Need Figma skills", ["figma", "research"])
        self.assertIn("Priority keywords: figma, research", prompt)
        self.assertIn(f"Company: {entry.company}", prompt)
        self.assertIn("Need Figma skills", prompt)
        self.assertNotIn("Priority keywords", prompts.experience_enhancement_prompt(entry))

    def test_keyword_prompt(self):
        prompt = prompts.keyword_extraction_prompt("Senior Python developer")
        self.assertIn("comma-separated list", prompt)
        self.assertTrue(prompt.endswith("Senior Python developer"))

    def test_import_prompt_embeds_example_and_text(self):
        prompt = prompts.cv_import_prompt("Ada Lovelace\nEngineer")
        self.assertIn("expert resume parser", prompt)
        self.assertIn(json.dumps(prompts.CV_IMPORT_EXAMPLE, indent=2), prompt)
        self.assertIn("Ada Lovelace\nEngineer", prompt)

    def test_ats_prompt_embeds_cv(self):
        prompt = prompts.ats_optimization_prompt(self.cv)
        self.assertIn("ATS (Applicant Tracking System)", prompt)
        self.assertIn('"fullName": "Jordan Smith"', prompt)
        self.assertIn("Keep all IDs unchanged", prompt)

    def test_letter_language(self):
        self.assertIn("Generate the letter in FRENCH", prompts.motivation_letter_prompt(self.cv, "Designer", "fr"))
        english = prompts.motivation_letter_prompt(self.cv, "Designer")
        self.assertIn("Generate the letter in ENGLISH", english)
        self.assertIn("- Lead Product Designer at Flowly", english)

    def test_internship_prompts(self):
        subjects = prompts.internship_subjects_prompt("Internship at Acme", self.cv)
        self.assertIn("Internship at Acme", subjects)
        self.assertIn("- Name: Jordan Smith", subjects)
        self.assertNotIn("- Email:", subjects)

        emails = prompts.internship_emails_prompt("Internship at Acme", self.cv, "Design systems audit")
        self.assertIn("SELECTED INTERNSHIP SUBJECT: Design systems audit", emails)
        self.assertIn("- Email: jordan.smith@example.com", emails)


if __name__ == '__main__':
    unittest.main()
