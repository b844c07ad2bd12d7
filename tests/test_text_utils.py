
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

from cv_builder import text_utils
from cv_builder.errors import ExtractionError


class TestJsonRecovery(unittest.TestCase):
    def test_extracts_object_from_chatty_fenced_answer(self):
        text = 'Here is the result:\n```json\n{"a":1}\n```\nThanks!'
        self.assertEqual(text_utils.extract_json_object(text), '{"a":1}')

    def test_no_object_raises(self):
        with self.assertRaises(ExtractionError):
            text_utils.extract_json_object("no json here")

    def test_strip_code_fences(self):
        self.assertEqual(text_utils.strip_code_fences('```json\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(text_utils.strip_code_fences("  plain  "), "plain")

    def test_nested_braces_kept(self):
        text = '{"personal": {"fullName": "Ada"}} trailing'
        self.assertEqual(text_utils.extract_json_object(text), '{"personal": {"fullName": "Ada"}}')


class TestBullets(unittest.TestCase):
    def test_sanitize_bullet(self):
        self.assertEqual(text_utils.sanitize_bullet("- Led the team"), "Led the team")
        self.assertEqual(text_utils.sanitize_bullet("2. Shipped   the  product"), "Shipped the product")
        self.assertEqual(text_utils.sanitize_bullet("•  Cut costs"), "Cut costs")

    def test_strip_list_marker_keeps_numbers(self):
        self.assertEqual(text_utils.strip_list_marker("- 35% faster   deploys"), "35% faster deploys")
        self.assertEqual(text_utils.strip_list_marker("• 3D modelling"), "3D modelling")
        self.assertEqual(text_utils.strip_list_marker("2. Shipped"), "2. Shipped")

    def test_split_bullets_filters_and_caps(self):
        text = "- Led a team of five\n- ok\n\n* Shipped the product\n- Built one\n- Built two\n- Built three\n- Built four"
        bullets = text_utils.split_bullets(text)
        self.assertEqual(bullets[:2], ["Led a team of five", "Shipped the product"])
        self.assertEqual(len(bullets), 5)
        self.assertNotIn("ok", bullets)


class TestKeywords(unittest.TestCase):
    def test_extract_keywords_cap_and_order(self):
        text = "Python python Docker and the Kubernetes data-driven teams with AWS experience"
        keywords = text_utils.extract_keywords(text, 5)
        self.assertEqual(keywords, ["python", "docker", "kubernetes", "data", "driven"])

    def test_extract_keywords_rules(self):
        keywords = text_utils.extract_keywords("SQL, Go and Rust; leadership LEADERSHIP")
        self.assertEqual(keywords, ["rust", "leadership"])
        for keyword in keywords:
            self.assertEqual(keyword, keyword.lower())
            self.assertGreater(len(keyword), 3)

    def test_parse_keyword_list(self):
        keywords = text_utils.parse_keyword_list("Python, SQL; Data Analysis\n- Leadership, python")
        self.assertEqual(keywords, ["python", "sql", "data analysis", "leadership"])

    def test_parse_keyword_list_cap(self):
        text = ", ".join(f"skill{i}" for i in range(30))
        self.assertEqual(len(text_utils.parse_keyword_list(text, 20)), 20)


class TestSkills(unittest.TestCase):
    def test_title_case(self):
        self.assertEqual(text_utils.title_case("data analysis"), "Data Analysis")
        self.assertEqual(text_utils.title_case("aWS"), "AWS")

    def test_merge_skills_puts_new_first(self):
        merged = text_utils.merge_skills(["Figma", "python"], ["python", "data analysis"])
        self.assertEqual(merged, ["Python", "Data Analysis", "Figma"])

    def test_merge_skills_cap(self):
        merged = text_utils.merge_skills([f"old{i}" for i in range(20)], ["new"])
        self.assertEqual(len(merged), 18)
        self.assertEqual(merged[0], "New")


if __name__ == '__main__':
    unittest.main()
