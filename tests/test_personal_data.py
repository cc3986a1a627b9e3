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

from resume_pipeline import personal_data
from resume_pipeline.models import ExtractedPersonalData


SAMPLE_RESUME = """Jane Smith
jane.smith@mail.com | +1 415 555 0100
linkedin.com/in/janesmith | https://github.com/jsmith | janesmith.dev
DOB: 12/04/1990
123 Main Street, Springfield, IL 62701

Skills: Go, Python, SQL

Experience
Senior Engineer at Acme
"""


class TestExtractPersonalData(unittest.TestCase):
    def test_full_sample(self):
        data = personal_data.extract_personal_data(SAMPLE_RESUME, "resume.pdf")
        self.assertEqual(data.full_name, "Jane Smith")
        self.assertEqual(data.email, "jane.smith@mail.com")
        self.assertEqual(data.mobile, "+14155550100")
        self.assertEqual(data.linkedin, "linkedin.com/in/janesmith")
        self.assertEqual(data.github, "github.com/jsmith")
        self.assertEqual(data.portfolio, "janesmith.dev")
        self.assertEqual(data.date_of_birth, "12/04/1990")
        self.assertIn("123 Main Street", data.address)
        self.assertEqual(data.skills, "Go, Python, SQL")

    def test_empty_text_gives_all_none(self):
        data = personal_data.extract_personal_data("")
        self.assertEqual(data, ExtractedPersonalData())

    def test_none_text_gives_all_none(self):
        data = personal_data.extract_personal_data(None)
        self.assertIsNone(data.full_name)
        self.assertIsNone(data.skills)

    def test_odd_input_never_raises(self):
        for text in ("@@@@", "\n\n\n", "+" * 500, "Skills:", "{}[]()", "\x00\x01"):
            personal_data.extract_personal_data(text, "???.pdf")

    def test_failing_strategy_leaves_field_none(self):
        def broken(text):
            raise RuntimeError("boom")

        with patch.object(personal_data, "extract_address", broken):
            data = personal_data.extract_personal_data(SAMPLE_RESUME)
        self.assertIsNone(data.address)
        self.assertEqual(data.email, "jane.smith@mail.com")


class TestNameStrategies(unittest.TestCase):
    def test_filename_backed_by_body(self):
        text = "Curriculum Vitae\nJohn Doe\njohn@example.com"
        self.assertEqual(personal_data.name_from_filename("John_Doe_Resume_2026.pdf", text), "John Doe")

    def test_filename_camel_case(self):
        text = "resume of john doe"
        self.assertEqual(personal_data.name_from_filename("JohnDoeCV.pdf", text), "John Doe")

    def test_filename_rejected_without_overlap(self):
        self.assertIsNone(personal_data.name_from_filename("Resume_Final.pdf", "Maria Garcia\nData Analyst"))
        self.assertIsNone(personal_data.name_from_filename("Alex_Morgan.pdf", "Maria Garcia\nData Analyst"))

    def test_extract_name_falls_back_to_body(self):
        text = "Maria Garcia\nData Analyst\nmaria@example.com"
        self.assertEqual(personal_data.extract_name(text, "Resume_Final.pdf"), "Maria Garcia")

    def test_leading_words_skips_headers(self):
        self.assertIsNone(personal_data.name_from_leading_words("Resume Of Someone\nmore"))
        self.assertEqual(personal_data.name_from_leading_words("  Ada Lovelace\nMathematician"), "Ada Lovelace")

    def test_leading_words_stays_on_first_line(self):
        self.assertIsNone(personal_data.name_from_leading_words("Ada\nLovelace"))

    def test_name_before_email_label(self):
        text = "CURRICULUM VITAE\nPriya Sharma\nEmail: priya@example.com"
        self.assertEqual(personal_data.name_before_email_label(text), "Priya Sharma")

    def test_name_before_email(self):
        text = "PROFILE 2024\n\nKenji Watanabe\nkenji.w@example.com"
        self.assertEqual(personal_data.name_before_email(text, "kenji.w@example.com"), "Kenji Watanabe")

    def test_name_before_email_without_email(self):
        self.assertIsNone(personal_data.name_before_email("Kenji Watanabe", None))

    def test_first_lines(self):
        text = "RESUME\nOBJECTIVE: grow\nlena fischer\n"
        self.assertEqual(personal_data.name_from_first_lines(text), "lena fischer")

    def test_no_name_found(self):
        self.assertIsNone(personal_data.extract_name("1234 5678\n!!!!", None, None))


class TestPhones(unittest.TestCase):
    def test_same_number_twice_is_deduplicated(self):
        text = "Call +1 (415) 555-0100 or 415-555-0100"
        self.assertEqual(personal_data.extract_phones(text), "+14155550100")

    def test_two_distinct_numbers(self):
        text = "+91 98765 43210\n+1 415 555 0100"
        self.assertEqual(personal_data.extract_phones(text), "+919876543210, +14155550100")

    def test_at_most_two(self):
        text = "+919876543210 +14155550100 +442071234567"
        self.assertEqual(len(personal_data.extract_phones(text).split(", ")), 2)

    def test_no_phone(self):
        self.assertIsNone(personal_data.extract_phones("no digits here"))


class TestLinks(unittest.TestCase):
    def test_portfolio_ignores_email_domain(self):
        text = "jane@acme.com\nlinkedin.com/in/jane"
        self.assertIsNone(personal_data.extract_portfolio(text))

    def test_portfolio_ignores_webmail(self):
        self.assertIsNone(personal_data.extract_portfolio("see www.gmail.com"))

    def test_portfolio_strips_scheme(self):
        self.assertEqual(personal_data.extract_portfolio("Site: https://www.jane.io/"), "jane.io/")

    def test_linkedin_normalized(self):
        text = "https://www.LinkedIn.com/in/jane-doe-1/"
        self.assertEqual(personal_data.extract_linkedin(text), "linkedin.com/in/jane-doe-1")

    def test_date_of_birth_formats(self):
        self.assertEqual(personal_data.extract_date_of_birth("Date of Birth: 5 March 1992"), "5 March 1992")
        self.assertEqual(personal_data.extract_date_of_birth("Born: July 4, 1990"), "July 4, 1990")
        self.assertIsNone(personal_data.extract_date_of_birth("no birthday"))


class TestSkills(unittest.TestCase):
    def test_merged_tokens_are_split(self):
        skills = personal_data.extract_skills("Skills: C++JavaPython")
        self.assertEqual(skills, "C++, Java, Python")

    def test_region_stops_at_next_section(self):
        text = "Technical Skills:\nDocker • Kubernetes | Terraform\nExperience\nBuilt things, shipped stuff"
        self.assertEqual(personal_data.extract_skills(text), "Docker, Kubernetes, Terraform")

    def test_stop_words_sentences_and_duplicates_dropped(self):
        skills = personal_data.split_skills("Python, python, and, Led a team of five engineers., SQL")
        self.assertEqual(skills, ["Python", "SQL"])

    def test_capped(self):
        region = ", ".join(f"tool{chr(97 + i % 26)}{chr(97 + i // 26)}" for i in range(100))
        self.assertEqual(len(personal_data.split_skills(region)), personal_data.MAX_SKILLS)

    def test_no_skills_header(self):
        self.assertIsNone(personal_data.extract_skills("Experience\nEngineer"))


if __name__ == '__main__':
    unittest.main()
