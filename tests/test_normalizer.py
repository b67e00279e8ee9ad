"""
Unittest suite for the document normalizer.

These tests run the normalizer against a small ruleset (see
``conftest.RULES``) with a fixed reference date so that "Present" in a
date range always resolves to January 2024.
"""

from __future__ import annotations

import unittest

from conftest import JOB_TEXT, RULES, TODAY

from cvrank.config import build_ruleset
from cvrank.errors import InsufficientTextError
from cvrank.normalize import EducationLevel, Normalizer, extract_contact, normalize
from cvrank.normalize.contact import name_from_filename
from cvrank.normalize.experience import extract_experience


class TestSkillExtraction(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.normalizer = Normalizer(build_ruleset(RULES), today=TODAY)

    def skills(self, text: str):
        return self.normalizer.normalize(text).skills

    def test_synonyms_are_folded(self) -> None:
        text = "Full stack work with JS on the frontend and NodeJS services, plus PostgreSQL."
        self.assertEqual(self.skills(text), {"JavaScript", "Node.js", "SQL"})

    def test_dotted_name_is_not_split(self) -> None:
        text = "Built APIs in Node.js and deployed them with Docker on Linux hosts daily."
        self.assertEqual(self.skills(text), {"Node.js", "Docker"})

    def test_symbols_and_prefixes(self) -> None:
        text = "Low latency systems in C++ and backend services in Java for trading."
        self.assertEqual(self.skills(text), {"C++", "Java"})

    def test_case_insensitive(self) -> None:
        text = "PYTHON developer with strong sql skills and machine learning experience."
        self.assertEqual(self.skills(text), {"Python", "SQL", "Machine Learning"})

    def test_unknown_terms_are_dropped(self) -> None:
        text = "Decades of Fortran and COBOL maintenance on mainframes for an insurer."
        self.assertEqual(self.skills(text), frozenset())

    def test_job_description_features(self) -> None:
        features = self.normalizer.normalize(JOB_TEXT)
        self.assertEqual(features.skills, {"Python", "SQL"})
        self.assertEqual(features.required_years, 3.0)
        self.assertEqual(features.titles, ())


class TestInsufficientText(unittest.TestCase):
    def test_empty_and_short_text_fail(self) -> None:
        ruleset = build_ruleset(RULES)
        for text in ("", "   \n  ", "Python, SQL"):
            with self.assertRaises(InsufficientTextError):
                normalize(text, ruleset, today=TODAY)

    def test_error_reports_lengths(self) -> None:
        with self.assertRaises(InsufficientTextError) as ctx:
            normalize("  Python  ", build_ruleset(RULES), today=TODAY)
        self.assertEqual(ctx.exception.length, 6)
        self.assertEqual(ctx.exception.minimum, 50)


class TestExperienceExtraction(unittest.TestCase):
    def test_ranges_are_summed(self) -> None:
        text = (
            "Software Engineer, Acme Corp\n"
            "Jan 2015 - Dec 2019\n"
            "Backend Developer, Beta Inc\n"
            "2020 - Present\n"
        )
        estimate = extract_experience(text, today=TODAY)
        self.assertTrue(estimate.known)
        self.assertAlmostEqual(estimate.years, 8.9)

    def test_overlapping_ranges_are_merged(self) -> None:
        text = "Acme: Jan 2018 - Dec 2019. Side project: Jan 2019 - Dec 2020."
        self.assertAlmostEqual(extract_experience(text, today=TODAY).years, 2.9)

    def test_numeric_ranges(self) -> None:
        text = "Analyst, 03/2017 - 03/2020"
        self.assertAlmostEqual(extract_experience(text, today=TODAY).years, 3.0)

    def test_duration_phrase(self) -> None:
        text = "Seasoned engineer with 7+ years of experience in backend development."
        estimate = extract_experience(text, today=TODAY)
        self.assertEqual(estimate.years, 7.0)
        self.assertTrue(estimate.known)

    def test_maximum_plausible_value_wins(self) -> None:
        text = "Over 10 years in software. Most recent role: Jan 2021 - Dec 2022."
        self.assertEqual(extract_experience(text, today=TODAY).years, 10.0)

    def test_implausible_values_are_ignored(self) -> None:
        text = "Worked 75 years at the same company, from 2030 - 2035."
        self.assertFalse(extract_experience(text, today=TODAY).known)

    def test_age_is_not_experience(self) -> None:
        text = "Jane Roe, 25 years old, eager to learn and grow in a friendly team."
        estimate = extract_experience(text, today=TODAY)
        self.assertFalse(estimate.known)
        self.assertEqual(estimate.years, 0.0)

    def test_no_evidence_is_unknown(self) -> None:
        features = normalize(
            "Curious and motivated graduate looking for a first role in a great team.",
            build_ruleset(RULES),
            today=TODAY,
        )
        self.assertFalse(features.experience_known)
        self.assertEqual(features.experience_years, 0.0)


class TestTitlesAndEducation(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.normalizer = Normalizer(build_ruleset(RULES), today=TODAY)

    def test_titles_in_order_of_appearance(self) -> None:
        text = (
            "Senior Software Engineer at Initech since 2021. "
            "Previously a Software Developer at Globex."
        )
        self.assertEqual(
            self.normalizer.normalize(text).titles,
            ("Senior Software Engineer", "Software Engineer"),
        )

    def test_highest_degree_wins(self) -> None:
        text = "B.Sc in Physics, then a Master of Science in Computer Science from State U."
        self.assertEqual(self.normalizer.normalize(text).education_level, EducationLevel.MASTER)

    def test_no_degree(self) -> None:
        text = "Self taught programmer who has shipped several products to production."
        self.assertEqual(self.normalizer.normalize(text).education_level, EducationLevel.NONE)

    def test_normalization_is_deterministic(self) -> None:
        text = "Software Engineer with Python and SQL, Jan 2019 - Present, Bachelor of Science."
        self.assertEqual(self.normalizer.normalize(text), self.normalizer.normalize(text))


class TestContactExtraction(unittest.TestCase):
    def test_name_email_and_phone(self) -> None:
        text = (
            "Jane Doe\n"
            "jane.doe@example.com\n"
            "+1 (555) 123-4567\n"
            "Experienced engineer."
        )
        contact = extract_contact(text, "upload.txt")
        self.assertEqual(contact.name, "Jane Doe")
        self.assertEqual(contact.email, "jane.doe@example.com")
        self.assertEqual(contact.phone, "+1 (555) 123-4567")

    def test_name_falls_back_to_filename(self) -> None:
        text = "experienced engineer with a passion for building reliable systems."
        contact = extract_contact(text, "john_smith_resume.pdf")
        self.assertEqual(contact.name, "John Smith")
        self.assertIsNone(contact.email)
        self.assertIsNone(contact.phone)
        self.assertIsNone(contact.linkedin)

    def test_linkedin_profile(self) -> None:
        text = "Jane Doe\nProfile: https://www.linkedin.com/in/jane-doe-42/\nExperienced engineer."
        contact = extract_contact(text, "upload.txt")
        self.assertEqual(contact.linkedin, "https://www.linkedin.com/in/jane-doe-42")

    def test_filename_noise_removed(self) -> None:
        self.assertEqual(name_from_filename("CV-maria-garcia-final.docx"), "Maria Garcia")


if __name__ == "__main__":
    unittest.main()
