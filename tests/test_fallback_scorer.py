import unittest
from datetime import datetime, timezone

from skillpath.schemas.assessment import AssessmentInput
from skillpath.scoring.aggregate import aggregate
from skillpath.scoring.fallback import fallback_base_score, score_fallback

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)


class FallbackScorerTests(unittest.TestCase):
    def test_resume_end_to_end(self):
        payload = AssessmentInput(resume_text="5 years, Python, React, 架构设计")
        # programming, system and experience buckets plus the 3+ years bonus: 45 + 24 + 15 -> clamped to 75
        self.assertEqual(fallback_base_score(payload), 75)
        result = score_fallback(payload, now=NOW)
        self.assertLessEqual(result.overall_score, 75)
        self.assertEqual(result.dimensions["programming"].score, 83)
        self.assertEqual(result.metadata.confidence, 0.6)
        self.assertEqual(result.metadata.assessment_method, "resume")

    def test_bounds_hold_across_inputs(self):
        inputs = [
            AssessmentInput(resume_text="x"),
            AssessmentInput(resume_text="I like cooking"),
            AssessmentInput(resume_text="1 year of java, leetcode, project work, system design"),
            AssessmentInput(questionnaire={"q1": "yes"}),
            AssessmentInput(questionnaire={f"q{i}": "answer" for i in range(12)}),
            AssessmentInput(resume_text="10 years python architecture", questionnaire={"q1": "a", "q2": "b"}),
        ]
        for payload in inputs:
            result = score_fallback(payload, now=NOW)
            self.assertGreaterEqual(result.overall_score, 30)
            self.assertLessEqual(result.overall_score, 75)
            self.assertEqual(result.overall_score, aggregate(result.dimensions))
            self.assertEqual(result.metadata.confidence, 0.6)

    def test_questionnaire_bonus_is_capped(self):
        few = AssessmentInput(questionnaire={"q1": "yes", "q2": "", "q3": None})
        many = AssessmentInput(questionnaire={f"q{i}": "answer" for i in range(20)})
        self.assertEqual(fallback_base_score(few), 50)
        self.assertEqual(fallback_base_score(many), 70)

    def test_years_bonus_tiers(self):
        self.assertEqual(fallback_base_score(AssessmentInput(resume_text="2 years")), 45 + 8 + 10)
        self.assertEqual(fallback_base_score(AssessmentInput(resume_text="3年")), 45 + 8 + 15)

    def test_deterministic_for_same_input(self):
        payload = AssessmentInput(resume_text="Built a Vue app, 2 years experience")
        self.assertEqual(score_fallback(payload, now=NOW), score_fallback(payload, now=NOW))

    def test_method_follows_input(self):
        mixed = AssessmentInput(resume_text="python", questionnaire={"q": "a"})
        self.assertEqual(score_fallback(mixed, now=NOW).metadata.assessment_method, "mixed")
        questionnaire = AssessmentInput(questionnaire={"q": "a"})
        self.assertEqual(score_fallback(questionnaire, now=NOW).metadata.assessment_method, "questionnaire")

    def test_report_messages_are_banded(self):
        low = score_fallback(AssessmentInput(resume_text="hello"), now=NOW)
        self.assertIn("Study data structures systematically", low.report.improvements)
        high = score_fallback(AssessmentInput(resume_text="5 years, Python, React, 架构设计"), now=NOW)
        self.assertIn("Solid programming foundation", high.report.strengths)
        self.assertIn("Go deeper into system design and architecture", high.report.recommendations)


if __name__ == "__main__":
    unittest.main()
