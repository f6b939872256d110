import unittest

from skillpath.schemas.assessment import DimensionAssessment, SkillScore
from skillpath.scoring.aggregate import ScoreLevel, aggregate, classify_level, round_half_up
from skillpath.scoring.skill_score import coerce_skill, confidence_of, is_inferred, score_of


class SkillAccessorTests(unittest.TestCase):
    def test_bare_number_and_object_agree(self):
        bare = 72.0
        obj = SkillScore(score=72, confidence=1.0, is_inferred=False)
        self.assertEqual(score_of(bare), score_of(obj))
        self.assertEqual(confidence_of(bare), confidence_of(obj))
        self.assertEqual(is_inferred(bare), is_inferred(obj))

    def test_low_confidence_marks_skill_inferred(self):
        self.assertTrue(is_inferred(SkillScore(score=50, confidence=0.5, is_inferred=False)))
        self.assertFalse(is_inferred(SkillScore(score=50, confidence=0.7, is_inferred=False)))
        self.assertTrue(is_inferred(SkillScore(score=50, confidence=0.95, is_inferred=True)))

    def test_skill_score_clamps_out_of_range_values(self):
        skill = SkillScore(score=140, confidence=1.7)
        self.assertEqual(skill.score, 100)
        self.assertEqual(skill.confidence, 1.0)

    def test_coerce_skill_handles_unusable_values(self):
        self.assertEqual(coerce_skill("excellent"), 0.0)
        self.assertEqual(coerce_skill(None), 0.0)
        self.assertEqual(coerce_skill(True), 0.0)
        self.assertEqual(coerce_skill(-5), 0.0)
        coerced = coerce_skill({"score": 64, "confidence": 0.4, "isInferred": False})
        self.assertIsInstance(coerced, SkillScore)
        self.assertTrue(is_inferred(coerced))


class AggregateTests(unittest.TestCase):
    def test_level_boundaries(self):
        expected = {
            0: ScoreLevel.NOVICE,
            20: ScoreLevel.NOVICE,
            21: ScoreLevel.BEGINNER,
            40: ScoreLevel.BEGINNER,
            41: ScoreLevel.INTERMEDIATE,
            60: ScoreLevel.INTERMEDIATE,
            61: ScoreLevel.ADVANCED,
            80: ScoreLevel.ADVANCED,
            81: ScoreLevel.EXPERT,
            100: ScoreLevel.EXPERT,
        }
        for score, level in expected.items():
            self.assertIs(classify_level(score), level, score)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(82.5), 83)
        self.assertEqual(round_half_up(52.5), 53)
        self.assertEqual(round_half_up(74.9), 75)
        self.assertEqual(round_half_up(30.15), 30)

    def test_aggregate_is_rounded_weighted_sum(self):
        dims = {
            "programming": DimensionAssessment(score=80, weight=0.3),
            "algorithm": DimensionAssessment(score=55, weight=0.2),
            "project": DimensionAssessment(score=70, weight=0.25),
            "systemDesign": DimensionAssessment(score=40, weight=0.15),
            "communication": DimensionAssessment(score=65, weight=0.1),
        }
        # 24 + 11 + 17.5 + 6 + 6.5 = 65.0
        self.assertEqual(aggregate(dims), 65)


if __name__ == "__main__":
    unittest.main()
