import json
import unittest

from factories import make_assessment

from skillpath.core.errors import InputContractError, TransportError
from skillpath.schemas.goals import NaturalLanguageInput
from skillpath.services.goal_service import REPHRASE_SUGGESTIONS, parse_natural_language_goal

GOAL_RESPONSE = {
    "success": True,
    "goals": [
        {
            "title": "Automate weekly Excel reports",
            "description": "Use Python to build and email the weekly sales report.",
            "category": "automation",
            "priority": 4,
            "difficulty": "beginner",
            "estimatedTimeWeeks": 6,
            "requiredSkills": ["python", "pandas"],
            "learningPath": [
                {"title": "Python basics", "type": "theory", "estimatedHours": 10},
                {"title": "pandas and openpyxl", "type": "practice", "estimatedHours": 12},
            ],
            "outcomes": ["Report runs unattended"],
            "confidence": 0.9,
        }
    ],
}


def _generator(response=None, error=None):
    prompts = []

    async def generate(prompt):
        prompts.append(prompt)
        if error is not None:
            raise error
        return response

    generate.prompts = prompts
    return generate


class GoalServiceTests(unittest.IsolatedAsyncioTestCase):
    async def test_successful_parse(self):
        generate = _generator("```json\n" + json.dumps(GOAL_RESPONSE) + "\n```")
        payload = NaturalLanguageInput(description="I want to automate my Excel reports with Python", urgency="high")
        result = await parse_natural_language_goal(payload, generate, make_assessment({"programming": 35}))
        self.assertTrue(result.success)
        self.assertEqual(result.original_input, payload.description)
        goal = result.goals[0]
        self.assertEqual(goal.title, "Automate weekly Excel reports")
        self.assertEqual([node.order for node in goal.learning_path], [1, 2])
        self.assertIn("Urgency: high", generate.prompts[0])
        self.assertIn("programming 35", generate.prompts[0])

    async def test_transport_error_becomes_failed_result(self):
        generate = _generator(error=TransportError("connection reset", code="network"))
        result = await parse_natural_language_goal("learn rust", generate)
        self.assertFalse(result.success)
        self.assertEqual(result.goals, [])
        self.assertEqual(result.suggestions, REPHRASE_SUGGESTIONS)
        self.assertEqual(len(result.parse_errors), 1)

    async def test_garbage_response_becomes_failed_result(self):
        result = await parse_natural_language_goal("learn rust", _generator("Sure! Rust is great."))
        self.assertFalse(result.success)
        self.assertEqual(result.original_input, "learn rust")
        self.assertEqual(result.suggestions, REPHRASE_SUGGESTIONS)

    async def test_nan_in_model_output_does_not_raise(self):
        text = '```json\n{"goals": [{"title": "Learn Rust", "learningPath": [{"order": NaN, "estimatedHours": Infinity}]}]}\n```'
        result = await parse_natural_language_goal("learn rust", _generator(text))
        self.assertTrue(result.success)
        node = result.goals[0].learning_path[0]
        self.assertEqual(node.order, 1)
        self.assertEqual(node.estimated_hours, 8)

    async def test_missing_generator(self):
        result = await parse_natural_language_goal("learn rust", None)
        self.assertFalse(result.success)

    async def test_empty_description_raises(self):
        with self.assertRaises(InputContractError):
            await parse_natural_language_goal("   ", _generator("{}"))


if __name__ == "__main__":
    unittest.main()
