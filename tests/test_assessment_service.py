import json
import unittest
from datetime import datetime, timedelta, timezone

from skillpath.core.errors import AssessmentNotFoundError, ErrorKind, InputContractError, TransportError
from skillpath.core.profile_store import ASSESSMENT_KEY, HISTORY_KEY, InMemoryProfileStore
from skillpath.planning.cache import PlanCache, PlanState
from skillpath.schemas.assessment import Assessment, AssessmentInput
from skillpath.services.assessment_service import AssessmentService, parse_assessment_response

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

MODEL_PAYLOAD = {
    "overallScore": 64,
    "dimensions": {
        "programming": {"score": 78, "weight": 0.3, "skills": {"syntax": 85, "tooling": 55}},
        "algorithm": {"score": 52, "weight": 0.2, "skills": {"recursion": {"score": 48, "confidence": 0.5}}},
        "project": {"score": 70, "weight": 0.25, "skills": {}},
        "systemDesign": {"score": 45, "weight": 0.15, "skills": {}},
        "communication": {"score": 60, "weight": 0.1, "skills": {}},
    },
    "metadata": {"assessmentDate": "2020-01-01", "assessmentMethod": "questionnaire", "confidence": 0.9},
    "report": {"summary": "Capable backend engineer.", "strengths": ["APIs"], "improvements": ["Design"], "recommendations": []},
}

RESUME = "Backend developer, 4 years of Python and Django. Built REST APIs and led a small migration project."


def _fenced(payload):
    return "Here is the assessment:\n```json\n" + json.dumps(payload) + "\n```\nLet me know!"


class _Generator:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    async def __call__(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class AssessmentServiceTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = InMemoryProfileStore()
        self.now = NOW

    def _service(self, generator=None, **kwargs):
        return AssessmentService(self.store, generator, clock=lambda: self.now, model_name="test-model", **kwargs)

    async def test_model_response_is_used(self):
        generator = _Generator(_fenced(MODEL_PAYLOAD))
        outcome = await self._service(generator).run_assessment({"resumeText": RESUME})
        self.assertFalse(outcome.used_fallback)
        self.assertIsNone(outcome.failure)
        self.assertEqual(outcome.assessment.overall_score, 64)
        self.assertEqual(outcome.assessment.metadata.assessment_method, "resume")
        self.assertEqual(outcome.assessment.metadata.assessment_date, NOW.isoformat(timespec="seconds"))
        self.assertEqual(len(generator.prompts), 1)
        self.assertIn("Django", generator.prompts[0])

    async def test_execute_assessment_returns_assessment(self):
        generator = _Generator(_fenced(MODEL_PAYLOAD))
        result = await self._service(generator).execute_assessment(AssessmentInput(resume_text=RESUME))
        self.assertIsInstance(result, Assessment)
        self.assertEqual(self.store.read(ASSESSMENT_KEY)["overallScore"], 64)

    async def test_transport_error_falls_back(self):
        generator = _Generator(error=TransportError("upstream timed out", code="timeout"))
        outcome = await self._service(generator).run_assessment({"resumeText": RESUME})
        self.assertTrue(outcome.used_fallback)
        self.assertIs(outcome.failure.kind, ErrorKind.TRANSPORT_ERROR)
        self.assertEqual(outcome.failure.details["code"], "timeout")
        self.assertGreaterEqual(outcome.assessment.overall_score, 30)
        self.assertLessEqual(outcome.assessment.overall_score, 75)

    async def test_unparseable_response_falls_back(self):
        outcome = await self._service(_Generator("I cannot help with that.")).run_assessment({"resumeText": RESUME})
        self.assertTrue(outcome.used_fallback)
        self.assertIs(outcome.failure.kind, ErrorKind.NO_JSON_FOUND)

    async def test_missing_generator_falls_back(self):
        outcome = await self._service().run_assessment({"questionnaire": {"experience": "2 years"}})
        self.assertTrue(outcome.used_fallback)
        self.assertEqual(outcome.assessment.metadata.assessment_method, "questionnaire")

    def test_empty_input_raises_before_awaiting(self):
        service = self._service(_Generator(_fenced(MODEL_PAYLOAD)))
        with self.assertRaises(InputContractError):
            service.execute_assessment({"resumeText": "   ", "questionnaire": {}})
        with self.assertRaises(InputContractError):
            service.run_assessment({"resumeText": 42})
        self.assertIsNone(self.store.read(ASSESSMENT_KEY))

    async def test_history_is_appended(self):
        service = self._service(_Generator(_fenced(MODEL_PAYLOAD)))
        await service.run_assessment({"resumeText": RESUME})
        self.now = NOW + timedelta(days=1)
        await service.run_assessment({"resumeText": RESUME, "questionnaire": {"goal": "staff engineer"}})
        history = service.assessment_history()
        self.assertEqual([entry.method for entry in history], ["resume", "mixed"])
        self.assertEqual(history[0].overall_score, 64)
        self.assertEqual(history[0].level, "advanced")
        self.assertEqual(len(self.store.read(HISTORY_KEY)), 2)

    async def test_new_assessment_invalidates_previous_plan(self):
        cache = PlanCache(self.store)
        service = self._service(_Generator(_fenced(MODEL_PAYLOAD)), plan_cache=cache)
        first = await service.execute_assessment({"resumeText": RESUME})
        plan = service.derive_plan()
        self.assertIs(cache.state(plan.fingerprint), PlanState.GENERATED)

        self.now = NOW + timedelta(days=3)
        await service.execute_assessment({"resumeText": RESUME})
        self.assertIs(cache.state(plan.fingerprint), PlanState.NONE)
        self.assertNotEqual(service.derive_plan().fingerprint, plan.fingerprint)
        self.assertEqual(first.overall_score, 64)

    async def test_weak_areas_and_summary(self):
        service = self._service(_Generator(_fenced(MODEL_PAYLOAD)))
        await service.run_assessment({"resumeText": RESUME})

        areas = service.weak_areas()
        self.assertEqual([(a.dimension, a.skill) for a in areas], [("algorithm", "recursion"), ("programming", "tooling")])
        self.assertTrue(areas[0].is_inferred)
        self.assertFalse(areas[1].is_inferred)

        summary = service.ability_summary()
        self.assertTrue(summary.has_assessment)
        self.assertFalse(summary.needs_assessment)
        self.assertEqual(summary.level, "Advanced")

        self.now = NOW + timedelta(days=45)
        self.assertTrue(service.ability_summary().needs_assessment)

    def test_queries_without_assessment(self):
        service = self._service()
        self.assertIsNone(service.current_assessment())
        self.assertEqual(service.assessment_history(), [])
        summary = service.ability_summary()
        self.assertFalse(summary.has_assessment)
        self.assertTrue(summary.needs_assessment)
        for call in (service.derive_plan, service.regenerate_plan, service.export_report, service.weak_areas):
            with self.assertRaises(AssessmentNotFoundError):
                call()


class ParseAssessmentResponseTests(unittest.TestCase):
    def test_truncated_response_is_repaired(self):
        text = json.dumps(MODEL_PAYLOAD)
        truncated = text[: text.index('"report"')] + '"report": {"summary": "Capable'
        result = parse_assessment_response(truncated, "resume", "2026-03-02T09:00:00+00:00")
        self.assertIsInstance(result, Assessment)
        self.assertEqual(result.report.summary, "Capable")

    def test_unclosed_fence_cut_inside_dimensions_keeps_parsed_dimensions(self):
        reordered = {
            "overallScore": MODEL_PAYLOAD["overallScore"],
            "metadata": MODEL_PAYLOAD["metadata"],
            "dimensions": MODEL_PAYLOAD["dimensions"],
        }
        text = json.dumps(reordered)
        cut = text[: text.index('"syntax": 85') + len('"syntax": 85')]
        result = parse_assessment_response("```json\n" + cut, "resume", "2026-03-02T09:00:00+00:00")
        self.assertIsInstance(result, Assessment)
        self.assertEqual(result.dimensions["programming"].score, 78)
        self.assertEqual(result.dimensions["programming"].skills, {"syntax": 85})
        self.assertEqual(result.dimensions["algorithm"].score, 0)


if __name__ == "__main__":
    unittest.main()
