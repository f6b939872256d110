import os
import tempfile
import unittest
from dataclasses import replace
from unittest import mock

from skillpath.analytics import db as analytics_db


class AnalyticsDbTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        enabled = replace(
            analytics_db.settings,
            analytics_enabled=True,
            analytics_db_path=os.path.join(self.tmp.name, "analytics.db"),
        )
        patcher = mock.patch.object(analytics_db, "settings", enabled)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self.tmp.cleanup)

    def _log(self, run_id, flow="assessment", status="success", used_fallback=False):
        analytics_db.log_ai_analysis_run(
            run_id=run_id,
            flow=flow,
            model="gpt-test",
            status=status,
            used_fallback=used_fallback,
            error_code=None if status == "success" else status,
            latency_ms=12,
        )

    def test_summary_counts_runs_and_fallbacks(self):
        self._log("a")
        self._log("b", status="transport_error", used_fallback=True)
        self._log("c", flow="goal_parse", status="no_json_found")
        self._log("d")

        summary = analytics_db.ai_run_summary()
        self.assertEqual(summary["total"], 4)
        self.assertEqual(summary["fallback_rate"], 0.25)
        self.assertEqual(summary["by_flow"]["assessment"], {"success": 2, "transport_error": 1})
        self.assertEqual(summary["by_flow"]["goal_parse"], {"no_json_found": 1})

    def test_recent_runs_newest_first(self):
        self._log("first")
        self._log("second", used_fallback=True)
        runs = analytics_db.recent_ai_runs(limit=1)
        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0]["run_id"], "second")
        self.assertIs(runs[0]["used_fallback"], True)

    def test_purge_keeps_recent_rows(self):
        self._log("fresh")
        self.assertEqual(analytics_db.purge_old_records(), {"ai_analysis_runs": 0})
        self.assertEqual(analytics_db.ai_run_summary()["total"], 1)


class AnalyticsDisabledTests(unittest.TestCase):
    def test_disabled_analytics_is_a_no_op(self):
        disabled = replace(analytics_db.settings, analytics_enabled=False)
        with mock.patch.object(analytics_db, "settings", disabled):
            analytics_db.log_ai_analysis_run(
                run_id="x", flow="assessment", model="m", status="success", used_fallback=False
            )
            self.assertEqual(analytics_db.ai_run_summary()["total"], 0)
            self.assertEqual(analytics_db.recent_ai_runs(), [])


if __name__ == "__main__":
    unittest.main()
