from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from skillpath.core.config import settings

_RUN_COLUMNS = ("created_at", "run_id", "flow", "model", "status", "used_fallback", "error_code", "latency_ms")

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS ai_analysis_runs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT NOT NULL,
        run_id TEXT NOT NULL,
        flow TEXT NOT NULL,
        model TEXT NOT NULL,
        status TEXT NOT NULL,
        used_fallback INTEGER NOT NULL,
        error_code TEXT,
        latency_ms INTEGER
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_ai_analysis_runs_created_at ON ai_analysis_runs (created_at)",
    "CREATE INDEX IF NOT EXISTS idx_ai_analysis_runs_flow ON ai_analysis_runs (flow, status)",
)

_initialised_path: str | None = None


@contextmanager
def _connect() -> Iterator[sqlite3.Connection]:
    """Open the analytics database, creating the schema on first use per path."""
    global _initialised_path
    db_path = Path(settings.analytics_db_path)
    if _initialised_path != str(db_path):
        db_path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(db_path)) as conn:
        if _initialised_path != str(db_path):
            for statement in _SCHEMA:
                conn.execute(statement)
            _initialised_path = str(db_path)
        with conn:
            yield conn


def init_db() -> None:
    if settings.analytics_enabled:
        with _connect():
            pass


def log_ai_analysis_run(
    *,
    run_id: str,
    flow: str,
    model: str,
    status: str,
    used_fallback: bool,
    error_code: str | None = None,
    latency_ms: int | None = None,
) -> None:
    """Record one model call: which flow ran, how it ended and whether the fallback answered."""
    if not settings.analytics_enabled:
        return
    row = (
        datetime.now(timezone.utc).isoformat(),
        run_id,
        flow,
        model,
        status,
        int(used_fallback),
        error_code,
        latency_ms,
    )
    placeholders = ", ".join("?" for _ in _RUN_COLUMNS)
    with _connect() as conn:
        conn.execute(f"INSERT INTO ai_analysis_runs ({', '.join(_RUN_COLUMNS)}) VALUES ({placeholders})", row)


def purge_old_records() -> dict[str, int]:
    if not settings.analytics_enabled:
        return {"ai_analysis_runs": 0}
    cutoff = datetime.now(timezone.utc) - timedelta(days=max(1, settings.analytics_retention_days))
    with _connect() as conn:
        deleted = conn.execute("DELETE FROM ai_analysis_runs WHERE created_at < ?", (cutoff.isoformat(),)).rowcount
    return {"ai_analysis_runs": deleted or 0}


def ai_run_summary() -> dict[str, Any]:
    """Counts per flow and status, plus the share of runs that fell back."""
    if not settings.analytics_enabled:
        return {"total": 0, "fallback_rate": 0.0, "by_flow": {}}
    with _connect() as conn:
        rows = conn.execute(
            "SELECT flow, status, COUNT(*), SUM(used_fallback) FROM ai_analysis_runs "
            "GROUP BY flow, status ORDER BY flow, status"
        ).fetchall()

    by_flow: dict[str, dict[str, int]] = {}
    for flow, status, count, _ in rows:
        by_flow.setdefault(flow, {})[status] = count
    total = sum(row[2] for row in rows)
    fallbacks = sum(row[3] or 0 for row in rows)
    return {
        "total": total,
        "fallback_rate": round(fallbacks / total, 4) if total else 0.0,
        "by_flow": by_flow,
    }


def recent_ai_runs(limit: int = 20) -> list[dict[str, Any]]:
    if not settings.analytics_enabled:
        return []
    with _connect() as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            f"SELECT {', '.join(_RUN_COLUMNS)} FROM ai_analysis_runs ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [{**dict(row), "used_fallback": bool(row["used_fallback"])} for row in rows]
