from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from skillpath.analytics import db as analytics_db
from skillpath.core.config import settings

router = APIRouter()


def _admin(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.admin_api_key and x_api_key != settings.admin_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="A valid X-API-Key header is required.")


@router.get("/analytics/ai-runs/summary")
def ai_runs_summary(_: None = Depends(_admin)):
    return analytics_db.ai_run_summary()


@router.get("/analytics/ai-runs/latest")
def latest_ai_runs(
    limit: int = Query(default=20, ge=1, le=200),
    _: None = Depends(_admin),
):
    return analytics_db.recent_ai_runs(limit=limit)
