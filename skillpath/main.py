import logging

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from skillpath.api.v1.analytics import router as analytics_router
from skillpath.api.v1.assessments import router as assessments_router
from skillpath.api.v1.goals import router as goals_router
from skillpath.api.v1.health import router as health_router
from skillpath.core.config import settings
from skillpath.core.lifespan import lifespan
from skillpath.core.rate_limit import limiter

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Skillpath Assessment API", version="0.1.0", lifespan=lifespan)

cors_regex = (settings.cors_allow_origin_regex or "").strip() or None
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=cors_regex,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(assessments_router, prefix="/v1", tags=["Assessments"])
app.include_router(goals_router, prefix="/v1", tags=["Goals"])
app.include_router(analytics_router, prefix="/v1", tags=["Analytics"])
