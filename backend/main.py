"""
Gradebook Analytics — grading and attendance aggregation service.
FastAPI backend entry point.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import ALLOWED_ORIGINS, CURRENCY, LOG_LEVEL, PASS_MARK, SCHOOL_NAME
from core.errors import AnalyticsError
from routes.grades import router as grades_router
from routes.attendance import router as attendance_router
from routes.trends import router as trends_router
from routes.fees import router as fees_router
from routes.reports import router as reports_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Gradebook Analytics API",
    description=(
        "Letter grades, score and attendance aggregation, trends and fee "
        "balances for school dashboards."
    ),
    version="1.0.0",
)

# CORS — allow the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@app.exception_handler(AnalyticsError)
async def analytics_error_handler(request: Request, exc: AnalyticsError):
    logger.warning("%s %s rejected: %s (%s)", request.method, request.url.path, exc, exc.code)
    return JSONResponse(
        status_code=422,
        content={
            "error": {"code": exc.code, "message": str(exc)},
            "generated_at": _now_iso(),
        },
    )


# Register route modules
app.include_router(grades_router, prefix="/api/grades", tags=["Grades"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(trends_router, prefix="/api/trends", tags=["Trends"])
app.include_router(fees_router, prefix="/api/fees", tags=["Fees"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "school_name": SCHOOL_NAME,
        "pass_mark": PASS_MARK,
    }


@app.get("/api/config")
async def get_config():
    """Return server configuration to the frontend."""
    return {
        "school_name": SCHOOL_NAME,
        "pass_mark": PASS_MARK,
        "currency": CURRENCY,
    }
