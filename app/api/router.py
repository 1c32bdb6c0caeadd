from fastapi import APIRouter
from app.api.routes.reports import router as reports_router
from app.api.routes.report_edits import router as report_edits_router
from app.api.routes.sessions import router as sessions_router
from app.api.routes.disciplines import router as disciplines_router

api_router = APIRouter()

api_router.include_router(reports_router, prefix="/reports", tags=["reports"])
api_router.include_router(report_edits_router, prefix="/reports", tags=["report edits"])
api_router.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
api_router.include_router(disciplines_router, prefix="/disciplines", tags=["disciplines"])
