import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursehub_backend.api.admin import admin_router
from coursehub_backend.api.assignments import assignment_router
from coursehub_backend.api.auth import auth_router
from coursehub_backend.api.courses import course_router
from coursehub_backend.api.exceptions import domain_error_to_http_exception
from coursehub_backend.api.feedback import feedback_router
from coursehub_backend.api.lessons import lesson_router
from coursehub_backend.api.payments import payment_router
from coursehub_backend.api.students import student_router
from coursehub_backend.api.submissions import submission_router
from coursehub_backend.auth.sessions import AdminSession, AdminSessionRegistry, run_session_sweeper
from coursehub_backend.database import get_db
from coursehub_backend.errors import DomainError
from coursehub_backend.repositories.base import RepositoryError
from coursehub_backend.services.audit_service import AuditService
from coursehub_backend.settings import settings

logger = logging.getLogger(__name__)

def record_session_timeout(session: AdminSession):
    with next(get_db()) as db:
        AuditService(db).record(
            "session_timeout",
            user_id=session.user_id,
            details={"session_id": session.session_id, "reason": "Session idle timeout"}
        )

@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = asyncio.create_task(
        run_session_sweeper(
            app.state.admin_sessions,
            settings.ADMIN_SESSION_SWEEP_INTERVAL,
            on_expired=record_session_timeout
        )
    )

    yield

    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper

def create_app(registry: AdminSessionRegistry = None) -> FastAPI:
    app = FastAPI(lifespan=lifespan)
    app.state.admin_sessions = registry or AdminSessionRegistry(timeout=settings.ADMIN_SESSION_TIMEOUT)

    origins = [
        "*"
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        http_exception = domain_error_to_http_exception(exc)
        return JSONResponse(
            status_code=http_exception.status_code,
            content={"detail": http_exception.detail},
            headers=http_exception.headers
        )

    @app.exception_handler(RepositoryError)
    async def repository_error_handler(request: Request, exc: RepositoryError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": {"reason": "INTERNAL", "message": "Internal server error"}}
        )

    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(course_router, prefix="/courses", tags=["courses"])
    app.include_router(lesson_router, prefix="/lessons", tags=["lessons"])
    app.include_router(assignment_router, prefix="/assignments", tags=["assignments"])
    app.include_router(submission_router, prefix="/submissions", tags=["submissions"])
    app.include_router(feedback_router, prefix="/feedback", tags=["feedback"])
    app.include_router(payment_router, prefix="/payments", tags=["payments"])
    app.include_router(student_router, prefix="/students", tags=["students"])
    app.include_router(admin_router, prefix="/admin", tags=["admin"])

    @app.get("/")
    def get_status_head():
        return {"status": "ok"}

    return app

app = create_app()
