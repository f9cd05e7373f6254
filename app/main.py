import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.router import api_router
from app.core.config import settings
from app.core.errors import IntakeError
from app.db.session import SessionLocal, init_models
from app.jobs.scheduler import start_scheduler
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.services.local_uploads import UPLOADS_MOUNT, upload_root
from app.services.question_bank import seed_core_questions

logging.basicConfig(level=logging.INFO)
logging.getLogger("apscheduler").setLevel(logging.WARNING)
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

logger = logging.getLogger("intake.app")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(RateLimitMiddleware, limit=settings.apply_rate_limit_per_min, window_seconds=60)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(IntakeError)
    async def _intake_error(request: Request, exc: IntakeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_failed", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request_unhandled_error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "server_error", "message": str(exc)},
        )

    app.include_router(api_router)

    uploads_dir = upload_root()
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_MOUNT, StaticFiles(directory=str(uploads_dir)), name="uploads")

    @app.on_event("startup")
    async def _startup() -> None:
        await init_models()
        async with SessionLocal() as session:
            await seed_core_questions(session)
        if settings.sheet_retry_enabled and settings.sheet_id:
            app.state.scheduler = start_scheduler()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        scheduler = getattr(app.state, "scheduler", None)
        if scheduler:
            scheduler.shutdown()

    return app


app = create_app()
