import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.application import (
    FAILURE_MESSAGES,
    DocumentLibrary,
    DuplicateSubmissionFilter,
    IntakeService,
    NotFoundError,
    NotificationDeliveryFailure,
    NotificationDispatcher,
)
from backend.core.logging_config import setup_logging
from backend.core.settings import Settings, get_settings
from backend.core.validation import ValidationError
from backend.domain import utc_now_iso
from backend.infrastructure import EmailRenderer, JsonFileRecordRepository, Mailer, MailTransport
from backend.routes import contact, documents, inquiries, security

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation failed", "errors": exc.errors},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body") or "payload", "message": str(err.get("msg"))}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation failed", "errors": errors},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"success": False, "message": exc.message})

    @app.exception_handler(NotificationDeliveryFailure)
    async def handle_delivery_failure(request: Request, exc: NotificationDeliveryFailure) -> JSONResponse:
        logger.error("Submission %s stored but acknowledgment failed: %s", exc.record_id, exc)
        content = {"success": False, "message": FAILURE_MESSAGES[exc.kind]}
        if settings.is_development:
            content["error"] = exc.outcome.detail or str(exc)
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"success": False, "message": "Internal server error"}
        if settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Settings | None = None, *, mail_transport: MailTransport | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    repository = JsonFileRecordRepository(settings.data_file, autosave_interval=settings.autosave_interval)
    repository.load()

    mailer = Mailer(settings, transport=mail_transport)
    if mailer.dev_mode:
        logger.warning("SMTP_USER/SMTP_PASS not set: emails will be logged instead of sent")
    dispatcher = NotificationDispatcher(mailer, EmailRenderer(settings), settings.ops_email, company_name=settings.company_name)
    duplicates = DuplicateSubmissionFilter(settings.duplicate_window, settings.duplicate_retention)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repository.start_autosave()
        logger.info("Intake API started (env=%s, data=%s)", settings.environment, settings.data_file)
        try:
            yield
        finally:
            await repository.stop_autosave()
            logger.info("Intake API stopped, records saved to %s", settings.data_file)

    app = FastAPI(title="Websutech Intake API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository
    app.state.mailer = mailer
    app.state.duplicate_filter = duplicates
    app.state.intake_service = IntakeService(repository, dispatcher, duplicates)
    app.state.document_library = DocumentLibrary(repository)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app, settings)

    app.include_router(contact.router, prefix="/api")
    app.include_router(inquiries.router, prefix="/api")
    app.include_router(documents.router, prefix="/api")
    app.include_router(security.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Websutech Intake API",
                "docs": "/docs",
                "health": "/api/health",
            }
        )

    @app.get("/api/health")
    async def health() -> dict:
        return {
            "status": "healthy",
            "timestamp": utc_now_iso(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
        }

    @app.get("/api/stats")
    async def stats() -> dict:
        return {"success": True, "stats": repository.stats()}

    return app


app = create_app()
