"""
AI Ticket Manager - FastAPI Backend
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticket_manager.config import get_settings
from ticket_manager.exceptions import TicketManagerError
from ticket_manager.middleware.logging_middleware import LoggingMiddleware
from ticket_manager.models.schemas import ErrorResponse
from ticket_manager.routes import health, ticket
from ticket_manager.services.orchestrator import OrchestratorService, build_orchestrator
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


def _error_body(error: str, details: Optional[str] = None) -> dict:
    return ErrorResponse(error=error, details=details or None).model_dump(exclude_none=True)


def create_app(orchestrator: Optional[OrchestratorService] = None) -> FastAPI:
    """
    Build the API application

    Args:
        orchestrator: Pre-wired orchestrator (tests); production handles
            are built from settings when omitted

    Returns:
        FastAPI app with the orchestrator on app.state
    """
    settings = get_settings()

    app = FastAPI(
        title="AI Ticket Manager",
        description="Ticket triage orchestration: classify, look up, draft a reply",
        version="1.0.0"
    )

    # Built once and shared by every request
    app.state.orchestrator = orchestrator or build_orchestrator(settings)

    # Middleware 순서 중요: 아래에서 위로 실행됨
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health.router)
    app.include_router(ticket.router)

    @app.exception_handler(TicketManagerError)
    async def ticket_manager_error_handler(request: Request, exc: TicketManagerError):
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error, exc.details)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        error = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(error),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_body("Invalid request", str(exc.errors()))
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", str(exc))
        )

    @app.get("/")
    async def root():
        return {"message": "AI Ticket Manager API", "version": "1.0.0"}

    logger.info(f"AI Ticket Manager app created (environment: {settings.fastapi_env})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.fastapi_host, port=settings.fastapi_port)
