"""FastAPI application entry point."""

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sismonev.auth.routes import router as auth_router
from sismonev.core.config import get_settings
from sismonev.core.errors import AppError, ErrorResponse, InternalError, kind_for_status
from sismonev.faqs.routes import router as faqs_router
from sismonev.indicator_reports.routes import router as indicator_reports_router
from sismonev.learning_resources.routes import router as learning_resources_router
from sismonev.news.routes import router as news_router
from sismonev.organizations.routes import router as org_router
from sismonev.users.routes import router as users_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Monitoring and evaluation backend for the PAUD HI coordination program",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, kind: str, detail: str, headers: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=kind, detail=detail, timestamp=datetime.utcnow())
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Errors raised by the application with a stable kind."""
    return _error(exc.status_code, exc.kind, str(exc.detail), exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework HTTP errors (unknown route, method not allowed, ...)."""
    return _error(
        exc.status_code, kind_for_status(exc.status_code), str(exc.detail),
        getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema validation failures on request bodies and parameters."""
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return _error(422, "ValidationError", detail or "Invalid request")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unhandled is logged and reported without internals."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = str(exc) if settings.DEBUG else InternalError.default_detail
    return _error(500, InternalError.kind, detail)


app.include_router(auth_router, prefix="/api")
app.include_router(org_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(indicator_reports_router, prefix="/api")
app.include_router(news_router, prefix="/api")
app.include_router(learning_resources_router, prefix="/api")
app.include_router(faqs_router, prefix="/api")


@app.get("/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}
