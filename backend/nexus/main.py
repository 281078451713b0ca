import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import (
    IntegrityError,
    MultipleResultsFound,
    NoResultFound,
    SQLAlchemyError,
)
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .api.router import router as api_router
from .config import Settings, get_settings
from .database import Database
from .errors import (
    AppError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
    error_payload,
    resolve_error_code,
)
from .seed import seed_database

logger = logging.getLogger("nexus")


def _resolve_log_level(value: str) -> int:
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str) -> None:
    log_level = _resolve_log_level(level_name)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(log_level)


def _health_response(status_text: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": status_text})


class OptionsPreflightMiddleware(BaseHTTPMiddleware):
    """
    Answer OPTIONS preflight requests with 204 before they reach CORSMiddleware.
    Allowed origins still get the CORS headers from this middleware.
    """

    def __init__(self, app, allowed_origins: list[str]):
        super().__init__(app)
        self.allowed_origins = set(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        if request.method != "OPTIONS":
            return await call_next(request)

        origin = request.headers.get("origin")
        response = Response(status_code=status.HTTP_204_NO_CONTENT)
        if origin and origin in self.allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            # Echo requested headers back, otherwise fall back to the allowlist
            requested_headers = request.headers.get("access-control-request-headers")
            response.headers["Access-Control-Allow-Headers"] = (
                requested_headers or "content-type"
            )
            response.headers["Access-Control-Max-Age"] = "600"
            response.headers["Vary"] = "Origin"
        return response


SAFE_HTTP_MESSAGES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: ValidationError.message,
    status.HTTP_403_FORBIDDEN: ForbiddenError.message,
    status.HTTP_404_NOT_FOUND: NotFoundError.message,
    status.HTTP_409_CONFLICT: ConflictError.message,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ValidationError.message,
}


def _log_error(request: Request, status_code: int, code: str, message: str, exc: Exception | None = None) -> None:
    request_id = request.headers.get("x-request-id")
    log_message = f"[{code}] path={request.url.path} request_id={request_id or 'n/a'} message={message}"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(log_message, exc_info=exc)
    else:
        logger.warning(log_message)


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: object = None,
    *,
    exc: Exception | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    _log_error(request, status_code, code, message, exc)
    return JSONResponse(
        status_code=status_code,
        content=error_payload(code, message, details),
        headers=headers,
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(
        request, exc.status_code, exc.code, exc.message, exc.details, exc=exc
    )


async def handle_http_exception(
    request: Request, exc: HTTPException | StarletteHTTPException
) -> JSONResponse:
    fallback = (
        InternalError.message
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        else "Request failed"
    )
    return _error_response(
        request,
        exc.status_code,
        resolve_error_code(exc.status_code),
        SAFE_HTTP_MESSAGES.get(exc.status_code, fallback),
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Only loc/msg/type: ctx may hold exception objects that do not serialise
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ValidationError.code,
        "Request validation failed",
        errors,
    )


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        ValidationError.code,
        "Invalid request",
        str(exc).strip() or None,
    )


# SQLAlchemy errors that escape the registries: (status, code, message)
DATABASE_ERRORS: dict[type[Exception], tuple[int, str, str]] = {
    IntegrityError: (
        status.HTTP_409_CONFLICT,
        ConflictError.code,
        "Request could not be completed due to a conflict",
    ),
    NoResultFound: (
        status.HTTP_404_NOT_FOUND,
        NotFoundError.code,
        "Requested resource was not found",
    ),
    MultipleResultsFound: (
        status.HTTP_409_CONFLICT,
        ConflictError.code,
        "Multiple resources found where one expected",
    ),
}


async def handle_database_error(request: Request, exc: Exception) -> JSONResponse:
    for error_type, (status_code, code, message) in DATABASE_ERRORS.items():
        if isinstance(exc, error_type):
            return _error_response(request, status_code, code, message)
    return await handle_unhandled_exception(request, exc)


async def handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError.code,
        InternalError.message,
        exc=exc,
    )


def _register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ValueError, handle_value_error)
    for error_type in DATABASE_ERRORS:
        app.add_exception_handler(error_type, handle_database_error)
    app.add_exception_handler(Exception, handle_unhandled_exception)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the console API.

    Args:
        settings: Configuration, read from the environment when omitted
        database: Pre-built database, created from ``settings.database_url``
            when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting application")
        if settings.debug:
            logger.warning("DEBUG=true, do not use in production")

        await database.create_schema()
        if settings.seed_on_startup:
            async with database.session() as session:
                await seed_database(session)

        yield

        await database.dispose()
        logger.info("Application stopped")

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    # CORSMiddleware first (runs last), then OptionsPreflightMiddleware (runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(OptionsPreflightMiddleware, allowed_origins=settings.allowed_origins)

    app.include_router(api_router)
    _register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> Response:
        try:
            await database.ping()
        except SQLAlchemyError as exc:
            logger.error("Healthcheck database ping failed: %s", exc)
            return _health_response("error", status.HTTP_503_SERVICE_UNAVAILABLE)

        logger.debug("Healthcheck passed")
        return _health_response("ok", status.HTTP_200_OK)

    return app


app = create_app()
