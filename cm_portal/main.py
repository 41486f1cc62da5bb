import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables early
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_config
from .core.dependencies import get_cosmos_service
from .core.errors import ApplicationError, ErrorCode, application_error_response
from .routers.browse import browse_router
from .routers.components import components_router
from .routers.system import system_router
from .utils.async_utils import run_sync
from .utils.logging_config import setup_application_logging

config = get_config()
logger = setup_application_logging(level=config.log_level, force_flush=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {config.app_name} v{config.app_version} ({config.environment})")

    cosmos_service = get_cosmos_service()
    if not cosmos_service.is_available():
        logger.warning("CosmosDB not configured; component endpoints will fail until AZURE_COSMOS_ENDPOINT is set")
    else:
        try:
            await run_sync(cosmos_service.ensure_containers)
        except Exception:
            logger.exception("❌ Failed to prepare Cosmos containers")

    if not config.blob_storage_configured:
        logger.warning("Blob storage not configured; evidence uploads will be skipped as failed uploads")

    yield

    logger.info("🛑 Shutting down")


app = FastAPI(title=config.app_name, version=config.app_version, debug=config.debug, lifespan=lifespan)

cors_origins = config.cors_origins_list
allow_origin_regex = None
if "*" in cors_origins:
    logger.warning("⚠️  CORS configured with wildcard '*' - acceptable for local development only.")
    # Echo the request origin so credentials stay allowed
    cors_origins = []
    allow_origin_regex = r".*"

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "PUT"],
    allow_headers=["Content-Type", "Accept", "X-Requested-With"],
)

app.include_router(components_router)
app.include_router(browse_router)
app.include_router(system_router)


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    if exc.status_code >= 500:
        logger.error(
            f"Request failed: {exc.message}",
            extra={"path": request.url.path, "error_code": exc.error_code.value},
        )
    return application_error_response(exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "Handled HTTPException",
        extra={
            "path": str(request.url),
            "status_code": exc.status_code,
        },
    )

    if exc.status_code == 404:
        error = ApplicationError(
            "Resource not found",
            ErrorCode.RESOURCE_NOT_FOUND,
            status_code=exc.status_code,
            details={"path": request.url.path},
        )
    elif 400 <= exc.status_code < 500:
        error = ApplicationError(
            str(exc.detail),
            ErrorCode.INVALID_INPUT,
            status_code=exc.status_code,
        )
    else:
        error = ApplicationError(
            "Internal server error",
            ErrorCode.INTERNAL_ERROR,
            status_code=exc.status_code,
        )

    return application_error_response(error)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    error = ApplicationError(
        "Request validation failed",
        ErrorCode.INVALID_INPUT,
        status_code=400,
        details={"errors": [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]},
    )
    return application_error_response(error)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception encountered",
        extra={"path": str(request.url)},
    )

    error = ApplicationError(
        "Internal server error",
        ErrorCode.INTERNAL_ERROR,
        status_code=500,
        error=str(exc),
        details={"path": request.url.path},
    )
    return application_error_response(error)
