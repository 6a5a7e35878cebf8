import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import setproctitle

import settings
from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI, APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from routes.auth_route import get_version, router as auth_router
from routes.friendship import router as friendship_router
from services.errors import FriendshipError
from services.slack import slack
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware

from utils import ratelimited_log, setup_logs

logger = logging.getLogger("habitpals.main")
setup_logs()
setproctitle.setproctitle("Habitpals API")


def update_database():  # pragma: no cover
    """Init the DB or run the Alembic migrations"""
    import alembic.config

    if not Path("alembic.ini").is_file():
        os.chdir(settings.BACKEND_DIR)

    try:
        alembic.config.main(
            argv=[
                "--raiseerr",
                "upgrade",
                "head",
            ]
        )
    except Exception as e:
        logger.exception(f"Cannot run DB migrations: {e}")


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app"""
    logger.debug("Starting...")
    update_database()
    yield
    logger.debug("Closing app")


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def friendship_error_handler(request: Request, exc: FriendshipError):
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path}: {exc.message} ({exc.context()})"
        )
    return error_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid {location}: {first.get('msg')}" if first else "Invalid request"
    logger.debug(f"{request.method} {request.url.path} rejected: {errors}")
    return error_response(400, message)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}: {exc!r}"
    )
    ratelimited_log(10 * 60)(
        slack.send_message, f"🛑 Unhandled {type(exc).__name__} on {request.url.path}"
    )
    return error_response(500, "Internal server error")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title="Habitpals",
        description="Friends and private chats for habit buddies",
        version=get_version(),
        middleware=[
            Middleware(BrotliMiddleware, minimum_size=1000),
            Middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET_KEY),
        ],
        swagger_ui_parameters={
            "defaultModelsExpandDepth": 0,
        },  # collapse the swagger schema
        lifespan=app_lifespan,
    )
    app.add_exception_handler(FriendshipError, friendship_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Mount routers
    api_router = APIRouter()
    api_router.include_router(auth_router)
    api_router.include_router(friendship_router, tags=["friends"])
    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app
