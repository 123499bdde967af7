import asyncio
import contextlib
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from config import insecure_defaults
from src.adapter.services.resources import AppResources
from src.adapter.services.session_sweeper import run_session_sweeper
from .error import ClientError, ServerError
from .response import api_response
from .utils.cookies import CookieTransport

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code}
    logger.warning(f"Client error: {exc.base_error.code} {exc.base_error.message}")
    response = api_response(exc.status_code, exc.base_error.message, error=error_dict)
    if exc.clear_cookies:
        request.app.state.cookies.clear(response)
    return response


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code}
    logger.error(f"Server error: {exc.base_error.code}")
    return api_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", error=error_dict
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {
            "path": ", ".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return api_response(status.HTTP_400_BAD_REQUEST, "Validation error!", error=errors)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(ApplicationConfig, resources: Optional[AppResources] = None) -> FastAPI:
    """
    Build the API.

    Pass `resources` to run against pre-built resources (tests); otherwise
    they are created in the lifespan from ApplicationConfig.
    """
    configure_logging(ApplicationConfig.LOG_LEVEL)

    insecure = insecure_defaults(ApplicationConfig)
    if insecure:
        raise RuntimeError(f"Refusing to start in production with default {', '.join(insecure)}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_resources = getattr(app.state, "resources", None) is None
        if owns_resources:
            app.state.resources = await AppResources.create(ApplicationConfig)

        sweeper = None
        if ApplicationConfig.SWEEP_INTERVAL > 0:
            sweeper = asyncio.create_task(
                run_session_sweeper(app.state.resources, ApplicationConfig.SWEEP_INTERVAL)
            )

        yield

        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        if owns_resources:
            await app.state.resources.close()

    app = FastAPI(title="Session API", version="0.1.0", lifespan=lifespan)
    app.state.config = ApplicationConfig
    app.state.cookies = CookieTransport.from_config(ApplicationConfig)
    app.state.resources = resources

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
            )
            return response

    from src.api.routes import admin, auth, health_check, user

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(user.router, tags=["User"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
