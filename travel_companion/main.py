from __future__ import annotations

import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

from travel_companion.config import Settings, load_settings
from travel_companion.db import create_session_factory, init_engine
from travel_companion.errors import TravelCompanionError
from travel_companion.log import get_logger
from travel_companion.routes import auth, blog, bookings, chat, guides, misc, packing, preferences, trips
from travel_companion.services import Services, build_services

logger = get_logger(__name__)

MAX_LOG_LINE = 80


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p != "body"]
        msg = error.get("msg", "invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "Invalid input: " + ", ".join(parts)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Build the API. Missing credentials raise ``ConfigError`` right here."""
    settings = settings or load_settings()
    services = services or build_services(settings)

    app = FastAPI(title="Travel Companion API")
    app.state.settings = settings
    app.state.services = services
    app.state.session_factory = create_session_factory(init_engine(settings.database_url))

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        https_only=settings.cookie_https_only,
        same_site="lax",
    )
    # Allow local development UIs (Vite dev server, static builds) to reach the
    # API. Operators can scope this via TRAVEL_COMPANION_ALLOWED_ORIGINS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            elapsed = (time.perf_counter() - start) * 1000
            line = f"{request.method} {request.url.path} {response.status_code} in {elapsed:.0f}ms"
            if len(line) > MAX_LOG_LINE:
                line = line[: MAX_LOG_LINE - 1] + "…"
            logger.info(line)
        return response

    @app.exception_handler(TravelCompanionError)
    async def handle_domain_error(request: Request, exc: TravelCompanionError) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        message = _describe_validation(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return PlainTextResponse(message, status_code=400)

    for module in (auth, preferences, blog, guides, trips, bookings, chat, packing, misc):
        app.include_router(module.router, prefix="/api")

    logger.info("Travel Companion API ready (database %s)", settings.database_url.split("://")[0])
    return app


def run() -> None:
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(create_app(), host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
