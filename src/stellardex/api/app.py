"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stellardex.config import get_settings
from stellardex.errors import StellarDexError, ValidationError
from stellardex.web.dependencies import get_ledger

logger = logging.getLogger(__name__)

API_PREFIX = "/api/stellar"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    yield
    # Shutdown
    if get_ledger.cache_info().currsize:
        await get_ledger().close()
        get_ledger.cache_clear()


async def handle_app_error(request: Request, exc: StellarDexError) -> JSONResponse:
    """Every application error is a 400 with ``{error, kind}``."""
    logger.warning(f"{request.method} {request.url.path} failed: [{exc.kind}] {exc.message}")
    return JSONResponse(status_code=400, content=exc.to_dict())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    error = ValidationError("Invalid request: " + "; ".join(problems))
    return await handle_app_error(request, error)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Stellar DEX API",
        description="Non-custodial Stellar swap and liquidity pool backend",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StellarDexError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    # Register routes
    from stellardex.api.routes import health
    from stellardex.web.controllers import (
        accounts_router,
        builds_router,
        pools_router,
        quotes_router,
        transactions_router,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(accounts_router, prefix=API_PREFIX)
    app.include_router(pools_router, prefix=API_PREFIX)
    app.include_router(builds_router, prefix=API_PREFIX)
    app.include_router(transactions_router, prefix=API_PREFIX)
    app.include_router(quotes_router, prefix=API_PREFIX)

    return app


# Default app instance
app = create_app()
