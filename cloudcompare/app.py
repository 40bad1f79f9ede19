from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config import DEFAULT_SETTINGS, Settings
from .engine.comparison import ComparisonEngine
from .engine.constraints import normalize_constraints, summarize_constraints
from .errors import ConstraintValidationError, DataReloadError, EngineError
from .logging_utils import configure_logging
from .middleware import error_response, install_middleware, sanitize_payload, utc_timestamp
from .providers.data_store import ProviderStore

logger = logging.getLogger(__name__)


class ConstraintsRequest(BaseModel):
    constraints: dict[str, Any]


def get_engine(request: Request) -> ComparisonEngine:
    return request.app.state.engine


def get_store(request: Request) -> ProviderStore:
    return request.app.state.store


router = APIRouter(prefix="/api")


# ── Service status ───────────────────────────────────────────────────────


@router.get("/health")
def health(request: Request, store: ProviderStore = Depends(get_store)) -> dict:
    stats = store.statistics()
    integrity = store.validate_integrity()
    return {
        "status": "healthy",
        "timestamp": utc_timestamp(),
        "version": __version__,
        "service": request.app.state.settings.service_name,
        "data": {
            "initialized": stats["isInitialized"],
            "providerCount": stats["providerCount"],
            "providers": stats["providers"],
            "integrity": "valid" if integrity["isValid"] else "invalid",
        },
    }


@router.get("/data/validate")
def data_validate(store: ProviderStore = Depends(get_store)) -> dict:
    return {
        "validation": store.validate_integrity(),
        "statistics": store.statistics(),
        "timestamp": utc_timestamp(),
    }


# ── Comparison ───────────────────────────────────────────────────────────


@router.post("/compare")
def compare(body: ConstraintsRequest, engine: ComparisonEngine = Depends(get_engine)) -> dict:
    outcome = engine.evaluate(sanitize_payload(body.constraints))
    return {
        **outcome.result.to_payload(),
        "timestamp": utc_timestamp(),
        "metadata": {
            "fromCache": outcome.from_cache,
            "cacheStats": outcome.cache_stats,
            "warnings": outcome.warnings,
        },
    }


@router.post("/constraints/validate")
def constraints_validate(body: ConstraintsRequest):
    try:
        constraint, warnings = normalize_constraints(sanitize_payload(body.constraints))
    except ConstraintValidationError as exc:
        return JSONResponse(
            status_code=400,
            content={
                "valid": False,
                "errors": exc.errors,
                "warnings": exc.warnings,
                "timestamp": utc_timestamp(),
            },
        )
    return {
        "valid": True,
        "constraints": constraint.model_dump(mode="json"),
        "summary": summarize_constraints(constraint).model_dump(mode="json", by_alias=True),
        "warnings": warnings,
        "timestamp": utc_timestamp(),
    }


# ── Admin ────────────────────────────────────────────────────────────────


@router.post("/data/reload")
def data_reload(
    store: ProviderStore = Depends(get_store),
    engine: ComparisonEngine = Depends(get_engine),
) -> dict:
    result = store.reload()
    engine.clear_cache()
    if not result["success"]:
        raise DataReloadError(result["loadResults"])
    return {
        "success": True,
        "message": "Data reloaded successfully",
        "providersLoaded": result["providersLoaded"],
        "loadResults": result["loadResults"],
        "timestamp": utc_timestamp(),
    }


@router.get("/cache/stats")
def cache_stats(engine: ComparisonEngine = Depends(get_engine)) -> dict:
    return engine.cache_stats()


# ── Application factory ──────────────────────────────────────────────────


def create_app(settings: Settings = DEFAULT_SETTINGS) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        store = ProviderStore(settings.data_dir)
        result = store.load()
        if not result["success"]:
            logger.warning("Provider data could not be loaded; comparisons will fail until reloaded")
        app.state.store = store
        app.state.engine = ComparisonEngine(store, settings)
        yield

    app = FastAPI(title="Cloud Platform Comparison API", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return error_response(exc)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "details": None,
                    "timestamp": utc_timestamp(),
                }
            },
        )

    install_middleware(app, settings)
    app.include_router(router)
    return app


app = create_app()
