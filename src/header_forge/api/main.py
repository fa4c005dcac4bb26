"""FastAPI app entrypoint for header-forge."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request

from header_forge.config.settings import Settings, get_settings
from header_forge.errors import InvalidBatch, QuotaExceeded, StoreUnavailable
from header_forge.generation import build_image_generator, build_text_generator
from header_forge.models import (
    ImageItem,
    QuotaResponse,
    SubmitBatchRequest,
    SubmitBatchResponse,
)
from header_forge.pipeline.orchestrator import BatchOrchestrator, split_prompts
from header_forge.pipeline.processor import UnitProcessor
from header_forge.quota import InMemoryQuotaStore, PostgresQuotaStore, QuotaStore, RateLimiter
from header_forge.storage import build_blob_store

logger = logging.getLogger(__name__)


def build_quota_store(settings: Settings) -> QuotaStore:
    if settings.quota_backend == "memory":
        return InMemoryQuotaStore(ttl_s=settings.quota_ttl_s)

    database_url = settings.resolved_database_url()
    if not database_url:
        raise RuntimeError(
            "Missing database URL. Set HEADER_FORGE_DATABASE_URL "
            "or DATABASE_URL before starting the app."
        )
    store = PostgresQuotaStore(database_url, ttl_s=settings.quota_ttl_s)
    try:
        store.migrate()
    except StoreUnavailable as exc:
        logger.warning("quota_store event=migrate_deferred backend=postgres reason=%s", exc)
    return store


def build_orchestrator(settings: Settings, *, quota_store: QuotaStore) -> BatchOrchestrator:
    limiter = RateLimiter(
        quota_store,
        daily_limit=settings.daily_limit,
        policy=settings.quota_policy,
    )
    processor = UnitProcessor(
        text_generator=build_text_generator(settings),
        image_generator=build_image_generator(settings),
        blob_store=build_blob_store(settings),
        fetch_timeout_s=settings.fetch_timeout_s,
    )
    return BatchOrchestrator(
        limiter=limiter,
        processor=processor,
        max_batch_size=settings.max_batch_size,
        unit_max_retries=settings.unit_max_retries,
        unit_retry_backoff_s=settings.unit_retry_backoff_s,
    )


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    orchestrator_override: BatchOrchestrator | None,
) -> None:
    if not hasattr(app.state, "settings"):
        app.state.settings = settings

    if not hasattr(app.state, "orchestrator"):
        if orchestrator_override is not None:
            app.state.quota_store = orchestrator_override.limiter.store
            app.state.orchestrator = orchestrator_override
        else:
            quota_store = build_quota_store(settings)
            app.state.quota_store = quota_store
            app.state.orchestrator = build_orchestrator(settings, quota_store=quota_store)
        logger.info(
            "app event=runtime_ready daily_limit=%d policy=%s",
            app.state.orchestrator.limiter.daily_limit,
            app.state.orchestrator.limiter.policy,
        )


def _shutdown_runtime_state(app: FastAPI) -> None:
    store = getattr(app.state, "quota_store", None)
    close = getattr(store, "close", None)
    if callable(close):
        close()


def create_app(
    *,
    orchestrator: BatchOrchestrator | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    logging.getLogger("header_forge").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure_runtime_state(app, settings=settings, orchestrator_override=orchestrator)
        yield
        _shutdown_runtime_state(app)

    app_lifespan = lifespan if orchestrator is None else None
    app = FastAPI(title=settings.app_name, lifespan=app_lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if orchestrator is not None:
        _ensure_runtime_state(app, settings=settings, orchestrator_override=orchestrator)

    def _get_orchestrator(request: Request) -> BatchOrchestrator:
        if not hasattr(request.app.state, "orchestrator"):
            _ensure_runtime_state(
                request.app,
                settings=settings,
                orchestrator_override=orchestrator,
            )
        return request.app.state.orchestrator

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/quota", response_model=QuotaResponse)
    def quota(request: Request) -> QuotaResponse:
        batch_orchestrator = _get_orchestrator(request)
        return QuotaResponse(
            remaining=batch_orchestrator.remaining_quota(),
            daily_limit=batch_orchestrator.limiter.daily_limit,
        )

    @app.post("/batches", response_model=SubmitBatchResponse)
    def submit_batch(payload: SubmitBatchRequest, request: Request) -> SubmitBatchResponse:
        batch_orchestrator = _get_orchestrator(request)
        prompts = payload.prompts if payload.prompts is not None else split_prompts(payload.text or "")

        try:
            artifacts = batch_orchestrator.submit_batch(prompts)
        except InvalidBatch as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except QuotaExceeded as exc:
            raise HTTPException(
                status_code=429,
                detail=_quota_detail(exc),
            ) from exc
        except StoreUnavailable as exc:
            logger.warning("batch event=rejected reason=store_unavailable error=%s", exc)
            raise HTTPException(
                status_code=503,
                detail="Quota service is temporarily unavailable. Please try again later.",
            ) from exc

        return SubmitBatchResponse(
            images=[
                ImageItem(title=artifact.source_prompt, url=artifact.location_url)
                for artifact in artifacts
            ],
            requested=len(prompts),
            generated=len(artifacts),
            remaining=batch_orchestrator.remaining_quota(),
        )

    return app


def _quota_detail(exc: QuotaExceeded) -> dict[str, Any]:
    return {"message": str(exc), "remaining": exc.remaining, "requested": exc.requested}


app = create_app()
