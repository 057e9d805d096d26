"""FastAPI application exposing the interaction webhook."""

from __future__ import annotations

import os

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from lotus_faucet.audit.logger import AuditLogger
from lotus_faucet.config import FaucetSettings
from lotus_faucet.interactions.pipeline import InteractionPipeline
from lotus_faucet.interactions.verifier import SIGNATURE_HEADER, TIMESTAMP_HEADER

_MAX_WEBHOOK_BODY_SIZE = 1024 * 1024  # 1MB


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = FaucetSettings.from_env()
    audit_log = os.environ.get("AUDIT_LOG_PATH")
    audit_logger = AuditLogger.from_env(audit_log) if audit_log else None
    return create_app(settings, audit_logger)


def create_app(
    settings: FaucetSettings,
    audit_logger: AuditLogger | None = None,
    pipeline: InteractionPipeline | None = None,
) -> FastAPI:
    """Create the webhook app around one shared, stateless pipeline."""
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    pipeline = pipeline or InteractionPipeline(settings, audit_logger=audit_logger)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/interactions")
    async def interactions(request: Request, background_tasks: BackgroundTasks) -> Response:
        # The signature covers the exact bytes, so the body is never re-encoded.
        body = await request.body()
        if len(body) > _MAX_WEBHOOK_BODY_SIZE:
            return JSONResponse({"error": "Request body too large"}, status_code=413)

        result = await pipeline.handle(
            body,
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(TIMESTAMP_HEADER),
        )
        if result.background is not None:
            background_tasks.add_task(result.background)
        return result.response

    return app
