"""
FastAPI application entry point for the admin backend.
"""

from __future__ import annotations

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from admin_backend.config import get_settings
from admin_backend.dependencies import get_document_store, get_mutation_queue
from admin_backend.errors import (
    AuthError,
    BlobTransportError,
    DocumentParseError,
    EntityNotFoundError,
)
from admin_backend.routes import public_router, router

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_document_store()
    queue = get_mutation_queue()
    try:
        await store.reconcile()
    except (BlobTransportError, DocumentParseError):
        # Reads retry reconciliation, so the service can still come up.
        logger.exception("Initial reconcile failed")
    queue.start()
    try:
        yield
    finally:
        await queue.stop()
        await store.wait_background()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def auth_error(request: Request, exc: AuthError):
        return JSONResponse(
            status_code=401,
            content={"message": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(EntityNotFoundError)
    async def not_found(request: Request, exc: EntityNotFoundError):
        return JSONResponse(status_code=404, content={"msg": "Not found"})

    @app.exception_handler(BlobTransportError)
    async def transport_error(request: Request, exc: BlobTransportError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=502, content={"msg": "Storage unavailable"})

    @app.exception_handler(DocumentParseError)
    async def parse_error(request: Request, exc: DocumentParseError):
        logger.error("Remote document unreadable: %s", exc)
        return JSONResponse(status_code=502, content={"msg": "Stored data is corrupt"})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="RTMCS Admin Backend", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(public_router)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
