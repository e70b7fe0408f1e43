# =============================================================================
# FastAPI Application — Entry Point
# =============================================================================
#
# Creates the app, installs CORS, registers routers and manages the
# KnowledgeBase lifecycle.
#
# STARTUP:
#   1. Configure logging
#   2. Create the KnowledgeBase on app.state
#   3. Start building the index in the background (warm_index_on_startup),
#      so the first chat request usually finds it ready. Requests that
#      arrive earlier await the same build.
#
# RUN:
#   python -m app.main            (uses HOST / PORT from settings)
#   uvicorn app.main:app --port 5000
# =============================================================================

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.agents.prompts import get_prompt_profile
from app.api.chat import error_response
from app.api.chat import router as chat_router
from app.api.deps import MESSAGE_REQUIRED, get_knowledge_base
from app.config import settings
from app.models.responses import HealthResponse
from app.services.knowledge_base import IndexState, KnowledgeBase

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    knowledge_base = KnowledgeBase(settings.source_pdf_path)
    app.state.knowledge_base = knowledge_base

    warmup: asyncio.Task | None = None
    if settings.warm_index_on_startup:
        # Failures are logged by the build itself; requests retry later.
        warmup = asyncio.create_task(knowledge_base.ensure_ready())

    logger.info(
        "%s v%s started (source=%s, profile=%s)",
        settings.app_name, settings.app_version,
        knowledge_base.source_path, settings.prompt_profile,
    )

    yield

    await knowledge_base.aclose()
    if warmup is not None:
        warmup.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await warmup
    logger.info("Application shutdown")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    # The only request body is ChatRequest; anything unparsable means the
    # client did not send a usable message.
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    return error_response(400, MESSAGE_REQUIRED)


async def http_exception_handler(
    request: Request, exc: HTTPException,
) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ValueError: If settings.prompt_profile names an unknown profile.
    """
    # Fail at startup, not on the first request
    get_prompt_profile()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.include_router(chat_router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(
        knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
    ) -> HealthResponse:
        return HealthResponse(
            version=settings.app_version,
            service=settings.app_name,
            index_ready=knowledge_base.state is IndexState.READY,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
