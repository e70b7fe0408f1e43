# =============================================================================
# Chat API — FAQ Question Answering Endpoint
# =============================================================================
#
# Provides POST /api/chat, the single endpoint the chat widget talks to.
#
# FLOW:
#   1. Reject a missing/empty message with 400 (no external calls)
#   2. Run the chat graph (ensure index → retrieve → classify → answer)
#   3. Return {message, source}
#   4. Any failure → logged, 500 {"error": "Internal server error"}
#
# This endpoint is thin by design — validation, error handling and response
# mapping. The pipeline lives in app/agents/orchestrator.py.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.agents.orchestrator import answer_question
from app.agents.prompts import PromptProfile
from app.api.deps import (
    INTERNAL_ERROR,
    get_knowledge_base,
    get_llm,
    get_prompt_profile_dep,
    require_message,
)
from app.models.responses import ChatResponse, ErrorResponse
from app.services.knowledge_base import KnowledgeBase
from app.services.llm import LLMProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error).model_dump(),
    )


# ---------------------------------------------------------------------------
# POST /api/chat — Ask the FAQ assistant a question
# ---------------------------------------------------------------------------


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Ask the FAQ assistant a question",
    description=(
        "Answers from the FAQ knowledge base when the retrieved passages are "
        "relevant to the question, otherwise with a general expert answer."
    ),
)
async def chat_endpoint(
    message: str = Depends(require_message),
    knowledge_base: KnowledgeBase = Depends(get_knowledge_base),
    profile: PromptProfile = Depends(get_prompt_profile_dep),
    llm: LLMProvider = Depends(get_llm),
) -> ChatResponse | JSONResponse:
    try:
        answer = await answer_question(
            message,
            knowledge_base=knowledge_base,
            llm=llm,
            profile=profile,
        )
    except Exception:
        logger.exception("Error processing chat")
        return error_response(500, INTERNAL_ERROR)

    return ChatResponse(message=answer.message, source=answer.source)
