# =============================================================================
# API Dependencies — FastAPI Dependency Injection
# =============================================================================
#
# Provides the collaborators the chat endpoint needs:
#
# 1. require_message()        — the non-empty question, or 400
# 2. get_knowledge_base()     — the application-wide KnowledgeBase
# 3. get_prompt_profile_dep() — the configured PromptProfile
# 4. get_llm()                — the configured LLM provider, or 500
#
# Tests swap any of these with app.dependency_overrides.
#
# DESIGN DECISION: require_message is declared before get_llm.
# FastAPI resolves dependencies in declaration order, so an empty message
# is rejected with 400 even when the LLM provider is misconfigured.
#
# DESIGN DECISION: Errors leave as HTTPException.
# app/main.py renders every HTTPException as {"error": detail}, so a
# dependency failure gets the same JSON body as a handler failure.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from app.agents.prompts import PromptProfile, get_prompt_profile
from app.models.requests import ChatRequest
from app.services.knowledge_base import KnowledgeBase
from app.services.llm import LLMProvider, get_llm_provider

logger = logging.getLogger(__name__)

MESSAGE_REQUIRED = "Message is required"
INTERNAL_ERROR = "Internal server error"


def require_message(request: ChatRequest) -> str:
    if not request.message:
        raise HTTPException(status_code=400, detail=MESSAGE_REQUIRED)
    return request.message


def get_knowledge_base(request: Request) -> KnowledgeBase:
    """
    Return the KnowledgeBase stored on the application.

    Created by the lifespan handler; created here on first use when the app
    runs without lifespan (e.g. a TestClient used outside a `with` block).
    """
    knowledge_base = getattr(request.app.state, "knowledge_base", None)
    if knowledge_base is None:
        knowledge_base = KnowledgeBase()
        request.app.state.knowledge_base = knowledge_base
    return knowledge_base


def get_prompt_profile_dep() -> PromptProfile:
    return get_prompt_profile()


def get_llm() -> LLMProvider:
    """
    Return the shared LLM provider.

    A missing API key or unknown LLM_PROVIDER is logged and reported to the
    client as a 500, like any other failure to answer.
    """
    try:
        return get_llm_provider()
    except ValueError:
        logger.exception("LLM provider is misconfigured")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR) from None
