# =============================================================================
# LangGraph Orchestrator — Chat Pipeline Assembly
# =============================================================================
#
# Wires the retrieve, classify and answer steps into a LangGraph StateGraph.
#
# GRAPH TOPOLOGY:
#
#   START ──▶ retrieve ──index ready──▶ classify ──relevant──▶ grounded ──▶ END
#                │                          │
#                │ index unavailable        │ not relevant
#                ▼                          ▼
#             general ◀─────────────────────┘
#                │
#                ▼
#               END
#
# DESIGN DECISION: The fallback is a conditional edge.
# Ingestion and classification failures come back as values (IndexStatus,
# RelevanceVerdict), and the routing functions below read them. Only a
# failure of the final completion call raises, and it raises out of the
# graph to the request handler.
#
# DESIGN DECISION: Plain TypedDict state (not MessagesState).
# There is no conversation history: each request is one question in and
# one answer out.
#
# DESIGN DECISION: Graph compiled once at module level and reused by every
# request.
# =============================================================================

from __future__ import annotations

import logging

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from app.agents.classifier import RelevanceVerdict, is_relevant
from app.agents.prompts import PromptProfile, get_prompt_profile
from app.agents.responder import (
    GeneratedAnswer,
    generate_general,
    generate_grounded,
)
from app.config import settings
from app.services.embedder import embed_query
from app.services.knowledge_base import KnowledgeBase
from app.services.llm import LLMProvider, get_llm_provider
from app.services.vectorstore import VectorSearchResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Chat State Schema
# ---------------------------------------------------------------------------


class ChatState(TypedDict, total=False):
    """
    State that flows through the graph.

    total=False so nodes only return the keys they update.
    """

    # --- Input (set by caller) ---
    question: str
    # Collaborators travel in the state so tests and callers can inject
    # fakes. Not JSON-serialisable; the graph has no checkpointer.
    knowledge_base: KnowledgeBase
    llm: LLMProvider
    profile: PromptProfile

    # --- Intermediate (set by nodes) ---
    index_error: str | None
    chunks: list[VectorSearchResult]
    verdict: RelevanceVerdict

    # --- Output ---
    answer: GeneratedAnswer


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def retrieve_node(state: ChatState) -> dict:
    """Make sure the index exists, then fetch the top-k nearest chunks."""
    status = await state["knowledge_base"].ensure_ready()
    if not status.ok:
        logger.warning(
            "Knowledge base unavailable, using general response: %s",
            status.error,
        )
        return {"index_error": status.error, "chunks": []}

    query_embedding = await embed_query(state["question"])
    chunks = status.index.search(query_embedding, top_k=settings.retrieval_top_k)

    logger.info(
        "Retrieved %d chunks (scores=%s)",
        len(chunks), [c.similarity_score for c in chunks],
    )
    return {"index_error": None, "chunks": chunks}


async def classify_node(state: ChatState) -> dict:
    verdict = await is_relevant(
        state.get("chunks", []), state["question"], state["llm"],
    )
    return {"verdict": verdict}


async def grounded_node(state: ChatState) -> dict:
    answer = await generate_grounded(
        state["question"], state["chunks"], state["llm"], state["profile"],
    )
    return {"answer": answer}


async def general_node(state: ChatState) -> dict:
    answer = await generate_general(
        state["question"], state["llm"], state["profile"],
    )
    return {"answer": answer}


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def route_after_retrieve(state: ChatState) -> str:
    if state.get("index_error"):
        return "general"
    return "classify"


def route_after_classify(state: ChatState) -> str:
    verdict = state.get("verdict")
    if verdict is not None and verdict.relevant:
        return "grounded"
    return "general"


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

_builder = StateGraph(ChatState)
_builder.add_node("retrieve", retrieve_node)
_builder.add_node("classify", classify_node)
_builder.add_node("grounded", grounded_node)
_builder.add_node("general", general_node)

_builder.add_edge(START, "retrieve")
_builder.add_conditional_edges(
    "retrieve",
    route_after_retrieve,
    {"classify": "classify", "general": "general"},
)
_builder.add_conditional_edges(
    "classify",
    route_after_classify,
    {"grounded": "grounded", "general": "general"},
)
_builder.add_edge("grounded", END)
_builder.add_edge("general", END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def answer_question(
    question: str,
    knowledge_base: KnowledgeBase,
    llm: LLMProvider | None = None,
    profile: PromptProfile | None = None,
) -> GeneratedAnswer:
    """
    Entry point: run the chat graph for one question.

    Args:
        question: The user's message (already validated as non-empty).
        knowledge_base: Application-wide index holder.
        llm: Optional provider override; defaults to the configured singleton.
        profile: Optional prompt profile; defaults to settings.prompt_profile.

    Raises:
        GenerationError: If the final completion call fails.
        ValueError: If the LLM provider or prompt profile is misconfigured.
    """
    initial_state: ChatState = {
        "question": question,
        "knowledge_base": knowledge_base,
        "llm": llm or get_llm_provider(),
        "profile": profile or get_prompt_profile(),
    }

    logger.info("Invoking chat graph: question='%s'", question[:80])

    result = await graph.ainvoke(initial_state)
    answer: GeneratedAnswer = result["answer"]

    logger.info("Chat graph complete: source=%s", answer.source.value)
    return answer
