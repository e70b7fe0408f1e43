# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API and are the
# contract with the chat widget:
#   success → {"message": ..., "source": ...}
#   failure → {"error": ...}
# =============================================================================

from pydantic import BaseModel, Field

from app.agents.responder import ResponseSource


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str
    index_ready: bool = Field(
        description="Whether the FAQ knowledge base has been built",
    )


class ChatResponse(BaseModel):
    """Response for POST /api/chat."""

    message: str = Field(
        description="The answer. May contain <a> elements when link "
        "formatting is enabled.",
    )
    source: ResponseSource = Field(
        description="'PDF Knowledge Base' when answered from the FAQ, "
        "'OpenAI General Response' otherwise",
    )


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response from POST /api/chat."""

    error: str
