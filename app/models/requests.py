# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API.
#
# DESIGN DECISION: `message` is optional at the schema level.
# A missing or empty message is a client error with a specific body,
# {"error": "Message is required"}, so the check lives in the handler
# instead of producing FastAPI's default 422 validation payload.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Request body for POST /api/chat.

    Example:
        {"message": "What temperature should ice be stored at?"}
    """

    message: str | None = Field(
        default=None,
        description="The user's question",
        examples=["What temperature should ice be stored at?"],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "What temperature should ice be stored at?"},
                {"message": "Can you share the AR link for the seafood table?"},
            ]
        }
    )
