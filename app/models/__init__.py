# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Request/response schemas for the HTTP API:
#   - requests.py: ChatRequest
#   - responses.py: ChatResponse, ErrorResponse, HealthResponse
# =============================================================================
