# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - chat.py: POST /api/chat (knowledge base or general answer)
#   - deps.py: Dependencies (knowledge base, prompt profile, LLM override)
# =============================================================================
