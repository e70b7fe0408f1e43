# =============================================================================
# Ice Butcher FAQ Chat
# =============================================================================
# A retrieval-augmented chat backend. Questions are answered from an FAQ PDF
# when the retrieved passages are relevant, otherwise by a general LLM
# completion with an ice-sculpture expert persona.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI route handlers and dependencies
#   ├── agents/       → LangGraph chat pipeline (retrieve, classify, answer)
#   ├── models/       → Pydantic V2 request/response schemas
#   ├── services/     → Parsing, chunking, embedding, vector index, LLMs
#   ├── config.py     → Pydantic Settings
#   └── main.py       → Application factory and uvicorn entry point
# =============================================================================
