# =============================================================================
# Services Package — Business Logic
# =============================================================================
# Contains the core business logic, separated from API handlers:
#   - parser.py: PDF parsing with Docling (text grouped by page)
#   - chunker.py: Sentence-boundary chunking (1000 chars, 500 overlap)
#   - embedder.py: OpenAI embedding generation (async, batched)
#   - vectorstore.py: In-memory cosine similarity index
#   - knowledge_base.py: One-shot index build, application state
#   - llm.py: Multi-provider LLM abstraction (OpenAI-compatible, Anthropic)
#   - formatting.py: Bare URL → HTML anchor rewriting
# =============================================================================
