# =============================================================================
# Agents Package — LangGraph Chat Pipeline
# =============================================================================
#   - orchestrator.py: LangGraph graph — retrieve, classify, route to answer
#   - classifier.py: LLM true/false relevance check of retrieved chunks
#   - responder.py: Grounded (FAQ context) and general (persona) answers
#   - prompts.py: Prompt profiles (persona prompt, temperature, link format)
# =============================================================================
