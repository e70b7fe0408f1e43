# =============================================================================
# Unit Tests — Agents
# =============================================================================
#
# Tests the classifier, responder and chat graph without API keys or PDFs.
# Uses mock LLM providers and a small hand-built vector index.
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.agents.classifier import (
    RELEVANCE_SYSTEM_PROMPT,
    ClassificationError,
    RelevanceVerdict,
    is_relevant,
)
from app.agents.orchestrator import (
    answer_question,
    route_after_classify,
    route_after_retrieve,
)
from app.agents.prompts import PROFILES, get_prompt_profile
from app.agents.responder import (
    GROUNDED_SYSTEM_PROMPT,
    GenerationError,
    ResponseSource,
    generate_general,
    generate_grounded,
)
from app.services.chunker import ChunkResult
from app.services.knowledge_base import IndexStatus
from app.services.llm import LLMResponse
from app.services.vectorstore import InMemoryVectorIndex, VectorSearchResult

ICE_FAQ = (
    "Q: What temperature should ice be stored at? "
    "A: Ice sculptures should be stored at -10°F (-23°C) for optimal preservation"
)
DELIVERY_FAQ = "Q: Do you deliver? A: Yes, The Ice Butcher delivers and sets up"


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _response(content: str) -> LLMResponse:
    return LLMResponse(
        content=content, model="test-model", input_tokens=10, output_tokens=5,
    )


def _result(content: str, score: float = 0.9) -> VectorSearchResult:
    return VectorSearchResult(
        chunk=ChunkResult(
            content=content, page_number=1, chunk_index=0,
        ),
        similarity_score=score,
    )


# ---------------------------------------------------------------------------
# Test: Relevance Classifier
# ---------------------------------------------------------------------------


class TestIsRelevant:
    """Tests for the LLM relevance check."""

    def test_empty_chunks_skip_the_model(self):
        mock_llm = AsyncMock()
        verdict = _run(is_relevant([], "What is ice?", mock_llm))
        assert verdict == RelevanceVerdict(relevant=False)
        mock_llm.complete.assert_not_called()

    def test_true_reply_is_relevant(self):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response("true")
        verdict = _run(is_relevant([_result(ICE_FAQ)], "Ice temp?", mock_llm))
        assert verdict.relevant is True
        assert verdict.error is None

    def test_reply_parsing_is_case_insensitive(self):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response("TRUE.")
        verdict = _run(is_relevant([_result(ICE_FAQ)], "Ice temp?", mock_llm))
        assert verdict.relevant is True

    @pytest.mark.parametrize("reply", ["false", "", "maybe", "I cannot tell"])
    def test_anything_else_is_not_relevant(self, reply):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response(reply)
        verdict = _run(is_relevant([_result(ICE_FAQ)], "Weather?", mock_llm))
        assert verdict.relevant is False

    def test_prompt_contains_question_and_all_chunks(self):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response("false")
        _run(is_relevant(
            [_result(ICE_FAQ), _result(DELIVERY_FAQ)], "Ice temp?", mock_llm,
        ))

        call_kwargs = mock_llm.complete.call_args.kwargs
        assert call_kwargs["system"] == RELEVANCE_SYSTEM_PROMPT
        assert call_kwargs["temperature"] == 0.0
        user_content = call_kwargs["messages"][0]["content"]
        assert user_content == (
            f"Question: Ice temp?\nContent: {ICE_FAQ}\n{DELIVERY_FAQ}"
        )

    def test_provider_failure_fails_open(self):
        mock_llm = AsyncMock()
        mock_llm.complete.side_effect = RuntimeError("rate limited")
        verdict = _run(is_relevant([_result(ICE_FAQ)], "Ice temp?", mock_llm))
        assert verdict.relevant is False
        assert isinstance(verdict.error, ClassificationError)
        assert "rate limited" in str(verdict.error)
        assert isinstance(verdict.error.__cause__, RuntimeError)


# ---------------------------------------------------------------------------
# Test: Responder
# ---------------------------------------------------------------------------


class TestResponder:
    """Tests for grounded and general answer generation."""

    def test_grounded_uses_context_at_temperature_zero(self):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response("Store it at -10°F.")

        answer = _run(generate_grounded(
            "Ice temp?", [_result(ICE_FAQ)], mock_llm, PROFILES["ice_butcher"],
        ))

        assert answer.message == "Store it at -10°F."
        assert answer.source is ResponseSource.KNOWLEDGE_BASE
        assert answer.model == "test-model"

        call_kwargs = mock_llm.complete.call_args.kwargs
        assert call_kwargs["system"] == GROUNDED_SYSTEM_PROMPT
        assert call_kwargs["temperature"] == 0.0
        user_content = call_kwargs["messages"][0]["content"]
        assert user_content.startswith(
            "Answer the following question using the provided context:\n"
            "Question: Ice temp?\n"
        )
        assert ICE_FAQ in user_content

    def test_general_uses_persona_prompt(self):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response("The Ice Butcher says hi.")
        profile = PROFILES["ice_butcher"]

        answer = _run(generate_general("Hello?", mock_llm, profile))

        assert answer.source is ResponseSource.GENERAL
        call_kwargs = mock_llm.complete.call_args.kwargs
        assert call_kwargs["system"] == profile.system_prompt
        assert "The Ice Butcher" in call_kwargs["system"]
        assert call_kwargs["temperature"] == 0.5
        assert call_kwargs["messages"] == [{"role": "user", "content": "Hello?"}]

    def test_links_formatted_when_profile_enables_it(self):
        mock_llm = AsyncMock()
        mock_llm.complete.return_value = _response(
            "Visit The Ice Butcher : https://theicebutcher.com/"
        )
        answer = _run(generate_general(
            "Website?", mock_llm, PROFILES["ice_butcher"],
        ))
        assert '<a href="https://theicebutcher.com/" target="_blank">' in answer.message

    def test_links_left_plain_when_profile_disables_it(self):
        mock_llm = AsyncMock()
        reply = "Visit The Ice Butcher : https://theicebutcher.com/"
        mock_llm.complete.return_value = _response(reply)
        answer = _run(generate_general(
            "Website?", mock_llm, PROFILES["ice_butcher_plain"],
        ))
        assert answer.message == reply

    def test_provider_failure_raises_generation_error(self):
        mock_llm = AsyncMock()
        mock_llm.complete.side_effect = RuntimeError("network down")
        with pytest.raises(GenerationError, match="network down"):
            _run(generate_general("Hello?", mock_llm, PROFILES["ice_butcher"]))


# ---------------------------------------------------------------------------
# Test: Prompt Profiles
# ---------------------------------------------------------------------------


class TestPromptProfiles:

    def test_default_profile_from_settings(self):
        assert get_prompt_profile().name == "ice_butcher"

    def test_unknown_profile_rejected(self):
        with pytest.raises(ValueError, match="Unknown prompt profile"):
            get_prompt_profile("missing")

    def test_persona_rules_present(self):
        prompt = PROFILES["ice_butcher"].system_prompt
        assert "limited to 2 sentences" in prompt
        assert '"Display Name: URL"' in prompt
        assert "https://theicebutcher.com/" in prompt


# ---------------------------------------------------------------------------
# Test: Chat Graph
# ---------------------------------------------------------------------------


def _scripted_llm(relevant: bool) -> AsyncMock:
    """Mock LLM that answers by looking at which system prompt it got."""

    async def complete(messages, system=None, temperature=0.0, max_tokens=None):
        if system == RELEVANCE_SYSTEM_PROMPT:
            return _response("true" if relevant else "false")
        if system == GROUNDED_SYSTEM_PROMPT:
            return _response("Ice sculptures should be stored at -10°F (-23°C).")
        return _response("As The Ice Butcher, I can only speak to ice.")

    mock_llm = AsyncMock()
    mock_llm.complete.side_effect = complete
    return mock_llm


def _knowledge_base(status: IndexStatus) -> MagicMock:
    kb = MagicMock()
    kb.ensure_ready = AsyncMock(return_value=status)
    return kb


def _ready_status() -> IndexStatus:
    index = InMemoryVectorIndex(
        [
            ChunkResult(content=ICE_FAQ, page_number=1, chunk_index=0),
            ChunkResult(content=DELIVERY_FAQ, page_number=1, chunk_index=1),
            ChunkResult(content="Q: Logos? A: Yes", page_number=2, chunk_index=2),
        ],
        [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
    )
    return IndexStatus(index=index)


class TestChatGraph:
    """Tests for the LangGraph chat pipeline with mocked collaborators."""

    def test_relevant_chunks_give_knowledge_base_answer(self):
        mock_llm = _scripted_llm(relevant=True)
        with patch(
            "app.agents.orchestrator.embed_query",
            new_callable=AsyncMock,
            return_value=[0.9, 0.1, 0.0],
        ):
            answer = _run(answer_question(
                "What temperature should ice be stored at?",
                knowledge_base=_knowledge_base(_ready_status()),
                llm=mock_llm,
                profile=PROFILES["ice_butcher"],
            ))

        assert answer.source is ResponseSource.KNOWLEDGE_BASE
        assert "-10°F" in answer.message
        assert mock_llm.complete.call_count == 2

        # Top-2 chunks went to the classifier, the third did not
        classify_call = mock_llm.complete.call_args_list[0].kwargs
        content = classify_call["messages"][0]["content"]
        assert ICE_FAQ in content
        assert DELIVERY_FAQ in content
        assert "Logos" not in content

    def test_irrelevant_chunks_give_general_answer(self):
        mock_llm = _scripted_llm(relevant=False)
        with patch(
            "app.agents.orchestrator.embed_query",
            new_callable=AsyncMock,
            return_value=[0.0, 0.0, 1.0],
        ):
            answer = _run(answer_question(
                "What's the weather today?",
                knowledge_base=_knowledge_base(_ready_status()),
                llm=mock_llm,
                profile=PROFILES["ice_butcher"],
            ))

        assert answer.source is ResponseSource.GENERAL
        last_call = mock_llm.complete.call_args_list[-1].kwargs
        assert last_call["system"] == PROFILES["ice_butcher"].system_prompt

    def test_empty_index_skips_classifier_model_call(self):
        mock_llm = _scripted_llm(relevant=True)
        empty = IndexStatus(index=InMemoryVectorIndex([], []))
        with patch(
            "app.agents.orchestrator.embed_query",
            new_callable=AsyncMock,
            return_value=[1.0, 0.0],
        ):
            answer = _run(answer_question(
                "Anything?",
                knowledge_base=_knowledge_base(empty),
                llm=mock_llm,
                profile=PROFILES["ice_butcher"],
            ))

        assert answer.source is ResponseSource.GENERAL
        assert mock_llm.complete.call_count == 1

    def test_unavailable_index_falls_back_without_embedding(self):
        mock_llm = _scripted_llm(relevant=True)
        failed = IndexStatus(error="PDF not found: faqs.pdf")
        with patch(
            "app.agents.orchestrator.embed_query", new_callable=AsyncMock,
        ) as mock_embed:
            answer = _run(answer_question(
                "What temperature should ice be stored at?",
                knowledge_base=_knowledge_base(failed),
                llm=mock_llm,
                profile=PROFILES["ice_butcher"],
            ))

        assert answer.source is ResponseSource.GENERAL
        mock_embed.assert_not_called()
        assert mock_llm.complete.call_count == 1

    def test_generation_failure_propagates(self):
        mock_llm = AsyncMock()
        mock_llm.complete.side_effect = RuntimeError("auth failed")
        with pytest.raises(GenerationError):
            _run(answer_question(
                "Hello?",
                knowledge_base=_knowledge_base(IndexStatus(error="no pdf")),
                llm=mock_llm,
                profile=PROFILES["ice_butcher"],
            ))


class TestRouting:
    """Tests for the conditional edge functions."""

    def test_index_error_routes_to_general(self):
        assert route_after_retrieve({"index_error": "boom"}) == "general"

    def test_ready_index_routes_to_classify(self):
        assert route_after_retrieve({"index_error": None, "chunks": []}) == "classify"

    def test_relevant_routes_to_grounded(self):
        state = {"verdict": RelevanceVerdict(relevant=True)}
        assert route_after_classify(state) == "grounded"

    def test_failed_check_routes_to_general(self):
        state = {"verdict": RelevanceVerdict(
            relevant=False, error=ClassificationError("timeout"),
        )}
        assert route_after_classify(state) == "general"


# ---------------------------------------------------------------------------
# Test: LLM Provider Factory
# ---------------------------------------------------------------------------


class TestLLMProviderFactory:
    """Tests for the LLM provider factory function."""

    def test_factory_raises_without_api_key(self):
        from app.services import llm

        original = llm._provider
        llm._provider = None

        try:
            with patch.object(
                llm.settings, "llm_provider", "openai_compatible"
            ), patch.object(
                llm.settings, "llm_api_key", None
            ), patch.object(
                llm.settings, "openai_api_key", ""
            ):
                with pytest.raises(ValueError, match="API key"):
                    llm.get_llm_provider()
        finally:
            llm._provider = original

    def test_factory_rejects_unknown_provider(self):
        from app.services import llm

        original = llm._provider
        llm._provider = None

        try:
            with patch.object(llm.settings, "llm_provider", "mystery"):
                with pytest.raises(ValueError, match="Unknown LLM_PROVIDER"):
                    llm.get_llm_provider()
        finally:
            llm._provider = original

    def test_openai_provider_passes_zero_temperature(self):
        from app.services.llm import OpenAICompatibleProvider

        provider = OpenAICompatibleProvider(api_key="test-key", model="gpt-4o-mini")
        completion = MagicMock()
        completion.choices = [MagicMock(message=MagicMock(content="true"))]
        completion.model = "gpt-4o-mini"
        completion.usage = None
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(return_value=completion)

        response = _run(provider.complete(
            [{"role": "user", "content": "hi"}], system="sys", temperature=0.0,
        ))

        assert response.content == "true"
        create_kwargs = provider._client.chat.completions.create.call_args.kwargs
        assert create_kwargs["temperature"] == 0.0
        assert create_kwargs["messages"][0] == {"role": "system", "content": "sys"}

    def test_anthropic_provider_sends_system_as_kwarg(self):
        from app.services.llm import AnthropicProvider

        provider = AnthropicProvider(api_key="test-key", model="claude-3-5-haiku-latest")
        message = MagicMock()
        message.content = [MagicMock(type="text", text="false")]
        message.model = "claude-3-5-haiku-latest"
        message.usage = MagicMock(input_tokens=12, output_tokens=1)
        provider._client = MagicMock()
        provider._client.messages.create = AsyncMock(return_value=message)

        response = _run(provider.complete(
            [{"role": "user", "content": "hi"}], system="sys", temperature=0.5,
        ))

        assert response.content == "false"
        assert response.input_tokens == 12
        create_kwargs = provider._client.messages.create.call_args.kwargs
        assert create_kwargs["system"] == "sys"
        assert create_kwargs["temperature"] == 0.5
        assert all(m["role"] != "system" for m in create_kwargs["messages"])
