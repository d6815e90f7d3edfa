from unittest.mock import MagicMock, patch

import anthropic
import openai
import pytest
from google.api_core import exceptions as google_exceptions

from termlens.router.claude import ClaudeAdapter
from termlens.router.gemini import GeminiAdapter
from termlens.router.models import ModelConfig
from termlens.router.openai_adapter import OpenAIAdapter
from termlens.router.usage import UsageTracker


def make_config(name: str, **kwargs) -> ModelConfig:
    return ModelConfig(name=name, priority=1, api_key="test-key", **kwargs)


# ------------------------------------------------------------------
# Claude
# ------------------------------------------------------------------

class TestClaudeAdapter:

    @patch("termlens.router.claude.anthropic.Anthropic")
    def test_classify_devuelve_contenido_y_registra_tokens(self, mock_client_cls):
        response = MagicMock()
        response.content = [MagicMock(text='{"terms": []}')]
        response.usage.input_tokens = 120
        response.usage.output_tokens = 30
        mock_client_cls.return_value.messages.create.return_value = response
        usage = UsageTracker()

        result = ClaudeAdapter(make_config("claude"), usage).classify("ventana", "sistema")

        assert result.content == '{"terms": []}'
        assert result.model_used == "claude"
        assert usage.used("claude") == 150

        kwargs = mock_client_cls.return_value.messages.create.call_args.kwargs
        assert kwargs["system"] == "sistema"
        assert kwargs["messages"] == [{"role": "user", "content": "ventana"}]
        assert kwargs["model"] == "claude-haiku-4-5-20251001"

    @patch("termlens.router.claude.anthropic.Anthropic")
    def test_modelo_configurado(self, mock_client_cls):
        response = MagicMock(content=[])
        response.usage.input_tokens = 1
        response.usage.output_tokens = 0
        mock_client_cls.return_value.messages.create.return_value = response

        result = ClaudeAdapter(make_config("claude", model="claude-sonnet-4-5"), UsageTracker()).classify("v", "s")

        assert result.content == ""
        assert mock_client_cls.return_value.messages.create.call_args.kwargs["model"] == "claude-sonnet-4-5"

    @patch("termlens.router.claude.anthropic.Anthropic")
    def test_rate_limit_activa_cooldown(self, mock_client_cls):
        mock_client_cls.return_value.messages.create.side_effect = anthropic.RateLimitError(
            message  = "rate limited",
            response = MagicMock(),
            body     = {},
        )
        adapter = ClaudeAdapter(make_config("claude"), UsageTracker())

        with pytest.raises(anthropic.RateLimitError):
            adapter.classify("ventana", "sistema")

        assert not adapter.is_available()


# ------------------------------------------------------------------
# Gemini
# ------------------------------------------------------------------

class TestGeminiAdapter:

    @patch("termlens.router.gemini.genai")
    def test_classify_devuelve_contenido_y_registra_tokens(self, mock_genai):
        response = MagicMock(text='{"terms": []}')
        response.usage_metadata.prompt_token_count = 80
        response.usage_metadata.candidates_token_count = 20
        mock_genai.GenerativeModel.return_value.generate_content.return_value = response
        usage = UsageTracker()

        result = GeminiAdapter(make_config("gemini"), usage).classify("ventana", "sistema")

        assert result.content == '{"terms": []}'
        assert usage.used("gemini") == 100
        mock_genai.configure.assert_called_once_with(api_key="test-key")
        assert mock_genai.GenerativeModel.call_args.kwargs["system_instruction"] == "sistema"
        assert mock_genai.GenerativeModel.call_args.kwargs["model_name"] == "gemini-2.0-flash"

    @patch("termlens.router.gemini.genai")
    def test_cuota_agotada_activa_cooldown(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = (
            google_exceptions.ResourceExhausted("quota")
        )
        adapter = GeminiAdapter(make_config("gemini"), UsageTracker())

        with pytest.raises(google_exceptions.ResourceExhausted):
            adapter.classify("ventana", "sistema")

        assert not adapter.is_available()


# ------------------------------------------------------------------
# OpenAI
# ------------------------------------------------------------------

class TestOpenAIAdapter:

    @patch("termlens.router.openai_adapter.openai.OpenAI")
    def test_classify_pide_json_object(self, mock_client_cls):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = '{"terms": []}'
        response.usage.prompt_tokens = 60
        response.usage.completion_tokens = 15
        mock_client_cls.return_value.chat.completions.create.return_value = response
        usage = UsageTracker()

        result = OpenAIAdapter(make_config("openai"), usage).classify("ventana", "sistema")

        assert result.content == '{"terms": []}'
        assert usage.used("openai") == 75
        kwargs = mock_client_cls.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": "sistema"}
        assert kwargs["model"] == "gpt-4o"

    @patch("termlens.router.openai_adapter.openai.OpenAI")
    def test_contenido_nulo_y_sin_usage(self, mock_client_cls):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = None
        response.usage = None
        mock_client_cls.return_value.chat.completions.create.return_value = response

        result = OpenAIAdapter(make_config("openai"), UsageTracker()).classify("v", "s")

        assert result.content == ""
        assert result.tokens_input == 0
        assert result.tokens_output == 0

    @patch("termlens.router.openai_adapter.openai.OpenAI")
    def test_timeout_activa_cooldown(self, mock_client_cls):
        mock_client_cls.return_value.chat.completions.create.side_effect = openai.APITimeoutError(
            request=MagicMock()
        )
        adapter = OpenAIAdapter(make_config("openai"), UsageTracker())

        with pytest.raises(openai.APITimeoutError):
            adapter.classify("ventana", "sistema")

        assert not adapter.is_available()
