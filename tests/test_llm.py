from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from scanner.config import Settings
from scanner.errors import AnalysisFailure
from scanner.llm import ModelClient, call_model


def _response(*texts, stop_reason="end_turn"):
    return SimpleNamespace(content=[SimpleNamespace(text=t) for t in texts], stop_reason=stop_reason)


def test_no_key_means_unconfigured():
    client = ModelClient(api_key="", model="claude-test")
    assert client.configured is False
    with pytest.raises(AnalysisFailure):
        client.generate("hello")


def test_sdk_built_without_retries():
    with patch("scanner.llm.Anthropic") as mock_cls:
        client = ModelClient(api_key="sk-test", model="claude-test", timeout=30)

    assert client.configured
    mock_cls.assert_called_once_with(api_key="sk-test", max_retries=0, timeout=30)


def test_generate_joins_text_blocks():
    with patch("scanner.llm.Anthropic") as mock_cls:
        sdk = mock_cls.return_value
        sdk.messages.create.return_value = _response('{"score": ', "80}")
        client = ModelClient(api_key="sk-test", model="claude-test")

        text = client.generate("audit this", temperature=0.2, max_output_tokens=100)

    assert text == '{"score": 80}'
    kwargs = sdk.messages.create.call_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert kwargs["max_tokens"] == 100
    assert kwargs["temperature"] == 0.2
    assert kwargs["messages"] == [{"role": "user", "content": "audit this"}]


def test_truncated_output_logs_warning(caplog):
    with patch("scanner.llm.Anthropic") as mock_cls:
        mock_cls.return_value.messages.create.return_value = _response('{"score"', stop_reason="max_tokens")
        client = ModelClient(api_key="sk-test", model="claude-test")
        client.generate("audit this")
    assert "max_tokens" in caplog.text


def test_provider_errors_propagate():
    with patch("scanner.llm.Anthropic") as mock_cls:
        mock_cls.return_value.messages.create.side_effect = RuntimeError("overloaded")
        client = ModelClient(api_key="sk-test", model="claude-test")
        with pytest.raises(RuntimeError):
            client.generate("audit this")


def test_from_settings():
    settings = Settings(anthropic_api_key="  ", model_name="claude-x")
    client = ModelClient.from_settings(settings)
    assert client.configured is False
    assert client.model == "claude-x"


@pytest.mark.asyncio
async def test_call_model_runs_generate():
    client = MagicMock()
    client.generate.return_value = "{}"

    result = await call_model(client, "prompt", temperature=0.5)

    assert result == "{}"
    client.generate.assert_called_once_with("prompt", temperature=0.5)
