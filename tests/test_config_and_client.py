from types import SimpleNamespace

import pytest
from openai import OpenAIError
from pydantic import ValidationError

from dealfindr.adapters.config import AppConfig
from dealfindr.adapters.llm_client import OpenAIChatGenerator, TextGenerationError, make_text_generator


def test_config_reads_prefixed_env(monkeypatch):
    monkeypatch.setenv("DEALFINDR_LLM_MODEL", "gateway-model")
    monkeypatch.setenv("DEALFINDR_CRITERIA_VERSION", "2.0.0")
    monkeypatch.setenv("DEALFINDR_LLM_TEMPERATURE", "0.7")

    cfg = AppConfig()

    assert cfg.LLM_MODEL == "gateway-model"
    assert cfg.CRITERIA_VERSION == "2.0.0"
    assert cfg.LLM_TEMPERATURE == pytest.approx(0.7)


def test_config_rejects_bad_values(monkeypatch):
    monkeypatch.setenv("DEALFINDR_LLM_TEMPERATURE", "3")
    with pytest.raises(ValidationError):
        AppConfig()

    monkeypatch.setenv("DEALFINDR_LLM_TEMPERATURE", "0.3")
    monkeypatch.setenv("DEALFINDR_LLM_MAX_TOKENS", "0")
    with pytest.raises(ValidationError):
        AppConfig()


def test_no_api_key_means_no_generator(monkeypatch):
    monkeypatch.setenv("DEALFINDR_LLM_API_KEY", "  ")
    cfg = AppConfig()

    assert cfg.LLM_API_KEY is None
    assert make_text_generator(cfg) is None


def test_api_key_builds_openai_generator(monkeypatch):
    monkeypatch.setenv("DEALFINDR_LLM_API_KEY", "sk-test")
    monkeypatch.setenv("DEALFINDR_LLM_BASE_URL", "https://gateway.example.com/v1")

    gen = make_text_generator(AppConfig())

    assert isinstance(gen, OpenAIChatGenerator)
    assert gen.base_url == "https://gateway.example.com/v1"


def _fake_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_generator_returns_first_choice_content():
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        msg = SimpleNamespace(content='{"summary": "ok"}')
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)])

    gen = OpenAIChatGenerator(api_key="k", model="m", _client=_fake_client(create))
    out = gen.complete([{"role": "user", "content": "hi"}], temperature=0.3, max_tokens=100)

    assert out == '{"summary": "ok"}'
    assert seen["model"] == "m"
    assert seen["max_tokens"] == 100


def test_generator_wraps_provider_errors():
    def create(**kwargs):
        raise OpenAIError("gateway down")

    gen = OpenAIChatGenerator(api_key="k", model="m", _client=_fake_client(create))
    with pytest.raises(TextGenerationError, match="gateway down"):
        gen.complete([{"role": "user", "content": "hi"}], temperature=0.3, max_tokens=100)


def test_generator_rejects_empty_choices():
    gen = OpenAIChatGenerator(
        api_key="k", model="m", _client=_fake_client(lambda **kw: SimpleNamespace(choices=[]))
    )
    with pytest.raises(TextGenerationError):
        gen.complete([{"role": "user", "content": "hi"}], temperature=0.3, max_tokens=100)


def test_json_log_formatter_merges_context():
    import json
    import logging

    from dealfindr.adapters.logging_utils import JsonLogFormatter

    record = logging.LogRecord("dealfindr.test", logging.WARNING, __file__, 1, "insights_unparseable", None, None)
    record.context = {"opportunity": "Test Estate", "error": "invalid json"}

    line = json.loads(JsonLogFormatter().format(record))

    assert line["message"] == "insights_unparseable"
    assert line["level"] == "WARNING"
    assert line["opportunity"] == "Test Estate"
