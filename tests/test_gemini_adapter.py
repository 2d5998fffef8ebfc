from types import SimpleNamespace

import pytest
from google.genai import errors

from scriptgen.adapters.gemini_adapter import GeminiAdapter
from scriptgen.config import SessionConfig
from scriptgen.errors import ConfigurationError, ServiceError
from scriptgen.models import GenerationOptions, PromptPair

PROMPT = PromptPair(system_prompt="Rubric here.", user_prompt="Code here.")
OPTIONS = GenerationOptions(model="gemini-flash-latest", temperature=0.1, max_tokens=1000, json_response=True)


class FakeModels:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def test_system_prompt_sent_as_instruction():
    models = FakeModels(SimpleNamespace(text='{"status": "ready"}'))
    adapter = GeminiAdapter(SessionConfig(), client=SimpleNamespace(models=models))
    response = adapter.complete(PROMPT, OPTIONS)
    assert response.raw_text == '{"status": "ready"}'
    call = models.calls[0]
    assert call["model"] == "gemini-flash-latest"
    assert call["contents"] == "Code here."
    assert call["config"].system_instruction == "Rubric here."
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].max_output_tokens == 1000


def test_api_error_becomes_service_error():
    error = errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}})
    adapter = GeminiAdapter(SessionConfig(), client=SimpleNamespace(models=FakeModels(error)))
    with pytest.raises(ServiceError) as excinfo:
        adapter.complete(PROMPT, OPTIONS)
    assert excinfo.value.status_code == 503


def test_requires_api_key_without_client():
    with pytest.raises(ConfigurationError):
        GeminiAdapter(SessionConfig(mode="live", check_provider="gemini"))
