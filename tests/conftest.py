from __future__ import annotations

import json
from typing import List, Sequence, Union

import pytest

from scriptgen.adapters.llm_base import LLMAdapter, LLMResponse
from scriptgen.config import SessionConfig
from scriptgen.models import Credentials, GenerationOptions, Priority, PromptPair, ScenarioSpec

Scripted = Union[str, Exception]


class ScriptedAdapter(LLMAdapter):
    """Replays canned responses in order and records every prompt."""

    def __init__(self, responses: Sequence[Scripted]) -> None:
        self.responses: List[Scripted] = list(responses)
        self.prompts: List[PromptPair] = []
        self.options: List[GenerationOptions] = []

    def complete(self, prompt: PromptPair, options: GenerationOptions) -> LLMResponse:
        self.prompts.append(prompt)
        self.options.append(options)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(raw_text=item)


def verdict_json(status: str, issues: Sequence[str] = ()) -> str:
    payload = {"status": status}
    if issues:
        payload["issues"] = list(issues)
    return json.dumps(payload)


@pytest.fixture
def scripted():
    return ScriptedAdapter


@pytest.fixture
def offline_config() -> SessionConfig:
    return SessionConfig(mode="offline", offline_seed=7)


@pytest.fixture
def login_spec() -> ScenarioSpec:
    return ScenarioSpec(
        narrative="Open the login page. Sign in with valid credentials! Check the dashboard loads?",
        target_url="https://shop.example.com",
        priority=Priority.HIGH,
        credentials=Credentials(username="qa-user", password="s3cret!"),
        explicit_toggles=frozenset({"forms"}),
    )


@pytest.fixture
def simple_spec() -> ScenarioSpec:
    return ScenarioSpec(
        narrative="test login form with mobile view",
        target_url="https://example.com",
        explicit_toggles=frozenset({"forms"}),
    )
