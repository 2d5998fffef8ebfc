from __future__ import annotations

from dataclasses import replace

from scriptgen.adapters.llm_base import LLMAdapter, LLMResponse
from scriptgen.dialects import DialectProfile
from scriptgen.errors import ValidationError
from scriptgen.gates.parsers import VerdictResult, parse_verdict
from scriptgen.models import (
    CheckVerdict,
    GeneratedArtifact,
    GenerationOptions,
    RequirementSet,
    ScenarioSpec,
)
from scriptgen.prompting import compose_check_prompt


class QualityChecker:
    """Asks the completion service to judge an artifact against the rubric."""

    def __init__(self, adapter: LLMAdapter, profile: DialectProfile, options: GenerationOptions) -> None:
        self.adapter = adapter
        self.profile = profile
        self.options = replace(options, json_response=True)
        self.last_response: LLMResponse | None = None

    def evaluate(
        self, artifact: GeneratedArtifact, spec: ScenarioSpec, requirements: RequirementSet
    ) -> VerdictResult:
        if not artifact.code.strip():
            raise ValidationError("Cannot check an empty artifact.")
        prompt = compose_check_prompt(self.profile, artifact, spec, requirements)
        self.last_response = None
        self.last_response = self.adapter.complete(prompt, self.options)
        return parse_verdict(self.last_response.raw_text)

    def check(
        self, artifact: GeneratedArtifact, spec: ScenarioSpec, requirements: RequirementSet
    ) -> CheckVerdict:
        return self.evaluate(artifact, spec, requirements).unwrap()
