from __future__ import annotations

import random
from contextlib import contextmanager
from dataclasses import replace
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from scriptgen.adapters.gemini_adapter import GeminiAdapter
from scriptgen.adapters.llm_base import LLMAdapter
from scriptgen.adapters.offline_adapter import OfflineAdapter
from scriptgen.adapters.openai_adapter import OpenAIAdapter
from scriptgen.checker import QualityChecker
from scriptgen.config import SessionConfig
from scriptgen.dialects import DialectProfile
from scriptgen.errors import SessionBusyError, SessionStateError
from scriptgen.interpreter import interpret
from scriptgen.models import (
    CheckVerdict,
    CycleRecord,
    GeneratedArtifact,
    GenerationOptions,
    PromptPair,
    RequirementSet,
    ScenarioSpec,
)
from scriptgen.prompting import compose_prompt
from scriptgen.requirements import extract_requirements


class SessionState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    GENERATED = "generated"
    CHECKING = "checking"
    READY = "ready"
    NEEDS_UPDATE = "needs-update"
    REPAIRING = "repairing"


class RepairController:
    """Owns one generation session: generate, check, and repair on request.

    Only one request may be outstanding at a time. A failed request puts the
    session back in the state it was in before that request: a failed
    generation returns to IDLE (or NEEDS_UPDATE for a repair), a failed check
    to GENERATED so the check can be retried without regenerating.
    """

    def __init__(
        self,
        config: SessionConfig,
        profile: DialectProfile,
        generator: Optional[LLMAdapter] = None,
        checker_adapter: Optional[LLMAdapter] = None,
    ) -> None:
        self.config = config
        self.profile = profile
        self.generator = generator if generator is not None else self._adapter("generate")
        self.generation_options = GenerationOptions(
            model=config.model,
            temperature=config.temperature if config.temperature is not None else profile.default_temperature,
            max_tokens=config.max_output_tokens,
        )
        self.checker = QualityChecker(
            checker_adapter if checker_adapter is not None else self._adapter("check"),
            profile,
            GenerationOptions(
                model=config.check_model,
                temperature=config.check_temperature,
                max_tokens=config.check_max_output_tokens,
                json_response=True,
            ),
        )
        self.state = SessionState.IDLE
        self.spec: Optional[ScenarioSpec] = None
        self.requirements: Optional[RequirementSet] = None
        self.artifact: Optional[GeneratedArtifact] = None
        self.verdict: Optional[CheckVerdict] = None
        self.last_prompt: Optional[PromptPair] = None
        self.cycle = 0
        self.history: List[CycleRecord] = []
        self._raw_generation = ""
        self._in_flight = False

    def _adapter(self, role: str) -> LLMAdapter:
        if self.config.mode == "offline":
            return OfflineAdapter(self.profile, rng=random.Random(self.config.offline_seed))
        if role == "check" and self.config.check_provider == "gemini":
            return GeminiAdapter(self.config)
        return OpenAIAdapter(self.config)

    @property
    def busy(self) -> bool:
        return self._in_flight

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._in_flight:
            raise SessionBusyError("A request is already in flight for this session.")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    def reset(self) -> None:
        if self._in_flight:
            raise SessionBusyError("Cannot discard a session while a request is in flight.")
        self._clear()

    def _clear(self) -> None:
        self.state = SessionState.IDLE
        self.spec = None
        self.requirements = None
        self.artifact = None
        self.verdict = None
        self.last_prompt = None
        self.cycle = 0
        self.history = []
        self._raw_generation = ""

    def pending_cycle(self) -> Optional[CycleRecord]:
        """The current cycle when its artifact was generated but never checked."""
        if self.state is not SessionState.GENERATED or self.artifact is None:
            return None
        return CycleRecord(
            cycle=self.cycle,
            artifact=self.artifact,
            verdict=None,
            raw_generation=self._raw_generation,
            raw_check="",
        )

    def fall_back_offline(self) -> None:
        """Swap both adapters for offline ones and keep the session as it is."""
        if self._in_flight:
            raise SessionBusyError("Cannot switch adapters while a request is in flight.")
        self.config = replace(self.config, mode="offline")
        self.generator = self._adapter("generate")
        self.checker.adapter = self._adapter("check")

    def submit(self, spec: ScenarioSpec) -> CheckVerdict:
        """Start a new session from ``spec`` and run the first cycle."""
        with self._exclusive():
            spec.validate()
            requirements = extract_requirements(spec.narrative, spec.explicit_toggles)
            self._clear()
            self.spec = spec
            self.requirements = requirements
            self.state = SessionState.GENERATING
            print(
                f"[generate] dialect={self.profile.name} "
                f"tags={','.join(requirements.ordered()) or 'none'} priority={spec.priority.value}"
            )
            try:
                artifact, raw = self._generate(prior_issues=None)
            except Exception:
                self._clear()
                raise
            self._accept(artifact, raw)
            return self._run_check()

    def check(self) -> CheckVerdict:
        """Retry the check for an artifact whose previous check failed."""
        with self._exclusive():
            if self.state is not SessionState.GENERATED:
                raise SessionStateError(f"Nothing to check in state {self.state.value}.")
            return self._run_check()

    def repair(self) -> CheckVerdict:
        """Regenerate with the current verdict's issues, then check the result."""
        with self._exclusive():
            if self.state is not SessionState.NEEDS_UPDATE or self.verdict is None:
                raise SessionStateError(f"Repair needs a needs-update verdict, state is {self.state.value}.")
            issues = list(self.verdict.issues)
            self.state = SessionState.REPAIRING
            print(f"[repair] cycle={self.cycle + 1} issues={len(issues)}")
            try:
                artifact, raw = self._generate(prior_issues=issues)
            except Exception:
                self.state = SessionState.NEEDS_UPDATE
                raise
            self._accept(artifact, raw)
            return self._run_check()

    def _generate(self, prior_issues: Optional[Sequence[str]]) -> Tuple[GeneratedArtifact, str]:
        assert self.spec is not None and self.requirements is not None
        prompt = compose_prompt(self.profile, self.requirements, self.spec, prior_issues)
        self.last_prompt = prompt
        response = self.generator.complete(prompt, self.generation_options)
        artifact = interpret(response.raw_text, self.profile.name, self.spec, self.requirements)
        return artifact, response.raw_text

    def _accept(self, artifact: GeneratedArtifact, raw: str) -> None:
        # Each cycle starts from a clean slate: new artifact, no verdict.
        self.artifact = artifact
        self.verdict = None
        self._raw_generation = raw
        self.cycle += 1
        self.state = SessionState.GENERATED

    def _run_check(self) -> CheckVerdict:
        assert self.artifact is not None and self.spec is not None and self.requirements is not None
        self.state = SessionState.CHECKING
        try:
            verdict = self.checker.check(self.artifact, self.spec, self.requirements)
        except Exception:
            self.state = SessionState.GENERATED
            raise
        self.verdict = verdict
        raw_check = self.checker.last_response.raw_text if self.checker.last_response else ""
        self.history.append(
            CycleRecord(
                cycle=self.cycle,
                artifact=self.artifact,
                verdict=verdict,
                raw_generation=self._raw_generation,
                raw_check=raw_check,
            )
        )
        self.state = SessionState.READY if verdict.is_ready else SessionState.NEEDS_UPDATE
        print(f"[check] cycle={self.cycle} status={verdict.status.value} issues={len(verdict.issues)}")
        return verdict
