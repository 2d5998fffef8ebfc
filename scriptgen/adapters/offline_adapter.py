from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from scriptgen.dialects import DialectProfile
from scriptgen.models import Credentials, GenerationOptions, PromptPair, RequirementSet
from scriptgen.prompting import VERDICT_MARKER

from .llm_base import LLMAdapter, LLMResponse

CANNED_ISSUES = (
    "Function appears incomplete or truncated",
    "Missing console.log statements for better debugging",
    "Could use more robust error handling",
)


@dataclass
class OfflineAdapter(LLMAdapter):
    """Stand-in completion service for sessions without API keys.

    Generation prompts get the profile's templated script; checker prompts
    get a verdict that is ready with ``ready_probability``, otherwise
    needs-update with the canned issue list.
    """

    profile: DialectProfile
    rng: random.Random = field(default_factory=random.Random)
    ready_probability: float = 0.3

    def complete(self, prompt: PromptPair, options: GenerationOptions) -> LLMResponse:
        if VERDICT_MARKER in prompt.system_prompt:
            payload = self._build_verdict(prompt.user_prompt)
            print(f"[offline] verdict status={payload['status']}")
            return LLMResponse(raw_text=json.dumps(payload))
        script = self._build_script(prompt.user_prompt)
        print(f"[offline] rendered {self.profile.name} script lines={len(script.splitlines())}")
        return LLMResponse(raw_text=script)

    def _build_script(self, user_prompt: str) -> str:
        fields, summary = _parse_user_prompt(user_prompt)
        credentials: Optional[Credentials] = None
        if fields.get("USERNAME") and fields.get("PASSWORD"):
            credentials = Credentials(username=fields["USERNAME"], password=fields["PASSWORD"])
        tags = [
            tag.strip()
            for tag in fields.get("TEST_REQUIREMENTS", "").split(",")
            if tag.strip() and tag.strip() != "none"
        ]
        return self.profile.render_offline(
            base_url=fields.get("BASE_URL", ""),
            requirements=RequirementSet.of(tags),
            credentials=credentials,
            summary=summary,
        )

    def _build_verdict(self, user_prompt: str) -> Dict:
        leaked = self.profile.find_forbidden(user_prompt.partition("Generated Code:")[2])
        if leaked:
            issues: List[str] = [
                f"Uses {pattern} which does not belong to {self.profile.display_name}" for pattern in leaked
            ]
            return {"status": "needs-update", "issues": issues}
        if self.rng.random() < self.ready_probability:
            return {"status": "ready"}
        return {"status": "needs-update", "issues": list(CANNED_ISSUES)}


def _parse_user_prompt(user_prompt: str) -> tuple[Dict[str, str], str]:
    header, _, cases = user_prompt.partition("\nTEST CASES:\n")
    fields: Dict[str, str] = {}
    for line in header.splitlines():
        key, sep, value = line.partition(": ")
        if sep and key.isupper():
            fields[key] = value.strip()
    summary = next((line.strip() for line in cases.splitlines() if line.strip()), "")
    return fields, summary
