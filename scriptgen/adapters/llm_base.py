from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from scriptgen.models import GenerationOptions, PromptPair


@dataclass
class LLMResponse:
    raw_text: str
    usage: Optional[Dict[str, Optional[int]]] = None


class LLMAdapter(Protocol):
    def generate(self, prompt: PromptPair, options: GenerationOptions) -> str:
        return self.complete(prompt, options).raw_text

    def complete(self, prompt: PromptPair, options: GenerationOptions) -> LLMResponse:
        raise NotImplementedError
