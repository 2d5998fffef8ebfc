from __future__ import annotations

from typing import Any, Optional

from google import genai
from google.genai import errors, types

from scriptgen.config import SessionConfig
from scriptgen.errors import ConfigurationError, ServiceError
from scriptgen.models import GenerationOptions, PromptPair

from .llm_base import LLMAdapter, LLMResponse


class GeminiAdapter(LLMAdapter):
    """Alternative live provider, used for the checker pass when configured."""

    def __init__(self, config: SessionConfig, client: Optional[Any] = None) -> None:
        if client is None:
            if not config.gemini_api_key:
                raise ConfigurationError("GEMINI_API_KEY is not set.")
            http_options = None
            if config.timeout_seconds is not None:
                http_options = types.HttpOptions(timeout=int(config.timeout_seconds * 1000))
            client = genai.Client(api_key=config.gemini_api_key, http_options=http_options)
        self.client = client

    def complete(self, prompt: PromptPair, options: GenerationOptions) -> LLMResponse:
        generation_config = types.GenerateContentConfig(
            system_instruction=prompt.system_prompt,
            temperature=options.temperature,
            max_output_tokens=options.max_tokens,
            response_mime_type="application/json" if options.json_response else None,
        )
        print(f"[gemini] model={options.model}")
        try:
            response = self.client.models.generate_content(
                model=options.model,
                contents=prompt.user_prompt,
                config=generation_config,
            )
        except errors.APIError as exc:
            raise ServiceError(
                f"Gemini request failed with status {exc.code}: {exc.message}", status_code=exc.code
            ) from exc
        text = getattr(response, "text", None)
        return LLMResponse(raw_text=text or "")
