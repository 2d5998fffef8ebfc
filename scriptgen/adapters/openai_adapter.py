from __future__ import annotations

from typing import Any, Dict, Optional

from openai import OpenAI
from openai import APIConnectionError, APIStatusError, APITimeoutError, RateLimitError

from scriptgen.config import SessionConfig
from scriptgen.errors import ConfigurationError, ServiceError
from scriptgen.models import GenerationOptions, PromptPair

from .llm_base import LLMAdapter, LLMResponse


class OpenAIAdapter(LLMAdapter):
    """Single request/response round trip against the chat completions API.

    SDK retries are disabled; a failed call surfaces as ServiceError and the
    session decides what to do next.
    """

    def __init__(self, config: SessionConfig, client: Optional[Any] = None) -> None:
        if client is None:
            if not config.openai_api_key:
                raise ConfigurationError("OPENAI_API_KEY is not set.")
            kwargs: Dict[str, Any] = {"api_key": config.openai_api_key, "max_retries": 0}
            if config.timeout_seconds is not None:
                kwargs["timeout"] = config.timeout_seconds
            client = OpenAI(**kwargs)
        self.client = client

    def complete(self, prompt: PromptPair, options: GenerationOptions) -> LLMResponse:
        request: Dict[str, Any] = {
            "model": options.model,
            "messages": prompt.as_messages(),
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        if options.json_response:
            request["response_format"] = {"type": "json_object"}
        try:
            response = self.client.chat.completions.create(**request)
        except RateLimitError as exc:
            if getattr(exc, "code", None) == "insufficient_quota":
                raise ServiceError(
                    "OpenAI API quota exceeded. Please enable billing in your OpenAI account.",
                    status_code=exc.status_code,
                ) from exc
            raise ServiceError("OpenAI rate limit reached.", status_code=exc.status_code) from exc
        except APIStatusError as exc:
            raise ServiceError(
                f"Completion service returned HTTP {exc.status_code}.", status_code=exc.status_code
            ) from exc
        except APITimeoutError as exc:
            raise ServiceError("Completion request timed out.") from exc
        except APIConnectionError as exc:
            raise ServiceError(f"Could not reach the completion service: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        if usage:
            usage_payload = {
                "prompt_tokens": getattr(usage, "prompt_tokens", None),
                "completion_tokens": getattr(usage, "completion_tokens", None),
                "total_tokens": getattr(usage, "total_tokens", None),
            }
            print(
                f"[openai] model={options.model} "
                f"prompt_tokens={usage_payload['prompt_tokens']} "
                f"completion_tokens={usage_payload['completion_tokens']} "
                f"total_tokens={usage_payload['total_tokens']}"
            )
        else:
            usage_payload = None
            print("[openai] usage not provided by SDK")
        return LLMResponse(raw_text=content or "", usage=usage_payload)
