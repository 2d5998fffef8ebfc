from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validate

from scriptgen.errors import InterpretationError
from scriptgen.models import CheckVerdict, VerdictStatus
from scriptgen.utils.io import read_text

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"


@dataclass(frozen=True)
class VerdictResult:
    """Either a verdict or the reason the response could not be read as one."""

    verdict: Optional[CheckVerdict] = None
    error: Optional[InterpretationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> CheckVerdict:
        if self.error is not None:
            raise self.error
        assert self.verdict is not None
        return self.verdict


def _strip_code_fences(text: str) -> str:
    fenced = re.fullmatch(r"\s*```(?:json)?\s*(.*?)\s*```\s*", text, flags=re.DOTALL | re.IGNORECASE)
    if fenced:
        return fenced.group(1)
    return text.strip()


def _snippet(raw_text: str) -> str:
    snippet = raw_text.strip().replace("\n", " ")
    return (snippet[:200] + "...") if len(snippet) > 200 else snippet


def load_json_object(raw_text: str) -> Dict[str, Any]:
    """Parse a response whose whole body is one JSON object.

    A single surrounding code fence is tolerated; prose around the object is
    not.
    """
    try:
        parsed = json.loads(_strip_code_fences(raw_text))
    except json.JSONDecodeError as exc:
        raise InterpretationError(
            f"Response is not valid JSON ({exc.msg}). Snippet: {_snippet(raw_text)}", raw_text
        ) from exc
    if not isinstance(parsed, dict):
        raise InterpretationError(
            f"Response must be a JSON object, got {type(parsed).__name__}.", raw_text
        )
    return parsed


def load_schema(name: str) -> Dict:
    return json.loads(read_text(SCHEMAS_DIR / name))


def parse_verdict(raw_text: str) -> VerdictResult:
    try:
        payload = load_json_object(raw_text)
    except InterpretationError as exc:
        return VerdictResult(error=exc)
    try:
        validate(instance=payload, schema=load_schema("check_verdict.schema.json"))
    except SchemaValidationError as exc:
        return VerdictResult(
            error=InterpretationError(f"Verdict does not match schema: {exc.message}", raw_text)
        )
    status = VerdictStatus(payload["status"])
    if status is VerdictStatus.READY:
        return VerdictResult(verdict=CheckVerdict.ready())
    return VerdictResult(verdict=CheckVerdict.needs_update(payload["issues"]))
