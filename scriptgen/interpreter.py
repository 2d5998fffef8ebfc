from __future__ import annotations

import re

from scriptgen.errors import InterpretationError
from scriptgen.models import ArtifactMetadata, GeneratedArtifact, RequirementSet, ScenarioSpec


def estimate_unit_count(narrative: str) -> int:
    """Number of sentence-terminated clauses in the narrative. Informational only."""
    return len([part for part in re.split(r"[.!?]", narrative or "") if part.strip()])


def interpret(
    raw_text: str,
    dialect: str,
    spec: ScenarioSpec,
    requirements: RequirementSet,
) -> GeneratedArtifact:
    # The whole completion is the payload; checking it is the checker's job.
    if not raw_text or not raw_text.strip():
        raise InterpretationError("Completion service returned no code.", raw_text or "")
    return GeneratedArtifact(
        code=raw_text,
        dialect=dialect,
        metadata=ArtifactMetadata(
            estimated_unit_count=estimate_unit_count(spec.narrative),
            features=requirements,
            priority=spec.priority,
        ),
    )
