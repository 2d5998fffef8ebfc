from __future__ import annotations

from typing import Dict, Iterable, Tuple

from scriptgen.errors import ValidationError
from scriptgen.models import REQUIREMENT_TAGS, RequirementSet

TRIGGERS: Dict[str, Tuple[str, ...]] = {
    "responsive": ("responsive", "mobile", "tablet"),
    "accessibility": ("accessibility", "a11y", "alt text"),
    "interactive": ("click", "interact", "button"),
    "forms": ("form", "submit", "input"),
}


def detect_tags(narrative: str) -> set[str]:
    text = (narrative or "").lower()
    return {tag for tag, words in TRIGGERS.items() if any(word in text for word in words)}


def extract_requirements(narrative: str, explicit_toggles: Iterable[str] = ()) -> RequirementSet:
    """Union of keyword-detected tags and explicit toggles.

    Toggles only add tags; they never suppress what the narrative triggers.
    """
    toggles = set(explicit_toggles)
    unknown = sorted(toggles - set(REQUIREMENT_TAGS))
    if unknown:
        raise ValidationError(f"Unknown requirement toggles: {', '.join(unknown)}")
    return RequirementSet.of(detect_tags(narrative) | toggles)
