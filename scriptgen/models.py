from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from scriptgen.errors import ValidationError

REQUIREMENT_TAGS: Tuple[str, ...] = ("responsive", "accessibility", "interactive", "forms")


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class VerdictStatus(str, Enum):
    READY = "ready"
    NEEDS_UPDATE = "needs-update"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ScenarioSpec:
    narrative: str
    target_url: str
    priority: Priority = Priority.MEDIUM
    credentials: Optional[Credentials] = None
    explicit_toggles: FrozenSet[str] = frozenset()

    def validate(self) -> None:
        if not self.narrative or not self.narrative.strip():
            raise ValidationError("Scenario narrative is empty.")
        if not self.target_url or not self.target_url.strip():
            raise ValidationError("Target URL is required.")
        parsed = urlparse(self.target_url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"Target URL must be an absolute http(s) URL: {self.target_url}")
        if not isinstance(self.priority, Priority):
            raise ValidationError(f"Unknown priority: {self.priority}")
        if self.credentials is not None:
            if not self.credentials.username or not self.credentials.password:
                raise ValidationError("Credentials need both a username and a password.")
        unknown = sorted(set(self.explicit_toggles) - set(REQUIREMENT_TAGS))
        if unknown:
            raise ValidationError(f"Unknown requirement toggles: {', '.join(unknown)}")


@dataclass(frozen=True)
class RequirementSet:
    tags: FrozenSet[str] = frozenset()

    def __contains__(self, tag: object) -> bool:
        return tag in self.tags

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self.tags)

    def ordered(self) -> List[str]:
        return [tag for tag in REQUIREMENT_TAGS if tag in self.tags]

    @classmethod
    def of(cls, tags: Iterable[str]) -> "RequirementSet":
        return cls(tags=frozenset(tags))


@dataclass(frozen=True)
class PromptPair:
    system_prompt: str
    user_prompt: str

    def as_messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_prompt},
        ]


@dataclass(frozen=True)
class GenerationOptions:
    model: str
    temperature: float
    max_tokens: int
    json_response: bool = False


@dataclass(frozen=True)
class ArtifactMetadata:
    estimated_unit_count: int
    features: RequirementSet
    priority: Priority


@dataclass(frozen=True)
class GeneratedArtifact:
    code: str
    dialect: str
    metadata: ArtifactMetadata


@dataclass(frozen=True)
class CheckVerdict:
    status: VerdictStatus
    issues: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.status is VerdictStatus.READY and self.issues:
            raise ValueError("A ready verdict cannot carry issues.")
        if self.status is VerdictStatus.NEEDS_UPDATE and not self.issues:
            raise ValueError("A needs-update verdict must list at least one issue.")

    @property
    def is_ready(self) -> bool:
        return self.status is VerdictStatus.READY

    @classmethod
    def ready(cls) -> "CheckVerdict":
        return cls(status=VerdictStatus.READY)

    @classmethod
    def needs_update(cls, issues: Iterable[str]) -> "CheckVerdict":
        return cls(status=VerdictStatus.NEEDS_UPDATE, issues=tuple(issues))


@dataclass(frozen=True)
class CycleRecord:
    cycle: int
    artifact: GeneratedArtifact
    verdict: Optional[CheckVerdict]
    raw_generation: str
    raw_check: str
