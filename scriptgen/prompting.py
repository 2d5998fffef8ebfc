from __future__ import annotations

from pathlib import Path
from string import Template
from typing import List, Optional, Sequence

from scriptgen.dialects import DialectProfile
from scriptgen.models import GeneratedArtifact, PromptPair, RequirementSet, ScenarioSpec
from scriptgen.utils.io import read_text

PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"

# The offline adapter keys on this word to tell checker prompts apart.
VERDICT_MARKER = "check_verdict"

GENERAL_REQUIREMENTS = (
    "- Use smart selectors with fallbacks",
    "- Include console.log for each successful step",
    "- Add proper error handling",
    "- Generate serverless-ready code (no imports, no require calls)",
    "- Wait for the page to settle after navigation and interactions",
)

REPAIR_REQUIREMENTS = (
    "- Ensure the function is complete and not truncated",
    "- Add comprehensive console.log statements for debugging",
    "- Use robust error handling with meaningful messages",
    "- Implement smart selectors with multiple fallback options",
    "- Ensure all async operations use proper await",
)

TEST_TYPE_LINES = {
    "responsive": "- Responsive design testing across viewports",
    "accessibility": "- Accessibility checks (titles, alt text, ARIA labels)",
    "interactive": "- Interactive element testing (clicks, hovers)",
    "forms": "- Form validation and submission testing",
}


def _bullets(items: Sequence[str]) -> List[str]:
    return [f"- {item}" for item in items]


def compose_prompt(
    profile: DialectProfile,
    requirements: RequirementSet,
    spec: ScenarioSpec,
    prior_issues: Optional[Sequence[str]] = None,
) -> PromptPair:
    """Build the generation prompt pair for one cycle.

    Prior issues are echoed verbatim, one per line, so the repair pass has
    exact targets. Output depends only on the arguments.
    """
    issues = list(prior_issues or [])
    name = profile.display_name

    system_lines: List[str] = [
        f"You are a {name} automation expert. Generate clean, serverless-ready {name} "
        "test code using this EXACT structure:",
        "",
        "REQUIRED STRUCTURE:",
        profile.render_structure(spec.target_url),
        "",
        "SELECTOR PATTERNS TO USE:",
        *_bullets(profile.selector_rules),
        "",
        f"{name.upper()} PRIMITIVES TO USE:",
        *_bullets(profile.required_primitives),
        "",
        "FORBIDDEN PRIMITIVES (these belong to other automation libraries, never use them):",
        *_bullets(profile.forbidden_patterns),
        "",
        "REQUIREMENTS:",
        *GENERAL_REQUIREMENTS,
    ]
    for tag in requirements.ordered():
        guidance = profile.requirement_guidance.get(tag)
        if guidance:
            system_lines.extend(["", guidance])
    system_lines.extend(["", "Return ONLY the function code, no explanations."])

    if issues:
        system_lines.extend(
            [
                "",
                "CRITICAL: Fix exactly these issues identified in the previous code:",
                *_bullets(issues),
                "",
                "Requirements for the updated code:",
                *REPAIR_REQUIREMENTS,
                f"- Make sure the function structure is: {profile.entry_point} "
                "{ try { ... } catch { ... } }",
                "",
                "Generate improved, complete code that fixes all identified issues.",
            ]
        )

    tags = requirements.ordered()
    user_lines: List[str] = [
        f"Generate {name} test code for:",
        f"BASE_URL: {spec.target_url}",
        f"PRIORITY: {spec.priority.value}",
        f"TEST_REQUIREMENTS: {', '.join(tags) if tags else 'none'}",
    ]
    if spec.credentials is not None:
        user_lines.extend(
            [
                f"USERNAME: {spec.credentials.username}",
                f"PASSWORD: {spec.credentials.password}",
            ]
        )
    user_lines.extend(["", "TEST CASES:", spec.narrative.strip()])
    if tags:
        user_lines.extend(["", "Include these test types based on requirements:"])
        user_lines.extend(TEST_TYPE_LINES[tag] for tag in tags)
    if issues:
        user_lines.extend(
            [
                "",
                "Previously identified issues to fix:",
                *_bullets(issues),
                "",
                "Generate a complete, improved function that addresses ALL the identified "
                "issues while maintaining the original functionality.",
            ]
        )
    else:
        user_lines.extend(["", "Generate clean, executable code following the exact structure provided."])

    return PromptPair(system_prompt="\n".join(system_lines), user_prompt="\n".join(user_lines))


def compose_check_prompt(
    profile: DialectProfile,
    artifact: GeneratedArtifact,
    spec: ScenarioSpec,
    requirements: RequirementSet,
) -> PromptPair:
    template = Template(read_text(PROMPTS_DIR / "check_rubric.md"))
    profile_checks = "\n".join(
        f"{index}. {check}" for index, check in enumerate(profile.rubric_checks, start=9)
    )
    system_prompt = template.substitute(
        display_name=profile.display_name,
        entry_point=profile.entry_point,
        profile_checks=profile_checks,
        forbidden="\n".join(_bullets(profile.forbidden_patterns)),
    )
    features = ", ".join(requirements.ordered()) or "none"
    user_prompt = "\n".join(
        [
            f"Analyze this serverless {profile.display_name} function:",
            "",
            "Original Requirements:",
            f"- Test Case: {spec.narrative.strip()}",
            f"- Base URL: {spec.target_url}",
            f"- Priority: {spec.priority.value}",
            f"- Features: {features}",
            "",
            "Generated Code:",
            artifact.code,
            "",
            "Is this serverless function ready for use or does it need updates?",
        ]
    )
    return PromptPair(system_prompt=system_prompt.rstrip("\n"), user_prompt=user_prompt)
