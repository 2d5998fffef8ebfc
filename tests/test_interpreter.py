import pytest

from scriptgen.adapters.offline_adapter import OfflineAdapter
from scriptgen.dialects import PLAYWRIGHT, PUPPETEER
from scriptgen.errors import InterpretationError
from scriptgen.interpreter import estimate_unit_count, interpret
from scriptgen.models import GenerationOptions, RequirementSet
from scriptgen.prompting import compose_prompt

OPTIONS = GenerationOptions(model="offline", temperature=0.0, max_tokens=100)


@pytest.mark.parametrize(
    "narrative, expected",
    [
        ("Open the login page. Sign in! Check the dashboard?", 3),
        ("test login form with mobile view", 1),
        ("Open home...  Then leave.", 2),
        ("", 0),
    ],
)
def test_unit_count_counts_terminated_clauses(narrative, expected):
    assert estimate_unit_count(narrative) == expected


def test_whole_text_is_payload(login_spec):
    raw = "Here you go:\n```js\nasync function runTest(page) {}\n```"
    artifact = interpret(raw, "puppeteer", login_spec, RequirementSet.of(["forms"]))
    assert artifact.code == raw
    assert artifact.dialect == "puppeteer"
    assert artifact.metadata.estimated_unit_count == 3
    assert artifact.metadata.features == RequirementSet.of(["forms"])
    assert artifact.metadata.priority is login_spec.priority


@pytest.mark.parametrize("raw", ["", "   \n\t"])
def test_blank_response_rejected(raw, simple_spec):
    with pytest.raises(InterpretationError):
        interpret(raw, "playwright", simple_spec, RequirementSet())


@pytest.mark.parametrize("profile", [PLAYWRIGHT, PUPPETEER])
def test_offline_output_accepted(profile, simple_spec):
    requirements = RequirementSet.of(["responsive", "forms"])
    prompt = compose_prompt(profile, requirements, simple_spec)
    raw = OfflineAdapter(profile).generate(prompt, OPTIONS)
    artifact = interpret(raw, profile.name, simple_spec, requirements)
    assert profile.entry_point in artifact.code
