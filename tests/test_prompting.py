from scriptgen.dialects import PLAYWRIGHT, PUPPETEER
from scriptgen.interpreter import interpret
from scriptgen.models import RequirementSet
from scriptgen.prompting import VERDICT_MARKER, compose_check_prompt, compose_prompt
from scriptgen.requirements import extract_requirements


def test_compose_is_deterministic(login_spec):
    requirements = extract_requirements(login_spec.narrative, login_spec.explicit_toggles)
    first = compose_prompt(PLAYWRIGHT, requirements, login_spec, ["A", "B"])
    second = compose_prompt(PLAYWRIGHT, requirements, login_spec, ["A", "B"])
    assert first == second
    assert first.system_prompt.encode() == second.system_prompt.encode()
    assert first.user_prompt.encode() == second.user_prompt.encode()


def test_system_prompt_names_entry_point_and_rules(simple_spec):
    prompt = compose_prompt(PUPPETEER, RequirementSet.of(["forms"]), simple_spec)
    assert PUPPETEER.entry_point in prompt.system_prompt
    assert "https://example.com" in prompt.system_prompt
    for rule in PUPPETEER.selector_rules:
        assert rule in prompt.system_prompt
    for pattern in PUPPETEER.forbidden_patterns:
        assert f"- {pattern}" in prompt.system_prompt


def test_prior_issues_echoed_verbatim(simple_spec):
    issues = [
        "Missing await before page.click('#submit')",
        "Uses page.locator( which is not a Puppeteer primitive",
    ]
    prompt = compose_prompt(PUPPETEER, RequirementSet.of(["forms"]), simple_spec, issues)
    assert "CRITICAL: Fix exactly these issues" in prompt.system_prompt
    for issue in issues:
        assert f"- {issue}" in prompt.system_prompt
        assert issue in prompt.user_prompt


def test_no_repair_block_without_issues(simple_spec):
    for issues in (None, []):
        prompt = compose_prompt(PLAYWRIGHT, RequirementSet.of(["forms"]), simple_spec, issues)
        assert "CRITICAL" not in prompt.system_prompt
        assert "Previously identified issues" not in prompt.user_prompt


def test_user_prompt_restates_scenario(login_spec):
    requirements = RequirementSet.of(["forms", "responsive"])
    prompt = compose_prompt(PLAYWRIGHT, requirements, login_spec)
    assert "BASE_URL: https://shop.example.com" in prompt.user_prompt
    assert "PRIORITY: high" in prompt.user_prompt
    assert "TEST_REQUIREMENTS: responsive, forms" in prompt.user_prompt
    assert login_spec.narrative in prompt.user_prompt
    assert "- Responsive design testing across viewports" in prompt.user_prompt


def test_credentials_inline_in_user_prompt_only(login_spec):
    prompt = compose_prompt(PLAYWRIGHT, RequirementSet.of(["forms"]), login_spec)
    assert "USERNAME: qa-user" in prompt.user_prompt
    assert "PASSWORD: s3cret!" in prompt.user_prompt
    assert "s3cret!" not in prompt.system_prompt


def test_guidance_only_for_requested_tags(simple_spec):
    prompt = compose_prompt(PLAYWRIGHT, RequirementSet.of(["forms"]), simple_spec)
    assert "FORM TESTING:" in prompt.system_prompt
    assert "RESPONSIVE TESTING:" not in prompt.system_prompt
    assert "TEST_REQUIREMENTS: forms" in prompt.user_prompt


def test_empty_requirements_rendered_as_none(simple_spec):
    prompt = compose_prompt(PLAYWRIGHT, RequirementSet(), simple_spec)
    assert "TEST_REQUIREMENTS: none" in prompt.user_prompt


def test_check_prompt_carries_rubric_and_code(simple_spec):
    requirements = RequirementSet.of(["responsive", "forms"])
    artifact = interpret("async function runTest(page, expect) {}", "playwright", simple_spec, requirements)
    prompt = compose_check_prompt(PLAYWRIGHT, artifact, simple_spec, requirements)
    assert VERDICT_MARKER in prompt.system_prompt
    assert PLAYWRIGHT.entry_point in prompt.system_prompt
    assert "page.waitForNavigation(" in prompt.system_prompt
    assert "$" not in prompt.system_prompt.replace("$$eval", "").replace("$eval", "")
    assert "- Features: responsive, forms" in prompt.user_prompt
    assert artifact.code in prompt.user_prompt
