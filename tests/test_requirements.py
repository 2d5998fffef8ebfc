import pytest

from scriptgen.errors import ValidationError
from scriptgen.requirements import detect_tags, extract_requirements


@pytest.mark.parametrize(
    "narrative",
    [
        "Check the mobile menu opens",
        "Verify layout on a TABLET",
        "make sure the page is responsive",
    ],
)
@pytest.mark.parametrize("toggles", [set(), {"forms"}, {"accessibility", "interactive"}])
def test_viewport_words_always_add_responsive(narrative, toggles):
    assert "responsive" in extract_requirements(narrative, toggles)


def test_login_form_with_mobile_view():
    result = extract_requirements("test login form with mobile view", {"forms"})
    assert result.tags == {"responsive", "forms"}


def test_toggles_never_suppress_keyword_detection():
    result = extract_requirements("Click the button and submit the form", set())
    assert {"interactive", "forms"} <= result.tags


def test_explicit_toggle_kept_without_matching_text():
    result = extract_requirements("Open the pricing page", {"accessibility"})
    assert result.tags == {"accessibility"}


def test_empty_narrative_yields_toggles_only():
    assert extract_requirements("", {"interactive"}).tags == {"interactive"}
    assert extract_requirements("", set()).tags == frozenset()


def test_detection_is_case_insensitive():
    assert detect_tags("Images need ALT TEXT and A11Y review") == {"accessibility"}


def test_unknown_toggle_rejected():
    with pytest.raises(ValidationError):
        extract_requirements("anything", {"performance"})


def test_ordered_follows_vocabulary():
    result = extract_requirements("submit on tablet, click and check alt text", set())
    assert result.ordered() == ["responsive", "accessibility", "interactive", "forms"]
