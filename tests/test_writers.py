import json

import pytest

from scriptgen.artifacts.writers import write_run
from scriptgen.interpreter import interpret
from scriptgen.models import CheckVerdict, CycleRecord, RequirementSet

from conftest import verdict_json

REQUIREMENTS = RequirementSet.of(["forms", "responsive"])


def _record(cycle, code, verdict, spec):
    artifact = interpret(code, "playwright", spec, REQUIREMENTS)
    return CycleRecord(
        cycle=cycle,
        artifact=artifact,
        verdict=verdict,
        raw_generation=code,
        raw_check=verdict_json(verdict.status.value, verdict.issues),
    )


def test_write_run_layout(tmp_path, login_spec):
    history = [
        _record(1, "async function runTest(page, expect) { /* v1 */ }", CheckVerdict.needs_update(["Missing waits"]), login_spec),
        _record(2, "async function runTest(page, expect) { /* v2 */ }", CheckVerdict.ready(), login_spec),
    ]
    paths = write_run(tmp_path, login_spec, REQUIREMENTS, history)

    assert paths["script"].read_text(encoding="utf-8") == "async function runTest(page, expect) { /* v2 */ }\n"
    assert (tmp_path / "raw" / "cycle1_check.txt").exists()
    assert (tmp_path / "raw" / "cycle2_generation.txt").exists()

    report = paths["report"].read_text(encoding="utf-8")
    assert report.startswith("# Check Report")
    assert "Final status: ready" in report
    assert "## Cycle 1" in report
    assert "- Missing waits" in report

    summary = json.loads(paths["summary"].read_text(encoding="utf-8"))
    assert summary["requirements"] == ["responsive", "forms"]
    assert [cycle["status"] for cycle in summary["cycles"]] == ["needs-update", "ready"]
    assert "s3cret!" not in paths["summary"].read_text(encoding="utf-8")


def test_write_run_requires_history(tmp_path, login_spec):
    with pytest.raises(ValueError):
        write_run(tmp_path, login_spec, REQUIREMENTS, [])


def test_write_run_with_unchecked_final_cycle(tmp_path, simple_spec):
    history = [
        _record(1, "async function runTest(page, expect) { /* v1 */ }", CheckVerdict.needs_update(["Missing waits"]), simple_spec),
        CycleRecord(
            cycle=2,
            artifact=interpret("async function runTest(page, expect) { /* v2 */ }", "playwright", simple_spec, REQUIREMENTS),
            verdict=None,
            raw_generation="async function runTest(page, expect) { /* v2 */ }",
            raw_check="",
        ),
    ]
    paths = write_run(tmp_path, simple_spec, REQUIREMENTS, history)
    assert "/* v2 */" in paths["script"].read_text(encoding="utf-8")
    assert (tmp_path / "raw" / "cycle2_generation.txt").exists()
    assert not (tmp_path / "raw" / "cycle2_check.txt").exists()
    report = paths["report"].read_text(encoding="utf-8")
    assert "Final status: unchecked" in report
    summary = json.loads(paths["summary"].read_text(encoding="utf-8"))
    assert summary["cycles"][1] == {"cycle": 2, "status": "unchecked", "issues": []}
