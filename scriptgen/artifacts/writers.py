from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

from scriptgen.models import CycleRecord, RequirementSet, ScenarioSpec
from scriptgen.utils.io import write_json, write_text

UNCHECKED = "unchecked"


def _status(record: CycleRecord) -> str:
    return record.verdict.status.value if record.verdict is not None else UNCHECKED


def _issues(record: CycleRecord) -> List[str]:
    return list(record.verdict.issues) if record.verdict is not None else []


def write_script(path: Path, record: CycleRecord) -> None:
    code = record.artifact.code
    write_text(path, code if code.endswith("\n") else code + "\n")


def write_verdict_report(
    path: Path, spec: ScenarioSpec, requirements: RequirementSet, history: Sequence[CycleRecord]
) -> None:
    final = history[-1]
    lines: List[str] = [
        "# Check Report",
        "",
        f"Dialect: {final.artifact.dialect}",
        f"Target URL: {spec.target_url}",
        f"Priority: {spec.priority.value}",
        f"Requirements: {', '.join(requirements.ordered()) or 'none'}",
        f"Final status: {_status(final)}",
    ]
    for record in history:
        lines.extend(
            [
                "",
                f"## Cycle {record.cycle}",
                "",
                f"Status: {_status(record)}",
                f"Estimated test units: {record.artifact.metadata.estimated_unit_count}",
            ]
        )
        if record.verdict is None:
            lines.extend(["", "The check for this cycle failed; the script was not reviewed."])
        elif record.verdict.issues:
            lines.append("")
            lines.extend([f"- {issue}" for issue in record.verdict.issues])
    write_text(path, "\n".join(lines) + "\n")


def write_run(
    run_dir: Path, spec: ScenarioSpec, requirements: RequirementSet, history: Sequence[CycleRecord]
) -> Dict[str, Path]:
    """Write raw responses, the final script and the check report for a session.

    The last record may be unchecked (``verdict`` is None) when the session
    ended on a failed check; its script is still written.
    """
    if not history:
        raise ValueError("Nothing to write: the session has no generated cycles.")
    raw_dir = run_dir / "raw"
    for record in history:
        write_text(raw_dir / f"cycle{record.cycle}_generation.txt", record.raw_generation)
        if record.verdict is not None:
            write_text(raw_dir / f"cycle{record.cycle}_check.txt", record.raw_check)

    final = history[-1]
    paths = {
        "script": run_dir / "script.js",
        "report": run_dir / "verdict.md",
        "summary": run_dir / "session.json",
    }
    write_script(paths["script"], final)
    write_verdict_report(paths["report"], spec, requirements, history)
    write_json(
        paths["summary"],
        {
            "dialect": final.artifact.dialect,
            "target_url": spec.target_url,
            "priority": spec.priority.value,
            "requirements": requirements.ordered(),
            "has_credentials": spec.credentials is not None,
            "cycles": [
                {"cycle": record.cycle, "status": _status(record), "issues": _issues(record)}
                for record in history
            ],
        },
    )
    return paths
