from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from scriptgen.artifacts.writers import write_run
from scriptgen.config import MODES, SessionConfig
from scriptgen.dialects import PROFILES, get_profile
from scriptgen.errors import InterpretationError, ScriptGenError, ServiceError, ValidationError
from scriptgen.models import REQUIREMENT_TAGS, CheckVerdict, Credentials, Priority, ScenarioSpec
from scriptgen.pipeline_repair import RepairController, SessionState
from scriptgen.utils.io import read_text
from scriptgen.utils.time import utc_timestamp

EXIT_READY = 0
EXIT_NEEDS_UPDATE = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a browser automation script from a test scenario and check it."
    )
    parser.add_argument("--dialect", choices=sorted(PROFILES), default="playwright")
    parser.add_argument("--mode", choices=MODES, help="Defaults to live when OPENAI_API_KEY is set")
    scenario = parser.add_mutually_exclusive_group(required=True)
    scenario.add_argument("--scenario", help="Test scenario text")
    scenario.add_argument("--scenario-file", help="File holding the test scenario text")
    parser.add_argument("--url", required=True, help="Target base URL")
    parser.add_argument("--username")
    parser.add_argument("--password")
    parser.add_argument("--priority", choices=[p.value for p in Priority], default=Priority.MEDIUM.value)
    parser.add_argument("--toggle", action="append", default=[], choices=REQUIREMENT_TAGS)
    parser.add_argument("--repairs", type=int, default=0, help="Number of repair cycles approved up front")
    parser.add_argument(
        "--interactive", action="store_true", help="Ask before each repair cycle and before retrying a failed check"
    )
    parser.add_argument("--check-retries", type=int, default=0, help="Automatic retries of a failed check")
    parser.add_argument("--offline-fallback", action="store_true")
    parser.add_argument("--out", default="runs", help="Directory for run output")
    parser.add_argument("--env-file")
    return parser


def build_spec(args: argparse.Namespace) -> ScenarioSpec:
    if args.scenario is not None:
        narrative = args.scenario
    else:
        scenario_path = Path(args.scenario_file)
        if not scenario_path.exists():
            raise ValidationError(f"Scenario file not found: {scenario_path}")
        narrative = read_text(scenario_path)
    credentials = None
    if args.username or args.password:
        credentials = Credentials(username=args.username or "", password=args.password or "")
    return ScenarioSpec(
        narrative=narrative,
        target_url=args.url,
        priority=Priority(args.priority),
        credentials=credentials,
        explicit_toggles=frozenset(args.toggle),
    )


@dataclass
class OperatorPolicy:
    """What the operator allows without being asked, and how to ask for more."""

    repairs: int = 0
    check_retries: int = 0
    approve: Optional[Callable[[CheckVerdict], bool]] = None
    retry_check: Optional[Callable[[ScriptGenError], bool]] = None

    def allow_repair(self, verdict: CheckVerdict) -> bool:
        if self.repairs > 0:
            self.repairs -= 1
            return True
        return self.approve is not None and self.approve(verdict)


def _ask_operator(verdict: CheckVerdict) -> bool:
    answer = input(f"Apply repair for {len(verdict.issues)} issue(s)? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _ask_retry_check(error: ScriptGenError) -> bool:
    answer = input(f"Check failed ({type(error).__name__}). Retry the check? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _checked(
    controller: RepairController, request: Callable[[], CheckVerdict], policy: OperatorPolicy
) -> CheckVerdict:
    retries = policy.check_retries
    try:
        return request()
    except (InterpretationError, ServiceError) as exc:
        failure: ScriptGenError = exc
    # Only a failed check leaves the artifact in GENERATED; generation failures propagate.
    while controller.state is SessionState.GENERATED:
        print(f"[check] failed: {failure}")
        if retries > 0:
            retries -= 1
        elif policy.retry_check is None or not policy.retry_check(failure):
            break
        try:
            return controller.check()
        except (InterpretationError, ServiceError) as exc:
            failure = exc
    raise failure


def run_session(controller: RepairController, spec: ScenarioSpec, policy: OperatorPolicy) -> CheckVerdict:
    """Drive the session until the verdict is ready or the operator stops.

    Picks up from the controller's current state, so a session interrupted by
    a failed check or repair can be resumed after swapping adapters.
    """
    if controller.state is SessionState.GENERATED:
        verdict = _checked(controller, controller.check, policy)
    elif controller.state is SessionState.NEEDS_UPDATE:
        verdict = _checked(controller, controller.repair, policy)
    else:
        verdict = _checked(controller, lambda: controller.submit(spec), policy)
    while not verdict.is_ready:
        for issue in verdict.issues:
            print(f"[check]   - {issue}")
        if not policy.allow_repair(verdict):
            break
        verdict = _checked(controller, controller.repair, policy)
    return verdict


def write_session(controller: RepairController, out_dir: Path) -> Optional[Dict[str, Path]]:
    """Write every generated cycle, including a final unchecked one."""
    records = list(controller.history)
    pending = controller.pending_cycle()
    if pending is not None:
        records.append(pending)
    if not records or controller.spec is None or controller.requirements is None:
        return None
    run_dir = out_dir / utc_timestamp()
    paths = write_run(run_dir, controller.spec, controller.requirements, records)
    print(f"[session] wrote {run_dir}")
    return paths


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    env_file = Path(args.env_file) if args.env_file else None
    out_dir = Path(args.out)
    controller: Optional[RepairController] = None
    try:
        config = SessionConfig.from_env(mode=args.mode, env_file=env_file)
        if config.mode == "live":
            config.require_live_keys()
        profile = get_profile(args.dialect)
        spec = build_spec(args)
        policy = OperatorPolicy(
            repairs=args.repairs,
            check_retries=args.check_retries,
            approve=_ask_operator if args.interactive else None,
            retry_check=_ask_retry_check if args.interactive else None,
        )
        controller = RepairController(config, profile)
        try:
            verdict = run_session(controller, spec, policy)
        except ServiceError as exc:
            if not args.offline_fallback or controller.config.mode == "offline":
                raise
            print(f"[session] {exc} -> falling back to offline mode in state {controller.state.value}")
            controller.fall_back_offline()
            verdict = run_session(controller, spec, policy)
    except ScriptGenError as exc:
        print(f"[error] {type(exc).__name__}: {exc}", file=sys.stderr)
        if controller is not None:
            write_session(controller, out_dir)
        return EXIT_ERROR

    paths = write_session(controller, out_dir)
    assert paths is not None
    print(f"[session] status={verdict.status.value} cycles={controller.cycle} script={paths['script']}")
    return EXIT_READY if verdict.is_ready else EXIT_NEEDS_UPDATE


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
