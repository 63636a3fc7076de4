"""Run lint, format, type and test checks for apiary-cli; report JSON.

Usage:
    python scripts/quality_gate.py              # run all checks
    python scripts/quality_gate.py --skip-tests # skip pytest
    python scripts/quality_gate.py --fix        # apply ruff fixes first
    python scripts/quality_gate.py --only mypy  # run a single check
"""

from __future__ import annotations

import argparse
import json
import re
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable

ROOT = Path(__file__).resolve().parent.parent

MYPY_TARGETS = ["apiary_cli/"]

_ERROR_LINE_RE = re.compile(r"^\S+:\d+:\d+:")
_SUMMARY_RE = re.compile(r"(\d+)\s+(passed|failed|skipped|errors?)")


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", *cmd],
        capture_output=True,
        text=True,
        cwd=str(ROOT),
        timeout=300,
    )


def _count_ruff_errors(r: subprocess.CompletedProcess) -> dict:
    return {"errors": sum(1 for line in r.stdout.splitlines() if _ERROR_LINE_RE.match(line))}


def _count_reformat(r: subprocess.CompletedProcess) -> dict:
    lines = r.stdout.splitlines() + r.stderr.splitlines()
    return {"files_to_reformat": sum(1 for line in lines if line.startswith("Would reformat"))}


def _count_mypy_errors(r: subprocess.CompletedProcess) -> dict:
    return {"errors": sum(1 for line in r.stdout.splitlines() if ": error:" in line)}


def _pytest_summary(r: subprocess.CompletedProcess) -> dict:
    """Parse the trailing "3 failed, 85 passed, 2 skipped" line."""
    counts = {"passed": 0, "failed": 0, "skipped": 0}
    for line in reversed(r.stdout.strip().splitlines()):
        found = _SUMMARY_RE.findall(line)
        if found:
            for n, kind in found:
                key = "failed" if kind.startswith("error") else kind
                counts[key] = counts.get(key, 0) + int(n)
            break
    return counts


Check = tuple[str, list[str], Callable[[subprocess.CompletedProcess], dict]]

CHECKS: list[Check] = [
    ("ruff_lint", ["ruff", "check", "."], _count_ruff_errors),
    ("ruff_format", ["ruff", "format", "--check", "."], _count_reformat),
    ("mypy", ["mypy", *MYPY_TARGETS], _count_mypy_errors),
    ("pytest", ["pytest", "tests/", "-q", "--no-header", "--tb=short"], _pytest_summary),
]


def run_check(name: str, cmd: list[str], summarize) -> dict:
    print(f"Running {name}...", file=sys.stderr)
    t0 = time.monotonic()
    r = _run(cmd)
    result = {"status": "pass" if r.returncode == 0 else "fail"}
    result.update(summarize(r))
    result["duration_s"] = round(time.monotonic() - t0, 1)
    if r.returncode != 0:
        result["output"] = (r.stdout.strip() or r.stderr.strip())[-2000:]
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Run all quality checks")
    parser.add_argument("--skip-tests", action="store_true", help="Skip pytest")
    parser.add_argument("--fix", action="store_true", help="Apply ruff fixes first")
    parser.add_argument("--only", choices=[name for name, _, _ in CHECKS])
    args = parser.parse_args()

    if args.fix:
        _run(["ruff", "check", "--fix", "."])
        _run(["ruff", "format", "."])

    t0 = time.monotonic()
    checks: dict[str, dict] = {}
    for name, cmd, summarize in CHECKS:
        if args.only and name != args.only:
            continue
        if name == "pytest" and args.skip_tests:
            checks[name] = {"status": "skip", "reason": "--skip-tests"}
            continue
        checks[name] = run_check(name, cmd, summarize)

    overall = "pass" if all(c["status"] in ("pass", "skip") for c in checks.values()) else "fail"
    print(
        json.dumps(
            {
                "overall": overall,
                "checks": checks,
                "total_duration_s": round(time.monotonic() - t0, 1),
            },
            indent=2,
        )
    )
    sys.exit(0 if overall == "pass" else 1)


if __name__ == "__main__":
    main()
