"""Consume fixtures and validate against the Python specs."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from escrow_spec.state_digest import compute_state_digest  # noqa: E402
from escrow_spec.state_transition import apply_call  # noqa: E402
from fixtures_io import (  # noqa: E402
    call_from_json,
    state_from_json,
    state_to_json,
    transfers_to_json,
)

logger = logging.getLogger(__name__)


def check_state_cases(path: Path) -> list[str]:
    failures: list[str] = []
    data = json.loads(path.read_text())

    for case in data.get("cases", []):
        pre_state = state_from_json(case["pre_state"])
        call = call_from_json(case["call"])
        outcome, result = apply_call(pre_state, call, case.get("height", 0))

        expected = case["expected"]
        if result.ok != expected["ok"]:
            failures.append(f"{case['name']}: ok_mismatch")
            continue

        actual_err = result.error.code.name if result.error else None
        if actual_err != expected["error"]:
            failures.append(f"{case['name']}: error_mismatch")
            continue

        if transfers_to_json(outcome.transfers) != expected.get("transfers", []):
            failures.append(f"{case['name']}: transfers_mismatch")
            continue

        post_json = state_to_json(outcome.state)
        if compute_state_digest(post_json) != expected.get("state_digest"):
            failures.append(f"{case['name']}: state_digest_mismatch")

    return failures


@click.command()
@click.option(
    "--fixtures",
    "fixtures",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=ROOT / "fixtures",
    show_default=True,
)
def main(fixtures: Path) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    failures: list[str] = []
    files = sorted(p for p in fixtures.rglob("*.json") if "cases" in json.loads(p.read_text()))
    for path in files:
        logger.info("Checking %s", path.relative_to(fixtures))
        failures.extend(check_state_cases(path))

    if failures:
        for f in failures:
            logger.error("FAIL %s", f)
        raise SystemExit(1)

    logger.info("All fixtures passed (%d files)", len(files))


if __name__ == "__main__":
    main()
