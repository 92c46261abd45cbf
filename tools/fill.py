"""Run pytest and generate fixtures (EEST-style flow)."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

import click

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "tools"))

from yaml_dump import mirror_yaml  # noqa: E402

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--output",
    "output",
    type=click.Path(file_okay=False, path_type=Path),
    default=ROOT / "fixtures",
    show_default=True,
    help="Directory to write fixtures into",
)
@click.option("--yaml/--no-yaml", "with_yaml", default=False, help="Also write YAML copies")
def main(output: Path, with_yaml: bool) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT / "src"), str(ROOT)])

    cmd = [
        sys.executable,
        "-m",
        "pytest",
        str(ROOT / "tests"),
        "-q",
        "--output",
        str(output),
    ]
    logger.info("Running: %s", " ".join(cmd))
    code = subprocess.call(cmd, env=env, cwd=str(ROOT))
    if code != 0:
        raise SystemExit(code)

    if with_yaml:
        logger.info("Wrote %d YAML fixture files", mirror_yaml(output))


if __name__ == "__main__":
    main()
