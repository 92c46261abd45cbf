"""YAML copies of the generated JSON fixtures.

Fixture files are written as JSON by the pytest session; ``mirror_yaml``
renders each one next to it as ``.yaml`` with the key order preserved, so
hex identities and u128 amounts read the same in both formats.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class FixtureDumper(yaml.SafeDumper):
    pass


def _plain_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=None)


FixtureDumper.add_representer(str, _plain_str)


def dump_yaml(data: dict) -> str:
    return yaml.dump(data, Dumper=FixtureDumper, sort_keys=False, width=4096)


def mirror_yaml(out: Path) -> int:
    """Write a ``.yaml`` twin for every ``*.json`` fixture under ``out``."""
    count = 0
    for path in sorted(out.rglob("*.json")):
        target = path.with_suffix(".yaml")
        target.write_text(dump_yaml(json.loads(path.read_text())))
        logger.debug("wrote %s", target)
        count += 1
    return count
