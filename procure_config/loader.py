"""
Configuration Loader (``procure_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``ProcurementConfig`` dataclass.  Callers outside this package go through
``procure_config.get_active_config()``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` with descriptive messages; unknown
  keys are rejected rather than ignored.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top-level value not a mapping, or a missing ``procurement`` section
  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from procure_config.schema import ProcurementConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def parse_config(data: dict[str, Any]) -> ProcurementConfig:
    """Parse the ``procurement`` section of a configuration document."""
    if "procurement" not in data:
        raise ValueError("Configuration is missing the 'procurement' section")
    section = data["procurement"] or {}
    if not isinstance(section, dict):
        raise ValueError("'procurement' section must be a mapping")
    return ProcurementConfig.from_dict(dict(section))


def load_config(path: Path) -> ProcurementConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(Path(path)))


def compute_checksum(config: ProcurementConfig) -> str:
    """Deterministic SHA-256 of the configuration values."""
    canonical = json.dumps(config.to_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
