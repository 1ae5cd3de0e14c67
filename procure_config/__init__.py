"""
procure_config -- single public entrypoint for procurement configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Engines never read configuration; the
    modules layer and scripts pass the relevant values into them.

Failure modes:
    - ``FileNotFoundError`` -- configuration file does not exist.
    - ``ValueError`` -- malformed or unknown configuration values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PROCURE_CONFIG_TRACE`` log entry with the source path and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from procure_config.loader import compute_checksum, load_config
from procure_config.schema import ProcurementConfig

_logger = logging.getLogger("procure_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> ProcurementConfig:
    """Load the active procurement configuration.

    Args:
        config_path: YAML file to load; defaults to the bundled
            ``sets/default.yaml``.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    config = load_config(path)

    _logger.info(
        "PROCURE_CONFIG_TRACE",
        extra={
            "trace_type": "PROCURE_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": compute_checksum(config),
            "currency": config.currency,
            "carry_over_purchaser_reason": config.carry_over_purchaser_reason,
        },
    )
    return config


__all__ = [
    "ProcurementConfig",
    "get_active_config",
]
