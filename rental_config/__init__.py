"""
rental_config -- single public entrypoint for contract configuration.

Responsibility:
    Provides ``get_active_config()``, the way services obtain the
    ``ContractConfig`` at runtime.  Without an explicit path the packaged
    ``defaults.yaml`` is used.

Architecture position:
    Configuration -- sits above ``rental_kernel`` and ``rental_engines``
    and below ``rental_services`` / ``rental_modules``.  The kernel MUST
    NEVER import from ``rental_config``.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``RENTAL_CONFIG_TRACE`` log entry with the config id, version and a
    checksum of the source document, tying calculated figures back to the
    configuration that produced them.
"""

from __future__ import annotations

from pathlib import Path

from rental_config.loader import compute_checksum, load_yaml_file, parse_contract_config
from rental_config.schema import CheckTypeLabel, ContractConfig
from rental_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> ContractConfig:
    """Load, validate and return the contract configuration.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If a value fails validation.
    """
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(source)
    config = parse_contract_config(data)

    _logger.info(
        "RENTAL_CONFIG_TRACE",
        extra={
            "trace_type": "RENTAL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": compute_checksum(data),
            "source": str(source),
            "currency": config.currency,
        },
    )
    return config


__all__ = [
    "CheckTypeLabel",
    "ContractConfig",
    "get_active_config",
]
