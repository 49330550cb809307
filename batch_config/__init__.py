"""
batch_config -- single public entrypoint for batch job configuration.

Responsibility:
    ``load_configuration()`` reads the YAML document (the packaged
    ``defaults/batch.yaml`` unless a path is given) and returns a frozen
    ``BatchConfiguration``.  Per job-class defaults are resolved with
    ``BatchConfiguration.settings_for()``.

Failure modes:
    - ``FileNotFoundError`` -- the given path does not exist.
    - ``UnknownJobSettingError`` / ``ConfigurationError`` -- invalid document.

Every successful load emits a ``batch_config_loaded`` log entry with the
source path, checksum and number of job classes.
"""

from __future__ import annotations

from pathlib import Path

from batch_kernel.logging_config import get_logger

from batch_config.loader import load_yaml_file, parse_configuration
from batch_config.schema import BatchConfiguration, JobSettings, ReportingSettings

logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "batch.yaml"


def load_configuration(path: Path | str | None = None) -> BatchConfiguration:
    """Load and parse a batch configuration document."""
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_configuration(load_yaml_file(source))
    logger.info(
        "batch_config_loaded",
        extra={
            "source": str(source),
            "checksum": config.checksum,
            "job_class_count": len(config.job_classes),
        },
    )
    return config


__all__ = [
    "BatchConfiguration",
    "DEFAULT_CONFIG_PATH",
    "JobSettings",
    "ReportingSettings",
    "load_configuration",
]
