"""
Configuration Loader (``batch_config.loader``).

Responsibility
--------------
Loads the batch YAML document and parses it into the frozen
``batch_config.schema`` types.  Runtime callers go through
``batch_config.load_configuration()``.

Document layout
---------------
::

    defaults:            # JobSettings applied to every job class
      slice_size: 100
    job_classes:         # per-class overrides, layered on top of defaults
      ReportJob:
        slice_size: 500
        collect_output: true
    reporting:
      time_zone: UTC

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown job setting  -> ``UnknownJobSettingError``.
* Wrongly typed value  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from batch_kernel.exceptions import ConfigurationError, UnknownJobSettingError

from batch_config.schema import (
    BatchConfiguration,
    JobSettings,
    ReportingSettings,
    job_setting_names,
)

_BOOL_SETTINGS = frozenset(
    {"collect_output", "collect_nil_output", "compress", "encrypt"}
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_job_settings(
    data: dict[str, Any] | None,
    section: str,
    base: JobSettings | None = None,
) -> JobSettings:
    """
    Parse ``JobSettings`` from a dict, layered on top of ``base``.

    Raises:
        UnknownJobSettingError: if ``data`` names a setting that does not exist.
        ConfigurationError: if a value has the wrong type.
    """
    data = data or {}
    known = job_setting_names()
    for key, value in data.items():
        if key not in known:
            raise UnknownJobSettingError(key, section)
        _validate_setting(key, value, section)
    return (base or JobSettings()).with_overrides(data)


def parse_reporting(data: dict[str, Any] | None) -> ReportingSettings:
    data = data or {}
    time_zone = data.get("time_zone", ReportingSettings.time_zone)
    if not isinstance(time_zone, str) or not time_zone:
        raise ConfigurationError(
            f"reporting.time_zone must be a non-empty string, got {time_zone!r}"
        )
    return ReportingSettings(time_zone=time_zone)


def parse_configuration(data: dict[str, Any]) -> BatchConfiguration:
    """Parse a whole batch configuration document."""
    defaults = parse_job_settings(data.get("defaults"), "defaults")
    job_classes = {
        name: parse_job_settings(overrides, f"job_classes.{name}", base=defaults)
        for name, overrides in (data.get("job_classes") or {}).items()
    }
    return BatchConfiguration(
        defaults=defaults,
        job_classes=job_classes,
        reporting=parse_reporting(data.get("reporting")),
        checksum=compute_checksum(data),
    )


def _validate_setting(key: str, value: Any, section: str) -> None:
    if key in _BOOL_SETTINGS:
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"{section}.{key} must be true or false, got {value!r}"
            )
    elif key in ("slice_size", "priority"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(
                f"{section}.{key} must be an integer, got {value!r}"
            )
        if key == "slice_size" and value <= 0:
            raise ConfigurationError(
                f"{section}.slice_size must be positive, got {value}"
            )
    elif key == "description" and value is not None and not isinstance(value, str):
        raise ConfigurationError(
            f"{section}.description must be a string, got {value!r}"
        )
