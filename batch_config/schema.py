"""
Batch configuration schema.

The human-authored YAML document is parsed by the loader into these frozen
types.  ``JobSettings`` carries the per job-class defaults that a new job
(or a restarted one) starts from.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class JobSettings:
    """Configurable defaults applied when a job is created."""

    description: str | None = None
    priority: int = 50
    slice_size: int = 100
    collect_output: bool = False
    collect_nil_output: bool = True
    compress: bool = False
    encrypt: bool = False

    def with_overrides(self, overrides: Mapping[str, Any]) -> JobSettings:
        return replace(self, **overrides)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def job_setting_names() -> frozenset[str]:
    return frozenset(f.name for f in fields(JobSettings))


@dataclass(frozen=True)
class ReportingSettings:
    """Presentation defaults for status snapshots."""

    time_zone: str = "UTC"


@dataclass(frozen=True)
class BatchConfiguration:
    """Complete batch configuration: defaults, per-class overrides, reporting."""

    defaults: JobSettings = field(default_factory=JobSettings)
    job_classes: Mapping[str, JobSettings] = field(default_factory=dict)
    reporting: ReportingSettings = field(default_factory=ReportingSettings)
    checksum: str = ""

    def settings_for(self, job_class_name: str) -> JobSettings:
        """Settings of a job class, falling back to the global defaults."""
        return self.job_classes.get(job_class_name, self.defaults)
