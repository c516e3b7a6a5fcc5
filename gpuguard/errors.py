"""Exception hierarchy for rule loading and configuration."""

from __future__ import annotations


class GpuGuardError(Exception):
    """Base exception for gpuguard failures."""


class LoadError(GpuGuardError):
    """Raised when a rule document cannot be turned into a RuleSet."""


class MalformedTopLevelError(LoadError):
    """Bad format version, missing entries list, or a malformed browser gate."""


class MalformedEntryError(LoadError):
    """A single entry is malformed; the whole load is aborted."""

    def __init__(self, message: str, entry_id: int = 0, field: str = ""):
        self.entry_id = entry_id
        self.field = field
        super().__init__(message)


class ConfigError(GpuGuardError):
    """Raised on invalid configuration files or values."""
