"""Structured descriptors for the GPU and platform being evaluated."""

from dataclasses import dataclass
from enum import Enum


class OsType(str, Enum):
    WINDOWS = "win"
    MACOSX = "macosx"
    LINUX = "linux"
    CHROMEOS = "chromeos"
    ANY = "any"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: str | None) -> "OsType":
        """Rule-document token -> OsType. 'unknown' is never accepted from a document."""
        for member in cls:
            if member is not cls.UNKNOWN and member.value == token:
                return member
        return cls.UNKNOWN


class MultiGpuStyle(str, Enum):
    NONE = "none"
    OPTIMUS = "optimus"
    AMD_SWITCHABLE = "amd_switchable"


class OsFilter(str, Enum):
    """Which entries survive a load: all of them, or only those for the running OS."""

    ALL_OS = "all"
    CURRENT_OS = "current"


@dataclass(frozen=True)
class HardwareDescriptor:
    """Live GPU info. Read-only to the engine."""

    vendor_id: int = 0
    device_id: int = 0
    driver_vendor: str = ""
    driver_version: str = ""
    driver_date: str = ""  # "mm-dd-yyyy"
    gl_vendor: str = ""
    gl_renderer: str = ""
    optimus: bool = False
    amd_switchable: bool = False
    # 0.0 = not measured
    perf_graphics: float = 0.0
    perf_gaming: float = 0.0
    perf_overall: float = 0.0
