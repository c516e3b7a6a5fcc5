"""Typed field matchers wrapping the comparator primitives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models import OsType
from ..version import Version, date_to_version, to_lexical
from .comparators import FloatRange, StringMatch, VersionRange


@dataclass(frozen=True)
class OsMatch:
    """OS type plus a version range ('any' when the document gives none)."""

    os_type: OsType
    version: VersionRange | None

    @classmethod
    def build(cls, os: str, op: str = "any", number: str = "", number2: str = "") -> OsMatch:
        os_type = OsType.from_token(os)
        if os_type is OsType.UNKNOWN:
            return cls(os_type=os_type, version=None)
        return cls(os_type=os_type, version=VersionRange.build(op, number, number2))

    @property
    def is_valid(self) -> bool:
        return self.os_type is not OsType.UNKNOWN and self.version is not None and self.version.is_valid

    def contains(self, os_type: OsType, os_version: Version | None) -> bool:
        if not self.is_valid:
            return False
        if self.os_type is not os_type and self.os_type is not OsType.ANY:
            return False
        return self.version.contains(os_version)


@dataclass(frozen=True)
class DriverVersionMatch:
    range: VersionRange

    @classmethod
    def build(cls, op: str = "any", style: str = "", number: str = "", number2: str = "") -> DriverVersionMatch:
        return cls(VersionRange.build(op, number, number2, style=style))

    @property
    def is_valid(self) -> bool:
        return self.range.is_valid

    def matches(self, driver_version: str) -> bool:
        text = driver_version or ""
        if self.range.is_lexical:
            text = to_lexical(text)
        parsed = Version.parse(text)
        return parsed is not None and self.range.contains(parsed)


@dataclass(frozen=True)
class DriverDateMatch:
    range: VersionRange

    @classmethod
    def build(cls, op: str = "any", number: str = "", number2: str = "") -> DriverDateMatch:
        # Bounds are already year-first ("2010.5.8"); only the probe is "mm-dd-yyyy".
        return cls(VersionRange.build(op, number, number2))

    @property
    def is_valid(self) -> bool:
        return self.range.is_valid

    def matches(self, driver_date: str) -> bool:
        parsed = date_to_version(driver_date)
        return parsed is not None and self.range.contains(parsed)


@dataclass(frozen=True)
class PerformanceMatch:
    """A score range. An unmeasured score (0.0) never matches, even for 'any'."""

    range: FloatRange

    @classmethod
    def build(cls, op: str = "", value: Any = "", value2: Any = "") -> PerformanceMatch:
        return cls(FloatRange.build(op, value, value2))

    @property
    def is_valid(self) -> bool:
        return self.range.is_valid

    def matches(self, score: float) -> bool:
        return score != 0.0 and self.range.contains(score)


# StringMatch is used directly for driver_vendor, gl_vendor and gl_renderer.
__all__ = [
    "OsMatch",
    "DriverVersionMatch",
    "DriverDateMatch",
    "PerformanceMatch",
    "StringMatch",
]
