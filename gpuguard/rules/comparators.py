"""Comparator primitives: numeric ranges over versions/floats and string matches."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..version import Version, to_lexical


class NumericOp(str, Enum):
    EQ = "="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    ANY = "any"
    BETWEEN = "between"
    INVALID = "invalid"

    @classmethod
    def from_token(cls, token: Any) -> NumericOp:
        for member in cls:
            if member is not cls.INVALID and member.value == token:
                return member
        return cls.INVALID


class VersionStyle(str, Enum):
    NUMERICAL = "numerical"
    LEXICAL = "lexical"
    INVALID = "invalid"

    @classmethod
    def from_token(cls, token: Any) -> VersionStyle:
        if token in ("", None, cls.NUMERICAL.value):
            return cls.NUMERICAL
        if token == cls.LEXICAL.value:
            return cls.LEXICAL
        return cls.INVALID


class StringOp(str, Enum):
    EQ = "="
    CONTAINS = "contains"
    BEGINS_WITH = "beginwith"
    ENDS_WITH = "endwith"
    INVALID = "invalid"

    @classmethod
    def from_token(cls, token: Any) -> StringOp:
        for member in cls:
            if member is not cls.INVALID and member.value == token:
                return member
        return cls.INVALID


@dataclass(frozen=True)
class VersionRange:
    """op + one or two Version bounds. Any missing or unparseable bound makes the range INVALID."""

    op: NumericOp
    style: VersionStyle = VersionStyle.NUMERICAL
    low: Version | None = None
    high: Version | None = None

    @classmethod
    def build(cls, op: str, number: str = "", number2: str = "", style: str = "") -> VersionRange:
        numeric_op = NumericOp.from_token(op)
        # Bounds and style are never looked at for these two.
        if numeric_op in (NumericOp.ANY, NumericOp.INVALID):
            return cls(op=numeric_op)
        version_style = VersionStyle.from_token(style)
        if version_style is VersionStyle.LEXICAL:
            number, number2 = to_lexical(number or ""), to_lexical(number2 or "")
        low = Version.parse(number)
        if low is None:
            return cls(op=NumericOp.INVALID, style=version_style)
        high = None
        if numeric_op is NumericOp.BETWEEN:
            high = Version.parse(number2)
            if high is None:
                return cls(op=NumericOp.INVALID, style=version_style)
        return cls(op=numeric_op, style=version_style, low=low, high=high)

    @property
    def is_valid(self) -> bool:
        return self.op is not NumericOp.INVALID and self.style is not VersionStyle.INVALID

    @property
    def is_lexical(self) -> bool:
        return self.style is VersionStyle.LEXICAL

    def contains(self, version: Version | None) -> bool:
        if not self.is_valid:
            return False
        if self.op is NumericOp.ANY:
            return True
        if version is None:
            return False
        if self.op is NumericOp.EQ:
            # "10.6" contains 10.6.4, but "10.6.4" does not contain 10.6
            probe = version.components
            for i, ref in enumerate(self.low.components):
                got = probe[i] if i < len(probe) else 0
                if got != ref:
                    return False
            return True
        relation = version.compare_to(self.low)
        if self.op is NumericOp.LT:
            return relation < 0
        if self.op is NumericOp.LE:
            return relation <= 0
        if self.op is NumericOp.GT:
            return relation > 0
        if self.op is NumericOp.GE:
            return relation >= 0
        # BETWEEN, bounds inclusive and taken in document order
        return relation >= 0 and version.compare_to(self.high) <= 0


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class FloatRange:
    """Same operators as VersionRange over floats. Unlike versions, 'value' is required even for 'any'."""

    op: NumericOp
    value: float = 0.0
    value2: float = 0.0

    @classmethod
    def build(cls, op: str, value: Any = "", value2: Any = "") -> FloatRange:
        first = _to_float(value)
        if first is None:
            return cls(op=NumericOp.INVALID)
        numeric_op = NumericOp.from_token(op)
        second = 0.0
        if numeric_op is NumericOp.BETWEEN:
            parsed = _to_float(value2)
            if parsed is None:
                return cls(op=NumericOp.INVALID)
            second = parsed
        return cls(op=numeric_op, value=first, value2=second)

    @property
    def is_valid(self) -> bool:
        return self.op is not NumericOp.INVALID

    def contains(self, x: float) -> bool:
        op = self.op
        if op is NumericOp.INVALID:
            return False
        if op is NumericOp.ANY:
            return True
        if op is NumericOp.EQ:
            return x == self.value
        if op is NumericOp.LT:
            return x < self.value
        if op is NumericOp.LE:
            return x <= self.value
        if op is NumericOp.GT:
            return x > self.value
        if op is NumericOp.GE:
            return x >= self.value
        lo, hi = sorted((self.value, self.value2))
        return lo <= x <= hi


@dataclass(frozen=True)
class StringMatch:
    """Case-insensitive string comparison. INVALID never matches."""

    op: StringOp
    value: str = ""

    @classmethod
    def build(cls, op: str, value: str = "") -> StringMatch:
        return cls(op=StringOp.from_token(op), value=(value or "").lower())

    @property
    def is_valid(self) -> bool:
        return self.op is not StringOp.INVALID

    def contains(self, probe: str | None) -> bool:
        s = (probe or "").lower()
        if self.op is StringOp.CONTAINS:
            return self.value in s
        if self.op is StringOp.BEGINS_WITH:
            return s.startswith(self.value)
        if self.op is StringOp.ENDS_WITH:
            return s.endswith(self.value)
        if self.op is StringOp.EQ:
            return s == self.value
        return False
