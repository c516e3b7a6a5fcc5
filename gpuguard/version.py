"""Dotted-decimal versions, plus the lexical and date encodings built on them."""

from __future__ import annotations

from typing import Sequence


def _is_digits(s: str) -> bool:
    """ASCII digits only; str.isdigit() also accepts superscripts and other scripts."""
    return bool(s) and all("0" <= c <= "9" for c in s)


class Version:
    """Immutable sequence of non-negative integer components, e.g. 8.103 -> (8, 103)."""

    __slots__ = ("_components",)

    def __init__(self, components: Sequence[int]):
        if not components:
            raise ValueError("Version needs at least one component")
        if any(c < 0 for c in components):
            raise ValueError(f"Negative version component in {components!r}")
        self._components = tuple(int(c) for c in components)

    @classmethod
    def parse(cls, text: str | None) -> Version | None:
        """Parse '10.6.4'. Returns None if any component is empty or non-numeric."""
        if not isinstance(text, str) or not text:
            return None
        parts = text.split(".")
        if not all(_is_digits(p) for p in parts):
            return None
        return cls([int(p) for p in parts])

    @property
    def components(self) -> tuple[int, ...]:
        return self._components

    def compare_to(self, other: Version) -> int:
        """-1, 0 or 1. Missing trailing components compare as zero, so 1.0 == 1."""
        mine, theirs = self._components, other._components
        for i in range(max(len(mine), len(theirs))):
            a = mine[i] if i < len(mine) else 0
            b = theirs[i] if i < len(theirs) else 0
            if a != b:
                return -1 if a < b else 1
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) == 0

    def __lt__(self, other: Version) -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other: Version) -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other: Version) -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other: Version) -> bool:
        return self.compare_to(other) >= 0

    def __hash__(self) -> int:
        trimmed = list(self._components)
        while len(trimmed) > 1 and trimmed[-1] == 0:
            trimmed.pop()
        return hash(tuple(trimmed))

    def __len__(self) -> int:
        return len(self._components)

    def __str__(self) -> str:
        return ".".join(str(c) for c in self._components)

    def __repr__(self) -> str:
        return f"Version('{self}')"


def to_lexical(numerical: str) -> str:
    """
    Treat major as numeric and every digit after the first '.' as its own component.
    '8.103' -> '8.1.0.3'. Anything else (no fraction, non-digit in fraction) is returned as-is.
    """
    pos = numerical.find(".")
    if pos < 0 or pos + 1 >= len(numerical):
        return numerical
    fraction = numerical[pos + 1:]
    if not _is_digits(fraction):
        return numerical
    return numerical[:pos] + "".join("." + d for d in fraction)


def date_to_version(date: str | None) -> Version | None:
    """'mm-dd-yyyy' -> Version(yyyy, mm, dd) so date ranges reuse version comparison."""
    if not isinstance(date, str):
        return None
    pieces = date.split("-")
    if len(pieces) != 3:
        return None
    month, day, year = pieces
    return Version.parse(f"{year}.{month}.{day}")
