"""Tests for VersionRange, FloatRange and StringMatch."""

import pytest

from gpuguard.rules.comparators import FloatRange, NumericOp, StringMatch, StringOp, VersionRange
from gpuguard.version import Version


def _v(s: str) -> Version:
    return Version.parse(s)


def test_eq_contains_longer_version():
    """'10.6' contains 10.6.4."""
    assert VersionRange.build("=", "10.6").contains(_v("10.6.4"))


def test_eq_does_not_contain_shorter_version_with_nonzero_bound():
    """'10.6.4' does not contain 10.6."""
    assert not VersionRange.build("=", "10.6.4").contains(_v("10.6"))


def test_eq_shorter_version_matches_zero_bound():
    """'10.6.0' contains 10.6 (missing component counts as 0)."""
    assert VersionRange.build("=", "10.6.0").contains(_v("10.6"))


def test_eq_mismatch():
    assert not VersionRange.build("=", "10.6").contains(_v("10.7.1"))


@pytest.mark.parametrize(
    "op,bound,version,expected",
    [
        ("<", "10.6", "10.5.8", True),
        ("<", "10.6", "10.6", False),
        ("<=", "10.6", "10.6", True),
        (">", "10.6", "10.6.1", True),
        (">", "10.6", "10.6", False),
        (">=", "10.6", "10.6.0", True),
        (">=", "10.6", "10.5", False),
    ],
)
def test_relational_ops(op, bound, version, expected):
    assert VersionRange.build(op, bound).contains(_v(version)) is expected


def test_between_is_inclusive():
    r = VersionRange.build("between", "10.5", "10.7")
    assert r.contains(_v("10.5"))
    assert r.contains(_v("10.6.3"))
    assert r.contains(_v("10.7"))
    assert not r.contains(_v("10.8"))


def test_between_requires_second_bound():
    """Missing number2 degrades the whole range to INVALID."""
    r = VersionRange.build("between", "10.5")
    assert not r.is_valid
    assert not r.contains(_v("10.5"))


def test_any_ignores_bounds():
    """'any' is valid and matches everything, even with garbage numbers."""
    r = VersionRange.build("any", "not-a-version")
    assert r.is_valid
    assert r.contains(_v("1.2.3"))


def test_unknown_op_is_invalid():
    r = VersionRange.build("~=", "1.0")
    assert r.op is NumericOp.INVALID
    assert not r.is_valid
    assert not r.contains(_v("1.0"))


def test_unparseable_bound_is_invalid():
    assert not VersionRange.build("<", "1.x").is_valid


def test_unknown_style_is_invalid():
    assert not VersionRange.build("<", "8.1", style="semantic").is_valid


def test_lexical_style_rewrites_bounds():
    """Lexical 8.103 becomes 8.1.0.3, so 8.2 (-> 8.2) is greater."""
    r = VersionRange.build("<", "8.103", style="lexical")
    assert r.is_lexical
    assert r.low == _v("8.1.0.3")
    assert not r.contains(_v("8.2"))
    assert r.contains(_v("8.1.0.2"))


def test_unknown_version_only_matches_any():
    assert VersionRange.build("any").contains(None)
    assert not VersionRange.build(">=", "1.0").contains(None)


def test_float_between_accepts_either_order():
    """Between for floats is symmetric in its bounds."""
    assert FloatRange.build("between", "1.0", "5.0").contains(3.0)
    assert FloatRange.build("between", "5.0", "1.0").contains(3.0)
    assert not FloatRange.build("between", "5.0", "1.0").contains(6.0)


def test_float_requires_value_even_for_any():
    assert not FloatRange.build("any").is_valid
    assert FloatRange.build("any", "0").is_valid


def test_float_accepts_numbers():
    """YAML documents give plain numbers."""
    r = FloatRange.build("<", 5)
    assert r.is_valid
    assert r.contains(4.5)


def test_float_bad_values():
    assert not FloatRange.build("<", "fast").is_valid
    assert not FloatRange.build("between", "1.0", "").is_valid
    assert not FloatRange.build("nope", "1.0").is_valid


@pytest.mark.parametrize(
    "op,value,score,expected",
    [
        ("=", "1.5", 1.5, True),
        ("<", "1.5", 1.4, True),
        ("<=", "1.5", 1.5, True),
        (">", "1.5", 1.5, False),
        (">=", "1.5", 1.5, True),
    ],
)
def test_float_ops(op, value, score, expected):
    assert FloatRange.build(op, value).contains(score) is expected


def test_string_match_is_case_insensitive():
    m = StringMatch.build("contains", "GeForce")
    assert m.value == "geforce"
    assert m.contains("NVIDIA GEFORCE 8800")
    assert not m.contains("Radeon HD 4850")


def test_string_match_ops():
    assert StringMatch.build("beginwith", "ati").contains("ATI Technologies Inc.")
    assert StringMatch.build("endwith", "inc.").contains("ATI Technologies Inc.")
    assert StringMatch.build("=", "Intel").contains("INTEL")
    assert not StringMatch.build("=", "Intel").contains("Intel Inc.")


def test_string_match_unknown_op_never_matches():
    m = StringMatch.build("regex", "x")
    assert m.op is StringOp.INVALID
    assert not m.is_valid
    assert not m.contains("x")
