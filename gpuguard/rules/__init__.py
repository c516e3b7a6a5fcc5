"""Rule model: comparators, field matchers, entries and the feature registry."""

from .comparators import FloatRange, NumericOp, StringMatch, StringOp, VersionRange, VersionStyle
from .entry import DEFAULT_DESCRIPTION, Rule, parse_hex_id, parse_rule
from .features import DEFAULT_FEATURES, FEATURE_INFO, GpuFeature, feature_mask, feature_names
from .fields import DriverDateMatch, DriverVersionMatch, OsMatch, PerformanceMatch

__all__ = [
    "DEFAULT_DESCRIPTION",
    "DEFAULT_FEATURES",
    "FEATURE_INFO",
    "DriverDateMatch",
    "DriverVersionMatch",
    "FloatRange",
    "GpuFeature",
    "NumericOp",
    "OsMatch",
    "PerformanceMatch",
    "Rule",
    "StringMatch",
    "StringOp",
    "VersionRange",
    "VersionStyle",
    "feature_mask",
    "feature_names",
    "parse_hex_id",
    "parse_rule",
]
