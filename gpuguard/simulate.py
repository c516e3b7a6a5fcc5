"""Evaluate a rule file against a saved hardware descriptor (pre-deployment check)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .engine import Evaluation, RuleSet
from .host import Platform, inspect_platform
from .loader import load_rule_set_file
from .models import HardwareDescriptor, OsFilter, OsType
from .rules.entry import parse_hex_id
from .version import Version


def _id(value: Any) -> int:
    """Ids come as ints from JSON or as hex strings ('0x10de')."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    parsed = parse_hex_id(str(value))
    if parsed is None:
        raise ValueError(f"Not a hex id: {value!r}")
    return parsed


def _float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)


def _bool(data: dict, key: str) -> bool:
    """Only real JSON booleans; the string "false" must not read as True."""
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def hardware_from_dict(data: dict) -> HardwareDescriptor:
    """Build HardwareDescriptor from dict (e.g. from JSON file)."""
    return HardwareDescriptor(
        vendor_id=_id(data.get("vendor_id")),
        device_id=_id(data.get("device_id")),
        driver_vendor=str(data.get("driver_vendor") or ""),
        driver_version=str(data.get("driver_version") or ""),
        driver_date=str(data.get("driver_date") or ""),
        gl_vendor=str(data.get("gl_vendor") or ""),
        gl_renderer=str(data.get("gl_renderer") or ""),
        optimus=_bool(data, "optimus"),
        amd_switchable=_bool(data, "amd_switchable"),
        perf_graphics=_float(data.get("perf_graphics")),
        perf_gaming=_float(data.get("perf_gaming")),
        perf_overall=_float(data.get("perf_overall")),
    )


def platform_from_dict(data: dict, fallback: Platform) -> Platform:
    """Override parts of fallback with 'os', 'os_version' and 'browser_version' from data."""
    os_type = fallback.os_type
    if data.get("os"):
        os_type = OsType.from_token(str(data["os"]))
        if os_type is OsType.UNKNOWN:
            raise ValueError(f"Unknown os: {data['os']!r}")
        # Evaluation needs a concrete OS; 'any' only makes sense inside a rule.
        if os_type is OsType.ANY:
            raise ValueError(f"Cannot evaluate as os {data['os']!r}")
    os_version = fallback.os_version
    if data.get("os_version"):
        os_version = Version.parse(str(data["os_version"]))
        if os_version is None:
            raise ValueError(f"Invalid os_version: {data['os_version']!r}")
    browser_version = fallback.browser_version
    if data.get("browser_version"):
        browser_version = Version.parse(str(data["browser_version"]))
        if browser_version is None:
            raise ValueError(f"Invalid browser_version: {data['browser_version']!r}")
    return Platform(os_type=os_type, os_version=os_version, browser_version=browser_version)


def read_hardware(path: Path) -> tuple[HardwareDescriptor, dict]:
    """Returns the descriptor and the raw 'platform' section (empty if absent)."""
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid hardware file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Hardware file {path} must contain a JSON object")
    platform_data = data.get("platform") or {}
    if not isinstance(platform_data, dict):
        raise ValueError(f"'platform' in {path} must be an object")
    if "hardware" in data:
        data = data["hardware"]
        if not isinstance(data, dict):
            raise ValueError(f"'hardware' in {path} must be an object")
    try:
        return hardware_from_dict(data), platform_data
    except ValueError as e:
        raise ValueError(f"Invalid hardware file {path}: {e}") from e


def simulate(
    rules_path: Path,
    hardware_path: Path,
    platform: Platform | None = None,
    os_filter: OsFilter = OsFilter.CURRENT_OS,
    overrides: dict | None = None,
) -> tuple[RuleSet, Evaluation, Platform]:
    """
    Load rules for the target platform and evaluate the saved hardware against them.
    Target platform: `platform` (current machine when None), then the file's 'platform'
    section, then `overrides` (same keys), each layer winning over the previous one.
    """
    hardware, platform_data = read_hardware(hardware_path)
    target = platform_from_dict(platform_data, platform or inspect_platform())
    if overrides:
        target = platform_from_dict(overrides, target)
    rule_set = load_rule_set_file(
        rules_path,
        browser_version=target.browser_version,
        os_filter=os_filter,
        os_type=target.os_type,
    )
    evaluation = rule_set.evaluate(hardware, target.os_type, target.os_version, platform=target)
    return rule_set, evaluation, target
