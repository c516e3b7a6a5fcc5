"""A single policy entry: hardware filters, feature mask, and vetoing exceptions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog

from ..errors import MalformedEntryError
from ..models import HardwareDescriptor, MultiGpuStyle, OsType
from ..version import Version
from .comparators import StringMatch
from .features import feature_mask
from .fields import DriverDateMatch, DriverVersionMatch, OsMatch, PerformanceMatch

logger = structlog.get_logger(__name__)

DEFAULT_DESCRIPTION = "The GPU is unavailable for an unexplained reason."

_HEX_RE = re.compile(r"^(0[xX])?[0-9a-fA-F]+$")
_MAX_U32 = 0xFFFFFFFF


@dataclass(frozen=True)
class Rule:
    """One entry of a rule document. Exceptions are full Rules whose match vetoes this one."""

    id: int = 0
    disabled: bool = False
    description: str = DEFAULT_DESCRIPTION
    cr_bugs: tuple[int, ...] = ()
    webkit_bugs: tuple[int, ...] = ()

    os: OsMatch | None = None
    vendor_id: int = 0  # 0 = any vendor
    device_ids: frozenset[int] = frozenset()  # empty = any device
    multi_gpu_style: MultiGpuStyle = MultiGpuStyle.NONE
    driver_vendor: StringMatch | None = None
    driver_version: DriverVersionMatch | None = None
    driver_date: DriverDateMatch | None = None
    gl_vendor: StringMatch | None = None
    gl_renderer: StringMatch | None = None
    perf_graphics: PerformanceMatch | None = None
    perf_gaming: PerformanceMatch | None = None
    perf_overall: PerformanceMatch | None = None

    feature_mask: int = 0
    unknown_features: tuple[str, ...] = ()
    contains_unknown_fields: bool = False
    exceptions: tuple[Rule, ...] = field(default_factory=tuple)

    @property
    def contains_unknown_features(self) -> bool:
        return bool(self.unknown_features)

    @property
    def os_type(self) -> OsType:
        """OS this rule targets; ANY when it has no os constraint."""
        return self.os.os_type if self.os is not None else OsType.ANY

    def matches(self, os_type: OsType, os_version: Version | None, hw: HardwareDescriptor) -> bool:
        """Every present constraint must hold, and no exception may match."""
        if self.os is not None and not self.os.contains(os_type, os_version):
            return False
        if self.vendor_id != 0 and self.vendor_id != hw.vendor_id:
            return False
        if self.device_ids and hw.device_id not in self.device_ids:
            return False
        if self.multi_gpu_style is MultiGpuStyle.OPTIMUS and not hw.optimus:
            return False
        if self.multi_gpu_style is MultiGpuStyle.AMD_SWITCHABLE and not hw.amd_switchable:
            return False
        if self.driver_vendor is not None and not self.driver_vendor.contains(hw.driver_vendor):
            return False
        if self.driver_version is not None and not self.driver_version.matches(hw.driver_version):
            return False
        if self.driver_date is not None and not self.driver_date.matches(hw.driver_date):
            return False
        if self.gl_vendor is not None and not self.gl_vendor.contains(hw.gl_vendor):
            return False
        if self.gl_renderer is not None and not self.gl_renderer.contains(hw.gl_renderer):
            return False
        if self.perf_graphics is not None and not self.perf_graphics.matches(hw.perf_graphics):
            return False
        if self.perf_gaming is not None and not self.perf_gaming.matches(hw.perf_gaming):
            return False
        if self.perf_overall is not None and not self.perf_overall.matches(hw.perf_overall):
            return False
        return not any(e.matches(os_type, os_version, hw) for e in self.exceptions)


def _malformed(entry_id: int, field_name: str, reason: str = "") -> MalformedEntryError:
    logger.warning("malformed_entry", entry_id=entry_id, field=field_name, reason=reason or None)
    msg = f"Malformed {field_name} entry {entry_id}"
    if reason:
        msg += f": {reason}"
    return MalformedEntryError(msg, entry_id=entry_id, field=field_name)


def _str(d: Mapping[str, Any], key: str, default: str = "") -> str:
    """String value of key, or default when missing or not a string."""
    v = d.get(key)
    return v if isinstance(v, str) else default


def _num_or_str(d: Mapping[str, Any], key: str) -> Any:
    """Perf values: strings in JSON documents, often plain numbers in YAML."""
    v = d.get(key)
    if isinstance(v, bool):
        return ""
    return v if isinstance(v, (str, int, float)) else ""


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def parse_hex_id(text: Any) -> int | None:
    """
    '0x10de' or '10de' -> 0x10de. YAML reads an unquoted 0x10de as an int, which is taken as-is.
    None for anything else or values beyond 32 bits.
    """
    if _is_int(text):
        return text if 0 <= text <= _MAX_U32 else None
    if not isinstance(text, str) or not _HEX_RE.match(text):
        return None
    value = int(text, 16)
    return value if value <= _MAX_U32 else None


def _int_list(value: Mapping[str, Any], key: str, entry_id: int) -> tuple[int, ...]:
    items = value[key]
    if not all(_is_int(b) for b in items):
        raise _malformed(entry_id, key, "bug ids must be integers")
    return tuple(items)


def parse_rule(value: Mapping[str, Any], top_level: bool = True, features: Mapping[str, int] | None = None) -> Rule:
    """
    Build a Rule from one document entry.
    Raises MalformedEntryError on bad content. Unrecognized keys (or recognized keys holding the
    wrong container type) only set contains_unknown_fields.
    """
    recognized: set[str] = set()
    kw: dict[str, Any] = {}
    entry_id = 0

    if top_level:
        raw_id = value.get("id")
        if not _is_int(raw_id) or not 0 < raw_id <= _MAX_U32:
            raise _malformed(raw_id if _is_int(raw_id) else 0, "id")
        entry_id = raw_id
        kw["id"] = entry_id
        recognized.add("id")
        if isinstance(value.get("disabled"), bool):
            kw["disabled"] = value["disabled"]
            recognized.add("disabled")

    if isinstance(value.get("description"), str):
        kw["description"] = value["description"]
        recognized.add("description")

    for key in ("cr_bugs", "webkit_bugs"):
        if isinstance(value.get(key), list):
            kw[key] = _int_list(value, key, entry_id)
            recognized.add(key)

    os_value = value.get("os")
    if isinstance(os_value, Mapping):
        version = os_value.get("version")
        version = version if isinstance(version, Mapping) else {}
        os_match = OsMatch.build(
            _str(os_value, "type"),
            _str(version, "op", "any"),
            _str(version, "number"),
            _str(version, "number2"),
        )
        if not os_match.is_valid:
            raise _malformed(entry_id, "os")
        kw["os"] = os_match
        recognized.add("os")

    if isinstance(value.get("vendor_id"), str) or _is_int(value.get("vendor_id")):
        vendor_id = parse_hex_id(value["vendor_id"])
        if vendor_id is None:
            raise _malformed(entry_id, "vendor_id", str(value["vendor_id"]))
        kw["vendor_id"] = vendor_id
        recognized.add("vendor_id")

    if isinstance(value.get("device_id"), list):
        device_ids = set()
        for raw in value["device_id"]:
            device_id = parse_hex_id(raw)
            if device_id is None:
                raise _malformed(entry_id, "device_id", str(raw))
            device_ids.add(device_id)
        kw["device_ids"] = frozenset(device_ids)
        recognized.add("device_id")

    if isinstance(value.get("multi_gpu_style"), str):
        style = value["multi_gpu_style"]
        if style not in (MultiGpuStyle.OPTIMUS.value, MultiGpuStyle.AMD_SWITCHABLE.value):
            raise _malformed(entry_id, "multi_gpu_style", style)
        kw["multi_gpu_style"] = MultiGpuStyle(style)
        recognized.add("multi_gpu_style")

    for key in ("driver_vendor", "gl_vendor", "gl_renderer"):
        sub = value.get(key)
        if isinstance(sub, Mapping):
            match = StringMatch.build(_str(sub, "op"), _str(sub, "value"))
            if not match.is_valid:
                raise _malformed(entry_id, key)
            kw[key] = match
            recognized.add(key)

    sub = value.get("driver_version")
    if isinstance(sub, Mapping):
        match = DriverVersionMatch.build(
            _str(sub, "op", "any"), _str(sub, "style"), _str(sub, "number"), _str(sub, "number2")
        )
        if not match.is_valid:
            raise _malformed(entry_id, "driver_version")
        kw["driver_version"] = match
        recognized.add("driver_version")

    sub = value.get("driver_date")
    if isinstance(sub, Mapping):
        match = DriverDateMatch.build(_str(sub, "op", "any"), _str(sub, "number"), _str(sub, "number2"))
        if not match.is_valid:
            raise _malformed(entry_id, "driver_date")
        kw["driver_date"] = match
        recognized.add("driver_date")

    for key in ("perf_graphics", "perf_gaming", "perf_overall"):
        sub = value.get(key)
        if isinstance(sub, Mapping):
            match = PerformanceMatch.build(_str(sub, "op"), _num_or_str(sub, "value"), _num_or_str(sub, "value2"))
            if not match.is_valid:
                raise _malformed(entry_id, key)
            kw[key] = match
            recognized.add(key)

    unknown_fields = False
    if top_level:
        names = value.get("blacklist")
        if not isinstance(names, list) or not names or not all(isinstance(n, str) for n in names):
            raise _malformed(entry_id, "blacklist")
        mask, unknown = feature_mask(names, features)
        kw["feature_mask"] = mask
        kw["unknown_features"] = tuple(unknown)
        recognized.add("blacklist")

        if isinstance(value.get("exceptions"), list):
            exceptions = []
            for raw in value["exceptions"]:
                if not isinstance(raw, Mapping):
                    raise _malformed(entry_id, "exceptions")
                try:
                    exception = parse_rule(raw, top_level=False, features=features)
                except MalformedEntryError as exc:
                    raise _malformed(entry_id, "exceptions", str(exc)) from exc
                if exception.contains_unknown_fields:
                    logger.warning("exception_with_unknown_fields", entry_id=entry_id)
                    unknown_fields = True
                    continue
                exceptions.append(exception)
            kw["exceptions"] = tuple(exceptions)
            recognized.add("exceptions")

        # Consumed by the loader before the entry is parsed.
        if isinstance(value.get("browser_version"), Mapping):
            recognized.add("browser_version")

    extra = sorted(str(k) for k in set(value) - recognized)
    if extra:
        logger.warning("entry_with_unknown_fields", entry_id=entry_id, fields=extra)
        unknown_fields = True
    kw["contains_unknown_fields"] = unknown_fields
    return Rule(**kw)
