"""Load a rule document into a RuleSet. All-or-nothing: one malformed entry aborts the load."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml

from .engine import RuleSet
from .errors import MalformedTopLevelError
from .host import detect_os_type
from .models import OsFilter, OsType
from .rules.comparators import VersionRange
from .rules.entry import Rule, parse_rule
from .version import Version

logger = structlog.get_logger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def _coerce_browser_version(browser_version: str | Version) -> Version:
    if isinstance(browser_version, Version):
        return browser_version
    parsed = Version.parse(browser_version)
    if parsed is None:
        logger.warning("invalid_browser_version", browser_version=browser_version, fallback="0")
        return Version([0])
    return parsed


def _browser_gate(entry: Mapping[str, Any], browser_version: Version) -> bool:
    """True if the entry applies to browser_version. Raises on a malformed gate."""
    gate = entry.get("browser_version")
    if not isinstance(gate, Mapping):
        return True

    def _s(key: str, default: str = "") -> str:
        v = gate.get(key)
        return v if isinstance(v, str) else default

    version_range = VersionRange.build(_s("op", "any"), _s("number"), _s("number2"))
    if not version_range.is_valid:
        raise MalformedTopLevelError(f"Malformed browser_version gate in entry {entry.get('id')!r}")
    return version_range.contains(browser_version)


def _document_version(raw: Any) -> Version | None:
    # An unquoted YAML "version: 2.1" arrives as a float.
    if isinstance(raw, float):
        raw = repr(raw)
    return Version.parse(raw)


def load_rule_set(
    document: Mapping[str, Any],
    browser_version: str | Version = "0",
    os_filter: OsFilter = OsFilter.CURRENT_OS,
    os_type: OsType | None = None,
    features: Mapping[str, int] | None = None,
) -> RuleSet:
    """
    Validate a parsed rule document and build a RuleSet.

    - `version` must be a two-component dotted version, `entries` a list of mappings.
    - Entries gated out by browser_version are skipped; a malformed gate or entry fails the load.
    - Entries with unknown fields are dropped; unknown feature names are ignored. Both set
      RuleSet.contains_unknown_fields.
    - With OsFilter.CURRENT_OS only entries for `os_type` (detected when None) or any OS are kept.
    """
    if not isinstance(document, Mapping):
        raise MalformedTopLevelError("Rule document must be a mapping")
    version = _document_version(document.get("version"))
    if version is None or len(version) != 2:
        raise MalformedTopLevelError(f"Invalid rule document version: {document.get('version')!r}")
    entries = document.get("entries")
    if not isinstance(entries, list):
        raise MalformedTopLevelError("Rule document has no 'entries' list")

    browser = _coerce_browser_version(browser_version)
    parsed: list[Rule] = []
    max_rule_id = 0
    contains_unknown_fields = False
    for index, item in enumerate(entries):
        if not isinstance(item, Mapping):
            raise MalformedTopLevelError(f"Entry #{index} is not a mapping")
        if not _browser_gate(item, browser):
            logger.debug("entry_skipped_for_browser", entry_id=item.get("id"), browser_version=str(browser))
            continue
        rule = parse_rule(item, top_level=True, features=features)
        max_rule_id = max(max_rule_id, rule.id)
        if rule.contains_unknown_fields:
            contains_unknown_fields = True
            continue
        if rule.contains_unknown_features:
            logger.info("entry_with_unknown_features", entry_id=rule.id, features=list(rule.unknown_features))
            contains_unknown_fields = True
        parsed.append(rule)

    if os_filter is OsFilter.ALL_OS:
        kept = parsed
    else:
        current = os_type if os_type is not None else detect_os_type()
        kept = [r for r in parsed if r.os_type in (OsType.ANY, current)]

    rule_set = RuleSet(
        version=version,
        rules=tuple(kept),
        max_rule_id=max_rule_id,
        contains_unknown_fields=contains_unknown_fields,
    )
    logger.debug(
        "rule_set_loaded",
        version=rule_set.version_string,
        rules=len(rule_set),
        max_id=max_rule_id,
        unknown_fields=contains_unknown_fields,
    )
    return rule_set


def read_document(path: Path) -> dict[str, Any]:
    """Read a rule document from JSON, or YAML for .yaml/.yml files."""
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig")
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MalformedTopLevelError(f"Invalid rule document {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedTopLevelError(f"Rule document {path} must contain a mapping")
    return data


def load_rule_set_file(
    path: Path,
    browser_version: str | Version = "0",
    os_filter: OsFilter = OsFilter.CURRENT_OS,
    os_type: OsType | None = None,
    features: Mapping[str, int] | None = None,
) -> RuleSet:
    """read_document + load_rule_set."""
    return load_rule_set(
        read_document(path),
        browser_version=browser_version,
        os_filter=os_filter,
        os_type=os_type,
        features=features,
    )
