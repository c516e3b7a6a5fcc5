"""Rule set evaluation: OR together the feature masks of every matching rule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .host import Platform, inspect_platform
from .models import HardwareDescriptor, OsType
from .rules.entry import Rule
from .version import Version


@dataclass(frozen=True)
class Evaluation:
    """Result of one evaluate() call. Active rules keep load order, disabled ones included."""

    feature_mask: int
    active_rules: tuple[Rule, ...]

    @property
    def active_rule_ids(self) -> list[int]:
        return [r.id for r in self.active_rules]

    def is_disabled(self, feature: int) -> bool:
        return bool(self.feature_mask & int(feature))

    def entries_for_feature(self, feature: int, disabled: bool = False) -> list[int]:
        """Ids of active rules touching feature whose disabled flag equals `disabled`."""
        return [
            r.id
            for r in self.active_rules
            if (int(feature) & r.feature_mask) != 0 and r.disabled == disabled
        ]

    def reasons(self) -> list[dict[str, Any]]:
        """Description and bug references for each active, enabled rule."""
        return [
            {
                "id": r.id,
                "description": r.description,
                "cr_bugs": list(r.cr_bugs),
                "webkit_bugs": list(r.webkit_bugs),
            }
            for r in self.active_rules
            if not r.disabled
        ]


@dataclass(frozen=True)
class RuleSet:
    """Loaded, OS-filtered rules. Built once per load; replace the whole object to reload."""

    version: Version
    rules: tuple[Rule, ...] = ()
    max_rule_id: int = 0
    contains_unknown_fields: bool = False

    @property
    def version_string(self) -> str:
        """'major.minor', or '' if the format version does not have two components."""
        if len(self.version) != 2:
            return ""
        major, minor = self.version.components
        return f"{major}.{minor}"

    @property
    def rule_count(self) -> int:
        return len(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def evaluate(
        self,
        hardware: HardwareDescriptor,
        os_type: OsType = OsType.ANY,
        os_version: Version | None = None,
        platform: Platform | None = None,
        platform_provider: Callable[[], Platform] = inspect_platform,
    ) -> Evaluation:
        """
        Match every rule against hardware on the given OS.
        OsType.ANY and a missing os_version are filled from `platform`, or from
        `platform_provider()` when no platform is passed.
        """
        if os_type is OsType.ANY or os_version is None:
            current = platform if platform is not None else platform_provider()
            if os_type is OsType.ANY:
                os_type = current.os_type
            if os_version is None:
                os_version = current.os_version

        mask = 0
        active: list[Rule] = []
        for rule in self.rules:
            if rule.matches(os_type, os_version, hardware):
                active.append(rule)
                if not rule.disabled:
                    mask |= rule.feature_mask
        return Evaluation(feature_mask=mask, active_rules=tuple(active))
