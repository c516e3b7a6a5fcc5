"""Terminal output formatting: box layout and colors."""

import shutil
from typing import List, Mapping

import click

from .engine import Evaluation, RuleSet
from .host import Platform
from .rules.features import feature_names


def _get_width() -> int:
    try:
        return min(72, shutil.get_terminal_size((72, 24)).columns)
    except OSError:
        return 72


def _wrap(text: str, indent: int = 0, width: int = 72) -> List[str]:
    """Wrap text to width, first line has indent, following lines +2."""
    prefix = " " * indent
    extra = "  "
    lines = []
    rest = text
    first = True
    while rest:
        max_len = width - (indent if first else indent + len(extra))
        if len(rest) <= max_len:
            lines.append(prefix + rest)
            break
        break_at = rest.rfind(" ", 0, max_len + 1)
        if break_at <= 0:
            break_at = max_len
        chunk = rest[:break_at].strip()
        rest = rest[break_at:].strip()
        lines.append(prefix + chunk)
        prefix = " " * indent + extra
        first = False
    return lines


def platform_summary(platform: Platform) -> str:
    os_version = str(platform.os_version) if platform.os_version is not None else "unknown version"
    return f"{platform.os_type.value} {os_version}, browser {platform.browser_version}"


def _bugs(rule) -> str:
    refs = [f"crbug {b}" for b in rule.cr_bugs] + [f"webkit {b}" for b in rule.webkit_bugs]
    return ", ".join(refs)


def format_human(
    rule_set: RuleSet,
    evaluation: Evaluation,
    platform: Platform,
    features: Mapping[str, int] | None = None,
    verbose: bool = False,
) -> str:
    """Build the human terminal output as a single string."""
    width = _get_width()
    lines = []

    lines.append("┌" + "─" * (width - 2) + "┐")
    lines.append(f" gpuguard · rule set {rule_set.version_string or '?'} · {len(rule_set)} rule(s)")
    lines.append(click.style(f" {platform_summary(platform)}", dim=True))
    lines.append("─" * width)

    disabled = [n for n in feature_names(evaluation.feature_mask, features) if n != "all"]
    if disabled:
        lines.append(click.style(f" DISABLED  {', '.join(disabled)}", fg="red"))
    else:
        lines.append(click.style(" No GPU features disabled.", fg="green"))
    lines.append("─" * width)

    if evaluation.active_rules:
        lines.append(" ACTIVE RULES")
        for rule in evaluation.active_rules:
            if rule.disabled:
                text = f"○ [{rule.id}] (rule disabled) {rule.description}"
                for ln in _wrap(text, indent=2, width=width):
                    lines.append(click.style(ln, dim=True))
                continue
            for ln in _wrap(f"● [{rule.id}] {rule.description}", indent=2, width=width):
                lines.append(click.style(ln, fg="red"))
            bugs = _bugs(rule)
            if verbose and bugs:
                lines.append(click.style(f"    {bugs}", dim=True))
    else:
        lines.append(" No rules matched this GPU.")

    if rule_set.contains_unknown_fields:
        lines.append(click.style(" Note: rule set has entries this version does not understand.", fg="yellow"))

    lines.append("─" * width)
    footer = " Run with --json for machine output  ·  --ci for exit codes"
    if len(footer) > width:
        footer = " --json  ·  --ci  ·  --help"
    lines.append(click.style(footer, dim=True))
    lines.append("└" + "─" * (width - 2) + "┘")

    return "\n".join(lines)
