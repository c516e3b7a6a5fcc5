"""CLI entry point: load rules, evaluate a GPU, print the result."""

import json
from pathlib import Path

import typer

from .config import EngineConfig, load_config
from .engine import Evaluation, RuleSet
from .errors import GpuGuardError
from .format import format_human, platform_summary
from .host import Platform, inspect_platform
from .loader import load_rule_set_file
from .log import configure_logging
from .models import OsFilter
from .rules.features import DEFAULT_FEATURES, FEATURE_INFO, feature_names
from .simulate import simulate


def _err(msg: str) -> None:
    """Raise a styled error (red box). Used for all CLI errors."""
    raise typer.BadParameter(msg)


app = typer.Typer(help="Decide which GPU features to disable for a GPU, driver and OS.")


def _setup(config_path: Path | None, browser_version: str | None, all_os: bool) -> EngineConfig:
    try:
        cfg = load_config(config_path)
    except GpuGuardError as e:
        _err(str(e))
    if browser_version:
        cfg.browser_version = browser_version
    if all_os:
        cfg.os_filter = OsFilter.ALL_OS
    configure_logging(cfg.log_level, cfg.json_logs)
    return cfg


def _load(rules: Path, cfg: EngineConfig) -> RuleSet:
    try:
        return load_rule_set_file(rules, browser_version=cfg.browser_version, os_filter=cfg.os_filter)
    except FileNotFoundError:
        _err(f"Rules file not found: {rules}")
    except GpuGuardError as e:
        _err(str(e))


def _evaluate(rules: Path, hardware_file: Path, cfg: EngineConfig, os_name: str | None, os_version: str | None):
    """Current machine, overridden by the hardware file's 'platform' section, then by CLI flags."""
    if not hardware_file.exists():
        _err(f"Hardware file not found: {hardware_file}\nExpected JSON like {{\"vendor_id\": \"0x10de\", ...}}")
    try:
        return simulate(
            rules,
            hardware_file,
            platform=inspect_platform(cfg.browser_version),
            os_filter=cfg.os_filter,
            overrides={"os": os_name, "os_version": os_version},
        )
    except FileNotFoundError:
        _err(f"Rules file not found: {rules}")
    except (GpuGuardError, ValueError) as e:
        _err(str(e))


def _ci_exit(evaluation: Evaluation, fail_on: list[str]) -> None:
    """Exit 1 if a feature listed in fail_on (or any feature when empty) is disabled."""
    if not fail_on:
        if evaluation.feature_mask:
            raise typer.Exit(1)
        return
    for name in fail_on:
        bit = DEFAULT_FEATURES.get(name)
        if bit is None:
            _err(f"Unknown feature in fail_on: {name}")
        if evaluation.is_disabled(bit):
            raise typer.Exit(1)


@app.command("check")
def check_cmd(
    rules: Path = typer.Argument(..., help="Rule document (JSON, or YAML for .yaml/.yml)"),
    hardware_file: Path = typer.Option(..., "--hardware", "-H", help="Hardware descriptor JSON"),
    os_name: str = typer.Option(None, "--os", help="Evaluate as this OS (win/macosx/linux/chromeos)"),
    os_version: str = typer.Option(None, "--os-version", help="Evaluate as this OS version"),
    browser_version: str = typer.Option(None, "--browser-version", "-b", help="Browser version for rule gating"),
    all_os: bool = typer.Option(False, "--all-os", help="Keep rules for every OS when loading"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    ci: bool = typer.Option(False, "--ci", help="CI mode: exit 1 if a fail_on feature is disabled"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Include bug references"),
    config: Path = typer.Option(None, "--config", "-c", help="YAML config (browser_version, os_filter, log_level, fail_on)"),
) -> None:
    """Evaluate a GPU against a rule set and report disabled features."""
    cfg = _setup(config, browser_version, all_os)
    rule_set, evaluation, target = _evaluate(rules, hardware_file, cfg, os_name, os_version)
    if json_out:
        _print_json(rule_set, evaluation, target)
    else:
        typer.echo(format_human(rule_set, evaluation, target, verbose=verbose))
    if ci:
        _ci_exit(evaluation, cfg.fail_on)


def _print_json(rule_set: RuleSet, evaluation: Evaluation, target: Platform) -> None:
    """JSON output for piping/CI."""
    output = {
        "rule_set": {
            "version": rule_set.version_string,
            "rule_count": rule_set.rule_count,
            "max_rule_id": rule_set.max_rule_id,
            "contains_unknown_fields": rule_set.contains_unknown_fields,
        },
        "platform": {
            "os": target.os_type.value,
            "os_version": str(target.os_version) if target.os_version is not None else None,
            "browser_version": str(target.browser_version),
        },
        "feature_mask": evaluation.feature_mask,
        "disabled_features": [n for n in feature_names(evaluation.feature_mask) if n != "all"],
        "active_rule_ids": evaluation.active_rule_ids,
        "reasons": evaluation.reasons(),
    }
    typer.echo(json.dumps(output, indent=2))


@app.command("info")
def info_cmd(
    rules: Path = typer.Argument(..., help="Rule document"),
    browser_version: str = typer.Option(None, "--browser-version", "-b"),
    all_os: bool = typer.Option(False, "--all-os", help="Count rules for every OS"),
    json_out: bool = typer.Option(False, "-j", help="JSON output"),
    config: Path = typer.Option(None, "--config", "-c", help="YAML config (browser_version, os_filter, log_level, fail_on)"),
) -> None:
    """Show rule set version, rule count and max rule id."""
    cfg = _setup(config, browser_version, all_os)
    rule_set = _load(rules, cfg)
    info = {
        "version": rule_set.version_string,
        "rule_count": rule_set.rule_count,
        "max_rule_id": rule_set.max_rule_id,
        "contains_unknown_fields": rule_set.contains_unknown_fields,
    }
    if json_out:
        typer.echo(json.dumps(info, indent=2))
        return
    typer.echo(f"Version: {info['version']}")
    typer.echo(f"Rules: {info['rule_count']}")
    typer.echo(f"Max rule id: {info['max_rule_id']}")
    if rule_set.contains_unknown_fields:
        typer.echo("Contains entries with unknown fields or features.")


@app.command("why")
def why_cmd(
    rules: Path = typer.Argument(..., help="Rule document"),
    feature: str = typer.Argument(..., help="Feature name, e.g. webgl"),
    hardware_file: Path = typer.Option(..., "--hardware", "-H", help="Hardware descriptor JSON"),
    disabled: bool = typer.Option(False, "--disabled", help="List matching rules that are switched off instead"),
    os_name: str = typer.Option(None, "--os"),
    os_version: str = typer.Option(None, "--os-version"),
    browser_version: str = typer.Option(None, "--browser-version", "-b"),
    all_os: bool = typer.Option(False, "--all-os"),
    config: Path = typer.Option(None, "--config", "-c", help="YAML config (browser_version, os_filter, log_level, fail_on)"),
) -> None:
    """List the active rules that disable a feature on this GPU."""
    bit = DEFAULT_FEATURES.get(feature)
    if bit is None:
        _err(f"Unknown feature: {feature}\nAvailable: {', '.join(DEFAULT_FEATURES)}")
    cfg = _setup(config, browser_version, all_os)
    rule_set, evaluation, target = _evaluate(rules, hardware_file, cfg, os_name, os_version)
    ids = evaluation.entries_for_feature(bit, disabled=disabled)
    typer.echo(f"{feature} on {platform_summary(target)}")
    if not ids:
        typer.echo("No active rules.")
        return
    by_id = {r.id: r for r in evaluation.active_rules}
    for rule_id in ids:
        rule = by_id[rule_id]
        typer.echo(f"  [{rule_id}] {rule.description}")
        if rule.cr_bugs:
            typer.echo(f"      crbug: {', '.join(str(b) for b in rule.cr_bugs)}")
        if rule.webkit_bugs:
            typer.echo(f"      webkit: {', '.join(str(b) for b in rule.webkit_bugs)}")


@app.command("features")
def features_cmd() -> None:
    """List feature names usable in a rule's blacklist."""
    typer.echo("Available features:")
    for name, bit in DEFAULT_FEATURES.items():
        typer.echo(f"  {name:<26} 0x{int(bit):02x}  {FEATURE_INFO.get(name, '')}")


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
