"""Tests for the gpuguard command line."""

import json

import pytest
import structlog
from typer.testing import CliRunner

from gpuguard.cli import app

runner = CliRunner()

RULES = {
    "version": "2.0",
    "entries": [
        {
            "id": 10,
            "description": "Old NVIDIA drivers hang in WebGL",
            "cr_bugs": [111],
            "os": {"type": "linux"},
            "vendor_id": "0x10de",
            "driver_version": {"op": "<", "number": "295"},
            "blacklist": ["webgl"],
        },
        {"id": 11, "disabled": True, "vendor_id": "0x10de", "blacklist": ["flash_3d"]},
        {"id": 12, "os": {"type": "win"}, "blacklist": ["all"]},
    ],
}

OLD_NVIDIA = {"vendor_id": "0x10de", "device_id": "0x0640", "driver_version": "290.10"}
INTEL = {"vendor_id": "0x8086", "driver_version": "8.15.10"}


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def files(tmp_path):
    rules = tmp_path / "rules.json"
    rules.write_text(json.dumps(RULES))
    nvidia = tmp_path / "nvidia.json"
    nvidia.write_text(json.dumps(OLD_NVIDIA))
    intel = tmp_path / "intel.json"
    intel.write_text(json.dumps(INTEL))
    return rules, nvidia, intel


def _check(*args):
    return runner.invoke(app, ["check", *[str(a) for a in args], "--os", "linux", "--os-version", "3.2"])


def test_check_json(files):
    rules, nvidia, _ = files
    result = _check(rules, "-H", nvidia, "--json")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["rule_set"]["version"] == "2.0"
    assert data["rule_set"]["rule_count"] == 2  # windows rule filtered out
    assert data["rule_set"]["max_rule_id"] == 12
    assert data["platform"]["os"] == "linux"
    assert data["disabled_features"] == ["webgl"]
    assert data["active_rule_ids"] == [10, 11]
    assert data["reasons"] == [
        {"id": 10, "description": "Old NVIDIA drivers hang in WebGL", "cr_bugs": [111], "webkit_bugs": []}
    ]


def test_check_human(files):
    rules, nvidia, _ = files
    result = _check(rules, "-H", nvidia, "-v")
    assert result.exit_code == 0
    assert "DISABLED  webgl" in result.output
    assert "[10] Old NVIDIA drivers hang in WebGL" in result.output
    assert "crbug 111" in result.output
    assert "[11] (rule disabled)" in result.output


def test_check_nothing_disabled(files):
    rules, _, intel = files
    result = _check(rules, "-H", intel)
    assert result.exit_code == 0
    assert "No GPU features disabled." in result.output
    assert "No rules matched this GPU." in result.output


def test_check_all_os_keeps_windows_rule(files):
    rules, _, intel = files
    result = _check(rules, "-H", intel, "--all-os", "--json")
    data = json.loads(result.output)
    assert data["rule_set"]["rule_count"] == 3
    assert data["active_rule_ids"] == []


def test_check_as_windows(files):
    rules, _, intel = files
    result = runner.invoke(app, ["check", str(rules), "-H", str(intel), "--os", "win", "--os-version", "6.1", "-j"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["feature_mask"] == 63
    assert data["active_rule_ids"] == [12]


def test_ci_exit_codes(files):
    rules, nvidia, intel = files
    assert _check(rules, "-H", nvidia, "--ci").exit_code == 1
    assert _check(rules, "-H", intel, "--ci").exit_code == 0


def test_ci_fail_on_from_config(files, tmp_path):
    rules, nvidia, _ = files
    config = tmp_path / "gpuguard.yaml"
    config.write_text("fail_on: [multisampling]\n")
    assert _check(rules, "-H", nvidia, "--ci", "-c", config).exit_code == 0
    config.write_text("fail_on: [webgl]\n")
    assert _check(rules, "-H", nvidia, "--ci", "-c", config).exit_code == 1


def test_hardware_platform_section(files, tmp_path):
    rules, _, _ = files
    gpu = tmp_path / "gpu.json"
    gpu.write_text(json.dumps({"hardware": OLD_NVIDIA, "platform": {"os": "win", "os_version": "6.1"}}))
    result = runner.invoke(app, ["check", str(rules), "-H", str(gpu), "-j"])
    assert result.exit_code == 0
    assert json.loads(result.output)["active_rule_ids"] == [11, 12]


def test_missing_hardware_file(files, tmp_path):
    rules, _, _ = files
    result = _check(rules, "-H", tmp_path / "none.json")
    assert result.exit_code == 2
    assert "Hardware file not found" in result.output


def test_missing_rules_file(files, tmp_path):
    _, nvidia, _ = files
    result = _check(tmp_path / "none.json", "-H", nvidia)
    assert result.exit_code == 2
    assert "Rules file not found" in result.output


def test_malformed_rules_file(files, tmp_path):
    _, nvidia, _ = files
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"version": "2.0", "entries": [{"id": 1, "vendor_id": "zz", "blacklist": ["webgl"]}]}))
    result = _check(bad, "-H", nvidia)
    assert result.exit_code == 2
    assert "Malformed vendor_id entry 1" in result.output


def test_unknown_os_flag(files):
    rules, nvidia, _ = files
    result = runner.invoke(app, ["check", str(rules), "-H", str(nvidia), "--os", "beos"])
    assert result.exit_code == 2
    assert "Unknown os" in result.output


def test_any_is_not_an_evaluation_os(files):
    """'any' only exists inside rules; evaluating as it would skip every OS-specific rule."""
    rules, nvidia, _ = files
    result = runner.invoke(app, ["check", str(rules), "-H", str(nvidia), "--os", "any"])
    assert result.exit_code == 2
    assert "Cannot evaluate as os" in result.output


def test_invalid_hardware_file(files, tmp_path):
    rules, _, _ = files
    gpu = tmp_path / "gpu.json"
    gpu.write_text(json.dumps({"vendor_id": "0x10de", "optimus": "false"}))
    result = _check(rules, "-H", gpu)
    assert result.exit_code == 2
    assert "Invalid hardware file" in result.output


def test_unknown_fail_on_feature(files, tmp_path):
    rules, nvidia, _ = files
    config = tmp_path / "gpuguard.yaml"
    config.write_text("fail_on: [teleport]\n")
    result = _check(rules, "-H", nvidia, "--ci", "-c", config)
    assert result.exit_code == 2
    assert "Unknown feature in fail_on" in result.output


def test_check_yaml_rules_with_unquoted_hex(files, tmp_path):
    _, nvidia, _ = files
    rules = tmp_path / "rules.yaml"
    rules.write_text(
        "version: 2.0\n"
        "entries:\n"
        "  - id: 1\n"
        "    vendor_id: 0x10de\n"
        "    device_id: [0x0640]\n"
        "    blacklist: [webgl]\n"
    )
    result = _check(rules, "-H", nvidia, "-j")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["rule_set"]["version"] == "2.0"
    assert data["active_rule_ids"] == [1]


def test_info_json(files):
    rules, _, _ = files
    result = runner.invoke(app, ["info", str(rules), "--all-os", "-j"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "version": "2.0",
        "rule_count": 3,
        "max_rule_id": 12,
        "contains_unknown_fields": False,
    }


def test_info_human(files):
    rules, _, _ = files
    result = runner.invoke(app, ["info", str(rules), "--all-os"])
    assert result.exit_code == 0
    assert "Version: 2.0" in result.output
    assert "Rules: 3" in result.output
    assert "Max rule id: 12" in result.output


def test_why(files):
    rules, nvidia, _ = files
    result = runner.invoke(app, ["why", str(rules), "webgl", "-H", str(nvidia), "--os", "linux", "--os-version", "3.2"])
    assert result.exit_code == 0
    assert "[10] Old NVIDIA drivers hang in WebGL" in result.output
    assert "crbug: 111" in result.output


def test_why_disabled_rules(files):
    rules, nvidia, _ = files
    args = ["why", str(rules), "flash_3d", "-H", str(nvidia), "--os", "linux", "--os-version", "3.2"]
    assert "No active rules." in runner.invoke(app, args).output
    assert "[11]" in runner.invoke(app, [*args, "--disabled"]).output


def test_why_unknown_feature(files):
    rules, nvidia, _ = files
    result = runner.invoke(app, ["why", str(rules), "teleport", "-H", str(nvidia)])
    assert result.exit_code == 2
    assert "Unknown feature" in result.output


def test_features():
    result = runner.invoke(app, ["features"])
    assert result.exit_code == 0
    assert "webgl" in result.output
    assert "accelerated_2d_canvas" in result.output
