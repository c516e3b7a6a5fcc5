"""Tests for platform detection."""

import pytest

from gpuguard import host
from gpuguard.host import Platform, detect_os_type, inspect_platform, parse_os_version
from gpuguard.models import OsType
from gpuguard.version import Version


@pytest.mark.parametrize(
    "system,expected",
    [
        ("Windows", OsType.WINDOWS),
        ("Darwin", OsType.MACOSX),
        ("OpenBSD", OsType.LINUX),
        ("SunOS", OsType.UNKNOWN),
    ],
)
def test_detect_os_type(monkeypatch, system, expected):
    monkeypatch.setattr(host.platform, "system", lambda: system)
    assert detect_os_type() is expected


def test_linux_vs_chromeos(monkeypatch, tmp_path):
    monkeypatch.setattr(host.platform, "system", lambda: "Linux")
    lsb = tmp_path / "lsb-release"
    monkeypatch.setattr(host, "LSB_RELEASE", lsb)
    assert detect_os_type() is OsType.LINUX
    lsb.write_text("CHROMEOS_RELEASE_NAME=Chrome OS\n")
    assert detect_os_type() is OsType.CHROMEOS


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("6.8.0-45-generic", "6.8.0"),
        ("10.0.19045", "10.0.19045"),
        ("10.7.", "10.7"),
        ("", None),
        ("generic", None),
    ],
)
def test_parse_os_version(raw, expected):
    parsed = parse_os_version(raw)
    if expected is None:
        assert parsed is None
    else:
        assert parsed == Version.parse(expected)


def test_inspect_platform(monkeypatch):
    monkeypatch.setattr(host, "detect_os_type", lambda: OsType.MACOSX)
    monkeypatch.setattr(host, "detect_os_version", lambda: Version.parse("10.6.8"))
    p = inspect_platform("19.0.1084")
    assert p == Platform(os_type=OsType.MACOSX, os_version=Version.parse("10.6.8"), browser_version=Version.parse("19.0.1084"))


def test_inspect_platform_bad_browser_version(monkeypatch):
    monkeypatch.setattr(host, "detect_os_type", lambda: OsType.LINUX)
    monkeypatch.setattr(host, "detect_os_version", lambda: None)
    assert inspect_platform("nightly").browser_version == Version([0])
