"""Platform inspector. Detects the OS type and version of the running machine."""

import platform
import re
from dataclasses import dataclass, field
from pathlib import Path

from .models import OsType
from .version import Version

LSB_RELEASE = Path("/etc/lsb-release")

_LEADING_VERSION = re.compile(r"^[0-9.]*")


@dataclass(frozen=True)
class Platform:
    """Where the evaluation happens: OS type and version, plus the browser version for rule gating."""

    os_type: OsType
    os_version: Version | None = None
    browser_version: Version = field(default_factory=lambda: Version([0]))


def _is_chromeos() -> bool:
    try:
        return "CHROMEOS_RELEASE_NAME" in LSB_RELEASE.read_text()
    except OSError:
        return False


def detect_os_type() -> OsType:
    """Map platform.system() to an OsType. Unrecognised systems are UNKNOWN."""
    system = platform.system().lower()
    if system == "windows":
        return OsType.WINDOWS
    if system == "darwin":
        return OsType.MACOSX
    if system == "linux":
        return OsType.CHROMEOS if _is_chromeos() else OsType.LINUX
    if system == "openbsd":
        return OsType.LINUX
    return OsType.UNKNOWN


def _raw_os_version() -> str:
    system = platform.system()
    if system == "Darwin":
        return platform.mac_ver()[0]
    if system == "Windows":
        return platform.version()  # "10.0.19045"
    return platform.release()  # kernel, e.g. "6.8.0-45-generic"


def parse_os_version(raw: str) -> Version | None:
    """Keep the leading run of digits and dots: '6.8.0-45-generic' -> 6.8.0."""
    return Version.parse(_LEADING_VERSION.match(raw or "").group(0).rstrip("."))


def detect_os_version() -> Version | None:
    return parse_os_version(_raw_os_version())


def inspect_platform(browser_version: str | Version = "0") -> Platform:
    """Inspect the current machine and return a Platform."""
    if not isinstance(browser_version, Version):
        browser_version = Version.parse(browser_version) or Version([0])
    return Platform(
        os_type=detect_os_type(),
        os_version=detect_os_version(),
        browser_version=browser_version,
    )
