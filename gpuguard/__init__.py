"""gpuguard: GPU and driver policy rules that decide which features to disable."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gpuguard")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
