"""Default feature registry: blacklist names -> bits."""

from enum import IntFlag
from typing import Iterable, Mapping


class GpuFeature(IntFlag):
    ACCELERATED_2D_CANVAS = 1 << 0
    ACCELERATED_COMPOSITING = 1 << 1
    WEBGL = 1 << 2
    MULTISAMPLING = 1 << 3
    FLASH_3D = 1 << 4
    FLASH_STAGE3D = 1 << 5
    ALL = (1 << 6) - 1


# Names as they appear in a rule document's "blacklist" list
DEFAULT_FEATURES: dict[str, int] = {
    "accelerated_2d_canvas": GpuFeature.ACCELERATED_2D_CANVAS,
    "accelerated_compositing": GpuFeature.ACCELERATED_COMPOSITING,
    "webgl": GpuFeature.WEBGL,
    "multisampling": GpuFeature.MULTISAMPLING,
    "flash_3d": GpuFeature.FLASH_3D,
    "flash_stage3d": GpuFeature.FLASH_STAGE3D,
    "all": GpuFeature.ALL,
}

FEATURE_INFO: dict[str, str] = {
    "accelerated_2d_canvas": "GPU-backed 2D canvas rendering.",
    "accelerated_compositing": "GPU compositing of page layers.",
    "webgl": "WebGL contexts.",
    "multisampling": "Multisample anti-aliasing in WebGL.",
    "flash_3d": "3D in Flash content (non-Stage3D).",
    "flash_stage3d": "Flash Stage3D.",
    "all": "Every GPU feature above.",
}


def feature_mask(names: Iterable[str], features: Mapping[str, int] | None = None) -> tuple[int, list[str]]:
    """OR together the bits for known names. Returns (mask, unknown names)."""
    registry = DEFAULT_FEATURES if features is None else features
    mask = 0
    unknown: list[str] = []
    for name in names:
        bit = registry.get(name)
        if bit is None:
            unknown.append(name)
        else:
            mask |= int(bit)
    return mask, unknown


def feature_names(mask: int, features: Mapping[str, int] | None = None) -> list[str]:
    """Names whose bits are entirely contained in mask. Composite names (e.g. 'all') only if fully set."""
    registry = DEFAULT_FEATURES if features is None else features
    return [name for name, bit in registry.items() if bit and (mask & int(bit)) == int(bit)]
