"""Registry of voxel types and their colours."""

from __future__ import annotations

import json
import logging
import string
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

Color = tuple[float, float, float, float]

_DEFAULT_COLOR = "#ffff"


@dataclass(frozen=True)
class VoxelProfile:
    """A voxel type: numeric id, name and RGBA colour."""

    id: int
    name: str
    color: Color


class VoxelRegistry:
    """Voxel profiles looked up by id or by name; id 0 is always "Empty"."""

    def __init__(self) -> None:
        empty = VoxelProfile(0, "Empty", (0.0, 0.0, 0.0, 0.0))
        self._by_id: dict[int, VoxelProfile] = {0: empty}
        self._by_name: dict[str, VoxelProfile] = {"Empty": empty}

    def add(self, name: str, color: Color) -> VoxelProfile:
        """Register a new voxel type under the next free id."""
        if name in self._by_name:
            raise ValueError(f"voxel {name!r} is already registered")
        profile = VoxelProfile(len(self._by_id), name, tuple(color))
        self._by_id[profile.id] = profile
        self._by_name[name] = profile
        return profile

    def get_by_name(self, name: str) -> VoxelProfile | None:
        return self._by_name.get(name)

    def get_by_id(self, voxel_id: int) -> VoxelProfile | None:
        return self._by_id.get(voxel_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[VoxelProfile]:
        return iter(self._by_id.values())


def _hex(text: str) -> int:
    if not text or any(c not in string.hexdigits for c in text):
        raise ValueError(f"invalid hexadecimal digits: {text!r}")
    return int(text, 16)


def decode_color(color_string: str) -> Color:
    """Decode "#rgb", "#rgba", "#rrggbb" or "#rrggbbaa"; other lengths give opaque black."""
    if not color_string:
        raise ValueError("colour string is empty")
    digits = color_string[1:]
    if len(digits) in (3, 4):
        channels = [_hex(c) / 15.0 for c in digits]
    elif len(digits) in (6, 8):
        channels = [_hex(hi + lo) / 255.0 for hi, lo in zip(digits[::2], digits[1::2])]
    else:
        return (0.0, 0.0, 0.0, 1.0)
    if len(channels) == 3:
        channels.append(1.0)
    return tuple(channels)


def load_voxels(directory: str | PathLike[str]) -> VoxelRegistry:
    """Build a registry from a directory of JSON voxel profiles, in name order."""
    registry = VoxelRegistry()
    for path in sorted(Path(directory).iterdir()):
        data = json.loads(path.read_text(encoding="utf-8"))
        color_value = data.get("color", _DEFAULT_COLOR) if isinstance(data, dict) else _DEFAULT_COLOR
        if not isinstance(color_value, str):
            raise ValueError(f"{path.name}: colour must be a string")
        name = path.name.replace(".json", "")
        profile = registry.add(name, decode_color(color_value))
        logger.info("created voxel profile %s (id %d, color %s)", name, profile.id, profile.color)
    return registry