"""Voxel shapes, orientations, directions and face occlusion masks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache

_FLIP_X = 0b0000_1000
_FLIP_Y = 0b0001_0000
_FLIP_Z = 0b0010_0000
_ROTATE_X = 0b0100_0000
_ROTATE_Z = 0b1000_0000
_SHAPE_MASK = 0b0000_0111
_ORIENTATION_MASK = 0b1111_1000


class VoxelDirection(IntEnum):
    """One of the six faces of a voxel."""

    NORTH = 0
    SOUTH = 1
    EAST = 2
    WEST = 3
    UP = 4
    DOWN = 5

    def as_vec(self) -> tuple[int, int, int]:
        """Unit offset pointing out of this face."""
        return _VEC_MAPPING[self]

    def flip(self) -> VoxelDirection:
        """The opposite direction."""
        return VoxelDirection(self ^ 1)


_VEC_MAPPING: dict[VoxelDirection, tuple[int, int, int]] = {
    VoxelDirection.NORTH: (0, 0, 1),
    VoxelDirection.SOUTH: (0, 0, -1),
    VoxelDirection.EAST: (1, 0, 0),
    VoxelDirection.WEST: (-1, 0, 0),
    VoxelDirection.UP: (0, 1, 0),
    VoxelDirection.DOWN: (0, -1, 0),
}

ALL_DIRECTIONS: tuple[VoxelDirection, ...] = tuple(VoxelDirection)


def _check_byte(value: int, what: str) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{what} must fit in one byte, got {value}")


@dataclass(frozen=True)
class VoxelOrientation:
    """Orientation bits of a voxel shape (the upper five bits of a byte)."""

    data: int = 0

    def __post_init__(self) -> None:
        _check_byte(self.data, "orientation")

    def flip_x(self) -> bool:
        return self.data & _FLIP_X == _FLIP_X

    def flip_y(self) -> bool:
        return self.data & _FLIP_Y == _FLIP_Y

    def flip_z(self) -> bool:
        return self.data & _FLIP_Z == _FLIP_Z

    def rotate_x(self) -> bool:
        return self.data & _ROTATE_X == _ROTATE_X

    def rotate_z(self) -> bool:
        return self.data & _ROTATE_Z == _ROTATE_Z


ORIENTATIONS: dict[str, VoxelOrientation] = {
    name: VoxelOrientation(value)
    for name, value in {
        "DEFAULT": 0b00_000_000,
        "BOTTOM": 0b00_000_000,
        "BOTTOM_NORTH": 0b00_000_000,
        "BOTTOM_NORTH_EAST": 0b00_000_000,
        "BOTTOM_NORTH_WEST": 0b00_001_000,
        "TOP": 0b00_010_000,
        "TOP_NORTH": 0b00_010_000,
        "TOP_NORTH_EAST": 0b00_010_000,
        "TOP_NORTH_WEST": 0b00_011_000,
        "TOP_SOUTH": 0b00_110_000,
        "TOP_SOUTH_EAST": 0b00_110_000,
        "TOP_SOUTH_WEST": 0b00_111_000,
        "BOTTOM_SOUTH": 0b00_100_000,
        "BOTTOM_SOUTH_EAST": 0b00_100_000,
        "BOTTOM_SOUTH_WEST": 0b00_101_000,
        "NORTH": 0b01_000_000,
        "NORTH_TOP": 0b01_000_000,
        "NORTH_TOP_EAST": 0b01_000_000,
        "NORTH_TOP_WEST": 0b01_001_000,
        "SOUTH": 0b01_010_000,
        "SOUTH_TOP": 0b01_010_000,
        "SOUTH_TOP_EAST": 0b01_010_000,
        "SOUTH_TOP_WEST": 0b01_011_000,
        "NORTH_BOTTOM": 0b01_100_000,
        "NORTH_BOTTOM_EAST": 0b01_100_000,
        "NORTH_BOTTOM_WEST": 0b01_101_000,
        "SOUTH_BOTTOM_WEST": 0b01_111_000,
        "WEST": 0b10_000_000,
        "WEST_NORTH": 0b10_000_000,
        "WEST_NORTH_BOTTOM": 0b10_000_000,
        "WEST_NORTH_TOP": 0b10_001_000,
        "EAST": 0b10_010_000,
        "EAST_NORTH": 0b10_010_000,
        "EAST_NORTH_BOTTOM": 0b10_010_000,
        "EAST_NORTH_TOP": 0b10_011_000,
        "EAST_SOUTH": 0b10_100_000,
        "EAST_SOUTH_BOTTOM": 0b10_100_000,
        "WEST_SOUTH": 0b10_101_000,
        "WEST_SOUTH_TOP": 0b10_101_000,
        "WEST_SOUTH_BOTTOM": 0b10_110_000,
        "EAST_SOUTH_TOP": 0b10_111_000,
    }.items()
}


@dataclass(frozen=True)
class OrientedVoxelDirections:
    """Maps each local face direction to the world direction it faces."""

    directions: tuple[VoxelDirection, ...]

    def get_direction(self, direction: VoxelDirection) -> VoxelDirection:
        return self.directions[direction]


def oriented_directions(orientation: VoxelOrientation) -> OrientedVoxelDirections:
    """Where each face of a voxel points once the orientation is applied."""
    r = list(ALL_DIRECTIONS)
    if orientation.rotate_z():
        r[2], r[3], r[4], r[5] = r[5], r[4], r[2], r[3]
    if orientation.rotate_x():
        r[0], r[1], r[4], r[5] = r[4], r[5], r[1], r[0]
    if orientation.flip_z():
        r[0], r[1] = r[1], r[0]
    if orientation.flip_y():
        r[4], r[5] = r[5], r[4]
    if orientation.flip_x():
        r[2], r[3] = r[3], r[2]
    return OrientedVoxelDirections(tuple(r))


@dataclass(frozen=True)
class VoxelShape:
    """A shape index in the low three bits plus orientation bits above them."""

    data: int = 0

    def __post_init__(self) -> None:
        _check_byte(self.data, "shape")

    def face_contains(
        self,
        face: VoxelDirection,
        other_shape: VoxelShape,
        other_direction: VoxelDirection,
    ) -> bool:
        """Whether this shape's face fully covers the other shape's face."""
        other = get_face_shape(other_shape, other_direction)
        return get_face_shape(self, face) & other == other

    def oriented(self, orientation: VoxelOrientation) -> VoxelShape:
        return VoxelShape((self.data & _SHAPE_MASK) | orientation.data)

    def shape_index(self) -> int:
        return self.data & _SHAPE_MASK

    def flip_x(self) -> bool:
        return self.data & _FLIP_X == _FLIP_X

    def flip_y(self) -> bool:
        return self.data & _FLIP_Y == _FLIP_Y

    def flip_z(self) -> bool:
        return self.data & _FLIP_Z == _FLIP_Z

    def rotate_x(self) -> bool:
        return self.data & _ROTATE_X == _ROTATE_X

    def rotate_z(self) -> bool:
        return self.data & _ROTATE_Z == _ROTATE_Z

    def orientation(self) -> VoxelOrientation:
        return VoxelOrientation(self.data & _ORIENTATION_MASK)


CUBE = VoxelShape(0)
STAIR = VoxelShape(1)
CORNER_STAIR = VoxelShape(2)
SLAB = VoxelShape(3)
INNER_PRISM_JUNCTION = VoxelShape(4)
INNER_CORNER_PRISM = VoxelShape(5)
OUTER_CORNER_PRISM = VoxelShape(6)
PRISM = VoxelShape(7)

SHAPES_BY_NAME: dict[str, VoxelShape] = {
    "CUBE": CUBE,
    "STAIR": STAIR,
    "CORNER_STAIR": CORNER_STAIR,
    "SLAB": SLAB,
    "INNER_PRISM_JUNCTION": INNER_PRISM_JUNCTION,
    "INNER_CORNER_PRISM": INNER_CORNER_PRISM,
    "OUTER_CORNER_PRISM": OUTER_CORNER_PRISM,
    "PRISM": PRISM,
}

# Occlusion masks per face, ordered north, south, east, west, top, bottom.
_OCCLUSION_SHAPES: tuple[tuple[int, ...], ...] = (
    (0b1111_1111, 0b1111_1111, 0b1111_1111, 0b1111_1111, 0b1111_1111, 0b1111_1111),
    (0b1111_1111, 0b1100_0011, 0b1111_0011, 0b1111_0011, 0b0011_1100, 0b1111_1111),
    (0b1111_1111, 0b1100_1111, 0b1111_1111, 0b1111_0011, 0b1111_1100, 0b1111_1111),
    (0b1100_0011, 0b1100_0011, 0b1100_0011, 0b1100_0011, 0b0000_0000, 0b1111_1111),
    (0b1111_1111, 0b1000_0111, 0b1111_1111, 0b1110_0001, 0b0111_1000, 0b1111_1111),
    (0b1111_1111, 0b1000_0111, 0b1111_1111, 0b1110_0001, 0b0000_0000, 0b1111_1111),
    (0b1000_0111, 0b0000_0000, 0b1110_0001, 0b0000_0000, 0b0000_0000, 0b1111_1111),
    (0b1111_1111, 0b0000_0000, 0b1110_0001, 0b1110_0001, 0b0000_0000, 0b1111_1111),
)


def _reverse_bits(value: int) -> int:
    return int(f"{value:08b}"[::-1], 2)


def _rotate_left(value: int, n: int) -> int:
    return ((value << n) | (value >> (8 - n))) & 0xFF


def _rotate_right(value: int, n: int) -> int:
    return ((value >> n) | (value << (8 - n))) & 0xFF


def _flip_north_south(s: tuple[int, ...]) -> tuple[int, ...]:
    return (
        _reverse_bits(s[1]),
        _reverse_bits(s[0]),
        _reverse_bits(s[2]),
        _reverse_bits(s[3]),
        _rotate_left(_reverse_bits(s[4]), 4),
        _rotate_left(_reverse_bits(s[5]), 4),
    )


def _flip_east_west(s: tuple[int, ...]) -> tuple[int, ...]:
    return (
        _reverse_bits(s[1]),
        _reverse_bits(s[0]),
        _reverse_bits(s[3]),
        _reverse_bits(s[2]),
        _reverse_bits(s[4]),
        _reverse_bits(s[5]),
    )


def _flip_top_bottom(s: tuple[int, ...]) -> tuple[int, ...]:
    return (
        _rotate_left(_reverse_bits(s[0]), 4),
        _rotate_left(_reverse_bits(s[1]), 4),
        _rotate_left(_reverse_bits(s[2]), 4),
        _rotate_left(_reverse_bits(s[3]), 4),
        _reverse_bits(s[5]),
        _reverse_bits(s[4]),
    )


def _rotate_x(s: tuple[int, ...]) -> tuple[int, ...]:
    return (s[5], s[4], _rotate_right(s[2], 2), _rotate_right(s[3], 2), s[0], s[1])


def _rotate_z(s: tuple[int, ...]) -> tuple[int, ...]:
    return (_rotate_right(s[0], 2), _rotate_right(s[1], 2), s[4], s[5], s[2], s[3])


@lru_cache(maxsize=None)
def shape_orientations() -> tuple[int, ...]:
    """Face masks for every shape byte, six entries per byte value."""
    table = [0] * (256 * 6)
    # The last byte value (255) is deliberately left without masks.
    for i in range(255):
        shape = _OCCLUSION_SHAPES[i & _SHAPE_MASK]
        if i & _FLIP_X:
            shape = _flip_east_west(shape)
        if i & _FLIP_Y:
            shape = _flip_top_bottom(shape)
        if i & _FLIP_Z:
            shape = _flip_north_south(shape)
        if i & _ROTATE_X:
            shape = _rotate_x(shape)
        if i & _ROTATE_Z:
            shape = _rotate_z(shape)
        table[i * 6 : i * 6 + 6] = shape
    return tuple(table)


def get_face_shape(shape: VoxelShape, direction: VoxelDirection) -> int:
    """Occlusion mask of one face of an oriented shape."""
    return shape_orientations()[shape.data * 6 + int(direction)]


@dataclass(frozen=True)
class VoxelData:
    """A single voxel: its shape, state byte and block id."""

    shape: VoxelShape = CUBE
    state: int = 0
    id: int = 0