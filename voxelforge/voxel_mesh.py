"""Per-shape template meshes, split into the parts drawn for each visible face."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator

from .mesh import Mesh
from .voxel_shapes import VoxelShape


@dataclass(frozen=True)
class VoxelMesh:
    """Geometry of one voxel shape: an always-drawn part plus one part per face."""

    always: Mesh = field(default_factory=Mesh)
    north: Mesh = field(default_factory=Mesh)
    south: Mesh = field(default_factory=Mesh)
    east: Mesh = field(default_factory=Mesh)
    west: Mesh = field(default_factory=Mesh)
    top: Mesh = field(default_factory=Mesh)
    bottom: Mesh = field(default_factory=Mesh)

    def __iter__(self) -> Iterator[Mesh]:
        yield from (self.always, self.north, self.south, self.east, self.west, self.top, self.bottom)


def _bottom() -> Mesh:
    return Mesh().append_quad(
        [[-0.5, -0.5, 0.5], [-0.5, -0.5, -0.5], [0.5, -0.5, 0.5], [0.5, -0.5, -0.5]],
        [0.0, -1.0, 0.0],
    )


def _full_north() -> Mesh:
    return Mesh().append_quad(
        [[0.5, -0.5, 0.5], [0.5, 0.5, 0.5], [-0.5, -0.5, 0.5], [-0.5, 0.5, 0.5]],
        [0.0, 0.0, 1.0],
    )


def _cube() -> VoxelMesh:
    return VoxelMesh(
        always=Mesh(),
        north=_full_north(),
        south=Mesh().append_quad(
            [[-0.5, -0.5, -0.5], [-0.5, 0.5, -0.5], [0.5, -0.5, -0.5], [0.5, 0.5, -0.5]],
            [0.0, 0.0, -1.0],
        ),
        east=Mesh().append_quad(
            [[0.5, -0.5, -0.5], [0.5, 0.5, -0.5], [0.5, -0.5, 0.5], [0.5, 0.5, 0.5]],
            [0.5, 0.0, 0.0],
        ),
        west=Mesh().append_quad(
            [[-0.5, -0.5, 0.5], [-0.5, 0.5, 0.5], [-0.5, -0.5, -0.5], [-0.5, 0.5, -0.5]],
            [-1.0, -0.0, 0.0],
        ),
        top=Mesh().append_quad(
            [[-0.5, 0.5, -0.5], [-0.5, 0.5, 0.5], [0.5, 0.5, -0.5], [0.5, 0.5, 0.5]],
            [0.0, 1.0, 0.0],
        ),
        bottom=_bottom(),
    )


def _slab() -> VoxelMesh:
    return VoxelMesh(
        always=Mesh().append_quad(
            [[-0.5, 0.0, -0.5], [-0.5, 0.0, 0.5], [0.5, 0.0, -0.5], [0.5, 0.0, 0.5]],
            [0.0, 1.0, 0.0],
        ),
        north=Mesh().append_quad(
            [[0.5, -0.5, 0.5], [0.5, 0.0, 0.5], [-0.5, -0.5, 0.5], [-0.5, 0.0, 0.5]],
            [0.0, 0.0, 1.0],
        ),
        south=Mesh().append_quad(
            [[-0.5, -0.5, -0.5], [-0.5, 0.0, -0.5], [0.5, -0.5, -0.5], [0.5, 0.0, -0.5]],
            [0.0, 0.0, -1.0],
        ),
        east=Mesh().append_quad(
            [[0.5, -0.5, -0.5], [0.5, 0.0, -0.5], [0.5, -0.5, 0.5], [0.5, 0.0, 0.5]],
            [0.5, 0.0, 0.0],
        ),
        west=Mesh().append_quad(
            [[-0.5, -0.5, 0.5], [-0.5, 0.0, 0.5], [-0.5, -0.5, -0.5], [-0.5, 0.0, -0.5]],
            [-1.0, -0.0, 0.0],
        ),
        top=Mesh(),
        bottom=_bottom(),
    )


def _stair() -> VoxelMesh:
    return VoxelMesh(
        always=Mesh()
        .append_quad(
            [[-0.5, 0.0, -0.5], [-0.5, 0.0, 0.0], [0.5, 0.0, -0.5], [0.5, 0.0, 0.0]],
            [0.0, 1.0, 0.0],
        )
        .append_quad(
            [[-0.5, 0.0, 0.0], [-0.5, 0.5, 0.0], [0.5, 0.0, 0.0], [0.5, 0.5, 0.0]],
            [0.0, 0.0, -1.0],
        ),
        north=_full_north(),
        south=Mesh().append_quad(
            [[-0.5, -0.5, -0.5], [-0.5, 0.0, -0.5], [0.5, -0.5, -0.5], [0.5, 0.0, -0.5]],
            [0.0, 0.0, -1.0],
        ),
        east=Mesh().append_custom(
            [[0.5, -0.5, 0.5], [0.5, 0.5, 0.5], [0.5, 0.0, 0.0],
             [0.5, 0.5, 0.0], [0.5, -0.5, -0.5], [0.5, 0.0, -0.5]],
            [4, 1, 0, 2, 3, 1, 4, 5, 2],
            [1.0, 0.0, 0.0],
        ),
        west=Mesh().append_custom(
            [[-0.5, -0.5, 0.5], [-0.5, 0.5, 0.5], [-0.5, 0.0, 0.0],
             [-0.5, 0.5, 0.0], [-0.5, -0.5, -0.5], [-0.5, 0.0, -0.5]],
            [0, 1, 4, 1, 3, 2, 2, 5, 4],
            [-1.0, 0.0, 0.0],
        ),
        top=Mesh().append_quad(
            [[-0.5, 0.5, 0.0], [-0.5, 0.5, 0.5], [0.5, 0.5, 0.0], [0.5, 0.5, 0.5]],
            [0.0, 1.0, 0.0],
        ),
        bottom=_bottom(),
    )


def _corner_stair() -> VoxelMesh:
    return VoxelMesh(
        always=Mesh()
        .append_quad(
            [[-0.5, 0.0, -0.5], [-0.5, 0.0, 0.0], [0.0, 0.0, -0.5], [0.0, 0.0, 0.0]],
            [0.0, 1.0, 0.0],
        )
        .append_quad(
            [[-0.5, 0.0, 0.0], [-0.5, 0.5, 0.0], [0.0, 0.0, 0.0], [0.0, 0.5, 0.0]],
            [0.0, 0.0, -1.0],
        )
        .append_quad(
            [[0.0, 0.0, 0.0], [0.0, 0.5, 0.0], [0.0, 0.0, -0.5], [0.0, 0.5, -0.5]],
            [-1.0, 0.0, 0.0],
        ),
        north=_full_north(),
        south=Mesh().append_custom(
            [[-0.5, -0.5, -0.5], [-0.5, 0.0, -0.5], [0.5, -0.5, -0.5],
             [0.0, 0.0, -0.5], [0.0, 0.5, -0.5], [0.5, 0.5, -0.5]],
            [0, 1, 2, 2, 1, 3, 3, 4, 5, 3, 5, 2],
            [0.0, 0.0, -1.0],
        ),
        east=Mesh().append_quad(
            [[0.5, -0.5, -0.5], [0.5, 0.5, -0.5], [0.5, -0.5, 0.5], [0.5, 0.5, 0.5]],
            [0.5, 0.0, 0.0],
        ),
        west=Mesh().append_custom(
            [[-0.5, -0.5, 0.5], [-0.5, 0.5, 0.5], [-0.5, 0.0, 0.0],
             [-0.5, 0.5, 0.0], [-0.5, -0.5, -0.5], [-0.5, 0.0, -0.5]],
            [0, 1, 2, 2, 1, 3, 0, 2, 4, 4, 2, 5],
            [-1.0, 0.0, 0.0],
        ),
        top=Mesh().append_custom(
            [[-0.5, 0.5, 0.0], [-0.5, 0.5, 0.5], [0.0, 0.5, 0.0],
             [0.5, 0.5, 0.5], [0.0, 0.5, -0.5], [0.5, 0.5, -0.5]],
            [1, 3, 5, 0, 1, 2, 4, 2, 5],
            [0.0, 1.0, 0.0],
        ),
        bottom=_bottom(),
    )


def _prism() -> VoxelMesh:
    return VoxelMesh(
        always=Mesh().append_quad(
            [[-0.5, -0.5, -0.5], [-0.5, 0.5, 0.5], [0.5, -0.5, -0.5], [0.5, 0.5, 0.5]],
            [0.0, 0.7071, -0.7071],
        ),
        north=_full_north(),
        south=Mesh(),
        east=Mesh().append_tri(
            [[0.5, -0.5, -0.5], [0.5, 0.5, 0.5], [0.5, -0.5, 0.5]], [1.0, 0.0, 0.0]
        ),
        west=Mesh().append_tri(
            [[-0.5, -0.5, 0.5], [-0.5, 0.5, 0.5], [-0.5, -0.5, -0.5]], [-1.0, 0.0, 0.0]
        ),
        top=Mesh(),
        bottom=_bottom(),
    )


@lru_cache(maxsize=None)
def _shape_meshes() -> tuple[VoxelMesh, ...]:
    cube = _cube()
    return (cube, _stair(), _corner_stair(), _slab(), cube, cube, cube, _prism())


def get_voxel_mesh(shape: VoxelShape) -> VoxelMesh:
    """Template mesh of a shape; orientation bits are ignored and the result is shared."""
    return _shape_meshes()[shape.shape_index()]