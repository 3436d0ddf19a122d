import pytest

from voxelforge.voxel_mesh import VoxelMesh, get_voxel_mesh
from voxelforge.voxel_shapes import (
    CORNER_STAIR,
    CUBE,
    INNER_CORNER_PRISM,
    INNER_PRISM_JUNCTION,
    ORIENTATIONS,
    OUTER_CORNER_PRISM,
    PRISM,
    SLAB,
    STAIR,
    VoxelShape,
)

ALL_SHAPES = [CUBE, STAIR, CORNER_STAIR, SLAB, INNER_PRISM_JUNCTION,
              INNER_CORNER_PRISM, OUTER_CORNER_PRISM, PRISM]


def test_cube_north_is_a_quad():
    north = get_voxel_mesh(CUBE).north
    assert north.vertex_count == 4
    assert north.indices == (0, 2, 1, 2, 3, 1)


def test_cube_has_nothing_always_drawn():
    assert get_voxel_mesh(CUBE).always.vertex_count == 0


@pytest.mark.parametrize("shape", [INNER_PRISM_JUNCTION, INNER_CORNER_PRISM, OUTER_CORNER_PRISM])
def test_unmodelled_shapes_fall_back_to_cube(shape):
    assert get_voxel_mesh(shape) is get_voxel_mesh(CUBE)


def test_orientation_bits_are_ignored():
    oriented = SLAB.oriented(ORIENTATIONS["TOP_SOUTH_WEST"])
    assert get_voxel_mesh(oriented) is get_voxel_mesh(SLAB)


def test_slab_has_no_top_but_an_always_face():
    slab = get_voxel_mesh(SLAB)
    assert slab.top.vertex_count == 0
    assert slab.always.vertex_count == 4
    assert all(v.position[1] == 0.0 for v in slab.always.vertices)


def test_stair_east_uses_custom_indices():
    east = get_voxel_mesh(STAIR).east
    assert east.vertex_count == 6
    assert east.indices == (4, 1, 0, 2, 3, 1, 4, 5, 2)


def test_corner_stair_always_has_three_quads():
    always = get_voxel_mesh(CORNER_STAIR).always
    assert always.vertex_count == 12
    assert always.index_count == 18
    assert always.indices[6:12] == (4, 6, 5, 6, 7, 5)


def test_prism_sides_are_triangles():
    prism = get_voxel_mesh(PRISM)
    assert prism.east.vertex_count == 3
    assert prism.east.indices == (0, 2, 1)
    assert prism.south.vertex_count == 0
    assert prism.top.vertex_count == 0


@pytest.mark.parametrize("shape", ALL_SHAPES)
def test_geometry_stays_inside_unit_cube(shape):
    for part in get_voxel_mesh(shape):
        for vertex in part.vertices:
            assert all(-0.5 <= c <= 0.5 for c in vertex.position)


@pytest.mark.parametrize("shape", ALL_SHAPES)
def test_indices_reference_existing_vertices(shape):
    for part in get_voxel_mesh(shape):
        assert part.index_count % 3 == 0
        assert all(0 <= i < part.vertex_count for i in part.indices)


def test_voxel_mesh_iterates_seven_parts():
    mesh = VoxelMesh()
    assert len(list(mesh)) == 7
    assert all(part.vertex_count == 0 for part in mesh)


def test_same_mesh_returned_each_call():
    assert get_voxel_mesh(VoxelShape(1)) is get_voxel_mesh(STAIR)