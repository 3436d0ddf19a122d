import json
import queue

import pytest

from voxelforge.biome_profile import BiomeProfile
from voxelforge.voxel_mesh import get_voxel_mesh
from voxelforge.voxel_registry import VoxelRegistry
from voxelforge.voxel_scene import (
    CHUNK_SIZE,
    CHUNK_VOLUME,
    VoxelChunk,
    VoxelScene,
    chunk_at,
    generate_world,
    index_to_pos,
    pos_to_index,
    pos_to_index_inverse,
)
from voxelforge.voxel_shapes import CUBE, ORIENTATIONS, SLAB, VoxelData, VoxelDirection

STONE_COLOR = (0.5, 0.5, 0.5, 1.0)


@pytest.fixture
def registry():
    reg = VoxelRegistry()
    reg.add("stone", STONE_COLOR)
    return reg


@pytest.fixture
def stone(registry):
    return VoxelData(CUBE, 0, registry.get_by_name("stone").id)


@pytest.fixture
def biome(registry):
    document = {
        "Samplers": [],
        "Voxel Density": "Sub(8, Y)",
        "Voxel Type": "Voxel(stone)",
        "Voxel Shape": "CUBE",
    }
    return BiomeProfile.from_json(json.dumps(document), registry)


def _single_cube_counts():
    template = get_voxel_mesh(CUBE)
    return (
        sum(part.vertex_count for part in template),
        sum(part.index_count for part in template),
    )


@pytest.mark.parametrize(
    "position", [(0, 0, 0), (-1, -1, -1), (15, 16, 17), (-16, -17, 31), (100, -100, 5)]
)
def test_chunk_at_contains_position(position):
    chunk = chunk_at(position)
    for c, p in zip(chunk, position):
        assert c * CHUNK_SIZE <= p < c * CHUNK_SIZE + CHUNK_SIZE


def test_index_round_trip():
    for index in range(CHUNK_VOLUME):
        assert pos_to_index(index_to_pos(index)) == index


def test_index_layout():
    assert pos_to_index((0, 0, 1)) == 1
    assert pos_to_index((0, 1, 0)) == CHUNK_SIZE
    assert pos_to_index((1, 0, 0)) == CHUNK_SIZE * CHUNK_SIZE


def test_inverse_index_swaps_axes():
    for pos in [(1, 2, 3), (15, 0, 7), (0, 15, 15)]:
        x, y, z = pos
        assert pos_to_index_inverse(pos) == pos_to_index((z, y, x))


def test_index_out_of_range():
    with pytest.raises(IndexError):
        index_to_pos(CHUNK_VOLUME)
    with pytest.raises(IndexError):
        pos_to_index((CHUNK_SIZE, 0, 0))
    with pytest.raises(IndexError):
        pos_to_index((0, -1, 0))


def test_new_chunk_is_air():
    chunk = VoxelChunk((2, 0, -1))
    assert chunk.is_empty
    assert all(v == VoxelData(CUBE, 0, 0) for v in chunk.voxels)
    assert chunk.scenespace_pos() == (2 * CHUNK_SIZE, 0, -CHUNK_SIZE)


def test_scenespace_lookup(stone):
    chunk = VoxelChunk((1, 0, 0))
    chunk.set_voxel((0, 2, 3), stone)
    assert not chunk.is_empty
    assert chunk.voxel_scenespace_at((CHUNK_SIZE, 2, 3)) == stone
    assert chunk.voxel_at((0, 2, 3)) == stone
    assert chunk.voxel_scenespace_at((CHUNK_SIZE - 1, 2, 3)) is None
    assert chunk.voxel_scenespace_at((2 * CHUNK_SIZE, 2, 3)) is None


def test_voxel_at_out_of_range():
    with pytest.raises(IndexError):
        VoxelChunk((0, 0, 0)).voxel_at((0, 0, CHUNK_SIZE))


def test_set_voxel_shape_keeps_id(stone):
    chunk = VoxelChunk((0, 0, 0))
    chunk.set_voxel((1, 1, 1), stone)
    chunk.set_voxel_shape((1, 1, 1), SLAB)
    assert chunk.voxel_at((1, 1, 1)) == VoxelData(SLAB, 0, stone.id)


def test_isolated_cube_shows_every_face(stone, registry):
    chunk = VoxelChunk((0, 0, 0))
    chunk.set_voxel((3, 4, 5), stone)
    mesh = chunk.generate_mesh({}, registry)
    vertex_count, index_count = _single_cube_counts()
    assert mesh.vertex_count == vertex_count
    assert mesh.index_count == index_count
    assert all(v.color == STONE_COLOR for v in mesh.vertices)
    for v in mesh.vertices:
        x, y, z = v.position
        assert 2.5 <= x <= 3.5 and 3.5 <= y <= 4.5 and 4.5 <= z <= 5.5
    assert all(0 <= i < mesh.vertex_count for i in mesh.indices)


def test_adjacent_cubes_hide_shared_faces(stone, registry):
    chunk = VoxelChunk((0, 0, 0))
    chunk.set_voxel((3, 4, 5), stone)
    chunk.set_voxel((4, 4, 5), stone)
    mesh = chunk.generate_mesh({}, registry)
    single, _ = _single_cube_counts()
    template = get_voxel_mesh(CUBE)
    assert mesh.vertex_count == 2 * single - template.east.vertex_count - template.west.vertex_count


def test_neighbouring_chunk_hides_face(stone, registry):
    chunk = VoxelChunk((0, 0, 0))
    chunk.set_voxel((CHUNK_SIZE - 1, 0, 0), stone)
    neighbour = VoxelChunk((1, 0, 0))
    neighbour.set_voxel((0, 0, 0), stone)
    single, _ = _single_cube_counts()

    alone = chunk.generate_mesh({}, registry)
    covered = chunk.generate_mesh({(1, 0, 0): neighbour}, registry)
    assert alone.vertex_count == single
    assert covered.vertex_count == single - get_voxel_mesh(CUBE).east.vertex_count


def test_flipped_voxel_reverses_winding(stone, registry):
    plain_chunk = VoxelChunk((0, 0, 0))
    plain_chunk.set_voxel((2, 2, 2), stone)
    flipped_chunk = VoxelChunk((0, 0, 0))
    flipped_shape = CUBE.oriented(ORIENTATIONS["BOTTOM_NORTH_WEST"])
    flipped_chunk.set_voxel((2, 2, 2), VoxelData(flipped_shape, 0, stone.id))

    plain = plain_chunk.generate_mesh({}, registry)
    flipped = flipped_chunk.generate_mesh({}, registry)
    assert flipped.index_count == plain.index_count
    assert list(flipped.indices[:6]) == list(reversed(plain.indices[:6]))
    assert flipped.vertices[0].position[0] - 2 == -(plain.vertices[0].position[0] - 2)


def test_unknown_voxel_id_raises(registry):
    chunk = VoxelChunk((0, 0, 0))
    chunk.set_voxel((0, 0, 0), VoxelData(CUBE, 0, 99))
    with pytest.raises(KeyError):
        chunk.generate_mesh({}, registry)


def test_initialize_chunk_samples_biome(biome, registry):
    scene = VoxelScene(biome, registry)
    stone_id = registry.get_by_name("stone").id
    assert scene.voxel_at((0, 7, 0)) is None
    chunk = scene.initialize_chunk((0, 0, 0))
    assert not chunk.is_empty
    assert scene.voxel_at((0, 7, 0)).id == stone_id
    assert scene.voxel_at((3, 8, 3)).id == 0
    assert scene.chunks[(0, 0, 0)] is chunk


def test_initialize_chunk_above_and_below(biome, registry):
    scene = VoxelScene(biome, registry)
    below = scene.initialize_chunk((0, -1, 0))
    above = scene.initialize_chunk((0, 1, 0))
    assert not below.is_empty
    assert scene.voxel_at((5, -1, 5)).id == registry.get_by_name("stone").id
    assert above.is_empty


def test_initialize_chunk_twice_returns_same(biome, registry):
    scene = VoxelScene(biome, registry)
    first = scene.initialize_chunk((0, 0, 0))
    assert scene.initialize_chunk((0, 0, 0)) is first


def test_generate_world_matches_direct_meshing(biome, registry):
    sync = VoxelScene(biome, registry)
    for direction in VoxelDirection:
        sync.initialize_chunk(direction.as_vec())
    sync.initialize_chunk((0, 0, 0))
    expected = sync.chunks[(0, 0, 0)].generate_mesh(sync.chunks, registry)

    results = queue.Queue()
    scene = VoxelScene(biome, registry)
    generate_world(scene, (1, 1, 1), lambda pos, mesh: results.put((pos, mesh)))
    try:
        position, mesh = results.get(timeout=60)
        assert position == (0, 0, 0)
        assert mesh.vertices == expected.vertices
        assert mesh.indices == expected.indices
        assert all(v.normal == (0.0, 1.0, 0.0) for v in mesh.vertices)
        assert all(v.position[1] == 7.5 for v in mesh.vertices)
        assert scene.voxel_at((0, -1, 0)) is not None
        with pytest.raises(queue.Empty):
            results.get(timeout=0.5)
    finally:
        scene.stop()


def test_processor_lifecycle(biome, registry):
    scene = VoxelScene(biome, registry)
    assert scene.running is False
    scene.setup_chunk_processors(lambda pos, mesh: None)
    try:
        assert scene.running is True
        with pytest.raises(RuntimeError):
            scene.setup_chunk_processors(lambda pos, mesh: None)
    finally:
        scene.stop()
    assert scene.running is False
    with pytest.raises(RuntimeError):
        scene.setup_chunk_processors(lambda pos, mesh: None)


def test_generate_world_rejects_negative_size(biome, registry):
    scene = VoxelScene(biome, registry)
    with pytest.raises(ValueError):
        generate_world(scene, (1, -1, 1), lambda pos, mesh: None)
    assert scene.running is False