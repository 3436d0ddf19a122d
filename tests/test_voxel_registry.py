import json

import pytest

from voxelforge.voxel_registry import VoxelRegistry, decode_color, load_voxels


def test_new_registry_has_empty_voxel():
    registry = VoxelRegistry()
    empty = registry.get_by_id(0)
    assert empty.name == "Empty"
    assert empty.color == (0.0, 0.0, 0.0, 0.0)
    assert registry.get_by_name("Empty") is empty
    assert len(registry) == 1


def test_add_assigns_sequential_ids():
    registry = VoxelRegistry()
    stone = registry.add("stone", (0.5, 0.5, 0.5, 1.0))
    dirt = registry.add("dirt", (0.4, 0.3, 0.2, 1.0))
    assert (stone.id, dirt.id) == (1, 2)
    assert registry.get_by_id(2) is dirt
    assert registry.get_by_name("stone") is stone
    assert [p.name for p in registry] == ["Empty", "stone", "dirt"]


def test_missing_lookups_return_none():
    registry = VoxelRegistry()
    assert registry.get_by_id(7) is None
    assert registry.get_by_name("lava") is None


def test_duplicate_name_rejected():
    registry = VoxelRegistry()
    registry.add("stone", (1.0, 1.0, 1.0, 1.0))
    with pytest.raises(ValueError):
        registry.add("stone", (1.0, 1.0, 1.0, 1.0))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("#fff", (1.0, 1.0, 1.0, 1.0)),
        ("#ffff", (1.0, 1.0, 1.0, 1.0)),
        ("#f000", (1.0, 0.0, 0.0, 0.0)),
        ("#ff0000", (1.0, 0.0, 0.0, 1.0)),
        ("#00ff00ff", (0.0, 1.0, 0.0, 1.0)),
    ],
)
def test_decode_color_formats(text, expected):
    assert decode_color(text) == pytest.approx(expected)


def test_decode_color_other_length_is_opaque_black():
    assert decode_color("#12") == (0.0, 0.0, 0.0, 1.0)
    assert decode_color("#") == (0.0, 0.0, 0.0, 1.0)


def test_decode_color_short_and_long_agree():
    assert decode_color("#fa0") == pytest.approx(decode_color("#ffaa00"))


@pytest.mark.parametrize("text", ["", "#ggg", "#12 4", "#zz0000"])
def test_decode_color_errors(text):
    with pytest.raises(ValueError):
        decode_color(text)


def test_load_voxels_from_directory(tmp_path):
    (tmp_path / "stone.json").write_text(json.dumps({"color": "#000"}))
    (tmp_path / "grass.json").write_text(json.dumps({}))
    registry = load_voxels(tmp_path)
    grass = registry.get_by_name("grass")
    stone = registry.get_by_name("stone")
    assert (grass.id, stone.id) == (1, 2)
    assert grass.color == (1.0, 1.0, 1.0, 1.0)
    assert stone.color == (0.0, 0.0, 0.0, 1.0)
    assert len(registry) == 3


def test_load_voxels_rejects_bad_json(tmp_path):
    (tmp_path / "broken.json").write_text("{not json")
    with pytest.raises(ValueError):
        load_voxels(tmp_path)


def test_load_voxels_rejects_non_string_color(tmp_path):
    (tmp_path / "odd.json").write_text(json.dumps({"color": 5}))
    with pytest.raises(ValueError):
        load_voxels(tmp_path)