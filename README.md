# voxelforge

voxelforge is a small pure-Python library for building voxel worlds. It generates terrain from biome formulas, stores the terrain in chunks, and turns each chunk into a triangle mesh. A face that a neighbouring voxel fully covers is left out of the mesh.

## Modules

- `voxelforge.voxel_shapes`
  - `VoxelShape` packs a shape index (low three bits) and orientation bits (flip x/y/z, rotate x/z) into one byte.
  - The named shapes are `CUBE`, `STAIR`, `CORNER_STAIR`, `SLAB`, `INNER_PRISM_JUNCTION`, `INNER_CORNER_PRISM`, `OUTER_CORNER_PRISM` and `PRISM`.
  - Orientations are `VoxelOrientation`. The named presets live in `ORIENTATIONS`.
  - `VoxelDirection` has six members, `NORTH` through `DOWN`, with `as_vec()` and `flip()`.
  - `oriented_directions` tells you where each face of an oriented shape points.
  - `get_face_shape` and `VoxelShape.face_contains` read precomputed 8-bit face-occlusion masks.
  - `VoxelData` is one voxel: its shape, a state byte and a voxel id.
- `voxelforge.mesh`
  - `Vertex` holds position, RGBA colour, normal and uv.
  - `Mesh` is an indexed triangle mesh. It has `append_quad`, `append_tri`, `append_custom` (each of these returns the mesh, so calls can be chained), `append_vertices`, `append_indices`, `set_vertices`, `set_indices` and `offset_vertices`.
  - `Mesh.subscribe()` returns a `queue.Queue`. That queue receives `AssetChangeType.MODIFIED` after later changes; `offset_vertices` sends no notification.
  - `next_id()` hands out process-wide ids.
- `voxelforge.voxel_registry`
  - `VoxelRegistry` maps ids and names to `VoxelProfile`s. Id 0 is always `"Empty"`.
  - `decode_color` parses `#rgb`, `#rgba`, `#rrggbb` and `#rrggbbaa`. A string of any other length gives opaque black.
  - `load_voxels(directory)` registers one voxel per JSON file, in file-name order. The name is the file name without `.json`, and the colour comes from an optional `"color"` key.
- `voxelforge.biome_profile`
  - `BiomeProfile.from_json(text, registry)` compiles a biome description into instruction trees.
  - `sample_density` and `sample_voxel` evaluate those trees against a `SampleContext`.
  - `load_biomes` and `BiomeLibrary` (with `get` and `reload`) read a directory of descriptions.
  - A malformed description raises `FormulaError`.
- `voxelforge.voxel_mesh`
  - `get_voxel_mesh(shape)` returns the shared template `VoxelMesh` for a shape. A template has an always-drawn part plus one part per face.
- `voxelforge.voxel_scene`
  - `VoxelChunk` is a 16×16×16 block of voxels (`CHUNK_SIZE = 16`).
  - `VoxelChunk.generate_mesh` culls hidden faces, including faces that meet neighbouring chunks.
  - `VoxelScene` fills chunks from a biome.
  - `chunk_at`, `index_to_pos`, `pos_to_index` and `pos_to_index_inverse` convert between coordinates.
- `voxelforge.input_manager`
  - `InputManager` tracks key and mouse-button states (`PressState`) across frames. It also tracks mouse position and delta.
- `voxelforge.transform`
  - `Quat` is a rotation quaternion.
  - `Position`, `Rotation`, `Scale`, `Player` and `Time` are components.
- `voxelforge.camera`
  - `Camera` is a left-handed perspective camera.
  - Its `CameraUniform` holds the projection and view matrices, column by column.
- `voxelforge.player_controller`
  - `update_player` applies one frame of fly movement (keys `W`, `S`, `A`, `D`, `Space`, `LShift`) and of mouse look (the `Right` button). It returns a new `Position` and `Rotation`.
  - `update_camera` copies a transform into a camera and refreshes the camera's uniform.

## Biome descriptions

A biome description is a JSON object with these keys:

- `"Samplers"` is a list of named samplers. There are two kinds:
  - `{"Type": "Simplex", "Name": ..., "Wavelength": ..., "Amplitude": ...}` is gradient noise over a fixed, seeded permutation table.
  - `{"Type": "Formula", "Name": ..., "Formula": ...}` is a formula that can refer to samplers defined before it.
- `"Voxel Density"` is a numeric formula. A voxel is solid where the formula is greater than 0.
- `"Voxel Type"` is either `Voxel(name)` or `If(condition, type, type)`.
- `"Voxel Shape"` is `CUBE`, `SLAB` or `If(condition, shape, shape)`.

A numeric formula can be any of these:

- a number
- a sampler name
- one of the variables `X`, `Y`, `Z`, `Depth`, `Moisture`, `Temperature` or `Density`
- a call to `Add`, `Sub`, `Mul`, `Div` or `Mod`
- a call to `Sin`, `Cos`, `Floor`, `Ceil` or `Round`
- `If(Less(a, b), then, otherwise)`

## Example

```python
import json

from voxelforge.biome_profile import BiomeProfile, SampleContext
from voxelforge.voxel_registry import VoxelRegistry, decode_color
from voxelforge.voxel_scene import VoxelScene

registry = VoxelRegistry()
registry.add("stone", decode_color("#888"))
registry.add("grass", decode_color("#3a7d2c"))

biome = BiomeProfile.from_json(json.dumps({
    "Samplers": [{"Type": "Simplex", "Name": "hills", "Wavelength": 32, "Amplitude": 4}],
    "Voxel Density": "Sub(Add(8, hills), Y)",
    "Voxel Type": "If(Less(Y, 6), Voxel(stone), Voxel(grass))",
    "Voxel Shape": "CUBE",
}), registry)

print(biome.sample_density(SampleContext(position=(0, 5, 0))))  # 3.0

scene = VoxelScene(biome, registry)
chunk = scene.initialize_chunk((0, 0, 0))
mesh = chunk.generate_mesh(scene.chunks, registry)
print(mesh.vertex_count, mesh.index_count)
```

### Generating on background threads

`generate_world(scene, size, on_mesh)` works like this:

1. It queues every chunk in a box of the given size.
2. It starts worker threads: three initialise chunks, two wait until a chunk's six neighbours exist, and three build the meshes.
3. For each non-empty chunk, it calls `on_mesh(chunk_position, mesh)` from a worker thread. The mesh is in chunk-local coordinates.

Call `scene.stop()`, or use the scene as a context manager, to shut the workers down.

```python
from voxelforge.voxel_scene import generate_world

meshes = {}
with VoxelScene(biome, registry) as scene:
    generate_world(scene, (2, 1, 2), lambda pos, mesh: meshes.setdefault(pos, mesh))
    ...  # wait as long as needed
```

## What it does not do

voxelforge produces data only: voxels, chunk meshes, camera matrices and input state. It does not:

- open a window
- talk to a GPU
- load textures
- draw anything
- store worlds on disk

There is no command-line program. To see a world, pass the meshes and the camera's `uniform` to a renderer of your own.

## Installation

```
pip install .
```

Tests:

```
pip install .[test]
pytest
```