"""Chunked voxel scenes: terrain initialization and chunk mesh generation."""

from __future__ import annotations

import itertools
import logging
import queue
import threading
from collections import deque
from dataclasses import replace
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Protocol, Sequence

from .biome_profile import SampleContext
from .mesh import Mesh, Vertex
from .voxel_mesh import get_voxel_mesh
from .voxel_registry import VoxelRegistry
from .voxel_shapes import CUBE, VoxelData, VoxelDirection, VoxelShape, oriented_directions

logger = logging.getLogger(__name__)

CHUNK_SIZE = 16
CHUNK_VOLUME = CHUNK_SIZE**3

IVec3 = tuple[int, int, int]
MeshSender = Callable[[IVec3, Mesh], None]
_Callback = Optional[Callable[[IVec3], None]]

_POLL_INTERVAL = 0.05
_RETRY_DELAY = 0.005


class Biome(Protocol):
    """What a scene needs from a biome to fill its chunks."""

    def sample_density(self, context: SampleContext) -> float: ...

    def sample_voxel(self, context: SampleContext) -> VoxelData: ...


def _ivec(position: Sequence[int]) -> IVec3:
    x, y, z = position
    return (int(x), int(y), int(z))


def _check_local(position: Sequence[int]) -> IVec3:
    local = _ivec(position)
    if any(not 0 <= c < CHUNK_SIZE for c in local):
        raise IndexError(f"position {local} lies outside a chunk")
    return local


def chunk_at(position: Sequence[int]) -> IVec3:
    """Coordinates of the chunk holding a scene-space voxel position."""
    x, y, z = _ivec(position)
    return (x // CHUNK_SIZE, y // CHUNK_SIZE, z // CHUNK_SIZE)


def index_to_pos(index: int) -> IVec3:
    """Local chunk position of a voxel index (x-major, z fastest)."""
    if not 0 <= index < CHUNK_VOLUME:
        raise IndexError(f"voxel index {index} lies outside a chunk")
    x, rest = divmod(index, CHUNK_SIZE * CHUNK_SIZE)
    y, z = divmod(rest, CHUNK_SIZE)
    return (x, y, z)


def pos_to_index(pos: Sequence[int]) -> int:
    """Voxel index of a local chunk position; inverse of index_to_pos."""
    x, y, z = _check_local(pos)
    return x * CHUNK_SIZE * CHUNK_SIZE + y * CHUNK_SIZE + z


def pos_to_index_inverse(pos: Sequence[int]) -> int:
    """Voxel index of a local position with z as the major axis."""
    x, y, z = _check_local(pos)
    return z * CHUNK_SIZE * CHUNK_SIZE + y * CHUNK_SIZE + x


class VoxelChunk:
    """A cube of CHUNK_SIZE voxels per side at a chunk coordinate."""

    def __init__(self, position: Sequence[int]) -> None:
        self.position = _ivec(position)
        self.is_empty = True
        self._voxels: list[VoxelData] = [VoxelData(CUBE, 0, 0)] * CHUNK_VOLUME

    @property
    def voxels(self) -> tuple[VoxelData, ...]:
        return tuple(self._voxels)

    def scenespace_pos(self) -> IVec3:
        """Scene-space position of the chunk's first voxel."""
        x, y, z = self.position
        return (x * CHUNK_SIZE, y * CHUNK_SIZE, z * CHUNK_SIZE)

    def voxel_scenespace_at(self, position: Sequence[int]) -> VoxelData | None:
        """Voxel at a scene-space position, or None if it is not in this chunk."""
        ox, oy, oz = self.scenespace_pos()
        x, y, z = _ivec(position)
        local = (x - ox, y - oy, z - oz)
        if any(not 0 <= c < CHUNK_SIZE for c in local):
            return None
        return self._voxels[pos_to_index(local)]

    def voxel_at(self, position: Sequence[int]) -> VoxelData:
        """Voxel at a local chunk position."""
        return self._voxels[pos_to_index(position)]

    def set_voxel(self, position: Sequence[int], voxel: VoxelData) -> None:
        """Store a voxel at a local position; a solid voxel marks the chunk non-empty."""
        self._voxels[pos_to_index(position)] = voxel
        if voxel.id != 0:
            self.is_empty = False

    def set_voxel_shape(self, position: Sequence[int], shape: VoxelShape) -> None:
        index = pos_to_index(position)
        self._voxels[index] = replace(self._voxels[index], shape=shape)

    def generate_mesh(
        self, scene_chunks: Mapping[IVec3, VoxelChunk], registry: VoxelRegistry
    ) -> Mesh:
        """Build the chunk's mesh, skipping faces hidden by neighbouring voxels."""
        vertices: list[Vertex] = []
        indices: list[int] = []
        for index, voxel in enumerate(self._voxels):
            if voxel.id != 0:
                _generate_faces(
                    voxel, scene_chunks, self, index_to_pos(index), registry, vertices, indices
                )
        mesh = Mesh()
        mesh.append_vertices(vertices)
        mesh.append_indices(indices)
        return mesh


def _generate_faces(
    voxel: VoxelData,
    scene_chunks: Mapping[IVec3, VoxelChunk],
    chunk: VoxelChunk,
    local: IVec3,
    registry: VoxelRegistry,
    vertices: list[Vertex],
    indices: list[int],
) -> None:
    lx, ly, lz = local
    ox, oy, oz = chunk.scenespace_pos()
    gx, gy, gz = lx + ox, ly + oy, lz + oz
    shape = voxel.shape

    def face_visible(direction: VoxelDirection) -> bool:
        dx, dy, dz = direction.as_vec()
        sample = (gx + dx, gy + dy, gz + dz)
        neighbour = chunk.voxel_scenespace_at(sample)
        if neighbour is None:
            other = scene_chunks.get(chunk_at(sample))
            neighbour = other.voxel_scenespace_at(sample) if other is not None else None
        if neighbour is None:
            return True
        return neighbour.id == 0 or not neighbour.shape.face_contains(
            direction.flip(), shape, direction
        )

    profile = registry.get_by_id(voxel.id)
    if profile is None:
        raise KeyError(f"voxel id {voxel.id} is not registered")
    color = profile.color

    flip_x, flip_y, flip_z = shape.flip_x(), shape.flip_y(), shape.flip_z()
    rotate_x, rotate_z = shape.rotate_x(), shape.rotate_z()
    reverse_winding = (flip_x + flip_y + flip_z) % 2 == 1

    def append(part: Mesh) -> None:
        offset = len(vertices)
        new_indices = [i + offset for i in part.indices]
        if reverse_winding:
            new_indices.reverse()
        indices.extend(new_indices)
        for v in part.vertices:
            px, py, pz = v.position
            nx, ny, nz = v.normal
            if flip_x:
                px, nx = -px, -nx
            if flip_y:
                py, ny = -py, -ny
            if flip_z:
                pz, nz = -pz, -nz
            if rotate_x:
                py, pz = pz, -py
                ny, nz = nz, -ny
            if rotate_z:
                px, py = py, -px
                nx, ny = ny, -nx
            vertices.append(Vertex((px + lx, py + ly, pz + lz), color, (nx, ny, nz), v.uv))

    template = get_voxel_mesh(shape)
    append(template.always)
    orientations = oriented_directions(shape.orientation())
    faces = (
        (VoxelDirection.NORTH, template.north),
        (VoxelDirection.SOUTH, template.south),
        (VoxelDirection.EAST, template.east),
        (VoxelDirection.WEST, template.west),
        (VoxelDirection.UP, template.top),
        (VoxelDirection.DOWN, template.bottom),
    )
    for direction, part in faces:
        if face_visible(orientations.get_direction(direction)):
            append(part)


class VoxelScene:
    """A map of chunks filled from a biome, with background workers that mesh them."""

    INITIALIZATION_WORKERS = 3
    GENERATION_WORKERS = 3
    PRE_PROCESSOR_WORKERS = 2

    def __init__(self, biome: Biome, registry: VoxelRegistry) -> None:
        self.biome = biome
        self.registry = registry
        self._chunks: dict[IVec3, VoxelChunk] = {}
        self._view: Mapping[IVec3, VoxelChunk] = MappingProxyType(self._chunks)
        self._lock = threading.Lock()
        self._requested: set[IVec3] = set()
        self._init_queue: queue.Queue[tuple[IVec3, _Callback]] = queue.Queue()
        self._generation_queue: queue.Queue[IVec3] = queue.Queue()
        self._pre_queue: queue.Queue[IVec3] = queue.Queue()
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def chunks(self) -> Mapping[IVec3, VoxelChunk]:
        """Read-only live view of the initialized chunks."""
        return self._view

    @property
    def running(self) -> bool:
        return bool(self._threads) and not self._stop_event.is_set()

    def voxel_at(self, position: Sequence[int]) -> VoxelData | None:
        """Voxel at a scene-space position, or None if its chunk is not loaded."""
        chunk = self._chunks.get(chunk_at(position))
        return chunk.voxel_scenespace_at(position) if chunk is not None else None

    def _build_chunk(self, position: IVec3) -> VoxelChunk:
        chunk = VoxelChunk(position)
        ox, oy, oz = chunk.scenespace_pos()
        context = SampleContext()
        for index in range(CHUNK_VOLUME):
            x, y, z = index_to_pos(index)
            context.position = (x + ox, y + oy, z + oz)
            context.density = self.biome.sample_density(context)
            if context.density > 0.0:
                chunk.is_empty = False
                chunk._voxels[index] = self.biome.sample_voxel(context)
        return chunk

    def initialize_chunk(self, position: Sequence[int]) -> VoxelChunk:
        """Fill and store a chunk now; an existing chunk is returned unchanged."""
        pos = _ivec(position)
        existing = self._chunks.get(pos)
        if existing is not None:
            logger.warning("chunk %s is already initialized", pos)
            return existing
        chunk = self._build_chunk(pos)
        with self._lock:
            return self._chunks.setdefault(pos, chunk)

    def _request_initialize(self, position: IVec3, callback: _Callback) -> None:
        with self._lock:
            if position in self._requested:
                return
            self._requested.add(position)
        self._init_queue.put((position, callback))

    def initialize_and_generate_chunk(self, position: Sequence[int]) -> None:
        """Queue a chunk for initialization and, once its neighbours exist, meshing."""
        self._request_initialize(_ivec(position), self._pre_queue.put)

    def setup_chunk_processors(self, mesh_sender: MeshSender) -> None:
        """Start the workers; each finished mesh is passed to mesh_sender(position, mesh)."""
        with self._lock:
            if self._stop_event.is_set():
                raise RuntimeError("the scene has been stopped")
            if self._threads:
                raise RuntimeError("chunk processors are already running")
            plan = (
                ("initialization", self._initialization_worker, (), self.INITIALIZATION_WORKERS),
                ("generation", self._generation_worker, (mesh_sender,), self.GENERATION_WORKERS),
                ("pre-processor", self._pre_processor_worker, (), self.PRE_PROCESSOR_WORKERS),
            )
            for name, target, args, count in plan:
                for n in range(count):
                    thread = threading.Thread(
                        target=target, args=args, name=f"chunk-{name}-{n}", daemon=True
                    )
                    self._threads.append(thread)
        for thread in self._threads:
            thread.start()
        logger.info("world generation initialized with %d threads", len(self._threads))

    def stop(self) -> None:
        """Signal every worker to finish and wait for them."""
        self._stop_event.set()
        for thread in self._threads:
            thread.join()

    def __enter__(self) -> VoxelScene:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _initialization_worker(self) -> None:
        while not self._stop_event.is_set():
            try:
                pos, callback = self._init_queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            if pos in self._chunks:
                logger.warning("chunk %s is already initialized", pos)
                continue
            try:
                chunk = self._build_chunk(pos)
            except Exception:
                logger.exception("failed to initialize chunk %s", pos)
                continue
            with self._lock:
                self._chunks.setdefault(pos, chunk)
            if callback is not None:
                callback(pos)

    def _generation_worker(self, mesh_sender: MeshSender) -> None:
        while not self._stop_event.is_set():
            try:
                pos = self._generation_queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            try:
                mesh = self._chunks[pos].generate_mesh(self._view, self.registry)
                mesh_sender(pos, mesh)
            except Exception:
                logger.exception("failed to generate mesh for chunk %s", pos)

    def _pre_processor_worker(self) -> None:
        pending: deque[IVec3] = deque()
        while not self._stop_event.is_set():
            batch: list[IVec3] = []
            try:
                batch.append(
                    self._pre_queue.get(timeout=_RETRY_DELAY if pending else _POLL_INTERVAL)
                )
            except queue.Empty:
                pass
            while True:
                try:
                    batch.append(self._pre_queue.get_nowait())
                except queue.Empty:
                    break
            batch.extend(pending)
            pending.clear()
            for pos in batch:
                ready = True
                for direction in VoxelDirection:
                    dx, dy, dz = direction.as_vec()
                    neighbour = (pos[0] + dx, pos[1] + dy, pos[2] + dz)
                    if neighbour not in self._chunks:
                        ready = False
                        self._request_initialize(neighbour, None)
                chunk = self._chunks.get(pos)
                if ready and chunk is not None:
                    if not chunk.is_empty:
                        self._generation_queue.put(pos)
                else:
                    pending.appendleft(pos)


def generate_world(scene: VoxelScene, size: Sequence[int], on_mesh: MeshSender) -> None:
    """Queue every chunk in a box of the given size and start meshing them.

    ``on_mesh(chunk_position, mesh)`` is called from a worker thread for each
    non-empty chunk; the mesh is in chunk-local coordinates.
    """
    sx, sy, sz = _ivec(size)
    if min(sx, sy, sz) < 0:
        raise ValueError(f"world size must not be negative, got {(sx, sy, sz)}")
    for position in itertools.product(range(sx), range(sy), range(sz)):
        scene.initialize_and_generate_chunk(position)
    scene.setup_chunk_processors(on_mesh)