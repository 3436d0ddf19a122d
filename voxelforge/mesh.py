"""Vertices and change-tracked triangle meshes."""

from __future__ import annotations

import itertools
import queue
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Sequence

Vec3 = tuple[float, float, float]

_id_counter = itertools.count(1)
_id_lock = threading.Lock()

_CHANGE_BUFFER = 100
_QUAD_COLOR = (0.5, 0.3, 0.2, 1.0)
_TRI_COLOR = (0.8, 0.5, 0.3, 1.0)
_CORNER_UVS = ((0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0))


def next_id() -> int:
    """Return a fresh process-wide identifier; the first one is 1."""
    with _id_lock:
        return next(_id_counter)


class AssetChangeType(Enum):
    """Kinds of change an asset announces to its subscribers."""

    MODIFIED = "modified"


def _floats(values: Iterable[float], size: int, what: str) -> tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if len(result) != size:
        raise ValueError(f"{what} needs {size} components, got {len(result)}")
    return result


@dataclass(frozen=True)
class Vertex:
    """A mesh vertex: position, RGBA colour, normal and texture coordinate."""

    position: tuple[float, float, float]
    color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    normal: tuple[float, float, float] = (0.0, 0.0, 1.0)
    uv: tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _floats(self.position, 3, "position"))
        object.__setattr__(self, "color", _floats(self.color, 4, "color"))
        object.__setattr__(self, "normal", _floats(self.normal, 3, "normal"))
        object.__setattr__(self, "uv", _floats(self.uv, 2, "uv"))


class Mesh:
    """An indexed triangle mesh that notifies subscribers when it changes."""

    def __init__(self) -> None:
        self._vertices: list[Vertex] = []
        self._indices: list[int] = []
        self._subscribers: list[queue.Queue[AssetChangeType]] = []
        self._lock = threading.Lock()
        self.id = next_id()

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return tuple(self._vertices)

    @property
    def indices(self) -> tuple[int, ...]:
        return tuple(self._indices)

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def index_count(self) -> int:
        return len(self._indices)

    def append_custom(
        self,
        vertices: Sequence[Sequence[float]],
        indices: Iterable[int],
        normal: Sequence[float],
    ) -> Mesh:
        """Append arbitrary positions with indices relative to them."""
        offset = len(self._vertices)
        self._indices.extend(offset + i for i in indices)
        self._vertices.extend(
            Vertex(position, _QUAD_COLOR, tuple(normal), (0.0, 0.0)) for position in vertices
        )
        self.send_changes(AssetChangeType.MODIFIED)
        return self

    def append_quad(self, quad_verts: Sequence[Sequence[float]], normal: Sequence[float]) -> Mesh:
        """Append a quad given as four corners, as two triangles."""
        if len(quad_verts) != 4:
            raise ValueError("a quad needs exactly four corners")
        o = len(self._vertices)
        self._indices.extend((o, o + 2, o + 1, o + 2, o + 3, o + 1))
        self._vertices.extend(
            Vertex(position, _QUAD_COLOR, tuple(normal), uv)
            for position, uv in zip(quad_verts, _CORNER_UVS)
        )
        self.send_changes(AssetChangeType.MODIFIED)
        return self

    def append_tri(self, tri_verts: Sequence[Sequence[float]], normal: Sequence[float]) -> Mesh:
        """Append a single triangle given as three corners."""
        if len(tri_verts) != 3:
            raise ValueError("a triangle needs exactly three corners")
        o = len(self._vertices)
        self._indices.extend((o, o + 2, o + 1))
        self._vertices.extend(
            Vertex(position, _TRI_COLOR, tuple(normal), uv)
            for position, uv in zip(tri_verts, _CORNER_UVS)
        )
        self.send_changes(AssetChangeType.MODIFIED)
        return self

    def append_vertices(self, vertices: Iterable[Vertex]) -> None:
        self._vertices.extend(vertices)
        self.send_changes(AssetChangeType.MODIFIED)

    def append_indices(self, indices: Iterable[int]) -> None:
        self._indices.extend(indices)
        self.send_changes(AssetChangeType.MODIFIED)

    def append_indices_with_offset(self, indices: Iterable[int], offset: int) -> None:
        self._indices.extend(i + offset for i in indices)
        self.send_changes(AssetChangeType.MODIFIED)

    def set_vertices(self, vertices: Iterable[Vertex]) -> None:
        self._vertices = list(vertices)
        self.send_changes(AssetChangeType.MODIFIED)

    def set_indices(self, indices: Iterable[int]) -> None:
        self._indices = list(indices)
        self.send_changes(AssetChangeType.MODIFIED)

    def offset_vertices(self, offset: Sequence[float]) -> None:
        """Translate every vertex position; subscribers are not notified."""
        dx, dy, dz = offset
        self._vertices = [
            replace(v, position=(v.position[0] + dx, v.position[1] + dy, v.position[2] + dz))
            for v in self._vertices
        ]

    def subscribe(self) -> queue.Queue[AssetChangeType]:
        """Return a queue that receives every later change notification."""
        receiver: queue.Queue[AssetChangeType] = queue.Queue(maxsize=_CHANGE_BUFFER)
        with self._lock:
            self._subscribers.append(receiver)
        return receiver

    def send_changes(self, change_type: AssetChangeType) -> None:
        """Broadcast a change; a subscriber whose buffer is full keeps what it has."""
        with self._lock:
            subscribers = list(self._subscribers)
        for receiver in subscribers:
            try:
                receiver.put_nowait(change_type)
            except queue.Full:
                pass

    def copy(self) -> Mesh:
        """A copy with the same data and id but no subscribers."""
        clone = Mesh.__new__(Mesh)
        clone._vertices = list(self._vertices)
        clone._indices = list(self._indices)
        clone._subscribers = []
        clone._lock = threading.Lock()
        clone.id = self.id
        return clone

    def __repr__(self) -> str:
        return (
            f"Mesh(vertex_count={self.vertex_count}, index_count={self.index_count}, "
            f"vertices={self._vertices!r}, indices={self._indices!r})"
        )