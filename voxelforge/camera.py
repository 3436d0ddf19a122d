"""Perspective camera and the uniform block it feeds to shaders."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .transform import Mat4, Quat, Vec3

_IDENTITY: Mat4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)


def _columns(matrix: Mat4) -> Mat4:
    return tuple(tuple(row[c] for row in matrix) for c in range(4))


@dataclass(frozen=True)
class CameraUniform:
    """Projection and view matrices, each stored column by column."""

    projection: Mat4 = _IDENTITY
    transform: Mat4 = _IDENTITY


@dataclass
class Camera:
    """A left-handed perspective camera with a list of render layers."""

    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quat = Quat()
    aspect: float = 1.0
    fovy: float = 50.0
    znear: float = 0.01
    zfar: float = 2000.0
    render_layers: list[str] = field(default_factory=list)
    uniform: CameraUniform = field(default_factory=CameraUniform, init=False)

    def __post_init__(self) -> None:
        self.update_uniform()

    def build_transform_matrix(self) -> Mat4:
        """Row-major view matrix: the inverse of the camera's rotation and translation."""
        r = self.rotation.to_matrix()
        px, py, pz = self.position
        rows = []
        for i in range(3):
            # Row i of the transposed rotation is column i of the rotation.
            cx, cy, cz = r[0][i], r[1][i], r[2][i]
            rows.append((cx, cy, cz, -(cx * px + cy * py + cz * pz)))
        rows.append((0.0, 0.0, 0.0, 1.0))
        return tuple(rows)

    def build_projection_matrix(self) -> Mat4:
        """Row-major left-handed perspective matrix mapping depth to [0, 1]."""
        half = 0.5 * math.radians(self.fovy)
        h = math.cos(half) / math.sin(half)
        w = h / self.aspect
        r = self.zfar / (self.zfar - self.znear)
        return (
            (w, 0.0, 0.0, 0.0),
            (0.0, h, 0.0, 0.0),
            (0.0, 0.0, r, -r * self.znear),
            (0.0, 0.0, 1.0, 0.0),
        )

    def update_uniform(self) -> None:
        """Recompute the uniform from the current position, rotation and lens."""
        self.uniform = CameraUniform(
            projection=_columns(self.build_projection_matrix()),
            transform=_columns(self.build_transform_matrix()),
        )

    def add_render_layer(self, layer_name: str) -> None:
        self.render_layers.append(layer_name)