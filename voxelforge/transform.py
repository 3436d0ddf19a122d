"""Quaternions and the transform, player and time components."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Sequence

Vec3 = tuple[float, float, float]
Mat4 = tuple[tuple[float, float, float, float], ...]


@dataclass(frozen=True)
class Quat:
    """A rotation quaternion stored as (x, y, z, w)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    IDENTITY: ClassVar[Quat]

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> Quat:
        """Rotation of ``angle`` radians about a unit ``axis``."""
        ax, ay, az = axis
        s = math.sin(angle * 0.5)
        return cls(ax * s, ay * s, az * s, math.cos(angle * 0.5))

    @classmethod
    def from_euler_xyz(cls, x: float, y: float, z: float) -> Quat:
        """Rotation about X, then composed with Y and Z: rx * ry * rz."""
        return (
            cls.from_axis_angle((1.0, 0.0, 0.0), x)
            * cls.from_axis_angle((0.0, 1.0, 0.0), y)
            * cls.from_axis_angle((0.0, 0.0, 1.0), z)
        )

    def __mul__(self, other: Quat) -> Quat:
        if not isinstance(other, Quat):
            return NotImplemented
        ax, ay, az, aw = self.x, self.y, self.z, self.w
        bx, by, bz, bw = other.x, other.y, other.z, other.w
        return Quat(
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        )

    def mul_vec3(self, v: Sequence[float]) -> Vec3:
        """Rotate a vector by this quaternion."""
        vx, vy, vz = v
        qx, qy, qz, w = self.x, self.y, self.z, self.w
        tx = 2.0 * (qy * vz - qz * vy)
        ty = 2.0 * (qz * vx - qx * vz)
        tz = 2.0 * (qx * vy - qy * vx)
        return (
            vx + w * tx + (qy * tz - qz * ty),
            vy + w * ty + (qz * tx - qx * tz),
            vz + w * tz + (qx * ty - qy * tx),
        )

    def to_matrix(self) -> Mat4:
        """Row-major 4x4 rotation matrix."""
        x, y, z, w = self.x, self.y, self.z, self.w
        xx, yy, zz = x * x, y * y, z * z
        xy, xz, yz = x * y, x * z, y * z
        wx, wy, wz = w * x, w * y, w * z
        return (
            (1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy), 0.0),
            (2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx), 0.0),
            (2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy), 0.0),
            (0.0, 0.0, 0.0, 1.0),
        )


Quat.IDENTITY = Quat()


@dataclass(frozen=True)
class Position:
    value: Vec3 = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Rotation:
    value: Quat = Quat()


@dataclass(frozen=True)
class Scale:
    value: Vec3 = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class Player:
    """A free-flying player controlled from the keyboard and mouse."""

    fly_speed: float


@dataclass(frozen=True)
class Time:
    """Seconds since start and since the previous frame."""

    time: float
    delta_time: float