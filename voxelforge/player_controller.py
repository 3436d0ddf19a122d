"""Systems that fly the player around and keep cameras in sync."""

from __future__ import annotations

import math
from typing import Sequence

from .camera import Camera
from .input_manager import InputManager
from .transform import Player, Position, Quat, Rotation, Time, Vec3

FORWARD_KEY = "W"
BACKWARD_KEY = "S"
RIGHT_KEY = "D"
LEFT_KEY = "A"
UP_KEY = "Space"
DOWN_KEY = "LShift"
LOOK_BUTTON = "Right"
MOUSE_SENSITIVITY = 0.003

_UP: Vec3 = (0.0, 1.0, 0.0)


def _normalize(v: Sequence[float]) -> Vec3:
    length = math.sqrt(sum(c * c for c in v))
    if length == 0.0:
        return (math.nan, math.nan, math.nan)
    return (v[0] / length, v[1] / length, v[2] / length)


def _move(pos: Vec3, direction: Vec3, amount: float) -> Vec3:
    return (
        pos[0] + direction[0] * amount,
        pos[1] + direction[1] * amount,
        pos[2] + direction[2] * amount,
    )


def update_player(
    position: Position,
    rotation: Rotation,
    player: Player,
    time: Time,
    inputs: InputManager,
) -> tuple[Position, Rotation]:
    """Apply one frame of keyboard movement and mouse look; return the new components."""
    q = rotation.value
    fx, _, fz = q.mul_vec3((0.0, 0.0, 1.0))
    forward = _normalize((fx, 0.0, fz))
    right = q.mul_vec3((1.0, 0.0, 0.0))
    step = time.delta_time * player.fly_speed

    pos = position.value
    moves = (
        (FORWARD_KEY, forward, step),
        (BACKWARD_KEY, forward, -step),
        (RIGHT_KEY, right, step),
        (LEFT_KEY, right, -step),
        (UP_KEY, _UP, step),
        (DOWN_KEY, _UP, -step),
    )
    for key, direction, amount in moves:
        if inputs.key(key):
            pos = _move(pos, direction, amount)

    if inputs.button(LOOK_BUTTON):
        dx, dy = inputs.mouse_delta()
        q = Quat.from_axis_angle(right, dy * MOUSE_SENSITIVITY) * q
        q = Quat.from_axis_angle(_UP, dx * MOUSE_SENSITIVITY) * q

    return Position(pos), Rotation(q)


def update_camera(position: Position, rotation: Rotation, camera: Camera) -> None:
    """Move the camera to the entity's transform and refresh its uniform."""
    camera.position = position.value
    camera.rotation = rotation.value
    camera.update_uniform()