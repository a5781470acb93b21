"""
Cannon aiming and shot launch, shared by client and server.

A cannon's aim is an angle relative to its broadside. The left cannon points
out of the port side, so its world rotation is turned half a circle from the
ship heading; the right cannon points along the heading.
"""

import math

from shared.config import CANNON_AIM_SPEED, CANNON_MAX_ANGLE, CANNON_SHOT_SPEED
from shared.mathutil import clamp, wrap_angle


class CannonState:
    """Aim of one cannon, in radians from its broadside."""

    __slots__ = ('relative_angle',)

    def __init__(self, relative_angle: float = 0.0):
        self.relative_angle = relative_angle

    def copy(self) -> 'CannonState':
        return CannonState(self.relative_angle)

    def to_dict(self) -> dict:
        return {'relativeAngle': self.relative_angle}

    def __repr__(self):
        return f"CannonState(relative_angle={self.relative_angle:.3f})"


def aim_cannon(state: CannonState, aim_left: bool, aim_right: bool, dt: float,
               speed: float = CANNON_AIM_SPEED,
               max_angle: float = CANNON_MAX_ANGLE) -> CannonState:
    """Turn the cannon for dt seconds. Left wins when both are held."""
    change = speed * dt
    angle = state.relative_angle
    if aim_left:
        angle -= change
    elif aim_right:
        angle += change
    return CannonState(clamp(angle, -max_angle, max_angle))


def get_cannon_rotation(ship_rotation: float, side: str, relative_angle: float) -> float:
    """World rotation a cannon fires along."""
    if side == 'left':
        return wrap_angle(ship_rotation + math.pi + relative_angle)
    if side == 'right':
        return wrap_angle(ship_rotation + relative_angle)
    raise ValueError(f"Unknown cannon side: {side}")


def get_shot_velocity(rotation: float, speed: float = CANNON_SHOT_SPEED) -> tuple:
    return (math.cos(rotation) * speed, math.sin(rotation) * speed)
