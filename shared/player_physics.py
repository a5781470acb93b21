"""
Shared player-on-ship physics.

A player walking on deck is stored in the ship-local frame and clamped
to the walkable deck, while WASD input is always world-absolute: "up"
moves toward the top of the screen whatever the ship's heading.
"""

import math

from shared.config import (
    PLAYER_SPEED, SHIP_BOUNDS_WIDTH, SHIP_BOUNDS_HEIGHT,
    SHIP_BOUNDS_OFFSET_X, SHIP_BOUNDS_OFFSET_Y,
    HELM_OFFSET, INTERACTION_DISTANCE
)
from shared.mathutil import clamp, distance, rotate, wrap_angle

DIAGONAL_NORMALIZATION = math.sqrt(0.5)

# World-absolute facing per key combination. Combos not listed here
# (opposing keys held together) leave the facing unchanged.
DIRECTION_ANGLES = {
    'up': math.pi,
    'down': 0.0,
    'left': math.pi / 2,
    'right': -math.pi / 2,
    'up-left': (3 * math.pi) / 4,
    'up-right': -(3 * math.pi) / 4,
    'down-left': math.pi / 4,
    'down-right': -math.pi / 4,
}


class ShipBounds:
    """Half-extents of the walkable deck around the ship origin."""

    __slots__ = ('max_x', 'max_y')

    def __init__(self, max_x: float, max_y: float):
        self.max_x = max_x
        self.max_y = max_y

    @staticmethod
    def from_sprite(width: float, height: float, offset_x: float,
                    offset_y: float) -> 'ShipBounds':
        return ShipBounds(width / 2 - offset_x, height / 2 - offset_y)


DEFAULT_SHIP_BOUNDS = ShipBounds.from_sprite(
    SHIP_BOUNDS_WIDTH, SHIP_BOUNDS_HEIGHT,
    SHIP_BOUNDS_OFFSET_X, SHIP_BOUNDS_OFFSET_Y
)


class PlayerInput:
    __slots__ = ('up', 'down', 'left', 'right')

    def __init__(self, up: bool = False, down: bool = False,
                 left: bool = False, right: bool = False):
        self.up = up
        self.down = down
        self.left = left
        self.right = right

    @property
    def any_pressed(self) -> bool:
        return self.up or self.down or self.left or self.right

    @staticmethod
    def from_dict(data: dict) -> 'PlayerInput':
        return PlayerInput(bool(data.get('up', False)),
                           bool(data.get('down', False)),
                           bool(data.get('left', False)),
                           bool(data.get('right', False)))


class PlayerMovement:
    """World-frame walking velocity and the facing it implies (None = keep)."""

    __slots__ = ('vel_x', 'vel_y', 'rotation', 'is_moving')

    def __init__(self, vel_x: float, vel_y: float, rotation, is_moving: bool):
        self.vel_x = vel_x
        self.vel_y = vel_y
        self.rotation = rotation
        self.is_moving = is_moving


class PlayerOnShipState:
    """
    A player standing on a ship.

    last_rotation is a world-absolute facing. last_ship_rotation remembers
    the ship heading seen on the previous tick, for rotate-with-ship.
    """

    __slots__ = ('local_x', 'local_y', 'last_rotation', 'is_moving',
                 'last_ship_rotation')

    def __init__(self, local_x: float = 0.0, local_y: float = 0.0,
                 last_rotation: float = math.pi, is_moving: bool = False,
                 last_ship_rotation=None):
        self.local_x = local_x
        self.local_y = local_y
        self.last_rotation = last_rotation
        self.is_moving = is_moving
        self.last_ship_rotation = last_ship_rotation

    def copy(self) -> 'PlayerOnShipState':
        return PlayerOnShipState(self.local_x, self.local_y,
                                 self.last_rotation, self.is_moving,
                                 self.last_ship_rotation)

    def to_dict(self) -> dict:
        return {
            'localX': self.local_x,
            'localY': self.local_y,
            'lastRotation': self.last_rotation,
            'isMoving': self.is_moving,
        }


def world_to_local_velocity(world_vx: float, world_vy: float,
                            ship_rotation: float) -> tuple:
    return rotate(world_vx, world_vy, -ship_rotation)


def local_to_world_position(local_x: float, local_y: float, ship_x: float,
                            ship_y: float, ship_rotation: float) -> tuple:
    wx, wy = rotate(local_x, local_y, ship_rotation)
    return (ship_x + wx, ship_y + wy)


def world_to_local_position(world_x: float, world_y: float, ship_x: float,
                            ship_y: float, ship_rotation: float) -> tuple:
    return rotate(world_x - ship_x, world_y - ship_y, -ship_rotation)


def direction_key(inp: PlayerInput) -> str:
    """Key into DIRECTION_ANGLES, built in up, down, left, right order."""
    combo = ''
    if inp.up:
        combo += 'up'
    if inp.down:
        combo += 'down'
    if inp.left:
        combo += ('-' if combo else '') + 'left'
    if inp.right:
        combo += ('-' if combo else '') + 'right'
    return combo


def calculate_player_movement(inp: PlayerInput,
                              speed: float = PLAYER_SPEED) -> PlayerMovement:
    vel_x = 0.0
    vel_y = 0.0
    if inp.up:
        vel_y -= speed
    if inp.down:
        vel_y += speed
    if inp.left:
        vel_x -= speed
    if inp.right:
        vel_x += speed

    if vel_x != 0 and vel_y != 0:
        vel_x *= DIAGONAL_NORMALIZATION
        vel_y *= DIAGONAL_NORMALIZATION

    is_moving = vel_x != 0 or vel_y != 0
    rotation = DIRECTION_ANGLES.get(direction_key(inp)) if is_moving else None
    return PlayerMovement(vel_x, vel_y, rotation, is_moving)


def clamp_to_ship_bounds(local_x: float, local_y: float,
                         bounds: ShipBounds = DEFAULT_SHIP_BOUNDS) -> tuple:
    return (clamp(local_x, -bounds.max_x, bounds.max_x),
            clamp(local_y, -bounds.max_y, bounds.max_y))


class PlayerOnShipPhysics:
    """
    Walking on deck.

    rotate_with_ship: when True, a player who is standing still keeps the
    same facing relative to the deck, i.e. their world facing turns with
    the ship. Off by default; the helm and cannon views enable it.
    """

    def __init__(self, bounds: ShipBounds = DEFAULT_SHIP_BOUNDS,
                 speed: float = PLAYER_SPEED, rotate_with_ship: bool = False):
        self.bounds = bounds
        self.speed = speed
        self.rotate_with_ship = rotate_with_ship

    def advance(self, state: PlayerOnShipState, inp: PlayerInput,
                ship_rotation: float, dt: float) -> PlayerOnShipState:
        movement = calculate_player_movement(inp, self.speed)
        local_vx, local_vy = world_to_local_velocity(
            movement.vel_x, movement.vel_y, ship_rotation
        )
        local_x, local_y = clamp_to_ship_bounds(
            state.local_x + local_vx * dt,
            state.local_y + local_vy * dt,
            self.bounds
        )

        if movement.is_moving and movement.rotation is not None:
            facing = movement.rotation
        else:
            facing = state.last_rotation
            if (self.rotate_with_ship and not movement.is_moving
                    and state.last_ship_rotation is not None):
                delta = wrap_angle(ship_rotation - state.last_ship_rotation)
                facing = wrap_angle(facing + delta)

        return PlayerOnShipState(local_x, local_y, facing,
                                 movement.is_moving, ship_rotation)


player_physics = PlayerOnShipPhysics()


def update_player_on_ship(state: PlayerOnShipState, inp: PlayerInput,
                          ship_rotation: float, dt: float) -> PlayerOnShipState:
    return player_physics.advance(state, inp, ship_rotation, dt)


def get_helm_local_position() -> tuple:
    return (0.0, HELM_OFFSET)


def is_within_reach(px: float, py: float, tx: float, ty: float,
                    reach: float = INTERACTION_DISTANCE) -> bool:
    return distance(px, py, tx, ty) < reach
