"""
Small single-player boat for the endless survival mode.

Same motion algorithm as the full-size ship, with its own constant set
and no upgrade modifiers.
"""

from shared.config import (
    SMALL_BOAT_CONSTANT_SPEED, SMALL_BOAT_TURN_SPEED, SMALL_BOAT_MAX_STEERING,
    SMALL_BOAT_STEERING_INCREMENT, SMALL_BOAT_STEERING_AUTO_CENTER_THRESHOLD,
    SMALL_BOAT_ANCHOR_DECELERATION_FACTOR, SMALL_BOAT_ACCELERATION_FACTOR,
    SMALL_BOAT_ANCHOR_ANGULAR_DAMPING
)
from shared.mathutil import rotate
from shared.ship_physics import (
    DEFAULT_DT, NO_INPUT, ShipInput, ShipPhysics, ShipProfile, ShipState
)


SMALL_BOAT_PROFILE = ShipProfile(
    name='small_boat',
    constant_speed=SMALL_BOAT_CONSTANT_SPEED,
    turn_speed=SMALL_BOAT_TURN_SPEED,
    max_steering=SMALL_BOAT_MAX_STEERING,
    steering_increment=SMALL_BOAT_STEERING_INCREMENT,
    auto_center_threshold=SMALL_BOAT_STEERING_AUTO_CENTER_THRESHOLD,
    anchor_deceleration=SMALL_BOAT_ANCHOR_DECELERATION_FACTOR,
    acceleration_factor=SMALL_BOAT_ACCELERATION_FACTOR,
    anchor_angular_damping=SMALL_BOAT_ANCHOR_ANGULAR_DAMPING,
)

# Equipment mount points relative to the boat center (boat-local frame)
EQUIPMENT_OFFSETS = {
    'rod_left': (-35.0, 0.0),
    'rod_right': (35.0, 0.0),
    'hook': (0.0, -70.0),
    'storage': (0.0, 40.0),
    'cooking': (-20.0, 30.0),
}


class SmallBoatPhysics(ShipPhysics):
    """Ship physics bound to the small-boat profile; upgrades do not apply."""

    def __init__(self, profile: ShipProfile = SMALL_BOAT_PROFILE):
        super().__init__(profile)

    def advance(self, state: ShipState, inp: ShipInput = NO_INPUT,
                dt: float = DEFAULT_DT) -> ShipState:
        return super().advance(state, inp, dt, None)


small_boat_physics = SmallBoatPhysics()


def update_small_boat_physics(state: ShipState, inp: ShipInput = NO_INPUT,
                              dt: float = DEFAULT_DT) -> ShipState:
    return small_boat_physics.advance(state, inp, dt)


def create_small_boat_state(x: float, y: float) -> ShipState:
    """A fresh boat: at rest, heading north, anchor down."""
    return ShipState(x=x, y=y, rotation=0.0, steering_direction=0.0,
                     current_speed=0.0, is_anchored=True)


def get_equipment_position(state: ShipState, equipment: str) -> tuple:
    """
    World position of a piece of equipment on the boat.

    Unknown equipment names resolve to the boat origin.
    """
    offset = EQUIPMENT_OFFSETS.get(equipment)
    if offset is None:
        return (state.x, state.y)
    ox, oy = rotate(offset[0], offset[1], state.rotation)
    return (state.x + ox, state.y + oy)
