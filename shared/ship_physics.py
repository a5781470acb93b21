"""
Shared ship physics.

Pure state-transition functions for sailing ships, usable by the
authoritative server loop and by client-side prediction alike.
One algorithm, parameterized by a ShipProfile; the small boat used in
single-player mode is just another profile (see shared/small_boat.py).
"""

import math

from shared.config import (
    SHIP_CONSTANT_SPEED, SHIP_TURN_SPEED, SHIP_MAX_STEERING,
    SHIP_STEERING_INCREMENT, SHIP_STEERING_AUTO_CENTER_THRESHOLD,
    SHIP_ANCHOR_DECELERATION_FACTOR, SHIP_ACCELERATION_FACTOR,
    SHIP_ANCHOR_ANGULAR_DAMPING, REFERENCE_TICK_RATE,
    HELM_OFFSET, ANCHOR_OFFSET, CANNON_OFFSET
)
from shared.mathutil import clamp, wrap_angle
from shared.modifiers import ShipModifiers

DEFAULT_DT = 1.0 / 60.0


class ShipProfile:
    """
    Constant set for one kind of vessel.

    Decay and approach factors are per-tick values tuned at
    reference_tick_rate. advance() rescales them by dt so the vessel
    behaves the same at any tick rate; at dt == 1/reference_tick_rate
    the result is identical to applying the raw factor once per tick.
    With reference_tick_rate=None the raw factors are applied once per
    call regardless of dt.
    """

    __slots__ = ('name', 'constant_speed', 'turn_speed', 'max_steering',
                 'steering_increment', 'auto_center_threshold',
                 'anchor_deceleration', 'acceleration_factor',
                 'anchor_angular_damping', 'reference_tick_rate')

    def __init__(self, name: str, constant_speed: float, turn_speed: float,
                 max_steering: float, steering_increment: float,
                 auto_center_threshold: float, anchor_deceleration: float,
                 acceleration_factor: float, anchor_angular_damping: float,
                 reference_tick_rate=REFERENCE_TICK_RATE):
        self.name = name
        self.constant_speed = constant_speed
        self.turn_speed = turn_speed
        self.max_steering = max_steering
        self.steering_increment = steering_increment
        self.auto_center_threshold = auto_center_threshold
        self.anchor_deceleration = anchor_deceleration
        self.acceleration_factor = acceleration_factor
        self.anchor_angular_damping = anchor_angular_damping
        self.reference_tick_rate = reference_tick_rate

    def ticks(self, dt: float) -> float:
        """Number of reference ticks that dt stands for."""
        if self.reference_tick_rate is None:
            return 1.0
        return dt * self.reference_tick_rate

    def __repr__(self):
        return f"ShipProfile({self.name!r})"


SHIP_PROFILE = ShipProfile(
    name='ship',
    constant_speed=SHIP_CONSTANT_SPEED,
    turn_speed=SHIP_TURN_SPEED,
    max_steering=SHIP_MAX_STEERING,
    steering_increment=SHIP_STEERING_INCREMENT,
    auto_center_threshold=SHIP_STEERING_AUTO_CENTER_THRESHOLD,
    anchor_deceleration=SHIP_ANCHOR_DECELERATION_FACTOR,
    acceleration_factor=SHIP_ACCELERATION_FACTOR,
    anchor_angular_damping=SHIP_ANCHOR_ANGULAR_DAMPING,
)


class ShipState:
    """Kinematic state of one ship. velocity_* and angular_velocity are derived."""

    __slots__ = ('x', 'y', 'rotation', 'steering_direction', 'current_speed',
                 'is_anchored', 'velocity_x', 'velocity_y', 'angular_velocity')

    def __init__(self, x: float = 0.0, y: float = 0.0, rotation: float = 0.0,
                 steering_direction: float = 0.0, current_speed: float = 0.0,
                 is_anchored: bool = False, velocity_x: float = 0.0,
                 velocity_y: float = 0.0, angular_velocity: float = 0.0):
        self.x = x
        self.y = y
        self.rotation = rotation
        self.steering_direction = steering_direction
        self.current_speed = current_speed
        self.is_anchored = is_anchored
        self.velocity_x = velocity_x
        self.velocity_y = velocity_y
        self.angular_velocity = angular_velocity

    def copy(self) -> 'ShipState':
        return ShipState(self.x, self.y, self.rotation,
                         self.steering_direction, self.current_speed,
                         self.is_anchored, self.velocity_x, self.velocity_y,
                         self.angular_velocity)

    def to_dict(self) -> dict:
        return {
            'x': self.x, 'y': self.y,
            'rotation': self.rotation,
            'steeringDirection': self.steering_direction,
            'currentSpeed': self.current_speed,
            'isAnchored': self.is_anchored,
            'velocityX': self.velocity_x,
            'velocityY': self.velocity_y,
            'angularVelocity': self.angular_velocity,
        }

    @staticmethod
    def from_dict(data: dict) -> 'ShipState':
        """Build a state from a ship message. Raises ValueError if x/y/rotation is missing."""
        missing = [k for k in ('x', 'y', 'rotation') if k not in data]
        if missing:
            raise ValueError(f"Ship state missing fields: {', '.join(missing)}")
        return ShipState(
            x=float(data['x']),
            y=float(data['y']),
            rotation=float(data['rotation']),
            steering_direction=float(data.get('steeringDirection', 0.0)),
            current_speed=float(data.get('currentSpeed', 0.0)),
            is_anchored=bool(data.get('isAnchored', False)),
            velocity_x=float(data.get('velocityX', 0.0)),
            velocity_y=float(data.get('velocityY', 0.0)),
            angular_velocity=float(data.get('angularVelocity', 0.0)),
        )

    def __repr__(self):
        return (f"ShipState(x={self.x:.2f}, y={self.y:.2f}, "
                f"rot={self.rotation:.3f}, steer={self.steering_direction:.0f}, "
                f"speed={self.current_speed:.2f}, anchored={self.is_anchored})")


class ShipInput:
    """Helm input for one tick. turn_left wins when both are held."""

    __slots__ = ('turn_left', 'turn_right')

    def __init__(self, turn_left: bool = False, turn_right: bool = False):
        self.turn_left = turn_left
        self.turn_right = turn_right

    @staticmethod
    def from_dict(data: dict) -> 'ShipInput':
        return ShipInput(bool(data.get('turnLeft', False)),
                         bool(data.get('turnRight', False)))

    def to_dict(self) -> dict:
        return {'turnLeft': self.turn_left, 'turnRight': self.turn_right}


NO_INPUT = ShipInput()


class ShipPhysics:
    """
    The ship motion algorithm: steering -> angular velocity -> rotation
    -> speed -> velocity -> position, with constants from a ShipProfile.
    """

    def __init__(self, profile: ShipProfile = SHIP_PROFILE):
        self.profile = profile

    def calculate_steering(self, current: float, turn_left: bool,
                           turn_right: bool) -> float:
        p = self.profile
        steering = current
        if turn_left:
            steering = clamp(steering - p.steering_increment,
                             -p.max_steering, p.max_steering)
        elif turn_right:
            steering = clamp(steering + p.steering_increment,
                             -p.max_steering, p.max_steering)

        # Auto-center when close to center and no input
        if (abs(steering) <= p.auto_center_threshold
                and not turn_left and not turn_right):
            steering = 0.0
        return steering

    def calculate_angular_velocity(self, steering: float, is_anchored: bool,
                                   dt: float = DEFAULT_DT,
                                   turn_multiplier: float = 1.0) -> float:
        p = self.profile
        base = (steering / p.max_steering) * p.turn_speed * turn_multiplier
        if is_anchored:
            return base * p.anchor_angular_damping ** p.ticks(dt)
        return base

    def target_speed(self, speed_multiplier: float = 1.0) -> float:
        return self.profile.constant_speed * speed_multiplier

    def calculate_speed(self, current_speed: float, is_anchored: bool,
                        dt: float = DEFAULT_DT,
                        speed_multiplier: float = 1.0) -> float:
        p = self.profile
        ticks = p.ticks(dt)
        if is_anchored:
            return current_speed * p.anchor_deceleration ** ticks
        alpha = 1.0 - (1.0 - p.acceleration_factor) ** ticks
        target = self.target_speed(speed_multiplier)
        return current_speed + (target - current_speed) * alpha

    @staticmethod
    def calculate_velocity(rotation: float, speed: float) -> tuple:
        """Velocity along the bow. Sprites face up, so forward is rotation - pi/2."""
        axis = rotation - math.pi / 2
        return (math.cos(axis) * speed, math.sin(axis) * speed)

    def advance(self, state: ShipState, inp: ShipInput = NO_INPUT,
                dt: float = DEFAULT_DT, modifiers=None) -> ShipState:
        """Return the ship state one step of dt seconds later. Never mutates state."""
        if isinstance(modifiers, dict):
            modifiers = ShipModifiers.from_dict(modifiers)
        speed_multiplier = modifiers.speed_multiplier if modifiers else 1.0
        turn_multiplier = modifiers.turn_multiplier if modifiers else 1.0

        steering = self.calculate_steering(
            state.steering_direction, inp.turn_left, inp.turn_right
        )
        angular_velocity = self.calculate_angular_velocity(
            steering, state.is_anchored, dt, turn_multiplier
        )
        rotation = wrap_angle(state.rotation + angular_velocity * dt)
        speed = self.calculate_speed(
            state.current_speed, state.is_anchored, dt, speed_multiplier
        )
        vx, vy = self.calculate_velocity(rotation, speed)

        return ShipState(
            x=state.x + vx * dt,
            y=state.y + vy * dt,
            rotation=rotation,
            steering_direction=steering,
            current_speed=speed,
            is_anchored=state.is_anchored,
            velocity_x=vx,
            velocity_y=vy,
            angular_velocity=angular_velocity,
        )


ship_physics = ShipPhysics(SHIP_PROFILE)


def update_ship_physics(state: ShipState, inp: ShipInput = NO_INPUT,
                        dt: float = DEFAULT_DT, modifiers=None) -> ShipState:
    """Advance a full-size ship with the default profile."""
    return ship_physics.advance(state, inp, dt, modifiers)


def forward_vector(rotation: float) -> tuple:
    axis = rotation - math.pi / 2
    return (math.cos(axis), math.sin(axis))


def get_anchor_position(state: ShipState, offset: float = ANCHOR_OFFSET) -> tuple:
    """World position of the anchor winch, forward of the ship origin."""
    fx, fy = forward_vector(state.rotation)
    return (state.x + fx * offset, state.y + fy * offset)


def get_helm_position(state: ShipState, offset: float = HELM_OFFSET) -> tuple:
    """World position of the helm, astern of the ship origin."""
    fx, fy = forward_vector(state.rotation)
    return (state.x - fx * offset, state.y - fy * offset)


def get_cannon_position(state: ShipState, side: str,
                        offset: float = CANNON_OFFSET) -> tuple:
    """World position of the 'left' or 'right' cannon mount, abeam of the origin."""
    axis = state.rotation - math.pi / 2
    if side == 'left':
        axis -= math.pi / 2
    elif side == 'right':
        axis += math.pi / 2
    else:
        raise ValueError(f"Unknown cannon side: {side}")
    return (state.x + math.cos(axis) * offset, state.y + math.sin(axis) * offset)
