"""
Authoritative game state owned by the server.
All ship physics runs here; clients only send helm inputs.
"""

import random

from shared.config import (
    WORLD_WIDTH, WORLD_HEIGHT, MAX_PLAYERS_PER_SHIP,
    MODIFIER_SPAWN_CHANCE, MODIFIER_SIZE, SHIP_PICKUP_RADIUS,
    SPAWN_EDGE_MARGIN, SPAWN_EDGE_BAND, CANNON_MAX_ANGLE
)
from shared.cannon import CannonState, aim_cannon, get_cannon_rotation, get_shot_velocity
from shared.cooldown import CannonCooldown
from shared.mathutil import clamp, distance
from shared.modifiers import MODIFIER_TYPES, ShipModifiers
from shared.player_physics import (
    PlayerInput, PlayerOnShipPhysics, PlayerOnShipState, local_to_world_position
)
from shared.ship_physics import (
    NO_INPUT, ShipInput, ShipState, get_cannon_position, ship_physics
)
from shared.snapshot import Pose


class ShipRecord:
    """A ship in the world plus the server-side bookkeeping around it."""

    def __init__(self, ship_id, state: ShipState):
        self.ship_id = ship_id
        self.state = state
        self.modifiers = ShipModifiers()
        self.pending_inputs = []          # (sequence, ShipInput) queued for next tick
        self.last_processed_input = 0     # Last input seq applied by the server
        self.controlling_player = None    # Player at the helm
        self.crew = set()
        self.cannons = {'left': CannonCooldown(), 'right': CannonCooldown()}
        self.aim = {'left': CannonState(), 'right': CannonState()}

    def hand_over_helm(self, player_id):
        """Change who steers. Sequence numbers restart with each helmsman."""
        self.controlling_player = player_id
        self.pending_inputs.clear()
        self.last_processed_input = 0

    def to_message(self) -> dict:
        msg = self.state.to_dict()
        msg['lastProcessedInput'] = self.last_processed_input
        msg['controllingPlayer'] = self.controlling_player
        msg['modifiers'] = self.modifiers.to_dict()
        msg['cannons'] = {}
        for side in self.cannons:
            cx, cy = get_cannon_position(self.state, side)
            aim = self.aim[side].relative_angle
            msg['cannons'][side] = {
                'x': cx, 'y': cy,
                'relativeAngle': aim,
                'rotation': get_cannon_rotation(self.state.rotation, side, aim),
            }
        msg['cannons']['leftAngle'] = self.aim['left'].relative_angle
        msg['cannons']['rightAngle'] = self.aim['right'].relative_angle
        return msg


class PlayerRecord:
    """A player avatar standing on a ship."""

    def __init__(self, player_id, ship_id):
        self.player_id = player_id
        self.ship_id = ship_id
        self.state = PlayerOnShipState()
        self.is_controlling_ship = False

    def world_pose(self, ship_state: ShipState) -> Pose:
        x, y = local_to_world_position(self.state.local_x, self.state.local_y,
                                       ship_state.x, ship_state.y,
                                       ship_state.rotation)
        return Pose(x, y, self.state.last_rotation)


class ModifierPickup:
    """A collectible modifier floating in the water."""

    __slots__ = ('pickup_id', 'modifier_type', 'x', 'y', 'size')

    def __init__(self, pickup_id: str, modifier_type: str, x: float, y: float,
                 size: float = MODIFIER_SIZE):
        self.pickup_id = pickup_id
        self.modifier_type = modifier_type
        self.x = x
        self.y = y
        self.size = size

    def to_dict(self) -> dict:
        info = MODIFIER_TYPES[self.modifier_type]
        return {
            'id': self.pickup_id,
            'type': self.modifier_type,
            'name': info['name'],
            'effect': info['effect'],
            'bonus': info['bonus'],
            'x': self.x, 'y': self.y, 'size': self.size,
        }


class GameState:
    """
    The single source of truth for the game world.
    Maintains ships, their crews and pickups, and applies physics.
    """

    def __init__(self, rng: random.Random = None, physics=ship_physics,
                 player_physics: PlayerOnShipPhysics = None):
        self.ships = {}      # ship_id -> ShipRecord
        self.players = {}    # player_id -> PlayerRecord
        self.pickups = {}    # ship_id -> [ModifierPickup]
        self.tick = 0
        self._pickup_seq = 0
        self.rng = rng or random.Random()
        self.physics = physics
        self.player_physics = player_physics or PlayerOnShipPhysics()

    # -- ships ---------------------------------------------------------------

    def _spawn_position(self) -> tuple:
        """A random point near one of the four world corners."""
        corner = self.rng.randrange(4)
        near_x = self.rng.randrange(SPAWN_EDGE_BAND) + SPAWN_EDGE_MARGIN
        near_y = self.rng.randrange(SPAWN_EDGE_BAND) + SPAWN_EDGE_MARGIN
        x = near_x if corner in (0, 2) else WORLD_WIDTH - near_x
        y = near_y if corner in (0, 1) else WORLD_HEIGHT - near_y
        return float(x), float(y)

    def add_ship(self, ship_id, x: float = None, y: float = None) -> ShipRecord:
        """Add a new ship, anchored and at rest."""
        if ship_id in self.ships:
            return self.ships[ship_id]  # Already exists
        if x is None or y is None:
            x, y = self._spawn_position()

        ship = ShipRecord(ship_id, ShipState(x=x, y=y, is_anchored=True))
        self.ships[ship_id] = ship
        self.pickups.setdefault(ship_id, [])
        return ship

    def remove_ship(self, ship_id):
        """Remove a ship along with its crew and pickups."""
        ship = self.ships.pop(ship_id, None)
        self.pickups.pop(ship_id, None)
        if ship:
            for pid in ship.crew:
                self.players.pop(pid, None)

    def set_anchor(self, ship_id, anchored: bool) -> bool:
        ship = self.ships.get(ship_id)
        if ship is None:
            return False
        ship.state.is_anchored = anchored
        return True

    # -- crew ----------------------------------------------------------------

    def add_player(self, player_id, ship_id):
        """
        Put a player on a ship.

        Returns:
            The PlayerRecord, or None if the ship is missing or full.
        """
        ship = self.ships.get(ship_id)
        if ship is None:
            return None
        if player_id in self.players:
            return self.players[player_id]
        if len(ship.crew) >= MAX_PLAYERS_PER_SHIP:
            return None

        player = PlayerRecord(player_id, ship_id)
        self.players[player_id] = player
        ship.crew.add(player_id)
        return player

    def remove_player(self, player_id) -> bool:
        """
        Remove a player. The ship sinks with its last crew member.

        Returns:
            True if the ship was destroyed as a result.
        """
        player = self.players.pop(player_id, None)
        if player is None:
            return False

        ship = self.ships.get(player.ship_id)
        if ship is None:
            return False
        ship.crew.discard(player_id)
        if ship.controlling_player == player_id:
            ship.hand_over_helm(None)

        if not ship.crew:
            self.remove_ship(ship.ship_id)
            return True
        return False

    def take_helm(self, player_id) -> bool:
        """Give the helm to a player unless someone else holds it."""
        player = self.players.get(player_id)
        if player is None:
            return False
        ship = self.ships[player.ship_id]
        if ship.controlling_player not in (None, player_id):
            return False
        if ship.controlling_player != player_id:
            ship.hand_over_helm(player_id)
        player.is_controlling_ship = True
        return True

    def release_helm(self, player_id) -> bool:
        player = self.players.get(player_id)
        if player is None or not player.is_controlling_ship:
            return False
        ship = self.ships[player.ship_id]
        if ship.controlling_player == player_id:
            ship.hand_over_helm(None)
        player.is_controlling_ship = False
        return True

    # -- inputs --------------------------------------------------------------

    def queue_ship_input(self, player_id, sequence: int, turn_left: bool,
                         turn_right: bool) -> bool:
        """Queue a helm input; only the player at the helm may steer."""
        player = self.players.get(player_id)
        if player is None:
            return False
        ship = self.ships[player.ship_id]
        if ship.controlling_player != player_id:
            return False
        ship.pending_inputs.append((sequence, ShipInput(turn_left, turn_right)))
        return True

    def apply_player_input(self, player_id, inp: PlayerInput, dt: float):
        """Walk a player across the deck. Players at the helm stay put."""
        player = self.players.get(player_id)
        if player is None:
            return None
        if player.is_controlling_ship:
            return player.state

        ship = self.ships[player.ship_id]
        player.state = self.player_physics.advance(
            player.state, inp, ship.state.rotation, dt
        )
        return player.state

    def aim_cannon(self, player_id, side: str, aim_left: bool, aim_right: bool,
                   dt: float):
        """Turn one of the player's ship cannons. Returns its CannonState or None."""
        player = self.players.get(player_id)
        if player is None:
            return None
        ship = self.ships[player.ship_id]
        if side not in ship.aim:
            return None
        ship.aim[side] = aim_cannon(ship.aim[side], aim_left, aim_right, dt)
        return ship.aim[side]

    def set_cannon_angles(self, ship_id, left_angle: float = 0.0,
                          right_angle: float = 0.0) -> bool:
        """Take both cannon aims as reported by the ship's crew."""
        ship = self.ships.get(ship_id)
        if ship is None:
            return False
        ship.aim['left'] = CannonState(clamp(left_angle or 0.0, -CANNON_MAX_ANGLE, CANNON_MAX_ANGLE))
        ship.aim['right'] = CannonState(clamp(right_angle or 0.0, -CANNON_MAX_ANGLE, CANNON_MAX_ANGLE))
        return True

    def fire_cannon(self, player_id, side: str, now: float):
        """
        Fire one of the player's ship cannons if it has reloaded.

        Returns:
            The shot message (launch point, rotation, velocity, shooter),
            or None when nothing was fired.
        """
        player = self.players.get(player_id)
        if player is None:
            return None
        ship = self.ships[player.ship_id]
        cannon = ship.cannons.get(side)
        if cannon is None:
            return None
        if not cannon.fire(now, ship.modifiers):
            return None

        x, y = get_cannon_position(ship.state, side)
        rotation = get_cannon_rotation(ship.state.rotation, side,
                                       ship.aim[side].relative_angle)
        vx, vy = get_shot_velocity(rotation)
        return {
            'x': x, 'y': y, 'rotation': rotation,
            'velocityX': vx, 'velocityY': vy,
            'shooterId': player_id,
        }

    # -- modifiers -----------------------------------------------------------

    def spawn_modifiers(self, ship_id, chance: float = MODIFIER_SPAWN_CHANCE) -> list:
        """Roll each modifier type once and scatter the winners around the world."""
        if ship_id not in self.ships:
            return []
        spawned = []
        for modifier_type in MODIFIER_TYPES:
            if self.rng.random() < chance:
                self._pickup_seq += 1
                pickup = ModifierPickup(
                    f"{ship_id}_{modifier_type}_{self.tick}_{self._pickup_seq}",
                    modifier_type,
                    self.rng.random() * (WORLD_WIDTH - 100) + 50,
                    self.rng.random() * (WORLD_HEIGHT - 100) + 50,
                )
                self.pickups[ship_id].append(pickup)
                spawned.append(pickup)
        return spawned

    def add_pickup(self, ship_id, pickup: ModifierPickup):
        if pickup.modifier_type not in MODIFIER_TYPES:
            raise KeyError(pickup.modifier_type)
        self.pickups.setdefault(ship_id, []).append(pickup)

    def check_modifier_pickups(self, ship_id):
        """Collect the first pickup the ship is touching, if any."""
        ship = self.ships.get(ship_id)
        if ship is None:
            return None
        pickups = self.pickups.get(ship_id, [])
        for i, pickup in enumerate(pickups):
            d = distance(ship.state.x, ship.state.y, pickup.x, pickup.y)
            if d < SHIP_PICKUP_RADIUS + pickup.size:
                ship.modifiers.apply(pickup.modifier_type)
                del pickups[i]
                return pickup
        return None

    # -- simulation ----------------------------------------------------------

    def step(self, dt: float) -> list:
        """
        Advance every ship by one server tick.

        Each queued helm input is applied as its own physics step, in order,
        so the server replays exactly what the client predicted.

        Returns:
            list of (ship_id, ModifierPickup) collected this tick
        """
        collected = []
        for ship in list(self.ships.values()):
            if ship.controlling_player is not None and ship.pending_inputs:
                for sequence, inp in ship.pending_inputs:
                    ship.state = self.physics.advance(
                        ship.state, inp, dt, ship.modifiers
                    )
                    ship.last_processed_input = sequence
            else:
                ship.state = self.physics.advance(
                    ship.state, NO_INPUT, dt, ship.modifiers
                )
            ship.pending_inputs.clear()

            pickup = self.check_modifier_pickups(ship.ship_id)
            if pickup is not None:
                collected.append((ship.ship_id, pickup))

        self.tick += 1
        return collected

    def get_snapshot(self) -> dict:
        """Ship and player messages describing the current world state."""
        ships = {}
        for sid, ship in self.ships.items():
            ships[sid] = ship.to_message()

        players = {}
        for pid, player in self.players.items():
            ship = self.ships.get(player.ship_id)
            if ship is None:
                continue
            pose = player.world_pose(ship.state)
            players[pid] = {
                'shipId': player.ship_id,
                'x': pose.x, 'y': pose.y, 'rotation': pose.rotation,
                'localX': player.state.local_x,
                'localY': player.state.local_y,
                'isMoving': player.state.is_moving,
                'isControllingShip': player.is_controlling_ship,
            }

        return {'tick': self.tick, 'ships': ships, 'players': players}
