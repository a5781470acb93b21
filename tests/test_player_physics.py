"""
Unit tests for players walking on a ship deck.
"""

import math
import unittest

from shared.player_physics import (
    DEFAULT_SHIP_BOUNDS, PlayerInput, PlayerOnShipPhysics, PlayerOnShipState,
    calculate_player_movement, clamp_to_ship_bounds, direction_key,
    get_helm_local_position, is_within_reach, local_to_world_position,
    update_player_on_ship, world_to_local_position
)
from shared.ship_physics import ShipState, get_helm_position


class TestPlayerMovement(unittest.TestCase):
    """World-absolute velocity and facing from WASD."""

    def test_up(self):
        m = calculate_player_movement(PlayerInput(up=True))
        self.assertEqual((m.vel_x, m.vel_y), (0.0, -100.0))
        self.assertEqual(m.rotation, math.pi)
        self.assertTrue(m.is_moving)

    def test_facing_table(self):
        self.assertEqual(calculate_player_movement(PlayerInput(down=True)).rotation, 0.0)
        self.assertEqual(calculate_player_movement(PlayerInput(right=True)).rotation,
                         -math.pi / 2)
        self.assertEqual(
            calculate_player_movement(PlayerInput(down=True, right=True)).rotation,
            -math.pi / 4
        )
        self.assertEqual(
            calculate_player_movement(PlayerInput(up=True, left=True)).rotation,
            3 * math.pi / 4
        )

    def test_diagonal_magnitude(self):
        for inp in (PlayerInput(up=True, left=True), PlayerInput(down=True, right=True)):
            m = calculate_player_movement(inp)
            self.assertAlmostEqual(math.hypot(m.vel_x, m.vel_y), 100.0)

    def test_opposing_keys_cancel(self):
        m = calculate_player_movement(PlayerInput(up=True, down=True))
        self.assertFalse(m.is_moving)
        self.assertIsNone(m.rotation)

    def test_unlisted_combo_has_no_facing(self):
        m = calculate_player_movement(PlayerInput(up=True, left=True, right=True))
        self.assertTrue(m.is_moving)
        self.assertEqual(direction_key(PlayerInput(up=True, left=True, right=True)),
                         'up-left-right')
        self.assertIsNone(m.rotation)


class TestPlayerOnShip(unittest.TestCase):

    def setUp(self):
        self.state = PlayerOnShipState(0.0, 0.0, math.pi)

    def test_walk_up_on_level_ship(self):
        new = update_player_on_ship(self.state, PlayerInput(up=True), 0.0, 0.1)
        self.assertAlmostEqual(new.local_x, 0.0)
        self.assertAlmostEqual(new.local_y, -10.0)
        self.assertEqual(new.last_rotation, math.pi)
        self.assertTrue(new.is_moving)

    def test_up_is_world_up_on_turned_ship(self):
        ship_rotation = math.pi / 2
        new = update_player_on_ship(self.state, PlayerInput(up=True),
                                    ship_rotation, 0.1)
        wx, wy = local_to_world_position(new.local_x, new.local_y,
                                         0.0, 0.0, ship_rotation)
        self.assertAlmostEqual(wx, 0.0)
        self.assertAlmostEqual(wy, -10.0)

    def test_clamped_to_deck(self):
        far = PlayerOnShipState(1e6, -1e6)
        new = update_player_on_ship(far, PlayerInput(), 0.0, 1 / 60)
        self.assertEqual(new.local_x, DEFAULT_SHIP_BOUNDS.max_x)
        self.assertEqual(new.local_y, -DEFAULT_SHIP_BOUNDS.max_y)
        self.assertEqual((DEFAULT_SHIP_BOUNDS.max_x, DEFAULT_SHIP_BOUNDS.max_y),
                         (54.5, 124.0))

    def test_clamp_helper(self):
        self.assertEqual(clamp_to_ship_bounds(0.0, 500.0), (0.0, 124.0))

    def test_walking_into_rail_stops(self):
        state = PlayerOnShipState(54.0, 0.0)
        for _ in range(30):
            state = update_player_on_ship(state, PlayerInput(right=True), 0.0, 1 / 60)
        self.assertEqual(state.local_x, 54.5)

    def test_contradictory_keys_hold_facing(self):
        state = PlayerOnShipState(0.0, 0.0, 0.7)
        new = update_player_on_ship(state, PlayerInput(up=True, down=True), 0.0, 0.1)
        self.assertEqual(new.last_rotation, 0.7)
        self.assertFalse(new.is_moving)

        new = update_player_on_ship(state, PlayerInput(left=True, right=True, up=True),
                                    0.0, 0.1)
        self.assertEqual(new.last_rotation, 0.7)
        self.assertLess(new.local_y, 0.0)

    def test_standing_still_keeps_world_facing(self):
        state = PlayerOnShipState(0.0, 0.0, 1.0, last_ship_rotation=0.0)
        new = update_player_on_ship(state, PlayerInput(), 0.5, 1 / 60)
        self.assertEqual(new.last_rotation, 1.0)
        self.assertEqual(new.last_ship_rotation, 0.5)

    def test_rotate_with_ship(self):
        physics = PlayerOnShipPhysics(rotate_with_ship=True)
        state = PlayerOnShipState(0.0, 0.0, math.pi, last_ship_rotation=0.0)
        new = physics.advance(state, PlayerInput(), 0.5, 1 / 60)
        self.assertAlmostEqual(new.last_rotation, -math.pi + 0.5)

    def test_rotate_with_ship_skipped_while_walking(self):
        physics = PlayerOnShipPhysics(rotate_with_ship=True)
        state = PlayerOnShipState(0.0, 0.0, math.pi, last_ship_rotation=0.0)
        new = physics.advance(state, PlayerInput(right=True), 0.5, 1 / 60)
        self.assertTrue(new.is_moving)
        self.assertEqual(new.last_rotation, -math.pi / 2)
        self.assertEqual(new.last_ship_rotation, 0.5)

        # Moving with no facing entry holds the old facing, unturned
        new = physics.advance(state, PlayerInput(left=True, right=True, up=True),
                              0.5, 1 / 60)
        self.assertTrue(new.is_moving)
        self.assertEqual(new.last_rotation, math.pi)

    def test_rotate_with_ship_needs_previous_heading(self):
        physics = PlayerOnShipPhysics(rotate_with_ship=True)
        new = physics.advance(PlayerOnShipState(), PlayerInput(), 0.5, 1 / 60)
        self.assertEqual(new.last_rotation, math.pi)

    def test_does_not_mutate_input_state(self):
        update_player_on_ship(self.state, PlayerInput(left=True), 0.3, 0.1)
        self.assertEqual(self.state.to_dict(),
                         PlayerOnShipState(0.0, 0.0, math.pi).to_dict())


class TestFrames(unittest.TestCase):

    def test_position_roundtrip(self):
        lx, ly = world_to_local_position(
            *local_to_world_position(12.0, -30.0, 400.0, 250.0, 2.2),
            400.0, 250.0, 2.2
        )
        self.assertAlmostEqual(lx, 12.0)
        self.assertAlmostEqual(ly, -30.0)

    def test_helm_local_matches_world(self):
        ship = ShipState(x=300.0, y=200.0, rotation=1.1)
        hx, hy = get_helm_position(ship)
        lx, ly = get_helm_local_position()
        wx, wy = local_to_world_position(lx, ly, ship.x, ship.y, ship.rotation)
        self.assertAlmostEqual(hx, wx)
        self.assertAlmostEqual(hy, wy)

    def test_reach(self):
        self.assertTrue(is_within_reach(0, 0, 10, 0))
        self.assertFalse(is_within_reach(0, 0, 15, 0))


if __name__ == '__main__':
    unittest.main()
