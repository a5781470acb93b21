"""
Unit tests for the authoritative game state.
"""

import math
import random
import unittest

from server.game_state import GameState, ModifierPickup
from shared.config import WORLD_WIDTH, WORLD_HEIGHT
from shared.player_physics import PlayerInput


class TestShipsAndCrew(unittest.TestCase):

    def setUp(self):
        self.gs = GameState(rng=random.Random(7))
        self.ship = self.gs.add_ship(1)

    def test_new_ship_anchored_inside_world(self):
        state = self.ship.state
        self.assertTrue(state.is_anchored)
        self.assertEqual(state.current_speed, 0.0)
        self.assertTrue(0 < state.x < WORLD_WIDTH)
        self.assertTrue(0 < state.y < WORLD_HEIGHT)

    def test_add_ship_twice_returns_existing(self):
        self.assertIs(self.gs.add_ship(1), self.ship)

    def test_explicit_position(self):
        ship = self.gs.add_ship(2, 500.0, 600.0)
        self.assertEqual((ship.state.x, ship.state.y), (500.0, 600.0))

    def test_crew_limit(self):
        for pid in range(4):
            self.assertIsNotNone(self.gs.add_player(pid, 1))
        self.assertIsNone(self.gs.add_player(99, 1))
        self.assertEqual(len(self.ship.crew), 4)

    def test_player_needs_ship(self):
        self.assertIsNone(self.gs.add_player(1, 42))

    def test_last_player_leaving_sinks_ship(self):
        self.gs.add_player('a', 1)
        self.gs.add_player('b', 1)
        self.assertFalse(self.gs.remove_player('a'))
        self.assertTrue(self.gs.remove_player('b'))
        self.assertNotIn(1, self.gs.ships)
        self.assertFalse(self.gs.remove_player('b'))

    def test_helm_is_exclusive(self):
        self.gs.add_player('a', 1)
        self.gs.add_player('b', 1)
        self.assertTrue(self.gs.take_helm('a'))
        self.assertFalse(self.gs.take_helm('b'))
        self.assertTrue(self.gs.release_helm('a'))
        self.assertTrue(self.gs.take_helm('b'))
        self.assertEqual(self.ship.controlling_player, 'b')

    def test_leaving_releases_helm(self):
        self.gs.add_player('a', 1)
        self.gs.add_player('b', 1)
        self.gs.take_helm('a')
        self.gs.remove_player('a')
        self.assertIsNone(self.ship.controlling_player)

    def test_new_helmsman_starts_unacknowledged(self):
        self.gs.add_player('a', 1)
        self.gs.add_player('b', 1)
        self.gs.take_helm('a')
        self.gs.queue_ship_input('a', 50, True, False)
        self.gs.step(1 / 60)
        self.assertEqual(self.ship.last_processed_input, 50)

        self.gs.queue_ship_input('a', 51, True, False)
        self.gs.release_helm('a')
        self.assertEqual(self.ship.last_processed_input, 0)
        self.assertEqual(self.ship.pending_inputs, [])

        self.gs.take_helm('b')
        self.gs.queue_ship_input('b', 1, False, True)
        self.gs.step(1 / 60)
        self.assertEqual(self.ship.last_processed_input, 1)

    def test_helmsman_leaving_resets_acknowledgement(self):
        self.gs.add_player('a', 1)
        self.gs.add_player('b', 1)
        self.gs.take_helm('a')
        self.gs.queue_ship_input('a', 9, True, False)
        self.gs.step(1 / 60)
        self.gs.remove_player('a')
        self.assertEqual(self.ship.last_processed_input, 0)

    def test_retaking_helm_keeps_acknowledgement(self):
        self.gs.add_player('a', 1)
        self.gs.take_helm('a')
        self.gs.queue_ship_input('a', 4, True, False)
        self.gs.step(1 / 60)
        self.assertTrue(self.gs.take_helm('a'))
        self.assertEqual(self.ship.last_processed_input, 4)


class TestSimulation(unittest.TestCase):

    def setUp(self):
        self.gs = GameState(rng=random.Random(3))
        self.ship = self.gs.add_ship(1, 1000.0, 1000.0)
        self.gs.add_player('helm', 1)
        self.gs.add_player('deck', 1)
        self.gs.take_helm('helm')
        self.dt = 1 / 60

    def test_only_helm_may_steer(self):
        self.assertFalse(self.gs.queue_ship_input('deck', 1, True, False))
        self.assertTrue(self.gs.queue_ship_input('helm', 1, True, False))

    def test_each_input_is_one_step(self):
        self.gs.queue_ship_input('helm', 1, True, False)
        self.gs.queue_ship_input('helm', 2, True, False)
        self.gs.step(self.dt)
        self.assertEqual(self.ship.state.steering_direction, -2.0)
        self.assertEqual(self.ship.last_processed_input, 2)
        self.assertEqual(self.ship.pending_inputs, [])

    def test_idle_ship_keeps_sailing(self):
        self.gs.set_anchor(1, False)
        for _ in range(60):
            self.gs.step(self.dt)
        self.assertGreater(self.ship.state.current_speed, 0.0)
        self.assertLess(self.ship.state.y, 1000.0)

    def test_anchored_ship_stays(self):
        self.gs.step(self.dt)
        self.assertEqual((self.ship.state.x, self.ship.state.y), (1000.0, 1000.0))

    def test_deck_walking(self):
        self.gs.apply_player_input('deck', PlayerInput(up=True), 0.1)
        self.assertAlmostEqual(self.gs.players['deck'].state.local_y, -10.0)

    def test_helmsman_does_not_walk(self):
        self.gs.apply_player_input('helm', PlayerInput(up=True), 0.1)
        self.assertEqual(self.gs.players['helm'].state.local_y, 0.0)

    def test_cannon_cooldown(self):
        self.assertTrue(self.gs.fire_cannon('deck', 'left', 0.0))
        self.assertFalse(self.gs.fire_cannon('deck', 'left', 1.0))
        self.assertTrue(self.gs.fire_cannon('deck', 'right', 1.0))
        self.assertTrue(self.gs.fire_cannon('deck', 'left', 3.0))
        self.assertFalse(self.gs.fire_cannon('deck', 'stern', 3.0))

    def test_shot_leaves_along_cannon(self):
        shot = self.gs.fire_cannon('deck', 'right', 0.0)
        self.assertAlmostEqual(shot['x'], 1075.0)
        self.assertAlmostEqual(shot['y'], 1000.0)
        self.assertAlmostEqual(shot['rotation'], 0.0)
        self.assertAlmostEqual(shot['velocityX'], 750.0)
        self.assertAlmostEqual(shot['velocityY'], 0.0)
        self.assertEqual(shot['shooterId'], 'deck')

        shot = self.gs.fire_cannon('deck', 'left', 0.0)
        self.assertAlmostEqual(shot['x'], 925.0)
        self.assertAlmostEqual(shot['velocityX'], -750.0)
        self.assertAlmostEqual(shot['velocityY'], 0.0, places=6)

    def test_aimed_shot(self):
        for _ in range(60):
            self.gs.aim_cannon('deck', 'right', False, True, self.dt)
        self.assertAlmostEqual(self.ship.aim['right'].relative_angle, 0.5)
        shot = self.gs.fire_cannon('deck', 'right', 0.0)
        self.assertAlmostEqual(shot['rotation'], 0.5)
        self.assertAlmostEqual(shot['velocityY'], 750.0 * math.sin(0.5))

    def test_aim_unknown_side_or_player(self):
        self.assertIsNone(self.gs.aim_cannon('deck', 'stern', True, False, self.dt))
        self.assertIsNone(self.gs.aim_cannon('nobody', 'left', True, False, self.dt))

    def test_set_cannon_angles(self):
        self.assertTrue(self.gs.set_cannon_angles(1, 0.25, None))
        self.assertEqual(self.ship.aim['left'].relative_angle, 0.25)
        self.assertEqual(self.ship.aim['right'].relative_angle, 0.0)
        self.gs.set_cannon_angles(1, -5.0, 5.0)
        self.assertAlmostEqual(self.ship.aim['left'].relative_angle, -math.pi / 3)
        self.assertAlmostEqual(self.ship.aim['right'].relative_angle, math.pi / 3)
        self.assertFalse(self.gs.set_cannon_angles(42, 0.0, 0.0))

    def test_pickup_collected(self):
        self.gs.add_pickup(1, ModifierPickup('p1', 'RIOS_WINDS', 1020.0, 1000.0))
        collected = self.gs.step(self.dt)
        self.assertEqual(len(collected), 1)
        self.assertEqual(collected[0][0], 1)
        self.assertTrue(self.ship.modifiers.speed)
        self.assertEqual(self.gs.pickups[1], [])

    def test_far_pickup_ignored(self):
        self.gs.add_pickup(1, ModifierPickup('p1', 'RIOS_WINDS', 2000.0, 2000.0))
        self.assertEqual(self.gs.step(self.dt), [])

    def test_unknown_pickup_rejected(self):
        with self.assertRaises(KeyError):
            self.gs.add_pickup(1, ModifierPickup('p1', 'KRAKEN_INK', 0.0, 0.0))

    def test_spawn_modifiers(self):
        self.assertEqual(len(self.gs.spawn_modifiers(1, chance=1.0)), 3)
        self.assertEqual(self.gs.spawn_modifiers(1, chance=0.0), [])
        self.assertEqual(self.gs.spawn_modifiers(42, chance=1.0), [])

    def test_spawned_pickup_ids_unique_within_tick(self):
        first = self.gs.spawn_modifiers(1, chance=1.0)
        second = self.gs.spawn_modifiers(1, chance=1.0)
        ids = [p.pickup_id for p in first + second]
        self.assertEqual(len(set(ids)), 6)

    def test_snapshot(self):
        self.gs.queue_ship_input('helm', 5, False, True)
        self.gs.step(self.dt)
        snap = self.gs.get_snapshot()
        self.assertEqual(snap['tick'], 1)
        ship_msg = snap['ships'][1]
        self.assertEqual(ship_msg['lastProcessedInput'], 5)
        self.assertEqual(ship_msg['controllingPlayer'], 'helm')
        self.assertIn('modifiers', ship_msg)
        self.assertAlmostEqual(ship_msg['cannons']['right']['x'], 1075.0)
        heading = self.ship.state.rotation
        self.assertAlmostEqual(ship_msg['cannons']['right']['rotation'], heading)
        self.assertAlmostEqual(ship_msg['cannons']['left']['rotation'], heading - math.pi)
        self.assertEqual(ship_msg['cannons']['leftAngle'], 0.0)
        self.assertEqual(ship_msg['cannons']['rightAngle'], 0.0)

        deck = snap['players']['deck']
        self.assertEqual(deck['shipId'], 1)
        self.assertAlmostEqual(deck['x'], 1000.0)
        self.assertTrue(snap['players']['helm']['isControllingShip'])


if __name__ == '__main__':
    unittest.main()
