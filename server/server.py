"""
Main simulation server: authoritative, tick-based.

Handles:
- Game simulation at a fixed tick rate
- Snapshot delivery to subscribed listeners (the transport layer)
- Tick timing and ship metrics
"""

import random
import time

from shared.config import DEFAULT_TICK_RATE
from shared.metrics_logger import MetricsLogger
from shared.player_physics import PlayerInput
from server.game_state import GameState


class GameServer:
    """
    Authoritative simulation server.
    Runs a fixed-timestep simulation loop over the game state and hands
    every tick's snapshot to its listeners.
    """

    def __init__(self, tick_rate: int = DEFAULT_TICK_RATE,
                 game_state: GameState = None, verbose: bool = True,
                 metrics_dir: str = 'analysis/logs',
                 sample_interval: int = 10):
        self.tick_rate = tick_rate
        self.dt = 1.0 / tick_rate
        self.running = False
        self.verbose = verbose
        self.sample_interval = sample_interval

        # Core systems
        self.game_state = game_state or GameState()
        self.metrics = MetricsLogger(metrics_dir, verbose=verbose)
        self.listeners = []

        # Statistics
        self.current_tick = 0
        self.collected_total = 0

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(msg, flush=True)

    def subscribe(self, callback):
        """Register callback(tick, snapshot) to receive every broadcast."""
        self.listeners.append(callback)

    def unsubscribe(self, callback):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def simulate_tick(self):
        """Run one simulation step and record how long it took."""
        tick_start = time.perf_counter()

        collected = self.game_state.step(self.dt)
        for ship_id, pickup in collected:
            self.collected_total += 1
            self._log(f"[SERVER] Ship {ship_id} collected "
                      f"{pickup.modifier_type} at tick {self.current_tick}")

        if self.sample_interval and self.current_tick % self.sample_interval == 0:
            for sid, ship in self.game_state.ships.items():
                self.metrics.log_ship_sample(self.current_tick, sid, ship.state)

        tick_duration = (time.perf_counter() - tick_start) * 1000.0
        self.metrics.log_tick_time(self.current_tick, tick_duration)
        return collected

    def broadcast(self):
        """Hand the current world state to every listener."""
        snapshot = self.game_state.get_snapshot()
        for callback in list(self.listeners):
            callback(self.current_tick, snapshot)
        return snapshot

    def step(self):
        """One full server tick: simulate, broadcast, advance the counter."""
        self.simulate_tick()
        self.broadcast()
        self.current_tick += 1

    def run(self, duration: float = None, max_ticks: int = None):
        """
        Main server loop with fixed timestep.

        Args:
            duration: stop after this many wall-clock seconds
            max_ticks: stop after this many ticks
        """
        self.running = True
        self._log(f"[SERVER] Started @ {self.tick_rate} Hz (dt={self.dt:.4f}s)")

        start_time = time.perf_counter()
        next_tick_time = start_time
        last_stats_time = start_time
        stats_interval = 5.0  # Print stats every 5 seconds

        try:
            while self.running:
                now = time.perf_counter()

                if duration is not None and now - start_time >= duration:
                    break

                # Advance simulation at fixed rate, catching up if behind
                while now >= next_tick_time and self.running:
                    self.step()
                    next_tick_time += self.dt
                    if max_ticks is not None and self.current_tick >= max_ticks:
                        self.running = False

                # Periodic stats
                if now - last_stats_time >= stats_interval:
                    self._log(f"[SERVER] Tick {self.current_tick} | "
                              f"Ships: {len(self.game_state.ships)} | "
                              f"Players: {len(self.game_state.players)} | "
                              f"Pickups collected: {self.collected_total}")
                    last_stats_time = now

                # Sleep briefly to avoid busy-wait
                sleep_time = next_tick_time - time.perf_counter()
                if sleep_time > 0.001:
                    time.sleep(sleep_time * 0.8)
                elif sleep_time > 0:
                    time.sleep(0.0001)

        except KeyboardInterrupt:
            self._log("\n[SERVER] Shutting down...")
        finally:
            self.running = False

    def stop(self):
        self.running = False

    def save_metrics(self, filename: str = 'server_metrics.json'):
        path = self.metrics.save(filename)
        summary = self.metrics.get_summary()
        if summary:
            self._log(f"[SERVER] Metrics summary: {summary}")
        return path


def populate_demo(game_state: GameState, ships: int, crew: int):
    """Create ships with crews; the first crew member of each takes the helm."""
    for s in range(1, ships + 1):
        ship = game_state.add_ship(s)
        game_state.set_anchor(s, False)
        game_state.spawn_modifiers(s)
        for c in range(crew):
            pid = s * 100 + c
            game_state.add_player(pid, ship.ship_id)
        game_state.take_helm(s * 100)


def make_demo_driver(game_state: GameState, rng: random.Random, dt: float):
    """Listener that feeds random helm, walking and gunnery inputs every tick."""
    sequences = {}

    def drive(tick, snapshot):
        for pid, player in list(game_state.players.items()):
            if player.is_controlling_ship:
                seq = sequences.get(pid, 0) + 1
                sequences[pid] = seq
                roll = rng.random()
                game_state.queue_ship_input(pid, seq, roll < 0.3, roll > 0.7)
            else:
                game_state.apply_player_input(pid, PlayerInput(
                    up=rng.random() < 0.5, down=rng.random() < 0.2,
                    left=rng.random() < 0.3, right=rng.random() < 0.3
                ), dt)
                side = 'left' if rng.random() < 0.5 else 'right'
                game_state.aim_cannon(pid, side, rng.random() < 0.5,
                                      rng.random() < 0.5, dt)
                game_state.fire_cannon(pid, side, tick * dt)

    return drive


def main():
    """Entry point for running a headless simulation."""
    import argparse
    parser = argparse.ArgumentParser(description='Ship Combat Simulation Server')
    parser.add_argument('--tick-rate', type=int, default=DEFAULT_TICK_RATE,
                        help='Server tick rate (Hz)')
    parser.add_argument('--duration', type=float, default=10.0,
                        help='Seconds to run')
    parser.add_argument('--ships', type=int, default=2,
                        help='Number of demo ships')
    parser.add_argument('--crew', type=int, default=2,
                        help='Players per demo ship')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for spawns and demo inputs')
    parser.add_argument('--metrics-dir', default='analysis/logs',
                        help='Directory for the metrics JSON')
    args = parser.parse_args()

    rng = random.Random(args.seed)
    game_state = GameState(rng=rng)
    populate_demo(game_state, args.ships, args.crew)

    server = GameServer(tick_rate=args.tick_rate, game_state=game_state,
                        metrics_dir=args.metrics_dir)
    server.subscribe(make_demo_driver(game_state, rng, server.dt))
    try:
        server.run(duration=args.duration)
    finally:
        server.save_metrics()


if __name__ == '__main__':
    main()
