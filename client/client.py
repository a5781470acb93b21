"""
Main game client view: consumes server messages and local input,
handles prediction, reconciliation, and interpolation.

Transport is not handled here: the caller delivers server messages to the
on_* methods and forwards the dicts returned by steer() to the server.
"""

from shared.config import (
    DEFAULT_TICK_RATE, INTERPOLATION_BUFFER_SIZE, RENDER_DELAY_MS,
    REMOTE_SHIP_SMOOTHING
)
from shared.mathutil import distance
from shared.metrics_logger import MetricsLogger
from shared.modifiers import ShipModifiers
from shared.player_physics import (
    PlayerInput, PlayerOnShipPhysics, PlayerOnShipState,
    local_to_world_position
)
from shared.ship_physics import ShipInput, ShipState
from shared.snapshot import Pose
from client.interpolation import EntityInterpolator, now_ms
from client.prediction import ShipPredictor
from client.reconciliation import ShipReconciler, smooth_correction


class GameClient:
    """
    Client-side view of one player aboard one ship.
    Predicts the ship while at the helm, reconciles with the server,
    and interpolates the other players.
    """

    def __init__(self, player_id, tick_rate: int = DEFAULT_TICK_RATE,
                 buffer_size: int = INTERPOLATION_BUFFER_SIZE,
                 render_delay: float = RENDER_DELAY_MS,
                 rotate_with_ship: bool = False,
                 metrics: MetricsLogger = None, verbose: bool = False):
        self.player_id = player_id
        self.tick_rate = tick_rate
        self.dt = 1.0 / tick_rate
        self.verbose = verbose

        # Game state
        self.ship = None                  # Local ShipState (predicted or smoothed)
        self.ship_modifiers = ShipModifiers()
        self.player = PlayerOnShipState()
        self.is_controlling_ship = False
        self.last_server_tick = 0

        # Core systems
        self.predictor = ShipPredictor()
        self.reconciler = ShipReconciler(self.predictor, replay_dt=self.dt)
        self.interpolator = EntityInterpolator(buffer_size, render_delay)
        self.walker = PlayerOnShipPhysics(rotate_with_ship=rotate_with_ship)

        # Metrics
        self.metrics = metrics

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(msg, flush=True)

    # -- local input ---------------------------------------------------------

    def set_helm(self, controlling: bool):
        """Take or leave the helm. Leaving drops unconfirmed predictions."""
        self.is_controlling_ship = controlling
        if not controlling:
            self.predictor.reset()

    def steer(self, inp: ShipInput, dt: float = None):
        """
        Predict the ship one step ahead and build the helm message.

        Returns:
            The message dict to send to the server, or None when the
            client is not at the helm or has no ship yet.
        """
        if not self.is_controlling_ship or self.ship is None:
            return None
        dt = self.dt if dt is None else dt

        self.ship, record = self.predictor.record(
            self.ship, inp, dt, self.ship_modifiers
        )
        return {
            'sequence': record['sequence'],
            'isControlling': True,
            'turnLeft': inp.turn_left,
            'turnRight': inp.turn_right,
            'anchor': self.ship.is_anchored,
        }

    def walk(self, inp: PlayerInput, dt: float = None) -> Pose:
        """Move the local player on deck and return their world pose."""
        dt = self.dt if dt is None else dt
        ship_rotation = self.ship.rotation if self.ship else 0.0
        if not self.is_controlling_ship:
            self.player = self.walker.advance(self.player, inp, ship_rotation, dt)
        return self.player_world_pose()

    def player_world_pose(self) -> Pose:
        if self.ship is None:
            return Pose(self.player.local_x, self.player.local_y,
                        self.player.last_rotation)
        x, y = local_to_world_position(self.player.local_x, self.player.local_y,
                                       self.ship.x, self.ship.y,
                                       self.ship.rotation)
        return Pose(x, y, self.player.last_rotation)

    # -- server messages -----------------------------------------------------

    def on_ship_update(self, message: dict):
        """Handle an authoritative ship message (shipMoved)."""
        server_state = ShipState.from_dict(message)
        if 'modifiers' in message:
            self.ship_modifiers = ShipModifiers.from_dict(message['modifiers'])

        if self.ship is None:
            # Local state initialized on first update to match server spawn
            self.ship = server_state
            return

        if not self.is_controlling_ship:
            self.ship = smooth_correction(self.ship, server_state,
                                          REMOTE_SHIP_SMOOTHING)
            return

        corrected, remaining, error = self.reconciler.reconcile(
            self.ship, server_state,
            message.get('lastProcessedInput', 0),
            self.predictor.pending_inputs,
            self.ship_modifiers
        )
        self.predictor.pending_inputs = remaining
        self.ship = corrected

        if error > 0.01 and self.metrics is not None:
            self.metrics.log_prediction_error(error)
        if error > self.reconciler.position_threshold:
            self._log(f"[CLIENT] Reconciled: error={error:.2f}px, "
                      f"replayed {len(remaining)} inputs")

    def on_player_update(self, player_id, pose, timestamp: float = None):
        """Buffer a pose for another player."""
        if player_id == self.player_id:
            return
        self.interpolator.on_update(player_id, pose, timestamp)

    def on_player_left(self, player_id):
        self.interpolator.remove(player_id)

    def on_room_changed(self):
        """Every remote entity is out of scope after a room change."""
        self.interpolator.clear()

    def on_snapshot(self, tick: int, snapshot: dict, ship_id,
                    timestamp: float = None):
        """Consume a full world snapshot from the server."""
        self.last_server_tick = tick
        ship_msg = snapshot.get('ships', {}).get(ship_id)
        if ship_msg is not None:
            self.on_ship_update(ship_msg)

        players = snapshot.get('players', {})
        for pid, msg in players.items():
            self.on_player_update(pid, msg, timestamp)
        for pid in list(self.interpolator.buffers):
            if pid not in players:
                self.on_player_left(pid)

    # -- rendering hooks -----------------------------------------------------

    def remote_poses(self, now: float = None) -> dict:
        """Interpolated poses of the other players."""
        if now is None:
            now = now_ms()
        poses = self.interpolator.interpolate(now, self.player_id)

        if self.metrics is not None:
            for eid, pose in poses.items():
                latest = self.interpolator.buffers[eid].latest
                self.metrics.log_interpolation_lag(
                    eid, distance(pose.x, pose.y, latest.x, latest.y)
                )
        return poses

    def get_metrics_display(self) -> dict:
        """Get metrics dict for HUD display."""
        metrics = {}
        metrics['Tick'] = str(self.last_server_tick)
        metrics['Pending'] = str(len(self.predictor.pending_inputs))
        metrics['Reconciles'] = str(self.reconciler.reconcile_count)
        metrics['Error'] = f"{self.reconciler.last_error:.1f} px"
        metrics['Remote'] = str(len(self.interpolator))
        if self.ship is not None:
            metrics['Speed'] = f"{self.ship.current_speed:.1f}"
            metrics['Helm'] = f"{self.ship.steering_direction:+.0f}"
            metrics['Anchor'] = 'down' if self.ship.is_anchored else 'up'
        return metrics
