"""
Server reconciliation: corrects client-side prediction errors
by rebasing on the authoritative server state and replaying
unacknowledged helm inputs.
"""

import math

from shared.config import (
    RECONCILE_POSITION_THRESHOLD, RECONCILE_ROTATION_THRESHOLD,
    REMOTE_SHIP_SMOOTHING
)
from shared.mathutil import lerp, wrap_angle
from shared.ship_physics import DEFAULT_DT, ShipState


class ShipReconciler:
    """
    When an authoritative ship update arrives, reconcile the locally
    predicted ship with it by replaying un-acknowledged inputs.
    Small disagreements are tolerated to avoid visible snapping.
    """

    def __init__(self, predictor,
                 position_threshold: float = RECONCILE_POSITION_THRESHOLD,
                 rotation_threshold: float = RECONCILE_ROTATION_THRESHOLD,
                 replay_dt: float = DEFAULT_DT):
        self.predictor = predictor
        self.position_threshold = position_threshold
        self.rotation_threshold = rotation_threshold
        self.replay_dt = replay_dt
        # Track prediction error for metrics
        self.last_error = 0.0
        self.reconcile_count = 0

    def reconcile(self, local_state: ShipState, server_state: ShipState,
                  last_processed_input: int, pending_inputs: list,
                  modifiers=None) -> tuple:
        """
        Correct local state using the server's authoritative ship state.

        Args:
            local_state: the client's predicted ship
            server_state: ship state from the server
            last_processed_input: highest input sequence the server applied
            pending_inputs: records from ShipPredictor.record()
            modifiers: active ShipModifiers, used when replaying

        Returns:
            (corrected_state, remaining_pending_inputs, position_error)
        """
        # Discard inputs already processed by server
        remaining = [
            rec for rec in pending_inputs
            if rec['sequence'] > last_processed_input
        ]

        dx = local_state.x - server_state.x
        dy = local_state.y - server_state.y
        position_error = math.sqrt(dx * dx + dy * dy)
        rotation_error = abs(wrap_angle(local_state.rotation - server_state.rotation))
        self.last_error = position_error

        if (position_error <= self.position_threshold
                and rotation_error <= self.rotation_threshold):
            state = local_state.copy()
            state.is_anchored = server_state.is_anchored
            return state, remaining, position_error

        # Rewind to the server's state and re-apply unprocessed inputs
        self.reconcile_count += 1
        state = server_state.copy()
        for rec in remaining:
            state = self.predictor.predict(state, rec['input'],
                                           self.replay_dt, modifiers)

        return state, remaining, position_error


def smooth_correction(current: ShipState, target: ShipState,
                      smoothing: float = REMOTE_SHIP_SMOOTHING) -> ShipState:
    """
    Ease a ship we do not control toward the server's state.
    Position is blended; heading and speed follow the server directly.
    """
    result = target.copy()
    result.x = lerp(current.x, target.x, smoothing)
    result.y = lerp(current.y, target.y, smoothing)
    return result
