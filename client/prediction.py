"""
Client-side prediction: apply local helm inputs immediately for responsive
steering. Uses the SAME physics as the server to minimize mispredictions.
"""

from shared.config import MAX_PENDING_INPUTS
from shared.ship_physics import DEFAULT_DT, ShipInput, ShipState, ship_physics


class ShipPredictor:
    """
    Applies helm inputs to the local ship instantly and remembers them
    until the server confirms it has processed them.
    """

    def __init__(self, physics=ship_physics,
                 max_pending: int = MAX_PENDING_INPUTS):
        self.physics = physics
        self.max_pending = max_pending
        self.pending_inputs = []    # dicts: sequence, input, dt, predicted_state
        self.sequence = 0

    def predict(self, state: ShipState, inp: ShipInput, dt: float = DEFAULT_DT,
                modifiers=None) -> ShipState:
        """Apply one input to a state. The state passed in is not modified."""
        return self.physics.advance(state, inp, dt, modifiers)

    def record(self, state: ShipState, inp: ShipInput, dt: float = DEFAULT_DT,
               modifiers=None) -> tuple:
        """
        Predict and remember the input for reconciliation.

        Returns:
            (predicted_state, input_record)
        """
        self.sequence += 1
        predicted = self.predict(state, inp, dt, modifiers)
        record = {
            'sequence': self.sequence,
            'input': inp,
            'dt': dt,
            'predicted_state': predicted.copy(),
        }
        self.pending_inputs.append(record)

        # Drop the oldest inputs if the server stops acknowledging
        if len(self.pending_inputs) > self.max_pending:
            self.pending_inputs = self.pending_inputs[-self.max_pending:]

        return predicted, record

    def reset(self):
        self.pending_inputs = []
