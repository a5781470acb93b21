"""
Pose and snapshot records for networked entities.
"""

import math


class Pose:
    """Where an entity is drawn: position and heading."""

    __slots__ = ('x', 'y', 'rotation')

    def __init__(self, x: float = 0.0, y: float = 0.0, rotation: float = 0.0):
        self.x = x
        self.y = y
        self.rotation = rotation

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'rotation': self.rotation}

    def copy(self) -> 'Pose':
        return Pose(self.x, self.y, self.rotation)

    def __eq__(self, other):
        if not isinstance(other, Pose):
            return NotImplemented
        return (self.x, self.y, self.rotation) == (other.x, other.y, other.rotation)

    def __repr__(self):
        return f"Pose(x={self.x:.2f}, y={self.y:.2f}, rot={self.rotation:.3f})"


class Snapshot(Pose):
    """A pose sampled at a point in time (milliseconds)."""

    __slots__ = ('timestamp',)

    def __init__(self, x: float = 0.0, y: float = 0.0, rotation: float = 0.0,
                 timestamp: float = 0.0):
        super().__init__(x, y, rotation)
        self.timestamp = timestamp

    def to_dict(self) -> dict:
        d = super().to_dict()
        d['timestamp'] = self.timestamp
        return d

    def copy(self) -> 'Snapshot':
        return Snapshot(self.x, self.y, self.rotation, self.timestamp)

    def __eq__(self, other):
        if isinstance(other, Snapshot):
            return (super().__eq__(other)
                    and self.timestamp == other.timestamp)
        return super().__eq__(other)

    @staticmethod
    def from_dict(data: dict, timestamp: float = None) -> 'Snapshot':
        """Build from a pose message. Raises ValueError on missing or non-finite coordinates."""
        try:
            x = float(data['x'])
            y = float(data['y'])
            rotation = float(data['rotation'])
        except KeyError as e:
            raise ValueError(f"Snapshot missing field {e}") from e
        if not all(math.isfinite(v) for v in (x, y, rotation)):
            raise ValueError(f"Snapshot has non-finite coordinates: {data}")

        if timestamp is None:
            timestamp = data.get('timestamp')
        return Snapshot(x, y, rotation,
                        float(timestamp) if timestamp is not None else 0.0)

    def __repr__(self):
        return (f"Snapshot(x={self.x:.2f}, y={self.y:.2f}, "
                f"rot={self.rotation:.3f}, t={self.timestamp:.1f})")
