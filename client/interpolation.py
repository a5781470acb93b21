"""
Entity interpolation for rendering remote entities smoothly.
Remote entities are rendered slightly in the past,
interpolating between two buffered snapshots.
"""

import time
from collections import deque

from shared.config import INTERPOLATION_BUFFER_SIZE, RENDER_DELAY_MS
from shared.mathutil import lerp, lerp_angle
from shared.snapshot import Pose, Snapshot


def now_ms() -> float:
    """Wall-clock time in milliseconds, the timebase of snapshot timestamps."""
    return time.time() * 1000.0


class InterpolationBuffer:
    """
    Snapshot buffer for one remote entity.
    Renders at (now - render_delay) for smooth motion.
    """

    def __init__(self, buffer_size: int = INTERPOLATION_BUFFER_SIZE,
                 render_delay: float = RENDER_DELAY_MS):
        """
        Args:
            buffer_size: number of snapshots kept (oldest evicted first)
            render_delay: how far behind "now" to render, in milliseconds
        """
        self.buffer_size = buffer_size
        self.render_delay = render_delay
        self.snapshots = deque(maxlen=buffer_size)

    def add_snapshot(self, pose, timestamp: float = None):
        """
        Buffer a pose.

        Args:
            pose: Pose/Snapshot, or a dict with x, y, rotation
                  and optionally timestamp
            timestamp: sample time in ms; overrides any timestamp carried
                       by pose, defaults to now
        """
        if isinstance(pose, dict):
            snapshot = Snapshot.from_dict(pose, timestamp)
            if timestamp is None and pose.get('timestamp') is None:
                snapshot.timestamp = now_ms()
        else:
            if timestamp is None:
                timestamp = getattr(pose, 'timestamp', None)
            if timestamp is None:
                timestamp = now_ms()
            snapshot = Snapshot(pose.x, pose.y, pose.rotation, timestamp)

        self.snapshots.append(snapshot)

    def get_interpolated_pose(self, now: float = None):
        """
        Pose at (now - render_delay).

        Returns:
            None when empty, a copy of the only snapshot when there is one,
            a copy of the latest when render time is outside the buffered range,
            otherwise an interpolated Pose.
        """
        if not self.snapshots:
            return None
        if len(self.snapshots) == 1:
            return self.snapshots[0].copy()

        if now is None:
            now = now_ms()
        render_time = now - self.render_delay

        # Find two snapshots that bracket the render time
        before = None
        after = None
        for s0, s1 in zip(self.snapshots, list(self.snapshots)[1:]):
            if s0.timestamp <= render_time <= s1.timestamp:
                before = s0
                after = s1
                break

        if before is None or after is None:
            # No extrapolation: hold the latest known pose
            return self.snapshots[-1].copy()

        span = after.timestamp - before.timestamp
        t = (render_time - before.timestamp) / span if span > 0 else 1.0

        return Pose(
            lerp(before.x, after.x, t),
            lerp(before.y, after.y, t),
            lerp_angle(before.rotation, after.rotation, t),
        )

    @property
    def latest(self):
        return self.snapshots[-1] if self.snapshots else None

    def clear(self):
        self.snapshots.clear()

    def has_enough_data(self) -> bool:
        return len(self.snapshots) >= 2

    def __len__(self):
        return len(self.snapshots)


class EntityInterpolator:
    """
    One InterpolationBuffer per remote entity, created when the entity
    is first seen and dropped when it leaves.
    """

    def __init__(self, buffer_size: int = INTERPOLATION_BUFFER_SIZE,
                 render_delay: float = RENDER_DELAY_MS):
        self.buffer_size = buffer_size
        self.render_delay = render_delay
        self.buffers = {}   # entity_id -> InterpolationBuffer

    def on_update(self, entity_id, pose, timestamp: float = None):
        buf = self.buffers.get(entity_id)
        if buf is None:
            buf = InterpolationBuffer(self.buffer_size, self.render_delay)
            self.buffers[entity_id] = buf
        buf.add_snapshot(pose, timestamp)

    def remove(self, entity_id):
        """Forget an entity (despawn / disconnect)."""
        self.buffers.pop(entity_id, None)

    def clear(self):
        """Forget every entity (room change)."""
        self.buffers.clear()

    def interpolate(self, now: float = None, local_entity_id=None) -> dict:
        """
        Interpolated poses for all remote entities.

        Args:
            now: current time in ms, defaults to wall clock
            local_entity_id: skip interpolation for the local entity

        Returns:
            dict of entity_id -> Pose
        """
        if now is None:
            now = now_ms()

        result = {}
        for eid, buf in self.buffers.items():
            if eid == local_entity_id:
                continue
            pose = buf.get_interpolated_pose(now)
            if pose is not None:
                result[eid] = pose
        return result

    def __contains__(self, entity_id):
        return entity_id in self.buffers

    def __len__(self):
        return len(self.buffers)
