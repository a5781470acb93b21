"""
Vector and angle helpers shared by every physics model.
"""

import math

TWO_PI = 2.0 * math.pi


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def normalize(x: float, y: float) -> tuple:
    """Unit vector in the direction of (x, y); the zero vector stays zero."""
    length = math.sqrt(x * x + y * y)
    if length == 0:
        return (0.0, 0.0)
    return (x / length, y / length)


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into (-pi, pi]."""
    wrapped = math.fmod(angle + math.pi, TWO_PI)
    if wrapped <= 0.0:
        wrapped += TWO_PI
    result = wrapped - math.pi
    # fmod can leave a residue too small to survive the subtraction
    if result <= -math.pi:
        return math.pi
    return result


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def lerp_angle(start: float, end: float, t: float) -> float:
    """
    Interpolate between two angles along the shortest arc.

    The difference is wrapped into (-pi, pi] before scaling, so 3.0 -> -3.0
    passes through pi rather than through 0.
    """
    diff = wrap_angle(end - start)
    return wrap_angle(start + diff * t)


def rotate(x: float, y: float, angle: float) -> tuple:
    """Rotate (x, y) by angle radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    dx = x2 - x1
    dy = y2 - y1
    return math.sqrt(dx * dx + dy * dy)
