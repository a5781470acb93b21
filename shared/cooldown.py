"""
Cannon reload tracking kept as explicit per-cannon state.
"""

from shared.config import CANNON_COOLDOWN


class CannonCooldown:
    """Reload timer for one cannon. Times are in seconds on the caller's clock."""

    __slots__ = ('base_cooldown', 'last_shot')

    def __init__(self, base_cooldown: float = CANNON_COOLDOWN):
        self.base_cooldown = base_cooldown
        self.last_shot = None

    def effective_cooldown(self, modifiers=None) -> float:
        if modifiers is None:
            return self.base_cooldown
        return self.base_cooldown * (1.0 - modifiers.fire_rate_reduction)

    def remaining(self, now: float, modifiers=None) -> float:
        if self.last_shot is None:
            return 0.0
        elapsed = now - self.last_shot
        return max(0.0, self.effective_cooldown(modifiers) - elapsed)

    def can_fire(self, now: float, modifiers=None) -> bool:
        if self.last_shot is None:
            return True
        return (now - self.last_shot) >= self.effective_cooldown(modifiers)

    def fire(self, now: float, modifiers=None) -> bool:
        """Fire if reloaded. Returns True when the shot happened."""
        if not self.can_fire(now, modifiers):
            return False
        self.last_shot = now
        return True

    def reset(self):
        self.last_shot = None
