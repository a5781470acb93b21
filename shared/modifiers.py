"""
Ship modifiers: collectible upgrades that scale speed, turning and fire rate.
"""

from shared.config import MAX_FIRE_RATE_REDUCTION


MODIFIER_TYPES = {
    'RIOS_WINDS': {
        'id': 'rios_winds',
        'name': "Río de la Plata's Winds",
        'lore': "The winds remember the sails that once danced here.",
        'effect': 'speed',
        'bonus': 0.2,
        'rarity': 'rare',
    },
    'OLD_CAPTAINS_RUDDER': {
        'id': 'old_captains_rudder',
        'name': "Old Captain's Rudder",
        'lore': "An ancient hand guides your turns, steady but firm.",
        'effect': 'turning',
        'bonus': 0.25,
        'rarity': 'common',
    },
    'TIDEBREAKER_HARPOON': {
        'id': 'tidebreaker_harpoon',
        'name': "Tidebreaker Harpoon",
        'lore': "Forged from driftwood and lightning, it thirsts for motion.",
        'effect': 'fireRate',
        'bonus': 0.3,
        'rarity': 'rare',
    },
}

# Bonus used when an effect is active but no explicit value was collected
DEFAULT_SPEED_BONUS = 0.2
DEFAULT_TURNING_BONUS = 0.25
DEFAULT_FIRE_RATE_BONUS = 0.5


class ShipModifiers:
    """Active upgrade flags for one ship, with the bonus each one grants."""

    __slots__ = ('speed', 'turning', 'fire_rate',
                 'speed_bonus', 'turning_bonus', 'fire_rate_bonus')

    def __init__(self, speed: bool = False, turning: bool = False,
                 fire_rate: bool = False,
                 speed_bonus: float = DEFAULT_SPEED_BONUS,
                 turning_bonus: float = DEFAULT_TURNING_BONUS,
                 fire_rate_bonus: float = DEFAULT_FIRE_RATE_BONUS):
        self.speed = speed
        self.turning = turning
        self.fire_rate = fire_rate
        self.speed_bonus = speed_bonus
        self.turning_bonus = turning_bonus
        self.fire_rate_bonus = fire_rate_bonus

    @property
    def speed_multiplier(self) -> float:
        return 1.0 + self.speed_bonus if self.speed else 1.0

    @property
    def turn_multiplier(self) -> float:
        return 1.0 + self.turning_bonus if self.turning else 1.0

    @property
    def fire_rate_reduction(self) -> float:
        """Fraction of the cannon cooldown removed, capped at 90%."""
        if not self.fire_rate:
            return 0.0
        return min(self.fire_rate_bonus, MAX_FIRE_RATE_REDUCTION)

    def apply(self, modifier_type: str):
        """Activate the effect of a catalog modifier. Raises KeyError if unknown."""
        info = MODIFIER_TYPES[modifier_type]
        effect = info['effect']
        if effect == 'speed':
            self.speed = True
            self.speed_bonus = info['bonus']
        elif effect == 'turning':
            self.turning = True
            self.turning_bonus = info['bonus']
        elif effect == 'fireRate':
            self.fire_rate = True
            self.fire_rate_bonus = info['bonus']

    def copy(self) -> 'ShipModifiers':
        return ShipModifiers(self.speed, self.turning, self.fire_rate,
                             self.speed_bonus, self.turning_bonus,
                             self.fire_rate_bonus)

    def to_dict(self) -> dict:
        return {
            'speed': self.speed,
            'turning': self.turning,
            'fireRate': self.fire_rate,
            'speedBonus': self.speed_bonus,
            'turningBonus': self.turning_bonus,
            'fireRateBonus': self.fire_rate_bonus,
        }

    @staticmethod
    def from_dict(data: dict) -> 'ShipModifiers':
        return ShipModifiers(
            speed=bool(data.get('speed', False)),
            turning=bool(data.get('turning', False)),
            fire_rate=bool(data.get('fireRate', False)),
            speed_bonus=data.get('speedBonus', DEFAULT_SPEED_BONUS),
            turning_bonus=data.get('turningBonus', DEFAULT_TURNING_BONUS),
            fire_rate_bonus=data.get('fireRateBonus', DEFAULT_FIRE_RATE_BONUS),
        )
