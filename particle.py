# particle.py

from enum import IntEnum

import numpy as np

from constants import BLUE, GRAY, YELLOW


class ParticleType(IntEnum):
    """
    The three hardcoded particle kinds. The integer values double as the
    type codes stored in the pool's type array.
    """
    WATER = 0
    SMOKE = 1
    FIRE = 2

    def next(self) -> "ParticleType":
        return ParticleType((self + 1) % len(ParticleType))

    def previous(self) -> "ParticleType":
        # Python's modulo stays non-negative, so WATER wraps to FIRE.
        return ParticleType((self - 1) % len(ParticleType))

    @classmethod
    def from_name(cls, name: str) -> "ParticleType":
        """Looks up a type by case-insensitive name, e.g. from config.json."""
        try:
            return cls[name.upper()]
        except KeyError:
            valid = ", ".join(t.name for t in cls)
            raise ValueError(f"Unknown particle type '{name}'. Expected one of: {valid}.") from None


# Emission style per type: (initial radius in pixels, initial RGBA color).
PARTICLE_STYLES = {
    ParticleType.WATER: (5.0, BLUE),
    ParticleType.SMOKE: (7.0, GRAY),
    ParticleType.FIRE: (10.0, YELLOW),
}


class Particle:
    """
    A handle onto one slot of a ParticlePool.

    The pool stores particle state as a Structure of Arrays. A Particle does
    not own any data itself: every attribute reads from and writes to the
    pool's arrays at `index`, so the handle stays valid only while its slot is
    inside the pool's active window.

    Data Contract:
    - Inputs:
        - pool (ParticlePool): The pool that owns the slot.
        - index (int): The slot index in [0, pool.capacity).
    - Invariants:
        - `type` is not changed after emission.
        - `position` and `velocity` are writable views of shape (2,).
    """
    __slots__ = ("_pool", "index")

    def __init__(self, pool, index: int):
        self._pool = pool
        self.index = index

    @property
    def type(self) -> ParticleType:
        return ParticleType(int(self._pool.types[self.index]))

    @type.setter
    def type(self, value):
        self._pool.types[self.index] = int(value)

    @property
    def position(self) -> np.ndarray:
        return self._pool.positions[self.index]

    @position.setter
    def position(self, value):
        self._pool.positions[self.index] = value

    @property
    def velocity(self) -> np.ndarray:
        return self._pool.velocities[self.index]

    @velocity.setter
    def velocity(self, value):
        self._pool.velocities[self.index] = value

    @property
    def radius(self) -> float:
        return float(self._pool.radii[self.index])

    @radius.setter
    def radius(self, value):
        self._pool.radii[self.index] = value

    @property
    def color(self) -> tuple:
        """RGBA color as a tuple of four ints in [0, 255]."""
        return tuple(int(c) for c in self._pool.colors[self.index])

    @color.setter
    def color(self, value):
        self._pool.colors[self.index] = value

    @property
    def age(self) -> float:
        return float(self._pool.ages[self.index])

    @age.setter
    def age(self, value):
        self._pool.ages[self.index] = value

    @property
    def alive(self) -> bool:
        return bool(self._pool.alive[self.index])

    @alive.setter
    def alive(self, value):
        self._pool.alive[self.index] = bool(value)

    def spawn(self, particle_type: ParticleType, position, velocity):
        """
        Fully initializes the slot for a freshly emitted particle.
        Radius and color come from the type's emission style.
        """
        radius, color = PARTICLE_STYLES[particle_type]
        self.type = particle_type
        self.position = position
        self.velocity = velocity
        self.radius = radius
        self.color = color
        self.age = 0.0
        self.alive = True

    def __repr__(self):
        x, y = self.position
        vx, vy = self.velocity
        return (
            f"Particle(index={self.index}, type={self.type.name}, pos=({x:.2f}, {y:.2f}), "
            f"vel=({vx:.2f}, {vy:.2f}), radius={self.radius:.2f}, color={self.color}, "
            f"age={self.age:.3f}, alive={self.alive})"
        )
