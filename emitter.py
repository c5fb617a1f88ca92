# emitter.py

import logging
import math

import numpy as np

from constants import FIRE_SPEED_DIVISOR, HEIGHT, MAX_EMISSION_SPEED, WIDTH
from particle import ParticleType
from particle_pool import ParticlePool

logger = logging.getLogger("particle_emitter")

# Upper bound (exclusive) for the integer drawn by throttled emission.
_THROTTLE_DRAW_LIMIT = 2**31 - 1


class Emitter:
    """
    Decides how many particles to create each frame and with what initial state.

    A single signed integer, `emission_rate`, controls both slow and fast
    emission:
    - rate < 0: one particle with probability 1/|rate| per frame.
    - rate >= 0: rate + 1 particles every frame.

    Data Contract:
    - Inputs:
        - rng (np.random.Generator): The master seeded random number generator.
        - position (tuple): Starting emitter position. Defaults to screen centre.
        - emission_rate (int): Starting rate. Not clamped.
        - particle_type (ParticleType): Type given to new particles.
    - Outputs: None
    - Side Effects: Writes freshly emitted particles into a ParticlePool.
    """
    def __init__(self, rng: np.random.Generator, position=(WIDTH / 2, HEIGHT / 2),
                 emission_rate: int = 0, particle_type: ParticleType = ParticleType.WATER):
        self.rng = rng
        self.position = np.array(position, dtype=np.float64)
        self.emission_rate = int(emission_rate)
        self.current_type = ParticleType(particle_type)
        self.total_emitted = 0

    def increase_rate(self):
        self.emission_rate += 1
        logger.info(f"Emission rate increased to {self.emission_rate}.")

    def decrease_rate(self):
        self.emission_rate -= 1
        logger.info(f"Emission rate decreased to {self.emission_rate}.")

    def next_type(self):
        self.current_type = self.current_type.next()
        logger.info(f"Particle type set to {self.current_type.name}.")

    def previous_type(self):
        self.current_type = self.current_type.previous()
        logger.info(f"Particle type set to {self.current_type.name}.")

    def move_to(self, position):
        self.position[:] = position

    def particles_this_frame(self) -> int:
        """
        How many particles to request this frame, consuming one random draw
        when the rate is negative.
        """
        if self.emission_rate < 0:
            draw = int(self.rng.integers(0, _THROTTLE_DRAW_LIMIT))
            return 1 if draw % -self.emission_rate == 0 else 0
        return self.emission_rate + 1

    def emit(self, pool: ParticlePool) -> int:
        """
        Emits this frame's particles into the pool.

        A full pool silently drops the remaining emissions for the frame.

        Returns:
            int: The number of particles actually emitted.
        """
        requested = self.particles_this_frame()
        emitted = 0
        for _ in range(requested):
            particle = pool.try_allocate()
            if particle is None:
                break
            particle.spawn(self.current_type, self.position, self._random_velocity())
            emitted += 1

        self.total_emitted += emitted
        return emitted

    def _random_velocity(self) -> tuple:
        """Uniform speed in [0, MAX_EMISSION_SPEED) along a uniform direction."""
        speed = self.rng.uniform(0.0, MAX_EMISSION_SPEED)
        if self.current_type == ParticleType.FIRE:
            speed /= FIRE_SPEED_DIVISOR
        angle = math.radians(self.rng.uniform(0.0, 360.0))
        return (speed * math.cos(angle), speed * math.sin(angle))
