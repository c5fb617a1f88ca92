# particle_system.py

import math
import logging

import numba
import numpy as np
import pygame

import constants
from emitter import Emitter
from particle import Particle, ParticleType
from particle_pool import ParticlePool

logger = logging.getLogger("particle_emitter")

# Plain integer type codes for use inside nopython code.
_WATER = int(ParticleType.WATER)
_SMOKE = int(ParticleType.SMOKE)
_FIRE = int(ParticleType.FIRE)

# --- JIT-Compiled Physics Functions ---
# Compiled by Numba and kept outside the ParticleSystem class. They operate only
# on the pool's NumPy arrays and scalar values, as required by nopython mode.

@numba.jit(nopython=True)
def _step_particles_jit(tail, head, capacity, types, positions, velocities, radii, colors, ages, alive,
                        width, height, time_step, gravity, buoyancy, smoke_expansion, smoke_fade,
                        fire_shrink, fire_fade, fire_min_radius, fire_frequency):
    """
    Advances every alive particle in the ring from tail to head by one tick.
    Particles are only ever flagged dead here, never removed.

    Returns the number of particles that died during this tick.
    """
    deaths = 0
    i = tail
    while i != head:
        if alive[i]:
            ages[i] += time_step
            kind = types[i]

            if kind == _WATER:
                positions[i, 0] += velocities[i, 0]
                # Velocity first, then position, so gravity acts this tick.
                velocities[i, 1] += gravity
                positions[i, 1] += velocities[i, 1]

            elif kind == _SMOKE:
                positions[i, 0] += velocities[i, 0]
                velocities[i, 1] -= buoyancy
                positions[i, 1] += velocities[i, 1]
                radii[i] += smoke_expansion
                if colors[i, 3] <= smoke_fade:
                    alive[i] = False
                else:
                    colors[i, 3] -= smoke_fade

            elif kind == _FIRE:
                # Age in seconds is used directly as the angle.
                positions[i, 0] += velocities[i, 0] + math.cos(ages[i] * fire_frequency)
                velocities[i, 1] -= buoyancy
                positions[i, 1] += velocities[i, 1]
                radii[i] -= fire_shrink
                if colors[i, 1] <= fire_fade:
                    alive[i] = False
                else:
                    colors[i, 1] -= fire_fade
                if radii[i] <= fire_min_radius:
                    alive[i] = False

            r = radii[i]
            x = positions[i, 0]
            y = positions[i, 1]
            if x < -r or x > width + r or y < -r or y > height + r:
                alive[i] = False

            if not alive[i]:
                deaths += 1
        i = (i + 1) % capacity
    return deaths


class ParticleSystem:
    """
    Owns the complete simulation state: the particle pool, the emitter and the
    world bounds. The frame loop drives it one tick at a time.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): The (width, height) of the simulation area.
        - capacity (int): Pool slots. Defaults to constants.MAX_PARTICLES.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Manages the lifecycle of all particle data.
    - Invariants: Within a tick, emission runs before the physics step and the
      physics step before compaction. Particles that die during a tick are
      reclaimed (or skipped) before the next draw, so they are never drawn on
      the frame they die.
    """
    def __init__(self, config: dict, rng: np.random.Generator, bounds: tuple,
                 capacity: int = constants.MAX_PARTICLES):
        self.config = config
        self.bounds = np.array(bounds, dtype=np.float64)
        self.pool = ParticlePool(capacity)

        particle_type = ParticleType.from_name(config.get('particle_type', 'WATER'))
        self.emitter = Emitter(
            rng,
            position=self.bounds / 2,
            emission_rate=config.get('emission_rate', 0),
            particle_type=particle_type,
        )

        # --- Per-tick counters for logging ---
        self.emitted_last_tick = 0
        self.deaths_last_tick = 0
        self.reclaimed_last_tick = 0

        # Reused every frame for alpha-blended drawing.
        self._layer = None

        logger.info(
            f"ParticleSystem created: bounds={tuple(bounds)}, capacity={capacity}, "
            f"emission_rate={self.emitter.emission_rate}, type={particle_type.name}."
        )

    def step(self) -> int:
        """
        Runs the physics update for every alive particle in the active window.
        The core loop is delegated to a Numba JIT-compiled function.
        """
        pool = self.pool
        self.deaths_last_tick = _step_particles_jit(
            pool.tail,
            pool.head,
            pool.capacity,
            pool.types,
            pool.positions,
            pool.velocities,
            pool.radii,
            pool.colors,
            pool.ages,
            pool.alive,
            self.bounds[0],
            self.bounds[1],
            constants.TIME_STEP,
            constants.WATER_GRAVITY,
            constants.BUOYANCY,
            constants.SMOKE_EXPANSION,
            constants.SMOKE_FADE,
            constants.FIRE_SHRINK,
            constants.FIRE_FADE,
            constants.FIRE_MIN_RADIUS,
            constants.FIRE_FLICKER_FREQUENCY,
        )
        return self.deaths_last_tick

    def compact(self) -> int:
        """Reclaims dead slots at the tail of the pool."""
        self.reclaimed_last_tick = self.pool.compact()
        return self.reclaimed_last_tick

    def update(self):
        """
        Runs one full simulation tick in a fixed order:
        1. Emit new particles at the emitter.
        2. Advance the physics of every alive particle.
        3. Compact the pool past particles that have died.
        """
        self.emitted_last_tick = self.emitter.emit(self.pool)
        self.step()
        self.compact()

    def visible_indices(self) -> np.ndarray:
        """Slot indices of alive particles in the active window, oldest first."""
        indices = self.pool.active_indices()
        return indices[self.pool.alive[indices]]

    def visible_particles(self):
        """Handles for the alive particles in the active window, oldest first."""
        return [Particle(self.pool, int(i)) for i in self.visible_indices()]

    def draw(self, screen: pygame.Surface):
        """
        Draws every alive particle as a filled circle.

        Circles are drawn onto a transparent layer which is then blitted onto
        the screen, so each particle's alpha channel is blended with the
        background. Does not modify the simulation.
        """
        size = screen.get_size()
        if self._layer is None or self._layer.get_size() != size:
            self._layer = pygame.Surface(size, pygame.SRCALPHA)
        self._layer.fill((0, 0, 0, 0))

        # Gather the visible rows once, then draw with plain Python ints.
        indices = self.visible_indices()
        positions = self.pool.positions[indices].astype(int).tolist()
        radii = self.pool.radii[indices].astype(int).tolist()
        colors = self.pool.colors[indices].tolist()

        for position, radius, color in zip(positions, radii, colors):
            pygame.draw.circle(self._layer, color, position, radius)

        screen.blit(self._layer, (0, 0))
