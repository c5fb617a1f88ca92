# particle_pool.py

import logging
from typing import Iterator, Optional

import numpy as np

from constants import MAX_PARTICLES
from particle import Particle

logger = logging.getLogger("particle_emitter")


class ParticlePool:
    """
    Fixed-capacity ring buffer of particle slots.

    Particle state is stored as a Structure of Arrays, allocated once and never
    resized. Two cursors walk the ring: `head` is the next slot to hand out and
    `tail` is the oldest slot still in use. The slots from `tail` up to (but not
    including) `head` form the active window. One slot is always left empty so
    that a full ring (head + 1 == tail) can be told apart from an empty one
    (head == tail).

    Data Contract:
    - Inputs:
        - capacity (int): Number of slots. At most capacity - 1 are usable.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Owns the particle arrays for the lifetime of the process.
    - Invariants:
        - 0 <= head < capacity and 0 <= tail < capacity.
        - `tail` only moves past dead particles (see compact()).
        - Slots outside the active window hold stale data and are never read.
    """
    def __init__(self, capacity: int = MAX_PARTICLES):
        if capacity < 2:
            raise ValueError(f"Pool capacity must be at least 2, got {capacity}.")

        self.capacity = capacity
        self.head = 0
        self.tail = 0
        self._exhausted = False

        # --- Particle state (Structure of Arrays) ---
        self.types = np.zeros(capacity, dtype=np.int8)
        self.positions = np.zeros((capacity, 2), dtype=np.float64)
        self.velocities = np.zeros((capacity, 2), dtype=np.float64)
        self.radii = np.zeros(capacity, dtype=np.float64)
        self.colors = np.zeros((capacity, 4), dtype=np.uint8)
        self.ages = np.zeros(capacity, dtype=np.float64)
        self.alive = np.zeros(capacity, dtype=np.bool_)

        logger.info(f"ParticlePool created with {capacity} slots ({capacity - 1} usable).")

    def __len__(self):
        """Number of slots in the active window, alive or not yet reclaimed."""
        return (self.head - self.tail) % self.capacity

    def is_full(self) -> bool:
        return (self.head + 1) % self.capacity == self.tail

    def try_allocate(self) -> Optional[Particle]:
        """
        Hands out the slot at `head` and advances `head`.

        Returns None without touching any state when the ring is full. The
        caller must initialize every field of the returned particle (see
        Particle.spawn) before the next pool operation.
        """
        next_head = (self.head + 1) % self.capacity
        if next_head == self.tail:
            if not self._exhausted:
                logger.debug(f"Particle pool exhausted ({len(self)} slots in use). Dropping emissions.")
                self._exhausted = True
            return None

        particle = Particle(self, self.head)
        self.head = next_head
        self._exhausted = False
        return particle

    def compact(self) -> int:
        """
        Reclaims dead particles at the tail of the active window.

        Advances `tail` while it points at a dead particle. A dead particle
        behind a live one stays allocated until everything older has died.

        Returns:
            int: The number of slots reclaimed.
        """
        reclaimed = 0
        while self.tail != self.head and not self.alive[self.tail]:
            self.tail = (self.tail + 1) % self.capacity
            reclaimed += 1
        return reclaimed

    def active_indices(self) -> np.ndarray:
        """Slot indices of the active window, oldest first."""
        return (self.tail + np.arange(len(self))) % self.capacity

    def iterate_active(self) -> Iterator[Particle]:
        """
        Yields a handle for every slot in the active window, oldest first.

        Dead particles are included; consumers check `alive` themselves.
        Each call starts a fresh walk from the current tail.
        """
        index = self.tail
        while index != self.head:
            yield Particle(self, index)
            index = (index + 1) % self.capacity

    def alive_count(self) -> int:
        return int(np.count_nonzero(self.alive[self.active_indices()]))

    def clear(self):
        """Empties the pool. Stale slot data is left in place."""
        self.head = 0
        self.tail = 0
        self._exhausted = False
        self.alive.fill(False)
        logger.info("ParticlePool cleared.")
