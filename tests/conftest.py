import os

# Keep pygame headless for every test.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from particle_pool import ParticlePool
from particle_system import ParticleSystem


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def pool():
    return ParticlePool()


@pytest.fixture
def system(rng):
    return ParticleSystem(config={}, rng=rng, bounds=(800, 450))
