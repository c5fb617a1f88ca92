import numpy as np
import pygame
import pytest

import particle_system
from constants import TIME_STEP
from particle import ParticleType
from particle_system import ParticleSystem


def _place(system, particle_type, position, velocity=(0.0, 0.0)):
    particle = system.pool.try_allocate()
    particle.spawn(particle_type, position, velocity)
    return particle


def test_water_falls_under_gravity(system):
    particle = _place(system, ParticleType.WATER, (400.0, 225.0))
    system.step()

    assert particle.velocity[1] == pytest.approx(0.2)
    assert particle.position[1] == pytest.approx(225.2)
    assert particle.position[0] == pytest.approx(400.0)
    assert particle.age == pytest.approx(TIME_STEP)
    assert particle.alive


def test_smoke_fades_by_four_until_it_dies(system):
    particle = _place(system, ParticleType.SMOKE, (400.0, 225.0))

    alpha = particle.color[3]
    steps = 0
    while particle.alive:
        system.step()
        steps += 1
        if particle.alive:
            assert particle.color[3] == alpha - 4
            alpha = particle.color[3]
            assert alpha > 0

    # 255 -> 3 takes 63 ticks, the next tick kills it.
    assert steps == 64
    assert particle.color[3] == 3
    assert particle.radius == pytest.approx(7.0 + 0.5 * 64)


def test_smoke_rises(system):
    particle = _place(system, ParticleType.SMOKE, (400.0, 225.0))
    system.step()
    assert particle.velocity[1] == pytest.approx(-0.05)
    assert particle.position[1] == pytest.approx(224.95)


def test_fire_dies_when_radius_shrinks_away(system):
    particle = _place(system, ParticleType.FIRE, (400.0, 225.0))
    for _ in range(66):
        system.step()
    assert particle.alive
    assert particle.radius == pytest.approx(0.1)

    system.step()
    assert not particle.alive
    # Green was still well above the floor.
    assert particle.color[1] == 249 - 3 * 67


def test_fire_dies_when_green_runs_out(system):
    particle = _place(system, ParticleType.FIRE, (400.0, 225.0))
    particle.color = (253, 9, 0, 255)

    system.step()
    system.step()
    assert particle.alive
    assert particle.color[1] == 3

    system.step()
    assert not particle.alive
    assert particle.radius > 0.02


def test_fire_flickers_sideways(system):
    particle = _place(system, ParticleType.FIRE, (400.0, 225.0))
    system.step()
    expected = 400.0 + np.cos(TIME_STEP * 215.0)
    assert particle.position[0] == pytest.approx(expected)


def test_out_of_bounds_particle_dies_and_is_not_drawn(system):
    leaving = _place(system, ParticleType.WATER, (400.0, 449.0), (0.0, 10.0))
    staying = _place(system, ParticleType.WATER, (100.0, 100.0))

    deaths = system.step()
    system.compact()

    assert deaths == 1
    assert not leaving.alive
    assert staying.alive
    assert [p.index for p in system.visible_particles()] == [staying.index]


def test_edge_margin_is_radius(system):
    # Just inside the expanded bounds: x = -radius exactly is still inside.
    particle = _place(system, ParticleType.WATER, (-5.0, 100.0))
    particle.velocity = (0.0, -0.2)
    system.step()
    assert particle.alive


def test_dead_particles_are_not_simulated_again(system):
    particle = _place(system, ParticleType.WATER, (400.0, 225.0), (1.0, 0.0))
    blocker = _place(system, ParticleType.WATER, (10.0, 10.0))
    particle.alive = False
    system.step()
    assert particle.position[0] == 400.0
    assert particle.age == 0.0
    assert blocker.age == pytest.approx(TIME_STEP)


def test_update_simulates_new_particles_in_the_same_frame(rng):
    system = ParticleSystem(config={'emission_rate': 2}, rng=rng, bounds=(800, 450))
    system.update()

    assert system.emitted_last_tick == 3
    particles = list(system.pool.iterate_active())
    assert len(particles) == 3
    for particle in particles:
        assert particle.age == pytest.approx(TIME_STEP)


def test_compaction_keeps_pool_from_filling(rng):
    system = ParticleSystem(config={'emission_rate': 4, 'particle_type': 'smoke'},
                            rng=rng, bounds=(800, 450), capacity=200)
    # Smoke lives 64 ticks at most, so 5 per tick overflows 199 slots.
    # Compaction frees the oldest slots and emission resumes.
    for _ in range(300):
        system.update()
    assert system.emitter.total_emitted > 199
    assert len(system.pool) <= 199


def test_config_sets_initial_emitter_state(rng):
    system = ParticleSystem(config={'emission_rate': -3, 'particle_type': 'fire'},
                            rng=rng, bounds=(640, 480))
    assert system.emitter.emission_rate == -3
    assert system.emitter.current_type == ParticleType.FIRE
    assert np.array_equal(system.emitter.position, [320.0, 240.0])


def test_draw_renders_only_alive_particles(system):
    alive = _place(system, ParticleType.WATER, (50.0, 50.0))
    dead = _place(system, ParticleType.FIRE, (150.0, 50.0))
    dead.alive = False

    screen = pygame.Surface((800, 450))
    screen.fill((0, 0, 0))
    system.draw(screen)

    assert tuple(screen.get_at((50, 50)))[:3] == alive.color[:3]
    assert tuple(screen.get_at((150, 50)))[:3] == (0, 0, 0)


def test_draw_does_not_modify_state(system):
    particle = _place(system, ParticleType.SMOKE, (60.0, 60.0))
    before = (particle.position.copy(), particle.radius, particle.color, particle.age)
    system.draw(pygame.Surface((800, 450)))
    assert np.array_equal(before[0], particle.position)
    assert before[1:] == (particle.radius, particle.color, particle.age)


def test_draw_reads_pool_arrays_without_particle_handles(system, monkeypatch):
    for i in range(50):
        _place(system, ParticleType.SMOKE, (20.0 + 10 * i, 200.0))

    def no_handles(*args, **kwargs):
        raise AssertionError("draw should not build Particle handles")

    monkeypatch.setattr(particle_system, "Particle", no_handles)
    screen = pygame.Surface((800, 450))
    screen.fill((0, 0, 0))
    system.draw(screen)

    assert tuple(screen.get_at((20, 200)))[:3] == (130, 130, 130)
    assert tuple(screen.get_at((510, 200)))[:3] == (130, 130, 130)


def test_visible_indices_follow_ring_order_across_wrap(rng):
    system = ParticleSystem(config={}, rng=rng, bounds=(800, 450), capacity=4)
    first = _place(system, ParticleType.WATER, (10.0, 10.0))
    _place(system, ParticleType.WATER, (20.0, 10.0))
    _place(system, ParticleType.WATER, (30.0, 10.0))
    first.alive = False
    system.compact()
    wrapped = _place(system, ParticleType.WATER, (40.0, 10.0))

    assert wrapped.index == 3
    assert list(system.visible_indices()) == [1, 2, 3]
    assert [p.index for p in system.visible_particles()] == [1, 2, 3]
