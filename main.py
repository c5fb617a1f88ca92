# main.py

import copy
import json
import logging

import numpy as np
import pygame

import constants
import logger_setup
from particle_system import ParticleSystem

# Get the application's dedicated logger
logger = logging.getLogger(logger_setup.LOGGER_NAME)

DEFAULT_CONFIG = {
    "run_id": "default",
    "master_seed": None,
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "simulation": {
        "emission_rate": 0,
        "particle_type": "WATER",
        "log_throttle_ticks": 300,
    },
}

HUD_INSTRUCTIONS = [
    "UP / DOWN: change emission rate",
    "LEFT / RIGHT: change particle type",
    "Hold left mouse button: move emitter",
]


def load_config(config_path='config.json') -> dict:
    """
    Loads the JSON configuration file and fills any missing keys from
    DEFAULT_CONFIG. Nested sections are merged one level deep.
    """
    try:
        with open(config_path, 'r') as f:
            loaded = json.load(f)
    except FileNotFoundError:
        logger.error(f"Configuration file not found at {config_path}.")
        raise
    except json.JSONDecodeError:
        logger.error(f"Error decoding JSON from {config_path}.")
        raise

    config = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    log_throttle = config['simulation']['log_throttle_ticks']
    if not isinstance(log_throttle, int) or log_throttle < 1:
        logger.error(f"Invalid log_throttle_ticks in {config_path}: {log_throttle!r}.")
        raise ValueError(f"log_throttle_ticks must be a positive integer, got {log_throttle!r}.")
    return config


def handle_events(particle_system: ParticleSystem) -> bool:
    """
    Processes pending pygame events and applies them to the emitter.
    Rate and type change once per key press; holding a key does not repeat.

    Returns:
        bool: False when the window should close, True otherwise.
    """
    emitter = particle_system.emitter
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            logger.info("Quit event received.")
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                logger.info("ESC key pressed.")
                return False
            elif event.key == pygame.K_UP:
                emitter.increase_rate()
            elif event.key == pygame.K_DOWN:
                emitter.decrease_rate()
            elif event.key == pygame.K_RIGHT:
                emitter.next_type()
            elif event.key == pygame.K_LEFT:
                emitter.previous_type()

    # The emitter follows the pointer only while the primary button is held.
    if pygame.mouse.get_pressed()[0]:
        emitter.move_to(pygame.mouse.get_pos())
    return True


def hud_lines(particle_system: ParticleSystem) -> list:
    """Status text shown under the control instructions."""
    emitter = particle_system.emitter
    pool = particle_system.pool
    return HUD_INSTRUCTIONS + [
        f"Emission rate: {emitter.emission_rate}",
        f"Particle type: {emitter.current_type.name}",
        f"Particles: {pool.alive_count()} alive / {len(pool)} in pool",
    ]


def draw_hud(screen: pygame.Surface, font: pygame.font.Font, particle_system: ParticleSystem, fps: float):
    """Draws the control instructions, emitter status and frame-rate counter."""
    lines = hud_lines(particle_system)
    margin = constants.HUD_MARGIN
    line_height = constants.HUD_LINE_HEIGHT

    # Translucent panel behind the text
    panel_width = max(font.size(line)[0] for line in lines) + 2 * margin
    panel_height = len(lines) * line_height + margin
    panel = pygame.Surface((panel_width, panel_height), pygame.SRCALPHA)
    panel.fill(constants.HUD_PANEL_COLOR)
    screen.blit(panel, (margin // 2, margin // 2))

    for i, line in enumerate(lines):
        color = constants.LIGHT_GRAY if i < len(HUD_INSTRUCTIONS) else constants.WHITE
        text_surf = font.render(line, True, color)
        screen.blit(text_surf, (margin, margin + i * line_height))

    fps_surf = font.render(f"{fps:.0f} FPS", True, constants.WHITE)
    fps_rect = fps_surf.get_rect(topright=(screen.get_width() - margin, margin))
    screen.blit(fps_surf, fps_rect)


def run_simulation_loop(particle_system, screen, clock, font, log_throttle):
    """
    The main frame loop. Runs until the window is closed.
    Each frame: input, simulation tick (emit, step, compact), then drawing.
    """
    tick = 0
    running = True
    while running:
        running = handle_events(particle_system)
        if not running:
            break

        # --- Simulation ---
        particle_system.update()

        # --- Logging (throttled) ---
        if tick % log_throttle == 0:
            pool = particle_system.pool
            logger.debug(
                f"Tick={tick}, "
                f"InPool={len(pool)}, "
                f"Alive={pool.alive_count()}, "
                f"Emitted={particle_system.emitted_last_tick}, "
                f"Died={particle_system.deaths_last_tick}, "
                f"TotalEmitted={particle_system.emitter.total_emitted}, "
                f"Rate={particle_system.emitter.emission_rate}, "
                f"Type={particle_system.emitter.current_type.name}, "
                f"FPS={clock.get_fps():.1f}"
            )

        # --- Drawing ---
        screen.fill(constants.BACKGROUND_COLOR)
        particle_system.draw(screen)
        draw_hud(screen, font, particle_system, clock.get_fps())
        pygame.display.flip()

        clock.tick(constants.FPS)
        tick += 1

    logger.info(f"Frame loop finished after {tick} ticks.")


def main(config_path='config.json'):
    """
    Main function to initialize and run the particle emitter.
    """
    # --- Setup ---
    config = load_config(config_path)
    logger_setup.setup_logging(config)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    particle_system = ParticleSystem(
        config=sim_config,
        rng=rng,
        bounds=(constants.WIDTH, constants.HEIGHT)
    )

    # --- Initialization ---
    pygame.init()
    try:
        screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT))
        pygame.display.set_caption(constants.TITLE)
        clock = pygame.time.Clock()
        font = pygame.font.Font(None, constants.HUD_FONT_SIZE)

        run_simulation_loop(particle_system, screen, clock, font, sim_config['log_throttle_ticks'])
    finally:
        logger.info("Application shutting down.")
        pygame.quit()


if __name__ == "__main__":
    main()
