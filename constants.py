# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework.
These are not expected to change between runs.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions
WIDTH = 800  # Pixels
HEIGHT = 450  # Pixels

# Framerate
FPS = 60  # Frames per second
TIME_STEP = 1.0 / FPS  # Seconds added to a particle's age every tick

# Window Title
TITLE = "Particle Emitter"

# Colors (RGBA)
BACKGROUND_COLOR = (0, 0, 0)
WHITE = (255, 255, 255, 255)
LIGHT_GRAY = (200, 200, 200, 255)
BLUE = (0, 121, 241, 255)
GRAY = (130, 130, 130, 255)
YELLOW = (253, 249, 0, 255)
HUD_PANEL_COLOR = (30, 30, 30, 180)

# Particle pool
MAX_PARTICLES = 3000  # Ring buffer slots. One is always kept empty.

# Emission
MAX_EMISSION_SPEED = 2.0  # Pixels per tick
FIRE_SPEED_DIVISOR = 10.0  # Fire starts slow

# Physics (per tick)
WATER_GRAVITY = 0.2
BUOYANCY = 0.05
SMOKE_EXPANSION = 0.5
SMOKE_FADE = 4  # Alpha lost per tick
FIRE_SHRINK = 0.15
FIRE_FADE = 3  # Green lost per tick
FIRE_MIN_RADIUS = 0.02
FIRE_FLICKER_FREQUENCY = 215.0  # Radians per second of age

# HUD
HUD_FONT_SIZE = 20
HUD_LINE_HEIGHT = 22
HUD_MARGIN = 10
