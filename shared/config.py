"""
Game constants and configuration.
"""

import math

# World bounds
WORLD_WIDTH = 3200
WORLD_HEIGHT = 3200

# Simulation
DEFAULT_TICK_RATE = 60       # Server ticks per second
REFERENCE_TICK_RATE = 60     # Tick rate the per-tick decay factors were tuned at

# Ship physics
SHIP_CONSTANT_SPEED = 100.0
SHIP_TURN_SPEED = 0.1                   # rad/s at full helm
SHIP_MAX_STEERING = 100.0
SHIP_STEERING_INCREMENT = 1.0
SHIP_STEERING_AUTO_CENTER_THRESHOLD = 5.0
SHIP_ANCHOR_DECELERATION_FACTOR = 0.995
SHIP_ACCELERATION_FACTOR = 0.003
SHIP_ANCHOR_ANGULAR_DAMPING = 0.995

# Small boat physics (single-player)
SMALL_BOAT_CONSTANT_SPEED = 80.0
SMALL_BOAT_TURN_SPEED = 0.18
SMALL_BOAT_MAX_STEERING = 100.0
SMALL_BOAT_STEERING_INCREMENT = 1.5
SMALL_BOAT_STEERING_AUTO_CENTER_THRESHOLD = 5.0
SMALL_BOAT_ANCHOR_DECELERATION_FACTOR = 0.99
SMALL_BOAT_ACCELERATION_FACTOR = 0.005
SMALL_BOAT_ANCHOR_ANGULAR_DAMPING = 0.99

# Player on ship
PLAYER_SPEED = 100.0
SHIP_BOUNDS_WIDTH = 178 - 45
SHIP_BOUNDS_HEIGHT = 463 - 200
SHIP_BOUNDS_OFFSET_X = 12.0
SHIP_BOUNDS_OFFSET_Y = 7.5

# Ship fittings (distance from ship origin along the bow axis)
HELM_OFFSET = 125.0
ANCHOR_OFFSET = 115.0
CANNON_OFFSET = 75.0                    # cannon mounts, abeam of the ship origin
INTERACTION_DISTANCE = 15.0

# Interpolation
INTERPOLATION_BUFFER_SIZE = 3
RENDER_DELAY_MS = 100.0

# Prediction / reconciliation
MAX_PENDING_INPUTS = 100
RECONCILE_POSITION_THRESHOLD = 5.0     # pixels
RECONCILE_ROTATION_THRESHOLD = 0.1     # radians
REMOTE_SHIP_SMOOTHING = 0.3

# Crew
MAX_PLAYERS_PER_SHIP = 4

# Cannons
CANNON_COOLDOWN = 3.0                  # seconds
CANNON_AIM_SPEED = 0.5                 # radians per second
CANNON_MAX_ANGLE = math.pi / 3         # aim limit either side of broadside
CANNON_SHOT_SPEED = 750.0              # px/sec
MAX_FIRE_RATE_REDUCTION = 0.9

# Modifier pickups
MODIFIER_SPAWN_CHANCE = 0.5
MODIFIER_SIZE = 8.0
SHIP_PICKUP_RADIUS = 50.0

# Spawn
SPAWN_EDGE_MARGIN = 25
SPAWN_EDGE_BAND = 150
