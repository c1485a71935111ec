# --- Configuration Constants ---
DEFAULT_FPS = 30
DEFAULT_RESOLUTION = (1920, 1080)
BG_COLOR = (0, 0, 0)  # BGR

# Integration step sizes
BASE_DT = 0.015
HALVORSEN_DT = 0.005  # Halvorsen is stiff, needs a finer step

# Particle buffer layout
STRIDE = 4  # x, y, z + one reserved slot
NEBULA_STRIDE = 6  # x, y, z, vx, vy, vz

# Divergence guard
ESCAPE_LIMIT = 1000.0

# Fibonacci sphere
SPHERE_RADIUS = 150.0
SPHERE_SPIN = 0.5  # rad per unit of simulated time

# Nebula physics
NEBULA_GRAVITY = 2000.0
NEBULA_GRAVITY_SOFTENING = 10.0
NEBULA_BAR_MASS = 1500.0
NEBULA_BAR_SOFTENING = 100.0
NEBULA_BAR_LENGTH = 40.0
NEBULA_BAR_SPEED = 2.0
NEBULA_DAMPING = 0.9999
NEBULA_ORBIT_SPEED = 50.0  # tangential v = ORBIT_SPEED / sqrt(r)
NEBULA_DISK_INNER = 40.0
NEBULA_DISK_WIDTH = 100.0
NEBULA_DISK_HEIGHT = 5.0  # total thickness, i.e. +-2.5
NEBULA_RIM_INNER = 120.0
NEBULA_RIM_WIDTH = 30.0
NEBULA_MIN_R2 = 20.0
NEBULA_MAX_R2 = 25000.0
NEBULA_PLANE_PULL = 2.0
NEBULA_VERTICAL_DAMPING = 0.95
NEBULA_TURBULENCE_SCALE = 20.0
NEBULA_TURBULENCE_SPEED = 2.0

# Ripple (procedural water level)
RIPPLE_SAMPLE_STEP = 10  # pixels between wave samples
RIPPLE_BACK_WAVE = (12.0, 0.015, 4.0, 2.0, 0.4)  # amplitude, freq, phase speed, phase offset, alpha
RIPPLE_FRONT_WAVE = (15.0, 0.01, 3.0, 0.0, 0.8)

# Rendering
PARTICLE_SIZE = 2.0
MIN_PARTICLE_SIZE = 0.5
MAX_PARTICLE_SIZE = 5.0
AIZAWA_SIZE_FACTOR = 0.75  # Aizawa is dense, shrink dots
DOT_ALPHA = 0.7
GLOW_ALPHA = 100 / 255
GLOW_WIDTH_FACTOR = 2.5
STAMP_BASE_SIZE = 32.0
STAMP_MIN_SIZE = 10.0
STAMP_MAX_SIZE = 256.0
STAMP_BITMAP_SIZE = 64  # picture mode bitmaps are pre-scaled to this

# View
MIN_USER_SCALE = 0.5
MAX_USER_SCALE = 5.0

# Settings defaults and ranges
DEFAULT_SATURATION = 0.8
DEFAULT_SPEED = 1.0
DEFAULT_PARTICLE_COUNT = 8000
PREVIEW_PARTICLE_COUNT = 2000
MIN_SPEED = 0.1
MAX_SPEED = 3.0
MIN_PARTICLE_COUNT = 1000
MAX_PARTICLE_COUNT = 30000
