from __future__ import annotations

# Window
WINDOW_WIDTH = 700
WINDOW_HEIGHT = 700
FPS_CAP = 60  # 0 = uncapped

# App
APP_VERSION = "0.3.0"

# Rasterizer
DEFAULT_SUPERSAMPLE = 2  # samples per axis (S); S*S slots per pixel
CLEAR_COLOR = (0.0, 0.0, 0.0, 1.0)
WIREFRAME_COLOR = (1.0, 1.0, 1.0, 1.0)
DEFAULT_PERSPECTIVE_CORRECT = False

# Depth-buffer remap z' = z * f1 + f2.
# Fixed range, deliberately independent of the projection's near/far.
DEPTH_NEAR = 0.1
DEPTH_FAR = 100.0

# Camera
FOV_DEG = 45.0
ASPECT = 1.0
NEAR = 0.1
FAR = 50.0
TRIANGLE_EYE = (0.0, 0.0, 5.0)
MODEL_EYE = (0.0, 0.0, 10.0)
MODEL_AXIS = (0.0, 1.0, 0.0)

# Controls
DELTA_ANGLE = 1.0  # degrees per key press (A/D)

# Shading (Phong), all positions in view space
AMBIENT_INTENSITY = (10.0, 10.0, 10.0)
KA = (0.005, 0.005, 0.005)
KS = (0.7937, 0.7937, 0.7937)
SHININESS = 150.0
LIGHTS = (
    ((20.0, 20.0, 20.0), (500.0, 500.0, 500.0)),
    ((-20.0, 20.0, 0.0), (500.0, 500.0, 500.0)),
)
MODEL_COLOR = (148.0 / 255.0, 121.0 / 255.0, 92.0 / 255.0)

# Texture sampler: returned for neighbours outside the image
SENTINEL_COLOR = (1.0, 0.0, 0.0)

# CLI defaults
DEFAULT_SCENE = "colored"
DEFAULT_SHADER = "phong"
