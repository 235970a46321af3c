# Engine settings
import numpy as np

# --- Engine Parameters ---
ENGINE_DEFAULTS = {
    # Worker threads per filter call (clamped to [min_threads, min(max_threads, rows)])
    "default_threads": 4,
    "min_threads": 1,
    "max_threads": 32,

    # Gaussian blur
    "default_kernel_size": 3,
    "default_sigma": 1.0, # Substituted when a caller passes sigma <= 0

    # Brightness delta is accepted in [-limit, +limit]
    "brightness_limit": 255,

    # Upper bound for resize targets (enforced by the session, not the filter)
    "max_resize_dimension": 10000,

    # Matrix preview size used by ImageSession.preview_matrix
    "preview_rows": 8,
    "preview_cols": 12,
}

# --- Edge Detection ---
# Rec. 601 luma weights applied to (R, G, B) before the Sobel pass
LUMINANCE_WEIGHTS = (0.299, 0.587, 0.114)

SOBEL_KERNELS = {
    "x": np.array([
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1]
    ], dtype=np.float64),
    "y": np.array([
        [1, 2, 1],
        [0, 0, 0],
        [-1, -2, -1]
    ], dtype=np.float64),
}

# --- Codec ---
CODEC_DEFAULTS = {
    "default_format": "PNG",
    "png_compression": 6, # Typical default
}

# --- Logging ---
LOGGING_LEVEL = "INFO" # Options: DEBUG, INFO, WARNING, ERROR
