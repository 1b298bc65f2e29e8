"""Numerical constants and default settings for spectral similarity search.

This module collects the fixed values shared by the vectorization, comparison
and search modules so that Numba kernels and Python code agree on them.

Key Features
------------
- LOG_EPSILON floor for the LOG intensity transformation (never -inf)
- MIN_SIMILARITY returned for degenerate comparisons
- Default search settings (precursor tolerance, bin geometry, peak picking)
"""

# =============================================================================
# Numerical Floors
# =============================================================================

# Intensities are clamped to this value before taking the natural log.
# ln(1e-6) = -13.8155..., so the LOG transform is always finite.
LOG_EPSILON = 1e-6

# Similarity assigned to degenerate comparisons (empty peak list, zero norm,
# zero variance, fewer than 2 non-zero bins for correlation).
MIN_SIMILARITY = 0.0

# Minimum number of non-zero entries a vector needs for correlation scores
MIN_CORRELATION_POINTS = 2

# =============================================================================
# Default Search Settings
# =============================================================================

# Precursor tolerance (absolute, m/z units)
DEFAULT_TOL_MZ = 1.0

# Highest peaks retained per query spectrum
DEFAULT_PICK_COUNT = 20

# Minimum similarity for a spectrum-spectrum match
DEFAULT_THRESH_SCORE = 0.5

# Bin geometry (m/z units). Also used as the peak matching tolerance.
DEFAULT_BIN_WIDTH = 1.0
DEFAULT_BIN_SHIFT = 0.0

# Profile kernel base width (m/z units)
DEFAULT_BASE_WIDTH = 1.0

# Cross-correlation lag half-width (bins)
DEFAULT_XCORR_OFFSET = 75
