"""Elementwise intensity transformations applied before vectorization."""

from __future__ import annotations

from enum import Enum

import numpy as np

from ..constants import LOG_EPSILON


class Transformation(Enum):
    """Intensity remapping applied to peak intensities.

    - NONE: identity
    - SQRT: square root of max(x, 0)
    - LOG: natural log of max(x, LOG_EPSILON), always finite
    """
    NONE = 0
    SQRT = 1
    LOG = 2

    def apply(self, intensity: np.ndarray) -> np.ndarray:
        """Return transformed intensities as a new float64 array."""
        intensity = np.asarray(intensity, dtype=np.float64)
        if self is Transformation.NONE:
            return intensity.copy()
        if self is Transformation.SQRT:
            return np.sqrt(np.maximum(intensity, 0.0))
        if self is Transformation.LOG:
            return np.log(np.maximum(intensity, LOG_EPSILON))
        raise ValueError(f"Unknown transformation: {self}")
