"""Vectorization strategies turning peak lists into comparable vectors.

A vectorization is prepared once with the query peaks and then asked for a
(query_vector, candidate_vector) pair per candidate. Both vectors always
have equal length, whatever the peak counts of the two spectra.

Variants
--------
- PeakMatching: no binning, nearest-peak pairing within a tolerance
- DirectBinning: fixed-width bins, intensity summed per bin
- Profiling: fixed-width bins, each peak spread by a symmetric kernel

Buffers held between `prepare()` and `cleanup()` belong to the current query
only. `cleanup()` must run before the instance is prepared for another query
and is safe to call on a never-prepared instance.

Examples
--------
>>> vect = DirectBinning(bin_width=1.0, bin_shift=0.0)
>>> vect.prepare(np.array([100.2, 200.4]), np.array([50.0, 80.0]))
>>> query_vec, cand_vec = vect.vectorize(np.array([100.3]), np.array([10.0]))
>>> len(query_vec) == len(cand_vec)
True
>>> vect.cleanup()
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Tuple

import numpy as np

from .kernels import (
    PROFILE_GAUSSIAN,
    PROFILE_PIECEWISE_LINEAR,
    bin_peaks,
    densify_pair,
    match_peaks,
    profile_peaks,
)


class ProfileShape(IntEnum):
    """Kernel shape used by the Profiling vectorization."""
    PIECEWISE_LINEAR = PROFILE_PIECEWISE_LINEAR
    GAUSSIAN = PROFILE_GAUSSIAN


def _sorted_peaks(mz: np.ndarray, intensity: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    mz = np.ascontiguousarray(mz, dtype=np.float64)
    intensity = np.ascontiguousarray(intensity, dtype=np.float64)
    order = np.argsort(mz, kind="stable")
    return mz[order], intensity[order]


class Vectorization:
    """Base class for vectorization strategies."""

    def prepare(self, mz: np.ndarray, intensity: np.ndarray) -> None:
        raise NotImplementedError

    def vectorize(self, mz: np.ndarray, intensity: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def cleanup(self) -> None:
        raise NotImplementedError

    @property
    def is_prepared(self) -> bool:
        raise NotImplementedError

    def _require_prepared(self):
        if not self.is_prepared:
            raise RuntimeError(f"{type(self).__name__}.vectorize() called before prepare()")


class PeakMatching(Vectorization):
    """Discrete peaks paired by nearest m/z within `tolerance`."""

    def __init__(self, tolerance: float):
        self.tolerance = tolerance
        self._query_mz: Optional[np.ndarray] = None
        self._query_intensity: Optional[np.ndarray] = None

    def prepare(self, mz, intensity):
        self._query_mz, self._query_intensity = _sorted_peaks(mz, intensity)

    def vectorize(self, mz, intensity):
        self._require_prepared()
        cand_mz, cand_intensity = _sorted_peaks(mz, intensity)
        return match_peaks(
            self._query_mz, self._query_intensity,
            cand_mz, cand_intensity,
            self.tolerance,
        )

    def cleanup(self):
        self._query_mz = None
        self._query_intensity = None

    @property
    def is_prepared(self):
        return self._query_mz is not None

    def __repr__(self):
        return f"PeakMatching(tolerance={self.tolerance})"


class DirectBinning(Vectorization):
    """Fixed-width bins; bin index = floor((mz - bin_shift) / bin_width)."""

    def __init__(self, bin_width: float, bin_shift: float = 0.0):
        self.bin_width = bin_width
        self.bin_shift = bin_shift
        self._query_bins: Optional[np.ndarray] = None
        self._query_values: Optional[np.ndarray] = None

    def _bin(self, mz: np.ndarray, intensity: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        mz = np.ascontiguousarray(mz, dtype=np.float64)
        intensity = np.ascontiguousarray(intensity, dtype=np.float64)
        return bin_peaks(mz, intensity, self.bin_width, self.bin_shift)

    def prepare(self, mz, intensity):
        self._query_bins, self._query_values = self._bin(mz, intensity)

    def vectorize(self, mz, intensity):
        self._require_prepared()
        cand_bins, cand_values = self._bin(mz, intensity)
        return densify_pair(self._query_bins, self._query_values, cand_bins, cand_values)

    def cleanup(self):
        self._query_bins = None
        self._query_values = None

    @property
    def is_prepared(self):
        return self._query_bins is not None

    def __repr__(self):
        return f"DirectBinning(bin_width={self.bin_width}, bin_shift={self.bin_shift})"


class Profiling(DirectBinning):
    """Fixed-width bins with each peak spread over a kernel of `base_width`."""

    def __init__(
        self,
        bin_width: float,
        bin_shift: float = 0.0,
        profile_shape: ProfileShape = ProfileShape.PIECEWISE_LINEAR,
        base_width: float = 1.0,
    ):
        super().__init__(bin_width, bin_shift)
        self.profile_shape = ProfileShape(profile_shape)
        self.base_width = base_width

    def _bin(self, mz, intensity):
        mz = np.ascontiguousarray(mz, dtype=np.float64)
        intensity = np.ascontiguousarray(intensity, dtype=np.float64)
        return profile_peaks(
            mz, intensity,
            self.bin_width, self.bin_shift,
            int(self.profile_shape), self.base_width,
        )

    def __repr__(self):
        return (
            f"Profiling(bin_width={self.bin_width}, bin_shift={self.bin_shift}, "
            f"profile_shape={self.profile_shape.name}, base_width={self.base_width})"
        )
