"""Spectrum containers for query spectra, library candidates and matches.

Peak lists are stored as two parallel numpy arrays (m/z, intensity) rather
than lists of tuples so they can be handed to Numba kernels unchanged.

Examples
--------
>>> query = QuerySpectrum(
...     title="scan=1042",
...     precursor_mz=500.0,
...     charge=2,
...     mz=np.array([100.0, 200.0, 300.0]),
...     intensity=np.array([50.0, 80.0, 5.0]),
... )
>>> mz, intensity = query.get_highest_peaks(2)
>>> mz
array([100., 200.])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

import numpy as np


def select_highest_peaks(
    mz: np.ndarray,
    intensity: np.ndarray,
    pick_count: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Keep the `pick_count` most intense peaks, returned in m/z order.

    Parameters
    ----------
    mz : np.ndarray
        Peak m/z values
    intensity : np.ndarray
        Peak intensities (parallel to mz)
    pick_count : int
        Number of peaks to keep

    Returns
    -------
    mz, intensity : np.ndarray
        Selected peaks sorted by ascending m/z (float64)

    Notes
    -----
    Ties in intensity are broken by original peak order (stable sort), so
    the selection is deterministic.
    """
    mz = np.asarray(mz, dtype=np.float64)
    intensity = np.asarray(intensity, dtype=np.float64)

    if len(mz) > pick_count:
        order = np.argsort(-intensity, kind="stable")[:pick_count]
        mz = mz[order]
        intensity = intensity[order]

    by_mz = np.argsort(mz, kind="stable")
    return mz[by_mz], intensity[by_mz]


def _as_peak_array(values) -> np.ndarray:
    return np.ascontiguousarray(values, dtype=np.float64)


@dataclass
class QuerySpectrum:
    """One input spectrum to annotate.

    `spectrum_id` is the caller-assigned identity reported in matches. When
    it is not given, the stripped title is used instead.
    """

    title: str
    precursor_mz: float
    charge: int
    mz: np.ndarray
    intensity: np.ndarray
    spectrum_id: Optional[int] = None

    def __post_init__(self):
        self.mz = _as_peak_array(self.mz)
        self.intensity = _as_peak_array(self.intensity)
        if self.mz.shape != self.intensity.shape:
            raise ValueError(
                f"Peak arrays differ in length for '{self.title}': "
                f"{len(self.mz)} m/z vs {len(self.intensity)} intensities"
            )

    @property
    def query_id(self) -> Union[int, str]:
        if self.spectrum_id is not None:
            return self.spectrum_id
        return self.title.strip()

    @property
    def n_peaks(self) -> int:
        return len(self.mz)

    def get_highest_peaks(self, pick_count: int) -> Tuple[np.ndarray, np.ndarray]:
        """Return the `pick_count` most intense peaks in m/z order."""
        return select_highest_peaks(self.mz, self.intensity, pick_count)


@dataclass
class Candidate:
    """A library spectrum eligible for comparison."""

    libspectrum_id: int
    precursor_mz: float
    mz: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    intensity: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))

    def __post_init__(self):
        self.mz = _as_peak_array(self.mz)
        self.intensity = _as_peak_array(self.intensity)
        if self.mz.shape != self.intensity.shape:
            raise ValueError(
                f"Peak arrays differ in length for library spectrum "
                f"{self.libspectrum_id}"
            )


@dataclass(frozen=True)
class Match:
    """An accepted spectrum-spectrum match."""

    query_id: Union[int, str]
    libspectrum_id: int
    score: float
