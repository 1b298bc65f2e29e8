"""Precursor m/z interval construction for batched candidate retrieval.

Instead of asking the candidate store for library spectra once per query,
all query precursor windows `[mz - tol, mz + tol]` are merged into a minimal
set of non-overlapping intervals and fetched in a single call. Each right
border is the first float above `mz + tol`, so the half-open interval still
holds a candidate sitting exactly at the rounded window edge. The interval
step is only a coarse filter: the search engine re-checks the exact precursor
tolerance for every query/candidate pair.

Examples
--------
>>> intervals = build_mz_intervals([100.0, 100.05, 200.0], tol_mz=0.1)
>>> [(round(iv.left, 2), round(iv.right, 2)) for iv in intervals]
[(99.9, 100.15), (199.9, 200.1)]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np


@dataclass
class Interval:
    """Half-open precursor m/z range `[left, right)`.

    The right border is extended while merging overlapping windows and left
    alone afterwards.
    """

    left: float
    right: float

    def contains(self, mz: float) -> bool:
        return self.left <= mz < self.right

    @property
    def width(self) -> float:
        return self.right - self.left


def build_mz_intervals(precursor_mzs: Iterable[float], tol_mz: float) -> List[Interval]:
    """Merge per-query tolerance windows into sorted, disjoint intervals.

    Parameters
    ----------
    precursor_mzs : iterable of float
        Query precursor m/z values (any order)
    tol_mz : float
        Absolute precursor tolerance

    Returns
    -------
    list of Interval
        Sorted by left border, mutually non-overlapping. Every value's
        window `[v - tol_mz, v + tol_mz]` (left border clamped at 0) lies
        inside exactly one interval.

    Notes
    -----
    Single linear scan over the sorted values, O(n log n) overall:
    - a window whose left border falls strictly before the current right
      border extends the current interval
    - otherwise the current interval is closed and a new one is started
    """
    values = np.sort(np.asarray(list(precursor_mzs), dtype=np.float64))

    intervals: List[Interval] = []
    current = None
    for precursor_mz in values:
        lower = max(0.0, float(precursor_mz - tol_mz))
        # First float above the window edge: [left, right) then covers fl(mz + tol)
        upper = float(np.nextafter(precursor_mz + tol_mz, np.inf))

        if current is not None and precursor_mz - tol_mz < current.right:
            current.right = upper
        else:
            current = Interval(lower, upper)
            intervals.append(current)

    return intervals
