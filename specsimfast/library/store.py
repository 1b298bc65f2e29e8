"""Candidate store interface and an in-memory implementation.

The search engine fetches all candidates for a batch of queries with one
`get_candidates(intervals, experiment_id)` call. Any object with that method
can act as the store; `InMemoryCandidateStore` keeps library spectra in
memory, sorted by precursor m/z, and answers each interval with a binary
search.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Dict, Hashable, Iterable, List, Optional, Protocol

import numpy as np

from ..exceptions import DataAccessError
from ..spectrum import Candidate

if TYPE_CHECKING:
    from ..search.intervals import Interval

logger = logging.getLogger(__name__)


class CandidateStore(Protocol):
    """Source of library spectra within precursor m/z intervals."""

    def get_candidates(
        self, intervals: List[Interval], experiment_id: Optional[Hashable]
    ) -> List[Candidate]:
        ...


def interval_slices(
    sorted_precursor_mz: np.ndarray,
    intervals: List[Interval],
) -> List[tuple]:
    """Index ranges of `sorted_precursor_mz` falling inside each interval.

    Intervals are half-open `[left, right)`, matching `Interval.contains`.

    Returns
    -------
    list of (start, stop)
        One Python-style slice per interval, empty ranges omitted
    """
    slices = []
    for interval in intervals:
        start = int(np.searchsorted(sorted_precursor_mz, interval.left, side='left'))
        stop = int(np.searchsorted(sorted_precursor_mz, interval.right, side='left'))
        if stop > start:
            slices.append((start, stop))
    return slices


class InMemoryCandidateStore:
    """Library spectra held in memory, grouped by experiment.

    Parameters
    ----------
    candidates : iterable of Candidate, optional
        Spectra added under `experiment_id`
    experiment_id : hashable, optional
        Experiment the initial candidates belong to

    Examples
    --------
    >>> store = InMemoryCandidateStore([Candidate(1, 500.1, mz, intensity)], experiment_id=7)
    >>> store.get_candidates([Interval(499.5, 500.5)], experiment_id=7)
    """

    def __init__(
        self,
        candidates: Optional[Iterable[Candidate]] = None,
        experiment_id: Optional[Hashable] = None,
    ):
        self._spectra: Dict[Optional[Hashable], List[Candidate]] = defaultdict(list)
        self._index: Dict[Optional[Hashable], np.ndarray] = {}
        if candidates is not None:
            self.add(candidates, experiment_id)

    def add(self, candidates: Iterable[Candidate], experiment_id: Optional[Hashable] = None) -> None:
        """Add library spectra to an experiment."""
        spectra = self._spectra[experiment_id]
        spectra.extend(candidates)
        # Stable sort keeps insertion order among equal precursor m/z
        spectra.sort(key=lambda cand: cand.precursor_mz)
        self._index[experiment_id] = np.array(
            [cand.precursor_mz for cand in spectra], dtype=np.float64
        )

    @property
    def experiments(self) -> List[Optional[Hashable]]:
        return list(self._spectra.keys())

    def __len__(self) -> int:
        return sum(len(spectra) for spectra in self._spectra.values())

    def get_candidates(
        self, intervals: List[Interval], experiment_id: Optional[Hashable] = None
    ) -> List[Candidate]:
        """Return library spectra whose precursor m/z lies in any interval.

        Raises
        ------
        DataAccessError
            If the experiment is unknown
        """
        if experiment_id not in self._index:
            raise DataAccessError(f"Unknown experiment: {experiment_id!r}")

        spectra = self._spectra[experiment_id]
        candidates = []
        for start, stop in interval_slices(self._index[experiment_id], intervals):
            candidates.extend(spectra[start:stop])

        logger.debug(
            f"Experiment {experiment_id!r}: {len(candidates):,} candidates "
            f"in {len(intervals):,} intervals"
        )
        return candidates
