"""Spectrum comparators: prepare once per query, compare many candidates.

Each comparator owns one Vectorization and one Transformation. The query is
transformed and vectorized once in `prepare()`; every `compare_to()` call
then vectorizes a candidate against it, computes the similarity and caches
it in `similarity`. `cleanup()` releases the per-query state and must run
before the next query is prepared.

The `prepared()` context manager wraps that lifecycle so cleanup also happens
when the candidate loop is left early or raises.

Variants
--------
- EuclideanDistance: 1 / (1 + L2 distance of unit-normalised vectors)
- NormalizedDotProduct: cosine similarity
- PearsonCorrelation: Pearson correlation coefficient
- CrossCorrelation: best normalised correlation over +-xcorr_offset bins

Examples
--------
>>> comp = NormalizedDotProduct(DirectBinning(1.0), Transformation.SQRT)
>>> with comp.prepared(query_mz, query_intensity):
...     for cand in candidates:
...         score = comp.compare_to(cand.mz, cand.intensity)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import numpy as np

from ..constants import MIN_SIMILARITY
from .kernels import (
    cross_correlation,
    euclidean_similarity,
    normalized_dot_product,
    pearson_correlation,
)
from .transformation import Transformation
from .vectorization import Vectorization


class SpectrumComparator:
    """Base class holding the prepare / compare_to / cleanup lifecycle."""

    def __init__(self, vectorization: Vectorization, transformation: Transformation):
        self.vectorization = vectorization
        self.transformation = transformation
        self._similarity = MIN_SIMILARITY
        self.degenerate = False

    def prepare(self, mz: np.ndarray, intensity: np.ndarray) -> None:
        """Transform and vectorize the query spectrum."""
        self.vectorization.prepare(mz, self.transformation.apply(intensity))
        self._similarity = MIN_SIMILARITY
        self.degenerate = False

    def compare_to(self, mz: np.ndarray, intensity: np.ndarray) -> float:
        """Score a candidate spectrum against the prepared query.

        Returns the similarity, which stays available via `similarity`
        until the next comparison or cleanup.
        """
        if not self.vectorization.is_prepared:
            raise RuntimeError(f"{type(self).__name__}.compare_to() called before prepare()")

        query_vector, candidate_vector = self.vectorization.vectorize(
            mz, self.transformation.apply(intensity)
        )
        if len(query_vector) == 0:
            score, degenerate = MIN_SIMILARITY, True
        else:
            score, degenerate = self._score(query_vector, candidate_vector)

        self._similarity = float(score)
        self.degenerate = bool(degenerate)
        return self._similarity

    @property
    def similarity(self) -> float:
        return self._similarity

    def cleanup(self) -> None:
        """Release per-query state. Safe to call repeatedly or before prepare()."""
        self.vectorization.cleanup()
        self._similarity = MIN_SIMILARITY
        self.degenerate = False

    @contextmanager
    def prepared(self, mz: np.ndarray, intensity: np.ndarray) -> Iterator["SpectrumComparator"]:
        """Prepare for one query and guarantee cleanup on exit."""
        try:
            self.prepare(mz, intensity)
            yield self
        finally:
            self.cleanup()

    def _score(self, query_vector: np.ndarray, candidate_vector: np.ndarray):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.vectorization!r}, {self.transformation.name})"


class EuclideanDistance(SpectrumComparator):
    """similarity = 1 / (1 + |a/|a| - b/|b||)."""

    def _score(self, query_vector, candidate_vector):
        return euclidean_similarity(query_vector, candidate_vector)


class NormalizedDotProduct(SpectrumComparator):
    """similarity = a.b / (|a| |b|); 0 for zero-norm vectors."""

    def _score(self, query_vector, candidate_vector):
        return normalized_dot_product(query_vector, candidate_vector)


class PearsonCorrelation(SpectrumComparator):
    """Pearson correlation; 0 for zero-variance or near-empty vectors."""

    def _score(self, query_vector, candidate_vector):
        return pearson_correlation(query_vector, candidate_vector)


class CrossCorrelation(SpectrumComparator):
    """Maximum normalised cross-correlation over a lag window.

    Lags run over -xcorr_offset..+xcorr_offset bins, absorbing small m/z
    shifts between spectra. The lag of the best score is kept in `best_lag`
    and, converted with the bin width, in `best_shift_mz`.
    """

    def __init__(
        self,
        vectorization: Vectorization,
        transformation: Transformation,
        bin_width: float,
        xcorr_offset: int,
    ):
        super().__init__(vectorization, transformation)
        self.bin_width = bin_width
        self.xcorr_offset = xcorr_offset
        self.best_lag = 0

    @property
    def best_shift_mz(self) -> float:
        return self.best_lag * self.bin_width

    def _score(self, query_vector, candidate_vector):
        score, self.best_lag, degenerate = cross_correlation(
            query_vector, candidate_vector, self.xcorr_offset
        )
        return score, degenerate

    def cleanup(self):
        super().cleanup()
        self.best_lag = 0
