"""Spectral similarity search: annotate query spectra by library analogy.

Workflow for one run:
1. Merge query precursor windows into m/z intervals
2. Fetch all candidates for those intervals in ONE candidate store call
3. Build one comparator from the settings, reused for every query
4. Per query: prepare the comparator with its top-K peaks, then for each
   candidate re-check the exact precursor tolerance, score, and keep
   scores >= threshold
5. Return the matches in (query order, candidate order)

The interval step is a coarse filter only; the exact pairwise check
`|dmz| < tol_mz` decides which pairs are compared.

Known limitation: a library spectrum stored under several entries (e.g. one
per associated peptide) yields one match per entry; duplicates are not
collapsed here.

Examples
--------
>>> from specsimfast import SpecSimSettings, ComparatorKind, run_similarity_search
>>> settings = SpecSimSettings(tol_mz=0.5, thresh_score=0.9,
...                            comparator=ComparatorKind.NORMALIZED_DOT_PRODUCT)
>>> matches = run_similarity_search(queries, store, settings)
>>> for match in matches:
...     print(match.query_id, match.libspectrum_id, f"{match.score:.3f}")
"""

from __future__ import annotations

import logging
import warnings
from typing import Callable, Iterable, List, Optional

from ..exceptions import DataAccessError, DegenerateInputWarning
from ..library.store import CandidateStore
from ..settings import SpecSimSettings, create_comparator
from ..spectrum import Candidate, Match, QuerySpectrum
from .intervals import build_mz_intervals

logger = logging.getLogger(__name__)


class SimilaritySearchEngine:
    """Spectral similarity search over a candidate store.

    Settings are validated once at construction (ConfigurationError on any
    invalid value) and stay fixed for every run of this engine. The engine
    holds no state between runs except the diagnostics of the last run.

    Attributes
    ----------
    n_comparisons : int
        Query/candidate pairs scored in the last run
    n_degenerate : int
        Of those, comparisons that resolved to MIN_SIMILARITY because of
        empty, zero-norm or zero-variance vectors
    n_queries_processed : int
        Queries completed in the last run (less than the total if stopped)
    """

    def __init__(self, settings: SpecSimSettings):
        self.settings = settings.validate()
        self.n_comparisons = 0
        self.n_degenerate = 0
        self.n_queries_processed = 0

    def _fetch_candidates(self, store: CandidateStore, intervals) -> List[Candidate]:
        try:
            candidates = store.get_candidates(intervals, self.settings.experiment_id)
        except DataAccessError:
            raise
        except (OSError, KeyError) as exc:
            raise DataAccessError(f"Candidate retrieval failed: {exc}") from exc
        return list(candidates)

    def run(
        self,
        queries: Iterable[QuerySpectrum],
        candidate_store: CandidateStore,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[Match]:
        """Search all queries against the candidate store.

        Parameters
        ----------
        queries : iterable of QuerySpectrum
            Query spectra, processed in the given order
        candidate_store : CandidateStore
            Source of library spectra
        should_stop : callable, optional
            Polled between queries; when it returns True the run ends and
            the matches found so far are returned

        Returns
        -------
        list of Match
            Ordered by query, then by candidate store order

        Raises
        ------
        DataAccessError
            If the candidate store fails (no partial result)
        """
        settings = self.settings
        queries = list(queries)
        self.n_comparisons = 0
        self.n_degenerate = 0
        self.n_queries_processed = 0

        intervals = build_mz_intervals((q.precursor_mz for q in queries), settings.tol_mz)
        logger.info(
            f"Spectral similarity search: {len(queries):,} queries, "
            f"{len(intervals):,} precursor intervals (tol {settings.tol_mz} m/z)"
        )
        if not queries:
            return []

        candidates = self._fetch_candidates(candidate_store, intervals)
        logger.info(f"Retrieved {len(candidates):,} candidate library spectra")

        comparator = create_comparator(settings)
        logger.debug(f"Comparator: {comparator!r}")

        matches: List[Match] = []
        for query in queries:
            if should_stop is not None and should_stop():
                logger.info(
                    f"Search stopped after {self.n_queries_processed:,}/{len(queries):,} queries"
                )
                break

            query_mz, query_intensity = query.get_highest_peaks(settings.pick_count)
            n_before = len(matches)

            with comparator.prepared(query_mz, query_intensity):
                for candidate in candidates:
                    # Exact re-check: merged intervals admit neighbours of other queries
                    if abs(query.precursor_mz - candidate.precursor_mz) >= settings.tol_mz:
                        continue

                    score = comparator.compare_to(candidate.mz, candidate.intensity)
                    self.n_comparisons += 1
                    if comparator.degenerate:
                        self.n_degenerate += 1

                    if score >= settings.thresh_score:
                        matches.append(Match(query.query_id, candidate.libspectrum_id, score))

            self.n_queries_processed += 1
            logger.debug(f"Query {query.query_id!r}: {len(matches) - n_before} matches")

        if self.n_degenerate > 0:
            warnings.warn(
                f"{self.n_degenerate:,} of {self.n_comparisons:,} comparisons had degenerate "
                f"vectors and were scored as minimum similarity.",
                DegenerateInputWarning,
            )

        logger.info(
            f"✓ Spectral similarity search complete: {len(matches):,} matches "
            f"from {self.n_comparisons:,} comparisons"
        )
        return matches


def run_similarity_search(
    queries: Iterable[QuerySpectrum],
    candidate_store: CandidateStore,
    settings: SpecSimSettings,
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[Match]:
    """Run one spectral similarity search (see SimilaritySearchEngine.run)."""
    return SimilaritySearchEngine(settings).run(queries, candidate_store, should_stop)
