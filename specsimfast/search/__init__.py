"""Spectral similarity search.

Core algorithms:
1. Precursor m/z interval merging (one batched candidate fetch per run)
2. Exact precursor re-check per query/candidate pair
3. Threshold filtering of similarity scores (inclusive)
"""

from .intervals import (
    Interval,
    build_mz_intervals,
)

from .engine import (
    SimilaritySearchEngine,
    run_similarity_search,
)

__all__ = [
    # Intervals
    'Interval',
    'build_mz_intervals',
    # Search engine
    'SimilaritySearchEngine',
    'run_similarity_search',
]
