"""Spectrum vectorization, intensity transformation and similarity scoring.

Core pipeline for one query/candidate pair:
1. Transformation remaps peak intensities (NONE, SQRT, LOG)
2. Vectorization turns both peak lists into equal-length vectors
3. SpectrumComparator scores the two vectors

Comparators follow a prepare-once / compare-many / cleanup lifecycle so the
query spectrum is vectorized only once per search.
"""

from .transformation import Transformation

from .vectorization import (
    Vectorization,
    PeakMatching,
    DirectBinning,
    Profiling,
    ProfileShape,
)

from .comparators import (
    SpectrumComparator,
    EuclideanDistance,
    NormalizedDotProduct,
    PearsonCorrelation,
    CrossCorrelation,
)

from .kernels import (
    bin_peaks,
    profile_peaks,
    densify_pair,
    match_peaks,
    normalized_dot_product,
    euclidean_similarity,
    pearson_correlation,
    cross_correlation,
)

__all__ = [
    # Transformation
    'Transformation',
    # Vectorization
    'Vectorization',
    'PeakMatching',
    'DirectBinning',
    'Profiling',
    'ProfileShape',
    # Comparators
    'SpectrumComparator',
    'EuclideanDistance',
    'NormalizedDotProduct',
    'PearsonCorrelation',
    'CrossCorrelation',
    # Numba kernels
    'bin_peaks',
    'profile_peaks',
    'densify_pair',
    'match_peaks',
    'normalized_dot_product',
    'euclidean_similarity',
    'pearson_correlation',
    'cross_correlation',
]
