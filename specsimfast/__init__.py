"""SpecSimFast - Numba-accelerated spectral similarity search.

Annotates query MS/MS spectra by comparing their peak patterns against a
spectral library:
- Precursor m/z interval merging for one batched candidate fetch
- Pluggable vectorization (peak matching, direct binning, profiling)
- Intensity transformations (none, sqrt, log)
- Similarity scores (Euclidean, normalized dot product, Pearson,
  cross-correlation)
- HDF5 and in-memory spectral library stores
"""

__version__ = "0.1.0"

# Import main submodules for convenient access
from specsimfast import similarity
from specsimfast import library
from specsimfast import search

from specsimfast.exceptions import (
    ConfigurationError,
    DataAccessError,
    DegenerateInputWarning,
    SpecSimError,
)
from specsimfast.settings import (
    ComparatorKind,
    SpecSimSettings,
    VectorizationKind,
    create_comparator,
    create_vectorization,
)
from specsimfast.similarity import ProfileShape, Transformation
from specsimfast.spectrum import Candidate, Match, QuerySpectrum
from specsimfast.search import (
    Interval,
    SimilaritySearchEngine,
    build_mz_intervals,
    run_similarity_search,
)

__all__ = [
    "similarity",
    "library",
    "search",
    # Errors
    "SpecSimError",
    "ConfigurationError",
    "DataAccessError",
    "DegenerateInputWarning",
    # Settings
    "SpecSimSettings",
    "VectorizationKind",
    "ComparatorKind",
    "ProfileShape",
    "Transformation",
    "create_comparator",
    "create_vectorization",
    # Data model
    "QuerySpectrum",
    "Candidate",
    "Match",
    "Interval",
    # Search
    "build_mz_intervals",
    "SimilaritySearchEngine",
    "run_similarity_search",
]
