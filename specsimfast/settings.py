"""Search settings and strategy factories for spectral similarity search.

Strategy selection is an exhaustive enum dispatch: every VectorizationKind,
Transformation and ComparatorKind maps to exactly one implementation, and
anything else raises ConfigurationError before a search starts.

Examples
--------
>>> settings = SpecSimSettings(
...     tol_mz=0.5,
...     comparator=ComparatorKind.NORMALIZED_DOT_PRODUCT,
...     vectorization=VectorizationKind.DIRECT_BINNING,
...     thresh_score=0.9,
... )
>>> comparator = create_comparator(settings)

>>> # Integer indices as stored by the legacy job settings
>>> settings = SpecSimSettings.from_indices(vect_index=1, trafo_index=1, comp_index=3)
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

import numpy as np

from .constants import (
    DEFAULT_BASE_WIDTH,
    DEFAULT_BIN_SHIFT,
    DEFAULT_BIN_WIDTH,
    DEFAULT_PICK_COUNT,
    DEFAULT_THRESH_SCORE,
    DEFAULT_TOL_MZ,
    DEFAULT_XCORR_OFFSET,
)
from .exceptions import ConfigurationError
from .similarity.comparators import (
    CrossCorrelation,
    EuclideanDistance,
    NormalizedDotProduct,
    PearsonCorrelation,
    SpectrumComparator,
)
from .similarity.transformation import Transformation
from .similarity.vectorization import (
    DirectBinning,
    PeakMatching,
    ProfileShape,
    Profiling,
    Vectorization,
)


class VectorizationKind(Enum):
    """Vectorization method; values are the legacy integer indices."""
    PEAK_MATCHING = 0
    DIRECT_BINNING = 1
    PROFILING = 2


class ComparatorKind(Enum):
    """Spectrum comparator method; values are the legacy integer indices."""
    EUCLIDEAN = 0
    NORMALIZED_DOT_PRODUCT = 1
    PEARSON = 2
    CROSS_CORRELATION = 3


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _lookup(enum_cls, value, label: str):
    """Resolve an enum member from a member or its integer value."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(f"Unknown {label}: {value!r}")
    try:
        return enum_cls(value)
    except ValueError:
        raise ConfigurationError(f"Unknown {label}: {value!r}") from None


@dataclass
class SpecSimSettings:
    """Parameters for one spectral similarity search run.

    Tolerances and bin geometry are absolute m/z values. `bin_width` doubles
    as the peak matching tolerance for PEAK_MATCHING and as the lag unit of
    CROSS_CORRELATION.
    """

    # Precursor filtering
    tol_mz: float = DEFAULT_TOL_MZ

    # Query preprocessing
    pick_count: int = DEFAULT_PICK_COUNT

    # Match acceptance (inclusive)
    thresh_score: float = DEFAULT_THRESH_SCORE

    # Strategy selection
    vectorization: VectorizationKind = VectorizationKind.DIRECT_BINNING
    transformation: Transformation = Transformation.NONE
    comparator: ComparatorKind = ComparatorKind.NORMALIZED_DOT_PRODUCT

    # Bin geometry
    bin_width: float = DEFAULT_BIN_WIDTH
    bin_shift: float = DEFAULT_BIN_SHIFT

    # Profile kernel
    profile_index: ProfileShape = ProfileShape.PIECEWISE_LINEAR
    base_width: float = DEFAULT_BASE_WIDTH

    # Cross-correlation lag half-width (bins)
    xcorr_offset: int = DEFAULT_XCORR_OFFSET

    # Candidate store scope
    experiment_id: Optional[Union[int, str]] = None

    @classmethod
    def from_indices(
        cls,
        vect_index: int,
        trafo_index: int,
        comp_index: int,
        profile_index: int = 0,
        **kwargs,
    ) -> 'SpecSimSettings':
        """Create settings from the integer method indices of the legacy job settings.

        Raises
        ------
        ConfigurationError
            If an index does not map to a known method
        """
        settings = cls(
            vectorization=_lookup(VectorizationKind, vect_index, "vectorization method"),
            transformation=_lookup(Transformation, trafo_index, "transformation method"),
            comparator=_lookup(ComparatorKind, comp_index, "comparator method"),
            profile_index=_lookup(ProfileShape, profile_index, "profile shape"),
            **kwargs,
        )
        return settings.validate()

    def validate(self) -> 'SpecSimSettings':
        """Check every field, returning a copy with enum fields normalised.

        Raises
        ------
        ConfigurationError
            On an unknown strategy kind or an out-of-range numeric value
        """
        normalised = replace(
            self,
            vectorization=_lookup(VectorizationKind, self.vectorization, "vectorization method"),
            transformation=_lookup(Transformation, self.transformation, "transformation method"),
            comparator=_lookup(ComparatorKind, self.comparator, "comparator method"),
            profile_index=_lookup(ProfileShape, self.profile_index, "profile shape"),
        )

        for name in ("tol_mz", "thresh_score", "bin_width", "bin_shift", "base_width"):
            value = getattr(self, name)
            if not _is_real(value):
                raise ConfigurationError(f"{name} must be a real number, got {value!r}")

        if not self.tol_mz >= 0:
            raise ConfigurationError(f"tol_mz must be >= 0, got {self.tol_mz}")
        if not np.isfinite(self.thresh_score):
            raise ConfigurationError(f"thresh_score must be finite, got {self.thresh_score}")
        if not np.isfinite(self.bin_shift):
            raise ConfigurationError(f"bin_shift must be finite, got {self.bin_shift}")
        if not self.bin_width > 0:
            raise ConfigurationError(f"bin_width must be > 0, got {self.bin_width}")
        if not self.base_width > 0:
            raise ConfigurationError(f"base_width must be > 0, got {self.base_width}")
        if not _is_integer(self.pick_count) or self.pick_count < 1:
            raise ConfigurationError(f"pick_count must be a positive integer, got {self.pick_count}")
        if not _is_integer(self.xcorr_offset) or self.xcorr_offset < 0:
            raise ConfigurationError(
                f"xcorr_offset must be a non-negative integer, got {self.xcorr_offset}"
            )

        normalised.pick_count = int(self.pick_count)
        normalised.xcorr_offset = int(self.xcorr_offset)
        return normalised


def create_vectorization(settings: SpecSimSettings) -> Vectorization:
    """Build the vectorization selected by `settings.vectorization`."""
    kind = _lookup(VectorizationKind, settings.vectorization, "vectorization method")
    if kind is VectorizationKind.PEAK_MATCHING:
        return PeakMatching(settings.bin_width)
    if kind is VectorizationKind.DIRECT_BINNING:
        return DirectBinning(settings.bin_width, settings.bin_shift)
    if kind is VectorizationKind.PROFILING:
        return Profiling(
            settings.bin_width,
            settings.bin_shift,
            _lookup(ProfileShape, settings.profile_index, "profile shape"),
            settings.base_width,
        )
    raise ConfigurationError(f"Unknown vectorization method: {kind}")


def create_comparator(settings: SpecSimSettings) -> SpectrumComparator:
    """Build the comparator (with its vectorization and transformation)."""
    vectorization = create_vectorization(settings)
    transformation = _lookup(Transformation, settings.transformation, "transformation method")
    kind = _lookup(ComparatorKind, settings.comparator, "comparator method")

    if kind is ComparatorKind.EUCLIDEAN:
        return EuclideanDistance(vectorization, transformation)
    if kind is ComparatorKind.NORMALIZED_DOT_PRODUCT:
        return NormalizedDotProduct(vectorization, transformation)
    if kind is ComparatorKind.PEARSON:
        return PearsonCorrelation(vectorization, transformation)
    if kind is ComparatorKind.CROSS_CORRELATION:
        return CrossCorrelation(
            vectorization, transformation, settings.bin_width, int(settings.xcorr_offset)
        )
    raise ConfigurationError(f"Unknown comparator method: {kind}")
