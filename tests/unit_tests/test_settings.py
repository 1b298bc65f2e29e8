"""Tests for search settings validation and strategy factories."""

import numpy as np
import pytest

from specsimfast.exceptions import ConfigurationError
from specsimfast.settings import (
    ComparatorKind,
    SpecSimSettings,
    VectorizationKind,
    create_comparator,
    create_vectorization,
)
from specsimfast.similarity import (
    CrossCorrelation,
    DirectBinning,
    EuclideanDistance,
    NormalizedDotProduct,
    PeakMatching,
    PearsonCorrelation,
    ProfileShape,
    Profiling,
    Transformation,
)


class TestValidation:
    """Test fail-fast validation."""

    def test_defaults_valid(self):
        settings = SpecSimSettings().validate()
        assert settings.vectorization is VectorizationKind.DIRECT_BINNING
        assert settings.comparator is ComparatorKind.NORMALIZED_DOT_PRODUCT

    def test_validate_returns_copy(self):
        settings = SpecSimSettings(comparator=2)
        validated = settings.validate()
        assert validated.comparator is ComparatorKind.PEARSON
        assert settings.comparator == 2

    @pytest.mark.parametrize("field, value", [
        ("tol_mz", -0.1),
        ("tol_mz", float("nan")),
        ("bin_width", 0.0),
        ("bin_width", -1.0),
        ("base_width", 0.0),
        ("pick_count", 0),
        ("pick_count", 2.5),
        ("xcorr_offset", -1),
        ("thresh_score", float("nan")),
        ("thresh_score", float("inf")),
        ("bin_shift", float("nan")),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(ConfigurationError):
            SpecSimSettings(**{field: value}).validate()

    @pytest.mark.parametrize("field, value", [
        ("vectorization", 3),
        ("transformation", 7),
        ("comparator", 4),
        ("comparator", -1),
        ("comparator", "cosine"),
        ("profile_index", 2),
        ("vectorization", True),
    ])
    def test_unknown_kinds(self, field, value):
        with pytest.raises(ConfigurationError):
            SpecSimSettings(**{field: value}).validate()

    @pytest.mark.parametrize("field", ["tol_mz", "thresh_score", "bin_width", "bin_shift", "base_width"])
    @pytest.mark.parametrize("value", ["0.5", None, True])
    def test_non_numeric_rejected(self, field, value):
        """Non-numeric values raise ConfigurationError, not TypeError."""
        with pytest.raises(ConfigurationError):
            SpecSimSettings(**{field: value}).validate()

    def test_numpy_scalars_accepted(self):
        settings = SpecSimSettings(tol_mz=np.float64(0.5), thresh_score=np.float32(0.7),
                                   pick_count=np.int64(5)).validate()
        assert settings.pick_count == 5

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SpecSimSettings(bin_width=0.0).validate()

    def test_zero_tolerance_allowed(self):
        assert SpecSimSettings(tol_mz=0.0).validate().tol_mz == 0.0


class TestFromIndices:
    """Test creation from legacy integer method indices."""

    def test_mapping(self):
        settings = SpecSimSettings.from_indices(
            vect_index=2, trafo_index=1, comp_index=3, profile_index=1,
            tol_mz=0.3, bin_width=0.5, xcorr_offset=10,
        )
        assert settings.vectorization is VectorizationKind.PROFILING
        assert settings.transformation is Transformation.SQRT
        assert settings.comparator is ComparatorKind.CROSS_CORRELATION
        assert settings.profile_index is ProfileShape.GAUSSIAN
        assert settings.tol_mz == 0.3

    @pytest.mark.parametrize("indices", [
        (3, 0, 0),
        (0, 3, 0),
        (0, 0, 4),
    ])
    def test_unmapped_index_fails(self, indices):
        vect_index, trafo_index, comp_index = indices
        with pytest.raises(ConfigurationError):
            SpecSimSettings.from_indices(vect_index, trafo_index, comp_index)


class TestFactories:
    """Test exhaustive strategy dispatch."""

    @pytest.mark.parametrize("kind, expected", [
        (VectorizationKind.PEAK_MATCHING, PeakMatching),
        (VectorizationKind.DIRECT_BINNING, DirectBinning),
        (VectorizationKind.PROFILING, Profiling),
    ])
    def test_vectorizations(self, kind, expected):
        vect = create_vectorization(SpecSimSettings(vectorization=kind))
        assert type(vect) is expected

    @pytest.mark.parametrize("kind, expected", [
        (ComparatorKind.EUCLIDEAN, EuclideanDistance),
        (ComparatorKind.NORMALIZED_DOT_PRODUCT, NormalizedDotProduct),
        (ComparatorKind.PEARSON, PearsonCorrelation),
        (ComparatorKind.CROSS_CORRELATION, CrossCorrelation),
    ])
    def test_comparators(self, kind, expected):
        comp = create_comparator(SpecSimSettings(comparator=kind))
        assert type(comp) is expected

    def test_every_combination_builds(self):
        for vect_kind in VectorizationKind:
            for trafo in Transformation:
                for comp_kind in ComparatorKind:
                    settings = SpecSimSettings(
                        vectorization=vect_kind, transformation=trafo, comparator=comp_kind,
                    )
                    comp = create_comparator(settings)
                    assert comp.transformation is trafo

    def test_parameters_passed_through(self):
        settings = SpecSimSettings(
            vectorization=VectorizationKind.PROFILING,
            comparator=ComparatorKind.CROSS_CORRELATION,
            bin_width=0.25, bin_shift=0.1, base_width=1.5,
            profile_index=ProfileShape.GAUSSIAN, xcorr_offset=12,
        )
        comp = create_comparator(settings)
        assert comp.bin_width == 0.25
        assert comp.xcorr_offset == 12
        assert comp.vectorization.bin_shift == 0.1
        assert comp.vectorization.base_width == 1.5
        assert comp.vectorization.profile_shape is ProfileShape.GAUSSIAN

    def test_peak_matching_tolerance_is_bin_width(self):
        vect = create_vectorization(SpecSimSettings(
            vectorization=VectorizationKind.PEAK_MATCHING, bin_width=0.4,
        ))
        assert vect.tolerance == 0.4

    def test_unknown_kind_fails(self):
        with pytest.raises(ConfigurationError):
            create_comparator(SpecSimSettings(comparator=9))
