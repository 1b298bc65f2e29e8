"""Pytest configuration for SpecSimFast tests.

Common fixtures: small query/library spectra and default search settings.
All data is synthetic; no spectrum files or databases are needed.
"""

import numpy as np
import pytest


@pytest.fixture
def simple_peaks():
    """Two-peak spectrum (m/z, intensity)."""
    return np.array([100.0, 200.0]), np.array([50.0, 80.0])


@pytest.fixture
def tryptic_like_peaks():
    """Ten-peak spectrum with a dominant y-ion series."""
    mz = np.array([147.11, 175.12, 262.15, 333.19, 404.23,
                   475.26, 546.30, 617.34, 688.37, 759.41])
    intensity = np.array([15.0, 120.0, 30.0, 80.0, 60.0,
                          100.0, 45.0, 20.0, 70.0, 10.0])
    return mz, intensity


@pytest.fixture
def query_spectrum(simple_peaks):
    """Query at precursor m/z 500.0 with the simple two-peak pattern."""
    from specsimfast.spectrum import QuerySpectrum
    mz, intensity = simple_peaks
    return QuerySpectrum(title="query_1 ", precursor_mz=500.0, charge=2,
                         mz=mz, intensity=intensity, spectrum_id=1)


@pytest.fixture
def dot_product_settings():
    """Normalized dot product on unit bins, threshold 0.9."""
    from specsimfast.settings import ComparatorKind, SpecSimSettings, VectorizationKind
    return SpecSimSettings(
        tol_mz=0.5,
        pick_count=20,
        thresh_score=0.9,
        vectorization=VectorizationKind.DIRECT_BINNING,
        comparator=ComparatorKind.NORMALIZED_DOT_PRODUCT,
        bin_width=1.0,
        experiment_id=1,
    )


# Random seed for reproducibility
@pytest.fixture(scope="session", autouse=True)
def set_random_seed():
    """Set random seed for reproducible tests."""
    np.random.seed(42)
