"""Spectral library candidate stores."""

from .store import CandidateStore, InMemoryCandidateStore, interval_slices
from .hdf5_library import HDF5SpectralLibrary, write_spectral_library

__all__ = [
    'CandidateStore',
    'InMemoryCandidateStore',
    'interval_slices',
    'HDF5SpectralLibrary',
    'write_spectral_library',
]
