"""HDF5 spectral library store with flat peak arrays.

Layout (one group per experiment, spectra sorted by precursor m/z):

    /experiments/<experiment_id>/
        libspectrum_id  int64   (n_spectra,)
        precursor_mz    float64 (n_spectra,)
        peak_start_idx  int64   (n_spectra,)
        peak_stop_idx   int64   (n_spectra,)
        mz              float64 (n_peaks,)
        intensity       float64 (n_peaks,)

Peaks of spectrum i are `mz[peak_start_idx[i]:peak_stop_idx[i]]`. Candidate
retrieval binary-searches `precursor_mz` per interval, then reads only the
peak ranges it needs.

Examples
--------
>>> write_spectral_library("library.hdf", experiment_id=3, candidates=spectra)
>>> with HDF5SpectralLibrary("library.hdf") as library:
...     candidates = library.get_candidates(intervals, experiment_id=3)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Hashable, Iterable, List, Optional

import h5py
import numpy as np

from ..exceptions import DataAccessError
from ..spectrum import Candidate
from .store import interval_slices

if TYPE_CHECKING:
    from ..search.intervals import Interval

logger = logging.getLogger(__name__)

EXPERIMENTS_GROUP = "experiments"


def _experiment_key(experiment_id: Optional[Hashable]) -> str:
    return "default" if experiment_id is None else str(experiment_id)


def write_spectral_library(
    library_path: Path | str,
    experiment_id: Optional[Hashable],
    candidates: Iterable[Candidate],
) -> int:
    """Write library spectra of one experiment to an HDF5 file.

    An existing group for the same experiment is replaced; other experiments
    in the file are kept.

    Returns
    -------
    int
        Number of spectra written
    """
    spectra = sorted(candidates, key=lambda cand: cand.precursor_mz)

    n_peaks = np.array([len(cand.mz) for cand in spectra], dtype=np.int64)
    peak_stop_idx = np.cumsum(n_peaks)
    peak_start_idx = peak_stop_idx - n_peaks

    if spectra:
        mz = np.concatenate([cand.mz for cand in spectra])
        intensity = np.concatenate([cand.intensity for cand in spectra])
    else:
        mz = np.zeros(0, dtype=np.float64)
        intensity = np.zeros(0, dtype=np.float64)

    key = _experiment_key(experiment_id)
    with h5py.File(library_path, 'a') as hdf:
        experiments = hdf.require_group(EXPERIMENTS_GROUP)
        if key in experiments:
            del experiments[key]
        group = experiments.create_group(key)
        group.create_dataset(
            'libspectrum_id',
            data=np.array([cand.libspectrum_id for cand in spectra], dtype=np.int64),
        )
        group.create_dataset(
            'precursor_mz',
            data=np.array([cand.precursor_mz for cand in spectra], dtype=np.float64),
        )
        group.create_dataset('peak_start_idx', data=peak_start_idx)
        group.create_dataset('peak_stop_idx', data=peak_stop_idx)
        group.create_dataset('mz', data=mz.astype(np.float64))
        group.create_dataset('intensity', data=intensity.astype(np.float64))

    logger.info(f"✓ Wrote {len(spectra):,} library spectra for experiment {key} to {Path(library_path).name}")
    return len(spectra)


class HDF5SpectralLibrary:
    """Candidate store backed by an HDF5 spectral library file.

    The file is opened lazily per call, or once for a batch of calls when
    the library is used as a context manager. Precursor m/z indices are
    cached per experiment.
    """

    def __init__(self, library_path: Path | str):
        """Initialize library.

        Parameters
        ----------
        library_path : Path or str
            Path to the HDF5 library file
        """
        self.library_path = Path(library_path)
        self.cache = {}  # experiment key → precursor m/z array
        self._hdf_handle = None

    def __enter__(self):
        """Open HDF5 file for batch operations."""
        self._hdf_handle = self._open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close HDF5 file."""
        if self._hdf_handle is not None:
            self._hdf_handle.close()
            self._hdf_handle = None

    def _open(self) -> h5py.File:
        if not self.library_path.exists():
            raise DataAccessError(f"Spectral library not found: {self.library_path}")
        try:
            return h5py.File(self.library_path, 'r')
        except OSError as exc:
            raise DataAccessError(f"Cannot open spectral library {self.library_path}: {exc}") from exc

    def get_candidates(
        self, intervals: List[Interval], experiment_id: Optional[Hashable] = None
    ) -> List[Candidate]:
        """Return library spectra whose precursor m/z lies in any interval.

        Raises
        ------
        DataAccessError
            If the file cannot be read, the experiment is missing, or a
            record is malformed
        """
        should_close = False
        if self._hdf_handle is None:
            hdf = self._open()
            should_close = True
        else:
            hdf = self._hdf_handle

        try:
            return self._read_candidates(hdf, intervals, _experiment_key(experiment_id))
        except KeyError as exc:
            raise DataAccessError(
                f"Experiment {experiment_id!r} not in {self.library_path.name}: {exc}"
            ) from exc
        except (OSError, ValueError) as exc:
            raise DataAccessError(f"Malformed spectral library {self.library_path.name}: {exc}") from exc
        finally:
            if should_close:
                hdf.close()

    def _read_candidates(self, hdf: h5py.File, intervals: List[Interval], key: str) -> List[Candidate]:
        group = hdf[EXPERIMENTS_GROUP][key]

        if key not in self.cache:
            self.cache[key] = group['precursor_mz'][:]
        precursor_mz = self.cache[key]

        libspectrum_ids = group['libspectrum_id']
        peak_start_idx = group['peak_start_idx']
        peak_stop_idx = group['peak_stop_idx']
        mz = group['mz']
        intensity = group['intensity']

        candidates = []
        for start, stop in interval_slices(precursor_mz, intervals):
            ids = libspectrum_ids[start:stop]
            starts = peak_start_idx[start:stop]
            stops = peak_stop_idx[start:stop]
            if len(starts) == 0:
                continue

            # One contiguous read per interval
            first, last = int(starts[0]), int(stops[-1])
            block_mz = mz[first:last]
            block_intensity = intensity[first:last]

            for i in range(stop - start):
                lo = int(starts[i]) - first
                hi = int(stops[i]) - first
                if lo < 0 or hi < lo or hi > len(block_mz):
                    raise ValueError(f"bad peak range for library spectrum {ids[i]}")
                candidates.append(Candidate(
                    libspectrum_id=int(ids[i]),
                    precursor_mz=float(precursor_mz[start + i]),
                    mz=block_mz[lo:hi],
                    intensity=block_intensity[lo:hi],
                ))

        logger.debug(f"Read {len(candidates):,} candidates from {self.library_path.name}")
        return candidates
