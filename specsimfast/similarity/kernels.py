"""Numba kernels for spectrum vectorization and vector similarity.

Core algorithms:
1. Binning: m/z -> integer bin index, intensities summed per bin
2. Profiling: peak intensity spread over neighbouring bins by a kernel
3. Peak matching: nearest-peak pairing within an m/z tolerance
4. Similarity: dot product, Euclidean, Pearson, lagged cross-correlation

Sparse bin representations are (sorted bin indices, summed values) pairs;
`densify_pair` expands two of them onto their common bin range so that
similarity kernels always see vectors of equal length.

Similarity kernels return `(score, degenerate)`. Degenerate inputs (zero
norm, zero variance, too few non-zero entries) give MIN_SIMILARITY and
`degenerate=True` instead of NaN or an exception.
"""

import numpy as np
from numba import njit
from typing import Tuple

from ..constants import MIN_SIMILARITY, MIN_CORRELATION_POINTS


PROFILE_PIECEWISE_LINEAR = 0
PROFILE_GAUSSIAN = 1


# =============================================================================
# Binning
# =============================================================================

@njit(cache=True)
def aggregate_bins(
    bin_indices: np.ndarray,
    values: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Sum values sharing a bin index.

    Parameters
    ----------
    bin_indices : np.ndarray (int64)
        Bin index per contribution (any order)
    values : np.ndarray (float64)
        Contribution per entry

    Returns
    -------
    bins : np.ndarray (int64)
        Unique bin indices, ascending
    sums : np.ndarray (float64)
        Summed value per bin
    """
    n = len(bin_indices)
    bins = np.empty(n, dtype=np.int64)
    sums = np.empty(n, dtype=np.float64)
    if n == 0:
        return bins, sums

    order = np.argsort(bin_indices, kind='mergesort')

    n_bins = 0
    for k in range(n):
        i = order[k]
        if n_bins > 0 and bins[n_bins - 1] == bin_indices[i]:
            sums[n_bins - 1] += values[i]
        else:
            bins[n_bins] = bin_indices[i]
            sums[n_bins] = values[i]
            n_bins += 1

    return bins[:n_bins].copy(), sums[:n_bins].copy()


@njit(cache=True)
def bin_index(mz: float, bin_width: float, bin_shift: float) -> int:
    """Bin index of an m/z value: floor((mz - shift) / width)."""
    return int(np.floor((mz - bin_shift) / bin_width))


@njit(cache=True)
def bin_peaks(
    mz: np.ndarray,
    intensity: np.ndarray,
    bin_width: float,
    bin_shift: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Direct binning: each peak adds its full intensity to one bin.

    Examples
    --------
    >>> bins, sums = bin_peaks(np.array([100.2, 100.7, 102.1]),
    ...                        np.array([1.0, 2.0, 4.0]), 1.0, 0.0)
    >>> # bins = [100, 102], sums = [3.0, 4.0]
    """
    n = len(mz)
    indices = np.empty(n, dtype=np.int64)
    for i in range(n):
        indices[i] = bin_index(mz[i], bin_width, bin_shift)
    return aggregate_bins(indices, intensity)


@njit(cache=True)
def profile_peaks(
    mz: np.ndarray,
    intensity: np.ndarray,
    bin_width: float,
    bin_shift: float,
    profile_shape: int,
    base_width: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Profile binning: spread each peak over neighbouring bins.

    Every bin whose centre lies within `base_width / 2` of the peak receives
    a share of the peak intensity weighted by a symmetric kernel:
    - PROFILE_PIECEWISE_LINEAR: triangle, 1 at the peak, 0 at +-base_width/2
    - PROFILE_GAUSSIAN: exp(-d^2 / 2 sigma^2) with sigma = base_width / 4

    Weights are normalised per peak, so the summed intensity equals the peak
    intensity. A peak whose kernel reaches no bin centre falls back to its
    own bin.
    """
    n = len(mz)
    half_width = base_width / 2.0
    sigma = base_width / 4.0
    max_span = int(np.ceil(base_width / bin_width)) + 2

    raw_bins = np.empty(n * max_span, dtype=np.int64)
    raw_values = np.empty(n * max_span, dtype=np.float64)
    weights = np.empty(max_span, dtype=np.float64)
    n_raw = 0

    for i in range(n):
        first = bin_index(mz[i] - half_width, bin_width, bin_shift)
        last = bin_index(mz[i] + half_width, bin_width, bin_shift)
        span = min(last - first + 1, max_span)

        total = 0.0
        for k in range(span):
            center = (first + k + 0.5) * bin_width + bin_shift
            distance = abs(center - mz[i])
            if distance >= half_width:
                weight = 0.0
            elif profile_shape == PROFILE_PIECEWISE_LINEAR:
                weight = 1.0 - distance / half_width
            else:
                weight = np.exp(-0.5 * (distance / sigma) ** 2)
            weights[k] = weight
            total += weight

        if total <= 0.0:
            raw_bins[n_raw] = bin_index(mz[i], bin_width, bin_shift)
            raw_values[n_raw] = intensity[i]
            n_raw += 1
            continue

        for k in range(span):
            if weights[k] > 0.0:
                raw_bins[n_raw] = first + k
                raw_values[n_raw] = intensity[i] * weights[k] / total
                n_raw += 1

    return aggregate_bins(raw_bins[:n_raw], raw_values[:n_raw])


@njit(cache=True)
def densify_pair(
    bins_a: np.ndarray,
    values_a: np.ndarray,
    bins_b: np.ndarray,
    values_b: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Expand two sparse bin representations onto their common bin range.

    Both outputs cover bins `min(first) .. max(last)`; bins absent from one
    spectrum are zero. Two empty inputs give two empty vectors.
    """
    if len(bins_a) == 0 and len(bins_b) == 0:
        return np.zeros(0, dtype=np.float64), np.zeros(0, dtype=np.float64)

    if len(bins_a) == 0:
        lo, hi = bins_b[0], bins_b[-1]
    elif len(bins_b) == 0:
        lo, hi = bins_a[0], bins_a[-1]
    else:
        lo = min(bins_a[0], bins_b[0])
        hi = max(bins_a[-1], bins_b[-1])

    size = hi - lo + 1
    dense_a = np.zeros(size, dtype=np.float64)
    dense_b = np.zeros(size, dtype=np.float64)
    for i in range(len(bins_a)):
        dense_a[bins_a[i] - lo] = values_a[i]
    for i in range(len(bins_b)):
        dense_b[bins_b[i] - lo] = values_b[i]

    return dense_a, dense_b


# =============================================================================
# Peak Matching (no binning)
# =============================================================================

@njit(cache=True)
def match_peaks(
    query_mz: np.ndarray,
    query_intensity: np.ndarray,
    candidate_mz: np.ndarray,
    candidate_intensity: np.ndarray,
    tolerance: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Pair query and candidate peaks and return aligned intensity vectors.

    Each query peak (in m/z order) takes the nearest still unused candidate
    peak with `|dmz| <= tolerance`. The result covers the union of peaks,
    sorted by m/z: matched pairs share one slot, unmatched peaks pair with 0.

    Parameters
    ----------
    query_mz, candidate_mz : np.ndarray
        Peak m/z values, MUST be sorted ascending
    query_intensity, candidate_intensity : np.ndarray
        Intensities parallel to the m/z arrays
    tolerance : float
        Absolute m/z matching tolerance

    Returns
    -------
    query_vector, candidate_vector : np.ndarray
        Aligned float64 vectors of equal length
    """
    n_query = len(query_mz)
    n_cand = len(candidate_mz)

    used = np.zeros(n_cand, dtype=np.bool_)
    keys = np.empty(n_query + n_cand, dtype=np.float64)
    vec_a = np.zeros(n_query + n_cand, dtype=np.float64)
    vec_b = np.zeros(n_query + n_cand, dtype=np.float64)
    n_slots = 0

    for i in range(n_query):
        target = query_mz[i]
        mz_min = target - tolerance
        mz_max = target + tolerance

        # Binary search for first candidate m/z >= mz_min
        left, right = 0, n_cand
        while left < right:
            mid = (left + right) // 2
            if candidate_mz[mid] < mz_min:
                left = mid + 1
            else:
                right = mid

        best = -1
        best_error = np.inf
        j = left
        while j < n_cand and candidate_mz[j] <= mz_max:
            error = abs(candidate_mz[j] - target)
            if not used[j] and error < best_error:
                best = j
                best_error = error
            j += 1

        keys[n_slots] = target
        vec_a[n_slots] = query_intensity[i]
        if best >= 0:
            used[best] = True
            vec_b[n_slots] = candidate_intensity[best]
        n_slots += 1

    for j in range(n_cand):
        if not used[j]:
            keys[n_slots] = candidate_mz[j]
            vec_b[n_slots] = candidate_intensity[j]
            n_slots += 1

    order = np.argsort(keys[:n_slots], kind='mergesort')
    return vec_a[:n_slots][order], vec_b[:n_slots][order]


# =============================================================================
# Vector Similarity
# =============================================================================

@njit(cache=True)
def _count_nonzero(vector: np.ndarray) -> int:
    count = 0
    for i in range(len(vector)):
        if vector[i] != 0.0:
            count += 1
    return count


@njit(cache=True)
def normalized_dot_product(a: np.ndarray, b: np.ndarray) -> Tuple[float, bool]:
    """Cosine of the angle between a and b, clipped to [-1, 1].

    Zero-norm vectors give (MIN_SIMILARITY, True). The norms share one
    square root, so a vector scored against itself gives exactly 1.0.
    """
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for i in range(len(a)):
        dot += a[i] * b[i]
        norm_a += a[i] * a[i]
        norm_b += b[i] * b[i]

    if norm_a == 0.0 or norm_b == 0.0:
        return MIN_SIMILARITY, True

    similarity = dot / np.sqrt(norm_a * norm_b)
    return max(-1.0, min(1.0, similarity)), False


@njit(cache=True)
def euclidean_similarity(a: np.ndarray, b: np.ndarray) -> Tuple[float, bool]:
    """1 / (1 + L2 distance) between the unit-normalised vectors.

    The distance of two non-negative unit vectors lies in [0, sqrt(2)], so
    the similarity lies in [1 / (1 + sqrt(2)), 1] and increases with
    agreement like the other scores.
    """
    norm_a = 0.0
    norm_b = 0.0
    for i in range(len(a)):
        norm_a += a[i] * a[i]
        norm_b += b[i] * b[i]

    if norm_a == 0.0 or norm_b == 0.0:
        return MIN_SIMILARITY, True

    norm_a = np.sqrt(norm_a)
    norm_b = np.sqrt(norm_b)
    squared = 0.0
    for i in range(len(a)):
        diff = a[i] / norm_a - b[i] / norm_b
        squared += diff * diff

    return 1.0 / (1.0 + np.sqrt(squared)), False


@njit(cache=True)
def pearson_correlation(a: np.ndarray, b: np.ndarray) -> Tuple[float, bool]:
    """Pearson correlation coefficient of a and b.

    Degenerate when fewer than MIN_CORRELATION_POINTS entries are non-zero in
    either vector, or either vector has zero variance.
    """
    n = len(a)
    if n < 2:
        return MIN_SIMILARITY, True
    if _count_nonzero(a) < MIN_CORRELATION_POINTS or _count_nonzero(b) < MIN_CORRELATION_POINTS:
        return MIN_SIMILARITY, True

    mean_a = np.mean(a)
    mean_b = np.mean(b)

    cov = 0.0
    var_a = 0.0
    var_b = 0.0
    for i in range(n):
        da = a[i] - mean_a
        db = b[i] - mean_b
        cov += da * db
        var_a += da * da
        var_b += db * db

    if var_a == 0.0 or var_b == 0.0:
        return MIN_SIMILARITY, True

    r = cov / np.sqrt(var_a * var_b)
    return max(-1.0, min(1.0, r)), False


@njit(cache=True)
def cross_correlation(
    a: np.ndarray,
    b: np.ndarray,
    max_lag: int,
) -> Tuple[float, int, bool]:
    """Maximum normalised cross-correlation over lags -max_lag..+max_lag.

    For each lag the score is `sum_i a[i] * b[i + lag] / (|a| |b|)`, so lag 0
    equals the normalised dot product. Lags are visited in order of
    increasing |lag| (negative first), and the first maximum wins.

    Returns
    -------
    score : float
        Best correlation value
    best_lag : int
        Lag (in vector slots) achieving the best score
    degenerate : bool
        True when either vector has fewer than MIN_CORRELATION_POINTS
        non-zero entries
    """
    n = len(a)
    if _count_nonzero(a) < MIN_CORRELATION_POINTS or _count_nonzero(b) < MIN_CORRELATION_POINTS:
        return MIN_SIMILARITY, 0, True

    norm_a = 0.0
    norm_b = 0.0
    for i in range(n):
        norm_a += a[i] * a[i]
        norm_b += b[i] * b[i]
    denominator = np.sqrt(norm_a * norm_b)

    best_score = -np.inf
    best_lag = 0
    for step in range(2 * max_lag + 1):
        # 0, -1, +1, -2, +2, ...
        if step == 0:
            lag = 0
        elif step % 2 == 1:
            lag = -((step + 1) // 2)
        else:
            lag = step // 2

        total = 0.0
        start = max(0, -lag)
        stop = min(n, n - lag)
        for i in range(start, stop):
            total += a[i] * b[i + lag]

        score = total / denominator
        if score > best_score:
            best_score = score
            best_lag = lag

    return max(-1.0, min(1.0, best_score)), best_lag, False
