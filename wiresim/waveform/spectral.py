"""
Real-FFT helpers for a fixed N-tick window.

Forward transforms are unnormalized, inverse transforms divide by N, so
irfft(rfft(x)) == x and convolution is a plain product of spectra.
"""

from typing import Optional

import numpy as np # type: ignore
from scipy import fft as sp_fft # type: ignore
from lmfit.models import GaussianModel # type: ignore


def fft_size(n_samples_readout: int, requested: Optional[int] = None) -> int:
    """
    Number of ticks N used for all transforms.

    Starts from the requested size (or the readout window when none is given),
    never smaller than the readout window, rounded up to a power of two.
    """
    size = n_samples_readout if requested is None else max(requested, n_samples_readout)
    n = 1
    while n < size:
        n *= 2
    return max(n, 2)


def do_fft(samples: np.ndarray, n_ticks: int) -> np.ndarray:
    """Forward real FFT: N samples -> N//2 + 1 complex coefficients."""
    return sp_fft.rfft(np.asarray(samples, dtype=np.float64), n=n_ticks)


def do_inv_fft(spectrum: np.ndarray, n_ticks: int) -> np.ndarray:
    """Inverse real FFT (divides by N): N//2 + 1 coefficients -> N samples."""
    return sp_fft.irfft(np.asarray(spectrum, dtype=np.complex128), n=n_ticks)


def fit_to_window(samples: np.ndarray, n_ticks: int) -> np.ndarray:
    """Zero-pad or cut a trace to exactly N samples."""
    samples = np.asarray(samples, dtype=np.float64)
    out = np.zeros(n_ticks, dtype=np.float64)
    n = min(len(samples), n_ticks)
    out[:n] = samples[:n]
    return out


def convolute(samples: np.ndarray, kernel: np.ndarray, n_ticks: int) -> np.ndarray:
    """
    Circular convolution of a trace with a frequency-space kernel.

    Args:
        samples: time-domain trace (padded or cut to N)
        kernel: N//2 + 1 complex coefficients
        n_ticks: window size N

    Returns:
        N-sample time-domain trace
    """
    if len(kernel) != n_ticks // 2 + 1:
        raise ValueError(f"Kernel length {len(kernel)} does not match {n_ticks} ticks")
    samples = fit_to_window(samples, n_ticks)
    return do_inv_fft(do_fft(samples, n_ticks) * kernel, n_ticks)


def correlation(shape1: np.ndarray, shape2: np.ndarray) -> np.ndarray:
    """
    Circular cross-correlation c[m] = sum_n shape1[n + m] * shape2[n].
    """
    n_ticks = len(shape1)
    return do_inv_fft(do_fft(shape1, n_ticks) * np.conj(do_fft(shape2, n_ticks)), n_ticks)


def peak_correlation(shape1: np.ndarray, shape2: np.ndarray, fit_bins: int = 5) -> float:
    """
    Lag (in ticks, possibly fractional) at which shape1 best matches shape2.

    The extreme bin of the cross-correlation is taken (the minimum when its
    magnitude exceeds the maximum, for bipolar shapes), then refined with a
    Gaussian fit over `fit_bins` bins on either side.
    """
    holder = correlation(shape1, shape2)
    n_ticks = len(holder)

    max_t, min_t = int(np.argmax(holder)), int(np.argmin(holder))
    if abs(holder[min_t]) > holder[max_t]:
        holder = -holder
        max_t = min_t

    if not np.any(holder > 0):
        return float(max_t)

    offsets = np.arange(-fit_bins, fit_bins + 1)
    window = holder[(max_t + offsets) % n_ticks]
    window = np.clip(window, 0., None)

    model = GaussianModel()
    params = model.make_params(amplitude=window.sum(), center=0., sigma=max(1., fit_bins / 2.))
    params["center"].set(min=-fit_bins, max=fit_bins)
    result = model.fit(window, params, x=offsets.astype(np.float64))

    center = result.params["center"].value
    if not np.isfinite(center):
        center = 0.
    return float(max_t + center)


def shift_data(samples: np.ndarray, shift: float) -> np.ndarray:
    """Circularly delay a trace by `shift` ticks (fractional shifts via a phase ramp)."""
    n_ticks = len(samples)
    k = np.arange(n_ticks // 2 + 1)
    phase = np.exp(-2j * np.pi * k * shift / n_ticks)
    return do_inv_fft(do_fft(samples, n_ticks) * phase, n_ticks)


def aligned_sum(shape1: np.ndarray, shape2: np.ndarray, add: bool = True, fit_bins: int = 5) -> np.ndarray:
    """
    Shift shape1 so it lines up with shape2; optionally add shape2 to it.

    Returns:
        The aligned (and summed, if `add`) copy of shape1
    """
    lag = peak_correlation(shape1, shape2, fit_bins=fit_bins)
    aligned = shift_data(shape1, -lag)
    if add:
        aligned = aligned + np.asarray(shape2, dtype=np.float64)
    return aligned
