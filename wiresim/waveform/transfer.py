"""Field x electronics convolution and the per-plane transfer functions."""

import numpy as np # type: ignore

from wiresim.core.datatypes import ResponseCurve, SignalType, TransferFunction
from .spectral import aligned_sum, do_fft


def convolve_responses(electronics: ResponseCurve, field: ResponseCurve, n_ticks: int) -> np.ndarray:
    """
    Time-domain convolution of the electronics and field responses.

        s[i] = sum_{j < min(field_bins, i)} e[i - j] * f[j],  1 <= i < min(N, len(e) + field_bins)

    s[0] is 0 and e[0] never contributes. Electronics samples past its
    trimmed length count as zero; a window shorter than the combined length
    silently truncates the shape.

    Returns:
        N-sample shape, zero-padded
    """
    e = np.array(electronics.samples)
    if len(e):
        e[0] = 0.
    f = field.samples

    mxbin = min(n_ticks, len(e) + len(f))
    shape = np.zeros(n_ticks)
    if mxbin > 0 and len(e) and len(f):
        full = np.convolve(e, f)
        n = min(mxbin, len(full))
        shape[:n] = full[:n]
        shape[0] = 0.
    return shape


def unit_doublet(n_ticks: int) -> np.ndarray:
    """Two-point unit impulse straddling tick 0 (ticks 0 and N-1)."""
    delta = np.zeros(n_ticks)
    delta[0] = 1.0
    delta[n_ticks - 1] = 1.0
    return delta


def build_transfer_function(signal_type: SignalType,
                            electronics: ResponseCurve,
                            field: ResponseCurve,
                            n_ticks: int,
                            fit_bins: int = 5) -> TransferFunction:
    """
    Convolve, align the peak onto tick 0 and transform to frequency space.
    """
    shape = convolve_responses(electronics, field, n_ticks)
    aligned = aligned_sum(shape, unit_doublet(n_ticks), add=False, fit_bins=fit_bins)
    return TransferFunction(signal_type=signal_type,
                            coefficients=do_fft(aligned, n_ticks),
                            time_shape=aligned)
