"""Shaping response of the readout electronics."""

import numpy as np # type: ignore

from wiresim.core.config import ELECTRONICS_SCALE, ELECTRONICS_T0_FRACTION, RESPONSE_TRIM_FRACTION
from wiresim.core.datatypes import ResponseCurve
from wiresim.core.errors import DegenerateResponseError


def electronics_shape(n_ticks: int, sampling_rate: float, shape_time_const: tuple[float, float]) -> np.ndarray:
    """
    Untrimmed bi-exponential shaping response on N ticks.

        r(t) = A * exp(-t/tau0) / (1 + exp(-t/tau1)) / norm,  t = (i - N/3) * rate

    with norm = tau1 * pi / (sin(pi * tau1 / tau0) / rate), the continuous-time
    area of the shape. Evaluated in log space so large |t| neither overflows nor
    produces inf/inf.
    """
    tau0, tau1 = shape_time_const
    sin_term = np.sin(tau1 * np.pi / tau0)
    if np.isclose(sin_term, 0.):
        raise DegenerateResponseError(f"Shaping time ratio tau1/tau0 = {tau1 / tau0:g} is an integer; "
                                      "the electronics response cannot be normalized")
    norm = tau1 * np.pi / (sin_term / sampling_rate)

    time = (np.arange(n_ticks, dtype=np.float64) - ELECTRONICS_T0_FRACTION * n_ticks) * sampling_rate
    log_shape = -time / tau0 - np.logaddexp(0., -time / tau1)
    return ELECTRONICS_SCALE * np.exp(log_shape) / norm


def trim_response(samples: np.ndarray, fraction: float = RESPONSE_TRIM_FRACTION) -> np.ndarray:
    """Drop every sample below `fraction` of the peak."""
    samples = np.asarray(samples, dtype=np.float64)
    peak = samples.max() if len(samples) else 0.
    if not np.isfinite(peak) or peak <= 0:
        raise DegenerateResponseError(f"Electronics response peak is {peak}; nothing to normalize against")
    return samples[samples >= fraction * peak]


def electronics_response(n_ticks: int, sampling_rate: float, shape_time_const: tuple[float, float]) -> ResponseCurve:
    """Trimmed electronics response; its length sets the convolution depth."""
    shape = electronics_shape(n_ticks, sampling_rate, shape_time_const)
    return ResponseCurve("ElectronicsResponse", trim_response(shape))
