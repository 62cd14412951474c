"""Analog trace -> ADC samples."""

import numpy as np # type: ignore

ADC_MIN = np.iinfo(np.int16).min
ADC_MAX = np.iinfo(np.int16).max


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer, ties away from zero (np.rint would round to even)."""
    values = np.asarray(values, dtype=np.float64)
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def quantize(values: np.ndarray) -> tuple[np.ndarray, int]:
    """
    Round to ADC counts and saturate at the int16 limits.

    Returns:
        (int16 samples, number of saturated samples)
    """
    rounded = round_half_away(values)
    saturated = int(np.count_nonzero((rounded < ADC_MIN) | (rounded > ADC_MAX)))
    return np.clip(rounded, ADC_MIN, ADC_MAX).astype(np.int16), saturated


def resize_readout(adc: np.ndarray, n_samples: int) -> np.ndarray:
    """Truncate to, or zero-pad up to, the readout-sample count."""
    out = np.zeros(n_samples, dtype=np.int16)
    n = min(len(adc), n_samples)
    out[:n] = adc[:n]
    return out
