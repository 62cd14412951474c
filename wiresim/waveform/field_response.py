"""Field response of collection and induction wires to a unit of drifting charge."""

import numpy as np # type: ignore

from wiresim.core.datatypes import ResponseCurve
from wiresim.core.errors import ConfigurationError, DegenerateResponseError
from wiresim.core.units import cm_per_us_to_cm_per_ns
from .digitization import round_half_away


def field_bin_count(correction_3d: float, pitch: float, drift_velocity: float, sampling_rate: float) -> int:
    """
    Number of ticks the drifting charge spends between planes.

    Args:
        correction_3d: path-length correction for electrons drifting in 3D
        pitch: plane spacing (cm)
        drift_velocity: (cm/µs)
        sampling_rate: (ns/tick)
    """
    v_cm_per_ns = cm_per_us_to_cm_per_ns(drift_velocity)
    if v_cm_per_ns * sampling_rate <= 0:
        raise ConfigurationError(f"Drift velocity ({drift_velocity} cm/µs) and sampling rate "
                                 f"({sampling_rate} ns) must be positive")
    return int(round_half_away(correction_3d * abs(pitch) / (v_cm_per_ns * sampling_rate)))


def collection_field_response(field_bins: int, nbinc: int, amplitude: float) -> ResponseCurve:
    """
    Linear ramp over the first `nbinc` bins, scaled so the ramp sums to `amplitude`.

    The first entry is 0, so at least two bins are needed for a finite normalization.
    """
    if nbinc > field_bins:
        raise ConfigurationError(f"Collection response needs {nbinc} bins but field_bins={field_bins}")
    if nbinc <= 1:
        raise DegenerateResponseError(f"Collection field response spans {nbinc} bin(s); "
                                      "its area is zero and cannot be normalized")

    response = np.zeros(field_bins)
    response[:nbinc] = np.arange(nbinc, dtype=np.float64)
    response[:nbinc] *= amplitude / response[:nbinc].sum()
    return ResponseCurve("CollectionFieldResponse", response)


def induction_field_response(field_bins: int, nbini: int, amplitude: float) -> ResponseCurve:
    """Bipolar response: +amplitude/nbini for nbini bins, then -amplitude/nbini for nbini bins."""
    if nbini <= 0:
        raise DegenerateResponseError(f"Induction field response spans {nbini} bins; "
                                      "its plateau height is undefined")
    if 2 * nbini > field_bins:
        raise ConfigurationError(f"Induction response needs {2 * nbini} bins but field_bins={field_bins}")

    response = np.zeros(field_bins)
    response[:nbini] = amplitude / nbini
    response[nbini:2 * nbini] = -amplitude / nbini
    return ResponseCurve("InductionFieldResponse", response)
