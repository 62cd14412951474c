# wiresim/core/units.py
"""
Lightweight unit helpers for the canonical internal representation.
Times are kept in ns (one tick = sampling_rate ns), drift velocities in cm/µs
as detector properties report them, frequencies in kHz.
"""

# -------------------------------
# Base conversion helpers
# -------------------------------

def ns_to_ms(ns_value: float) -> float:
    """Convert ns → ms."""
    return ns_value * 1e-6

def cm_per_us_to_cm_per_ns(speed: float) -> float:
    """
    Convert drift speed from cm/µs to cm/ns.

    Parameters
    ----------
    speed : float
        Speed in cm/µs

    Returns
    -------
    float
        Speed in cm/ns
    """
    return speed / 1000.


# -------------------------------
# Derived sampling quantities
# -------------------------------

def frequency_bin_width(n_ticks: int, sampling_rate: float) -> float:
    """
    Width of one frequency bin [kHz] for an N-tick window sampled every
    `sampling_rate` ns.
    """
    return 1.0 / ns_to_ms(n_ticks * sampling_rate)
