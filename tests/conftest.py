"""
Shared pytest fixtures for all test modules.
"""

import pytest
import numpy as np

from wiresim.core.config import SimWireConfig
from wiresim.core.datatypes import Geometry, PlaneGeo, SignalType, DetectorClocks, DetectorProperties


N_TICKS = 256


@pytest.fixture
def geometry():
    """Three planes 0.3 cm apart: U, V induction (3 wires each), Y collection (4 wires)."""
    return Geometry(planes=(
        PlaneGeo(x=0.0, signal_type=SignalType.INDUCTION, n_wires=3),
        PlaneGeo(x=0.3, signal_type=SignalType.INDUCTION, n_wires=3),
        PlaneGeo(x=0.6, signal_type=SignalType.COLLECTION, n_wires=4),
    ))


@pytest.fixture
def clocks():
    return DetectorClocks(sampling_rate=500.0, trigger_offset=0)


@pytest.fixture
def detprop():
    """Readout window equal to the FFT window."""
    return DetectorProperties(drift_velocity=0.1114, number_time_samples=N_TICKS)


@pytest.fixture
def config():
    """Reference parameters, fixed seed, small noise bank."""
    return SimWireConfig.standard(seed=42, noise_bank_size=5)


@pytest.fixture
def quiet_config():
    """No noise at all: output is the pure convolved signal."""
    return SimWireConfig.standard(seed=42, noise_bank_size=5, noise_fact=0.0)


@pytest.fixture
def noisy_config():
    """Noise large enough to survive quantization."""
    return SimWireConfig.standard(seed=7, noise_bank_size=4, noise_fact=5.0)


@pytest.fixture
def rng():
    return np.random.default_rng(2024)
