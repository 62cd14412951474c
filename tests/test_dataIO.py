# tests/test_dataIO.py

"""
Tests for job configuration loading and .npz input/output.
"""

import pytest
import numpy as np
import yaml

from wiresim.core.config import STANDARD_SIMWIRE
from wiresim.core.dataIO import (load_config, job_from_config, load_deposit_events,
                                 save_raw_digits, load_raw_digits, save_diagnostics)
from wiresim.core.datatypes import Compression, DetectorClocks, Histogram, RawDigit, SignalType
from wiresim.core.errors import ConfigurationError
from wiresim.waveform.compression import compress


@pytest.fixture
def job_dict():
    return {
        "simwire": dict(STANDARD_SIMWIRE, seed=3),
        "geometry": {"planes": [
            {"x": 0.0, "signal_type": "induction", "n_wires": 4},
            {"x": 0.3, "signal_type": "collection", "n_wires": 4},
        ]},
        "detector": {"drift_velocity": 0.16, "number_time_samples": 512},
    }


def test_job_from_yaml(tmp_path, job_dict):
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump(job_dict))

    simwire, geometry, clocks, detprop = job_from_config(load_config(path))

    assert simwire.seed == 3
    assert geometry.n_channels == 8
    assert geometry.signal_type(7) is SignalType.COLLECTION
    assert clocks == DetectorClocks()
    assert detprop.number_time_samples == 512
    assert detprop.drift_velocity == pytest.approx(0.16)


def test_yaml_must_be_mapping(tmp_path):
    path = tmp_path / "job.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_missing_simwire_section(job_dict):
    del job_dict["simwire"]
    with pytest.raises(ConfigurationError):
        job_from_config(job_dict)


def test_unknown_detector_option(job_dict):
    job_dict["detector"]["temperature"] = 87.
    with pytest.raises(ConfigurationError):
        job_from_config(job_dict)


def test_deposit_events_in_numeric_order(tmp_path):
    path = tmp_path / "charges.npz"
    np.savez(path,
             event10=np.array([[1, 5, 100.]]),
             event2=np.array([[0, 3, 50.], [0, 4, 25.]]),
             event0=np.zeros((0, 3)),
             metadata=np.array([1, 2, 3]))

    events = list(load_deposit_events(path))

    assert [len(e) for e in events] == [0, 2, 1]
    np.testing.assert_allclose(events[1][:, 2], [50., 25.])
    assert events[2][0, 0] == 1


def test_raw_digit_round_trip(tmp_path):
    adc = np.array([0, 1, 1, 2, -40, -40, 3], dtype=np.int16)
    events = [
        [RawDigit(0, 7, adc, Compression.NONE),
         RawDigit(1, 7, compress(adc, Compression.HUFFMAN), Compression.HUFFMAN)],
        [],
    ]

    path = save_raw_digits(tmp_path / "digits", events)
    assert path.suffix == ".npz"
    assert path.exists()

    loaded = load_raw_digits(path)
    assert len(loaded) == 2
    assert loaded[1] == []
    first, second = loaded[0]
    assert first.channel == 0 and second.channel == 1
    assert second.compression is Compression.HUFFMAN
    np.testing.assert_array_equal(first.uncompressed(), adc)
    np.testing.assert_array_equal(second.uncompressed(), adc)


def test_save_diagnostics(tmp_path):
    hist = Histogram.from_curve("Ramp", "ramp", np.arange(4.))
    path = save_diagnostics(tmp_path / "diag.npz", {"Ramp": hist})

    with np.load(path) as data:
        np.testing.assert_array_equal(data["Ramp_counts"], [0., 1., 2., 3.])
        np.testing.assert_array_equal(data["Ramp_edges"], [0., 1., 2., 3., 4.])
