# tests/pipelines/test_simwire.py

"""
Tests for the event-level producer and the INIT-once event pipeline.
"""

import pytest
import numpy as np

from wiresim.core.datatypes import RawDigit
from wiresim.pipelines.simwire import produce, process_events, simulate_events
from wiresim.workflows.initialization import initialize
from wiresim.workflows.assembly import process


def make_event(label="largeant", charge=1e5):
    trace = np.zeros(10)
    trace[3] = charge
    return {label: {6: trace}, "other_producer": {0: np.ones(5)}}


def test_produce_selects_configured_label(quiet_config, geometry, clocks, detprop):
    context = initialize(quiet_config, geometry, clocks, detprop, verbose=False)
    digits = produce(context, make_event())

    assert len(digits) == geometry.n_channels
    assert all(isinstance(d, RawDigit) for d in digits)
    assert np.abs(digits[6].uncompressed()).max() > 0
    assert np.all(digits[0].uncompressed() == 0)


def test_produce_missing_label(quiet_config, geometry, clocks, detprop):
    context = initialize(quiet_config, geometry, clocks, detprop, verbose=False)
    with pytest.raises(KeyError, match="largeant"):
        produce(context, make_event(label="elsewhere"))


def test_simulate_events_matches_two_phase_api(noisy_config, geometry, clocks, detprop):
    events = [make_event(), make_event(charge=2e5), {"largeant": {}}]
    streamed = list(simulate_events(noisy_config, geometry, clocks, detprop, events, verbose=False))

    context = initialize(noisy_config, geometry, clocks, detprop, verbose=False)
    direct = [process(context, e["largeant"]) for e in events]

    assert len(streamed) == 3
    for a_event, b_event in zip(streamed, direct):
        for a, b in zip(a_event, b_event):
            assert a.channel == b.channel
            np.testing.assert_array_equal(a.uncompressed(), b.uncompressed())


def test_simulate_events_is_lazy(config, geometry, clocks, detprop):
    def events():
        yield make_event()
        raise RuntimeError("second event must not be read yet")

    stream = simulate_events(config, geometry, clocks, detprop, events(), verbose=False)
    first = next(stream)
    assert len(first) == geometry.n_channels


def test_progress_output(config, geometry, clocks, detprop, capsys):
    list(simulate_events(config, geometry, clocks, detprop, [make_event()] * 3, print_every=2))
    out = capsys.readouterr().out

    assert "SIMULATING EVENTS" in out
    assert "Event 0" in out
    assert "Event 2" in out
    assert "Event 1" not in out
    assert "Simulated 3 event(s)" in out


def test_process_events_reuses_context(noisy_config, geometry, clocks, detprop):
    events = [make_event(), make_event(charge=2e5)]
    context = initialize(noisy_config, geometry, clocks, detprop, verbose=False)
    streamed = list(process_events(context, iter(events), verbose=False))

    assert context.n_events == 2
    expected = list(simulate_events(noisy_config, geometry, clocks, detprop, events, verbose=False))
    for a_event, b_event in zip(streamed, expected):
        for a, b in zip(a_event, b_event):
            np.testing.assert_array_equal(a.uncompressed(), b.uncompressed())


def test_quiet_pipeline_prints_nothing(quiet_config, geometry, clocks, detprop, capsys):
    saturating = make_event(charge=1e9)
    list(simulate_events(quiet_config, geometry, clocks, detprop, [saturating], verbose=False))
    assert capsys.readouterr().out == ""
