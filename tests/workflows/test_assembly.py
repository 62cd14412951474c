# tests/workflows/test_assembly.py

"""
Tests for per-event signal assembly: convolution, noise selection,
quantization, readout sizing and compression.
"""

import pytest
import numpy as np

from wiresim.core.config import SimWireConfig
from wiresim.core.datatypes import Compression, DetectorProperties, SignalType
from wiresim.workflows.initialization import initialize
from wiresim.workflows.assembly import charges_from_deposits, simulate_channel, process
from wiresim.waveform.spectral import do_inv_fft
from wiresim.waveform.digitization import quantize, ADC_MAX

COLLECTION_CHANNEL = 6
INDUCTION_CHANNEL = 1


@pytest.fixture
def quiet_context(quiet_config, geometry, clocks, detprop):
    return initialize(quiet_config, geometry, clocks, detprop, verbose=False)


@pytest.fixture
def noisy_context(noisy_config, geometry, clocks, detprop):
    return initialize(noisy_config, geometry, clocks, detprop, verbose=False)


def impulse(charge, tick=0):
    trace = np.zeros(tick + 1)
    trace[tick] = charge
    return trace


def test_zero_charge_zero_noise(quiet_context):
    digits = process(quiet_context, {})

    assert [d.channel for d in digits] == list(range(10))
    for digit in digits:
        assert digit.samples == 256
        assert digit.compression is Compression.NONE
        assert np.all(digit.uncompressed() == 0)


def test_unit_impulse_is_quantized_transfer_response(quiet_context):
    digits = process(quiet_context, {COLLECTION_CHANNEL: impulse(1.0)})

    tf = quiet_context.transfer[SignalType.COLLECTION]
    expected, _ = quantize(do_inv_fft(tf.coefficients, 256))
    np.testing.assert_array_equal(digits[COLLECTION_CHANNEL].uncompressed(), expected)


@pytest.mark.parametrize("channel, signal_type", [
    (COLLECTION_CHANNEL, SignalType.COLLECTION),
    (INDUCTION_CHANNEL, SignalType.INDUCTION),
])
def test_large_impulse_follows_plane_type(quiet_context, channel, signal_type):
    charge = 1e6
    digits = process(quiet_context, {channel: impulse(charge)})

    expected = charge * quiet_context.transfer[signal_type].time_shape
    adc = digits[channel].uncompressed().astype(np.float64)
    np.testing.assert_allclose(adc, expected, atol=1.0)
    assert np.abs(adc).max() > 50
    # other channels see nothing
    assert all(np.all(d.uncompressed() == 0) for d in digits if d.channel != channel)


def test_delayed_impulse_shifts_response(quiet_context):
    digits = process(quiet_context, {COLLECTION_CHANNEL: impulse(1e5, tick=40)})
    shape = 1e5 * np.roll(quiet_context.transfer[SignalType.COLLECTION].time_shape, 40)
    np.testing.assert_allclose(digits[COLLECTION_CHANNEL].uncompressed(), shape, atol=1.0)


def test_readout_shorter_than_window(quiet_config, geometry, clocks):
    detprop = DetectorProperties(drift_velocity=0.1114, number_time_samples=200)
    context = initialize(quiet_config, geometry, clocks, detprop, verbose=False)
    digits = process(context, {COLLECTION_CHANNEL: impulse(1e5)})

    assert context.n_ticks == 256
    for digit in digits:
        assert digit.samples == 200
        assert len(digit.uncompressed()) == 200


def test_charge_longer_than_window_is_cut(quiet_context):
    trace = np.zeros(400)
    trace[300] = 1e5
    digits = process(quiet_context, {COLLECTION_CHANNEL: trace})
    assert np.all(digits[COLLECTION_CHANNEL].uncompressed() == 0)


def test_noise_draw_order(noisy_context, noisy_config):
    """Bank first (two draws per bin per waveform), then one pick per channel."""
    digits = process(noisy_context, {})

    replay = np.random.default_rng(noisy_config.seed)
    replay.random(4 * 129 * 2)
    for digit in digits:
        idx = int(replay.random() * 4)
        expected, _ = quantize(noisy_context.noise[idx])
        np.testing.assert_array_equal(digit.uncompressed(), expected)


def test_single_waveform_bank(geometry, clocks, detprop):
    config = SimWireConfig.standard(seed=3, noise_bank_size=1, noise_fact=5.0)
    context = initialize(config, geometry, clocks, detprop, verbose=False)
    expected, _ = quantize(context.noise[0])

    for _ in range(3):
        for digit in process(context, {}):
            np.testing.assert_array_equal(digit.uncompressed(), expected)


def test_simulate_channel_consumes_one_draw(noisy_context):
    state = noisy_context.rng.bit_generator.state
    simulate_channel(noisy_context, 0, None)

    replay = np.random.default_rng()
    replay.bit_generator.state = state
    replay.random()
    assert noisy_context.rng.random() == replay.random()


def test_same_seed_reproducible(noisy_config, geometry, clocks, detprop):
    runs = []
    for _ in range(2):
        context = initialize(noisy_config, geometry, clocks, detprop, verbose=False)
        event = {COLLECTION_CHANNEL: impulse(1e5), INDUCTION_CHANNEL: impulse(5e4, tick=10)}
        runs.append([d.uncompressed() for d in process(context, event)])
    for a, b in zip(*runs):
        np.testing.assert_array_equal(a, b)


def test_huffman_matches_uncompressed(noisy_config, geometry, clocks, detprop):
    huffman_config = SimWireConfig.standard(seed=7, noise_bank_size=4, noise_fact=5.0,
                                            compression="Huffman")
    event = {COLLECTION_CHANNEL: impulse(1e5), INDUCTION_CHANNEL: impulse(5e4)}

    plain = process(initialize(noisy_config, geometry, clocks, detprop, verbose=False), event)
    packed = process(initialize(huffman_config, geometry, clocks, detprop, verbose=False), event)

    for a, b in zip(plain, packed):
        assert b.compression is Compression.HUFFMAN
        assert b.samples == a.samples
        np.testing.assert_array_equal(b.uncompressed(), a.adc)


def test_saturation_is_reported(quiet_context, capsys):
    digits = process(quiet_context, {COLLECTION_CHANNEL: impulse(1e9)})

    adc = digits[COLLECTION_CHANNEL].uncompressed()
    assert adc.max() == ADC_MAX
    assert "saturated" in capsys.readouterr().out


def test_unknown_channels_ignored(quiet_context, capsys):
    digits = process(quiet_context, {99: impulse(1e5), -2: impulse(1e5)})

    assert len(digits) == 10
    assert all(np.all(d.uncompressed() == 0) for d in digits)
    assert "outside the geometry" in capsys.readouterr().out


def test_repeated_events_share_init(noisy_context):
    noise = noisy_context.noise
    transfer = noisy_context.transfer

    process(noisy_context, {})
    process(noisy_context, {COLLECTION_CHANNEL: impulse(1e5)})

    assert noisy_context.n_events == 2
    assert noisy_context.noise is noise
    assert noisy_context.transfer is transfer


class TestChargesFromDeposits:

    def test_accumulates(self):
        traces = charges_from_deposits([(3, 5, 10.), (3, 5, 2.5), (3, 1, 1.), (0, 0, 4.)])
        assert set(traces) == {0, 3}
        assert len(traces[3]) == 6
        assert traces[3][5] == pytest.approx(12.5)
        assert traces[3][1] == pytest.approx(1.)
        np.testing.assert_array_equal(traces[0], [4.])

    def test_fixed_length_drops_late_ticks(self):
        traces = charges_from_deposits([(1, 2, 1.), (1, 9, 5.)], n_ticks=4)
        np.testing.assert_array_equal(traces[1], [0., 0., 1., 0.])

    def test_negative_tdc(self):
        with pytest.raises(ValueError):
            charges_from_deposits([(1, -1, 1.)])


def test_quiet_mode_suppresses_warnings(quiet_context, capsys):
    digits = process(quiet_context, {COLLECTION_CHANNEL: impulse(1e9), 99: impulse(1e5)}, verbose=False)

    assert digits[COLLECTION_CHANNEL].uncompressed().max() == ADC_MAX
    assert capsys.readouterr().out == ""
