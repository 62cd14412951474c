# workflows/initialization.py

"""
INIT phase: build response curves, transfer functions and the noise bank.

Runs once per job and returns the SimWireContext every event is processed with.
"""

from typing import Optional

import numpy as np # type: ignore

from wiresim.core.config import SimWireConfig, NOISE_HIST_BINNING
from wiresim.core.datatypes import (SimWireContext, Geometry, DetectorClocks, DetectorProperties,
                                    SignalType, ResponseCurve, TransferFunction, NoiseBank, Histogram)
from wiresim.waveform.spectral import fft_size
from wiresim.waveform.field_response import field_bin_count, collection_field_response, induction_field_response
from wiresim.waveform.electronics_response import electronics_response
from wiresim.waveform.transfer import build_transfer_function
from wiresim.waveform.noise import generate_noise_bank


def make_rng(config: SimWireConfig, rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    """A configured seed wins over an injected generator; with neither, seed from the OS."""
    if config.seed is not None:
        return np.random.default_rng(config.seed)
    if rng is not None:
        return rng
    return np.random.default_rng()


def set_field_response(config: SimWireConfig,
                       geometry: Geometry,
                       clocks: DetectorClocks,
                       detprop: DetectorProperties) -> tuple[ResponseCurve, ResponseCurve]:
    """
    Collection (ramp) and induction (bipolar) field responses.

    Returns:
        (collection, induction)
    """
    pitch = geometry.plane_pitch
    nbinc = field_bin_count(config.col_3d_correction, pitch, detprop.drift_velocity, clocks.sampling_rate)
    nbini = field_bin_count(config.ind_3d_correction, pitch, detprop.drift_velocity, clocks.sampling_rate)

    collection = collection_field_response(config.field_bins, nbinc, config.col_field_resp_amp)
    induction = induction_field_response(config.field_bins, nbini, config.ind_field_resp_amp)
    return collection, induction


def convolute_response_functions(config: SimWireConfig,
                                 electronics: ResponseCurve,
                                 collection: ResponseCurve,
                                 induction: ResponseCurve,
                                 n_ticks: int) -> dict[SignalType, TransferFunction]:
    """One transfer function per geometry class."""
    return {
        SignalType.COLLECTION: build_transfer_function(SignalType.COLLECTION, electronics, collection,
                                                       n_ticks, fit_bins=config.fit_bins),
        SignalType.INDUCTION: build_transfer_function(SignalType.INDUCTION, electronics, induction,
                                                      n_ticks, fit_bins=config.fit_bins),
    }


def make_diagnostics(n_ticks: int,
                     collection: ResponseCurve,
                     induction: ResponseCurve,
                     electronics: ResponseCurve,
                     transfer: dict[SignalType, TransferFunction],
                     noise: NoiseBank) -> dict[str, Histogram]:
    """Histograms handed to the diagnostics sink at INIT."""
    nbins, low, high = NOISE_HIST_BINNING
    hists = [
        Histogram.from_curve("CollectionFieldResponse", ";t (ns);Collection Response",
                             collection.samples, nbins=n_ticks),
        Histogram.from_curve("InductionFieldResponse", ";t (ns);Induction Response",
                             induction.samples, nbins=n_ticks),
        Histogram.from_curve("ElectronicsResponse", ";t (ns);Electronics Response",
                             electronics.samples),
        Histogram.from_curve("ConvolutedCollection", ";ticks; Electronics#timesCollection",
                             transfer[SignalType.COLLECTION].time_shape),
        Histogram.from_curve("ConvolutedInduction", ";ticks; Electronics#timesInduction",
                             transfer[SignalType.INDUCTION].time_shape),
        Histogram.filled("Noise", ";Noise (ADC);", nbins, low, high, noise.waveforms.ravel()),
    ]
    return {h.name: h for h in hists}


def initialize(config: SimWireConfig,
               geometry: Geometry,
               clocks: DetectorClocks,
               detprop: DetectorProperties,
               rng: Optional[np.random.Generator] = None,
               verbose: bool = True) -> SimWireContext:
    """
    Build everything the per-event step needs.

    Random draws: the whole noise bank is generated here, channel 0 first,
    before any event consumes the generator.

    Args:
        config: Validated simulation configuration
        geometry: Wire planes (at least two)
        clocks: Sampling rate and trigger offset
        detprop: Drift velocity and readout window size
        rng: Generator to own; ignored when config.seed is set
        verbose: Print the INIT summary

    Returns:
        SimWireContext owned by a single executor

    Raises:
        ConfigurationError, GeometryError, DegenerateResponseError
    """
    if verbose:
        print("\n" + "="*60)
        print("SIMWIRE INITIALIZATION")
        print("="*60)

    n_ticks = fft_size(detprop.number_time_samples, config.fft_size)
    rng = make_rng(config, rng)
    if verbose:
        print(f"Channels: {geometry.n_channels}, FFT window: {n_ticks} ticks of {clocks.sampling_rate} ns, "
              f"trigger offset: {clocks.trigger_offset} ticks")

    # [1] Noise bank
    noise = generate_noise_bank(rng, config.noise_bank_size, n_ticks, clocks.sampling_rate,
                                config.noise_fact, config.noise_width, config.low_cutoff)
    if verbose:
        print(f"\n[1/3] Noise bank: {len(noise)} waveforms x {n_ticks} ticks")
        print(f"  ✓ Noise RMS: {noise.waveforms.std():.3f} ADC")

    # [2] Field and electronics responses
    collection, induction = set_field_response(config, geometry, clocks, detprop)
    electronics = electronics_response(n_ticks, clocks.sampling_rate, config.shape_time_const)
    if verbose:
        print(f"\n[2/3] Responses (plane pitch {geometry.plane_pitch:.3f} cm)")
        print(f"  ✓ Collection field bins: {np.count_nonzero(collection.samples)}")
        print(f"  ✓ Induction field bins:  {np.count_nonzero(induction.samples)}")
        print(f"  ✓ Electronics response: {len(electronics)} ticks")

    # [3] Transfer functions
    transfer = convolute_response_functions(config, electronics, collection, induction, n_ticks)
    if verbose:
        print(f"\n[3/3] Transfer functions: {n_ticks // 2 + 1} coefficients per plane type")
        if detprop.number_time_samples < n_ticks:
            print(f"  ⚠ Readout window ({detprop.number_time_samples}) shorter than "
                  f"FFT window ({n_ticks}); digits will be truncated")

    diagnostics = make_diagnostics(n_ticks, collection, induction, electronics, transfer, noise)

    return SimWireContext(config=config,
                          geometry=geometry,
                          clocks=clocks,
                          detprop=detprop,
                          n_ticks=n_ticks,
                          rng=rng,
                          collection_field=collection,
                          induction_field=induction,
                          electronics=electronics,
                          transfer=transfer,
                          noise=noise,
                          diagnostics=diagnostics)
