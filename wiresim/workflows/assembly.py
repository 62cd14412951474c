# workflows/assembly.py

"""
PER-EVENT phase: charge traces -> RawDigits for every channel.
"""

from typing import Mapping, Iterable, Optional

import numpy as np # type: ignore

from wiresim.core.datatypes import SimWireContext, RawDigit
from wiresim.waveform.spectral import convolute, fit_to_window
from wiresim.waveform.noise import pick_noise_channel
from wiresim.waveform.digitization import quantize, resize_readout
from wiresim.waveform.compression import compress


def charges_from_deposits(deposits: Iterable[tuple[int, int, float]],
                          n_ticks: Optional[int] = None) -> dict[int, np.ndarray]:
    """
    Accumulate sparse (channel, tdc, charge) deposits into per-channel traces.

    Deposits with the same channel and tdc add up. Traces are as long as the
    latest tdc seen on the channel, or `n_ticks` when given (later tdcs dropped).
    """
    per_channel: dict[int, dict[int, float]] = {}
    for channel, tdc, charge in deposits:
        if tdc < 0:
            raise ValueError(f"Negative tdc {tdc} on channel {channel}")
        ticks = per_channel.setdefault(int(channel), {})
        ticks[int(tdc)] = ticks.get(int(tdc), 0.) + float(charge)

    traces = {}
    for channel, ticks in per_channel.items():
        length = max(ticks) + 1 if n_ticks is None else n_ticks
        trace = np.zeros(length)
        for tdc, charge in ticks.items():
            if tdc < length:
                trace[tdc] += charge
        traces[channel] = trace
    return traces


def simulate_channel(context: SimWireContext, channel: int, charges: Optional[np.ndarray]) -> tuple[RawDigit, int]:
    """
    Signal, noise, digitization and compression of one channel.

    Consumes exactly one draw from the context's generator.

    Returns:
        (RawDigit, number of saturated samples)
    """
    n_ticks = context.n_ticks
    if charges is None:
        signal = np.zeros(n_ticks)
    else:
        transfer = context.transfer[context.geometry.signal_type(channel)]
        signal = convolute(fit_to_window(charges, n_ticks), transfer.coefficients, n_ticks)

    noisechan = pick_noise_channel(context.rng, len(context.noise))
    adc, saturated = quantize(context.noise[noisechan] + signal)

    n_samples = context.detprop.number_time_samples
    adc = resize_readout(adc, n_samples)
    compression = context.config.compression
    digit = RawDigit(channel=channel,
                     samples=n_samples,
                     adc=compress(adc, compression),
                     compression=compression)
    return digit, saturated


def process(context: SimWireContext,
            charges: Mapping[int, np.ndarray],
            verbose: bool = True) -> list[RawDigit]:
    """
    Produce the RawDigits of one event, channel 0 first.

    Args:
        context: State from `initialize`
        charges: Charge trace per channel; missing channels carry no charge
        verbose: Print warnings about ignored channels and saturation

    Returns:
        One RawDigit per geometry channel, in channel order
    """
    n_channels = context.geometry.n_channels
    unknown = [c for c in charges if not 0 <= c < n_channels]
    if unknown and verbose:
        print(f"  ⚠ Ignoring charge on {len(unknown)} channel(s) outside the geometry: {sorted(unknown)[:5]}")

    digits = []
    total_saturated = 0
    for chan in range(n_channels):
        digit, saturated = simulate_channel(context, chan, charges.get(chan))
        digits.append(digit)
        total_saturated += saturated

    if total_saturated and verbose:
        print(f"  ⚠ {total_saturated} sample(s) saturated at the int16 ADC range")

    context.n_events += 1
    return digits
