"""Colored noise synthesized from a randomized exponential spectrum."""

import numpy as np # type: ignore
from scipy.special import expit # type: ignore

from wiresim.core.config import LOW_CUTOFF_SOFTNESS, NOISE_AMPLITUDE_SPREAD
from wiresim.core.datatypes import NoiseBank
from wiresim.core.units import frequency_bin_width
from .spectral import do_inv_fft


def noise_spectrum_envelope(n_ticks: int, sampling_rate: float,
                            noise_fact: float, noise_width: float, low_cutoff: float) -> np.ndarray:
    """
    Mean magnitude per frequency bin k = 0..N/2: an exponential fall-off
    (width `noise_width` kHz) times a logistic high-pass at `low_cutoff` kHz.
    """
    bin_width = frequency_bin_width(n_ticks, sampling_rate)
    k = np.arange(n_ticks // 2 + 1, dtype=np.float64)
    pval = noise_fact * np.exp(-k * bin_width / noise_width)
    lofilter = expit((k - low_cutoff / bin_width) / LOW_CUTOFF_SOFTNESS)
    return pval * lofilter


def generate_noise(rng: np.random.Generator, n_ticks: int, sampling_rate: float,
                   noise_fact: float, noise_width: float, low_cutoff: float) -> np.ndarray:
    """
    One N-tick noise waveform.

    Each frequency bin consumes two uniform draws, in bin order: the first
    randomizes the magnitude by +-10%, the second sets the phase.
    """
    envelope = noise_spectrum_envelope(n_ticks, sampling_rate, noise_fact, noise_width, low_cutoff)
    rnd = rng.random((len(envelope), 2))

    base, spread = NOISE_AMPLITUDE_SPREAD
    pval = envelope * (base + spread * rnd[:, 0])
    phase = rnd[:, 1] * 2. * np.pi
    spectrum = pval * np.exp(1j * phase)

    # the inverse transform divides by N as if a forward transform preceded it
    return do_inv_fft(spectrum, n_ticks) * n_ticks


def generate_noise_bank(rng: np.random.Generator, bank_size: int, n_ticks: int, sampling_rate: float,
                        noise_fact: float, noise_width: float, low_cutoff: float) -> NoiseBank:
    """Noise waveforms for `bank_size` noise channels, generated channel after channel."""
    waveforms = np.empty((bank_size, n_ticks))
    for p in range(bank_size):
        waveforms[p] = generate_noise(rng, n_ticks, sampling_rate, noise_fact, noise_width, low_cutoff)
    return NoiseBank(waveforms)


def pick_noise_channel(rng: np.random.Generator, bank_size: int) -> int:
    """One uniform draw -> index in [0, bank_size - 1]."""
    return min(int(rng.random() * bank_size), bank_size - 1)
