import matplotlib.pyplot as plt # type: ignore
import numpy as np
from typing import Optional
from pathlib import Path

from wiresim.core.datatypes import Histogram, RawDigit, SimWireContext

# --------------------------------
# Diagnostics histograms
# --------------------------------

def plot_histogram(hist: Histogram, ax=None, color: str = "b"):
    """Step plot of a diagnostics histogram; titles use ';x;y' convention."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))

    parts = hist.title.split(";")
    xlabel = parts[1] if len(parts) > 1 else ""
    ylabel = parts[2] if len(parts) > 2 else ""

    ax.stairs(hist.counts, hist.edges, color=color)
    ax.set(title=hist.name, xlabel=xlabel, ylabel=ylabel)
    ax.grid(True)
    return ax


def plot_diagnostics(context: SimWireContext, save_path: Optional[Path] = None):
    """Grid of every INIT diagnostics histogram."""
    hists = list(context.diagnostics.values())
    ncols = 2
    nrows = int(np.ceil(len(hists) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(12, 4 * nrows))

    for ax, hist in zip(np.ravel(axes), hists):
        plot_histogram(hist, ax=ax)
    for ax in np.ravel(axes)[len(hists):]:
        ax.set_visible(False)

    fig.tight_layout()
    if save_path is not None:
        fig.savefig(save_path, dpi=150)
        print(f"  ✓ Saved diagnostics plot to {save_path}")
    return fig

# --------------------------------
# Raw digit waveform
# --------------------------------

def plot_raw_digit(digit: RawDigit, ax=None, title: str = "RawDigit", color: str = "b"):
    """Plot the uncompressed ADC sequence of one channel."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))

    adc = digit.uncompressed()
    ax.plot(np.arange(len(adc)), adc, color=color, drawstyle="steps-mid")
    ax.set(title=f"{title}, channel {digit.channel}", xlabel="Tick", ylabel="ADC counts")
    ax.grid(True)
    return ax, int(np.abs(adc).max()) if len(adc) else 0
