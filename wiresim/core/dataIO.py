import re
from pathlib import Path
from typing import Union, Any, Iterator

import numpy as np # type: ignore
import yaml # type: ignore

from .config import SimWireConfig
from .datatypes import Geometry, DetectorClocks, DetectorProperties, RawDigit, Compression, Histogram
from .errors import ConfigurationError

PathLike = Union[str, Path]


def _npz_path(path: PathLike) -> Path:
    """numpy appends .npz to names without it; report the file actually written."""
    path = Path(path)
    return path if path.suffix == ".npz" else path.with_name(path.name + ".npz")

# -------------------------------------
# --- Job configuration (YAML)      ---
# -------------------------------------

def load_config(config_path: PathLike) -> dict:
    """Load YAML configuration file."""
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    if not isinstance(config, dict):
        raise ConfigurationError(f"{config_path} does not contain a mapping")
    return config


def _section(config: dict, name: str, required: bool = True) -> dict:
    section = config.get(name)
    if section is None:
        if required:
            raise ConfigurationError(f"Missing '{name}' section in job configuration")
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' section must be a mapping")
    return section


def job_from_config(config: dict) -> tuple[SimWireConfig, Geometry, DetectorClocks, DetectorProperties]:
    """
    Split a job configuration into its providers.

    Expected sections: simwire, geometry (required); clocks, detector (optional,
    defaults apply).
    """
    simwire = SimWireConfig.from_dict(_section(config, "simwire"))
    geometry = Geometry.from_dict(_section(config, "geometry"))
    try:
        clocks = DetectorClocks(**_section(config, "clocks", required=False))
        detprop = DetectorProperties(**_section(config, "detector", required=False))
    except TypeError as e:
        raise ConfigurationError(f"Malformed clocks/detector section: {e}") from e
    return simwire, geometry, clocks, detprop


# -------------------------------------
# --- Charge input                  ---
# -------------------------------------

def load_deposit_events(path: PathLike) -> Iterator[np.ndarray]:
    """
    Yield per-event deposit tables from an .npz file.

    Each array `event<k>` has shape (n, 3): channel, tdc, charge. Events are
    yielded in increasing k.
    """
    with np.load(path) as data:
        keys = sorted((k for k in data.files if re.fullmatch(r"event\d+", k)),
                      key=lambda k: int(k[5:]))
        for key in keys:
            table = np.asarray(data[key], dtype=np.float64).reshape(-1, 3)
            yield table


# -------------------------------------
# --- Raw digits                    ---
# -------------------------------------

def save_raw_digits(path: PathLike, events: list[list[RawDigit]]) -> Path:
    """Save RawDigits of several events into one .npz file."""
    arrays: dict[str, Any] = {"n_events": np.array(len(events))}
    for i, digits in enumerate(events):
        sizes = [len(d.adc) for d in digits]
        arrays[f"event{i}_channel"] = np.array([d.channel for d in digits], dtype=np.int64)
        arrays[f"event{i}_samples"] = np.array([d.samples for d in digits], dtype=np.int64)
        arrays[f"event{i}_compression"] = np.array([d.compression.value for d in digits])
        arrays[f"event{i}_offsets"] = np.concatenate([[0], np.cumsum(sizes)]).astype(np.int64)
        arrays[f"event{i}_adc"] = (np.concatenate([d.adc for d in digits]).astype(np.int16)
                                   if digits else np.zeros(0, dtype=np.int16))
    path = _npz_path(path)
    np.savez_compressed(path, **arrays)
    return path


def load_raw_digits(path: PathLike) -> list[list[RawDigit]]:
    """Inverse of `save_raw_digits`."""
    events = []
    with np.load(path) as data:
        for i in range(int(data["n_events"])):
            channels = data[f"event{i}_channel"]
            samples = data[f"event{i}_samples"]
            compression = data[f"event{i}_compression"]
            offsets = data[f"event{i}_offsets"]
            adc = data[f"event{i}_adc"]
            events.append([
                RawDigit(channel=int(channels[j]),
                         samples=int(samples[j]),
                         adc=adc[offsets[j]:offsets[j + 1]].copy(),
                         compression=Compression(str(compression[j])))
                for j in range(len(channels))
            ])
    return events


# -------------------------------------
# --- Diagnostics                   ---
# -------------------------------------

def save_diagnostics(path: PathLike, histograms: dict[str, Histogram]) -> Path:
    """Write each histogram as <name>_edges / <name>_counts."""
    arrays = {}
    for name, hist in histograms.items():
        arrays[f"{name}_edges"] = hist.edges
        arrays[f"{name}_counts"] = hist.counts
    path = _npz_path(path)
    np.savez(path, **arrays)
    return path
