from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any

import numpy as np # type: ignore

from .errors import ConfigurationError, GeometryError

# -------------------------------
# Enumerations
# -------------------------------

class SignalType(Enum):
    """Geometry class of a wire plane."""
    INDUCTION = "induction"
    COLLECTION = "collection"


class Compression(Enum):
    """Compression applied to the ADC sequence of a RawDigit."""
    NONE = "none"
    HUFFMAN = "Huffman"

    @classmethod
    def from_name(cls, name: str) -> "Compression":
        """Parse a configuration value ('none' or 'Huffman', case-insensitive)."""
        for member in cls:
            if str(name).lower() == member.value.lower():
                return member
        raise ConfigurationError(f"Unknown compression type {name!r} "
                                 f"(expected one of {[m.value for m in cls]})")


# -------------------------------
# Geometry provider
# -------------------------------

@dataclass(frozen=True)
class PlaneGeo:
    x: float                   # cm, drift coordinate of the plane
    signal_type: SignalType
    n_wires: int


@dataclass(frozen=True)
class Geometry:
    """Wire planes in readout order; channels are numbered plane by plane."""
    planes: tuple[PlaneGeo, ...]

    def __post_init__(self):
        if len(self.planes) < 2:
            raise GeometryError(f"At least two wire planes are required, got {len(self.planes)}")
        if any(p.n_wires < 0 for p in self.planes):
            raise GeometryError("Negative wire count in geometry")

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Geometry":
        """Build from {'planes': [{'x': .., 'signal_type': .., 'n_wires': ..}, ...]}."""
        try:
            planes = tuple(
                PlaneGeo(x=float(p["x"]),
                         signal_type=SignalType(str(p["signal_type"]).lower()),
                         n_wires=int(p["n_wires"]))
                for p in config["planes"]
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed geometry section: {e}") from e
        return cls(planes=planes)

    @property
    def n_channels(self) -> int:
        return sum(p.n_wires for p in self.planes)

    @property
    def plane_pitch(self) -> float:
        """Spacing between the first two planes (cm); planes are assumed equidistant."""
        return self.planes[1].x - self.planes[0].x

    def plane_of(self, channel: int) -> PlaneGeo:
        if channel < 0:
            raise GeometryError(f"Channel {channel} is not in the geometry")
        first = 0
        for plane in self.planes:
            if channel < first + plane.n_wires:
                return plane
            first += plane.n_wires
        raise GeometryError(f"Channel {channel} is not in the geometry ({self.n_channels} channels)")

    def signal_type(self, channel: int) -> SignalType:
        return self.plane_of(channel).signal_type

    def signal_types(self) -> list[SignalType]:
        """Signal type of every channel, in channel order."""
        return [p.signal_type for p in self.planes for _ in range(p.n_wires)]


# -------------------------------
# Timing / detector properties
# -------------------------------

@dataclass(frozen=True)
class DetectorClocks:
    sampling_rate: float = 500.0    # ns per tick
    trigger_offset: int = 0         # ticks

    def __post_init__(self):
        if not np.isfinite(self.sampling_rate) or self.sampling_rate <= 0:
            raise ConfigurationError(f"sampling_rate must be > 0 ns, got {self.sampling_rate}")


@dataclass(frozen=True)
class DetectorProperties:
    drift_velocity: float = 0.1114  # cm/µs
    number_time_samples: int = 3200 # ADC samples in one readout frame

    def __post_init__(self):
        if not np.isfinite(self.drift_velocity) or self.drift_velocity <= 0:
            raise ConfigurationError(f"drift_velocity must be > 0 cm/µs, got {self.drift_velocity}")
        if int(self.number_time_samples) != self.number_time_samples or self.number_time_samples < 1:
            raise ConfigurationError(f"number_time_samples must be an integer >= 1, "
                                     f"got {self.number_time_samples}")


# -------------------------------
# Response / transfer containers
# -------------------------------

@dataclass(frozen=True)
class ResponseCurve:
    """Real-valued response sampled on ticks."""
    name: str
    samples: np.ndarray

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float64)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    def __len__(self):
        return len(self.samples)

    @property
    def integral(self) -> float:
        return float(self.samples.sum())


@dataclass(frozen=True)
class TransferFunction:
    """
    Field x electronics response of one geometry class in frequency space.

    `coefficients` has N//2 + 1 entries; `time_shape` is the aligned
    time-domain shape it was computed from (N entries).
    """
    signal_type: SignalType
    coefficients: np.ndarray
    time_shape: np.ndarray

    def __post_init__(self):
        n_ticks = len(self.time_shape)
        if len(self.coefficients) != n_ticks // 2 + 1:
            raise ValueError(f"Transfer function has {len(self.coefficients)} coefficients, "
                             f"expected {n_ticks // 2 + 1} for {n_ticks} ticks")
        for name in ("coefficients", "time_shape"):
            arr = np.array(getattr(self, name))
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def n_ticks(self) -> int:
        return len(self.time_shape)


@dataclass(frozen=True)
class NoiseBank:
    """Pre-synthesized noise waveforms, shape (bank_size, N)."""
    waveforms: np.ndarray

    def __post_init__(self):
        waveforms = np.array(self.waveforms, dtype=np.float64)
        if waveforms.ndim != 2 or waveforms.shape[0] == 0:
            raise ValueError(f"Noise bank must be a non-empty 2D array, got shape {waveforms.shape}")
        waveforms.setflags(write=False)
        object.__setattr__(self, "waveforms", waveforms)

    def __len__(self):
        return self.waveforms.shape[0]

    def __getitem__(self, index: int) -> np.ndarray:
        return self.waveforms[index]

    @property
    def n_ticks(self) -> int:
        return self.waveforms.shape[1]


# -------------------------------
# Output record
# -------------------------------

@dataclass(frozen=True)
class RawDigit:
    channel: int
    samples: int                # length of the uncompressed ADC sequence
    adc: np.ndarray             # int16, compressed when compression != NONE
    compression: Compression = Compression.NONE

    def uncompressed(self) -> np.ndarray:
        """Return the full int16 ADC sequence."""
        from wiresim.waveform.compression import uncompress
        return uncompress(self.adc, self.samples, self.compression)

    def __repr__(self) -> str:
        return (f"RawDigit(channel={self.channel}, samples={self.samples}, "
                f"n_words={len(self.adc)}, compression={self.compression.value})")


# -------------------------------
# Diagnostics
# -------------------------------

@dataclass(frozen=True)
class Histogram:
    """Fixed-binning 1D histogram, the diagnostic sink's unit of output."""
    name: str
    title: str
    edges: np.ndarray
    counts: np.ndarray

    @classmethod
    def filled(cls, name: str, title: str, nbins: int, low: float, high: float,
               values: np.ndarray, weights: Optional[np.ndarray] = None) -> "Histogram":
        counts, edges = np.histogram(values, bins=nbins, range=(low, high), weights=weights)
        return cls(name=name, title=title, edges=edges, counts=counts.astype(np.float64))

    @classmethod
    def from_curve(cls, name: str, title: str, curve: np.ndarray, nbins: Optional[int] = None) -> "Histogram":
        """Bin i holds curve[i]; bins past the curve stay empty."""
        nbins = len(curve) if nbins is None else nbins
        ticks = np.arange(len(curve))
        return cls.filled(name, title, nbins, 0., float(nbins), ticks, weights=np.asarray(curve))

    @property
    def entries(self) -> float:
        return float(self.counts.sum())


# -------------------------------
# Job-scoped simulation context
# -------------------------------

@dataclass
class SimWireContext:
    """Everything INIT produces; owned by exactly one executor."""
    config: Any                                   # SimWireConfig
    geometry: Geometry
    clocks: DetectorClocks
    detprop: DetectorProperties
    n_ticks: int
    rng: np.random.Generator
    collection_field: ResponseCurve
    induction_field: ResponseCurve
    electronics: ResponseCurve
    transfer: dict[SignalType, TransferFunction]
    noise: NoiseBank
    diagnostics: dict[str, Histogram] = field(default_factory=dict)
    n_events: int = 0

    def __repr__(self) -> str:
        return (f"SimWireContext(n_ticks={self.n_ticks}, n_channels={self.geometry.n_channels}, "
                f"noise_bank={len(self.noise)}, n_events={self.n_events})")
