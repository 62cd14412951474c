import numbers
from dataclasses import MISSING, dataclass, fields
from typing import Any, Optional

from .datatypes import Compression
from .errors import ConfigurationError

# -------------------------------
# Electronics response model
# -------------------------------
ELECTRONICS_SCALE = 120000.0          # arbitrary display scaling of the shaping response
ELECTRONICS_T0_FRACTION = 0.33333     # response peak sits at ~1/3 of the window
RESPONSE_TRIM_FRACTION = 0.01         # drop electronics samples below 1% of peak

# -------------------------------
# Noise model
# -------------------------------
DEFAULT_NOISE_BANK_SIZE = 100
LOW_CUTOFF_SOFTNESS = 0.5             # (bins) width of the logistic low-frequency filter
NOISE_AMPLITUDE_SPREAD = (0.9, 0.2)   # magnitude *= 0.9 + 0.2 * U

# -------------------------------
# Spectral alignment
# -------------------------------
DEFAULT_FIT_BINS = 5                  # bins on either side of the correlation peak

# -------------------------------
# Diagnostics binning
# -------------------------------
NOISE_HIST_BINNING = (1000, -10., 10.)

# Reference parameter set for a MicroBooNE-like TPC
STANDARD_SIMWIRE = {
    "drift_e_module_label": "largeant",
    "compression": "none",
    "noise_fact": 0.0132,
    "noise_width": 62.4,          # kHz
    "low_cutoff": 7.5,            # kHz
    "field_bins": 75,
    "col_3d_correction": 2.5,
    "ind_3d_correction": 1.5,
    "col_field_resp_amp": 0.0354,
    "ind_field_resp_amp": 0.018,
    "shape_time_const": [3000., 900.],   # ns
}

# Original framework option names, accepted as aliases
PARAMETER_ALIASES = {
    "DriftEModuleLabel": "drift_e_module_label",
    "CompressionType": "compression",
    "NoiseFact": "noise_fact",
    "NoiseWidth": "noise_width",
    "LowCutoff": "low_cutoff",
    "FieldBins": "field_bins",
    "Col3DCorrection": "col_3d_correction",
    "Ind3DCorrection": "ind_3d_correction",
    "ColFieldRespAmp": "col_field_resp_amp",
    "IndFieldRespAmp": "ind_field_resp_amp",
    "ShapeTimeConst": "shape_time_const",
    "Seed": "seed",
}


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    return float(value)


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class SimWireConfig:
    """Configuration of the wire signal simulation."""
    drift_e_module_label: str
    compression: Compression
    noise_fact: float                      # noise scale factor
    noise_width: float                     # (kHz) exponential noise width
    low_cutoff: float                      # (kHz) low frequency filter cutoff
    field_bins: int                        # number of bins for field response
    col_3d_correction: float               # 3D path correction, collection
    ind_3d_correction: float               # 3D path correction, induction
    col_field_resp_amp: float              # collection field response amplitude
    ind_field_resp_amp: float              # induction field response amplitude
    shape_time_const: tuple[float, float]  # (ns) exponential shaping time constants
    seed: Optional[int] = None             # overrides any injected generator when set
    noise_bank_size: int = DEFAULT_NOISE_BANK_SIZE
    fft_size: Optional[int] = None         # None: use the readout window size
    fit_bins: int = DEFAULT_FIT_BINS

    def __post_init__(self):
        if not isinstance(self.compression, Compression):
            object.__setattr__(self, "compression", Compression.from_name(self.compression))
        if not self.drift_e_module_label or not isinstance(self.drift_e_module_label, str):
            raise ConfigurationError("drift_e_module_label must be a non-empty string")

        for name in ("noise_fact", "noise_width", "low_cutoff", "col_3d_correction",
                     "ind_3d_correction", "col_field_resp_amp", "ind_field_resp_amp"):
            object.__setattr__(self, name, _as_float(name, getattr(self, name)))
        for name in ("field_bins", "noise_bank_size", "fit_bins"):
            object.__setattr__(self, name, _as_int(name, getattr(self, name)))

        if self.noise_fact < 0:
            raise ConfigurationError(f"noise_fact must be >= 0, got {self.noise_fact}")
        if self.noise_width <= 0:
            raise ConfigurationError(f"noise_width must be > 0, got {self.noise_width}")
        if self.field_bins < 1:
            raise ConfigurationError(f"field_bins must be >= 1, got {self.field_bins}")
        if self.noise_bank_size < 1:
            raise ConfigurationError(f"noise_bank_size must be >= 1, got {self.noise_bank_size}")
        if self.fit_bins < 1:
            raise ConfigurationError(f"fit_bins must be >= 1, got {self.fit_bins}")

        try:
            taus = tuple(self.shape_time_const)
        except TypeError as e:
            raise ConfigurationError(f"shape_time_const must be a pair of numbers: {e}") from e
        if len(taus) != 2:
            raise ConfigurationError(f"shape_time_const needs exactly two values, got {len(taus)}")
        taus = tuple(_as_float("shape_time_const", t) for t in taus)
        if min(taus) <= 0:
            raise ConfigurationError(f"shape_time_const values must be > 0, got {taus}")
        object.__setattr__(self, "shape_time_const", taus)

        if self.seed is not None:
            seed = _as_int("seed", self.seed)
            if seed < 0:
                raise ConfigurationError(f"seed must be >= 0, got {seed}")
            object.__setattr__(self, "seed", seed)
        if self.fft_size is not None:
            fft_size = _as_int("fft_size", self.fft_size)
            if fft_size < 2:
                raise ConfigurationError(f"fft_size must be >= 2, got {fft_size}")
            object.__setattr__(self, "fft_size", fft_size)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "SimWireConfig":
        """
        Build a validated config from a plain mapping (e.g. a YAML section).

        Keys may use either the snake_case field names or the original
        CamelCase option names (see PARAMETER_ALIASES).

        Raises:
            ConfigurationError: on missing required, unknown or malformed options
        """
        known = {f.name for f in fields(cls)}
        required = {f.name for f in fields(cls)
                    if f.default is MISSING and f.default_factory is MISSING}

        kwargs = {}
        for key, value in config.items():
            name = PARAMETER_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown simwire option {key!r}")
            if name in kwargs:
                raise ConfigurationError(f"Option {name!r} given more than once")
            kwargs[name] = value

        missing = sorted(required - kwargs.keys())
        if missing:
            raise ConfigurationError(f"Missing required simwire options: {missing}")

        return cls(**kwargs)

    @classmethod
    def standard(cls, **overrides) -> "SimWireConfig":
        """STANDARD_SIMWIRE with selected options replaced."""
        return cls.from_dict({**STANDARD_SIMWIRE, **overrides})
