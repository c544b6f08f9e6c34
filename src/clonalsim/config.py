"""Configuration management for tumor clonal simulations."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .exceptions import ConfigurationError

DEFAULT_SUBCLONE_FREQS: Tuple[float, ...] = (0.15, 0.25, 0.30, 0.30)
DEFAULT_N_MUT_PER_CLONE: Tuple[int, ...] = (20, 25, 30, 15)
DEFAULT_N_MUT_FOUNDER = 10
DEFAULT_N_MUT_SHARED: Dict[str, int] = {"2 3 4": 15, "3 4": 12, "1 2": 8}


@dataclass(frozen=True)
class BiologicalNoiseConfig:
    """Configuration for Beta-distributed intra-tumor heterogeneity."""
    enabled: bool = True
    concentration: float = 50.0


@dataclass(frozen=True)
class SequencingNoiseConfig:
    """Configuration for depth and read sampling noise."""
    enabled: bool = True
    mean_depth: float = 100.0
    depth_variation: str = "negative_binomial"
    depth_dispersion: float = 20.0
    error_rate: float = 0.001
    binomial_sampling: bool = True


@dataclass(frozen=True)
class GermlineConfig:
    """Configuration for heterozygous germline variants."""
    enabled: bool = False
    n_variants: int = 50
    vaf_expected: float = 0.5


def _merge_section(section_cls, value: Any, name: str):
    """Overlay a partial mapping onto the section defaults."""
    if value is None:
        return section_cls()
    if isinstance(value, section_cls):
        return value
    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f"{name} must be a mapping, got {type(value).__name__}",
            {"section": name},
        )
    known = {f.name for f in fields(section_cls)}
    unknown = sorted(set(value) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown {name} keys: {', '.join(unknown)}",
            {"section": name, "unknown": unknown},
        )
    return section_cls(**dict(value))


@dataclass(frozen=True)
class SimulationConfig:
    """Complete, normalized input of one simulation call.

    ``n_mut_shared`` maps a whitespace-separated list of 1-based clone
    indices (e.g. ``"2 3 4"``) to the number of mutations shared by
    exactly those clones. Insertion order is generation order.
    """
    subclone_freqs: Tuple[float, ...] = DEFAULT_SUBCLONE_FREQS
    n_mut_per_clone: Tuple[int, ...] = DEFAULT_N_MUT_PER_CLONE
    n_mut_founder: int = DEFAULT_N_MUT_FOUNDER
    n_mut_shared: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_N_MUT_SHARED))
    biological_noise: BiologicalNoiseConfig = field(default_factory=BiologicalNoiseConfig)
    sequencing_noise: SequencingNoiseConfig = field(default_factory=SequencingNoiseConfig)
    germline_variants: GermlineConfig = field(default_factory=GermlineConfig)
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]] = None) -> "SimulationConfig":
        """Build a config from a (possibly partial) mapping, filling defaults."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                {"unknown": unknown},
            )

        kwargs: Dict[str, Any] = {}
        if "subclone_freqs" in data:
            kwargs["subclone_freqs"] = tuple(float(f) for f in data["subclone_freqs"])
        if "n_mut_per_clone" in data:
            kwargs["n_mut_per_clone"] = tuple(int(n) for n in data["n_mut_per_clone"])
        if "n_mut_founder" in data:
            kwargs["n_mut_founder"] = int(data["n_mut_founder"])
        if "n_mut_shared" in data:
            shared = data["n_mut_shared"] or {}
            if not isinstance(shared, Mapping):
                raise ConfigurationError("n_mut_shared must be a mapping of clone labels to counts")
            kwargs["n_mut_shared"] = {str(label): int(count) for label, count in shared.items()}
        if data.get("seed") is not None:
            kwargs["seed"] = int(data["seed"])

        kwargs["biological_noise"] = _merge_section(
            BiologicalNoiseConfig, data.get("biological_noise"), "biological_noise"
        )
        kwargs["sequencing_noise"] = _merge_section(
            SequencingNoiseConfig, data.get("sequencing_noise"), "sequencing_noise"
        )
        kwargs["germline_variants"] = _merge_section(
            GermlineConfig, data.get("germline_variants"), "germline_variants"
        )
        return cls(**kwargs)

    def with_overrides(self, **overrides: Any) -> "SimulationConfig":
        """Return a new config with top-level fields replaced."""
        if not overrides:
            return self
        merged = self.to_dict()
        merged.update(overrides)
        return SimulationConfig.from_dict(merged)

    @property
    def n_clones(self) -> int:
        return len(self.subclone_freqs)

    @property
    def clone_names(self) -> Tuple[str, ...]:
        return tuple(f"Clone{i}" for i in range(1, self.n_clones + 1))

    @property
    def tumor_purity(self) -> float:
        return float(sum(self.subclone_freqs))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        data = asdict(self)
        data["subclone_freqs"] = list(self.subclone_freqs)
        data["n_mut_per_clone"] = list(self.n_mut_per_clone)
        return data

    def config_hash(self) -> str:
        """Compute deterministic hash of configuration."""
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]


def load_config(path: str | Path) -> SimulationConfig:
    """Load configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must contain a dictionary")
    return SimulationConfig.from_dict(data)


def dump_config(config: SimulationConfig, path: str | Path) -> None:
    """Save configuration to YAML file."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


