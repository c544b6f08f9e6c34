"""
Configuration validation for clonal simulations.

Checks a raw configuration mapping against the packaged JSON schema and
then applies semantic rules that a schema cannot express, collecting
every problem instead of stopping at the first.
"""

from typing import Any, Dict, List, Mapping, Tuple
import logging
from pathlib import Path

import jsonschema
import yaml

from .config import SimulationConfig
from .exceptions import ClonalSimError, ConfigurationError
from .structure import CloneSet
from .validation import load_json_schema

LOW_DEPTH_WARNING = 30
LOW_CONCENTRATION_WARNING = 5
LOW_PURITY_WARNING = 0.2


class ConfigValidator:
    """Validate configuration parameters for a simulation."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.schema = load_json_schema("simulation_config.schema.json")
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_config(self, config: Mapping[str, Any]) -> Tuple[bool, List[str], List[str]]:
        """Validate complete configuration.

        Args:
            config: Configuration dictionary to validate

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        validator = jsonschema.Draft7Validator(self.schema)
        for error in sorted(validator.iter_errors(dict(config)), key=lambda e: [str(p) for p in e.path]):
            location = ".".join(str(p) for p in error.path) or "config"
            self.errors.append(f"{location}: {error.message}")

        # Semantic checks need a well-typed config
        if not self.errors:
            self._validate_clonal_structure(config)
            self._validate_noise(config)

        for warning in self.warnings:
            self.logger.debug("Config warning: %s", warning)

        is_valid = len(self.errors) == 0
        return is_valid, self.errors, self.warnings

    def _validate_clonal_structure(self, config: Mapping[str, Any]) -> None:
        try:
            normalized = SimulationConfig.from_dict(config)
        except ClonalSimError as e:
            self.errors.append(str(e))
            return

        freqs = normalized.subclone_freqs
        if sum(freqs) > 1 + 1e-9:
            self.errors.append(f"Sum of subclone_freqs cannot exceed 1 (got {sum(freqs):.4f})")
        elif sum(freqs) < LOW_PURITY_WARNING:
            self.warnings.append(f"tumor purity is very low ({sum(freqs):.3f}); VAFs will be close to 0")

        if len(normalized.n_mut_per_clone) != len(freqs):
            self.errors.append(
                f"n_mut_per_clone has {len(normalized.n_mut_per_clone)} entries "
                f"but subclone_freqs has {len(freqs)}"
            )

        for label in normalized.n_mut_shared:
            try:
                clones = CloneSet.parse(label)
            except ClonalSimError as e:
                self.errors.append(f"n_mut_shared: {e}")
                continue
            if not clones.fits(len(freqs)):
                self.warnings.append(
                    f"n_mut_shared group '{label}' references non-existent clones and will be skipped"
                )

    def _validate_noise(self, config: Mapping[str, Any]) -> None:
        bio = config.get("biological_noise") or {}
        if bio.get("enabled", True) and "concentration" in bio:
            if bio["concentration"] < LOW_CONCENTRATION_WARNING:
                self.warnings.append(
                    f"biological_noise.concentration is low ({bio['concentration']}), VAFs will be very dispersed"
                )

        seq = config.get("sequencing_noise") or {}
        if seq.get("enabled", True) and "mean_depth" in seq:
            if seq["mean_depth"] < LOW_DEPTH_WARNING:
                self.warnings.append(
                    f"sequencing_noise.mean_depth is low ({seq['mean_depth']}), consider >= {LOW_DEPTH_WARNING}"
                )

        germline = config.get("germline_variants") or {}
        if germline.get("enabled") and germline.get("n_variants") == 0:
            self.warnings.append("germline_variants is enabled but n_variants is 0")


def validate_config_file(config_path: Path) -> Tuple[bool, List[str], List[str]]:
    """Validate a configuration file.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Tuple of (is_valid, errors, warnings)

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config: Dict[str, Any] = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration file must contain a dictionary")

    validator = ConfigValidator()
    return validator.validate_config(config)
