"""Biological and technical noise models for simulated VAF data.

Three transforms are applied in sequence to every mutation group:

1. Biological heterogeneity: true VAF drawn from a Beta distribution
   centred on the clone frequency.
2. Sequencing depth with optional overdispersion (negative binomial).
3. Binomial read sampling with a base-miscall shift.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

import numpy as np

from .exceptions import InvalidParameterError

MIN_BETA_SHAPE = 0.1
VAF_FLOOR = 0.01
VAF_CEILING = 0.99
MIN_DEPTH = 10
MAX_SAMPLING_PROBABILITY = 0.99


class DepthDistribution(str, Enum):
    """Supported per-site coverage distributions."""

    NEGATIVE_BINOMIAL = "negative_binomial"
    POISSON = "poisson"
    UNIFORM = "uniform"

    @classmethod
    def coerce(cls, value: Union[str, "DepthDistribution"]) -> "DepthDistribution":
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(repr(member.value) for member in cls)
            raise InvalidParameterError.for_parameter(
                "distribution", value, f"must be one of {valid}"
            ) from None


@dataclass(frozen=True)
class ReadCounts:
    """Observed read counts for a vector of sites."""

    vaf: np.ndarray
    alt_reads: np.ndarray
    ref_reads: np.ndarray

    def __len__(self) -> int:
        return len(self.vaf)


def apply_biological_noise(
    true_freq: float,
    n_mutations: int,
    concentration: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Draw true VAFs from Beta(f * c, (1 - f) * c).

    Higher ``concentration`` gives tighter clustering around ``true_freq``.
    Shapes are floored at 0.1 so frequencies of exactly 0 or 1 stay
    sampleable, and samples are clamped into [0.01, 0.99].

    Args:
        true_freq: Target clone frequency in [0, 1]
        n_mutations: Number of draws; 0 yields an empty array
        concentration: Beta concentration (alpha + beta), must be positive
        rng: Seeded random number generator

    Returns:
        Float array of length ``n_mutations``
    """
    if n_mutations == 0:
        return np.empty(0, dtype=float)
    if n_mutations < 0:
        raise InvalidParameterError.for_parameter("n_mutations", n_mutations, "must be non-negative")
    if not 0.0 <= true_freq <= 1.0:
        raise InvalidParameterError.for_parameter("true_freq", true_freq, "must be between 0 and 1")
    if not concentration > 0:
        raise InvalidParameterError.for_parameter("concentration", concentration, "must be positive")

    alpha = max(true_freq * concentration, MIN_BETA_SHAPE)
    beta = max((1.0 - true_freq) * concentration, MIN_BETA_SHAPE)

    noisy_freq = rng.beta(alpha, beta, size=n_mutations)
    return np.clip(noisy_freq, VAF_FLOOR, VAF_CEILING)


def simulate_depth(
    n_mutations: int,
    mean_depth: float,
    distribution: Union[str, DepthDistribution],
    dispersion: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Simulate per-site sequencing depth.

    ``negative_binomial`` uses the mean/size parameterization
    (variance = mean + mean**2 / dispersion), ``poisson`` ignores
    ``dispersion`` and ``uniform`` returns ``round(mean_depth)`` everywhere.
    Every value is floored at 10 reads.
    """
    if not mean_depth > 0:
        raise InvalidParameterError.for_parameter("mean_depth", mean_depth, "must be positive")
    distribution = DepthDistribution.coerce(distribution)
    if n_mutations < 0:
        raise InvalidParameterError.for_parameter("n_mutations", n_mutations, "must be non-negative")

    if distribution is DepthDistribution.NEGATIVE_BINOMIAL:
        if not dispersion > 0:
            raise InvalidParameterError.for_parameter("dispersion", dispersion, "must be positive")
        # numpy's (n, p) form: n = size, p = size / (size + mu)
        p = dispersion / (dispersion + mean_depth)
        depths = rng.negative_binomial(dispersion, p, size=n_mutations)
    elif distribution is DepthDistribution.POISSON:
        depths = rng.poisson(lam=mean_depth, size=n_mutations)
    else:
        depths = np.full(n_mutations, int(round(mean_depth)))

    return np.maximum(depths, MIN_DEPTH).astype(np.int64)


def simulate_sequencing_reads(
    true_vaf: Sequence[float],
    depth: Sequence[int],
    error_rate: float,
    rng: np.random.Generator,
) -> ReadCounts:
    """Sample alternate reads with alt ~ Binomial(depth, min(vaf + error, 0.99)).

    The returned ``vaf`` is the realized ``alt_reads / depth``, not the
    sampling probability.
    """
    true_vaf = np.asarray(true_vaf, dtype=float)
    depth = np.asarray(depth)

    if true_vaf.shape != depth.shape:
        raise InvalidParameterError(
            "true_vaf and depth must have the same length "
            f"(got {true_vaf.size} and {depth.size})",
            {"parameter": "depth", "value": int(depth.size), "constraint": "same length as true_vaf"},
        )
    if np.any((true_vaf < 0) | (true_vaf > 1)):
        raise InvalidParameterError.for_parameter(
            "true_vaf", true_vaf[(true_vaf < 0) | (true_vaf > 1)].tolist(), "values must be between 0 and 1"
        )
    if np.any(depth <= 0):
        raise InvalidParameterError.for_parameter(
            "depth", depth[depth <= 0].tolist(), "values must be positive"
        )
    if not 0.0 <= error_rate <= 1.0:
        raise InvalidParameterError.for_parameter("error_rate", error_rate, "must be between 0 and 1")

    depth = depth.astype(np.int64)
    probability = np.minimum(true_vaf + error_rate, MAX_SAMPLING_PROBABILITY)
    alt_reads = rng.binomial(depth, probability).astype(np.int64)

    return ReadCounts(
        vaf=alt_reads / depth,
        alt_reads=alt_reads,
        ref_reads=depth - alt_reads,
    )
