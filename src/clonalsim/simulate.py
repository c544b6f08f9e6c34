"""Simulate a heterogeneous tumor sample with hierarchical clonal structure."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import numpy as np
import pandas as pd

from . import __version__
from .config import SimulationConfig
from .exceptions import InvalidParameterError
from .generate import generate_mutations
from .logging_config import time_it
from .noise import DepthDistribution
from .result import CLONAL_STRUCTURE_COLUMNS, MUTATION_COLUMNS, SimulationResult
from .rng import RandomState
from .structure import resolve_mutation_groups, validate_clonal_config

logger = logging.getLogger(__name__)

CHROMOSOMES = np.array([f"chr{i}" for i in range(1, 23)])
BASES = np.array(["A", "T", "C", "G"])
POSITION_RANGE = (1_000_000, 200_000_000)


def validate_simulation_config(config: SimulationConfig) -> None:
    """Check every parameter before any random draw takes place."""
    validate_clonal_config(config)

    bio = config.biological_noise
    if bio.enabled and not bio.concentration > 0:
        raise InvalidParameterError.for_parameter(
            "biological_noise.concentration", bio.concentration, "must be positive"
        )

    seq = config.sequencing_noise
    if seq.enabled:
        distribution = DepthDistribution.coerce(seq.depth_variation)
        if not seq.mean_depth > 0:
            raise InvalidParameterError.for_parameter(
                "sequencing_noise.mean_depth", seq.mean_depth, "must be positive"
            )
        if distribution is DepthDistribution.NEGATIVE_BINOMIAL and not seq.depth_dispersion > 0:
            raise InvalidParameterError.for_parameter(
                "sequencing_noise.depth_dispersion", seq.depth_dispersion, "must be positive"
            )
        if not 0.0 <= seq.error_rate <= 1.0:
            raise InvalidParameterError.for_parameter(
                "sequencing_noise.error_rate", seq.error_rate, "must be between 0 and 1"
            )


def attach_coordinates(mutations: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
    """Add random chromosome, position and ref/alt bases.

    Ref and Alt are drawn independently and may coincide; VCF export
    drops those rows.
    """
    n = len(mutations)
    low, high = POSITION_RANGE
    return mutations.assign(
        Chromosome=rng.choice(CHROMOSOMES, size=n),
        Position=rng.integers(low, high, size=n, endpoint=True, dtype=np.int64),
        Ref=rng.choice(BASES, size=n),
        Alt=rng.choice(BASES, size=n),
    )


def _empty_mutations() -> pd.DataFrame:
    return pd.DataFrame({
        "Mutation": pd.Series(dtype=str),
        "Chromosome": pd.Series(dtype=str),
        "Position": pd.Series(dtype=np.int64),
        "Ref": pd.Series(dtype=str),
        "Alt": pd.Series(dtype=str),
        "True_VAF": pd.Series(dtype=float),
        "VAF": pd.Series(dtype=float),
        "Depth": pd.Series(dtype=np.int64),
        "Alt_reads": pd.Series(dtype=np.int64),
        "Clone": pd.Series(dtype=str),
        "Type": pd.Series(dtype=str),
        "Clone_IDs": pd.Series(dtype=str),
    })


@time_it("simulate_tumor")
def simulate_tumor(
    config: Optional[SimulationConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    **overrides: Any,
) -> SimulationResult:
    """Simulate one tumor sequencing dataset.

    Args:
        config: Simulation configuration; defaults to ``SimulationConfig()``
        rng: Generator to draw from. When omitted, one is created from
            ``seed`` (or ``config.seed``) before any draw.
        seed: Seed recorded in the metadata and used to build ``rng``
        **overrides: Top-level configuration fields to replace, e.g.
            ``subclone_freqs=[0.3, 0.4]`` or
            ``germline_variants={"enabled": True}``

    Returns:
        SimulationResult with the mutation table, echoed parameters,
        clonal structure and run metadata

    Raises:
        InvalidParameterError: If any parameter is invalid. Nothing is drawn.
    """
    config = config or SimulationConfig()
    if seed is not None:
        overrides["seed"] = seed
    config = config.with_overrides(**overrides)

    validate_simulation_config(config)

    if rng is None:
        rng = RandomState.create(config.seed).generator

    groups, skipped = resolve_mutation_groups(config)

    frames = []
    for group in groups:
        if group.n_mutations == 0:
            continue
        frame = generate_mutations(group, config.biological_noise, config.sequencing_noise, rng)
        logger.debug(
            "Generated %d %s mutations at base frequency %.3f",
            len(frame), group.label or group.mutation_type.value, group.base_frequency,
        )
        frames.append(frame)

    if frames:
        mutations = pd.concat(frames, ignore_index=True)
        mutations = attach_coordinates(mutations, rng)[MUTATION_COLUMNS]
    else:
        mutations = _empty_mutations()

    clone_names = list(config.clone_names)
    clonal_structure = pd.DataFrame({
        "Clone": clone_names,
        "Frequency": list(config.subclone_freqs),
        "N_private_mutations": list(config.n_mut_per_clone),
    }, columns=CLONAL_STRUCTURE_COLUMNS)

    params = config.to_dict()
    params["clone_names"] = clone_names

    metadata = {
        "date": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "seed": config.seed,
        "config_hash": config.config_hash(),
        "tumor_purity": config.tumor_purity,
        "skipped_groups": list(skipped),
    }

    logger.info(
        "Simulated %d mutations across %d clones (purity %.3f)",
        len(mutations), config.n_clones, config.tumor_purity,
    )

    return SimulationResult(
        mutations=mutations,
        params=params,
        clonal_structure=clonal_structure,
        metadata=metadata,
    )


def simulate_replicates(
    config: Optional[SimulationConfig] = None,
    seed: int = 0,
    n_replicates: int = 1,
) -> List[SimulationResult]:
    """Run independent simulations, each with its own derived generator."""
    if n_replicates < 1:
        raise InvalidParameterError.for_parameter("n_replicates", n_replicates, "must be at least 1")
    config = (config or SimulationConfig()).with_overrides(seed=seed)
    root = RandomState.create(seed)

    results = []
    for replicate in range(1, n_replicates + 1):
        child = root.spawn(replicate)
        results.append(simulate_tumor(config, rng=child.generator))
    return results
