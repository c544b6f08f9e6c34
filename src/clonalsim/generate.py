"""Generate one group of mutations with biological and sequencing noise."""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd

from .config import BiologicalNoiseConfig, SequencingNoiseConfig
from .noise import apply_biological_noise, simulate_depth, simulate_sequencing_reads
from .structure import MutationGroupSpec, MutationType, describe_clone_ids

NOISELESS_DEPTH = 100

GROUP_COLUMNS = ["Mutation", "True_VAF", "VAF", "Depth", "Alt_reads", "Clone", "Type", "Clone_IDs"]


def mutation_names(spec: MutationGroupSpec) -> List[str]:
    """Identifiers for every mutation in a group, numbered from 1."""
    n = spec.n_mutations
    if spec.mutation_type is MutationType.FOUNDER:
        return [f"Founder_{k}" for k in range(1, n + 1)]
    if spec.mutation_type is MutationType.SHARED:
        clone_str = "_".join(str(i) for i in spec.clone_ids)
        return [f"Shared_C{clone_str}_mut{k}" for k in range(1, n + 1)]
    if spec.mutation_type is MutationType.GERMLINE:
        return [f"Germline_{k}" for k in range(1, n + 1)]
    clone_id = spec.clone_ids[0]
    return [f"Clone{clone_id}_mut{k}" for k in range(1, n + 1)]


def clone_label(spec: MutationGroupSpec) -> str:
    """Human-readable clone label for a group."""
    if spec.mutation_type is MutationType.FOUNDER:
        return "Founder"
    if spec.mutation_type is MutationType.GERMLINE:
        return "Germline"
    return "Clone" + "+".join(str(i) for i in spec.clone_ids)


def generate_mutations(
    spec: MutationGroupSpec,
    bio_noise: BiologicalNoiseConfig,
    seq_noise: SequencingNoiseConfig,
    rng: np.random.Generator,
) -> pd.DataFrame:
    """Simulate one mutation group.

    Args:
        spec: Group to generate (type, size, target frequency, clones)
        bio_noise: Biological noise settings
        seq_noise: Sequencing noise settings
        rng: Seeded random number generator

    Returns:
        DataFrame with ``GROUP_COLUMNS``; empty when the group has no mutations
    """
    n_mut = spec.n_mutations
    if n_mut == 0:
        return pd.DataFrame(columns=GROUP_COLUMNS)

    if bio_noise.enabled:
        true_vaf = apply_biological_noise(spec.base_frequency, n_mut, bio_noise.concentration, rng)
    else:
        true_vaf = np.full(n_mut, spec.base_frequency, dtype=float)

    if seq_noise.enabled:
        depth = simulate_depth(
            n_mut,
            mean_depth=seq_noise.mean_depth,
            distribution=seq_noise.depth_variation,
            dispersion=seq_noise.depth_dispersion,
            rng=rng,
        )
    else:
        depth = np.full(n_mut, NOISELESS_DEPTH, dtype=np.int64)

    if seq_noise.enabled and seq_noise.binomial_sampling:
        reads = simulate_sequencing_reads(true_vaf, depth, seq_noise.error_rate, rng)
        observed_vaf = reads.vaf
        alt_reads = reads.alt_reads
    else:
        observed_vaf = true_vaf.copy()
        alt_reads = np.round(true_vaf * depth).astype(np.int64)

    return pd.DataFrame({
        "Mutation": mutation_names(spec),
        "True_VAF": true_vaf,
        "VAF": observed_vaf,
        "Depth": depth,
        "Alt_reads": alt_reads,
        "Clone": clone_label(spec),
        "Type": spec.mutation_type.value,
        "Clone_IDs": describe_clone_ids(spec.clone_ids),
    })
