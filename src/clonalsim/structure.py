"""Resolve a clonal configuration into the ordered list of mutation groups."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .config import SimulationConfig
from .exceptions import InvalidParameterError, SkippedGroupWarning

logger = logging.getLogger(__name__)

GERMLINE = "germline"


class MutationType(str, Enum):
    FOUNDER = "founder"
    SHARED = "shared"
    PRIVATE = "private"
    GERMLINE = "germline"


@dataclass(frozen=True)
class CloneSet:
    """Sorted, de-duplicated clone indices parsed from a shared-group label."""

    indices: Tuple[int, ...]

    @classmethod
    def parse(cls, label: str) -> "CloneSet":
        """Parse a whitespace-separated label such as ``"2 3 4"``."""
        tokens = str(label).split()
        if not tokens:
            raise InvalidParameterError.for_parameter(
                "n_mut_shared", label, "group label must list at least one clone index"
            )
        try:
            indices = [int(token) for token in tokens]
        except ValueError:
            raise InvalidParameterError.for_parameter(
                "n_mut_shared", label, "group label must contain whitespace-separated integers"
            ) from None
        return cls(tuple(sorted(set(indices))))

    def __iter__(self):
        return iter(self.indices)

    def __len__(self) -> int:
        return len(self.indices)

    def fits(self, n_clones: int) -> bool:
        return min(self.indices) >= 1 and max(self.indices) <= n_clones


@dataclass(frozen=True)
class MutationGroupSpec:
    """One group of mutations sharing a target frequency."""

    mutation_type: MutationType
    n_mutations: int
    base_frequency: float
    clone_ids: Union[Tuple[int, ...], str]
    label: Optional[str] = None

    @property
    def is_germline(self) -> bool:
        return self.mutation_type is MutationType.GERMLINE


def validate_clonal_config(config: SimulationConfig) -> None:
    """Fail fast on invalid clone frequencies and counts."""
    freqs = config.subclone_freqs
    if len(freqs) == 0:
        raise InvalidParameterError.for_parameter("subclone_freqs", list(freqs), "must list at least one clone")
    out_of_range = [f for f in freqs if not 0.0 <= f <= 1.0]
    if out_of_range:
        raise InvalidParameterError.for_parameter(
            "subclone_freqs", list(freqs), "must be between 0 and 1"
        )
    if sum(freqs) > 1.0 + 1e-9:
        raise InvalidParameterError.for_parameter(
            "subclone_freqs", list(freqs), f"sum cannot exceed 1 (sum={sum(freqs):.4g})"
        )
    if len(config.n_mut_per_clone) != len(freqs):
        raise InvalidParameterError.for_parameter(
            "n_mut_per_clone",
            list(config.n_mut_per_clone),
            f"must have same length as subclone_freqs ({len(freqs)})",
        )
    if any(n < 0 for n in config.n_mut_per_clone):
        raise InvalidParameterError.for_parameter(
            "n_mut_per_clone", list(config.n_mut_per_clone), "counts must be non-negative"
        )
    if config.n_mut_founder < 0:
        raise InvalidParameterError.for_parameter("n_mut_founder", config.n_mut_founder, "must be non-negative")
    for label, count in config.n_mut_shared.items():
        if count < 0:
            raise InvalidParameterError.for_parameter(
                f"n_mut_shared[{label!r}]", count, "must be non-negative"
            )

    germline = config.germline_variants
    if germline.enabled:
        if germline.n_variants < 0:
            raise InvalidParameterError.for_parameter(
                "germline_variants.n_variants", germline.n_variants, "must be non-negative"
            )
        if not 0.0 <= germline.vaf_expected <= 1.0:
            raise InvalidParameterError.for_parameter(
                "germline_variants.vaf_expected", germline.vaf_expected, "must be between 0 and 1"
            )


def parse_shared_groups(config: SimulationConfig) -> List[Tuple[str, CloneSet, int]]:
    """Parse every shared-group label once, keeping configuration order."""
    return [(label, CloneSet.parse(label), count) for label, count in config.n_mut_shared.items()]


def resolve_mutation_groups(
    config: SimulationConfig,
) -> Tuple[List[MutationGroupSpec], List[str]]:
    """Translate a configuration into mutation group specs.

    Order is founder, shared groups in configuration order, private groups
    in clone order, then germline. Shared groups naming a clone that does
    not exist are skipped with a ``SkippedGroupWarning``.

    Returns:
        Tuple of (group specs, labels of skipped shared groups)
    """
    validate_clonal_config(config)
    shared_groups = parse_shared_groups(config)

    freqs = config.subclone_freqs
    n_clones = len(freqs)
    all_clones = tuple(range(1, n_clones + 1))

    groups: List[MutationGroupSpec] = [
        MutationGroupSpec(
            mutation_type=MutationType.FOUNDER,
            n_mutations=config.n_mut_founder,
            base_frequency=float(sum(freqs)),
            clone_ids=all_clones,
        )
    ]

    skipped: List[str] = []
    for label, clone_set, count in shared_groups:
        if not clone_set.fits(n_clones):
            message = f"Shared mutation group '{label}' references non-existent clones. Skipping."
            logger.warning(message)
            warnings.warn(message, SkippedGroupWarning, stacklevel=4)
            skipped.append(label)
            continue
        groups.append(
            MutationGroupSpec(
                mutation_type=MutationType.SHARED,
                n_mutations=count,
                base_frequency=float(sum(freqs[i - 1] for i in clone_set)),
                clone_ids=clone_set.indices,
                label=label,
            )
        )

    for index, (freq, count) in enumerate(zip(freqs, config.n_mut_per_clone), start=1):
        groups.append(
            MutationGroupSpec(
                mutation_type=MutationType.PRIVATE,
                n_mutations=count,
                base_frequency=float(freq),
                clone_ids=(index,),
            )
        )

    germline = config.germline_variants
    if germline.enabled:
        # Heterozygous germline sites sit at ~0.5 in tumor and normal cells
        # alike, so purity cancels out of the mixed-sample VAF.
        tumor_purity = config.tumor_purity
        logger.debug("Germline target VAF %.3f at tumor purity %.3f", germline.vaf_expected, tumor_purity)
        groups.append(
            MutationGroupSpec(
                mutation_type=MutationType.GERMLINE,
                n_mutations=germline.n_variants,
                base_frequency=float(germline.vaf_expected),
                clone_ids=GERMLINE,
            )
        )

    return groups, skipped


def describe_clone_ids(clone_ids: Union[Sequence[int], str]) -> str:
    """Encode clone membership the way the mutation table stores it."""
    if isinstance(clone_ids, str):
        return clone_ids
    return ",".join(str(i) for i in clone_ids)
