"""Simulation result container, accessors and text summaries."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

import numpy as np
import pandas as pd

MUTATION_COLUMNS = [
    "Mutation", "Chromosome", "Position", "Ref", "Alt",
    "True_VAF", "VAF", "Depth", "Alt_reads",
    "Clone", "Type", "Clone_IDs",
]
REQUIRED_COLUMNS = MUTATION_COLUMNS[:-1]
CLONAL_STRUCTURE_COLUMNS = ["Clone", "Frequency", "N_private_mutations"]


@dataclass(frozen=True)
class MutationRecord:
    """One simulated variant."""

    mutation: str
    chromosome: str
    position: int
    ref: str
    alt: str
    true_vaf: float
    vaf: float
    depth: int
    alt_reads: int
    clone: str
    mutation_type: str
    clone_ids: str

    @property
    def ref_reads(self) -> int:
        return self.depth - self.alt_reads

    @property
    def is_variant(self) -> bool:
        return self.ref != self.alt

    @classmethod
    def from_row(cls, row: pd.Series) -> "MutationRecord":
        return cls(
            mutation=str(row["Mutation"]),
            chromosome=str(row["Chromosome"]),
            position=int(row["Position"]),
            ref=str(row["Ref"]),
            alt=str(row["Alt"]),
            true_vaf=float(row["True_VAF"]),
            vaf=float(row["VAF"]),
            depth=int(row["Depth"]),
            alt_reads=int(row["Alt_reads"]),
            clone=str(row["Clone"]),
            mutation_type=str(row["Type"]),
            clone_ids=str(row["Clone_IDs"]),
        )


@dataclass(frozen=True)
class SimulationResult:
    """Output of one ``simulate_tumor`` call.

    The tables are owned by the result; accessor functions hand out copies
    so downstream code never modifies them in place.
    """

    mutations: pd.DataFrame
    params: Dict[str, Any] = field(default_factory=dict)
    clonal_structure: pd.DataFrame = field(default_factory=pd.DataFrame)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.mutations)

    @property
    def subclone_freqs(self) -> List[float]:
        return list(self.params.get("subclone_freqs", []))

    @property
    def tumor_purity(self) -> float:
        return float(sum(self.subclone_freqs))

    def records(self) -> Iterator[MutationRecord]:
        for _, row in self.mutations.iterrows():
            yield MutationRecord.from_row(row)

    def validate(self) -> List[str]:
        """Return a list of consistency problems; empty when valid."""
        errors: List[str] = []
        mutations = self.mutations

        if len(mutations) > 0:
            missing = [col for col in REQUIRED_COLUMNS if col not in mutations.columns]
            if missing:
                errors.append(f"Missing required columns in mutations: {', '.join(missing)}")
            if "VAF" in mutations and ((mutations["VAF"] < 0) | (mutations["VAF"] > 1)).any():
                errors.append("VAF values must be between 0 and 1")
            if "Depth" in mutations and (mutations["Depth"] <= 0).any():
                errors.append("Depth values must be positive")
            if {"Alt_reads", "Depth"} <= set(mutations.columns):
                if (mutations["Alt_reads"] > mutations["Depth"]).any():
                    errors.append("Alt_reads cannot exceed Depth")

        freqs = self.subclone_freqs
        if freqs:
            if any(f < 0 or f > 1 for f in freqs):
                errors.append("Subclone frequencies must be between 0 and 1")
            if sum(freqs) > 1 + 1e-9:
                errors.append("Sum of subclone frequencies cannot exceed 1")
        return errors

    def is_valid(self) -> bool:
        return not self.validate()


def _check(obj: Any) -> SimulationResult:
    if not isinstance(obj, SimulationResult):
        raise TypeError(f"expected SimulationResult, got {type(obj).__name__}")
    return obj


def get_mutations(result: SimulationResult) -> pd.DataFrame:
    return _check(result).mutations.copy()


def get_sim_params(result: SimulationResult) -> Dict[str, Any]:
    return copy.deepcopy(_check(result).params)


def get_true_vaf(result: SimulationResult) -> np.ndarray:
    """True (biological) VAF, before sequencing noise."""
    return _check(result).mutations["True_VAF"].to_numpy(copy=True)


def get_observed_vaf(result: SimulationResult) -> np.ndarray:
    """Observed VAF, after sequencing noise."""
    return _check(result).mutations["VAF"].to_numpy(copy=True)


def get_clonal_structure(result: SimulationResult) -> pd.DataFrame:
    return _check(result).clonal_structure.copy()


def get_metadata(result: SimulationResult) -> Dict[str, Any]:
    return dict(_check(result).metadata)


@dataclass(frozen=True)
class SimulationSummary:
    """Summary statistics of a simulation result."""

    n_mutations: int
    n_clones: int
    tumor_purity: float
    mutation_types: Dict[str, int]
    true_vaf: Dict[str, float]
    observed_vaf: Dict[str, float]
    depth: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_mutations": self.n_mutations,
            "n_clones": self.n_clones,
            "tumor_purity": self.tumor_purity,
            "mutation_types": dict(self.mutation_types),
            "vaf_summary": {"true": dict(self.true_vaf), "observed": dict(self.observed_vaf)},
            "depth_summary": dict(self.depth),
        }


def _five_number(values: pd.Series) -> Dict[str, float]:
    if values.empty:
        return {}
    return {
        "min": float(values.min()),
        "q1": float(values.quantile(0.25)),
        "median": float(values.median()),
        "mean": float(values.mean()),
        "q3": float(values.quantile(0.75)),
        "max": float(values.max()),
    }


def summarize(result: SimulationResult) -> SimulationSummary:
    """Compute summary statistics for a simulation result."""
    mutations = _check(result).mutations
    depth = mutations["Depth"] if len(mutations) else pd.Series(dtype=float)
    depth_summary: Dict[str, float] = {}
    if not depth.empty:
        depth_summary = {
            "mean": float(depth.mean()),
            "median": float(depth.median()),
            "sd": float(depth.std(ddof=1)) if len(depth) > 1 else 0.0,
            "min": float(depth.min()),
            "max": float(depth.max()),
        }

    type_counts = mutations["Type"].value_counts(sort=False) if len(mutations) else pd.Series(dtype=int)
    return SimulationSummary(
        n_mutations=len(mutations),
        n_clones=len(result.subclone_freqs),
        tumor_purity=result.tumor_purity,
        mutation_types={str(k): int(v) for k, v in type_counts.items()},
        true_vaf=_five_number(mutations["True_VAF"]) if len(mutations) else {},
        observed_vaf=_five_number(mutations["VAF"]) if len(mutations) else {},
        depth=depth_summary,
    )


def _format_stats(stats: Dict[str, float]) -> str:
    return "  ".join(f"{key}={value:.3f}" for key, value in stats.items())


def format_summary(summary: SimulationSummary) -> str:
    """Render a ``SimulationSummary`` as text."""
    lines = [
        "ClonalSim Summary",
        "=" * 42,
        f"Total mutations: {summary.n_mutations}",
        f"Number of clones: {summary.n_clones}",
        f"Tumor purity: {summary.tumor_purity:.3f}",
        "",
        "Mutation type counts:",
    ]
    lines.extend(f"  {name}: {count}" for name, count in summary.mutation_types.items())
    lines += [
        "",
        "True VAF (biological):",
        f"  {_format_stats(summary.true_vaf)}",
        "",
        "Observed VAF (with sequencing noise):",
        f"  {_format_stats(summary.observed_vaf)}",
    ]
    if summary.depth:
        lines += [
            "",
            "Sequencing depth:",
            f"  Mean: {summary.depth['mean']:.2f}",
            f"  Median: {summary.depth['median']:g}",
            f"  SD: {summary.depth['sd']:.2f}",
            f"  Range: {summary.depth['min']:g} - {summary.depth['max']:g}",
        ]
    return "\n".join(lines)


def describe_result(result: SimulationResult) -> str:
    """Short human-readable description of a result."""
    result = _check(result)
    mutations = result.mutations
    lines = [
        "SimulationResult",
        "=" * 42,
        f"Number of mutations: {len(mutations)}",
    ]
    freqs = result.subclone_freqs
    if freqs:
        lines += [
            f"Number of clones: {len(freqs)}",
            f"Clone frequencies: {', '.join(f'{f:.3g}' for f in freqs)}",
            f"Tumor purity: {result.tumor_purity:.3f}",
        ]
    if len(mutations) > 0:
        lines.append("")
        lines.append("Mutation types:")
        for name, count in mutations["Type"].value_counts(sort=False).items():
            lines.append(f"  {name}: {count}")
        lines += [
            "",
            "Sequencing depth:",
            f"  Mean: {mutations['Depth'].mean():.2f}",
            f"  Range: {mutations['Depth'].min()} - {mutations['Depth'].max()}",
        ]
    if result.metadata:
        lines.append("")
        lines.append("Metadata:")
        if result.metadata.get("date"):
            lines.append(f"  Created: {result.metadata['date']}")
        if result.metadata.get("version"):
            lines.append(f"  Package version: {result.metadata['version']}")
    return "\n".join(lines)
