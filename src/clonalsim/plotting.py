"""Diagnostic plots for simulated mutation tables."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from .exceptions import ExportError  # noqa: E402
from .result import SimulationResult, get_mutations  # noqa: E402

PLOT_KINDS = ("vaf_density", "vaf_scatter", "depth_histogram", "clone_matrix")
TYPE_COLORS = {
    "founder": "#E41A1C",
    "shared": "#377EB8",
    "private": "#4DAF4A",
    "germline": "#FF7F00",
}


def _vaf_density(ax, mutations, freqs) -> None:
    vaf = mutations["VAF"].to_numpy()
    ax.hist(vaf, bins=40, range=(0, 1), density=True, color="#984EA3", alpha=0.6)
    ax.plot(vaf, np.zeros_like(vaf), "|", color="#984EA3", alpha=0.3)
    for freq in freqs:
        ax.axvline(freq, linestyle="--", color="red", alpha=0.5)
    if freqs:
        ax.axvline(sum(freqs), linestyle="--", color="darkred", alpha=0.7)
    ax.set_title(f"VAF Density - {len(mutations)} mutations from {len(freqs)} subclones")
    ax.set_xlabel("Variant Allele Frequency (VAF)")
    ax.set_ylabel("Density")


def _vaf_scatter(ax, mutations, freqs) -> None:
    index = np.arange(1, len(mutations) + 1)
    for mutation_type, color in TYPE_COLORS.items():
        mask = (mutations["Type"] == mutation_type).to_numpy()
        if mask.any():
            ax.scatter(index[mask], mutations["VAF"].to_numpy()[mask], s=8, alpha=0.6,
                       color=color, label=mutation_type)
    for freq in freqs:
        ax.axhline(freq, linestyle="--", color="gray", alpha=0.3)
    ax.set_title("Mutational Profile: VAF of All Mutations")
    ax.set_xlabel("Mutation Index")
    ax.set_ylabel("Variant Allele Frequency (VAF)")
    ax.legend(title="Type")


def _depth_histogram(ax, mutations, freqs) -> None:
    ax.hist(mutations["Depth"].to_numpy(), bins=30, color="#377EB8", alpha=0.7)
    ax.set_title("Sequencing Depth Distribution")
    ax.set_xlabel("Depth (read count)")
    ax.set_ylabel("Number of mutations")


def clone_presence_matrix(mutations, n_clones: int) -> np.ndarray:
    """Boolean (mutation x clone) presence matrix ordered by decreasing VAF."""
    ordered = mutations.sort_values("VAF", ascending=False, kind="mergesort")
    matrix = np.zeros((len(ordered), n_clones), dtype=bool)
    for row, clone_ids in enumerate(ordered["Clone_IDs"].astype(str)):
        if clone_ids == "germline":
            continue
        for token in clone_ids.split(","):
            index = int(token)
            if 1 <= index <= n_clones:
                matrix[row, index - 1] = True
    return matrix


def _clone_matrix(ax, mutations, freqs) -> None:
    if "Clone_IDs" not in mutations.columns:
        raise ExportError("Clone_IDs column missing from mutations")
    matrix = clone_presence_matrix(mutations, len(freqs))
    ax.imshow(matrix, aspect="auto", interpolation="nearest", cmap="Purples")
    ax.set_xticks(range(len(freqs)))
    ax.set_xticklabels([f"Clone{i}" for i in range(1, len(freqs) + 1)])
    ax.set_yticks([])
    ax.set_title("Mutation Presence Matrix in Subclones (ordered by decreasing VAF)")
    ax.set_xlabel("Subclone")
    ax.set_ylabel("Mutation")


_PLOTTERS = {
    "vaf_density": _vaf_density,
    "vaf_scatter": _vaf_scatter,
    "depth_histogram": _depth_histogram,
    "clone_matrix": _clone_matrix,
}


def plot_result(result: SimulationResult, kind: str = "vaf_density", ax=None):
    """Draw one diagnostic plot and return its Figure."""
    if kind not in _PLOTTERS:
        raise ExportError(
            f"Unknown plot type '{kind}'. Choose from: {', '.join(PLOT_KINDS)}",
            {"kind": kind},
        )
    mutations = get_mutations(result)
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4), dpi=150)
    else:
        fig = ax.figure
    _PLOTTERS[kind](ax, mutations, result.subclone_freqs)
    fig.tight_layout()
    return fig


def save_plots(result: SimulationResult, output_dir: Path, kinds: Optional[tuple] = None) -> Dict[str, str]:
    """Write PNGs for the requested plot kinds (all by default)."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    artifacts = {}
    for kind in kinds or PLOT_KINDS:
        fig = plot_result(result, kind)
        path = output_dir / f"{kind}.png"
        fig.savefig(path)
        plt.close(fig)
        artifacts[kind] = str(path)
    return artifacts
