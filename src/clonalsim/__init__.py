"""ClonalSim: synthetic tumor sequencing data with hierarchical clonal structure."""

from __future__ import annotations

__version__ = "0.1.0"

# Core simulation
from .simulate import simulate_tumor, simulate_replicates
from .noise import (
    DepthDistribution,
    apply_biological_noise,
    simulate_depth,
    simulate_sequencing_reads,
)
from .generate import generate_mutations
from .structure import CloneSet, MutationGroupSpec, resolve_mutation_groups

# Configuration and I/O
from .config import (
    BiologicalNoiseConfig,
    GermlineConfig,
    SequencingNoiseConfig,
    SimulationConfig,
    dump_config,
    load_config,
)
from .utils import SimulationIO

# Results
from .result import (
    SimulationResult,
    describe_result,
    get_clonal_structure,
    get_metadata,
    get_mutations,
    get_observed_vaf,
    get_sim_params,
    get_true_vaf,
    summarize,
)

# Export and reporting
from .export import to_dataframe, to_intervals, to_pyclone, to_sciclone, to_vcf
from .plotting import plot_result
from .reporting import render_report

from .exceptions import (
    ClonalSimError,
    ConfigurationError,
    ExportError,
    InvalidParameterError,
    SkippedGroupWarning,
)

__all__ = [
    "__version__",
    # Core simulation
    "simulate_tumor",
    "simulate_replicates",
    "DepthDistribution",
    "apply_biological_noise",
    "simulate_depth",
    "simulate_sequencing_reads",
    "generate_mutations",
    "CloneSet",
    "MutationGroupSpec",
    "resolve_mutation_groups",
    # Configuration
    "BiologicalNoiseConfig",
    "GermlineConfig",
    "SequencingNoiseConfig",
    "SimulationConfig",
    "dump_config",
    "load_config",
    "SimulationIO",
    # Results
    "SimulationResult",
    "describe_result",
    "get_clonal_structure",
    "get_metadata",
    "get_mutations",
    "get_observed_vaf",
    "get_sim_params",
    "get_true_vaf",
    "summarize",
    # Export and reporting
    "to_dataframe",
    "to_intervals",
    "to_pyclone",
    "to_sciclone",
    "to_vcf",
    "plot_result",
    "render_report",
    # Errors
    "ClonalSimError",
    "ConfigurationError",
    "ExportError",
    "InvalidParameterError",
    "SkippedGroupWarning",
]
