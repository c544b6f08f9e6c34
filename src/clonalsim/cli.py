"""Command-line interface for ClonalSim."""

from __future__ import annotations

import dataclasses
import functools
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click
import jsonschema

from .config import GermlineConfig, SimulationConfig, load_config
from .config_validator import validate_config_file
from .determinism_utils import env_fingerprint, write_manifest
from .exceptions import ClonalSimError
from .export import EXPORTERS, export_result
from .logging_config import setup_logging
from .plotting import save_plots
from .reporting import render_report
from .result import SimulationResult, format_summary, summarize
from .simulate import simulate_tumor
from .utils import ARTIFACT_FILENAMES, SimulationIO
from .validation import assert_hashes_stable, validate_artifacts

DEFAULT_SEED = 7
DEFAULT_OUT_DIR = Path("clonalsim_output")
DETERMINISTIC_ARTIFACTS = ("mutations", "clonal_structure", "params")
EXPORT_SUFFIXES = {
    "csv": "csv",
    "vcf": "vcf",
    "pyclone": "pyclone.tsv",
    "sciclone": "sciclone.tsv",
    "intervals": "intervals.tsv",
}


@dataclass(slots=True)
class CLIContext:
    """Shared CLI configuration."""

    seed: Optional[int]
    config_override: Optional[Path]


def _handle_errors(func: Callable) -> Callable:
    """Report library errors as click errors (message plus exit code 1)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ClonalSimError as exc:
            raise click.ClickException(str(exc)) from exc
        except jsonschema.ValidationError as exc:
            raise click.ClickException(f"Artifact failed schema validation: {exc.message}") from exc
    return wrapper


def _load_simulation_config(ctx: CLIContext) -> SimulationConfig:
    """Load the configuration file if one was given; the CLI seed wins."""
    config = load_config(ctx.config_override) if ctx.config_override else SimulationConfig()
    if ctx.seed is not None:
        return config.with_overrides(seed=ctx.seed)
    if config.seed is None:
        return config.with_overrides(seed=DEFAULT_SEED)
    return config


def _parse_floats(value: str, option: str) -> List[float]:
    try:
        return [float(token) for token in value.split(",") if token.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated numbers, got {value!r}", param_hint=option) from None


def _parse_ints(value: str, option: str) -> List[int]:
    try:
        return [int(token) for token in value.split(",") if token.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated integers, got {value!r}", param_hint=option) from None


def _parse_shared(values: Tuple[str, ...]) -> Dict[str, int]:
    shared: Dict[str, int] = {}
    for value in values:
        label, sep, count = value.rpartition("=")
        if not sep or not label.strip():
            raise click.BadParameter(f"expected LABEL=N, got {value!r}", param_hint="--shared")
        try:
            shared[label.strip()] = int(count)
        except ValueError:
            raise click.BadParameter(f"count must be an integer in {value!r}", param_hint="--shared") from None
    return shared


def _read_run(run_dir: Path) -> SimulationResult:
    if not (run_dir / ARTIFACT_FILENAMES["mutations"]).exists():
        raise click.ClickException(f"No mutation table found in {run_dir}")
    return SimulationIO(run_dir).read_result()


def _run_simulation(config: SimulationConfig, output_dir: Path, plots: bool) -> Tuple[SimulationResult, Dict[str, Path]]:
    """Simulate, persist every artifact and validate the output directory."""
    io = SimulationIO(output_dir)
    result = simulate_tumor(config)

    written = io.write_result(result)
    run_context = {
        "seed": config.seed,
        "config_hash": config.config_hash(),
        **env_fingerprint(),
    }
    written.append(io.write_json("run_context", run_context))

    plot_paths = save_plots(result, io.base_dir) if plots else {}
    md_path, html_path = render_report(result, io.base_dir, plots=plot_paths)
    written += [md_path, html_path] + [Path(path) for path in plot_paths.values()]

    manifest_path = write_manifest(written, io.path("manifest"), relative_to=io.base_dir)
    validate_artifacts(io.base_dir)

    artifacts = {path.name: path for path in written}
    artifacts["manifest"] = manifest_path
    return result, artifacts


@click.group()
@click.option("--seed", default=None, type=int, help=f"Seed for deterministic runs (default {DEFAULT_SEED}).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Path to a YAML simulation configuration file.",
)
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level.")
@click.pass_context
def main(ctx: click.Context, seed: Optional[int], config_path: Optional[Path], log_level: str) -> None:
    """ClonalSim: simulate tumor sequencing VAF data with clonal structure."""
    setup_logging(level=log_level)
    ctx.obj = CLIContext(seed=seed, config_override=config_path)


@main.command("simulate")
@click.option(
    "--out-dir",
    default=DEFAULT_OUT_DIR,
    show_default=True,
    type=click.Path(path_type=Path),
    help="Directory for simulation artifacts.",
)
@click.option("--freqs", help="Comma-separated subclone frequencies, e.g. 0.2,0.3,0.4.")
@click.option("--per-clone", help="Comma-separated private mutation counts per clone.")
@click.option("--founder", type=int, help="Number of founder (truncal) mutations.")
@click.option("--shared", multiple=True, metavar="LABEL=N", help='Shared group, e.g. "2 3=15". Repeatable.')
@click.option("--no-bio-noise", is_flag=True, help="Disable Beta biological noise.")
@click.option("--no-seq-noise", is_flag=True, help="Disable depth and read sampling noise.")
@click.option("--germline", type=int, help="Add N heterozygous germline variants.")
@click.option("--plots/--no-plots", default=True, show_default=True, help="Write diagnostic PNG plots.")
@click.pass_obj
@_handle_errors
def simulate_cmd(
    ctx: CLIContext,
    out_dir: Path,
    freqs: Optional[str],
    per_clone: Optional[str],
    founder: Optional[int],
    shared: Tuple[str, ...],
    no_bio_noise: bool,
    no_seq_noise: bool,
    germline: Optional[int],
    plots: bool,
) -> None:
    """Simulate one tumor sample and write its artifacts."""
    config = _load_simulation_config(ctx)

    overrides: Dict[str, Any] = {}
    if freqs is not None:
        overrides["subclone_freqs"] = _parse_floats(freqs, "--freqs")
    if per_clone is not None:
        overrides["n_mut_per_clone"] = _parse_ints(per_clone, "--per-clone")
    if founder is not None:
        overrides["n_mut_founder"] = founder
    if shared:
        overrides["n_mut_shared"] = _parse_shared(shared)
    if no_bio_noise:
        overrides["biological_noise"] = dataclasses.replace(config.biological_noise, enabled=False)
    if no_seq_noise:
        overrides["sequencing_noise"] = dataclasses.replace(config.sequencing_noise, enabled=False)
    if germline is not None:
        overrides["germline_variants"] = GermlineConfig(
            enabled=True,
            n_variants=germline,
            vaf_expected=config.germline_variants.vaf_expected,
        )
    config = config.with_overrides(**overrides)

    result, artifacts = _run_simulation(config, out_dir, plots)

    click.echo(
        json.dumps(
            {
                "stage": "simulate",
                "seed": config.seed,
                "config_hash": config.config_hash(),
                "summary": summarize(result).to_dict(),
                "skipped_groups": result.metadata["skipped_groups"],
                "artifacts": {key: str(path) for key, path in artifacts.items()},
            },
            indent=2,
        )
    )


@main.command("validate-config")
@click.argument("config_file", type=click.Path(path_type=Path))
@_handle_errors
def validate_config_cmd(config_file: Path) -> None:
    """Check a configuration file and list errors and warnings."""
    is_valid, errors, warnings = validate_config_file(config_file)
    for error in errors:
        click.echo(f"ERROR: {error}")
    for warning in warnings:
        click.echo(f"WARNING: {warning}")
    if not is_valid:
        sys.exit(1)
    click.echo(f"Configuration is valid: {config_file}")


@main.command("determinism")
@click.option(
    "--out-dir",
    default=DEFAULT_OUT_DIR / "determinism",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Base directory for the two runs.",
)
@click.pass_obj
@_handle_errors
def determinism_cmd(ctx: CLIContext, out_dir: Path) -> None:
    """Run the simulation twice with one seed and assert identical outputs."""
    config = _load_simulation_config(ctx)

    manifests = []
    for run in ("run1", "run2"):
        run_dir = out_dir / run
        _run_simulation(config, run_dir, plots=False)
        io = SimulationIO(run_dir)
        manifests.append(
            write_manifest(
                [io.path(key) for key in DETERMINISTIC_ARTIFACTS],
                out_dir / f"hash_manifest_{run}.txt",
                relative_to=run_dir,
            )
        )

    try:
        assert_hashes_stable(manifests[0], manifests[1])
    except AssertionError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        json.dumps(
            {
                "stage": "determinism",
                "seed": config.seed,
                "identical": True,
                "manifests": [str(path) for path in manifests],
            },
            indent=2,
        )
    )


@main.command("export")
@click.option(
    "--run-dir",
    default=DEFAULT_OUT_DIR,
    show_default=True,
    type=click.Path(path_type=Path, exists=True, file_okay=False),
    help="Directory written by 'simulate'.",
)
@click.option("--format", "fmt", type=click.Choice(sorted(EXPORTERS)), default="csv", show_default=True)
@click.option("--output", type=click.Path(path_type=Path), help="Output file (default: inside --run-dir).")
@click.option("--sample-name", default=None, help="Sample name for VCF/PyClone output.")
@_handle_errors
def export_cmd(run_dir: Path, fmt: str, output: Optional[Path], sample_name: Optional[str]) -> None:
    """Convert a simulated mutation table for downstream tools."""
    result = _read_run(run_dir)
    output = output or run_dir / f"mutations.{EXPORT_SUFFIXES[fmt]}"
    path = export_result(result, fmt, output, sample_name=sample_name)
    click.echo(f"Wrote {fmt} export to {path}")


@main.command("summary")
@click.option(
    "--run-dir",
    default=DEFAULT_OUT_DIR,
    show_default=True,
    type=click.Path(path_type=Path, exists=True, file_okay=False),
    help="Directory written by 'simulate'.",
)
@_handle_errors
def summary_cmd(run_dir: Path) -> None:
    """Print summary statistics of a simulation run."""
    result = _read_run(run_dir)
    click.echo(format_summary(summarize(result)))


if __name__ == "__main__":  # pragma: no cover
    main()
