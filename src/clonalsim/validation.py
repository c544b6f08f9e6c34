"""Artifact validation for simulation output directories."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping

import jsonschema
import pandas as pd

from .determinism_utils import read_manifest, verify_manifest
from .result import MUTATION_COLUMNS

BASE_REQUIRED_ARTIFACTS = [
    "mutations.csv",
    "params.json",
    "metadata.json",
    "hash_manifest.txt",
]

JSON_SCHEMA_FILES: Mapping[str, str] = {
    "metadata.json": "run_metadata.schema.json",
    "run_context.json": "run_context.schema.json",
}


def load_json_schema(name: str) -> Dict[str, Any]:
    with resources.as_file(resources.files("clonalsim.assets.schemas") / name) as schema_path:
        with open(schema_path, "r", encoding="utf-8") as fh:
            return json.load(fh)


def _validate_json(path: Path, schema_name: str) -> None:
    payload = json.loads(path.read_text(encoding="utf-8"))
    jsonschema.validate(payload, load_json_schema(schema_name))


def _validate_params(path: Path) -> None:
    payload = json.loads(path.read_text(encoding="utf-8"))
    payload.pop("clone_names", None)
    jsonschema.validate(payload, load_json_schema("simulation_config.schema.json"))


def _validate_mutations(path: Path) -> None:
    frame = pd.read_csv(path)
    missing = [col for col in MUTATION_COLUMNS if col not in frame.columns]
    if missing:
        raise AssertionError(f"Missing expected columns in {path}: {missing}")
    if (frame["Alt_reads"] > frame["Depth"]).any():
        raise AssertionError(f"Alt_reads exceed Depth in {path}")
    if ((frame["VAF"] < 0) | (frame["VAF"] > 1)).any():
        raise AssertionError(f"VAF outside [0, 1] in {path}")


def validate_artifacts(run_dir: Path) -> None:
    """Validate artifacts inside a simulation output directory."""
    run_dir = Path(run_dir)
    if not run_dir.exists():
        raise AssertionError(f"Output directory not found: {run_dir}")

    for required in BASE_REQUIRED_ARTIFACTS:
        candidate = run_dir / required
        if not candidate.exists():
            raise AssertionError(f"Required artifact missing: {candidate}")
        if candidate.suffix == ".txt" and not candidate.read_text(encoding="utf-8").strip():
            raise AssertionError(f"Artifact is empty: {candidate}")

    for filename, schema_name in JSON_SCHEMA_FILES.items():
        candidate = run_dir / filename
        if candidate.exists():
            _validate_json(candidate, schema_name)

    _validate_params(run_dir / "params.json")
    _validate_mutations(run_dir / "mutations.csv")

    stale = sorted(name for name, ok in verify_manifest(run_dir / "hash_manifest.txt", run_dir).items() if not ok)
    if stale:
        raise AssertionError(f"Artifacts do not match hash manifest: {stale}")

    for png in run_dir.glob("*.png"):
        if png.stat().st_size == 0:
            raise AssertionError(f"Plot artifact is empty: {png}")


def assert_hashes_stable(previous_manifest: Path, current_manifest: Path) -> None:
    """Ensure two manifest files contain identical hashes."""
    prev_entries = read_manifest(Path(previous_manifest))
    curr_entries = read_manifest(Path(current_manifest))

    if prev_entries != curr_entries:
        prev_keys = set(prev_entries)
        curr_keys = set(curr_entries)
        details = {
            "missing": sorted(prev_keys - curr_keys),
            "unexpected": sorted(curr_keys - prev_keys),
            "changed": sorted(
                key for key in prev_keys & curr_keys if prev_entries[key] != curr_entries[key]
            ),
        }
        raise AssertionError(f"Hash manifest mismatch detected: {json.dumps(details, indent=2)}")
