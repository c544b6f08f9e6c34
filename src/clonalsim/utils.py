"""Utility helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from .result import SimulationResult

ARTIFACT_FILENAMES = {
    "mutations": "mutations.csv",
    "clonal_structure": "clonal_structure.csv",
    "params": "params.json",
    "metadata": "metadata.json",
    "run_context": "run_context.json",
    "report_md": "report.md",
    "report_html": "report.html",
    "manifest": "hash_manifest.txt",
    "vaf_density_png": "vaf_density.png",
    "vaf_scatter_png": "vaf_scatter.png",
    "depth_histogram_png": "depth_histogram.png",
    "clone_matrix_png": "clone_matrix.png",
}


class SimulationIO:
    """Helper for reading/writing artifacts with deterministic paths."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path(self, key: str) -> Path:
        if key not in ARTIFACT_FILENAMES:
            msg = f"unknown artifact key: {key}"
            raise KeyError(msg)
        return self.base_dir / ARTIFACT_FILENAMES[key]

    def write_csv(self, key: str, df: pd.DataFrame) -> Path:
        path = self.path(key)
        df.to_csv(path, index=False)
        return path

    def read_csv(self, key: str) -> pd.DataFrame:
        return pd.read_csv(self.path(key), keep_default_na=False)

    def write_json(self, key: str, payload: dict[str, Any]) -> Path:
        path = self.path(key)
        path.write_text(json.dumps(as_json_ready(payload), indent=2, sort_keys=True), encoding="utf-8")
        return path

    def read_json(self, key: str) -> dict[str, Any]:
        return json.loads(self.path(key).read_text(encoding="utf-8"))

    def write_result(self, result: SimulationResult) -> list[Path]:
        """Write the tables and JSON sidecars of a result."""
        return [
            self.write_csv("mutations", result.mutations),
            self.write_csv("clonal_structure", result.clonal_structure),
            self.write_json("params", result.params),
            self.write_json("metadata", result.metadata),
        ]

    def read_result(self) -> SimulationResult:
        """Rebuild a result from artifacts written by ``write_result``."""
        mutations = self.read_csv("mutations")
        # Clone_IDs such as "3" would otherwise come back as integers
        mutations["Clone_IDs"] = mutations["Clone_IDs"].astype(str)
        return SimulationResult(
            mutations=mutations,
            params=self.read_json("params"),
            clonal_structure=self.read_csv("clonal_structure"),
            metadata=self.read_json("metadata"),
        )


def as_json_ready(data: Any) -> Any:
    if isinstance(data, Path):
        return str(data)
    if isinstance(data, pd.DataFrame):
        return as_json_ready(data.to_dict(orient="records"))
    if isinstance(data, dict):
        return {str(key): as_json_ready(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [as_json_ready(value) for value in data]
    if isinstance(data, np.integer):
        return int(data)
    if isinstance(data, np.floating):
        return float(data)
    return data
