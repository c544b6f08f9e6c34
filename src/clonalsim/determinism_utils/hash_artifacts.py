"""Artifact hashing utilities for determinism verification."""

from __future__ import annotations

import hashlib
import pathlib
from collections.abc import Sequence

import pandas as pd


def hash_file(path: str | pathlib.Path) -> str:
    """Compute SHA256 hash of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            h.update(chunk)
    return h.hexdigest()


def hash_dir(directory: str | pathlib.Path, pattern: str = "*") -> dict[str, str]:
    """Compute SHA256 hashes for all files matching pattern in directory.

    Returns:
        Dictionary mapping relative paths to SHA256 hashes
    """
    dir_path = pathlib.Path(directory)
    hashes = {}

    for file_path in sorted(dir_path.rglob(pattern)):
        if file_path.is_file():
            relative_path = file_path.relative_to(dir_path)
            hashes[str(relative_path)] = hash_file(file_path)

    return hashes


def hash_frame(frame: pd.DataFrame, precision: int = 10) -> str:
    """Hash a DataFrame's values, rounding floats to ``precision`` decimals."""
    rounded = frame.round(precision)
    payload = rounded.to_csv(index=False, float_format=f"%.{precision}f")
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def write_manifest(
    paths: Sequence[str | pathlib.Path],
    out_manifest: str | pathlib.Path,
    relative_to: str | pathlib.Path | None = None,
) -> pathlib.Path:
    """Write hash manifest file in the format ``<hash>  <path>``.

    When ``relative_to`` is given, paths are recorded relative to it so
    manifests from different output directories can be compared.
    """
    manifest_path = pathlib.Path(out_manifest)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    base = pathlib.Path(relative_to) if relative_to is not None else None

    with open(manifest_path, "w", encoding="utf-8") as f:
        for path in paths:
            path_obj = pathlib.Path(path)
            label = path_obj.relative_to(base) if base is not None else path_obj
            if path_obj.exists():
                f.write(f"{hash_file(path_obj)}  {label}\n")
            else:
                f.write(f"MISSING  {label}\n")
    return manifest_path


def read_manifest(path: str | pathlib.Path) -> dict[str, str]:
    """Parse a manifest into ``{path: hash}``."""
    entries: dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as fh:
        for raw_line in fh:
            line = raw_line.strip()
            if not line:
                continue
            parts = line.split("  ", 1)
            if len(parts) != 2:
                continue
            hash_value, file_path = parts
            entries[file_path] = hash_value
    return entries


def verify_manifest(
    manifest_path: str | pathlib.Path,
    base_dir: str | pathlib.Path | None = None,
) -> dict[str, bool]:
    """Verify files against a hash manifest.

    Returns:
        Dictionary mapping file paths to verification status (True/False)
    """
    base = pathlib.Path(base_dir) if base_dir is not None else None
    results = {}

    for file_path, expected_hash in read_manifest(manifest_path).items():
        if expected_hash == "MISSING":
            results[file_path] = False
            continue
        candidate = base / file_path if base is not None else pathlib.Path(file_path)
        if not candidate.exists():
            results[file_path] = False
            continue
        results[file_path] = hash_file(candidate) == expected_hash

    return results
