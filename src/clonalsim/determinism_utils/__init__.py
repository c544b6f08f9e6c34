"""Determinism utilities package."""

from __future__ import annotations

from .seed import env_fingerprint, git_sha
from .hash_artifacts import (
    hash_file,
    hash_dir,
    hash_frame,
    read_manifest,
    write_manifest,
    verify_manifest,
)

__all__ = [
    "env_fingerprint",
    "git_sha",
    "hash_file",
    "hash_dir",
    "hash_frame",
    "read_manifest",
    "write_manifest",
    "verify_manifest",
]
