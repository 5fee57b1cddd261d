"""
Content fingerprints for drift detection.

A fingerprint is a short digest over the exact bytes that determine what a
workspace image contains: the Dockerfile followed by the tool manifest.
"""

import hashlib
import logging
from pathlib import Path
from typing import Optional

log = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 8

# Stand-ins for missing inputs, so "absent" still hashes deterministically.
MISSING_DOCKERFILE = b"no-dockerfile"
MISSING_TOOL_MANIFEST = b"no-tool-versions"


def _read_or(path: Optional[Path], sentinel: bytes) -> bytes:
    if path is None or not path.is_file():
        return sentinel
    return path.read_bytes()


def compute_fingerprint(
    dockerfile_path: Optional[Path], tool_manifest_path: Optional[Path]
) -> str:
    """
    Compute the fingerprint of a workspace's build inputs.

    No normalization is applied: a whitespace-only edit is drift.

    Args:
        dockerfile_path: Dockerfile used for the workspace stage
        tool_manifest_path: Workspace ``.tool-versions`` file

    Returns:
        First 8 hex characters of the SHA-256 digest
    """
    hasher = hashlib.sha256()
    hasher.update(_read_or(dockerfile_path, MISSING_DOCKERFILE))
    hasher.update(_read_or(tool_manifest_path, MISSING_TOOL_MANIFEST))
    fingerprint = hasher.hexdigest()[:FINGERPRINT_LENGTH]

    log.debug(
        f"Fingerprint for {dockerfile_path} + {tool_manifest_path}: {fingerprint}"
    )
    return fingerprint
