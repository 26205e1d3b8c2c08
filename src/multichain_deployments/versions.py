"""Project version utilities for multichain-deployments library."""

import json
import re
from pathlib import Path
from typing import Union

from .exceptions import ManifestNotFoundError, ProjectVersionNotFoundError

# MAJOR.MINOR.PATCH with optional pre-release and build metadata
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def is_semantic_version(value: str) -> bool:
    """
    Check whether a string is a semantic version.

    Args:
        value: Candidate version, without a leading 'v'

    Returns:
        True for strings like "1.1.2" or "2.0.0-beta.1"
    """
    return bool(SEMVER_PATTERN.match(value))


def read_project_version(manifest_path: Union[Path, str]) -> str:
    """
    Read the semantic version from a package.json manifest.

    Args:
        manifest_path: Path to package.json

    Returns:
        Version string, e.g. "1.1.2"

    Raises:
        ManifestNotFoundError: If the manifest does not exist
        ProjectVersionNotFoundError: If the manifest is not JSON or has no
            valid "version" field
    """
    manifest_path = Path(manifest_path)
    try:
        with open(manifest_path) as f:
            manifest = json.load(f)
    except FileNotFoundError as e:
        raise ManifestNotFoundError(f"Project manifest not found at {manifest_path}") from e
    except json.JSONDecodeError as e:
        raise ProjectVersionNotFoundError(
            f"Project manifest {manifest_path} is not valid JSON: {e}"
        ) from e

    version = manifest.get("version") if isinstance(manifest, dict) else None
    if not isinstance(version, str) or not is_semantic_version(version):
        raise ProjectVersionNotFoundError(
            f"No semantic version in {manifest_path} (found {version!r})"
        )

    return version
