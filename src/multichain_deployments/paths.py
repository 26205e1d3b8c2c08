"""Path management utilities for multichain-deployments library."""

import time
from pathlib import Path
from typing import Optional, Union

from .constants import (
    ARCHIVE_BROADCASTS_DIR,
    BROADCAST_FILE,
    DETERMINISTIC_LOG_FILE,
    DRY_RUN_DIR,
    STANDARD_LOG_FILE,
)
from .types import ScriptVariant


def get_deployment_log_path(
    deployments_dir: Union[Path, str], script_variant: ScriptVariant
) -> Path:
    """
    Get the provenance log path for a script variant.

    Args:
        deployments_dir: Directory holding deployment records
        script_variant: Script the run uses

    Returns:
        deployments_dir/deterministic.md or deployments_dir/non_deterministic.md
    """
    if script_variant is ScriptVariant.DETERMINISTIC:
        file_name = DETERMINISTIC_LOG_FILE
    else:
        file_name = STANDARD_LOG_FILE
    return Path(deployments_dir) / file_name


def get_rotated_path(
    path: Union[Path, str], timestamp: Optional[Union[int, str]] = None
) -> Path:
    """
    Get the name an existing record is moved to before it is replaced.

    The unix timestamp is prefixed to the file name, in the same directory.

    Args:
        path: Record about to be replaced
        timestamp: Unix timestamp (defaults to now)

    Returns:
        Path like deployments/1718000000_non_deterministic.md
    """
    if timestamp is None:
        timestamp = int(time.time())
    path = Path(path)
    return path.with_name(f"{timestamp}_{path.name}")


def get_broadcast_file_path(
    broadcast_dir: Union[Path, str],
    script_variant: ScriptVariant,
    network_id: int,
    broadcast: bool,
) -> Path:
    """
    Get the run record forge writes for a script and network.

    Args:
        broadcast_dir: Foundry broadcast output directory
        script_variant: Script that was run
        network_id: Numeric chain id recovered from the output
        broadcast: False for simulations, whose records live under dry-run/

    Returns:
        Path to run-latest.json
    """
    base = Path(broadcast_dir) / script_variant.value / str(network_id)
    if not broadcast:
        base = base / DRY_RUN_DIR
    return base / BROADCAST_FILE


def get_archive_path(archive_dir: Union[Path, str], version: str, chain: str) -> Path:
    """
    Get the archive destination of a chain's broadcast record.

    Returns:
        archive_dir/v{version}/broadcasts/{chain}.json
    """
    return Path(archive_dir) / f"v{version}" / ARCHIVE_BROADCASTS_DIR / f"{chain}.json"


def get_chain_addresses_path(
    deployments_dir: Union[Path, str], script_variant: ScriptVariant, chain: str
) -> Path:
    """
    Get the per-chain address file path.

    Files are grouped per script variant so deterministic and standard
    deployments of the same chain do not overwrite each other.
    """
    variant_dir = script_variant.name.lower()
    return Path(deployments_dir) / variant_dir / f"{chain}.md"
