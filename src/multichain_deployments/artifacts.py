"""Broadcast artifact relocation for multichain-deployments library."""

import logging
from pathlib import Path
from typing import Optional, Union

from .exceptions import ArtifactMoveError, ArtifactNotFoundError, NetworkIdNotFoundError
from .paths import get_archive_path, get_broadcast_file_path
from .types import ArtifactMove, ScriptVariant

logger = logging.getLogger(__name__)


def plan_relocation(
    script_variant: ScriptVariant,
    chain: str,
    network_id: Optional[int],
    broadcast: bool,
    broadcast_dir: Union[Path, str],
    archive_dir: Union[Path, str],
    version: str,
) -> ArtifactMove:
    """
    Compute where a chain's broadcast record is and where it is archived.

    Args:
        script_variant: Script that was run
        chain: Chain name, used as the archived file name
        network_id: Chain id extracted from the deployer output
        broadcast: Whether the run was broadcast (False reads the dry-run record)
        broadcast_dir: Foundry broadcast output directory
        archive_dir: Root of the external archive
        version: Project semantic version

    Returns:
        ArtifactMove with source and destination paths

    Raises:
        NetworkIdNotFoundError: If network_id is None, since the source path
            cannot be resolved
    """
    if network_id is None:
        raise NetworkIdNotFoundError(
            f"No network id for chain '{chain}': cannot locate its broadcast file "
            f"under {Path(broadcast_dir) / script_variant.value}"
        )

    return ArtifactMove(
        source=get_broadcast_file_path(broadcast_dir, script_variant, network_id, broadcast),
        destination=get_archive_path(archive_dir, version, chain),
    )


def apply_move(move: ArtifactMove) -> Path:
    """
    Move a broadcast record into the archive.

    Missing destination directories are created. The move is a rename, so
    it is atomic within one filesystem; an existing destination file is
    replaced.

    Args:
        move: Planned move

    Returns:
        Destination path

    Raises:
        ArtifactNotFoundError: If the source file does not exist (nothing is
            written in that case)
        ArtifactMoveError: If creating directories or renaming fails
    """
    if not move.source.is_file():
        raise ArtifactNotFoundError(
            f"Broadcast file {move.source} not found, cannot archive it to {move.destination}"
        )

    try:
        move.destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactMoveError(
            f"Failed to create archive directory {move.destination.parent}: {e}"
        ) from e

    try:
        move.source.replace(move.destination)
    except OSError as e:
        raise ArtifactMoveError(
            f"Failed to move {move.source} to {move.destination}: {e}"
        ) from e

    logger.info("Moved %s to %s", move.source, move.destination)
    return move.destination
