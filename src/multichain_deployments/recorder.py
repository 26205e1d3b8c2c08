"""Deployment records for multichain-deployments library."""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .constants import (
    BROADCAST_MARKER,
    CORE_CONTRACTS,
    CORE_HEADING,
    PERIPHERY_CONTRACTS,
    PERIPHERY_HEADING,
    SIMULATION_MARKER,
)
from .exceptions import DeploymentLogError
from .paths import get_rotated_path
from .types import DeploymentLogEntry, ExtractedFacts

logger = logging.getLogger(__name__)


def rotate_existing(path: Union[Path, str], timestamp: Optional[int] = None) -> Optional[Path]:
    """
    Move an existing record aside so a fresh one can be written.

    The file is renamed to ``<timestamp>_<name>`` in the same directory. If
    that name is taken (two runs within one second), a counter is added so
    earlier history is never overwritten.

    Args:
        path: Record that is about to be written
        timestamp: Unix timestamp for the new name (defaults to now)

    Returns:
        The rotated path, or None if there was nothing to rotate

    Raises:
        DeploymentLogError: If the rename fails
    """
    path = Path(path)
    if not path.exists():
        return None

    if timestamp is None:
        timestamp = int(time.time())

    rotated = get_rotated_path(path, timestamp)
    counter = 1
    while rotated.exists():
        rotated = get_rotated_path(path, f"{timestamp}-{counter}")
        counter += 1

    try:
        path.rename(rotated)
    except OSError as e:
        raise DeploymentLogError(f"Failed to rotate {path} to {rotated}: {e}") from e

    logger.info("Moved previous record %s to %s", path, rotated)
    return rotated


def _write(path: Path, content: str, mode: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, mode) as f:
            f.write(content)
    except OSError as e:
        raise DeploymentLogError(f"Failed to write {path}: {e}") from e


def start_deployment_log(
    path: Union[Path, str],
    broadcast: bool,
    now: Optional[datetime] = None,
) -> DeploymentLogEntry:
    """
    Start the provenance log of a run.

    Any previous log at the same path is rotated aside first, then a marker
    saying whether this run is broadcast or a simulation is appended,
    followed by the UTC start time.

    Args:
        path: Log file path
        broadcast: Whether the run broadcasts transactions
        now: Start time (defaults to now, UTC)

    Returns:
        DeploymentLogEntry describing what was written

    Raises:
        DeploymentLogError: If rotating or writing fails
    """
    path = Path(path)
    if now is None:
        now = datetime.now(timezone.utc)

    rotated = rotate_existing(path, int(now.timestamp()))

    marker = BROADCAST_MARKER if broadcast else SIMULATION_MARKER
    started = now.strftime("%Y-%m-%d %H:%M:%S UTC")
    _write(path, f"{marker}\n\nStarted at {started}\n\n", "a")

    return DeploymentLogEntry(path=path, broadcast=broadcast, created_at=now, rotated_path=rotated)


def format_chain_addresses(
    chain: str,
    facts: ExtractedFacts,
    core_labels: Iterable[str] = CORE_CONTRACTS,
    periphery_labels: Iterable[str] = PERIPHERY_CONTRACTS,
) -> str:
    """
    Render a chain's addresses as markdown.

    Labels found in neither group are listed under the periphery heading.
    """
    core_labels = list(core_labels)
    periphery_labels = list(periphery_labels)

    core: List[str] = []
    periphery: List[str] = []
    for label, address in facts.addresses.items():
        line = f"- {label}: {address}"
        if label in core_labels:
            core.append(line)
        else:
            periphery.append(line)

    lines = [f"# {chain}", ""]
    if facts.network_id is not None:
        lines += [f"Chain ID: {facts.network_id}", ""]
    lines += [CORE_HEADING, ""] + core + [""]
    lines += [PERIPHERY_HEADING, ""] + periphery + [""]
    return "\n".join(lines)


def write_chain_addresses(
    path: Union[Path, str],
    chain: str,
    facts: ExtractedFacts,
    core_labels: Iterable[str] = CORE_CONTRACTS,
    periphery_labels: Iterable[str] = PERIPHERY_CONTRACTS,
) -> Path:
    """
    Write one chain's extracted addresses under core/periphery headings.

    An existing file is rotated aside first.

    Args:
        path: Address file path
        chain: Chain name
        facts: Facts extracted from the chain's deployer output
        core_labels: Labels listed under the core heading
        periphery_labels: Labels listed under the periphery heading

    Returns:
        Path written

    Raises:
        DeploymentLogError: If rotating or writing fails
    """
    path = Path(path)
    rotate_existing(path)
    _write(path, format_chain_addresses(chain, facts, core_labels, periphery_labels), "w")
    logger.info("Wrote %d addresses for %s to %s", len(facts.addresses), chain, path)
    return path
