"""Data types and dataclasses for multichain-deployments library."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import ERROR_MARKER

ERROR_LINE_PATTERN = re.compile(rf"^[ \t]*{ERROR_MARKER}\b", re.MULTILINE)


class ScriptVariant(Enum):
    """
    Deployment script variants.

    Value strings are the Solidity script file names, which also key the
    broadcast directories forge writes.
    """

    STANDARD = "DeployProtocol.s.sol"
    DETERMINISTIC = "DeployDeterministicProtocol.s.sol"


class FailurePolicy(Enum):
    """What the orchestrator does after a chain fails."""

    CONTINUE = "continue"
    HALT = "halt"


@dataclass(frozen=True)
class DeploymentRequest:
    """Normalized deployment intent, built once from the command line."""

    chains: Tuple[str, ...]
    script_variant: ScriptVariant = ScriptVariant.STANDARD
    broadcast: bool = False  # False means dry-run simulation
    gas_price: Optional[str] = None  # Forwarded verbatim to the deployer
    copy_broadcast_file: bool = False


@dataclass
class ExecutionOutcome:
    """Result of running the deployer for one chain."""

    chain: str
    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return f"{self.stdout}\n{self.stderr}"

    @property
    def has_error_marker(self) -> bool:
        """Whether a line of the output starts with the error marker."""
        return ERROR_LINE_PATTERN.search(self.output) is not None

    @property
    def failed(self) -> bool:
        return not self.success or self.has_error_marker


@dataclass
class ExtractedFacts:
    """Facts recovered from deployer output."""

    network_id: Optional[int] = None  # None when the output names no broadcast path
    addresses: Dict[str, str] = field(default_factory=dict)  # label -> address


@dataclass(frozen=True)
class ArtifactMove:
    """Where a broadcast file is and where it must be archived."""

    source: Path
    destination: Path


@dataclass
class DeploymentLogEntry:
    """Provenance marker written at the start of a run."""

    path: Path
    broadcast: bool
    created_at: datetime
    rotated_path: Optional[Path] = None  # Where the previous log was moved, if any


@dataclass
class ChainDeployment:
    """Everything the orchestrator produced for one chain."""

    chain: str
    outcome: ExecutionOutcome
    facts: ExtractedFacts
    move: Optional[ArtifactMove] = None
    addresses_path: Optional[Path] = None

    @property
    def failed(self) -> bool:
        return self.outcome.failed


@dataclass
class DeploymentReport:
    """Summary of a whole multi-chain run."""

    log_entry: DeploymentLogEntry
    deployments: List[ChainDeployment] = field(default_factory=list)

    @property
    def failed_chains(self) -> List[str]:
        return [d.chain for d in self.deployments if d.failed]
