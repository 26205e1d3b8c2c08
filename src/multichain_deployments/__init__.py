"""
multichain-deployments: deploy a Foundry protocol to many chains and archive the results
"""

from importlib.metadata import PackageNotFoundError, version

from .chains import load_chains
from .config import DeployerConfig
from .deployments import DeploymentOrchestrator, run_deployments
from .exceptions import (
    ArtifactMoveError,
    ArtifactNotFoundError,
    ChainExecutionError,
    ConfigurationError,
    DeployerNotFoundError,
    DeployerTimeoutError,
    DeploymentError,
    DeploymentLogError,
    ManifestNotFoundError,
    NetworkIdNotFoundError,
    ProjectVersionNotFoundError,
)
from .executor import AdminAddressBook, DeploymentExecutor
from .types import DeploymentRequest, FailurePolicy, ScriptVariant

try:
    __version__ = version("multichain-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "run_deployments",
    "DeployerConfig",
    "DeploymentExecutor",
    "AdminAddressBook",
    "DeploymentRequest",
    "FailurePolicy",
    "ScriptVariant",
    "load_chains",
    "DeploymentError",
    "ConfigurationError",
    "ManifestNotFoundError",
    "ProjectVersionNotFoundError",
    "DeployerNotFoundError",
    "DeployerTimeoutError",
    "ChainExecutionError",
    "NetworkIdNotFoundError",
    "ArtifactNotFoundError",
    "ArtifactMoveError",
    "DeploymentLogError",
]
