"""Custom exception classes for multichain-deployments library."""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when a configuration file is present but unusable."""

    pass


class ManifestNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when the project manifest (package.json) is not found."""

    pass


class ProjectVersionNotFoundError(DeploymentError, ValueError):
    """Raised when the project manifest has no usable semantic version."""

    pass


class DeployerNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when the external deployer executable cannot be started."""

    pass


class DeployerTimeoutError(DeploymentError, TimeoutError):
    """Raised when the external deployer exceeds the configured timeout."""

    pass


class ChainExecutionError(DeploymentError, RuntimeError):
    """Raised when a chain fails and the failure policy halts the run."""

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class NetworkIdNotFoundError(DeploymentError, ValueError):
    """Raised when a broadcast file is requested without a resolved network id."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when the broadcast file to archive does not exist."""

    pass


class ArtifactMoveError(DeploymentError, OSError):
    """Raised when the broadcast file cannot be moved into the archive."""

    pass


class DeploymentLogError(DeploymentError, OSError):
    """Raised when a deployment log or address file cannot be rotated or written."""

    pass
