"""Runtime configuration for multichain-deployments library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import toml

from .constants import (
    ADMINS_FILE_ENV,
    ARCHIVE_DIR,
    ARCHIVE_DIR_ENV,
    BROADCAST_DIR,
    BUILD_PROFILE_ENV,
    CHAIN_ID_CACHE_FILE,
    CORE_CONTRACTS,
    DEFAULT_BUILD_PROFILE,
    DEPLOYER_COMMAND,
    DEPLOYMENTS_DIR,
    FORMAT_COMMAND,
    FOUNDRY_CONFIG_FILE,
    PERIPHERY_CONTRACTS,
    PROJECT_MANIFEST_FILE,
    PROJECT_ROOT_ENV,
    SCRIPT_DIR,
)
from .exceptions import ConfigurationError
from .executor import AdminAddressBook
from .types import FailurePolicy


def load_admin_addresses(path: Union[Path, str]) -> AdminAddressBook:
    """
    Load admin addresses from a TOML file.

    Expected layout::

        default = "0x..."

        [chains]
        arbitrum = "0x..."
        base = "0x..."

    Args:
        path: Path to the admin address file

    Returns:
        AdminAddressBook

    Raises:
        ConfigurationError: If the file cannot be read or has the wrong shape
    """
    try:
        data = toml.load(path)
    except (OSError, toml.TomlDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to load admin addresses from {path}: {e}") from e

    default = data.get("default")
    chains = data.get("chains", {})

    if default is not None and not isinstance(default, str):
        raise ConfigurationError(f"'default' in {path} must be a string")
    if not isinstance(chains, dict) or not all(isinstance(v, str) for v in chains.values()):
        raise ConfigurationError(f"[chains] in {path} must map chain names to addresses")

    return AdminAddressBook(chains, default=default)


@dataclass
class DeployerConfig:
    """Where things live and how a run behaves."""

    project_root: Path
    foundry_config: Path
    manifest_path: Path
    script_dir: Path
    broadcast_dir: Path
    deployments_dir: Path
    archive_dir: Path
    admin_book: AdminAddressBook = field(default_factory=AdminAddressBook)
    build_profile: str = DEFAULT_BUILD_PROFILE
    deployer: str = DEPLOYER_COMMAND
    failure_policy: FailurePolicy = FailurePolicy.CONTINUE
    timeout: Optional[float] = None
    record_addresses: bool = True
    core_contracts: Tuple[str, ...] = CORE_CONTRACTS
    periphery_contracts: Tuple[str, ...] = PERIPHERY_CONTRACTS
    format_command: Optional[Tuple[str, ...]] = FORMAT_COMMAND
    resolve_chain_ids: bool = False

    @property
    def chain_id_cache_path(self) -> Path:
        return self.deployments_dir / CHAIN_ID_CACHE_FILE

    @classmethod
    def from_project_root(cls, project_root: Union[Path, str], **overrides: Any) -> "DeployerConfig":
        """
        Derive the Foundry project layout from its root directory.

        Args:
            project_root: Directory containing foundry.toml
            **overrides: Any DeployerConfig field to set explicitly

        Returns:
            DeployerConfig; the archive defaults to ../v2-deployments/protocol
        """
        root = Path(project_root).absolute()
        values: dict = {
            "project_root": root,
            "foundry_config": root / FOUNDRY_CONFIG_FILE,
            "manifest_path": root / PROJECT_MANIFEST_FILE,
            "script_dir": root.joinpath(*SCRIPT_DIR),
            "broadcast_dir": root / BROADCAST_DIR,
            "deployments_dir": root / DEPLOYMENTS_DIR,
            "archive_dir": root.parent.joinpath(*ARCHIVE_DIR),
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_env(
        cls,
        project_root: Optional[Union[Path, str]] = None,
        archive_dir: Optional[Union[Path, str]] = None,
        admins_file: Optional[Union[Path, str]] = None,
        **overrides: Any,
    ) -> "DeployerConfig":
        """
        Build a configuration, filling unset arguments from the environment.

        Args:
            project_root: Project root (defaults to $MULTICHAIN_DEPLOY_PROJECT_ROOT,
                then the current directory)
            archive_dir: Archive root (defaults to $MULTICHAIN_DEPLOY_ARCHIVE_DIR)
            admins_file: Admin address file (defaults to $MULTICHAIN_DEPLOY_ADMINS)
            **overrides: Any other DeployerConfig field

        Returns:
            DeployerConfig

        Raises:
            ConfigurationError: If the admin address file is unusable
        """
        if project_root is None:
            project_root = os.environ.get(PROJECT_ROOT_ENV) or Path.cwd()
        if archive_dir is None:
            archive_dir = os.environ.get(ARCHIVE_DIR_ENV)
        if admins_file is None:
            admins_file = os.environ.get(ADMINS_FILE_ENV)

        if archive_dir is not None:
            overrides["archive_dir"] = Path(archive_dir).absolute()
        if admins_file is not None:
            overrides["admin_book"] = load_admin_addresses(admins_file)
        if "build_profile" not in overrides and os.environ.get(BUILD_PROFILE_ENV):
            overrides["build_profile"] = os.environ[BUILD_PROFILE_ENV]

        return cls.from_project_root(project_root, **overrides)
