"""Deployer invocation for multichain-deployments library."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .constants import (
    BUILD_PROFILE_ENV,
    DEFAULT_BUILD_PROFILE,
    DEPLOYER_COMMAND,
    RUN_SIGNATURE,
)
from .exceptions import DeployerNotFoundError, DeployerTimeoutError
from .types import DeploymentRequest, ExecutionOutcome

logger = logging.getLogger(__name__)


class AdminAddressBook:
    """Admin address passed to the deploy script, per chain with a fallback."""

    def __init__(self, addresses: Optional[Mapping[str, str]] = None, default: Optional[str] = None):
        self._addresses = dict(addresses or {})
        self.default = default

    def lookup(self, chain: str) -> Optional[str]:
        """
        Get the admin address for a chain.

        Args:
            chain: Chain name

        Returns:
            The chain's dedicated address, else the default (may be None)
        """
        return self._addresses.get(chain, self.default)

    def __contains__(self, chain: str) -> bool:
        return chain in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)


def build_command(
    request: DeploymentRequest,
    chain: str,
    script_dir: Union[Path, str],
    admin_book: Optional[AdminAddressBook] = None,
    deployer: str = DEPLOYER_COMMAND,
) -> List[str]:
    """
    Assemble the deployer command line for one chain.

    Args:
        request: Deployment request
        chain: Target chain, passed as the RPC endpoint alias
        script_dir: Directory holding the deploy scripts
        admin_book: Admin addresses; when it yields one the script is called
            as run(address)
        deployer: Deployer executable

    Returns:
        Argument list, e.g.
        ["forge", "script", "script/protocol/DeployProtocol.s.sol", "--rpc-url", "base"]
    """
    script_path = Path(script_dir) / request.script_variant.value
    cmd_line = [deployer, "script", str(script_path), "--rpc-url", chain]

    if request.broadcast:
        cmd_line += ["--broadcast", "--verify"]

    if request.gas_price is not None:
        cmd_line += ["--gas-price", request.gas_price]

    admin = admin_book.lookup(chain) if admin_book is not None else None
    if admin:
        cmd_line += ["--sig", RUN_SIGNATURE, admin]

    return cmd_line


def build_environment(
    profile: str = DEFAULT_BUILD_PROFILE, base: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Environment for one deployer invocation with the build profile selected.

    The process environment itself is left untouched.
    """
    env = dict(os.environ if base is None else base)
    env[BUILD_PROFILE_ENV] = profile
    return env


class DeploymentExecutor:
    """Runs the external deployer once per chain."""

    def __init__(
        self,
        script_dir: Union[Path, str],
        admin_book: Optional[AdminAddressBook] = None,
        build_profile: str = DEFAULT_BUILD_PROFILE,
        deployer: str = DEPLOYER_COMMAND,
        cwd: Optional[Union[Path, str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the executor.

        Args:
            script_dir: Directory holding the deploy scripts (relative to cwd
                or absolute)
            admin_book: Admin addresses passed to the deploy script
            build_profile: Value of FOUNDRY_PROFILE for each invocation
            deployer: Deployer executable
            cwd: Working directory of the deployer (the Foundry project root)
            timeout: Seconds before a deployer run is abandoned; None waits
                forever
        """
        self.script_dir = Path(script_dir)
        self.admin_book = admin_book or AdminAddressBook()
        self.build_profile = build_profile
        self.deployer = deployer
        self.cwd = Path(cwd) if cwd is not None else None
        self.timeout = timeout

    def command_for(self, request: DeploymentRequest, chain: str) -> List[str]:
        return build_command(request, chain, self.script_dir, self.admin_book, self.deployer)

    def execute(self, request: DeploymentRequest, chain: str) -> ExecutionOutcome:
        """
        Run the deployer for one chain and wait for it to exit.

        A non-zero exit status or an error marker in the output is logged
        immediately; the outcome is returned in every case so the caller
        decides whether the run goes on.

        Args:
            request: Deployment request
            chain: Target chain

        Returns:
            ExecutionOutcome with separately captured stdout and stderr

        Raises:
            DeployerNotFoundError: If the deployer executable cannot be started
            DeployerTimeoutError: If the configured timeout expires
        """
        cmd_line = self.command_for(request, chain)
        logger.info(
            "Running the deployment command: %s=%s %s",
            BUILD_PROFILE_ENV,
            self.build_profile,
            " ".join(cmd_line),
        )

        try:
            result = subprocess.run(
                cmd_line,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=build_environment(self.build_profile),
                cwd=self.cwd,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise DeployerNotFoundError(
                f"Failed to run {self.deployer!r}, is it installed and on PATH? {e}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DeployerTimeoutError(
                f"Deployment to {chain} did not finish within {self.timeout} seconds"
            ) from e

        outcome = ExecutionOutcome(
            chain=chain,
            command=cmd_line,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

        if not outcome.success:
            logger.error(
                "Deployment to %s failed with exit status %d:\n%s",
                chain,
                outcome.returncode,
                outcome.stderr or outcome.stdout,
            )
        elif outcome.has_error_marker:
            logger.error("Deployment to %s reported an error:\n%s", chain, outcome.output)
        else:
            logger.info("Command output: %s", outcome.stdout)

        return outcome
