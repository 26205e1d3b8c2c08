"""Main API for multichain-deployments library."""

import logging
import subprocess
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from .artifacts import apply_move, plan_relocation
from .chain_ids import get_chain_id, load_chain_id_cache, save_chain_id_cache
from .chains import load_rpc_endpoints
from .config import DeployerConfig
from .exceptions import ChainExecutionError
from .executor import DeploymentExecutor
from .parsers import extract
from .paths import get_chain_addresses_path, get_deployment_log_path
from .recorder import start_deployment_log, write_chain_addresses
from .types import (
    ArtifactMove,
    ChainDeployment,
    DeploymentReport,
    DeploymentRequest,
    FailurePolicy,
)
from .versions import read_project_version

logger = logging.getLogger(__name__)


def format_deployment_files(command: Sequence[str], cwd: Optional[Union[Path, str]] = None) -> bool:
    """
    Run the formatter over the deployment records.

    Formatting has no bearing on the deployment itself, so failures are
    logged and reported through the return value only.

    Args:
        command: Formatter command line
        cwd: Working directory

    Returns:
        True if the formatter ran and exited with status 0
    """
    logger.info("Formatting deployment files: %s", " ".join(command))
    try:
        result = subprocess.run(list(command), cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError as e:
        logger.warning("Formatter %r is not available: %s", command[0], e)
        return False

    if result.returncode != 0:
        logger.warning(
            "Formatter exited with status %d:\n%s", result.returncode, result.stderr or result.stdout
        )
        return False

    return True


class DeploymentOrchestrator:
    """Deploys a request to each of its chains in turn and records the results."""

    def __init__(self, config: DeployerConfig, executor: Optional[DeploymentExecutor] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Project layout and run policies
            executor: Deployer runner (defaults to one built from config)
        """
        self.config = config
        if executor is None:
            executor = DeploymentExecutor(
                script_dir=config.script_dir,
                admin_book=config.admin_book,
                build_profile=config.build_profile,
                deployer=config.deployer,
                cwd=config.project_root,
                timeout=config.timeout,
            )
        self.executor = executor
        self._version: Optional[str] = None
        self._rpc_endpoints: Optional[Dict[str, str]] = None
        self._chain_id_cache: Optional[Dict[str, int]] = None

    @property
    def version(self) -> str:
        """Project version, read from the manifest on first use."""
        if self._version is None:
            self._version = read_project_version(self.config.manifest_path)
        return self._version

    def run(self, request: DeploymentRequest) -> DeploymentReport:
        """
        Deploy to every chain of the request, one at a time.

        The provenance log is started before the first chain. With
        FailurePolicy.HALT the first failed chain stops the run; with
        FailurePolicy.CONTINUE the remaining chains still run.

        Args:
            request: Deployment request

        Returns:
            DeploymentReport with one entry per chain that ran

        Raises:
            ChainExecutionError: If a chain fails under FailurePolicy.HALT
            DeploymentError: On deployer, artifact or record failures
        """
        log_path = get_deployment_log_path(self.config.deployments_dir, request.script_variant)
        log_entry = start_deployment_log(log_path, request.broadcast)
        report = DeploymentReport(log_entry=log_entry)

        try:
            for chain in request.chains:
                deployment = self.deploy_chain(request, chain)
                report.deployments.append(deployment)

                if deployment.failed and self.config.failure_policy is FailurePolicy.HALT:
                    raise ChainExecutionError(
                        f"Deployment to {chain} failed, halting the remaining chains",
                        outcome=deployment.outcome,
                    )
        finally:
            if self._chain_id_cache is not None:
                save_chain_id_cache(self._chain_id_cache, self.config.chain_id_cache_path)

        if self.config.format_command:
            format_deployment_files(self.config.format_command, cwd=self.config.project_root)

        if report.failed_chains:
            logger.warning("Failed chains: %s", ", ".join(report.failed_chains))

        return report

    def deploy_chain(self, request: DeploymentRequest, chain: str) -> ChainDeployment:
        """
        Deploy to one chain, then archive and record what it produced.

        A failed run is only archived and recorded when archiving was
        requested and forge already wrote its broadcast file, e.g. when
        transactions were sent and verification failed afterwards.

        Args:
            request: Deployment request
            chain: Target chain

        Returns:
            ChainDeployment for the chain
        """
        outcome = self.executor.execute(request, chain)
        facts = extract(
            outcome,
            request.script_variant,
            self.config.core_contracts + self.config.periphery_contracts,
        )
        deployment = ChainDeployment(chain=chain, outcome=outcome, facts=facts)

        if outcome.failed and not request.copy_broadcast_file:
            return deployment

        if facts.network_id is None and self.config.resolve_chain_ids:
            facts.network_id = self._lookup_chain_id(chain)

        if outcome.failed:
            deployment.move = self._salvage_broadcast_file(request, chain, facts.network_id)
            if deployment.move is None:
                return deployment
        elif request.copy_broadcast_file:
            deployment.move = self._plan_move(request, chain, facts.network_id)
            apply_move(deployment.move)

        if self.config.record_addresses and facts.addresses:
            deployment.addresses_path = write_chain_addresses(
                get_chain_addresses_path(self.config.deployments_dir, request.script_variant, chain),
                chain,
                facts,
                self.config.core_contracts,
                self.config.periphery_contracts,
            )

        return deployment

    def _plan_move(
        self, request: DeploymentRequest, chain: str, network_id: Optional[int]
    ) -> ArtifactMove:
        return plan_relocation(
            request.script_variant,
            chain,
            network_id,
            request.broadcast,
            self.config.broadcast_dir,
            self.config.archive_dir,
            self.version,
        )

    def _salvage_broadcast_file(
        self, request: DeploymentRequest, chain: str, network_id: Optional[int]
    ) -> Optional[ArtifactMove]:
        """
        Archive the broadcast file of a failed chain if forge wrote one.

        Returns:
            The applied move, or None if there is nothing to archive
        """
        if network_id is None:
            logger.warning("Deployment to %s failed before forge named its broadcast file", chain)
            return None

        move = self._plan_move(request, chain, network_id)
        if not move.source.is_file():
            logger.warning("Deployment to %s failed, no broadcast file at %s", chain, move.source)
            return None

        logger.warning("Deployment to %s failed after forge wrote %s, archiving it", chain, move.source)
        apply_move(move)
        return move

    def _lookup_chain_id(self, chain: str) -> Optional[int]:
        """Best-effort chain id lookup through the chain's RPC endpoint."""
        if self._rpc_endpoints is None:
            self._rpc_endpoints = load_rpc_endpoints(self.config.foundry_config)
        if self._chain_id_cache is None:
            self._chain_id_cache = load_chain_id_cache(self.config.chain_id_cache_path)

        rpc_url = self._rpc_endpoints.get(chain)
        if rpc_url is None and chain not in self._chain_id_cache:
            logger.warning("No usable RPC endpoint for %s, chain id stays unknown", chain)
            return None

        try:
            return get_chain_id(chain, rpc_url or "", self._chain_id_cache)
        except (KeyError, TypeError, ValueError, RuntimeError) as e:
            logger.warning("Could not look up the chain id of %s: %s", chain, e)
            return None


def run_deployments(request: DeploymentRequest, config: DeployerConfig) -> DeploymentReport:
    """
    Deploy a request with a default orchestrator.

    Args:
        request: Deployment request
        config: Project layout and run policies

    Returns:
        DeploymentReport
    """
    return DeploymentOrchestrator(config).run(request)
