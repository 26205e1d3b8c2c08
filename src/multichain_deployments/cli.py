"""Command line interface for multichain-deployments.

Usage::

    multichain-deploy --broadcast arbitrum base
    multichain-deploy --all --deterministic --broadcast --cp-bf
    multichain-deploy --gas-price 30000000000 mainnet
"""

import argparse
import logging
import sys
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .chains import load_chains
from .config import DeployerConfig
from .constants import DEFAULT_CHAIN
from .deployments import DeploymentOrchestrator
from .exceptions import DeploymentError
from .types import DeploymentRequest, FailurePolicy, ScriptVariant

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
VERBOSE_FLAGS = ("-v", "--verbose")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multichain-deploy",
        description="Deploy the protocol to several chains with forge script.",
        allow_abbrev=False,
    )
    parser.add_argument("chains", nargs="*", metavar="CHAIN", help="chains to deploy to")
    parser.add_argument("--all", action="store_true", help="deploy to every configured chain")
    parser.add_argument(
        "--deterministic",
        action="store_true",
        help="use the deterministic deployment script",
    )
    parser.add_argument(
        "--broadcast",
        action="store_true",
        help="broadcast and verify instead of simulating",
    )
    parser.add_argument("--gas-price", metavar="VALUE", help="gas price passed to forge")
    parser.add_argument(
        "--cp-bf",
        dest="copy_broadcast_file",
        action="store_true",
        help="move the broadcast file into the versioned archive",
    )
    parser.add_argument("--project-root", help="Foundry project root (default: current directory)")
    parser.add_argument("--archive-dir", help="archive root for broadcast files")
    parser.add_argument("--admins", help="TOML file with admin addresses per chain")
    parser.add_argument(
        "--halt-on-failure",
        action="store_true",
        help="stop at the first chain that fails",
    )
    parser.add_argument(
        "--resolve-chain-ids",
        action="store_true",
        help="ask the RPC endpoint for the chain id when forge output lacks it",
    )
    parser.add_argument("--no-format", action="store_true", help="skip the formatting pass")
    parser.add_argument("--timeout", type=float, help="seconds to wait for each forge run")
    parser.add_argument(*VERBOSE_FLAGS, action="store_true", help="debug logging")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Chain names may appear anywhere among the flags. Unknown flags are
    logged and ignored; a flag missing its value exits with status 2.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])

    Returns:
        Parsed namespace
    """
    parser = build_parser()
    args, unknown = parser.parse_known_intermixed_args(argv)
    for flag in unknown:
        logger.warning("Unknown flag: %s", flag)
    return args


def resolve_chains(
    requested: Iterable[str], known_chains: Set[str], all_chains: bool = False
) -> Tuple[str, ...]:
    """
    Turn requested chain names into the chains to deploy to.

    Args:
        requested: Chain names from the command line, in order
        known_chains: Chains from the registry
        all_chains: Whether --all was given

    Returns:
        With all_chains, every known chain in sorted order. Otherwise the
        requested chains that are known, first occurrence order, or the
        default chain when nothing was requested.
    """
    requested = list(requested)

    if all_chains:
        for chain in requested:
            logger.warning("Ignoring chain %s because --all was given", chain)
        if not known_chains:
            logger.warning("No chains are configured, nothing to deploy")
        return tuple(sorted(known_chains))

    if not requested:
        return (DEFAULT_CHAIN,)

    chains: List[str] = []
    for chain in requested:
        if chain not in known_chains:
            logger.warning("Chain %s is not configured in the TOML file", chain)
        elif chain not in chains:
            chains.append(chain)
    return tuple(chains)


def build_request(args: argparse.Namespace, known_chains: Set[str]) -> DeploymentRequest:
    """
    Build the deployment request from parsed arguments.

    Args:
        args: Namespace from parse_args
        known_chains: Chains from the registry

    Returns:
        DeploymentRequest
    """
    if args.copy_broadcast_file and not args.broadcast:
        logger.warning("--cp-bf without --broadcast archives the dry-run broadcast file")

    return DeploymentRequest(
        chains=resolve_chains(args.chains, known_chains, args.all),
        script_variant=ScriptVariant.DETERMINISTIC if args.deterministic else ScriptVariant.STANDARD,
        broadcast=args.broadcast,
        gas_price=args.gas_price,
        copy_broadcast_file=args.copy_broadcast_file,
    )


def parse_request(argv: Optional[Sequence[str]], known_chains: Set[str]) -> DeploymentRequest:
    """Parse command line arguments straight into a deployment request."""
    return build_request(parse_args(argv), known_chains)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
    )


def build_config(args: argparse.Namespace) -> DeployerConfig:
    overrides = {
        "failure_policy": FailurePolicy.HALT if args.halt_on_failure else FailurePolicy.CONTINUE,
        "resolve_chain_ids": args.resolve_chain_ids,
        "timeout": args.timeout,
    }
    if args.no_format:
        overrides["format_command"] = None

    return DeployerConfig.from_env(
        project_root=args.project_root,
        archive_dir=args.archive_dir,
        admins_file=args.admins,
        **overrides,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Entry point of the multichain-deploy command.

    Returns:
        0 if every chain deployed, 1 if a chain failed or the run was
        aborted by a deployment error
    """
    if argv is None:
        argv = sys.argv[1:]
    configure_logging(any(arg in VERBOSE_FLAGS for arg in argv))
    args = parse_args(argv)

    try:
        config = build_config(args)
        known_chains = load_chains(config.foundry_config)
        request = build_request(args, known_chains)

        if not request.chains:
            logger.warning("No chains to deploy to")
            return 1

        logger.info("Deploying to the chains: %s", ", ".join(request.chains))
        report = DeploymentOrchestrator(config).run(request)
    except DeploymentError as e:
        logger.error("Deployment aborted: %s", e)
        return 1

    for deployment in report.deployments:
        for label, address in deployment.facts.addresses.items():
            logger.info("%s %s: %s", deployment.chain, label, address)

    return 1 if report.failed_chains else 0


if __name__ == "__main__":
    sys.exit(main())
