"""Chain registry for multichain-deployments library.

Known chains are the keys of the ``rpc_endpoints`` and ``etherscan`` tables
of a Foundry ``foundry.toml``.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Set, Union

import toml

from .constants import CHAIN_SECTIONS, LOCAL_CHAIN, RPC_ENDPOINTS_SECTION

logger = logging.getLogger(__name__)


def _load_config(config_path: Union[Path, str]) -> Optional[Dict[str, Any]]:
    """Read a TOML file, logging and returning None on failure."""
    try:
        return toml.load(config_path)
    except OSError as e:
        logger.error("Failed to read the chain configuration %s: %s", config_path, e)
    except (toml.TomlDecodeError, UnicodeDecodeError) as e:
        logger.error("Failed to parse the chain configuration %s: %s", config_path, e)
    return None


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logger.warning("Section [%s] is not a table, ignoring it", name)
        return {}
    return section


def load_chains(config_path: Union[Path, str]) -> Set[str]:
    """
    Load the set of known chain names.

    Args:
        config_path: Path to foundry.toml

    Returns:
        Union of the rpc_endpoints and etherscan keys, without "localhost".
        Empty set if the file cannot be read or parsed; callers treat that
        as "no chains known".
    """
    config = _load_config(config_path)
    if config is None:
        return set()

    chains: Set[str] = set()
    for name in CHAIN_SECTIONS:
        chains.update(key for key in _section(config, name) if key != LOCAL_CHAIN)

    logger.debug("Loaded %d chains from %s", len(chains), config_path)
    return chains


def load_rpc_endpoints(config_path: Union[Path, str]) -> Dict[str, str]:
    """
    Load RPC endpoint URLs by chain name.

    ${VAR} references are expanded from the environment. Endpoints still
    referencing an unset variable are left out.

    Args:
        config_path: Path to foundry.toml

    Returns:
        Dictionary mapping chain name -> RPC URL (empty on read/parse failure)
    """
    config = _load_config(config_path)
    if config is None:
        return {}

    endpoints: Dict[str, str] = {}
    for chain, url in _section(config, RPC_ENDPOINTS_SECTION).items():
        if chain == LOCAL_CHAIN or not isinstance(url, str):
            continue
        expanded = os.path.expandvars(url)
        if "${" in expanded:
            logger.debug("RPC endpoint for %s has unresolved variables: %s", chain, url)
            continue
        endpoints[chain] = expanded

    return endpoints
