"""Chain id lookup for multichain-deployments library.

Used when forge output does not say under which chain id a run was saved.
Resolved ids are kept in a small JSON file next to the deployment records,
so each chain is looked up over the network at most once.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

RPC_TIMEOUT = 30


def load_chain_id_cache(cache_path: Path) -> Dict[str, int]:
    """
    Read cached chain ids.

    Returns:
        Dictionary mapping chain name -> chain id; empty if the file is
        missing or unreadable, and entries that are not integers are dropped
    """
    try:
        with open(cache_path) as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}

    if not isinstance(data, dict):
        return {}
    return {chain: value for chain, value in data.items() if isinstance(value, int)}


def save_chain_id_cache(cache: Dict[str, int], cache_path: Path) -> None:
    cache_path.parent.mkdir(parents=True, exist_ok=True)
    with open(cache_path, "w") as f:
        json.dump(cache, f, indent=2, sort_keys=True)


def rpc_request(rpc_url: str, method: str, params: Optional[List[Any]] = None) -> Any:
    """
    Make a single JSON-RPC call.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method, e.g. "eth_chainId"
        params: Method parameters

    Returns:
        The "result" member of the response

    Raises:
        KeyError: If the response has no result
        ValueError: If the endpoint answers with a JSON-RPC error
        RuntimeError: On HTTP or network failures
    """
    payload = {"jsonrpc": "2.0", "method": method, "params": params or [], "id": 1}
    try:
        response = requests.post(rpc_url, json=payload, timeout=RPC_TIMEOUT)
    except requests.RequestException as e:
        raise RuntimeError(f"Network error during RPC call: {e}") from e

    if response.status_code != 200:
        raise RuntimeError(f"RPC request failed with status {response.status_code}")

    body = response.json()
    if "error" in body:
        raise ValueError(f"RPC error: {body['error']}")
    return body["result"]


def get_chain_id(chain: str, rpc_url: str, cache: Dict[str, int]) -> int:
    """
    Get a chain's numeric id from the cache, or ask its RPC endpoint.

    Args:
        chain: Chain name
        rpc_url: RPC endpoint URL of the chain
        cache: Chain id cache, updated after a successful lookup

    Returns:
        Chain id

    Raises:
        KeyError, ValueError, RuntimeError: As raised by rpc_request, or
            ValueError if the result is not a hex quantity
    """
    if chain in cache:
        return cache[chain]

    chain_id = int(rpc_request(rpc_url, "eth_chainId"), 16)
    logger.debug("Resolved chain id of %s: %d", chain, chain_id)
    cache[chain] = chain_id
    return chain_id
