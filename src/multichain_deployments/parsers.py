"""Deployer output parsers for multichain-deployments library.

forge prints free text whose format is not a stable contract, so every
extraction here is best-effort: absent facts are reported as missing,
never guessed.
"""

import re
from typing import Dict, Iterable, Optional

from .constants import CORE_CONTRACTS, PERIPHERY_CONTRACTS
from .types import ExecutionOutcome, ExtractedFacts, ScriptVariant

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

DEFAULT_LABELS = CORE_CONTRACTS + PERIPHERY_CONTRACTS


def extract_network_id(output: str, script_variant: ScriptVariant) -> Optional[int]:
    """
    Extract the numeric chain id from deployer output.

    forge reports where it saved the run, e.g.
    ``broadcast/DeployProtocol.s.sol/8453/run-latest.json``; the chain id is
    the path segment after the script name.

    Args:
        output: Captured deployer output
        script_variant: Script that was run

    Returns:
        Chain id, or None if the output has no such path or the segment is
        not numeric
    """
    marker = f"broadcast/{script_variant.value}/"
    _, found, rest = output.partition(marker)
    if not found:
        return None

    segment = rest.split("/", 1)[0].strip()
    if not (segment.isascii() and segment.isdigit()):
        return None
    return int(segment)


def extract_contract_address(output: str, label: str) -> Optional[str]:
    """
    Extract the address printed for a contract label.

    Matches lines such as ``lockupLinear: contract SablierV2LockupLinear 0x...``
    and ``lockupLinear: contract 0x...``; the first address-shaped token after
    the marker is taken.

    Args:
        output: Captured deployer output
        label: Return value name, e.g. "lockupLinear"

    Returns:
        Address as printed, or None if the label or an address is absent
    """
    pattern = re.compile(rf"(?<![\w]){re.escape(label)}: contract\s+(.*)")
    for line in output.splitlines():
        match = pattern.search(line)
        if match is None:
            continue
        for token in match.group(1).split():
            if ADDRESS_PATTERN.match(token):
                return token
    return None


def extract_contract_addresses(output: str, labels: Iterable[str]) -> Dict[str, str]:
    """
    Extract addresses for several labels.

    Returns:
        Dictionary mapping label -> address, only for labels that were found
    """
    addresses: Dict[str, str] = {}
    for label in labels:
        address = extract_contract_address(output, label)
        if address is not None:
            addresses[label] = address
    return addresses


def extract(
    outcome: ExecutionOutcome,
    script_variant: ScriptVariant,
    labels: Iterable[str] = DEFAULT_LABELS,
) -> ExtractedFacts:
    """
    Extract all facts from one deployer run.

    Args:
        outcome: Result of the deployer run
        script_variant: Script that was run
        labels: Contract labels to look for

    Returns:
        ExtractedFacts, possibly with network_id None and no addresses
    """
    output = outcome.output
    return ExtractedFacts(
        network_id=extract_network_id(output, script_variant),
        addresses=extract_contract_addresses(output, labels),
    )
