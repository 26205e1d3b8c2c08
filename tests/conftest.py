"""Shared pytest fixtures for multichain-deployments tests."""

import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from multichain_deployments.config import DeployerConfig

CORE_ADDRESSES = {
    "comptroller": "0xC3Be6BffAeab7B297c03383B4254aa3Af2b9a5BA",
    "lockupDynamic": "0x7CC7e125d83A581ff438608490Cc0f7bDff79127",
    "lockupLinear": "0xAFb979d9afAd1aD27C5eFf4E27226E3AB9e5dCC9",
    "nftDescriptor": "0x23eD5DA55AF4286c0dE55fAcb414dEE2e317F4CB",
}

CHAIN_IDS = {
    "arbitrum": 42161,
    "base": 8453,
    "mainnet": 1,
    "optimism": 10,
    "sepolia": 11155111,
}


def make_forge_output(
    script: str,
    chain_id: Optional[int],
    broadcast: bool = True,
    addresses: Optional[Dict[str, str]] = None,
) -> str:
    """Build forge script output like the real tool prints it."""
    lines = ["Script ran successfully.", "", "== Return =="]
    for label, address in (addresses or {}).items():
        lines.append(f"{label}: contract {address}")
    lines.append("")
    if chain_id is not None:
        run_dir = f"{chain_id}" if broadcast else f"{chain_id}/dry-run"
        lines.append(
            f"Transactions saved to: /home/deployer/v2-core/broadcast/{script}/{run_dir}/run-latest.json"
        )
    return "\n".join(lines) + "\n"


class FakeForge:
    """Stand-in for subprocess.run that answers forge invocations per chain."""

    def __init__(self, project_root: Path):
        self.project_root = project_root
        self.calls: List[Dict[str, Any]] = []
        self.responses: Dict[str, Tuple[int, str, str]] = {}
        self.write_broadcast_file = True

    def respond(self, chain: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[chain] = (returncode, stdout, stderr)

    @property
    def chains(self) -> List[str]:
        return [call["args"][4] for call in self.calls if call["args"][1] == "script"]

    def __call__(self, args, **kwargs) -> subprocess.CompletedProcess:
        self.calls.append({"args": list(args), **kwargs})

        if args[1] != "script":
            return subprocess.CompletedProcess(args, 0, "", "")

        script = Path(args[2]).name
        chain = args[args.index("--rpc-url") + 1]
        broadcast = "--broadcast" in args

        if chain in self.responses:
            returncode, stdout, stderr = self.responses[chain]
        else:
            returncode, stderr = 0, ""
            stdout = make_forge_output(script, CHAIN_IDS.get(chain), broadcast, CORE_ADDRESSES)

        if returncode == 0 and self.write_broadcast_file and chain in CHAIN_IDS:
            run_dir = self.project_root / "broadcast" / script / str(CHAIN_IDS[chain])
            if not broadcast:
                run_dir = run_dir / "dry-run"
            run_dir.mkdir(parents=True, exist_ok=True)
            (run_dir / "run-latest.json").write_text(f'{{"chain": "{chain}"}}')

        return subprocess.CompletedProcess(args, returncode, stdout, stderr)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def read_fixture(fixtures_dir: Path) -> Callable[[str], str]:
    """Return a function reading a fixture file as text."""

    def _read(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")

    return _read


@pytest.fixture
def foundry_toml(fixtures_dir: Path) -> Path:
    """Return path to the sample foundry.toml."""
    return fixtures_dir / "foundry.toml"


@pytest.fixture
def foundry_project(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Create a Foundry project checkout with foundry.toml and package.json."""
    root = tmp_path / "v2-core"
    (root / "script" / "protocol").mkdir(parents=True)
    shutil.copy(fixtures_dir / "foundry.toml", root / "foundry.toml")
    shutil.copy(fixtures_dir / "package.json", root / "package.json")
    return root


@pytest.fixture
def deployer_config(foundry_project: Path) -> DeployerConfig:
    """Configuration for the temporary project, without the formatting pass."""
    return DeployerConfig.from_project_root(foundry_project, format_command=None)


@pytest.fixture
def fake_forge(foundry_project: Path, monkeypatch) -> FakeForge:
    """Replace subprocess.run with a FakeForge bound to the temporary project."""
    fake = FakeForge(foundry_project)
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def forge_output() -> Callable[..., str]:
    """Return the forge output builder."""
    return make_forge_output


@pytest.fixture
def core_addresses() -> Dict[str, str]:
    """Core contract addresses printed by the fake forge."""
    return dict(CORE_ADDRESSES)
