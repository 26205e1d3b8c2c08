"""Unit tests for command line parsing and chain resolution."""

import logging

import pytest

from multichain_deployments.cli import parse_args, parse_request, resolve_chains
from multichain_deployments.types import DeploymentRequest, ScriptVariant

REGISTRY = {"arbitrum", "base", "mainnet"}


class TestParseArgs:
    """Test the parse_args function."""

    def test_defaults(self):
        """Test that no arguments give a simulation with the standard script."""
        args = parse_args([])

        assert args.chains == []
        assert args.all is False
        assert args.deterministic is False
        assert args.broadcast is False
        assert args.gas_price is None
        assert args.copy_broadcast_file is False

    def test_recognises_all_flags(self):
        """Test every deployment flag."""
        args = parse_args(["--all", "--deterministic", "--broadcast", "--gas-price", "42", "--cp-bf"])

        assert args.all is True
        assert args.deterministic is True
        assert args.broadcast is True
        assert args.gas_price == "42"
        assert args.copy_broadcast_file is True

    def test_chains_between_flags(self):
        """Test that chain names may be mixed with flags."""
        args = parse_args(["base", "--broadcast", "arbitrum"])

        assert args.chains == ["base", "arbitrum"]
        assert args.broadcast is True

    def test_gas_price_without_value_is_fatal(self, capsys):
        """Test that a missing gas price value aborts with a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["base", "--gas-price"])

        assert exc_info.value.code == 2
        assert "--gas-price" in capsys.readouterr().err

    def test_unknown_flag_warns_and_is_ignored(self, caplog):
        """Test that an unknown flag is reported but does not abort."""
        with caplog.at_level(logging.WARNING):
            args = parse_args(["--verify-only", "base"])

        assert args.chains == ["base"]
        assert "Unknown flag: --verify-only" in caplog.text

    def test_abbreviated_flags_are_not_expanded(self, caplog):
        """Test that a flag prefix is not taken for the full flag."""
        with caplog.at_level(logging.WARNING):
            args = parse_args(["--broad"])

        assert args.broadcast is False
        assert "Unknown flag: --broad" in caplog.text


class TestResolveChains:
    """Test the resolve_chains function."""

    def test_default_chain_when_none_requested(self):
        """Test that no chain tokens target the default testnet."""
        assert resolve_chains([], REGISTRY) == ("sepolia",)

    def test_default_chain_with_empty_registry(self):
        """Test that the default applies even when no chains are known."""
        assert resolve_chains([], set()) == ("sepolia",)

    def test_keeps_known_chains_in_order(self):
        """Test that known chains keep command line order."""
        assert resolve_chains(["base", "arbitrum"], REGISTRY) == ("base", "arbitrum")

    def test_drops_unknown_chains_with_warning(self, caplog):
        """Test that unknown chains are filtered out, one warning each."""
        with caplog.at_level(logging.WARNING):
            chains = resolve_chains(["base", "fantom", "celo"], REGISTRY)

        assert chains == ("base",)
        assert "Chain fantom is not configured" in caplog.text
        assert "Chain celo is not configured" in caplog.text

    def test_only_unknown_chains_gives_nothing(self):
        """Test that unknown chains never fall back to the default."""
        assert resolve_chains(["fantom"], REGISTRY) == ()

    def test_duplicates_collapse(self):
        """Test that a repeated chain is deployed once."""
        assert resolve_chains(["base", "base", "arbitrum"], REGISTRY) == ("base", "arbitrum")

    def test_all_returns_whole_registry(self):
        """Test that --all targets every known chain in sorted order."""
        assert resolve_chains([], REGISTRY, all_chains=True) == ("arbitrum", "base", "mainnet")

    def test_all_ignores_tokens_with_warning_each(self, caplog):
        """Test that explicit chains are ignored under --all."""
        with caplog.at_level(logging.WARNING):
            chains = resolve_chains(["base", "fantom"], REGISTRY, all_chains=True)

        assert chains == ("arbitrum", "base", "mainnet")
        ignored = [r for r in caplog.records if "Ignoring chain" in r.getMessage()]
        assert len(ignored) == 2

    def test_all_with_empty_registry(self, caplog):
        """Test that --all with no configured chains deploys nothing."""
        with caplog.at_level(logging.WARNING):
            assert resolve_chains([], set(), all_chains=True) == ()
        assert "No chains are configured" in caplog.text


class TestParseRequest:
    """Test building a DeploymentRequest from the command line."""

    def test_broadcast_to_two_chains(self):
        """Test the broadcast request for arbitrum and base."""
        request = parse_request(["--broadcast", "arbitrum", "base"], REGISTRY)

        assert request == DeploymentRequest(
            chains=("arbitrum", "base"),
            script_variant=ScriptVariant.STANDARD,
            broadcast=True,
            gas_price=None,
            copy_broadcast_file=False,
        )

    def test_deterministic_variant(self):
        """Test that --deterministic selects the deterministic script."""
        request = parse_request(["--deterministic", "base"], REGISTRY)

        assert request.script_variant is ScriptVariant.DETERMINISTIC

    def test_gas_price_forwarded_verbatim(self):
        """Test that the gas price is not reinterpreted."""
        request = parse_request(["--gas-price", "0.5gwei", "mainnet"], REGISTRY)

        assert request.gas_price == "0.5gwei"
        assert request.chains == ("mainnet",)

    def test_copy_without_broadcast_warns(self, caplog):
        """Test that --cp-bf on a simulation is allowed but flagged."""
        with caplog.at_level(logging.WARNING):
            request = parse_request(["--cp-bf", "base"], REGISTRY)

        assert request.copy_broadcast_file is True
        assert request.broadcast is False
        assert "--cp-bf without --broadcast" in caplog.text

    def test_request_is_immutable(self):
        """Test that the request cannot be changed after it is built."""
        request = parse_request(["base"], REGISTRY)

        with pytest.raises(AttributeError):
            request.broadcast = True
