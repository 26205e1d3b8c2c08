"""Unit tests for runtime configuration."""

from pathlib import Path

import pytest

from multichain_deployments.config import DeployerConfig, load_admin_addresses
from multichain_deployments.exceptions import ConfigurationError
from multichain_deployments.types import FailurePolicy


class TestLoadAdminAddresses:
    """Test the load_admin_addresses function."""

    def test_sample_file(self, fixtures_dir: Path):
        """Test the sample admin address file."""
        book = load_admin_addresses(fixtures_dir / "admins.toml")

        assert book.lookup("arbitrum") == "0xF34E41a6f6Ce5A45559B1D3Ee92E141a3De96376"
        assert book.lookup("base") == "0x83A6fA8c04420B3F9C7A4CF1c040b63Fbbc89B66"
        assert book.lookup("mainnet") == "0xb1bEF51ebCA01EB12001a639bDBbFF6eEcA12B9F"
        assert len(book) == 2

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_admin_addresses(tmp_path / "admins.toml")

    def test_wrong_shape(self, tmp_path: Path):
        """Test that non-string addresses are rejected."""
        path = tmp_path / "admins.toml"
        path.write_text("[chains]\nbase = 1\n")

        with pytest.raises(ConfigurationError):
            load_admin_addresses(path)

    def test_only_default(self, tmp_path: Path):
        """Test a file with just a default address."""
        path = tmp_path / "admins.toml"
        path.write_text('default = "0x' + "ab" * 20 + '"\n')

        book = load_admin_addresses(path)

        assert book.lookup("base") == "0x" + "ab" * 20
        assert len(book) == 0


class TestDeployerConfig:
    """Test DeployerConfig construction."""

    def test_layout_from_project_root(self, tmp_path: Path):
        """Test the paths derived from the project root."""
        root = tmp_path / "v2-core"

        config = DeployerConfig.from_project_root(root)

        assert config.foundry_config == root / "foundry.toml"
        assert config.manifest_path == root / "package.json"
        assert config.script_dir == root / "script" / "protocol"
        assert config.broadcast_dir == root / "broadcast"
        assert config.deployments_dir == root / "deployments"
        assert config.archive_dir == tmp_path / "v2-deployments" / "protocol"
        assert config.chain_id_cache_path == root / "deployments" / ".chain_ids.json"

    def test_defaults(self, tmp_path: Path):
        """Test the behavioural defaults."""
        config = DeployerConfig.from_project_root(tmp_path)

        assert config.build_profile == "optimized"
        assert config.deployer == "forge"
        assert config.failure_policy is FailurePolicy.CONTINUE
        assert config.timeout is None
        assert config.format_command == ("bun", "prettier", "--write", "deployments/**/*.md")
        assert config.resolve_chain_ids is False

    def test_overrides(self, tmp_path: Path):
        """Test that explicit values win, including None."""
        config = DeployerConfig.from_project_root(
            tmp_path, format_command=None, failure_policy=FailurePolicy.HALT
        )

        assert config.format_command is None
        assert config.failure_policy is FailurePolicy.HALT

    def test_from_env(self, tmp_path: Path, fixtures_dir: Path, monkeypatch):
        """Test that environment variables fill unset arguments."""
        archive = tmp_path / "archive"
        monkeypatch.setenv("MULTICHAIN_DEPLOY_PROJECT_ROOT", str(tmp_path / "v2-core"))
        monkeypatch.setenv("MULTICHAIN_DEPLOY_ARCHIVE_DIR", str(archive))
        monkeypatch.setenv("MULTICHAIN_DEPLOY_ADMINS", str(fixtures_dir / "admins.toml"))
        monkeypatch.setenv("FOUNDRY_PROFILE", "lite")

        config = DeployerConfig.from_env()

        assert config.project_root == tmp_path / "v2-core"
        assert config.archive_dir == archive
        assert config.admin_book.lookup("arbitrum") == "0xF34E41a6f6Ce5A45559B1D3Ee92E141a3De96376"
        assert config.build_profile == "lite"

    def test_arguments_win_over_env(self, tmp_path: Path, monkeypatch):
        """Test that explicit arguments take precedence."""
        monkeypatch.setenv("MULTICHAIN_DEPLOY_PROJECT_ROOT", str(tmp_path / "elsewhere"))
        monkeypatch.delenv("MULTICHAIN_DEPLOY_ARCHIVE_DIR", raising=False)
        monkeypatch.delenv("MULTICHAIN_DEPLOY_ADMINS", raising=False)
        monkeypatch.setenv("FOUNDRY_PROFILE", "lite")

        config = DeployerConfig.from_env(project_root=tmp_path, build_profile="optimized")

        assert config.project_root == tmp_path
        assert config.build_profile == "optimized"
