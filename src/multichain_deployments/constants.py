"""Configuration constants for multichain-deployments library."""

# Chain used when no chain is given on the command line and --all is off
DEFAULT_CHAIN = "sepolia"

# Reserved local development entry, never a deployment target
LOCAL_CHAIN = "localhost"

# foundry.toml sections whose keys name the known chains
CHAIN_SECTIONS = ("rpc_endpoints", "etherscan")
RPC_ENDPOINTS_SECTION = "rpc_endpoints"

# External deployer invocation
DEPLOYER_COMMAND = "forge"
BUILD_PROFILE_ENV = "FOUNDRY_PROFILE"
DEFAULT_BUILD_PROFILE = "optimized"
RUN_SIGNATURE = "run(address)"

# Word at the start of a deployer output line that marks a failed run
ERROR_MARKER = "Error"

# Foundry project layout, relative to the project root
FOUNDRY_CONFIG_FILE = "foundry.toml"
PROJECT_MANIFEST_FILE = "package.json"
SCRIPT_DIR = ("script", "protocol")
BROADCAST_DIR = "broadcast"
DEPLOYMENTS_DIR = "deployments"
DRY_RUN_DIR = "dry-run"
BROADCAST_FILE = "run-latest.json"

# Archive lives next to the project checkout
ARCHIVE_DIR = ("v2-deployments", "protocol")
ARCHIVE_BROADCASTS_DIR = "broadcasts"

# Deployment log files, keyed by script variant
STANDARD_LOG_FILE = "non_deterministic.md"
DETERMINISTIC_LOG_FILE = "deterministic.md"

CHAIN_ID_CACHE_FILE = ".chain_ids.json"

# Labels printed by the deploy scripts in their "== Return ==" section
CORE_CONTRACTS = (
    "comptroller",
    "lockupDynamic",
    "lockupLinear",
    "nftDescriptor",
)
PERIPHERY_CONTRACTS = (
    "archive",
    "batch",
    "merkleStreamerFactory",
    "proxyPlugin",
    "proxyTarget",
)

CORE_HEADING = "## Core contracts"
PERIPHERY_HEADING = "## Periphery contracts"

BROADCAST_MARKER = "# This deployment is broadcasted"
SIMULATION_MARKER = "# This deployment is a simulation"

# Formatter run over the deployment records once all chains are done
FORMAT_COMMAND = ("bun", "prettier", "--write", "deployments/**/*.md")

# Environment overrides for DeployerConfig.from_env
PROJECT_ROOT_ENV = "MULTICHAIN_DEPLOY_PROJECT_ROOT"
ARCHIVE_DIR_ENV = "MULTICHAIN_DEPLOY_ARCHIVE_DIR"
ADMINS_FILE_ENV = "MULTICHAIN_DEPLOY_ADMINS"
