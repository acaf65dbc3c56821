"""
Environment settings.

Secrets and paths come from the process environment, optionally seeded from a
``.env`` file through python-dotenv. The deployer address is cross-checked
against the address derived from PRIVATE_KEY before anything touches the chain.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from eth_account import Account

from ..errors import ConfigError

__all__ = ["Settings", "load_settings", "load_env_file"]

PRIVATE_KEY_RE = re.compile(r"0x[0-9a-fA-F]{64}")

DEFAULT_TOKENS_CONFIG = "tokens.json"
DEFAULT_DEPLOYMENTS_DIR = "deployments"
DEFAULT_CONTRACTS_DIR = "contracts"


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    private_key: str
    deployer_address: str | None
    tokens_config_path: Path
    deployments_dir: Path
    contracts_dir: Path
    etherscan_api_key: str | None = None

    def __repr__(self) -> str:
        # keep the signing key out of logs and tracebacks
        return (
            f"Settings(rpc_url={self.rpc_url!r}, deployer_address={self.deployer_address!r}, "
            f"tokens_config_path={str(self.tokens_config_path)!r}, "
            f"deployments_dir={str(self.deployments_dir)!r})"
        )


def load_env_file(path: str | None = None) -> None:
    """Load KEY=VALUE pairs from ``path`` (or ./.env) without overriding the environment."""
    if path and not Path(path).exists():
        raise ConfigError(f"Env file not found: {path}")
    load_dotenv(path, override=False)


def deployments_dir() -> Path:
    return Path(os.getenv("DEPLOYMENTS_DIR", DEFAULT_DEPLOYMENTS_DIR))


def contracts_dir() -> Path:
    return Path(os.getenv("CONTRACTS_DIR", DEFAULT_CONTRACTS_DIR))


def load_settings(require_deployer: bool = True) -> Settings:
    """Build Settings from the environment.

    Args:
        require_deployer: Also require DEPLOYER_ADDRESS and check it against
            the key. The deployment script needs this; the interaction CLI
            only needs RPC_URL and PRIVATE_KEY.

    Raises:
        ConfigError: On missing variables, a malformed key, or a deployer
            address that does not belong to the key.
    """
    required = ["RPC_URL", "PRIVATE_KEY"]
    if require_deployer:
        required.append("DEPLOYER_ADDRESS")
    missing = [key for key in required if not os.getenv(key)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Copy .env.example to .env and fill in your values"
        )

    private_key = os.environ["PRIVATE_KEY"].strip()
    if not PRIVATE_KEY_RE.fullmatch(private_key):
        raise ConfigError("Invalid private key format. Must be 64 hex characters prefixed with 0x")

    derived = Account.from_key(private_key).address
    deployer_address = os.getenv("DEPLOYER_ADDRESS")
    if require_deployer and derived.lower() != deployer_address.strip().lower():
        raise ConfigError(
            "DEPLOYER_ADDRESS does not match the address derived from PRIVATE_KEY "
            f"(expected {derived}, got {deployer_address})"
        )

    return Settings(
        rpc_url=os.environ["RPC_URL"].strip(),
        private_key=private_key,
        deployer_address=derived if require_deployer else deployer_address,
        tokens_config_path=Path(os.getenv("TOKENS_CONFIG_PATH", DEFAULT_TOKENS_CONFIG)),
        deployments_dir=deployments_dir(),
        contracts_dir=contracts_dir(),
        etherscan_api_key=os.getenv("ETHERSCAN_API_KEY") or None,
    )
