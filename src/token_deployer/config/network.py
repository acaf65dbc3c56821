"""
Network configuration for the token deployer.

Chain ids and block-explorer API endpoints for the networks tokens are
typically deployed to, plus the gas and timeout constants used by the
deployment pipeline.
"""

import os
from typing import Any


# =============================================================================
# CHAIN CONFIGURATIONS
# =============================================================================

CHAINS: dict[str, dict[str, Any]] = {
    "mainnet": {
        "chain_id": 1,
        "name": "Ethereum Mainnet",
        "currency": "ETH",
        "explorer": {
            "name": "Etherscan",
            "url": "https://etherscan.io",
            "api_url": "https://api.etherscan.io/api",
        },
    },
    "sepolia": {
        "chain_id": 11155111,
        "name": "Sepolia",
        "currency": "ETH",
        "explorer": {
            "name": "Etherscan Sepolia",
            "url": "https://sepolia.etherscan.io",
            "api_url": "https://api-sepolia.etherscan.io/api",
        },
    },
    "goerli": {
        "chain_id": 5,
        "name": "Goerli",
        "currency": "ETH",
        "explorer": {
            "name": "Etherscan Goerli",
            "url": "https://goerli.etherscan.io",
            "api_url": "https://api-goerli.etherscan.io/api",
        },
    },
    "polygon": {
        "chain_id": 137,
        "name": "Polygon",
        "currency": "MATIC",
        "explorer": {
            "name": "Polygonscan",
            "url": "https://polygonscan.com",
            "api_url": "https://api.polygonscan.com/api",
        },
    },
    "bsc": {
        "chain_id": 56,
        "name": "BNB Smart Chain",
        "currency": "BNB",
        "explorer": {
            "name": "BscScan",
            "url": "https://bscscan.com",
            "api_url": "https://api.bscscan.com/api",
        },
    },
    "arbitrum": {
        "chain_id": 42161,
        "name": "Arbitrum One",
        "currency": "ETH",
        "explorer": {
            "name": "Arbiscan",
            "url": "https://arbiscan.io",
            "api_url": "https://api.arbiscan.io/api",
        },
    },
    "optimism": {
        "chain_id": 10,
        "name": "OP Mainnet",
        "currency": "ETH",
        "explorer": {
            "name": "Optimistic Etherscan",
            "url": "https://optimistic.etherscan.io",
            "api_url": "https://api-optimistic.etherscan.io/api",
        },
    },
    "avalanche": {
        "chain_id": 43114,
        "name": "Avalanche C-Chain",
        "currency": "AVAX",
        "explorer": {
            "name": "Snowtrace",
            "url": "https://snowtrace.io",
            "api_url": "https://api.snowtrace.io/api",
        },
    },
}

DEFAULT_NETWORK = "mainnet"

# Chain ID to name mapping
CHAIN_ID_TO_NAME: dict[int, str] = {
    config["chain_id"]: name for name, config in CHAINS.items()
}


# =============================================================================
# DEPLOYMENT CONSTANTS
# =============================================================================

DEFAULT_DEPLOY_GAS_LIMIT: int = 3_000_000  # used when estimation fails
GAS_BUFFER_NUMERATOR: int = 120  # +20% on top of the estimate
GAS_BUFFER_DENOMINATOR: int = 100
TX_RECEIPT_TIMEOUT: int = 300  # seconds
RPC_TIMEOUT: int = 30  # seconds per HTTP request


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_chain_config(chain: str | int | None = None) -> dict[str, Any]:
    """Get configuration for a specific chain.

    Args:
        chain: Chain name (e.g., 'mainnet', 'sepolia') or chain ID.
               If None, uses the CHAIN environment variable or 'mainnet'.

    Returns:
        Chain configuration dictionary.

    Raises:
        ValueError: If chain is not supported.
    """
    if chain is None:
        chain = os.getenv("CHAIN", DEFAULT_NETWORK)

    if isinstance(chain, int):
        name = CHAIN_ID_TO_NAME.get(chain)
        if name is None:
            raise ValueError(f"Unsupported chain ID: {chain}")
        chain = name

    chain = chain.lower()
    if chain not in CHAINS:
        raise ValueError(f"Unsupported chain: {chain}. Supported: {list(CHAINS.keys())}")

    return CHAINS[chain]


def network_name_for_chain_id(chain_id: int) -> str:
    """Return the short network name for a chain id, or 'unknown'."""
    return CHAIN_ID_TO_NAME.get(int(chain_id), "unknown")


def get_explorer_url(chain: str | int | None = None) -> str:
    """Get the block explorer URL for a chain, mainnet Etherscan if unknown."""
    try:
        config = get_chain_config(chain)
    except ValueError:
        config = CHAINS[DEFAULT_NETWORK]
    return config["explorer"]["url"]


def get_explorer_api_url(chain: str | int | None = None) -> str:
    """Get the block explorer API URL for a chain.

    Unknown networks fall back to mainnet Etherscan.
    """
    try:
        config = get_chain_config(chain)
    except ValueError:
        config = CHAINS[DEFAULT_NETWORK]
    return config["explorer"]["api_url"]
