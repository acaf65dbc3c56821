"""
Configuration package for the token deployer.

Network metadata, environment settings, token config loading and logging.
"""

from token_deployer.config.network import (
    CHAINS,
    CHAIN_ID_TO_NAME,
    DEFAULT_DEPLOY_GAS_LIMIT,
    DEFAULT_NETWORK,
    TX_RECEIPT_TIMEOUT,
    get_chain_config,
    get_explorer_api_url,
    get_explorer_url,
    network_name_for_chain_id,
)

from token_deployer.config.token_config import (
    DeploymentConfig,
    HolderAllocation,
    TokenDefinition,
    load_token_config,
)

from token_deployer.config.abis import TOKEN_ABI

__all__ = [
    # Network
    'CHAINS',
    'CHAIN_ID_TO_NAME',
    'DEFAULT_DEPLOY_GAS_LIMIT',
    'DEFAULT_NETWORK',
    'TX_RECEIPT_TIMEOUT',
    'get_chain_config',
    'get_explorer_api_url',
    'get_explorer_url',
    'network_name_for_chain_id',

    # Tokens
    'DeploymentConfig',
    'HolderAllocation',
    'TokenDefinition',
    'load_token_config',

    # ABIs
    'TOKEN_ABI',
]
