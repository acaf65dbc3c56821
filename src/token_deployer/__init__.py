"""
ERC20 token deployer.

Compiles the OpenZeppelin based ERC20Token contract, deploys one instance per
configured token, distributes initial balances, and offers post-deployment
administration and block-explorer verification.
"""

__version__ = "0.1.0"
