"""
Contract ABI package for the token deployer.
"""

from .erc20 import TOKEN_ABI, WRITE_SIGNATURES

__all__ = [
    'TOKEN_ABI',
    'WRITE_SIGNATURES',
]
