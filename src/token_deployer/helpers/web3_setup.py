"""
Web3 connection helper.

One HTTP provider per RPC URL for the life of the process; the URL defaults to
the RPC_URL environment variable.
"""
from __future__ import annotations

import os
from functools import lru_cache

from web3 import Web3

from ..config.network import RPC_TIMEOUT

__all__ = ["get_web3_instance"]


@lru_cache(maxsize=None)
def _connect(rpc_url: str) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": RPC_TIMEOUT}))


def get_web3_instance(rpc_url: str | None = None) -> Web3:
    """
    Return the (cached) Web3 instance for ``rpc_url``.

    Raises:
        RuntimeError: If neither ``rpc_url`` nor RPC_URL is set
    """
    rpc_url = rpc_url or os.getenv("RPC_URL")
    if not rpc_url:
        raise RuntimeError("No RPC URL available. Set the RPC_URL environment variable.")
    return _connect(rpc_url)
