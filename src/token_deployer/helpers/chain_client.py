"""
Chain client: the narrow interface the deployer and CLI talk to.

``ChainClient`` lists the primitives the tooling needs (estimate, send, wait,
call, and a few state queries). ``Web3ChainClient`` implements them with
web3.py and a local eth_account signer; tests substitute an in-memory double.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from ..config.abis import TOKEN_ABI
from ..config.network import (
    GAS_BUFFER_DENOMINATOR,
    GAS_BUFFER_NUMERATOR,
    TX_RECEIPT_TIMEOUT,
    network_name_for_chain_id,
)
from ..errors import ChainError, EstimationError
from .units import format_ether
from .web3_setup import get_web3_instance

logger = logging.getLogger(__name__)

__all__ = ["TxReceipt", "NetworkInfo", "ChainClient", "Web3ChainClient", "apply_gas_buffer"]

# Failures the SDK surfaces for RPC, signing and revert problems.
RPC_ERRORS = (Web3Exception, ValueError, requests.exceptions.RequestException)


def apply_gas_buffer(estimate: int) -> int:
    """Add the fixed safety margin: ``estimate * 120 // 100``."""
    return int(estimate) * GAS_BUFFER_NUMERATOR // GAS_BUFFER_DENOMINATOR


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    block_number: int
    gas_used: int
    status: int = 1
    contract_address: str | None = None


@dataclass(frozen=True)
class NetworkInfo:
    chain_id: int
    name: str
    deployer_balance: str  # ether, exact decimal string


class ChainClient(ABC):
    """
    Abstract chain client.

    Transactions are plain dicts (``to``, ``data``, optional ``gas`` /
    ``value``); the implementation fills sender, nonce, fees and chain id.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksum address of the signing account."""

    @abstractmethod
    def estimate_gas(self, tx: dict[str, Any]) -> int:
        """Estimate gas for ``tx``. Raises EstimationError."""

    @abstractmethod
    def send_transaction(self, tx: dict[str, Any]) -> str:
        """Sign and broadcast ``tx``; return the transaction hash. Raises ChainError."""

    @abstractmethod
    def wait(self, tx_hash: str, timeout: int = TX_RECEIPT_TIMEOUT) -> TxReceipt:
        """Block until ``tx_hash`` is mined. Raises ChainError on revert or timeout."""

    @abstractmethod
    def call(self, address: str, fn_name: str, *args: Any) -> Any:
        """Read-only call of ``fn_name`` on the token at ``address``."""

    @abstractmethod
    def get_balance(self, address: str) -> int:
        """Native balance in wei."""

    @abstractmethod
    def get_code(self, address: str) -> bytes:
        """Deployed runtime code at ``address`` (empty when none)."""

    @abstractmethod
    def get_network(self) -> NetworkInfo:
        """Chain id, network name and the signer's native balance."""

    def transact(self, tx: dict[str, Any], timeout: int = TX_RECEIPT_TIMEOUT) -> TxReceipt:
        """Send ``tx`` and wait for its receipt."""
        tx_hash = self.send_transaction(tx)
        logger.info("Transaction hash: %s", tx_hash)
        return self.wait(tx_hash, timeout=timeout)

    def has_code(self, address: str) -> bool:
        return len(self.get_code(address)) > 0


def _hex(value: Any) -> str:
    text = HexBytes(value).hex()
    return text if text.startswith("0x") else "0x" + text


class Web3ChainClient(ChainClient):
    """ChainClient backed by web3.py HTTP provider and a local private key."""

    def __init__(self, w3: Web3, private_key: str):
        self.w3 = w3
        self.account: LocalAccount = Account.from_key(private_key)

    @classmethod
    def from_settings(cls, rpc_url: str, private_key: str) -> "Web3ChainClient":
        w3 = get_web3_instance(rpc_url)
        try:
            connected = w3.is_connected()
        except RPC_ERRORS:
            connected = False
        if not connected:
            raise ChainError(f"Failed to connect to RPC: {rpc_url}")
        return cls(w3, private_key)

    @property
    def address(self) -> str:
        return self.account.address

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        params = {"from": self.address, **tx}
        params.pop("gas", None)
        try:
            return int(self.w3.eth.estimate_gas(params))
        except RPC_ERRORS as exc:
            raise EstimationError(str(exc)) from exc

    def _complete(self, tx: dict[str, Any]) -> dict[str, Any]:
        full = {
            "from": self.address,
            "value": 0,
            **tx,
        }
        full["nonce"] = self.w3.eth.get_transaction_count(self.address, "pending")
        full["chainId"] = self.w3.eth.chain_id
        if "gasPrice" not in full and "maxFeePerGas" not in full:
            full["gasPrice"] = self.w3.eth.gas_price
        if "gas" not in full:
            try:
                full["gas"] = apply_gas_buffer(self.estimate_gas(tx))
            except EstimationError as exc:
                raise ChainError(f"Gas estimation failed: {exc}") from exc
        return full

    def send_transaction(self, tx: dict[str, Any]) -> str:
        try:
            full = self._complete(tx)
            signed = self.account.sign_transaction(full)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except RPC_ERRORS as exc:
            raise ChainError(f"Transaction submission failed: {exc}") from exc
        return _hex(tx_hash)

    def wait(self, tx_hash: str, timeout: int = TX_RECEIPT_TIMEOUT) -> TxReceipt:
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as exc:
            raise ChainError(f"Timed out waiting for {tx_hash}", tx_hash=tx_hash) from exc
        except RPC_ERRORS as exc:
            raise ChainError(f"Failed to fetch receipt for {tx_hash}: {exc}", tx_hash=tx_hash) from exc

        status = int(receipt.get("status", 0))
        if status != 1:
            raise ChainError(f"Transaction {tx_hash} reverted (status {status})", tx_hash=tx_hash)

        contract_address = receipt.get("contractAddress")
        return TxReceipt(
            tx_hash=tx_hash,
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"]),
            status=status,
            contract_address=to_checksum_address(contract_address) if contract_address else None,
        )

    def call(self, address: str, fn_name: str, *args: Any) -> Any:
        contract = self.w3.eth.contract(address=to_checksum_address(address), abi=TOKEN_ABI)
        try:
            return contract.functions[fn_name](*args).call()
        except RPC_ERRORS as exc:
            raise ChainError(f"Call {fn_name} on {address} failed: {exc}") from exc

    def get_balance(self, address: str) -> int:
        try:
            return int(self.w3.eth.get_balance(to_checksum_address(address)))
        except RPC_ERRORS as exc:
            raise ChainError(f"Failed to read balance of {address}: {exc}") from exc

    def get_code(self, address: str) -> bytes:
        try:
            return bytes(self.w3.eth.get_code(to_checksum_address(address)))
        except RPC_ERRORS as exc:
            raise ChainError(f"Failed to read code at {address}: {exc}") from exc

    def get_network(self) -> NetworkInfo:
        try:
            chain_id = int(self.w3.eth.chain_id)
        except RPC_ERRORS as exc:
            raise ChainError(f"Failed to read chain id: {exc}") from exc
        return NetworkInfo(
            chain_id=chain_id,
            name=network_name_for_chain_id(chain_id),
            deployer_balance=format_ether(self.get_balance(self.address)),
        )
