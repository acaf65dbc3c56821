"""Shared fixtures: an in-memory chain client and sample token definitions."""
from __future__ import annotations

import logging
from typing import Any

import pytest
from eth_utils import to_checksum_address

from token_deployer.config.token_config import HolderAllocation, TokenDefinition
from token_deployer.errors import ChainError, EstimationError
from token_deployer.helpers.chain_client import ChainClient, NetworkInfo, TxReceipt
from token_deployer.helpers.compiler import CompiledContract

SIGNER = to_checksum_address("0x" + "11" * 20)
ALICE = to_checksum_address("0x" + "a1" * 20)
BOB = to_checksum_address("0x" + "b2" * 20)


class FakeChainClient(ChainClient):
    """Records every transaction and answers calls from a lookup table."""

    def __init__(self, estimate: int | None = 1_000_000, fail_deploys: set[int] | None = None):
        self.estimate = estimate
        self.fail_deploys = fail_deploys or set()
        self.sent: list[dict[str, Any]] = []
        self.deploy_count = 0
        self.deployed: list[str] = []
        self.responses: dict[tuple, Any] = {}
        self.call_log: list[tuple] = []
        self._receipts: dict[str, TxReceipt] = {}

    @property
    def address(self) -> str:
        return SIGNER

    def estimate_gas(self, tx):
        if self.estimate is None:
            raise EstimationError("execution reverted")
        return self.estimate

    def send_transaction(self, tx):
        self.sent.append(dict(tx))
        tx_hash = "0x" + format(len(self.sent), "064x")
        contract_address = None
        if "to" not in tx:
            self.deploy_count += 1
            if self.deploy_count in self.fail_deploys:
                raise ChainError("insufficient funds for gas * price + value")
            contract_address = to_checksum_address("0x" + format(0xC0DE00 + self.deploy_count, "040x"))
            self.deployed.append(contract_address)
        self._receipts[tx_hash] = TxReceipt(
            tx_hash=tx_hash,
            block_number=100 + len(self.sent),
            gas_used=900_000 if contract_address else 50_000,
            contract_address=contract_address,
        )
        return tx_hash

    def wait(self, tx_hash, timeout=300):
        return self._receipts[tx_hash]

    def call(self, address, fn_name, *args):
        self.call_log.append((address, fn_name) + args)
        for key in ((address, fn_name) + args, (address, fn_name)):
            if key in self.responses:
                value = self.responses[key]
                if isinstance(value, Exception):
                    raise value
                return value
        raise ChainError(f"unexpected call {fn_name} on {address}")

    def get_balance(self, address):
        return 2 * 10**18

    def get_code(self, address):
        return b"\x60\x80" if address in self.deployed else b""

    def get_network(self):
        return NetworkInfo(chain_id=11155111, name="sepolia", deployer_balance="2.0")


@pytest.fixture
def client():
    return FakeChainClient()


@pytest.fixture
def contract():
    return CompiledContract(
        name="ERC20Token",
        abi=[{"type": "constructor", "inputs": []}],
        bytecode="0x6080604052",
        standard_json={"language": "Solidity", "sources": {}, "settings": {}},
    )


@pytest.fixture
def tokens():
    return (
        TokenDefinition(name="Alpha", symbol="ALP", decimals=18, initial_supply="1000",
                        mintable=True, initial_holders=(HolderAllocation(ALICE, "10.5"),
                                                        HolderAllocation(BOB, "0.25"))),
        TokenDefinition(name="Beta", symbol="BET", decimals=6, initial_supply="500", burnable=True),
        TokenDefinition(name="Gamma", symbol="GAM", decimals=0, initial_supply="7", pausable=True),
    )


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("token_deployer")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
