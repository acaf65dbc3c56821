#!/usr/bin/env python3
"""
Deployment orchestrator.

For each token definition, in order: scale the initial supply, estimate gas
for the creation transaction (+20%, fixed fallback on failure), deploy and
wait for confirmation, send the initial distribution transfers one at a time,
then record the deployment.

Deployments are strictly serial. Every transaction consumes the deployer's
next nonce, and each one is confirmed before the next is submitted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..config.abis import WRITE_SIGNATURES
from ..config.logging_config import log_deployment
from ..config.network import DEFAULT_DEPLOY_GAS_LIMIT
from ..config.token_config import TokenDefinition
from ..errors import ChainError, EstimationError, TokenDeployerError
from ..helpers.abi_encoding import build_deploy_data, encode_constructor_args, encode_function_call
from ..helpers.chain_client import ChainClient, TxReceipt, apply_gas_buffer
from ..helpers.compiler import CompiledContract
from ..helpers.units import parse_units

logger = logging.getLogger(__name__)

__all__ = [
    "DeploymentRecord",
    "TokenFailure",
    "DeploymentOutcome",
    "GasPlan",
    "TokenDeployer",
    "constructor_args_for",
]


@dataclass(frozen=True)
class DeploymentRecord:
    name: str
    symbol: str
    address: str
    decimals: int
    initial_supply: str
    mintable: bool
    burnable: bool
    pausable: bool
    deployment_tx: str
    block_number: int
    gas_used: int

    @property
    def features(self) -> list[str]:
        return [label for flag, label in (
            (self.mintable, "Mintable"),
            (self.burnable, "Burnable"),
            (self.pausable, "Pausable"),
        ) if flag]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "decimals": self.decimals,
            "initialSupply": self.initial_supply,
            "mintable": self.mintable,
            "burnable": self.burnable,
            "pausable": self.pausable,
            "deploymentTx": self.deployment_tx,
            "blockNumber": self.block_number,
            # written as a string, read back with int()
            "gasUsed": str(self.gas_used),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeploymentRecord":
        return cls(
            name=data["name"],
            symbol=data["symbol"],
            address=data["address"],
            decimals=int(data["decimals"]),
            initial_supply=str(data["initialSupply"]),
            mintable=bool(data.get("mintable", False)),
            burnable=bool(data.get("burnable", False)),
            pausable=bool(data.get("pausable", False)),
            deployment_tx=data["deploymentTx"],
            block_number=int(data["blockNumber"]),
            gas_used=int(data["gasUsed"]),
        )


@dataclass(frozen=True)
class TokenFailure:
    symbol: str
    name: str
    error: str


@dataclass
class DeploymentOutcome:
    records: list[DeploymentRecord] = field(default_factory=list)
    failures: list[TokenFailure] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class GasPlan:
    symbol: str
    gas_limit: int
    estimated: bool


def constructor_args_for(
    name: str,
    symbol: str,
    decimals: int,
    initial_supply: str,
    mintable: bool,
    burnable: bool,
    pausable: bool,
) -> str:
    """Encode the ERC20Token constructor tuple for a token."""
    return encode_constructor_args(
        name,
        symbol,
        decimals,
        parse_units(initial_supply, decimals),
        mintable,
        burnable,
        pausable,
    )


class TokenDeployer:
    """Deploys ERC20Token instances through a ChainClient."""

    def __init__(self, client: ChainClient, contract: CompiledContract,
                 default_gas_limit: int = DEFAULT_DEPLOY_GAS_LIMIT):
        self.client = client
        self.contract = contract
        self.default_gas_limit = default_gas_limit

    def deploy_data(self, token: TokenDefinition) -> str:
        args_hex = constructor_args_for(
            token.name,
            token.symbol,
            token.decimals,
            token.initial_supply,
            token.mintable,
            token.burnable,
            token.pausable,
        )
        return build_deploy_data(self.contract.bytecode, args_hex)

    def estimate_gas(self, token: TokenDefinition) -> tuple[int, bool]:
        """Return ``(gas_limit, estimated)``; falls back to the default ceiling."""
        try:
            estimate = self.client.estimate_gas({"data": self.deploy_data(token)})
        except EstimationError as exc:
            logger.warning("Failed to estimate gas for %s: %s", token.name, exc)
            return self.default_gas_limit, False
        return apply_gas_buffer(estimate), True

    def plan(self, tokens: Iterable[TokenDefinition]) -> list[GasPlan]:
        """Estimate every deployment without sending anything."""
        rows = []
        for token in tokens:
            gas_limit, estimated = self.estimate_gas(token)
            rows.append(GasPlan(symbol=token.symbol, gas_limit=gas_limit, estimated=estimated))
        return rows

    def deploy_token(self, token: TokenDefinition) -> DeploymentRecord:
        """Deploy one token and run its initial distribution.

        Raises:
            ChainError: If the creation or any distribution transaction fails.
        """
        logger.info("Deploying %s (%s)...", token.name, token.symbol)

        gas_limit, _ = self.estimate_gas(token)
        logger.info("  Estimated gas: %d", gas_limit)

        receipt = self.client.transact({"data": self.deploy_data(token), "gas": gas_limit})
        address = receipt.contract_address
        if not address:
            raise ChainError(f"No contract address in receipt for {token.symbol}", tx_hash=receipt.tx_hash)
        if not self.client.has_code(address):
            raise ChainError(f"No code found at {address} after deploying {token.symbol}", tx_hash=receipt.tx_hash)

        log_deployment(logger, token.symbol, address, receipt.tx_hash, receipt.gas_used, receipt.block_number)

        if token.initial_holders:
            self.distribute_tokens(address, token)

        return DeploymentRecord(
            name=token.name,
            symbol=token.symbol,
            address=address,
            decimals=token.decimals,
            initial_supply=token.initial_supply,
            mintable=token.mintable,
            burnable=token.burnable,
            pausable=token.pausable,
            deployment_tx=receipt.tx_hash,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
        )

    def distribute_tokens(self, address: str, token: TokenDefinition) -> list[TxReceipt]:
        """Send each holder's allocation, waiting for every transfer to confirm."""
        logger.info("  Distributing initial tokens...")
        signature, arg_types = WRITE_SIGNATURES["transfer"]
        receipts = []
        for holder in token.initial_holders:
            amount = parse_units(holder.amount, token.decimals)
            logger.info("    Sending %s %s to %s", holder.amount, token.symbol, holder.address)
            data = encode_function_call(signature, arg_types, [holder.address, amount])
            receipts.append(self.client.transact({"to": address, "data": data}))
            logger.info("    Transfer confirmed")
        return receipts

    def deploy_all(self, tokens: Iterable[TokenDefinition], continue_on_error: bool = False) -> DeploymentOutcome:
        """Deploy every token in order.

        A failing token leaves no record. With ``continue_on_error`` False the
        run stops at the first failure; records of earlier tokens are kept in
        the returned outcome either way.
        """
        outcome = DeploymentOutcome()
        for token in tokens:
            try:
                record = self.deploy_token(token)
            except TokenDeployerError as exc:
                logger.error("Failed to deploy %s: %s", token.name, exc)
                outcome.failures.append(TokenFailure(symbol=token.symbol, name=token.name, error=str(exc)))
                if not continue_on_error:
                    outcome.aborted = True
                    break
                continue
            outcome.records.append(record)
        return outcome
