"""
Block-explorer source verification (Etherscan-compatible API).

Each deployed token is submitted with ``action=verifysourcecode`` as a
standard-JSON input (the exact source set the compiler saw, OpenZeppelin
imports included) and then polled with ``action=checkverifystatus`` until the
explorer reports success, a definitive failure, or the attempt ceiling is
reached.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import requests

from ..errors import VerificationError
from ..setup.deployer import DeploymentRecord, constructor_args_for
from ..setup.report import DeploymentReport
from .compiler import CONTRACT_NAME, EVM_VERSION, OPTIMIZER_RUNS, SOLC_LONG_VERSION

logger = logging.getLogger(__name__)

__all__ = [
    "ExplorerClient",
    "ContractVerifier",
    "VerificationResult",
    "VerificationSummary",
    "POLL_INTERVAL",
    "MAX_POLL_ATTEMPTS",
    "RATE_LIMIT_DELAY",
]

POLL_INTERVAL = 3  # seconds between status checks
MAX_POLL_ATTEMPTS = 30
RATE_LIMIT_DELAY = 1  # seconds between contracts
REQUEST_TIMEOUT = 30

MIT_LICENSE_TYPE = "3"


@dataclass(frozen=True)
class VerificationResult:
    symbol: str
    address: str
    success: bool
    message: str
    guid: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "address": self.address,
            "success": self.success,
            "message": self.message,
            "guid": self.guid,
        }


@dataclass
class VerificationSummary:
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def verified(self) -> list[str]:
        return [r.symbol for r in self.results if r.success]

    @property
    def failed(self) -> list[str]:
        return [r.symbol for r in self.results if not r.success]


class ExplorerClient:
    """Thin wrapper over an Etherscan-family ``/api`` endpoint."""

    def __init__(self, api_url: str, api_key: str, session: requests.Session | None = None):
        self.api_url = api_url
        self.api_key = api_key
        self.session = session or requests.Session()

    def submit_verification(
        self,
        address: str,
        standard_json: dict[str, Any],
        constructor_args: str,
        contract_name: str = CONTRACT_NAME,
    ) -> dict[str, Any]:
        data = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": address,
            "sourceCode": json.dumps(standard_json),
            "codeformat": "solidity-standard-json-input",
            "contractname": f"{contract_name}.sol:{contract_name}",
            "compilerversion": SOLC_LONG_VERSION,
            "optimizationUsed": "1",
            "runs": str(OPTIMIZER_RUNS),
            # Etherscan's parameter name is misspelled
            "constructorArguements": constructor_args,
            "evmversion": EVM_VERSION,
            "licenseType": MIT_LICENSE_TYPE,
        }
        response = self.session.post(self.api_url, data=data, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def check_status(self, guid: str) -> dict[str, Any]:
        params = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
        }
        response = self.session.get(self.api_url, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()


class ContractVerifier:
    """Submit every deployment in a report and wait for each verdict."""

    def __init__(
        self,
        explorer: ExplorerClient,
        standard_json: dict[str, Any],
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = POLL_INTERVAL,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        rate_limit_delay: float = RATE_LIMIT_DELAY,
    ):
        self.explorer = explorer
        self.standard_json = standard_json
        self.sleep = sleep
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.rate_limit_delay = rate_limit_delay

    def check_verification_status(self, guid: str) -> tuple[bool, str]:
        """Poll until the explorer gives a verdict.

        Returns:
            (success, message)
        """
        for attempt in range(1, self.max_attempts + 1):
            self.sleep(self.poll_interval)
            try:
                result = self.explorer.check_status(guid)
            except (requests.exceptions.RequestException, ValueError) as exc:
                logger.warning("Status check %d/%d failed: %s", attempt, self.max_attempts, exc)
                continue

            message = str(result.get("result", ""))
            if result.get("status") == "1":
                return True, message
            if "Pending" in message:
                logger.debug("  Status: %s", message)
                continue
            return False, message or "Unknown error"

        return False, "Verification timeout"

    def _submit(self, record: DeploymentRecord) -> str:
        args_hex = constructor_args_for(
            record.name,
            record.symbol,
            record.decimals,
            record.initial_supply,
            record.mintable,
            record.burnable,
            record.pausable,
        )
        try:
            result = self.explorer.submit_verification(record.address, self.standard_json, args_hex)
        except (requests.exceptions.RequestException, ValueError) as exc:
            raise VerificationError(f"Submission failed: {exc}") from exc
        if result.get("status") != "1":
            raise VerificationError(f"Submission failed: {result.get('result', 'Unknown error')}")
        return str(result["result"])

    def verify_contract(self, record: DeploymentRecord) -> VerificationResult:
        logger.info("Verifying %s at %s...", record.symbol, record.address)
        try:
            guid = self._submit(record)
        except VerificationError as exc:
            logger.error("  %s", exc)
            return VerificationResult(record.symbol, record.address, False, str(exc))

        logger.info("  Submitted, GUID: %s", guid)
        success, message = self.check_verification_status(guid)
        if success:
            logger.info("  Verified: %s", message)
        else:
            logger.error("  Verification failed: %s", message)
        return VerificationResult(record.symbol, record.address, success, message, guid)

    def verify_all(self, report: DeploymentReport) -> VerificationSummary:
        summary = VerificationSummary()
        for i, record in enumerate(report.deployments):
            if i:
                self.sleep(self.rate_limit_delay)
            summary.results.append(self.verify_contract(record))
        return summary
