#!/usr/bin/env python3
"""
Deployment reports and persisted state.

Files under the deployments directory:
- deployment-<network>-<timestamp>.json  full report, one per run, never overwritten
- latest-addresses.json                 symbol -> {address, decimals}, overwritten each run
- <ContractName>.abi.json               ABI of the compiled contract
- verification-report.json              last explorer verification summary
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..errors import NotFoundError, ReportWriteError
from .deployer import DeploymentRecord

logger = logging.getLogger(__name__)

ADDRESS_MAP_FILE = "latest-addresses.json"
VERIFICATION_REPORT_FILE = "verification-report.json"
REPORT_PREFIX = "deployment-"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class DeploymentReport:
    network: str
    deployer: str
    deployments: list[DeploymentRecord] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "network": self.network,
            "deployer": self.deployer,
            "deployments": [d.to_dict() for d in self.deployments],
        }


def report_from_dict(data: dict[str, Any]) -> DeploymentReport:
    return DeploymentReport(
        network=data["network"],
        deployer=data["deployer"],
        deployments=[DeploymentRecord.from_dict(d) for d in data.get("deployments", [])],
        timestamp=data["timestamp"],
    )


def build_address_map(records: list[DeploymentRecord]) -> dict[str, dict[str, Any]]:
    """Symbol -> {address, decimals}. A repeated symbol keeps the last record."""
    address_map: dict[str, dict[str, Any]] = {}
    for record in records:
        address_map[record.symbol] = {"address": record.address, "decimals": record.decimals}
    return address_map


def report_filename(network: str, timestamp: str) -> str:
    safe_ts = timestamp.replace(":", "-").replace(".", "-")
    return f"{REPORT_PREFIX}{network}-{safe_ts}.json"


def _write_json(path: Path, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
    except OSError as exc:
        raise ReportWriteError(f"Failed to write {path}: {exc}") from exc


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise NotFoundError(f"File not found: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_report(report: DeploymentReport, deployments_dir: Path) -> tuple[Path, Path]:
    """Write the timestamped report and overwrite the latest address map.

    Returns:
        (report_path, address_map_path)

    Raises:
        ReportWriteError: On any filesystem failure.
    """
    deployments_dir = Path(deployments_dir)
    report_path = deployments_dir / report_filename(report.network, report.timestamp)
    _write_json(report_path, report.to_dict())
    logger.info("Deployment report saved: %s", report_path)

    address_path = deployments_dir / ADDRESS_MAP_FILE
    _write_json(address_path, build_address_map(report.deployments))
    logger.info("Address mapping saved: %s", address_path)
    return report_path, address_path


def save_abi(abi: list[dict[str, Any]], deployments_dir: Path, contract_name: str) -> Path:
    abi_path = Path(deployments_dir) / f"{contract_name}.abi.json"
    _write_json(abi_path, abi)
    logger.debug("ABI saved: %s", abi_path)
    return abi_path


def save_verification_report(payload: dict[str, Any], deployments_dir: Path) -> Path:
    path = Path(deployments_dir) / VERIFICATION_REPORT_FILE
    _write_json(path, payload)
    return path


def load_report(path: Path) -> DeploymentReport:
    return report_from_dict(_read_json(Path(path)))


def _report_timestamp(path: Path) -> float:
    # Prefer the report's own timestamp (ISO8601), else fall back to file mtime
    try:
        data = _read_json(path)
        return datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00")).timestamp()
    except (OSError, ValueError, KeyError, TypeError, AttributeError, NotFoundError):
        return path.stat().st_mtime


def find_latest_report(deployments_dir: Path) -> Path:
    """Most recent ``deployment-*.json`` across all networks.

    Raises:
        NotFoundError: If the directory holds no deployment report.
    """
    deployments_dir = Path(deployments_dir)
    candidates = sorted(deployments_dir.glob(f"{REPORT_PREFIX}*.json")) if deployments_dir.is_dir() else []
    if not candidates:
        raise NotFoundError(f"No deployment files found in {deployments_dir}")
    return max(candidates, key=_report_timestamp)


def load_address_map(deployments_dir: Path) -> dict[str, dict[str, Any]]:
    path = Path(deployments_dir) / ADDRESS_MAP_FILE
    if not path.exists():
        raise NotFoundError("No deployment addresses found. Run deployment first.")
    data = _read_json(path)
    if not isinstance(data, dict):
        raise NotFoundError(f"{path} does not contain an address map")
    return data
