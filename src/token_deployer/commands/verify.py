#!/usr/bin/env python3
"""
Verify deployed tokens on the network's block explorer.

Usage:
    token-verify                 # network taken from the latest report
    token-verify sepolia
    token-verify --report deployments/deployment-sepolia-....json
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from ..config.logging_config import get_script_logger
from ..config.network import get_explorer_api_url, get_explorer_url
from ..config.settings import contracts_dir, deployments_dir, load_env_file
from ..errors import TokenDeployerError
from ..helpers.compiler import CONTRACT_NAME, SolidityBuilder
from ..helpers.explorer_verifier import ContractVerifier, ExplorerClient, VerificationSummary
from ..setup.report import find_latest_report, load_report, save_verification_report, utc_now_iso


def print_summary(summary: VerificationSummary, network: str) -> None:
    print("\n" + "=" * 50)
    print("VERIFICATION SUMMARY")
    print("=" * 50)
    print(f"Verified: {len(summary.verified)}")
    explorer_url = get_explorer_url(network)
    for result in summary.results:
        if result.success:
            print(f"  {result.symbol}: {explorer_url}/address/{result.address}#code")
    print(f"Failed: {len(summary.failed)}")
    for result in summary.results:
        if not result.success:
            print(f"  {result.symbol}: {result.message}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Verify deployed ERC20 tokens on the block explorer")
    p.add_argument("network", nargs="?", help="Network name (default: network of the report)")
    p.add_argument("--report", help="Deployment report to verify (default: latest)")
    p.add_argument("--env-file", help="Load environment variables from this file first")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_script_logger("verify_contracts", debug=args.debug)

    try:
        load_env_file(args.env_file)
        api_key = os.getenv("ETHERSCAN_API_KEY")
        if not api_key:
            print("Error: ETHERSCAN_API_KEY not set in environment", file=sys.stderr)
            return 1

        out_dir = deployments_dir()
        report_path = Path(args.report) if args.report else find_latest_report(out_dir)
        report = load_report(report_path)
        network = args.network or report.network
        print(f"Verifying {len(report.deployments)} contract(s) from {report_path.name} on {network}")

        contract = SolidityBuilder().compile_file(contracts_dir() / f"{CONTRACT_NAME}.sol", CONTRACT_NAME)
        explorer = ExplorerClient(get_explorer_api_url(network), api_key)
        summary = ContractVerifier(explorer, contract.standard_json).verify_all(report)

        path = save_verification_report(
            {
                "timestamp": utc_now_iso(),
                "network": network,
                "results": [r.to_dict() for r in summary.results],
            },
            out_dir,
        )
    except TokenDeployerError as exc:
        logger.error("Verification failed: %s", exc)
        return 1

    print_summary(summary, network)
    print(f"\nVerification report saved: {path}")
    return 0 if not summary.failed else 1


if __name__ == "__main__":
    sys.exit(main())
