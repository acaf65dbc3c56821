#!/usr/bin/env python3
"""
Deploy the configured ERC20 tokens.

Usage:
    token-deploy                         # tokens.json (or TOKENS_CONFIG_PATH)
    token-deploy --config my-tokens.json --env-file .env.sepolia
    token-deploy --dry-run               # compile and estimate gas only

Pipeline: validate environment -> network info -> load token config ->
compile contracts/ERC20Token.sol -> deploy + distribute each token ->
write deployments/deployment-<network>-<timestamp>.json and
deployments/latest-addresses.json.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from tabulate import tabulate

from ..config.logging_config import get_script_logger
from ..config.settings import Settings, load_env_file, load_settings
from ..config.token_config import DeploymentConfig, load_token_config
from ..errors import TokenDeployerError
from ..helpers.chain_client import ChainClient, NetworkInfo, Web3ChainClient
from ..helpers.compiler import CONTRACT_NAME, CompiledContract, SolidityBuilder
from .deployer import DeploymentOutcome, TokenDeployer
from .report import DeploymentReport, save_abi, write_report

BANNER_WIDTH = 56


def _banner(title: str) -> None:
    print("\n" + "=" * BANNER_WIDTH)
    print(title.center(BANNER_WIDTH))
    print("=" * BANNER_WIDTH + "\n")


def compile_token_contract(settings: Settings, builder: SolidityBuilder | None = None) -> CompiledContract:
    builder = builder or SolidityBuilder()
    contract = builder.compile_file(settings.contracts_dir / f"{CONTRACT_NAME}.sol", CONTRACT_NAME)
    save_abi(contract.abi, settings.deployments_dir, CONTRACT_NAME)
    return contract


def print_summary(outcome: DeploymentOutcome) -> None:
    _banner("DEPLOYMENT SUMMARY")
    if not outcome.records:
        print("No tokens were deployed successfully.")
    else:
        print("Successfully Deployed:")
        for d in outcome.records:
            print(f"  {d.symbol}: {d.address}")
            print(f"    Name: {d.name}")
            print(f"    Initial Supply: {d.initial_supply} ({d.decimals} decimals)")
            if d.features:
                print(f"    Features: {', '.join(d.features)}")
            print("")
    if outcome.failures:
        print("Failed:")
        for f in outcome.failures:
            print(f"  {f.symbol}: {f.error}")
        if outcome.aborted:
            print("  (remaining tokens skipped; set continueOnError to keep going)")


def run_deployment(
    settings: Settings,
    config: DeploymentConfig,
    client: ChainClient,
    contract: CompiledContract,
) -> tuple[DeploymentOutcome, Path | None]:
    """Deploy every configured token and persist the report.

    Returns the outcome and the report path (None when nothing was deployed).
    """
    network_info: NetworkInfo = client.get_network()
    deployer = TokenDeployer(client, contract)
    outcome = deployer.deploy_all(config.tokens, continue_on_error=config.continue_on_error)
    print_summary(outcome)

    if not outcome.records:
        return outcome, None

    report = DeploymentReport(
        network=config.network or network_info.name,
        deployer=client.address,
        deployments=outcome.records,
    )
    report_path, address_path = write_report(report, settings.deployments_dir)
    print(f"Deployment report saved: {report_path}")
    print(f"Address mapping saved: {address_path}")
    return outcome, report_path


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compile and deploy the ERC20 tokens listed in the token config")
    p.add_argument("--config", help="Token config JSON (default: TOKENS_CONFIG_PATH or tokens.json)")
    p.add_argument("--env-file", help="Load environment variables from this file first")
    p.add_argument("--dry-run", action="store_true", help="Compile and estimate gas without sending transactions")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_script_logger("deploy_tokens", debug=args.debug)

    try:
        load_env_file(args.env_file)
        settings = load_settings(require_deployer=True)
        config_path = Path(args.config) if args.config else settings.tokens_config_path

        _banner("ERC20 TOKEN DEPLOYMENT")
        client = Web3ChainClient.from_settings(settings.rpc_url, settings.private_key)
        info = client.get_network()
        print(f"Network: {info.name} (Chain ID: {info.chain_id})")
        print(f"Deployer: {client.address}")
        print(f"Balance: {info.deployer_balance} ETH\n")

        config = load_token_config(config_path)
        print(f"Tokens to deploy: {len(config.tokens)}\n")

        contract = compile_token_contract(settings)

        if args.dry_run:
            rows = TokenDeployer(client, contract).plan(config.tokens)
            print(tabulate(
                [[r.symbol, f"{r.gas_limit:,}", "estimate +20%" if r.estimated else "fallback"] for r in rows],
                headers=["Symbol", "Gas limit", "Source"],
                tablefmt="grid",
            ))
            return 0

        outcome, _ = run_deployment(settings, config, client, contract)
    except TokenDeployerError as exc:
        logger.error("Deployment failed: %s", exc)
        return 1

    if outcome.aborted or not outcome.records:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
