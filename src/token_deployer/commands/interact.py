#!/usr/bin/env python3
"""
Token interaction CLI.

Operates on tokens recorded in deployments/latest-addresses.json:

    token-cli list
    token-cli info MTK
    token-cli transfer MTK 0xRecipient 100.5
    token-cli approve MTK 0xSpender 1000
    token-cli mint MTK 0xRecipient 5000
    token-cli burn MTK 10
    token-cli grant-role MTK MINTER 0xAccount
    token-cli pause MTK
    token-cli unpause MTK
"""
from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union

from eth_utils import is_address
from tabulate import tabulate

from ..config.abis import WRITE_SIGNATURES
from ..config.logging_config import get_script_logger
from ..config.settings import deployments_dir, load_env_file, load_settings
from ..errors import ChainError, ConfigError, NotFoundError, TokenDeployerError
from ..helpers.abi_encoding import encode_function_call
from ..helpers.chain_client import ChainClient, TxReceipt, Web3ChainClient
from ..helpers.units import format_units, parse_amount, parse_units
from ..setup.report import load_address_map

__all__ = ["Role", "RawRole", "parse_role", "TokenInfo", "TokenInteractor", "main"]


class Role(Enum):
    """Roles the token exposes through a getter of the same name."""

    MINTER = "MINTER_ROLE"
    PAUSER = "PAUSER_ROLE"
    ADMIN = "DEFAULT_ADMIN_ROLE"


@dataclass(frozen=True)
class RawRole:
    """A pre-computed 32-byte role identifier."""

    value: bytes


RoleSpec = Union[Role, RawRole]

ROLE_ID_RE = re.compile(r"0x[0-9a-fA-F]{64}")


def parse_role(text: str) -> RoleSpec:
    """``MINTER`` / ``minter`` / ``MINTER_ROLE`` or a 0x-prefixed 32-byte hex id.

    Raises:
        ConfigError: If the text is neither.
    """
    key = text.strip().upper()
    for role in Role:
        if key in (role.name, role.value):
            return role
    if ROLE_ID_RE.fullmatch(text.strip()):
        return RawRole(bytes.fromhex(text.strip()[2:]))
    raise ConfigError(
        f"Unknown role {text!r}. Use one of {', '.join(r.name for r in Role)} or a 0x-prefixed 32-byte id"
    )


@dataclass(frozen=True)
class TokenInfo:
    name: str
    symbol: str
    address: str
    decimals: int
    total_supply: str
    balance: str


class TokenInteractor:
    """Read and write operations against deployed tokens."""

    def __init__(self, client: ChainClient, address_map: dict[str, dict[str, Any]]):
        self.client = client
        self.address_map = address_map

    def token_data(self, symbol: str) -> dict[str, Any]:
        data = self.address_map.get(symbol)
        if data is None:
            raise NotFoundError(f"Token {symbol} not found")
        return data

    def token_address(self, symbol: str) -> str:
        return self.token_data(symbol)["address"]

    def decimals(self, symbol: str) -> int:
        return int(self.client.call(self.token_address(symbol), "decimals"))

    def resolve_role(self, symbol: str, role: RoleSpec) -> bytes:
        if isinstance(role, RawRole):
            return role.value
        return bytes(self.client.call(self.token_address(symbol), role.value))

    def has_role(self, symbol: str, role: RoleSpec, account: str) -> bool:
        role_id = self.resolve_role(symbol, role)
        return bool(self.client.call(self.token_address(symbol), "hasRole", role_id, account))

    def get_token_info(self, symbol: str, holder: str | None = None) -> TokenInfo:
        address = self.token_address(symbol)
        holder = holder or self.client.address
        decimals = int(self.client.call(address, "decimals"))
        return TokenInfo(
            name=self.client.call(address, "name"),
            symbol=self.client.call(address, "symbol"),
            address=address,
            decimals=decimals,
            total_supply=format_units(self.client.call(address, "totalSupply"), decimals),
            balance=format_units(self.client.call(address, "balanceOf", holder), decimals),
        )

    def _write(self, symbol: str, fn_name: str, *args: Any) -> TxReceipt:
        signature, arg_types = WRITE_SIGNATURES[fn_name]
        data = encode_function_call(signature, arg_types, list(args))
        return self.client.transact({"to": self.token_address(symbol), "data": data})

    @staticmethod
    def _check_amount(amount: str) -> None:
        try:
            parse_amount(amount)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    def _scaled(self, symbol: str, amount: str) -> int:
        self._check_amount(amount)
        decimals = self.decimals(symbol)
        try:
            return parse_units(amount, decimals)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    @staticmethod
    def _account(address: str) -> str:
        if not is_address(address):
            raise ConfigError(f"Invalid address: {address!r}")
        return address

    def transfer(self, symbol: str, to: str, amount: str) -> TxReceipt:
        return self._write(symbol, "transfer", self._account(to), self._scaled(symbol, amount))

    def approve(self, symbol: str, spender: str, amount: str) -> TxReceipt:
        return self._write(symbol, "approve", self._account(spender), self._scaled(symbol, amount))

    def mint(self, symbol: str, to: str, amount: str) -> TxReceipt:
        self._account(to)
        self._check_amount(amount)
        if not self.has_role(symbol, Role.MINTER, self.client.address):
            raise ChainError(f"{self.client.address} does not have MINTER_ROLE on {symbol}")
        return self._write(symbol, "mint", to, self._scaled(symbol, amount))

    def burn(self, symbol: str, amount: str) -> TxReceipt:
        return self._write(symbol, "burn", self._scaled(symbol, amount))

    def grant_role(self, symbol: str, role: RoleSpec, account: str) -> TxReceipt:
        account = self._account(account)
        return self._write(symbol, "grantRole", self.resolve_role(symbol, role), account)

    def pause(self, symbol: str) -> TxReceipt:
        return self._write(symbol, "pause")

    def unpause(self, symbol: str) -> TxReceipt:
        return self._write(symbol, "unpause")

    def list_tokens(self) -> list[list[str]]:
        """One row per token; a failed read shows the error instead of aborting."""
        rows = []
        for symbol, data in self.address_map.items():
            try:
                info = self.get_token_info(symbol)
            except TokenDeployerError as exc:
                rows.append([symbol, data.get("address", ""), "-", f"error: {exc}", "-"])
                continue
            rows.append([info.symbol, info.address, info.decimals, info.total_supply, info.balance])
        return rows


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _address_arg(text: str) -> str:
    if not is_address(text):
        raise argparse.ArgumentTypeError(f"invalid address: {text!r}")
    return text


def _amount_arg(text: str) -> str:
    try:
        parse_amount(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid amount: {exc}") from None
    return text


def _role_arg(text: str) -> RoleSpec:
    try:
        return parse_role(text)
    except ConfigError as exc:
        raise argparse.ArgumentTypeError(f"invalid role: {exc}") from None


def _print_receipt(action: str, receipt: TxReceipt) -> None:
    print(f"{action} confirmed")
    print(f"  Transaction: {receipt.tx_hash}")
    print(f"  Block: {receipt.block_number}")


def cmd_list(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    if not interactor.address_map:
        print("No tokens deployed")
        return 0
    print(tabulate(
        interactor.list_tokens(),
        headers=["Symbol", "Address", "Decimals", "Total supply", "Your balance"],
        tablefmt="simple",
        disable_numparse=True,
    ))
    return 0


def cmd_info(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    info = interactor.get_token_info(args.symbol)
    print(tabulate(
        [
            ["Name", info.name],
            ["Symbol", info.symbol],
            ["Address", info.address],
            ["Decimals", info.decimals],
            ["Total Supply", f"{info.total_supply} {info.symbol}"],
            ["Your Balance", f"{info.balance} {info.symbol}"],
        ],
        tablefmt="plain",
        disable_numparse=True,
    ))
    return 0


def cmd_transfer(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    print(f"Transferring {args.amount} {args.symbol} to {args.to}...")
    _print_receipt("Transfer", interactor.transfer(args.symbol, args.to, args.amount))
    return 0


def cmd_approve(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    print(f"Approving {args.spender} to spend {args.amount} {args.symbol}...")
    _print_receipt("Approval", interactor.approve(args.symbol, args.spender, args.amount))
    return 0


def cmd_mint(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    print(f"Minting {args.amount} {args.symbol} to {args.to}...")
    _print_receipt("Mint", interactor.mint(args.symbol, args.to, args.amount))
    return 0


def cmd_burn(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    print(f"Burning {args.amount} {args.symbol}...")
    _print_receipt("Burn", interactor.burn(args.symbol, args.amount))
    return 0


def cmd_grant_role(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    role = args.role
    label = role.name if isinstance(role, Role) else "0x" + role.value.hex()
    print(f"Granting {label} on {args.symbol} to {args.account}...")
    _print_receipt("Role grant", interactor.grant_role(args.symbol, role, args.account))
    return 0


def cmd_pause(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    print(f"Pausing {args.symbol}...")
    _print_receipt("Pause", interactor.pause(args.symbol))
    return 0


def cmd_unpause(interactor: TokenInteractor, args: argparse.Namespace) -> int:
    print(f"Unpausing {args.symbol}...")
    _print_receipt("Unpause", interactor.unpause(args.symbol))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Interact with deployed ERC20 tokens")
    p.add_argument("--env-file", help="Load environment variables from this file first")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = p.add_subparsers(dest="command")

    s = sub.add_parser("list", help="List all deployed tokens")
    s.set_defaults(func=cmd_list)

    s = sub.add_parser("info", help="Get token information")
    s.add_argument("symbol")
    s.set_defaults(func=cmd_info)

    s = sub.add_parser("transfer", help="Transfer tokens")
    s.add_argument("symbol")
    s.add_argument("to", type=_address_arg)
    s.add_argument("amount", type=_amount_arg)
    s.set_defaults(func=cmd_transfer)

    s = sub.add_parser("approve", help="Approve a spender")
    s.add_argument("symbol")
    s.add_argument("spender", type=_address_arg)
    s.add_argument("amount", type=_amount_arg)
    s.set_defaults(func=cmd_approve)

    s = sub.add_parser("mint", help="Mint new tokens (requires MINTER_ROLE)")
    s.add_argument("symbol")
    s.add_argument("to", type=_address_arg)
    s.add_argument("amount", type=_amount_arg)
    s.set_defaults(func=cmd_mint)

    s = sub.add_parser("burn", help="Burn tokens from your balance")
    s.add_argument("symbol")
    s.add_argument("amount", type=_amount_arg)
    s.set_defaults(func=cmd_burn)

    s = sub.add_parser("grant-role", help="Grant a role (MINTER, PAUSER, ADMIN or 0x id)")
    s.add_argument("symbol")
    s.add_argument("role", type=_role_arg)
    s.add_argument("account", type=_address_arg)
    s.set_defaults(func=cmd_grant_role)

    s = sub.add_parser("pause", help="Pause transfers")
    s.add_argument("symbol")
    s.set_defaults(func=cmd_pause)

    s = sub.add_parser("unpause", help="Unpause transfers")
    s.add_argument("symbol")
    s.set_defaults(func=cmd_unpause)

    return p


def _default_interactor() -> TokenInteractor:
    address_map = load_address_map(deployments_dir())
    settings = load_settings(require_deployer=False)
    client = Web3ChainClient.from_settings(settings.rpc_url, settings.private_key)
    return TokenInteractor(client, address_map)


def main(
    argv: list[str] | None = None,
    interactor_factory: Callable[[], TokenInteractor] = _default_interactor,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 2

    get_script_logger("interact_with_tokens", debug=args.debug)
    try:
        load_env_file(args.env_file)
        interactor = interactor_factory()
        return args.func(interactor, args)
    except TokenDeployerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
