"""
Token configuration loader.

Reads the declarative token list (``tokens.json``) and validates every entry
before any chain interaction. Validation is all-or-nothing: the first invalid
entry aborts the load with ConfigError.

Expected file shape::

    {
      "network": "sepolia",
      "continueOnError": false,
      "tokens": [
        {
          "name": "My Token",
          "symbol": "MTK",
          "decimals": 18,
          "initialSupply": "1000000",
          "mintable": true,
          "burnable": true,
          "pausable": false,
          "initialHolders": [{"address": "0x...", "amount": "1000"}]
        }
      ]
    }
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from eth_utils import is_address, to_checksum_address

from ..errors import ConfigError
from ..helpers.units import MAX_DECIMALS, parse_units

__all__ = [
    "HolderAllocation",
    "TokenDefinition",
    "DeploymentConfig",
    "load_token_config",
    "parse_token_definition",
]

REQUIRED_FIELDS = ("name", "symbol", "decimals", "initialSupply")
FEATURE_FLAGS = ("mintable", "burnable", "pausable")


@dataclass(frozen=True)
class HolderAllocation:
    address: str
    amount: str


@dataclass(frozen=True)
class TokenDefinition:
    name: str
    symbol: str
    decimals: int
    initial_supply: str
    mintable: bool = False
    burnable: bool = False
    pausable: bool = False
    initial_holders: tuple[HolderAllocation, ...] = ()

    @property
    def features(self) -> list[str]:
        return [flag.capitalize() for flag in FEATURE_FLAGS if getattr(self, flag)]


@dataclass(frozen=True)
class DeploymentConfig:
    tokens: tuple[TokenDefinition, ...]
    network: str | None = None
    continue_on_error: bool = False
    source: Path | None = field(default=None, compare=False)


def _label(entry: dict[str, Any]) -> str:
    name = entry.get("name")
    return name if isinstance(name, str) and name else "unnamed"


def _check_amount(value: Any, decimals: int, what: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ConfigError(f"{what} must be a decimal string, got {value!r}")
    text = str(value).strip()
    try:
        parse_units(text, decimals)
    except ValueError as exc:
        raise ConfigError(f"{what} is invalid: {exc}") from None
    return text


def _check_flag(entry: dict[str, Any], flag: str) -> bool:
    value = entry.get(flag, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"Token {_label(entry)} has non-boolean {flag}: {value!r}")
    return value


def parse_token_definition(entry: Any) -> TokenDefinition:
    """Validate one raw token entry and return a TokenDefinition."""
    if not isinstance(entry, dict):
        raise ConfigError(f"Token entry must be an object, got {type(entry).__name__}")

    missing = [key for key in REQUIRED_FIELDS if entry.get(key) is None]
    if missing:
        raise ConfigError(f"Token {_label(entry)} missing required fields: {', '.join(missing)}")

    label = _label(entry)
    name, symbol = entry["name"], entry["symbol"]
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"Token {label} has an empty or non-string name")
    if not isinstance(symbol, str) or not symbol.strip():
        raise ConfigError(f"Token {label} has an empty or non-string symbol")

    decimals = entry["decimals"]
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= MAX_DECIMALS:
        raise ConfigError(f"Token {label} has invalid decimals: {decimals!r}. Must be 0-{MAX_DECIMALS}")

    initial_supply = _check_amount(entry["initialSupply"], decimals, f"Token {label} initialSupply")

    holders_raw = entry.get("initialHolders") or []
    if not isinstance(holders_raw, list):
        raise ConfigError(f"Token {label} initialHolders must be a list")

    holders: list[HolderAllocation] = []
    for holder in holders_raw:
        if not isinstance(holder, dict):
            raise ConfigError(f"Invalid holder entry for {label}: {holder!r}")
        address = holder.get("address")
        if not isinstance(address, str) or not is_address(address):
            raise ConfigError(f"Invalid holder address for {label}: {address}")
        amount = _check_amount(holder.get("amount"), decimals, f"Holder amount for {label} ({address})")
        holders.append(HolderAllocation(address=to_checksum_address(address), amount=amount))

    return TokenDefinition(
        name=name,
        symbol=symbol,
        decimals=decimals,
        initial_supply=initial_supply,
        mintable=_check_flag(entry, "mintable"),
        burnable=_check_flag(entry, "burnable"),
        pausable=_check_flag(entry, "pausable"),
        initial_holders=tuple(holders),
    )


def load_token_config(path: str | Path) -> DeploymentConfig:
    """Load and validate the token configuration file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or any token
            entry fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(
            f"Token configuration file not found: {path}. "
            "Create a tokens.json file with your token configurations"
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Token configuration {path} is not valid JSON: {exc}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read token configuration {path}: {exc}") from None

    if not isinstance(data, dict):
        raise ConfigError(f"Token configuration {path} must be a JSON object")

    tokens_raw = data.get("tokens")
    if not isinstance(tokens_raw, list):
        raise ConfigError(f"Token configuration {path} must contain a 'tokens' list")

    network = data.get("network")
    if network is not None and not isinstance(network, str):
        raise ConfigError(f"'network' must be a string, got {network!r}")

    continue_on_error = data.get("continueOnError", False)
    if not isinstance(continue_on_error, bool):
        raise ConfigError(f"'continueOnError' must be a boolean, got {continue_on_error!r}")

    tokens = tuple(parse_token_definition(entry) for entry in tokens_raw)
    return DeploymentConfig(
        tokens=tokens,
        network=network or None,
        continue_on_error=continue_on_error,
        source=path,
    )
