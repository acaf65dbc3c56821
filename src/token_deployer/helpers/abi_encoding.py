"""
ABI encoding helpers shared by deployment, administration and verification.

The constructor tuple must match ``ERC20Token``'s declared parameters exactly:
the same encoding is appended to the creation bytecode and submitted to the
block explorer as ``constructorArguements``.
"""
from __future__ import annotations

from typing import Any, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

__all__ = [
    "CONSTRUCTOR_TYPES",
    "encode_constructor_args",
    "encode_function_call",
    "build_deploy_data",
]

# ERC20Token(string name, string symbol, uint8 decimals, uint256 initialSupply,
#            bool mintable, bool burnable, bool pausable)
CONSTRUCTOR_TYPES: tuple[str, ...] = ("string", "string", "uint8", "uint256", "bool", "bool", "bool")


def encode_constructor_args(
    name: str,
    symbol: str,
    decimals: int,
    initial_supply_raw: int,
    mintable: bool,
    burnable: bool,
    pausable: bool,
) -> str:
    """Return the ABI encoded constructor arguments as hex without ``0x``."""
    encoded = encode(
        list(CONSTRUCTOR_TYPES),
        [name, symbol, decimals, initial_supply_raw, bool(mintable), bool(burnable), bool(pausable)],
    )
    return encoded.hex()


def build_deploy_data(bytecode: str, constructor_args_hex: str) -> str:
    """Concatenate creation bytecode and encoded constructor arguments."""
    code = bytecode[2:] if bytecode.startswith("0x") else bytecode
    return "0x" + code + constructor_args_hex


def _normalize_arg(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return to_checksum_address(value)
    return value


def encode_function_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> str:
    """Encode calldata for ``signature`` (e.g. ``"transfer(address,uint256)"``).

    >>> encode_function_call("pause()", [], [])
    '0x8456cb59'
    """
    if len(arg_types) != len(args):
        raise ValueError(f"{signature} expects {len(arg_types)} arguments, got {len(args)}")
    selector = function_signature_to_4byte_selector(signature)
    values = [_normalize_arg(t, v) for t, v in zip(arg_types, args)]
    payload = encode(list(arg_types), values) if arg_types else b""
    return "0x" + (selector + payload).hex()
