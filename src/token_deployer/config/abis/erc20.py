"""
ERC20Token interface ABI.

Covers the standard ERC20 surface plus the optional mint / burn / pause
extensions and the AccessControl role functions of contracts/ERC20Token.sol.
"""


def _view(name, inputs, output_type):
    return {
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "name": name,
        "outputs": [{"name": "", "type": output_type}],
        "stateMutability": "view",
        "type": "function",
    }


def _write(name, inputs, outputs=()):
    return {
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "name": name,
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": "nonpayable",
        "type": "function",
    }


TOKEN_ABI = [
    # Metadata
    _view("name", [], "string"),
    _view("symbol", [], "string"),
    _view("decimals", [], "uint8"),
    _view("totalSupply", [], "uint256"),
    # Balances and allowances
    _view("balanceOf", [("account", "address")], "uint256"),
    _view("allowance", [("owner", "address"), ("spender", "address")], "uint256"),
    _write("transfer", [("to", "address"), ("amount", "uint256")], ["bool"]),
    _write("approve", [("spender", "address"), ("amount", "uint256")], ["bool"]),
    # Supply management (feature gated on-chain)
    _write("mint", [("to", "address"), ("amount", "uint256")]),
    _write("burn", [("amount", "uint256")]),
    # Pausing
    _write("pause", []),
    _write("unpause", []),
    _view("paused", [], "bool"),
    # Access control
    _view("hasRole", [("role", "bytes32"), ("account", "address")], "bool"),
    _write("grantRole", [("role", "bytes32"), ("account", "address")]),
    _write("revokeRole", [("role", "bytes32"), ("account", "address")]),
    _view("MINTER_ROLE", [], "bytes32"),
    _view("PAUSER_ROLE", [], "bytes32"),
    _view("DEFAULT_ADMIN_ROLE", [], "bytes32"),
]

# Calldata signatures of the state-changing functions, keyed by ABI name.
WRITE_SIGNATURES: dict[str, tuple[str, tuple[str, ...]]] = {
    entry["name"]: (
        f"{entry['name']}({','.join(i['type'] for i in entry['inputs'])})",
        tuple(i["type"] for i in entry["inputs"]),
    )
    for entry in TOKEN_ABI
    if entry["stateMutability"] == "nonpayable"
}
