from unittest.mock import patch

import pytest

from token_deployer.errors import CompileError
from token_deployer.helpers.compiler import SolidityBuilder, default_import_resolver

ENTRY = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;
import "@openzeppelin/contracts/token/ERC20/ERC20.sol";
import {AccessControl} from "@openzeppelin/contracts/access/AccessControl.sol";
contract ERC20Token {}
"""

LIBRARY = {
    "@openzeppelin/contracts/token/ERC20/ERC20.sol": 'import "./IERC20.sol";\ncontract ERC20 {}',
    "@openzeppelin/contracts/token/ERC20/IERC20.sol": "interface IERC20 {}",
    "@openzeppelin/contracts/access/AccessControl.sol": 'import "../utils/Context.sol";\ncontract AccessControl {}',
    "@openzeppelin/contracts/utils/Context.sol": "abstract contract Context {}",
}


def resolver(path):
    try:
        return LIBRARY[path]
    except KeyError:
        raise FileNotFoundError(path) from None


def _output(errors=(), bytecode="6080"):
    return {
        "errors": list(errors),
        "contracts": {
            "ERC20Token.sol": {
                "ERC20Token": {"abi": [{"type": "constructor"}], "evm": {"bytecode": {"object": bytecode}}},
            },
        },
    }


@pytest.fixture
def builder():
    return SolidityBuilder(resolver=resolver)


@pytest.fixture
def solc():
    with patch("token_deployer.helpers.compiler.get_installed_solc_versions", return_value=["0.8.20"]), \
            patch("token_deployer.helpers.compiler.compile_standard") as compile_standard:
        yield compile_standard


def test_collect_sources_follows_relative_imports(builder):
    sources = builder.collect_sources("ERC20Token.sol", ENTRY)
    assert set(sources) == {"ERC20Token.sol", *LIBRARY}


def test_unresolvable_import(builder):
    with pytest.raises(CompileError, match="Cannot resolve import"):
        builder.collect_sources("ERC20Token.sol", 'import "@openzeppelin/contracts/Missing.sol";')


def test_standard_json_settings(builder):
    settings = builder.standard_json_input("ERC20Token.sol", ENTRY)["settings"]
    assert settings["optimizer"] == {"enabled": True, "runs": 200}
    assert settings["evmVersion"] == "paris"


def test_compile_returns_abi_and_prefixed_bytecode(builder, solc):
    solc.return_value = _output(errors=[{"severity": "warning", "message": "unused variable"}])

    contract = builder.compile("ERC20Token.sol", ENTRY)

    assert contract.bytecode == "0x6080"
    assert contract.abi == [{"type": "constructor"}]
    assert "@openzeppelin/contracts/utils/Context.sol" in contract.standard_json["sources"]
    assert solc.call_args.kwargs["solc_version"] == "0.8.20"


def test_error_diagnostics_are_fatal(builder, solc):
    solc.return_value = _output(errors=[
        {"severity": "warning", "formattedMessage": "Warning: shadowing"},
        {"severity": "error", "formattedMessage": "TypeError: bad"},
    ])

    with pytest.raises(CompileError) as excinfo:
        builder.compile("ERC20Token.sol", ENTRY)
    assert excinfo.value.diagnostics == ["TypeError: bad"]


def test_missing_contract(builder, solc):
    solc.return_value = _output()
    with pytest.raises(CompileError, match="Could not find Other"):
        builder.compile("ERC20Token.sol", ENTRY, "Other")


def test_empty_bytecode(builder, solc):
    solc.return_value = _output(bytecode="")
    with pytest.raises(CompileError, match="empty bytecode"):
        builder.compile("ERC20Token.sol", ENTRY)


def test_missing_solc_without_install(solc):
    builder = SolidityBuilder(solc_version="0.8.19", resolver=resolver, install=False)
    with pytest.raises(CompileError, match="not installed"):
        builder.compile("ERC20Token.sol", ENTRY)


def test_default_resolver_reads_openzeppelin_path(tmp_path, monkeypatch):
    target = tmp_path / "@openzeppelin" / "contracts" / "utils" / "Context.sol"
    target.parent.mkdir(parents=True)
    target.write_text("abstract contract Context {}")
    monkeypatch.setenv("OPENZEPPELIN_PATH", str(tmp_path))

    assert default_import_resolver("@openzeppelin/contracts/utils/Context.sol") == "abstract contract Context {}"
    with pytest.raises(FileNotFoundError):
        default_import_resolver("forge-std/Test.sol")
