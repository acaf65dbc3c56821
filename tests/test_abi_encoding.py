import pytest
from eth_abi import decode

from token_deployer.config.abis import WRITE_SIGNATURES
from token_deployer.helpers.abi_encoding import build_deploy_data, encode_function_call


def test_write_signatures():
    assert WRITE_SIGNATURES["transfer"] == ("transfer(address,uint256)", ("address", "uint256"))
    assert WRITE_SIGNATURES["grantRole"] == ("grantRole(bytes32,address)", ("bytes32", "address"))
    assert WRITE_SIGNATURES["pause"] == ("pause()", ())
    assert "balanceOf" not in WRITE_SIGNATURES


def test_encode_function_call():
    data = encode_function_call("approve(address,uint256)", ("address", "uint256"), ["0x" + "ab" * 20, 5])
    assert data.startswith("0x095ea7b3")
    spender, amount = decode(["address", "uint256"], bytes.fromhex(data[10:]))
    assert spender.lower() == "0x" + "ab" * 20
    assert amount == 5


def test_encode_function_call_checks_arity():
    with pytest.raises(ValueError):
        encode_function_call("burn(uint256)", ("uint256",), [])


def test_build_deploy_data():
    assert build_deploy_data("0x6080", "00ff") == "0x608000ff"
    assert build_deploy_data("6080", "") == "0x6080"
