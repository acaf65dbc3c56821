import json
from unittest.mock import Mock

import pytest
import requests

from conftest import ALICE, BOB
from token_deployer.helpers.explorer_verifier import (
    MAX_POLL_ATTEMPTS,
    ContractVerifier,
    ExplorerClient,
    VerificationResult,
    VerificationSummary,
)
from token_deployer.setup.deployer import DeploymentRecord, constructor_args_for
from token_deployer.setup.report import DeploymentReport

STANDARD_JSON = {"language": "Solidity", "sources": {"ERC20Token.sol": {"content": "// src"}}, "settings": {}}


def _record(symbol="ALP", address=ALICE):
    return DeploymentRecord(
        name=f"{symbol} Token", symbol=symbol, address=address, decimals=18,
        initial_supply="1000", mintable=True, burnable=True, pausable=False,
        deployment_tx="0xabc", block_number=1, gas_used=100,
    )


def _verifier(explorer, sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    return ContractVerifier(explorer, STANDARD_JSON, sleep=sleeps.append)


def _explorer(*statuses, submit=None):
    explorer = Mock(spec=ExplorerClient)
    explorer.submit_verification.return_value = submit or {"status": "1", "result": "guid-123"}
    explorer.check_status.side_effect = list(statuses)
    return explorer


PENDING = {"status": "0", "result": "Pending in queue"}
PASS = {"status": "1", "result": "Pass - Verified"}


def test_pending_then_success():
    sleeps = []
    explorer = _explorer(PENDING, PENDING, PASS)

    assert _verifier(explorer, sleeps).check_verification_status("guid-123") == (True, "Pass - Verified")
    assert explorer.check_status.call_count == 3
    assert sleeps == [3, 3, 3]


def test_permanent_pending_hits_attempt_ceiling():
    explorer = _explorer(*([PENDING] * MAX_POLL_ATTEMPTS))

    assert _verifier(explorer).check_verification_status("guid") == (False, "Verification timeout")
    assert explorer.check_status.call_count == MAX_POLL_ATTEMPTS == 30


def test_definitive_failure_stops_polling():
    explorer = _explorer(PENDING, {"status": "0", "result": "Fail - Unable to verify"})

    assert _verifier(explorer).check_verification_status("guid") == (False, "Fail - Unable to verify")
    assert explorer.check_status.call_count == 2


def test_http_error_counts_as_attempt():
    explorer = _explorer(requests.exceptions.ConnectionError("boom"), PASS)

    success, _ = _verifier(explorer).check_verification_status("guid")
    assert success
    assert explorer.check_status.call_count == 2


def test_verify_contract_submits_constructor_args():
    explorer = _explorer(PASS)
    record = _record()

    result = _verifier(explorer).verify_contract(record)

    assert result.success
    assert result.guid == "guid-123"
    explorer.submit_verification.assert_called_once_with(
        ALICE,
        STANDARD_JSON,
        constructor_args_for("ALP Token", "ALP", 18, "1000", True, True, False),
    )


def test_rejected_submission_is_a_failure():
    explorer = _explorer(submit={"status": "0", "result": "Invalid API Key"})

    result = _verifier(explorer).verify_contract(_record())

    assert not result.success
    assert "Invalid API Key" in result.message
    explorer.check_status.assert_not_called()


def test_verify_all_is_serial_and_independent():
    sleeps = []
    explorer = Mock(spec=ExplorerClient)
    explorer.submit_verification.side_effect = [
        {"status": "0", "result": "Already Verified"},
        {"status": "1", "result": "guid-2"},
    ]
    explorer.check_status.side_effect = [PASS]
    report = DeploymentReport("sepolia", BOB, [_record("ALP"), _record("BET", BOB)])

    summary = _verifier(explorer, sleeps).verify_all(report)

    assert summary.verified == ["BET"]
    assert summary.failed == ["ALP"]
    # rate limit pause between contracts, then one status poll
    assert sleeps == [1, 3]


def test_explorer_client_submission_payload():
    session = Mock()
    session.post.return_value.json.return_value = {"status": "1", "result": "guid"}
    client = ExplorerClient("https://api-sepolia.etherscan.io/api", "KEY", session=session)

    assert client.submit_verification(ALICE, STANDARD_JSON, "00ff") == {"status": "1", "result": "guid"}

    url = session.post.call_args.args[0]
    data = session.post.call_args.kwargs["data"]
    assert url == "https://api-sepolia.etherscan.io/api"
    assert data["action"] == "verifysourcecode"
    assert data["codeformat"] == "solidity-standard-json-input"
    assert data["contractname"] == "ERC20Token.sol:ERC20Token"
    assert data["compilerversion"] == "v0.8.20+commit.a1b79de6"
    assert data["constructorArguements"] == "00ff"
    assert data["runs"] == "200"
    assert data["evmversion"] == "paris"
    assert json.loads(data["sourceCode"]) == STANDARD_JSON


def test_explorer_client_status_query():
    session = Mock()
    session.get.return_value.json.return_value = PENDING
    client = ExplorerClient("https://api.etherscan.io/api", "KEY", session=session)

    assert client.check_status("guid-9") == PENDING
    params = session.get.call_args.kwargs["params"]
    assert params == {"apikey": "KEY", "module": "contract", "action": "checkverifystatus", "guid": "guid-9"}


@pytest.mark.parametrize("network,url", [
    ("sepolia", "https://api-sepolia.etherscan.io/api"),
    ("somechain", "https://api.etherscan.io/api"),
])
def test_explorer_api_url_fallback(network, url):
    from token_deployer.config.network import get_explorer_api_url
    assert get_explorer_api_url(network) == url


def test_verify_command_requires_api_key(monkeypatch, capsys):
    from token_deployer.commands import verify

    monkeypatch.setenv("ETHERSCAN_API_KEY", "")
    assert verify.main([]) == 1
    assert "ETHERSCAN_API_KEY" in capsys.readouterr().err


@pytest.mark.parametrize("network,url", [
    ("sepolia", "https://sepolia.etherscan.io"),
    ("polygon", "https://polygonscan.com"),
    ("somechain", "https://etherscan.io"),
])
def test_explorer_url_fallback(network, url):
    from token_deployer.config.network import get_explorer_url
    assert get_explorer_url(network) == url


def test_verify_summary_links_verified_contracts(capsys):
    from token_deployer.commands import verify

    summary = VerificationSummary([
        VerificationResult("ALP", ALICE, True, "Pass - Verified", "guid-1"),
        VerificationResult("BET", BOB, False, "Fail - Unable to verify"),
    ])
    verify.print_summary(summary, "sepolia")

    out = capsys.readouterr().out
    assert f"ALP: https://sepolia.etherscan.io/address/{ALICE}#code" in out
    assert "BET: Fail - Unable to verify" in out
    assert "Verified: 1" in out
    assert "Failed: 1" in out
