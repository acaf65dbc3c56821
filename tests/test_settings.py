import pytest
from eth_account import Account

from token_deployer.config.settings import load_env_file, load_settings
from token_deployer.errors import ConfigError

KEY = "0x" + "4c" * 32
ADDRESS = Account.from_key(KEY).address


@pytest.fixture
def env(monkeypatch):
    for var in ("RPC_URL", "PRIVATE_KEY", "DEPLOYER_ADDRESS", "TOKENS_CONFIG_PATH",
                "DEPLOYMENTS_DIR", "CONTRACTS_DIR", "ETHERSCAN_API_KEY"):
        # recorded so teardown also removes values loaded from .env files
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("PRIVATE_KEY", KEY)
    monkeypatch.setenv("DEPLOYER_ADDRESS", ADDRESS.lower())
    return monkeypatch


def test_load_settings(env):
    settings = load_settings()
    assert settings.rpc_url == "http://localhost:8545"
    assert settings.deployer_address == ADDRESS
    assert str(settings.tokens_config_path) == "tokens.json"
    assert str(settings.deployments_dir) == "deployments"
    assert settings.etherscan_api_key is None


def test_private_key_is_not_in_repr(env):
    assert KEY not in repr(load_settings())


def test_missing_variables(env):
    env.delenv("RPC_URL")
    env.delenv("DEPLOYER_ADDRESS")
    with pytest.raises(ConfigError, match="RPC_URL, DEPLOYER_ADDRESS"):
        load_settings()


@pytest.mark.parametrize("key", ["4c" * 32, "0x" + "4c" * 31, "0x" + "zz" * 32])
def test_malformed_private_key(env, key):
    env.setenv("PRIVATE_KEY", key)
    with pytest.raises(ConfigError, match="Invalid private key format"):
        load_settings()


def test_deployer_address_mismatch(env):
    env.setenv("DEPLOYER_ADDRESS", "0x" + "00" * 20)
    with pytest.raises(ConfigError, match="does not match"):
        load_settings()


def test_deployer_address_optional_for_cli(env):
    env.delenv("DEPLOYER_ADDRESS")
    settings = load_settings(require_deployer=False)
    assert settings.private_key == KEY


def test_path_overrides(env, tmp_path):
    env.setenv("TOKENS_CONFIG_PATH", str(tmp_path / "t.json"))
    env.setenv("DEPLOYMENTS_DIR", str(tmp_path / "out"))
    settings = load_settings()
    assert settings.tokens_config_path == tmp_path / "t.json"
    assert settings.deployments_dir == tmp_path / "out"


def test_env_file(env, tmp_path):
    env_file = tmp_path / ".env.test"
    env_file.write_text("ETHERSCAN_API_KEY=abc123\nRPC_URL=http://ignored\n")
    load_env_file(str(env_file))
    settings = load_settings()
    assert settings.etherscan_api_key == "abc123"
    # existing environment wins
    assert settings.rpc_url == "http://localhost:8545"


def test_missing_env_file(tmp_path):
    with pytest.raises(ConfigError):
        load_env_file(str(tmp_path / "nope.env"))
