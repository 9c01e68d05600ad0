import pytest

from cita_sdk.config import ReceiptPolicy, SDKConfig
from cita_sdk.rpc.http import RpcClient
from cita_sdk.version import __version__, user_agent

_VARS = (
    "RPC_URL", "CHAIN_ID", "VERSION", "TIMEOUT", "POLL_INTERVAL", "MAX_ATTEMPTS",
    "VALID_UNTIL_MARGIN", "USER_AGENT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(f"CITA_{name}", raising=False)
    return monkeypatch


def test_defaults(clean_env):
    cfg = SDKConfig.from_env()
    assert cfg == SDKConfig()
    assert cfg.rpc_url == "http://127.0.0.1:1337"
    assert cfg.receipt == ReceiptPolicy(poll_interval=3.0, max_attempts=4)
    assert cfg.valid_until_margin == 80
    assert cfg.user_agent.startswith(f"cita-sdk-python/{__version__} python/")


def test_from_env(clean_env):
    clean_env.setenv("CITA_RPC_URL", "https://node.example:1337")
    clean_env.setenv("CITA_CHAIN_ID", "0x10")
    clean_env.setenv("CITA_VERSION", "1")
    clean_env.setenv("CITA_TIMEOUT", "2.5")
    clean_env.setenv("CITA_POLL_INTERVAL", "0.5")
    clean_env.setenv("CITA_MAX_ATTEMPTS", "8")
    clean_env.setenv("CITA_VALID_UNTIL_MARGIN", "40")
    clean_env.setenv("CITA_USER_AGENT", "loadgen/1")

    cfg = SDKConfig.from_env()

    assert cfg.rpc_url == "https://node.example:1337"
    assert cfg.chain_id == 16
    assert cfg.version == 1
    assert cfg.request_timeout == 2.5
    assert cfg.receipt == ReceiptPolicy(poll_interval=0.5, max_attempts=8)
    assert cfg.valid_until_margin == 40
    assert cfg.http_headers()["User-Agent"] == "loadgen/1"


def test_custom_prefix(clean_env):
    clean_env.setenv("STAGING_CHAIN_ID", "7")
    assert SDKConfig.from_env(prefix="STAGING_").chain_id == 7


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rpc_url": "ws://127.0.0.1:4337"},
        {"chain_id": -1},
        {"version": 1 << 31},
        {"valid_until_margin": 101},
        {"valid_until_margin": 0},
    ],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        SDKConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [{"max_attempts": 0}, {"max_attempts": 2.5}, {"poll_interval": -1}],
)
def test_invalid_receipt_policy_rejected(kwargs):
    with pytest.raises(ValueError):
        ReceiptPolicy(**kwargs)


def test_with_overrides():
    base = SDKConfig(chain_id=1)
    cfg = SDKConfig.with_overrides(base, chain_id="0x2", max_attempts=10, bogus=True)
    assert cfg.chain_id == 2
    assert cfg.receipt == ReceiptPolicy(poll_interval=3.0, max_attempts=10)
    assert base.receipt.max_attempts == 4

    fast = ReceiptPolicy(poll_interval=0, max_attempts=1)
    assert SDKConfig.with_overrides(base, receipt=fast).receipt == fast


def test_to_dict_roundtrips():
    cfg = SDKConfig(chain_id=3, receipt=ReceiptPolicy(poll_interval=1.0, max_attempts=2))
    data = cfg.to_dict()
    assert data["poll_interval"] == 1.0 and data["max_attempts"] == 2
    assert SDKConfig.with_overrides(SDKConfig(), **data) == cfg


def test_rpc_client_from_config():
    cfg = SDKConfig(rpc_url="http://10.0.0.1:1337", request_timeout=4.0, user_agent="ua/1")
    with cfg.rpc_client() as rpc:
        assert isinstance(rpc, RpcClient)
        assert rpc.url == "http://10.0.0.1:1337"
        assert rpc.timeout == 4.0
        assert rpc.headers["User-Agent"] == "ua/1"


def test_user_agent():
    assert user_agent() == SDKConfig().user_agent
    assert user_agent("loadgen/2").endswith(" loadgen/2")
