import pytest

from cita_sdk.errors import InvalidField, MalformedValue, TransportError
from cita_sdk.tx.build import (create_contract_transaction,
                               create_function_call_transaction,
                               random_nonce, valid_until_block_from)

CONTRACT = "0x" + "ab" * 20


def _contract(**overrides):
    kwargs = dict(
        nonce=7,
        quota=99999,
        valid_until_block=100,
        version=0,
        chain_id=1,
        value="0",
        init_code="0x6060",
    )
    kwargs.update(overrides)
    return create_contract_transaction(**kwargs)


def test_contract_creation_has_empty_recipient():
    tx = _contract()
    assert tx.to == ""
    assert tx.is_contract_creation
    assert tx.data == "0x6060"
    assert tx.value == "0"
    assert tx.nonce_hex == "7"


def test_function_call_keeps_recipient_and_normalizes_fields():
    tx = create_function_call_transaction(
        to=CONTRACT,
        nonce=255,
        quota=1_000_000,
        valid_until_block=88,
        version=1,
        chain_id=2,
        value="0xFF",
        data=b"\xa9\x05\x9c\xbb",
    )
    assert tx.to == CONTRACT
    assert not tx.is_contract_creation
    assert tx.value == "ff"
    assert tx.data == "0xa9059cbb"
    assert tx.nonce_hex == "ff"
    assert tx.to_rpc_dict()["validUntilBlock"] == 88


def test_empty_payload_is_0x():
    assert _contract(init_code=None).data == "0x"
    assert _contract(init_code="").data == "0x"


def test_function_call_requires_recipient():
    with pytest.raises(InvalidField) as ei:
        create_function_call_transaction(
            to="", nonce=1, quota=1, valid_until_block=1, version=0, chain_id=1,
            value="0", data="0x",
        )
    assert ei.value.field == "to"


@pytest.mark.parametrize(
    "field, bad",
    [
        ("quota", 0),
        ("quota", 1 << 64),
        ("valid_until_block", 0),
        ("nonce", -1),
        ("nonce", 1 << 256),
        ("nonce", True),
        ("chain_id", 1 << 31),
        ("version", -1),
        ("quota", "99999"),
    ],
)
def test_out_of_range_fields(field, bad):
    with pytest.raises(InvalidField) as ei:
        _contract(**{field: bad})
    assert ei.value.field == field


@pytest.mark.parametrize("payload", ["0x123", "0xzz", 12])
def test_malformed_payload(payload):
    with pytest.raises(InvalidField) as ei:
        _contract(init_code=payload)
    assert ei.value.field == "data"


def test_malformed_value_propagates():
    with pytest.raises(MalformedValue):
        _contract(value="ten")


def test_random_nonces_are_distinct_salts():
    nonces = {random_nonce() for _ in range(32)}
    assert len(nonces) == 32
    assert all(0 <= n < 1 << 256 for n in nonces)


def test_valid_until_block_from_height(make_rpc):
    rpc = make_rpc({"blockNumber": "0x64"})
    assert valid_until_block_from(rpc) == 180
    assert valid_until_block_from(rpc, margin=5) == 105
    assert rpc.calls == [("blockNumber", []), ("blockNumber", [])]


def test_valid_until_margin_bounds(make_rpc):
    rpc = make_rpc({"blockNumber": 10})
    with pytest.raises(InvalidField):
        valid_until_block_from(rpc, margin=101)
    with pytest.raises(InvalidField):
        valid_until_block_from(rpc, margin=0)
    assert rpc.calls == []


def test_bad_block_number_is_a_transport_error(make_rpc):
    rpc = make_rpc({"blockNumber": {"height": 1}})
    with pytest.raises(TransportError):
        valid_until_block_from(rpc)
