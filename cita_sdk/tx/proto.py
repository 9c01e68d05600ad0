"""
cita_sdk.tx.proto
=================

Protocol-buffer schema of the CITA wire envelope:

    syntax = "proto3";
    package cita;

    message Transaction {
        string to = 1;
        string nonce = 2;
        uint64 quota = 3;
        uint64 valid_until_block = 4;
        bytes data = 5;
        bytes value = 6;
        int32 chain_id = 7;
        int32 version = 8;
    }

    enum Crypto {
        SECP = 0;
        ED25519 = 1;
    }

    message UnverifiedTransaction {
        Transaction transaction = 1;
        bytes signature = 2;
        Crypto crypto = 3;
    }

The message classes are built at import time from a FileDescriptorProto in a
private descriptor pool, so there is no protoc step and no clash with other
`cita.*` schemas a host application may have loaded into the default pool.
"""

from __future__ import annotations

from typing import Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_FDP = descriptor_pb2.FieldDescriptorProto

PACKAGE = "cita"

# (name, number, type) in schema order
_TRANSACTION_FIELDS: Tuple[Tuple[str, int, int], ...] = (
    ("to", 1, _FDP.TYPE_STRING),
    ("nonce", 2, _FDP.TYPE_STRING),
    ("quota", 3, _FDP.TYPE_UINT64),
    ("valid_until_block", 4, _FDP.TYPE_UINT64),
    ("data", 5, _FDP.TYPE_BYTES),
    ("value", 6, _FDP.TYPE_BYTES),
    ("chain_id", 7, _FDP.TYPE_INT32),
    ("version", 8, _FDP.TYPE_INT32),
)

_CRYPTO_VALUES: Tuple[Tuple[str, int], ...] = (
    ("SECP", 0),
    ("ED25519", 1),
)


def _add_field(msg: descriptor_pb2.DescriptorProto, name: str, number: int, ftype: int,
               type_name: str = "") -> None:
    f = msg.field.add()
    f.name = name
    f.number = number
    f.type = ftype
    f.label = _FDP.LABEL_OPTIONAL
    if type_name:
        f.type_name = type_name


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto()
    fdp.name = "cita/blockchain.proto"
    fdp.package = PACKAGE
    fdp.syntax = "proto3"

    tx = fdp.message_type.add()
    tx.name = "Transaction"
    for name, number, ftype in _TRANSACTION_FIELDS:
        _add_field(tx, name, number, ftype)

    crypto = fdp.enum_type.add()
    crypto.name = "Crypto"
    for name, number in _CRYPTO_VALUES:
        v = crypto.value.add()
        v.name = name
        v.number = number

    utx = fdp.message_type.add()
    utx.name = "UnverifiedTransaction"
    _add_field(utx, "transaction", 1, _FDP.TYPE_MESSAGE, f".{PACKAGE}.Transaction")
    _add_field(utx, "signature", 2, _FDP.TYPE_BYTES)
    _add_field(utx, "crypto", 3, _FDP.TYPE_ENUM, f".{PACKAGE}.Crypto")
    return fdp


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(build_file_descriptor().SerializeToString())

TransactionMessage = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PACKAGE}.Transaction")
)
UnverifiedTransactionMessage = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PACKAGE}.UnverifiedTransaction")
)
CRYPTO_ENUM = _POOL.FindEnumTypeByName(f"{PACKAGE}.Crypto")

__all__ = [
    "PACKAGE",
    "build_file_descriptor",
    "TransactionMessage",
    "UnverifiedTransactionMessage",
    "CRYPTO_ENUM",
]
