"""
CITA SDK for Python.
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import ReceiptPolicy, SDKConfig  # noqa: F401
from .errors import (  # noqa: F401
    CitaSdkError,
    InvalidField,
    MalformedEnvelope,
    MalformedValue,
    RemoteProtocolError,
    RpcError,
    SigningError,
    TransportError,
    TxError,
)

# Types
from .types.core import Scheme, Signature, Transaction, TransactionReceipt  # noqa: F401

# RPC
from .rpc.http import RpcClient  # noqa: F401

# Wallet
from .wallet.signer import EcdsaSigner, Ed25519Blake2bSigner  # noqa: F401

# Tx helpers
from .tx.value import parse_value  # noqa: F401
from .tx.build import (  # noqa: F401
    create_contract_transaction,
    create_function_call_transaction,
    random_nonce,
    valid_until_block_from,
)
from .tx.encode import deserialize_envelope, serialize_envelope, serialize_raw  # noqa: F401
from .tx.sign import sign_transaction  # noqa: F401
from .tx.send import ConfirmationState, submit_and_wait, wait_for_receipt  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "SDKConfig", "ReceiptPolicy",
    "CitaSdkError", "MalformedValue", "InvalidField", "SigningError",
    "MalformedEnvelope", "RpcError", "RemoteProtocolError", "TransportError", "TxError",
    # Types
    "Scheme", "Signature", "Transaction", "TransactionReceipt",
    # RPC
    "RpcClient",
    # Wallet
    "EcdsaSigner", "Ed25519Blake2bSigner",
    # Tx
    "parse_value",
    "create_contract_transaction", "create_function_call_transaction",
    "random_nonce", "valid_until_block_from",
    "serialize_raw", "serialize_envelope", "deserialize_envelope",
    "sign_transaction",
    "ConfirmationState", "submit_and_wait", "wait_for_receipt",
]
