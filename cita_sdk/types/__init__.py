"""
cita_sdk.types
==============

Core SDK datatypes (transaction body, signature, receipt). See
:mod:`cita_sdk.types.core`.
"""

from .core import (Scheme, Signature, Transaction,  # noqa: F401
                   TransactionReceipt)

__all__ = ["Scheme", "Signature", "Transaction", "TransactionReceipt"]
