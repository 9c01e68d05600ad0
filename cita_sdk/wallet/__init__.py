"""
cita_sdk.wallet
===============

Signers for the two transaction signature schemes:

- secp256k1 recoverable ECDSA over Keccak-256
- Ed25519 over personalized BLAKE2b, public key embedded in the signature
"""

from .signer import (EcdsaSigner, Ed25519Blake2bSigner, Signer,
                     public_key_to_address, recover_public_key, sign,
                     signer_for, verify_signature)

__all__ = [
    "Signer",
    "EcdsaSigner",
    "Ed25519Blake2bSigner",
    "signer_for",
    "sign",
    "recover_public_key",
    "verify_signature",
    "public_key_to_address",
]
