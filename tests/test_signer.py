import pytest

from cita_sdk.errors import SigningError
from cita_sdk.types.core import Scheme, Signature
from cita_sdk.utils.hash import blake2b_cryptape, keccak256
from cita_sdk.wallet.signer import (EcdsaSigner, Ed25519Blake2bSigner,
                                    public_key_to_address, recover_public_key,
                                    sign, signer_for, verify_signature)

# secp256k1 private key 1; its Ethereum-style address is well known.
ECDSA_KEY_ONE = "0x" + "00" * 31 + "01"
ECDSA_KEY_ONE_ADDRESS = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"

ED25519_SEED = bytes(range(32))

RAW = b"\x12\x01\x31\x18\x9f\x8d\x06"


def test_hash_primitives():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    assert len(blake2b_cryptape(b"")) == 32
    assert blake2b_cryptape(b"abc") != blake2b_cryptape(b"abd")


def test_ecdsa_address_derivation():
    signer = EcdsaSigner(ECDSA_KEY_ONE)
    assert len(signer.public_key) == 65 and signer.public_key[0] == 4
    assert signer.address == ECDSA_KEY_ONE_ADDRESS


def test_ecdsa_sign_verify_and_recover():
    signer = EcdsaSigner("0x" + "42" * 32)
    sig = signer.sign(RAW)
    assert sig.scheme is Scheme.ECDSA_SECP256K1
    assert len(sig.data) == 65
    assert sig.embedded_public_key is None
    assert signer.verify(RAW, sig)
    assert not signer.verify(RAW + b"\x00", sig)
    assert recover_public_key(RAW, sig) == signer.public_key
    assert not verify_signature(RAW, sig, EcdsaSigner(ECDSA_KEY_ONE).public_key)


def test_ecdsa_verification_needs_expected_key():
    sig = EcdsaSigner(ECDSA_KEY_ONE).sign(RAW)
    with pytest.raises(SigningError):
        verify_signature(RAW, sig)


def test_ed25519_signature_layout_and_determinism():
    signer = Ed25519Blake2bSigner(ED25519_SEED)
    sig = signer.sign(RAW)
    assert sig.scheme is Scheme.ED25519_BLAKE2B
    assert len(sig.data) == 96
    assert sig.embedded_public_key == signer.public_key
    assert Ed25519Blake2bSigner(ED25519_SEED).sign(RAW) == sig
    assert signer.verify(RAW, sig)
    assert verify_signature(RAW, sig)
    assert not verify_signature(b"tampered", sig)
    assert not verify_signature(RAW, sig, public_key=b"\x00" * 32)


def test_ed25519_accepts_seed_with_public_key():
    signer = Ed25519Blake2bSigner(ED25519_SEED)
    long_form = Ed25519Blake2bSigner(ED25519_SEED + signer.public_key)
    assert long_form.public_key == signer.public_key
    assert long_form.address == public_key_to_address(signer.public_key, Scheme.ED25519_BLAKE2B)
    with pytest.raises(SigningError):
        Ed25519Blake2bSigner(ED25519_SEED + b"\x00" * 32)


def test_scheme_dispatch_is_explicit():
    assert isinstance(signer_for(Scheme.ECDSA_SECP256K1, ED25519_SEED), EcdsaSigner)
    assert isinstance(signer_for(Scheme.ED25519_BLAKE2B, ED25519_SEED), Ed25519Blake2bSigner)
    assert sign(RAW, ED25519_SEED, Scheme.ED25519_BLAKE2B).scheme is Scheme.ED25519_BLAKE2B
    with pytest.raises(SigningError):
        signer_for(7, ED25519_SEED)


@pytest.mark.parametrize(
    "scheme, key",
    [
        (Scheme.ECDSA_SECP256K1, b"\x01" * 31),
        (Scheme.ECDSA_SECP256K1, "0x" + "00" * 32),
        (Scheme.ECDSA_SECP256K1, "0x" + "ff" * 32),
        (Scheme.ECDSA_SECP256K1, "not hex"),
        (Scheme.ED25519_BLAKE2B, b"\x01" * 33),
        (Scheme.ED25519_BLAKE2B, 42),
    ],
)
def test_malformed_keys_raise_signing_error(scheme, key):
    with pytest.raises(SigningError):
        signer_for(scheme, key)


def test_signature_length_is_enforced():
    with pytest.raises(SigningError):
        Signature(scheme=Scheme.ECDSA_SECP256K1, data=b"\x00" * 64)
    with pytest.raises(SigningError):
        Signature(scheme=Scheme.ED25519_BLAKE2B, data=b"\x00" * 64)
    with pytest.raises(SigningError):
        Signature(scheme=5, data=b"\x00" * 65)


def test_cross_scheme_recovery_rejected():
    sig = Ed25519Blake2bSigner(ED25519_SEED).sign(RAW)
    with pytest.raises(SigningError):
        recover_public_key(RAW, sig)
