# -------------------------------------------------------------------
#  🔐  utils/signing.py  – Sui wallet material and transaction signing.
# -------------------------------------------------------------------
"""Ed25519 keypairs for Sui.

   Keys come either from a hex seed (PRIVATE_KEY) or from a BIP-39
   mnemonic derived along SLIP-0010 path m/44'/784'/0'/0'/0'.

   Address   : 0x + blake2b-256(0x00 || pubkey)
   Signature : ed25519(blake2b-256(intent || tx_bytes)), intent = 00 00 00
   Serialized: base64(0x00 || signature || pubkey)
"""
from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass

from bip_utils import (
    Bip32KeyError,
    Bip32PathError,
    Bip32Slip10Ed25519,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
)
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

ED25519_FLAG = b"\x00"
TRANSACTION_INTENT = b"\x00\x00\x00"
SUI_DERIVATION_PATH = "m/44'/784'/0'/0'/0'"

__all__ = [
    "SuiKeypair",
    "keypair_from_hex",
    "keypair_from_mnemonic",
    "sign_transaction",
]


def _blake2b256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


@dataclass(frozen=True)
class SuiKeypair:
    private_key: Ed25519PrivateKey

    @property
    def public_key_bytes(self) -> bytes:
        return self.private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    @property
    def address(self) -> str:
        return "0x" + _blake2b256(ED25519_FLAG + self.public_key_bytes).hex()

    def sign(self, message: bytes) -> bytes:
        return self.private_key.sign(message)


def keypair_from_hex(secret_hex: str) -> SuiKeypair:
    """32-byte seed as hex; a 64-byte secret key keeps its leading seed."""
    raw = secret_hex.strip()
    if raw.startswith(("0x", "0X")):
        raw = raw[2:]
    seed = bytes.fromhex(raw)
    if len(seed) == 64:
        seed = seed[:32]
    if len(seed) != 32:
        raise ValueError(f"private key must be 32 or 64 bytes, got {len(seed)}")
    return SuiKeypair(Ed25519PrivateKey.from_private_bytes(seed))


def keypair_from_mnemonic(
    mnemonic: str,
    passphrase: str = "",
    path: str = SUI_DERIVATION_PATH,
) -> SuiKeypair:
    """BIP-39 mnemonic (wordlist and checksum validated) -> SLIP-0010 ed25519 key at ``path``."""
    words = " ".join(mnemonic.split())
    if not Bip39MnemonicValidator().IsValid(words):
        raise ValueError("mnemonic is not a valid BIP-39 phrase")
    seed = Bip39SeedGenerator(words).Generate(passphrase)
    try:
        node = Bip32Slip10Ed25519.FromSeedAndPath(seed, path)
    except (Bip32KeyError, Bip32PathError) as exc:
        # ed25519 only derives hardened segments
        raise ValueError(f"cannot derive {path}: {exc}") from exc
    return SuiKeypair(Ed25519PrivateKey.from_private_bytes(node.PrivateKey().Raw().ToBytes()))


def sign_transaction(keypair: SuiKeypair, tx_bytes_b64: str) -> str:
    """Return the serialized signature for base64 transaction bytes."""
    tx_bytes = base64.b64decode(tx_bytes_b64)
    digest = _blake2b256(TRANSACTION_INTENT + tx_bytes)
    signature = keypair.sign(digest)
    return base64.b64encode(ED25519_FLAG + signature + keypair.public_key_bytes).decode()
