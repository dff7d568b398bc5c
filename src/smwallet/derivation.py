"""
Key Derivation - deterministic ed25519 keys from a seed.

Scheme: SLIP-0010 for ed25519 (hardened derivation only).

    I = HMAC-SHA512(key=b"ed25519 seed", data=seed)         master
    I = HMAC-SHA512(key=c_par, data=0x00 || k_par || ser32(i))  child
    k, c = I[:32], I[32:]

Every key is recomputed from the seed along its full path. There is no
parent-to-child stepping state, so a given (seed, path) always yields the
same keypair no matter who asks or in what order.

Changing this scheme changes every key derived from an existing mnemonic.
Wallet files record DERIVATION_SCHEME so a future scheme can only be
opted into, never silently substituted.
"""

import hashlib
import hmac
import struct
from datetime import datetime, timezone
from typing import Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import InvalidSeedError
from .hdpath import HDPath, default_path
from .keys import KeyPair, SoftwareKey


DERIVATION_SCHEME = "slip10-ed25519"

# Seed length accepted by derive_master()/derive_child()
SEED_SIZE = 32

# ed25519 sizes
PRIVATE_SEED_SIZE = 32
PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 64  # private seed || public key

MASTER_DISPLAY_NAME = "Main Wallet"

_SLIP10_CURVE_KEY = b"ed25519 seed"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_seed(seed: bytes) -> None:
    if not isinstance(seed, (bytes, bytearray)) or len(seed) != SEED_SIZE:
        size = len(seed) if isinstance(seed, (bytes, bytearray)) else type(seed).__name__
        raise InvalidSeedError(f"Invalid seed length: expected {SEED_SIZE} bytes, got {size}")


def slip10_master(seed: bytes) -> tuple[bytes, bytes]:
    """Return (private seed, chain code) for the SLIP-0010 root."""
    digest = hmac.new(_SLIP10_CURVE_KEY, bytes(seed), hashlib.sha512).digest()
    return digest[:32], digest[32:]


def slip10_derive(seed: bytes, path: HDPath) -> tuple[bytes, bytes]:
    """
    Walk `path` from the SLIP-0010 root of `seed`.

    Accepts any seed length (the published SLIP-0010 test vectors use 16
    and 64 byte seeds); the wallet entry points enforce SEED_SIZE. The path
    must already be fully hardened.

    Returns:
        (private seed, chain code) of the final segment
    """
    path.require_hardened()
    key, chain_code = slip10_master(seed)
    for segment in path.segments:
        data = b"\x00" + key + struct.pack(">L", segment)
        digest = hmac.new(chain_code, data, hashlib.sha512).digest()
        key, chain_code = digest[:32], digest[32:]
    return key, chain_code


def public_key_from_private_seed(private_seed: bytes) -> bytes:
    """32-byte ed25519 public key for a 32-byte private seed."""
    signing_key = Ed25519PrivateKey.from_private_bytes(private_seed)
    return signing_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)


def keypair_from_private_seed(
    private_seed: bytes,
    path: HDPath,
    display_name: str = "",
    created: Optional[str] = None,
) -> KeyPair:
    """Build a software KeyPair (64-byte private key = seed || public)."""
    public_key = public_key_from_private_seed(private_seed)
    return KeyPair(
        display_name=display_name,
        created=created or _now(),
        path=path,
        public_key=public_key,
        key=SoftwareKey(private_key=private_seed + public_key),
    )


def derive_master(seed: bytes) -> KeyPair:
    """
    Derive the wallet master keypair from a 32-byte seed.

    The key is the SLIP-0010 root; it is labelled with the wallet root path
    m/44'/540' under which all account keys live.

    Raises:
        InvalidSeedError: If the seed is not SEED_SIZE bytes.
    """
    _check_seed(seed)
    private_seed, _ = slip10_master(seed)
    return keypair_from_private_seed(private_seed, default_path(), MASTER_DISPLAY_NAME)


def derive_child(seed: bytes, path: HDPath, display_name: str = "") -> KeyPair:
    """
    Derive the keypair at `path` directly from the seed.

    Raises:
        InvalidSeedError: If the seed is not SEED_SIZE bytes.
        NotHardenedError: If any path segment is unhardened.
    """
    _check_seed(seed)
    path.require_hardened()
    private_seed, _ = slip10_derive(seed, path)
    return keypair_from_private_seed(private_seed, path, display_name)
