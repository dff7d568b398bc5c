"""
Key pairs held by a wallet.

A KeyPair always has a public key. Where the private half lives is a
tagged variant:

- SoftwareKey: the 64-byte ed25519 private key (seed || public) is in memory
- HardwareKey: the private key stays on a device, only its id is recorded

Code that needs to sign must look at `KeyPair.key` (or `has_private_key`)
and route hardware keys to the device.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from .errors import ParseError
from .hdpath import HDPath, parse_path


SOURCE_SOFTWARE = "software"
SOURCE_HARDWARE = "hardware"


@dataclass(frozen=True)
class SoftwareKey:
    """Private key material derived in software."""
    private_key: bytes = field(repr=False)  # 64 bytes: seed || public key

    def sign(self, message: bytes) -> bytes:
        return Ed25519PrivateKey.from_private_bytes(self.private_key[:32]).sign(message)


@dataclass(frozen=True)
class HardwareKey:
    """Marker for a key whose private half lives on a hardware device."""
    device_id: str


KeyMaterial = Union[SoftwareKey, HardwareKey]


@dataclass
class KeyPair:
    """An ed25519 keypair at a wallet derivation path."""
    display_name: str
    created: str                # ISO timestamp
    path: HDPath
    public_key: bytes           # 32 bytes
    key: KeyMaterial

    @property
    def has_private_key(self) -> bool:
        return isinstance(self.key, SoftwareKey)

    @property
    def is_hardware(self) -> bool:
        return isinstance(self.key, HardwareKey)

    @property
    def private_key(self) -> Optional[bytes]:
        """The 64-byte private key, or None for hardware keys."""
        if isinstance(self.key, SoftwareKey):
            return self.key.private_key
        return None

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Check an ed25519 signature against this keypair's public key."""
        try:
            Ed25519PublicKey.from_public_bytes(self.public_key).verify(signature, message)
            return True
        except InvalidSignature:
            return False

    def to_dict(self) -> dict:
        d = {
            "displayName": self.display_name,
            "created": self.created,
            "path": str(self.path),
            "publicKey": self.public_key.hex(),
        }
        if isinstance(self.key, SoftwareKey):
            d["secretKey"] = self.key.private_key.hex()
            d["source"] = SOURCE_SOFTWARE
        else:
            d["secretKey"] = ""
            d["source"] = SOURCE_HARDWARE
            d["device"] = self.key.device_id
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "KeyPair":
        """
        Rebuild a keypair from its JSON form.

        Raises:
            ParseError: If a field is missing, badly encoded, or the private
                key does not belong to the public key.
        """
        try:
            path = parse_path(data["path"])
            public_key = bytes.fromhex(data["publicKey"])
            source = data.get("source", SOURCE_SOFTWARE)
            if source == SOURCE_SOFTWARE:
                key = SoftwareKey(private_key=bytes.fromhex(data["secretKey"]))
            else:
                key = HardwareKey(device_id=str(data.get("device", "")))
            display_name = data.get("displayName", "")
            created = data.get("created", "")
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ParseError(f"Malformed keypair: {e}") from e

        if source not in (SOURCE_SOFTWARE, SOURCE_HARDWARE):
            raise ParseError(f"Unknown key source: {source!r}")
        if len(public_key) != 32:
            raise ParseError(f"Public key must be 32 bytes, got {len(public_key)}")
        if isinstance(key, SoftwareKey):
            if len(key.private_key) != 64:
                raise ParseError(f"Private key must be 64 bytes, got {len(key.private_key)}")
            if key.private_key[32:] != public_key:
                raise ParseError(f"Private key does not match public key at {path}")

        return cls(
            display_name=display_name,
            created=created,
            path=path,
            public_key=public_key,
            key=key,
        )
