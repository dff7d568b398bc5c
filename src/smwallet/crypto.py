"""
Wallet Crypto - encrypted wallet container.

- PBKDF2-HMAC-SHA512 key derivation (210,000 iterations)
- AES-256-GCM authenticated encryption
- Synthetic nonce: HMAC-SHA512(key, plaintext) truncated to 12 bytes

Wallet secrets never exist unencrypted on disk. The container is JSON:

    {
      "meta":   {"displayName", "created", "genesisID", "derivation"},
      "crypto": {
        "cipher": "AES-GCM",
        "cipherText": <hex>,
        "cipherParams": {"iv": <hex>},
        "kdf": "PBKDF2",
        "kdfParams": {"dklen": 32, "hash": "SHA-512", "salt": <hex>, "iterations": N}
      }
    }

The nonce depends only on key and plaintext, so re-exporting the same
secrets with the same password and salt produces a byte-identical file.

The kdfParams "hash" field is a label only. Keys are always derived with
PBKDF2-HMAC-SHA512, and files written elsewhere as "SHA-256" were derived
with SHA-512 as well, so either label opens the same way.
"""

import hashlib
import hmac
import json
import logging
import secrets
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .derivation import DERIVATION_SCHEME
from .errors import DecryptionError, ParseError, WalletError
from .wallet import Wallet, WalletMetadata, WalletSecrets

logger = logging.getLogger(__name__)


# ============================================
# Security Constants
# ============================================

# PBKDF2 parameters (OWASP recommendation for PBKDF2-HMAC-SHA512)
PBKDF2_ITERATIONS = 210000
PBKDF2_DKLEN = 32  # 256 bits for AES-256
PBKDF2_SALT_SIZE = 16
PBKDF2_HASH = "SHA-512"

# AES-GCM constants
AES_IV_SIZE = 12  # 96 bits (recommended for GCM)

CIPHER_NAME = "AES-GCM"
KDF_NAME = "PBKDF2"

# Accepted values of kdfParams.hash; derivation uses SHA-512 for both
KDF_HASH_LABELS = ("SHA-512", "SHA-256")

# Exports below this count are refused; opening only warns
MIN_EXPORT_ITERATIONS = PBKDF2_ITERATIONS


# ============================================
# Key Derivation
# ============================================

def derive_key(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> bytes:
    """
    Derive the 32-byte encryption key from a password with PBKDF2.

    With the default iteration count each password guess costs a noticeable
    fraction of a second; run this off any UI thread.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=PBKDF2_DKLEN,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


# ============================================
# Encryption
# ============================================

def synthetic_nonce(key: bytes, plaintext: bytes) -> bytes:
    """GCM nonce derived from key and plaintext rather than an RNG."""
    return hmac.new(key, plaintext, hashlib.sha512).digest()[:AES_IV_SIZE]


def encrypt_secrets(key: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
    """
    Seal plaintext with AES-256-GCM.

    Returns: (ciphertext_with_tag, nonce)
    """
    nonce = synthetic_nonce(key, plaintext)
    return AESGCM(key).encrypt(nonce, plaintext, None), nonce


def decrypt_secrets(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Open an AES-256-GCM ciphertext.

    Raises: DecryptionError if the password is wrong or data is tampered.
    """
    if len(nonce) != AES_IV_SIZE:
        raise DecryptionError(f"Invalid IV length: expected {AES_IV_SIZE} bytes, got {len(nonce)}")
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise DecryptionError("Wrong password or corrupted wallet file") from e


def serialize_secrets(wallet_secrets: WalletSecrets) -> bytes:
    """Canonical byte form of the secrets (sorted keys, no whitespace)."""
    return json.dumps(wallet_secrets.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")


# ============================================
# Wallet Key
# ============================================

class WalletKey:
    """
    Password-derived key for exporting and opening wallet containers.

    Usage:
        # Export with a fresh random salt
        key = WalletKey("my-password")
        container_json = key.export(wallet)

        # Open (salt and iterations always come from the file)
        wallet = WalletKey("my-password").open(container_json)
    """

    def __init__(self, password: str, salt: Optional[bytes] = None,
                 iterations: int = PBKDF2_ITERATIONS):
        if salt is not None and len(salt) != PBKDF2_SALT_SIZE:
            raise WalletError(f"Salt must be {PBKDF2_SALT_SIZE} bytes, got {len(salt)}")
        if iterations < 1:
            raise WalletError(f"Iterations must be positive, got {iterations}")
        self._password = password
        self.salt = salt
        self.iterations = iterations
        self._cached: Optional[tuple[bytes, int, bytes]] = None  # (salt, iterations, key)

    def _key(self, salt: bytes, iterations: int) -> bytes:
        if self._password is None:
            raise WalletError("Wallet key has been cleared")
        if self._cached and self._cached[:2] == (salt, iterations):
            return self._cached[2]
        key = derive_key(self._password, salt, iterations)
        self._cached = (salt, iterations, key)
        return key

    # ============================================
    # Export
    # ============================================

    def export_container(self, wallet: Wallet) -> dict:
        """
        Seal the wallet's secrets and return the container as a dict.

        Raises:
            WalletError: If the iteration count is below MIN_EXPORT_ITERATIONS.
        """
        if self.iterations < MIN_EXPORT_ITERATIONS:
            raise WalletError(
                f"Refusing to export with {self.iterations} PBKDF2 iterations, "
                f"at least {MIN_EXPORT_ITERATIONS} are required"
            )
        if self.salt is None:
            self.salt = secrets.token_bytes(PBKDF2_SALT_SIZE)

        key = self._key(self.salt, self.iterations)
        ciphertext, nonce = encrypt_secrets(key, serialize_secrets(wallet.secrets))

        return {
            "meta": wallet.meta.to_dict(),
            "crypto": {
                "cipher": CIPHER_NAME,
                "cipherText": ciphertext.hex(),
                "cipherParams": {
                    "iv": nonce.hex(),
                },
                "kdf": KDF_NAME,
                "kdfParams": {
                    "dklen": PBKDF2_DKLEN,
                    "hash": PBKDF2_HASH,
                    "salt": self.salt.hex(),
                    "iterations": self.iterations,
                },
            },
        }

    def export(self, wallet: Wallet) -> str:
        """Seal the wallet and return the container JSON."""
        return json.dumps(self.export_container(wallet), indent=2)

    # ============================================
    # Open
    # ============================================

    def open(self, container: Union[str, bytes, dict], hrp: Optional[str] = None) -> Wallet:
        """
        Decrypt a wallet container.

        Salt and iteration count are read from the container. A pre-set salt
        that disagrees with the file is replaced by the file's (with a
        warning); a low iteration count only produces a warning.

        Raises:
            ParseError: If the container or decrypted secrets are malformed.
            DecryptionError: If the password is wrong or data is tampered.
        """
        data = _load_container(container)
        meta, params = _parse_container(data)

        if self.salt is not None and self.salt != params["salt"]:
            logger.warning("Wallet key salt does not match wallet file salt, using the file's salt")
        self.salt = params["salt"]
        self.iterations = params["iterations"]
        if params["iterations"] < PBKDF2_ITERATIONS:
            logger.warning(
                f"Wallet file uses {params['iterations']} PBKDF2 iterations, "
                f"fewer than the recommended {PBKDF2_ITERATIONS}"
            )

        key = self._key(params["salt"], params["iterations"])
        plaintext = decrypt_secrets(key, params["iv"], params["ciphertext"])

        try:
            wallet_secrets = WalletSecrets.from_dict(json.loads(plaintext.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"Decrypted wallet secrets are not valid JSON: {e}") from e

        if hrp is None:
            return Wallet(meta, wallet_secrets)
        return Wallet(meta, wallet_secrets, hrp=hrp)

    def clear(self) -> None:
        """Drop the password and derived key from memory."""
        self._password = None
        self._cached = None


# ============================================
# Container Parsing
# ============================================

def _load_container(container: Union[str, bytes, dict]) -> dict:
    if isinstance(container, dict):
        return container
    try:
        data = json.loads(container)
    except (TypeError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"Wallet file is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("Wallet file must contain a JSON object")
    return data


def _parse_container(data: dict) -> tuple[WalletMetadata, dict]:
    """Validate the container structure and decode its binary fields."""
    try:
        meta = WalletMetadata.from_dict(data["meta"])
        crypto = data["crypto"]
        cipher = crypto["cipher"]
        kdf = crypto["kdf"]
        kdf_params = crypto["kdfParams"]
        params = {
            "ciphertext": bytes.fromhex(crypto["cipherText"]),
            "iv": bytes.fromhex(crypto["cipherParams"]["iv"]),
            "salt": bytes.fromhex(kdf_params["salt"]),
            "iterations": int(kdf_params["iterations"]),
            "dklen": int(kdf_params.get("dklen", PBKDF2_DKLEN)),
            "hash": kdf_params.get("hash", PBKDF2_HASH),
        }
    except ParseError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Malformed wallet file: {e}") from e

    if meta.derivation != DERIVATION_SCHEME:
        raise ParseError(f"Unsupported key derivation scheme: {meta.derivation!r}")
    if cipher != CIPHER_NAME:
        raise ParseError(f"Unsupported cipher: {cipher!r}")
    if kdf != KDF_NAME:
        raise ParseError(f"Unsupported KDF: {kdf!r}")
    if not isinstance(params["hash"], str) or params["hash"] not in KDF_HASH_LABELS:
        raise ParseError(f"Unsupported KDF hash: {params['hash']!r}")
    if params["dklen"] != PBKDF2_DKLEN:
        raise ParseError(f"Unsupported derived key length: {params['dklen']}")
    if params["iterations"] < 1:
        raise ParseError(f"Invalid KDF iteration count: {params['iterations']}")
    if not params["salt"]:
        raise ParseError("Wallet file has an empty salt")

    return meta, params


# ============================================
# Convenience
# ============================================

def export_wallet(wallet: Wallet, password: str, salt: Optional[bytes] = None,
                  iterations: int = PBKDF2_ITERATIONS) -> str:
    """Encrypt a wallet with a password and return the container JSON."""
    return WalletKey(password, salt, iterations).export(wallet)


def open_wallet(container: Union[str, bytes, dict], password: str,
                salt: Optional[bytes] = None, hrp: Optional[str] = None) -> Wallet:
    """Decrypt a wallet container with a password."""
    return WalletKey(password, salt).open(container, hrp)
