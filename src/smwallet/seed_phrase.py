"""
Seed phrases - BIP-39 via the `mnemonic` library.

Adds one rule on top of BIP-39: a phrase must already be in canonical form
(words separated by exactly one space, nothing before or after). Phrases
with extra whitespace are rejected rather than normalized, so the exact
string a user backed up is the string that produced their keys.
"""

import secrets

from mnemonic import Mnemonic

from .derivation import SEED_SIZE
from .errors import InvalidMnemonicError, WhitespaceError


# Allowed BIP-39 entropy sizes (12 to 24 words)
ENTROPY_BITS = (128, 160, 192, 224, 256)

# New wallets get 24 words
DEFAULT_ENTROPY_BITS = 256

_mnemo = Mnemonic("english")


def generate_entropy(bits: int = DEFAULT_ENTROPY_BITS) -> bytes:
    """Fresh random entropy for a new mnemonic."""
    if bits not in ENTROPY_BITS:
        raise ValueError(f"Entropy must be one of {ENTROPY_BITS} bits, got {bits}")
    return secrets.token_bytes(bits // 8)


def entropy_to_mnemonic(entropy: bytes) -> str:
    return _mnemo.to_mnemonic(entropy)


def generate_mnemonic(bits: int = DEFAULT_ENTROPY_BITS) -> str:
    return entropy_to_mnemonic(generate_entropy(bits))


def validate_mnemonic(mnemonic: str) -> bool:
    """True if the phrase has a valid word count, known words and checksum."""
    try:
        return _mnemo.check(mnemonic)
    except (ValueError, LookupError):
        return False


def check_whitespace(mnemonic: str) -> None:
    """
    Raise WhitespaceError unless the phrase is single-space separated.

    Double spaces, tabs, newlines, and leading or trailing whitespace are
    all rejected.
    """
    if " ".join(mnemonic.split()) != mnemonic:
        raise WhitespaceError("Mnemonic contains extra or non-space whitespace")


def check_mnemonic(mnemonic: str) -> None:
    """
    Validate a user-supplied phrase.

    Raises:
        WhitespaceError: If the phrase is not in canonical single-space form.
        InvalidMnemonicError: If BIP-39 validation fails.
    """
    if not isinstance(mnemonic, str):
        raise InvalidMnemonicError("Mnemonic must be a string")
    check_whitespace(mnemonic)
    if not validate_mnemonic(mnemonic):
        raise InvalidMnemonicError("Invalid mnemonic: unknown word, bad word count or checksum")


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """The 64-byte BIP-39 seed."""
    return Mnemonic.to_seed(mnemonic, passphrase=passphrase)


def derivation_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """The wallet derivation seed: the first SEED_SIZE bytes of the BIP-39 seed."""
    return mnemonic_to_seed(mnemonic, passphrase)[:SEED_SIZE]
