"""
Wallet errors.

Every failure in the wallet core is raised as a WalletError subclass.
WalletError derives from ValueError so existing `except ValueError`
handlers keep catching wallet failures.
"""


class WalletError(ValueError):
    """Base class for all wallet core errors."""


class InvalidSeedError(WalletError):
    """Seed has the wrong length."""


class InvalidPathError(WalletError):
    """HD path string or segment is malformed."""


class NotHardenedError(InvalidPathError):
    """HD path contains an unhardened segment."""


class InvalidMnemonicError(WalletError):
    """Mnemonic failed BIP-39 word list or checksum validation."""


class WhitespaceError(InvalidMnemonicError):
    """Mnemonic contains whitespace other than single spaces between words."""


class TooManyAccountsError(WalletError):
    """Requested more accounts than a wallet may hold."""


class DeviceUnavailableError(WalletError):
    """Hardware device is unreachable or the user declined on the device."""


class ParseError(WalletError):
    """Wallet container or its decrypted contents are malformed."""


class DecryptionError(WalletError):
    """Authentication failed: wrong password or corrupted wallet file."""


class WalletExistsError(WalletError):
    """Refusing to overwrite an existing wallet file."""
