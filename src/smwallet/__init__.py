"""
smwallet - Spacemesh wallet core.

Contains:
- HDPath: hardened BIP-44 style paths (m/44'/540'/...)
- Key derivation: SLIP-0010 ed25519 keys from a seed
- Key sources: software (seed in memory) and hardware (device) keys
- Wallet: accounts, address allocation, signing
- WalletKey: PBKDF2 + AES-GCM encrypted wallet container
- WalletStore: wallet files on disk
- SigningService: transaction signing through an external builder
"""

from .errors import (
    WalletError,
    InvalidSeedError,
    InvalidPathError,
    NotHardenedError,
    InvalidMnemonicError,
    WhitespaceError,
    TooManyAccountsError,
    DeviceUnavailableError,
    ParseError,
    DecryptionError,
    WalletExistsError,
)
from .hdpath import (
    HDPath,
    parse_path,
    format_path,
    is_fully_hardened,
    default_path,
    account_path,
)
from .derivation import (
    DERIVATION_SCHEME,
    SEED_SIZE,
    derive_master,
    derive_child,
    keypair_from_private_seed,
)
from .keys import KeyPair, SoftwareKey, HardwareKey
from .keysource import KeySource, SoftwareKeySource, HardwareKeySource, HardwareDevice
from .wallet import (
    Wallet,
    WalletMetadata,
    WalletSecrets,
    WalletAddress,
    MAX_ACCOUNTS_PER_WALLET,
)
from .crypto import WalletKey, export_wallet, open_wallet, PBKDF2_ITERATIONS
from .networks import NetworkConfig, NETWORKS, compute_address, decode_address, get_network
from .manager import WalletStore
from .signing import TransactionBuilder, SigningService, SignedTransaction
from .config import Settings, configure_from_settings, load_settings, save_settings

__all__ = [
    # Errors
    "WalletError",
    "InvalidSeedError",
    "InvalidPathError",
    "NotHardenedError",
    "InvalidMnemonicError",
    "WhitespaceError",
    "TooManyAccountsError",
    "DeviceUnavailableError",
    "ParseError",
    "DecryptionError",
    "WalletExistsError",
    # Paths
    "HDPath",
    "parse_path",
    "format_path",
    "is_fully_hardened",
    "default_path",
    "account_path",
    # Derivation
    "DERIVATION_SCHEME",
    "SEED_SIZE",
    "derive_master",
    "derive_child",
    "keypair_from_private_seed",
    # Keys
    "KeyPair",
    "SoftwareKey",
    "HardwareKey",
    "KeySource",
    "SoftwareKeySource",
    "HardwareKeySource",
    "HardwareDevice",
    # Wallet
    "Wallet",
    "WalletMetadata",
    "WalletSecrets",
    "WalletAddress",
    "MAX_ACCOUNTS_PER_WALLET",
    # Crypto
    "WalletKey",
    "export_wallet",
    "open_wallet",
    "PBKDF2_ITERATIONS",
    # Networks
    "NetworkConfig",
    "NETWORKS",
    "compute_address",
    "decode_address",
    "get_network",
    # Storage, signing, settings
    "WalletStore",
    "TransactionBuilder",
    "SigningService",
    "SignedTransaction",
    "Settings",
    "load_settings",
    "save_settings",
    "configure_from_settings",
]
