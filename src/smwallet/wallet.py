"""
Wallet - in-memory wallet model.

A wallet is metadata plus secrets: an optional mnemonic, an optional master
keypair and an ordered list of account keypairs. Accounts live under
m/44'/540'/0'/0' in increasing index order and are never renumbered.
Account i sits at index i unless fresh addresses were allocated on that
chain in between; add_account then skips past them, so a stored account
and an allocated address never share an index.

Usage:
    # New wallet with three accounts
    wallet = Wallet.new_random(3)
    phrase = wallet.mnemonic  # Store securely offline

    # Restore from a backed-up phrase
    wallet = Wallet.from_mnemonic(phrase, 3)

    # Hardware wallet: public keys only
    wallet = Wallet.from_hardware(device, 1)

    # Fresh receive address on account 0, chain 0
    addr = wallet.allocate_next_address()
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .derivation import DERIVATION_SCHEME, derive_master
from .errors import (
    DeviceUnavailableError,
    InvalidPathError,
    ParseError,
    TooManyAccountsError,
    WalletError,
)
from .hdpath import HARDENED_OFFSET, account_path, chain_path
from .keys import KeyPair
from .keysource import HardwareDevice, HardwareKeySource, KeySource, SoftwareKeySource
from .networks import DEFAULT_NETWORK, NETWORKS, compute_address
from .seed_phrase import check_mnemonic, derivation_seed, generate_mnemonic

logger = logging.getLogger(__name__)


MAX_ACCOUNTS_PER_WALLET = 128

DEFAULT_WALLET_NAME = "Main Wallet"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_account_count(account_count: int) -> None:
    if not isinstance(account_count, int) or account_count < 0:
        raise WalletError(f"Account count must be a non-negative integer, got {account_count!r}")
    if account_count > MAX_ACCOUNTS_PER_WALLET:
        raise TooManyAccountsError(
            f"Requested {account_count} accounts, a wallet holds at most {MAX_ACCOUNTS_PER_WALLET}"
        )


# ============================================
# Data Classes
# ============================================

@dataclass
class WalletMetadata:
    """Unencrypted wallet metadata (stored in the clear in the wallet file)."""
    display_name: str = DEFAULT_WALLET_NAME
    created: str = field(default_factory=_now)
    genesis_id: str = ""
    derivation: str = DERIVATION_SCHEME

    def to_dict(self) -> dict:
        return {
            "displayName": self.display_name,
            "created": self.created,
            "genesisID": self.genesis_id,
            "derivation": self.derivation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WalletMetadata":
        if not isinstance(data, dict):
            raise ParseError("Wallet metadata must be an object")
        return cls(
            display_name=str(data.get("displayName", "")),
            created=str(data.get("created", "")),
            genesis_id=str(data.get("genesisID", "")),
            derivation=str(data.get("derivation") or DERIVATION_SCHEME),
        )


@dataclass
class WalletSecrets:
    """Everything that must only ever be stored encrypted."""
    mnemonic: str = ""                          # "" for hardware wallets
    master_keypair: Optional[KeyPair] = None
    accounts: list[KeyPair] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mnemonic": self.mnemonic,
            "masterKeypair": self.master_keypair.to_dict() if self.master_keypair else None,
            "accounts": [a.to_dict() for a in self.accounts],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WalletSecrets":
        if not isinstance(data, dict):
            raise ParseError("Wallet secrets must be an object")
        master = data.get("masterKeypair")
        accounts = data.get("accounts") or []
        if not isinstance(accounts, list):
            raise ParseError("Wallet accounts must be a list")
        if len(accounts) > MAX_ACCOUNTS_PER_WALLET:
            raise ParseError(f"Wallet holds {len(accounts)} accounts, limit is {MAX_ACCOUNTS_PER_WALLET}")
        mnemonic = data.get("mnemonic") or ""
        if not isinstance(mnemonic, str):
            raise ParseError("Wallet mnemonic must be a string")
        return cls(
            mnemonic=mnemonic,
            master_keypair=KeyPair.from_dict(master) if master else None,
            accounts=[KeyPair.from_dict(a) for a in accounts],
        )


@dataclass
class WalletAddress:
    """An address handed out by the wallet."""
    path: str       # e.g. "m/44'/540'/0'/0'/3'"
    address: str    # bech32 address
    label: str      # User-friendly name


class _AccountSlot:
    """Per-account allocation state: one lock, one counter per chain."""

    def __init__(self):
        self.lock = threading.Lock()
        self.next_index: dict[int, int] = {}    # chain -> next free index

    def chain_counter(self, chain: int) -> Optional[int]:
        return self.next_index.get(chain)

    def set_chain_counter(self, chain: int, value: int) -> None:
        self.next_index[chain] = value


# ============================================
# Wallet Class
# ============================================

class Wallet:
    """
    A wallet: metadata, secrets, and the key source that produced them.

    Construct with new_random(), from_mnemonic() or from_hardware(); an
    exported wallet is reconstructed with smwallet.crypto.open_wallet().
    """

    def __init__(self, meta: WalletMetadata, secrets: WalletSecrets,
                 key_source: Optional[KeySource] = None,
                 hrp: str = NETWORKS[DEFAULT_NETWORK].hrp):
        """Initialize wallet (internal use - use the constructors above)."""
        self.meta = meta
        self._secrets: Optional[WalletSecrets] = secrets
        self._key_source = key_source
        self.hrp = hrp
        self._arena: dict[int, _AccountSlot] = {}     # account number -> slot
        self._arena_lock = threading.Lock()

        if self._key_source is None and secrets.mnemonic:
            self._key_source = SoftwareKeySource(derivation_seed(secrets.mnemonic))

    # ============================================
    # Constructors
    # ============================================

    @classmethod
    def new_random(cls, account_count: int = 1, display_name: str = DEFAULT_WALLET_NAME,
                   genesis_id: str = "", hrp: str = NETWORKS[DEFAULT_NETWORK].hrp) -> "Wallet":
        """
        Create a wallet from a fresh 24-word mnemonic.

        Raises:
            TooManyAccountsError: If account_count exceeds the wallet limit.
        """
        _check_account_count(account_count)
        return cls._from_checked_mnemonic(generate_mnemonic(), account_count,
                                          display_name, genesis_id, hrp)

    @classmethod
    def from_mnemonic(cls, mnemonic: str, account_count: int = 1,
                      display_name: str = DEFAULT_WALLET_NAME, genesis_id: str = "",
                      hrp: str = NETWORKS[DEFAULT_NETWORK].hrp) -> "Wallet":
        """
        Restore a wallet from an existing BIP-39 mnemonic.

        Raises:
            WhitespaceError: If the phrase is not single-space separated.
            InvalidMnemonicError: If BIP-39 validation fails.
            TooManyAccountsError: If account_count exceeds the wallet limit.
        """
        check_mnemonic(mnemonic)
        _check_account_count(account_count)
        return cls._from_checked_mnemonic(mnemonic, account_count, display_name, genesis_id, hrp)

    @classmethod
    def _from_checked_mnemonic(cls, mnemonic: str, account_count: int,
                               display_name: str, genesis_id: str, hrp: str) -> "Wallet":
        seed = derivation_seed(mnemonic)
        source = SoftwareKeySource(seed)
        secrets = WalletSecrets(
            mnemonic=mnemonic,
            master_keypair=derive_master(seed),
            accounts=_derive_accounts(source, account_count),
        )
        meta = WalletMetadata(display_name=display_name, genesis_id=genesis_id)
        logger.info(f"Created wallet '{display_name}' with {account_count} account(s)")
        return cls(meta, secrets, source, hrp)

    @classmethod
    def from_hardware(cls, device: HardwareDevice, account_count: int = 1,
                      display_name: str = DEFAULT_WALLET_NAME, genesis_id: str = "",
                      confirm_on_device: bool = False,
                      hrp: str = NETWORKS[DEFAULT_NETWORK].hrp) -> "Wallet":
        """
        Build a wallet from public keys held on a hardware device.

        The wallet has no mnemonic, no master keypair and no private keys.

        Raises:
            TooManyAccountsError: If account_count exceeds the wallet limit.
            DeviceUnavailableError: If the device cannot be queried.
        """
        _check_account_count(account_count)
        source = HardwareKeySource(device, confirm_on_device)
        secrets = WalletSecrets(accounts=_derive_accounts(source, account_count))
        meta = WalletMetadata(display_name=display_name, genesis_id=genesis_id)
        logger.info(f"Created hardware wallet '{display_name}' with {account_count} account(s) "
                    f"from device {device.device_id}")
        return cls(meta, secrets, source, hrp)

    # ============================================
    # Accessors
    # ============================================

    @property
    def secrets(self) -> WalletSecrets:
        if self._secrets is None:
            raise WalletError("Wallet is locked")
        return self._secrets

    @property
    def mnemonic(self) -> str:
        """The seed phrase (sensitive - only show during backup!)."""
        return self.secrets.mnemonic

    @property
    def accounts(self) -> list[KeyPair]:
        return self.secrets.accounts.copy()

    @property
    def master_keypair(self) -> Optional[KeyPair]:
        return self.secrets.master_keypair

    @property
    def is_hardware(self) -> bool:
        return not self.secrets.mnemonic and any(a.is_hardware for a in self.secrets.accounts)

    @property
    def key_source(self) -> Optional[KeySource]:
        return self._key_source

    def account_address(self, index: int) -> str:
        """Address of stored account `index`."""
        return compute_address(self.secrets.accounts[index].public_key, self.hrp)

    def attach_device(self, device: HardwareDevice, confirm_on_device: bool = False) -> None:
        """Reconnect the hardware device of a wallet reopened from disk."""
        self._key_source = HardwareKeySource(device, confirm_on_device)

    # ============================================
    # Accounts
    # ============================================

    def add_account(self, display_name: str = None) -> KeyPair:
        """
        Derive the next sequential account in memory.

        Shares the account 0 chain 0 counter with allocate_next_address, so
        an index already handed out as a fresh address is skipped. The wallet
        file is not touched; export the wallet again to persist.

        Raises:
            TooManyAccountsError: If the wallet is already full.
        """
        secrets = self.secrets
        if len(secrets.accounts) >= MAX_ACCOUNTS_PER_WALLET:
            raise TooManyAccountsError(f"Wallet already holds {MAX_ACCOUNTS_PER_WALLET} accounts")

        source = self._require_source()
        slot = self._slot(0)
        with slot.lock:
            index = max(len(secrets.accounts), self._next_free_index(slot, 0, 0))
            if index >= HARDENED_OFFSET:
                raise InvalidPathError(f"Index space exhausted under {chain_path(0, 0)}")

            keypair = source.derive(account_path(index), display_name or f"Account {index}")
            secrets.accounts.append(keypair)
            slot.set_chain_counter(0, index + 1)
        return keypair

    def sign(self, index: int, message: bytes) -> bytes:
        """Sign with stored account `index`, on the device for hardware keys."""
        return self._require_source().sign(self.secrets.accounts[index], message)

    def allocate_next_address(self, account: int = 0, chain: int = 0,
                              label: str = "") -> WalletAddress:
        """
        Hand out the next unused hardened index under m/44'/540'/account'/chain'.

        Each account has its own lock held across read, derive and increment,
        so concurrent callers on one account never get the same index and
        never skip one, while different accounts do not contend. Counters
        start after any stored accounts already under the same prefix; the
        account 0 chain 0 counter is shared with add_account.

        Raises:
            InvalidPathError: If account, chain or the next index is out of range.
            DeviceUnavailableError: For a hardware wallet with no device attached.
        """
        prefix = chain_path(account, chain)
        source = self._require_source()
        slot = self._slot(account)

        with slot.lock:
            index = self._next_free_index(slot, account, chain)
            if index >= HARDENED_OFFSET:
                raise InvalidPathError(f"Index space exhausted under {prefix}")

            keypair = source.derive(account_path(index, account, chain))
            slot.set_chain_counter(chain, index + 1)

        return WalletAddress(
            path=str(keypair.path),
            address=compute_address(keypair.public_key, self.hrp),
            label=label or f"Account {account} chain {chain} #{index}",
        )

    def _slot(self, account: int) -> _AccountSlot:
        if not 0 <= account < HARDENED_OFFSET:
            raise InvalidPathError(f"Account index out of range: {account}")
        with self._arena_lock:
            return self._arena.setdefault(account, _AccountSlot())

    def _next_free_index(self, slot: _AccountSlot, account: int, chain: int) -> int:
        """Counter for `chain`, seeded past stored accounts on first use. Caller holds slot.lock."""
        index = slot.chain_counter(chain)
        if index is None:
            prefix = chain_path(account, chain).segments
            stored = [a.path.segments[4] - HARDENED_OFFSET
                      for a in self.secrets.accounts
                      if len(a.path.segments) == 5 and a.path.segments[:4] == prefix]
            index = max(stored) + 1 if stored else 0
        return index

    def _require_source(self) -> KeySource:
        if self._key_source is not None:
            return self._key_source
        if self._secrets is not None and any(a.is_hardware for a in self._secrets.accounts):
            raise DeviceUnavailableError("No hardware device attached to this wallet")
        raise WalletError("Wallet has no key source (locked or empty)")

    # ============================================
    # Security: Memory Cleanup
    # ============================================

    def lock(self) -> None:
        """
        Lock the wallet, dropping secrets and the seed from memory.

        After locking, the wallet cannot derive or sign until reopened.
        """
        self._secrets = None
        self._key_source = None


def _derive_accounts(source: KeySource, account_count: int) -> list[KeyPair]:
    return [source.derive(account_path(i), f"Account {i}") for i in range(account_count)]
