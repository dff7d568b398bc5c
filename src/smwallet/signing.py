"""
Signing Service - hands wallet keys to an external transaction builder.

The wallet core never encodes, parses or validates transactions. A
TransactionBuilder (backed by the ledger library) receives the principal's
public key, the payment fields and a signing callback, and returns an
opaque signed blob. The callback signs with the account's key: locally for
software keys, on the device for hardware keys.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from .errors import WalletError
from .wallet import Wallet

logger = logging.getLogger(__name__)


SignCallback = Callable[[bytes], bytes]


class TransactionBuilder(ABC):
    """Builds and signs a transaction for the ledger. Implemented outside the wallet core."""

    @abstractmethod
    def build(self, principal: bytes, destination: str, amount: int, nonce: int,
              sign: SignCallback) -> bytes:
        """
        Build a signed transaction.

        Args:
            principal: 32-byte public key of the spending account
            destination: Recipient address
            amount: Amount in the ledger's smallest unit
            nonce: Account nonce
            sign: Signs the transaction body and returns the signature

        Returns:
            The signed transaction as opaque bytes
        """


@dataclass
class SignedTransaction:
    """Record of a transaction signed by this service."""
    account: int
    principal: str          # bech32 address of the signing account
    destination: str
    amount: int
    nonce: int
    blob: bytes = field(repr=False)
    signed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return {
            "account": self.account,
            "principal": self.principal,
            "destination": self.destination,
            "amount": self.amount,
            "nonce": self.nonce,
            "blob": self.blob.hex(),
            "signed_at": self.signed_at,
        }


class SigningService:
    """
    Signs transactions with wallet accounts.

    Usage:
        service = SigningService(wallet, builder)
        signed = service.sign_transaction(0, "sm1qqqq...", 1_000, nonce=3)
        broadcast(signed.blob)
    """

    def __init__(self, wallet: Wallet, builder: TransactionBuilder):
        self.wallet = wallet
        self.builder = builder
        self._history: list[SignedTransaction] = []

    def sign_transaction(self, account: int, destination: str, amount: int,
                         nonce: int) -> SignedTransaction:
        """
        Build and sign a transaction from stored account `account`.

        Raises:
            WalletError: If the account doesn't exist or the amount/nonce is invalid.
            DeviceUnavailableError: If the key is on a device that isn't attached.
        """
        accounts = self.wallet.accounts
        if not 0 <= account < len(accounts):
            raise WalletError(f"No account {account} in wallet (has {len(accounts)})")
        if amount < 0:
            raise WalletError(f"Amount must not be negative, got {amount}")
        if nonce < 0:
            raise WalletError(f"Nonce must not be negative, got {nonce}")

        keypair = accounts[account]

        def sign(message: bytes) -> bytes:
            return self.wallet.sign(account, message)

        blob = self.builder.build(keypair.public_key, destination, amount, nonce, sign)
        signed = SignedTransaction(
            account=account,
            principal=self.wallet.account_address(account),
            destination=destination,
            amount=amount,
            nonce=nonce,
            blob=bytes(blob),
        )
        self._history.append(signed)
        logger.info(f"Signed transaction from account {account} ({signed.principal}) "
                    f"to {destination}, amount {amount}, nonce {nonce}")
        return signed

    @property
    def history(self) -> list[SignedTransaction]:
        return self._history.copy()
