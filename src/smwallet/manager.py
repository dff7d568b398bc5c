"""
Wallet Store - wallet files on disk.

Each wallet is one encrypted JSON container named <name>.json in the
wallet directory. Files are written with owner-only permissions; new
wallets are created exclusively so an existing file is never overwritten.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .errors import WalletError, WalletExistsError

logger = logging.getLogger(__name__)


# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) to protect wallet data.
    No-op on Windows (NTFS uses ACLs, not Unix permissions).
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError as e:
            # Don't fail the save if chmod fails
            logger.warning(f"Could not restrict permissions on {filepath}: {e}")


class WalletStore:
    """
    Stores exported wallet containers by name.

    The store never sees a password or decrypted secrets; it moves the
    container text produced by smwallet.crypto to and from disk.

    Usage:
        store = WalletStore(get_wallet_dir())
        store.create("main", export_wallet(wallet, password))
        wallet = open_wallet(store.load("main"), password)
    """

    def __init__(self, wallet_dir: str | Path):
        self.wallet_dir = Path(wallet_dir)
        self.wallet_dir.mkdir(parents=True, exist_ok=True)

    def wallet_path(self, name: str) -> Path:
        """Get the file path for a wallet by name."""
        if not name or Path(name).name != name or name.startswith("."):
            raise WalletError(f"Invalid wallet name: {name!r}")
        return self.wallet_dir / f"{name}.json"

    def exists(self, name: str) -> bool:
        return self.wallet_path(name).exists()

    def list_wallets(self) -> list[str]:
        """List all wallet files (by name)."""
        return sorted(f.stem for f in self.wallet_dir.glob("*.json"))

    def create(self, name: str, container: str) -> Path:
        """
        Write a new wallet file.

        Raises:
            WalletExistsError: If a wallet with this name already exists.
        """
        path = self.wallet_path(name)
        try:
            # Exclusive create: fails rather than overwriting
            with open(path, "x", encoding="utf-8") as f:
                f.write(container)
        except FileExistsError as e:
            raise WalletExistsError(f"Wallet '{name}' already exists") from e
        set_secure_permissions(path)
        logger.info(f"Created wallet file {path}")
        return path

    def save(self, name: str, container: str) -> Path:
        """Replace a wallet file atomically (write to temp file, then rename)."""
        path = self.wallet_path(name)
        temp_path = path.with_suffix('.tmp')
        with open(temp_path, 'w', encoding="utf-8") as f:
            f.write(container)
        set_secure_permissions(temp_path)

        temp_path.replace(path)
        set_secure_permissions(path)
        logger.debug(f"Saved wallet file {path}")
        return path

    def load(self, name: str) -> str:
        """
        Read a wallet container.

        Raises:
            FileNotFoundError: If the wallet doesn't exist.
        """
        with open(self.wallet_path(name), 'r', encoding="utf-8") as f:
            return f.read()

    def delete(self, name: str) -> Optional[Path]:
        """Remove a wallet file. Returns its path, or None if it didn't exist."""
        path = self.wallet_path(name)
        if not path.exists():
            return None
        path.unlink()
        logger.info(f"Deleted wallet file {path}")
        return path
