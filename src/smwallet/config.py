"""
Settings - user configuration persisted as settings.json.

Unknown keys are ignored and missing keys fall back to defaults, so older
and newer settings files both load.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from .crypto import PBKDF2_ITERATIONS, WalletKey
from .logging import configure_logging, get_log_file_path
from .manager import set_secure_permissions
from .networks import DEFAULT_NETWORK, NetworkConfig, get_network
from .utils import get_settings_path, get_wallet_dir

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    network: str = DEFAULT_NETWORK
    pbkdf2_iterations: int = PBKDF2_ITERATIONS
    log_level: str = "INFO"
    log_to_file: bool = False
    wallet_dir: Optional[str] = None    # None = <app dir>/wallets

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def network_config(self) -> NetworkConfig:
        return get_network(self.network)

    def resolve_wallet_dir(self) -> Path:
        if self.wallet_dir:
            return Path(self.wallet_dir).expanduser()
        return get_wallet_dir()

    def wallet_key(self, password: str, salt: Optional[bytes] = None) -> WalletKey:
        """WalletKey that exports with the configured iteration count."""
        return WalletKey(password, salt, self.pbkdf2_iterations)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    settings_path = Path(path) if path else get_settings_path()
    if not settings_path.exists():
        return Settings()
    try:
        with open(settings_path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings must be a JSON object")
        return Settings.from_dict(data)
    except (OSError, ValueError, TypeError) as e:
        logger.warning(f"Failed to load settings: {e}")
        return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> None:
    """Save settings to disk (owner read/write only)."""
    settings_path = Path(path) if path else get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_path, 'w') as f:
        json.dump(settings.to_dict(), f, indent=2)
    set_secure_permissions(settings_path)


def configure_from_settings(settings: Settings) -> None:
    """Set up logging from the log_level and log_to_file settings."""
    log_file = get_log_file_path() if settings.log_to_file else None
    configure_logging(settings.log_level, log_file)
