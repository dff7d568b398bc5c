"""
Shared utility functions for smwallet.

Contains path helpers used across the package. Everything lives under the
application directory: $SMWALLET_HOME if set, else ~/.spacemesh.
"""

import os
from pathlib import Path


APP_DIR_ENV = "SMWALLET_HOME"
DEFAULT_APP_DIR_NAME = ".spacemesh"


def get_app_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        app_dir = Path(override).expanduser()
    else:
        app_dir = Path.home() / DEFAULT_APP_DIR_NAME

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_wallet_dir() -> Path:
    """Get the wallet storage directory."""
    return get_app_dir() / "wallets"


def get_default_wallet_path() -> Path:
    """Get path to default wallet file."""
    return get_wallet_dir() / "wallet.json"


def get_settings_path() -> Path:
    """Get path to settings file."""
    return get_app_dir() / "settings.json"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    logs_dir = get_app_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir
