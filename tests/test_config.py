"""
Tests for settings, path helpers and logging configuration
"""
import json
import logging
from contextlib import contextmanager
from datetime import datetime

import pytest

from smwallet.config import Settings, configure_from_settings, load_settings, save_settings
from smwallet.crypto import PBKDF2_ITERATIONS
from smwallet.errors import WalletError
from smwallet.logging import cleanup_old_logs, configure_logging, get_log_file_path
from smwallet.utils import get_app_dir, get_default_wallet_path, get_logs_dir, get_settings_path, get_wallet_dir


@contextmanager
def bare_root_logger():
    """Root logger without handlers, restored on exit (pytest attaches its own while a test runs)."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    root.handlers = []
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = handlers
        root.setLevel(level)


def _flush(root):
    for handler in root.handlers:
        handler.flush()


# --- Paths --- #

def test_paths_follow_env(app_home):
    assert get_app_dir() == app_home
    assert app_home.is_dir()
    assert get_wallet_dir() == app_home / "wallets"
    assert get_default_wallet_path() == app_home / "wallets" / "wallet.json"
    assert get_settings_path() == app_home / "settings.json"
    assert get_logs_dir() == app_home / "logs"
    assert get_logs_dir().is_dir()


# --- Settings --- #

def test_default_settings(app_home):
    settings = load_settings()
    assert settings == Settings()
    assert settings.network == "mainnet"
    assert settings.pbkdf2_iterations == PBKDF2_ITERATIONS
    assert settings.network_config.hrp == "sm"
    assert settings.resolve_wallet_dir() == app_home / "wallets"


def test_save_and_load_settings(app_home):
    settings = Settings(network="testnet", log_level="DEBUG", wallet_dir=str(app_home / "elsewhere"))
    save_settings(settings)
    loaded = load_settings()
    assert loaded == settings
    assert loaded.network_config.hrp == "stest"
    assert loaded.resolve_wallet_dir() == app_home / "elsewhere"


def test_unknown_keys_ignored(app_home):
    get_settings_path().write_text(json.dumps({"network": "testnet", "theme": "dark"}))
    assert load_settings() == Settings(network="testnet")


def test_corrupt_settings_fall_back(app_home, caplog):
    get_settings_path().write_text("{not json")
    with caplog.at_level(logging.WARNING, logger="smwallet.config"):
        assert load_settings() == Settings()
    assert any("Failed to load settings" in r.getMessage() for r in caplog.records)


def test_unknown_network(app_home):
    with pytest.raises(WalletError):
        Settings(network="nowhere").network_config


# --- Wallet key --- #

def test_wallet_key_uses_configured_iterations():
    key = Settings().wallet_key("pw", salt=bytes(16))
    assert key.iterations == PBKDF2_ITERATIONS
    assert key.salt == bytes(16)
    assert Settings(pbkdf2_iterations=300000).wallet_key("pw").iterations == 300000


def test_wallet_key_refuses_weak_configured_iterations(known_wallet):
    key = Settings(pbkdf2_iterations=1000).wallet_key("pw")
    with pytest.raises(WalletError):
        key.export(known_wallet)


# --- Logging --- #

def test_log_file_name(app_home):
    path = get_log_file_path(datetime(2024, 3, 9))
    assert path == app_home / "logs" / "smwallet-2024-03-09.log"


def test_configure_logging_to_file(app_home):
    log_file = get_log_file_path()
    with bare_root_logger() as root:
        configure_logging("debug", log_file)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("smwallet.test").info("opened wallet")
        _flush(root)
        assert "[INFO] smwallet.test: opened wallet" in log_file.read_text()

        # Second call is a no-op
        configure_logging(logging.ERROR)
        assert len(root.handlers) == 2


def test_configure_from_settings_console_only(app_home):
    with bare_root_logger() as root:
        configure_from_settings(Settings(log_level="WARNING"))
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
    assert not get_log_file_path().exists()


def test_configure_from_settings_to_file(app_home):
    with bare_root_logger() as root:
        configure_from_settings(Settings(log_level="DEBUG", log_to_file=True))
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("smwallet.test").debug("allocated address")
        _flush(root)
        assert "smwallet.test: allocated address" in get_log_file_path().read_text()


def test_cleanup_old_logs(app_home):
    logs = get_logs_dir()
    (logs / "smwallet-2000-01-01.log").write_text("old")
    (logs / "smwallet-not-a-date.log").write_text("?")
    get_log_file_path().write_text("today")

    assert cleanup_old_logs(30) == 1
    assert sorted(p.name for p in logs.iterdir()) == sorted(["smwallet-not-a-date.log", get_log_file_path().name])
