"""
Fixtures used in the tests
"""
import pytest

from smwallet.derivation import derive_child
from smwallet.errors import DeviceUnavailableError
from smwallet.hdpath import HDPath
from smwallet.keysource import HardwareDevice
from smwallet.wallet import Wallet

__all__ = ["KNOWN_MNEMONIC", "FAST_ITERATIONS", "FakeDevice"]


KNOWN_MNEMONIC = "film theme cheese broken kingdom destroy inch ready wear inspire shove pudding"

# Keeps PBKDF2 fast in tests. Exporting at this count needs the fast_kdf
# fixture; opening such a file logs a low-iteration warning
FAST_ITERATIONS = 1000


class FakeDevice(HardwareDevice):
    """A hardware device emulated in software from a fixed seed."""

    def __init__(self, seed: bytes = bytes(range(32)), device_id: str = "fake-ledger-1"):
        self._seed = seed
        self._device_id = device_id
        self.available = True
        self.requests: list[tuple[str, bool]] = []
        self.signed: list[tuple[str, bytes]] = []

    @property
    def device_id(self) -> str:
        return self._device_id

    def get_public_key(self, path: HDPath, confirm_on_device: bool = False) -> bytes:
        if not self.available:
            raise DeviceUnavailableError("device unplugged")
        self.requests.append((str(path), confirm_on_device))
        return derive_child(self._seed, path).public_key

    def sign(self, path: HDPath, message: bytes) -> bytes:
        if not self.available:
            raise DeviceUnavailableError("device unplugged")
        self.signed.append((str(path), message))
        return derive_child(self._seed, path).key.sign(message)

    def expected_public_key(self, path: HDPath) -> bytes:
        return derive_child(self._seed, path).public_key


@pytest.fixture()
def device():
    return FakeDevice()


@pytest.fixture()
def known_wallet():
    return Wallet.from_mnemonic(KNOWN_MNEMONIC, account_count=3, genesis_id="9eebff023abb17ccb775c602daade8ed708f0a50")


@pytest.fixture()
def hardware_wallet(device):
    return Wallet.from_hardware(device, account_count=2)


@pytest.fixture()
def app_home(tmp_path, monkeypatch):
    """Point the application directory at a temporary folder."""
    home = tmp_path / "smhome"
    monkeypatch.setenv("SMWALLET_HOME", str(home))
    return home


@pytest.fixture()
def fast_kdf(monkeypatch):
    """Allow exports at FAST_ITERATIONS."""
    monkeypatch.setattr("smwallet.crypto.MIN_EXPORT_ITERATIONS", FAST_ITERATIONS)
    return FAST_ITERATIONS
