"""
Key sources - where wallet keys come from.

SoftwareKeySource derives full keypairs from a seed. HardwareKeySource asks
a device for public keys and never sees a private key; signing is sent
back to the device.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from .derivation import PUBLIC_KEY_SIZE, SEED_SIZE, derive_child
from .errors import DeviceUnavailableError, InvalidSeedError, WalletError
from .hdpath import HDPath
from .keys import HardwareKey, KeyPair, SoftwareKey

logger = logging.getLogger(__name__)


class HardwareDevice(ABC):
    """
    The capability a hardware wallet exposes to the wallet core.

    Transport (USB HID, emulator socket, ...) is the implementation's
    business. Implementations raise DeviceUnavailableError when the device
    cannot be reached or the user declines on the device.
    """

    @property
    @abstractmethod
    def device_id(self) -> str:
        """Stable identifier recorded on keys that live on this device."""

    @abstractmethod
    def get_public_key(self, path: HDPath, confirm_on_device: bool = False) -> bytes:
        """Return the 32-byte public key at `path`."""

    @abstractmethod
    def sign(self, path: HDPath, message: bytes) -> bytes:
        """Sign `message` with the key at `path`, returning the signature."""


class KeySource(ABC):
    """Produces keypairs for paths and signs with them."""

    @abstractmethod
    def derive(self, path: HDPath, display_name: str = "") -> KeyPair:
        """Return the keypair at a fully hardened path."""

    @abstractmethod
    def sign(self, keypair: KeyPair, message: bytes) -> bytes:
        """Sign `message` with `keypair`."""


class SoftwareKeySource(KeySource):
    """Keys derived in memory from a 32-byte seed."""

    def __init__(self, seed: bytes):
        if len(seed) != SEED_SIZE:
            raise InvalidSeedError(f"Invalid seed length: expected {SEED_SIZE} bytes, got {len(seed)}")
        self._seed = bytes(seed)

    def derive(self, path: HDPath, display_name: str = "") -> KeyPair:
        return derive_child(self._seed, path, display_name)

    def sign(self, keypair: KeyPair, message: bytes) -> bytes:
        if not isinstance(keypair.key, SoftwareKey):
            raise WalletError(f"Key at {keypair.path} lives on a hardware device")
        return keypair.key.sign(message)


class HardwareKeySource(KeySource):
    """Public keys from a hardware device; signing stays on the device."""

    def __init__(self, device: HardwareDevice, confirm_on_device: bool = False):
        self.device = device
        self.confirm_on_device = confirm_on_device

    def request_public_key(self, path: HDPath, confirm_on_device: bool = None) -> bytes:
        """
        Ask the device for the public key at `path`.

        Raises:
            NotHardenedError: If the path has an unhardened segment.
            DeviceUnavailableError: If the device cannot be reached, the user
                declines, or the device answers with a malformed key.
        """
        path.require_hardened()
        if confirm_on_device is None:
            confirm_on_device = self.confirm_on_device
        try:
            public_key = self.device.get_public_key(path, confirm_on_device)
        except DeviceUnavailableError:
            raise
        except OSError as e:
            raise DeviceUnavailableError(f"Hardware device unreachable: {e}") from e

        if not isinstance(public_key, (bytes, bytearray)) or len(public_key) != PUBLIC_KEY_SIZE:
            raise DeviceUnavailableError(f"Device returned an invalid public key for {path}")
        return bytes(public_key)

    def derive(self, path: HDPath, display_name: str = "") -> KeyPair:
        public_key = self.request_public_key(path)
        logger.debug(f"Received public key for {path} from device {self.device.device_id}")
        return KeyPair(
            display_name=display_name,
            created=datetime.now(timezone.utc).isoformat(),
            path=path,
            public_key=public_key,
            key=HardwareKey(device_id=self.device.device_id),
        )

    def sign(self, keypair: KeyPair, message: bytes) -> bytes:
        if not isinstance(keypair.key, HardwareKey):
            raise WalletError(f"Key at {keypair.path} is not a hardware key")
        if keypair.key.device_id != self.device.device_id:
            raise DeviceUnavailableError(
                f"Key at {keypair.path} belongs to device {keypair.key.device_id!r}, "
                f"connected device is {self.device.device_id!r}"
            )
        try:
            return self.device.sign(keypair.path, message)
        except DeviceUnavailableError:
            raise
        except OSError as e:
            raise DeviceUnavailableError(f"Hardware device unreachable: {e}") from e
