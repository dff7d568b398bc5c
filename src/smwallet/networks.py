"""
Networks - Spacemesh network configurations and address encoding.

Addresses are for display only; the wallet never makes security decisions
based on them.
"""

from dataclasses import dataclass

from bech32 import bech32_decode, bech32_encode, convertbits

from .errors import WalletError


# Address layout: 4 reserved zero bytes followed by 20 key bytes
ADDRESS_RESERVED_SIZE = 4
ADDRESS_KEY_SIZE = 20
ADDRESS_SIZE = ADDRESS_RESERVED_SIZE + ADDRESS_KEY_SIZE


# ============================================
# Network Configurations
# ============================================

@dataclass
class NetworkConfig:
    """Configuration for a Spacemesh network."""
    name: str
    display_name: str
    hrp: str                 # bech32 human-readable prefix
    genesis_id: str          # 20-byte genesis id (hex), "" if not pinned
    is_testnet: bool


NETWORKS = {
    "mainnet": NetworkConfig(
        name="mainnet",
        display_name="Spacemesh Mainnet",
        hrp="sm",
        genesis_id="",
        is_testnet=False,
    ),
    "testnet": NetworkConfig(
        name="testnet",
        display_name="Spacemesh Testnet",
        hrp="stest",
        genesis_id="",
        is_testnet=True,
    ),
}

DEFAULT_NETWORK = "mainnet"


def get_network(name: str) -> NetworkConfig:
    """Look up a network by name."""
    try:
        return NETWORKS[name]
    except KeyError:
        raise WalletError(f"Unknown network: {name!r}. Known: {', '.join(NETWORKS)}") from None


# ============================================
# Addresses
# ============================================

def address_bytes(public_key: bytes) -> bytes:
    """The 24-byte address for a single-key account."""
    if len(public_key) != 32:
        raise WalletError(f"Public key must be 32 bytes, got {len(public_key)}")
    return bytes(ADDRESS_RESERVED_SIZE) + public_key[:ADDRESS_KEY_SIZE]


def compute_address(public_key: bytes, hrp: str = NETWORKS[DEFAULT_NETWORK].hrp) -> str:
    """Bech32 address for `public_key` on the network with prefix `hrp`."""
    data = convertbits(address_bytes(public_key), 8, 5)
    return bech32_encode(hrp, data)


def decode_address(address: str, hrp: str = None) -> bytes:
    """
    Decode a bech32 address back to its 24 bytes.

    Raises:
        WalletError: If the checksum, prefix, or length is wrong.
    """
    decoded_hrp, data = bech32_decode(address)
    if decoded_hrp is None or data is None:
        raise WalletError(f"Invalid address: {address!r}")
    if hrp is not None and decoded_hrp != hrp:
        raise WalletError(f"Address prefix {decoded_hrp!r} does not match network prefix {hrp!r}")

    raw = convertbits(data, 5, 8, False)
    if raw is None or len(raw) != ADDRESS_SIZE:
        raise WalletError(f"Invalid address length: {address!r}")
    return bytes(raw)
