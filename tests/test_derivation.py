"""
Tests for SLIP-0010 ed25519 key derivation
"""
import pytest

from smwallet.derivation import (
    PRIVATE_KEY_SIZE,
    PUBLIC_KEY_SIZE,
    SEED_SIZE,
    derive_child,
    derive_master,
    keypair_from_private_seed,
    public_key_from_private_seed,
    slip10_derive,
    slip10_master,
)
from smwallet.errors import InvalidSeedError, NotHardenedError
from smwallet.hdpath import HDPath, account_path, default_path, parse_path
from smwallet.seed_phrase import derivation_seed
from smwallet.wallet import Wallet
from tests.conftest import KNOWN_MNEMONIC

# SLIP-0010 test vector 1 for ed25519
VECTOR_SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
VECTOR_MASTER_PRIVATE = "2b4be7f19ee27bbf30c667b642d5f4aa69fd169872f8fc3059c08ebae2eb19e7"
VECTOR_MASTER_PUBLIC = "a4b2856bfec510abab89753fac1ac0e1112364e7d250545963f135f2a33188ed"
VECTOR_CHILD_PRIVATE = "68e0fe46dfb67e368c75379acec591dad19df3cde26e63b93a8e704f1dade7a3"
VECTOR_CHILD_PUBLIC = "8c8a13df77a28f3445213a0f432fde644acaa215fc72dcdf300d5efaa85d350c"

ABANDON_MNEMONIC = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"

# Keys at m/44'/540'/0'/0'/0' (BIP-39 seed truncated to 32 bytes, then SLIP-0010)
ABANDON_ACCOUNT0_PUBLIC = "5fc5e6d1ebc82ab2d2c58cc3dd1384e7daa28bc734e8c53ffadeaddf5f44ca31"
ABANDON_ACCOUNT0_PRIVATE = "7e53dcfde00a98dc920e920d1290fac3300083feea61694aabf1a7333ae82f72"
KNOWN_ACCOUNT0_PUBLIC = "5556d7aa06dcc6e3d1d03e1d1d11af22fa1a2f390247e14f7c48354c78d93a00"


def test_slip10_master_vector():
    private_seed, _ = slip10_master(VECTOR_SEED)
    assert private_seed.hex() == VECTOR_MASTER_PRIVATE
    assert public_key_from_private_seed(private_seed).hex() == VECTOR_MASTER_PUBLIC


def test_slip10_child_vector():
    private_seed, _ = slip10_derive(VECTOR_SEED, parse_path("m/0'"))
    assert private_seed.hex() == VECTOR_CHILD_PRIVATE
    assert public_key_from_private_seed(private_seed).hex() == VECTOR_CHILD_PUBLIC


def test_slip10_empty_path_is_master():
    assert slip10_derive(VECTOR_SEED, HDPath()) == slip10_master(VECTOR_SEED)


@pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
def test_derive_master_rejects_bad_seed(size):
    with pytest.raises(InvalidSeedError):
        derive_master(bytes(size))


def test_derive_child_rejects_bad_seed():
    with pytest.raises(InvalidSeedError):
        derive_child(bytes(16), account_path(0))


def test_derive_master_shape():
    seed = bytes(range(SEED_SIZE))
    master = derive_master(seed)
    assert master.path == default_path()
    assert len(master.public_key) == PUBLIC_KEY_SIZE
    assert len(master.private_key) == PRIVATE_KEY_SIZE
    assert master.private_key[32:] == master.public_key
    assert master.private_key[:32] == slip10_master(seed)[0]
    assert master.has_private_key


def test_derive_child_requires_hardened_path():
    seed = bytes(range(SEED_SIZE))
    with pytest.raises(NotHardenedError):
        derive_child(seed, parse_path("m/44'/540'/0'/0'/0"))
    with pytest.raises(NotHardenedError):
        derive_child(seed, parse_path("m/44/540'"))


def test_derive_child_is_deterministic():
    seed = derivation_seed(ABANDON_MNEMONIC)
    first = derive_child(seed, account_path(3))
    second = derive_child(seed, account_path(3))
    assert first.public_key == second.public_key
    assert first.private_key == second.private_key
    assert first.path == account_path(3)


def test_abandon_account_zero_is_pinned():
    keypair = derive_child(derivation_seed(ABANDON_MNEMONIC), account_path(0))
    assert keypair.public_key.hex() == ABANDON_ACCOUNT0_PUBLIC
    assert keypair.private_key.hex() == ABANDON_ACCOUNT0_PRIVATE + ABANDON_ACCOUNT0_PUBLIC


def test_known_account_zero_is_pinned():
    keypair = derive_child(derivation_seed(KNOWN_MNEMONIC), account_path(0))
    assert keypair.public_key.hex() == KNOWN_ACCOUNT0_PUBLIC
    assert Wallet.from_mnemonic(KNOWN_MNEMONIC).accounts[0].public_key.hex() == KNOWN_ACCOUNT0_PUBLIC


def test_derive_child_distinct_paths_distinct_keys():
    seed = derivation_seed(ABANDON_MNEMONIC)
    keys = {derive_child(seed, account_path(i)).public_key for i in range(20)}
    assert len(keys) == 20
    assert derive_child(seed, account_path(0, account=1)).public_key not in keys


def test_derive_child_matches_slip10():
    seed = bytes(range(SEED_SIZE))
    path = account_path(9)
    private_seed, _ = slip10_derive(seed, path)
    assert derive_child(seed, path).private_key[:32] == private_seed


def test_sign_and_verify():
    keypair = derive_child(bytes(range(SEED_SIZE)), account_path(0))
    signature = keypair.key.sign(b"hello spacemesh")
    assert len(signature) == 64
    assert keypair.verify(b"hello spacemesh", signature)
    assert not keypair.verify(b"hello spacemash", signature)


def test_keypair_from_private_seed():
    private_seed = bytes.fromhex(VECTOR_CHILD_PRIVATE)
    keypair = keypair_from_private_seed(private_seed, parse_path("m/0'"), "imported", created="2024-01-01T00:00:00+00:00")
    assert keypair.public_key.hex() == VECTOR_CHILD_PUBLIC
    assert keypair.display_name == "imported"
    assert keypair.created == "2024-01-01T00:00:00+00:00"
