"""
Tests for mnemonic generation, validation and seed extraction
"""
import pytest

from smwallet.derivation import SEED_SIZE
from smwallet.errors import InvalidMnemonicError, WhitespaceError
from smwallet.seed_phrase import (
    check_mnemonic,
    check_whitespace,
    derivation_seed,
    entropy_to_mnemonic,
    generate_entropy,
    generate_mnemonic,
    mnemonic_to_seed,
    validate_mnemonic,
)
from tests.conftest import KNOWN_MNEMONIC

ABANDON_MNEMONIC = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
ABANDON_SEED = (
    "5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc1"
    "9a5ac40b389cd370d086206dec8aa6c43daea6690f20ad3d8d48b2d2ce9e38e4"
)

WHITESPACE_VARIANTS = [
    "film theme cheese broken kingdom destroy inch ready wear  inspire shove pudding",
    "film theme cheese broken kingdom destroy inch ready wear\ninspire shove pudding",
    "film theme cheese broken kingdom destroy inch ready wear inspire shove pudding\t",
    " film theme cheese broken kingdom destroy inch ready wear inspire shove pudding",
    "film theme cheese broken kingdom destroy inch ready wear inspire shove pudding ",
]


def test_known_seed():
    assert mnemonic_to_seed(ABANDON_MNEMONIC).hex() == ABANDON_SEED


def test_derivation_seed_is_truncated():
    seed = derivation_seed(ABANDON_MNEMONIC)
    assert len(seed) == SEED_SIZE
    assert seed.hex() == ABANDON_SEED[:SEED_SIZE * 2]


def test_passphrase_changes_seed():
    assert mnemonic_to_seed(ABANDON_MNEMONIC, "TREZOR") != mnemonic_to_seed(ABANDON_MNEMONIC)


@pytest.mark.parametrize("bits, words", [(128, 12), (160, 15), (192, 18), (224, 21), (256, 24)])
def test_generate_mnemonic_word_counts(bits, words):
    phrase = generate_mnemonic(bits)
    assert len(phrase.split(" ")) == words
    assert validate_mnemonic(phrase)
    check_mnemonic(phrase)


def test_generate_entropy_rejects_bad_size():
    with pytest.raises(ValueError):
        generate_entropy(100)


def test_entropy_to_mnemonic_known():
    assert entropy_to_mnemonic(bytes(16)) == ABANDON_MNEMONIC


def test_validate_known_mnemonic():
    assert validate_mnemonic(KNOWN_MNEMONIC)
    check_mnemonic(KNOWN_MNEMONIC)


@pytest.mark.parametrize("phrase", WHITESPACE_VARIANTS)
def test_whitespace_variants_rejected(phrase):
    with pytest.raises(WhitespaceError):
        check_whitespace(phrase)
    with pytest.raises(WhitespaceError):
        check_mnemonic(phrase)


def test_whitespace_error_is_a_mnemonic_error():
    with pytest.raises(InvalidMnemonicError):
        check_mnemonic(WHITESPACE_VARIANTS[0])


@pytest.mark.parametrize("phrase", [
    "",
    "film theme cheese",
    " ".join(["abandon"] * 12),
    "film theme cheese broken kingdom destroy inch ready wear inspire shove puddingx",
])
def test_invalid_mnemonics_rejected(phrase):
    assert not validate_mnemonic(phrase)
    with pytest.raises(InvalidMnemonicError):
        check_mnemonic(phrase)


def test_non_string_rejected():
    with pytest.raises(InvalidMnemonicError):
        check_mnemonic(None)
