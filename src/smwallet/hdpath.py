"""
HD Path - BIP-32/44 derivation paths.

Paths are written as "m/44'/540'/account'/chain'/index'". ed25519 has no
safe public (unhardened) derivation, so the wallet only ever derives
along paths where every segment is hardened. Unhardened segments still
parse, so callers can detect and reject them.
"""

import re
from dataclasses import dataclass

from .errors import InvalidPathError, NotHardenedError


# Keys with index >= this are hardened (BIP-32)
HARDENED_OFFSET = 0x80000000

# Segment positions in a BIP-44 path
PURPOSE_SEGMENT = 0
COIN_TYPE_SEGMENT = 1
ACCOUNT_SEGMENT = 2
CHAIN_SEGMENT = 3
INDEX_SEGMENT = 4

# m/44' - BIP-44 hierarchy
BIP44_PURPOSE = HARDENED_OFFSET | 44

# m/44'/540' - Spacemesh (SLIP-44)
SPACEMESH_COIN_TYPE = HARDENED_OFFSET | 540

_WHOLE_PATH = re.compile(r"m(/[0-9]+'?)+")
_CRUMB = re.compile(r"/([0-9]+)('?)")


def harden(value: int) -> int:
    """Return the hardened form of a child index."""
    if not 0 <= value < HARDENED_OFFSET:
        raise InvalidPathError(f"Child index out of range: {value}")
    return HARDENED_OFFSET | value


def is_hardened(segment: int) -> bool:
    return segment >= HARDENED_OFFSET


@dataclass(frozen=True)
class HDPath:
    """An immutable sequence of uint32 derivation segments."""
    segments: tuple[int, ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store a tuple
        object.__setattr__(self, "segments", tuple(self.segments))
        for segment in self.segments:
            if not 0 <= segment <= 0xFFFFFFFF:
                raise InvalidPathError(f"Path segment is not a uint32: {segment}")

    @classmethod
    def parse(cls, s: str) -> "HDPath":
        return parse_path(s)

    def __str__(self) -> str:
        return format_path(self)

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self):
        return iter(self.segments)

    def __getitem__(self, i):
        return self.segments[i]

    def extend(self, segment: int) -> "HDPath":
        """Return a new path with `segment` appended."""
        return HDPath(self.segments + (segment,))

    def is_fully_hardened(self) -> bool:
        return is_fully_hardened(self)

    def require_hardened(self) -> None:
        """Raise NotHardenedError unless every segment is hardened."""
        if not self.is_fully_hardened():
            raise NotHardenedError(f"Path is not fully hardened: {self}")

    @property
    def purpose(self) -> int:
        return self.segments[PURPOSE_SEGMENT]

    @property
    def coin_type(self) -> int:
        return self.segments[COIN_TYPE_SEGMENT]

    @property
    def account(self) -> int:
        return self.segments[ACCOUNT_SEGMENT]

    @property
    def chain(self) -> int:
        return self.segments[CHAIN_SEGMENT]

    @property
    def index(self) -> int:
        return self.segments[INDEX_SEGMENT]


def parse_path(s: str) -> HDPath:
    """
    Parse a path string such as "m/44'/540'/0'/0'/0'".

    Each crumb becomes a uint32, OR'd with the hardened bit when it ends
    with an apostrophe.

    Raises:
        InvalidPathError: If the string does not match m(/[0-9]+'?)+ or a
            crumb does not fit below the hardened offset.
    """
    if not isinstance(s, str) or not _WHOLE_PATH.fullmatch(s):
        raise InvalidPathError(f"Invalid HD path string: {s!r}")

    segments = []
    for number, tick in _CRUMB.findall(s):
        value = int(number)
        if value >= HARDENED_OFFSET:
            raise InvalidPathError(f"Path crumb out of range in {s!r}: {number}")
        segments.append(HARDENED_OFFSET | value if tick else value)
    return HDPath(tuple(segments))


def format_path(path: HDPath) -> str:
    """Format a path as "m/44'/540'/...", the inverse of parse_path()."""
    s = "m"
    for segment in path.segments:
        if segment >= HARDENED_OFFSET:
            s += f"/{segment - HARDENED_OFFSET}'"
        else:
            s += f"/{segment}"
    return s


def is_fully_hardened(path: HDPath) -> bool:
    return all(segment >= HARDENED_OFFSET for segment in path.segments)


def default_path() -> HDPath:
    """The wallet root, m/44'/540'."""
    return HDPath((BIP44_PURPOSE, SPACEMESH_COIN_TYPE))


def chain_path(account: int = 0, chain: int = 0) -> HDPath:
    """m/44'/540'/account'/chain'"""
    return default_path().extend(harden(account)).extend(harden(chain))


def account_path(index: int, account: int = 0, chain: int = 0) -> HDPath:
    """
    Path of a wallet account key: m/44'/540'/account'/chain'/index'.

    Spacemesh is account based, so the BIP-44 "change" level is used as a
    hardened "chain" level and every segment stays hardened.
    """
    return chain_path(account, chain).extend(harden(index))
