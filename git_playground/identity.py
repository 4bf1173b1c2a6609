"""
Content identities for commits and file fingerprints.

The hash is FNV-1a over a 256 bit state, truncated to its 160 high bits
so tokens look like SHA-1 digests. It is not cryptographic; the only
contract is that equal content gives equal tokens and that any change
gives a different token with overwhelming likelihood.
"""

from typing import Mapping

_FNV_PRIME = (1 << 168) + (1 << 8) + 0x63
_FNV_OFFSET = 0xDD268DBCAAC550362D98C384C4E576CCC8B1536847B6BBB31023B4C8CAEE0535
_MASK = (1 << 256) - 1

IDENTITY_LENGTH = 40
SHORT_LENGTH = 7


def identity(content: bytes | str) -> str:
    if isinstance(content, str):
        content = content.encode("utf-8")

    h = _FNV_OFFSET
    for byte in content:
        h ^= byte
        h = (h * _FNV_PRIME) & _MASK

    # low bits of a multiplicative hash only see low input bits
    return f"{h >> 96:040x}"


def short_identity(token: str, length: int = SHORT_LENGTH) -> str:
    """Truncated token for display. Short forms can collide."""
    return token[:length]


def fingerprint(files: Mapping[str, str]) -> str:
    """Identity of a whole snapshot, independent of path order."""
    lines = [f"{path}\0{identity(content)}" for path, content in sorted(files.items())]
    return identity("\n".join(lines))
