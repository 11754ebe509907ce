"""Package versions: a ``major.minor`` pair of non-negative integers."""

from dataclasses import dataclass

from .errors import InvalidVersionFormat

_DIGITS = frozenset("0123456789")


def is_decimal(text: str) -> bool:
    """Return True if ``text`` is a non-empty run of ASCII digits."""
    return bool(text) and all(c in _DIGITS for c in text)


@dataclass(frozen=True, order=True)
class Version:
    """A package release version, ordered by major then minor."""

    major: int
    minor: int

    def __post_init__(self):
        if self.major < 0 or self.minor < 0:
            raise InvalidVersionFormat(f"{self.major}.{self.minor}", "negative component")
        if self.major == 0 and self.minor == 0:
            raise InvalidVersionFormat("0.0", "version 0.0 is not allowed")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


def parse_version(text: str) -> Version:
    """Parse a ``major.minor`` token.

    Args:
        text: Version text such as ``"1.2"``; leading zeros are accepted
            and dropped (``"001.0001"`` is ``1.1``)

    Returns:
        The parsed Version

    Raises:
        InvalidVersionFormat: if the text is not two dot-separated decimal
            integers, or is ``0.0``
    """
    major, sep, minor = text.partition(".")
    if not sep:
        raise InvalidVersionFormat(text, "expected <major>.<minor>")
    if not is_decimal(major):
        raise InvalidVersionFormat(text, f"invalid major version {major!r}")
    if not is_decimal(minor):
        raise InvalidVersionFormat(text, f"invalid minor version {minor!r}")
    if int(major) == 0 and int(minor) == 0:
        raise InvalidVersionFormat(text, "version 0.0 is not allowed")
    return Version(int(major), int(minor))
