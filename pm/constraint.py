"""Version constraints and their textual grammar.

A constraint is either an exact version, a lower and/or upper bound, or
unconstrained. Accepted text forms::

    1.2            exact
    =1.2           exact
    <1.2  <=1.2    upper bound
    >1.2  >=1.2    lower bound
    >1.0 <=2.0     explicit range (lower first, whitespace separated)
    1.0 - 2.0      inclusive range, same as ">=1.0 <=2.0"
"""

import operator
from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidConstraintRange, InvalidConstraintSyntax
from .version import Version, parse_version


class Comparison(Enum):
    EQ = "="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    def holds(self, version: Version, reference: Version) -> bool:
        """Return True if ``version <op> reference``."""
        return _OPERATORS[self](version, reference)


_OPERATORS = {
    Comparison.EQ: operator.eq,
    Comparison.LT: operator.lt,
    Comparison.LE: operator.le,
    Comparison.GT: operator.gt,
    Comparison.GE: operator.ge,
}

LOWER_COMPARISONS = frozenset({Comparison.GT, Comparison.GE})
UPPER_COMPARISONS = frozenset({Comparison.LT, Comparison.LE})


class ConstraintKind(Enum):
    EXACT = "exact"
    BOUNDED = "bounded"
    UNCONSTRAINED = "unconstrained"


@dataclass(frozen=True)
class Bound:
    """One side of a range: a comparison against a reference version."""

    comparison: Comparison
    version: Version

    def matches(self, version: Version) -> bool:
        return self.comparison.holds(version, self.version)

    def __str__(self) -> str:
        return f"{self.comparison.value}{self.version}"


@dataclass(frozen=True)
class VersionConstraint:
    """A predicate over versions.

    ``exact`` excludes both bounds. ``text`` keeps the source text for
    reporting and takes no part in equality or hashing, so two constraints
    written differently but parsed to the same terms compare equal.
    """

    exact: Version | None = None
    lower: Bound | None = None
    upper: Bound | None = None
    text: str = field(default="", compare=False)

    def __post_init__(self):
        if self.exact is not None and (self.lower is not None or self.upper is not None):
            raise ValueError("exact constraint cannot carry bounds")
        if self.lower is not None and self.lower.comparison not in LOWER_COMPARISONS:
            raise ValueError(f"{self.lower.comparison.value!r} is not a lower bound comparison")
        if self.upper is not None and self.upper.comparison not in UPPER_COMPARISONS:
            raise ValueError(f"{self.upper.comparison.value!r} is not an upper bound comparison")
        if (
            self.lower is not None
            and self.upper is not None
            and self.lower.version > self.upper.version
        ):
            raise InvalidConstraintRange(self.text or f"{self.lower} {self.upper}")

    @classmethod
    def exactly(cls, version: Version) -> "VersionConstraint":
        return cls(exact=version)

    @classmethod
    def unconstrained(cls) -> "VersionConstraint":
        return cls()

    @property
    def kind(self) -> ConstraintKind:
        if self.exact is not None:
            return ConstraintKind.EXACT
        if self.lower is not None or self.upper is not None:
            return ConstraintKind.BOUNDED
        return ConstraintKind.UNCONSTRAINED

    def matches(self, version: Version) -> bool:
        if self.exact is not None:
            return version == self.exact
        if self.lower is not None and not self.lower.matches(version):
            return False
        if self.upper is not None and not self.upper.matches(version):
            return False
        return True

    @property
    def display(self) -> str:
        """Source text when known, canonical form otherwise."""
        return self.text or str(self)

    def __str__(self) -> str:
        if self.exact is not None:
            return f"={self.exact}"
        bounds = [str(b) for b in (self.lower, self.upper) if b is not None]
        return " ".join(bounds) if bounds else "*"


_WHITESPACE = frozenset(" \t\r\n\f")
_VERSION_CHARS = frozenset("0123456789.")


class _Scanner:
    """Cursor over constraint text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_whitespace(self) -> int:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in _WHITESPACE:
            self.pos += 1
        return self.pos - start

    def expect(self, char: str) -> bool:
        if self.text.startswith(char, self.pos):
            self.pos += len(char)
            return True
        return False

    def comparison(self) -> Comparison | None:
        # two-character operators first
        for symbol in ("<=", ">=", "<", ">", "="):
            if self.expect(symbol):
                return Comparison(symbol)
        return None

    def version_token(self) -> str:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in _VERSION_CHARS:
            self.pos += 1
        return self.text[start:self.pos]


def parse_constraint(text: str) -> VersionConstraint:
    """Parse constraint text into a VersionConstraint.

    Raises:
        InvalidConstraintSyntax: if the text matches no constraint form
        InvalidVersionFormat: if an embedded version token is malformed
        InvalidConstraintRange: if a range's lower version exceeds its upper
    """
    scanner = _Scanner(text)
    comparison = scanner.comparison()
    first = scanner.version_token()
    if not first:
        raise InvalidConstraintSyntax(text)

    if scanner.at_end():
        return _single_term(text, comparison, first)
    if comparison is None:
        return _hyphen_range(text, scanner, first)
    if comparison in LOWER_COMPARISONS:
        return _explicit_range(text, scanner, comparison, first)
    raise InvalidConstraintSyntax(text)


def _single_term(text: str, comparison: Comparison | None, token: str) -> VersionConstraint:
    version = parse_version(token)
    if comparison is None or comparison is Comparison.EQ:
        return VersionConstraint(exact=version, text=text)
    bound = Bound(comparison, version)
    if comparison in LOWER_COMPARISONS:
        return VersionConstraint(lower=bound, text=text)
    return VersionConstraint(upper=bound, text=text)


def _hyphen_range(text: str, scanner: _Scanner, first: str) -> VersionConstraint:
    scanner.skip_whitespace()
    if not scanner.expect("-"):
        raise InvalidConstraintSyntax(text)
    scanner.skip_whitespace()
    second = scanner.version_token()
    if not second or not scanner.at_end():
        raise InvalidConstraintSyntax(text)
    return VersionConstraint(
        lower=Bound(Comparison.GE, parse_version(first)),
        upper=Bound(Comparison.LE, parse_version(second)),
        text=text,
    )


def _explicit_range(
    text: str, scanner: _Scanner, lower_comparison: Comparison, first: str
) -> VersionConstraint:
    if not scanner.skip_whitespace():
        raise InvalidConstraintSyntax(text)
    upper_comparison = scanner.comparison()
    if upper_comparison not in UPPER_COMPARISONS:
        raise InvalidConstraintSyntax(text)
    second = scanner.version_token()
    if not second or not scanner.at_end():
        raise InvalidConstraintSyntax(text)
    return VersionConstraint(
        lower=Bound(lower_comparison, parse_version(first)),
        upper=Bound(upper_comparison, parse_version(second)),
        text=text,
    )
