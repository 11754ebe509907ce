"""Core data models for pm."""

from dataclasses import dataclass, field

from .constraint import VersionConstraint
from .errors import InvalidPackageName
from .version import Version, parse_version

ARCHIVE_SUFFIX = ".tar.gz"

_NAME_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-")


def is_package_name(name: str) -> bool:
    """Return True if ``name`` is letters, digits, underscores and hyphens only."""
    return bool(name) and all(c in _NAME_CHARS for c in name)


def validate_package_name(name: str) -> str:
    if not is_package_name(name):
        raise InvalidPackageName(name)
    return name


@dataclass(frozen=True)
class Requirement:
    """A package name together with the version constraint it must satisfy."""

    name: str
    constraint: VersionConstraint

    def __post_init__(self):
        validate_package_name(self.name)

    def matches(self, identifier: "PackageIdentifier") -> bool:
        return self.name == identifier.name and self.constraint.matches(identifier.version)

    def __str__(self) -> str:
        return f"{self.name}(ver {self.constraint.display})"


@dataclass(frozen=True)
class PackageIdentifier:
    """A concrete package release: a name and an exact version."""

    name: str
    version: Version

    def __post_init__(self):
        validate_package_name(self.name)

    @property
    def archive_name(self) -> str:
        return f"{self}{ARCHIVE_SUFFIX}"

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"


def parse_identifier(entry: str) -> PackageIdentifier:
    """Parse a store entry name such as ``foo-1.2.tar.gz`` or ``foo-1.2``.

    The archive suffix is optional. The name is everything before the last
    hyphen and the version everything after it.

    Raises:
        InvalidPackageName: if there is no hyphen or the name is invalid
        InvalidVersionFormat: if the version part is malformed
    """
    stem = entry[: -len(ARCHIVE_SUFFIX)] if entry.endswith(ARCHIVE_SUFFIX) else entry
    name, sep, version = stem.rpartition("-")
    if not sep:
        raise InvalidPackageName(stem)
    return PackageIdentifier(validate_package_name(name), parse_version(version))


@dataclass
class PlanEntry:
    """One package to fetch and the requirements it satisfies."""

    identifier: PackageIdentifier
    entry: str  # store entry name the identifier was read from
    requirements: list[Requirement] = field(default_factory=list)


@dataclass
class FetchPlan:
    """Ordered, deduplicated packages chosen to satisfy a requirement list."""

    entries: list[PlanEntry]

    @property
    def identifiers(self) -> list[str]:
        return [str(e.identifier) for e in self.entries]

    @property
    def shared(self) -> list[PlanEntry]:
        """Entries that satisfy more than one requirement."""
        return [e for e in self.entries if len(e.requirements) > 1]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
