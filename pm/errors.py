"""Error types raised by pm.

Every error carries a short machine-readable ``code`` so the CLI can report
failures uniformly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Requirement


class PackageError(Exception):
    """Base class for all pm errors."""

    code: str = "UNKNOWN"


class InvalidVersionFormat(PackageError, ValueError):
    """A ``major.minor`` token could not be parsed."""

    code = "INVALID_VERSION"

    def __init__(self, text: str, reason: str = "") -> None:
        self.text = text
        message = f"invalid version {text!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidConstraintSyntax(PackageError, ValueError):
    """A version constraint matched none of the grammar shapes."""

    code = "INVALID_CONSTRAINT"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"invalid version constraint {text!r}")


class InvalidConstraintRange(PackageError, ValueError):
    """A range constraint whose lower version exceeds its upper version."""

    code = "INVALID_RANGE"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"invalid version range {text!r}: lower bound exceeds upper bound")


class InvalidPackageName(PackageError, ValueError):
    code = "INVALID_NAME"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid package name {name!r}")


class DuplicateRequirement(PackageError):
    """Two structurally identical requirements in one configuration."""

    code = "DUPLICATE_REQUIREMENT"

    def __init__(self, requirement: Requirement) -> None:
        self.requirement = requirement
        super().__init__(f"duplicate package {requirement}")


class ResolutionFailed(PackageError):
    """One or more requirements have no matching package in the inventory."""

    code = "RESOLUTION_FAILED"

    def __init__(self, unsatisfied: list[Requirement]) -> None:
        self.unsatisfied = list(unsatisfied)
        names = ", ".join(str(r) for r in self.unsatisfied)
        super().__init__(f"packages not found: {names}")


class ConfigError(PackageError):
    """Configuration file missing, unreadable or invalid."""

    code = "CONFIG_ERROR"


class StoreError(PackageError):
    """Package store listing, transfer or lookup failed."""

    code = "STORE_ERROR"


class ArchiveError(PackageError):
    """Archive creation or extraction failed."""

    code = "ARCHIVE_ERROR"
