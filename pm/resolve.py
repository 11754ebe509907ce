"""Requirement resolution against a store inventory."""

import logging

from .errors import PackageError, ResolutionFailed
from .models import FetchPlan, PackageIdentifier, PlanEntry, Requirement, parse_identifier

logger = logging.getLogger(__name__)


def read_inventory(entries: list[str]) -> list[tuple[PackageIdentifier, str]]:
    """Parse store entry names, skipping the ones that are not packages.

    Args:
        entries: Raw entry names from a store listing

    Returns:
        (identifier, entry name) pairs in listing order
    """
    inventory = []
    for entry in entries:
        try:
            identifier = parse_identifier(entry)
        except PackageError as e:
            logger.debug("skipping %r: %s", entry, e)
            continue
        inventory.append((identifier, entry))
    return inventory


def resolve(requirements: list[Requirement], inventory: list[str]) -> FetchPlan:
    """Pick the highest matching package for every requirement.

    Each requirement keeps the first matching package seen and only replaces
    it with a strictly greater version, so the chosen version never depends
    on listing order.

    Args:
        requirements: Validated requirements without duplicates
        inventory: Raw entry names from a store listing

    Returns:
        Fetch plan ordered by the first requirement each package satisfies

    Raises:
        ResolutionFailed: listing every requirement with no match
    """
    best: dict[Requirement, tuple[PackageIdentifier, str]] = {}
    for identifier, entry in read_inventory(inventory):
        for requirement in requirements:
            if not requirement.matches(identifier):
                continue
            current = best.get(requirement)
            if current is None or identifier.version > current[0].version:
                logger.debug("found %s for %s", identifier, requirement)
                best[requirement] = (identifier, entry)

    unsatisfied = [r for r in requirements if r not in best]
    if unsatisfied:
        raise ResolutionFailed(unsatisfied)

    plan: dict[PackageIdentifier, PlanEntry] = {}
    for requirement in requirements:
        identifier, entry = best[requirement]
        if identifier not in plan:
            plan[identifier] = PlanEntry(identifier=identifier, entry=entry)
        plan[identifier].requirements.append(requirement)

    fetch_plan = FetchPlan(entries=list(plan.values()))
    for shared in fetch_plan.shared:
        logger.info(
            "package %s satisfies several requirements (%s), it will be fetched once",
            shared.identifier,
            ", ".join(str(r) for r in shared.requirements),
        )
    return fetch_plan
