"""Downloading and uploading packages."""

import logging
import tempfile
from pathlib import Path

from .archive import collect_targets, create_archive, extract_archive
from .config import CreateConfig, build_requirements
from .constraint import VersionConstraint
from .errors import ConfigError, StoreError
from .models import FetchPlan, Requirement
from .resolve import resolve
from .store import PackageStore

logger = logging.getLogger(__name__)


class Downloader:
    """Resolve requirements against a store and unpack the chosen packages."""

    def __init__(self, store: PackageStore, dest_dir: Path):
        """Initialize downloader.

        Args:
            store: Store to list and fetch packages from
            dest_dir: Directory the archives are extracted into
        """
        self.store = store
        self.dest_dir = Path(dest_dir)

    def plan(self, requirements: list[Requirement]) -> FetchPlan:
        logger.info("resolving packages: %s", ", ".join(str(r) for r in requirements))
        return resolve(requirements, self.store.list_entries())

    def download(self, requirements: list[Requirement]) -> FetchPlan:
        """Fetch and extract every package the requirements resolve to.

        Raises:
            ResolutionFailed: if any requirement has no matching package
            StoreError, ArchiveError: on transfer or extraction failure
        """
        plan = self.plan(requirements)
        self.dest_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="pm-") as tmp:
            for entry in plan:
                archive = self.store.download(entry.entry, Path(tmp))
                extract_archive(archive, self.dest_dir)
                archive.unlink()
        return plan


class Uploader:
    """Pack the configured targets and publish them to a store."""

    def __init__(
        self,
        store: PackageStore,
        config: CreateConfig,
        base_dir: Path,
        default_constraint: VersionConstraint,
    ):
        """Initialize uploader.

        Args:
            store: Store to publish to (and fetch dependencies from)
            config: Validated create config
            base_dir: Directory target globs are relative to; dependencies
                are extracted here too
            default_constraint: Constraint for dependencies without ``ver``
        """
        self.store = store
        self.config = config
        self.base_dir = Path(base_dir)
        self.dependencies = build_requirements(config.dependencies, default_constraint)

    def upload(self) -> str:
        """Build and upload the package archive.

        Returns:
            Name of the uploaded archive

        Raises:
            StoreError: if the package already exists in the store
            ConfigError: if the targets match no files
        """
        archive_name = self.config.identifier.archive_name
        if self.store.exists(archive_name):
            raise StoreError(f"package {archive_name} already exists")

        if self.dependencies:
            logger.info("downloading dependencies")
            Downloader(self.store, self.base_dir).download(self.dependencies)

        paths = collect_targets(self.config.targets, self.base_dir)
        if not paths:
            raise ConfigError(f"no files found for package {self.config.identifier}")

        with tempfile.TemporaryDirectory(prefix="pm-") as tmp:
            archive = create_archive(paths, self.base_dir, Path(tmp) / archive_name)
            self.store.upload(archive, archive_name)
        logger.info("uploaded %s (%d files)", archive_name, len(paths))
        return archive_name
