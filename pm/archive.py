"""tar+gzip package archives."""

import fnmatch
import glob
import logging
import shutil
import tarfile
from pathlib import Path, PurePosixPath

from .config import Target
from .errors import ArchiveError

logger = logging.getLogger(__name__)


def collect_targets(targets: list[Target], base_dir: Path) -> list[str]:
    """Expand target globs into relative file paths.

    Args:
        targets: Targets from the create config
        base_dir: Directory the globs are relative to

    Returns:
        Matching files in target order, without duplicates and excluded files
    """
    seen: set[str] = set()
    paths: list[str] = []
    for target in targets:
        logger.info("find files for target %r excluding %r", target.path, target.exclude)
        for path in sorted(glob.glob(target.path, root_dir=base_dir, recursive=True, include_hidden=True)):
            if target.exclude and fnmatch.fnmatchcase(path, target.exclude):
                logger.info("excluded %r by %r", path, target.exclude)
                continue
            if not (base_dir / path).is_file():
                logger.debug("skipping %r: not a regular file", path)
                continue
            if path in seen:
                logger.debug("duplicate file %r, skipping", path)
                continue
            seen.add(path)
            paths.append(path)
    return paths


def create_archive(paths: list[str], base_dir: Path, dest: Path) -> Path:
    """Write ``paths`` (relative to ``base_dir``) into a .tar.gz at ``dest``."""
    logger.info("creating archive %s", dest)
    try:
        with tarfile.open(dest, "w:gz") as tar:
            for path in paths:
                logger.debug("adding file %r", path)
                tar.add(base_dir / path, arcname=Path(path).as_posix(), recursive=False)
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"create archive {dest}: {e}") from e
    return dest


def _is_safe(name: str) -> bool:
    path = PurePosixPath(name)
    return not path.is_absolute() and ".." not in path.parts


def extract_archive(archive: Path, dest_dir: Path) -> list[Path]:
    """Extract a .tar.gz into ``dest_dir``.

    Only regular files and directories are extracted. Members with absolute
    paths or ``..`` components, links and special files are skipped.
    Existing files are overwritten.

    Returns:
        Paths of the extracted files
    """
    logger.info("extracting %s", archive)
    extracted: list[Path] = []
    try:
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar:
                if not _is_safe(member.name):
                    logger.warning("insecure path %r, skipping", member.name)
                    continue
                target = dest_dir / member.name
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                if not member.isfile():
                    logger.warning("unsupported member type %r, skipping", member.name)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                if target.exists():
                    logger.warning("%s already exists, overwriting", target)
                    # read-only files from an earlier extraction cannot be reopened for writing
                    target.unlink()
                source = tar.extractfile(member)
                with source, open(target, "wb") as out:
                    shutil.copyfileobj(source, out)
                target.chmod(member.mode & 0o777)
                logger.debug("extracted file %s", target)
                extracted.append(target)
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"extract archive {archive}: {e}") from e
    return extracted
