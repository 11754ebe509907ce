"""Package stores: the remote SFTP directory and a local directory.

A store is a flat directory of package archives. Both implementations are
context managers and expose the same four operations.
"""

import logging
import posixpath
import shutil
from pathlib import Path
from typing import Protocol

import paramiko

from .config import StoreConfig
from .errors import StoreError

logger = logging.getLogger(__name__)


class PackageStore(Protocol):
    def list_entries(self) -> list[str]: ...

    def exists(self, name: str) -> bool: ...

    def download(self, name: str, dest_dir: Path) -> Path: ...

    def upload(self, local_path: Path, name: str) -> None: ...


class LocalStore:
    """Store backed by a directory on the local filesystem."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def __enter__(self) -> "LocalStore":
        if not self.root.is_dir():
            raise StoreError(f"store directory {self.root} does not exist")
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    def list_entries(self) -> list[str]:
        try:
            return sorted(p.name for p in self.root.iterdir())
        except OSError as e:
            raise StoreError(f"list {self.root}: {e}") from e

    def exists(self, name: str) -> bool:
        return (self.root / name).exists()

    def download(self, name: str, dest_dir: Path) -> Path:
        source = self.root / name
        target = Path(dest_dir) / name
        logger.info("downloading package %s to %s", name, target)
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise StoreError(f"download {name}: {e}") from e
        return target

    def upload(self, local_path: Path, name: str) -> None:
        logger.info("uploading %s as package %s", local_path, name)
        try:
            shutil.copyfile(local_path, self.root / name)
        except OSError as e:
            raise StoreError(f"upload {name}: {e}") from e


class SftpStore:
    """Store in a directory of an SFTP server.

    Authenticates with keys from the SSH agent (and the default key files);
    unknown host keys are accepted.
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._ssh: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    def __enter__(self) -> "SftpStore":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def connect(self) -> None:
        config = self.config
        logger.info("connecting to %s:%s as %s", config.host, config.port, config.user)
        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            ssh.connect(config.host, port=config.port, username=config.user, allow_agent=True)
            self._sftp = ssh.open_sftp()
        except (paramiko.SSHException, OSError) as e:
            ssh.close()
            raise StoreError(f"ssh connect {config.host}:{config.port}: {e}") from e
        self._ssh = ssh

    def close(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None

    @property
    def sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise StoreError("sftp store is not connected")
        return self._sftp

    def _remote(self, name: str) -> str:
        return posixpath.join(self.config.path, name)

    def list_entries(self) -> list[str]:
        try:
            return self.sftp.listdir(self.config.path)
        except (paramiko.SSHException, OSError) as e:
            raise StoreError(f"list {self.config.path}: {e}") from e

    def exists(self, name: str) -> bool:
        try:
            self.sftp.stat(self._remote(name))
        except FileNotFoundError:
            return False
        except (paramiko.SSHException, OSError) as e:
            raise StoreError(f"stat {name}: {e}") from e
        return True

    def download(self, name: str, dest_dir: Path) -> Path:
        target = Path(dest_dir) / name
        logger.info("downloading package %s to %s", name, target)
        try:
            self.sftp.get(self._remote(name), str(target))
        except (paramiko.SSHException, OSError) as e:
            raise StoreError(f"download {name}: {e}") from e
        return target

    def upload(self, local_path: Path, name: str) -> None:
        logger.info("uploading %s as package %s", local_path, name)
        try:
            self.sftp.put(str(local_path), self._remote(name))
        except (paramiko.SSHException, OSError) as e:
            raise StoreError(f"upload {name}: {e}") from e
