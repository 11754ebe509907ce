"""Pytest configuration and fixtures."""

import io
import tarfile

import pytest


def make_archive(path, files):
    """Write a .tar.gz at ``path`` holding ``files`` ({member name: text})."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def sample_inventory():
    """Store listing used by the resolution scenarios."""
    return ["foo-1.0.tar.gz", "foo-2.0.tar.gz", "bar-3.0.tar.gz"]


@pytest.fixture
def store_dir(tmp_path):
    """Local package store with a few published archives."""
    store = tmp_path / "store"
    store.mkdir()
    make_archive(store / "foo-1.0.tar.gz", {"foo/VERSION": "1.0\n"})
    make_archive(store / "foo-2.0.tar.gz", {"foo/VERSION": "2.0\n", "foo/bin/tool": "#!/bin/sh\n"})
    make_archive(store / "bar-3.0.tar.gz", {"bar/VERSION": "3.0\n"})
    (store / "README.txt").write_text("not a package")
    return store


@pytest.fixture
def update_config(tmp_path):
    """Update config requesting foo >=1.0 and bar."""
    config = tmp_path / "update.yaml"
    config.write_text(
        "packages:\n"
        "  - name: foo\n"
        "    ver: '>=1.0'\n"
        "  - name: bar\n"
    )
    return config


@pytest.fixture
def archive_factory():
    """Return the archive writing helper."""
    return make_archive
