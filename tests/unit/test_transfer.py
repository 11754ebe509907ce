"""Tests for the download and upload flows."""

import tarfile

import pytest

from pm.config import CreateConfig, Target
from pm.constraint import parse_constraint
from pm.errors import ConfigError, ResolutionFailed, StoreError
from pm.models import Requirement
from pm.store import LocalStore
from pm.transfer import Downloader, Uploader

DEFAULT = parse_constraint(">=0.1")


class TestDownloader:
    """Test resolving and extracting packages from a local store."""

    def test_download_extracts_best_matches(self, store_dir, tmp_path):
        dest = tmp_path / "dest"
        requirements = [Requirement("foo", parse_constraint(">=1.0")), Requirement("bar", DEFAULT)]
        with LocalStore(store_dir) as store:
            plan = Downloader(store, dest).download(requirements)
        assert plan.identifiers == ["foo-2.0", "bar-3.0"]
        assert (dest / "foo" / "VERSION").read_text() == "2.0\n"
        assert (dest / "foo" / "bin" / "tool").exists()
        assert (dest / "bar" / "VERSION").read_text() == "3.0\n"

    def test_plan_does_not_download(self, store_dir, tmp_path):
        dest = tmp_path / "dest"
        with LocalStore(store_dir) as store:
            plan = Downloader(store, dest).plan([Requirement("foo", parse_constraint("1.0"))])
        assert plan.identifiers == ["foo-1.0"]
        assert not dest.exists()

    def test_unsatisfied_downloads_nothing(self, store_dir, tmp_path):
        dest = tmp_path / "dest"
        requirements = [Requirement("foo", DEFAULT), Requirement("baz", parse_constraint("1.0"))]
        with LocalStore(store_dir) as store:
            with pytest.raises(ResolutionFailed):
                Downloader(store, dest).download(requirements)
        assert not (dest / "foo").exists()


def create_config(**overrides):
    data = {"name": "tool", "ver": "1.0", "targets": [Target(path="bin/*")]}
    data.update(overrides)
    return CreateConfig(**data)


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    (root / "bin").mkdir(parents=True)
    (root / "bin" / "tool").write_text("#!/bin/sh\necho tool\n")
    return root


class TestUploader:
    """Test publishing packages to a local store."""

    def test_upload_publishes_archive(self, store_dir, project):
        with LocalStore(store_dir) as store:
            name = Uploader(store, create_config(), project, DEFAULT).upload()
        assert name == "tool-1.0.tar.gz"
        with tarfile.open(store_dir / name, "r:gz") as tar:
            assert tar.getnames() == ["bin/tool"]

    def test_upload_refuses_existing_version(self, store_dir, project):
        (store_dir / "tool-1.0.tar.gz").write_bytes(b"")
        with LocalStore(store_dir) as store:
            with pytest.raises(StoreError) as exc_info:
                Uploader(store, create_config(), project, DEFAULT).upload()
        assert "already exists" in str(exc_info.value)

    def test_upload_requires_files(self, store_dir, project):
        config = create_config(targets=[Target(path="nothing/*")])
        with LocalStore(store_dir) as store:
            with pytest.raises(ConfigError):
                Uploader(store, config, project, DEFAULT).upload()
        assert not (store_dir / "tool-1.0.tar.gz").exists()

    def test_dependencies_are_fetched_and_packed(self, store_dir, project):
        """Dependencies land in the base directory before targets are collected."""
        config = create_config(
            targets=[Target(path="bin/*"), Target(path="foo/**")],
            dependencies=[{"name": "foo", "ver": "<2.0"}],
        )
        with LocalStore(store_dir) as store:
            Uploader(store, config, project, DEFAULT).upload()
        assert (project / "foo" / "VERSION").read_text() == "1.0\n"
        with tarfile.open(store_dir / "tool-1.0.tar.gz", "r:gz") as tar:
            assert tar.getnames() == ["bin/tool", "foo/VERSION"]

    def test_missing_dependency_aborts_upload(self, store_dir, project):
        config = create_config(dependencies=[{"name": "baz"}])
        with LocalStore(store_dir) as store:
            with pytest.raises(ResolutionFailed):
                Uploader(store, config, project, DEFAULT).upload()
        assert not (store_dir / "tool-1.0.tar.gz").exists()
