"""Configuration file loading.

``.json`` files are read with the json module, ``.yaml``/``.yml`` files with
PyYAML, and the result is validated with pydantic models.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constraint import VersionConstraint, parse_constraint
from .errors import ConfigError, DuplicateRequirement
from .models import PackageIdentifier, Requirement, is_package_name
from .version import Version, parse_version

logger = logging.getLogger(__name__)

DEFAULT_CONSTRAINT = ">=0.1"
DEFAULT_STORE_CONFIG = Path.home() / ".pm.json"


def read_config_file(path: Path) -> Any:
    """Deserialize a JSON or YAML file according to its extension."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e

    suffix = path.suffix.lower()
    if suffix == ".json":
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"parse json {path}: {e}") from e
    if suffix in (".yaml", ".yml"):
        try:
            # BaseLoader keeps every scalar a string, so "ver: 1.10" stays "1.10"
            return yaml.load(raw, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise ConfigError(f"parse yaml {path}: {e}") from e
    raise ConfigError(f"{suffix or path.name!r} format is not supported")


def _validate(model: type[BaseModel], data: Any, path: Path) -> Any:
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}:\n{e}") from e


def _check_name(value: str) -> str:
    if not is_package_name(value):
        raise ValueError(f"invalid package name {value!r}")
    return value


PackageName = Annotated[str, AfterValidator(_check_name)]


class PackageEntry(BaseModel):
    """A ``{name, ver}`` requirement entry."""

    model_config = ConfigDict(extra="forbid")

    name: PackageName
    ver: str | None = None


class Target(BaseModel):
    """Files to pack: a glob pattern and an optional exclude wildcard."""

    model_config = ConfigDict(extra="forbid")

    path: str
    exclude: str = ""

    @field_validator("path")
    @classmethod
    def check_path(cls, value: str) -> str:
        if not value:
            raise ValueError("invalid target: empty path")
        return value


class UpdateConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    packages: list[PackageEntry] = Field(default_factory=list)


class CreateConfig(BaseModel):
    """Configuration of the ``create`` command."""

    model_config = ConfigDict(extra="forbid")

    name: PackageName
    ver: str
    targets: list[Target] = Field(default_factory=list)
    dependencies: list[PackageEntry] = Field(default_factory=list)

    @field_validator("ver")
    @classmethod
    def check_ver(cls, value: str) -> str:
        parse_version(value)
        return value

    @field_validator("targets", mode="before")
    @classmethod
    def expand_targets(cls, value: Any) -> Any:
        # a bare string is shorthand for {"path": ...}
        if isinstance(value, list):
            return [{"path": t} if isinstance(t, str) else t for t in value]
        return value

    @property
    def version(self) -> Version:
        return parse_version(self.ver)

    @property
    def identifier(self) -> PackageIdentifier:
        return PackageIdentifier(self.name, self.version)


class StoreConfig(BaseModel):
    """Connection settings of the SFTP package store."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(min_length=1)
    port: int = Field(gt=0, lt=65536)
    user: str = Field(min_length=1)
    path: str = Field(min_length=1)


def build_requirements(
    entries: list[PackageEntry], default: VersionConstraint
) -> list[Requirement]:
    """Turn config entries into requirements.

    Entries without ``ver`` get ``default``.

    Raises:
        DuplicateRequirement: on two entries with the same name and constraint
        InvalidConstraintSyntax, InvalidConstraintRange, InvalidVersionFormat:
            on a malformed ``ver``
    """
    requirements: list[Requirement] = []
    seen: set[Requirement] = set()
    for entry in entries:
        if entry.ver:
            constraint = parse_constraint(entry.ver)
        else:
            logger.info("using default version constraint %s for package %s", default.display, entry.name)
            constraint = default
        requirement = Requirement(entry.name, constraint)
        if requirement in seen:
            raise DuplicateRequirement(requirement)
        seen.add(requirement)
        requirements.append(requirement)
    return requirements


def load_update_config(path: Path, default: VersionConstraint) -> list[Requirement]:
    config = _validate(UpdateConfig, read_config_file(path), path)
    return build_requirements(config.packages, default)


def load_create_config(path: Path) -> CreateConfig:
    return _validate(CreateConfig, read_config_file(path), path)


def load_store_config(path: Path) -> StoreConfig:
    if not path.exists():
        raise ConfigError(f"store config {path} not found")
    return _validate(StoreConfig, read_config_file(path), path)
