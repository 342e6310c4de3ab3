"""Configuration file schema, discovery and the schema modification pipeline."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set
from urllib.parse import urlsplit, urlunsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .annotations import (
    Annotations,
    RelationAnnotation,
    TableAnnotation,
    merge_annotations,
    merge_table_labels,
)
from .errors import ConfigError, DuplicateConfigError
from .naming import NamingStrategy, select_naming_strategy
from .relation_inference import infer_relations
from .schema import Schema
from .table_filter import filter_tables
from .version import __version__, check_version

logger = logging.getLogger(__name__)

# searched in this order; finding more than one is an error
DEFAULT_CONFIG_FILENAMES = (".schema-kg.yml", "schema-kg.yml")
DEFAULT_DOC_PATH = "dbdoc"
PASSWORD_MASK = "*****"


def masked_dsn(url: str) -> str:
    """Replace the password of a connection URL with ``*****``.

    URLs without a userinfo password (including credential-less schemes that
    authenticate through query parameters) are returned unchanged.
    """
    parts = urlsplit(url)
    if parts.password is None:
        return url
    userinfo, _, hostinfo = parts.netloc.rpartition("@")
    username = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:{PASSWORD_MASK}@{hostinfo}"))


def find_config_file(root: Path) -> Optional[Path]:
    """Locate the conventional config file in ``root``.

    Raises:
        DuplicateConfigError: If more than one conventional name exists.
    """
    found = [root / name for name in DEFAULT_CONFIG_FILENAMES if (root / name).is_file()]
    if len(found) > 1:
        raise DuplicateConfigError(found)
    return found[0] if found else None


class Dictionary:
    """Terminology substitutions used when rendering documents."""

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    def lookup(self, term: str) -> str:
        """Translated term, or ``term`` itself when there is no entry."""
        return self._entries.get(term, term)

    def __len__(self) -> int:
        return len(self._entries)


class DSN(BaseModel):
    """Data source connection string."""

    url: str = ""

    @field_validator("url")
    @classmethod
    def expand_env(cls, v: str) -> str:
        return os.path.expandvars(v)


class DetectVirtualRelations(BaseModel):
    """Naming-convention relation inference settings."""

    enabled: bool = False
    strategy: str = "default"


class Config(BaseModel):
    """Main configuration for documenting a schema."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, description="Rename the documented schema")
    dsn: DSN = Field(default_factory=DSN)
    doc_path: str = Field(default=DEFAULT_DOC_PATH, alias="docPath")
    include: List[str] = Field(default_factory=list, description="Table name patterns to keep")
    exclude: List[str] = Field(default_factory=list, description="Table name patterns to drop")
    include_labels: List[str] = Field(default_factory=list, alias="includeLabels")
    distance: int = Field(default=0, ge=0, description="Relation hops added around selected tables")
    required_version: str = Field(default="", alias="requiredVersion")
    detect_virtual_relations: DetectVirtualRelations = Field(
        default_factory=DetectVirtualRelations, alias="detectVirtualRelations"
    )
    comments: List[TableAnnotation] = Field(default_factory=list)
    relations: List[RelationAnnotation] = Field(default_factory=list)
    dict_entries: Dict[str, str] = Field(default_factory=dict, alias="dict")

    @field_validator("dsn", mode="before")
    @classmethod
    def coerce_dsn(cls, v: Any) -> Any:
        """Accept ``dsn: "pg://..."`` as shorthand for ``dsn: {url: ...}``."""
        if isinstance(v, str):
            return {"url": v}
        return v

    @field_validator("doc_path")
    @classmethod
    def expand_doc_path(cls, v: str) -> str:
        return os.path.expandvars(v)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            Parsed Config instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigError: If the YAML or its contents are invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse YAML at {path}: {exc}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc

    @classmethod
    def load(cls, path: str | Path | None = None, root: Path | None = None) -> "Config":
        """Load ``path``, or discover a conventional config file under ``root``."""
        if path:
            return cls.from_yaml(path)
        found = find_config_file(root or Path.cwd())
        if found is None:
            logger.debug("No config file found, using defaults")
            return cls()
        logger.info(f"Using config file {found}")
        return cls.from_yaml(found)

    @property
    def dictionary(self) -> Dictionary:
        return Dictionary(self.dict_entries)

    def masked_dsn(self) -> str:
        return masked_dsn(self.dsn.url)

    def check_version(self, running: str = __version__) -> None:
        """Raise ``VersionMismatchError`` if ``running`` violates ``requiredVersion``."""
        check_version(self.required_version, running)

    def naming_strategy(self) -> NamingStrategy:
        return select_naming_strategy(self.detect_virtual_relations.strategy)

    def annotations(self) -> Annotations:
        return Annotations(name=self.name, comments=self.comments, relations=self.relations)

    def filter_tables(self, schema: Schema) -> Set[str]:
        """Apply include/exclude/labels/distance; declared relations count as edges."""
        return filter_tables(
            schema,
            include=self.include,
            exclude=self.exclude,
            labels=self.include_labels,
            distance=self.distance,
            declared_edges=[(r.table, r.parent_table) for r in self.relations],
        )

    def modify_schema(self, schema: Schema) -> None:
        """Infer relations (if enabled), filter, then merge annotations.

        Table labels from ``comments`` are applied before filtering so that
        ``includeLabels`` can select them.
        """
        annotations = self.annotations()
        if self.detect_virtual_relations.enabled:
            infer_relations(schema, self.naming_strategy())
        merge_table_labels(schema, annotations)
        pruned = self.filter_tables(schema)
        merge_annotations(schema, annotations, pruned=pruned)
