"""Error types raised while filtering, inferring and annotating schemas."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


class SchemaKGError(Exception):
    """Base error for schema-kg-docs."""

    pass


class NotFoundError(SchemaKGError, LookupError):
    """Named entity does not exist in its container."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} not found: {name}")
        self.kind = kind
        self.name = name


class FilterError(SchemaKGError, ValueError):
    """Table filter received a malformed pattern or distance."""

    pass


class UnknownStrategyError(SchemaKGError, ValueError):
    """Naming strategy identifier is not registered."""

    def __init__(self, name: str, available: Iterable[str]) -> None:
        self.available: List[str] = sorted(available)
        super().__init__(
            f"naming strategy does not exist: '{name}' (available: {', '.join(self.available)})"
        )
        self.name = name


class ResolutionError(SchemaKGError, LookupError):
    """Declared relation names a table or column that cannot be resolved."""

    pass


class RepairError(ResolutionError):
    """Decoded snapshot references an entity missing from its table list."""

    pass


class InvalidCardinalityError(SchemaKGError, ValueError):
    """Cardinality token is not recognised."""

    def __init__(self, token: str) -> None:
        super().__init__(f"invalid cardinality: '{token}'")
        self.token = token


class ConfigError(SchemaKGError):
    """Base error for configuration problems."""

    pass


class DuplicateConfigError(ConfigError):
    """More than one conventional config file was found."""

    def __init__(self, paths: List[Path]) -> None:
        self.paths = paths
        super().__init__(f"duplicate config file [{', '.join(p.name for p in paths)}]")


class VersionMismatchError(ConfigError):
    """Running version does not satisfy the configured constraint."""

    def __init__(self, required: str, running: str, program: str = "schema-kg-docs") -> None:
        super().__init__(
            f"the required {program} version for the configuration is '{required}'. "
            f"however, the running {program} version is '{running}'"
        )
        self.required = required
        self.running = running


class InvalidVersionConstraintError(ConfigError, ValueError):
    """Version constraint clause cannot be parsed."""

    def __init__(self, clause: str) -> None:
        super().__init__(f"invalid version constraint: '{clause}'")
        self.clause = clause


class InvalidVersionError(ConfigError, ValueError):
    """Version string (e.g. the running version) is not numeric."""

    def __init__(self, version: str) -> None:
        super().__init__(f"invalid version: '{version}'")
        self.version = version


class DecodeError(SchemaKGError, ValueError):
    """Snapshot document is missing a required field or is malformed."""

    pass
