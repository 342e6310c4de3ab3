"""Schema graph filtering, relation inference and annotation for database docs."""

from .version import __version__, check_version
from .errors import (
    SchemaKGError,
    NotFoundError,
    FilterError,
    UnknownStrategyError,
    ResolutionError,
    RepairError,
    InvalidCardinalityError,
    DecodeError,
    ConfigError,
    DuplicateConfigError,
    VersionMismatchError,
    InvalidVersionConstraintError,
    InvalidVersionError,
)
from .schema import (
    Cardinality,
    Column,
    Index,
    Constraint,
    Trigger,
    Table,
    Relation,
    Schema,
)
from .patterns import matches, has_any_label
from .graph_builder import build_relation_graph, expand_tables, summarize_graph
from .table_filter import filter_tables, select_tables
from .naming import NamingStrategy, select_naming_strategy
from .relation_inference import infer_relations
from .annotations import Annotations, TableAnnotation, RelationAnnotation, merge_annotations
from .codec import encode_schema, decode_schema, dumps, loads, dump_schema, load_schema
from .config import Config, Dictionary, masked_dsn, find_config_file
from .exporter import export_schema_pack

__all__ = [
    "__version__",
    "check_version",
    "SchemaKGError",
    "NotFoundError",
    "FilterError",
    "UnknownStrategyError",
    "ResolutionError",
    "RepairError",
    "InvalidCardinalityError",
    "DecodeError",
    "ConfigError",
    "DuplicateConfigError",
    "VersionMismatchError",
    "InvalidVersionConstraintError",
    "InvalidVersionError",
    "Cardinality",
    "Column",
    "Index",
    "Constraint",
    "Trigger",
    "Table",
    "Relation",
    "Schema",
    "matches",
    "has_any_label",
    "build_relation_graph",
    "expand_tables",
    "summarize_graph",
    "filter_tables",
    "select_tables",
    "NamingStrategy",
    "select_naming_strategy",
    "infer_relations",
    "Annotations",
    "TableAnnotation",
    "RelationAnnotation",
    "merge_annotations",
    "encode_schema",
    "decode_schema",
    "dumps",
    "loads",
    "dump_schema",
    "load_schema",
    "Config",
    "Dictionary",
    "masked_dsn",
    "find_config_file",
    "export_schema_pack",
]
