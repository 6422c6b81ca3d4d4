"""
pgschemadiff - PostgreSQL schema diff and migration script generator

Compares a desired and a current schema snapshot and synthesizes the DDL
statements that bring the current schema in line with the desired one.
"""

__version__ = "0.1.0"

from .catalog import PostgresCatalogReader, build_schema
from .config import ConnectionSettings
from .differ import SchemaDiffer, SchemaDiffResult, diff_schemas, wrap_in_transaction
from .errors import (
    ArrayParseError,
    CatalogReadError,
    SchemaDiffError,
    SnapshotFileError,
    TableKindMismatchError,
    UnresolvedReferenceError,
)
from .models import Column, Constraint, Schema, Sequence, Table, UserType
from .storage import load_snapshot, save_snapshot

__all__ = [
    "__version__",
    "ArrayParseError",
    "CatalogReadError",
    "Column",
    "ConnectionSettings",
    "Constraint",
    "PostgresCatalogReader",
    "Schema",
    "SchemaDiffError",
    "SchemaDiffResult",
    "SchemaDiffer",
    "Sequence",
    "SnapshotFileError",
    "Table",
    "TableKindMismatchError",
    "UnresolvedReferenceError",
    "UserType",
    "build_schema",
    "diff_schemas",
    "load_snapshot",
    "save_snapshot",
    "wrap_in_transaction",
]
