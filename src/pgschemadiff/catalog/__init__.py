"""Catalog introspection: raw readers, array decoding and snapshot building"""

from .arrays import coerce_array, parse_array
from .builder import SnapshotBuilder, build_schema, classify_default
from .reader import CatalogReader, PostgresCatalogReader

__all__ = [
    "CatalogReader",
    "PostgresCatalogReader",
    "SnapshotBuilder",
    "build_schema",
    "classify_default",
    "coerce_array",
    "parse_array",
]
