from tests.utils.fake_catalog import FakeCatalogReader
from tests.utils.snapshot_builders import (
    check,
    enum_type,
    foreign_key,
    from_sequence,
    key,
    literal,
    make_column,
    make_schema,
    make_sequence,
    make_table,
    make_view,
    primary_key,
    unique,
)

__all__ = [
    "FakeCatalogReader",
    "check",
    "enum_type",
    "foreign_key",
    "from_sequence",
    "key",
    "literal",
    "make_column",
    "make_schema",
    "make_sequence",
    "make_table",
    "make_view",
    "primary_key",
    "unique",
]
