"""Structural diff between two schema snapshots and DDL synthesis"""

from .columns import diff_column, type_changed
from .constraints import constraints_equal, render_constraint
from .dependencies import TableDependencyGraph
from .results import DiffFragment, SchemaDiffResult
from .schema_differ import SchemaDiffer, diff_schemas
from .sql_generator import render_column, render_default, render_type, wrap_in_transaction
from .tables import diff_table

__all__ = [
    "DiffFragment",
    "SchemaDiffResult",
    "SchemaDiffer",
    "TableDependencyGraph",
    "constraints_equal",
    "diff_column",
    "diff_schemas",
    "diff_table",
    "render_column",
    "render_constraint",
    "render_default",
    "render_type",
    "type_changed",
    "wrap_in_transaction",
]
