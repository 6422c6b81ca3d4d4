"""
Table-level diff

Combines the column and constraint diffs for one desired/current table
pair. Columns are always matched by name; ordinal positions are ignored,
so a reordered column produces no statement (PostgreSQL cannot move a
column in place and rebuilding the table is not attempted).
"""

from collections.abc import Collection

from pgschemadiff.errors import TableKindMismatchError
from pgschemadiff.models import Constraint, Table

from . import sql_generator as sql
from .columns import diff_column
from .constraints import constraints_equal, render_constraint
from .results import DiffFragment
from .set_ops import difference_by_name, set_difference


def manual_constraint_warning(table_name: str, constraint: Constraint) -> str:
    return f'Constraint "{constraint.name}" on "{table_name}" must be created manually'


def diff_table(
    desired: Table, current: Table, created_later: Collection[str] = ()
) -> DiffFragment:
    """Generate statements turning *current* into *desired*

    Args:
        desired: Table as it should be
        current: Table as it is
        created_later: Tables the script creates after the table diffs; foreign
            keys referencing them are returned as deferred statements

    Raises:
        TableKindMismatchError: If one side is a base table and the other a view
    """
    if desired.kind != current.kind:
        raise TableKindMismatchError(desired.name, desired.kind.value, current.kind.value)

    fragment = DiffFragment()
    # Views are dropped and recreated by the schema differ
    if desired.is_view:
        return fragment

    name = desired.name

    for column in difference_by_name(desired.columns, current.columns):
        fragment.statements.append(sql.add_column(name, column))

    for column in desired.columns:
        existing = current.find_column(column.name)
        if existing is not None:
            fragment.extend(diff_column(name, column, existing))

    for constraint in set_difference(desired.constraints, current.constraints, constraints_equal):
        if not render_constraint(constraint):
            fragment.warnings.append(manual_constraint_warning(name, constraint))
        if constraint.foreign_table_name in created_later:
            fragment.deferred.append(sql.add_constraint(name, constraint))
        else:
            fragment.statements.append(sql.add_constraint(name, constraint))

    for constraint in set_difference(current.constraints, desired.constraints, constraints_equal):
        fragment.statements.append(sql.drop_constraint(name, constraint.name))

    for column in difference_by_name(current.columns, desired.columns):
        fragment.statements.append(sql.drop_column(name, column.name))

    return fragment
