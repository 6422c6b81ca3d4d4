"""
Column-level diff

Reconciles nullability, type and default of one column that exists (by
name) in both the desired and the current table. The three checks are
independent and emitted in that order.
"""

from pgschemadiff.models import Column, LiteralDefault, NoDefault, SequenceDefault

from . import sql_generator as sql
from .results import DiffFragment


def type_changed(desired: Column, current: Column) -> bool:
    """Compare base type and length only

    Numeric precision/scale are tracked but deliberately not compared, so a
    numeric(10,2) -> numeric(12,4) change does not trigger a type alter.
    """
    return desired.data_type != current.data_type or desired.length != current.length


def _describe_default(column: Column) -> str:
    return sql.render_default(column.default) or "no default"


def _diff_nullability(table_name: str, desired: Column, current: Column) -> list[str]:
    if not desired.is_nullable and current.is_nullable:
        return [sql.set_not_null(table_name, desired.name)]
    if desired.is_nullable and not current.is_nullable:
        return [sql.drop_not_null(table_name, desired.name)]
    return []


def _diff_default(table_name: str, desired: Column, current: Column) -> DiffFragment:
    """Reconcile defaults, switching on what the current column has"""
    fragment = DiffFragment()
    wanted = desired.default
    existing = current.default
    name = desired.name

    if isinstance(existing, NoDefault):
        expression = sql.render_default(wanted)
        if expression is not None:
            fragment.statements.append(sql.set_default(table_name, name, expression))
        return fragment

    if isinstance(existing, SequenceDefault):
        if isinstance(wanted, NoDefault):
            fragment.statements.append(sql.drop_default(table_name, name))
            fragment.statements.append(sql.drop_sequence(existing.sequence))
        elif isinstance(wanted, SequenceDefault):
            if wanted.sequence != existing.sequence:
                # The desired sequence is created earlier in the script; the renamed
                # current sequence takes its place and keeps its current value.
                fragment.statements.append(sql.drop_sequence(wanted.sequence))
                fragment.statements.append(sql.rename_sequence(existing.sequence, wanted.sequence))
        else:
            fragment.statements.append(sql.drop_default(table_name, name))
            fragment.warnings.append(_unapplied_default_warning(table_name, desired, current))
        return fragment

    if isinstance(wanted, LiteralDefault) and wanted.expression == existing.expression:
        return fragment
    fragment.statements.append(sql.drop_default(table_name, name))
    if not isinstance(wanted, NoDefault):
        fragment.warnings.append(_unapplied_default_warning(table_name, desired, current))
    return fragment


def _unapplied_default_warning(table_name: str, desired: Column, current: Column) -> str:
    return (
        f'Default of "{table_name}"."{desired.name}" changed from '
        f"{_describe_default(current)} to {_describe_default(desired)}: "
        "the old default is dropped, the new one is not set"
    )


def diff_column(table_name: str, desired: Column, current: Column) -> DiffFragment:
    """Generate ALTER statements turning *current* into *desired*

    Args:
        table_name: Table both columns belong to
        desired: Column as it should be
        current: Column as it is

    Returns:
        Fragment with zero or more statements (nullability, type, default)
    """
    fragment = DiffFragment()
    fragment.statements.extend(_diff_nullability(table_name, desired, current))
    if type_changed(desired, current):
        fragment.statements.append(sql.alter_column_type(table_name, desired))
    fragment.extend(_diff_default(table_name, desired, current))
    return fragment
