"""
SQL Generator

Renders snapshot entities into DDL fragments and complete statements.
Every identifier is double-quoted; data type names are emitted as the
catalog reported them (already quote_ident'ed). Statements end with ``;``
and carry no trailing newline.
"""

from pgschemadiff.models import (
    Column,
    Constraint,
    DefaultValue,
    LiteralDefault,
    Sequence,
    SequenceDefault,
    Table,
    UserType,
)

from .constraints import render_constraint
from .sql_utils import quote_ident, quote_literal

# ====================
# FRAGMENTS
# ====================


def render_type(column: Column) -> str:
    """Render ``<data_type>[(<length>)]``; numeric precision/scale are not rendered"""
    if column.length is not None:
        return f"{column.data_type}({column.length})"
    return column.data_type


def render_default(default: DefaultValue) -> str | None:
    """Render a default expression, or None when the column has no default"""
    if isinstance(default, SequenceDefault):
        return f"NEXTVAL('{quote_ident(default.sequence)}')"
    if isinstance(default, LiteralDefault):
        return default.expression
    return None


def render_column(column: Column) -> str:
    """Render a full column declaration for CREATE TABLE / ADD COLUMN"""
    parts = [quote_ident(column.name), render_type(column)]
    default = render_default(column.default)
    if default is not None:
        parts.append(f"DEFAULT {default}")
    if not column.is_nullable:
        parts.append("NOT NULL")
    return " ".join(parts)


def warning_comment(message: str) -> str:
    return f"-- WARNING: {message}"


# ====================
# SEQUENCES AND TYPES
# ====================


def create_sequence(sequence: Sequence) -> str:
    return f"CREATE SEQUENCE {quote_ident(sequence.name)};"


def drop_sequence(name: str) -> str:
    return f"DROP SEQUENCE IF EXISTS {quote_ident(name)};"


def rename_sequence(old_name: str, new_name: str) -> str:
    return f"ALTER SEQUENCE {quote_ident(old_name)} RENAME TO {quote_ident(new_name)};"


def create_type(user_type: UserType) -> str:
    """CREATE TYPE ... AS ENUM, or a warning comment for non-enum types"""
    if not user_type.is_enum:
        return warning_comment(f"cannot create non-enum type {quote_ident(user_type.name)}")
    labels = ", ".join(quote_literal(label) for label in user_type.labels)
    return f"CREATE TYPE {quote_ident(user_type.name)} AS ENUM ({labels});"


def drop_type(user_type: UserType) -> str:
    return f"DROP TYPE {quote_ident(user_type.name)};"


# ====================
# TABLES AND VIEWS
# ====================


def create_table(table: Table) -> str:
    """CREATE TABLE with columns and named constraints, or CREATE OR REPLACE VIEW

    Constraints without a synthesizable clause (CHECK) are left out.
    """
    if table.is_view:
        return f"CREATE OR REPLACE VIEW {quote_ident(table.name)} AS\n{table.view_definition or ''};"

    items = [render_column(column) for column in table.columns]
    for constraint in table.constraints:
        clause = render_constraint(constraint)
        if clause:
            items.append(f"CONSTRAINT {quote_ident(constraint.name)} {clause}")
    body = ",\n  ".join(items)
    return f"CREATE TABLE {quote_ident(table.name)} (\n  {body}\n);"


def drop_table(table: Table) -> str:
    if table.is_view:
        return f"DROP VIEW IF EXISTS {quote_ident(table.name)} CASCADE;"
    return f"DROP TABLE IF EXISTS {quote_ident(table.name)};"


# ====================
# ALTER TABLE
# ====================


def _alter_table(table_name: str) -> str:
    return f"ALTER TABLE {quote_ident(table_name)}"


def _alter_column(table_name: str, column_name: str) -> str:
    return f"{_alter_table(table_name)} ALTER COLUMN {quote_ident(column_name)}"


def add_column(table_name: str, column: Column) -> str:
    return f"{_alter_table(table_name)} ADD COLUMN {render_column(column)};"


def drop_column(table_name: str, column_name: str) -> str:
    return f"{_alter_table(table_name)} DROP COLUMN IF EXISTS {quote_ident(column_name)};"


def set_not_null(table_name: str, column_name: str) -> str:
    return f"{_alter_column(table_name, column_name)} SET NOT NULL;"


def drop_not_null(table_name: str, column_name: str) -> str:
    return f"{_alter_column(table_name, column_name)} DROP NOT NULL;"


def alter_column_type(table_name: str, column: Column) -> str:
    """Change a column type, casting existing values to the new base type"""
    return (
        f"{_alter_column(table_name, column.name)} TYPE {render_type(column)} "
        f"USING {quote_ident(column.name)}::{column.data_type};"
    )


def set_default(table_name: str, column_name: str, expression: str) -> str:
    return f"{_alter_column(table_name, column_name)} SET DEFAULT {expression};"


def drop_default(table_name: str, column_name: str) -> str:
    return f"{_alter_column(table_name, column_name)} DROP DEFAULT;"


def add_constraint(table_name: str, constraint: Constraint) -> str:
    """ADD CONSTRAINT, or a warning comment when the clause cannot be synthesized"""
    clause = render_constraint(constraint)
    if not clause:
        return warning_comment(
            f"cannot synthesize {constraint.kind.name} constraint "
            f"{quote_ident(constraint.name)} on {quote_ident(table_name)}"
        )
    return f"{_alter_table(table_name)} ADD CONSTRAINT {quote_ident(constraint.name)} {clause};"


def drop_constraint(table_name: str, constraint_name: str) -> str:
    return f"{_alter_table(table_name)} DROP CONSTRAINT IF EXISTS {quote_ident(constraint_name)};"


def wrap_in_transaction(sql: str, commit: bool = False) -> str:
    """Wrap a generated script for manual review: BEGIN ... ROLLBACK (or COMMIT)"""
    end = "COMMIT;" if commit else "ROLLBACK;"
    return f"SET client_min_messages TO WARNING;\nBEGIN;\n{sql}{end}\n"
