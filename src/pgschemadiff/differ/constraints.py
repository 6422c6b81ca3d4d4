"""
Constraint equality and clause synthesis
"""

from pgschemadiff.models import Constraint, ConstraintKind, KeyColumn

from .sql_utils import quote_ident


def _key_set(keys: list[KeyColumn] | None) -> set[tuple[str, str, str]]:
    return {(key.name, key.data_type, key.table_name) for key in keys or []}


def keys_equal(first: list[KeyColumn] | None, second: list[KeyColumn] | None) -> bool:
    """Compare key columns as sets of (name, data type, owning table); order is irrelevant"""
    return _key_set(first) == _key_set(second)


def constraints_equal(first: Constraint, second: Constraint) -> bool:
    """Decide whether two constraints describe the same thing

    Names are never compared. Kinds must match; foreign keys then compare
    their referenced columns and primary keys their local columns.
    """
    if first.kind != second.kind:
        return False
    if first.kind == ConstraintKind.FOREIGN_KEY:
        return keys_equal(first.foreign_keys, second.foreign_keys)
    if first.kind == ConstraintKind.PRIMARY_KEY:
        return keys_equal(first.keys, second.keys)
    # UNIQUE and CHECK constraints of the same kind always compare equal, so a
    # changed UNIQUE column list or CHECK expression is not detected. Kept as is
    # until the intended semantics are confirmed.
    return True


def _key_list(keys: list[KeyColumn] | None) -> str:
    return ", ".join(quote_ident(key.name) for key in keys or [])


def render_constraint(constraint: Constraint) -> str:
    """Render the clause that follows ``CONSTRAINT "<name>"``

    Returns an empty string when no clause can be synthesized: CHECK
    constraints, and foreign keys whose referenced table is unresolved.
    """
    if constraint.kind == ConstraintKind.PRIMARY_KEY:
        return f"PRIMARY KEY ({_key_list(constraint.keys)})"
    if constraint.kind == ConstraintKind.FOREIGN_KEY:
        if not constraint.foreign_table_name:
            return ""
        return (
            f"FOREIGN KEY ({_key_list(constraint.keys)}) "
            f"REFERENCES {quote_ident(constraint.foreign_table_name)} "
            f"({_key_list(constraint.foreign_keys)})"
        )
    if constraint.kind == ConstraintKind.UNIQUE:
        return f"UNIQUE ({_key_list(constraint.keys)})"
    return ""
