"""
Schema Differ

Compares a desired and a current schema snapshot and produces the ordered
statement stream that brings the current schema in line with the desired
one. Nothing is executed.
"""

from pgschemadiff.models import Constraint, ConstraintKind, Schema, Table

from . import sql_generator as sql
from .constraints import render_constraint
from .dependencies import TableDependencyGraph
from .results import DiffFragment, SchemaDiffResult
from .set_ops import difference_by_name, set_difference
from .tables import diff_table, manual_constraint_warning


def _matched_as_table(table: Table, other: Table) -> bool:
    """A same-named view on the other side never counts as a match"""
    return table.matches(other) and not other.is_view


def _foreign_keys_to(table: Table, names: set[str]) -> list[Constraint]:
    """Foreign keys of *table* that reference one of *names* (self-references excluded)"""
    return [
        constraint
        for constraint in table.constraints
        if constraint.kind == ConstraintKind.FOREIGN_KEY
        and constraint.foreign_table_name in names
        and constraint.foreign_table_name != table.name
    ]


class SchemaDiffer:
    """Schema-level diff orchestration

    Statements are emitted in dependency-safe order:

    1. CREATE SEQUENCE for sequences only in the desired schema
    2. CREATE TYPE for types only in the desired schema
    3. per-table ALTERs for tables present on both sides
    4. DROP TABLE / DROP VIEW for tables to remove (views are always recreated),
       dependents before the tables they reference
    5. DROP TYPE for types only in the current schema
    6. CREATE TABLE / CREATE OR REPLACE VIEW for tables to create, referenced
       tables first and views last
    7. ADD CONSTRAINT for foreign keys that point at a table created in step 6
       after the referencing table (step 3 additions and foreign-key cycles)

    Types are dropped after the tables that may still use them.
    """

    def __init__(self, desired: Schema, current: Schema) -> None:
        """Initialize schema differ

        Args:
            desired: Snapshot the current schema should be migrated to
            current: Snapshot of the schema as it is now
        """
        self.desired = desired
        self.current = current

    def diff(self) -> SchemaDiffResult:
        """Generate the full statement stream

        Raises:
            TableKindMismatchError: If a table is a base table on one side and a view on the other
        """
        to_create = set_difference(self.desired.tables, self.current.tables, _matched_as_table)
        to_drop = set_difference(self.current.tables, self.desired.tables, _matched_as_table)

        result = SchemaDiffResult()
        result.extend(self._create_sequences())
        result.extend(self._create_types())
        result.extend(self._diff_intersecting_tables({table.name for table in to_create}))
        result.extend(self._drop_tables(to_drop))
        result.extend(self._drop_types())
        result.extend(self._create_tables(to_create))

        result.statements.extend(result.deferred)
        result.deferred = []
        return result

    def _create_sequences(self) -> DiffFragment:
        sequences = difference_by_name(self.desired.sequences, self.current.sequences)
        return DiffFragment(statements=[sql.create_sequence(item) for item in sequences])

    def _create_types(self) -> DiffFragment:
        fragment = DiffFragment()
        for item in difference_by_name(self.desired.types, self.current.types):
            fragment.statements.append(sql.create_type(item))
            if not item.is_enum:
                fragment.warnings.append(
                    f'Type "{item.name}" is not an enum and must be created manually'
                )
        return fragment

    def _drop_types(self) -> DiffFragment:
        types = difference_by_name(self.current.types, self.desired.types)
        return DiffFragment(statements=[sql.drop_type(item) for item in types])

    def _diff_intersecting_tables(self, created_later: set[str]) -> DiffFragment:
        fragment = DiffFragment()
        for table in self.desired.tables:
            existing = self.current.find_table(table.name)
            if existing is not None:
                fragment.extend(diff_table(table, existing, created_later))
        return fragment

    def _drop_tables(self, tables: list[Table]) -> DiffFragment:
        fragment = DiffFragment()
        ordered = TableDependencyGraph(tables).drop_order()

        # Foreign keys onto a table dropped earlier only exist in cycles; remove them first
        dropped: set[str] = set()
        for table in ordered:
            for constraint in _foreign_keys_to(table, dropped):
                fragment.statements.append(sql.drop_constraint(table.name, constraint.name))
            dropped.add(table.name)

        fragment.statements.extend(sql.drop_table(table) for table in ordered)
        return fragment

    def _create_tables(self, tables: list[Table]) -> DiffFragment:
        fragment = DiffFragment()
        pending = {table.name for table in tables}
        for table in TableDependencyGraph(tables).creation_order():
            pending.discard(table.name)
            deferred = _foreign_keys_to(table, pending)
            for constraint in deferred:
                fragment.deferred.append(sql.add_constraint(table.name, constraint))
            for constraint in table.constraints:
                if not render_constraint(constraint):
                    fragment.warnings.append(manual_constraint_warning(table.name, constraint))

            inline = [constraint for constraint in table.constraints if constraint not in deferred]
            fragment.statements.append(
                sql.create_table(table.model_copy(update={"constraints": inline}))
            )
        return fragment


def diff_schemas(desired: Schema, current: Schema) -> list[str]:
    """Return the ordered statements migrating *current* to *desired*"""
    return SchemaDiffer(desired, current).diff().statements
