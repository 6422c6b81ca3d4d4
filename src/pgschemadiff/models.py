"""
Schema Snapshot Models

In-memory model of one PostgreSQL schema: tables (and views) with their
columns and constraints, plus the sequences and user-defined types that
live alongside them. Entities are built once by the snapshot builder and
are read-only afterwards.

Back-references (column -> table, column -> constraints, constraint -> keys)
are stored as names rather than object links so a snapshot serializes to
plain JSON.
"""

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TableKind(StrEnum):
    """information_schema.tables.table_type values we handle"""

    BASE_TABLE = "BASE TABLE"
    VIEW = "VIEW"


class ConstraintKind(StrEnum):
    """pg_constraint.contype codes"""

    UNIQUE = "u"
    PRIMARY_KEY = "p"
    FOREIGN_KEY = "f"
    CHECK = "c"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ====================
# DEFAULT VALUES
# ====================


class NoDefault(_Frozen):
    """Column has no default expression"""

    kind: Literal["none"] = "none"


class LiteralDefault(_Frozen):
    """Column default stored verbatim, e.g. ``'active'::text`` or ``now()``"""

    kind: Literal["literal"] = "literal"
    expression: str


class SequenceDefault(_Frozen):
    """Column default backed by ``nextval()`` on a named sequence"""

    kind: Literal["sequence"] = "sequence"
    sequence: str


DefaultValue = Annotated[
    Union[NoDefault, LiteralDefault, SequenceDefault], Field(discriminator="kind")
]


# ====================
# ENTITIES
# ====================


class KeyColumn(_Frozen):
    """Reference to a column taking part in a constraint key"""

    table_name: str
    name: str
    data_type: str


class Column(_Frozen):
    """Table column"""

    name: str
    position: int  # catalog ordinal position, 1-based
    data_type: str  # quoted base type name, e.g. int4, varchar, "MyEnum"
    is_nullable: bool = True
    default: DefaultValue = Field(default_factory=NoDefault)
    length: int | None = None  # character maximum length
    numeric_precision: int | None = None
    numeric_scale: int | None = None
    table_name: str
    constraint_names: list[str] = []

    def as_key(self) -> KeyColumn:
        return KeyColumn(table_name=self.table_name, name=self.name, data_type=self.data_type)


class Constraint(_Frozen):
    """Table constraint (UNIQUE, PRIMARY KEY, FOREIGN KEY or CHECK)"""

    name: str
    kind: ConstraintKind
    table_name: str
    keys: list[KeyColumn] = []

    # FOREIGN KEY only
    foreign_table_name: str | None = None
    foreign_keys: list[KeyColumn] | None = None

    @model_validator(mode="after")
    def _check_foreign_reference(self) -> "Constraint":
        has_reference = self.foreign_table_name is not None and self.foreign_keys is not None
        if self.kind == ConstraintKind.FOREIGN_KEY and not has_reference:
            raise ValueError(
                f"Foreign key '{self.name}' requires a foreign table and foreign keys"
            )
        if self.kind != ConstraintKind.FOREIGN_KEY and (
            self.foreign_table_name is not None or self.foreign_keys is not None
        ):
            raise ValueError(
                f"Constraint '{self.name}' of kind '{self.kind.value}' "
                "cannot reference a foreign table"
            )
        return self


class Table(_Frozen):
    """Base table or view"""

    name: str
    kind: TableKind = TableKind.BASE_TABLE
    schema_name: str = "public"
    catalog: str = ""
    columns: list[Column] = []
    constraints: list[Constraint] = []
    view_definition: str | None = None

    @model_validator(mode="after")
    def _views_have_no_constraints(self) -> "Table":
        if self.kind == TableKind.VIEW and self.constraints:
            raise ValueError(f"View '{self.name}' cannot carry constraints")
        return self

    @property
    def is_view(self) -> bool:
        return self.kind == TableKind.VIEW

    def matches(self, other: "Table") -> bool:
        """Tables from different snapshots are the same table when names match"""
        return self.name == other.name

    def find_column(self, name: str) -> Column | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def find_column_by_position(self, position: int) -> Column | None:
        for column in self.columns:
            if column.position == position:
                return column
        return None

    def primary_key(self) -> Constraint | None:
        for constraint in self.constraints:
            if constraint.kind == ConstraintKind.PRIMARY_KEY:
                return constraint
        return None


class Sequence(_Frozen):
    """Named sequence referenced by a column default"""

    name: str
    table_name: str
    column_name: str


class UserType(_Frozen):
    """User-defined type; only enums can be recreated"""

    name: str
    is_enum: bool = True
    labels: list[str] = []


class Schema(_Frozen):
    """Snapshot of one catalog/schema pair"""

    catalog: str
    name: str = "public"
    tables: list[Table] = []
    sequences: list[Sequence] = []
    types: list[UserType] = []

    @model_validator(mode="after")
    def _unique_table_names(self) -> "Schema":
        seen: set[str] = set()
        for table in self.tables:
            if table.name in seen:
                raise ValueError(f"Duplicate table name '{table.name}' in schema '{self.name}'")
            seen.add(table.name)
        return self

    def find_table(self, name: str) -> Table | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def find_type(self, name: str) -> UserType | None:
        for item in self.types:
            if item.name == name:
                return item
        return None

    def find_sequence(self, name: str) -> Sequence | None:
        for sequence in self.sequences:
            if sequence.name == name:
                return sequence
        return None
