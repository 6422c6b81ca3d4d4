"""
Snapshot Builder

Turns the raw rows of a CatalogReader into an immutable Schema snapshot.

Build order matters: types and tables first, then every table's columns,
then constraints (which resolve key ordinal positions through the columns
already loaded, possibly on another table), and finally sequences, of
which only those referenced by some column default are kept.
"""

import re
from typing import Any

from rich.console import Console

from pgschemadiff.errors import UnresolvedReferenceError
from pgschemadiff.models import (
    Column,
    Constraint,
    ConstraintKind,
    DefaultValue,
    KeyColumn,
    LiteralDefault,
    NoDefault,
    Schema,
    Sequence,
    SequenceDefault,
    Table,
    TableKind,
    UserType,
)

from .arrays import coerce_array
from .reader import CatalogReader

console = Console(stderr=True)

_IDENTIFIER = r"""(?:"(?:[^"]|"")+"|[^'".]+)"""

SEQUENCE_DEFAULT_PATTERN = re.compile(
    rf"""nextval\('(?:({_IDENTIFIER})\.)?({_IDENTIFIER})'::regclass\)"""
)


def _unquote(identifier: str) -> str:
    if identifier.startswith('"'):
        return identifier[1:-1].replace('""', '"')
    return identifier


def classify_default(expression: str | None, schema_name: str | None = None) -> DefaultValue:
    """Classify a column_default expression

    Args:
        expression: Raw default text from the catalog, or None
        schema_name: Schema being snapshotted; a sequence qualified with this
            schema is stored under its bare name

    Returns:
        SequenceDefault when the text is a single ``nextval('<seq>'::regclass)``
        call on a sequence of this schema, NoDefault for a missing or blank
        default, LiteralDefault otherwise (including sequences qualified with
        another schema, which are kept verbatim)
    """
    if expression is None or not expression.strip():
        return NoDefault()
    matches = SEQUENCE_DEFAULT_PATTERN.findall(expression)
    if len(matches) == 1:
        qualifier, name = matches[0]
        if not qualifier or _unquote(qualifier) == schema_name:
            return SequenceDefault(sequence=_unquote(name))
    return LiteralDefault(expression=expression)


def _clean_view_definition(definition: str | None) -> str | None:
    if definition is None:
        return None
    return definition.strip().strip(";").strip()


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _build_column(row: dict[str, Any], table_name: str, schema_name: str) -> Column:
    return Column(
        name=row["column_name"],
        position=int(row["ordinal_position"]),
        default=classify_default(row.get("column_default"), schema_name),
        is_nullable=row.get("is_nullable") != "NO",
        data_type=row["data_type"],
        length=_optional_int(row.get("character_maximum_length")),
        numeric_precision=_optional_int(row.get("numeric_precision")),
        numeric_scale=_optional_int(row.get("numeric_scale")),
        table_name=table_name,
    )


def _resolve_keys(
    constraint_name: str, positions: list[str], table_name: str, columns: list[Column]
) -> list[KeyColumn]:
    """Map catalog ordinal positions to the columns of *table_name*"""
    by_position = {column.position: column for column in columns}
    keys: list[KeyColumn] = []
    for raw in positions:
        column = by_position.get(int(raw))
        if column is None:
            raise UnresolvedReferenceError(
                constraint_name, f"{table_name} column #{raw}"
            )
        keys.append(column.as_key())
    return keys


class SnapshotBuilder:
    """Builds a Schema snapshot for one catalog/schema pair"""

    def __init__(self, reader: CatalogReader, catalog: str, schema_name: str = "public") -> None:
        self.reader = reader
        self.catalog = catalog
        self.schema_name = schema_name

    def build(self) -> Schema:
        """Read the catalog and assemble the snapshot

        Raises:
            UnresolvedReferenceError: If a constraint references an unknown
                table or an ordinal position missing from its table
        """
        types = self._collect_types()
        table_rows = self._collect_table_rows()
        columns = {
            row["table_name"]: self._collect_columns(row["table_name"]) for row in table_rows
        }
        constraints = {
            row["table_name"]: self._collect_constraints(row["table_name"], columns)
            for row in table_rows
            if row["table_type"] == TableKind.BASE_TABLE
        }

        tables: list[Table] = []
        for row in table_rows:
            name = row["table_name"]
            table_constraints = constraints.get(name, [])
            tables.append(
                Table(
                    name=name,
                    kind=TableKind(row["table_type"]),
                    schema_name=row.get("table_schema") or self.schema_name,
                    catalog=row.get("table_catalog") or self.catalog,
                    columns=self._register_constraints(columns[name], table_constraints),
                    constraints=table_constraints,
                    view_definition=_clean_view_definition(row.get("view_definition")),
                )
            )

        sequences = self._collect_sequences(tables)
        console.print(
            f"[dim]  {self.catalog}.{self.schema_name}: {len(tables)} tables, "
            f"{len(sequences)} sequences, {len(types)} types[/dim]"
        )
        return Schema(
            catalog=self.catalog,
            name=self.schema_name,
            tables=tables,
            sequences=sequences,
            types=types,
        )

    def _collect_types(self) -> list[UserType]:
        return [
            UserType(
                name=row["name"],
                is_enum=bool(row.get("is_enum")),
                labels=coerce_array(row.get("labels")),
            )
            for row in self.reader.fetch_types(self.schema_name)
        ]

    def _collect_table_rows(self) -> list[dict[str, Any]]:
        rows = self.reader.fetch_tables(self.catalog, self.schema_name)
        return [row for row in rows if row["table_type"] in (TableKind.BASE_TABLE, TableKind.VIEW)]

    def _collect_columns(self, table_name: str) -> list[Column]:
        rows = self.reader.fetch_columns(self.catalog, self.schema_name, table_name)
        columns = [_build_column(row, table_name, self.schema_name) for row in rows]
        return sorted(columns, key=lambda column: column.position)

    def _collect_constraints(
        self, table_name: str, columns: dict[str, list[Column]]
    ) -> list[Constraint]:
        constraints: list[Constraint] = []
        for row in self.reader.fetch_constraints(self.schema_name, table_name):
            name = row["conname"]
            owner = row["table_name"]
            if owner not in columns:
                raise UnresolvedReferenceError(name, owner)
            kind = ConstraintKind(row["contype"])
            keys = _resolve_keys(name, coerce_array(row.get("conkey")), owner, columns[owner])

            foreign_table_name = None
            foreign_keys = None
            if kind == ConstraintKind.FOREIGN_KEY:
                foreign_table_name = row.get("foreign_table_name")
                if foreign_table_name not in columns:
                    raise UnresolvedReferenceError(name, str(foreign_table_name))
                foreign_keys = _resolve_keys(
                    name,
                    coerce_array(row.get("confkey")),
                    foreign_table_name,
                    columns[foreign_table_name],
                )

            constraints.append(
                Constraint(
                    name=name,
                    kind=kind,
                    table_name=owner,
                    keys=keys,
                    foreign_table_name=foreign_table_name,
                    foreign_keys=foreign_keys,
                )
            )
        return constraints

    @staticmethod
    def _register_constraints(
        columns: list[Column], constraints: list[Constraint]
    ) -> list[Column]:
        """Record on each column the constraints it takes part in"""
        registered: list[Column] = []
        for column in columns:
            names = [
                constraint.name
                for constraint in constraints
                if any(key.name == column.name for key in constraint.keys)
            ]
            registered.append(column.model_copy(update={"constraint_names": names}))
        return registered

    def _collect_sequences(self, tables: list[Table]) -> list[Sequence]:
        referenced: dict[str, Sequence] = {}
        for table in tables:
            for column in table.columns:
                default = column.default
                if isinstance(default, SequenceDefault) and default.sequence not in referenced:
                    referenced[default.sequence] = Sequence(
                        name=default.sequence, table_name=table.name, column_name=column.name
                    )
        # Sequences no column default points at are not migration relevant
        return [
            referenced[name]
            for name in self.reader.fetch_sequences(self.schema_name)
            if name in referenced
        ]


def build_schema(reader: CatalogReader, catalog: str, schema_name: str = "public") -> Schema:
    """Build a Schema snapshot from *reader* for the given catalog/schema pair"""
    return SnapshotBuilder(reader, catalog, schema_name).build()
