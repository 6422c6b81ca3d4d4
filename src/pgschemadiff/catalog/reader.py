"""
Catalog Reader

Runs the read-only introspection queries a snapshot is built from and
returns raw rows. The snapshot builder only depends on the CatalogReader
protocol; PostgresCatalogReader is the psycopg-backed implementation.

Array-valued columns (enum labels, constraint key positions) arrive as
Python lists from psycopg; the builder also accepts PostgreSQL array text
so other readers and stored rows can hand over either form.
"""

from typing import Any, Protocol

import psycopg
from psycopg.rows import dict_row
from rich.console import Console

from pgschemadiff.config import ConnectionSettings
from pgschemadiff.errors import CatalogReadError

console = Console(stderr=True)

Row = dict[str, Any]


GET_TYPES = """
SELECT t.typname AS name,
       ARRAY_AGG(e.enumlabel ORDER BY e.enumsortorder)
            FILTER (WHERE e.enumlabel IS NOT NULL) AS labels,
       BOOL_OR(e.enumtypid IS NOT NULL) AS is_enum
FROM pg_catalog.pg_type t
       JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
       LEFT JOIN pg_catalog.pg_enum e ON e.enumtypid = t.oid
WHERE (t.typrelid = 0 OR (SELECT c.relkind = 'c' FROM pg_catalog.pg_class c WHERE c.oid = t.typrelid))
  AND NOT EXISTS(SELECT 1 FROM pg_catalog.pg_type el WHERE el.oid = t.typelem AND el.typarray = t.oid)
  AND n.nspname <> 'pg_catalog'
  AND n.nspname <> 'information_schema'
  AND n.nspname = %(schema)s
GROUP BY t.typname
ORDER BY t.typname
"""

GET_TABLES = """
SELECT t.table_name,
       t.table_type,
       t.table_schema,
       t.table_catalog,
       v.view_definition
FROM information_schema.tables t
       LEFT JOIN information_schema.views v
              ON v.table_catalog = t.table_catalog
             AND v.table_schema = t.table_schema
             AND v.table_name = t.table_name
WHERE t.table_catalog = %(catalog)s
  AND t.table_schema = %(schema)s
  AND t.table_type IN ('BASE TABLE', 'VIEW')
ORDER BY t.table_name
"""

GET_COLUMNS = """
SELECT column_name,
       ordinal_position,
       column_default,
       is_nullable,
       quote_ident(udt_name) AS data_type,
       character_maximum_length,
       numeric_precision,
       numeric_scale
FROM information_schema.columns
WHERE table_name = %(table)s
  AND table_catalog = %(catalog)s
  AND table_schema = %(schema)s
ORDER BY ordinal_position
"""

GET_CONSTRAINTS = """
SELECT con.conname,
       con.contype,
       rel.relname AS table_name,
       frel.relname AS foreign_table_name,
       con.conkey AS conkey,
       con.confkey AS confkey
FROM pg_catalog.pg_constraint con
       JOIN pg_catalog.pg_class rel ON rel.oid = con.conrelid
       JOIN pg_catalog.pg_namespace n ON n.oid = rel.relnamespace
       LEFT JOIN pg_catalog.pg_class frel ON frel.oid = con.confrelid
WHERE n.nspname = %(schema)s
  AND rel.relname = %(table)s
  AND con.contype IN ('u', 'p', 'f', 'c')
ORDER BY con.conname
"""

GET_SEQUENCES = """
SELECT sequencename
FROM pg_catalog.pg_sequences
WHERE schemaname = %(schema)s
ORDER BY sequencename
"""


class CatalogReader(Protocol):
    """Source of raw catalog rows for one database"""

    def fetch_types(self, schema: str) -> list[Row]: ...

    def fetch_tables(self, catalog: str, schema: str) -> list[Row]: ...

    def fetch_columns(self, catalog: str, schema: str, table: str) -> list[Row]: ...

    def fetch_constraints(self, schema: str, table: str) -> list[Row]: ...

    def fetch_sequences(self, schema: str) -> list[str]: ...


class PostgresCatalogReader:
    """Catalog reader over a single psycopg connection

    Usage:
        with PostgresCatalogReader.connect(settings, "staging") as reader:
            rows = reader.fetch_tables("staging", "public")
    """

    def __init__(self, connection: psycopg.Connection) -> None:
        self.connection = connection

    @classmethod
    def connect(cls, settings: ConnectionSettings, database: str) -> "PostgresCatalogReader":
        """Open a connection to *database* using *settings*

        Raises:
            CatalogReadError: If the connection cannot be established
        """
        try:
            connection = psycopg.connect(settings.dsn(database), row_factory=dict_row)
        except psycopg.Error as e:
            raise CatalogReadError(
                f"Cannot connect to database '{database}' on {settings.host}:{settings.port}: {e}"
            ) from e
        console.print(f"[dim]Connected to {database} ({settings.host}:{settings.port})[/dim]")
        return cls(connection)

    def __enter__(self) -> "PostgresCatalogReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.connection.close()

    def _query(self, sql: str, params: dict[str, Any]) -> list[Row]:
        try:
            with self.connection.cursor(row_factory=dict_row) as cur:
                cur.execute(sql, params)
                return list(cur.fetchall())
        except psycopg.Error as e:
            raise CatalogReadError(f"Introspection query failed: {e}") from e

    def fetch_types(self, schema: str) -> list[Row]:
        return self._query(GET_TYPES, {"schema": schema})

    def fetch_tables(self, catalog: str, schema: str) -> list[Row]:
        return self._query(GET_TABLES, {"catalog": catalog, "schema": schema})

    def fetch_columns(self, catalog: str, schema: str, table: str) -> list[Row]:
        return self._query(GET_COLUMNS, {"catalog": catalog, "schema": schema, "table": table})

    def fetch_constraints(self, schema: str, table: str) -> list[Row]:
        return self._query(GET_CONSTRAINTS, {"schema": schema, "table": table})

    def fetch_sequences(self, schema: str) -> list[str]:
        rows = self._query(GET_SEQUENCES, {"schema": schema})
        return [row["sequencename"] for row in rows]
