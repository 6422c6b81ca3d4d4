"""
Connection settings for the catalog reader
"""

from pydantic import BaseModel, Field

DEFAULT_SCHEMA = "public"


def _dsn_value(value: str) -> str:
    """Quote a libpq keyword value when it is empty or holds spaces, quotes or backslashes"""
    if value and not any(char in value for char in " '\\"):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class ConnectionSettings(BaseModel):
    """Server connection parameters shared by both sides of a diff

    The database name is supplied per side, so one settings object can
    open both the desired and the current catalog.
    """

    host: str = "localhost"
    port: int = Field(5432, ge=1, le=65535)
    user: str = "postgres"
    password: str = ""
    sslmode: str = "disable"
    schema_name: str = DEFAULT_SCHEMA

    def dsn(self, database: str) -> str:
        """Build a libpq keyword/value connection string for *database*"""
        parts = [
            f"host={_dsn_value(self.host)}",
            f"port={self.port}",
            f"user={_dsn_value(self.user)}",
            f"dbname={_dsn_value(database)}",
            f"sslmode={_dsn_value(self.sslmode)}",
        ]
        if self.password:
            parts.append(f"password={_dsn_value(self.password)}")
        return " ".join(parts)
