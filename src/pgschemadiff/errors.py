"""
Exceptions raised while reading catalogs and diffing schema snapshots
"""


class SchemaDiffError(Exception):
    """Base exception for pgschemadiff errors"""


class UnresolvedReferenceError(SchemaDiffError, LookupError):
    """Raised when a constraint references a table or column that cannot be found"""

    def __init__(self, object_name: str, missing_reference: str):
        self.object_name = object_name
        self.missing_reference = missing_reference
        super().__init__(
            f"Object '{object_name}' references non-existent object '{missing_reference}'"
        )


class TableKindMismatchError(SchemaDiffError):
    """Raised when a name is a base table on one side and a view on the other"""

    def __init__(self, table_name: str, desired_kind: str, current_kind: str):
        self.table_name = table_name
        self.desired_kind = desired_kind
        self.current_kind = current_kind
        super().__init__(
            f"Table '{table_name}' is a {desired_kind} in the desired schema "
            f"but a {current_kind} in the current schema"
        )


class CatalogReadError(SchemaDiffError):
    """Raised when an introspection query fails"""


class ArrayParseError(SchemaDiffError, ValueError):
    """Raised when a text-encoded array literal is malformed"""


class SnapshotFileError(SchemaDiffError):
    """Raised when a snapshot file cannot be read or fails validation"""
