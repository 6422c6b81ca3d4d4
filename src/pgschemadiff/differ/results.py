"""
Diff result types
"""

from pydantic import BaseModel

from .sql_utils import join_statements


class DiffFragment(BaseModel):
    """Statements and diagnostics produced by one step of a diff

    ``deferred`` holds statements that may only run once every new table
    exists (foreign keys pointing at tables created later in the script).
    """

    statements: list[str] = []
    warnings: list[str] = []
    deferred: list[str] = []

    def extend(self, other: "DiffFragment") -> None:
        self.statements.extend(other.statements)
        self.warnings.extend(other.warnings)
        self.deferred.extend(other.deferred)


class SchemaDiffResult(DiffFragment):
    """Complete, ordered statement stream for one desired/current schema pair"""

    @property
    def sql(self) -> str:
        return join_statements(self.statements)

    @property
    def is_empty(self) -> bool:
        return not self.statements
