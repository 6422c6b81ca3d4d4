"""
Table Dependency Graph

Orders the tables and views a diff creates or drops so that every object is
created after the objects it references and dropped before them.

Edges run from a dependency to its dependent (``users -> orders`` when
orders has a foreign key to users). Base tables depend on the tables their
foreign keys reference; views depend on the tables and views their
definition mentions by name. Views always come after base tables.

Foreign-key cycles cannot be ordered; tables in a cycle are collapsed into
one strongly connected component and emitted in snapshot order, and the
caller splits the offending foreign keys into separate statements.
"""

import re
from enum import StrEnum

import networkx as nx

from pgschemadiff.models import ConstraintKind, Table


class DependencyType(StrEnum):
    """Why one table must exist before another"""

    FOREIGN_KEY = "foreign_key"  # Base table references another base table
    VIEW_REFERENCE = "view_reference"  # View selects from a table or view


def _mentions(definition: str, name: str) -> bool:
    """True when a view body refers to *name* as a bare or quoted identifier"""
    pattern = rf'(?<![\w$"]){re.escape(name)}(?![\w$"])|"{re.escape(name)}"'
    return re.search(pattern, definition) is not None


class TableDependencyGraph:
    """
    Directed graph over one set of tables, built with NetworkX.

    Only dependencies between members of the set are tracked; references to
    tables that already exist (or are not touched) need no ordering.
    """

    def __init__(self, tables: list[Table]) -> None:
        self.tables = {table.name: table for table in tables}
        self.positions = {table.name: index for index, table in enumerate(tables)}
        self.graph: nx.DiGraph = nx.DiGraph()
        self.graph.add_nodes_from(self.tables)
        for table in tables:
            self._add_edges(table)

    def _add_edges(self, table: Table) -> None:
        if table.is_view:
            definition = table.view_definition or ""
            for name in self.tables:
                if name != table.name and _mentions(definition, name):
                    self._add_edge(name, table.name, DependencyType.VIEW_REFERENCE)
            return
        for constraint in table.constraints:
            target = constraint.foreign_table_name
            if (
                constraint.kind == ConstraintKind.FOREIGN_KEY
                and target in self.tables
                and target != table.name
                and not self.tables[target].is_view
            ):
                self._add_edge(target, table.name, DependencyType.FOREIGN_KEY)

    def _add_edge(self, from_name: str, to_name: str, dep_type: DependencyType) -> None:
        """from_name must be created before to_name"""
        self.graph.add_edge(from_name, to_name, dep_type=dep_type.value)

    def _ordered(self, graph: nx.DiGraph, views_first: bool) -> list[Table]:
        condensed = nx.condensation(graph)

        def sort_key(component: int) -> tuple[bool, int]:
            members = condensed.nodes[component]["members"]
            # Snapshot order breaks ties between independent components
            is_view = any(self.tables[name].is_view for name in members)
            return (is_view != views_first, min(self.positions[name] for name in members))

        ordered: list[Table] = []
        for component in nx.lexicographical_topological_sort(condensed, key=sort_key):
            members = sorted(condensed.nodes[component]["members"], key=self.positions.__getitem__)
            ordered.extend(self.tables[name] for name in members)
        return ordered

    def creation_order(self) -> list[Table]:
        """Tables in an order where dependencies come first, views last

        Views that mention each other in a cycle, and foreign-key cycles,
        are kept together in snapshot order.
        """
        return self._ordered(self.graph, views_first=False)

    def drop_order(self) -> list[Table]:
        """Tables in an order where dependents come first, views first"""
        return self._ordered(self.graph.reverse(copy=False), views_first=True)
