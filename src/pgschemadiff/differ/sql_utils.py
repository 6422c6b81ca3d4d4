"""
SQL utilities - quoting helpers shared by the statement renderers.
"""


def quote_ident(name: str) -> str:
    """Double-quote an identifier, doubling any embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Single-quote a string literal, doubling any embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def join_statements(statements: list[str]) -> str:
    """Join statements one per line, with a trailing newline when non-empty."""
    if not statements:
        return ""
    return "\n".join(statements) + "\n"
