import pytest

from tests.utils import (
    enum_type,
    foreign_key,
    from_sequence,
    literal,
    make_column,
    make_schema,
    make_sequence,
    make_table,
    make_view,
    primary_key,
    unique,
)

# SQLGlot for SQL validation
try:
    import sqlglot

    SQLGLOT_AVAILABLE = True
except ImportError:
    SQLGLOT_AVAILABLE = False


@pytest.fixture
def shop_schema():
    """Schema exercising every entity kind: sequence, enum, PK, FK, UNIQUE and a view"""
    customers = make_table(
        "customers",
        [
            make_column("id", "int4", nullable=False, default=from_sequence("customers_id_seq")),
            make_column("email", "varchar", length=255, nullable=False),
            make_column("status", "customer_status", default=literal("'active'::customer_status")),
        ],
        [
            primary_key("customers_pkey", "customers", "id"),
            unique("customers_email_key", "customers", "email"),
        ],
    )
    orders = make_table(
        "orders",
        [
            make_column("id", "int4", nullable=False, default=from_sequence("orders_id_seq")),
            make_column("customer_id", "int4", nullable=False),
            make_column("placed_at", "timestamptz", default=literal("now()")),
        ],
        [
            primary_key("orders_pkey", "orders", "id"),
            foreign_key("orders_customer_id_fkey", "orders", ["customer_id"], "customers", ["id"]),
        ],
    )
    recent = make_view("recent_orders", "SELECT id FROM orders WHERE placed_at > now() - interval '1 day'")
    return make_schema(
        tables=[customers, orders, recent],
        sequences=[
            make_sequence("customers_id_seq", "customers"),
            make_sequence("orders_id_seq", "orders"),
        ],
        types=[enum_type("customer_status", "active", "blocked")],
    )


@pytest.fixture
def shop_schema_without_views(shop_schema):
    return shop_schema.model_copy(
        update={"tables": [table for table in shop_schema.tables if not table.is_view]}
    )


# SQL Validation Helpers
def validate_sql(sql: str, dialect: str = "postgres") -> tuple[bool, str]:
    """
    Validate SQL syntax using SQLGlot.

    Args:
        sql: Single SQL statement to validate
        dialect: SQL dialect (default: postgres)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not SQLGLOT_AVAILABLE:
        return True, "SQLGlot not available, skipping validation"

    try:
        parsed = sqlglot.parse_one(sql.strip().rstrip(";"), dialect=dialect)

        if parsed is None:
            return False, "SQLGlot returned None (invalid SQL)"

        return True, "SQL is valid"
    except (sqlglot.errors.ParseError, sqlglot.errors.TokenError) as e:
        return False, f"SQLGlot parsing error: {e}"


def assert_valid_sql(sql: str, dialect: str = "postgres") -> None:
    """
    Assert that SQL is syntactically valid.

    Raises AssertionError if SQL is invalid.
    """
    is_valid, error_msg = validate_sql(sql, dialect)
    assert is_valid, f"Invalid SQL:\n{sql}\n\nError: {error_msg}"


@pytest.fixture
def assert_sql():
    """Fixture that provides SQL assertion function"""
    return assert_valid_sql
