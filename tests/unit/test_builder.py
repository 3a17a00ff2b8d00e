import pytest
import sqlglot
from sqlglot import expressions as exp

from bricksql.common.errors import InvalidPayload
from bricksql.query.builder import VisualQueryBuilder, build_visual_query
from bricksql.query.models import FieldSelection, FilterCondition, VisualQuery
from bricksql.query.validator import StatementValidator


@pytest.fixture()
def builder():
    return VisualQueryBuilder()


def test_builds_grouped_aggregate(builder):
    # Validates visual queries compile to plain SELECT text because they share the raw statement path.
    # Arrange
    query = VisualQuery(
        database="sales",
        table="orders",
        fields=[
            FieldSelection(column="region"),
            FieldSelection(column="amount", aggregation="sum", alias="total"),
        ],
        group_by=["region"],
        enable_group=True,
    )

    # Act
    sql = builder.build(query)

    # Assert
    assert sql == "SELECT region, SUM(amount) AS total FROM sales.orders GROUP BY region"


def test_builds_count_star(builder):
    query = VisualQuery(database="sales", table="orders", fields=[FieldSelection(column="*", aggregation="COUNT")])

    assert builder.build(query) == "SELECT COUNT(*) FROM sales.orders"


def test_builds_filters_order_and_limit(builder):
    # Arrange
    query = VisualQuery.model_validate({
        "database": "sales",
        "table": "orders",
        "fields": [{"column": "id"}],
        "filters": [
            {"column": "status", "operator": "=", "value": "paid"},
            {"column": "amount", "operator": ">", "value": "10", "condition": "AND"},
        ],
        "enableFilter": True,
        "enableOrder": True,
        "orderBy": "id",
        "orderDirection": "desc",
        "limit": 10,
    })

    # Act
    sql = builder.build(query)

    # Assert
    assert "WHERE status = 'paid' AND amount > '10'" in sql
    assert sql.endswith("ORDER BY id DESC LIMIT 10")


def test_disabled_sections_are_ignored(builder):
    query = VisualQuery(
        database="sales",
        table="orders",
        fields=[FieldSelection(column="id")],
        filters=[FilterCondition(column="status", operator="=", value="paid")],
        enable_filter=False,
    )

    assert builder.build(query) == "SELECT id FROM sales.orders"


def test_in_filter_splits_values(builder):
    query = VisualQuery(
        database="sales",
        table="orders",
        fields=[FieldSelection(column="id")],
        filters=[FilterCondition(column="status", operator="IN", value="paid, open")],
        enable_filter=True,
    )

    assert "status IN ('paid', 'open')" in builder.build(query)


def test_is_null_filter(builder):
    query = VisualQuery(
        database="sales",
        table="orders",
        fields=[FieldSelection(column="id")],
        filters=[FilterCondition(column="closed_at", operator="IS NULL")],
        enable_filter=True,
    )

    assert builder.build(query).endswith("WHERE closed_at IS NULL")


def test_filter_values_stay_literals(builder):
    # Validates filter values cannot inject SQL because they are emitted as literals.
    # Arrange
    query = VisualQuery(
        database="sales",
        table="orders",
        fields=[FieldSelection(column="id")],
        filters=[FilterCondition(column="status", operator="=", value="x' OR '1'='1")],
        enable_filter=True,
    )

    # Act
    sql = builder.build(query)

    # Assert
    where = sqlglot.parse_one(sql, read="databricks").find(exp.Where)
    assert isinstance(where.this, exp.EQ)
    StatementValidator().validate(sql)


def test_unsupported_operator_is_rejected(builder):
    query = VisualQuery(
        database="sales",
        table="orders",
        fields=[FieldSelection(column="id")],
        filters=[FilterCondition(column="id", operator="~~", value="1")],
        enable_filter=True,
    )

    with pytest.raises(InvalidPayload):
        builder.build(query)


def test_unsupported_aggregation_is_rejected(builder):
    query = VisualQuery(database="s", table="t", fields=[FieldSelection(column="id", aggregation="MEDIANISH")])

    with pytest.raises(InvalidPayload):
        builder.build(query)


@pytest.mark.parametrize(
    "payload",
    [
        {"table": "orders", "fields": [{"column": "id"}]},
        {"database": "sales", "fields": [{"column": "id"}]},
        {"database": "sales", "table": "orders", "fields": []},
    ],
)
def test_incomplete_definition_is_rejected(builder, payload):
    with pytest.raises(InvalidPayload):
        builder.build(VisualQuery.model_validate(payload))


def test_build_visual_query_helper():
    query = VisualQuery(database="sales", table="orders", fields=[FieldSelection(column="id")], limit=5)

    assert build_visual_query(query) == "SELECT id FROM sales.orders LIMIT 5"
