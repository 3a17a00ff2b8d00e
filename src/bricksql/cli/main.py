#!/usr/bin/env python3
"""Command line access to the query and discovery paths."""
import typer
from typing import Optional
from typing_extensions import Annotated

from bricksql.common.errors import BricksError
from bricksql.common.settings import settings
from bricksql.api.container import Container
from bricksql.query import OutputShape, QueryRequest
from bricksql.cli.console import print_error, print_frame, print_names, print_success

app = typer.Typer(
    name="bricksql",
    help="Run guarded, catalog-qualified SQL against a Databricks SQL warehouse.",
    no_args_is_help=True,
    add_completion=False,
)

CatalogOption = Annotated[Optional[str], typer.Option("--catalog", "-c", help="Catalog (defaults to DATABRICKS_CATALOG)")]


def _container() -> Container:
    return Container(settings=settings)


def _run(action):
    container = _container()
    try:
        return action(container)
    except BricksError as e:
        print_error(f"[{e.error_code.value}] {e.get_safe_message()}")
        raise typer.Exit(code=1)
    finally:
        container.dispose()


@app.callback()
def global_callback(
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment name; loads .env.<name>.")] = None,
):
    """
    BrickSQL CLI Entry Point.
    """
    if env:
        settings.configure_env(env)


@app.command()
def query(
    sql: Annotated[str, typer.Argument(help="SELECT statement to run")],
    format: Annotated[OutputShape, typer.Option("--format", "-f", help="Output shape")] = OutputShape.TABLE,
):
    """
    Validate, rewrite and execute a statement, then print the frame.
    """
    request = QueryRequest(raw_statement=sql, output_shape=format)
    frame = _run(lambda c: c.query.execute_query(request))
    print_frame(frame)


@app.command()
def schemas(catalog: CatalogOption = None):
    """
    List schemas in a catalog.
    """
    names = _run(lambda c: c.resolver.list_schemas(catalog or c.config.catalog))
    print_names("Schemas", names)


@app.command()
def tables(
    schema: Annotated[str, typer.Argument(help="Schema (database) name")],
    catalog: CatalogOption = None,
):
    """
    List tables in a schema.
    """
    names = _run(lambda c: c.resolver.list_tables(catalog or c.config.catalog, schema))
    print_names(f"Tables in {schema}", names)


@app.command()
def columns(
    schema: Annotated[str, typer.Argument(help="Schema (database) name")],
    table: Annotated[str, typer.Argument(help="Table name")],
    catalog: CatalogOption = None,
):
    """
    List columns of a table.
    """
    names = _run(lambda c: c.resolver.list_columns(catalog or c.config.catalog, schema, table))
    print_names(f"Columns of {schema}.{table}", names)


@app.command()
def health():
    """
    Ping the SQL warehouse.
    """
    result = _run(lambda c: c.health.check_health())
    if result.healthy:
        print_success(result.message)
    else:
        print_error(result.message)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
