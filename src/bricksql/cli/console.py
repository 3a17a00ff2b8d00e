from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from bricksql.query import ResultFrame

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme)


def print_success(message: str) -> None:
    console.print(f"[success]✔ {escape(message)}[/success]")


def print_error(message: str) -> None:
    console.print(f"[error]✘ {escape(message)}[/error]")


def print_frame(frame: ResultFrame) -> None:
    table = Table(title=f"{frame.name} ({frame.row_count} rows)")
    for col in frame.columns:
        table.add_column(col.name, style="cyan")
    for i in range(frame.row_count):
        table.add_row(*(escape(col.values[i]) for col in frame.columns))
    console.print(table)


def print_names(title: str, names) -> None:
    table = Table(title=title)
    table.add_column("Name", style="cyan", no_wrap=True)
    for name in names:
        table.add_row(escape(name))
    console.print(table)
