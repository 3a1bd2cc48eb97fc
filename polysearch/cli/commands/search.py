"""Search and suggestion CLI commands."""

import re
from pathlib import Path
from typing import Any

import click
import msgspec
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from polysearch.query import SearchQueryBuilder
from polysearch.results import SearchResultCollection

_WHERE_RE = re.compile(
    r"^\s*([\w.]+)\s*(<=|>=|!=|<>|==|=|<|>|\s+not\s+in\s+|\s+in\s+|\s+like\s+)\s*(.*)$",
    re.IGNORECASE,
)


def load_records(path: Path) -> list[Any]:
    """Load a list of records from a JSON or YAML file."""
    raw = path.read_bytes()
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            records = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise click.ClickException(f"Invalid YAML in {path}: {e}")
    else:
        try:
            records = msgspec.json.decode(raw)
        except msgspec.DecodeError as e:
            raise click.ClickException(f"Invalid JSON in {path}: {e}")

    if records is None:
        return []
    if not isinstance(records, list):
        raise click.ClickException(f"{path} must contain a list of records")
    return records


def parse_scalar(text: str) -> Any:
    """Interpret a command-line value as a YAML scalar or list."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return text


def parse_assignment(text: str, option: str) -> tuple[str, Any]:
    if "=" not in text:
        raise click.BadParameter(
            f"expected KEY=VALUE, got '{text}'", param_hint=option
        )
    key, value = text.split("=", 1)
    return key.strip(), parse_scalar(value.strip())


def parse_where(text: str) -> tuple[str, str, Any]:
    """Parse ``field<op>value`` into its parts."""
    match = _WHERE_RE.match(text)
    if not match:
        raise click.BadParameter(
            f"expected FIELD OPERATOR VALUE, got '{text}'", param_hint="--where"
        )

    field_name, operator, raw_value = match.groups()
    operator = " ".join(operator.lower().split())
    value = parse_scalar(raw_value)

    if operator in ("in", "not in") and isinstance(value, str):
        value = [parse_scalar(part.strip()) for part in value.split(",")]
    elif operator == "like":
        value = raw_value

    return field_name, operator, value


@click.command()
@click.argument(
    "records_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("query")
@click.option(
    "--field",
    "-f",
    "fields",
    multiple=True,
    required=True,
    help="Field to search (repeatable)",
)
@click.option(
    "--weight", "-w", "weights", multiple=True, help="Field weight as FIELD=WEIGHT"
)
@click.option("--algorithm", "-a", help="Matching algorithm (default from config)")
@click.option(
    "--where", "wheres", multiple=True, help="Filter such as 'status=published'"
)
@click.option(
    "--order-by", "orders", multiple=True, help="Pre-order records as FIELD[:desc]"
)
@click.option("--limit", "-n", type=int, help="Maximum results to show")
@click.option("--offset", type=int, default=0, help="Skip first N results")
@click.option(
    "--min-score", type=float, default=0.0, help="Drop results below this score"
)
@click.option(
    "--option", "-o", "options", multiple=True, help="Algorithm option as KEY=VALUE"
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--no-highlight", is_flag=True, help="Do not show highlight fragments")
@click.pass_context
def search(
    ctx: click.Context,
    records_file: Path,
    query: str,
    fields: tuple[str, ...],
    weights: tuple[str, ...],
    algorithm: str | None,
    wheres: tuple[str, ...],
    orders: tuple[str, ...],
    limit: int | None,
    offset: int,
    min_score: float,
    options: tuple[str, ...],
    output_format: str,
    no_highlight: bool,
) -> None:
    """Search RECORDS_FILE (a JSON or YAML list) for QUERY.

    \b
    Examples:
      polysearch search posts.json laravel -f title -f body
      polysearch search posts.json larvel -f title -a fuzzy -o threshold=1
      polysearch search posts.json '(laravel OR php) AND framework' -f body -a boolean
      polysearch search posts.json '/^lara/i' -f title -a regex
    """
    console = ctx.obj.console
    engine = ctx.obj.engine
    records = load_records(records_file)

    builder = SearchQueryBuilder().query(query).in_fields(list(fields))
    if weights:
        parsed = [parse_assignment(w, "--weight") for w in weights]
        builder.weights({name: float(value) for name, value in parsed})
    if algorithm:
        builder.using(algorithm)
    for where in wheres:
        builder.where(*parse_where(where))
    for order in orders:
        name, _, direction = order.partition(":")
        builder.order_by(name, direction or "asc")
    if limit is not None:
        builder.limit(limit)
    builder.offset(offset).min_score(min_score)
    if options:
        builder.options(dict(parse_assignment(o, "--option") for o in options))

    results = engine.search(builder.build(), records)

    if output_format == "json":
        _print_json(results)
    else:
        _display_results(console, results, query, show_highlights=not no_highlight)


@click.command()
@click.argument("query")
@click.argument("candidates", nargs=-1, required=True)
@click.option(
    "--limit", "-n", type=int, default=0, help="Maximum suggestions (0: from config)"
)
@click.pass_context
def suggest(
    ctx: click.Context, query: str, candidates: tuple[str, ...], limit: int
) -> None:
    """Suggest the CANDIDATES that best complete QUERY."""
    console = ctx.obj.console
    suggestions = ctx.obj.engine.suggest(query, candidates, limit)

    if not suggestions:
        console.print(f"[yellow]No suggestions for '{escape(query)}'[/yellow]")
        return

    for suggestion in suggestions:
        console.print(escape(suggestion))


@click.command(name="did-you-mean")
@click.argument("query")
@click.argument("words", nargs=-1, required=True)
@click.pass_context
def did_you_mean(ctx: click.Context, query: str, words: tuple[str, ...]) -> None:
    """Find the WORD closest to a misspelled QUERY."""
    console = ctx.obj.console
    correction = ctx.obj.engine.did_you_mean(query, words)

    if correction is None:
        console.print(f"[yellow]No close match for '{escape(query)}'[/yellow]")
        ctx.exit(1)

    console.print(f"Did you mean: [bold]{escape(correction)}[/bold]?")


def _print_json(results: SearchResultCollection) -> None:
    payload = msgspec.json.encode(results.to_dict(), enc_hook=str)
    click.echo(msgspec.json.format(payload, indent=2).decode())


def _preview(item: Any, width: int = 60) -> str:
    if isinstance(item, dict):
        for key in ("title", "name"):
            if isinstance(item.get(key), str):
                text = item[key]
                break
        else:
            text = ", ".join(f"{k}={v}" for k, v in list(item.items())[:3])
    else:
        text = str(item)
    return text if len(text) <= width else text[: width - 3] + "..."


def _display_results(
    console: Console,
    results: SearchResultCollection,
    query: str,
    show_highlights: bool = True,
) -> None:
    """Display search results as a table."""
    if not results:
        console.print(f"[yellow]No results found for '{escape(query)}'[/yellow]")
        return

    table = Table(title=f"Results for '{escape(query)}'", show_lines=show_highlights)
    table.add_column("#", style="dim", width=3)
    table.add_column("Score", justify="right", style="green")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Fields", style="magenta")
    table.add_column("Record")

    for i, result in enumerate(results, 1):
        record = escape(_preview(result.item))
        if show_highlights and result.highlights:
            fragments = [
                f"[dim]{escape(name)}:[/dim] {escape(fragment)}"
                for name, field_fragments in result.highlights.items()
                for fragment in field_fragments
            ]
            record = "\n".join([record, *fragments])

        table.add_row(
            str(i),
            f"{result.score:.2f}",
            result.algorithm,
            ", ".join(result.matched_fields),
            record,
        )

    console.print(table)
    console.print(
        f"[dim]{len(results)} results, "
        f"max score {results.max_score():.2f}, "
        f"average {results.avg_score():.2f}[/dim]"
    )
