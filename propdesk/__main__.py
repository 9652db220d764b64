"""Entry point for propdesk CLI."""

import json
import logging
import sys
from pathlib import Path
from urllib.parse import urlencode

import rich_click as click
from rich.console import Console
from rich.table import Table

from propdesk.core.backend import Backend, BackendError, MemoryBackend
from propdesk.core.config import Config, ConfigError, ConfigLoader
from propdesk.core.plugin import EntityNotFoundError, PluginError, PluginManager
from propdesk.core.saved_searches import SavedSearchError, SavedSearchStore
from propdesk.core.translator import FilterTranslator
from propdesk.models.descriptor import PageResult, QueryDescriptor
from propdesk.models.query import ParsedQuery
from propdesk.models.schema import EntityDefinition
from propdesk.plugins.crm import CrmPlugin
from propdesk.tui.query_parser import parse_query, serialize_query

click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True

logger = logging.getLogger("propdesk")


def _get_plugin_manager() -> PluginManager:
    """Create and configure the plugin manager.

    Registers the built-in crm plugin, then discovers plugins via entry
    points. An installed plugin with the same name replaces the built-in.

    Returns:
        Configured PluginManager instance.
    """
    manager = PluginManager()
    manager.register(CrmPlugin())
    manager.discover()
    return manager


def _get_implemented_hooks(plugin) -> list[str]:
    """Get list of hooks a plugin overrides from the base class.

    Args:
        plugin: The plugin instance to check.

    Returns:
        List of hook names that are implemented.
    """
    from propdesk.plugin import PropdeskPlugin

    hooks = []
    for hook_name in ["get_entities", "fetch_page"]:
        method = getattr(type(plugin), hook_name, None)
        if method is not None and method is not getattr(PropdeskPlugin, hook_name):
            hooks.append(hook_name)
    return hooks


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: str | None) -> Config:
    """Load an explicit config file, or merge the discovered ones.

    Raises:
        ConfigError: If a config file is invalid.
    """
    loader = ConfigLoader()
    if config_path:
        return loader.load(Path(config_path))
    return loader.load_merged()


def _print_entities(console: Console, entities: dict[str, EntityDefinition]) -> None:
    table = Table(title="Available Entities")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Label", style="green")
    table.add_column("Columns", justify="right")
    table.add_column("Default Sort")

    for name in sorted(entities):
        entity = entities[name]
        default_sort = (
            f"{entity.default_sort.column} {entity.default_sort.direction}"
            if entity.default_sort else ""
        )
        table.add_row(entity.name, entity.label, str(len(entity.columns)), default_sort)

    console.print(table)


def _print_columns(console: Console, entity: EntityDefinition) -> None:
    table = Table(title=f"Columns of {entity.label}")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Label", style="green")
    table.add_column("Type")
    table.add_column("Free Text", justify="center")

    for column in entity.columns:
        searchable = "[green]✓[/green]" if column.is_searchable else "[dim]✗[/dim]"
        table.add_row(column.key, column.label, column.type, searchable)

    console.print(table)
    console.print(
        "\nFilter with [cyan]key=value[/cyan] or [cyan]key>=value[/cyan], "
        "sort with [cyan]sort:key:asc[/cyan]."
    )


def _print_saved(console: Console, store: SavedSearchStore) -> None:
    searches = store.searches
    if not searches:
        console.print(f"[yellow]No saved searches for {store.entity}.[/yellow]")
        return

    table = Table(title=f"Saved Searches ({store.entity})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Query")

    for saved in searches:
        table.add_row(saved.id, saved.name, saved.query)

    console.print(table)


def _parsed_to_dict(parsed: ParsedQuery) -> dict:
    return parsed.model_dump(mode="json")


def _output_query(
    console: Console,
    parsed: ParsedQuery,
    descriptor: QueryDescriptor,
    output_format: str,
) -> None:
    """Output a translated query without running it.

    Args:
        console: Rich console for output.
        parsed: Parser output.
        descriptor: Translator output.
        output_format: Output format (table, json, postgrest).
    """
    if output_format == "json":
        print(json.dumps({
            "parsed": _parsed_to_dict(parsed),
            "descriptor": descriptor.model_dump(mode="json"),
        }, indent=2))
        return

    if output_format == "postgrest":
        print(urlencode(descriptor.to_postgrest_params()))
        return

    table = Table(title="Parsed Query")
    table.add_column("Part", style="cyan")
    table.add_column("Value")
    for f in parsed.filters:
        table.add_row("filter", f"{f.column} {f.operator} {f.value}")
    if parsed.sort is not None:
        table.add_row("sort", f"{parsed.sort.column} {parsed.sort.direction}")
    if parsed.text_search:
        table.add_row("text", parsed.text_search)
    console.print(table)

    params = Table(title="Backend Parameters")
    params.add_column("Name", style="cyan")
    params.add_column("Value")
    for name, value in descriptor.to_postgrest_params():
        params.add_row(name, value)
    console.print(params)


def _output_page(
    console: Console,
    entity: EntityDefinition,
    result: PageResult,
    page: int,
    page_size: int,
    output_format: str,
) -> None:
    """Output one page of results.

    Args:
        console: Rich console for output.
        entity: Entity whose columns are displayed.
        result: Rows and total count from the backend.
        page: 1-based page number.
        page_size: Rows per page.
        output_format: Output format (table or json).
    """
    page_count = max(1, -(-result.total_count // page_size))

    if output_format == "json":
        print(json.dumps({
            "rows": result.rows,
            "total_count": result.total_count,
            "page": page,
            "page_count": page_count,
        }, indent=2, default=str))
        return

    table = Table(title=entity.label)
    for column in entity.columns:
        justify = "right" if column.type == "number" else "left"
        table.add_column(column.label, justify=justify)
    for row in result.rows:
        table.add_row(*(_format_cell(row.get(c.key)) for c in entity.columns))

    console.print(table)
    console.print(f"Page {page} of {page_count} ({result.total_count} results)")


def _format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("query", nargs=-1, type=str)
@click.option("--version", is_flag=True, help="Show version and exit.")
@click.option(
    "--list-plugins",
    is_flag=True,
    help="List all available plugins and exit."
)
@click.option(
    "--list-entities",
    is_flag=True,
    help="List the searchable entities provided by plugins and exit."
)
@click.option(
    "--list-columns",
    is_flag=True,
    help="List the columns of the selected entity and exit."
)
@click.option(
    "--entity",
    "-e",
    type=str,
    help="Entity to search (default: general.default_entity from config)."
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "postgrest"], case_sensitive=False),
    default="table",
    help="Output format: table (rich), json, or postgrest (query parameters)."
)
@click.option(
    "--page",
    type=click.IntRange(min=1),
    default=1,
    help="Result page to show (1-based)."
)
@click.option(
    "--page-size",
    "page_size",
    type=click.IntRange(min=1),
    help="Rows per page (default: pagination.page_size from config)."
)
@click.option(
    "--records",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with an array of rows to search instead of a plugin backend."
)
@click.option(
    "--save",
    "save_name",
    type=str,
    help="Save QUERY under this name and exit."
)
@click.option(
    "--load",
    "load_name",
    type=str,
    help="Use the saved search with this name or id as the query."
)
@click.option(
    "--list-saved",
    is_flag=True,
    help="List saved searches of the selected entity and exit."
)
@click.option(
    "--delete-saved",
    "delete_id",
    type=str,
    help="Delete the saved search with this id and exit."
)
@click.option(
    "--saved-file",
    type=click.Path(dir_okay=False),
    help="Saved-search JSON file (default: storage.saved_searches from config)."
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Config file to use instead of the discovered propdesk.toml files."
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log debug output (skipped filters, requests) to stderr."
)
@click.option(
    "--batch",
    is_flag=True,
    help="Run in batch mode (no TUI). Implied by QUERY or any output flag."
)
@click.pass_context
def cli(
    ctx: click.Context,
    query: tuple[str, ...],
    version: bool,
    list_plugins: bool,
    list_entities: bool,
    list_columns: bool,
    entity: str | None,
    output_format: str,
    page: int,
    page_size: int | None,
    records: str | None,
    save_name: str | None,
    load_name: str | None,
    list_saved: bool,
    delete_id: str | None,
    saved_file: str | None,
    config_path: str | None,
    verbose: bool,
    batch: bool,
) -> None:
    """Propdesk - search CRM records with a compact query language.

    QUERY mixes filters ([cyan]price>=500000[/cyan], [cyan]type=villa[/cyan]),
    one sort ([cyan]sort:price:desc[/cyan]) and free text.
    Without a query the interactive search screen is launched.
    """
    console = Console()
    _configure_logging(verbose)

    if version:
        from propdesk import __version__
        click.echo(f"propdesk {__version__}")
        return

    manager = _get_plugin_manager()

    if list_plugins:
        plugins = manager.list_plugins()

        if not plugins:
            console.print("[yellow]No plugins found.[/yellow]")
            return

        table = Table(title="Available Plugins")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Version", style="green")
        table.add_column("Description")
        table.add_column("Hooks")

        for name in sorted(plugins):
            info = manager.get_plugin_info(name)
            if info:
                table.add_row(
                    info["name"],
                    info.get("version", "unknown"),
                    info.get("description", ""),
                    ", ".join(_get_implemented_hooks(manager.get_plugin(name))),
                )

        console.print(table)
        return

    try:
        config = _load_config(config_path)
        entities = manager.get_entities()
    except (ConfigError, PluginError) as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
        return

    if list_entities:
        if not entities:
            console.print("[yellow]No entities found.[/yellow]")
            return
        _print_entities(console, entities)
        return

    entity_name = entity or config.general.default_entity
    try:
        entity_def = manager.get_entity(entity_name)
    except EntityNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
        return

    if list_columns:
        _print_columns(console, entity_def)
        return

    saved_path = Path(saved_file) if saved_file else config.storage.saved_searches
    store = SavedSearchStore(saved_path, entity_def.name)
    query_text = " ".join(query)

    if list_saved:
        _print_saved(console, store)
        return

    if delete_id:
        try:
            deleted = store.delete(delete_id)
        except SavedSearchError as e:
            console.print(f"[red]Error:[/red] {e}")
            ctx.exit(1)
            return
        console.print(f"Deleted saved search [cyan]{deleted.name}[/cyan].")
        return

    if save_name is not None:
        normalised = serialize_query(parse_query(query_text, entity_def.columns))
        try:
            saved = store.save(save_name, normalised)
        except SavedSearchError as e:
            console.print(f"[red]Error:[/red] {e}")
            ctx.exit(1)
            return
        console.print(f"Saved [cyan]{saved.name}[/cyan] ({saved.id}): {saved.query}")
        return

    if load_name:
        loaded = store.find(load_name)
        if loaded is None:
            console.print(f"[red]Error:[/red] No saved search named '{load_name}'.")
            ctx.exit(1)
            return
        query_text = loaded.query

    size = page_size or config.pagination.page_size

    backend: Backend
    if records:
        try:
            backend = MemoryBackend.from_json_file(Path(records), entity_def.name)
        except BackendError as e:
            console.print(f"[red]Error:[/red] {e}")
            ctx.exit(1)
            return
    else:
        backend = manager

    # Determine if batch mode is needed.
    # Explicit --batch flag, a query, or any output flag implies batch.
    is_batch = batch or bool(query_text) or page > 1 or page_size is not None

    # --format explicitly provided also implies batch
    if not is_batch:
        source = ctx.get_parameter_source("output_format")
        if source == click.core.ParameterSource.COMMANDLINE:
            is_batch = True

    # Non-interactive environment (piped, CliRunner, etc.) implies batch
    if not is_batch and not sys.stdin.isatty():
        is_batch = True

    if not is_batch:
        # Launch TUI mode
        from propdesk.tui import run_tui

        run_tui(entity=entity_def, backend=backend, config=config, store=store, query=query_text)
        return

    parsed = parse_query(query_text, entity_def.columns)
    translator = FilterTranslator(entity_def.columns, default_sort=entity_def.default_sort)
    descriptor = translator.translate(parsed, page=page, page_size=size)
    logger.debug("Descriptor for %r: %s", query_text, descriptor)

    output_format = output_format.lower()
    if not records or output_format == "postgrest":
        _output_query(console, parsed, descriptor, output_format)
        return

    try:
        result = backend.fetch_page(entity_def.name, descriptor)
    except BackendError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
        return

    _output_page(console, entity_def, result, page, size, output_format)


if __name__ == "__main__":
    cli()
