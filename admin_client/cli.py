"""
Admin listing CLI.

Browse the pedidos, productos and usuarios lists from a terminal using the
same listing engine as the admin screens.

Usage:
    admin-listing listar pedidos --filtro estado=PENDIENTE --pagina 2
    admin-listing listar productos -f stock=stock_bajo -f destacado=true --stats
    admin-listing listar usuarios -f fechaRegistro=2024-01-01..2024-03-31
    admin-listing campos productos
"""

import asyncio
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from admin_client.http import ApiClient
from admin_client.screens import SCREENS, build_engine, get_screen
from listing_engine.engine import ListingEngine
from listing_engine.predicates import resolve
from shared.config.logging import setup_logging
from shared.utils.exceptions import UnknownFilterFieldError

app = typer.Typer(
    name="admin-listing",
    help="Admin list screens from the command line",
    add_completion=False,
)
console = Console()


def parse_filter(raw: str) -> tuple[str, Any]:
    """
    Parse `campo=valor`.

    `true`/`false` become booleans and `desde..hasta` becomes a date range
    (either side may be empty).
    """
    field, sep, value = raw.partition("=")
    field = field.strip()
    if not sep or not field:
        raise typer.BadParameter(f"Filtro inválido '{raw}', se esperaba campo=valor")
    value = value.strip()
    if value.lower() in ("true", "false"):
        return field, value.lower() == "true"
    if ".." in value:
        start, _, end = value.partition("..")
        return field, (start.strip() or None, end.strip() or None)
    return field, value


def _check_entity(entity: str) -> str:
    if entity not in SCREENS:
        raise typer.BadParameter(f"Use una de: {', '.join(sorted(SCREENS))}")
    return entity


def _render_page(engine: ListingEngine, columns: tuple[str, ...]) -> None:
    page = engine.current_page()
    table = Table(
        title=f"{engine.entity} · página {page.page}/{page.total_pages} · {page.total} resultados",
        caption=f"estrategia {engine.strategy.value} · filtros activos: {engine.active_filter_count}",
    )
    for column in columns:
        table.add_column(column, style="cyan" if column == "id" else None)
    for item in page.items:
        table.add_row(*("" if resolve(item, c) is None else str(resolve(item, c)) for c in columns))
    console.print(table)


def _render_stats(engine: ListingEngine) -> None:
    if engine.stats_error:
        console.print("[red]✗ No se pudieron cargar las estadísticas[/red]")
        return
    table = Table(title=f"Resumen de {engine.entity}")
    table.add_column("Métrica", style="cyan")
    table.add_column("Valor", style="green")
    for name, value in engine.current_stats().items():
        table.add_row(name, str(value))
    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def listar(
    entity: str = typer.Argument(..., help="pedidos, productos o usuarios", callback=_check_entity),
    filtro: Optional[list[str]] = typer.Option(None, "--filtro", "-f", help="campo=valor (repetible)"),
    pagina: int = typer.Option(1, "--pagina", "-p", min=1, help="Página a mostrar"),
    tamano: Optional[int] = typer.Option(None, "--tamano", "-t", min=1, help="Filas por página"),
    stats: bool = typer.Option(False, "--stats", "-s", help="Mostrar el resumen de la colección"),
    base_url: Optional[str] = typer.Option(None, "--api", help="URL del backend"),
):
    """List one page of an admin screen."""
    filters = dict(parse_filter(raw) for raw in filtro or [])
    screen = get_screen(entity)
    try:
        screen.capability.validate(filters)
    except UnknownFilterFieldError as exc:
        raise typer.BadParameter(exc.detail, param_hint="--filtro") from exc
    setup_logging()

    async def _run() -> bool:
        async with ApiClient(base_url=base_url) as client:
            engine = build_engine(entity, client, page_size=tamano, initial_filters=filters)
            await engine.start(with_stats=stats)
            if pagina != 1 and not engine.error:
                await engine.go_to_page(pagina)

            _render_page(engine, screen.columns)
            if stats:
                _render_stats(engine)
            if engine.notification is not None and engine.notification.kind == "error":
                console.print(f"[red]✗ {engine.notification.message}[/red]")
            return not engine.error

    if not asyncio.run(_run()):
        raise typer.Exit(1)


@app.command()
def campos(
    entity: str = typer.Argument(..., help="pedidos, productos o usuarios", callback=_check_entity),
):
    """Show which filters the backend evaluates and which run locally."""
    capability = get_screen(entity).capability
    table = Table(title=f"Filtros de {entity}")
    table.add_column("Campo", style="cyan")
    table.add_column("Evaluación", style="green")
    table.add_column("Tipo")
    for name, spec in capability.fields.items():
        table.add_row(name, spec.capability.value, spec.match.value)
    console.print(table)


if __name__ == "__main__":
    app()
