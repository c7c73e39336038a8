"""
Dinner Planner - CLI Entry Point.

Usage:
    dinner-planner serve                      Start the web API
    dinner-planner health                     Check configuration and database
    dinner-planner shopping-list COUPLE_ID    Print a couple's shopping list
    dinner-planner resolve "Борщ" --lang ru   Resolve a dish through the cache
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="dinner-planner",
    help="Dinner Planner - meal planning for couples and holiday groups.",
    add_completion=False,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    from dinner_planner.config import settings

    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the web API server."""
    import os

    import uvicorn

    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Dinner Planner API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "dinner_planner.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def health() -> None:
    """Check configuration and database tables."""
    console.print("\n[bold]Dinner Planner Health Check[/bold]\n")

    try:
        from dinner_planner.config import get_settings

        current = get_settings()
        console.print(f"[green]OK[/green] Configuration loaded ({current.planner_env})")
    except Exception as e:
        console.print(f"[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    from dinner_planner.db.client import get_service_client

    tables = [
        "users",
        "couples",
        "dishes",
        "ingredients",
        "manual_ingredients",
        "holiday_groups",
        "holiday_members",
        "holiday_dishes",
        "holiday_dish_ingredients",
        "holiday_dish_approvals",
        "dish_cache",
        "dish_cache_ingredients",
    ]

    client = get_service_client()
    failed = False
    for table in tables:
        try:
            result = client.table(table).select("*", count="exact").limit(0).execute()
            console.print(f"  [green]OK[/green] {table}: {result.count} rows")
        except Exception as e:
            failed = True
            console.print(f"  [red]FAIL[/red] {table}: {e}")

    if failed:
        raise typer.Exit(1)


@app.command("shopping-list")
def shopping_list_command(
    group_id: str = typer.Argument(..., help="Couple id (or holiday group id with --holiday)"),
    holiday: bool = typer.Option(False, "--holiday", help="Treat GROUP_ID as a holiday group"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Print the categorized shopping list of a group."""
    _configure_logging(verbose)

    from dinner_planner.db.client import PlannerRepository
    from dinner_planner.services.shopping_list import load_couple_list, load_holiday_list

    repo = PlannerRepository()
    if holiday:
        result = asyncio.run(load_holiday_list(repo, group_id))
    else:
        result = asyncio.run(load_couple_list(repo, group_id))

    if not result.rows:
        console.print("[dim]Shopping list is empty.[/dim]")
        return

    table = Table(title="Shopping List")
    table.add_column("Category", style="bold")
    table.add_column("Ingredient")
    table.add_column("Amount", justify="right")
    table.add_column("Dishes", style="dim")
    table.add_column("", justify="center")

    for category, items in result.categories.items():
        for item in items:
            amount = f"{item.amount:g} {item.unit}".strip() if item.amount else item.unit
            table.add_row(
                category.value,
                item.name,
                amount,
                ", ".join(item.dish_names) or ("manual" if item.is_manual else ""),
                "✓" if item.is_purchased else "",
            )

    console.print(table)


@app.command()
def resolve(
    dish_name: str = typer.Argument(..., help="Dish name"),
    lang: str = typer.Option("ru", "--lang", "-l", help="Output language: en or ru"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Resolve a dish through the cache without attaching it to a group."""
    _configure_logging(verbose)

    if lang not in ("en", "ru"):
        console.print(f"[red]Invalid language: {lang}. Use 'en' or 'ru'.[/red]")
        raise typer.Exit(1)

    from dinner_planner.ai.cache import DishCacheService
    from dinner_planner.ai.parsing import Failed, Rejected
    from dinner_planner.db.client import SupabaseDishCacheStore

    service = DishCacheService(SupabaseDishCacheStore())
    result = asyncio.run(service.lookup_or_generate(dish_name, lang))

    if isinstance(result, Rejected):
        console.print(f"[yellow]{result.message}[/yellow]")
        raise typer.Exit(2)
    if isinstance(result, Failed):
        console.print(f"[red]Generation failed: {result.reason}[/red]")
        raise typer.Exit(1)

    source = "cache" if result.cached else "generated"
    console.print(f"\n[bold green]{dish_name}[/bold green] [dim]({source})[/dim]\n")
    for ing in result.ingredients:
        console.print(f"  • {ing.name}: {ing.amount} {ing.unit}".rstrip())

    nutrition = result.nutrition.present_fields()
    if nutrition:
        console.print("\n" + ", ".join(f"{name}: {value}" for name, value in nutrition.items()))
    if result.recipe:
        console.print(f"\n{result.recipe}")


@app.command()
def version() -> None:
    """Show version information."""
    from dinner_planner import __version__

    console.print(f"Dinner Planner version {__version__}")


if __name__ == "__main__":
    app()
