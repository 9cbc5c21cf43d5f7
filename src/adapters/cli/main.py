"""
adapters.cli.main - CLI adapter for the diet recipe recommender.

Mirrors src/adapters/rest/ but for terminal use. Uses the same
ServiceFactory and services as the REST API so behaviour is identical.

Commands
--------
  init        Create the database schema and seed the condition catalog
  conditions  List the medical condition catalog
  needs       Show a user's conditions and aggregated nutrient profile
  recommend   Run the recommendation pipeline for a user

Usage
-----
  python run_cli.py init
  python run_cli.py needs 1
  python run_cli.py recommend 1
"""

from __future__ import annotations

import asyncio

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from application.context import RequestContext
from domain.exceptions import DomainError, NoConditionsError
from domain.models import Priority
from factory import ServiceFactory
from infrastructure.config import Settings

__version__ = "1.0.0"

console = Console()
app = typer.Typer(
    help="Diet Recipe Recommender CLI",
    add_completion=False,
    no_args_is_help=True,
)

_PRIORITY_STYLE = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

async def _make_factory() -> ServiceFactory:
    factory = ServiceFactory(Settings.from_env())
    await factory.initialize()
    return factory


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"diet-recipes v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Diet Recipe Recommender CLI."""


def _fail(message: str) -> None:
    console.print(f"[bold red]{message}[/bold red]")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def init() -> None:
    """Create the database schema and seed the condition catalog."""
    async def _run() -> None:
        config = Settings.from_env()
        factory = ServiceFactory(config)
        with console.status("[bold cyan]Preparing database…", spinner="dots"):
            await factory.initialize()
        count = len(await factory.create_condition_service().list_catalog())
        await factory.close()
        console.print(Panel(
            f"[bold green]Database ready[/bold green] at [bold]{config.db_path}[/bold]\n"
            f"{count} medical condition(s) in the catalog.",
            border_style="green",
        ))

    asyncio.run(_run())


@app.command()
def conditions() -> None:
    """List the medical condition catalog."""
    async def _run() -> None:
        factory = await _make_factory()
        try:
            catalog = await factory.create_condition_service().list_catalog()
        finally:
            await factory.close()

        t = Table(title="Medical Conditions", box=box.SIMPLE_HEAVY)
        t.add_column("ID", justify="right", style="bold")
        t.add_column("Name")
        t.add_column("Recommended nutrients")
        for c in catalog:
            nutrients = ", ".join(
                f"[{_PRIORITY_STYLE[p]}]{n} ({p.value})[/{_PRIORITY_STYLE[p]}]"
                for n, p in c.recommended_nutrients.items()
            )
            t.add_row(str(c.id), c.name, nutrients or "[dim]none[/dim]")
        console.print(t)

    asyncio.run(_run())


@app.command()
def needs(
    user_id: int = typer.Argument(..., help="User id."),
) -> None:
    """Show a user's conditions and aggregated nutrient profile."""
    async def _run() -> None:
        factory = await _make_factory()
        ctx = RequestContext(user_id=user_id, session_id="cli")
        try:
            result = await factory.create_nutrition_service().get_user_needs(ctx, user_id)
        except DomainError as e:
            _fail(str(e))
        finally:
            await factory.close()

        if not result.conditions:
            console.print("[yellow]No medical conditions recorded for this user.[/yellow]")
            return

        console.print(Panel(
            "\n".join(f"{c.name} [dim]({c.severity})[/dim]" for c in result.conditions),
            title="Conditions",
            border_style="blue",
        ))
        t = Table(box=box.SIMPLE, show_header=True, padding=(0, 2))
        t.add_column("Nutrient", style="bold")
        t.add_column("Priority")
        ordered = sorted(result.nutritional_needs.items(), key=lambda kv: (-kv[1].rank, kv[0]))
        for nutrient, priority in ordered:
            style = _PRIORITY_STYLE[priority]
            t.add_row(nutrient, f"[{style}]{priority.value}[/{style}]")
        console.print(Panel(t, title="Nutritional Needs", border_style="yellow"))

    asyncio.run(_run())


@app.command()
def recommend(
    user_id: int = typer.Argument(..., help="User id."),
) -> None:
    """Run the recommendation pipeline for a user."""
    async def _run() -> None:
        factory = await _make_factory()
        ctx = RequestContext(user_id=user_id, session_id="cli")
        service = factory.create_recommendation_service()
        try:
            with console.status("[bold cyan]Finding recipes…", spinner="dots"):
                result = await service.get_recommendations(ctx, user_id)
        except NoConditionsError as e:
            _fail(str(e))
        except DomainError as e:
            _fail(f"Recommendation failed: {e}")
        finally:
            await factory.close()

        if not result.recommendations:
            console.print(Panel(
                "[bold yellow]No recipes found.[/bold yellow]\n"
                "Generation produced nothing usable; try again later.",
                border_style="yellow",
            ))
            return

        t = Table(
            title=f"Recipes ({len(result.recommendations)} found)",
            box=box.SIMPLE_HEAVY,
        )
        t.add_column("ID", justify="right", style="bold")
        t.add_column("Title")
        t.add_column("Time", justify="right")
        t.add_column("Difficulty")
        t.add_column("Tags", style="cyan")
        for r in result.recommendations:
            t.add_row(
                str(r.id), r.title, f"{r.prep_time + r.cook_time} min",
                r.difficulty.value, ", ".join(r.tags),
            )
        console.print(t)

        if result.generated is not None:
            console.print(
                f"[dim]{len(result.generated.succeeded)} new recipe(s) generated, "
                f"{len(result.generated.failed)} failure(s).[/dim]"
            )

    asyncio.run(_run())


if __name__ == "__main__":
    app()
