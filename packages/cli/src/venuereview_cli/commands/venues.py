"""venues / show commands: read-only views over the venue database."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from venuereview_core.service import NotFound
from venuereview_store.base import StoreUnavailable
from venuereview_store.models import RATING_CATEGORIES

console = Console()


def _format_coords(coords) -> str:
    if coords is None:
        return ""
    return f"{coords.lat:.4f}, {coords.lng:.4f}"


@click.command("venues")
@click.option("--json", "as_json", is_flag=True, help="Print the list as JSON.")
@click.pass_context
def venues_cmd(ctx, as_json: bool):
    """List every venue with its average ratings and review count."""
    service = ctx.obj["service"]
    try:
        summaries = service.list_venues()
    except StoreUnavailable as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in summaries], indent=2))
        return

    if not summaries:
        console.print("[yellow]No venues found. Seed the database with `venuereview init --seed`.[/yellow]")
        return

    table = Table(title="Venues", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Name", max_width=40)
    table.add_column("City")
    for category in RATING_CATEGORIES:
        table.add_column(category.capitalize(), justify="right")
    table.add_column("Reviews", justify="right")

    for s in summaries:
        averages = s.avg_ratings.to_dict()
        table.add_row(
            s.id,
            s.name,
            s.city,
            *(str(averages[c]) for c in RATING_CATEGORIES),
            str(s.review_count),
        )

    console.print(table)


@click.command("show")
@click.argument("venue_id")
@click.option("--json", "as_json", is_flag=True, help="Print the venue as JSON.")
@click.pass_context
def show_cmd(ctx, venue_id: str, as_json: bool):
    """Show one venue, its average ratings, and its reviews (newest first)."""
    service = ctx.obj["service"]
    try:
        detail = service.get_venue(venue_id)
    except (NotFound, StoreUnavailable) as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(detail.to_dict(), indent=2))
        return

    venue = detail.venue
    console.print(f"\n[bold]{escape(venue.name)}[/bold] [dim]({venue.id})[/dim]")
    console.print(f"  {escape(venue.city)}  {_format_coords(venue.coords)}")

    averages = detail.avg_ratings.to_dict()
    avg_table = Table(title="Average Ratings", show_header=True)
    avg_table.add_column("Category", style="bold")
    avg_table.add_column("Average", justify="right")
    for category in RATING_CATEGORIES:
        avg_table.add_row(category, str(averages[category]))
    console.print(avg_table)

    if not venue.reviews:
        console.print("[yellow]No reviews yet.[/yellow]")
        return

    for r in venue.reviews:
        scores = ", ".join(f"{c} {getattr(r.ratings, c)}" for c in RATING_CATEGORIES)
        console.print(f"[cyan]{escape(r.author)}[/cyan] [dim]{r.created_at[:19].replace('T', ' ')}[/dim]")
        console.print(f"  {scores}")
        if r.text:
            console.print(f"  {escape(r.text)}")
        for photo in r.photos:
            console.print(f"  [dim]{photo}[/dim]")
