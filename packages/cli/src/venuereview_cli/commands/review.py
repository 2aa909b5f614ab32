"""review command: submit a review for a venue."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape

from venuereview_core.payload import ReviewPayload
from venuereview_core.service import NotFound
from venuereview_store.base import StoreUnavailable
from venuereview_store.models import review_to_dict
from venuereview_store.uploads import MAX_PHOTOS, LocalPhotoStore

console = Console()


@click.command("review")
@click.argument("venue_id")
@click.option("--author", default=None, help="Reviewer name. Defaults to Anonymous.")
@click.option("--text", default=None, help="Free-text review body.")
@click.option("--bathrooms", default=None, help="Bathrooms rating.")
@click.option("--food", default=None, help="Food rating.")
@click.option("--parking", default=None, help="Parking rating.")
@click.option("--fields", default=None, help="Fields rating.")
@click.option(
    "--photo",
    "photos",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help=f"Photo to attach. Repeat up to {MAX_PHOTOS} times.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the created review as JSON.")
@click.pass_context
def review_cmd(
    ctx,
    venue_id: str,
    author: str | None,
    text: str | None,
    bathrooms: str | None,
    food: str | None,
    parking: str | None,
    fields: str | None,
    photos: tuple[str, ...],
    as_json: bool,
):
    """Add a review to VENUE_ID.

    Ratings are taken as given; anything that is not a number counts as 0.
    """
    if len(photos) > MAX_PHOTOS:
        raise click.UsageError(f"At most {MAX_PHOTOS} photos per review (got {len(photos)}).")

    service = ctx.obj["service"]
    config = ctx.obj["config"]
    payload = ReviewPayload(
        author=author,
        text=text,
        bathrooms=bathrooms,
        food=food,
        parking=parking,
        fields=fields,
    )

    # Only copy photos once the venue is known to exist.
    try:
        service.get_venue(venue_id)
    except (NotFound, StoreUnavailable) as e:
        raise click.ClickException(str(e))

    photo_store = LocalPhotoStore(
        upload_dir=config["upload_dir"],
        url_prefix=config["upload_url_prefix"],
    )
    try:
        photo_refs = photo_store.put_many(list(photos)) if photos else []
    except OSError as e:
        raise click.ClickException(f"Could not store photos: {e}")

    try:
        review = service.create_review(venue_id, payload, photo_refs)
    except (NotFound, StoreUnavailable) as e:
        photo_store.discard(photo_refs)
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(review_to_dict(review), indent=2))
        return

    console.print(f"[green]Review {review.id} added to {escape(venue_id)} by {escape(review.author)}.[/green]")
    if review.photos:
        console.print(f"  {len(review.photos)} photo(s) attached")
