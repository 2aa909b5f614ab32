"""init command: write the initial venue database to the configured store.

Venues are never created through the review flow, so a deployment starts
by seeding them here, either from a JSON/YAML document or as an empty
database that is filled in by hand later.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
import yaml
from rich.console import Console

from venuereview_store.base import StoreUnavailable
from venuereview_store.models import Snapshot, snapshot_from_dict

console = Console()


def _load_seed(seed_path: str) -> Snapshot:
    """Read a seed document. YAML is a superset of JSON, but .json goes through json."""
    path = Path(seed_path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    return snapshot_from_dict(data)


def _store_has_data(store) -> bool:
    exists = getattr(store, "exists", None)
    if exists is not None:
        return exists()
    try:
        store.load()
    except StoreUnavailable:
        return False
    return True


@click.command("init")
@click.option(
    "--seed",
    "seed_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON or YAML document with a 'venues' list to start from.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing database.")
@click.pass_context
def init_cmd(ctx, seed_path: str | None, force: bool):
    """Create the venue database.

    Without --seed an empty database is written.
    """
    store = ctx.obj["store"]

    if seed_path:
        try:
            snapshot = _load_seed(seed_path)
        except (ValueError, yaml.YAMLError) as e:
            raise click.ClickException(f"Invalid seed file {seed_path}: {e}")
    else:
        snapshot = Snapshot()

    if not force and _store_has_data(store):
        raise click.ClickException("A venue database already exists. Use --force to overwrite it.")

    try:
        store.save(snapshot)
    except StoreUnavailable as e:
        raise click.ClickException(str(e))

    console.print(f"[green]Initialized venue database with {len(snapshot.venues)} venue(s).[/green]")
