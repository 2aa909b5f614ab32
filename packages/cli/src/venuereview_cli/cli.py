"""CLI entry point for venuereview.

Commands:
  venues  list venues with their averaged ratings
  show    display one venue with its reviews, newest first
  review  submit a review (optionally with photos)
  init    write the initial venue database to the configured store
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console

from venuereview_cli.commands.init import init_cmd
from venuereview_cli.commands.review import review_cmd
from venuereview_cli.commands.venues import show_cmd, venues_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .venuereview.yml settings.

    Store selection:
      store: json   → JSONFileStore (store_path, default db.json)
      store: sqlite → SQLiteStore   (store_path, default venuereview.db)
      store: gist   → GistStore     (requires gist_id and github_token)

    This factory lives in cli.py so neither venuereview_core nor
    venuereview_store know about the CLI config format.
    """
    store_type = config.get("store", "json")

    if store_type == "json":
        from venuereview_store.json_file import JSONFileStore

        return JSONFileStore(path=config.get("store_path") or "db.json")

    if store_type == "sqlite":
        from venuereview_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path") or "venuereview.db")

    if store_type == "gist":
        from venuereview_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            raise click.UsageError("The gist store requires gist_id in the config file and GITHUB_TOKEN to be set.")
        return GistStore(gist_id=gist_id, token=token)

    raise click.UsageError(f"Unknown store type: {store_type!r}. Choose 'json', 'sqlite' or 'gist'.")


@click.group()
@click.version_option(
    version=importlib.metadata.version("venuereview"),
    prog_name="venuereview",
)
@click.option(
    "--config",
    "config_path",
    default=".venuereview.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="VENUEREVIEW_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level. Overrides config file.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, log_level: str | None):
    """Venue reviews with per-category rating averages."""
    from venuereview_core.config import load_config
    from venuereview_core.service import ReviewService
    from venuereview_store.base import StoreUnavailable

    ctx.ensure_object(dict)

    try:
        config = load_config(config_path, cli_overrides={"log_level": log_level})
    except (OSError, ValueError) as e:
        raise click.UsageError(f"Cannot read {config_path}: {e}")

    logging.basicConfig(
        level=str(config["log_level"]).upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        store = _build_store(config)
    except StoreUnavailable as e:
        raise click.ClickException(str(e))

    ctx.obj["config"] = config
    ctx.obj["store"] = store
    ctx.obj["service"] = ReviewService(store)
    ctx.call_on_close(store.close)


main.add_command(venues_cmd)
main.add_command(show_cmd)
main.add_command(review_cmd)
main.add_command(init_cmd)
