import asyncio
import json
import logging

import click

from catalogcache.catalog import Catalog
from catalogcache.config.settings import config
from catalogcache.context import CatalogContext
from catalogcache.models import COLLECTION_TYPES
from catalogcache.version import get_version


def _catalog(ctx) -> Catalog:
    return ctx.obj["catalog"]


def _echo(value):
    if isinstance(value, list):
        data = [item.model_dump(mode="json", exclude_none=True) for item in value]
    else:
        data = value.model_dump(mode="json", exclude_none=True)
    click.echo(json.dumps(data, indent=2))


@click.group()
@click.option("--log-level", default=config.log_level, help="Logging level.")
@click.pass_context
def main(ctx, log_level):
    """Catalog cache CLI"""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    if "catalog" not in ctx.obj:
        ctx.obj["catalog"] = Catalog(CatalogContext())


@main.command()
@click.argument("app_id")
@click.pass_context
def app(ctx, app_id):
    """Show a single app."""
    _echo(asyncio.run(_catalog(ctx).get_app(app_id)))


@main.command()
@click.pass_context
def categories(ctx):
    """List categories."""
    _echo(asyncio.run(_catalog(ctx).get_collection_categories()))


@main.command()
@click.argument("category_id")
@click.option("--limit", default=24, show_default=True, help="Page size.")
@click.option("--offset", default=0, show_default=True, help="Page offset.")
@click.pass_context
def category(ctx, category_id, limit, offset):
    """Show the apps of a category."""
    try:
        result = asyncio.run(_catalog(ctx).get_collection_category(category_id, limit, offset))
    except ValueError as e:
        raise click.UsageError(str(e))
    _echo(result)


@main.command()
@click.argument("collection_type", type=click.Choice(COLLECTION_TYPES))
@click.pass_context
def collection(ctx, collection_type):
    """Show the popular, trending or recently updated collection."""
    catalog = _catalog(ctx)
    loaders = {
        "popular": catalog.get_collection_popular,
        "trending": catalog.get_collection_trending,
        "recently-updated": catalog.get_collection_recently_updated,
    }
    _echo(asyncio.run(loaders[collection_type]()))


@main.command()
@click.argument("query")
@click.option("--limit", default=50, show_default=True, help="Page size.")
@click.option("--offset", default=0, show_default=True, help="Page offset.")
@click.pass_context
def search(ctx, query, limit, offset):
    """Search apps."""
    _echo(asyncio.run(_catalog(ctx).search_apps(query, limit, offset)))


@main.command()
@click.pass_context
def homepage(ctx):
    """Show the homepage collections."""
    _echo(asyncio.run(_catalog(ctx).get_homepage()))


@main.command()
def version():
    """Print the library version."""
    click.echo(get_version())
