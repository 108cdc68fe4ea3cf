import click

from app.cli.sync_listings import sync_listings
from app.cli.sync_reviews import sync_reviews


@click.group()
def cli():
    """Reputation sync commands."""


cli.add_command(sync_reviews)
cli.add_command(sync_listings)
