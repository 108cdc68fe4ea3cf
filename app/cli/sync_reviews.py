# app/cli/sync_reviews.py
import asyncio

import click

from app.cli.common import load_location
from app.core.logging_config import configure_logging
from app.database import async_session
from app.services.review_service import ReviewService


@click.command("sync-reviews")
@click.option('--tenant-id', type=int, required=True, help='Tenant that owns the location')
@click.option('--location-id', type=int, required=True, help='Location to sync')
def sync_reviews(tenant_id, location_id):
    """Sync reviews from every platform linked to a location"""
    configure_logging()
    counts = asyncio.run(run_sync(tenant_id, location_id))

    click.echo(f"\nReview sync completed for location {location_id}")
    for platform, count in counts.items():
        click.echo(f"  {platform}: {count}")
    click.echo(f"Total: {sum(counts.values())}")


async def run_sync(tenant_id: int, location_id: int):
    async with async_session() as session:
        location = await load_location(session, tenant_id, location_id)
        return await ReviewService(session).sync_reviews_for_location(location)
