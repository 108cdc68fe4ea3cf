# app/cli/sync_listings.py
import asyncio

import click

from app.cli.common import load_location
from app.core.enums import PlatformName
from app.core.exceptions import UnsupportedPlatformError
from app.core.logging_config import configure_logging
from app.database import async_session
from app.services.listing_service import ListingService


@click.command("sync-listings")
@click.option('--tenant-id', type=int, required=True, help='Tenant that owns the location')
@click.option('--location-id', type=int, required=True, help='Location to sync')
@click.option('--platform', type=click.Choice([p.value for p in PlatformName]), default=None,
              help='Only sync this platform')
def sync_listings(tenant_id, location_id, platform):
    """Refresh a location's listings from the platforms and report discrepancies"""
    configure_logging()
    try:
        results = asyncio.run(run_sync(tenant_id, location_id, platform))
    except UnsupportedPlatformError as e:
        raise click.ClickException(str(e))

    succeeded = 0
    for name, listing in results.items():
        if listing is None:
            click.echo(f"  {name}: not synced")
            continue
        succeeded += 1
        discrepancies = listing.discrepancies or {}
        click.echo(f"  {name}: synced ({len(discrepancies)} discrepancies)")
        for field, values in discrepancies.items():
            click.echo(f"      {field}: local={values['local']!r} platform={values['platform']!r}")
    click.echo(f"{succeeded} of {len(results)} platforms synced")


async def run_sync(tenant_id: int, location_id: int, platform=None):
    async with async_session() as session:
        location = await load_location(session, tenant_id, location_id)
        service = ListingService(session)
        if platform:
            return {platform: await service.sync_from_platform(location, platform)}
        return await service.sync_all_platforms(location)
