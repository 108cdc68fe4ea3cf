import click
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.location import Location


async def load_location(session: AsyncSession, tenant_id: int, location_id: int) -> Location:
    """The location, only if it belongs to the given tenant."""
    location = await session.get(Location, location_id)
    if location is None or location.tenant_id != tenant_id:
        raise click.ClickException(f"Location {location_id} not found for tenant {tenant_id}")
    return location
