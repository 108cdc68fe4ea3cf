# tests/unit/cli/test_cli.py
import click
import pytest
from click.testing import CliRunner

from app.cli import cli
from app.cli.common import load_location
from app.models import Listing


def test_sync_reviews_requires_tenant():
    result = CliRunner().invoke(cli, ["sync-reviews", "--location-id", "1"])

    assert result.exit_code == 2
    assert "--tenant-id" in result.output


def test_sync_listings_rejects_unknown_platform():
    result = CliRunner().invoke(cli, ["sync-listings", "--tenant-id", "1", "--location-id", "1", "--platform", "myspace"])

    assert result.exit_code == 2


def test_sync_reviews_prints_counts(mocker):
    run_sync = mocker.patch("app.cli.sync_reviews.run_sync", return_value={"facebook": 3, "youtube": 0})
    mocker.patch("app.cli.sync_reviews.configure_logging")

    result = CliRunner().invoke(cli, ["sync-reviews", "--tenant-id", "1", "--location-id", "2"])

    assert result.exit_code == 0
    run_sync.assert_called_once_with(1, 2)
    assert "facebook: 3" in result.output
    assert "Total: 3" in result.output


def test_sync_listings_prints_discrepancies(mocker):
    listing = Listing(platform="facebook", discrepancies={"phone": {"local": "555-0100", "platform": "555-0199"}})
    mocker.patch("app.cli.sync_listings.run_sync", return_value={"facebook": listing, "google_my_business": None})
    mocker.patch("app.cli.sync_listings.configure_logging")

    result = CliRunner().invoke(cli, ["sync-listings", "--tenant-id", "1", "--location-id", "2"])

    assert result.exit_code == 0
    assert "facebook: synced (1 discrepancies)" in result.output
    assert "phone: local='555-0100' platform='555-0199'" in result.output
    assert "google_my_business: not synced" in result.output
    assert "1 of 2 platforms synced" in result.output


@pytest.mark.asyncio
async def test_load_location_is_tenant_scoped(db_session, location, other_tenant):
    assert (await load_location(db_session, location.tenant_id, location.id)).id == location.id

    with pytest.raises(click.ClickException):
        await load_location(db_session, other_tenant.id, location.id)
