# tests/unit/services/test_discrepancy_detector.py
from app.models import Listing, Location
from app.services.discrepancy_detector import DISCREPANCY_FIELDS, detect_discrepancies


def _location(**overrides):
    values = {
        "name": "Acme Coffee",
        "phone": "555-0100",
        "website": "https://acme.example",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
    }
    values.update(overrides)
    return Location(**values)


def test_matching_profiles_have_no_discrepancies():
    listing = Listing(
        name="  ACME coffee ",
        phone="555-0100",
        website="HTTPS://ACME.EXAMPLE",
        address="1 main st",
        city="Springfield",
        state="il",
        postal_code="62701",
    )
    assert detect_discrepancies(_location(), listing) == {}


def test_differences_keep_raw_values():
    listing = Listing(name="Acme Coffee Co", phone="555-0199")

    assert detect_discrepancies(_location(), listing) == {
        "name": {"local": "Acme Coffee", "platform": "Acme Coffee Co"},
        "phone": {"local": "555-0100", "platform": "555-0199"},
    }


def test_empty_side_is_not_a_discrepancy():
    listing = Listing(name="Other Name", phone="555-0199", website="https://other.example")

    result = detect_discrepancies(_location(name="", phone=None, website="   "), listing)

    assert result == {}


def test_only_profile_fields_are_compared():
    assert "country" not in DISCREPANCY_FIELDS
    listing = Listing(country="United States")
    assert detect_discrepancies(_location(country="US"), listing) == {}
