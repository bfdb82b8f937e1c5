from datetime import datetime, timezone
from schemas.manufacturer_schemas import (CREATE_MANUFACTURER_RULES, UPDATE_MANUFACTURER_RULES,
                                          map_form_to_manufacturer)
from utils.validation import validate
from tests.factories import manufacturer_form


def test_valid_form_passes():
    assert validate(manufacturer_form(), CREATE_MANUFACTURER_RULES) == []


def test_contact_email_is_required_on_create_only():
    form = manufacturer_form(contact={"website": "https://spiceworks.example.com"})

    create_errors = validate(form, CREATE_MANUFACTURER_RULES)
    assert [error["field"] for error in create_errors] == ["contact.email"]
    assert validate({"contact": {"phone": "+34 600 000 000"}}, UPDATE_MANUFACTURER_RULES) == []


def test_establish_industry_and_website_are_optional():
    form = {"name": "Spice Works", "location": "Valencia, Spain",
            "contact": {"email": "sales@spiceworks.example.com"}}

    assert validate(form, CREATE_MANUFACTURER_RULES) == []


def test_establishment_year_range():
    this_year = datetime.now(timezone.utc).year

    for year in (this_year + 1, -5, "abc", 1998.5, True):
        errors = validate(manufacturer_form(establish=year), CREATE_MANUFACTURER_RULES)
        assert errors[0]["field"] == "establish", year

    for year in (0, "1901", 1998.0, this_year):
        assert validate(manufacturer_form(establish=year), CREATE_MANUFACTURER_RULES) == [], year


def test_contact_email_checked_when_present():
    form = manufacturer_form()
    form["contact"]["email"] = "not-an-email"

    errors = validate(form, CREATE_MANUFACTURER_RULES)
    assert errors[0]["field"] == "contact.email"
    assert errors[0]["message"] == "Please provide a valid email"


def test_contact_block_is_flattened():
    values = map_form_to_manufacturer(manufacturer_form(establish="1998"))

    assert values["establish"] == 1998
    assert values["contact_website"] == "https://spiceworks.example.com"
    assert values["contact_email"] == "sales@spiceworks.example.com"
    assert "image" not in values


def test_whole_float_year_is_stored_as_int():
    assert map_form_to_manufacturer(manufacturer_form(establish=1998.0))["establish"] == 1998
    assert map_form_to_manufacturer(manufacturer_form(establish=0))["establish"] == 0


def test_partial_projection():
    assert map_form_to_manufacturer({"location": "Madrid"}, partial=True) == {"location": "Madrid"}
    assert map_form_to_manufacturer({"contact": {"phone": "+34 1"}}, partial=True) == {"contact_phone": "+34 1"}
