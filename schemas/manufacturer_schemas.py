from datetime import datetime, timezone
from typing import Any

from models.manufacturers import Manufacturer
from utils.validation import FieldRule, check


def _current_year() -> int:
    return datetime.now(timezone.utc).year


def _parse_year(value: Any) -> int | None:
    # whole numbers only; 1998, "1998" and 1998.0 all count
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _year_in_range(value: Any) -> bool:
    year = _parse_year(value)
    return year is not None and 0 <= year <= _current_year()


def _establish_rule() -> FieldRule:
    # the upper bound moves with the calendar, so it is checked per request
    return check("establish").optional().custom(
        _year_in_range,
        "Establishment year must be between 0 and the current year",
    )


def _shared_optional_rules() -> list[FieldRule]:
    return [
        _establish_rule(),
        check("industry").optional().is_string("Industry must be text").trim(),
        check("contact.website").optional().is_url("Please provide a valid website URL").trim(),
        check("certification").optional().is_array("Certification must be an array"),
        check("certification.*").is_string("Certification must be text").trim(),
        check("contact.phone").optional().is_string("Contact phone must be text").trim(),
        check("image").optional().is_string("Image must be a URL or key").trim(),
        check("description").optional()
            .is_length(max=1000, message="Description cannot exceed 1000 characters").trim(),
    ]


CREATE_MANUFACTURER_RULES: list[FieldRule] = [
    check("name").not_empty("Manufacturer name is required").trim(),
    check("location").not_empty("Location is required").trim(),
    check("contact.email").not_empty("Email is required")
        .is_email("Please provide a valid email").trim(),
    *_shared_optional_rules(),
]

UPDATE_MANUFACTURER_RULES: list[FieldRule] = [
    check("name").optional().not_empty("Manufacturer name cannot be empty").trim(),
    check("location").optional().not_empty("Location cannot be empty").trim(),
    check("contact.email").optional().not_empty("Email cannot be empty")
        .is_email("Please provide a valid email").trim(),
    *_shared_optional_rules(),
]


def map_form_to_manufacturer(form: dict, partial: bool = False) -> dict[str, Any]:
    """Project a manufacturer form (with its nested ``contact`` block) onto columns."""
    contact = form.get("contact") if isinstance(form.get("contact"), dict) else {}
    sources = {
        "name": form.get("name"),
        "location": form.get("location"),
        "establish": _parse_year(form["establish"]) if form.get("establish") is not None else None,
        "industry": form.get("industry"),
        "certification": form.get("certification"),
        "contact_email": contact.get("email"),
        "contact_phone": contact.get("phone"),
        "contact_website": contact.get("website"),
        "image": form.get("image"),
        "description": form.get("description"),
    }
    if partial:
        return {column: value for column, value in sources.items() if value is not None}
    if sources["certification"] is None:
        sources["certification"] = []
    if sources["image"] is None:
        sources.pop("image")
    return sources


def serialize_manufacturer(manufacturer: Manufacturer) -> dict[str, Any]:
    return {
        "id": manufacturer.id,
        "name": manufacturer.name,
        "location": manufacturer.location,
        "establish": manufacturer.establish,
        "industry": manufacturer.industry,
        "certification": manufacturer.certification or [],
        "contact": {
            "email": manufacturer.contact_email,
            "phone": manufacturer.contact_phone,
            "website": manufacturer.contact_website,
        },
        "image": manufacturer.image,
        "description": manufacturer.description,
        "createdAt": manufacturer.created_at,
        "updatedAt": manufacturer.updated_at,
    }
