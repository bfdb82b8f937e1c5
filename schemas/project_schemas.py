from typing import Any

from models.enums import ProjectStatus, SelectedProductKind
from models.projects import Project, ProjectEvent
from utils.validation import FieldRule, check

STATUS_MESSAGE = f"Invalid status. Valid statuses: {', '.join(ProjectStatus.values())}"


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


def _string_list_rules(field: str, label: str) -> list[FieldRule]:
    return [
        check(field).optional().is_array(f"{label} must be an array"),
        check(f"{field}.*").is_string(f"{label} entries must be text").trim(),
    ]


def _shared_optional_rules() -> list[FieldRule]:
    return [
        check("status").optional().is_in(ProjectStatus.values(), STATUS_MESSAGE),
        check("selectedProduct").optional().custom(_is_object, "Selected product must be an object"),
        check("selectedSupplierType").optional().custom(_is_object, "Supplier type must be an object"),
        check("selectedProduct.type").optional().is_in(SelectedProductKind.values(),
                                                       "Selected product type must be PRODUCT, CATEGORY or FOODTYPE"),
        check("selectedProduct.name").optional().is_string("Selected product name must be text").trim(),
        check("selectedSupplierType.name").optional().is_string("Supplier type name must be text").trim(),
        *_string_list_rules("packaging", "Packaging"),
        check("packagingObjects").optional().is_array("Packaging objects must be an array"),
        *_string_list_rules("location", "Location"),
        *_string_list_rules("allergen", "Allergen"),
        *_string_list_rules("certification", "Certification"),
        check("additional").optional()
            .is_length(max=1000, message="Additional notes cannot exceed 1000 characters").trim(),
        check("anonymous").optional().is_boolean("Anonymous must be a boolean value"),
        check("hideFromCurrent").optional().is_boolean("Hide from current must be a boolean value"),
    ]


CREATE_PROJECT_RULES: list[FieldRule] = [
    check("name").not_empty("Name is required")
        .is_length(max=200, message="Name cannot exceed 200 characters").trim(),
    check("description").not_empty("Description is required")
        .is_length(max=2000, message="Description cannot exceed 2000 characters").trim(),
    check("volume").not_empty("Volume is required").trim(),
    check("units").not_empty("Units are required").trim(),
    *_shared_optional_rules(),
]

UPDATE_PROJECT_RULES: list[FieldRule] = [
    check("name").optional().not_empty("Name cannot be empty")
        .is_length(max=200, message="Name cannot exceed 200 characters").trim(),
    check("description").optional().not_empty("Description cannot be empty")
        .is_length(max=2000, message="Description cannot exceed 2000 characters").trim(),
    check("volume").optional().not_empty("Volume cannot be empty").trim(),
    check("units").optional().not_empty("Units cannot be empty").trim(),
    *_shared_optional_rules(),
]

PROJECT_STATUS_RULES: list[FieldRule] = [
    check("status").exists(STATUS_MESSAGE).is_in(ProjectStatus.values(), STATUS_MESSAGE),
    check("reason").optional().is_string("Reason must be text").trim(),
]


def _boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    return [value]


# (target column, form key, converter, default on create)
_PROJECT_FIELDS: list[tuple[str, str, Any, Any]] = [
    ("name", "name", str, None),
    ("description", "description", str, None),
    ("selected_product", "selectedProduct", dict, None),
    ("selected_supplier_type", "selectedSupplierType", dict, None),
    ("volume", "volume", str, None),
    ("units", "units", str, None),
    ("packaging", "packaging", _as_list, []),
    ("packaging_objects", "packagingObjects", _as_list, []),
    ("location", "location", _as_list, ["Global"]),
    ("allergen", "allergen", _as_list, []),
    ("certification", "certification", _as_list, []),
    ("additional", "additional", str, None),
    ("anonymous", "anonymous", _boolean, False),
    ("hide_from_current", "hideFromCurrent", _boolean, False),
]


def map_form_to_project(form: dict, partial: bool = False) -> dict[str, Any]:
    """
    Project a project form onto columns. ``status`` is left out: status moves
    only through ``Project.change_status`` so the timeline stays complete.
    Ownership and timestamps are never taken from the form.
    """
    values: dict[str, Any] = {}
    for column, key, convert, default in _PROJECT_FIELDS:
        value = form.get(key)
        if value is None:
            if not partial and default is not None:
                values[column] = list(default) if isinstance(default, list) else default
            continue
        values[column] = convert(value)
    return values


def serialize_event(event: ProjectEvent) -> dict[str, Any]:
    return {"event": event.event, "description": event.description, "date": event.created_at}


def serialize_project(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "status": project.status,
        "selectedProduct": project.selected_product,
        "selectedSupplierType": project.selected_supplier_type,
        "volume": project.volume,
        "units": project.units,
        "packaging": project.packaging or [],
        "packagingObjects": project.packaging_objects or [],
        "location": project.location or [],
        "allergen": project.allergen or [],
        "certification": project.certification or [],
        "additional": project.additional,
        "anonymous": project.anonymous,
        "hideFromCurrent": project.hide_from_current,
        "createdBy": {
            "id": project.created_by,
            "name": project.owner.name if project.owner else None,
            "email": project.owner.email if project.owner else None,
        },
        "timeline": [serialize_event(event) for event in project.timeline],
        "createdAt": project.created_at,
        "updatedAt": project.updated_at,
    }
