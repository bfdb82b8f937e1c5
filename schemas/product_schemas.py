"""
Product request rules, form projection and response shapes.

Clients submit a camelCase form. ``map_form_to_food_product`` projects it onto
the stored columns. Some client values feed two columns on purpose: the base
``products`` columns serve list/search queries and the ``food_products``
columns serve detail reads, and each must be correct on its own.
"""

from datetime import date, datetime
from typing import Any

from models.enums import (Allergen, FlavorType, FoodProductStatus, FoodType, LeadTimeUnit,
                          PackagingType, ProductType, UnitType)
from models.products import DEFAULT_IMAGE, FoodProduct, Product
from utils.validation import FieldRule, check

CURRENCY_PATTERN = r"^[A-Za-z]{3}$"


# ---------------------------------------------------------------------------
# Validation rules
# ---------------------------------------------------------------------------

def _food_array_rules() -> list[FieldRule]:
    return [
        check("flavorType").optional().is_array("Flavor type must be an array"),
        check("flavorType.*").is_in(FlavorType.values(), "Invalid flavor type"),
        check("allergens").optional().is_array("Allergens must be an array"),
        check("allergens.*").is_in(Allergen.values(), "Invalid allergen"),
        check("ingredients").optional().is_array("Ingredients must be an array"),
        check("ingredients.*").is_string("Ingredient must be text").trim(),
        check("usage").optional().is_array("Usage must be an array"),
        check("usage.*").is_string("Usage must be text").trim(),
    ]


def _food_optional_rules() -> list[FieldRule]:
    return [
        check("category").optional().is_string("Category must be text").trim(),
        check("description").optional().is_length(max=2000, message="Description cannot exceed 2000 characters").trim(),
        check("manufacturerRegion").optional().trim(),
        check("rating").optional().is_float(min=0, max=5, message="Rating must be between 0 and 5"),
        check("numReviews").optional().is_int(min=0, message="Reviews count cannot be negative"),
        check("currentAvailable").optional().is_int(min=0, message="Current available cannot be negative"),
        check("countInStock").optional().is_int(min=0, message="Stock cannot be negative"),
        check("dailyCapacity").optional().is_int(min=0, message="Daily capacity cannot be negative"),
        check("sustainable").optional().is_boolean("Sustainable must be a boolean value"),
        check("status").optional().is_in(FoodProductStatus.values(),
                                         "Status must be available, discontinued, or preorder"),
        check("shelfLifeStartDate").optional().is_date("Shelf life start date must be a valid date"),
        check("shelfLifeEndDate").optional().is_date("Shelf life end date must be a valid date"),
        check("sku").optional().is_length(min=1, max=32, message="SKU must be 1-32 characters").trim(),
        check("image").optional().is_string("Image must be a URL or key").trim(),
        check("packagingSize").optional().trim(),
        check("shelfLife").optional().trim(),
        check("storageInstruction").optional().trim(),
    ]


CREATE_FOOD_PRODUCT_RULES: list[FieldRule] = [
    check("productName").not_empty("Product name is required").trim(),
    check("manufacturerName").not_empty("Manufacturer is required").trim(),
    check("originCountry").not_empty("Origin country is required").trim(),
    check("minOrderQuantity").exists("Minimum order quantity is required")
        .is_int(min=1, message="Minimum order quantity must be at least 1"),
    check("unitType").not_empty("Unit type is required")
        .is_in(UnitType.values(), f"Unit type must be one of: {', '.join(UnitType.values())}"),
    check("pricePerUnit").exists("Price per unit is required")
        .is_numeric("Price per unit must be a valid number")
        .non_negative("Price per unit cannot be negative"),
    check("priceCurrency").not_empty("Currency is required").trim()
        .matches(CURRENCY_PATTERN, "Currency must be a 3-letter code"),
    check("leadTime").not_empty("Lead time is required").trim(),
    check("leadTimeUnit").not_empty("Lead time unit is required")
        .is_in(LeadTimeUnit.values(), "Lead time unit must be days, weeks, or months"),
    check("foodType").not_empty("Food type is required")
        .is_in(FoodType.values(), "Invalid food type"),
    check("packagingType").not_empty("Packaging type is required")
        .is_in(PackagingType.values(), "Invalid packaging type"),
    *_food_optional_rules(),
    *_food_array_rules(),
]


UPDATE_FOOD_PRODUCT_RULES: list[FieldRule] = [
    check("productName").optional().not_empty("Product name cannot be empty").trim(),
    check("manufacturerName").optional().not_empty("Manufacturer cannot be empty").trim(),
    check("originCountry").optional().not_empty("Origin country cannot be empty").trim(),
    check("minOrderQuantity").optional().is_int(min=1, message="Minimum order quantity must be at least 1"),
    check("unitType").optional().is_in(UnitType.values(), "Invalid unit type"),
    check("pricePerUnit").optional().is_numeric("Price per unit must be a valid number")
        .non_negative("Price per unit cannot be negative"),
    check("price").optional().is_numeric("Price must be a valid number").non_negative("Price cannot be negative"),
    check("priceCurrency").optional().trim().matches(CURRENCY_PATTERN, "Currency must be a 3-letter code"),
    check("leadTime").optional().not_empty("Lead time cannot be empty").trim(),
    check("leadTimeUnit").optional().is_in(LeadTimeUnit.values(), "Lead time unit must be days, weeks, or months"),
    check("foodType").optional().is_in(FoodType.values(), "Invalid food type"),
    check("packagingType").optional().is_in(PackagingType.values(), "Invalid packaging type"),
    *_food_optional_rules(),
    *_food_array_rules(),
]


CREATE_BASE_PRODUCT_RULES: list[FieldRule] = [
    check("productName").not_empty("Product name is required").trim(),
    check("manufacturerName").not_empty("Manufacturer is required").trim(),
    check("category").not_empty("Category is required").trim(),
    check("description").not_empty("Description is required")
        .is_length(max=2000, message="Description cannot exceed 2000 characters").trim(),
    check("price").exists("Price is required").is_numeric("Price must be a valid number")
        .non_negative("Price cannot be negative"),
    check("countInStock").optional().is_int(min=0, message="Stock cannot be negative"),
    check("rating").optional().is_float(min=0, max=5, message="Rating must be between 0 and 5"),
    check("numReviews").optional().is_int(min=0, message="Reviews count cannot be negative"),
    check("image").optional().is_string("Image must be a URL or key").trim(),
]


PRODUCT_TYPE_RULE = check("type").not_empty("Product type is required").is_in(
    ProductType.values(), f"Product type must be one of: {', '.join(ProductType.values())}"
)


def create_product_rules(payload: dict) -> list[FieldRule]:
    """Rules for the generic create endpoint, chosen by the declared type."""
    if payload.get("type") == ProductType.FOOD.value:
        return [PRODUCT_TYPE_RULE, *CREATE_FOOD_PRODUCT_RULES]
    return [PRODUCT_TYPE_RULE, *CREATE_BASE_PRODUCT_RULES]


# ---------------------------------------------------------------------------
# Form projection
# ---------------------------------------------------------------------------

def _first(form: dict, *keys: str) -> Any:
    for key in keys:
        value = form.get(key)
        if value is not None and value != "":
            return value
    return None


def _has_any(form: dict, *keys: str) -> bool:
    return _first(form, *keys) is not None


def _number(value: Any, default: float = 0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _integer(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_list(value: Any) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")).date()


# (target column, form keys in priority order, converter, default)
_FOOD_FIELDS: list[tuple[str, tuple[str, ...], Any, Any]] = [
    ("name", ("productName", "name"), str, None),
    ("category", ("category",), str, "Other"),
    ("description", ("description",), str, "No description provided"),
    ("image", ("image",), str, DEFAULT_IMAGE),
    ("rating", ("rating",), _number, 0),
    ("num_reviews", ("numReviews",), _integer, 0),
    ("origin_country", ("originCountry",), str, "Unknown"),
    ("manufacturer_region", ("manufacturerRegion",), str, ""),
    ("min_order_quantity", ("minOrderQuantity",), _integer, 1),
    ("daily_capacity", ("dailyCapacity",), _integer, 100),
    ("unit_type", ("unitType",), str, "units"),
    ("price_currency", ("priceCurrency", "currency"), lambda v: str(v).upper(), "USD"),
    ("lead_time", ("leadTime",), str, "1-2"),
    ("lead_time_unit", ("leadTimeUnit",), str, "weeks"),
    ("sustainable", ("sustainable",), _boolean, False),
    ("food_type", ("foodType",), str, "Other"),
    ("flavor_type", ("flavorType",), _as_list, []),
    ("ingredients", ("ingredients",), _as_list, []),
    ("allergens", ("allergens",), _as_list, []),
    ("usage", ("usage",), _as_list, []),
    ("packaging_type", ("packagingType",), str, "Bottle"),
    ("packaging_size", ("packagingSize",), str, "Standard"),
    ("shelf_life", ("shelfLife",), str, "12 months"),
    ("shelf_life_start_date", ("shelfLifeStartDate",), _as_date, None),
    ("shelf_life_end_date", ("shelfLifeEndDate",), _as_date, None),
    ("storage_instruction", ("storageInstruction",), str, "Store in cool, dry place"),
    ("sku", ("sku",), str, None),
    ("status", ("status",), str, "available"),
]


def map_form_to_food_product(form: dict, partial: bool = False) -> dict[str, Any]:
    """
    Project a food product form onto ``FoodProduct`` column values.

    Dual writes:
      * ``manufacturerName`` -> ``manufacturer`` and, unless ``brand`` is
        given, ``brand``
      * ``pricePerUnit`` (or ``price``) -> ``price_per_unit`` and ``price``
      * ``currentAvailable`` (or ``countInStock``) -> ``current_available``
        and ``count_in_stock``

    With ``partial=True`` only columns whose source keys are present are
    returned and no defaults are applied (used for updates).
    """
    values: dict[str, Any] = {}

    for column, keys, convert, default in _FOOD_FIELDS:
        raw = _first(form, *keys)
        if raw is not None:
            values[column] = convert(raw)
        elif not partial:
            values[column] = list(default) if isinstance(default, list) else default

    manufacturer = _first(form, "manufacturerName", "manufacturer")
    brand = _first(form, "brand")
    if manufacturer is not None:
        values["manufacturer"] = str(manufacturer)
        values["brand"] = str(brand if brand is not None else manufacturer)
    elif brand is not None:
        values["brand"] = str(brand)

    if _has_any(form, "pricePerUnit", "price"):
        unit_price = _number(_first(form, "pricePerUnit", "price"))
        values["price_per_unit"] = unit_price
        values["price"] = unit_price
    elif not partial:
        values["price_per_unit"] = values["price"] = 0.0

    if _has_any(form, "currentAvailable", "countInStock"):
        available = _integer(_first(form, "currentAvailable", "countInStock"))
        values["current_available"] = available
        values["count_in_stock"] = available
    elif not partial:
        values["current_available"] = values["count_in_stock"] = 0

    return values


_BASE_FIELDS: list[tuple[str, tuple[str, ...], Any, Any]] = [
    ("name", ("productName", "name"), str, None),
    ("brand", ("brand", "manufacturerName"), str, None),
    ("category", ("category",), str, "Other"),
    ("description", ("description",), str, "No description provided"),
    ("image", ("image",), str, DEFAULT_IMAGE),
    ("price", ("price",), _number, 0.0),
    ("count_in_stock", ("countInStock",), _integer, 0),
    ("rating", ("rating",), _number, 0),
    ("num_reviews", ("numReviews",), _integer, 0),
]


def map_form_to_product(form: dict, partial: bool = False) -> dict[str, Any]:
    """Project a non-food product form onto the base ``Product`` columns."""
    values: dict[str, Any] = {}
    for column, keys, convert, default in _BASE_FIELDS:
        raw = _first(form, *keys)
        if raw is not None:
            values[column] = convert(raw)
        elif not partial:
            values[column] = default
    return values


# ---------------------------------------------------------------------------
# Response shapes
# ---------------------------------------------------------------------------

def serialize_product(product: Product) -> dict[str, Any]:
    return {
        "id": product.id,
        "user": product.user_id,
        "name": product.name,
        "brand": product.brand,
        "category": product.category,
        "description": product.description,
        "price": product.price,
        "countInStock": product.count_in_stock,
        "image": product.image,
        "rating": product.rating,
        "numReviews": product.num_reviews,
        "productType": product.product_type,
        "createdAt": product.created_at,
        "updatedAt": product.updated_at,
    }


def serialize_food_product(product: FoodProduct) -> dict[str, Any]:
    data = serialize_product(product)
    data.update({
        "manufacturer": product.manufacturer,
        "originCountry": product.origin_country,
        "manufacturerRegion": product.manufacturer_region,
        "minOrderQuantity": product.min_order_quantity,
        "dailyCapacity": product.daily_capacity,
        "currentAvailable": product.current_available,
        "unitType": product.unit_type,
        "pricePerUnit": product.price_per_unit,
        "priceCurrency": product.price_currency,
        "leadTime": product.lead_time,
        "leadTimeUnit": product.lead_time_unit,
        "sustainable": product.sustainable,
        "foodType": product.food_type,
        "flavorType": product.flavor_type,
        "ingredients": product.ingredients,
        "allergens": product.allergens,
        "usage": product.usage,
        "packagingType": product.packaging_type,
        "packagingSize": product.packaging_size,
        "shelfLife": product.shelf_life,
        "shelfLifeStartDate": product.shelf_life_start_date,
        "shelfLifeEndDate": product.shelf_life_end_date,
        "storageInstruction": product.storage_instruction,
        "sku": product.sku,
        "status": product.status,
    })
    return data


def serialize_any_product(product: Product) -> dict[str, Any]:
    if isinstance(product, FoodProduct):
        return serialize_food_product(product)
    return serialize_product(product)
