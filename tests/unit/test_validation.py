from utils.validation import check, validate


def test_required_field_reported_with_null_value():
    errors = validate({}, [check("productName").not_empty("Product name is required")])

    assert errors == [{"field": "productName", "message": "Product name is required", "value": None}]


def test_each_chain_reports_only_its_first_failure():
    rules = [
        check("name").not_empty("Name is required").is_length(min=3, message="Too short"),
    ]

    errors = validate({"name": ""}, rules)

    assert len(errors) == 1
    assert errors[0]["message"] == "Name is required"


def test_all_chains_run():
    rules = [
        check("name").not_empty("Name is required"),
        check("minOrderQuantity").is_int(min=1, message="Must be at least 1"),
        check("priceCurrency").matches(r"^[A-Za-z]{3}$", "Currency must be a 3-letter code"),
    ]

    errors = validate({"minOrderQuantity": 0, "priceCurrency": "EURO"}, rules)

    assert [error["field"] for error in errors] == ["name", "minOrderQuantity", "priceCurrency"]


def test_optional_fields_skip_when_absent_or_null():
    rules = [check("rating").optional().is_float(min=0, max=5, message="Rating must be between 0 and 5")]

    assert validate({}, rules) == []
    assert validate({"rating": None}, rules) == []
    assert validate({"rating": 7}, rules)[0]["value"] == 7


def test_nested_paths():
    rules = [check("contact.website").not_empty("Website is required").is_url("Website must be a valid URL")]

    assert validate({}, rules)[0]["field"] == "contact.website"
    assert validate({"contact": {"website": "not a url"}}, rules)[0]["message"] == "Website must be a valid URL"
    assert validate({"contact": {"website": "spiceworks.example.com"}}, rules) == []


def test_wildcard_reports_element_position():
    rules = [check("flavorType.*").is_in(["spicy", "sweet"], "Invalid flavor type")]

    errors = validate({"flavorType": ["spicy", "smoky", "sweet"]}, rules)

    assert errors == [{"field": "flavorType[1]", "message": "Invalid flavor type", "value": "smoky"}]
    assert validate({}, rules) == []


def test_trim_writes_back_into_payload():
    payload = {"productName": "  Smoked Paprika ", "ingredients": [" paprika", "salt  "]}
    rules = [
        check("productName").not_empty().trim(),
        check("ingredients.*").is_string().trim(),
    ]

    assert validate(payload, rules) == []
    assert payload["productName"] == "Smoked Paprika"
    assert payload["ingredients"] == ["paprika", "salt"]


def test_whitespace_only_is_empty():
    errors = validate({"leadTime": "   "}, [check("leadTime").not_empty("Lead time is required").trim()])
    assert errors[0]["message"] == "Lead time is required"


def test_numeric_checks_accept_numeric_strings_but_not_booleans():
    rules = [check("minOrderQuantity").is_int(min=1)]

    assert validate({"minOrderQuantity": "25"}, rules) == []
    assert validate({"minOrderQuantity": 2.0}, rules) == []
    assert validate({"minOrderQuantity": 2.5}, rules) != []
    assert validate({"minOrderQuantity": True}, rules) != []

    price = [check("pricePerUnit").is_numeric().non_negative("Price per unit cannot be negative")]
    assert validate({"pricePerUnit": "12.50"}, price) == []
    assert validate({"pricePerUnit": -1}, price)[0]["message"] == "Price per unit cannot be negative"


def test_boolean_and_date_checks():
    rules = [
        check("sustainable").optional().is_boolean(),
        check("shelfLifeEndDate").optional().is_date(),
    ]

    assert validate({"sustainable": "true", "shelfLifeEndDate": "2026-01-31"}, rules) == []
    errors = validate({"sustainable": "yes", "shelfLifeEndDate": "31/01/2026"}, rules)
    assert [error["field"] for error in errors] == ["sustainable", "shelfLifeEndDate"]
