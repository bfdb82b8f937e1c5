from tests.factories import auth_headers, post_food_product


async def post_beverage(client, user, **overrides):
    form = {
        "type": "beverage",
        "productName": "Sparkling Yuzu",
        "manufacturerName": "Fizz Lab",
        "category": "Soft Drinks",
        "description": "Yuzu soda",
        "price": 2.5,
    }
    form.update(overrides)
    response = await client.post("/api/products", json=form, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()["product"]


async def test_stats(client, verified_user):
    await post_food_product(client, verified_user)
    await post_food_product(client, verified_user, productName="Sweet Paprika")
    await post_beverage(client, verified_user)

    response = await client.get("/api/products/stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalProducts": 3,
        "byType": [{"type": "food", "count": 2}, {"type": "beverage", "count": 1}],
    }


async def test_stats_on_empty_catalogue(client):
    response = await client.get("/api/products/stats")

    assert response.json() == {"totalProducts": 0, "byType": []}


async def test_by_type(client, verified_user):
    await post_food_product(client, verified_user)
    await post_beverage(client, verified_user)

    response = await client.get("/api/products/type/beverage")

    assert [p["name"] for p in response.json()] == ["Sparkling Yuzu"]


async def test_by_unknown_type(client):
    response = await client.get("/api/products/type/furniture")

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "type"


async def test_by_category_ignores_case(client, verified_user):
    await post_food_product(client, verified_user)
    await post_beverage(client, verified_user)

    response = await client.get("/api/products/category/SPICES")

    assert [p["name"] for p in response.json()] == ["Smoked Paprika"]


async def test_by_manufacturer_matches_partial_names(client, verified_user):
    await post_food_product(client, verified_user)
    await post_beverage(client, verified_user)

    response = await client.get("/api/products/manufacturer/fizz")

    assert [p["name"] for p in response.json()] == ["Sparkling Yuzu"]
