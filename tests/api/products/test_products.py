from models.products import Product
from tests.factories import ADMIN_HEADERS, auth_headers, food_product_form, post_food_product


def beverage_form(**overrides):
    form = {
        "type": "beverage",
        "productName": "Cold Brew Concentrate",
        "manufacturerName": "Bean Co",
        "category": "Coffee",
        "description": "Bottled cold brew concentrate",
        "price": 6.5,
        "countInStock": 40,
    }
    form.update(overrides)
    return form


async def post_product(client, user, form):
    response = await client.post("/api/products", json=form, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()["product"]


async def test_create_base_product(client, verified_user):
    response = await client.post("/api/products", json=beverage_form(), headers=auth_headers(verified_user))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    product = body["product"]
    assert product["productType"] == "beverage"
    assert product["brand"] == "Bean Co"
    assert product["price"] == 6.5
    assert product["countInStock"] == 40
    assert "sku" not in product


async def test_create_food_through_generic_endpoint(client, verified_user):
    product = await post_product(client, verified_user, food_product_form(type="food"))

    assert product["productType"] == "food"
    assert product["sku"].startswith("SEA")


async def test_create_requires_known_type(client, verified_user):
    missing = await client.post("/api/products", json=beverage_form(type=None), headers=auth_headers(verified_user))
    unknown = await client.post("/api/products", json=beverage_form(type="toys"), headers=auth_headers(verified_user))

    assert missing.status_code == 400
    assert missing.json()["errors"][0]["field"] == "type"
    assert unknown.status_code == 400
    assert unknown.json()["errors"][0]["field"] == "type"


async def test_admin_headers_must_name_owner(client):
    response = await client.post("/api/products", json=beverage_form(), headers=ADMIN_HEADERS)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "user"


async def test_admin_names_owner(client, verified_user):
    response = await client.post("/api/products", json=beverage_form(user=verified_user.id), headers=ADMIN_HEADERS)

    assert response.status_code == 201
    assert response.json()["product"]["user"] == verified_user.id


async def test_admin_cannot_name_unknown_owner(client):
    response = await client.post("/api/products", json=beverage_form(user=424242), headers=ADMIN_HEADERS)

    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "Owner user not found"


async def test_list_paginates(client, verified_user):
    for index in range(3):
        await post_product(client, verified_user, beverage_form(productName=f"Brew {index}"))

    response = await client.get("/api/products", params={"page": 1, "limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["pages"] == 2
    assert data["page"] == 1
    # newest first
    assert [p["name"] for p in data["products"]] == ["Brew 2", "Brew 1"]

    second = await client.get("/api/products", params={"page": 2, "limit": 2})
    assert [p["name"] for p in second.json()["products"]] == ["Brew 0"]


async def test_list_filters(client, verified_user, other_manufacturer):
    await post_product(client, verified_user, beverage_form())
    await post_food_product(client, other_manufacturer)

    by_type = await client.get("/api/products", params={"type": "food"})
    by_search = await client.get("/api/products", params={"search": "cold brew"})
    by_owner = await client.get("/api/products", params={"user": other_manufacturer.id})
    by_maker = await client.get("/api/products", params={"manufacturer": "spice"})

    assert [p["name"] for p in by_type.json()["products"]] == ["Smoked Paprika"]
    assert [p["name"] for p in by_search.json()["products"]] == ["Cold Brew Concentrate"]
    assert [p["name"] for p in by_owner.json()["products"]] == ["Smoked Paprika"]
    assert [p["name"] for p in by_maker.json()["products"]] == ["Smoked Paprika"]


async def test_get_product(client, verified_user):
    created = await post_product(client, verified_user, beverage_form())

    response = await client.get(f"/api/products/{created['id']}")

    assert response.status_code == 200
    assert response.json()["name"] == "Cold Brew Concentrate"


async def test_get_missing_product(client):
    response = await client.get("/api/products/12345")

    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


async def test_details_for_food_product(client, verified_user):
    created = await post_food_product(client, verified_user)

    response = await client.get(f"/api/products/{created['id']}/details")

    assert response.status_code == 200
    data = response.json()
    assert data["productReference"]["id"] == created["id"]
    assert "sku" not in data["productReference"]
    assert data["productDetails"]["sku"] == created["sku"]
    assert data["productDetails"]["originCountry"] == "Spain"


async def test_details_for_type_without_subtype(client, verified_user):
    created = await post_product(client, verified_user, beverage_form())

    response = await client.get(f"/api/products/{created['id']}/details")

    assert response.status_code == 200
    assert response.json()["productDetails"] is None


async def test_update_product(client, verified_user):
    created = await post_product(client, verified_user, beverage_form())

    response = await client.put(f"/api/products/{created['id']}", json={"price": 7.25, "countInStock": 12},
                                headers=auth_headers(verified_user))

    assert response.status_code == 200
    product = response.json()["product"]
    assert product["price"] == 7.25
    assert product["countInStock"] == 12
    assert product["name"] == "Cold Brew Concentrate"


async def test_update_food_through_generic_endpoint(client, verified_user):
    created = await post_food_product(client, verified_user)

    response = await client.put(f"/api/products/{created['id']}", json={"price": 20},
                                headers=auth_headers(verified_user))

    product = response.json()["product"]
    assert product["price"] == product["pricePerUnit"] == 20


async def test_update_rejects_negative_price(client, verified_user):
    created = await post_product(client, verified_user, beverage_form())

    response = await client.put(f"/api/products/{created['id']}", json={"price": -1},
                                headers=auth_headers(verified_user))

    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "Price cannot be negative"


async def test_non_owner_cannot_modify(client, verified_user, other_manufacturer):
    created = await post_product(client, verified_user, beverage_form())

    update = await client.put(f"/api/products/{created['id']}", json={"price": 1},
                              headers=auth_headers(other_manufacturer))
    delete = await client.delete(f"/api/products/{created['id']}", headers=auth_headers(other_manufacturer))

    assert update.status_code == 403
    assert delete.status_code == 403


async def test_delete_product(client, session, verified_user):
    created = await post_product(client, verified_user, beverage_form())

    response = await client.delete(f"/api/products/{created['id']}", headers=auth_headers(verified_user))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Product removed", "imageDeleted": False}
    assert session.query(Product).count() == 0


async def test_delete_missing_product(client, verified_user):
    response = await client.delete("/api/products/999", headers=auth_headers(verified_user))

    assert response.status_code == 404
