from models.enums import FoodType, ProductType
from tests.factories import post_food_product


async def test_categories_and_manufacturers(client, verified_user):
    await post_food_product(client, verified_user)
    await post_food_product(client, verified_user, category="Condiments", manufacturerName="Red Lantern")
    await post_food_product(client, verified_user, productName="Sweet Paprika")

    categories = await client.get("/api/foodproducts/categories")
    manufacturers = await client.get("/api/foodproducts/manufacturers")

    assert categories.json() == ["Condiments", "Spices"]
    assert manufacturers.json() == ["Red Lantern", "Spice Works"]


async def test_metadata_on_empty_catalogue(client):
    response = await client.get("/api/foodproducts/categories")

    assert response.status_code == 200
    assert response.json() == []


async def test_food_types(client):
    response = await client.get("/api/foodproducts/foodtypes")

    assert response.json() == FoodType.values()


async def test_product_types(client):
    response = await client.get("/api/foodproducts/types")

    assert response.json() == ProductType.values()
