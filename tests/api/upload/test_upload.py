from models.products import FoodProduct
from tests.factories import ADMIN_HEADERS, auth_headers, post_food_product

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-body"


async def test_upload_requires_login(client):
    response = await client.post("/api/upload", files={"image": ("label.png", PNG_BYTES, "image/png")})

    assert response.status_code == 401


async def test_upload_image(client, storage, verified_user):
    response = await client.post("/api/upload", headers=auth_headers(verified_user),
                                 files={"image": ("label.png", PNG_BYTES, "image/png")})

    assert response.status_code == 200
    data = response.json()
    assert data["key"] == "uploads/label.png"
    assert data["signedUrl"].startswith("https://test-bucket.s3.amazonaws.com/uploads/label.png")
    assert data["expiresIn"] == 3600
    assert data["mimetype"] == "image/png"
    assert data["originalName"] == "label.png"
    assert data["savedToDb"] is False
    assert storage.uploaded == [("uploads/label.png", PNG_BYTES, "image/png")]


async def test_upload_rejects_non_images(client, storage, verified_user):
    response = await client.post("/api/upload", headers=auth_headers(verified_user),
                                 files={"image": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"
    assert storage.uploaded == []


async def test_upload_sets_product_image(client, session, verified_user):
    product = await post_food_product(client, verified_user)

    response = await client.post("/api/upload", headers=auth_headers(verified_user),
                                 data={"foodProductId": str(product["id"])},
                                 files={"image": ("paprika.jpg", PNG_BYTES, "image/jpeg")})

    assert response.status_code == 200
    assert response.json()["savedToDb"] is True
    assert response.json()["foodProductId"] == product["id"]
    assert session.get(FoodProduct, product["id"]).image == "uploads/paprika.jpg"


async def test_upload_for_someone_elses_product(client, storage, verified_user, other_manufacturer):
    product = await post_food_product(client, verified_user)

    response = await client.post("/api/upload", headers=auth_headers(other_manufacturer),
                                 data={"foodProductId": str(product["id"])},
                                 files={"image": ("paprika.jpg", PNG_BYTES, "image/jpeg")})

    assert response.status_code == 403
    assert storage.uploaded == []


async def test_upload_for_missing_product(client, verified_user):
    response = await client.post("/api/upload", headers=auth_headers(verified_user),
                                 data={"foodProductId": "999"},
                                 files={"image": ("paprika.jpg", PNG_BYTES, "image/jpeg")})

    assert response.status_code == 404


async def test_admin_may_replace_any_product_image(client, verified_user):
    product = await post_food_product(client, verified_user)

    response = await client.post("/api/upload", headers=ADMIN_HEADERS,
                                 data={"foodProductId": str(product["id"])},
                                 files={"image": ("paprika.jpg", PNG_BYTES, "image/jpeg")})

    assert response.status_code == 200
    assert response.json()["savedToDb"] is True


async def test_signed_url_for_key(client):
    response = await client.get("/api/upload/signed-url", params={"key": "uploads/label.png", "expires": 60})

    assert response.status_code == 200
    data = response.json()
    assert data["key"] == "uploads/label.png"
    assert data["expiresIn"] == 60
    assert "X-Amz-Expires=60" in data["signedUrl"]


async def test_signed_url_accepts_full_urls(client):
    response = await client.get("/api/upload/signed-url", params={
        "key": "https://test-bucket.s3.amazonaws.com/uploads/label.png?X-Amz-Signature=old"
    })

    assert response.status_code == 200
    assert response.json()["key"] == "uploads/label.png"
    assert response.json()["expiresIn"] == 3600


async def test_signed_url_requires_key(client):
    response = await client.get("/api/upload/signed-url")

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "key"


async def test_signed_url_expiry_bounds(client):
    response = await client.get("/api/upload/signed-url", params={"key": "uploads/a.png", "expires": 8 * 24 * 3600})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "expires"
