from tests.factories import TEST_PASSWORD


async def test_admin_login_returns_header_bundle(client, admin_user):
    response = await client.post("/api/admin/login", json={
        "email": admin_user.email,
        "password": TEST_PASSWORD
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["role"] == "admin"
    assert data["headers"]["AdminAuthorization"] == f"Bearer {data['token']}"
    assert data["headers"]["X-Admin-Role"] == "admin"
    assert data["headers"]["X-Admin-Email"] == admin_user.email

    me = await client.get("/api/admin/me", headers=data["headers"])

    assert me.status_code == 200
    assert me.json()["data"] == {
        "id": admin_user.id,
        "email": admin_user.email,
        "role": "admin",
        "name": admin_user.name,
    }


async def test_admin_login_rejects_other_roles(client, verified_user):
    response = await client.post("/api/admin/login", json={
        "email": verified_user.email,
        "password": TEST_PASSWORD
    })

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials or not an admin user"


async def test_admin_login_wrong_password(client, admin_user):
    response = await client.post("/api/admin/login", json={
        "email": admin_user.email,
        "password": "NotThePassword1"
    })

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"
