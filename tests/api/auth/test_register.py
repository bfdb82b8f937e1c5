from core.exceptions import ExternalServiceError
from models.users import User
from utils.hashing import get_password_hash, verify_password


async def test_register_creates_pending_user(client, session, sent_emails):
    response = await client.post("/api/users", json={
        "name": "Maria Lopez",
        "email": "Maria@Example.com",
        "password": "Secret1234",
        "companyName": "Lopez Foods",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["user"]["email"] == "maria@example.com"
    assert data["user"]["role"] == "manufacturer"
    assert data["user"]["status"] == "pending"

    user = session.query(User).filter(User.email == "maria@example.com").first()
    assert user.company_name == "Lopez Foods"
    assert user.hashed_password != "Secret1234"
    assert user.verification_code_expires_at is not None
    assert sent_emails == [("verification", "maria@example.com", user.verification_code)]


async def test_register_with_chosen_role(client, sent_emails):
    response = await client.post("/api/users", json={
        "name": "Retail Buyer",
        "email": "buyer@example.com",
        "password": "Secret1234",
        "role": "retailer",
    })

    assert response.status_code == 201
    assert response.json()["user"]["role"] == "retailer"


async def test_register_cannot_self_assign_admin(client):
    response = await client.post("/api/users", json={
        "name": "Sneaky",
        "email": "sneaky@example.com",
        "password": "Secret1234",
        "role": "admin",
    })

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "role"


async def test_register_existing_email(client, verified_user, sent_emails):
    response = await client.post("/api/users", json={
        "name": "Copy Cat",
        "email": verified_user.email.upper(),
        "password": "Secret1234",
    })

    assert response.status_code == 409
    assert response.json()["detail"] == "User already exists"
    assert sent_emails == []


async def test_register_weak_password(client):
    response = await client.post("/api/users", json={
        "name": "Weak",
        "email": "weak@example.com",
        "password": "password",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "password"
    assert body["errors"][0]["message"] == "Password must contain at least one digit"


async def test_register_survives_mail_outage(client, session, monkeypatch):
    def broken_mailer(to_email, code):
        raise ExternalServiceError("Failed to send email")

    monkeypatch.setattr("services.auth_service.send_verification_email", broken_mailer)

    response = await client.post("/api/users", json={
        "name": "Offline",
        "email": "offline@example.com",
        "password": "Secret1234",
    })

    assert response.status_code == 201
    assert session.query(User).filter(User.email == "offline@example.com").count() == 1


async def test_register_with_hash_looking_password(client, session, sent_emails):
    hash_like = get_password_hash("Whatever123")
    response = await client.post("/api/users", json={
        "name": "Hash Lookalike",
        "email": "lookalike@example.com",
        "password": hash_like,
    })

    assert response.status_code == 201
    user = session.query(User).filter(User.email == "lookalike@example.com").first()
    assert user.hashed_password != hash_like
    assert verify_password(hash_like, user.hashed_password) is True
