"""
Builders shared by the test modules.
"""

from sqlalchemy.orm import Session

from models.enums import UserRole, UserStatus
from models.users import User
from services.storage_service import extract_key_from_url
from services.token_service import TokenService

TEST_PASSWORD = "TestPassword123"

ADMIN_HEADERS = {
    "AdminAuthorization": "Bearer admin-console-token",
    "X-Admin-Role": "admin",
    "X-Admin-Email": "console-admin@example.com",
}


class FakeStorage:
    """Records storage calls instead of talking to S3."""

    bucket = "test-bucket"

    def __init__(self):
        self.deleted: list[str] = []
        self.uploaded: list[tuple[str, bytes, str | None]] = []

    def generate_signed_url(self, key, expires_in=None):
        return f"https://{self.bucket}.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in}"

    def delete_object(self, key):
        if not key:
            return False
        self.deleted.append(key)
        return True

    def upload_fileobj(self, fileobj, filename, content_type=None):
        key = f"uploads/{filename}"
        self.uploaded.append((key, fileobj.read(), content_type))
        return key

    def extract_key_from_url(self, url):
        return extract_key_from_url(url, self.bucket)


def make_user(session: Session, email: str, role: str = UserRole.MANUFACTURER.value,
              status: str = UserStatus.ACTIVE.value, name: str = "Test User") -> User:
    user = User(
        name=name,
        email=email,
        company_name="Test Foods Ltd",
        role=role,
        status=status,
    )
    user.password = TEST_PASSWORD
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = TokenService.create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


def food_product_form(**overrides) -> dict:
    form = {
        "productName": "Smoked Paprika",
        "manufacturerName": "Spice Works",
        "originCountry": "Spain",
        "minOrderQuantity": 50,
        "unitType": "kg",
        "pricePerUnit": 12.5,
        "priceCurrency": "EUR",
        "leadTime": "2-3",
        "leadTimeUnit": "weeks",
        "foodType": "Seasoning",
        "packagingType": "Jar",
        "category": "Spices",
        "currentAvailable": 400,
        "flavorType": ["spicy", "aromatic"],
        "allergens": [],
        "ingredients": ["paprika"],
    }
    form.update(overrides)
    return form


def manufacturer_form(**overrides) -> dict:
    form = {
        "name": "Spice Works",
        "location": "Valencia, Spain",
        "establish": 1998,
        "industry": "Spices",
        "certification": ["ISO 22000"],
        "contact": {
            "email": "sales@spiceworks.example.com",
            "phone": "+34 600 000 000",
            "website": "https://spiceworks.example.com",
        },
    }
    form.update(overrides)
    return form


async def post_food_product(client, user: User, **overrides) -> dict:
    response = await client.post("/api/foodproducts", json=food_product_form(**overrides),
                                 headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


def project_form(**overrides) -> dict:
    form = {
        "name": "Private label hot sauce",
        "description": "Looking for a co-packer for a fermented chili sauce line",
        "selectedProduct": {"id": "sauce", "name": "Hot Sauce", "type": "CATEGORY"},
        "volume": "10K-50K",
        "units": "bottles",
        "packaging": ["Bottle"],
        "location": ["Europe"],
        "certification": ["ISO 22000"],
    }
    form.update(overrides)
    return form


async def post_project(client, user: User, **overrides) -> dict:
    response = await client.post("/api/projects", json=project_form(**overrides), headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()["data"]["project"]
