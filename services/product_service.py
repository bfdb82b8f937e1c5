import math
from urllib.parse import quote
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import ConflictError, Forbidden, NotFound, ValidationError
from middleware.auth import Identity
from models.enums import ProductType
from models.products import FoodProduct, Product, get_product_model
from models.users import User
from schemas.product_schemas import map_form_to_food_product, map_form_to_product
from services.storage_service import StorageService, extract_key_from_url, is_bucket_reference
from utils.logger import get_logger

logger = get_logger(__name__)


def resolve_owner_id(db: Session, identity: Identity, form: dict) -> int:
    """
    Owner of a new product: the caller, or for admins the ``user`` field of
    the form when given. An admin without an account must name the owner.
    """
    requested = form.get("user")
    if identity.is_admin and requested not in (None, ""):
        try:
            owner_id = int(requested)
        except (TypeError, ValueError):
            raise ValidationError.single("user", "Owner must be a user id", requested)
        if not db.query(User.id).filter(User.id == owner_id).first():
            raise ValidationError.single("user", "Owner user not found", requested)
        return owner_id

    if identity.user_id is None:
        raise ValidationError.single("user", "Owner user id is required", requested)
    return identity.user_id


def ensure_can_modify(product: Product, identity: Identity) -> None:
    if identity.is_admin or product.is_owned_by(identity.user_id):
        return
    logger.warning(
        "Product modification denied",
        extra={"product_id": product.id, "user_id": identity.user_id}
    )
    raise Forbidden("You don't have permission to modify this product")


def commit_product(db: Session, product: Product) -> Product:
    """
    Flushes pending product changes. Pre-persist invariants raise
    ValidationError; unique violations (SKU) become 409. Either way the
    session is rolled back and nothing is stored.
    """
    try:
        db.commit()
    except ValidationError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        message = str(e.orig).lower()
        if "unique" in message or "duplicate" in message:
            if "sku" in message:
                raise ConflictError("A product with this SKU already exists")
            raise ConflictError("Product conflicts with an existing record")
        logger.warning("Product rejected by database constraint", extra={"error": str(e.orig)})
        raise ValidationError.single("body", "Product data violates a constraint")

    db.refresh(product)
    return product


def delete_product_image(db: Session, storage: StorageService, reference: str | None) -> bool:
    """
    Removes a deleted product's image from the bucket. References to other
    hosts and objects still used by another product are left alone.
    """
    if not is_bucket_reference(reference, storage.bucket):
        return False

    key = extract_key_from_url(reference, storage.bucket)
    if not key:
        return False

    segment = key.rsplit("/", 1)[-1]
    candidates = db.query(Product.image).filter(or_(
        Product.image.contains(segment, autoescape=True),
        Product.image.contains(quote(segment), autoescape=True),
    )).all()
    for (image,) in candidates:
        if is_bucket_reference(image, storage.bucket) and extract_key_from_url(image, storage.bucket) == key:
            logger.info("Image kept, still referenced by another product", extra={"key": key})
            return False

    return storage.delete_object(key)


class ProductService:

    @staticmethod
    def create(db: Session, identity: Identity, form: dict, product_type: str) -> Product:
        model = get_product_model(product_type)
        owner_id = resolve_owner_id(db, identity, form)

        if model is FoodProduct:
            values = map_form_to_food_product(form)
        else:
            values = map_form_to_product(form)

        product = model(user_id=owner_id, product_type=product_type, **values)
        db.add(product)
        commit_product(db, product)

        logger.info(
            "Product created",
            extra={"product_id": product.id, "product_type": product_type, "user_id": owner_id}
        )
        return product

    @staticmethod
    def list_products(db: Session, search: str | None = None, product_type: str | None = None,
                      manufacturer: str | None = None, user: int | None = None,
                      page: int = 1, limit: int = 10) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)

        query = db.query(Product)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.brand.ilike(pattern)))
        if product_type and product_type in ProductType.values():
            query = query.filter(Product.product_type == product_type)
        if manufacturer:
            query = query.filter(Product.brand.ilike(f"%{manufacturer}%"))
        if user is not None:
            query = query.filter(Product.user_id == user)

        total = query.count()
        products = (
            query.order_by(Product.created_at.desc(), Product.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "products": products,
            "page": page,
            "pages": math.ceil(total / limit),
            "total": total,
        }

    @staticmethod
    def get(db: Session, product_id: int) -> Product:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFound("Product not found")
        return product

    @staticmethod
    def details(db: Session, product_id: int) -> tuple[Product, FoodProduct | None]:
        """The shared envelope plus its subtype row (``None`` for types without one)."""
        product = ProductService.get(db, product_id)
        if isinstance(product, FoodProduct):
            return product, product
        return product, None

    @staticmethod
    def by_type(db: Session, product_type: str) -> list[Product]:
        if product_type not in ProductType.values():
            raise ValidationError.single("type", "Invalid product type", product_type)
        return (
            db.query(Product)
            .filter(Product.product_type == product_type)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    @staticmethod
    def by_category(db: Session, category: str) -> list[Product]:
        return (
            db.query(Product)
            .filter(func.lower(Product.category) == category.lower())
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    @staticmethod
    def by_manufacturer(db: Session, name: str) -> list[Product]:
        return (
            db.query(Product)
            .filter(Product.brand.ilike(f"%{name}%"))
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    @staticmethod
    def stats(db: Session) -> dict:
        rows = (
            db.query(Product.product_type, func.count(Product.id))
            .group_by(Product.product_type)
            .order_by(func.count(Product.id).desc())
            .all()
        )
        return {
            "totalProducts": sum(count for _, count in rows),
            "byType": [{"type": product_type, "count": count} for product_type, count in rows],
        }

    @staticmethod
    def update(db: Session, identity: Identity, product_id: int, form: dict) -> Product:
        product = ProductService.get(db, product_id)
        ensure_can_modify(product, identity)

        if isinstance(product, FoodProduct):
            values = map_form_to_food_product(form, partial=True)
        else:
            values = map_form_to_product(form, partial=True)

        for column, value in values.items():
            setattr(product, column, value)

        commit_product(db, product)
        logger.info("Product updated", extra={"product_id": product.id, "user_id": identity.user_id})
        return product

    @staticmethod
    def delete(db: Session, identity: Identity, product_id: int, storage: StorageService) -> bool:
        """
        Deletes the product (and its subtype row), then its stored image.

        Returns:
            Whether an image object was removed from storage
        """
        product = ProductService.get(db, product_id)
        ensure_can_modify(product, identity)

        image = product.image
        db.delete(product)
        db.commit()

        image_deleted = delete_product_image(db, storage, image)
        logger.info(
            "Product deleted",
            extra={"product_id": product_id, "user_id": identity.user_id, "image_deleted": image_deleted}
        )
        return image_deleted
