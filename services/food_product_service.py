from sqlalchemy import or_
from sqlalchemy.orm import Session
from core.exceptions import NotFound
from middleware.auth import Identity
from models.enums import FoodType, ProductType
from models.products import FoodProduct
from services.product_service import ProductService, commit_product, ensure_can_modify
from services.storage_service import StorageService
from schemas.product_schemas import map_form_to_food_product
from utils.logger import get_logger

logger = get_logger(__name__)


class FoodProductService:
    """Food listings: the ``products`` envelope joined with ``food_products``."""

    @staticmethod
    def list_food_products(db: Session, category: str | None = None, food_type: str | None = None,
                           manufacturer: str | None = None, origin_country: str | None = None,
                           search: str | None = None, status: str | None = None) -> list[FoodProduct]:
        query = db.query(FoodProduct)
        if category:
            query = query.filter(FoodProduct.category.ilike(category))
        if food_type:
            query = query.filter(FoodProduct.food_type == food_type)
        if manufacturer:
            query = query.filter(FoodProduct.manufacturer.ilike(f"%{manufacturer}%"))
        if origin_country:
            query = query.filter(FoodProduct.origin_country.ilike(origin_country))
        if status:
            query = query.filter(FoodProduct.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                FoodProduct.name.ilike(pattern),
                FoodProduct.manufacturer.ilike(pattern),
                FoodProduct.description.ilike(pattern),
            ))

        return query.order_by(FoodProduct.created_at.desc(), FoodProduct.id.desc()).all()

    @staticmethod
    def get(db: Session, product_id: int) -> FoodProduct:
        product = db.query(FoodProduct).filter(FoodProduct.id == product_id).first()
        if not product:
            raise NotFound("Food product not found")
        return product

    @staticmethod
    def create(db: Session, identity: Identity, form: dict) -> FoodProduct:
        return ProductService.create(db, identity, form, ProductType.FOOD.value)

    @staticmethod
    def update(db: Session, identity: Identity, product_id: int, form: dict) -> FoodProduct:
        product = FoodProductService.get(db, product_id)
        ensure_can_modify(product, identity)

        for column, value in map_form_to_food_product(form, partial=True).items():
            setattr(product, column, value)

        commit_product(db, product)
        logger.info("Food product updated", extra={"product_id": product.id, "user_id": identity.user_id})
        return product

    @staticmethod
    def delete(db: Session, identity: Identity, product_id: int, storage: StorageService) -> bool:
        # 404 here when the id belongs to a non-food product
        FoodProductService.get(db, product_id)
        return ProductService.delete(db, identity, product_id, storage)

    # metadata for filter dropdowns

    @staticmethod
    def categories(db: Session) -> list[str]:
        rows = db.query(FoodProduct.category).distinct().order_by(FoodProduct.category).all()
        return [category for (category,) in rows if category]

    @staticmethod
    def manufacturers(db: Session) -> list[str]:
        rows = db.query(FoodProduct.manufacturer).distinct().order_by(FoodProduct.manufacturer).all()
        return [manufacturer for (manufacturer,) in rows if manufacturer]

    @staticmethod
    def food_types() -> list[str]:
        return FoodType.values()

    @staticmethod
    def product_types() -> list[str]:
        return ProductType.values()
