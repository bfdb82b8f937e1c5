"""
Product catalogue models.

``Product`` is the shared envelope every listing has. ``FoodProduct`` is a
joined subtype: it lives in ``food_products`` under the same primary key as
its ``products`` row, and the ``product_type`` column is the discriminator.
Base queries (lists, search, stats) only touch ``products``; food detail
reads additionally load the ``food_products`` row.
"""

import time

from core.database import Base
from core.exceptions import ValidationError
from sqlalchemy import (Boolean, CheckConstraint, Column, Date, Float, ForeignKey,
                        Integer, JSON, String, Text, case, event, select)
from sqlalchemy.orm import object_session, relationship
from models.enums import ProductType, FoodProductStatus
from models.mixins import TimestampMixin

BASE_IDENTITY = "product"

DEFAULT_IMAGE = "/placeholder.svg"


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="products")

    name = Column(String, nullable=False)
    brand = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False, default=0)
    count_in_stock = Column(Integer, nullable=False, default=0)
    image = Column(String, nullable=False, default=DEFAULT_IMAGE)
    rating = Column(Float, nullable=False, default=0)
    num_reviews = Column(Integer, nullable=False, default=0)
    product_type = Column(String(20), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("count_in_stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_products_rating_range"),
        CheckConstraint("num_reviews >= 0", name="ck_products_reviews_non_negative"),
    )

    # Only "food" has its own table; every other type loads as a plain Product.
    __mapper_args__ = {
        "polymorphic_on": case(
            (product_type == ProductType.FOOD.value, ProductType.FOOD.value),
            else_=BASE_IDENTITY,
        ),
        "polymorphic_identity": BASE_IDENTITY,
    }

    def is_owned_by(self, user_id: int | None) -> bool:
        return user_id is not None and self.user_id == user_id


class FoodProduct(Product):
    __tablename__ = "food_products"

    #pk / fk to the shared envelope
    id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)

    manufacturer = Column(String, nullable=False, index=True)
    origin_country = Column(String, nullable=False)
    manufacturer_region = Column(String, default="")
    min_order_quantity = Column(Integer, nullable=False, default=1)
    daily_capacity = Column(Integer, default=100)
    current_available = Column(Integer, nullable=False, default=0)
    unit_type = Column(String(20), nullable=False, default="units")
    price_per_unit = Column(Float, nullable=False, default=0)
    price_currency = Column(String(3), nullable=False, default="USD")
    lead_time = Column(String, nullable=False, default="1-2")
    lead_time_unit = Column(String(10), nullable=False, default="weeks")
    sustainable = Column(Boolean, nullable=False, default=False)
    food_type = Column(String(30), nullable=False, index=True)
    flavor_type = Column(JSON, nullable=False, default=list)
    ingredients = Column(JSON, nullable=False, default=list)
    allergens = Column(JSON, nullable=False, default=list)
    usage = Column(JSON, nullable=False, default=list)
    packaging_type = Column(String(20), nullable=False)
    packaging_size = Column(String, default="Standard")
    shelf_life = Column(String, default="12 months")
    shelf_life_start_date = Column(Date, nullable=True)
    shelf_life_end_date = Column(Date, nullable=True)
    storage_instruction = Column(String, default="Store in cool, dry place")
    # NULLs never collide, so the unique index only binds products that set a SKU
    sku = Column(String(32), unique=True, nullable=True)
    status = Column(String(20), nullable=False, default=FoodProductStatus.AVAILABLE.value, index=True)

    __table_args__ = (
        CheckConstraint("min_order_quantity >= 1", name="ck_food_products_moq"),
        CheckConstraint("current_available >= 0", name="ck_food_products_available"),
        CheckConstraint("price_per_unit >= 0", name="ck_food_products_unit_price"),
    )

    __mapper_args__ = {"polymorphic_identity": ProductType.FOOD.value}

    def __init__(self, **kwargs):
        kwargs.setdefault("product_type", ProductType.FOOD.value)
        super().__init__(**kwargs)


def build_sku(food_type: str | None, moment_ms: int | None = None) -> str:
    """
    ``<3-letter food type prefix><6-digit time suffix>``, e.g. ``SEA482113``.
    """
    letters = "".join(ch for ch in (food_type or "Other") if ch.isalpha()).upper()
    prefix = (letters[:3] or "OTH").ljust(3, "X")
    if moment_ms is None:
        moment_ms = time.time_ns() // 1_000_000
    return f"{prefix}{moment_ms % 1_000_000:06d}"


def check_shelf_life(target: FoodProduct):
    start, end = target.shelf_life_start_date, target.shelf_life_end_date
    if start is not None and end is not None and start >= end:
        raise ValidationError.single(
            "shelfLifeStartDate",
            "Shelf life start date must be before the end date",
            start.isoformat(),
        )


@event.listens_for(FoodProduct, "before_insert")
def _food_product_before_insert(mapper, connection, target: FoodProduct):
    check_shelf_life(target)

    if target.sku:
        return

    # products pending in the same flush are not in the table yet
    session = object_session(target)
    pending = {
        other.sku for other in (session.new if session is not None else ())
        if isinstance(other, FoodProduct) and other is not target and other.sku
    }

    sku_column = FoodProduct.__table__.c.sku
    moment_ms = time.time_ns() // 1_000_000
    sku = build_sku(target.food_type, moment_ms)
    while sku in pending or connection.execute(select(sku_column).where(sku_column == sku)).first() is not None:
        moment_ms += 1
        sku = build_sku(target.food_type, moment_ms)
    target.sku = sku


@event.listens_for(FoodProduct, "before_update")
def _food_product_before_update(mapper, connection, target: FoodProduct):
    check_shelf_life(target)


def get_product_model(product_type: str) -> type[Product]:
    """
    Model handle for a product type: the food subtype for ``food``, the base
    model for every other known type.
    """
    kind = ProductType(product_type)
    if kind is ProductType.FOOD:
        return FoodProduct
    return Product
