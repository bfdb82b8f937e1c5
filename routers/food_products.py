from typing import Annotated
from fastapi import APIRouter, Depends, Request
from starlette import status
from middleware.rate_limiter import limiter
from schemas.product_schemas import (CREATE_FOOD_PRODUCT_RULES, UPDATE_FOOD_PRODUCT_RULES,
                                     serialize_food_product)
from services.food_product_service import FoodProductService
from utils.deps import db_dependency, manufacturer_or_admin, storage_dependency
from utils.validation import validate_body


router = APIRouter(
    prefix="/api/foodproducts",
    tags=["food products"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def list_food_products(db: db_dependency, category: str | None = None,
                             foodType: str | None = None, manufacturer: str | None = None,
                             originCountry: str | None = None, search: str | None = None,
                             status: str | None = None):
    products = FoodProductService.list_food_products(
        db, category=category, food_type=foodType, manufacturer=manufacturer,
        origin_country=originCountry, search=search, status=status,
    )
    return [serialize_food_product(product) for product in products]


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_food_product(request: Request, identity: manufacturer_or_admin, db: db_dependency,
                              form: Annotated[dict, Depends(validate_body(CREATE_FOOD_PRODUCT_RULES))]):
    product = FoodProductService.create(db, identity, form)
    return serialize_food_product(product)


@router.get("/categories", status_code=status.HTTP_200_OK)
async def food_product_categories(db: db_dependency):
    return FoodProductService.categories(db)


@router.get("/manufacturers", status_code=status.HTTP_200_OK)
async def food_product_manufacturers(db: db_dependency):
    return FoodProductService.manufacturers(db)


@router.get("/foodtypes", status_code=status.HTTP_200_OK)
async def food_types():
    return FoodProductService.food_types()


@router.get("/types", status_code=status.HTTP_200_OK)
async def product_types():
    return FoodProductService.product_types()


@router.get("/{product_id}", status_code=status.HTTP_200_OK)
async def get_food_product(product_id: int, db: db_dependency):
    return serialize_food_product(FoodProductService.get(db, product_id))


@router.put("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def update_food_product(request: Request, product_id: int, identity: manufacturer_or_admin,
                              db: db_dependency,
                              form: Annotated[dict, Depends(validate_body(UPDATE_FOOD_PRODUCT_RULES))]):
    product = FoodProductService.update(db, identity, product_id, form)
    return serialize_food_product(product)


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def delete_food_product(request: Request, product_id: int, identity: manufacturer_or_admin,
                              db: db_dependency, storage: storage_dependency):
    image_deleted = FoodProductService.delete(db, identity, product_id, storage)
    return {"success": True, "message": "Food product removed", "imageDeleted": image_deleted}
