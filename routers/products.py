from typing import Annotated
from fastapi import APIRouter, Depends, Request
from starlette import status
from middleware.rate_limiter import limiter
from schemas.product_schemas import (UPDATE_FOOD_PRODUCT_RULES, create_product_rules,
                                     serialize_any_product, serialize_food_product, serialize_product)
from services.product_service import ProductService
from utils.deps import db_dependency, manufacturer_or_admin, storage_dependency
from utils.validation import validate_body


router = APIRouter(
    prefix="/api/products",
    tags=["products"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def list_products(db: db_dependency, search: str | None = None, type: str | None = None,
                        manufacturer: str | None = None, user: int | None = None,
                        page: int = 1, limit: int = 10):
    result = ProductService.list_products(
        db, search=search, product_type=type, manufacturer=manufacturer,
        user=user, page=page, limit=limit,
    )
    result["products"] = [serialize_any_product(product) for product in result["products"]]
    return result


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_product(request: Request, identity: manufacturer_or_admin, db: db_dependency,
                         form: Annotated[dict, Depends(validate_body(create_product_rules))]):
    product = ProductService.create(db, identity, form, form["type"])
    return {
        "success": True,
        "message": "Product created successfully",
        "product": serialize_any_product(product),
    }


@router.get("/stats", status_code=status.HTTP_200_OK)
async def product_stats(db: db_dependency):
    return ProductService.stats(db)


@router.get("/type/{product_type}", status_code=status.HTTP_200_OK)
async def products_by_type(product_type: str, db: db_dependency):
    products = ProductService.by_type(db, product_type)
    return [serialize_any_product(product) for product in products]


@router.get("/category/{category}", status_code=status.HTTP_200_OK)
async def products_by_category(category: str, db: db_dependency):
    products = ProductService.by_category(db, category)
    return [serialize_any_product(product) for product in products]


@router.get("/manufacturer/{name}", status_code=status.HTTP_200_OK)
async def products_by_manufacturer(name: str, db: db_dependency):
    products = ProductService.by_manufacturer(db, name)
    return [serialize_any_product(product) for product in products]


@router.get("/{product_id}", status_code=status.HTTP_200_OK)
async def get_product(product_id: int, db: db_dependency):
    return serialize_any_product(ProductService.get(db, product_id))


@router.get("/{product_id}/details", status_code=status.HTTP_200_OK)
async def get_product_details(product_id: int, db: db_dependency):
    product, details = ProductService.details(db, product_id)
    return {
        "productReference": serialize_product(product),
        "productDetails": serialize_food_product(details) if details is not None else None,
    }


@router.put("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def update_product(request: Request, product_id: int, identity: manufacturer_or_admin,
                         db: db_dependency,
                         form: Annotated[dict, Depends(validate_body(UPDATE_FOOD_PRODUCT_RULES))]):
    product = ProductService.update(db, identity, product_id, form)
    return {
        "success": True,
        "message": "Product updated successfully",
        "product": serialize_any_product(product),
    }


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def delete_product(request: Request, product_id: int, identity: manufacturer_or_admin,
                         db: db_dependency, storage: storage_dependency):
    image_deleted = ProductService.delete(db, identity, product_id, storage)
    return {"success": True, "message": "Product removed", "imageDeleted": image_deleted}
