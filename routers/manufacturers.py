from typing import Annotated
from fastapi import APIRouter, Depends, Request
from starlette import status
from middleware.rate_limiter import limiter
from schemas.manufacturer_schemas import (CREATE_MANUFACTURER_RULES, UPDATE_MANUFACTURER_RULES,
                                          serialize_manufacturer)
from services.manufacturer_service import ManufacturerService
from utils.deps import db_dependency, identity_dependency
from utils.validation import validate_body


router = APIRouter(
    prefix="/api/manufacturers",
    tags=["manufacturers"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def list_manufacturers(db: db_dependency, industry: str | None = None, location: str | None = None,
                             establish_gte: int | None = None, establish_lte: int | None = None,
                             search: str | None = None, page: int = 1, limit: int = 10):
    result = ManufacturerService.list_manufacturers(
        db, industry=industry, location=location, establish_gte=establish_gte,
        establish_lte=establish_lte, search=search, page=page, limit=limit,
    )
    result["manufacturers"] = [serialize_manufacturer(m) for m in result["manufacturers"]]
    return {"success": True, **result}


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_manufacturer(request: Request, identity: identity_dependency, db: db_dependency,
                              form: Annotated[dict, Depends(validate_body(CREATE_MANUFACTURER_RULES))]):
    manufacturer = ManufacturerService.create(db, form)
    return {"success": True, "data": serialize_manufacturer(manufacturer)}


@router.get("/industries", status_code=status.HTTP_200_OK)
async def manufacturer_industries(db: db_dependency):
    return {"success": True, "data": ManufacturerService.industries(db)}


@router.get("/locations", status_code=status.HTTP_200_OK)
async def manufacturer_locations(db: db_dependency):
    return {"success": True, "data": ManufacturerService.locations(db)}


@router.get("/{manufacturer_id}", status_code=status.HTTP_200_OK)
async def get_manufacturer(manufacturer_id: int, db: db_dependency):
    return {"success": True, "data": serialize_manufacturer(ManufacturerService.get(db, manufacturer_id))}


@router.put("/{manufacturer_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def update_manufacturer(request: Request, manufacturer_id: int, identity: identity_dependency,
                              db: db_dependency,
                              form: Annotated[dict, Depends(validate_body(UPDATE_MANUFACTURER_RULES))]):
    manufacturer = ManufacturerService.update(db, manufacturer_id, form)
    return {"success": True, "data": serialize_manufacturer(manufacturer)}


@router.delete("/{manufacturer_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def delete_manufacturer(request: Request, manufacturer_id: int, identity: identity_dependency,
                              db: db_dependency):
    ManufacturerService.delete(db, manufacturer_id)
    return {"success": True, "message": "Manufacturer deleted successfully"}
