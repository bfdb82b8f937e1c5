from fastapi import APIRouter, File, Form, Request, UploadFile
from starlette import status
from core.config import settings
from core.exceptions import ValidationError
from middleware.rate_limiter import limiter
from services.food_product_service import FoodProductService
from services.product_service import commit_product, ensure_can_modify
from utils.deps import db_dependency, identity_dependency, storage_dependency
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_SIGNED_URL_SECONDS = 7 * 24 * 60 * 60


router = APIRouter(
    prefix="/api/upload",
    tags=["upload"]
)


@router.post("", status_code=status.HTTP_200_OK)
@limiter.limit("20/minute")
async def upload_image(request: Request, identity: identity_dependency, db: db_dependency,
                       storage: storage_dependency, image: UploadFile = File(...),
                       foodProductId: int | None = Form(None)):
    """
    Stores an image and returns its key with a signed URL. With
    ``foodProductId`` the key also becomes that product's image.
    """
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError.single("image", "Only image files are allowed", image.filename)

    product = None
    if foodProductId is not None:
        product = FoodProductService.get(db, foodProductId)
        ensure_can_modify(product, identity)

    key = storage.upload_fileobj(image.file, image.filename, image.content_type)
    signed_url = storage.generate_signed_url(key, settings.SIGNED_URL_EXPIRES_SECONDS)

    if product is not None:
        product.image = key
        commit_product(db, product)
        logger.info("Product image replaced", extra={"product_id": product.id, "key": key})

    return {
        "success": True,
        "message": "File uploaded successfully",
        "key": key,
        "signedUrl": signed_url,
        "expiresIn": settings.SIGNED_URL_EXPIRES_SECONDS,
        "mimetype": image.content_type,
        "originalName": image.filename,
        "foodProductId": product.id if product is not None else None,
        "savedToDb": product is not None,
    }


@router.get("/signed-url", status_code=status.HTTP_200_OK)
async def get_signed_url(storage: storage_dependency, key: str | None = None, expires: int | None = None):
    object_key = storage.extract_key_from_url(key)
    if not object_key:
        raise ValidationError.single("key", "Object key is required", key)

    expires_in = expires or settings.SIGNED_URL_EXPIRES_SECONDS
    if expires_in < 1 or expires_in > MAX_SIGNED_URL_SECONDS:
        raise ValidationError.single("expires", "Expiry must be between 1 second and 7 days", expires)

    return {
        "success": True,
        "key": object_key,
        "signedUrl": storage.generate_signed_url(object_key, expires_in),
        "expiresIn": expires_in,
    }
