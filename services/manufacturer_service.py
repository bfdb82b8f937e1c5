import math
from sqlalchemy.orm import Session
from core.exceptions import NotFound
from models.manufacturers import Manufacturer
from schemas.manufacturer_schemas import map_form_to_manufacturer
from utils.logger import get_logger

logger = get_logger(__name__)


class ManufacturerService:

    @staticmethod
    def list_manufacturers(db: Session, industry: str | None = None, location: str | None = None,
                           establish_gte: int | None = None, establish_lte: int | None = None,
                           search: str | None = None, page: int = 1, limit: int = 10) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)

        query = db.query(Manufacturer)
        if industry:
            query = query.filter(Manufacturer.industry.ilike(f"%{industry}%"))
        if location:
            query = query.filter(Manufacturer.location.ilike(f"%{location}%"))
        if establish_gte is not None:
            query = query.filter(Manufacturer.establish >= establish_gte)
        if establish_lte is not None:
            query = query.filter(Manufacturer.establish <= establish_lte)
        if search:
            query = query.filter(Manufacturer.name.ilike(f"%{search}%"))

        total = query.count()
        manufacturers = (
            query.order_by(Manufacturer.name.asc(), Manufacturer.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "manufacturers": manufacturers,
            "page": page,
            "pages": math.ceil(total / limit),
            "total": total,
        }

    @staticmethod
    def get(db: Session, manufacturer_id: int) -> Manufacturer:
        manufacturer = db.query(Manufacturer).filter(Manufacturer.id == manufacturer_id).first()
        if not manufacturer:
            raise NotFound("Manufacturer not found")
        return manufacturer

    @staticmethod
    def create(db: Session, form: dict) -> Manufacturer:
        manufacturer = Manufacturer(**map_form_to_manufacturer(form))
        db.add(manufacturer)
        db.commit()
        db.refresh(manufacturer)

        logger.info("Manufacturer created", extra={"manufacturer_id": manufacturer.id})
        return manufacturer

    @staticmethod
    def update(db: Session, manufacturer_id: int, form: dict) -> Manufacturer:
        manufacturer = ManufacturerService.get(db, manufacturer_id)
        for column, value in map_form_to_manufacturer(form, partial=True).items():
            setattr(manufacturer, column, value)
        db.commit()
        db.refresh(manufacturer)

        logger.info("Manufacturer updated", extra={"manufacturer_id": manufacturer.id})
        return manufacturer

    @staticmethod
    def delete(db: Session, manufacturer_id: int) -> None:
        manufacturer = ManufacturerService.get(db, manufacturer_id)
        db.delete(manufacturer)
        db.commit()
        logger.info("Manufacturer deleted", extra={"manufacturer_id": manufacturer_id})

    @staticmethod
    def industries(db: Session) -> list[str]:
        rows = db.query(Manufacturer.industry).distinct().order_by(Manufacturer.industry).all()
        return [industry for (industry,) in rows if industry]

    @staticmethod
    def locations(db: Session) -> list[str]:
        rows = db.query(Manufacturer.location).distinct().order_by(Manufacturer.location).all()
        return [location for (location,) in rows if location]
