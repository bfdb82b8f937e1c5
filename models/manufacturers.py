from core.database import Base
from sqlalchemy import Column, Integer, String, JSON, CheckConstraint
from models.mixins import TimestampMixin


class Manufacturer(Base, TimestampMixin):
    __tablename__ = "manufacturers"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False, index=True)
    location = Column(String, nullable=False, index=True)
    establish = Column(Integer, nullable=True)
    industry = Column(String, index=True)
    certification = Column(JSON, nullable=False, default=list)
    # contact block
    contact_email = Column(String, nullable=False)
    contact_phone = Column(String)
    contact_website = Column(String)
    image = Column(String, default="/manufacturer-placeholder.svg")
    description = Column(String(1000))

    __table_args__ = (
        CheckConstraint("establish IS NULL OR establish >= 0", name="ck_manufacturers_establish"),
    )
