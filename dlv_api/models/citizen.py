from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String

from dlv_api.database import Base
from dlv_api.utils.timeutils import utcnow


class CitizenStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Citizen(Base):
    __tablename__ = "citizens"

    id = Column(Integer, primary_key=True, index=True)
    national_id = Column(String(32), unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    date_of_birth = Column(String, nullable=True)  # store YYYY-MM-DD
    address = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    email = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    status = Column(String(16), default=CitizenStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
