from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from dlv_api.database import Base
from dlv_api.utils.timeutils import utcnow


class ApplicationStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# A citizen may hold only one application in any of these states
ACTIVE_APPLICATION_STATUSES = (
    ApplicationStatus.PENDING.value,
    ApplicationStatus.UNDER_REVIEW.value,
    ApplicationStatus.APPROVED.value,
)


class LicenseApplication(Base):
    __tablename__ = "license_applications"

    id = Column(String(32), primary_key=True, index=True)
    citizen_id = Column(Integer, ForeignKey("citizens.id", ondelete="CASCADE"), nullable=False, index=True)
    license_type = Column(String(32), default="STANDARD", nullable=False)
    status = Column(String(16), default=ApplicationStatus.DRAFT.value, nullable=False, index=True)

    personal_info = Column(JSON, nullable=True)
    documents = Column(JSON, nullable=True)
    emergency_contact = Column(JSON, nullable=True)
    review_notes = Column(Text, nullable=True)

    submitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    citizen = relationship("Citizen", backref="applications")
