# teleconsulta/db/models/plan.py
from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String

from teleconsulta.core.clock import utcnow
from teleconsulta.db.base import Base


class PlanModel(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(1000))
    price = Column(Numeric(10, 2), nullable=False)
    duration_months = Column(Integer)
    max_appointments_month = Column(Integer)  # NULL means unlimited

    has_video_call = Column(Boolean, nullable=False, default=True)
    has_chat = Column(Boolean, nullable=False, default=True)
    has_prescription = Column(Boolean, nullable=False, default=True)
    has_medical_certificate = Column(Boolean, nullable=False, default=True)

    # ordered marketing bullet points
    features = Column(JSON, nullable=False, default=list)

    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<PlanModel(id={self.id}, name={self.name!r}, price={self.price})>"
