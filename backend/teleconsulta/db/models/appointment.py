# teleconsulta/db/models/appointment.py
from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    Enum,
    String,
    ForeignKey,
    Index,
    text,
)
from sqlalchemy.orm import relationship

from teleconsulta.config.constants import (
    AppointmentStatus,
    MAX_CLINICAL_TEXT_LENGTH,
    MAX_COMPLAINT_LENGTH,
)
from teleconsulta.core.clock import utcnow
from teleconsulta.db.base import Base

_ACTIVE_SLOT = text("status != 'CANCELLED'")


class AppointmentModel(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    scheduled_at = Column(DateTime, nullable=False)
    started_at = Column(DateTime, nullable=True)
    ended_at = Column(DateTime, nullable=True)

    status = Column(
        Enum(AppointmentStatus, native_enum=False, length=20),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
    )

    notes = Column(String(MAX_CLINICAL_TEXT_LENGTH))
    patient_complaint = Column(String(MAX_COMPLAINT_LENGTH))
    diagnosis = Column(String(MAX_CLINICAL_TEXT_LENGTH))
    prescription = Column(String(MAX_CLINICAL_TEXT_LENGTH))

    video_room_id = Column(String(64), unique=True, nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # One live booking per doctor and instant; cancelled rows free the slot.
    __table_args__ = (
        Index(
            "uq_appointments_doctor_slot_active",
            "doctor_id",
            "scheduled_at",
            unique=True,
            postgresql_where=_ACTIVE_SLOT,
            sqlite_where=_ACTIVE_SLOT,
        ),
    )

    # Relationships
    patient = relationship("UserModel", foreign_keys=[patient_id], lazy="selectin")
    doctor = relationship("UserModel", foreign_keys=[doctor_id], lazy="selectin")

    def __repr__(self):
        return (
            f"<AppointmentModel(id={self.id}, doctor_id={self.doctor_id}, "
            f"scheduled_at={self.scheduled_at}, status={self.status})>"
        )
