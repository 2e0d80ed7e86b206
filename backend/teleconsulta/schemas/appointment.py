# teleconsulta/schemas/appointment.py
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from teleconsulta.config.constants import (
    AppointmentStatus,
    MAX_CLINICAL_TEXT_LENGTH,
    MAX_COMPLAINT_LENGTH,
)
from teleconsulta.core.clock import to_naive_utc
from teleconsulta.schemas.shared import UserSummary

ClinicalText = Annotated[str, Field(max_length=MAX_CLINICAL_TEXT_LENGTH)]


class CreateAppointmentRequest(BaseModel):
    """What a patient sends to book a doctor. Aware datetimes are normalised to naive UTC."""
    model_config = ConfigDict(extra="forbid")

    doctor_id: int
    scheduled_at: datetime
    patient_complaint: Optional[Annotated[str, Field(max_length=MAX_COMPLAINT_LENGTH)]] = None

    @field_validator("scheduled_at")
    @classmethod
    def _normalise_tz(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class UpdateAppointmentRequest(BaseModel):
    """Partial update; a None field leaves the stored value untouched."""
    model_config = ConfigDict(extra="forbid")

    scheduled_at: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[ClinicalText] = None
    diagnosis: Optional[ClinicalText] = None
    prescription: Optional[ClinicalText] = None

    @field_validator("scheduled_at")
    @classmethod
    def _normalise_tz(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    patient: UserSummary
    doctor: UserSummary
    scheduled_at: datetime
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    status: AppointmentStatus
    notes: Optional[str] = None
    patient_complaint: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    video_room_id: str
    duration_minutes: Optional[int] = None
    created_at: datetime
