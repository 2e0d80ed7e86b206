import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.constants import AppointmentStatus
from teleconsulta.core.clock import month_bounds
from teleconsulta.db.models.appointment import AppointmentModel

logger = logging.getLogger(__name__)


async def get_appointment(db: AsyncSession, appointment_id: int) -> Optional[AppointmentModel]:
    """Fetch an appointment (patient and doctor loaded eagerly), or None."""
    result = await db.execute(
        select(AppointmentModel).where(AppointmentModel.id == appointment_id)
    )
    return result.scalars().first()


async def get_appointments(
    db: AsyncSession,
    patient_id: Optional[int] = None,
    doctor_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[AppointmentModel]:
    """
    List appointments filtered by participant, status and an inclusive
    scheduled_at range. Every filter is optional; results are ordered by
    scheduled time.
    """
    logger.debug(
        f"CRUD get_appointments: patient_id={patient_id}, doctor_id={doctor_id}, "
        f"status={status}, date_from={date_from}, date_to={date_to}"
    )
    query = select(AppointmentModel)

    if patient_id is not None:
        query = query.where(AppointmentModel.patient_id == patient_id)
    if doctor_id is not None:
        query = query.where(AppointmentModel.doctor_id == doctor_id)
    if status is not None:
        query = query.where(AppointmentModel.status == status)
    if date_from is not None:
        query = query.where(AppointmentModel.scheduled_at >= date_from)
    if date_to is not None:
        query = query.where(AppointmentModel.scheduled_at <= date_to)

    query = query.order_by(AppointmentModel.scheduled_at, AppointmentModel.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def find_conflicting_appointments(
    db: AsyncSession,
    doctor_id: int,
    scheduled_at: datetime,
    exclude_id: Optional[int] = None,
) -> List[AppointmentModel]:
    """
    Non-cancelled appointments of the doctor at exactly scheduled_at.
    Equality is exact; there is no duration/overlap window.
    """
    conditions = [
        AppointmentModel.doctor_id == doctor_id,
        AppointmentModel.scheduled_at == scheduled_at,
        AppointmentModel.status != AppointmentStatus.CANCELLED,
    ]
    if exclude_id is not None:
        conditions.append(AppointmentModel.id != exclude_id)

    result = await db.execute(select(AppointmentModel).where(and_(*conditions)))
    return list(result.scalars().all())


async def count_patient_appointments_in_month(
    db: AsyncSession, patient_id: int, moment: datetime
) -> int:
    """Count the patient's non-cancelled appointments in moment's calendar month."""
    month_start, next_month = month_bounds(moment)
    result = await db.execute(
        select(func.count(AppointmentModel.id)).where(
            AppointmentModel.patient_id == patient_id,
            AppointmentModel.status != AppointmentStatus.CANCELLED,
            AppointmentModel.scheduled_at >= month_start,
            AppointmentModel.scheduled_at < next_month,
        )
    )
    return result.scalar_one()


async def save_appointment(db: AsyncSession, appointment: AppointmentModel) -> AppointmentModel:
    """Stage the appointment and flush it. Caller commits."""
    db.add(appointment)
    await db.flush()
    return appointment
