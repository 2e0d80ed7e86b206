"""
Appointment booking workflow.

Every public coroutine here is one unit of work: it takes the request's
``AsyncSession``, the authenticated ``UserModel`` and a typed request, runs
its checks, commits once and returns the ORM object. Rule violations raise the
domain errors from ``teleconsulta.core.exceptions``; nothing in this module
knows about HTTP.
"""
import logging
import uuid
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.constants import (
    AppointmentStatus,
    NON_CANCELLABLE_STATUSES,
    Role,
)
from teleconsulta.core import clock
from teleconsulta.core.exceptions import (
    BusinessRuleError,
    PermissionDeniedError,
    ResourceNotFoundError,
    SlotConflictError,
)
from teleconsulta.db.crud import appointment as appointment_crud
from teleconsulta.db.crud.user import get_user
from teleconsulta.db.models.appointment import AppointmentModel
from teleconsulta.db.models.user import UserModel
from teleconsulta.schemas.appointment import (
    CreateAppointmentRequest,
    UpdateAppointmentRequest,
)

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked"


def can_access_appointment(appointment: AppointmentModel, user: UserModel) -> bool:
    """Admins see everything; otherwise only the appointment's patient or doctor."""
    match user.role:
        case Role.ADMIN:
            return True
        case Role.DOCTOR | Role.PATIENT:
            return user.id in (appointment.patient_id, appointment.doctor_id)
        case _:
            raise ValueError(f"Unknown role: {user.role!r}")


def generate_video_room_id() -> str:
    return str(uuid.uuid4())


async def find_appointment(db: AsyncSession, appointment_id: int) -> AppointmentModel:
    appointment = await appointment_crud.get_appointment(db, appointment_id)
    if appointment is None:
        raise ResourceNotFoundError("Appointment", "id", appointment_id)
    return appointment


async def _ensure_slot_free(
    db: AsyncSession, doctor_id: int, scheduled_at: datetime, exclude_id: int | None = None
) -> None:
    conflicts = await appointment_crud.find_conflicting_appointments(
        db, doctor_id, scheduled_at, exclude_id=exclude_id
    )
    if conflicts:
        logger.warning(
            f"Scheduling conflict for doctor_id={doctor_id} at {scheduled_at}: "
            f"clashes with appointment_id={conflicts[0].id}"
        )
        raise SlotConflictError(SLOT_TAKEN_MESSAGE)


async def _ensure_within_quota(db: AsyncSession, patient: UserModel, scheduled_at: datetime) -> None:
    plan = patient.plan
    if plan is None or not plan.active or plan.max_appointments_month is None:
        return

    booked = await appointment_crud.count_patient_appointments_in_month(
        db, patient.id, scheduled_at
    )
    if booked >= plan.max_appointments_month:
        logger.warning(
            f"Patient {patient.id} hit the monthly limit of plan '{plan.name}' "
            f"({booked}/{plan.max_appointments_month}) for {scheduled_at:%Y-%m}"
        )
        raise BusinessRuleError("You have reached your plan's appointment limit for this month")


async def _commit(
    db: AsyncSession, appointment: AppointmentModel, *, new: bool = False
) -> AppointmentModel:
    """Commit the unit of work; a unique-index hit means someone took the slot first."""
    try:
        if new:
            await appointment_crud.save_appointment(db, appointment)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Integrity error while saving appointment: {e}")
        raise SlotConflictError(SLOT_TAKEN_MESSAGE) from e
    return appointment


async def get_appointment_for_user(
    db: AsyncSession, appointment_id: int, current_user: UserModel
) -> AppointmentModel:
    appointment = await find_appointment(db, appointment_id)
    if not can_access_appointment(appointment, current_user):
        raise PermissionDeniedError("You are not allowed to access this appointment")
    return appointment


async def list_my_appointments(
    db: AsyncSession,
    current_user: UserModel,
    status: AppointmentStatus | None = None,
) -> List[AppointmentModel]:
    """A doctor sees their agenda; everyone else sees the appointments they booked."""
    match current_user.role:
        case Role.DOCTOR:
            return await appointment_crud.get_appointments(
                db, doctor_id=current_user.id, status=status
            )
        case Role.PATIENT | Role.ADMIN:
            return await appointment_crud.get_appointments(
                db, patient_id=current_user.id, status=status
            )
        case _:
            raise ValueError(f"Unknown role: {current_user.role!r}")


async def list_appointments_in_range(
    db: AsyncSession, current_user: UserModel, start: datetime, end: datetime
) -> List[AppointmentModel]:
    """Appointments scheduled in [start, end]; admins get every participant's."""
    if end < start:
        raise BusinessRuleError("The end of the range must not precede its start")

    match current_user.role:
        case Role.DOCTOR:
            return await appointment_crud.get_appointments(
                db, doctor_id=current_user.id, date_from=start, date_to=end
            )
        case Role.ADMIN:
            return await appointment_crud.get_appointments(db, date_from=start, date_to=end)
        case Role.PATIENT:
            return await appointment_crud.get_appointments(
                db, patient_id=current_user.id, date_from=start, date_to=end
            )
        case _:
            raise ValueError(f"Unknown role: {current_user.role!r}")


async def create_appointment(
    db: AsyncSession, request: CreateAppointmentRequest, patient: UserModel
) -> AppointmentModel:
    """
    Book `patient` with a doctor.

    Checks, in order: the doctor exists, is a doctor and is active; the time
    is in the future; the doctor has no live appointment at that exact time;
    the patient's plan quota for that calendar month is not exhausted.
    """
    logger.info(
        f"Creating appointment for patient_id={patient.id} with doctor_id={request.doctor_id} "
        f"at {request.scheduled_at}"
    )
    doctor = await get_user(db, request.doctor_id)
    if doctor is None:
        raise ResourceNotFoundError("User", "id", request.doctor_id)
    if doctor.role != Role.DOCTOR:
        raise BusinessRuleError("The selected professional is not a doctor")
    if not doctor.active:
        raise BusinessRuleError("This doctor is not available")

    if request.scheduled_at <= clock.utcnow():
        raise BusinessRuleError("Appointments must be scheduled in the future")

    await _ensure_slot_free(db, doctor.id, request.scheduled_at)
    await _ensure_within_quota(db, patient, request.scheduled_at)

    appointment = AppointmentModel(
        patient=patient,
        doctor=doctor,
        scheduled_at=request.scheduled_at,
        patient_complaint=request.patient_complaint,
        status=AppointmentStatus.SCHEDULED,
        video_room_id=generate_video_room_id(),
    )
    await _commit(db, appointment, new=True)

    logger.info(f"Created appointment_id={appointment.id} (room {appointment.video_room_id})")
    return appointment


def _apply_status(appointment: AppointmentModel, status: AppointmentStatus) -> None:
    appointment.status = status
    if status == AppointmentStatus.IN_PROGRESS:
        appointment.started_at = clock.utcnow()
    elif status == AppointmentStatus.COMPLETED:
        appointment.ended_at = clock.utcnow()
        if appointment.started_at is not None:
            elapsed = appointment.ended_at - appointment.started_at
            appointment.duration_minutes = int(elapsed.total_seconds() // 60)


async def update_appointment(
    db: AsyncSession,
    appointment_id: int,
    request: UpdateAppointmentRequest,
    current_user: UserModel,
) -> AppointmentModel:
    """
    Partial update by a participant or an admin.

    Patients may only move the status to CANCELLED. Rescheduling re-runs the
    exact-time conflict check for the same doctor, ignoring this appointment.
    The status is applied as given; transitions out of terminal states are
    not blocked here.
    """
    appointment = await find_appointment(db, appointment_id)
    if not can_access_appointment(appointment, current_user):
        raise PermissionDeniedError("You are not allowed to modify this appointment")

    if (
        current_user.role == Role.PATIENT
        and request.status is not None
        and request.status != AppointmentStatus.CANCELLED
    ):
        raise PermissionDeniedError("Patients can only cancel appointments")

    if request.scheduled_at is not None:
        if request.scheduled_at != appointment.scheduled_at:
            await _ensure_slot_free(
                db, appointment.doctor_id, request.scheduled_at, exclude_id=appointment.id
            )
        appointment.scheduled_at = request.scheduled_at

    if request.status is not None:
        _apply_status(appointment, request.status)

    if request.notes is not None:
        appointment.notes = request.notes
    if request.diagnosis is not None:
        appointment.diagnosis = request.diagnosis
    if request.prescription is not None:
        appointment.prescription = request.prescription

    await _commit(db, appointment)
    logger.info(
        f"Appointment {appointment.id} updated by user {current_user.id}: status={appointment.status.value}"
    )
    return appointment


async def cancel_appointment(
    db: AsyncSession, appointment_id: int, current_user: UserModel
) -> AppointmentModel:
    appointment = await find_appointment(db, appointment_id)
    if not can_access_appointment(appointment, current_user):
        raise PermissionDeniedError("You are not allowed to cancel this appointment")

    if appointment.status in NON_CANCELLABLE_STATUSES:
        logger.warning(
            f"Refusing to cancel appointment {appointment.id} in status {appointment.status.value}"
        )
        if appointment.status == AppointmentStatus.COMPLETED:
            raise BusinessRuleError("A completed appointment cannot be cancelled")
        raise BusinessRuleError("An appointment in progress cannot be cancelled")

    appointment.status = AppointmentStatus.CANCELLED
    await _commit(db, appointment)
    logger.info(f"Appointment {appointment.id} cancelled by user {current_user.id}")
    return appointment


async def confirm_appointment(
    db: AsyncSession, appointment_id: int, doctor: UserModel
) -> AppointmentModel:
    """Only the assigned doctor may confirm, and only a SCHEDULED appointment."""
    appointment = await find_appointment(db, appointment_id)
    if appointment.doctor_id != doctor.id:
        raise PermissionDeniedError("Only the appointment's doctor can confirm it")
    if appointment.status != AppointmentStatus.SCHEDULED:
        raise BusinessRuleError("Only scheduled appointments can be confirmed")

    appointment.status = AppointmentStatus.CONFIRMED
    await _commit(db, appointment)
    logger.info(f"Appointment {appointment.id} confirmed by doctor {doctor.id}")
    return appointment
