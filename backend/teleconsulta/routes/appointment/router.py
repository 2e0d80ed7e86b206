from fastapi import APIRouter, Depends, Query
from typing import List
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from teleconsulta.config.constants import AppointmentStatus, Role
from teleconsulta.core.clock import to_naive_utc
from teleconsulta.core.middleware import get_db, get_current_user, require_roles
from teleconsulta.db.models.user import UserModel
from teleconsulta.routes.appointment import services
from teleconsulta.schemas.appointment import (
    AppointmentOut,
    CreateAppointmentRequest,
    UpdateAppointmentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("", response_model=List[AppointmentOut])
async def list_my_appointments_route(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """List the caller's appointments"""
    return await services.list_my_appointments(db, current_user)


@router.get("/status/{status}", response_model=List[AppointmentOut])
async def list_appointments_by_status_route(
    status: AppointmentStatus,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """List the caller's appointments in a given status"""
    return await services.list_my_appointments(db, current_user, status=status)


@router.get("/date-range", response_model=List[AppointmentOut])
async def list_appointments_by_date_range_route(
    start: datetime = Query(...),
    end: datetime = Query(...),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """List appointments scheduled between start and end (inclusive)"""
    return await services.list_appointments_in_range(
        db, current_user, to_naive_utc(start), to_naive_utc(end)
    )


@router.get("/{appointment_id}", response_model=AppointmentOut)
async def get_appointment_route(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Get a specific appointment by ID"""
    return await services.get_appointment_for_user(db, appointment_id, current_user)


@router.post("", response_model=AppointmentOut, status_code=201)
async def create_appointment_route(
    appointment: CreateAppointmentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(require_roles([Role.PATIENT, Role.ADMIN])),
):
    """Book a new appointment for the current user"""
    return await services.create_appointment(db, appointment, current_user)


@router.put("/{appointment_id}", response_model=AppointmentOut)
async def update_appointment_route(
    appointment_id: int,
    appointment_update: UpdateAppointmentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Update an existing appointment"""
    return await services.update_appointment(db, appointment_id, appointment_update, current_user)


@router.patch("/{appointment_id}/cancel", response_model=AppointmentOut)
async def cancel_appointment_route(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Cancel an appointment"""
    logger.info(f"User {current_user.id} cancelling appointment {appointment_id}")
    return await services.cancel_appointment(db, appointment_id, current_user)


@router.patch("/{appointment_id}/confirm", response_model=AppointmentOut)
async def confirm_appointment_route(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(require_roles([Role.DOCTOR])),
):
    """Confirm an appointment (assigned doctor only)"""
    return await services.confirm_appointment(db, appointment_id, current_user)
