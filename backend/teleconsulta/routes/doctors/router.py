from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.core.middleware import get_db
from teleconsulta.routes.users import services
from teleconsulta.schemas.shared import UserOut

router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.get("/public", response_model=List[UserOut])
async def list_doctors_route(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """All active doctors (public), one page at a time"""
    doctors = await services.list_doctors(db, skip=skip, limit=limit)
    return [UserOut.from_model(d) for d in doctors]


@router.get("/public/specialty/{specialty}", response_model=List[UserOut])
async def list_doctors_by_specialty_route(
    specialty: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Active doctors whose specialty matches (public)"""
    doctors = await services.list_doctors_by_specialty(db, specialty, skip=skip, limit=limit)
    return [UserOut.from_model(d) for d in doctors]
