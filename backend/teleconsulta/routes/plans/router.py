from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.constants import Role
from teleconsulta.core.middleware import get_current_user, get_db, require_roles
from teleconsulta.db.models.user import UserModel
from teleconsulta.routes.plans import services
from teleconsulta.schemas.plan import CreatePlanRequest, PlanOut

router = APIRouter(prefix="/plans", tags=["plans"])

admin_only = require_roles([Role.ADMIN])


# public ------------------------------------------------------------------
@router.get("/public", response_model=List[PlanOut])
async def list_active_plans_route(db: AsyncSession = Depends(get_db)):
    """Active plans, cheapest first"""
    return await services.list_active_plans(db)


@router.get("/public/{plan_id}", response_model=PlanOut)
async def get_plan_route(plan_id: int, db: AsyncSession = Depends(get_db)):
    return await services.find_plan(db, plan_id)


# admin -------------------------------------------------------------------
@router.get("", response_model=List[PlanOut])
async def list_plans_route(
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    return await services.list_plans(db)


@router.post("", response_model=PlanOut, status_code=status.HTTP_201_CREATED)
async def create_plan_route(
    request: CreatePlanRequest,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    return await services.create_plan(db, request)


@router.put("/{plan_id}", response_model=PlanOut)
async def update_plan_route(
    plan_id: int,
    request: CreatePlanRequest,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    return await services.update_plan(db, plan_id, request)


@router.patch("/{plan_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_plan_route(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    await services.set_plan_active(db, plan_id, False)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{plan_id}/activate", status_code=status.HTTP_204_NO_CONTENT)
async def activate_plan_route(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    await services.set_plan_active(db, plan_id, True)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# subscription --------------------------------------------------------------
@router.post("/{plan_id}/subscribe", status_code=status.HTTP_204_NO_CONTENT)
async def subscribe_route(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await services.subscribe_to_plan(db, current_user.id, plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/subscription", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_subscription_route(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await services.cancel_subscription(db, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
