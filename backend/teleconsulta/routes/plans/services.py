"""
Plan catalog administration and user subscriptions.

Subscribing only swaps the user's plan reference. Existing appointments are
never revisited: quota checks always read the plan the patient holds at
booking time.
"""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.core.exceptions import BusinessRuleError, ResourceNotFoundError
from teleconsulta.db.crud import plan as plan_crud
from teleconsulta.db.crud.user import get_user
from teleconsulta.db.models.plan import PlanModel
from teleconsulta.db.models.user import UserModel
from teleconsulta.schemas.plan import CreatePlanRequest

logger = logging.getLogger(__name__)

FEATURE_FLAGS = ("has_video_call", "has_chat", "has_prescription", "has_medical_certificate")


async def find_plan(db: AsyncSession, plan_id: int) -> PlanModel:
    plan = await plan_crud.get_plan(db, plan_id)
    if plan is None:
        raise ResourceNotFoundError("Plan", "id", plan_id)
    return plan


async def list_plans(db: AsyncSession) -> List[PlanModel]:
    return await plan_crud.get_plans(db)


async def list_active_plans(db: AsyncSession) -> List[PlanModel]:
    return await plan_crud.get_active_plans(db)


async def create_plan(db: AsyncSession, request: CreatePlanRequest) -> PlanModel:
    if await plan_crud.exists_by_name(db, request.name):
        raise BusinessRuleError("A plan with this name already exists")

    plan = PlanModel(
        name=request.name,
        description=request.description,
        price=request.price,
        duration_months=request.duration_months,
        max_appointments_month=request.max_appointments_month,
        features=list(request.features or []),
        active=True,
        **{flag: getattr(request, flag) is not False for flag in FEATURE_FLAGS},
    )
    await plan_crud.save_plan(db, plan)
    await db.commit()
    logger.info(f"Created plan {plan.id} '{plan.name}'")
    return plan


async def update_plan(db: AsyncSession, plan_id: int, request: CreatePlanRequest) -> PlanModel:
    """Replace the plan's core fields; flags and features change only when sent."""
    plan = await find_plan(db, plan_id)

    if plan.name != request.name and await plan_crud.exists_by_name(db, request.name):
        raise BusinessRuleError("A plan with this name already exists")

    plan.name = request.name
    plan.description = request.description
    plan.price = request.price
    plan.duration_months = request.duration_months
    plan.max_appointments_month = request.max_appointments_month

    for flag in FEATURE_FLAGS:
        value = getattr(request, flag)
        if value is not None:
            setattr(plan, flag, value)
    if request.features is not None:
        plan.features = list(request.features)

    await db.commit()
    logger.info(f"Updated plan {plan.id} '{plan.name}'")
    return plan


async def set_plan_active(db: AsyncSession, plan_id: int, active: bool) -> PlanModel:
    plan = await find_plan(db, plan_id)
    plan.active = active
    await db.commit()
    logger.info(f"Plan {plan.id} {'activated' if active else 'deactivated'}")
    return plan


async def _find_user(db: AsyncSession, user_id: int) -> UserModel:
    user = await get_user(db, user_id)
    if user is None:
        raise ResourceNotFoundError("User", "id", user_id)
    return user


async def subscribe_to_plan(db: AsyncSession, user_id: int, plan_id: int) -> UserModel:
    user = await _find_user(db, user_id)
    plan = await find_plan(db, plan_id)
    if not plan.active:
        raise BusinessRuleError("This plan is not available")

    user.plan = plan
    await db.commit()
    logger.info(f"User {user.id} subscribed to plan {plan.id}")
    return user


async def cancel_subscription(db: AsyncSession, user_id: int) -> UserModel:
    user = await _find_user(db, user_id)
    user.plan = None
    await db.commit()
    logger.info(f"User {user.id} cancelled their subscription")
    return user
