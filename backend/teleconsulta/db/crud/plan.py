# teleconsulta/db/crud/plan.py
from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.db.models.plan import PlanModel


async def get_plan(db: AsyncSession, plan_id: int) -> Optional[PlanModel]:
    result = await db.execute(select(PlanModel).where(PlanModel.id == plan_id))
    return result.scalar_one_or_none()


async def get_plans(db: AsyncSession) -> List[PlanModel]:
    """Every plan, active or not, ordered by id."""
    result = await db.execute(select(PlanModel).order_by(PlanModel.id))
    return list(result.scalars().all())


async def get_active_plans(db: AsyncSession) -> List[PlanModel]:
    """Active plans, cheapest first."""
    result = await db.execute(
        select(PlanModel)
        .where(PlanModel.active.is_(True))
        .order_by(PlanModel.price.asc(), PlanModel.id)
    )
    return list(result.scalars().all())


async def exists_by_name(db: AsyncSession, name: str) -> bool:
    return bool(await db.scalar(select(exists().where(PlanModel.name == name))))


async def save_plan(db: AsyncSession, plan: PlanModel) -> PlanModel:
    """Stage the plan and flush so generated ids are available. Caller commits."""
    db.add(plan)
    await db.flush()
    return plan
