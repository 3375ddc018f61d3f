"""
Planos comerciais e atribuição de planos aos usuários.
"""

from datetime import datetime
from typing import List
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Plan, User, UserPlan
from app.schemas.admin import PlanCreate, PlanUpdate, UserPlanCreate

logger = structlog.get_logger()


async def list_plans(db: AsyncSession) -> List[Plan]:
    result = await db.execute(select(Plan).order_by(Plan.price, Plan.id))
    return list(result.scalars().all())


async def get_plan(db: AsyncSession, plan_id: int) -> Plan:
    plan = await db.get(Plan, plan_id)
    if not plan:
        raise NotFoundError("Plano não encontrado")
    return plan


async def create_plan(db: AsyncSession, data: PlanCreate) -> Plan:
    plan = Plan(**data.model_dump())
    db.add(plan)
    await db.commit()
    await db.refresh(plan)

    logger.info("plan_created", plan_id=plan.id, name=plan.name)
    return plan


async def update_plan(db: AsyncSession, plan_id: int, data: PlanUpdate) -> Plan:
    plan = await get_plan(db, plan_id)
    changes = data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        if value is None and field != "description":
            continue
        setattr(plan, field, value)

    await db.commit()
    await db.refresh(plan)
    logger.info("plan_updated", plan_id=plan_id, fields=list(changes))
    return plan


async def delete_plan(db: AsyncSession, plan_id: int) -> None:
    plan = await get_plan(db, plan_id)

    result = await db.execute(select(UserPlan.id).where(UserPlan.plan_id == plan_id).limit(1))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Plano atribuído a usuários não pode ser removido")

    await db.delete(plan)
    await db.commit()
    logger.info("plan_deleted", plan_id=plan_id)


# ===========================================
# PLANOS DOS USUÁRIOS
# ===========================================

async def list_user_plans(db: AsyncSession) -> List[UserPlan]:
    query = select(UserPlan).options(selectinload(UserPlan.plan)).order_by(
        UserPlan.created_at.desc(), UserPlan.id.desc()
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def assign_plan(db: AsyncSession, data: UserPlanCreate) -> UserPlan:
    """
    Atribui um plano ao usuário, desativando o plano ativo anterior.
    """
    if not await db.get(User, data.user_id):
        raise NotFoundError("Usuário não encontrado")
    await get_plan(db, data.plan_id)

    await db.execute(
        update(UserPlan)
        .where(UserPlan.user_id == data.user_id, UserPlan.is_active.is_(True))
        .values(is_active=False, end_date=datetime.utcnow())
    )

    user_plan = UserPlan(
        user_id=data.user_id,
        plan_id=data.plan_id,
        start_date=data.start_date or datetime.utcnow(),
        end_date=data.end_date,
        is_active=True,
    )
    db.add(user_plan)
    await db.commit()

    logger.info("plan_assigned", user_id=data.user_id, plan_id=data.plan_id)

    query = select(UserPlan).options(selectinload(UserPlan.plan)).where(UserPlan.id == user_plan.id)
    result = await db.execute(query)
    return result.scalar_one()
