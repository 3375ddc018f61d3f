"""
Super admin: planos e planos dos usuários.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import require_admin
from app.schemas.admin import (
    ActionResponse,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    UserPlanCreate,
    UserPlanResponse,
)
from app.services import plan_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/plans", response_model=List[PlanResponse])
async def list_plans(db: AsyncSession = Depends(get_db)):
    return await plan_service.list_plans(db)


@router.get("/plans/{plan_id}", response_model=PlanResponse)
async def get_plan(plan_id: int, db: AsyncSession = Depends(get_db)):
    return await plan_service.get_plan(db, plan_id)


@router.post("/plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(data: PlanCreate, db: AsyncSession = Depends(get_db)):
    return await plan_service.create_plan(db, data)


@router.put("/plans/{plan_id}", response_model=PlanResponse)
async def update_plan(plan_id: int, data: PlanUpdate, db: AsyncSession = Depends(get_db)):
    return await plan_service.update_plan(db, plan_id, data)


@router.delete("/plans/{plan_id}", response_model=ActionResponse)
async def delete_plan(plan_id: int, db: AsyncSession = Depends(get_db)):
    await plan_service.delete_plan(db, plan_id)
    return ActionResponse(message="Plano removido")


@router.get("/user-plans", response_model=List[UserPlanResponse])
async def list_user_plans(db: AsyncSession = Depends(get_db)):
    return await plan_service.list_user_plans(db)


@router.post("/user-plans", response_model=UserPlanResponse, status_code=status.HTTP_201_CREATED)
async def assign_plan(data: UserPlanCreate, db: AsyncSession = Depends(get_db)):
    return await plan_service.assign_plan(db, data)
