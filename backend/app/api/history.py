from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.database import get_db
from app.models import History, User
from app.schemas import HistoryResponse

router = APIRouter()


@router.get("", response_model=List[HistoryResponse])
async def list_history(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(History).where(History.user_id == user.id).order_by(History.created_at.desc())
    )
    return [HistoryResponse.model_validate(entry) for entry in result.scalars().all()]


@router.get("/{history_id}", response_model=HistoryResponse)
async def get_history(
    history_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(select(History).where(History.id == history_id))
    entry = result.scalar_one_or_none()

    if not entry or entry.user_id != user.id:
        raise HTTPException(status_code=404, detail="History item not found")

    return HistoryResponse.model_validate(entry)


@router.delete("/{history_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_history(
    history_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(select(History).where(History.id == history_id))
    entry = result.scalar_one_or_none()

    if not entry or (entry.user_id != user.id and not user.is_super_admin):
        raise HTTPException(status_code=404, detail="History item not found")

    await db.delete(entry)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
