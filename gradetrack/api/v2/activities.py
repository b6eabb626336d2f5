"""活动API - 单个评分项的录入与修改。"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gradetrack.db import get_db
from gradetrack.services.gradebook import GradebookService

router = APIRouter()
gradebook = GradebookService()


# === Schemas ===

class ActivityCreate(BaseModel):
    category_id: int
    name: str = Field(min_length=1, max_length=255)
    max_score: float = 100
    obtained_score: Optional[float] = None
    is_pending: bool = False


class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    max_score: Optional[float] = None
    obtained_score: Optional[float] = None
    is_pending: Optional[bool] = None


class ActivityResponse(BaseModel):
    id: int
    category_id: int
    name: str
    max_score: float
    obtained_score: Optional[float]
    is_pending: bool
    created_at: datetime

    class Config:
        from_attributes = True


def _clean(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    cleaned = name.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="活动名称不能为空")
    return cleaned


# === API 端点 ===

@router.post("/", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(data: ActivityCreate, db: Session = Depends(get_db)):
    """新建活动；待评分的活动不保存得分。"""
    try:
        return gradebook.create_activity(
            db,
            data.category_id,
            _clean(data.name),
            max_score=data.max_score,
            obtained_score=data.obtained_score,
            is_pending=data.is_pending,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="评分类别不存在") from exc


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(activity_id: int, db: Session = Depends(get_db)):
    try:
        return gradebook.get_activity(db, activity_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="活动不存在") from exc


@router.patch("/{activity_id}", response_model=ActivityResponse)
async def update_activity(activity_id: int, data: ActivityUpdate, db: Session = Depends(get_db)):
    """修改活动。请求体里显式给出 ``obtained_score: null`` 会清空得分。"""
    changes = data.model_dump(exclude_unset=True)
    kwargs = {}
    if "obtained_score" in changes:
        kwargs["obtained_score"] = changes["obtained_score"]
    try:
        return gradebook.update_activity(
            db,
            activity_id,
            name=_clean(data.name),
            max_score=data.max_score,
            is_pending=data.is_pending,
            **kwargs,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="活动不存在") from exc


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(activity_id: int, db: Session = Depends(get_db)):
    try:
        gradebook.delete_activity(db, activity_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="活动不存在") from exc
