"""评分类别API。

权重超出 100% 或模式配置不合法时由全局异常处理返回 422。
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gradetrack.db import get_db
from gradetrack.models import CalculationMode
from gradetrack.services.gradebook import GradebookService

router = APIRouter()
gradebook = GradebookService()


# === Schemas ===

class CategoryCreate(BaseModel):
    subject_id: int
    name: str = Field(min_length=1, max_length=255)
    percentage: float
    calculation_mode: str = CalculationMode.DYNAMIC.value
    total_activities: int = 0


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    percentage: Optional[float] = None
    calculation_mode: Optional[str] = None
    total_activities: Optional[int] = None


class CategoryResponse(BaseModel):
    id: int
    subject_id: int
    name: str
    percentage: float
    calculation_mode: CalculationMode
    total_activities: int
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityItem(BaseModel):
    id: int
    category_id: int
    name: str
    max_score: float
    obtained_score: Optional[float]
    is_pending: bool

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    activities: List[ActivityItem]
    total: int


def _clean(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    cleaned = name.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="类别名称不能为空")
    return cleaned


# === API 端点 ===

@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, db: Session = Depends(get_db)):
    """在科目下新建评分类别。"""
    try:
        return gradebook.create_category(
            db,
            data.subject_id,
            _clean(data.name),
            data.percentage,
            data.calculation_mode,
            data.total_activities,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: Session = Depends(get_db)):
    try:
        return gradebook.get_category(db, category_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="评分类别不存在") from exc


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: int, data: CategoryUpdate, db: Session = Depends(get_db)):
    """编辑评分类别，校验时不计入该类别原来的权重。"""
    try:
        return gradebook.update_category(
            db,
            category_id,
            name=_clean(data.name),
            percentage=data.percentage,
            calculation_mode=data.calculation_mode,
            total_activities=data.total_activities,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="评分类别不存在") from exc


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, db: Session = Depends(get_db)):
    try:
        gradebook.delete_category(db, category_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="评分类别不存在") from exc


@router.get("/{category_id}/activities", response_model=ActivityListResponse)
async def list_category_activities(category_id: int, db: Session = Depends(get_db)):
    try:
        activities = gradebook.list_activities(db, category_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="评分类别不存在") from exc
    return {"activities": activities, "total": len(activities)}
