"""科目API - 科目信息、评分类别列表与科目成绩。"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gradetrack.api.v2.categories import CategoryResponse
from gradetrack.db import get_db
from gradetrack.schemas.grading import GradeResult, SubjectReport
from gradetrack.services.gradebook import GradebookService

router = APIRouter()
gradebook = GradebookService()


# === Schemas ===

class SubjectCreate(BaseModel):
    semester_id: int
    name: str = Field(min_length=1, max_length=255)
    min_passing_grade: Optional[float] = Field(default=None, ge=0, le=100)


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    min_passing_grade: Optional[float] = Field(default=None, ge=0, le=100)


class SubjectResponse(BaseModel):
    id: int
    semester_id: int
    name: str
    min_passing_grade: float
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryListResponse(BaseModel):
    categories: List[CategoryResponse]
    total: int
    total_percentage: float


def _clean(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    cleaned = name.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="科目名称不能为空")
    return cleaned


# === API 端点 ===

@router.post("/", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(data: SubjectCreate, db: Session = Depends(get_db)):
    """在学期下新建科目，未指定及格线时使用配置中的默认值。"""
    try:
        return gradebook.create_subject(
            db, data.semester_id, _clean(data.name), data.min_passing_grade
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="学期不存在") from exc


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(subject_id: int, db: Session = Depends(get_db)):
    try:
        return gradebook.get_subject(db, subject_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc


@router.patch("/{subject_id}", response_model=SubjectResponse)
async def update_subject(subject_id: int, data: SubjectUpdate, db: Session = Depends(get_db)):
    try:
        return gradebook.update_subject(
            db, subject_id, name=_clean(data.name), min_passing_grade=data.min_passing_grade
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(subject_id: int, db: Session = Depends(get_db)):
    try:
        gradebook.delete_subject(db, subject_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc


@router.get("/{subject_id}/categories", response_model=CategoryListResponse)
async def list_subject_categories(subject_id: int, db: Session = Depends(get_db)):
    """科目的评分方案，附带已分配的权重总和。"""
    try:
        categories = gradebook.list_categories(db, subject_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc
    return {
        "categories": categories,
        "total": len(categories),
        "total_percentage": sum(c.percentage for c in categories),
    }


@router.get("/{subject_id}/grade", response_model=GradeResult)
async def get_subject_grade(subject_id: int, db: Session = Depends(get_db)):
    """科目当前成绩。"""
    try:
        gradebook.get_subject(db, subject_id)
        return gradebook.subject_grade(db, subject_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc


@router.get("/{subject_id}/report", response_model=SubjectReport)
async def get_subject_report(subject_id: int, db: Session = Depends(get_db)):
    """科目成绩详情：总成绩、各类别贡献、是否及格、剩余可分配权重与配置问题。"""
    try:
        return gradebook.subject_report(db, subject_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="科目不存在") from exc
