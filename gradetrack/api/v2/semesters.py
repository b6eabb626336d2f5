"""学期API - 学期列表与学期成绩总览。"""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gradetrack.db import get_db
from gradetrack.models import StatusTag
from gradetrack.schemas.grading import GradeResult
from gradetrack.services.grading import is_passing, status_style_class
from gradetrack.services.gradebook import GradebookService

router = APIRouter()
gradebook = GradebookService()


# === Schemas ===

class SemesterCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class SemesterResponse(BaseModel):
    id: int
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class SemesterListResponse(BaseModel):
    semesters: List[SemesterResponse]
    total: int


class SubjectSummary(BaseModel):
    id: int
    name: str
    min_passing_grade: float

    class Config:
        from_attributes = True


class SubjectListResponse(BaseModel):
    subjects: List[SubjectSummary]
    total: int


class SubjectGradeSummary(SubjectSummary):
    result: GradeResult
    style: StatusTag
    is_passing: bool


class SemesterOverviewResponse(BaseModel):
    semester_id: int
    name: str
    subjects: List[SubjectGradeSummary]


def _clean(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="学期名称不能为空")
    return cleaned


# === API 端点 ===

@router.get("/", response_model=SemesterListResponse)
async def list_semesters(db: Session = Depends(get_db)):
    """获取学期列表，最新的在前。"""
    semesters = gradebook.list_semesters(db)
    return {"semesters": semesters, "total": len(semesters)}


@router.post("/", response_model=SemesterResponse, status_code=status.HTTP_201_CREATED)
async def create_semester(data: SemesterCreate, db: Session = Depends(get_db)):
    """新建学期。"""
    return gradebook.create_semester(db, _clean(data.name))


@router.get("/{semester_id}", response_model=SemesterResponse)
async def get_semester(semester_id: int, db: Session = Depends(get_db)):
    try:
        return gradebook.get_semester(db, semester_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="学期不存在") from exc


@router.patch("/{semester_id}", response_model=SemesterResponse)
async def rename_semester(semester_id: int, data: SemesterCreate, db: Session = Depends(get_db)):
    """重命名学期。"""
    try:
        return gradebook.rename_semester(db, semester_id, _clean(data.name))
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="学期不存在") from exc


@router.delete("/{semester_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_semester(semester_id: int, db: Session = Depends(get_db)):
    """删除学期及其下所有科目、类别、活动。"""
    try:
        gradebook.delete_semester(db, semester_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="学期不存在") from exc


@router.get("/{semester_id}/subjects", response_model=SubjectListResponse)
async def list_semester_subjects(semester_id: int, db: Session = Depends(get_db)):
    try:
        subjects = gradebook.list_subjects(db, semester_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="学期不存在") from exc
    return {"subjects": subjects, "total": len(subjects)}


@router.get("/{semester_id}/overview", response_model=SemesterOverviewResponse)
async def semester_overview(semester_id: int, db: Session = Depends(get_db)):
    """学期下每个科目的当前成绩。"""
    try:
        semester = gradebook.get_semester(db, semester_id)
        rows = gradebook.semester_overview(db, semester_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="学期不存在") from exc

    subjects = [
        SubjectGradeSummary(
            id=subject.id,
            name=subject.name,
            min_passing_grade=subject.min_passing_grade,
            result=result,
            style=status_style_class(result.letter),
            is_passing=is_passing(result, subject.min_passing_grade),
        )
        for subject, result in rows
    ]
    return {"semester_id": semester.id, "name": semester.name, "subjects": subjects}
