"""成绩计算API - 直接调用成绩引擎，不读写数据库。"""

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from gradetrack.config import get_settings
from gradetrack.models import Letter, StatusTag
from gradetrack.schemas.grading import (
    ActivityRecord,
    CategoryGrade,
    CategoryRecord,
    GradeResult,
    GradingIssue,
)
from gradetrack.services import grading
from gradetrack.services.validation import check_subject

router = APIRouter()


# === Schemas ===

class GradeComputeRequest(BaseModel):
    categories: List[CategoryRecord] = Field(default_factory=list)
    # JSON 对象的键总是字符串，按 ``str(category.id)`` 匹配
    activities_by_category: Dict[str, List[ActivityRecord]] = Field(default_factory=dict)


class GradeComputeResponse(BaseModel):
    result: GradeResult
    style: StatusTag
    categories: List[CategoryGrade]
    issues: List[GradingIssue] = Field(default_factory=list)


class LetterResponse(BaseModel):
    percentage: float
    letter: Letter
    status: str
    style: StatusTag


# === API 端点 ===

@router.post("/compute", response_model=GradeComputeResponse)
async def compute_grade(
    data: GradeComputeRequest,
    strict: Optional[bool] = Query(None, description="存在配置问题时返回 422"),
):
    """对请求体中的评分方案计算成绩。

    默认宽松模式：脏数据照常计算，问题放在 ``issues`` 中返回。
    """
    activities_by_category = {
        category.id: data.activities_by_category.get(str(category.id), [])
        for category in data.categories
    }
    issues = [
        issue.to_issue() for issue in check_subject(data.categories, activities_by_category)
    ]
    if strict is None:
        strict = get_settings().strict_grading
    if strict and issues:
        raise HTTPException(
            status_code=422,
            detail=[issue.model_dump() for issue in issues],
        )

    result = grading.subject_grade(data.categories, activities_by_category)
    return {
        "result": result,
        "style": grading.status_style_class(result.letter),
        "categories": grading.category_breakdown(data.categories, activities_by_category),
        "issues": issues,
    }


@router.get("/letter", response_model=LetterResponse)
async def get_letter(percentage: float):
    """百分比对应的字母等级与展示样式。"""
    letter = grading.letter_grade(percentage)
    return {
        "percentage": percentage,
        "letter": letter.letter,
        "status": letter.status,
        "style": grading.status_style_class(letter.letter),
    }
