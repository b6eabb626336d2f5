"""API v2 路由包入口。"""

from fastapi import APIRouter

from gradetrack.api.v2 import activities, categories, drafts, grades, semesters, subjects

router = APIRouter(prefix="/api/v2")

# 注册子路由
router.include_router(semesters.router, prefix="/semesters", tags=["学期"])
router.include_router(subjects.router, prefix="/subjects", tags=["科目"])
router.include_router(categories.router, prefix="/categories", tags=["评分类别"])
router.include_router(activities.router, prefix="/activities", tags=["活动"])
router.include_router(grades.router, prefix="/grades", tags=["成绩"])
router.include_router(drafts.router, prefix="/drafts", tags=["草稿"])
