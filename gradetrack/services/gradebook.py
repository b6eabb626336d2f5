"""学期、科目、类别、活动的增删改查，以及从数据库装配成绩计算输入。

校验规则与前端表单一致：

- 各层级名称去掉首尾空白后不能为空
- 类别权重必须大于 0，且同一科目下所有类别权重之和不能超过 100
  （编辑时不计入该类别原来的权重）
- fixed 模式必须指定大于 0 的活动总数
- 活动满分必须大于 0；已完成的活动得分必须在 ``[0, max_score]`` 内，
  待评分活动不保存得分

找不到记录时抛 ``LookupError``，名称为空抛 ``ValueError``，
成绩相关的校验失败抛 ``GradingError`` 的子类。
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from gradetrack.config import get_settings
from gradetrack.models import Activity, CalculationMode, Category, Semester, Subject
from gradetrack.schemas.grading import (
    ActivityRecord,
    CategoryRecord,
    GradeResult,
    SubjectReport,
)
from gradetrack.services import grading
from gradetrack.services.validation import (
    WEIGHT_TOLERANCE,
    GradingError,
    InvalidCategoryWeights,
    check_subject,
    validate_activity,
    validate_category,
)

logger = logging.getLogger(__name__)

_UNSET = object()


def to_category_record(category: Category) -> CategoryRecord:
    return CategoryRecord(
        id=category.id,
        name=category.name,
        percentage=category.percentage,
        calculation_mode=category.calculation_mode.value,
        total_activities=category.total_activities,
    )


def to_activity_record(activity: Activity) -> ActivityRecord:
    return ActivityRecord(
        id=activity.id,
        name=activity.name,
        max_score=activity.max_score,
        obtained_score=activity.obtained_score,
        is_pending=activity.is_pending,
    )


class GradebookService:
    """封装成绩簿各层级记录的查询、创建、修改与删除逻辑。"""

    # === 通用 ===

    def _get(self, db: Session, model, record_id: int, label: str):
        record = db.get(model, record_id)
        if record is None:
            raise LookupError(f"{label} not found")
        return record

    def _delete(self, db: Session, record, label: str) -> None:
        record_id = record.id
        db.delete(record)
        db.commit()
        logger.info("deleted %s id=%s", label, record_id)

    @staticmethod
    def _require_name(name: str, label: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError(f"{label} name must not be blank")
        return cleaned

    # === 学期 ===

    def list_semesters(self, db: Session) -> List[Semester]:
        return db.query(Semester).order_by(Semester.created_at.desc(), Semester.id.desc()).all()

    def get_semester(self, db: Session, semester_id: int) -> Semester:
        return self._get(db, Semester, semester_id, "Semester")

    def create_semester(self, db: Session, name: str) -> Semester:
        name = self._require_name(name, "Semester")
        semester = Semester(name=name)
        db.add(semester)
        db.commit()
        db.refresh(semester)
        logger.info("created semester id=%s", semester.id)
        return semester

    def rename_semester(self, db: Session, semester_id: int, name: str) -> Semester:
        semester = self.get_semester(db, semester_id)
        name = self._require_name(name, "Semester")
        semester.name = name
        db.commit()
        db.refresh(semester)
        logger.info("renamed semester id=%s", semester.id)
        return semester

    def delete_semester(self, db: Session, semester_id: int) -> None:
        self._delete(db, self.get_semester(db, semester_id), "semester")

    # === 科目 ===

    def list_subjects(self, db: Session, semester_id: int) -> List[Subject]:
        self.get_semester(db, semester_id)
        return (
            db.query(Subject)
            .filter(Subject.semester_id == semester_id)
            .order_by(Subject.created_at.desc(), Subject.id.desc())
            .all()
        )

    def get_subject(self, db: Session, subject_id: int) -> Subject:
        return self._get(db, Subject, subject_id, "Subject")

    def create_subject(
        self,
        db: Session,
        semester_id: int,
        name: str,
        min_passing_grade: Optional[float] = None,
    ) -> Subject:
        self.get_semester(db, semester_id)
        name = self._require_name(name, "Subject")
        if min_passing_grade is None:
            min_passing_grade = get_settings().default_min_passing_grade
        subject = Subject(semester_id=semester_id, name=name, min_passing_grade=min_passing_grade)
        db.add(subject)
        db.commit()
        db.refresh(subject)
        logger.info("created subject id=%s semester_id=%s", subject.id, semester_id)
        return subject

    def update_subject(
        self,
        db: Session,
        subject_id: int,
        name: Optional[str] = None,
        min_passing_grade: Optional[float] = None,
    ) -> Subject:
        subject = self.get_subject(db, subject_id)
        if name is not None:
            subject.name = self._require_name(name, "Subject")
        if min_passing_grade is not None:
            subject.min_passing_grade = min_passing_grade
        db.commit()
        db.refresh(subject)
        logger.info("updated subject id=%s", subject.id)
        return subject

    def delete_subject(self, db: Session, subject_id: int) -> None:
        self._delete(db, self.get_subject(db, subject_id), "subject")

    # === 类别 ===

    def list_categories(self, db: Session, subject_id: int) -> List[Category]:
        self.get_subject(db, subject_id)
        return (
            db.query(Category)
            .filter(Category.subject_id == subject_id)
            .order_by(Category.created_at.asc(), Category.id.asc())
            .all()
        )

    def get_category(self, db: Session, category_id: int) -> Category:
        return self._get(db, Category, category_id, "Category")

    def _check_category(
        self,
        db: Session,
        subject_id: int,
        candidate: CategoryRecord,
        exclude_id: Optional[int] = None,
    ) -> CalculationMode:
        siblings = [to_category_record(c) for c in self.list_categories(db, subject_id)]
        try:
            mode = validate_category(candidate)
            available = grading.remaining_weight(siblings, exclude_id=exclude_id)
            if candidate.percentage > available + WEIGHT_TOLERANCE:
                new_total = grading.round_half_up(100 - available + candidate.percentage, 2)
                raise InvalidCategoryWeights(
                    f"total would exceed 100% ({new_total:g}%). "
                    f"Maximum available: {available:g}%",
                    exclude_id,
                )
        except GradingError as exc:
            logger.warning("rejected category for subject_id=%s: %s", subject_id, exc.message)
            raise
        return mode

    def create_category(
        self,
        db: Session,
        subject_id: int,
        name: str,
        percentage: float,
        calculation_mode: str = CalculationMode.DYNAMIC.value,
        total_activities: int = 0,
    ) -> Category:
        name = self._require_name(name, "Category")
        candidate = CategoryRecord(
            id=0,
            name=name,
            percentage=percentage,
            calculation_mode=calculation_mode,
            total_activities=total_activities,
        )
        mode = self._check_category(db, subject_id, candidate)
        category = Category(
            subject_id=subject_id,
            name=name,
            percentage=percentage,
            calculation_mode=mode,
            total_activities=total_activities,
        )
        db.add(category)
        db.commit()
        db.refresh(category)
        logger.info("created category id=%s subject_id=%s", category.id, subject_id)
        return category

    def update_category(
        self,
        db: Session,
        category_id: int,
        name: Optional[str] = None,
        percentage: Optional[float] = None,
        calculation_mode: Optional[str] = None,
        total_activities: Optional[int] = None,
    ) -> Category:
        category = self.get_category(db, category_id)
        if name is not None:
            name = self._require_name(name, "Category")
        candidate = CategoryRecord(
            id=category.id,
            name=name if name is not None else category.name,
            percentage=percentage if percentage is not None else category.percentage,
            calculation_mode=(
                calculation_mode
                if calculation_mode is not None
                else category.calculation_mode.value
            ),
            total_activities=(
                total_activities if total_activities is not None else category.total_activities
            ),
        )
        mode = self._check_category(db, category.subject_id, candidate, exclude_id=category.id)
        category.name = candidate.name
        category.percentage = candidate.percentage
        category.calculation_mode = mode
        category.total_activities = candidate.total_activities
        db.commit()
        db.refresh(category)
        logger.info("updated category id=%s", category.id)
        return category

    def delete_category(self, db: Session, category_id: int) -> None:
        self._delete(db, self.get_category(db, category_id), "category")

    # === 活动 ===

    def list_activities(self, db: Session, category_id: int) -> List[Activity]:
        self.get_category(db, category_id)
        return (
            db.query(Activity)
            .filter(Activity.category_id == category_id)
            .order_by(Activity.created_at.asc(), Activity.id.asc())
            .all()
        )

    def get_activity(self, db: Session, activity_id: int) -> Activity:
        return self._get(db, Activity, activity_id, "Activity")

    def _check_activity(self, candidate: ActivityRecord) -> None:
        try:
            validate_activity(candidate)
        except GradingError as exc:
            logger.warning("rejected activity: %s", exc.message)
            raise

    def create_activity(
        self,
        db: Session,
        category_id: int,
        name: str,
        max_score: float = 100,
        obtained_score: Optional[float] = None,
        is_pending: bool = False,
    ) -> Activity:
        self.get_category(db, category_id)
        name = self._require_name(name, "Activity")
        candidate = ActivityRecord(
            name=name,
            max_score=max_score,
            obtained_score=None if is_pending else obtained_score,
            is_pending=is_pending,
        )
        self._check_activity(candidate)
        activity = Activity(
            category_id=category_id,
            name=name,
            max_score=candidate.max_score,
            obtained_score=candidate.obtained_score,
            is_pending=is_pending,
        )
        db.add(activity)
        db.commit()
        db.refresh(activity)
        logger.info("created activity id=%s category_id=%s", activity.id, category_id)
        return activity

    def update_activity(
        self,
        db: Session,
        activity_id: int,
        name: Optional[str] = None,
        max_score: Optional[float] = None,
        obtained_score=_UNSET,
        is_pending: Optional[bool] = None,
    ) -> Activity:
        """``obtained_score`` 未传时保留原值，显式传 ``None`` 表示清空。"""

        activity = self.get_activity(db, activity_id)
        if name is not None:
            name = self._require_name(name, "Activity")
        pending = is_pending if is_pending is not None else activity.is_pending
        obtained = activity.obtained_score if obtained_score is _UNSET else obtained_score
        candidate = ActivityRecord(
            id=activity.id,
            name=name if name is not None else activity.name,
            max_score=max_score if max_score is not None else activity.max_score,
            obtained_score=None if pending else obtained,
            is_pending=pending,
        )
        self._check_activity(candidate)
        activity.name = candidate.name
        activity.max_score = candidate.max_score
        activity.obtained_score = candidate.obtained_score
        activity.is_pending = candidate.is_pending
        db.commit()
        db.refresh(activity)
        logger.info("updated activity id=%s", activity.id)
        return activity

    def delete_activity(self, db: Session, activity_id: int) -> None:
        self._delete(db, self.get_activity(db, activity_id), "activity")

    # === 成绩 ===

    def load_grading_inputs(
        self, db: Session, subject_id: int
    ) -> Tuple[List[CategoryRecord], Dict[int, List[ActivityRecord]]]:
        """读取科目的类别与活动，按类别分组成引擎需要的输入。"""

        categories = self.list_categories(db, subject_id)
        records = [to_category_record(c) for c in categories]
        activities_by_category: Dict[int, List[ActivityRecord]] = defaultdict(list)
        if categories:
            rows: Sequence[Activity] = (
                db.query(Activity)
                .filter(Activity.category_id.in_([c.id for c in categories]))
                .order_by(Activity.created_at.asc(), Activity.id.asc())
                .all()
            )
            for row in rows:
                activities_by_category[row.category_id].append(to_activity_record(row))
        return records, dict(activities_by_category)

    def subject_grade(self, db: Session, subject_id: int) -> GradeResult:
        categories, activities_by_category = self.load_grading_inputs(db, subject_id)
        return grading.subject_grade(categories, activities_by_category)

    def subject_report(self, db: Session, subject_id: int) -> SubjectReport:
        subject = self.get_subject(db, subject_id)
        categories, activities_by_category = self.load_grading_inputs(db, subject_id)
        result = grading.subject_grade(categories, activities_by_category)
        return SubjectReport(
            subject_id=subject.id,
            name=subject.name,
            min_passing_grade=subject.min_passing_grade,
            result=result,
            is_passing=grading.is_passing(result, subject.min_passing_grade),
            style=grading.status_style_class(result.letter),
            remaining_weight=grading.remaining_weight(categories),
            categories=grading.category_breakdown(categories, activities_by_category),
            issues=[issue.to_issue() for issue in check_subject(categories, activities_by_category)],
        )

    def semester_overview(
        self, db: Session, semester_id: int
    ) -> List[Tuple[Subject, GradeResult]]:
        """学期下每个科目的成绩；没有类别的科目得到 ``N/A``。"""

        return [
            (subject, self.subject_grade(db, subject.id))
            for subject in self.list_subjects(db, semester_id)
        ]
