"""成绩计算引擎。

纯函数集合：把活动原始得分换算为百分比、字母等级、类别贡献分，
以及科目总成绩与评估完成度。不做 I/O，不修改输入，相同输入得到相同输出。

两种类别计算模式：

- ``dynamic``：按已完成活动的平均百分比折算类别权重，
  只要有一个活动完成，该类别在完成度里就算"已评估"。
- ``fixed``：类别权重按 ``total_activities`` 均分成若干份，
  每个已完成活动贡献自己那一份，完成度按比例累计。
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_CEILING, Decimal, localcontext
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from gradetrack.models.enums import CalculationMode, Letter, StatusTag
from gradetrack.schemas.grading import (
    ActivityRecord,
    CategoryGrade,
    CategoryRecord,
    GradeResult,
    LetterResult,
    RecordId,
)
from gradetrack.services.validation import (
    WEIGHT_TOTAL,
    parse_calculation_mode,
)

logger = logging.getLogger(__name__)

UNGRADED = GradeResult(grade=0, letter=Letter.NA, status="Ungraded", percent_complete=0)

# 自上而下匹配，第一个满足 ``>=`` 的档位生效
_LETTER_LADDER = (
    (91, Letter.A, "Excellent"),
    (81, Letter.B, "Very good"),
    (71, Letter.C, "Passed"),
    (61, Letter.D, "Passed with warning"),
)
_FAILED = LetterResult(letter=Letter.F, status="Failed")

_STYLE_BY_LETTER = {
    Letter.A: StatusTag.SUCCESS,
    Letter.B: StatusTag.SUCCESS,
    Letter.C: StatusTag.SUCCESS,
    Letter.D: StatusTag.WARNING,
    Letter.F: StatusTag.DANGER,
}


def round_half_up(value: float, places: int = 0) -> float:
    """四舍五入（而不是 Python 默认的银行家舍入）。

    恰好在中点时向正无穷取整，与前端 ``Math.round`` 一致：
    ``2.5 -> 3``，``-2.5 -> -2``。非有限值原样返回。
    """

    if not math.isfinite(value):
        return value
    number = Decimal(str(value))
    quantum = Decimal(1).scaleb(-places)
    # 默认 28 位精度装不下大数，按数量级放宽
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        return float(number.quantize(quantum, rounding=ROUND_HALF_CEILING))


def percentage_of(obtained_score: Optional[float], max_score: Optional[float]) -> float:
    """得分占满分的百分比，不截断。

    任一值缺失或为 0 时返回 0，避免除零。
    """

    if not obtained_score or not max_score:
        return 0.0
    return (obtained_score / max_score) * 100


def letter_grade(percentage: float) -> LetterResult:
    for threshold, letter, status in _LETTER_LADDER:
        if percentage >= threshold:
            return LetterResult(letter=letter, status=status)
    return _FAILED


def status_style_class(letter: object) -> StatusTag:
    """字母等级 -> 展示样式；未知值（包括 ``N/A``）返回 neutral。"""

    try:
        return _STYLE_BY_LETTER.get(Letter(letter), StatusTag.NEUTRAL)
    except ValueError:
        return StatusTag.NEUTRAL


def completed_activities(activities: Sequence[ActivityRecord]) -> List[ActivityRecord]:
    return [activity for activity in activities if not activity.is_pending]


def _activity_percentage(activity: ActivityRecord) -> float:
    return percentage_of(activity.obtained_score, activity.max_score)


def _dynamic_contribution(category: CategoryRecord, completed: List[ActivityRecord]) -> float:
    average = sum(_activity_percentage(a) for a in completed) / len(completed)
    return (average / 100) * category.percentage


def _fixed_contribution(category: CategoryRecord, completed: List[ActivityRecord]) -> float:
    # 活动总数缺失时不计分，由 check_subject 报告问题
    if category.total_activities <= 0:
        return 0.0
    activity_weight = category.percentage / category.total_activities
    return sum((_activity_percentage(a) / 100) * activity_weight for a in completed)


def _dynamic_evaluated(category: CategoryRecord, completed_count: int) -> float:
    return category.percentage if completed_count > 0 else 0.0


def _fixed_evaluated(category: CategoryRecord, completed_count: int) -> float:
    if category.total_activities <= 0:
        return 0.0
    return (completed_count / category.total_activities) * category.percentage


# 每种模式必须同时登记两个策略，新增模式漏登记会在 import 时失败
_CONTRIBUTION: Dict[CalculationMode, Callable[[CategoryRecord, List[ActivityRecord]], float]] = {
    CalculationMode.DYNAMIC: _dynamic_contribution,
    CalculationMode.FIXED: _fixed_contribution,
}
_EVALUATED: Dict[CalculationMode, Callable[[CategoryRecord, int], float]] = {
    CalculationMode.DYNAMIC: _dynamic_evaluated,
    CalculationMode.FIXED: _fixed_evaluated,
}
if not set(_CONTRIBUTION) == set(_EVALUATED) == set(CalculationMode):
    raise RuntimeError("every calculation mode needs a contribution and an evaluated strategy")


def category_contribution(
    category: CategoryRecord, activities: Sequence[ActivityRecord]
) -> float:
    """类别已经拿到的权重分（满分为 ``category.percentage``）。

    待评分活动不参与计算；没有已完成活动时返回 0。
    """

    mode = parse_calculation_mode(category.calculation_mode, category.id)
    completed = completed_activities(activities or ())
    if not completed:
        return 0.0
    return _CONTRIBUTION[mode](category, completed)


def category_evaluated_weight(
    category: CategoryRecord, activities: Sequence[ActivityRecord]
) -> float:
    """类别计入"已评估"的权重。dynamic 为全有或全无，fixed 按比例。"""

    mode = parse_calculation_mode(category.calculation_mode, category.id)
    completed_count = len(completed_activities(activities or ()))
    return _EVALUATED[mode](category, completed_count)


def subject_grade(
    categories: Sequence[CategoryRecord],
    activities_by_category: Mapping[RecordId, Sequence[ActivityRecord]],
) -> GradeResult:
    """科目总成绩。

    ``grade`` 保留两位小数，字母等级由保留后的成绩得出，
    ``percent_complete`` 取整。没有类别时返回 ``N/A`` 哨兵结果。
    """

    if not categories:
        return UNGRADED

    total_contribution = 0.0
    percentage_evaluated = 0.0
    for category in categories:
        activities = activities_by_category.get(category.id) or ()
        total_contribution += category_contribution(category, activities)
        percentage_evaluated += category_evaluated_weight(category, activities)

    grade = round_half_up(total_contribution, 2)
    letter = letter_grade(grade)
    logger.debug(
        "subject grade computed: categories=%d grade=%s evaluated=%s",
        len(categories),
        grade,
        percentage_evaluated,
    )
    return GradeResult(
        grade=grade,
        letter=letter.letter,
        status=letter.status,
        percent_complete=int(round_half_up(percentage_evaluated)),
    )


def category_breakdown(
    categories: Sequence[CategoryRecord],
    activities_by_category: Mapping[RecordId, Sequence[ActivityRecord]],
) -> List[CategoryGrade]:
    breakdown: List[CategoryGrade] = []
    for category in categories:
        activities = activities_by_category.get(category.id) or ()
        completed = completed_activities(activities)
        average = None
        if completed:
            average = round_half_up(
                sum(_activity_percentage(a) for a in completed) / len(completed), 2
            )
        breakdown.append(
            CategoryGrade(
                category_id=category.id,
                name=category.name,
                percentage=category.percentage,
                calculation_mode=parse_calculation_mode(category.calculation_mode, category.id),
                contribution=round_half_up(category_contribution(category, activities), 2),
                evaluated_weight=round_half_up(category_evaluated_weight(category, activities), 2),
                completed_count=len(completed),
                pending_count=len(activities) - len(completed),
                average_percentage=average,
            )
        )
    return breakdown


def is_passing(result: GradeResult, min_passing_grade: float) -> bool:
    """仅用于展示：成绩是否达到科目及格线。"""

    if result.letter is Letter.NA:
        return False
    return result.grade >= min_passing_grade


def remaining_weight(
    categories: Sequence[CategoryRecord], exclude_id: Optional[RecordId] = None
) -> float:
    """还能分配给新类别（或正在编辑的类别）的权重。"""

    used = sum(c.percentage for c in categories if exclude_id is None or c.id != exclude_id)
    return round_half_up(WEIGHT_TOTAL - used, 2)
