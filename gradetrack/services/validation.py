"""成绩输入校验与类型化错误。

引擎本身对脏数据只做"安静"的降级（除零返回 0、分数不截断），
这里把这些情况显式化为可由调用方处理的错误类型：

- ``InvalidScore``：得分缺失或不在 ``[0, max_score]`` 内
- ``InvalidCalculationMode``：计算模式不在 ``{dynamic, fixed}`` 内
- ``InvalidCategoryWeights``：类别权重之和不为 100（或超过 100）

``check_subject`` 收集全部问题后返回列表，不抛异常，由上层决定阻止保存、
提示警告还是照常计算。
"""

from __future__ import annotations

import math
from typing import Iterable, List, Mapping, Optional, Sequence

from gradetrack.models.enums import CalculationMode
from gradetrack.schemas.grading import (
    ActivityRecord,
    CategoryRecord,
    GradingIssue,
    RecordId,
)

WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 1e-9


class GradingError(ValueError):
    """成绩相关错误基类。"""

    code = "grading_error"

    def __init__(self, message: str, target: Optional[RecordId] = None) -> None:
        super().__init__(message)
        self.message = message
        self.target = target

    def to_issue(self) -> GradingIssue:
        return GradingIssue(code=self.code, message=self.message, target=self.target)


class InvalidScore(GradingError):
    code = "invalid_score"


class InvalidCalculationMode(GradingError):
    code = "invalid_calculation_mode"


class InvalidCategoryWeights(GradingError):
    code = "invalid_category_weights"


def parse_calculation_mode(value: object, target: Optional[RecordId] = None) -> CalculationMode:
    """把字符串/枚举转换为 ``CalculationMode``，非法值抛 ``InvalidCalculationMode``。"""

    if isinstance(value, CalculationMode):
        return value
    if isinstance(value, str):
        try:
            return CalculationMode(value.strip().lower())
        except ValueError:
            pass
    raise InvalidCalculationMode(
        f"calculation mode must be one of dynamic/fixed, got {value!r}", target
    )


def validate_activity(activity: ActivityRecord) -> None:
    """校验单个活动，发现第一个问题即抛出 ``InvalidScore``。"""

    max_score = activity.max_score
    if max_score is None or not math.isfinite(max_score) or max_score <= 0:
        raise InvalidScore(f"max_score must be greater than 0, got {max_score!r}", activity.id)
    if activity.is_pending:
        return
    obtained = activity.obtained_score
    if obtained is None:
        raise InvalidScore("obtained_score is required for a completed activity", activity.id)
    if obtained < 0:
        raise InvalidScore(f"obtained_score cannot be negative, got {obtained!r}", activity.id)
    if obtained > max_score:
        raise InvalidScore(
            f"obtained_score {obtained!r} exceeds max_score {max_score!r}", activity.id
        )


def validate_category(category: CategoryRecord) -> CalculationMode:
    """校验单个类别并返回解析后的计算模式。"""

    mode = parse_calculation_mode(category.calculation_mode, category.id)
    if not (0 < category.percentage <= WEIGHT_TOTAL):
        raise InvalidCategoryWeights(
            f"category percentage must be in (0, 100], got {category.percentage!r}",
            category.id,
        )
    if mode is CalculationMode.FIXED and category.total_activities <= 0:
        raise InvalidCalculationMode(
            "fixed mode requires total_activities greater than 0", category.id
        )
    return mode


def total_weight(categories: Iterable[CategoryRecord]) -> float:
    return sum(category.percentage for category in categories)


def validate_category_weights(
    categories: Sequence[CategoryRecord], *, require_complete: bool = True
) -> None:
    """校验类别权重总和。

    ``require_complete=True`` 时要求恰好为 100（完整的评分方案）；
    否则只要求不超过 100（新增/编辑类别时的规则）。
    """

    total = total_weight(categories)
    if total > WEIGHT_TOTAL + WEIGHT_TOLERANCE:
        raise InvalidCategoryWeights(f"category percentages add up to {total:g}%, above 100%")
    if require_complete and abs(total - WEIGHT_TOTAL) > WEIGHT_TOLERANCE:
        raise InvalidCategoryWeights(f"category percentages add up to {total:g}%, expected 100%")


def check_subject(
    categories: Sequence[CategoryRecord],
    activities_by_category: Mapping[RecordId, Sequence[ActivityRecord]],
) -> List[GradingError]:
    """收集科目评分方案中的全部问题，不抛异常。"""

    issues: List[GradingError] = []
    if not categories:
        return issues

    try:
        validate_category_weights(categories, require_complete=True)
    except GradingError as exc:
        issues.append(exc)

    for category in categories:
        try:
            validate_category(category)
        except GradingError as exc:
            issues.append(exc)
        for activity in activities_by_category.get(category.id, ()):
            try:
                validate_activity(activity)
            except GradingError as exc:
                issues.append(exc)
    return issues
