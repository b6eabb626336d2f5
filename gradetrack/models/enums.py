"""成绩相关枚举定义 - 计算模式、字母等级、展示样式。"""

import enum


class CalculationMode(str, enum.Enum):
    """评分类别的计算模式。"""
    DYNAMIC = "dynamic"  # 动态：按已完成活动的平均分折算
    FIXED = "fixed"      # 固定：按预设活动数均分权重


class Letter(str, enum.Enum):
    """字母等级。

    ``NA`` 是没有任何评分类别时的哨兵值，前端按原样匹配。
    """
    A = "A"  # >= 91
    B = "B"  # >= 81
    C = "C"  # >= 71
    D = "D"  # >= 61
    F = "F"
    NA = "N/A"


class StatusTag(str, enum.Enum):
    """字母等级对应的展示样式。"""
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    NEUTRAL = "neutral"
