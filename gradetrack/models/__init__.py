"""SQLAlchemy 模型包入口。"""

from gradetrack.models.category import Activity, Category
from gradetrack.models.draft import Draft
from gradetrack.models.enums import CalculationMode, Letter, StatusTag
from gradetrack.models.semester import Semester, Subject

__all__ = [
    "Activity",
    "CalculationMode",
    "Category",
    "Draft",
    "Letter",
    "Semester",
    "StatusTag",
    "Subject",
]
