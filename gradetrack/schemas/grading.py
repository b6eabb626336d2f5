"""Data contracts consumed and produced by the grade engine.

The engine works on these immutable records only, never on ORM rows, so it
can be called from the API, from services or straight from tests with
in-memory data. Field names are snake_case and serialize as-is.
"""

from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from gradetrack.models.enums import CalculationMode, Letter, StatusTag

RecordId = Union[int, str]


class ActivityRecord(BaseModel):
    """A single gradable item. ``obtained_score`` is ignored while pending."""

    model_config = ConfigDict(frozen=True)

    id: Optional[RecordId] = None
    name: str = ""
    max_score: Optional[float] = None
    obtained_score: Optional[float] = None
    is_pending: bool = False


class CategoryRecord(BaseModel):
    """A weighted grading bucket.

    ``calculation_mode`` stays a plain string here so that an unknown mode
    reaches the engine and is reported as ``InvalidCalculationMode`` instead
    of a generic validation error.
    """

    model_config = ConfigDict(frozen=True)

    id: RecordId
    name: str = ""
    percentage: float
    calculation_mode: str = CalculationMode.DYNAMIC.value
    total_activities: int = 0


ActivitiesByCategory = Dict[RecordId, Sequence[ActivityRecord]]


class LetterResult(BaseModel):
    """Letter grade plus its human readable status."""

    model_config = ConfigDict(frozen=True)

    letter: Letter
    status: str


class GradeResult(BaseModel):
    """Aggregate grade of a subject."""

    model_config = ConfigDict(frozen=True)

    grade: float
    letter: Letter
    status: str
    percent_complete: int


class CategoryGrade(BaseModel):
    """Per-category view used by the subject report."""

    model_config = ConfigDict(frozen=True)

    category_id: RecordId
    name: str
    percentage: float
    calculation_mode: CalculationMode
    contribution: float
    evaluated_weight: float
    completed_count: int
    pending_count: int
    average_percentage: Optional[float] = None


class GradingIssue(BaseModel):
    """Serializable form of a ``GradingError``."""

    code: str
    message: str
    target: Optional[RecordId] = None


class SubjectReport(BaseModel):
    """Everything the subject page renders in one payload."""

    subject_id: int
    name: str
    min_passing_grade: float
    result: GradeResult
    is_passing: bool
    style: StatusTag
    remaining_weight: float
    categories: List[CategoryGrade] = Field(default_factory=list)
    issues: List[GradingIssue] = Field(default_factory=list)
