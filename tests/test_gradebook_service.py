import pytest

from gradetrack.models import Activity, CalculationMode, Category, Letter
from gradetrack.services.gradebook import GradebookService
from gradetrack.services.validation import (
    InvalidCalculationMode,
    InvalidCategoryWeights,
    InvalidScore,
)

gradebook = GradebookService()


def _subject(session, name: str = "Calculus"):
    semester = gradebook.create_semester(session, "2026-1")
    return gradebook.create_subject(session, semester.id, name)


def test_create_subject_uses_default_min_passing_grade(session) -> None:
    subject = _subject(session)
    assert subject.min_passing_grade == 61


def test_missing_records_raise_lookup_error(session) -> None:
    with pytest.raises(LookupError):
        gradebook.get_semester(session, 999)
    with pytest.raises(LookupError):
        gradebook.create_subject(session, 999, "Orphan")
    with pytest.raises(LookupError):
        gradebook.create_category(session, 999, "Exams", 50)
    with pytest.raises(LookupError):
        gradebook.create_activity(session, 999, "Quiz", 10, 5)


def test_names_must_not_be_blank(session) -> None:
    with pytest.raises(ValueError):
        gradebook.create_semester(session, "  ")
    assert gradebook.list_semesters(session) == []

    subject = _subject(session)
    with pytest.raises(ValueError):
        gradebook.create_subject(session, subject.semester_id, "")
    with pytest.raises(ValueError):
        gradebook.rename_semester(session, subject.semester_id, "\t")
    with pytest.raises(ValueError):
        gradebook.update_subject(session, subject.id, name=" ")

    category = gradebook.create_category(session, subject.id, "  Exams ", 50)
    assert category.name == "Exams"
    with pytest.raises(ValueError):
        gradebook.create_category(session, subject.id, " ", 10)
    with pytest.raises(ValueError):
        gradebook.update_category(session, category.id, name="")

    activity = gradebook.create_activity(session, category.id, "Quiz", 10, 5)
    with pytest.raises(ValueError):
        gradebook.create_activity(session, category.id, " ", 10, 5)
    with pytest.raises(ValueError):
        gradebook.update_activity(session, activity.id, name="  ")
    assert gradebook.get_activity(session, activity.id).name == "Quiz"


def test_category_weights_cannot_exceed_100(session) -> None:
    subject = _subject(session)
    gradebook.create_category(session, subject.id, "Midterms", 60)
    gradebook.create_category(session, subject.id, "Homework", 30)

    with pytest.raises(InvalidCategoryWeights) as excinfo:
        gradebook.create_category(session, subject.id, "Final", 20)
    assert "Maximum available: 10%" in excinfo.value.message

    final = gradebook.create_category(session, subject.id, "Final", 10)
    assert final.percentage == 10


def test_update_category_excludes_its_own_weight(session) -> None:
    subject = _subject(session)
    midterms = gradebook.create_category(session, subject.id, "Midterms", 60)
    gradebook.create_category(session, subject.id, "Homework", 40)

    updated = gradebook.update_category(session, midterms.id, percentage=55)
    assert updated.percentage == 55

    with pytest.raises(InvalidCategoryWeights):
        gradebook.update_category(session, midterms.id, percentage=61)
    session.refresh(midterms)
    assert midterms.percentage == 55


def test_fixed_category_requires_total_activities(session) -> None:
    subject = _subject(session)
    with pytest.raises(InvalidCalculationMode):
        gradebook.create_category(session, subject.id, "Labs", 20, "fixed", 0)
    with pytest.raises(InvalidCalculationMode):
        gradebook.create_category(session, subject.id, "Labs", 20, "sometimes", 0)

    labs = gradebook.create_category(session, subject.id, "Labs", 20, "fixed", 4)
    assert labs.calculation_mode is CalculationMode.FIXED
    assert session.query(Category).count() == 1


def test_activity_score_rules(session) -> None:
    subject = _subject(session)
    category = gradebook.create_category(session, subject.id, "Quizzes", 100)

    with pytest.raises(InvalidScore):
        gradebook.create_activity(session, category.id, "Quiz 1", 10, 11)
    with pytest.raises(InvalidScore):
        gradebook.create_activity(session, category.id, "Quiz 1", 10, None)
    with pytest.raises(InvalidScore):
        gradebook.create_activity(session, category.id, "Quiz 1", 0, 0)

    pending = gradebook.create_activity(
        session, category.id, "Quiz 2", 10, obtained_score=7, is_pending=True
    )
    assert pending.obtained_score is None
    assert session.query(Activity).count() == 1


def test_update_activity_completes_pending_and_clears_score(session) -> None:
    subject = _subject(session)
    category = gradebook.create_category(session, subject.id, "Quizzes", 100)
    activity = gradebook.create_activity(session, category.id, "Quiz", 20, is_pending=True)

    done = gradebook.update_activity(session, activity.id, obtained_score=15, is_pending=False)
    assert done.obtained_score == 15
    assert not done.is_pending

    renamed = gradebook.update_activity(session, activity.id, name="Quiz A")
    assert renamed.obtained_score == 15

    with pytest.raises(InvalidScore):
        gradebook.update_activity(session, activity.id, max_score=10)

    back_to_pending = gradebook.update_activity(session, activity.id, is_pending=True)
    assert back_to_pending.obtained_score is None


def test_subject_grade_from_database(session) -> None:
    subject = _subject(session)
    midterms = gradebook.create_category(session, subject.id, "Midterms", 60)
    homework = gradebook.create_category(session, subject.id, "Homework", 40, "fixed", 2)
    gradebook.create_activity(session, midterms.id, "Midterm 1", 100, 80)
    gradebook.create_activity(session, homework.id, "HW 1", 10, 10)
    gradebook.create_activity(session, homework.id, "HW 2", 10, is_pending=True)

    result = gradebook.subject_grade(session, subject.id)

    assert result.grade == 68
    assert result.letter is Letter.D
    assert result.percent_complete == 80


def test_subject_report(session) -> None:
    subject = _subject(session)
    midterms = gradebook.create_category(session, subject.id, "Midterms", 60)
    gradebook.create_activity(session, midterms.id, "Midterm 1", 100, 95)

    report = gradebook.subject_report(session, subject.id)

    assert report.result.grade == 57
    assert report.result.letter is Letter.F
    assert report.is_passing is False
    assert report.remaining_weight == 40
    assert [row.name for row in report.categories] == ["Midterms"]
    assert [issue.code for issue in report.issues] == ["invalid_category_weights"]


def test_semester_overview_marks_empty_subjects_ungraded(session) -> None:
    semester = gradebook.create_semester(session, "2026-2")
    empty = gradebook.create_subject(session, semester.id, "Empty")
    graded = gradebook.create_subject(session, semester.id, "Graded", min_passing_grade=70)
    category = gradebook.create_category(session, graded.id, "All", 100)
    gradebook.create_activity(session, category.id, "Exam", 50, 50)

    overview = dict((subject.id, result) for subject, result in gradebook.semester_overview(session, semester.id))

    assert overview[empty.id].letter is Letter.NA
    assert overview[empty.id].status == "Ungraded"
    assert overview[graded.id].grade == 100
    assert overview[graded.id].letter is Letter.A


def test_delete_semester_cascades(session) -> None:
    subject = _subject(session)
    category = gradebook.create_category(session, subject.id, "All", 100)
    gradebook.create_activity(session, category.id, "Exam", 100, 70)

    gradebook.delete_semester(session, subject.semester_id)

    assert session.query(Category).count() == 0
    assert session.query(Activity).count() == 0
