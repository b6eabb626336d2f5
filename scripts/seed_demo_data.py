"""写入一个演示学期，便于本地查看各接口效果。"""
import sys
from pathlib import Path

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gradetrack import models  # noqa: F401,E402
from gradetrack.db import Base, engine, session_scope  # noqa: E402
from gradetrack.services.gradebook import GradebookService  # noqa: E402

DEMO_SEMESTER = "Demo semester"

# (类别名, 权重, 模式, 活动总数, [(活动名, 满分, 得分或 None 表示待评分)])
DEMO_SCHEME = [
    ("Midterms", 60, "dynamic", 0, [("Midterm 1", 100, 80), ("Midterm 2", 100, None)]),
    ("Homework", 40, "fixed", 2, [("Homework 1", 10, 10), ("Homework 2", 10, None)]),
]


def seed() -> None:
    print("=" * 50)
    print("写入演示数据")
    print("=" * 50)

    Base.metadata.create_all(bind=engine)
    gradebook = GradebookService()

    with session_scope() as db:
        semester = gradebook.create_semester(db, DEMO_SEMESTER)
        subject = gradebook.create_subject(db, semester.id, "Calculus")
        for name, percentage, mode, total, activities in DEMO_SCHEME:
            category = gradebook.create_category(db, subject.id, name, percentage, mode, total)
            for activity_name, max_score, obtained in activities:
                gradebook.create_activity(
                    db,
                    category.id,
                    activity_name,
                    max_score=max_score,
                    obtained_score=obtained,
                    is_pending=obtained is None,
                )
            print(f"  类别 {name}: {len(activities)} 个活动")

        result = gradebook.subject_grade(db, subject.id)
        print(f"\n学期 id={semester.id}，科目 id={subject.id}")
        print(f"  成绩 {result.grade} ({result.letter.value} - {result.status})")
        print(f"  已评估 {result.percent_complete}%")

    print("\n" + "=" * 50)
    print("完成！")
    print("=" * 50)


if __name__ == "__main__":
    seed()
