"""学期与科目模型定义。"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gradetrack.db import Base


class Semester(Base):
    """学期 - 科目的容器。"""

    __tablename__ = "semesters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    subjects: Mapped[List["Subject"]] = relationship(
        back_populates="semester",
        cascade="all, delete-orphan",
        order_by="Subject.id",
    )

    def __repr__(self) -> str:
        return f"<Semester(id={self.id}, name={self.name})>"


class Subject(Base):
    """科目 - 由若干加权评分类别组成。

    ``min_passing_grade`` 只用于展示是否及格，不参与成绩计算。
    """

    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    semester_id: Mapped[int] = mapped_column(
        ForeignKey("semesters.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    min_passing_grade: Mapped[float] = mapped_column(Float, default=61, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    semester: Mapped[Semester] = relationship(back_populates="subjects")
    categories: Mapped[List["Category"]] = relationship(
        back_populates="subject",
        cascade="all, delete-orphan",
        order_by="Category.id",
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name={self.name})>"
