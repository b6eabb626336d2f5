"""评分类别与活动模型定义。"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gradetrack.db import Base
from gradetrack.models.enums import CalculationMode


class Category(Base):
    """科目下的加权评分类别（如"期中考试"）。"""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False)  # 占总成绩的百分比
    calculation_mode: Mapped[CalculationMode] = mapped_column(
        Enum(CalculationMode), default=CalculationMode.DYNAMIC, nullable=False
    )
    # 仅 fixed 模式有意义：预计的活动总数
    total_activities: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    subject = relationship("Subject", back_populates="categories")
    activities: Mapped[List["Activity"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Activity.id",
    )

    def __repr__(self) -> str:
        return (
            f"<Category(id={self.id}, name={self.name}, "
            f"percentage={self.percentage}, mode={self.calculation_mode.value})>"
        )


class Activity(Base):
    """类别下的单个评分活动（如"期中考试 1"）。"""

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    max_score: Mapped[float] = mapped_column(Float, default=100, nullable=False)
    obtained_score: Mapped[Optional[float]] = mapped_column(Float)  # 待评分时为 NULL
    is_pending: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    category: Mapped[Category] = relationship(back_populates="activities")

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, name={self.name}, pending={self.is_pending})>"
