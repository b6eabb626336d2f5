"""FastAPI 依赖注入工具。"""

from fastapi import Depends
from sqlalchemy.orm import Session

from gradetrack.db import get_db
from gradetrack.services.drafts import DraftStore, SqlDraftStore


def get_draft_store(db: Session = Depends(get_db)) -> DraftStore:
    """FastAPI 依赖，返回草稿存储；测试中可替换为内存实现。"""

    return SqlDraftStore(db)
