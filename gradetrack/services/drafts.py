"""表单草稿与界面状态存储。

前端在切换标签页时会把未提交的表单和界面状态（排序、展开的面板等）
暂存起来。这里把它抽象成可注入的键值存储：

- 表单草稿键：``form_{form_type}_{key}``
- 界面状态键：``ui_state_{key}``（``form_type`` 固定为 ``ui_state``）

值必须可以 JSON 序列化。
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Protocol, Tuple

from sqlalchemy.orm import Session

from gradetrack.models import Draft

logger = logging.getLogger(__name__)

UI_STATE = "ui_state"


def draft_key(form_type: str, key: str) -> str:
    """复合键。"""

    if form_type == UI_STATE:
        return f"{UI_STATE}_{key}"
    return f"form_{form_type}_{key}"


class DraftStore(Protocol):
    def get(self, form_type: str, key: str, default: Any = None) -> Any: ...

    def save(self, form_type: str, key: str, data: Any) -> None: ...

    def clear(self, form_type: str, key: str) -> None: ...

    def has(self, form_type: str, key: str) -> bool: ...


class InMemoryDraftStore:
    """进程内实现，值以 JSON 文本保存，读写互不影响。

    与数据库实现一样按 ``(form_type, key)`` 区分记录。
    """

    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], str] = {}

    def get(self, form_type: str, key: str, default: Any = None) -> Any:
        raw = self._items.get((form_type, key))
        if raw is None:
            return default
        return json.loads(raw)

    def save(self, form_type: str, key: str, data: Any) -> None:
        if form_type == UI_STATE and data is None:
            self.clear(form_type, key)
            return
        self._items[(form_type, key)] = json.dumps(data)

    def clear(self, form_type: str, key: str) -> None:
        self._items.pop((form_type, key), None)

    def has(self, form_type: str, key: str) -> bool:
        return (form_type, key) in self._items


class SqlDraftStore:
    """基于 ``drafts`` 表的持久化实现。"""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _find(self, form_type: str, key: str) -> Draft | None:
        return self.db.get(Draft, (form_type, key))

    def get(self, form_type: str, key: str, default: Any = None) -> Any:
        draft = self._find(form_type, key)
        if draft is None:
            return default
        return draft.payload_json

    def save(self, form_type: str, key: str, data: Any) -> None:
        if form_type == UI_STATE and data is None:
            self.clear(form_type, key)
            return
        # 提前序列化一次，不可序列化的值在写库前就报错
        json.dumps(data)
        draft = self._find(form_type, key)
        if draft is None:
            draft = Draft(form_type=form_type, key=key, payload_json=data)
            self.db.add(draft)
        else:
            draft.payload_json = data
        self.db.commit()
        logger.debug("saved draft %s", draft_key(form_type, key))

    def clear(self, form_type: str, key: str) -> None:
        draft = self._find(form_type, key)
        if draft is None:
            return
        self.db.delete(draft)
        self.db.commit()

    def has(self, form_type: str, key: str) -> bool:
        return self._find(form_type, key) is not None
