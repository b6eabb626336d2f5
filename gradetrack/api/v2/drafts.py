"""表单草稿/界面状态API。"""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from gradetrack.dependencies import get_draft_store
from gradetrack.services.drafts import DraftStore, draft_key

router = APIRouter()


# === Schemas ===

class DraftPayload(BaseModel):
    data: Any = None


class DraftResponse(BaseModel):
    form_type: str
    key: str
    storage_key: str
    exists: bool
    data: Any = None


# === API 端点 ===

@router.get("/{form_type}/{key}", response_model=DraftResponse)
async def get_draft(form_type: str, key: str, store: DraftStore = Depends(get_draft_store)):
    """读取草稿；不存在时 ``exists`` 为 false、``data`` 为 null。"""
    return {
        "form_type": form_type,
        "key": key,
        "storage_key": draft_key(form_type, key),
        "exists": store.has(form_type, key),
        "data": store.get(form_type, key),
    }


@router.put("/{form_type}/{key}", response_model=DraftResponse)
async def save_draft(
    form_type: str,
    key: str,
    payload: DraftPayload,
    store: DraftStore = Depends(get_draft_store),
):
    store.save(form_type, key, payload.data)
    return {
        "form_type": form_type,
        "key": key,
        "storage_key": draft_key(form_type, key),
        "exists": store.has(form_type, key),
        "data": store.get(form_type, key),
    }


@router.delete("/{form_type}/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_draft(form_type: str, key: str, store: DraftStore = Depends(get_draft_store)):
    store.clear(form_type, key)
