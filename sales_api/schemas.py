from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FilterSelectionModel(BaseModel):
    category: str = "all"
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    preview_limit: int = 5


class RecordsPayload(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)


class ContactMessageModel(BaseModel):
    name: str = ""
    email: str = ""
    message: str = ""
