"""Pydantic models returned by the HTTP layer."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PageResponse(BaseModel):
    """One page of a resource list plus the backend's total-count signal."""

    items: List[Any] = Field(default_factory=list)
    total_count: Optional[int] = None  # From X-Total-Count or an envelope "total"
    status_code: Optional[int] = None
    headers: Dict[str, str] = Field(default_factory=dict)
