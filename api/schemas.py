from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ScopeFiltersModel(BaseModel):
    year: Optional[int] = None
    selected_regions: List[str] = Field(default_factory=list)
    selected_countries: List[str] = Field(default_factory=list)


class DatasetWriteRequest(BaseModel):
    data: Dict[str, Any]
    password: Optional[str] = None


class CredentialRequest(BaseModel):
    password: Optional[str] = None
