"""
Pydantic request/response schemas for the API.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    loaded: bool
    rows: int
    source: str
    last_updated_at: Optional[str] = None
    last_error: Optional[str] = None


class ReloadResponse(BaseModel):
    status: str
    rows: int
    last_updated_at: Optional[str] = None


class OptionsResponse(BaseModel):
    options: dict[str, list[str]]
    date_range: str


class GlobalStatsResponse(BaseModel):
    pending_receivables: float
    pending_payables: float
    cash_balance: float


class ReportResponse(BaseModel):
    """Generic wrapper for any JSON report."""
    data: dict[str, Any]


class LoginRequest(BaseModel):
    username: str
    password: str


class UserModel(BaseModel):
    id: str
    username: str
    name: str
    role: str
    active: bool
    email: str = ""


class LoginResponse(BaseModel):
    user: UserModel
