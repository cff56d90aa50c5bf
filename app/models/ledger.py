"""
app/models/ledger.py

Purpose: Durable ledger records

- Income and expense rows (append-only)
- Partner link (one per phone, upserted)
- User profile row
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SharingType(str, Enum):
    """How an expense is attributed. Values are what the sheet stores."""

    INDIVIDUAL = "individual"
    SHARED = "compartido"

    @classmethod
    def from_cell(cls, value: Optional[str]) -> "SharingType":
        """Rows written by hand may say 'shared' or leave the column empty."""
        normalized = (value or "").strip().lower()
        if normalized in ("compartido", "shared"):
            return cls.SHARED
        return cls.INDIVIDUAL


class IncomeRecord(BaseModel):
    timestamp: datetime
    phone: str
    amount: int = Field(..., ge=0)
    description: str


class ExpenseRecord(BaseModel):
    timestamp: datetime
    phone: str
    amount: int = Field(..., ge=0)
    description: str = "Sin descripción"
    category: Optional[str] = None
    sharing_type: SharingType = SharingType.INDIVIDUAL
    share_percentage: int = Field(default=100, ge=0, le=100)

    @property
    def is_shared(self) -> bool:
        return self.sharing_type == SharingType.SHARED

    @property
    def owed_share(self) -> float:
        """Part of the amount that falls on each party."""
        return self.amount * self.share_percentage / 100


class PartnerLink(BaseModel):
    phone: str
    partner_name: str
    partner_phone: str
    configured_at: Optional[datetime] = None

    @field_validator("partner_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class UserProfile(BaseModel):
    phone: str
    name: str = ""
    salary: Optional[int] = None
    partner_phone: Optional[str] = None
    created_at: Optional[datetime] = None
