from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Category(BaseModel):
    id: int
    name: str
    keywords: list[str] = Field(default_factory=list)
    icon: str = "category"
    color: str = Field(default="#6366f1", pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_default: bool = False
    is_active: bool = True
    sort_order: int = 0


class CategorizationResult(BaseModel):
    category_id: Optional[int] = None
    category_name: str
    confidence: float  # 0.0 to 1.0
    icon: str
    color: str
    source: str  # "classifier", "fallback"


class ReceiptItem(BaseModel):
    name: str
    price: str


class ReceiptExtraction(BaseModel):
    raw_text: str = ""
    merchant_name: Optional[str] = None
    amount: Optional[str] = None  # decimal string, two places
    date: Optional[str] = None  # YYYY-MM-DD
    description: Optional[str] = None
    items: list[ReceiptItem] = Field(default_factory=list)
    confidence: float = 0.0
    error: Optional[str] = None


class TransactionRecord(BaseModel):
    amount: float
    description: str = ""
    merchant_name: Optional[str] = None
    transaction_date: datetime
    category_name: Optional[str] = None
