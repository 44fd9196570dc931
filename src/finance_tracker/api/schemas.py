from pydantic import BaseModel, Field

from finance_tracker.models import CategorizationResult, ReceiptExtraction, TransactionRecord


class CategorizeRequest(BaseModel):
    description: str | None = None
    merchant_name: str | None = None
    amount: float | str | None = None


class LearnRequest(BaseModel):
    description: str | None = None
    merchant_name: str | None = None
    category_id: int


class ReceiptTextRequest(BaseModel):
    text: str = ""


class ReceiptScanRequest(BaseModel):
    image_path: str = Field(min_length=1)


class ReceiptResponse(BaseModel):
    extraction: ReceiptExtraction
    categorization: CategorizationResult | None = None


class PatternsRequest(BaseModel):
    transactions: list[TransactionRecord] = Field(default_factory=list)
