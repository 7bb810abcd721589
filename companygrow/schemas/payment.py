from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal
from datetime import datetime

PaymentType = Literal["course_purchase", "token_purchase", "payout"]


class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    currency: str = "USD"
    payment_type: PaymentType
    item_id: Optional[int] = None
    item_type: Optional[str] = Field(default=None, max_length=50)
    payment_method: Optional[str] = Field(default=None, max_length=50)
    stripe_payment_intent_id: Optional[str] = Field(default=None, max_length=255)
    stripe_customer_id: Optional[str] = Field(default=None, max_length=255)

    @field_validator("currency")
    @classmethod
    def three_letters(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return v


class PaymentStatusIn(BaseModel):
    status: Literal["pending", "succeeded", "failed", "refunded"]


class PayoutIn(BaseModel):
    user_id: int
    amount: float = Field(gt=0)
    currency: str = "USD"
    payment_method: Optional[str] = Field(default=None, max_length=50)


class PaymentOut(BaseModel):
    id: int
    user_id: int
    stripe_payment_intent_id: Optional[str] = None
    amount: float
    currency: str
    status: str
    payment_type: Optional[str] = None
    item_id: Optional[int] = None
    item_type: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
