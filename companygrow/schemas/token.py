from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class WalletOut(BaseModel):
    user_id: int
    balance: int
    lifetime_earned: int
    lifetime_spent: int
    last_updated: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class EarnIn(BaseModel):
    user_id: int
    amount: int = Field(gt=0)
    source: Optional[str] = Field(default="manual", max_length=50)
    description: Optional[str] = None


class SpendIn(BaseModel):
    amount: int = Field(gt=0)
    source: Optional[str] = Field(default="purchase", max_length=50)
    description: Optional[str] = None


class TransactionOut(BaseModel):
    id: int
    user_id: int
    transaction_type: str
    amount: int
    source: Optional[str] = None
    source_id: Optional[int] = None
    description: Optional[str] = None
    balance_after: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
