from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func
from companygrow.db import Base

PAYMENT_STATUSES = ("pending", "succeeded", "failed", "refunded")
PAYMENT_TYPES = ("course_purchase", "token_purchase", "payout")

# transiciones válidas de estado
PAYMENT_TRANSITIONS = {
    "pending": {"succeeded", "failed"},
    "succeeded": {"refunded"},
    "failed": set(),
    "refunded": set(),
}


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    stripe_payment_intent_id = Column(String(255), unique=True, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default="pending")
    payment_type = Column(String(50), nullable=True)
    item_id = Column(Integer, nullable=True)
    item_type = Column(String(50), nullable=True)
    stripe_customer_id = Column(String(255), nullable=True)
    payment_method = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
