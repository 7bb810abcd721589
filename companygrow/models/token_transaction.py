from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from companygrow.db import Base


class TokenTransaction(Base):
    __tablename__ = "token_transactions"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    transaction_type = Column(String(20), nullable=False)   # earned | spent
    amount = Column(Integer, nullable=False)
    source = Column(String(50), nullable=True)              # badge | purchase | manual | reward ...
    source_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    balance_after = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
