import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.models.user_token import UserToken
from companygrow.models.token_transaction import TokenTransaction
from companygrow.services.notifications import notify_token_transaction

log = logging.getLogger("tokens")


class InsufficientTokens(Exception):
    def __init__(self, balance: int, requested: int):
        super().__init__(f"balance {balance} < {requested}")
        self.balance = balance
        self.requested = requested


def get_or_create_wallet(db: Session, user_id: int) -> UserToken:
    wallet = db.execute(select(UserToken).where(UserToken.user_id == user_id)).scalar_one_or_none()
    if wallet is None:
        wallet = UserToken(user_id=user_id, balance=0, lifetime_earned=0, lifetime_spent=0)
        db.add(wallet)
        db.flush()
    return wallet


def earn_tokens(db: Session, user_id: int, amount: int, source: str | None = None,
                source_id: int | None = None, description: str | None = None) -> TokenTransaction:
    if amount <= 0:
        raise ValueError("amount must be positive")
    wallet = get_or_create_wallet(db, user_id)
    wallet.balance = int(wallet.balance or 0) + amount
    wallet.lifetime_earned = int(wallet.lifetime_earned or 0) + amount
    tx = TokenTransaction(
        user_id=user_id, transaction_type="earned", amount=amount, source=source,
        source_id=source_id, description=description, balance_after=wallet.balance,
    )
    db.add(tx)
    db.commit()
    db.refresh(tx)
    notify_token_transaction(db, user_id, amount, "earned", description or source or "activity")
    return tx


def spend_tokens(db: Session, user_id: int, amount: int, source: str | None = None,
                 source_id: int | None = None, description: str | None = None) -> TokenTransaction:
    if amount <= 0:
        raise ValueError("amount must be positive")
    wallet = get_or_create_wallet(db, user_id)
    if int(wallet.balance or 0) < amount:
        db.rollback()
        raise InsufficientTokens(int(wallet.balance or 0), amount)
    wallet.balance = int(wallet.balance) - amount
    wallet.lifetime_spent = int(wallet.lifetime_spent or 0) + amount
    tx = TokenTransaction(
        user_id=user_id, transaction_type="spent", amount=amount, source=source,
        source_id=source_id, description=description, balance_after=wallet.balance,
    )
    db.add(tx)
    db.commit()
    db.refresh(tx)
    notify_token_transaction(db, user_id, amount, "spent", description or source or "purchase")
    return tx
