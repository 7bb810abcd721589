from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, require_staff, ensure_self_or_staff
from companygrow.domain.tokens.service import get_or_create_wallet, earn_tokens, spend_tokens, InsufficientTokens
from companygrow.models.token_transaction import TokenTransaction
from companygrow.models.user import User
from companygrow.models.user_token import UserToken
from companygrow.schemas.common import ok
from companygrow.schemas.token import WalletOut, EarnIn, SpendIn, TransactionOut

router = APIRouter(prefix="/userTokens", tags=["tokens"])
tx_router = APIRouter(prefix="/tokenTransactions", tags=["tokens"])


def _wallet(db: Session, user_id: int) -> WalletOut:
    wallet = get_or_create_wallet(db, user_id)
    db.commit()
    db.refresh(wallet)
    return WalletOut.model_validate(wallet)


@router.get("")
def list_wallets(db: Session = Depends(get_db), _: User = Depends(require_staff)):
    rows = db.execute(select(UserToken).order_by(UserToken.balance.desc(), UserToken.user_id)).scalars().all()
    return ok([WalletOut.model_validate(w) for w in rows])


@router.get("/me")
def my_wallet(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return ok(_wallet(db, me.id))


@router.get("/{user_id}")
def user_wallet(user_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self_or_staff(me, user_id, "UNAUTHORIZED_VIEW")
    if db.get(User, user_id) is None:
        raise not_found("User")
    return ok(_wallet(db, user_id))


@router.post("/earn", status_code=201)
def earn(payload: EarnIn, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    if db.get(User, payload.user_id) is None:
        raise not_found("User")
    tx = earn_tokens(db, payload.user_id, payload.amount, payload.source, None, payload.description)
    return ok({"transaction": TransactionOut.model_validate(tx), "wallet": _wallet(db, payload.user_id)},
              message=f"{payload.amount} tokens awarded")


@router.post("/spend", status_code=201)
def spend(payload: SpendIn, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    try:
        tx = spend_tokens(db, me.id, payload.amount, payload.source, None, payload.description)
    except InsufficientTokens as e:
        raise ApiError(400, f"Insufficient tokens: balance is {e.balance}", "INSUFFICIENT_TOKENS")
    return ok({"transaction": TransactionOut.model_validate(tx), "wallet": _wallet(db, me.id)},
              message=f"{payload.amount} tokens spent")


@tx_router.get("")
def list_transactions(
    user_id: int | None = None,
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    q = select(TokenTransaction).order_by(TokenTransaction.created_at.desc(), TokenTransaction.id.desc())
    if me.is_staff:
        if user_id is not None:
            q = q.where(TokenTransaction.user_id == user_id)
    else:
        q = q.where(TokenTransaction.user_id == me.id)
    items, pagination = paginate(db, q, page)
    return ok([TransactionOut.model_validate(t) for t in items], pagination=pagination)


@tx_router.get("/{transaction_id}")
def get_transaction(transaction_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    tx = db.get(TokenTransaction, transaction_id)
    if tx is None:
        raise ApiError(404, "Transaction not found", "TRANSACTION_NOT_FOUND")
    ensure_self_or_staff(me, tx.user_id, "UNAUTHORIZED_VIEW")
    return ok(TransactionOut.model_validate(tx))
