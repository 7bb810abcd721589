import logging
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, require_staff, ensure_self_or_staff
from companygrow.domain.tokens.service import earn_tokens
from companygrow.models.course_enrollment import CourseEnrollment
from companygrow.models.payment import Payment, PAYMENT_TRANSITIONS
from companygrow.models.user import User
from companygrow.routers.course_enrollments import enroll_user
from companygrow.schemas.common import ok
from companygrow.schemas.payment import PaymentCreate, PaymentStatusIn, PayoutIn, PaymentOut
from companygrow.services.notifications import notify_payment
from companygrow.services.settings import get_setting_int

log = logging.getLogger("payments")

router = APIRouter(prefix="/payments", tags=["payments"])

DEFAULT_TOKENS_PER_UNIT = 10


def _get_or_404(db: Session, payment_id: int) -> Payment:
    p = db.get(Payment, payment_id)
    if p is None:
        raise ApiError(404, "Payment not found", "PAYMENT_NOT_FOUND")
    return p


def _ensure_unique_intent(db: Session, intent_id: str | None) -> None:
    if intent_id and db.execute(
        select(Payment.id).where(Payment.stripe_payment_intent_id == intent_id)
    ).first():
        raise ApiError(409, "Payment intent already recorded", "DUPLICATE_PAYMENT_INTENT")


def fulfil(db: Session, p: Payment) -> dict:
    """Efectos de un pago exitoso: inscripción o crédito de tokens."""
    result: dict = {}
    if p.payment_type == "course_purchase" and p.item_id is not None:
        already = db.execute(
            select(CourseEnrollment.id).where(
                CourseEnrollment.user_id == p.user_id, CourseEnrollment.course_id == p.item_id
            )
        ).scalar_one_or_none()
        if already:
            result["enrollment_id"] = already
        else:
            result["enrollment_id"] = enroll_user(db, p.user_id, p.item_id).id
    elif p.payment_type == "token_purchase":
        rate = get_setting_int(db, "TOKENS_PER_CURRENCY_UNIT", DEFAULT_TOKENS_PER_UNIT)
        tokens = int(Decimal(p.amount) * rate)
        if tokens > 0:
            earn_tokens(db, p.user_id, tokens, "purchase", p.id, f"token purchase #{p.id}")
        result["tokens_credited"] = tokens
    return result


@router.get("")
def list_payments(
    user_id: int | None = None,
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    q = select(Payment).order_by(Payment.created_at.desc(), Payment.id.desc())
    if me.is_staff:
        if user_id is not None:
            q = q.where(Payment.user_id == user_id)
    else:
        q = q.where(Payment.user_id == me.id)
    items, pagination = paginate(db, q, page)
    return ok([PaymentOut.model_validate(p) for p in items], pagination=pagination)


@router.post("/payout", status_code=201)
def create_payout(payload: PayoutIn, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    if db.get(User, payload.user_id) is None:
        raise not_found("User")
    p = Payment(
        user_id=payload.user_id,
        amount=payload.amount,
        currency=payload.currency.upper(),
        status="pending",
        payment_type="payout",
        payment_method=payload.payment_method,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return ok(PaymentOut.model_validate(p), message="Payout recorded")


@router.get("/{payment_id}")
def get_payment(payment_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    p = _get_or_404(db, payment_id)
    ensure_self_or_staff(me, p.user_id, "UNAUTHORIZED_VIEW")
    return ok(PaymentOut.model_validate(p))


@router.post("", status_code=201)
def create_payment(payload: PaymentCreate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    _ensure_unique_intent(db, payload.stripe_payment_intent_id)
    p = Payment(**payload.model_dump(), user_id=me.id, status="pending")
    db.add(p)
    db.commit()
    db.refresh(p)
    return ok(PaymentOut.model_validate(p), message="Payment recorded")


@router.put("/{payment_id}/status")
def update_status(payment_id: int, payload: PaymentStatusIn, db: Session = Depends(get_db),
                  _: User = Depends(require_staff)):
    p = _get_or_404(db, payment_id)
    if payload.status not in PAYMENT_TRANSITIONS.get(p.status, set()):
        raise ApiError(400, f"Cannot change payment status from {p.status} to {payload.status}",
                       "INVALID_STATUS_TRANSITION")
    p.status = payload.status
    db.commit()
    db.refresh(p)

    result: dict = {}
    if p.status == "succeeded":
        try:
            result = fulfil(db, p)
        except ApiError as e:
            log.warning("payment %s fulfilment skipped: %s", p.id, e.detail)
            result = {"fulfilment_error": e.code}
    if p.status in ("succeeded", "failed"):
        notify_payment(db, p.user_id, f"{p.amount} {p.currency}", p.status)
    db.refresh(p)
    return ok(PaymentOut.model_validate(p), message=f"Payment {p.status}", fulfilment=result)
