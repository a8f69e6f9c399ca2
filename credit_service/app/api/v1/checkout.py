"""체크아웃 훅 API.

상점 프론트가 결제 직전/쿠폰 적용 직전에 호출하며, 세션의 크레딧 사용 의사를
요청 본문으로 넘기고 갱신된 값을 응답으로 돌려받아 세션에 다시 저장한다.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from ...exceptions import CouponCreditConflictError
from ...models.order import Order
from ...services.credit_account_service import (
    CreditAccountService,
    get_credit_account_service,
)
from ..schemas.checkout import (
    BeforePaymentRequest,
    CheckoutCreditUsagePayload,
    CouponConsumeRequest,
)


router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/before-payment")
def before_payment(
    req: BeforePaymentRequest,
    service: Annotated[CreditAccountService, Depends(get_credit_account_service)],
) -> CheckoutCreditUsagePayload:
    order = Order(id=req.order_id, customer_id=req.customer_id, status=req.status)
    checkout = service.before_payment(order, req.checkout.to_domain())
    return CheckoutCreditUsagePayload.from_domain(checkout)


@router.post("/coupon")
def consume_coupon(
    req: CouponConsumeRequest,
    service: Annotated[CreditAccountService, Depends(get_credit_account_service)],
) -> CheckoutCreditUsagePayload:
    """크레딧 사용 중이면 409."""
    checkout = req.checkout.to_domain()
    try:
        service.consume_coupon(req.code, checkout, customer_id=req.customer_id)
    except CouponCreditConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "coupon_credit_conflict", "message": str(exc)},
        ) from exc
    return CheckoutCreditUsagePayload.from_domain(checkout)
