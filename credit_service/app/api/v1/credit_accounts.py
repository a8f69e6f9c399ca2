"""크레딧 계정 내부 API 라우터."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...services.credit_account_service import (
    CreditAccountService,
    CreditAccountSummary,
    get_credit_account_service,
)
from ..schemas.common import PaginatedResponse
from ..schemas.credit_accounts import (
    AddAmountRequest,
    CreditAccountResponse,
    CreditExpirationResponse,
    CreditHistoryResponse,
)


router = APIRouter(prefix="/credit-accounts", tags=["credit_accounts"])


def _to_response(summary: CreditAccountSummary) -> CreditAccountResponse:
    expiration = summary.expiration
    return CreditAccountResponse(
        customer_id=summary.account.customer_id,
        amount=summary.account.amount,
        expiration=(
            CreditExpirationResponse(
                expiration_start=expiration.expiration_start,
                expiration_delay=expiration.expiration_delay,
                expires_at=expiration.expires_at(),
            )
            if expiration is not None
            else None
        ),
    )


@router.get("/{customer_id}")
def get_credit_account(
    customer_id: str,
    service: Annotated[CreditAccountService, Depends(get_credit_account_service)],
) -> CreditAccountResponse:
    """고객 크레딧 잔액 및 만료 정보 조회."""
    summary = service.get_summary(customer_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Credit account not found",
        )
    return _to_response(summary)


@router.post("/{customer_id}/amount")
def add_amount(
    customer_id: str,
    req: AddAmountRequest,
    service: Annotated[CreditAccountService, Depends(get_credit_account_service)],
) -> CreditAccountResponse:
    """잔액 지급/차감. 규칙 엔진(CREDIT_ACCOUNT_ADD_AMOUNT)을 거친다."""
    service.add_amount(
        customer_id=customer_id,
        amount=req.amount,
        order_id=req.order_id,
        who_did_it=req.who_did_it,
    )
    summary = service.get_summary(customer_id)
    assert summary is not None  # 방금 반영했으므로 계정이 존재한다.
    return _to_response(summary)


@router.get("/{customer_id}/history")
def get_credit_history(
    customer_id: str,
    service: Annotated[CreditAccountService, Depends(get_credit_account_service)],
    page: int = Query(default=1, ge=1, description="1 부터 시작하는 페이지 번호"),
    page_size: int = Query(default=20, ge=1, le=100),
) -> PaginatedResponse[CreditHistoryResponse]:
    """잔액 변경 이력 조회 (최신순)."""
    items, total = service.get_history(customer_id, page, page_size)
    return PaginatedResponse(
        items=[
            CreditHistoryResponse(
                id=entry.id,
                amount=entry.amount,
                order_id=entry.order_id,
                who_did_it=entry.who_did_it,
                created_at=entry.created_at,
            )
            for entry in items
        ],
        total=total,
        page=page,
        page_size=page_size,
    )
