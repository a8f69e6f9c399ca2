from fastapi import APIRouter

from .checkout import router as checkout_router
from .credit_accounts import router as credit_accounts_router

api_router = APIRouter()
# prefix 는 각 router 파일 내부에서 정의되어 있음
api_router.include_router(credit_accounts_router)
api_router.include_router(checkout_router)
