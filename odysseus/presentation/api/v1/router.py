from fastapi import APIRouter

from .accounts import accounts_router
from .auth import auth_router
from .health import health_router
from .transactions import transactions_router
from .users import users_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(auth_router, tags=["Auth"])
router.include_router(users_router, tags=["Users"])
router.include_router(accounts_router, tags=["Accounts"])
router.include_router(transactions_router, tags=["Transactions"])
