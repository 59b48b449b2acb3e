# storefront/api/deps.py
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from storefront.domain.errors import InvalidCredentials
from storefront.domain.schemas import Caller
from storefront.services.lock_service import LockService
from storefront.services.payment_client import PaymentClient
from storefront.utils.security import TokenService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


@lru_cache
def get_token_service() -> TokenService:
    return TokenService()


@lru_cache
def get_payment_client() -> PaymentClient:
    return PaymentClient()


@lru_cache
def get_lock_service() -> LockService:
    return LockService()


def get_current_caller(
    token: str = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Caller:
    try:
        return tokens.resolve_caller(token)
    except InvalidCredentials as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Access denied: admin privilege required")
    return caller
