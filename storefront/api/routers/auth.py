from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_token_service
from storefront.data.database import get_db
from storefront.domain.errors import InvalidCredentials, UsernameTaken
from storefront.domain.schemas import Credentials, TokenOut
from storefront.services.auth_service import AuthService
from storefront.utils.security import TokenService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=TokenOut, status_code=201)
def signup(
    payload: Credentials,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    svc = AuthService(db, tokens)
    try:
        return svc.signup(payload.username, payload.password)
    except UsernameTaken as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/login", response_model=TokenOut)
def login(
    payload: Credentials,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    svc = AuthService(db, tokens)
    try:
        return svc.login(payload.username, payload.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=401, detail=str(e))
