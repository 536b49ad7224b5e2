# app/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_token_service
from app.data.database import get_db
from app.domain.errors import ServiceError
from app.domain.schemas import AuthOut, UserLogin, UserRegister
from app.services.token_service import TokenService
from app.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
def register(
    payload: UserRegister,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    service = UserService(db, tokens)
    try:
        result = service.register(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"message": "User registered", **result}


@router.post("/login", response_model=AuthOut)
def login(
    payload: UserLogin,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    service = UserService(db, tokens)
    try:
        result = service.login(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"message": "Login successful", **result}
