# app/api/deps.py
from typing import Any, Dict

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.errors import AuthenticationFailed
from app.services.token_service import TokenService
from app.utils.logging import get_logger

logger = get_logger(__name__)

bearer = HTTPBearer(auto_error=False)


def get_token_service() -> TokenService:
    return TokenService()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Bearer token -> {user_id, role}."""
    if credentials is None:
        raise HTTPException(status_code=401, detail={"message": "Access denied. No token provided."})

    try:
        return tokens.verify(credentials.credentials)
    except AuthenticationFailed as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


def require_roles(*roles: str):
    def checker(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if user["role"] not in roles:
            logger.warning(f"User {user['user_id']} with role '{user['role']}' denied, needs one of {roles}")
            raise HTTPException(
                status_code=403,
                detail={
                    "message": f"Access denied. Role '{user['role']}' is not allowed here.",
                    "required_roles": list(roles),
                },
            )
        return user

    return checker
