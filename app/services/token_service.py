# app/services/token_service.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from app.domain.errors import AuthenticationFailed
from app.utils.settings import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRES_DAYS


class TokenService:
    """Podpis / weryfikacja tokenu z claimami {user_id, role}."""

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        expires_days: int | None = None,
    ):
        self.secret = secret or JWT_SECRET
        self.algorithm = algorithm or JWT_ALGORITHM
        self.expires = timedelta(days=expires_days if expires_days is not None else JWT_EXPIRES_DAYS)

    def issue(self, user_id: int, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "role": role,
            "iat": now,
            "exp": now + self.expires,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationFailed("Invalid token")

        if not isinstance(payload.get("user_id"), int) or "role" not in payload:
            raise AuthenticationFailed("Invalid token")

        return {"user_id": payload["user_id"], "role": payload["role"]}
